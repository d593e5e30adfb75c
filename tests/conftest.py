"""Shared test fixtures and helpers."""

from __future__ import annotations

import os
import time

# Qt без дисплея; должно быть выставлено до создания QApplication
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PySide6.QtCore import QCoreApplication
from PySide6.QtWidgets import QApplication


@pytest.fixture(scope="session")
def qapp():
    app = QApplication.instance() or QApplication([])
    yield app


@pytest.fixture
def wait_until(qapp):
    """Return a helper that pumps the Qt event loop until predicate() is true."""

    def _wait(predicate, timeout: float = 3.0) -> bool:
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            QCoreApplication.processEvents()
            if predicate():
                return True
            time.sleep(0.005)
        QCoreApplication.processEvents()
        return bool(predicate())

    return _wait


@pytest.fixture
def pump(qapp):
    """Return a helper that pumps the Qt event loop for a fixed time."""

    def _pump(seconds: float) -> None:
        deadline = time.monotonic() + seconds
        while time.monotonic() < deadline:
            QCoreApplication.processEvents()
            time.sleep(0.005)

    return _pump
