"""Log dock: handler, counters and filters."""

import logging

import pytest

from utils.logger import get_child_logger
from widgets.log_panel import LogPanel, subsystem_of


@pytest.fixture
def panel(qapp):
    p = LogPanel()
    log = logging.getLogger("FabrikUml.test_panel_probe")
    log.addHandler(p.get_handler())
    yield p
    log.removeHandler(p.get_handler())
    p.deleteLater()


def emit(panel, logger_name, level, msg):
    handler = panel.get_handler()
    record = logging.LogRecord(logger_name, level, __file__, 1, msg, None, None)
    handler.handle(record)


def test_subsystem_of():
    assert subsystem_of("FabrikUml.highlighter") == "highlighter"
    assert subsystem_of("FabrikUml.renderer.worker") == "renderer"
    assert subsystem_of("FabrikUml") == "app"
    assert subsystem_of("other") == "app"


def test_counters_and_level_filter(panel):
    emit(panel, "FabrikUml.renderer", logging.DEBUG, "dbg line")
    emit(panel, "FabrikUml.renderer", logging.WARNING, "warn line")
    emit(panel, "FabrikUml.highlighter", logging.ERROR, "err line")

    assert panel.counters() == (1, 1)
    lines = panel.visible_lines()
    assert not any("dbg line" in line for line in lines)
    assert any("warn line" in line for line in lines)

    panel.level_box.setCurrentIndex(0)
    assert any("dbg line" in line for line in panel.visible_lines())


def test_subsystem_filter(panel):
    emit(panel, "FabrikUml.renderer", logging.INFO, "render done")
    emit(panel, "FabrikUml.highlighter", logging.INFO, "spans applied")

    panel.subsystem_box.setCurrentText("highlighter")
    lines = panel.visible_lines()
    assert any("spans applied" in line for line in lines)
    assert not any("render done" in line for line in lines)


def test_clear(panel):
    emit(panel, "FabrikUml.documents", logging.ERROR, "cannot read")
    panel.clear_logs()
    assert panel.counters() == (0, 0)
    assert panel.visible_lines() == []


def test_child_logger_reaches_panel(panel, wait_until):
    get_child_logger("test_panel_probe").warning("probe warning")
    assert wait_until(lambda: panel.counters()[0] == 1)
