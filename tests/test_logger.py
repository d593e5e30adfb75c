"""Application logger setup."""

import logging

from utils.logger import (
    LOGGER_NAME,
    add_editor_log_handler,
    editor_logger,
    get_child_logger,
    remove_editor_log_handler,
    resolve_level,
    setup_editor_logger,
)


def test_resolve_level():
    assert resolve_level("debug") == logging.DEBUG
    assert resolve_level(" WARNING ") == logging.WARNING
    assert resolve_level(logging.ERROR) == logging.ERROR
    assert resolve_level("chatty") == logging.INFO


def test_setup_is_idempotent():
    before = len(editor_logger.handlers)
    setup_editor_logger("DEBUG")
    setup_editor_logger("INFO")
    assert len(editor_logger.handlers) == before
    assert editor_logger.level == logging.INFO


def test_extra_handler_added_once_and_removed():
    handler = logging.NullHandler()
    add_editor_log_handler(handler)
    add_editor_log_handler(handler)
    assert editor_logger.handlers.count(handler) == 1
    remove_editor_log_handler(handler)
    assert handler not in editor_logger.handlers


def test_child_logger_name():
    assert get_child_logger("renderer").name == f"{LOGGER_NAME}.renderer"
