# File: utils/logger.py
import logging
import sys
from typing import Union

LOGGER_NAME = "FabrikUml"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'

editor_logger = logging.getLogger(LOGGER_NAME)


def resolve_level(level: Union[int, str]) -> int:
    """'debug' / 'INFO' / 10 -> числовой уровень; неизвестное имя -> INFO."""
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).strip().upper())
    return value if isinstance(value, int) else logging.INFO


def setup_editor_logger(level: Union[int, str] = logging.INFO) -> logging.Logger:
    editor_logger.setLevel(resolve_level(level))
    # stdout handler ставится один раз, повторный вызов меняет только уровень
    if not any(getattr(h, "_fabrik_console", False) for h in editor_logger.handlers):
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        console_handler._fabrik_console = True
        editor_logger.addHandler(console_handler)
    return editor_logger


def add_editor_log_handler(handler: logging.Handler):
    """Подключает handler окна (панель логов); один и тот же объект добавляется один раз."""
    if handler not in editor_logger.handlers:
        editor_logger.addHandler(handler)


def remove_editor_log_handler(handler: logging.Handler):
    if handler in editor_logger.handlers:
        editor_logger.removeHandler(handler)


def get_child_logger(suffix: str) -> logging.Logger:
    # FabrikUml.highlighter, FabrikUml.renderer, ...
    return editor_logger.getChild(suffix)


setup_editor_logger()
