import logging
import os
from typing import Dict, Optional, Union

_LEVELS = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}

_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"

# Loggers handed out so far, by name; `set_level` re-levels all of them.
_loggers: Dict[str, logging.Logger] = {}
_level: Optional[int] = None


def _coerce_level(value: Union[str, int, None]) -> int:
    if isinstance(value, str):
        return _LEVELS.get(value.upper().strip(), logging.INFO)
    if isinstance(value, int):
        return value
    return logging.INFO


def _apply(logger: logging.Logger, level: int) -> None:
    logger.setLevel(level)
    for handler in logger.handlers:
        handler.setLevel(level)


def set_level(level: Union[str, int, None]) -> int:
    """Switch every package logger (existing and future) to `level`.

    Called with the configured LOG_LEVEL once settings are loaded, so a value
    from `.env` takes effect even though loggers are created at import time.
    """
    global _level
    _level = _coerce_level(level)
    for logger in _loggers.values():
        _apply(logger, _level)
    return _level


def get_logger(name: str) -> logging.Logger:
    """Return a stdout logger with the package's format.

    Level comes from `set_level` when it has been called, else LOG_LEVEL
    (default INFO). LOG_FILE, when set, adds an appending file handler.
    """
    if name in _loggers:
        return _loggers[name]

    logger = logging.getLogger(name)
    formatter = logging.Formatter(fmt=_FORMAT, datefmt=_DATEFMT)

    sh = logging.StreamHandler()
    sh.setFormatter(formatter)
    logger.addHandler(sh)

    log_file = os.environ.get("LOG_FILE")
    if log_file:
        try:
            fh = logging.FileHandler(log_file, encoding="utf-8")
            fh.setFormatter(formatter)
            logger.addHandler(fh)
        except OSError:
            logger.warning("LOG_FILE could not be opened; continuing without file logging")

    _apply(logger, _level if _level is not None else _coerce_level(os.environ.get("LOG_LEVEL", "INFO")))
    logger.propagate = False
    _loggers[name] = logger
    return logger
