from __future__ import annotations
# buyictbot/utils/logger.py
import logging
import os
import sys
from logging.handlers import RotatingFileHandler

LOGGER_NAME = "buyictbot"

# Third-party loggers kept at WARNING unless <NAME>_LOG_LEVEL says otherwise
_NOISY = ("playwright", "asyncio", "urllib3")


def _level(name: str, default: int = logging.INFO) -> int:
    return getattr(logging, (name or "").upper(), default)


def _formatter() -> logging.Formatter:
    return logging.Formatter(
        fmt=os.getenv("LOG_FORMAT", "[%(asctime)s] %(levelname)s %(name)s %(message)s"),
        datefmt=os.getenv("LOG_DATEFMT", "%Y-%m-%d %H:%M:%S"),
    )


def _file_handler(path: str) -> RotatingFileHandler:
    log_dir = os.path.dirname(path)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
    return RotatingFileHandler(
        path,
        maxBytes=int(os.getenv("LOG_FILE_MAX_BYTES", str(5 * 1024 * 1024))),  # 5 MB
        backupCount=int(os.getenv("LOG_FILE_BACKUP_COUNT", "3")),
        encoding="utf-8",
    )


def set_level(level_name: str) -> None:
    """Change the crawler's log level at runtime (e.g. from --verbose)."""
    level = _level(level_name)
    log = logging.getLogger(LOGGER_NAME)
    log.setLevel(level)
    for h in log.handlers:
        h.setLevel(level)


def _build_logger() -> logging.Logger:
    log = logging.getLogger(LOGGER_NAME)
    if log.handlers:
        return log

    level = _level(os.getenv("LOG_LEVEL", "INFO"))
    log.setLevel(level)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    log_file = os.getenv("LOG_FILE", "").strip()
    if log_file:
        handlers.append(_file_handler(log_file))

    for h in handlers:
        h.setLevel(level)
        h.setFormatter(_formatter())
        log.addHandler(h)

    for name in _NOISY:
        override = os.getenv(f"{name.upper()}_LOG_LEVEL", "WARNING")
        logging.getLogger(name).setLevel(_level(override, logging.WARNING))

    return log


logger = _build_logger()
