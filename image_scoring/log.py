import logging
import sys

from image_scoring.constants import APP_NAME

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

CONSOLE_HANDLER_NAME = f"{APP_NAME}-console"

# HTTP client libraries that log every request line at INFO
QUIET_LOGGERS = ("httpx", "httpcore")


def _resolve_level(level: str) -> int:
    resolved = logging.getLevelName(level.upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(level: str = "INFO") -> None:
    """
    Install the service's stdout handler on the root logger.

    Calling it again replaces only the handler installed here; handlers added
    by the ASGI server or a test runner are left in place.
    """
    log_level = _resolve_level(level)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in root_logger.handlers[:]:
        if handler.get_name() == CONSOLE_HANDLER_NAME:
            root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.set_name(CONSOLE_HANDLER_NAME)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    root_logger.addHandler(console_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))


def get_logger(name: str | None = None) -> logging.Logger:
    """Logger for ``name``, or the application logger when omitted"""
    return logging.getLogger(name or APP_NAME)
