import logging

import pytest

from image_scoring.constants import APP_NAME
from image_scoring.log import CONSOLE_HANDLER_NAME, get_logger, setup_logging


@pytest.fixture
def restore_root_logger():
    root_logger = logging.getLogger()
    level = root_logger.level
    handlers = root_logger.handlers[:]
    httpx_level = logging.getLogger("httpx").level
    yield root_logger
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)
    logging.getLogger("httpx").setLevel(httpx_level)


def console_handlers(root_logger: logging.Logger) -> list[logging.Handler]:
    return [handler for handler in root_logger.handlers if handler.get_name() == CONSOLE_HANDLER_NAME]


class TestSetupLogging:
    """Test application logging setup"""

    def test_repeated_setup_keeps_one_console_handler(self, restore_root_logger):
        foreign = logging.NullHandler()
        restore_root_logger.addHandler(foreign)

        setup_logging("DEBUG")
        setup_logging("debug")

        assert len(console_handlers(restore_root_logger)) == 1
        assert foreign in restore_root_logger.handlers
        assert restore_root_logger.level == logging.DEBUG

    def test_http_client_logs_stay_quiet(self, restore_root_logger):
        setup_logging("DEBUG")
        assert logging.getLogger("httpx").level == logging.WARNING

        setup_logging("ERROR")
        assert logging.getLogger("httpx").level == logging.ERROR

    def test_unknown_level_falls_back_to_info(self, restore_root_logger):
        setup_logging("chatty")
        assert restore_root_logger.level == logging.INFO

    def test_get_logger_defaults_to_app_logger(self):
        assert get_logger().name == APP_NAME
        assert get_logger("image_scoring.core").name == "image_scoring.core"
