"""Root logger setup shared by the service and scripts."""

import logging

import pytest

from shared.logging_config import resolve_level, setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.mark.parametrize("value, expected", [
    ("debug", logging.DEBUG),
    (" Warning ", logging.WARNING),
    (logging.ERROR, logging.ERROR),
    ("loud", logging.INFO),
    (None, logging.INFO),
])
def test_resolve_level(value, expected):
    assert resolve_level(value) == expected


def test_repeated_setup_does_not_stack_handlers(restore_root_logger, tmp_path):
    log_file = tmp_path / "logs" / "dashboard.log"
    setup_logging("dashboard", level="debug", log_file=str(log_file))
    setup_logging("dashboard", level="debug", log_file=str(log_file))

    assert len(restore_root_logger.handlers) == 2
    assert restore_root_logger.level == logging.DEBUG
    assert logging.getLogger("urllib3").level == logging.WARNING

    for handler in restore_root_logger.handlers:
        handler.flush()
    assert "[DASHBOARD]" in log_file.read_text()
    for handler in restore_root_logger.handlers:
        handler.close()
