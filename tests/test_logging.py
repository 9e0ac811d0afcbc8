import logging

import pytest

from lofi_api.app.core.config import Settings
from lofi_api.app.core.logging_config import setup_logging


@pytest.fixture
def root(monkeypatch):
    root_logger = logging.getLogger()
    monkeypatch.setattr(root_logger, "handlers", [])
    monkeypatch.setattr(root_logger, "level", root_logger.level)
    yield root_logger
    for handler in root_logger.handlers:
        handler.close()


def test_log_file_comes_from_settings(root, tmp_path):
    logfile = tmp_path / "logs" / "lofi.log"

    setup_logging(Settings(log_level="debug", log_file=str(logfile)))
    logging.getLogger("lofi_api.test").info("hello from the test")

    assert root.level == logging.DEBUG
    assert [type(h) for h in root.handlers] == [logging.StreamHandler, logging.FileHandler]
    for handler in root.handlers:
        handler.flush()
    assert "[INFO] lofi_api.test: hello from the test" in logfile.read_text(encoding="utf-8")


def test_repeated_setup_does_not_duplicate_handlers(root):
    setup_logging(Settings(log_file=""))
    setup_logging(Settings(log_level="WARNING", log_file=""))

    assert len(root.handlers) == 1
    assert root.level == logging.WARNING


def test_foreign_handlers_do_not_block_setup(root):
    root.addHandler(logging.NullHandler())

    setup_logging(Settings(log_file=""))

    assert len(root.handlers) == 2
