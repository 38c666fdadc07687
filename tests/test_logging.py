"""Tests for logging setup."""

import logging

import pytest
from rich.logging import RichHandler

from vn_admin.core.logging import configure_logging


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Put the root logger back the way pytest configured it."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_console_only(self) -> None:
        """Test the default console handler and level."""
        configure_logging()
        root = logging.getLogger()
        assert root.level == logging.INFO
        assert any(isinstance(h, RichHandler) for h in root.handlers)
        assert not any(isinstance(h, logging.FileHandler) for h in root.handlers)

    def test_file_handler(self, tmp_path) -> None:
        """Test that records are also written to the log file."""
        log_file = tmp_path / "logs" / "crawler.log"
        configure_logging(log_file, debug=True)

        logging.getLogger("vn_admin.test").debug("hello from the crawler")
        for handler in logging.getLogger().handlers:
            handler.flush()

        assert logging.getLogger().level == logging.DEBUG
        assert "hello from the crawler" in log_file.read_text()

    def test_unwritable_file_falls_back(self, tmp_path) -> None:
        """Test that a bad log path keeps console logging."""
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("")
        configure_logging(blocker / "server.log")

        root = logging.getLogger()
        assert any(isinstance(h, RichHandler) for h in root.handlers)
        assert not any(isinstance(h, logging.FileHandler) for h in root.handlers)
