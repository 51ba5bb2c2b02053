"""Tests for logging service configuration."""

import logging
from unittest.mock import patch

import pytest

from src.services.logging import get_log_level, setup_server_logging


class TestLogLevel:
    @pytest.mark.parametrize(
        "name,expected",
        [("debug", logging.DEBUG), ("WARNING", logging.WARNING), ("bogus", logging.INFO)],
    )
    def test_explicit_name(self, name, expected):
        assert get_log_level(name) == expected

    def test_env_fallback(self):
        with patch.dict("os.environ", {"LOG_LEVEL": "ERROR"}, clear=False):
            assert get_log_level() == logging.ERROR


class TestServerLogging:
    """Test server logging configuration."""

    def setup_method(self):
        """Save original handlers before each test."""
        self.root_logger = logging.getLogger()
        self.original_handlers = self.root_logger.handlers.copy()
        self.original_level = self.root_logger.level

    def teardown_method(self):
        """Restore original handlers after each test."""
        for handler in self.root_logger.handlers[:]:
            handler.close()
            self.root_logger.removeHandler(handler)
        for handler in self.original_handlers:
            self.root_logger.addHandler(handler)
        self.root_logger.setLevel(self.original_level)

    def test_creates_log_directory(self, tmp_path) -> None:
        log_file = tmp_path / "logs" / "server.log"
        assert not log_file.parent.exists()

        setup_server_logging(str(log_file), "INFO")

        assert log_file.parent.exists()

    def test_creates_stdout_and_file_handlers(self, tmp_path) -> None:
        setup_server_logging(str(tmp_path / "server.log"), "INFO")

        assert len(self.root_logger.handlers) == 2
        assert any(isinstance(h, logging.FileHandler) for h in self.root_logger.handlers)

    def test_level_applies_to_root_and_handlers(self, tmp_path) -> None:
        setup_server_logging(str(tmp_path / "server.log"), "WARNING")

        assert self.root_logger.level == logging.WARNING
        for handler in self.root_logger.handlers:
            assert handler.level == logging.WARNING

    def test_writes_formatted_messages_to_file(self, tmp_path) -> None:
        log_file = tmp_path / "server.log"
        setup_server_logging(str(log_file), "INFO")

        logging.getLogger("src.services.act_service").info("Generated act %s", "ACT-1")
        for handler in self.root_logger.handlers:
            handler.flush()

        contents = log_file.read_text()
        assert "Generated act ACT-1" in contents
        assert "src.services.act_service" in contents
        assert "INFO" in contents
        assert "[20" in contents

    def test_repeated_setup_does_not_duplicate_handlers(self, tmp_path) -> None:
        dummy_handler = logging.StreamHandler()
        self.root_logger.addHandler(dummy_handler)

        setup_server_logging(str(tmp_path / "server.log"), "INFO")
        setup_server_logging(str(tmp_path / "server.log"), "INFO")

        assert len(self.root_logger.handlers) == 2
        assert dummy_handler not in self.root_logger.handlers
