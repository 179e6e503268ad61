"""
Unit tests for configuration, logging setup and store bootstrap.
"""

import logging

import pytest

from tutordesk.bootstrap import create_store
from tutordesk.utils.config import Config
from tutordesk.utils.logger import (
    SensitiveDataFilter,
    mask_email,
    mask_meeting_link,
    setup_logger,
)


@pytest.fixture
def env(monkeypatch, tmp_path):
    """Isolated environment pointing the data directory at tmp_path."""
    for name in ("TUTORDESK_SAVE_DEBOUNCE_MS", "LOG_LEVEL", "LOG_FILE"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("TUTORDESK_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.chdir(tmp_path)
    return monkeypatch


class TestConfig:
    """Test cases for Config."""

    def test_defaults(self, env, tmp_path):
        """Test values when only the data directory is set."""
        config = Config()

        assert config.data_file == tmp_path / "data" / "data.json"
        assert config.save_debounce_ms == 450
        assert config.save_debounce_seconds == pytest.approx(0.45)
        assert config.log_level == "INFO"
        assert config.log_level_value == logging.INFO
        assert config.log_file is None
        assert config.validate()

    def test_overrides(self, env):
        """Test environment overrides."""
        env.setenv("TUTORDESK_SAVE_DEBOUNCE_MS", "0")
        env.setenv("LOG_LEVEL", "debug")

        config = Config()

        assert config.save_debounce_seconds == 0
        assert config.log_level_value == logging.DEBUG

    def test_invalid_values_are_listed(self, env):
        """Test validate() reports every problem at once."""
        env.setenv("TUTORDESK_SAVE_DEBOUNCE_MS", "soon")
        env.setenv("LOG_LEVEL", "LOUD")

        with pytest.raises(ValueError) as exc_info:
            Config().validate()

        message = str(exc_info.value)
        assert "TUTORDESK_SAVE_DEBOUNCE_MS" in message
        assert "LOG_LEVEL" in message

    def test_negative_debounce(self, env):
        """Test a negative quiet period is rejected."""
        env.setenv("TUTORDESK_SAVE_DEBOUNCE_MS", "-1")

        with pytest.raises(ValueError, match="must be >= 0"):
            Config().validate()

    def test_data_dir_must_be_directory(self, env, tmp_path):
        """Test a file in place of the data directory is rejected."""
        (tmp_path / "data").write_text("", encoding="utf-8")

        with pytest.raises(ValueError, match="not a directory"):
            Config().validate()

    def test_ensure_directories(self, env, tmp_path):
        """Test the data directory is created."""
        Config().ensure_directories()

        assert (tmp_path / "data").is_dir()


class TestLogger:
    """Test cases for logging utilities."""

    def test_mask_email(self):
        """Test e-mail masking."""
        assert mask_email("teacher@example.com") == "t***@example.com"
        assert mask_email("invalid") == "***"

    def test_mask_meeting_link(self):
        """Test passcodes are hidden."""
        masked = mask_meeting_link("https://zoom.us/j/123?pwd=abc&x=1")

        assert masked == "https://zoom.us/j/123?pwd=********&x=1"

    def test_filter_masks_formatted_message(self):
        """Test the filter rewrites records containing personal data."""
        record = logging.LogRecord(
            "tutordesk", logging.INFO, __file__, 1,
            "Session link %s for %s", ("https://meet.example.com/x?passcode=999", "bob@example.com"), None
        )

        assert SensitiveDataFilter().filter(record)
        message = record.getMessage()
        assert "999" not in message
        assert "bob@example.com" not in message
        assert "b***@example.com" in message

    def test_setup_logger_with_file(self, tmp_path):
        """Test console and rotating file handlers are attached once."""
        log_file = tmp_path / "logs" / "tutordesk.log"

        logger = setup_logger("tutordesk.test.file", logging.DEBUG, str(log_file))
        again = setup_logger("tutordesk.test.file", logging.DEBUG, str(log_file))
        logger.info("Teacher contact alice@example.com")
        for handler in logger.handlers:
            handler.flush()

        assert again is logger
        assert len(logger.handlers) == 2
        assert "a***@example.com" in log_file.read_text(encoding="utf-8")

        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)


class TestCreateStore:
    """Test cases for create_store()."""

    def test_creates_seeded_store(self, env, tmp_path):
        """Test bootstrap creates the directory and writes the seed."""
        env.setenv("TUTORDESK_SAVE_DEBOUNCE_MS", "60000")

        store = create_store(Config())

        assert (tmp_path / "data" / "data.json").exists()
        assert store.state.students[0].name == "Demo Student"
        store.close()

    def test_invalid_config_raises(self, env):
        """Test configuration errors surface before the store is built."""
        env.setenv("LOG_LEVEL", "LOUD")

        with pytest.raises(ValueError):
            create_store(Config())
