"""
Configuration management with environment variables.

This module provides centralized configuration for the store host:
where the data document lives, how long the autosave waits, and how
logging is set up.
"""

import os
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


DEFAULT_DATA_DIR = "~/.tutordesk"
DATA_FILENAME = "data.json"


class Config:
    """
    Application configuration manager.

    Attributes:
        data_dir: Directory holding the persisted document
        data_file: Full path of the persisted document
        save_debounce_ms: Quiet period before an autosave, in milliseconds
        log_level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional rotating log file path

    Examples:
        >>> config = Config()
        >>> config.validate()
        True
        >>> gateway = JsonFilePersistence(config.data_file)
    """

    VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

    def __init__(self):
        """Initialize configuration by loading environment variables."""
        load_dotenv()

        self._data_dir = Path(os.getenv("TUTORDESK_DATA_DIR", DEFAULT_DATA_DIR)).expanduser()
        self._save_debounce_raw = os.getenv("TUTORDESK_SAVE_DEBOUNCE_MS", "450")
        self._log_level = os.getenv("LOG_LEVEL", "INFO").upper()
        self._log_file = os.getenv("LOG_FILE") or None

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    @property
    def data_file(self) -> Path:
        return self._data_dir / DATA_FILENAME

    @property
    def save_debounce_ms(self) -> int:
        """
        Autosave quiet period.

        Raises:
            ValueError: If TUTORDESK_SAVE_DEBOUNCE_MS is not an integer
        """
        try:
            return int(self._save_debounce_raw)
        except ValueError:
            raise ValueError(
                f"TUTORDESK_SAVE_DEBOUNCE_MS must be an integer, got: {self._save_debounce_raw}"
            )

    @property
    def save_debounce_seconds(self) -> float:
        return self.save_debounce_ms / 1000.0

    @property
    def log_level(self) -> str:
        return self._log_level

    @property
    def log_level_value(self) -> int:
        """Numeric logging level for logging.Logger.setLevel()."""
        return getattr(logging, self._log_level, logging.INFO)

    @property
    def log_file(self) -> Optional[str]:
        return self._log_file

    def validate(self) -> bool:
        """
        Validate configuration values.

        Returns:
            True if all configuration is valid

        Raises:
            ValueError: Listing every invalid setting
        """
        errors = []

        try:
            if self.save_debounce_ms < 0:
                errors.append(
                    f"TUTORDESK_SAVE_DEBOUNCE_MS must be >= 0, got: {self.save_debounce_ms}"
                )
        except ValueError as e:
            errors.append(str(e))

        if self._log_level not in self.VALID_LOG_LEVELS:
            errors.append(
                f"LOG_LEVEL must be one of {', '.join(self.VALID_LOG_LEVELS)}, "
                f"got: {self._log_level}"
            )

        if self._data_dir.exists() and not self._data_dir.is_dir():
            errors.append(f"TUTORDESK_DATA_DIR is not a directory: {self._data_dir}")

        if errors:
            raise ValueError("Configuration errors:\n  - " + "\n  - ".join(errors))

        return True

    def ensure_directories(self):
        """Create the data directory if it does not exist."""
        self._data_dir.mkdir(parents=True, exist_ok=True)


# Singleton instance
config = Config()
