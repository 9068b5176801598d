"""Configuration management for environment variables."""

import os
from pathlib import Path

from dotenv import load_dotenv

from wikireader.utils.exceptions import ConfigurationError

DEFAULT_START_PAGE = "Wikipedia"
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8080
DEFAULT_LOG_FORMAT = "json"

INDEX_PATH_KEY = "WIKIREADER_INDEX_PATH"
ARCHIVE_PATH_KEY = "WIKIREADER_ARCHIVE_PATH"


class Config:
    """Application configuration loaded from environment variables.

    The two paths are optional here: ``search`` reads only the index, so
    each command asks for the paths it needs through :meth:`require_index_path`
    and :meth:`require_archive_path`.
    """

    def __init__(self) -> None:
        """Load configuration from .env file and environment."""
        env_path = Path(".env")
        if env_path.exists():
            load_dotenv(env_path)

        # Paths
        self.index_path = self.get_path(INDEX_PATH_KEY)
        self.archive_path = self.get_path(ARCHIVE_PATH_KEY)

        # Optional configuration with defaults
        self.log_level = os.getenv("LOG_LEVEL", "INFO")
        self.log_format = os.getenv("LOG_FORMAT", DEFAULT_LOG_FORMAT)
        self.index_workers = self.get_int("WIKIREADER_INDEX_WORKERS", os.cpu_count() or 1)
        self.start_page = os.getenv("WIKIREADER_START_PAGE") or DEFAULT_START_PAGE
        self.host = os.getenv("WIKIREADER_HOST") or DEFAULT_HOST
        self.port = self.get_int("WIKIREADER_PORT", DEFAULT_PORT)

    def require_index_path(self) -> Path:
        """Return the index path.

        Raises:
            ConfigurationError: If WIKIREADER_INDEX_PATH is not set
        """
        if self.index_path is None:
            raise ConfigurationError(f"{INDEX_PATH_KEY} environment variable is not set")
        return self.index_path

    def require_archive_path(self) -> Path:
        if self.archive_path is None:
            raise ConfigurationError(f"{ARCHIVE_PATH_KEY} environment variable is not set")
        return self.archive_path

    @staticmethod
    def get_path(key: str) -> Path | None:
        """Get a path environment variable; unset and empty both mean None."""
        value = os.getenv(key)
        return Path(value) if value else None

    @staticmethod
    def get_int(key: str, default: int) -> int:
        """Get positive integer environment variable with default value.

        Raises:
            ConfigurationError: If the value is not a positive integer
        """
        value = os.getenv(key)
        if not value:
            return default
        try:
            parsed = int(value)
        except ValueError as e:
            raise ConfigurationError(f"{key} must be an integer, got {value!r}") from e
        if parsed <= 0:
            raise ConfigurationError(f"{key} must be positive, got {parsed}")
        return parsed
