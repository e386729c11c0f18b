# Config
"""
Configuration for Gridder.

Values come from the environment; a local ``.env`` file is loaded first.
"""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from gridder.utils.errors import ConfigurationError, MissingConfigurationError

load_dotenv()

DEFAULT_FILENAME_FORMAT = "./%Y-%m-%d-_ITEM_.csv"
DEFAULT_TEMPLATE_SHEET = "TEMPLATE"


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in ("1", "true", "yes", "on")


class Settings:
    def __init__(self) -> None:
        # Logging
        self.log_level = os.getenv("GRIDDER_LOG_LEVEL", "INFO").upper()
        self.dev_mode = _env_flag("GRIDDER_DEV_MODE")
        log_file = os.getenv("GRIDDER_LOG_FILE")
        self.log_file_path = Path(log_file) if log_file else None

        # Source page
        self.base_url = os.getenv("GRIDDER_BASE_URL") or None
        self.request_timeout = self._read_timeout(os.getenv("GRIDDER_REQUEST_TIMEOUT"))

        # CSV output
        self.filename_format = os.getenv("GRIDDER_FILENAME_FORMAT") or DEFAULT_FILENAME_FORMAT

        # Google Sheets
        self.spreadsheet_id = os.getenv("GRIDDER_SPREADSHEET_ID") or None
        service_account = os.getenv("GRIDDER_SERVICE_ACCOUNT_FILE")
        self.service_account_file = Path(service_account) if service_account else None
        self.template_sheet = os.getenv("GRIDDER_TEMPLATE_SHEET") or DEFAULT_TEMPLATE_SHEET

    @staticmethod
    def _read_timeout(value: Optional[str]) -> Optional[float]:
        if not value:
            return None
        try:
            timeout = float(value)
        except ValueError:
            raise ConfigurationError(f"GRIDDER_REQUEST_TIMEOUT is not a number: {value!r}")
        if timeout <= 0:
            raise ConfigurationError(f"GRIDDER_REQUEST_TIMEOUT must be positive: {value!r}")
        return timeout

    def get_log_file_path(self) -> Optional[Path]:
        if self.log_file_path:
            self.log_file_path.parent.mkdir(parents=True, exist_ok=True)
        return self.log_file_path

    def require_spreadsheet_id(self) -> str:
        if not self.spreadsheet_id:
            raise MissingConfigurationError("spreadsheet_id", "GRIDDER_SPREADSHEET_ID")
        return self.spreadsheet_id

    def require_service_account_file(self) -> Path:
        if not self.service_account_file:
            raise MissingConfigurationError(
                "service_account_file", "GRIDDER_SERVICE_ACCOUNT_FILE"
            )
        return self.service_account_file


# Singleton instance
_settings = None

def get_settings():
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
