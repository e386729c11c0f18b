"""
Per-run handle on one Google Sheets spreadsheet.
"""

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

import httplib2
from google.auth.exceptions import GoogleAuthError
from googleapiclient.discovery import Resource, build
from googleapiclient.errors import HttpError

from gridder.google_sheets.auth import ServiceAccountAuth
from gridder.utils.errors import SheetsAPIError
from gridder.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class SpreadsheetHandle:
    """Sheets v4 service bound to a spreadsheet ID."""

    service: Resource
    spreadsheet_id: str

    @classmethod
    def connect(cls, spreadsheet_id: str, service_account_file: Path) -> "SpreadsheetHandle":
        """
        Authenticate and build the Sheets service.

        Raises:
            CredentialsError: If the key file cannot be used
            SheetsAPIError: If the service cannot be built
        """
        credentials = ServiceAccountAuth(service_account_file).authenticate()
        try:
            service = build("sheets", "v4", credentials=credentials, cache_discovery=False)
        except (HttpError, GoogleAuthError) as e:
            raise SheetsAPIError("connect") from e

        logger.info("Connected to Google Sheets API")
        return cls(service=service, spreadsheet_id=spreadsheet_id)

    async def execute(self, request: Any, operation: str) -> Dict[str, Any]:
        """
        Run a prepared API request off the event loop.

        Raises:
            SheetsAPIError: If the call fails
        """
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, request.execute)
        except HttpError as e:
            raise SheetsAPIError(operation, e.resp.status) from e
        except (GoogleAuthError, httplib2.HttpLib2Error, OSError) as e:
            raise SheetsAPIError(operation) from e
