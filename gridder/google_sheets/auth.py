"""
Google Sheets service account authentication.
"""

from pathlib import Path
from typing import List, Optional

from google.oauth2 import service_account

from gridder.utils.errors import CredentialsError
from gridder.utils.logging import get_logger

logger = get_logger(__name__)

# Read and write access to spreadsheets shared with the service account
SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]


class ServiceAccountAuth:
    """
    Handle service account authentication.

    Use this for server-to-server authentication without user interaction.
    """

    def __init__(
        self,
        service_account_path: Path,
        scopes: Optional[List[str]] = None,
    ) -> None:
        """
        Initialize service account authentication.

        Args:
            service_account_path: Path to service account JSON key file
            scopes: OAuth2 scopes

        Raises:
            CredentialsError: If the key file does not exist
        """
        self.service_account_path = Path(service_account_path)
        self.scopes = scopes or SCOPES

        if not self.service_account_path.is_file():
            raise CredentialsError(
                f"failed to read service account credentials file: {self.service_account_path}",
                {"path": str(self.service_account_path)},
            )

    def authenticate(self) -> service_account.Credentials:
        """
        Load credentials from the key file.

        Raises:
            CredentialsError: If the key file cannot be parsed
        """
        try:
            credentials = service_account.Credentials.from_service_account_file(
                str(self.service_account_path),
                scopes=self.scopes,
            )
        except (OSError, ValueError) as e:
            raise CredentialsError(
                "failed to authenticate as service account",
                {"path": str(self.service_account_path)},
            ) from e

        logger.debug(f"Loaded service account {credentials.service_account_email}")
        return credentials
