"""Google Drive and Sheets API client modules."""

from .auth import GoogleOAuthClient
from .base import GoogleAPIClient
from .drive_api import GoogleDriveAPIClient
from .sheets_api import GoogleSheetsAPIClient

__all__ = [
    "GoogleOAuthClient",
    "GoogleAPIClient",
    "GoogleDriveAPIClient",
    "GoogleSheetsAPIClient",
]
