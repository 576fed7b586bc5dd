"""Google Drive and Google Sheets connector.

Retry-wrapped async clients for listing, reading and writing Drive files and
spreadsheets.
"""

__version__ = "0.1.0"

from .listing import DirectoryLister, ListingCursor
from .sink import GoogleDriveSinkClient
from .source import GoogleDriveSourceClient

__all__ = [
    "DirectoryLister",
    "ListingCursor",
    "GoogleDriveSinkClient",
    "GoogleDriveSourceClient",
]
