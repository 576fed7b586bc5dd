"""Google Sheets API v4 client."""

import logging
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import quote

from .base import GoogleAPIClient

logger = logging.getLogger(__name__)


class GoogleSheetsAPIClient(GoogleAPIClient):
    """Async client for the Google Sheets API v4.

    Like :class:`GoogleDriveAPIClient`, every method is a single call that
    raises normalized remote errors.
    """

    def _spreadsheets_url(self, suffix: str = "") -> str:
        return f"{self.api_config.sheets_base_url}/spreadsheets{suffix}"

    async def get_spreadsheet(
        self,
        spreadsheet_id: str,
        fields: Optional[str] = None,
    ) -> Dict[str, Any]:
        params = {"fields": fields} if fields else None
        return await self._make_request(
            "GET", self._spreadsheets_url(f"/{spreadsheet_id}"), params=params
        )

    async def get_values(
        self,
        spreadsheet_id: str,
        ranges: Sequence[str],
    ) -> List[Dict[str, Any]]:
        """Read value ranges (A1 notation) in one batch call."""
        response = await self._make_request(
            "GET",
            self._spreadsheets_url(f"/{spreadsheet_id}/values:batchGet"),
            params={"ranges": list(ranges), "majorDimension": "ROWS"},
        )
        return response.get("valueRanges", [])

    async def create_spreadsheet(self, title: str, sheet_title: str) -> Dict[str, Any]:
        """Create a spreadsheet holding a single sheet."""
        body = {
            "properties": {"title": title},
            "sheets": [{"properties": {"title": sheet_title}}],
        }
        logger.info(
            "Creating spreadsheet: title=%s, sheet_title=%s", title, sheet_title
        )
        return await self._make_request(
            "POST", self._spreadsheets_url(), json_data=body
        )

    async def batch_update(
        self,
        spreadsheet_id: str,
        requests: List[Dict[str, Any]],
    ) -> Dict[str, Any]:
        return await self._make_request(
            "POST",
            self._spreadsheets_url(f"/{spreadsheet_id}:batchUpdate"),
            json_data={"requests": requests},
        )

    async def append_values(
        self,
        spreadsheet_id: str,
        range_: str,
        rows: List[List[Any]],
    ) -> Dict[str, Any]:
        """Append rows after the last non-empty row of a range."""
        logger.info(
            "Appending rows: spreadsheet_id=%s, range=%s, row_count=%s",
            spreadsheet_id, range_, len(rows),
        )
        return await self._make_request(
            "POST",
            self._spreadsheets_url(
                f"/{spreadsheet_id}/values/{quote(range_, safe='')}:append"
            ),
            params={"valueInputOption": "USER_ENTERED", "insertDataOption": "INSERT_ROWS"},
            json_data={"majorDimension": "ROWS", "values": rows},
        )
