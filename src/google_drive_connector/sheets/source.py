"""Sheets source: read rows from spreadsheet sheets."""

from typing import Any, Dict, List, Optional, Sequence

from ..client.sheets_api import GoogleSheetsAPIClient
from ..schemas import SheetsSourceConfig
from ..utils.retry import RetryExecutor


def sheet_range(title: str, first_row: Optional[int] = None, last_row: Optional[int] = None) -> str:
    """A1 notation for whole rows of a sheet, quoting the title."""
    quoted = "'" + title.replace("'", "''") + "'"
    if first_row is None or last_row is None:
        return quoted
    return f"{quoted}!{first_row}:{last_row}"


class GoogleSheetsSourceClient:
    """Reads sheet titles and row values through the retry layer."""

    def __init__(self, sheets_client: GoogleSheetsAPIClient, executor: RetryExecutor):
        self.sheets_client = sheets_client
        self.executor = executor

    async def get_sheets(self, spreadsheet_id: str) -> List[Dict[str, Any]]:
        """Properties of every sheet in a spreadsheet."""
        spreadsheet = await self.executor.execute(
            lambda: self.sheets_client.get_spreadsheet(
                spreadsheet_id, fields="sheets.properties"
            ),
            f"Get spreadsheet, id: '{spreadsheet_id}'",
        )
        return [sheet.get("properties", {}) for sheet in spreadsheet.get("sheets", [])]

    async def get_sheet_titles(
        self,
        spreadsheet_id: str,
        indexes: Optional[Sequence[int]] = None,
    ) -> List[str]:
        """Titles of all sheets, or only of the sheets at ``indexes``."""
        sheets = await self.get_sheets(spreadsheet_id)
        if indexes:
            sheets = [s for s in sheets if s.get("index", 0) in indexes]
        return [s.get("title", "") for s in sheets]

    async def get_rows(
        self,
        spreadsheet_id: str,
        sheet_title: str,
        first_row: int = 1,
        last_row: Optional[int] = None,
    ) -> List[List[Any]]:
        """Row values for ``first_row..last_row`` (1-based, inclusive)."""
        bounded = last_row is not None
        range_ = sheet_range(sheet_title, first_row if bounded else None, last_row)
        value_ranges = await self.executor.execute(
            lambda: self.sheets_client.get_values(spreadsheet_id, [range_]),
            f"Get content, spreadsheet id: '{spreadsheet_id}', sheet title: '{sheet_title}'",
        )
        rows: List[List[Any]] = value_ranges[0].get("values", []) if value_ranges else []
        if not bounded:
            rows = rows[first_row - 1:]
        return rows

    async def read(self, config: SheetsSourceConfig) -> Dict[str, List[List[Any]]]:
        """Rows of every configured sheet keyed by sheet title."""
        titles = list(config.sheet_titles)
        if not titles:
            titles = await self.get_sheet_titles(config.spreadsheet_id, config.sheet_indexes)
        result: Dict[str, List[List[Any]]] = {}
        for title in titles:
            result[title] = await self.get_rows(
                config.spreadsheet_id, title, config.first_data_row, config.last_data_row
            )
        return result
