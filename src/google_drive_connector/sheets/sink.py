"""Sheets sink: write tabular rows into spreadsheets.

Every remote step (create, add sheet, resize, append, move) is a separate
call wrapped by the ``RetryExecutor``.
"""

from typing import Any, Dict, List, Optional

import structlog

from ..client.drive_api import GoogleDriveAPIClient
from ..client.sheets_api import GoogleSheetsAPIClient
from ..schemas import SheetsSinkConfig
from ..utils.retry import RetryExecutor
from .source import sheet_range

logger = structlog.get_logger()

# A new sheet starts with 1000 rows; all but the last are removed up front
DEFAULT_SHEET_ROWS = 1000


class GoogleSheetsSinkClient:
    """Creates spreadsheets in the destination folder and fills them."""

    def __init__(
        self,
        sheets_client: GoogleSheetsAPIClient,
        drive_client: GoogleDriveAPIClient,
        executor: RetryExecutor,
        config: SheetsSinkConfig,
    ):
        self.sheets_client = sheets_client
        self.drive_client = drive_client
        self.executor = executor
        self.config = config

    async def create_empty_spreadsheet(self, name: str, sheet_title: str) -> Dict[str, Any]:
        """Create a spreadsheet with one sheet.

        Returns:
            Dict with ``spreadsheet_id`` and ``sheet_id``
        """
        spreadsheet = await self.executor.execute(
            lambda: self.sheets_client.create_spreadsheet(name, sheet_title),
            f"Creation of empty spreadsheet, name: '{name}', sheet title: '{sheet_title}'.",
        )
        sheet_id = spreadsheet["sheets"][0]["properties"]["sheetId"]
        return {"spreadsheet_id": spreadsheet["spreadsheetId"], "sheet_id": sheet_id}

    async def create_sheet(self, spreadsheet_id: str, spreadsheet_name: str, sheet_title: str) -> int:
        """Add a sheet to an existing spreadsheet and clear its default rows."""
        request = {"addSheet": {"properties": {"title": sheet_title}}}
        response = await self.executor.execute(
            lambda: self.sheets_client.batch_update(spreadsheet_id, [request]),
            f"Creation of empty sheet, spreadsheet name: '{spreadsheet_name}', "
            f"sheet title: '{sheet_title}'.",
        )
        sheet_id = response["replies"][0]["addSheet"]["properties"]["sheetId"]
        await self.delete_default_rows(spreadsheet_id, sheet_id, sheet_title)
        return sheet_id

    async def delete_default_rows(self, spreadsheet_id: str, sheet_id: int, sheet_title: str) -> None:
        request = {
            "deleteDimension": {
                "range": {
                    "sheetId": sheet_id,
                    "dimension": "ROWS",
                    "startIndex": 0,
                    "endIndex": DEFAULT_SHEET_ROWS - 1,
                }
            }
        }
        await self.executor.execute(
            lambda: self.sheets_client.batch_update(spreadsheet_id, [request]),
            f"Pre-removing of sheet '{sheet_title}' dimensions",
        )

    async def extend_dimension(
        self,
        spreadsheet_id: str,
        spreadsheet_name: str,
        sheet_title: str,
        sheet_id: int,
        rows_to_add: int,
    ) -> None:
        """Append empty rows to a sheet; no-op for ``rows_to_add <= 0``."""
        if rows_to_add <= 0:
            return
        request = {
            "appendDimension": {
                "sheetId": sheet_id,
                "dimension": "ROWS",
                "length": rows_to_add,
            }
        }
        await self.executor.execute(
            lambda: self.sheets_client.batch_update(spreadsheet_id, [request]),
            f"Appending dimension of '{rows_to_add}' rows for spreadsheet "
            f"'{spreadsheet_name}', sheet name '{sheet_title}'.",
        )

    async def append_rows(
        self,
        spreadsheet_id: str,
        spreadsheet_name: str,
        sheet_title: str,
        rows: List[List[Any]],
    ) -> int:
        """Append row values to a sheet, returning the number of rows sent."""
        if not rows:
            return 0
        await self.executor.execute(
            lambda: self.sheets_client.append_values(
                spreadsheet_id, sheet_range(sheet_title), rows
            ),
            f"Populating of spreadsheet '{spreadsheet_name}' with records, "
            f"sheet title name '{sheet_title}'.",
        )
        return len(rows)

    async def move_to_destination_folder(self, spreadsheet_id: str, spreadsheet_name: str) -> None:
        await self.executor.execute(
            lambda: self.drive_client.move_file(
                spreadsheet_id,
                add_parents=self.config.directory_identifier,
                remove_parents="root",
            ),
            f"Moving the spreadsheet '{spreadsheet_name}' to destination folder.",
        )

    async def write(
        self,
        rows: List[List[Any]],
        header: Optional[List[str]] = None,
    ) -> str:
        """Create the configured spreadsheet, fill it and move it in place.

        Returns:
            ID of the created spreadsheet
        """
        name = self.config.spreadsheet_name
        title = self.config.sheet_title
        created = await self.create_empty_spreadsheet(name, title)
        spreadsheet_id = created["spreadsheet_id"]

        values = ([list(header)] if header else []) + [list(r) for r in rows]
        written = await self.append_rows(spreadsheet_id, name, title, values)
        await self.move_to_destination_folder(spreadsheet_id, name)

        logger.info(
            "Spreadsheet written",
            spreadsheet_id=spreadsheet_id,
            spreadsheet_name=name,
            rows=written,
        )
        return spreadsheet_id
