"""Spreadsheet source and sink clients."""

from .sink import GoogleSheetsSinkClient
from .source import GoogleSheetsSourceClient

__all__ = ["GoogleSheetsSinkClient", "GoogleSheetsSourceClient"]
