"""Source plugin configuration schemas.

Pydantic models for the Drive and Sheets source settings supplied by the
pipeline. Invalid file types and date ranges raise the connector's own
``InvalidFilterType`` / ``InvalidDateRange`` rather than pydantic errors.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from ..filtering import (
    DateRange,
    ExportedType,
    FilterExpression,
    ModifiedDateRangeType,
    build_filter,
    is_valid_date_string,
    parse_exported_types,
    resolve_date_range,
)
from ..filtering import mime_types
from ..utils.errors import InvalidDateRange


class DriveSourceConfig(BaseModel):
    """Settings for reading files from a Drive folder."""

    directory_identifier: str = Field(min_length=1)  # Last part of the folder URL
    filter: str | None = None  # Drive query syntax, appended verbatim
    modification_date_range: ModifiedDateRangeType = ModifiedDateRangeType.NONE
    start_date: str | None = None
    end_date: str | None = None
    file_types_to_pull: list[ExportedType] = Field(default_factory=list)
    max_partition_size: int = Field(default=0, ge=0)  # 0 means unlimited
    docs_exporting_format: str = Field(default="text/plain")
    sheets_exporting_format: str = Field(default="text/csv")
    drawings_exporting_format: str = Field(default="image/svg+xml")
    presentations_exporting_format: str = Field(default="text/plain")

    @field_validator("modification_date_range", mode="before")
    def parse_date_range_type(cls, v: Any) -> ModifiedDateRangeType:
        return ModifiedDateRangeType.from_value(v)

    @field_validator("file_types_to_pull", mode="before")
    def parse_file_types(cls, v: Any) -> list[ExportedType]:
        return parse_exported_types(v)

    @model_validator(mode="after")
    def check_custom_dates(self) -> "DriveSourceConfig":
        if self.modification_date_range is ModifiedDateRangeType.CUSTOM:
            for value in (self.start_date, self.end_date):
                if not is_valid_date_string(value):
                    raise InvalidDateRange(
                        f"Custom date '{value}' is not a valid RFC 3339 date", value
                    )
        return self

    def date_range(self, now: datetime | None = None) -> DateRange | None:
        return resolve_date_range(
            self.modification_date_range, now, self.start_date, self.end_date
        )

    def build_filter(self, now: datetime | None = None) -> FilterExpression:
        """Listing query for this folder and every configured type."""
        return build_filter(
            self.directory_identifier,
            self.file_types_to_pull,
            self.filter,
            self.date_range(now),
        )

    def export_formats(self) -> dict[str, str]:
        """Configured export MIME type per native Google MIME type."""
        return {
            mime_types.GOOGLE_DOC: self.docs_exporting_format,
            mime_types.GOOGLE_SHEET: self.sheets_exporting_format,
            mime_types.GOOGLE_DRAWING: self.drawings_exporting_format,
            mime_types.GOOGLE_SLIDE: self.presentations_exporting_format,
            mime_types.GOOGLE_SCRIPT: mime_types.APPS_SCRIPT_EXPORT_FORMAT,
        }


class SheetsSourceConfig(BaseModel):
    """Settings for reading rows from a spreadsheet."""

    spreadsheet_id: str = Field(min_length=1)
    sheet_titles: list[str] = Field(default_factory=list)  # Empty means all sheets
    sheet_indexes: list[int] = Field(default_factory=list)
    first_data_row: int = Field(default=1, ge=1)
    last_data_row: int | None = Field(default=None, ge=1)

    @model_validator(mode="after")
    def check_rows(self) -> "SheetsSourceConfig":
        if self.last_data_row is not None and self.last_data_row < self.first_data_row:
            raise ValueError("last_data_row must not be before first_data_row")
        return self
