"""Sink plugin configuration and record schemas."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class DriveSinkConfig(BaseModel):
    """Settings for writing files into a Drive folder."""

    directory_identifier: str = Field(min_length=1)


class SheetsSinkConfig(BaseModel):
    """Settings for writing rows into a new spreadsheet."""

    directory_identifier: str = Field(min_length=1)
    spreadsheet_name: str = Field(min_length=1)
    sheet_title: str = Field(default="Sheet1", min_length=1)


class DriveFile(BaseModel):
    """File content plus its Drive metadata.

    ``offset`` is the position of ``content`` inside the remote file when
    only a byte range was fetched.
    """

    content: bytes = b""
    offset: int = Field(default=0, ge=0)
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def file_id(self) -> str | None:
        return self.metadata.get("id")

    @property
    def name(self) -> str | None:
        return self.metadata.get("name")

    @property
    def mime_type(self) -> str | None:
        return self.metadata.get("mimeType")
