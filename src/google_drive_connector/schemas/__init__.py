"""Plugin configuration schemas."""

from .sink import DriveFile, DriveSinkConfig, SheetsSinkConfig
from .source import DriveSourceConfig, SheetsSourceConfig

__all__ = [
    "DriveFile",
    "DriveSinkConfig",
    "SheetsSinkConfig",
    "DriveSourceConfig",
    "SheetsSourceConfig",
]
