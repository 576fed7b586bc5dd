"""Drive sink: upload records as files into a folder."""

import uuid
from typing import Any, Dict

from .client.drive_api import GoogleDriveAPIClient
from .schemas import DriveFile, DriveSinkConfig
from .utils.retry import RetryExecutor

DEFAULT_MIME_TYPE = "application/octet-stream"


def generate_name() -> str:
    """Name used for records that arrive without one."""
    return f"file-{uuid.uuid4().hex[:12]}"


class GoogleDriveSinkClient:
    """Creates one Drive file per incoming record."""

    def __init__(
        self,
        drive_client: GoogleDriveAPIClient,
        executor: RetryExecutor,
        config: DriveSinkConfig,
    ):
        self.drive_client = drive_client
        self.executor = executor
        self.config = config

    async def create_file(self, file: DriveFile) -> Dict[str, Any]:
        """Upload a file into the destination folder.

        Metadata keys other than name, mimeType, id and parents are sent as
        file properties unchanged.
        """
        name = file.name or generate_name()
        mime_type = file.mime_type or DEFAULT_MIME_TYPE
        extra = {
            key: value
            for key, value in file.metadata.items()
            if key not in ("id", "name", "mimeType", "parents") and value is not None
        }
        return await self.executor.execute(
            lambda: self.drive_client.create_file(
                name,
                mime_type,
                file.content,
                parents=[self.config.directory_identifier],
                properties=extra,
            ),
            f"Create file '{name}' in folder '{self.config.directory_identifier}'",
        )
