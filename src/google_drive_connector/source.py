"""Drive source: list a folder and fetch file contents."""

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

import structlog

from .client.drive_api import GoogleDriveAPIClient
from .filtering.mime_types import get_export_format, is_google_native
from .listing import DirectoryLister
from .schemas import DriveFile, DriveSourceConfig
from .utils.retry import RetryExecutor

logger = structlog.get_logger()


class GoogleDriveSourceClient:
    """Reads files from the configured Drive folder.

    Binary files are downloaded, optionally by byte range. Native Google
    files cannot be partitioned and are exported whole using the configured
    export format.
    """

    def __init__(
        self,
        drive_client: GoogleDriveAPIClient,
        executor: RetryExecutor,
        config: DriveSourceConfig,
        lister: Optional[DirectoryLister] = None,
    ):
        self.drive_client = drive_client
        self.executor = executor
        self.config = config
        self.lister = lister or DirectoryLister(drive_client, executor)

    async def list_files(self, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
        """List every file in the folder matching the configured filters."""
        expression = self.config.build_filter(now)
        files = await self.lister.list_by_types(expression)
        logger.info(
            "Listed source files",
            directory=self.config.directory_identifier,
            file_count=len(files),
        )
        return files

    async def get_metadata(self, file_id: str) -> Dict[str, Any]:
        return await self.executor.execute(
            lambda: self.drive_client.get_file(file_id),
            f"Get file metadata, id: '{file_id}'",
        )

    async def get_file(
        self,
        file_id: str,
        byte_range: Optional[Tuple[int, int]] = None,
    ) -> DriveFile:
        """Fetch a file, or a partition of a binary file.

        Args:
            file_id: ID of the file
            byte_range: Inclusive ``(first, last)`` byte offsets; ignored for
                native Google files

        Returns:
            The content with metadata; exported files carry the export MIME
            type as ``mimeType``
        """
        metadata = await self.get_metadata(file_id)
        mime_type = metadata.get("mimeType", "")

        if not is_google_native(mime_type):
            content = await self.executor.execute(
                lambda: self.drive_client.download_file(file_id, byte_range),
                f"Download file, id: '{file_id}', range: {byte_range}",
            )
            offset = byte_range[0] if byte_range else 0
            return DriveFile(content=content, offset=offset, metadata=metadata)

        export_format = get_export_format(mime_type, self.config.export_formats())
        if export_format is None:
            logger.warning(
                "Native file type cannot be exported",
                file_id=file_id,
                mime_type=mime_type,
            )
            return DriveFile(content=b"", metadata=metadata)

        content = await self.executor.execute(
            lambda: self.drive_client.export_file(file_id, export_format),
            f"Export file, id: '{file_id}', format: '{export_format}'",
        )
        return DriveFile(
            content=content,
            metadata={**metadata, "mimeType": export_format},
        )
