"""Google Drive API v3 client.

Each method performs exactly one HTTP call and raises normalized remote
errors; retries are applied by the caller through a ``RetryExecutor``.
"""

import json
import logging
import uuid
from typing import Any, Dict, Iterable, Optional, Tuple

from ..filtering.mime_types import GOOGLE_FOLDER
from .base import GoogleAPIClient

logger = logging.getLogger(__name__)

RANGE_PATTERN = "bytes={}-{}"


class GoogleDriveAPIClient(GoogleAPIClient):
    """Async client for the Google Drive API v3."""

    async def list_files(
        self,
        query: Optional[str] = None,
        page_token: Optional[str] = None,
        page_size: Optional[int] = None,
        fields: Optional[str] = None,
    ) -> Dict[str, Any]:
        """List one page of files.

        Args:
            query: Query string for filtering files (Drive API query syntax)
            page_token: Continuation token from the previous page
            page_size: Number of files per page (max 1000)
            fields: Partial response selector, must include nextPageToken

        Returns:
            Dictionary containing ``files`` and an optional ``nextPageToken``
        """
        logger.info(
            "Listing files from Google Drive: has_page_token=%s, query=%s",
            bool(page_token),
            query,
        )

        include_shared = self.api_config.include_shared_drives
        params: Dict[str, Any] = {
            "pageSize": min(page_size or self.api_config.page_size, 1000),
            "fields": fields or self.api_config.listing_fields,
            "supportsAllDrives": include_shared,
            "includeItemsFromAllDrives": include_shared,
        }
        if query:
            params["q"] = query
        if page_token:
            params["pageToken"] = page_token

        url = f"{self.api_config.drive_base_url}/files"
        response = await self._make_request("GET", url, params=params)

        logger.info(
            "Successfully listed files: file_count=%s, has_next_page=%s",
            len(response.get("files", [])),
            bool(response.get("nextPageToken")),
        )
        return response

    async def get_file(self, file_id: str, fields: str = "*") -> Dict[str, Any]:
        """Get metadata for a specific file.

        Args:
            file_id: The ID of the file to retrieve
            fields: Comma-separated list of fields to include

        Returns:
            Dictionary containing file metadata
        """
        url = f"{self.api_config.drive_base_url}/files/{file_id}"
        params = {"fields": fields, "supportsAllDrives": True}
        return await self._make_request("GET", url, params=params)

    async def download_file(
        self,
        file_id: str,
        byte_range: Optional[Tuple[int, int]] = None,
    ) -> bytes:
        """Download the content of a binary (non-native) file.

        Args:
            file_id: The ID of the file
            byte_range: Optional inclusive ``(first, last)`` byte offsets

        Returns:
            File content, or the requested slice of it
        """
        url = f"{self.api_config.drive_base_url}/files/{file_id}"
        headers = {"Accept": "*/*"}
        if byte_range is not None:
            headers["Range"] = RANGE_PATTERN.format(*byte_range)

        logger.info(
            "Downloading file: file_id=%s, range=%s",
            file_id,
            headers.get("Range"),
        )
        return await self._make_request(
            "GET",
            url,
            params={"alt": "media", "supportsAllDrives": True},
            headers=headers,
            parse_json=False,
        )

    async def export_file(self, file_id: str, mime_type: str) -> bytes:
        """Export a native Google file to a specific format.

        Args:
            file_id: The ID of the file to export
            mime_type: Target MIME type for export (e.g., 'text/csv')

        Returns:
            Exported file content as bytes
        """
        logger.info(
            "Exporting Google file: file_id=%s, target_mime_type=%s",
            file_id, mime_type,
        )
        url = f"{self.api_config.drive_base_url}/files/{file_id}/export"
        return await self._make_request(
            "GET",
            url,
            params={"mimeType": mime_type},
            headers={"Accept": "*/*"},
            parse_json=False,
        )

    async def create_file(
        self,
        name: str,
        mime_type: str,
        content: bytes,
        parents: Iterable[str] = (),
        properties: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Upload a new file with a multipart request.

        Args:
            name: File name
            mime_type: MIME type of the content
            content: File body
            parents: IDs of the folders to place the file in
            properties: Extra file metadata fields

        Returns:
            Metadata of the created file (id, name, mimeType, parents)
        """
        metadata: Dict[str, Any] = dict(properties or {})
        metadata.update({"name": name, "mimeType": mime_type})
        parent_ids = list(parents)
        if parent_ids:
            metadata["parents"] = parent_ids

        boundary = f"==========={uuid.uuid4().hex}=="
        body = b"".join(
            [
                f"--{boundary}\r\n".encode(),
                b"Content-Type: application/json; charset=UTF-8\r\n\r\n",
                json.dumps(metadata).encode("utf-8"),
                f"\r\n--{boundary}\r\n".encode(),
                f"Content-Type: {mime_type}\r\n\r\n".encode(),
                content,
                f"\r\n--{boundary}--".encode(),
            ]
        )

        logger.info(
            "Creating file in Google Drive: name=%s, mime_type=%s, size_bytes=%s",
            name, mime_type, len(content),
        )
        url = f"{self.api_config.upload_base_url}/files"
        return await self._make_request(
            "POST",
            url,
            params={
                "uploadType": "multipart",
                "fields": "id, name, mimeType, parents",
                "supportsAllDrives": True,
            },
            content=body,
            headers={"Content-Type": f"multipart/related; boundary={boundary}"},
        )

    async def move_file(
        self,
        file_id: str,
        add_parents: str,
        remove_parents: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Move a file between folders by editing its parents."""
        params = {
            "addParents": add_parents,
            "fields": "id, parents",
            "supportsAllDrives": True,
        }
        if remove_parents:
            params["removeParents"] = remove_parents
        url = f"{self.api_config.drive_base_url}/files/{file_id}"
        return await self._make_request("PATCH", url, params=params, json_data={})

    async def get_about(self, fields: str = "user") -> Dict[str, Any]:
        """Get information about the authenticated user's Drive.

        Used to validate credentials.
        """
        url = f"{self.api_config.drive_base_url}/about"
        return await self._make_request("GET", url, params={"fields": fields})

    async def is_folder_accessible(self, folder_id: str) -> bool:
        """Check that an ID refers to a folder the credentials can read."""
        metadata = await self.get_file(folder_id, fields="id, mimeType")
        return metadata.get("mimeType") == GOOGLE_FOLDER
