"""Exhaustive, sequential pagination over Drive folder listings.

Continuation tokens form a strict chain, so pages are fetched one after the
other. Each page request runs through the ``RetryExecutor``.
"""

from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Dict, List, Optional

import structlog

from .client.drive_api import GoogleDriveAPIClient
from .filtering import ExportedType, FilterExpression
from .utils.retry import RetryExecutor

logger = structlog.get_logger()


@dataclass
class ListingCursor:
    """Progress of one listing: next token and everything fetched so far."""

    next_page_token: Optional[str] = None
    items: List[Dict[str, Any]] = field(default_factory=list)
    pages: int = 0
    exhausted: bool = False

    def advance(self, page: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Record a fetched page and return its items."""
        page_items = list(page.get("files") or [])
        self.items.extend(page_items)
        self.pages += 1
        self.next_page_token = page.get("nextPageToken") or None
        self.exhausted = self.next_page_token is None
        return page_items


def split_binary_group(exported_types: List[ExportedType]) -> List[List[ExportedType]]:
    """Group types so BINARY is queried on its own.

    The negated ``not mimeType contains`` term is never mixed into the same
    OR-group as native ``mimeType =`` terms.
    """
    if ExportedType.BINARY not in exported_types:
        return [list(exported_types)]
    native = [t for t in exported_types if t is not ExportedType.BINARY]
    groups = [[ExportedType.BINARY]]
    if native:
        groups.append(native)
    return groups


class DirectoryLister:
    """Lists every file matching a query, following continuation tokens."""

    def __init__(
        self,
        drive_client: GoogleDriveAPIClient,
        executor: RetryExecutor,
        page_size: Optional[int] = None,
        fields: Optional[str] = None,
    ):
        self.drive_client = drive_client
        self.executor = executor
        self.page_size = page_size
        self.fields = fields

    async def iter_pages(
        self,
        query: FilterExpression | str,
        cursor: Optional[ListingCursor] = None,
    ) -> AsyncIterator[List[Dict[str, Any]]]:
        """Yield the items of each page until no continuation token remains.

        Args:
            query: Filter expression or raw query string
            cursor: Optional cursor to resume from and accumulate into
        """
        query_string = str(query)
        cursor = cursor if cursor is not None else ListingCursor()

        while not cursor.exhausted:
            token = cursor.next_page_token

            async def fetch_page(token=token):
                return await self.drive_client.list_files(
                    query=query_string,
                    page_token=token,
                    page_size=self.page_size,
                    fields=self.fields,
                )

            page = await self.executor.execute(
                fetch_page,
                f"List files, query: '{query_string}', page: {cursor.pages + 1}",
            )
            yield cursor.advance(page)

    async def list_all(self, query: FilterExpression | str) -> List[Dict[str, Any]]:
        """Accumulate every file across all pages."""
        cursor = ListingCursor()
        async for _ in self.iter_pages(query, cursor):
            pass
        logger.info(
            "Listed folder contents",
            query=str(query),
            pages=cursor.pages,
            file_count=len(cursor.items),
        )
        return cursor.items

    async def list_by_types(self, expression: FilterExpression) -> List[Dict[str, Any]]:
        """List files, querying BINARY separately from native Google types."""
        files: List[Dict[str, Any]] = []
        for group in split_binary_group(list(expression.exported_types)):
            files.extend(await self.list_all(expression.with_types(group)))
        return files
