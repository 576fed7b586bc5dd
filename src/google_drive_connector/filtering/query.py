"""Drive listing query construction.

Clauses are emitted in a fixed order and ANDed together:

1. ``'<parent>' in parents``
2. ``mimeType != '<folder>'``
3. optional OR-group of exported types
4. optional free-form filter, verbatim
5. optional ``modifiedTime`` range
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional, Tuple

from .date_range import DateRange
from .exported_type import ExportedType, parse_exported_types
from .mime_types import GOOGLE_FOLDER


def _quote(value: str) -> str:
    return value.replace("\\", "\\\\").replace("'", "\\'")


def exported_type_clause(exported_type: ExportedType) -> str:
    """Render the MIME term for one exported type."""
    if exported_type is ExportedType.BINARY:
        return f"not mimeType contains '{exported_type.related_mime}'"
    return f"mimeType = '{exported_type.related_mime}'"


@dataclass(frozen=True)
class FilterExpression:
    """Immutable description of a directory listing query."""

    parent_id: str
    exported_types: Tuple[ExportedType, ...] = field(default_factory=tuple)
    user_filter: Optional[str] = None
    date_range: Optional[DateRange] = None

    def clauses(self) -> Tuple[str, ...]:
        parts = [
            f"'{_quote(self.parent_id)}' in parents",
            f"mimeType != '{GOOGLE_FOLDER}'",
        ]
        if self.exported_types:
            group = " or ".join(exported_type_clause(t) for t in self.exported_types)
            parts.append(f"({group})")
        if self.user_filter:
            parts.append(self.user_filter)
        if self.date_range is not None:
            parts.append(self.date_range.to_filter())
        return tuple(parts)

    def render(self) -> str:
        return " and ".join(self.clauses())

    def __str__(self) -> str:
        return self.render()

    def with_types(self, exported_types: Iterable[ExportedType]) -> "FilterExpression":
        """Copy of this expression restricted to other exported types."""
        return FilterExpression(
            parent_id=self.parent_id,
            exported_types=tuple(exported_types),
            user_filter=self.user_filter,
            date_range=self.date_range,
        )


def build_filter(
    parent_id: str,
    exported_types: Optional[Iterable[ExportedType | str]] = None,
    user_filter: Optional[str] = None,
    date_range: Optional[DateRange] = None,
) -> FilterExpression:
    """Build the listing query for a folder.

    Args:
        parent_id: ID of the folder whose children are listed
        exported_types: Types to include; names are parsed
        user_filter: Free-form Drive query appended verbatim
        date_range: Modified-time bounds, None for no bounds

    Returns:
        The filter expression; ``str()`` yields the query string

    Raises:
        InvalidFilterType: If a type name is not recognized
    """
    return FilterExpression(
        parent_id=parent_id,
        exported_types=tuple(parse_exported_types(exported_types)),
        user_filter=(user_filter or "").strip() or None,
        date_range=date_range,
    )
