"""Modified-date ranges for directory listings.

A named range type plus a reference "now" resolves to a :class:`DateRange`
of formatted timestamps (millisecond precision, no zone suffix), which
renders as a ``modifiedTime`` clause of the Drive query grammar.
"""

import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from ..utils.errors import InvalidDateRange

MODIFIED_TIME_TERM = "modifiedTime"

# RFC 3339 full-date, optionally followed by time, fraction and offset
DATE_PATTERN = re.compile(
    r"^([0-9]+)-(0[1-9]|1[012])-(0[1-9]|[12][0-9]|3[01])"
    r"([Tt]([01][0-9]|2[0-3]):([0-5][0-9]):([0-5][0-9]|60)"
    r"(\.[0-9]+)?"
    r"([Zz]|[+\-]([01][0-9]|2[0-3]):[0-5][0-9])?)?$"
)


class ModifiedDateRangeType(Enum):
    """Preset and custom modification date ranges."""

    NONE = ("none", "None")
    LAST_7_DAYS = ("last-7-days", "Last 7 Days")
    LAST_30_DAYS = ("last-30-days", "Last 30 Days")
    PREVIOUS_QUARTER = ("previous-quarter", "Previous Quarter")
    CURRENT_QUARTER = ("current-quarter", "Current Quarter")
    LAST_YEAR = ("last-year", "Last Year")
    CURRENT_YEAR = ("current-year", "Current Year")
    CUSTOM = ("custom", "Custom")

    def __init__(self, key: str, label: str):
        self.key = key
        self.label = label

    @classmethod
    def from_value(cls, value: Optional[str]) -> "ModifiedDateRangeType":
        """Parse a range type by key (``last-7-days``), label or enum name.

        Matching is case-insensitive. An empty value means ``NONE``.

        Raises:
            InvalidDateRange: If the value names no known range type
        """
        if isinstance(value, ModifiedDateRangeType):
            return value
        if value is None or not value.strip():
            return cls.NONE
        normalized = value.strip().lower()
        for member in cls:
            if normalized in (
                member.key,
                member.label.lower(),
                member.name.lower(),
                member.name.lower().replace("_", "-"),
            ):
                return member
        raise InvalidDateRange(f"Unknown modification date range '{value}'", value)


@dataclass(frozen=True)
class DateRange:
    """Inclusive ``[start_date, end_date]`` pair of formatted timestamps."""

    start_date: str
    end_date: str

    def to_filter(self) -> str:
        """Render the ``modifiedTime`` clause for a Drive query."""
        return (
            f"{MODIFIED_TIME_TERM} >= '{self.start_date}' and "
            f"{MODIFIED_TIME_TERM} <= '{self.end_date}'"
        )


def format_timestamp(value: datetime) -> str:
    """Format as ``YYYY-MM-DDTHH:MM:SS.mmm`` without a zone suffix."""
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}"


def is_valid_date_string(value: Optional[str]) -> bool:
    """Check a custom date string against the RFC 3339-like pattern."""
    return bool(value) and DATE_PATTERN.match(value) is not None


def _quarter_start(year: int, quarter: int) -> datetime:
    return datetime(year, quarter * 3 + 1, 1)


def _end_of_day(value: datetime) -> datetime:
    return value.replace(hour=23, minute=59, second=59, microsecond=999000)


def resolve_date_range(
    range_type: ModifiedDateRangeType | str,
    now: Optional[datetime] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
) -> Optional[DateRange]:
    """Resolve a named range type into concrete timestamps.

    Args:
        range_type: Range type or its configured name
        now: Reference instant, defaults to the current local time
        start_date: Literal start for ``CUSTOM`` ranges
        end_date: Literal end for ``CUSTOM`` ranges

    Returns:
        The resolved range, or None for ``NONE``

    Raises:
        InvalidDateRange: Unknown type, or malformed custom dates
    """
    range_type = ModifiedDateRangeType.from_value(range_type)
    if now is None:
        now = datetime.now()
    # Sub-millisecond precision is not representable in the query format
    now = now.replace(microsecond=(now.microsecond // 1000) * 1000, tzinfo=None)

    if range_type is ModifiedDateRangeType.NONE:
        return None

    if range_type is ModifiedDateRangeType.CUSTOM:
        for label, value in (("start", start_date), ("end", end_date)):
            if not is_valid_date_string(value):
                raise InvalidDateRange(
                    f"Custom {label} date '{value}' is not a valid RFC 3339 date",
                    value,
                )
        return DateRange(start_date, end_date)

    if range_type is ModifiedDateRangeType.LAST_7_DAYS:
        start, end = now - timedelta(days=7), now
    elif range_type is ModifiedDateRangeType.LAST_30_DAYS:
        start, end = now - timedelta(days=30), now
    elif range_type is ModifiedDateRangeType.CURRENT_QUARTER:
        start, end = _quarter_start(now.year, (now.month - 1) // 3), now
    elif range_type is ModifiedDateRangeType.PREVIOUS_QUARTER:
        quarter = (now.month - 1) // 3 - 1
        year = now.year
        if quarter < 0:
            quarter, year = 3, year - 1
        start = _quarter_start(year, quarter)
        end = _end_of_day(_quarter_start(now.year, (now.month - 1) // 3) - timedelta(days=1))
    elif range_type is ModifiedDateRangeType.LAST_YEAR:
        start = datetime(now.year - 1, 1, 1)
        end = _end_of_day(datetime(now.year - 1, 12, 31))
    elif range_type is ModifiedDateRangeType.CURRENT_YEAR:
        start, end = datetime(now.year, 1, 1), now
    else:
        raise InvalidDateRange(f"Unsupported modification date range '{range_type}'")

    return DateRange(format_timestamp(start), format_timestamp(end))
