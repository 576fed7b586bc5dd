"""Query construction for Drive directory listings."""

from .date_range import (
    DateRange,
    ModifiedDateRangeType,
    format_timestamp,
    is_valid_date_string,
    resolve_date_range,
)
from .exported_type import ExportedType, parse_exported_types
from .query import FilterExpression, build_filter

__all__ = [
    "DateRange",
    "ModifiedDateRangeType",
    "format_timestamp",
    "is_valid_date_string",
    "resolve_date_range",
    "ExportedType",
    "parse_exported_types",
    "FilterExpression",
    "build_filter",
]
