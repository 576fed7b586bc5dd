"""Document categories used to filter directory listings by MIME type."""

from enum import Enum
from typing import Iterable, List, Optional

from ..utils.errors import InvalidFilterType
from . import mime_types


class ExportedType(Enum):
    """Exported file types and the MIME value each one filters on.

    ``BINARY`` matches every file that is *not* a native Google file, so its
    MIME value is the native prefix used in a ``not mimeType contains`` term.
    """

    BINARY = ("binary", mime_types.GOOGLE_APPS_PREFIX)
    DOCUMENTS = ("documents", mime_types.GOOGLE_DOC)
    SPREADSHEETS = ("spreadsheets", mime_types.GOOGLE_SHEET)
    DRAWINGS = ("drawings", mime_types.GOOGLE_DRAWING)
    PRESENTATIONS = ("presentations", mime_types.GOOGLE_SLIDE)
    APP_SCRIPTS = ("appsScripts", mime_types.GOOGLE_SCRIPT)

    def __init__(self, label: str, related_mime: str):
        self.label = label
        self.related_mime = related_mime

    @classmethod
    def from_value(cls, value: str) -> "ExportedType":
        """Parse a configured type name.

        Accepts the configuration label (``appsScripts``), the enum name
        (``APP_SCRIPTS``) and kebab/snake spellings (``app-scripts``).

        Raises:
            InvalidFilterType: If the value names no known type
        """
        if isinstance(value, ExportedType):
            return value
        raw = (value or "").strip()
        key = raw.replace("-", "").replace("_", "").lower()
        for member in cls:
            if key in (
                member.label.lower(),
                member.name.replace("_", "").lower(),
            ):
                return member
        raise InvalidFilterType(raw)


def parse_exported_types(value: Optional[Iterable[str] | str]) -> List[ExportedType]:
    """Parse a comma separated string or iterable into exported types.

    Empty entries are skipped and duplicates collapse, keeping first order.
    """
    if value is None:
        return []
    items = value.split(",") if isinstance(value, str) else list(value)
    result: List[ExportedType] = []
    for item in items:
        if isinstance(item, str) and not item.strip():
            continue
        exported_type = ExportedType.from_value(item)
        if exported_type not in result:
            result.append(exported_type)
    return result
