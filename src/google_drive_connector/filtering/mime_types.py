"""Google Drive MIME type constants and export helpers."""

from typing import Dict, Optional

# Google Workspace MIME type constants
GOOGLE_APPS_PREFIX = "application/vnd.google-apps."
GOOGLE_FOLDER = "application/vnd.google-apps.folder"
GOOGLE_DOC = "application/vnd.google-apps.document"
GOOGLE_SHEET = "application/vnd.google-apps.spreadsheet"
GOOGLE_DRAWING = "application/vnd.google-apps.drawing"
GOOGLE_SLIDE = "application/vnd.google-apps.presentation"
GOOGLE_SCRIPT = "application/vnd.google-apps.script"

# Apps Script projects can only be exported as JSON
APPS_SCRIPT_EXPORT_FORMAT = "application/vnd.google-apps.script+json"

# Default export formats for native Google files
DEFAULT_EXPORT_FORMATS: Dict[str, str] = {
    GOOGLE_DOC: "text/plain",
    GOOGLE_SHEET: "text/csv",
    GOOGLE_DRAWING: "image/svg+xml",
    GOOGLE_SLIDE: "text/plain",
    GOOGLE_SCRIPT: APPS_SCRIPT_EXPORT_FORMAT,
}


def is_folder(mime_type: str) -> bool:
    """
    Check if item is a folder.

    Args:
        mime_type: MIME type string

    Returns:
        True if the item is a folder, False otherwise
    """
    return mime_type == GOOGLE_FOLDER


def is_google_native(mime_type: Optional[str]) -> bool:
    """Check whether a file is a native Google file that must be exported."""
    return bool(mime_type) and mime_type.startswith(GOOGLE_APPS_PREFIX)


def get_export_format(
    mime_type: str,
    overrides: Optional[Dict[str, str]] = None,
) -> Optional[str]:
    """
    Get export format for a native Google file.

    Args:
        mime_type: MIME type of the native file
        overrides: Configured export formats keyed by native MIME type

    Returns:
        Export MIME type if the native type is exportable, None otherwise
    """
    if mime_type == GOOGLE_SCRIPT:
        return APPS_SCRIPT_EXPORT_FORMAT
    if overrides and overrides.get(mime_type):
        return overrides[mime_type]
    return DEFAULT_EXPORT_FORMATS.get(mime_type)
