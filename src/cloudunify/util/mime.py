from __future__ import annotations

import mimetypes

GOOGLE_FOLDER_MIME: str = "application/vnd.google-apps.folder"
# Backends without a folder MIME type (OneDrive) report this one.
GENERIC_FOLDER_MIME: str = "inode/directory"
DEFAULT_MIME: str = "application/octet-stream"

GOOGLE_APP_MIMES: set[str] = {
    "application/vnd.google-apps.document",
    "application/vnd.google-apps.spreadsheet",
    "application/vnd.google-apps.presentation",
    "application/vnd.google-apps.drawing",
    "application/vnd.google-apps.form",
    "application/vnd.google-apps.script",
    "application/vnd.google-apps.site",
}


def is_folder_mime(mime_type: str) -> bool:
    return mime_type in (GOOGLE_FOLDER_MIME, GENERIC_FOLDER_MIME)


def is_google_app(mime_type: str) -> bool:
    """
    Returns True if the MIME type is a Google 'apps' type.

    Note: Google apps generally start with 'application/vnd.google-apps.', so
    types missing from GOOGLE_APP_MIMES are still recognized.
    """
    if mime_type in GOOGLE_APP_MIMES:
        return True
    return mime_type.startswith("application/vnd.google-apps.")


def is_google_download_disallowed(mime_type: str) -> bool:
    """
    Google Docs/Sheets/Slides (and other Google-apps types) are not downloadable
    via standard media download; folders are not downloadable either.
    """
    return mime_type == GOOGLE_FOLDER_MIME or is_google_app(mime_type)


def guess_mime_type(name: str) -> str:
    """Infer a MIME type from a file name's extension."""
    guessed, _ = mimetypes.guess_type(name, strict=False)
    return guessed or DEFAULT_MIME
