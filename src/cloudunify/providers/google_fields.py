"""Field definitions for Google Drive API responses."""

from __future__ import annotations

FILE_FIELDS: str = (
    "id,"
    "name,"
    "mimeType,"
    "parents,"
    "trashed,"
    "modifiedTime,"
    "createdTime,"
    "size,"
    "webViewLink,"
    "thumbnailLink"
)

LIST_FIELDS: str = f"nextPageToken,files({FILE_FIELDS})"

PARENT_FIELDS: str = "id,name,parents"

ABOUT_USER_FIELDS: str = "user(displayName,emailAddress)"

ABOUT_QUOTA_FIELDS: str = "storageQuota(limit,usage),user(displayName,emailAddress)"
