from .ids import new_provider_id, new_uuid
from .mime import (
    DEFAULT_MIME,
    GENERIC_FOLDER_MIME,
    GOOGLE_APP_MIMES,
    GOOGLE_FOLDER_MIME,
    guess_mime_type,
    is_folder_mime,
    is_google_app,
    is_google_download_disallowed,
)
from .paths import ROOT, is_under, join_path, normalize_path, parent_path, split_path
from .time import EPOCH, as_utc, normalize_dt, now_utc, parse_rfc3339, parse_rfc3339_or_epoch

__all__ = [
    "new_uuid",
    "new_provider_id",
    "DEFAULT_MIME",
    "GENERIC_FOLDER_MIME",
    "GOOGLE_APP_MIMES",
    "GOOGLE_FOLDER_MIME",
    "guess_mime_type",
    "is_folder_mime",
    "is_google_app",
    "is_google_download_disallowed",
    "ROOT",
    "normalize_path",
    "split_path",
    "join_path",
    "parent_path",
    "is_under",
    "EPOCH",
    "now_utc",
    "parse_rfc3339",
    "parse_rfc3339_or_epoch",
    "as_utc",
    "normalize_dt",
]
