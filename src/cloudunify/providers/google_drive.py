"""Google Drive adapter for the CloudProvider contract."""

from __future__ import annotations

import io
import json
import logging
import threading
from typing import Any, Callable, Optional, TypeVar

import httplib2
from google.oauth2.credentials import Credentials
from google_auth_httplib2 import AuthorizedHttp
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from googleapiclient.http import MediaIoBaseDownload, MediaIoBaseUpload, set_user_agent

from cloudunify.errors import (
    ApiError,
    HttpErrorInfo,
    InvalidArgumentError,
    NetworkError,
    NotFoundError,
    PathNotFoundError,
    map_http_error,
)
from cloudunify.models import AccountInfo, ProviderType, StorageInfo, UnifiedFile
from cloudunify.util.mime import (
    GOOGLE_FOLDER_MIME,
    guess_mime_type,
    is_google_download_disallowed,
)
from cloudunify.util.paths import ROOT, join_path, normalize_path, split_path
from cloudunify.util.time import parse_rfc3339_or_epoch

from .base import CloudProvider
from .google_fields import (
    ABOUT_QUOTA_FIELDS,
    ABOUT_USER_FIELDS,
    FILE_FIELDS,
    LIST_FIELDS,
    PARENT_FIELDS,
)
from .retry import RetryPolicy, call_with_retry

logger = logging.getLogger(__name__)

T = TypeVar("T")


class GoogleDriveProvider(CloudProvider):
    """
    Drive v3 adapter.

    Notes:
        - Paths are resolved by walking folder-id chains from "root".
        - Resolved folder ids are memoized per path and forgotten on any
          mutation, since moves and renames change the chain.
        - The Drive `service` object is not thread-safe; requests are
          serialized per adapter. Fan-out parallelism is across providers.
    """

    TYPE_TAG = ProviderType.GOOGLE_DRIVE
    DISPLAY_NAME = "Google Drive"
    DEFAULT_SCOPES: tuple[str, ...] = ("https://www.googleapis.com/auth/drive",)
    ROOT_ID = "root"

    def __init__(
        self,
        provider_id: str,
        *,
        name: Optional[str] = None,
        supports_all_drives: bool = True,
        retry_policy: Optional[RetryPolicy] = None,
        application_name: Optional[str] = None,
    ) -> None:
        super().__init__(provider_id, name=name)
        self._supports_all_drives = supports_all_drives
        self._application_name = application_name
        self._retry_policy = retry_policy or RetryPolicy()
        self._service: Any = None
        self._user_email = ""
        self._folder_ids: dict[str, str] = {}
        self._request_lock = threading.RLock()

    @classmethod
    def from_service(
        cls,
        provider_id: str,
        service: Any,
        *,
        name: Optional[str] = None,
        supports_all_drives: bool = True,
        retry_policy: Optional[RetryPolicy] = None,
    ) -> "GoogleDriveProvider":
        """Create a connected adapter from a pre-built Drive service (useful for tests)."""
        obj = cls(
            provider_id,
            name=name,
            supports_all_drives=supports_all_drives,
            retry_policy=retry_policy,
        )
        obj._service = service
        return obj

    # ----------------------------
    # Connection
    # ----------------------------
    @property
    def is_connected(self) -> bool:
        return self._service is not None

    def connect(self, credential: str) -> bool:
        try:
            creds = Credentials(token=credential, scopes=list(self.DEFAULT_SCOPES))
            service = self._build_service(creds)
            about = service.about().get(fields=ABOUT_USER_FIELDS).execute()
        except Exception as exc:
            logger.error("Error connecting to Google Drive (%s): %s", self.id, exc)
            return False

        self._service = service
        self._user_email = (about.get("user") or {}).get("emailAddress", "") or ""
        self._folder_ids.clear()
        logger.info("Connected Google Drive provider %s (%s)", self.id, self._user_email)
        return True

    def disconnect(self) -> None:
        self._service = None
        self._user_email = ""
        self._folder_ids.clear()

    def _build_service(self, creds: Credentials) -> Any:
        if not self._application_name:
            return build("drive", "v3", credentials=creds, cache_discovery=False)
        http = set_user_agent(httplib2.Http(), self._application_name)
        return build("drive", "v3", http=AuthorizedHttp(creds, http=http), cache_discovery=False)

    # ----------------------------
    # Public API
    # ----------------------------
    def list_files(self, path: str = "/") -> list[UnifiedFile]:
        self._require_connected()
        folder_path = normalize_path(path)
        folder_id = self._resolve_folder_id(folder_path)

        q = f"'{folder_id}' in parents and trashed=false"
        results: list[UnifiedFile] = []
        for data in self._find_by_query(q):
            child_path = join_path(folder_path, data.get("name", ""))
            if data.get("mimeType") == GOOGLE_FOLDER_MIME and isinstance(data.get("id"), str):
                self._folder_ids[child_path] = data["id"]
            results.append(self._to_unified(data, child_path))
        return results

    def get_file(self, file_id: str) -> Optional[UnifiedFile]:
        self._require_connected()
        try:
            data = self._get_raw(file_id, FILE_FIELDS)
        except NotFoundError:
            return None
        return self._to_unified(data, self._path_of(data))

    def download_file(self, file_id: str) -> bytes:
        self._require_connected()
        info = self._get_raw(file_id, "id,mimeType")
        mime_type = info.get("mimeType", "")
        if is_google_download_disallowed(mime_type):
            raise InvalidArgumentError(
                "Folders and Google Docs types cannot be downloaded",
                details={"mime_type": mime_type, "file_id": file_id},
            )

        req = self._service.files().get_media(
            fileId=file_id,
            **self._common_get_kwargs(),
        )
        buffer = io.BytesIO()
        downloader = MediaIoBaseDownload(buffer, req)
        done = False
        while not done:
            _, done = self._execute(downloader.next_chunk)
        return buffer.getvalue()

    def upload_file(self, content: bytes, name: str, path: str) -> UnifiedFile:
        self._require_connected()
        if not name:
            raise InvalidArgumentError("name must be a non-empty string")

        folder_path = normalize_path(path)
        parent_id = self._resolve_folder_id(folder_path)
        media = MediaIoBaseUpload(
            io.BytesIO(content),
            mimetype=guess_mime_type(name),
            resumable=True,
        )
        body = {"name": name, "parents": [parent_id]}
        req = self._service.files().create(
            body=body,
            media_body=media,
            fields=FILE_FIELDS,
            **self._common_write_kwargs(),
        )
        data = self._execute(req.execute)
        return self._to_unified(data, join_path(folder_path, data.get("name", name)))

    def delete_file(self, file_id: str) -> None:
        self._require_connected()
        req = self._service.files().delete(
            fileId=file_id,
            **self._common_write_kwargs(),
        )
        self._execute(req.execute)
        self._folder_ids.clear()

    def move_file(self, file_id: str, new_path: str) -> UnifiedFile:
        """Replace all parents of file_id with the folder at new_path."""
        self._require_connected()
        folder_path = normalize_path(new_path)
        new_parent_id = self._resolve_folder_id(folder_path)

        current = self._get_raw(file_id, "parents")
        old_parents = current.get("parents", [])
        remove_parents = ",".join(old_parents) if old_parents else ""

        req = self._service.files().update(
            fileId=file_id,
            addParents=new_parent_id,
            removeParents=remove_parents or None,
            fields=FILE_FIELDS,
            **self._common_write_kwargs(),
        )
        data = self._execute(req.execute)
        self._folder_ids.clear()
        return self._to_unified(data, join_path(folder_path, data.get("name", "")))

    def copy_file(self, file_id: str, new_path: str) -> UnifiedFile:
        self._require_connected()
        folder_path = normalize_path(new_path)
        new_parent_id = self._resolve_folder_id(folder_path)

        req = self._service.files().copy(
            fileId=file_id,
            body={"parents": [new_parent_id]},
            fields=FILE_FIELDS,
            **self._common_write_kwargs(),
        )
        data = self._execute(req.execute)
        return self._to_unified(data, join_path(folder_path, data.get("name", "")))

    def rename_file(self, file_id: str, new_name: str) -> UnifiedFile:
        self._require_connected()
        if not new_name:
            raise InvalidArgumentError("new_name must be a non-empty string")

        req = self._service.files().update(
            fileId=file_id,
            body={"name": new_name},
            fields=FILE_FIELDS,
            **self._common_write_kwargs(),
        )
        data = self._execute(req.execute)
        self._folder_ids.clear()
        return self._to_unified(data, self._path_of(data))

    def get_storage_info(self) -> StorageInfo:
        self._require_connected()
        about = self._execute(self._service.about().get(fields=ABOUT_QUOTA_FIELDS).execute)
        quota = about.get("storageQuota") or {}
        user = about.get("user") or {}
        return StorageInfo(
            provider_id=self.id,
            provider_name=self.name,
            user_email=user.get("emailAddress", "") or self._user_email,
            # "limit" is absent for unlimited accounts.
            total_space=_to_int(quota.get("limit")),
            used_space=_to_int(quota.get("usage")),
        )

    def get_account_info(self) -> Optional[AccountInfo]:
        self._require_connected()
        about = self._execute(self._service.about().get(fields=ABOUT_USER_FIELDS).execute)
        user = about.get("user")
        if not user:
            return None
        return AccountInfo(
            display_name=user.get("displayName"),
            email=user.get("emailAddress"),
        )

    # ----------------------------
    # Internals
    # ----------------------------
    def _common_get_kwargs(self) -> dict[str, Any]:
        if not self._supports_all_drives:
            return {}
        return {"supportsAllDrives": True}

    def _common_list_kwargs(self) -> dict[str, Any]:
        if not self._supports_all_drives:
            return {}
        return {"supportsAllDrives": True, "includeItemsFromAllDrives": True}

    def _common_write_kwargs(self) -> dict[str, Any]:
        if not self._supports_all_drives:
            return {}
        return {"supportsAllDrives": True}

    def _get_raw(self, file_id: str, fields: str) -> dict[str, Any]:
        req = self._service.files().get(
            fileId=file_id,
            fields=fields,
            **self._common_get_kwargs(),
        )
        return self._execute(req.execute)

    def _resolve_folder_id(self, path: str) -> str:
        folder_path = normalize_path(path)
        if folder_path == ROOT:
            return self.ROOT_ID

        cached = self._folder_ids.get(folder_path)
        if cached:
            return cached

        parent_id = self.ROOT_ID
        walked = ROOT
        for segment in split_path(folder_path):
            walked = join_path(walked, segment)
            known = self._folder_ids.get(walked)
            if known:
                parent_id = known
                continue

            q = (
                f"name='{_escape_query(segment)}' and '{parent_id}' in parents "
                f"and mimeType='{GOOGLE_FOLDER_MIME}' and trashed=false"
            )
            matches = self._find_by_query(q)
            if not matches:
                raise PathNotFoundError(
                    "Folder not found",
                    details={"path": folder_path, "missing": walked, "provider_id": self.id},
                )
            parent_id = matches[0]["id"]
            self._folder_ids[walked] = parent_id

        return parent_id

    def _path_of(self, data: dict[str, Any]) -> str:
        """Build an item's path by walking its parent chain up to the drive root."""
        names = [data.get("name", "")]
        parents = data.get("parents") or []
        seen: set[str] = set()

        while parents:
            parent_id = parents[0]
            if parent_id in seen:
                break
            seen.add(parent_id)

            parent = self._get_raw(parent_id, PARENT_FIELDS)
            grand_parents = parent.get("parents") or []
            if not grand_parents:
                # The drive root itself is not part of the path.
                break
            names.append(parent.get("name", ""))
            parents = grand_parents

        return normalize_path("/".join(reversed(names)))

    def _find_by_query(self, q: str) -> list[dict[str, Any]]:
        all_files: list[dict[str, Any]] = []
        page_token: Optional[str] = None

        while True:
            req = self._service.files().list(
                q=q,
                fields=LIST_FIELDS,
                pageToken=page_token,
                **self._common_list_kwargs(),
            )
            data = self._execute(req.execute)
            all_files.extend(data.get("files", []))

            page_token = data.get("nextPageToken")
            if not page_token:
                break

        return all_files

    def _to_unified(self, data: dict[str, Any], path: str) -> UnifiedFile:
        mime_type = data.get("mimeType", "")
        mime_type = mime_type if isinstance(mime_type, str) else ""
        name = data.get("name", "")
        return UnifiedFile(
            id=data.get("id", "") if isinstance(data.get("id"), str) else "",
            name=name if isinstance(name, str) else "",
            path=path,
            size=_to_int(data.get("size")),
            created_at=parse_rfc3339_or_epoch(data.get("createdTime")),
            modified_at=parse_rfc3339_or_epoch(data.get("modifiedTime")),
            mime_type=mime_type,
            is_folder=mime_type == GOOGLE_FOLDER_MIME,
            provider_id=self.id,
            provider_name=self.name,
            web_view_link=data.get("webViewLink"),
            thumbnail_url=data.get("thumbnailLink"),
        )

    def _execute(self, func: Callable[[], T]) -> T:
        def locked() -> T:
            with self._request_lock:
                return func()

        return call_with_retry(locked, self._retry_policy, _map_exception)


def _map_exception(exc: Exception) -> Exception:
    if isinstance(exc, HttpError):
        info = _http_error_to_info(exc)
        return map_http_error(info, cause=exc)

    if isinstance(exc, (OSError, TimeoutError)):
        return NetworkError("Network error", cause=exc)

    return ApiError("Drive API error", cause=exc)


def _escape_query(value: str) -> str:
    return value.replace("\\", "\\\\").replace("'", "\\'")


def _to_int(value: Any) -> int:
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.isdigit():
        return int(value)
    return 0


def _http_error_to_info(exc: Any) -> HttpErrorInfo:
    status_code = getattr(getattr(exc, "resp", None), "status", None)
    reason = getattr(getattr(exc, "resp", None), "reason", None)

    message = None
    details: dict[str, Any] = {}

    content = getattr(exc, "content", None)
    if isinstance(content, (bytes, bytearray)):
        try:
            payload = json.loads(content.decode("utf-8"))
            err = payload.get("error", {})
            message = err.get("message") or None
            errors = err.get("errors") or []
            if errors and isinstance(errors, list) and isinstance(errors[0], dict):
                details["domain"] = errors[0].get("domain")
                details["reason_detail"] = errors[0].get("reason")
                if isinstance(errors[0].get("reason"), str):
                    reason = errors[0]["reason"]
        except (ValueError, AttributeError):
            pass

    if not isinstance(status_code, int):
        status_code = 0

    return HttpErrorInfo(
        status_code=status_code,
        reason=reason if isinstance(reason, str) else None,
        message=message,
        details=details or None,
    )
