"""OneDrive adapter (Microsoft Graph v1.0) for the CloudProvider contract."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Optional
from urllib.parse import quote, unquote

import requests

from cloudunify.errors import (
    ApiError,
    CloudUnifyError,
    HttpErrorInfo,
    InvalidArgumentError,
    NetworkError,
    NotFoundError,
    PathNotFoundError,
    map_http_error,
)
from cloudunify.models import AccountInfo, ProviderType, StorageInfo, UnifiedFile
from cloudunify.util.mime import GENERIC_FOLDER_MIME, guess_mime_type
from cloudunify.util.paths import ROOT, join_path, normalize_path
from cloudunify.util.time import parse_rfc3339_or_epoch

from .base import CloudProvider
from .retry import RetryPolicy, call_with_retry

logger = logging.getLogger(__name__)

_DRIVE_ROOT_PREFIX = "/drive/root:"


class OneDriveProvider(CloudProvider):
    """
    Graph API adapter.

    Items are addressed by path ("root:/a/b:") for listings and by item id
    for everything else. Uploads go to a resolved parent folder so a missing
    folder raises PathNotFoundError instead of being created implicitly.
    """

    TYPE_TAG = ProviderType.ONEDRIVE
    DISPLAY_NAME = "OneDrive"
    API_BASE_URL = "https://graph.microsoft.com/v1.0"
    REQUEST_TIMEOUT = 30
    PAGE_SIZE = 200
    COPY_POLL_INTERVAL_SEC = 1.0
    COPY_POLL_MAX_ATTEMPTS = 30

    def __init__(
        self,
        provider_id: str,
        *,
        name: Optional[str] = None,
        session_factory: Callable[[], requests.Session] = requests.Session,
        retry_policy: Optional[RetryPolicy] = None,
        application_name: Optional[str] = None,
    ) -> None:
        super().__init__(provider_id, name=name)
        self._session_factory = session_factory
        self._application_name = application_name
        self._retry_policy = retry_policy or RetryPolicy()
        self._session: Optional[requests.Session] = None
        self._user_email = ""

    @classmethod
    def from_session(
        cls,
        provider_id: str,
        session: requests.Session,
        *,
        name: Optional[str] = None,
        session_factory: Callable[[], requests.Session] = requests.Session,
        retry_policy: Optional[RetryPolicy] = None,
    ) -> "OneDriveProvider":
        """Create a connected adapter around an authorized session (useful for tests)."""
        obj = cls(
            provider_id,
            name=name,
            session_factory=session_factory,
            retry_policy=retry_policy,
        )
        obj._session = session
        return obj

    # ----------------------------
    # Connection
    # ----------------------------
    @property
    def is_connected(self) -> bool:
        return self._session is not None

    def connect(self, credential: str) -> bool:
        session = self._new_session()
        session.headers.update({"Authorization": f"Bearer {credential}"})
        try:
            me = self._request("GET", "me", session=session).json()
        except Exception as exc:
            logger.error("Error connecting to OneDrive (%s): %s", self.id, exc)
            session.close()
            return False

        self._session = session
        self._user_email = me.get("mail") or me.get("userPrincipalName") or ""
        logger.info("Connected OneDrive provider %s (%s)", self.id, self._user_email)
        return True

    def disconnect(self) -> None:
        if self._session is not None:
            self._session.close()
        self._session = None
        self._user_email = ""

    def _new_session(self) -> requests.Session:
        session = self._session_factory()
        if self._application_name:
            session.headers.update({"User-Agent": self._application_name})
        return session

    # ----------------------------
    # Public API
    # ----------------------------
    def list_files(self, path: str = "/") -> list[UnifiedFile]:
        self._require_connected()
        folder_path = normalize_path(path)
        url: Optional[str] = _path_endpoint(folder_path, "children")
        params: Optional[dict[str, Any]] = {"$top": self.PAGE_SIZE}

        results: list[UnifiedFile] = []
        while url:
            try:
                data = self._request("GET", url, params=params).json()
            except NotFoundError as exc:
                raise PathNotFoundError(
                    "Folder not found",
                    details={"path": folder_path, "provider_id": self.id},
                    cause=exc,
                ) from exc
            for item in data.get("value", []):
                results.append(self._to_unified(item, join_path(folder_path, item.get("name", ""))))
            url = data.get("@odata.nextLink")
            # nextLink already carries the query string.
            params = None
        return results

    def get_file(self, file_id: str) -> Optional[UnifiedFile]:
        self._require_connected()
        try:
            item = self._request("GET", f"me/drive/items/{file_id}").json()
        except NotFoundError:
            return None
        return self._to_unified(item)

    def download_file(self, file_id: str) -> bytes:
        self._require_connected()
        return self._request("GET", f"me/drive/items/{file_id}/content").content

    def upload_file(self, content: bytes, name: str, path: str) -> UnifiedFile:
        self._require_connected()
        if not name:
            raise InvalidArgumentError("name must be a non-empty string")

        folder_path = normalize_path(path)
        parent = self._resolve_folder(folder_path)
        item = self._request(
            "PUT",
            f"me/drive/items/{parent['id']}:/{quote(name)}:/content",
            data=content,
            headers={"Content-Type": guess_mime_type(name)},
        ).json()
        return self._to_unified(item, join_path(folder_path, item.get("name", name)))

    def delete_file(self, file_id: str) -> None:
        self._require_connected()
        self._request("DELETE", f"me/drive/items/{file_id}")

    def move_file(self, file_id: str, new_path: str) -> UnifiedFile:
        self._require_connected()
        folder_path = normalize_path(new_path)
        parent = self._resolve_folder(folder_path)
        item = self._request(
            "PATCH",
            f"me/drive/items/{file_id}",
            json={"parentReference": {"id": parent["id"]}},
        ).json()
        return self._to_unified(item, join_path(folder_path, item.get("name", "")))

    def copy_file(self, file_id: str, new_path: str) -> UnifiedFile:
        """Copy via Graph's asynchronous copy, polling the monitor URL until done."""
        self._require_connected()
        folder_path = normalize_path(new_path)
        parent = self._resolve_folder(folder_path)
        parent_ref: dict[str, Any] = {"id": parent["id"]}
        drive_id = (parent.get("parentReference") or {}).get("driveId")
        if drive_id:
            parent_ref["driveId"] = drive_id

        resp = self._request(
            "POST",
            f"me/drive/items/{file_id}/copy",
            json={"parentReference": parent_ref},
        )
        monitor_url = resp.headers.get("Location")
        if not monitor_url:
            raise ApiError("Copy did not return a monitor URL", details={"file_id": file_id})

        new_id = self._wait_for_copy(monitor_url)
        copied = self.get_file(new_id)
        if copied is None:
            raise ApiError("Copied item not found", details={"file_id": new_id})
        return copied

    def rename_file(self, file_id: str, new_name: str) -> UnifiedFile:
        self._require_connected()
        if not new_name:
            raise InvalidArgumentError("new_name must be a non-empty string")
        item = self._request(
            "PATCH",
            f"me/drive/items/{file_id}",
            json={"name": new_name},
        ).json()
        return self._to_unified(item)

    def get_storage_info(self) -> StorageInfo:
        self._require_connected()
        drive = self._request("GET", "me/drive").json()
        quota = drive.get("quota") or {}
        owner = (drive.get("owner") or {}).get("user") or {}
        return StorageInfo(
            provider_id=self.id,
            provider_name=self.name,
            user_email=owner.get("email") or self._user_email,
            total_space=int(quota.get("total") or 0),
            used_space=int(quota.get("used") or 0),
        )

    def get_account_info(self) -> Optional[AccountInfo]:
        self._require_connected()
        me = self._request("GET", "me").json()
        if not me:
            return None
        return AccountInfo(
            display_name=me.get("displayName"),
            email=me.get("mail") or me.get("userPrincipalName"),
        )

    # ----------------------------
    # Internals
    # ----------------------------
    def _resolve_folder(self, path: str) -> dict[str, Any]:
        try:
            item = self._request("GET", _path_endpoint(path)).json()
        except NotFoundError as exc:
            raise PathNotFoundError(
                "Folder not found",
                details={"path": path, "provider_id": self.id},
                cause=exc,
            ) from exc
        if "folder" not in item and "root" not in item:
            raise PathNotFoundError(
                "Path is not a folder",
                details={"path": path, "provider_id": self.id},
            )
        return item

    def _wait_for_copy(self, monitor_url: str) -> str:
        # The monitor URL is pre-authenticated; no bearer token is sent.
        with self._new_session() as monitor:
            for _ in range(self.COPY_POLL_MAX_ATTEMPTS):
                status = self._request("GET", monitor_url, session=monitor).json()
                state = status.get("status")
                if state == "completed" and status.get("resourceId"):
                    return str(status["resourceId"])
                if state == "failed":
                    raise ApiError("Copy failed", details={"monitor": status})
                time.sleep(self.COPY_POLL_INTERVAL_SEC)
        raise ApiError("Copy did not complete in time", details={"monitor_url": monitor_url})

    def _to_unified(self, item: dict[str, Any], path: Optional[str] = None) -> UnifiedFile:
        name = item.get("name", "") or ""
        is_folder = "folder" in item
        if is_folder:
            mime_type = GENERIC_FOLDER_MIME
        else:
            mime_type = (item.get("file") or {}).get("mimeType") or guess_mime_type(name)

        if path is None:
            path = join_path(_parent_path_of(item), name)

        return UnifiedFile(
            id=str(item.get("id", "")),
            name=name,
            path=path,
            size=int(item.get("size") or 0),
            created_at=parse_rfc3339_or_epoch(item.get("createdDateTime")),
            modified_at=parse_rfc3339_or_epoch(item.get("lastModifiedDateTime")),
            mime_type=mime_type,
            is_folder=is_folder,
            provider_id=self.id,
            provider_name=self.name,
            web_view_link=item.get("webUrl"),
            thumbnail_url=_thumbnail_of(item),
        )

    def _request(
        self,
        method: str,
        endpoint: str,
        *,
        session: Optional[requests.Session] = None,
        **kwargs: Any,
    ) -> requests.Response:
        use_session = session or self._session
        if use_session is None:
            self._require_connected()
        url = endpoint if endpoint.startswith("http") else f"{self.API_BASE_URL}/{endpoint.lstrip('/')}"

        def send() -> requests.Response:
            response = use_session.request(method, url, timeout=self.REQUEST_TIMEOUT, **kwargs)
            response.raise_for_status()
            return response

        return call_with_retry(send, self._retry_policy, _map_exception)


def _path_endpoint(path: str, suffix: str = "") -> str:
    folder_path = normalize_path(path)
    if folder_path == ROOT:
        return f"me/drive/root/{suffix}" if suffix else "me/drive/root"
    encoded = quote(folder_path)
    return f"me/drive/root:{encoded}:/{suffix}" if suffix else f"me/drive/root:{encoded}"


def _parent_path_of(item: dict[str, Any]) -> str:
    raw = (item.get("parentReference") or {}).get("path") or ""
    raw = unquote(raw)
    marker = raw.find(_DRIVE_ROOT_PREFIX)
    if marker < 0:
        return ROOT
    return normalize_path(raw[marker + len(_DRIVE_ROOT_PREFIX):])


def _thumbnail_of(item: dict[str, Any]) -> Optional[str]:
    thumbnails = item.get("thumbnails") or []
    if thumbnails and isinstance(thumbnails[0], dict):
        medium = thumbnails[0].get("medium") or {}
        url = medium.get("url")
        return url if isinstance(url, str) else None
    return None


def _map_exception(exc: Exception) -> Exception:
    if isinstance(exc, requests.HTTPError) and exc.response is not None:
        return map_http_error(_graph_error_to_info(exc.response), cause=exc)

    if isinstance(exc, (requests.ConnectionError, requests.Timeout)):
        return NetworkError("Network error", cause=exc)

    if isinstance(exc, CloudUnifyError):
        return exc

    return ApiError("Graph API error", cause=exc)


def _graph_error_to_info(response: requests.Response) -> HttpErrorInfo:
    reason = getattr(response, "reason", None)
    message = None
    try:
        payload = response.json()
        err = payload.get("error", {}) if isinstance(payload, dict) else {}
        message = err.get("message") or None
        if isinstance(err.get("code"), str):
            reason = err["code"]
    except ValueError:
        pass

    status_code = response.status_code if isinstance(response.status_code, int) else 0
    return HttpErrorInfo(
        status_code=status_code,
        reason=reason if isinstance(reason, str) else None,
        message=message,
    )
