"""Per-user authenticators producing access tokens for provider adapters."""

from __future__ import annotations

import json
import logging
import os
import re
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional, Sequence

import requests

from cloudunify.errors import AuthError, InvalidArgumentError

from .auth_info import AuthInfo
from .oauth_client import OAuthClient

logger = logging.getLogger(__name__)

_SAFE_USER_ID = re.compile(r"[^A-Za-z0-9_.-]")


class Authenticator(ABC):
    """Turns a user id into a bearer access token for one provider type."""

    @abstractmethod
    def authenticate(self, user_id: str) -> str:
        """
        Return a currently valid access token for user_id.

        Raises:
            AuthError: no usable credentials for user_id.
        """
        raise NotImplementedError

    @abstractmethod
    def revoke(self, user_id: str) -> None:
        """Forget the stored credentials of user_id (no-op if none)."""
        raise NotImplementedError


def token_file_name(prefix: str, user_id: str) -> str:
    """File name for user_id's token; unsafe characters become underscores."""
    if not isinstance(user_id, str) or not user_id.strip():
        raise InvalidArgumentError("user_id must be a non-empty string")
    return f"{prefix}_{_SAFE_USER_ID.sub('_', user_id)}.json"


class GoogleAuthenticator(Authenticator):
    """Google OAuth with one authorized-user token file per user under data_dir."""

    DEFAULT_SCOPES: tuple[str, ...] = ("https://www.googleapis.com/auth/drive",)

    def __init__(
        self,
        client_secrets_file: str,
        data_dir: str,
        *,
        scopes: Optional[Sequence[str]] = None,
        interactive: bool = True,
    ) -> None:
        self._client_secrets_file = client_secrets_file
        self._data_dir = data_dir
        self._scopes = list(scopes) if scopes else list(self.DEFAULT_SCOPES)
        self._interactive = interactive

    def token_file(self, user_id: str) -> str:
        return os.path.join(self._data_dir, token_file_name("google_token", user_id))

    def authenticate(self, user_id: str) -> str:
        client = self._client_for(user_id)
        creds = client.get_credentials(self._scopes, interactive=self._interactive)
        if not creds.token:
            raise AuthError(
                "Google credentials carry no access token",
                details={"user_id": user_id},
            )
        logger.debug("Authenticated Google user %s", user_id)
        return creds.token

    def revoke(self, user_id: str) -> None:
        self._client_for(user_id).revoke()

    def _client_for(self, user_id: str) -> OAuthClient:
        return OAuthClient(AuthInfo.for_files(self._client_secrets_file, self.token_file(user_id)))


class OneDriveAuthenticator(Authenticator):
    """
    Microsoft identity platform refresh-token exchange.

    Each user's token file holds {"refresh_token": "..."}; it is written by
    whatever performed the interactive authorization. authenticate() trades
    the refresh token for an access token and stores a rotated refresh token
    when the endpoint returns one.
    """

    TOKEN_URL = "https://login.microsoftonline.com/common/oauth2/v2.0/token"
    DEFAULT_SCOPES: tuple[str, ...] = ("Files.ReadWrite.All", "User.Read", "offline_access")
    REQUEST_TIMEOUT = 30

    def __init__(
        self,
        client_id: str,
        data_dir: str,
        *,
        client_secret: Optional[str] = None,
        scopes: Optional[Sequence[str]] = None,
        session_factory: Callable[[], requests.Session] = requests.Session,
    ) -> None:
        if not isinstance(client_id, str) or not client_id.strip():
            raise InvalidArgumentError("client_id must be a non-empty string")
        self._client_id = client_id
        self._client_secret = client_secret
        self._data_dir = data_dir
        self._scopes = list(scopes) if scopes else list(self.DEFAULT_SCOPES)
        self._session_factory = session_factory

    def token_file(self, user_id: str) -> str:
        return os.path.join(self._data_dir, token_file_name("onedrive_token", user_id))

    def authenticate(self, user_id: str) -> str:
        token_file = self.token_file(user_id)
        stored = self._load(token_file)
        refresh_token = stored.get("refresh_token")
        if not isinstance(refresh_token, str) or not refresh_token:
            raise AuthError("Token file has no refresh_token", details={"token_file": token_file})

        payload = {
            "client_id": self._client_id,
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
            "scope": " ".join(self._scopes),
        }
        if self._client_secret:
            payload["client_secret"] = self._client_secret

        try:
            with self._session_factory() as session:
                response = session.post(self.TOKEN_URL, data=payload, timeout=self.REQUEST_TIMEOUT)
                response.raise_for_status()
                body = response.json()
        except requests.RequestException as exc:
            raise AuthError(
                "Failed to refresh OneDrive access token",
                details={"user_id": user_id},
                cause=exc,
            ) from exc
        except ValueError as exc:
            raise AuthError(
                "Token endpoint returned an invalid response",
                details={"user_id": user_id},
                cause=exc,
            ) from exc

        access_token = body.get("access_token")
        if not isinstance(access_token, str) or not access_token:
            raise AuthError("Token endpoint returned no access_token", details={"user_id": user_id})

        rotated = body.get("refresh_token")
        if isinstance(rotated, str) and rotated and rotated != refresh_token:
            self._save(token_file, {**stored, "refresh_token": rotated})

        logger.debug("Authenticated OneDrive user %s", user_id)
        return access_token

    def revoke(self, user_id: str) -> None:
        token_file = self.token_file(user_id)
        try:
            os.remove(token_file)
        except FileNotFoundError:
            return
        except OSError as exc:
            raise AuthError(
                "Failed to delete OneDrive token file",
                details={"token_file": token_file},
                cause=exc,
            ) from exc
        logger.info("Removed OneDrive token file %s", token_file)

    def _load(self, token_file: str) -> dict[str, Any]:
        if not os.path.exists(token_file):
            raise AuthError(
                "No stored OneDrive token; authorize the user first",
                details={"token_file": token_file},
            )
        try:
            with open(token_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as exc:
            raise AuthError(
                "Failed to load token_file",
                details={"token_file": token_file},
                cause=exc,
            ) from exc
        if not isinstance(data, dict):
            raise AuthError("token_file must hold a JSON object", details={"token_file": token_file})
        return data

    def _save(self, token_file: str, data: dict[str, Any]) -> None:
        token_dir = os.path.dirname(token_file)
        if token_dir:
            os.makedirs(token_dir, exist_ok=True)
        try:
            with open(token_file, "w", encoding="utf-8") as f:
                json.dump(data, f)
        except OSError as exc:
            raise AuthError(
                "Failed to save token_file",
                details={"token_file": token_file},
                cause=exc,
            ) from exc
