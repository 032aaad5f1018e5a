"""Google OAuth credential loading, refresh and authorization."""

from __future__ import annotations

import logging
import os
from typing import Sequence

from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow

from cloudunify.errors import AuthError, InvalidArgumentError

from .auth_info import AuthInfo

logger = logging.getLogger(__name__)


class OAuthClient:
    """Create and persist OAuth credentials for one token file."""

    def __init__(self, auth_info: AuthInfo) -> None:
        if auth_info.kind != "oauth":
            raise InvalidArgumentError("OAuthClient requires AuthInfo(kind='oauth')")
        self._auth_info = auth_info

    @property
    def auth_info(self) -> AuthInfo:
        return self._auth_info

    def get_credentials(
        self,
        scopes: Sequence[str],
        ensure_valid: bool = True,
        *,
        interactive: bool = True,
    ) -> Credentials:
        """
        Return OAuth credentials for the given scopes.

        Args:
            scopes: OAuth scopes.
            ensure_valid: If True, refresh credentials when possible.
            interactive: If False, never start the local-server flow; a
                missing or unusable token raises AuthError instead.

        Raises:
            AuthError: on load/refresh/flow failures.
            InvalidArgumentError: if scopes is invalid.
        """
        if not scopes or not all(isinstance(s, str) and s.strip() for s in scopes):
            raise InvalidArgumentError("scopes must be a non-empty sequence of strings")

        token_file = self._auth_info.token_file

        if os.path.exists(token_file):
            try:
                creds = Credentials.from_authorized_user_file(token_file, scopes=list(scopes))
            except Exception as exc:
                raise AuthError(
                    "Failed to load token_file",
                    details={"token_file": token_file},
                    cause=exc,
                ) from exc

            if not ensure_valid:
                return creds

            if not creds.valid and creds.refresh_token:
                try:
                    creds.refresh(Request())
                    self._save_credentials(creds)
                except AuthError:
                    raise
                except Exception as exc:
                    raise AuthError(
                        "Failed to refresh OAuth credentials",
                        details={"token_file": token_file},
                        cause=exc,
                    ) from exc
                logger.debug("Refreshed OAuth credentials in %s", token_file)

            if creds.valid:
                return creds

        if not interactive:
            raise AuthError(
                "No usable OAuth token and interactive authorization is disabled",
                details={"token_file": token_file},
            )

        # No token, or token could not be validated/refreshed -> run OAuth flow.
        client_secrets = self._auth_info.client_secrets_file
        try:
            flow = InstalledAppFlow.from_client_secrets_file(client_secrets, scopes=list(scopes))
            creds = flow.run_local_server(port=0)
        except Exception as exc:
            raise AuthError(
                "OAuth authorization flow failed",
                details={
                    "client_secrets_file": client_secrets,
                    "token_file": token_file,
                },
                cause=exc,
            ) from exc
        self._save_credentials(creds)
        return creds

    def revoke(self) -> bool:
        """Delete the stored token file. Returns False if there was none."""
        token_file = self._auth_info.token_file
        try:
            os.remove(token_file)
        except FileNotFoundError:
            return False
        except OSError as exc:
            raise AuthError(
                "Failed to delete OAuth token file",
                details={"token_file": token_file},
                cause=exc,
            ) from exc
        logger.info("Removed OAuth token file %s", token_file)
        return True

    def _save_credentials(self, creds: Credentials) -> None:
        token_file = self._auth_info.token_file
        token_dir = os.path.dirname(token_file)
        if token_dir:
            os.makedirs(token_dir, exist_ok=True)

        try:
            with open(token_file, "w", encoding="utf-8") as f:
                f.write(creds.to_json())
        except Exception as exc:
            raise AuthError(
                "Failed to save OAuth token file",
                details={"token_file": token_file},
                cause=exc,
            ) from exc
