"""Public auth exports for cloudunify."""

from __future__ import annotations

from .auth_info import AuthInfo
from .authenticator import (
    Authenticator,
    GoogleAuthenticator,
    OneDriveAuthenticator,
    token_file_name,
)
from .oauth_client import OAuthClient

__all__ = [
    "AuthInfo",
    "Authenticator",
    "GoogleAuthenticator",
    "OAuthClient",
    "OneDriveAuthenticator",
    "token_file_name",
]
