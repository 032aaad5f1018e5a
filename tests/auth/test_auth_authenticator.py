import json
import tempfile
import unittest
from pathlib import Path
from unittest.mock import MagicMock, Mock

import requests

from cloudunify.auth import GoogleAuthenticator, OneDriveAuthenticator, token_file_name
from cloudunify.errors import AuthError, InvalidArgumentError


class TestTokenFileName(unittest.TestCase):
    def test_unsafe_characters_are_replaced(self) -> None:
        self.assertEqual(token_file_name("google_token", "ann@example.com"), "google_token_ann_example.com.json")
        self.assertEqual(token_file_name("x", "../etc/passwd"), "x_.._etc_passwd.json")

    def test_empty_user_id(self) -> None:
        with self.assertRaises(InvalidArgumentError):
            token_file_name("x", " ")


class TestGoogleAuthenticator(unittest.TestCase):
    def test_returns_stored_access_token(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            auth = GoogleAuthenticator(str(Path(tmp) / "secrets.json"), tmp, interactive=False)
            Path(auth.token_file("ann")).write_text(
                json.dumps(
                    {
                        "token": "access-1",
                        "refresh_token": "refresh-1",
                        "token_uri": "https://oauth2.googleapis.com/token",
                        "client_id": "cid",
                        "client_secret": "secret",
                        "scopes": list(GoogleAuthenticator.DEFAULT_SCOPES),
                        "type": "authorized_user",
                    }
                ),
                encoding="utf-8",
            )

            self.assertEqual(auth.authenticate("ann"), "access-1")

    def test_missing_token_raises_when_not_interactive(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            auth = GoogleAuthenticator(str(Path(tmp) / "secrets.json"), tmp, interactive=False)
            with self.assertRaises(AuthError):
                auth.authenticate("ann")

    def test_revoke_is_noop_without_token(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            auth = GoogleAuthenticator(str(Path(tmp) / "secrets.json"), tmp)
            auth.revoke("ann")
            self.assertFalse(Path(auth.token_file("ann")).exists())


class TestOneDriveAuthenticator(unittest.TestCase):
    def _session(self, response: Mock) -> MagicMock:
        session = MagicMock()
        session.__enter__.return_value = session
        session.post.return_value = response
        return session

    def test_exchanges_refresh_token_and_stores_rotation(self) -> None:
        response = Mock()
        response.json.return_value = {"access_token": "A1", "refresh_token": "R2"}
        session = self._session(response)

        with tempfile.TemporaryDirectory() as tmp:
            auth = OneDriveAuthenticator("client-id", tmp, session_factory=Mock(return_value=session))
            token_file = Path(auth.token_file("ann"))
            token_file.write_text(json.dumps({"refresh_token": "R1"}), encoding="utf-8")

            self.assertEqual(auth.authenticate("ann"), "A1")

            stored = json.loads(token_file.read_text(encoding="utf-8"))
            self.assertEqual(stored["refresh_token"], "R2")

        call = session.post.call_args
        self.assertEqual(call.args[0], OneDriveAuthenticator.TOKEN_URL)
        self.assertEqual(call.kwargs["data"]["grant_type"], "refresh_token")
        self.assertEqual(call.kwargs["data"]["refresh_token"], "R1")
        self.assertEqual(call.kwargs["data"]["client_id"], "client-id")
        self.assertNotIn("client_secret", call.kwargs["data"])

    def test_missing_token_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            auth = OneDriveAuthenticator("client-id", tmp)
            with self.assertRaises(AuthError):
                auth.authenticate("ann")

    def test_http_error_becomes_auth_error(self) -> None:
        response = Mock()
        response.raise_for_status.side_effect = requests.HTTPError("400 invalid_grant")
        session = self._session(response)

        with tempfile.TemporaryDirectory() as tmp:
            auth = OneDriveAuthenticator("client-id", tmp, session_factory=Mock(return_value=session))
            Path(auth.token_file("ann")).write_text(json.dumps({"refresh_token": "R1"}), encoding="utf-8")

            with self.assertRaises(AuthError):
                auth.authenticate("ann")

    def test_revoke_deletes_token_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            auth = OneDriveAuthenticator("client-id", tmp)
            token_file = Path(auth.token_file("ann"))
            token_file.write_text(json.dumps({"refresh_token": "R1"}), encoding="utf-8")

            auth.revoke("ann")
            self.assertFalse(token_file.exists())
            auth.revoke("ann")

    def test_requires_client_id(self) -> None:
        with self.assertRaises(InvalidArgumentError):
            OneDriveAuthenticator("", "/tmp")


if __name__ == "__main__":
    unittest.main()
