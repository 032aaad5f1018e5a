import json
import tempfile
import unittest
from pathlib import Path

from cloudunify.auth import AuthInfo, OAuthClient
from cloudunify.errors import AuthError, InvalidArgumentError

SCOPES = ["https://www.googleapis.com/auth/drive"]


def _write_token(path: Path) -> None:
    token_payload = {
        "token": "fake-token",
        "refresh_token": "fake-refresh-token",
        "token_uri": "https://oauth2.googleapis.com/token",
        "client_id": "fake-client-id",
        "client_secret": "fake-client-secret",
        "scopes": SCOPES,
        "type": "authorized_user",
    }
    path.write_text(json.dumps(token_payload), encoding="utf-8")


class TestOAuthClient(unittest.TestCase):
    def test_get_credentials_loads_token_file_without_refresh(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            tmp_path = Path(tmp)
            token_file = tmp_path / "token.json"
            _write_token(token_file)

            client = OAuthClient(
                AuthInfo.for_files(str(tmp_path / "client_secrets.json"), str(token_file))
            )
            creds = client.get_credentials(scopes=SCOPES, ensure_valid=False)

            self.assertEqual(creds.refresh_token, "fake-refresh-token")
            self.assertEqual(creds.token, "fake-token")

    def test_invalid_scopes(self) -> None:
        client = OAuthClient(AuthInfo.for_files("/tmp/s.json", "/tmp/t.json"))
        with self.assertRaises(InvalidArgumentError):
            client.get_credentials(scopes=[])

    def test_missing_token_without_interactive_flow(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            client = OAuthClient(
                AuthInfo.for_files(str(Path(tmp) / "s.json"), str(Path(tmp) / "missing.json"))
            )
            with self.assertRaises(AuthError):
                client.get_credentials(scopes=SCOPES, interactive=False)

    def test_corrupt_token_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            token_file = Path(tmp) / "token.json"
            token_file.write_text("not json", encoding="utf-8")
            client = OAuthClient(AuthInfo.for_files(str(Path(tmp) / "s.json"), str(token_file)))
            with self.assertRaises(AuthError):
                client.get_credentials(scopes=SCOPES)

    def test_revoke_deletes_token_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            token_file = Path(tmp) / "token.json"
            _write_token(token_file)
            client = OAuthClient(AuthInfo.for_files(str(Path(tmp) / "s.json"), str(token_file)))

            self.assertTrue(client.revoke())
            self.assertFalse(token_file.exists())
            self.assertFalse(client.revoke())


if __name__ == "__main__":
    unittest.main()
