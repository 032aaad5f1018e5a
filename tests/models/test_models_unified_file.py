import dataclasses
import unittest
from datetime import datetime, timezone

from cloudunify.models import ConnectionState, ProviderHandle, ProviderType, UnifiedFile


def _file(**overrides) -> UnifiedFile:
    dt = datetime(2025, 1, 1, tzinfo=timezone.utc)
    values = dict(
        id="F1",
        name="a.txt",
        path="/a.txt",
        size=3,
        created_at=dt,
        modified_at=dt,
        mime_type="text/plain",
        is_folder=False,
        provider_id="p1",
        provider_name="Drive",
    )
    values.update(overrides)
    return UnifiedFile(**values)


class TestUnifiedFile(unittest.TestCase):
    def test_key_is_id_and_provider(self) -> None:
        self.assertEqual(_file().key, ("F1", "p1"))
        self.assertNotEqual(_file().key, _file(provider_id="p2").key)

    def test_is_immutable(self) -> None:
        f = _file()
        with self.assertRaises(dataclasses.FrozenInstanceError):
            f.name = "b.txt"  # type: ignore[misc]

    def test_optional_links_default_to_none(self) -> None:
        f = _file()
        self.assertIsNone(f.web_view_link)
        self.assertIsNone(f.thumbnail_url)


class TestProviderHandle(unittest.TestCase):
    def test_defaults_to_disconnected(self) -> None:
        handle = ProviderHandle(id="p1", display_name="Drive", type_tag=ProviderType.GOOGLE_DRIVE)
        self.assertFalse(handle.is_connected)

        handle.connection_state = ConnectionState.CONNECTED
        self.assertTrue(handle.is_connected)

    def test_type_tag_values(self) -> None:
        self.assertEqual(ProviderType("google_drive"), ProviderType.GOOGLE_DRIVE)
        self.assertEqual(ProviderType("onedrive"), ProviderType.ONEDRIVE)


if __name__ == "__main__":
    unittest.main()
