import unittest
from unittest.mock import Mock

from fakes import FakeProvider

from cloudunify.aggregator import CloudUnify
from cloudunify.errors import (
    DestinationProviderNotFoundError,
    NetworkError,
    NotConnectedError,
    ProviderNotFoundError,
    SourceFileNotFoundError,
    SourceProviderNotFoundError,
)
from cloudunify.search import SearchOptions, SortDirection


class TestCloudUnifyRegistry(unittest.TestCase):
    def test_register_and_unregister(self) -> None:
        agg = CloudUnify()
        p1 = FakeProvider("p1")
        agg.register_provider(p1)

        self.assertTrue(agg.has_provider("p1"))
        self.assertEqual(agg.provider_ids(), ["p1"])
        self.assertIs(agg.get_provider("p1"), p1)

        self.assertTrue(agg.unregister_provider("p1"))
        self.assertFalse(agg.has_provider("p1"))

    def test_unregister_unknown_returns_false(self) -> None:
        agg = CloudUnify()
        self.assertFalse(agg.unregister_provider("missing"))

    def test_get_provider_unknown_raises(self) -> None:
        agg = CloudUnify()
        with self.assertRaises(ProviderNotFoundError):
            agg.get_provider("missing")

    def test_register_same_id_replaces(self) -> None:
        agg = CloudUnify()
        agg.register_provider(FakeProvider("p1"))
        replacement = FakeProvider("p1", name="Other")
        agg.register_provider(replacement)
        self.assertIs(agg.get_provider("p1"), replacement)
        self.assertEqual(len(agg.get_providers()), 1)


class TestCloudUnifyFanOut(unittest.TestCase):
    def test_list_all_files_concatenates_and_skips_failures(self) -> None:
        agg = CloudUnify()
        a = FakeProvider("a", name="A")
        a.add_file("/x.txt")
        a.add_file("/y.txt")
        b = FakeProvider("b", name="B")
        b.list_error = NetworkError("down")
        c = FakeProvider("c", name="C")
        c.add_file("/z.txt")
        for p in (a, b, c):
            agg.register_provider(p)

        files = agg.list_all_files("/")

        self.assertEqual([f.name for f in files], ["x.txt", "y.txt", "z.txt"])
        self.assertEqual(b.calls["list_files"], 1)

    def test_list_all_files_detailed_records_failures(self) -> None:
        agg = CloudUnify()
        ok = FakeProvider("ok")
        bad = FakeProvider("bad")
        bad.list_error = NetworkError("down")
        agg.register_provider(ok)
        agg.register_provider(bad)

        result = agg.list_all_files_detailed("/")

        self.assertEqual(result.failed_provider_ids, ["bad"])
        self.assertIsInstance(result.failures[0].error, NetworkError)

    def test_list_all_files_skips_disconnected_providers(self) -> None:
        agg = CloudUnify()
        offline = FakeProvider("off", connected=False)
        offline.add_file("/hidden.txt")
        agg.register_provider(offline)

        self.assertEqual(agg.list_all_files("/"), [])
        self.assertEqual(offline.calls["list_files"], 0)

    def test_list_all_files_with_no_providers(self) -> None:
        self.assertEqual(CloudUnify().list_all_files("/"), [])

    def test_get_storage_info_skips_failures(self) -> None:
        agg = CloudUnify()
        ok = FakeProvider("ok")
        bad = FakeProvider("bad")
        bad.storage_error = NetworkError("down")
        offline = FakeProvider("off", connected=False)
        for p in (ok, bad, offline):
            agg.register_provider(p)

        infos = agg.get_storage_info()
        self.assertEqual([i.provider_id for i in infos], ["ok"])

        detailed = agg.get_storage_info_detailed()
        self.assertEqual(detailed.failed_provider_ids, ["bad", "off"])
        self.assertIsInstance(detailed.failures[1].error, NotConnectedError)


class TestCloudUnifyDispatch(unittest.TestCase):
    def setUp(self) -> None:
        self.agg = CloudUnify()
        self.p1 = FakeProvider("p1")
        self.agg.register_provider(self.p1)

    def test_unknown_provider_raises(self) -> None:
        with self.assertRaises(ProviderNotFoundError):
            self.agg.download_file("F", "missing")
        with self.assertRaises(ProviderNotFoundError):
            self.agg.upload_file(b"x", "a.txt", "/", "missing")

    def test_upload_normalizes_path(self) -> None:
        self.p1.add_folder("/Docs")
        f = self.agg.upload_file(b"abc", "a.txt", "Docs/", "p1")
        self.assertEqual(f.path, "/Docs/a.txt")
        self.assertEqual(self.agg.download_file(f.id, "p1"), b"abc")

    def test_adapter_errors_propagate(self) -> None:
        self.p1.disconnect()
        with self.assertRaises(NotConnectedError):
            self.agg.get_file("F", "p1")

    def test_move_rename_copy_delete(self) -> None:
        self.p1.add_folder("/Docs")
        f = self.p1.add_file("/a.txt")

        moved = self.agg.move_file(f.id, "/Docs", "p1")
        self.assertEqual(moved.path, "/Docs/a.txt")

        renamed = self.agg.rename_file(f.id, "b.txt", "p1")
        self.assertEqual(renamed.path, "/Docs/b.txt")

        copied = self.agg.copy_file(f.id, "/", "p1")
        self.assertEqual(copied.path, "/b.txt")
        self.assertNotEqual(copied.id, f.id)

        self.agg.delete_file(f.id, "p1")
        self.assertIsNone(self.agg.get_file(f.id, "p1"))


class TestCopyBetweenProviders(unittest.TestCase):
    def setUp(self) -> None:
        self.agg = CloudUnify()
        self.src = FakeProvider("src", name="Source")
        self.dst = FakeProvider("dst", name="Destination")
        self.dst.add_folder("/Backup")
        self.agg.register_provider(self.src)
        self.agg.register_provider(self.dst)

    def test_copies_content_under_source_name(self) -> None:
        f = self.src.add_file("/report.pdf", b"%PDF")

        copied = self.agg.copy_file_between_providers(f.id, "src", "/Backup", "dst")

        self.assertEqual(copied.provider_id, "dst")
        self.assertEqual(copied.name, "report.pdf")
        self.assertEqual(copied.path, "/Backup/report.pdf")
        self.assertEqual(self.dst.download_file(copied.id), b"%PDF")

    def test_unknown_destination_transfers_nothing(self) -> None:
        f = self.src.add_file("/report.pdf", b"%PDF")

        with self.assertRaises(DestinationProviderNotFoundError):
            self.agg.copy_file_between_providers(f.id, "src", "/Backup", "nope")

        self.assertEqual(self.src.calls["download_file"], 0)
        self.assertEqual(self.dst.calls["upload_file"], 0)

    def test_unknown_source(self) -> None:
        with self.assertRaises(SourceProviderNotFoundError):
            self.agg.copy_file_between_providers("F", "nope", "/Backup", "dst")

    def test_missing_source_file_metadata(self) -> None:
        source = Mock(wraps=self.src)
        source.id = "mock-src"
        source.name = "Mock"
        source.download_file.return_value = b"bytes"
        source.get_file.return_value = None
        self.agg.register_provider(source)

        with self.assertRaises(SourceFileNotFoundError):
            self.agg.copy_file_between_providers("F", "mock-src", "/Backup", "dst")
        self.assertEqual(self.dst.calls["upload_file"], 0)


class TestCloudUnifySearch(unittest.TestCase):
    def test_search_merges_providers(self) -> None:
        agg = CloudUnify()
        a = FakeProvider("a")
        a.add_file("/report.pdf", b"x" * 10)
        b = FakeProvider("b")
        b.add_file("/Report_old.docx", b"x" * 5)
        b.add_file("/photo.jpg", b"x" * 50)
        agg.register_provider(a)
        agg.register_provider(b)

        results = agg.search(
            "report",
            SearchOptions(sort_by="size", sort_direction=SortDirection.DESCENDING),
        )

        self.assertEqual([f.name for f in results], ["report.pdf", "Report_old.docx"])


if __name__ == "__main__":
    unittest.main()
