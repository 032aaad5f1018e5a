import unittest
from datetime import datetime, timezone

from cloudunify.models import UnifiedFile
from cloudunify.search import (
    SearchOptions,
    SortDirection,
    filter_files,
    search_files,
    sort_files,
)


def _dt(day: int) -> datetime:
    return datetime(2025, 1, day, tzinfo=timezone.utc)


def _file(name: str, size: int, mime: str, *, day: int = 1, folder: bool = False, pid: str = "p1") -> UnifiedFile:
    return UnifiedFile(
        id=f"{pid}-{name}",
        name=name,
        path=f"/{name}",
        size=size,
        created_at=_dt(day),
        modified_at=_dt(day),
        mime_type=mime,
        is_folder=folder,
        provider_id=pid,
        provider_name="Drive",
    )


FIXTURE = [
    _file("report.pdf", 10, "application/pdf", day=3),
    _file("Report_old.docx", 5, "application/vnd.openxmlformats-officedocument.wordprocessingml.document", day=1),
    _file("photo.jpg", 50, "image/jpeg", day=5, pid="p2"),
    _file("Reports", 0, "inode/directory", day=2, folder=True, pid="p2"),
]


class TestSearchFiles(unittest.TestCase):
    def test_term_is_case_insensitive_and_sorted_by_size_desc(self) -> None:
        listed_paths = []

        def list_files(path: str) -> list[UnifiedFile]:
            listed_paths.append(path)
            return list(FIXTURE)

        results = search_files(
            list_files,
            "report",
            SearchOptions(files_only=True, sort_by="size", sort_direction=SortDirection.DESCENDING),
        )

        self.assertEqual([f.name for f in results], ["report.pdf", "Report_old.docx"])
        self.assertEqual(listed_paths, ["/"])

    def test_empty_term_without_filters_is_identity(self) -> None:
        results = search_files(lambda _: list(FIXTURE), "")
        self.assertEqual(results, FIXTURE)
        self.assertIsNot(results, FIXTURE)

    def test_lists_options_path(self) -> None:
        seen = []
        search_files(lambda p: seen.append(p) or [], "x", SearchOptions(path="/Documents"))
        self.assertEqual(seen, ["/Documents"])


class TestFilterFiles(unittest.TestCase):
    def test_file_types_match_mime_substring(self) -> None:
        results = filter_files(FIXTURE, "", SearchOptions(file_types=["PDF", "image"]))
        self.assertEqual([f.name for f in results], ["report.pdf", "photo.jpg"])

    def test_date_range_is_inclusive(self) -> None:
        results = filter_files(FIXTURE, "", SearchOptions(start_date=_dt(2), end_date=_dt(3)))
        self.assertEqual([f.name for f in results], ["report.pdf", "Reports"])

    def test_naive_dates_are_read_as_utc(self) -> None:
        options = SearchOptions(start_date=datetime(2025, 1, 2), end_date=datetime(2025, 1, 3))

        results = filter_files(FIXTURE, "", options)

        self.assertEqual(options.start_date, _dt(2))
        self.assertEqual([f.name for f in results], ["report.pdf", "Reports"])

    def test_folders_only(self) -> None:
        results = filter_files(FIXTURE, "", SearchOptions(folders_only=True))
        self.assertEqual([f.name for f in results], ["Reports"])

    def test_folders_only_and_files_only_match_nothing(self) -> None:
        results = filter_files(FIXTURE, "", SearchOptions(folders_only=True, files_only=True))
        self.assertEqual(results, [])


class TestSortFiles(unittest.TestCase):
    def test_sort_by_name_ascending_is_case_insensitive(self) -> None:
        results = sort_files(FIXTURE, "name")
        self.assertEqual(
            [f.name for f in results],
            ["photo.jpg", "report.pdf", "Report_old.docx", "Reports"],
        )

    def test_sort_by_modified_alias(self) -> None:
        results = sort_files(FIXTURE, "modifiedAt", SortDirection.DESCENDING)
        self.assertEqual([f.name for f in results][0], "photo.jpg")

    def test_sort_by_created_at(self) -> None:
        results = sort_files(FIXTURE, "created_at")
        self.assertEqual([f.name for f in results][0], "Report_old.docx")

    def test_unknown_field_sorts_by_name(self) -> None:
        self.assertEqual(sort_files(FIXTURE, "color"), sort_files(FIXTURE, "name"))

    def test_sort_is_stable(self) -> None:
        a = _file("same", 1, "text/plain", pid="p1")
        b = _file("same", 1, "text/plain", pid="p2")
        self.assertEqual(sort_files([a, b], "size"), [a, b])


if __name__ == "__main__":
    unittest.main()
