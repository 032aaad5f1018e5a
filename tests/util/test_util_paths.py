import unittest

from cloudunify.util.paths import (
    ROOT,
    is_under,
    join_path,
    normalize_path,
    parent_path,
    split_path,
)


class TestUtilPaths(unittest.TestCase):
    def test_normalize_path(self) -> None:
        self.assertEqual(normalize_path(None), ROOT)
        self.assertEqual(normalize_path(""), ROOT)
        self.assertEqual(normalize_path("/"), ROOT)
        self.assertEqual(normalize_path("Documents"), "/Documents")
        self.assertEqual(normalize_path("/Documents/"), "/Documents")
        self.assertEqual(normalize_path("//a//b/./c"), "/a/b/c")
        self.assertEqual(normalize_path("\\a\\b"), "/a/b")

    def test_split_path(self) -> None:
        self.assertEqual(split_path("/"), [])
        self.assertEqual(split_path("/a/b"), ["a", "b"])

    def test_join_path(self) -> None:
        self.assertEqual(join_path("/", "a.txt"), "/a.txt")
        self.assertEqual(join_path("/Docs/", "a.txt"), "/Docs/a.txt")

    def test_parent_path(self) -> None:
        self.assertEqual(parent_path("/"), ROOT)
        self.assertEqual(parent_path("/a"), ROOT)
        self.assertEqual(parent_path("/a/b/c"), "/a/b")

    def test_is_under_is_segment_aware(self) -> None:
        self.assertTrue(is_under("/Docs", "/Docs"))
        self.assertTrue(is_under("/Docs/a", "/Docs"))
        self.assertFalse(is_under("/Documents", "/Docs"))
        self.assertTrue(is_under("/anything", "/"))


if __name__ == "__main__":
    unittest.main()
