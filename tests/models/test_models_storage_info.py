import unittest

from cloudunify.models import StorageInfo


class TestStorageInfo(unittest.TestCase):
    def test_derived_fields(self) -> None:
        info = StorageInfo(
            provider_id="p1",
            provider_name="Drive",
            user_email="a@example.com",
            total_space=1000,
            used_space=250,
        )
        self.assertEqual(info.available_space, 750)
        self.assertAlmostEqual(info.usage_percentage, 25.0)

    def test_usage_percentage_undefined_for_zero_total(self) -> None:
        info = StorageInfo(
            provider_id="p1",
            provider_name="Drive",
            user_email="",
            total_space=0,
            used_space=10,
        )
        self.assertIsNone(info.usage_percentage)
        self.assertEqual(info.available_space, -10)


if __name__ == "__main__":
    unittest.main()
