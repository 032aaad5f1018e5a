import unittest

from cloudunify.errors import NetworkError, PartialFailureError
from cloudunify.models import FanOutResult, ProviderOutcome


class TestFanOutResult(unittest.TestCase):
    def _result(self) -> FanOutResult:
        return FanOutResult(
            outcomes=[
                ProviderOutcome(provider_id="p1", provider_name="A", value=[1, 2]),
                ProviderOutcome(provider_id="p2", provider_name="B", error=NetworkError("down")),
                ProviderOutcome(provider_id="p3", provider_name="C", value=[]),
            ]
        )

    def test_successes_and_failures_keep_order(self) -> None:
        result = self._result()
        self.assertEqual(result.successes, [[1, 2], []])
        self.assertEqual(result.failed_provider_ids, ["p2"])
        self.assertEqual(len(result.failures), 1)
        self.assertFalse(result.failures[0].ok)

    def test_raise_for_failures(self) -> None:
        result = self._result()
        with self.assertRaises(PartialFailureError) as ctx:
            result.raise_for_failures()
        self.assertEqual(ctx.exception.details["provider_ids"], ["p2"])
        self.assertIsInstance(ctx.exception.cause, NetworkError)
        self.assertEqual(len(ctx.exception.failures), 1)

    def test_raise_for_failures_noop_when_all_ok(self) -> None:
        result = FanOutResult(outcomes=[ProviderOutcome(provider_id="p1", provider_name="A", value=1)])
        result.raise_for_failures()
        self.assertEqual(result.successes, [1])

    def test_empty(self) -> None:
        result = FanOutResult()
        self.assertEqual(result.successes, [])
        result.raise_for_failures()


if __name__ == "__main__":
    unittest.main()
