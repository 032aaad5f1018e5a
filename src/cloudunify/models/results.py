"""Per-provider result models for fan-out operations."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, Optional, TypeVar

from cloudunify.errors import PartialFailureError

T = TypeVar("T")


@dataclass(slots=True)
class ProviderOutcome(Generic[T]):
    """Settled result of one provider call: either a value or an error."""

    provider_id: str
    provider_name: str
    value: Optional[T] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(slots=True)
class FanOutResult(Generic[T]):
    """All settled outcomes of a fan-out, in registry snapshot order."""

    outcomes: list[ProviderOutcome[T]] = field(default_factory=list)

    @property
    def successes(self) -> list[T]:
        return [o.value for o in self.outcomes if o.ok]  # type: ignore[misc]

    @property
    def failures(self) -> list[ProviderOutcome[T]]:
        return [o for o in self.outcomes if not o.ok]

    @property
    def failed_provider_ids(self) -> list[str]:
        return [o.provider_id for o in self.outcomes if not o.ok]

    def raise_for_failures(self) -> None:
        """Raise PartialFailureError if any provider failed."""
        failures = self.failures
        if failures:
            raise PartialFailureError(
                f"{len(failures)} of {len(self.outcomes)} providers failed",
                failures=failures,
                details={"provider_ids": [f.provider_id for f in failures]},
                cause=failures[0].error,
            )
