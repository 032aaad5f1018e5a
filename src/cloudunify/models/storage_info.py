"""Storage quota model."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True, slots=True)
class StorageInfo:
    """
    Storage usage of one provider account.

    available_space and usage_percentage are derived and never stored.
    """

    provider_id: str
    provider_name: str
    user_email: str
    total_space: int
    used_space: int

    @property
    def available_space(self) -> int:
        return self.total_space - self.used_space

    @property
    def usage_percentage(self) -> Optional[float]:
        """
        Used space as a percentage of total space.

        Returns None when total_space is 0 (unlimited or unreported quota):
        the percentage is undefined there.
        """
        if self.total_space <= 0:
            return None
        return self.used_space / self.total_space * 100.0
