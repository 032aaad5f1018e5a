"""Search options."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from cloudunify.util.time import as_utc


class SortDirection(str, Enum):
    ASCENDING = "ascending"
    DESCENDING = "descending"


@dataclass(slots=True)
class SearchOptions:
    """
    Filters and ordering applied by search_files().

    All active predicates are combined with AND. folders_only and files_only
    together match nothing. Naive start_date/end_date values are read as UTC.
    """

    path: str = "/"
    file_types: list[str] = field(default_factory=list)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    folders_only: bool = False
    files_only: bool = False
    sort_by: Optional[str] = None
    sort_direction: SortDirection = SortDirection.ASCENDING

    def __post_init__(self) -> None:
        if self.start_date is not None:
            self.start_date = as_utc(self.start_date)
        if self.end_date is not None:
            self.end_date = as_utc(self.end_date)
