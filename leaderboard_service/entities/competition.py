from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import StrEnum


class SortingOrder(StrEnum):
    ASC = "ASC"    # lower is better
    DESC = "DESC"  # higher is better


class CompetitionStatus(StrEnum):
    ACTIVE = "active"
    COMPLETED = "completed"


DEFAULT_SCORE_TYPE = "points"


@dataclass
class Competition:
    unique_id: str
    name: str
    sorting_order: SortingOrder
    status: CompetitionStatus = CompetitionStatus.ACTIVE
    score_type: str = DEFAULT_SCORE_TYPE
    start_date: date | None = None
    end_date: date | None = None
    id: int | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def is_better(self, score: float, other: float) -> bool:
        """True when ``score`` ranks strictly ahead of ``other``."""
        if self.sorting_order == SortingOrder.DESC:
            return score > other
        return score < other


@dataclass
class Player:
    name: str
    id: int | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
