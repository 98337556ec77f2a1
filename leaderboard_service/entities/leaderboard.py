from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from leaderboard_service.entities.competition import Competition
from leaderboard_service.entities.score import LeaderboardEntry


@dataclass(frozen=True)
class TimeWindow:
    """Inclusive ``[start, end]`` bounds on submission timestamps."""
    start: datetime | None = None
    end: datetime | None = None
    start_label: str | None = None
    end_label: str | None = None

    @property
    def period(self) -> str:
        if self.start is not None and self.end is not None:
            return f"{self.start_label} to {self.end_label}"
        if self.start is not None:
            return f"From {self.start_label} onwards"
        if self.end is not None:
            return f"Until {self.end_label}"
        return "All-time"

    def contains(self, ts: datetime) -> bool:
        if self.start is not None and ts < self.start:
            return False
        if self.end is not None and ts > self.end:
            return False
        return True


@dataclass
class Leaderboard:
    competition: Competition
    entries: list[LeaderboardEntry] = field(default_factory=list)
    window: TimeWindow = field(default_factory=TimeWindow)

    def to_dicts(self) -> list[dict[str, Any]]:
        return [entry.to_dict() for entry in self.entries]


@dataclass
class PlayerStanding:
    """Single-player rank lookup result (ties grouped by equal score)."""
    competition: Competition
    player_name: str
    score: float
    rank: int


@dataclass
class Neighbours:
    competition: Competition
    player_name: str
    score: float
    above: list[LeaderboardEntry] = field(default_factory=list)
    below: list[LeaderboardEntry] = field(default_factory=list)
