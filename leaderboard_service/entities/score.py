from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Ensure a datetime is timezone-aware (assume UTC if naive)."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


@dataclass
class ScoreSubmission:
    """One reported score. Rows are append-only."""
    competition_id: int
    player_id: int
    score: float
    timestamp: datetime = field(default_factory=utc_now)
    player_name: str | None = None                               # joined on read
    id: int | None = None                                        # insertion sequence


@dataclass
class LeaderboardEntry:
    rank: int
    player_name: str
    score: float
    timestamp: datetime
    player_id: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "rank": self.rank,
            "player_name": self.player_name,
            "score": self.score,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class SnapshotRecord:
    """Frozen copy of a leaderboard taken at finalization time."""
    competition_id: int
    final_leaderboard: list[dict[str, Any]] = field(default_factory=list)
    total_participants: int = 0
    snapshot_date: datetime = field(default_factory=utc_now)
    id: int | None = None


@dataclass
class PlayerHistoryEntry:
    player_id: int
    competition_id: int
    final_rank: int
    final_score: float
    completed_date: datetime = field(default_factory=utc_now)
    id: int | None = None
    # joined on read
    competition_name: str | None = None
    competition_unique_id: str | None = None
