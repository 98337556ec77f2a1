from leaderboard_service.db.tables.competitions import (
    CompetitionRow, PlayerHistoryRow, PlayerRow, ScoreRow, SnapshotRow,
)

__all__ = [
    "CompetitionRow", "PlayerRow", "ScoreRow",
    "SnapshotRow", "PlayerHistoryRow",
]
