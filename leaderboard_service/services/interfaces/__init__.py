from leaderboard_service.services.interfaces.competition_repository import CompetitionRepository
from leaderboard_service.services.interfaces.history_repository import PlayerHistoryRepository
from leaderboard_service.services.interfaces.player_repository import PlayerRepository
from leaderboard_service.services.interfaces.score_repository import ScoreRepository
from leaderboard_service.services.interfaces.snapshot_repository import SnapshotRepository

__all__ = [
    "CompetitionRepository",
    "PlayerHistoryRepository",
    "PlayerRepository",
    "ScoreRepository",
    "SnapshotRepository",
]
