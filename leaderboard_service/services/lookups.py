from __future__ import annotations

from leaderboard_service.entities.competition import Competition
from leaderboard_service.errors import NotFoundError
from leaderboard_service.services.interfaces import CompetitionRepository


def require_competition(
    repository: CompetitionRepository,
    unique_id: str,
    message: str = "Competition not found",
) -> Competition:
    competition = repository.fetch_by_unique_id(unique_id)
    if competition is None:
        raise NotFoundError(message)
    return competition
