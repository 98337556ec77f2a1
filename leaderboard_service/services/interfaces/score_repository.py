from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from leaderboard_service.entities.score import ScoreSubmission


class ScoreRepository(ABC):
    @abstractmethod
    def save(self, submission: ScoreSubmission) -> ScoreSubmission:
        raise NotImplementedError

    @abstractmethod
    def find_latest(
        self,
        competition_id: int,
        *,
        since: datetime | None = None,
        until: datetime | None = None,
    ) -> list[ScoreSubmission]:
        """Latest submission per player among those inside ``[since, until]``.

        "Latest" is the greatest timestamp, then the greatest insertion id.
        Order of the returned list is unspecified.
        """
        raise NotImplementedError

    @abstractmethod
    def find(
        self,
        competition_id: int,
        *,
        player_id: int | None = None,
    ) -> list[ScoreSubmission]:
        """Submissions newest first (timestamp, then insertion id)."""
        raise NotImplementedError

    @abstractmethod
    def delete_by_competition(self, competition_id: int) -> int:
        raise NotImplementedError
