from __future__ import annotations

from abc import ABC, abstractmethod

from leaderboard_service.entities.competition import Competition, CompetitionStatus


class CompetitionRepository(ABC):
    @abstractmethod
    def fetch_by_unique_id(self, unique_id: str) -> Competition | None:
        raise NotImplementedError

    @abstractmethod
    def find(self, *, status: str | None = None) -> list[Competition]:
        """All competitions, newest first, optionally filtered on exact status."""
        raise NotImplementedError

    @abstractmethod
    def save(self, competition: Competition) -> Competition:
        """Insert a new competition. Raises ConflictError if ``unique_id`` is taken."""
        raise NotImplementedError

    @abstractmethod
    def update_status(self, competition_id: int, status: CompetitionStatus) -> None:
        raise NotImplementedError
