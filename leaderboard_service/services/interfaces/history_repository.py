from __future__ import annotations

from abc import ABC, abstractmethod

from leaderboard_service.entities.score import PlayerHistoryEntry


class PlayerHistoryRepository(ABC):
    @abstractmethod
    def exists(self, player_id: int, competition_id: int) -> bool:
        raise NotImplementedError

    @abstractmethod
    def save(self, entry: PlayerHistoryEntry) -> PlayerHistoryEntry:
        raise NotImplementedError

    @abstractmethod
    def find_by_player(self, player_id: int) -> list[PlayerHistoryEntry]:
        """History rows joined with competition name/unique_id, newest completion first."""
        raise NotImplementedError

    @abstractmethod
    def delete_by_competition(self, competition_id: int) -> int:
        raise NotImplementedError
