from __future__ import annotations

from abc import ABC, abstractmethod

from leaderboard_service.entities.competition import Player


class PlayerRepository(ABC):
    @abstractmethod
    def fetch_by_name(self, name: str) -> Player | None:
        raise NotImplementedError

    @abstractmethod
    def get_or_create(self, name: str) -> tuple[Player, bool]:
        """Return the player named ``name`` (exact match), creating it if unknown.

        The second element tells whether a new row was created. Implementations
        must not create duplicates when two callers race on the same name.
        """
        raise NotImplementedError
