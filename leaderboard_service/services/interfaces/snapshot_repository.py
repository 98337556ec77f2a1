from __future__ import annotations

from abc import ABC, abstractmethod

from leaderboard_service.entities.score import SnapshotRecord


class SnapshotRepository(ABC):
    @abstractmethod
    def save(self, record: SnapshotRecord) -> SnapshotRecord:
        raise NotImplementedError

    @abstractmethod
    def find(self, competition_id: int) -> list[SnapshotRecord]:
        """Snapshots of a competition, newest first."""
        raise NotImplementedError

    @abstractmethod
    def delete_by_competition(self, competition_id: int) -> int:
        raise NotImplementedError
