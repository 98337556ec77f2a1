"""In-memory repositories shared by the service tests."""
from __future__ import annotations

import copy
import itertools
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime
from typing import Iterator

from leaderboard_service.entities.competition import Competition, CompetitionStatus, Player
from leaderboard_service.entities.leaderboard import TimeWindow
from leaderboard_service.entities.score import (
    PlayerHistoryEntry, ScoreSubmission, SnapshotRecord, ensure_utc,
)
from leaderboard_service.errors import ConflictError
from leaderboard_service.services.finalization import FinalizationService
from leaderboard_service.services.interfaces import (
    CompetitionRepository, PlayerHistoryRepository, PlayerRepository,
    ScoreRepository, SnapshotRepository,
)
from leaderboard_service.services.lifecycle import CompetitionService
from leaderboard_service.services.rank_query import RankQueryService
from leaderboard_service.services.ranking import RankingEngine, latest_per_player
from leaderboard_service.services.score_store import ScoreStore


class MemCompetitionRepository(CompetitionRepository):
    def __init__(self) -> None:
        self.rows: dict[int, Competition] = {}
        self._ids = itertools.count(1)

    def fetch_by_unique_id(self, unique_id: str) -> Competition | None:
        for row in self.rows.values():
            if row.unique_id == unique_id:
                return replace(row)
        return None

    def find(self, *, status: str | None = None) -> list[Competition]:
        rows = [replace(r) for r in self.rows.values() if status is None or r.status == status]
        rows.sort(key=lambda r: (r.created_at, r.id), reverse=True)
        return rows

    def save(self, competition: Competition) -> Competition:
        if any(r.unique_id == competition.unique_id for r in self.rows.values()):
            raise ConflictError("Competition already exists")
        competition.id = next(self._ids)
        self.rows[competition.id] = replace(competition)
        return competition

    def update_status(self, competition_id: int, status: CompetitionStatus) -> None:
        self.rows[competition_id].status = status


class MemPlayerRepository(PlayerRepository):
    def __init__(self) -> None:
        self.rows: dict[str, Player] = {}
        self._ids = itertools.count(1)

    def fetch_by_name(self, name: str) -> Player | None:
        return self.rows.get(name)

    def get_or_create(self, name: str) -> tuple[Player, bool]:
        if name in self.rows:
            return self.rows[name], False
        player = Player(name=name, id=next(self._ids))
        self.rows[name] = player
        return player, True


class MemScoreRepository(ScoreRepository):
    def __init__(self) -> None:
        self.rows: list[ScoreSubmission] = []
        self._ids = itertools.count(1)

    def save(self, submission: ScoreSubmission) -> ScoreSubmission:
        submission.id = next(self._ids)
        self.rows.append(replace(submission))
        return submission

    def find_latest(
        self, competition_id: int, *,
        since: datetime | None = None, until: datetime | None = None,
    ) -> list[ScoreSubmission]:
        window = TimeWindow(start=since, end=until)
        rows = [
            r for r in self.rows
            if r.competition_id == competition_id and window.contains(ensure_utc(r.timestamp))
        ]
        return latest_per_player(rows)

    def find(self, competition_id: int, *, player_id: int | None = None) -> list[ScoreSubmission]:
        rows = [
            r for r in self.rows
            if r.competition_id == competition_id and (player_id is None or r.player_id == player_id)
        ]
        rows.sort(key=lambda r: (r.timestamp, r.id), reverse=True)
        return rows

    def delete_by_competition(self, competition_id: int) -> int:
        before = len(self.rows)
        self.rows = [r for r in self.rows if r.competition_id != competition_id]
        return before - len(self.rows)


class MemSnapshotRepository(SnapshotRepository):
    def __init__(self) -> None:
        self.rows: list[SnapshotRecord] = []
        self._ids = itertools.count(1)

    def save(self, record: SnapshotRecord) -> SnapshotRecord:
        record.id = next(self._ids)
        self.rows.append(copy.deepcopy(record))
        return record

    def find(self, competition_id: int) -> list[SnapshotRecord]:
        rows = [r for r in self.rows if r.competition_id == competition_id]
        rows.sort(key=lambda r: (r.snapshot_date, r.id), reverse=True)
        return rows

    def delete_by_competition(self, competition_id: int) -> int:
        before = len(self.rows)
        self.rows = [r for r in self.rows if r.competition_id != competition_id]
        return before - len(self.rows)


class MemPlayerHistoryRepository(PlayerHistoryRepository):
    def __init__(self, competitions: MemCompetitionRepository) -> None:
        self.rows: list[PlayerHistoryEntry] = []
        self._competitions = competitions
        self._ids = itertools.count(1)

    def exists(self, player_id: int, competition_id: int) -> bool:
        return any(r.player_id == player_id and r.competition_id == competition_id for r in self.rows)

    def save(self, entry: PlayerHistoryEntry) -> PlayerHistoryEntry:
        if self.exists(entry.player_id, entry.competition_id):
            raise AssertionError("duplicate history row")
        entry.id = next(self._ids)
        self.rows.append(replace(entry))
        return entry

    def find_by_player(self, player_id: int) -> list[PlayerHistoryEntry]:
        rows = []
        for r in self.rows:
            if r.player_id != player_id:
                continue
            competition = self._competitions.rows[r.competition_id]
            rows.append(replace(
                r, competition_name=competition.name, competition_unique_id=competition.unique_id,
            ))
        rows.sort(key=lambda r: (r.completed_date, r.id), reverse=True)
        return rows

    def delete_by_competition(self, competition_id: int) -> int:
        before = len(self.rows)
        self.rows = [r for r in self.rows if r.competition_id != competition_id]
        return before - len(self.rows)


class MemStore:
    """All repositories plus wired services over one in-memory state."""

    def __init__(self) -> None:
        self.competitions = MemCompetitionRepository()
        self.players = MemPlayerRepository()
        self.scores = MemScoreRepository()
        self.snapshots = MemSnapshotRepository()
        self.history = MemPlayerHistoryRepository(self.competitions)

        self.score_store = ScoreStore(self.competitions, self.players, self.scores)
        self.ranking = RankingEngine(self.competitions, self.scores)
        self.rank_query = RankQueryService(self.competitions, self.scores)
        self.finalization = FinalizationService(
            self.competitions, self.players, self.scores, self.snapshots, self.history,
            ranking_engine=self.ranking, score_store=self.score_store, atomic=self.atomic,
        )
        self.lifecycle = CompetitionService(self.competitions, self.score_store, atomic=self.atomic)

    @contextmanager
    def atomic(self) -> Iterator[None]:
        repos = (self.competitions, self.players, self.scores, self.snapshots, self.history)
        saved = [copy.deepcopy(repo.rows) for repo in repos]
        try:
            yield
        except Exception:
            for repo, rows in zip(repos, saved):
                repo.rows = rows
            raise
