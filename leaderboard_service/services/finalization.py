"""Finalization: freeze the current leaderboard and merge it into player history."""
from __future__ import annotations

import contextlib
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, ContextManager

from leaderboard_service.entities.competition import Competition, CompetitionStatus
from leaderboard_service.entities.score import (
    LeaderboardEntry, PlayerHistoryEntry, SnapshotRecord, utc_now,
)
from leaderboard_service.errors import NotFoundError, internal_errors
from leaderboard_service.services.interfaces import (
    CompetitionRepository, PlayerHistoryRepository, PlayerRepository,
    ScoreRepository, SnapshotRepository,
)
from leaderboard_service.services.lookups import require_competition
from leaderboard_service.services.ranking import RankingEngine
from leaderboard_service.services.score_store import ScoreStore


@dataclass
class FinalizationResult:
    competition: Competition
    snapshot: SnapshotRecord
    leaderboard: list[LeaderboardEntry] = field(default_factory=list)
    history_added: int = 0

    @property
    def participants(self) -> int:
        return len(self.leaderboard)


@dataclass
class ResetResult:
    competition: Competition
    scores: int = 0
    snapshots: int = 0
    player_history: int = 0

    def records_deleted(self) -> dict[str, int]:
        return {
            "scores": self.scores,
            "snapshots": self.snapshots,
            "player_history": self.player_history,
        }


class FinalizationService:
    def __init__(
        self,
        competition_repository: CompetitionRepository,
        player_repository: PlayerRepository,
        score_repository: ScoreRepository,
        snapshot_repository: SnapshotRepository,
        history_repository: PlayerHistoryRepository,
        ranking_engine: RankingEngine | None = None,
        score_store: ScoreStore | None = None,
        atomic: Callable[[], ContextManager[Any]] | None = None,
    ):
        self.competition_repository = competition_repository
        self.player_repository = player_repository
        self.score_repository = score_repository
        self.snapshot_repository = snapshot_repository
        self.history_repository = history_repository
        self.ranking_engine = ranking_engine or RankingEngine(
            competition_repository, score_repository,
        )
        self.score_store = score_store or ScoreStore(
            competition_repository, player_repository, score_repository,
        )
        self.atomic = atomic or contextlib.nullcontext
        self.logger = logging.getLogger(__name__)

    @internal_errors("Error finalizing competition")
    def finalize(self, competition_unique_id: str) -> FinalizationResult:
        competition = require_competition(self.competition_repository, competition_unique_id)

        with self.atomic():
            leaderboard = self.ranking_engine.compute(competition)
            now = utc_now()

            snapshot = self.snapshot_repository.save(SnapshotRecord(
                competition_id=competition.id,
                final_leaderboard=[entry.to_dict() for entry in leaderboard],
                total_participants=len(leaderboard),
                snapshot_date=now,
            ))
            self.competition_repository.update_status(competition.id, CompetitionStatus.COMPLETED)
            competition.status = CompetitionStatus.COMPLETED

            added = 0
            for entry in leaderboard:
                # History is written once per player; later finalizations only add snapshots.
                if self.history_repository.exists(entry.player_id, competition.id):
                    continue
                self.history_repository.save(PlayerHistoryEntry(
                    player_id=entry.player_id,
                    competition_id=competition.id,
                    final_rank=entry.rank,
                    final_score=entry.score,
                    completed_date=now,
                ))
                added += 1

        self.logger.info(
            "competition finalized unique_id=%s participants=%d history_added=%d snapshot=%s",
            competition.unique_id, len(leaderboard), added, snapshot.id,
        )
        return FinalizationResult(
            competition=competition, snapshot=snapshot,
            leaderboard=leaderboard, history_added=added,
        )

    @internal_errors("Error resetting competition")
    def reset(self, competition_unique_id: str) -> ResetResult:
        competition = require_competition(
            self.competition_repository, competition_unique_id, "Competition not found.",
        )

        with self.atomic():
            result = ResetResult(
                competition=competition,
                scores=self.score_store.delete_all(competition),
                snapshots=self.snapshot_repository.delete_by_competition(competition.id),
                player_history=self.history_repository.delete_by_competition(competition.id),
            )
            self.competition_repository.update_status(competition.id, CompetitionStatus.ACTIVE)
            competition.status = CompetitionStatus.ACTIVE

        self.logger.info(
            "competition reset unique_id=%s deleted=%s",
            competition.unique_id, result.records_deleted(),
        )
        return result

    @internal_errors("Error fetching snapshots")
    def snapshots(self, competition_unique_id: str) -> tuple[Competition, list[SnapshotRecord]]:
        competition = require_competition(self.competition_repository, competition_unique_id)
        return competition, self.snapshot_repository.find(competition.id)

    @internal_errors("Error fetching player history")
    def player_history(self, player_name: str) -> list[PlayerHistoryEntry]:
        player = self.player_repository.fetch_by_name(player_name)
        if player is None:
            raise NotFoundError("Player not found")
        return self.history_repository.find_by_player(player.id)
