"""Score store: append-only log of score submissions per competition."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from leaderboard_service.entities.competition import Competition
from leaderboard_service.entities.score import ScoreSubmission, ensure_utc, utc_now
from leaderboard_service.errors import NotFoundError, ValidationError, internal_errors
from leaderboard_service.schemas import parse_score, parse_timestamp
from leaderboard_service.services.interfaces import (
    CompetitionRepository, PlayerRepository, ScoreRepository,
)
from leaderboard_service.services.lookups import require_competition


class ScoreStore:
    def __init__(
        self,
        competition_repository: CompetitionRepository,
        player_repository: PlayerRepository,
        score_repository: ScoreRepository,
    ):
        self.competition_repository = competition_repository
        self.player_repository = player_repository
        self.score_repository = score_repository
        self.logger = logging.getLogger(__name__)

    @internal_errors("Error submitting score")
    def append(
        self,
        competition_unique_id: str,
        player_name: Any,
        score: Any,
        timestamp: Any = None,
    ) -> ScoreSubmission:
        if not player_name or score is None:
            raise ValidationError("Missing player_name or score.")
        try:
            value = parse_score(score)
        except ValueError as exc:
            raise ValidationError(str(exc)) from None
        try:
            when = parse_timestamp(timestamp) if timestamp not in (None, "") else None
        except ValueError as exc:
            raise ValidationError(str(exc)) from None

        competition = require_competition(
            self.competition_repository, competition_unique_id, "Competition not found.",
        )
        return self.record(competition, str(player_name), value, when)

    def record(
        self,
        competition: Competition,
        player_name: str,
        score: float,
        timestamp: datetime | None = None,
    ) -> ScoreSubmission:
        """Insert an already-validated submission, creating the player if unknown."""
        player, created = self.player_repository.get_or_create(player_name)
        if created:
            self.logger.info("player created name=%s id=%s", player.name, player.id)

        submission = self.score_repository.save(ScoreSubmission(
            competition_id=competition.id,
            player_id=player.id,
            player_name=player.name,
            score=score,
            timestamp=ensure_utc(timestamp) if timestamp is not None else utc_now(),
        ))
        self.logger.info(
            "score appended competition=%s player=%s score=%s at=%s",
            competition.unique_id, player.name, score, submission.timestamp.isoformat(),
        )
        return submission

    def delete_all(self, competition: Competition) -> int:
        deleted = self.score_repository.delete_by_competition(competition.id)
        self.logger.info("deleted %d scores competition=%s", deleted, competition.unique_id)
        return deleted

    @internal_errors("Error fetching player scores")
    def player_scores(
        self, competition_unique_id: str, player_name: str,
    ) -> tuple[Competition, list[ScoreSubmission]]:
        """Every submission of one player in one competition, newest first."""
        competition = require_competition(self.competition_repository, competition_unique_id)
        player = self.player_repository.fetch_by_name(player_name)
        scores = (
            self.score_repository.find(competition.id, player_id=player.id)
            if player is not None else []
        )
        if not scores:
            raise NotFoundError("Player not found in this competition")
        return competition, scores
