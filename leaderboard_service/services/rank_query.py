"""Single-player rank and neighbour lookups.

Unlike the leaderboard view, ``get_rank`` groups equal scores: a player's
rank is one plus the number of distinct scores strictly better than theirs.
"""
from __future__ import annotations

import logging

from leaderboard_service.entities.leaderboard import Neighbours, PlayerStanding
from leaderboard_service.entities.score import ScoreSubmission
from leaderboard_service.errors import NotFoundError, ValidationError, internal_errors
from leaderboard_service.services.interfaces import CompetitionRepository, ScoreRepository
from leaderboard_service.services.lookups import require_competition
from leaderboard_service.services.ranking import rank_latest

DEFAULT_NEIGHBOUR_COUNT = 2


class RankQueryService:
    def __init__(
        self,
        competition_repository: CompetitionRepository,
        score_repository: ScoreRepository,
        neighbour_count: int = DEFAULT_NEIGHBOUR_COUNT,
    ):
        self.competition_repository = competition_repository
        self.score_repository = score_repository
        self.neighbour_count = neighbour_count
        self.logger = logging.getLogger(__name__)

    @internal_errors("Error fetching rank")
    def get_rank(self, competition_unique_id: str, player_name: str) -> PlayerStanding:
        competition = require_competition(self.competition_repository, competition_unique_id)
        latest = self.score_repository.find_latest(competition.id)
        target = self._target(latest, player_name, "Player not found or has no score.")

        better = {
            submission.score for submission in latest
            if competition.is_better(submission.score, target.score)
        }
        return PlayerStanding(
            competition=competition,
            player_name=player_name,
            score=target.score,
            rank=len(better) + 1,
        )

    @internal_errors("Error fetching player neighbors")
    def get_neighbours(
        self, competition_unique_id: str, player_name: str, k: int | None = None,
    ) -> Neighbours:
        k = self.neighbour_count if k is None else k
        if isinstance(k, bool) or not isinstance(k, int) or k < 1:
            raise ValidationError("Neighbour count must be a positive integer.")

        competition = require_competition(
            self.competition_repository, competition_unique_id, "Competition not found.",
        )
        latest = self.score_repository.find_latest(competition.id)
        target = self._target(latest, player_name, f"Player {player_name} not found in this competition.")

        ordered = rank_latest(latest, competition.sorting_order)
        above = [e for e in ordered if competition.is_better(e.score, target.score)]
        below = [e for e in ordered if competition.is_better(target.score, e.score)]

        self.logger.debug(
            "neighbours competition=%s player=%s above=%d below=%d",
            competition.unique_id, player_name, len(above), len(below),
        )
        return Neighbours(
            competition=competition,
            player_name=target.player_name or player_name,
            score=target.score,
            above=list(reversed(above))[:k],
            below=below[:k],
        )

    @staticmethod
    def _target(latest: list[ScoreSubmission], player_name: str, message: str) -> ScoreSubmission:
        for submission in latest:
            if submission.player_name == player_name:
                return submission
        raise NotFoundError(message)
