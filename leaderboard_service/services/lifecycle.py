"""Competition lifecycle: creation, listing, and bulk backfill."""
from __future__ import annotations

import contextlib
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, ContextManager, Mapping

import pydantic

from leaderboard_service.entities.competition import (
    Competition, CompetitionStatus, SortingOrder,
)
from leaderboard_service.errors import ConflictError, ValidationError, internal_errors
from leaderboard_service.schemas import BulkImportEnvelope, CompetitionEnvelope
from leaderboard_service.services.interfaces import CompetitionRepository
from leaderboard_service.services.lookups import require_competition
from leaderboard_service.services.score_store import ScoreStore

REQUIRED_FIELDS = ("name", "unique_id", "sorting_order")


@dataclass
class BulkImportResult:
    competitions_created: list[dict[str, Any]] = field(default_factory=list)
    scores_added: list[dict[str, Any]] = field(default_factory=list)


def _missing_required(definition: Any) -> bool:
    if not isinstance(definition, Mapping):
        return True
    return any(not definition.get(name) for name in REQUIRED_FIELDS)


def _describe(exc: pydantic.ValidationError) -> str:
    parts = []
    for error in exc.errors():
        loc = ".".join(str(part) for part in error.get("loc", ()))
        parts.append(f"{loc}: {error.get('msg')}" if loc else str(error.get("msg")))
    return "; ".join(parts)


class CompetitionService:
    def __init__(
        self,
        competition_repository: CompetitionRepository,
        score_store: ScoreStore,
        atomic: Callable[[], ContextManager[Any]] | None = None,
    ):
        self.competition_repository = competition_repository
        self.score_store = score_store
        self.atomic = atomic or contextlib.nullcontext
        self.logger = logging.getLogger(__name__)

    @internal_errors("Error creating competition")
    def create(self, payload: Mapping[str, Any]) -> Competition:
        if _missing_required(payload):
            raise ValidationError("Missing required fields.")
        sorting_order = payload["sorting_order"]
        if not isinstance(sorting_order, str) or sorting_order not in {order.value for order in SortingOrder}:
            raise ValidationError("sorting_order must be ASC or DESC")
        try:
            envelope = CompetitionEnvelope.model_validate(payload)
        except pydantic.ValidationError as exc:
            raise ValidationError(_describe(exc)) from None

        if self.competition_repository.fetch_by_unique_id(envelope.unique_id) is not None:
            raise ConflictError("Competition already exists")

        competition = self.competition_repository.save(self._from_envelope(envelope))
        self.logger.info(
            "competition created unique_id=%s id=%s sorting_order=%s",
            competition.unique_id, competition.id, competition.sorting_order,
        )
        return competition

    @internal_errors("Error fetching competitions")
    def list_competitions(self, status: str | None = None) -> list[Competition]:
        if status in (None, "", "all"):
            status = None
        return self.competition_repository.find(status=status)

    @internal_errors("Error fetching competition")
    def get(self, unique_id: str) -> Competition:
        return require_competition(self.competition_repository, unique_id)

    @internal_errors("Error processing bulk payload")
    def bulk_import(self, payload: Any) -> BulkImportResult:
        """Create missing competitions and append their scores, all or nothing.

        The whole batch is validated before the first write. Writes then run
        sequentially in one atomic scope so a failure leaves no partial import.
        """
        if not isinstance(payload, Mapping) or not isinstance(payload.get("competitions"), list):
            raise ValidationError("Payload must include a 'competitions' array.")
        if any(_missing_required(definition) for definition in payload["competitions"]):
            raise ValidationError("Missing required fields in one or more competitions.")
        try:
            envelope = BulkImportEnvelope.model_validate(payload)
        except pydantic.ValidationError as exc:
            raise ValidationError(f"Invalid bulk payload: {_describe(exc)}") from None

        result = BulkImportResult()
        with self.atomic():
            for definition in envelope.competitions:
                competition = self.competition_repository.fetch_by_unique_id(definition.unique_id)
                if competition is None:
                    competition = self.competition_repository.save(self._from_envelope(definition))
                    result.competitions_created.append({
                        "id": competition.id,
                        "name": competition.name,
                        "unique_id": competition.unique_id,
                    })

                for item in definition.scores:
                    submission = self.score_store.record(
                        competition, item.player_name, item.score, item.timestamp,
                    )
                    result.scores_added.append({
                        "competition": competition.unique_id,
                        "player_name": item.player_name,
                        "score": submission.score,
                        "timestamp": submission.timestamp.isoformat(),
                    })

        self.logger.info(
            "bulk import done competitions=%d created=%d scores=%d",
            len(envelope.competitions), len(result.competitions_created), len(result.scores_added),
        )
        return result

    @staticmethod
    def _from_envelope(envelope: CompetitionEnvelope) -> Competition:
        return Competition(
            unique_id=envelope.unique_id,
            name=envelope.name,
            sorting_order=envelope.sorting_order,
            status=CompetitionStatus.ACTIVE,
            score_type=envelope.score_type,
            start_date=envelope.start_date,
            end_date=envelope.end_date,
        )
