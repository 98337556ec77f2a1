from __future__ import annotations

import math
from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from leaderboard_service.entities.competition import DEFAULT_SCORE_TYPE, SortingOrder
from leaderboard_service.entities.score import ensure_utc


def parse_score(value: Any) -> float:
    """Accept ints, floats and numeric strings. Anything else is rejected."""
    if value is None or isinstance(value, bool):
        raise ValueError("Score must be a number.")
    if isinstance(value, (int, float)):
        result = float(value)
    elif isinstance(value, str) and value.strip():
        try:
            result = float(value.strip())
        except ValueError:
            raise ValueError("Score must be a number.") from None
    else:
        raise ValueError("Score must be a number.")
    if not math.isfinite(result):
        raise ValueError("Score must be a number.")
    return result


def parse_timestamp(value: Any) -> datetime:
    """Parse ``YYYY-MM-DD HH:MM:SS`` / ISO-8601 values into aware UTC datetimes."""
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, date):
        return ensure_utc(datetime(value.year, value.month, value.day))
    if isinstance(value, str) and value.strip():
        raw = value.strip()
        if raw.endswith(("Z", "z")):
            raw = raw[:-1] + "+00:00"
        try:
            return ensure_utc(datetime.fromisoformat(raw))
        except ValueError:
            raise ValueError(f"Invalid timestamp: {value!r}") from None
    raise ValueError(f"Invalid timestamp: {value!r}")


class ScoreEnvelope(BaseModel):
    """One score submission, either posted directly or carried by a bulk import."""

    player_name: str = Field(min_length=1)
    score: float
    timestamp: datetime | None = None

    model_config = ConfigDict(extra="ignore")

    @field_validator("score", mode="before")
    @classmethod
    def _numeric_score(cls, value: Any) -> float:
        return parse_score(value)

    @field_validator("timestamp", mode="before")
    @classmethod
    def _utc_timestamp(cls, value: Any) -> datetime | None:
        if value is None or value == "":
            return None
        return parse_timestamp(value)


class CompetitionEnvelope(BaseModel):
    name: str = Field(min_length=1)
    unique_id: str = Field(min_length=1)
    sorting_order: SortingOrder
    score_type: str = DEFAULT_SCORE_TYPE
    start_date: date | None = None
    end_date: date | None = None

    model_config = ConfigDict(extra="ignore")

    @field_validator("score_type", mode="before")
    @classmethod
    def _default_score_type(cls, value: Any) -> Any:
        return value or DEFAULT_SCORE_TYPE

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _blank_date(cls, value: Any) -> Any:
        if value in ("", None):
            return None
        if isinstance(value, str) and len(value) > 10:
            return parse_timestamp(value).date()
        return value


class BulkCompetitionEnvelope(CompetitionEnvelope):
    scores: list[ScoreEnvelope] = Field(default_factory=list)

    @field_validator("scores", mode="before")
    @classmethod
    def _no_scores(cls, value: Any) -> Any:
        return value or []


class BulkImportEnvelope(BaseModel):
    competitions: list[BulkCompetitionEnvelope]

    model_config = ConfigDict(extra="ignore")
