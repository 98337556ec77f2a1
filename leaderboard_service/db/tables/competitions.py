"""Competition, player, score, snapshot and history tables."""
from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any

from sqlalchemy import JSON, Column, DateTime, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlmodel import Field, SQLModel


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _timestamp_column(*, index: bool = False) -> Column:
    return Column(DateTime(timezone=True), nullable=False, index=index)


class CompetitionRow(SQLModel, table=True):
    __tablename__ = "competitions"

    id: int | None = Field(default=None, primary_key=True)
    unique_id: str = Field(unique=True, index=True)
    name: str
    score_type: str = Field(default="points")
    sorting_order: str
    status: str = Field(default="active", index=True)
    start_date: date | None = None
    end_date: date | None = None

    created_at: datetime = Field(default_factory=utc_now, sa_column=_timestamp_column(index=True))


class PlayerRow(SQLModel, table=True):
    __tablename__ = "players"

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(unique=True, index=True)

    created_at: datetime = Field(default_factory=utc_now, sa_column=_timestamp_column())


class ScoreRow(SQLModel, table=True):
    __tablename__ = "scores"

    id: int | None = Field(default=None, primary_key=True)
    competition_id: int = Field(foreign_key="competitions.id", index=True)
    player_id: int = Field(foreign_key="players.id", index=True)
    score: float

    timestamp: datetime = Field(default_factory=utc_now, sa_column=_timestamp_column(index=True))


class SnapshotRow(SQLModel, table=True):
    __tablename__ = "competition_snapshots"

    id: int | None = Field(default=None, primary_key=True)
    competition_id: int = Field(foreign_key="competitions.id", index=True)
    total_participants: int = 0

    final_leaderboard_jsonb: list[dict[str, Any]] = Field(
        default_factory=list, sa_column=Column(JSON().with_variant(JSONB(), "postgresql")),
    )

    snapshot_date: datetime = Field(default_factory=utc_now, sa_column=_timestamp_column(index=True))


class PlayerHistoryRow(SQLModel, table=True):
    __tablename__ = "player_history"
    __table_args__ = (
        UniqueConstraint("player_id", "competition_id", name="uq_player_history_player_competition"),
    )

    id: int | None = Field(default=None, primary_key=True)
    player_id: int = Field(foreign_key="players.id", index=True)
    competition_id: int = Field(foreign_key="competitions.id", index=True)
    final_rank: int
    final_score: float

    completed_date: datetime = Field(default_factory=utc_now, sa_column=_timestamp_column(index=True))
