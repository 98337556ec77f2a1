"""initial leaderboard schema

Revision ID: 001
Revises:
Create Date: 2026-10-17
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ── Competitions & players ──
    op.create_table(
        "competitions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("unique_id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("score_type", sa.String(), nullable=False, server_default="points"),
        sa.Column("sorting_order", sa.String(), nullable=False),
        sa.Column("status", sa.String(), nullable=False, server_default="active"),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_competitions_unique_id", "competitions", ["unique_id"], unique=True)
    op.create_index("ix_competitions_status", "competitions", ["status"])
    op.create_index("ix_competitions_created_at", "competitions", ["created_at"])

    op.create_table(
        "players",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_players_name", "players", ["name"], unique=True)

    # ── Score log → snapshots → history ──
    op.create_table(
        "scores",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("competition_id", sa.Integer(), sa.ForeignKey("competitions.id"), nullable=False),
        sa.Column("player_id", sa.Integer(), sa.ForeignKey("players.id"), nullable=False),
        sa.Column("score", sa.Float(), nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_scores_competition_id", "scores", ["competition_id"])
    op.create_index("ix_scores_player_id", "scores", ["player_id"])
    op.create_index("ix_scores_timestamp", "scores", ["timestamp"])

    op.create_table(
        "competition_snapshots",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("competition_id", sa.Integer(), sa.ForeignKey("competitions.id"), nullable=False),
        sa.Column("total_participants", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("final_leaderboard_jsonb", postgresql.JSONB(), server_default="[]"),
        sa.Column("snapshot_date", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_competition_snapshots_competition_id", "competition_snapshots", ["competition_id"])
    op.create_index("ix_competition_snapshots_snapshot_date", "competition_snapshots", ["snapshot_date"])

    op.create_table(
        "player_history",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("player_id", sa.Integer(), sa.ForeignKey("players.id"), nullable=False),
        sa.Column("competition_id", sa.Integer(), sa.ForeignKey("competitions.id"), nullable=False),
        sa.Column("final_rank", sa.Integer(), nullable=False),
        sa.Column("final_score", sa.Float(), nullable=False),
        sa.Column("completed_date", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("player_id", "competition_id", name="uq_player_history_player_competition"),
    )
    op.create_index("ix_player_history_player_id", "player_history", ["player_id"])
    op.create_index("ix_player_history_competition_id", "player_history", ["competition_id"])
    op.create_index("ix_player_history_completed_date", "player_history", ["completed_date"])


def downgrade() -> None:
    op.drop_table("player_history")
    op.drop_table("competition_snapshots")
    op.drop_table("scores")
    op.drop_table("players")
    op.drop_table("competitions")
