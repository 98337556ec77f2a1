from __future__ import annotations

import logging
import os
from pathlib import Path

from sqlalchemy import inspect as sa_inspect
from sqlalchemy import text
from sqlmodel import SQLModel

from leaderboard_service.db import tables  # noqa: F401  registers every table on SQLModel.metadata
from leaderboard_service.db.session import engine

logger = logging.getLogger(__name__)


def tables_to_reset() -> list[str]:
    return [
        "player_history",
        "competition_snapshots",
        "scores",
        "players",
        "competitions",
        "alembic_version",
    ]


def _find_alembic_dir() -> Path | None:
    """Locate the Alembic migrations directory.

    Checks ``ALEMBIC_DIR`` first, then ``<repo>/alembic`` next to the package.
    Returns ``None`` when neither exists (e.g. a wheel install), in which case
    callers fall back to ``SQLModel.metadata.create_all()``.
    """
    def _is_valid(p: Path) -> bool:
        return p.is_dir() and (p / "env.py").exists() and (p / "versions").is_dir()

    env_dir = os.getenv("ALEMBIC_DIR")
    if env_dir and _is_valid(Path(env_dir)):
        return Path(env_dir)

    repo_dir = Path(__file__).resolve().parent.parent.parent / "alembic"
    if _is_valid(repo_dir):
        return repo_dir
    return None


def _alembic_config(alembic_dir: Path):
    from alembic.config import Config

    alembic_cfg = Config()
    alembic_cfg.set_main_option("script_location", str(alembic_dir))
    alembic_cfg.set_main_option("sqlalchemy.url", str(engine.url))
    return alembic_cfg


def migrate() -> None:
    """Bring the schema to head. Safe to run on every boot, never drops data."""
    alembic_dir = _find_alembic_dir()
    if alembic_dir is None:
        logger.info("no Alembic migrations directory found, using SQLModel create_all")
        SQLModel.metadata.create_all(engine)
        return

    from alembic import command

    logger.info("running Alembic migrations from %s", alembic_dir)
    try:
        command.upgrade(_alembic_config(alembic_dir), "head")
    except Exception as exc:
        logger.warning("Alembic migration failed (%s), falling back to create_all", exc)
        SQLModel.metadata.create_all(engine)
    logger.info("database migration complete")


def reset_db() -> None:
    """Drop all tables and recreate from scratch. Destroys all data."""
    logger.warning("dropping all tables")
    with engine.begin() as conn:
        for table in tables_to_reset():
            conn.execute(text(f"DROP TABLE IF EXISTS {table} CASCADE"))
    migrate()
    logger.info("database reset complete")


def auto_migrate() -> None:
    """Create the schema on first use; apply pending migrations afterwards."""
    try:
        if not sa_inspect(engine).has_table("competitions"):
            migrate()
            return
        alembic_dir = _find_alembic_dir()
        if alembic_dir is not None:
            from alembic import command

            command.upgrade(_alembic_config(alembic_dir), "head")
    except Exception as exc:
        logger.warning("auto_migrate failed: %s", exc)


if __name__ == "__main__":
    import sys

    from leaderboard_service.utils.logging_config import setup_logging

    setup_logging()
    if "--reset" in sys.argv:
        reset_db()
    else:
        migrate()
    sys.exit(0)
