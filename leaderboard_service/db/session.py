from __future__ import annotations

import os

from sqlmodel import Session, create_engine


def database_url() -> str:
    explicit = os.getenv("DATABASE_URL", "").strip()
    if explicit:
        return explicit
    user = os.getenv("POSTGRES_USER", "leaderboard")
    password = os.getenv("POSTGRES_PASSWORD", "leaderboard")
    host = os.getenv("POSTGRES_HOST", "postgres")
    port = os.getenv("POSTGRES_PORT", "5432")
    db = os.getenv("POSTGRES_DB", "leaderboard")
    return f"postgresql+psycopg2://{user}:{password}@{host}:{port}/{db}"


engine = create_engine(database_url(), pool_pre_ping=True)

_migrated = False


def create_session() -> Session:
    global _migrated
    if not _migrated:
        from leaderboard_service.db.init_db import auto_migrate
        auto_migrate()
        _migrated = True
    return Session(engine)
