from .repositories import (
    DBCompetitionRepository, DBPlayerHistoryRepository, DBPlayerRepository,
    DBScoreRepository, DBSnapshotRepository,
)
from .session import engine, create_session, database_url
from .transactions import atomic, commit
