from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, func
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from leaderboard_service.entities.competition import (
    Competition, CompetitionStatus, Player, SortingOrder,
)
from leaderboard_service.entities.score import (
    PlayerHistoryEntry, ScoreSubmission, SnapshotRecord, ensure_utc,
)
from leaderboard_service.db.tables import (
    CompetitionRow,
    PlayerHistoryRow,
    PlayerRow,
    ScoreRow,
    SnapshotRow,
)
from leaderboard_service.db.transactions import commit
from leaderboard_service.errors import ConflictError
from leaderboard_service.services.interfaces import (
    CompetitionRepository,
    PlayerHistoryRepository,
    PlayerRepository,
    ScoreRepository,
    SnapshotRepository,
)


class DBCompetitionRepository(CompetitionRepository):
    def __init__(self, session: Session):
        self._session = session

    def fetch_by_unique_id(self, unique_id: str) -> Competition | None:
        row = self._session.exec(
            select(CompetitionRow).where(CompetitionRow.unique_id == unique_id)
        ).first()
        return self._row_to_domain(row) if row else None

    def find(self, *, status: str | None = None) -> list[Competition]:
        stmt = select(CompetitionRow)
        if status is not None:
            stmt = stmt.where(CompetitionRow.status == status)
        stmt = stmt.order_by(CompetitionRow.created_at.desc(), CompetitionRow.id.desc())
        return [self._row_to_domain(row) for row in self._session.exec(stmt).all()]

    def save(self, competition: Competition) -> Competition:
        row = CompetitionRow(
            unique_id=competition.unique_id,
            name=competition.name,
            score_type=competition.score_type,
            sorting_order=str(competition.sorting_order),
            status=str(competition.status),
            start_date=competition.start_date,
            end_date=competition.end_date,
            created_at=competition.created_at,
        )
        try:
            with self._session.begin_nested():
                self._session.add(row)
        except IntegrityError:
            # unique_id taken by a concurrent create
            raise ConflictError("Competition already exists") from None
        competition.id = row.id
        commit(self._session)
        return competition

    def update_status(self, competition_id: int, status: CompetitionStatus) -> None:
        row = self._session.get(CompetitionRow, competition_id)
        if row is not None:
            row.status = str(status)
            commit(self._session)

    @staticmethod
    def _row_to_domain(row: CompetitionRow) -> Competition:
        return Competition(
            id=row.id,
            unique_id=row.unique_id,
            name=row.name,
            sorting_order=SortingOrder(row.sorting_order),
            status=CompetitionStatus(row.status),
            score_type=row.score_type,
            start_date=row.start_date,
            end_date=row.end_date,
            created_at=ensure_utc(row.created_at),
        )


class DBPlayerRepository(PlayerRepository):
    def __init__(self, session: Session):
        self._session = session

    def fetch_by_name(self, name: str) -> Player | None:
        row = self._session.exec(select(PlayerRow).where(PlayerRow.name == name)).first()
        return self._row_to_domain(row) if row else None

    def get_or_create(self, name: str) -> tuple[Player, bool]:
        existing = self.fetch_by_name(name)
        if existing is not None:
            return existing, False

        row = PlayerRow(name=name)
        try:
            with self._session.begin_nested():
                self._session.add(row)
        except IntegrityError:
            # Another request inserted the same name first.
            existing = self.fetch_by_name(name)
            if existing is None:
                raise
            return existing, False

        player = self._row_to_domain(row)
        commit(self._session)
        return player, True

    @staticmethod
    def _row_to_domain(row: PlayerRow) -> Player:
        return Player(id=row.id, name=row.name, created_at=ensure_utc(row.created_at))


class DBScoreRepository(ScoreRepository):
    def __init__(self, session: Session):
        self._session = session

    def save(self, submission: ScoreSubmission) -> ScoreSubmission:
        row = ScoreRow(
            competition_id=submission.competition_id,
            player_id=submission.player_id,
            score=submission.score,
            timestamp=ensure_utc(submission.timestamp),
        )
        self._session.add(row)
        self._session.flush()
        submission.id = row.id
        commit(self._session)
        return submission

    def find_latest(
        self,
        competition_id: int,
        *,
        since: datetime | None = None,
        until: datetime | None = None,
    ) -> list[ScoreSubmission]:
        position = func.row_number().over(
            partition_by=ScoreRow.player_id,
            order_by=(ScoreRow.timestamp.desc(), ScoreRow.id.desc()),
        ).label("position")
        ranked = select(ScoreRow.id.label("score_id"), position).where(
            ScoreRow.competition_id == competition_id,
        )
        if since is not None:
            ranked = ranked.where(ScoreRow.timestamp >= ensure_utc(since))
        if until is not None:
            ranked = ranked.where(ScoreRow.timestamp <= ensure_utc(until))
        ranked = ranked.subquery()

        stmt = (
            select(ScoreRow, PlayerRow.name)
            .join(ranked, ranked.c.score_id == ScoreRow.id)
            .join(PlayerRow, PlayerRow.id == ScoreRow.player_id)
            .where(ranked.c.position == 1)
        )
        return [self._row_to_domain(row, name) for row, name in self._session.exec(stmt).all()]

    def find(
        self,
        competition_id: int,
        *,
        player_id: int | None = None,
    ) -> list[ScoreSubmission]:
        stmt = (
            select(ScoreRow, PlayerRow.name)
            .join(PlayerRow, PlayerRow.id == ScoreRow.player_id)
            .where(ScoreRow.competition_id == competition_id)
        )
        if player_id is not None:
            stmt = stmt.where(ScoreRow.player_id == player_id)
        stmt = stmt.order_by(ScoreRow.timestamp.desc(), ScoreRow.id.desc())
        return [self._row_to_domain(row, name) for row, name in self._session.exec(stmt).all()]

    def delete_by_competition(self, competition_id: int) -> int:
        result = self._session.execute(
            delete(ScoreRow).where(ScoreRow.competition_id == competition_id)
        )
        commit(self._session)
        return result.rowcount or 0

    @staticmethod
    def _row_to_domain(row: ScoreRow, player_name: str | None) -> ScoreSubmission:
        return ScoreSubmission(
            id=row.id,
            competition_id=row.competition_id,
            player_id=row.player_id,
            player_name=player_name,
            score=row.score,
            timestamp=ensure_utc(row.timestamp),
        )


class DBSnapshotRepository(SnapshotRepository):
    def __init__(self, session: Session):
        self._session = session

    def save(self, record: SnapshotRecord) -> SnapshotRecord:
        row = SnapshotRow(
            competition_id=record.competition_id,
            final_leaderboard_jsonb=record.final_leaderboard,
            total_participants=record.total_participants,
            snapshot_date=ensure_utc(record.snapshot_date),
        )
        self._session.add(row)
        self._session.flush()
        record.id = row.id
        commit(self._session)
        return record

    def find(self, competition_id: int) -> list[SnapshotRecord]:
        stmt = (
            select(SnapshotRow)
            .where(SnapshotRow.competition_id == competition_id)
            .order_by(SnapshotRow.snapshot_date.desc(), SnapshotRow.id.desc())
        )
        return [SnapshotRecord(
            id=r.id, competition_id=r.competition_id,
            final_leaderboard=r.final_leaderboard_jsonb or [],
            total_participants=r.total_participants,
            snapshot_date=ensure_utc(r.snapshot_date),
        ) for r in self._session.exec(stmt).all()]

    def delete_by_competition(self, competition_id: int) -> int:
        result = self._session.execute(
            delete(SnapshotRow).where(SnapshotRow.competition_id == competition_id)
        )
        commit(self._session)
        return result.rowcount or 0


class DBPlayerHistoryRepository(PlayerHistoryRepository):
    def __init__(self, session: Session):
        self._session = session

    def exists(self, player_id: int, competition_id: int) -> bool:
        row = self._session.exec(
            select(PlayerHistoryRow.id).where(
                PlayerHistoryRow.player_id == player_id,
                PlayerHistoryRow.competition_id == competition_id,
            )
        ).first()
        return row is not None

    def save(self, entry: PlayerHistoryEntry) -> PlayerHistoryEntry:
        row = PlayerHistoryRow(
            player_id=entry.player_id,
            competition_id=entry.competition_id,
            final_rank=entry.final_rank,
            final_score=entry.final_score,
            completed_date=ensure_utc(entry.completed_date),
        )
        self._session.add(row)
        self._session.flush()
        entry.id = row.id
        commit(self._session)
        return entry

    def find_by_player(self, player_id: int) -> list[PlayerHistoryEntry]:
        stmt = (
            select(PlayerHistoryRow, CompetitionRow.name, CompetitionRow.unique_id)
            .join(CompetitionRow, CompetitionRow.id == PlayerHistoryRow.competition_id)
            .where(PlayerHistoryRow.player_id == player_id)
            .order_by(PlayerHistoryRow.completed_date.desc(), PlayerHistoryRow.id.desc())
        )
        return [PlayerHistoryEntry(
            id=r.id, player_id=r.player_id, competition_id=r.competition_id,
            final_rank=r.final_rank, final_score=r.final_score,
            completed_date=ensure_utc(r.completed_date),
            competition_name=name, competition_unique_id=unique_id,
        ) for r, name, unique_id in self._session.exec(stmt).all()]

    def delete_by_competition(self, competition_id: int) -> int:
        result = self._session.execute(
            delete(PlayerHistoryRow).where(PlayerHistoryRow.competition_id == competition_id)
        )
        commit(self._session)
        return result.rowcount or 0
