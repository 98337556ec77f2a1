"""Ranking engine: current leaderboard from the score log.

A player's standing is their most recent submission inside the window, not
their best one. Entries are ordered by score in the competition's direction,
then by timestamp (earlier first), then by insertion sequence, and ranks are
the 1-based positions in that order, so ties never share a rank.
"""
from __future__ import annotations

import logging
from datetime import date, datetime, time, timezone
from typing import Any, Iterable

from leaderboard_service.entities.competition import Competition, SortingOrder
from leaderboard_service.entities.leaderboard import Leaderboard, TimeWindow
from leaderboard_service.entities.score import LeaderboardEntry, ScoreSubmission, ensure_utc
from leaderboard_service.errors import ValidationError, internal_errors
from leaderboard_service.schemas import parse_timestamp
from leaderboard_service.services.interfaces import CompetitionRepository, ScoreRepository
from leaderboard_service.services.lookups import require_competition

_DATE_ONLY_LENGTH = len("YYYY-MM-DD")


def _parse_bound(value: Any, *, end: bool) -> tuple[datetime | None, str | None]:
    if value is None or value == "":
        return None, None

    day: date | None = None
    if isinstance(value, datetime):
        return ensure_utc(value), value.isoformat()
    if isinstance(value, date):
        day = value
    elif isinstance(value, str) and len(value.strip()) == _DATE_ONLY_LENGTH:
        try:
            day = date.fromisoformat(value.strip())
        except ValueError:
            raise ValidationError(f"Invalid date: {value!r}") from None

    if day is not None:
        # Date-only bounds cover the whole day on both ends.
        bound = datetime.combine(day, time.max if end else time.min, tzinfo=timezone.utc)
        return bound, str(value).strip() if isinstance(value, str) else day.isoformat()

    try:
        return parse_timestamp(value), str(value)
    except ValueError as exc:
        raise ValidationError(str(exc)) from None


def resolve_window(start: Any = None, end: Any = None) -> TimeWindow:
    start_at, start_label = _parse_bound(start, end=False)
    end_at, end_label = _parse_bound(end, end=True)
    return TimeWindow(start=start_at, end=end_at, start_label=start_label, end_label=end_label)


def _sort_key(sorting_order: SortingOrder):
    sign = -1.0 if sorting_order == SortingOrder.DESC else 1.0

    def key(submission: ScoreSubmission) -> tuple[float, datetime, int]:
        return (sign * submission.score, ensure_utc(submission.timestamp), submission.id or 0)

    return key


def latest_per_player(submissions: Iterable[ScoreSubmission]) -> list[ScoreSubmission]:
    """Keep each player's most recent submission (timestamp, then insertion id)."""
    latest: dict[int, ScoreSubmission] = {}
    for submission in submissions:
        current = latest.get(submission.player_id)
        if current is None or (
            (ensure_utc(submission.timestamp), submission.id or 0)
            > (ensure_utc(current.timestamp), current.id or 0)
        ):
            latest[submission.player_id] = submission
    return list(latest.values())


def rank_latest(
    submissions: Iterable[ScoreSubmission], sorting_order: SortingOrder,
) -> list[LeaderboardEntry]:
    """Order one-submission-per-player rows and assign strictly sequential ranks."""
    ordered = sorted(submissions, key=_sort_key(sorting_order))
    return [
        LeaderboardEntry(
            rank=idx,
            player_name=submission.player_name or "",
            score=submission.score,
            timestamp=ensure_utc(submission.timestamp),
            player_id=submission.player_id,
        )
        for idx, submission in enumerate(ordered, start=1)
    ]


class RankingEngine:
    def __init__(
        self,
        competition_repository: CompetitionRepository,
        score_repository: ScoreRepository,
    ):
        self.competition_repository = competition_repository
        self.score_repository = score_repository
        self.logger = logging.getLogger(__name__)

    @internal_errors("Error fetching leaderboard")
    def leaderboard(
        self,
        competition_unique_id: str,
        start: Any = None,
        end: Any = None,
        limit: int | None = None,
    ) -> Leaderboard:
        if limit is not None and (isinstance(limit, bool) or int(limit) < 1):
            raise ValidationError("limit must be a positive integer")
        window = resolve_window(start, end)

        competition = require_competition(self.competition_repository, competition_unique_id)
        entries = self.compute(competition, window)
        if limit is not None:
            entries = entries[: int(limit)]
        return Leaderboard(competition=competition, entries=entries, window=window)

    def compute(
        self, competition: Competition, window: TimeWindow | None = None,
    ) -> list[LeaderboardEntry]:
        window = window or TimeWindow()
        latest = self.score_repository.find_latest(
            competition.id, since=window.start, until=window.end,
        )
        entries = rank_latest(latest, competition.sorting_order)
        self.logger.debug(
            "leaderboard competition=%s window=%s entries=%d",
            competition.unique_id, window.period, len(entries),
        )
        return entries
