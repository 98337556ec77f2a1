from __future__ import annotations

import logging
from typing import Annotated, Any, Generator, Mapping

import uvicorn
from fastapi import APIRouter, Body, Depends, FastAPI, Query, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from leaderboard_service.config.runtime import RuntimeSettings
from leaderboard_service.db import (
    DBCompetitionRepository,
    DBPlayerHistoryRepository,
    DBPlayerRepository,
    DBScoreRepository,
    DBSnapshotRepository,
    atomic,
    create_session,
)
from leaderboard_service.entities.competition import Competition
from leaderboard_service.errors import InternalError, LeaderboardError
from leaderboard_service.services.finalization import FinalizationService
from leaderboard_service.services.lifecycle import CompetitionService
from leaderboard_service.services.rank_query import RankQueryService
from leaderboard_service.services.ranking import RankingEngine
from leaderboard_service.services.score_store import ScoreStore
from leaderboard_service.utils.logging_config import setup_logging

logger = logging.getLogger(__name__)

SETTINGS = RuntimeSettings.from_env()

app = FastAPI(title="Leaderboard API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(SETTINGS.cors_allow_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

router = APIRouter(prefix="/api/competitions", tags=["competitions"])


@app.exception_handler(LeaderboardError)
async def leaderboard_error_handler(request: Request, exc: LeaderboardError) -> JSONResponse:
    content: dict[str, Any] = {"message": exc.message}
    if isinstance(exc, InternalError):
        logger.error(
            "%s %s failed: %s (%s)", request.method, request.url.path, exc.message, exc.detail,
            exc_info=exc,
        )
        if exc.detail:
            content["error"] = exc.detail
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("%s %s database error", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Database error", "error": str(exc)},
    )


# ── dependencies ──


def get_db_session() -> Generator[Session, Any, None]:
    with create_session() as session:
        yield session


def get_score_store(
    session_db: Annotated[Session, Depends(get_db_session)]
) -> ScoreStore:
    return ScoreStore(
        competition_repository=DBCompetitionRepository(session_db),
        player_repository=DBPlayerRepository(session_db),
        score_repository=DBScoreRepository(session_db),
    )


def get_ranking_engine(
    session_db: Annotated[Session, Depends(get_db_session)]
) -> RankingEngine:
    return RankingEngine(
        competition_repository=DBCompetitionRepository(session_db),
        score_repository=DBScoreRepository(session_db),
    )


def get_rank_query_service(
    session_db: Annotated[Session, Depends(get_db_session)]
) -> RankQueryService:
    return RankQueryService(
        competition_repository=DBCompetitionRepository(session_db),
        score_repository=DBScoreRepository(session_db),
        neighbour_count=SETTINGS.neighbour_count,
    )


def get_finalization_service(
    session_db: Annotated[Session, Depends(get_db_session)]
) -> FinalizationService:
    return FinalizationService(
        competition_repository=DBCompetitionRepository(session_db),
        player_repository=DBPlayerRepository(session_db),
        score_repository=DBScoreRepository(session_db),
        snapshot_repository=DBSnapshotRepository(session_db),
        history_repository=DBPlayerHistoryRepository(session_db),
        atomic=lambda: atomic(session_db),
    )


def get_competition_service(
    session_db: Annotated[Session, Depends(get_db_session)],
    score_store: Annotated[ScoreStore, Depends(get_score_store)],
) -> CompetitionService:
    return CompetitionService(
        competition_repository=DBCompetitionRepository(session_db),
        score_store=score_store,
        atomic=lambda: atomic(session_db),
    )


def _competition_summary(competition: Competition) -> dict[str, Any]:
    return {
        "id": competition.id,
        "name": competition.name,
        "unique_id": competition.unique_id,
        "score_type": competition.score_type,
        "sorting_order": str(competition.sorting_order),
        "status": str(competition.status),
        "start_date": competition.start_date,
        "end_date": competition.end_date,
        "created_at": competition.created_at,
    }


def _as_mapping(payload: Any) -> Mapping[str, Any]:
    return payload if isinstance(payload, Mapping) else {}


# ── routes ──


@app.get("/", response_class=PlainTextResponse)
def root() -> str:
    return "Leaderboard API is running!"


@app.get("/healthz")
def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get("")
def list_competitions(
    service: Annotated[CompetitionService, Depends(get_competition_service)],
    status_filter: Annotated[str, Query(alias="status")] = "all",
) -> dict[str, Any]:
    competitions = service.list_competitions(status_filter)
    return {
        "total": len(competitions),
        "competitions": [_competition_summary(c) for c in competitions],
    }


@router.post("", status_code=status.HTTP_201_CREATED)
def create_competition(
    service: Annotated[CompetitionService, Depends(get_competition_service)],
    payload: Annotated[Any, Body()] = None,
) -> dict[str, Any]:
    competition = service.create(_as_mapping(payload))
    return {
        "message": "Competition created",
        "competition": {
            "id": competition.id,
            "name": competition.name,
            "unique_id": competition.unique_id,
            "score_type": competition.score_type,
            "sorting_order": str(competition.sorting_order),
            "status": str(competition.status),
        },
    }


@router.post("/bulk")
def bulk_import(
    service: Annotated[CompetitionService, Depends(get_competition_service)],
    payload: Annotated[Any, Body()] = None,
) -> dict[str, Any]:
    result = service.bulk_import(payload)
    return {
        "message": "Payload processed successfully",
        "competitions_created": result.competitions_created,
        "scores_added": result.scores_added,
    }


@router.get("/players/{player_name}/history")
def get_player_history(
    player_name: str,
    service: Annotated[FinalizationService, Depends(get_finalization_service)],
) -> dict[str, Any]:
    history = service.player_history(player_name)
    return {
        "player_name": player_name,
        "competitions_participated": len(history),
        "history": [
            {
                "competition": entry.competition_name,
                "competition_id": entry.competition_unique_id,
                "rank": entry.final_rank,
                "score": entry.final_score,
                "completed_date": entry.completed_date,
            }
            for entry in history
        ],
    }


@router.get("/{unique_id}/leaderboard")
def get_leaderboard(
    unique_id: str,
    engine: Annotated[RankingEngine, Depends(get_ranking_engine)],
    limit: Annotated[int | None, Query()] = None,
    start: Annotated[str | None, Query()] = None,
    end: Annotated[str | None, Query()] = None,
) -> dict[str, Any]:
    leaderboard = engine.leaderboard(
        unique_id, start=start, end=end,
        limit=limit if limit is not None else SETTINGS.leaderboard_default_limit,
    )
    competition = leaderboard.competition
    return {
        "competition": {
            "name": competition.name,
            "unique_id": competition.unique_id,
            "score_type": competition.score_type,
            "sorting_order": str(competition.sorting_order),
            "status": str(competition.status),
        },
        "time_window": {
            "period": leaderboard.window.period,
            "start": start or None,
            "end": end or None,
        },
        "leaderboard": leaderboard.to_dicts(),
        "total_results": len(leaderboard.entries),
    }


@router.get("/{unique_id}/snapshots")
def get_snapshots(
    unique_id: str,
    service: Annotated[FinalizationService, Depends(get_finalization_service)],
) -> dict[str, Any]:
    competition, snapshots = service.snapshots(unique_id)
    if not snapshots:
        return {
            "message": "No snapshots yet. Run finalize endpoint first.",
            "competition": competition.name,
            "total_snapshots": 0,
            "snapshots": [],
        }
    return {
        "competition": competition.name,
        "total_snapshots": len(snapshots),
        "snapshots": [
            {
                "snapshot_id": snapshot.id,
                "date": snapshot.snapshot_date,
                "participants": snapshot.total_participants,
                "results": snapshot.final_leaderboard,
            }
            for snapshot in snapshots
        ],
    }


@router.post("/{unique_id}/scores", status_code=status.HTTP_201_CREATED)
def submit_score(
    unique_id: str,
    store: Annotated[ScoreStore, Depends(get_score_store)],
    payload: Annotated[Any, Body()] = None,
) -> dict[str, Any]:
    body = _as_mapping(payload)
    submission = store.append(unique_id, body.get("player_name"), body.get("score"), body.get("timestamp"))
    return {
        "message": "Score recorded successfully.",
        "player_name": submission.player_name,
        "score": submission.score,
    }


@router.post("/{unique_id}/finalize")
def finalize_competition(
    unique_id: str,
    service: Annotated[FinalizationService, Depends(get_finalization_service)],
) -> dict[str, Any]:
    result = service.finalize(unique_id)
    return {
        "message": "Competition finalized and saved",
        "competition": result.competition.name,
        "final_leaderboard": [entry.to_dict() for entry in result.leaderboard],
        "participants": result.participants,
    }


@router.post("/{unique_id}/reset")
def reset_competition(
    unique_id: str,
    service: Annotated[FinalizationService, Depends(get_finalization_service)],
) -> dict[str, Any]:
    result = service.reset(unique_id)
    return {
        "message": f"Competition {unique_id} successfully reset. Scores cleared.",
        "records_deleted": result.records_deleted(),
        "new_status": str(result.competition.status),
    }


@router.get("/{unique_id}/players/{player_name}/scores")
def get_player_scores(
    unique_id: str,
    player_name: str,
    store: Annotated[ScoreStore, Depends(get_score_store)],
) -> dict[str, Any]:
    _, scores = store.player_scores(unique_id, player_name)
    return {
        "competition_id": unique_id,
        "player_name": player_name,
        "submission_count": len(scores),
        "scores": [
            {"submission": idx, "score": s.score, "timestamp": s.timestamp}
            for idx, s in enumerate(scores, start=1)
        ],
        "latest_score": scores[0].score,
    }


@router.get("/{unique_id}/players/{player_name}/rank")
def get_player_rank(
    unique_id: str,
    player_name: str,
    service: Annotated[RankQueryService, Depends(get_rank_query_service)],
    friend_of: Annotated[str | None, Query()] = None,
) -> dict[str, Any]:
    standing = service.get_rank(unique_id, player_name)
    return {
        "competition_id": unique_id,
        "player_name": standing.player_name,
        "score": standing.score,
        "rank": standing.rank,
        "is_friend": bool(friend_of),
    }


@router.get("/{unique_id}/neighbours/{player_name}")
def get_neighbours(
    unique_id: str,
    player_name: str,
    service: Annotated[RankQueryService, Depends(get_rank_query_service)],
    count: Annotated[int | None, Query()] = None,
) -> dict[str, Any]:
    neighbours = service.get_neighbours(unique_id, player_name, count)
    return {
        "competition_id": unique_id,
        "player": {"player_name": neighbours.player_name, "score": neighbours.score},
        "above_players": [{"player_name": e.player_name, "score": e.score} for e in neighbours.above],
        "below_players": [{"player_name": e.player_name, "score": e.score} for e in neighbours.below],
    }


app.include_router(router)


if __name__ == "__main__":
    setup_logging(SETTINGS.log_level)
    logger.info("leaderboard api bootstrap")
    uvicorn.run(app, host=SETTINGS.api_host, port=SETTINGS.api_port)
