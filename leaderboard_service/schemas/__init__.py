from leaderboard_service.schemas.payload_contracts import (
    BulkCompetitionEnvelope,
    BulkImportEnvelope,
    CompetitionEnvelope,
    ScoreEnvelope,
    parse_score,
    parse_timestamp,
)

__all__ = [
    "BulkCompetitionEnvelope",
    "BulkImportEnvelope",
    "CompetitionEnvelope",
    "ScoreEnvelope",
    "parse_score",
    "parse_timestamp",
]
