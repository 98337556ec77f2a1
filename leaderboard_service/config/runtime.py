from __future__ import annotations

from dataclasses import dataclass
import os


@dataclass(frozen=True)
class RuntimeSettings:
    api_host: str
    api_port: int
    log_level: str
    leaderboard_default_limit: int
    neighbour_count: int
    cors_allow_origins: tuple[str, ...]

    @classmethod
    def from_env(cls) -> "RuntimeSettings":
        origins = os.getenv("CORS_ALLOW_ORIGINS", "*")
        return cls(
            api_host=os.getenv("API_HOST", "0.0.0.0"),
            api_port=int(os.getenv("API_PORT", "8000")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            leaderboard_default_limit=int(os.getenv("LEADERBOARD_DEFAULT_LIMIT", "10")),
            neighbour_count=int(os.getenv("NEIGHBOUR_COUNT", "2")),
            cors_allow_origins=tuple(o.strip() for o in origins.split(",") if o.strip()),
        )
