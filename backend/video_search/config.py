"""
Runtime configuration for the lecture search service.
Values come from the process environment (a .env file is loaded by main.py).
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


@dataclass(frozen=True)
class Settings:
    """Deployment settings shared by every pipeline stage."""

    groq_api_key: Optional[str] = None
    qdrant_url: Optional[str] = None
    qdrant_api_key: Optional[str] = None
    qdrant_collection: str = "lecture_passages"
    embedding_model: str = "all-MiniLM-L6-v2"

    # Retrieval
    min_score: float = 0.35
    top_k: int = 50
    passage_max_chars: int = 200

    # Context windows for the synthesis stages
    summary_max_videos: int = 5
    summary_max_timestamps: int = 3
    summary_passage_chars: int = 100
    learning_path_max_videos: int = 20

    # Timeouts (seconds) for every external call
    embedding_timeout: float = 10.0
    index_timeout: float = 10.0
    completion_timeout: float = 30.0

    cache_ttl_seconds: float = 3600.0
    allowed_origins: List[str] = field(default_factory=lambda: ["http://localhost:3000"])
    log_level: str = "INFO"

    def __post_init__(self):
        if not 0.0 <= self.min_score <= 1.0:
            raise ValueError(f"MIN_SCORE must be between 0 and 1, got {self.min_score}")
        for name in (
            "top_k", "passage_max_chars", "summary_max_videos",
            "summary_max_timestamps", "summary_passage_chars",
            "learning_path_max_videos",
        ):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name.upper()} must be positive, got {getattr(self, name)}")
        for name in ("embedding_timeout", "index_timeout", "completion_timeout"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name.upper()} must be positive, got {getattr(self, name)}")

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables, falling back to defaults."""
        origins = os.getenv("ALLOWED_ORIGINS", "http://localhost:3000")
        return cls(
            groq_api_key=os.getenv("GROQ_API_KEY"),
            qdrant_url=os.getenv("QDRANT_URL"),
            qdrant_api_key=os.getenv("QDRANT_API_KEY"),
            qdrant_collection=os.getenv("QDRANT_COLLECTION", "lecture_passages"),
            embedding_model=os.getenv("EMBEDDING_MODEL", "all-MiniLM-L6-v2"),
            min_score=_env_float("MIN_SCORE", 0.35),
            top_k=_env_int("TOP_K", 50),
            passage_max_chars=_env_int("PASSAGE_MAX_CHARS", 200),
            summary_max_videos=_env_int("SUMMARY_MAX_VIDEOS", 5),
            summary_max_timestamps=_env_int("SUMMARY_MAX_TIMESTAMPS", 3),
            summary_passage_chars=_env_int("SUMMARY_PASSAGE_CHARS", 100),
            learning_path_max_videos=_env_int("LEARNING_PATH_MAX_VIDEOS", 20),
            embedding_timeout=_env_float("EMBEDDING_TIMEOUT", 10.0),
            index_timeout=_env_float("INDEX_TIMEOUT", 10.0),
            completion_timeout=_env_float("COMPLETION_TIMEOUT", 30.0),
            cache_ttl_seconds=_env_float("CACHE_TTL_SECONDS", 3600.0),
            allowed_origins=[o.strip() for o in origins.split(",") if o.strip()],
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
