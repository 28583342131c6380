"""
Retrieval engine: embed → nearest passages → score floor → group by video.

Aggregation is pure: identical embedding and index responses always produce
identical VideoResult sequences.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from video_search.models.schemas import PassageMatch, Timestamp, VideoResult
from video_search.services.cache import CacheService
from video_search.services.embedding import EmbeddingService
from video_search.services.errors import (
    FailurePolicy, RetrievalFailed, UpstreamServiceError, apply_policy
)
from video_search.services.vector_store import VectorIndexService

logger = logging.getLogger(__name__)


# Defaults
MIN_SCORE = 0.35
TOP_K = 50
PASSAGE_MAX_CHARS = 200

THUMBNAIL_URL_TEMPLATE = "https://img.youtube.com/vi/{video_id}/hqdefault.jpg"
UNKNOWN_TITLE = "Unknown Video"
NO_RESULTS_MESSAGE = "No relevant results found. Try rephrasing your search."


@dataclass
class RetrievalOutcome:
    """Grouped results, plus an advisory message when nothing passed the floor."""
    results: List[VideoResult] = field(default_factory=list)
    message: Optional[str] = None
    total_matches: int = 0

    @property
    def total(self) -> int:
        return len(self.results)


def thumbnail_url(video_id: str) -> str:
    return THUMBNAIL_URL_TEMPLATE.format(video_id=video_id)


def filter_matches(matches: List[PassageMatch], min_score: float) -> List[PassageMatch]:
    """Keep matches scoring at least min_score (boundary inclusive), order preserved."""
    return [m for m in matches if m.score >= min_score]


def aggregate_matches(
    matches: List[PassageMatch],
    passage_max_chars: int = PASSAGE_MAX_CHARS
) -> List[VideoResult]:
    """Group matches by video_id in first-seen order.

    Timestamps keep the index's nearest-first order. No re-sorting, and
    passages sharing a start offset are kept as distinct entries.
    """
    videos: Dict[str, VideoResult] = {}

    for match in matches:
        video = videos.get(match.video_id)
        if video is None:
            video = VideoResult(
                id=match.video_id,
                videoId=match.video_id,
                title=match.title or UNKNOWN_TITLE,
                thumbnail=thumbnail_url(match.video_id),
                timestamps=[]
            )
            videos[match.video_id] = video

        video.timestamps.append(Timestamp(
            start=match.timestamp_start,
            text=match.text[:passage_max_chars],
            score=match.score
        ))

    return list(videos.values())


class RetrievalEngine:
    """Orchestrates embedding + vector index search into per-video results."""

    policy = FailurePolicy.PROPAGATE

    def __init__(
        self,
        embedding_service: EmbeddingService,
        vector_index: VectorIndexService,
        cache: Optional[CacheService] = None,
        top_k: int = TOP_K,
        min_score: float = MIN_SCORE,
        passage_max_chars: int = PASSAGE_MAX_CHARS
    ):
        self.embedding_service = embedding_service
        self.vector_index = vector_index
        self.cache = cache
        self.top_k = top_k
        self.min_score = min_score
        self.passage_max_chars = passage_max_chars

    async def _embed(self, query: str) -> List[float]:
        if self.cache:
            cached = self.cache.get_embedding(query)
            if cached is not None:
                return cached

        embedding = await self.embedding_service.embed(query)
        if self.cache:
            self.cache.store_embedding(query, embedding)
        return embedding

    async def _search(self, query: str, top_k: int) -> List[PassageMatch]:
        try:
            embedding = await self._embed(query)
            return await self.vector_index.query(embedding, top_k)
        except UpstreamServiceError as e:
            raise RetrievalFailed(
                f"Retrieval failed: {e.message}",
                details=e.details or e.message
            ) from e

    async def retrieve(
        self,
        query: str,
        top_k: Optional[int] = None,
        min_score: Optional[float] = None,
        correlation_id: str = "-"
    ) -> RetrievalOutcome:
        """Return VideoResults for query.

        Raises:
            RetrievalFailed: the embedding or index service failed
        """
        top_k = self.top_k if top_k is None else top_k
        min_score = self.min_score if min_score is None else min_score

        matches = await apply_policy(
            "retrieval", self.policy,
            lambda: self._search(query, top_k),
            default=[],
            correlation_id=correlation_id
        )
        logger.info(f"[{correlation_id}] Found {len(matches)} total matches from index")
        logger.debug(f"[{correlation_id}] Top 5 match scores: {[m.score for m in matches[:5]]}")

        filtered = filter_matches(matches, min_score)
        logger.info(
            f"[{correlation_id}] After filtering (score >= {min_score}): {len(filtered)} matches"
        )

        if not filtered:
            return RetrievalOutcome(results=[], message=NO_RESULTS_MESSAGE, total_matches=len(matches))

        results = aggregate_matches(filtered, self.passage_max_chars)
        logger.info(f"[{correlation_id}] Returning {len(results)} unique videos")
        return RetrievalOutcome(results=results, total_matches=len(matches))
