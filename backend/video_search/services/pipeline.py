"""
Search pipeline orchestrator.
Coordinates query expansion, retrieval, and the synthesis stages.

Every call builds its own request-scoped state; the pipeline object only
holds stateless, injected clients and may serve concurrent requests.
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from typing import AsyncGenerator, List, Optional

from video_search.models.schemas import (
    AvailableVideo, ChatMessage, LearningPath, RelatedTopic, VideoResult
)
from video_search.services.chat import ChatResponder
from video_search.services.errors import InvalidInput
from video_search.services.expander import QueryExpander
from video_search.services.learning_path import LearningPathGenerator
from video_search.services.related_topics import RelatedTopicsGenerator
from video_search.services.retrieval import RetrievalEngine, RetrievalOutcome
from video_search.services.streaming import StreamEvent, collect_text
from video_search.services.summarizer import Summarizer

logger = logging.getLogger(__name__)


def _correlation_id() -> str:
    return str(uuid.uuid4())[:8]


def _require_text(value: str, message: str) -> str:
    if not value or not value.strip():
        raise InvalidInput(message)
    return value.strip()


@dataclass
class ExploreResult:
    """Everything one search produces: results plus the synthesized guidance."""
    query: str
    expanded_query: str
    outcome: RetrievalOutcome
    summary: Optional[str] = None
    related_topics: List[RelatedTopic] = field(default_factory=list)


class SearchPipeline:
    """Entry point for every operation the HTTP layer exposes."""

    def __init__(
        self,
        expander: QueryExpander,
        retrieval: RetrievalEngine,
        summarizer: Summarizer,
        related_topics: RelatedTopicsGenerator,
        learning_paths: LearningPathGenerator,
        chat: Optional[ChatResponder] = None,
        cache_service=None
    ):
        self.expander = expander
        self.retrieval = retrieval
        self.summarizer = summarizer
        self.related_topics_generator = related_topics
        self.learning_paths = learning_paths
        self.chat_responder = chat
        self.cache = cache_service

    async def expand_query(self, query: str) -> str:
        query = _require_text(query, "Query is required")
        return await self.expander.expand(query, correlation_id=_correlation_id())

    async def search(self, query: str, expand: bool = False) -> RetrievalOutcome:
        """Retrieve grouped results for query.

        Raises:
            InvalidInput: empty query
            RetrievalFailed: embedding or index failure
        """
        query = _require_text(query, "Query is required")
        correlation_id = _correlation_id()
        logger.info(f"[{correlation_id}] Search request: query={query[:60]!r} | expand={expand}")

        if expand:
            query = await self.expander.expand(query, correlation_id=correlation_id)
        return await self.retrieval.retrieve(query, correlation_id=correlation_id)

    def summarize(self, query: str, results: List[VideoResult]) -> AsyncGenerator[StreamEvent, None]:
        query = _require_text(query, "Query is required")
        return self.summarizer.summarize(query, results, correlation_id=_correlation_id())

    async def related_topics(self, query: str) -> List[RelatedTopic]:
        query = _require_text(query, "Query is required")
        return await self.related_topics_generator.generate(query, correlation_id=_correlation_id())

    async def learning_path(self, goal: str, available_videos: List[AvailableVideo]) -> LearningPath:
        return await self.learning_paths.generate(
            goal, available_videos, correlation_id=_correlation_id()
        )

    def chat(
        self,
        messages: List[ChatMessage],
        context: Optional[str] = None
    ) -> AsyncGenerator[StreamEvent, None]:
        if self.chat_responder is None:
            raise InvalidInput("Chat is not enabled")
        return self.chat_responder.respond(messages, context, correlation_id=_correlation_id())

    async def explore(self, query: str) -> ExploreResult:
        """Expand, retrieve, then summarize and suggest related topics concurrently.

        Retrieval must finish before either synthesis stage starts; the two
        synthesis stages are independent of each other.
        """
        query = _require_text(query, "Query is required")
        correlation_id = _correlation_id()

        expanded = await self.expander.expand(query, correlation_id=correlation_id)
        outcome = await self.retrieval.retrieve(expanded, correlation_id=correlation_id)

        if not outcome.results:
            topics = await self.related_topics_generator.generate(query, correlation_id=correlation_id)
            return ExploreResult(query, expanded, outcome, summary=None, related_topics=topics)

        summary, topics = await asyncio.gather(
            collect_text(self.summarizer.summarize(query, outcome.results, correlation_id=correlation_id)),
            self.related_topics_generator.generate(query, correlation_id=correlation_id),
        )
        return ExploreResult(query, expanded, outcome, summary=summary, related_topics=topics)
