"""
Query expansion: broaden vague queries into comma-separated related terms.
Strictly best-effort: any failure returns the original query.
"""

import logging
from typing import Optional

from video_search.services.cache import CacheService
from video_search.services.errors import CompletionError, FailurePolicy, apply_policy
from video_search.services.llm import CompletionService
from video_search.services.prompts import EXPAND_QUERY_PROMPT

logger = logging.getLogger(__name__)


class QueryExpander:
    """Turns a possibly vague query into a richer retrieval query."""

    policy = FailurePolicy.SWALLOW_WITH_DEFAULT

    def __init__(
        self,
        completion: CompletionService,
        cache: Optional[CacheService] = None,
        temperature: float = 0.3
    ):
        self.completion = completion
        self.cache = cache
        self.temperature = temperature

    async def _expand(self, query: str) -> str:
        expanded = await self.completion.complete(
            EXPAND_QUERY_PROMPT.format(query=query),
            temperature=self.temperature
        )
        expanded = expanded.strip()
        if not expanded:
            raise CompletionError("Expansion returned empty text")
        return expanded

    async def expand(self, query: str, correlation_id: str = "-") -> str:
        """Return the expanded query, or the original query on any failure."""
        if self.cache:
            cached = self.cache.get_expansion(query)
            if cached is not None:
                return cached

        expanded = await apply_policy(
            "query expansion", self.policy,
            lambda: self._expand(query),
            default=query,
            correlation_id=correlation_id
        )

        if self.cache and expanded != query:
            self.cache.store_expansion(query, expanded)

        logger.info(f"[{correlation_id}] Expanded query: {query[:60]!r} -> {expanded[:60]!r}")
        return expanded
