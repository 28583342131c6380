"""
Related-topics generator: 4-5 follow-up queries with a one-line reason each.
A non-essential enhancement, so every failure yields an empty list.
"""

import logging
from typing import List

from video_search.models.schemas import RelatedTopic, RelatedTopicList
from video_search.services.errors import FailurePolicy, apply_policy
from video_search.services.llm import CompletionService
from video_search.services.prompts import CORPUS_NAME, RELATED_TOPICS_PROMPT

logger = logging.getLogger(__name__)

MAX_TOPICS = 5


class RelatedTopicsGenerator:

    policy = FailurePolicy.SWALLOW_WITH_DEFAULT

    def __init__(self, completion: CompletionService, temperature: float = 0.7):
        self.completion = completion
        self.temperature = temperature

    async def _generate(self, query: str) -> List[RelatedTopic]:
        structured = await self.completion.complete_structured(
            RELATED_TOPICS_PROMPT.format(query=query, corpus=CORPUS_NAME),
            RelatedTopicList,
            temperature=self.temperature
        )
        return structured.topics[:MAX_TOPICS]

    async def generate(self, query: str, correlation_id: str = "-") -> List[RelatedTopic]:
        topics = await apply_policy(
            "related topics", self.policy,
            lambda: self._generate(query),
            default=[],
            correlation_id=correlation_id
        )
        logger.info(f"[{correlation_id}] Generated {len(topics)} related topics")
        return topics
