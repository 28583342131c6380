"""
Summarizer: streams a short digest of the top search results.
"""

import logging
from typing import AsyncGenerator, List

from video_search.models.schemas import VideoResult
from video_search.services.llm import CompletionService
from video_search.services.prompts import CORPUS_NAME, SUMMARY_PROMPT
from video_search.services.streaming import StreamEvent, guarded_stream
from video_search.utils.timecode import format_minutes_seconds

logger = logging.getLogger(__name__)


def build_summary_context(
    results: List[VideoResult],
    max_videos: int = 5,
    max_timestamps: int = 3,
    passage_chars: int = 100
) -> str:
    """Numbered video list with up to max_timestamps "[m:ss] passage" lines each."""
    blocks = []
    for i, video in enumerate(results[:max_videos], 1):
        lines = [
            f"[{format_minutes_seconds(t.start)}] {t.text[:passage_chars]}"
            for t in video.timestamps[:max_timestamps]
        ]
        blocks.append(f'{i}. "{video.title}"\n  ' + "\n  ".join(lines))
    return "\n\n".join(blocks)


class Summarizer:
    """Streams a ~100 word summary of where the answer lives in the videos."""

    def __init__(
        self,
        completion: CompletionService,
        max_videos: int = 5,
        max_timestamps: int = 3,
        passage_chars: int = 100,
        temperature: float = 0.7
    ):
        self.completion = completion
        self.max_videos = max_videos
        self.max_timestamps = max_timestamps
        self.passage_chars = passage_chars
        self.temperature = temperature

    def build_prompt(self, query: str, results: List[VideoResult]) -> str:
        context = build_summary_context(
            results, self.max_videos, self.max_timestamps, self.passage_chars
        )
        return SUMMARY_PROMPT.format(query=query, corpus=CORPUS_NAME, context=context)

    def summarize(
        self,
        query: str,
        results: List[VideoResult],
        correlation_id: str = "-"
    ) -> AsyncGenerator[StreamEvent, None]:
        """Return the summary as a token/error/done event stream."""
        prompt = self.build_prompt(query, results)
        logger.info(
            f"[{correlation_id}] Summarizing {min(len(results), self.max_videos)} videos for {query[:60]!r}"
        )
        tokens = self.completion.stream(
            [{"role": "user", "content": prompt}],
            temperature=self.temperature
        )
        return guarded_stream(
            tokens, "summary", correlation_id,
            error_message="Failed to generate summary"
        )
