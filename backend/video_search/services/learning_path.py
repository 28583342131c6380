"""
Learning-path generator: orders a subset of the search results into a
5-7 step curriculum toward the user's goal.

The user explicitly asked for this output, so failures are surfaced with
diagnostic detail instead of degrading silently.
"""

import logging
from typing import List

from video_search.models.schemas import AvailableVideo, LearningPath
from video_search.services.errors import (
    FailurePolicy, GenerationFailed, InvalidInput, SchemaViolation,
    UpstreamServiceError, apply_policy
)
from video_search.services.llm import CompletionService
from video_search.services.prompts import CORPUS_NAME, LEARNING_PATH_PROMPT

logger = logging.getLogger(__name__)

MIN_STEPS = 5
MAX_STEPS = 7


def build_video_context(videos: List[AvailableVideo], max_videos: int = 20) -> str:
    return "\n".join(f'- "{v.title}" ({v.videoId})' for v in videos[:max_videos])


class LearningPathGenerator:

    policy = FailurePolicy.PROPAGATE

    def __init__(
        self,
        completion: CompletionService,
        max_videos: int = 20,
        temperature: float = 0.7
    ):
        self.completion = completion
        self.max_videos = max_videos
        self.temperature = temperature

    async def generate(
        self,
        goal: str,
        available_videos: List[AvailableVideo],
        correlation_id: str = "-"
    ) -> LearningPath:
        """Generate a learning path from available_videos.

        Raises:
            InvalidInput: no candidate videos (no network call is made)
            GenerationFailed: upstream failure or unusable model output
        """
        if not available_videos:
            raise InvalidInput("No videos available")

        candidates = available_videos[:self.max_videos]
        logger.info(
            f"[{correlation_id}] Learning path request: goal={goal[:60]!r} | "
            f"videos={len(available_videos)} (using {len(candidates)})"
        )

        prompt = LEARNING_PATH_PROMPT.format(
            goal=goal,
            corpus=CORPUS_NAME,
            video_context=build_video_context(candidates, self.max_videos)
        )

        try:
            path = await apply_policy(
                "learning path", self.policy,
                lambda: self.completion.complete_structured(
                    prompt, LearningPath, temperature=self.temperature
                ),
                default=None,
                correlation_id=correlation_id
            )
        except SchemaViolation as e:
            raise GenerationFailed(
                "Failed to generate learning path",
                details=e.details or e.message,
                cause_category="validation"
            ) from e
        except UpstreamServiceError as e:
            raise GenerationFailed(
                "Failed to generate learning path",
                details=e.details or e.message,
                cause_category="upstream"
            ) from e

        if not path.videos:
            raise GenerationFailed(
                "Failed to generate learning path",
                details="Model returned a learning path with no videos",
                cause_category="validation"
            )

        self._check_soft_constraints(path, candidates, correlation_id)
        logger.info(f"[{correlation_id}] Generated learning path {path.title!r} with {len(path.videos)} steps")
        return path

    @staticmethod
    def _check_soft_constraints(
        path: LearningPath,
        candidates: List[AvailableVideo],
        correlation_id: str
    ):
        """Warn about, but accept, paths that bend the requested shape."""
        if not MIN_STEPS <= len(path.videos) <= MAX_STEPS:
            logger.warning(
                f"[{correlation_id}] Learning path has {len(path.videos)} steps "
                f"(requested {MIN_STEPS}-{MAX_STEPS})"
            )

        known_ids = {v.videoId for v in candidates}
        unknown = [step.videoId for step in path.videos if step.videoId not in known_ids]
        if unknown:
            logger.warning(f"[{correlation_id}] Learning path references unknown videos: {unknown}")
