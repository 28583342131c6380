"""Tests for learning-path generation: structured completion mocked."""

import logging
from unittest.mock import AsyncMock

import pytest

from video_search.models.schemas import AvailableVideo, LearningPath, LearningStep
from video_search.services.errors import (
    CompletionError, GenerationFailed, InvalidInput, SchemaViolation,
    UpstreamServiceError, ValidationError
)
from video_search.services.learning_path import LearningPathGenerator, build_video_context


def _path(n_steps):
    return LearningPath(
        title="Path", description="d", estimatedTime="3 hours",
        videos=[LearningStep(videoId=f"vid{i}", title=f"Lecture {i}", reason="r",
                             keyTopics=["a", "b", "c"]) for i in range(n_steps)],
    )


class TestBuildVideoContext:

    def test_lists_title_and_id(self):
        context = build_video_context([AvailableVideo(videoId="abc", title="Flexbox")])
        assert context == '- "Flexbox" (abc)'

    def test_truncates_to_limit(self, available_videos):
        assert len(build_video_context(available_videos, 20).splitlines()) == 20


class TestLearningPathGenerator:

    @pytest.mark.asyncio
    async def test_returns_path(self, mock_completion, available_videos, sample_learning_path):
        mock_completion.complete_structured = AsyncMock(return_value=sample_learning_path)
        path = await LearningPathGenerator(mock_completion).generate("learn layout", available_videos)

        assert path.title == "Layout Fundamentals"
        assert len(path.videos) == 5
        assert mock_completion.complete_structured.await_args.args[1] is LearningPath

    @pytest.mark.asyncio
    async def test_prompt_uses_first_twenty_videos(self, mock_completion, available_videos, sample_learning_path):
        mock_completion.complete_structured = AsyncMock(return_value=sample_learning_path)
        await LearningPathGenerator(mock_completion).generate("learn layout", available_videos)

        prompt = mock_completion.complete_structured.await_args.args[0]
        assert "(vid19)" in prompt
        assert "(vid20)" not in prompt

    @pytest.mark.asyncio
    async def test_empty_videos_is_validation_error_without_call(self, mock_completion):
        generator = LearningPathGenerator(mock_completion)

        with pytest.raises(InvalidInput) as exc_info:
            await generator.generate("learn layout", [])

        assert isinstance(exc_info.value, ValidationError)
        assert not isinstance(exc_info.value, UpstreamServiceError)
        mock_completion.complete_structured.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_goal_is_passed_through(self, mock_completion, available_videos, sample_learning_path):
        mock_completion.complete_structured = AsyncMock(return_value=sample_learning_path)

        path = await LearningPathGenerator(mock_completion).generate("", available_videos)

        assert path.title == "Layout Fundamentals"
        mock_completion.complete_structured.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_short_path_accepted_with_warning(self, mock_completion, available_videos, caplog):
        """Three steps when 5-7 were requested is still a success."""
        mock_completion.complete_structured = AsyncMock(return_value=_path(3))

        with caplog.at_level(logging.WARNING):
            path = await LearningPathGenerator(mock_completion).generate("goal", available_videos)

        assert len(path.videos) == 3
        assert "3 steps" in caplog.text

    @pytest.mark.asyncio
    async def test_unknown_video_ids_logged(self, mock_completion, caplog):
        mock_completion.complete_structured = AsyncMock(return_value=_path(5))
        videos = [AvailableVideo(videoId="vid0", title="Lecture 0")]

        with caplog.at_level(logging.WARNING):
            await LearningPathGenerator(mock_completion).generate("goal", videos)

        assert "unknown videos" in caplog.text

    @pytest.mark.asyncio
    async def test_zero_steps_fails(self, mock_completion, available_videos):
        mock_completion.complete_structured = AsyncMock(return_value=_path(0))

        with pytest.raises(GenerationFailed) as exc_info:
            await LearningPathGenerator(mock_completion).generate("goal", available_videos)
        assert exc_info.value.cause_category == "validation"

    @pytest.mark.asyncio
    async def test_schema_violation_carries_details(self, mock_completion, available_videos):
        mock_completion.complete_structured = AsyncMock(
            side_effect=SchemaViolation("bad shape", details="videos: field required")
        )

        with pytest.raises(GenerationFailed) as exc_info:
            await LearningPathGenerator(mock_completion).generate("goal", available_videos)
        assert exc_info.value.details == "videos: field required"
        assert exc_info.value.cause_category == "validation"

    @pytest.mark.asyncio
    async def test_upstream_failure_surfaces(self, mock_completion, available_videos):
        mock_completion.complete_structured = AsyncMock(side_effect=CompletionError("quota"))

        with pytest.raises(GenerationFailed) as exc_info:
            await LearningPathGenerator(mock_completion).generate("goal", available_videos)
        assert exc_info.value.cause_category == "upstream"
        assert exc_info.value.details == "quota"
