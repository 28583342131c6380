"""
Shared test fixtures for the lecture search test suite.

Every external service (embedding model, Qdrant, Groq) is replaced by a
mock, so no test needs network access or model weights.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from video_search.models.schemas import (
    AvailableVideo, LearningPath, LearningStep, PassageMatch, RelatedTopic,
    RelatedTopicList, Timestamp, VideoResult
)
from video_search.services.chat import ChatResponder
from video_search.services.expander import QueryExpander
from video_search.services.learning_path import LearningPathGenerator
from video_search.services.pipeline import SearchPipeline
from video_search.services.related_topics import RelatedTopicsGenerator
from video_search.services.retrieval import RetrievalEngine
from video_search.services.summarizer import Summarizer


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def make_match(video_id, score, title="Untitled", start=0, text="passage", id=None):
    return PassageMatch(
        id=id or f"{video_id}-{start}-{score}",
        score=score,
        video_id=video_id,
        title=title,
        timestamp_start=start,
        text=text,
    )


async def token_stream(tokens, error=None):
    """Async generator standing in for CompletionService.stream()."""
    for token in tokens:
        yield token
    if error is not None:
        raise error


def make_point(id, score, payload):
    """Shape of a Qdrant ScoredPoint as far as VectorIndexService reads it."""
    return SimpleNamespace(id=id, score=score, payload=payload)


# ---------------------------------------------------------------------------
# Sample data fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def sample_matches():
    """Index response, nearest first, spanning three videos."""
    return [
        make_match("abc123", 0.91, title="Intro to Flexbox", start=75, text="flex containers"),
        make_match("xyz789", 0.74, title="CSS Grid", start=30, text="grid template areas"),
        make_match("abc123", 0.62, title="Intro to Flexbox", start=410, text="justify-content"),
        make_match("qrs456", 0.33, title="Git Basics", start=5, text="git init"),
    ]


@pytest.fixture
def sample_video_results():
    return [
        VideoResult(
            id="abc123", videoId="abc123", title="Intro to Flexbox",
            thumbnail="https://img.youtube.com/vi/abc123/hqdefault.jpg",
            timestamps=[
                Timestamp(start=75, text="flex containers", score=0.91),
                Timestamp(start=410, text="justify-content", score=0.62),
            ],
        ),
        VideoResult(
            id="xyz789", videoId="xyz789", title="CSS Grid",
            thumbnail="https://img.youtube.com/vi/xyz789/hqdefault.jpg",
            timestamps=[Timestamp(start=30, text="grid template areas", score=0.74)],
        ),
    ]


@pytest.fixture
def available_videos():
    return [AvailableVideo(videoId=f"vid{i}", title=f"Lecture {i}") for i in range(25)]


@pytest.fixture
def sample_learning_path():
    return LearningPath(
        title="Layout Fundamentals",
        description="From boxes to grids.",
        estimatedTime="5 hours",
        videos=[
            LearningStep(
                videoId=f"vid{i}", title=f"Lecture {i}", reason="Builds on the last step.",
                keyTopics=["boxes", "flex", "grid"],
            )
            for i in range(5)
        ],
    )


@pytest.fixture
def sample_topics():
    return RelatedTopicList(topics=[
        RelatedTopic(query="CSS grid", reason="Two-dimensional layouts"),
        RelatedTopic(query="Responsive design", reason="Layouts across screens"),
        RelatedTopic(query="Media queries", reason="Breakpoints for flexbox"),
        RelatedTopic(query="CSS positioning", reason="Complements flexbox"),
    ])


# ---------------------------------------------------------------------------
# Mock services
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_embedding():
    service = MagicMock()
    service.embed = AsyncMock(return_value=[0.1, 0.2, 0.3])
    return service


@pytest.fixture
def mock_index(sample_matches):
    index = MagicMock()
    index.query = AsyncMock(return_value=sample_matches)
    index.health_check.return_value = True
    return index


@pytest.fixture
def mock_completion():
    """CompletionService mock: complete, complete_structured and stream."""
    completion = MagicMock()
    completion.complete = AsyncMock(return_value="flexbox, flex containers, CSS layout")
    completion.complete_structured = AsyncMock()
    completion.stream = MagicMock(side_effect=lambda *a, **kw: token_stream(["Start ", "at ", "1:15."]))
    return completion


@pytest.fixture
def retrieval_engine(mock_embedding, mock_index):
    return RetrievalEngine(mock_embedding, mock_index)


@pytest.fixture
def pipeline(mock_completion, retrieval_engine):
    return SearchPipeline(
        expander=QueryExpander(mock_completion),
        retrieval=retrieval_engine,
        summarizer=Summarizer(mock_completion),
        related_topics=RelatedTopicsGenerator(mock_completion),
        learning_paths=LearningPathGenerator(mock_completion),
        chat=ChatResponder(mock_completion),
    )
