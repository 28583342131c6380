import math

from pydantic import BaseModel, Field, field_validator
from typing import List, Optional, Union

from video_search.utils.timecode import parse_timestamp


# --- Vector index boundary ---

class PassageMatch(BaseModel):
    """One retrieved transcript passage, validated from raw index payload."""
    id: str = ""
    score: float
    video_id: str
    title: Optional[str] = None
    timestamp_start: int = 0
    text: str = ""

    model_config = {"frozen": True}

    @field_validator('id', mode='before')
    @classmethod
    def id_to_str(cls, v) -> str:
        return "" if v is None else str(v)

    @field_validator('video_id', mode='before')
    @classmethod
    def numeric_video_id_to_str(cls, v):
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator('video_id')
    @classmethod
    def video_id_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError('video_id must be a non-empty string')
        return v.strip()

    @field_validator('title', mode='before')
    @classmethod
    def blank_title_is_missing(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        return str(v)

    @field_validator('timestamp_start', mode='before')
    @classmethod
    def floor_seconds(cls, v: Union[int, float, str, None]) -> int:
        if v is None or v == "":
            return 0
        try:
            seconds = parse_timestamp(v) if isinstance(v, str) else float(v)
        except (TypeError, OverflowError) as e:
            raise ValueError(f'timestamp_start is not a number: {v!r}') from e
        if not math.isfinite(seconds):
            raise ValueError('timestamp_start must be finite')
        if seconds < 0:
            raise ValueError('timestamp_start must be >= 0')
        return int(seconds)

    @field_validator('text', mode='before')
    @classmethod
    def text_default(cls, v) -> str:
        return "" if v is None else str(v)


# --- Search results ---

class Timestamp(BaseModel):
    start: int
    text: str
    score: float


class VideoResult(BaseModel):
    id: str
    videoId: str
    title: str
    thumbnail: str
    timestamps: List[Timestamp] = []


class SearchRequest(BaseModel):
    query: str = ""
    expand: bool = False


class SearchResponse(BaseModel):
    results: List[VideoResult] = []
    total: int = 0
    message: Optional[str] = None


class ExpandQueryRequest(BaseModel):
    query: str = ""


class ExpandQueryResponse(BaseModel):
    expandedQuery: str


class SummarizeRequest(BaseModel):
    query: str = ""
    results: List[VideoResult] = []


# --- Related topics ---

class RelatedTopic(BaseModel):
    query: str
    reason: str

    @field_validator('query')
    @classmethod
    def query_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError('query must not be empty')
        return v.strip()


class RelatedTopicList(BaseModel):
    """Structured output shape requested from the completion model."""
    topics: List[RelatedTopic] = Field(
        description="4-5 related search queries, each with a one-line reason"
    )


class RelatedTopicsRequest(BaseModel):
    query: str = ""


class RelatedTopicsResponse(BaseModel):
    topics: List[RelatedTopic] = []


# --- Learning path ---

class AvailableVideo(BaseModel):
    videoId: str
    title: str


class LearningStep(BaseModel):
    videoId: str
    title: str
    reason: str = Field(description="Why this video is included (1-2 sentences)")
    keyTopics: List[str] = Field(description="3-5 key topics to focus on")

    @field_validator('keyTopics')
    @classmethod
    def distinct_topics(cls, v: List[str]) -> List[str]:
        seen = []
        for topic in v:
            topic = topic.strip()
            if topic and topic not in seen:
                seen.append(topic)
        return seen


class LearningPath(BaseModel):
    title: str
    description: str
    estimatedTime: str = Field(description="Estimated total time, e.g. '6 hours'")
    videos: List[LearningStep] = Field(description="5-7 videos in learning order")


class LearningPathRequest(BaseModel):
    goal: str = ""
    availableVideos: List[AvailableVideo] = []


# --- Transcript chat ---

class ChatMessage(BaseModel):
    role: str  # "user" or "assistant"
    content: str


class ChatRequest(BaseModel):
    messages: List[ChatMessage] = []
    context: Optional[str] = None
