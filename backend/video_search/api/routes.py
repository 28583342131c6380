from typing import AsyncGenerator

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse, StreamingResponse

from video_search.models.schemas import (
    ChatRequest, ExpandQueryRequest, ExpandQueryResponse,
    LearningPath, LearningPathRequest,
    RelatedTopicsRequest, RelatedTopicsResponse,
    SearchRequest, SearchResponse, SummarizeRequest
)
from video_search.services.errors import GenerationFailed, InvalidInput, RetrievalFailed
from video_search.services.pipeline import SearchPipeline
from video_search.services.streaming import StreamEvent

router = APIRouter()

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no"
}


def get_pipeline(request: Request) -> SearchPipeline:
    """Dependency to get the search pipeline built at startup."""
    pipeline = getattr(request.app.state, "pipeline", None)
    if pipeline is None:
        raise HTTPException(status_code=503, detail="Search pipeline not initialized")
    return pipeline


def _error(status_code: int, error: str, details: str = None) -> JSONResponse:
    body = {"error": error}
    if details:
        body["details"] = details
    return JSONResponse(status_code=status_code, content=body)


def _event_stream(events: AsyncGenerator[StreamEvent, None]) -> StreamingResponse:
    async def event_generator():
        async for event in events:
            yield event.to_sse()

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers=SSE_HEADERS
    )


@router.post("/search", response_model=SearchResponse, response_model_exclude_none=True)
async def search(request: SearchRequest, pipeline: SearchPipeline = Depends(get_pipeline)):
    """Semantic search over transcript passages, grouped per video."""
    try:
        outcome = await pipeline.search(request.query, expand=request.expand)
    except InvalidInput:
        return _error(400, "Query is required")
    except RetrievalFailed as e:
        return _error(500, "Search failed", e.details or e.message)

    return SearchResponse(results=outcome.results, total=outcome.total, message=outcome.message)


@router.post("/expand-query", response_model=ExpandQueryResponse)
async def expand_query(request: ExpandQueryRequest, pipeline: SearchPipeline = Depends(get_pipeline)):
    """Best-effort query expansion; echoes the query back on any failure."""
    try:
        expanded = await pipeline.expand_query(request.query)
    except InvalidInput:
        return _error(400, "Query is required")
    return ExpandQueryResponse(expandedQuery=expanded)


@router.post("/summarize")
async def summarize(request: SummarizeRequest, pipeline: SearchPipeline = Depends(get_pipeline)):
    """SSE stream of a short summary of the given results."""
    try:
        events = pipeline.summarize(request.query, request.results)
    except InvalidInput:
        return _error(400, "Query is required")
    return _event_stream(events)


@router.post("/related-topics", response_model=RelatedTopicsResponse)
async def related_topics(request: RelatedTopicsRequest, pipeline: SearchPipeline = Depends(get_pipeline)):
    """Suggested follow-up queries; empty list when generation fails."""
    try:
        topics = await pipeline.related_topics(request.query)
    except InvalidInput:
        return _error(400, "Query is required")
    return RelatedTopicsResponse(topics=topics)


@router.post("/learning-path", response_model=LearningPath)
async def learning_path(request: LearningPathRequest, pipeline: SearchPipeline = Depends(get_pipeline)):
    """Ordered curriculum built from a subset of the latest results."""
    try:
        return await pipeline.learning_path(request.goal, request.availableVideos)
    except InvalidInput as e:
        if not request.availableVideos:
            return _error(400, "No videos available")
        return _error(400, e.message)
    except GenerationFailed as e:
        return _error(500, "Failed to generate learning path", e.details)


@router.post("/chat")
async def chat(request: ChatRequest, pipeline: SearchPipeline = Depends(get_pipeline)):
    """SSE stream of an assistant reply, grounded in optional transcript context."""
    try:
        events = pipeline.chat(request.messages, request.context)
    except InvalidInput as e:
        return _error(400, e.message)
    return _event_stream(events)


@router.get("/health")
async def health(pipeline: SearchPipeline = Depends(get_pipeline)):
    """Check vector index connectivity."""
    index_ok = pipeline.retrieval.vector_index.health_check()
    body = {
        "status": "ok" if index_ok else "degraded",
        "index_connected": index_ok,
        "min_score": pipeline.retrieval.min_score,
        "top_k": pipeline.retrieval.top_k,
    }
    if pipeline.cache is not None:
        body["cache"] = pipeline.cache.get_stats()
    return body
