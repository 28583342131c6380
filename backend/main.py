from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from video_search.api import routes
from video_search.config import Settings
from video_search.services.cache import CacheService
from video_search.services.chat import ChatResponder
from video_search.services.embedding import EmbeddingService
from video_search.services.expander import QueryExpander
from video_search.services.learning_path import LearningPathGenerator
from video_search.services.llm import CompletionService
from video_search.services.pipeline import SearchPipeline
from video_search.services.related_topics import RelatedTopicsGenerator
from video_search.services.retrieval import RetrievalEngine
from video_search.services.summarizer import Summarizer
from video_search.services.vector_store import VectorIndexService

# Load environment variables
load_dotenv()

import logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


def build_pipeline(settings: Settings) -> SearchPipeline:
    """Construct every client once and wire them into the pipeline."""
    cache_service = CacheService(ttl_seconds=settings.cache_ttl_seconds)

    embedding_service = EmbeddingService(
        model_name=settings.embedding_model,
        timeout=settings.embedding_timeout
    )
    vector_index = VectorIndexService(
        qdrant_url=settings.qdrant_url,
        qdrant_api_key=settings.qdrant_api_key,
        collection_name=settings.qdrant_collection,
        timeout=settings.index_timeout
    )
    completion = CompletionService(
        api_key=settings.groq_api_key,
        timeout=settings.completion_timeout
    )

    return SearchPipeline(
        expander=QueryExpander(completion, cache=cache_service),
        retrieval=RetrievalEngine(
            embedding_service,
            vector_index,
            cache=cache_service,
            top_k=settings.top_k,
            min_score=settings.min_score,
            passage_max_chars=settings.passage_max_chars
        ),
        summarizer=Summarizer(
            completion,
            max_videos=settings.summary_max_videos,
            max_timestamps=settings.summary_max_timestamps,
            passage_chars=settings.summary_passage_chars
        ),
        related_topics=RelatedTopicsGenerator(completion),
        learning_paths=LearningPathGenerator(
            completion,
            max_videos=settings.learning_path_max_videos
        ),
        chat=ChatResponder(completion),
        cache_service=cache_service
    )


def create_app(
    settings: Optional[Settings] = None,
    pipeline: Optional[SearchPipeline] = None
) -> FastAPI:
    settings = settings or Settings.from_env()
    logging.getLogger().setLevel(settings.log_level)

    app = FastAPI(
        title="Lecture Moments API",
        description="Find moments in lecture videos by natural-language query",
        version="0.3"
    )

    # CORS settings
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if pipeline is None:
        if not settings.qdrant_url:
            logger.warning("QDRANT_URL not set. Search pipeline will not be available.")
        else:
            logger.info("Initializing search pipeline...")
            pipeline = build_pipeline(settings)
            if pipeline.retrieval.vector_index.health_check():
                logger.info("  Qdrant: connected")
            else:
                logger.warning("  Qdrant collection %r not found.", settings.qdrant_collection)

    app.state.settings = settings
    app.state.pipeline = pipeline

    # Include API routes
    app.include_router(routes.router, prefix="/api")

    @app.get("/")
    async def root():
        return {
            "message": "Lecture Moments API",
            "version": "0.3",
            "docs": "/docs"
        }

    @app.get("/health")
    async def health():
        return {
            "status": "healthy",
            "search_available": app.state.pipeline is not None
        }

    return app


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:create_app", factory=True, host="0.0.0.0", port=8000, reload=True)
