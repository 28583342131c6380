"""
Qdrant vector index service for semantic search over transcript passages.
Read-only: the collection is populated by a separate ingestion job.
"""

import asyncio
import logging
from typing import List, Optional

from pydantic import ValidationError as PydanticValidationError
from qdrant_client import QdrantClient

from video_search.models.schemas import PassageMatch
from video_search.services.errors import VectorIndexError

logger = logging.getLogger(__name__)


class VectorIndexService:
    """Qdrant client wrapper returning validated passage matches."""

    def __init__(
        self,
        qdrant_url: Optional[str] = None,
        qdrant_api_key: Optional[str] = None,
        collection_name: str = "lecture_passages",
        timeout: float = 10.0,
        client: Optional[QdrantClient] = None
    ):
        if client is not None:
            self.client = client
        elif qdrant_api_key:
            self.client = QdrantClient(url=qdrant_url, api_key=qdrant_api_key, timeout=int(timeout))
        else:
            self.client = QdrantClient(url=qdrant_url, timeout=int(timeout))

        self.collection_name = collection_name
        self.timeout = timeout

    def search(self, query_vector: List[float], top_k: int = 50) -> List[PassageMatch]:
        """Return the top_k nearest passages, nearest first.

        Points whose payload fails validation (e.g. no video_id) are skipped,
        so untyped payload never reaches aggregation.
        """
        results = self.client.query_points(
            collection_name=self.collection_name,
            query=query_vector,
            limit=top_k,
            with_payload=True
        ).points

        matches = []
        for r in results:
            payload = r.payload or {}
            try:
                matches.append(PassageMatch(
                    id=r.id,
                    score=r.score,
                    video_id=payload.get("video_id", ""),
                    title=payload.get("title"),
                    timestamp_start=payload.get("timestamp_start", 0),
                    text=payload.get("text", ""),
                ))
            except PydanticValidationError as e:
                logger.warning(
                    "Skipping index point %s with invalid payload: %s",
                    r.id, e.errors()[0].get("msg", "invalid")
                )

        return matches

    async def query(self, query_vector: List[float], top_k: int = 50) -> List[PassageMatch]:
        """Async boundary for search(): runs in a worker thread with a timeout.

        Raises:
            VectorIndexError: connection failure, timeout or bad response
        """
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(self.search, query_vector, top_k),
                timeout=self.timeout
            )
        except asyncio.TimeoutError:
            raise VectorIndexError(f"Vector index query timed out after {self.timeout}s")
        except Exception as e:
            raise VectorIndexError("Vector index query failed", details=str(e)) from e

    def health_check(self) -> bool:
        """Check if Qdrant is reachable and collection exists."""
        try:
            collections = [c.name for c in self.client.get_collections().collections]
            return self.collection_name in collections
        except Exception:
            return False
