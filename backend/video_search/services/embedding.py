"""
Embedding service using sentence-transformers.
Wraps a local model (all-MiniLM-L6-v2 by default, 384-dim embeddings).
Lazy-loads the model on first use to avoid slow startup.
"""

import asyncio
import logging
from typing import List

import numpy as np

from video_search.services.errors import EmbeddingError

logger = logging.getLogger(__name__)


class EmbeddingService:
    """Generates text embeddings using sentence-transformers."""

    def __init__(self, model_name: str = "all-MiniLM-L6-v2", timeout: float = 10.0):
        self.model_name = model_name
        self.timeout = timeout
        self._model = None
        self.dimension = 384

    def _ensure_model_loaded(self):
        """Lazy-load the model on first use."""
        if self._model is None:
            try:
                from sentence_transformers import SentenceTransformer
            except ImportError:
                raise ImportError(
                    "Local embeddings require sentence-transformers. "
                    "Install with: pip install lecture-moments[embeddings]"
                )

            logger.info(f"Loading embedding model: {self.model_name}...")
            self._model = SentenceTransformer(self.model_name, device="cpu")
            self.dimension = self._model.get_sentence_embedding_dimension() or self.dimension
            logger.info(f"Embedding model loaded ({self.dimension} dimensions)")

    def encode(self, text: str) -> np.ndarray:
        """Encode one query into an L2-normalized vector of shape (dim,)."""
        self._ensure_model_loaded()
        return self._model.encode([text], normalize_embeddings=True)[0]

    async def embed(self, text: str) -> List[float]:
        """Embed one query off the event loop, bounded by the timeout.

        Raises:
            EmbeddingError: empty input, model failure or timeout
        """
        if not text or not text.strip():
            raise EmbeddingError("Cannot embed empty text")

        try:
            vector = await asyncio.wait_for(
                asyncio.to_thread(self.encode, text),
                timeout=self.timeout
            )
        except asyncio.TimeoutError:
            raise EmbeddingError(f"Embedding timed out after {self.timeout}s")
        except EmbeddingError:
            raise
        except Exception as e:
            raise EmbeddingError("Embedding failed", details=str(e)) from e

        vector = np.asarray(vector, dtype=float)
        if vector.ndim != 1 or vector.size == 0:
            raise EmbeddingError(f"Embedding model returned malformed vector of shape {vector.shape}")

        return vector.tolist()
