"""
In-process TTL cache for the search pipeline.

Layer 1: Embedding cache: avoids re-embedding repeated queries
Layer 2: Expansion cache: avoids re-asking the model to expand a query

Caching is transparent: a hit returns exactly what the service returned the
first time, so results never depend on whether the cache is enabled.
"""

import hashlib
import time
from dataclasses import dataclass
from typing import Dict, List, Optional


@dataclass
class EmbeddingCacheEntry:
    """Cached embedding with timestamp."""
    embedding: List[float]
    timestamp: float


@dataclass
class ExpansionCacheEntry:
    """Cached query expansion with timestamp."""
    expanded_query: str
    timestamp: float


class CacheService:
    """2-layer TTL cache shared by the retrieval engine and query expander."""

    def __init__(self, ttl_seconds: float = 3600.0):
        self._ttl = ttl_seconds

        self._embedding_cache: Dict[str, EmbeddingCacheEntry] = {}
        self._expansion_cache: Dict[str, ExpansionCacheEntry] = {}

        # Stats
        self._embedding_hits = 0
        self._embedding_misses = 0
        self._expansion_hits = 0
        self._expansion_misses = 0
        self._access_count = 0

    def _text_hash(self, text: str, fold_case: bool = False) -> str:
        """Hash a query for cache key.

        Embedding keys keep case since cased models embed "CSS" and "css"
        differently. Expansion keys fold case.
        """
        normalized = text.strip()
        if fold_case:
            normalized = normalized.lower()
        return hashlib.sha256(normalized.encode()).hexdigest()

    def _tick(self):
        self._access_count += 1
        if self._access_count % 100 == 0:
            self._cleanup_expired()

    def _is_fresh(self, timestamp: float) -> bool:
        return (time.time() - timestamp) < self._ttl

    # --- Layer 1: Embedding Cache ---

    def get_embedding(self, text: str) -> Optional[List[float]]:
        """Get cached embedding for a query. Returns None on miss."""
        self._tick()
        entry = self._embedding_cache.get(self._text_hash(text))

        if entry and self._is_fresh(entry.timestamp):
            self._embedding_hits += 1
            return list(entry.embedding)

        self._embedding_misses += 1
        return None

    def store_embedding(self, text: str, embedding: List[float]):
        """Store an embedding in the cache."""
        self._embedding_cache[self._text_hash(text)] = EmbeddingCacheEntry(
            embedding=list(embedding),
            timestamp=time.time()
        )

    # --- Layer 2: Expansion Cache ---

    def get_expansion(self, query: str) -> Optional[str]:
        """Get cached expansion for a query. Returns None on miss."""
        self._tick()
        entry = self._expansion_cache.get(self._text_hash(query, fold_case=True))

        if entry and self._is_fresh(entry.timestamp):
            self._expansion_hits += 1
            return entry.expanded_query

        self._expansion_misses += 1
        return None

    def store_expansion(self, query: str, expanded_query: str):
        """Store a successful expansion. Fallbacks are never cached."""
        self._expansion_cache[self._text_hash(query, fold_case=True)] = ExpansionCacheEntry(
            expanded_query=expanded_query,
            timestamp=time.time()
        )

    # --- Housekeeping ---

    def _cleanup_expired(self):
        """Remove expired entries from both caches."""
        now = time.time()

        for cache in (self._embedding_cache, self._expansion_cache):
            expired_keys = [
                k for k, v in cache.items()
                if (now - v.timestamp) >= self._ttl
            ]
            for k in expired_keys:
                del cache[k]

    def get_stats(self) -> dict:
        """Return cache statistics for monitoring."""
        return {
            "embedding_cache_size": len(self._embedding_cache),
            "expansion_cache_size": len(self._expansion_cache),
            "embedding_hits": self._embedding_hits,
            "embedding_misses": self._embedding_misses,
            "expansion_hits": self._expansion_hits,
            "expansion_misses": self._expansion_misses,
            "embedding_hit_rate": round(
                self._embedding_hits / max(1, self._embedding_hits + self._embedding_misses) * 100, 1
            ),
            "expansion_hit_rate": round(
                self._expansion_hits / max(1, self._expansion_hits + self._expansion_misses) * 100, 1
            )
        }
