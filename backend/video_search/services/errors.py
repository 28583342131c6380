"""
Error taxonomy and failure policies for the search pipeline.

Best-effort stages (query expansion, related topics) swallow upstream
failures and return a safe default. Retrieval and learning paths propagate.
"""

import logging
from enum import Enum
from typing import Awaitable, Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SearchServiceError(Exception):
    """Base class for every error raised by the pipeline."""

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details


# --- Upstream (network, timeout, quota) ---

class UpstreamServiceError(SearchServiceError):
    """An external service call failed."""


class EmbeddingError(UpstreamServiceError):
    """The embedding model could not produce a vector."""


class VectorIndexError(UpstreamServiceError):
    """The vector index query failed."""


class CompletionError(UpstreamServiceError):
    """The language model call failed."""


class RetrievalFailed(UpstreamServiceError):
    """Embedding or index failure during retrieval."""


# --- Validation ---

class ValidationError(SearchServiceError):
    """Input or model output did not meet the expected shape."""


class InvalidInput(ValidationError):
    """Required request input is missing or empty."""


class SchemaViolation(ValidationError):
    """Structured model output failed schema validation."""


class GenerationFailed(SearchServiceError):
    """A structured generation stage could not produce a usable result."""

    def __init__(self, message: str, details: Optional[str] = None,
                 cause_category: str = "upstream"):
        super().__init__(message, details)
        self.cause_category = cause_category  # "upstream" or "validation"


class FailurePolicy(str, Enum):
    PROPAGATE = "propagate"
    SWALLOW_WITH_DEFAULT = "swallow_with_default"


async def apply_policy(
    stage: str,
    policy: FailurePolicy,
    call: Callable[[], Awaitable[T]],
    default: T,
    correlation_id: str = "-",
) -> T:
    """Run one stage call under its failure policy.

    SWALLOW_WITH_DEFAULT returns default on any exception; PROPAGATE logs
    and re-raises.
    """
    try:
        return await call()
    except Exception as e:
        reason = e.message if isinstance(e, SearchServiceError) else f"{type(e).__name__}: {e}"
        if policy is FailurePolicy.SWALLOW_WITH_DEFAULT:
            logger.warning(f"[{correlation_id}] {stage} failed, using default: {reason}")
            return default
        logger.error(f"[{correlation_id}] {stage} failed: {reason}")
        raise
