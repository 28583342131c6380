"""
Completion service over Groq's async chat API.

Modes:
    complete()             free text, one shot
    stream()               free text, token by token
    complete_structured()  JSON object validated against a pydantic model
"""

import asyncio
import json
import logging
from typing import AsyncGenerator, Dict, List, Optional, Type, TypeVar

from groq import APIError, AsyncGroq, RateLimitError
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from video_search.services.errors import CompletionError, SchemaViolation

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class CompletionService:
    """Service for calling Groq with model fallback on rate limits."""

    MODEL_PRIMARY = "llama-3.3-70b-versatile"
    MODEL_FALLBACK = "llama-3.1-8b-instant"

    def __init__(
        self,
        api_key: Optional[str] = None,
        timeout: float = 30.0,
        max_tokens: int = 1024,
        client: Optional[AsyncGroq] = None
    ):
        self.api_key = api_key
        self.timeout = timeout
        self.max_tokens = max_tokens
        self._client = client
        self.models = [self.MODEL_PRIMARY, self.MODEL_FALLBACK]

    def _get_client(self) -> AsyncGroq:
        """Create the Groq client on first use so the app can boot without a key."""
        if self._client is None:
            if not self.api_key:
                raise CompletionError("GROQ_API_KEY is not configured")
            self._client = AsyncGroq(api_key=self.api_key, timeout=self.timeout, max_retries=1)
        return self._client

    @staticmethod
    def _build_messages(prompt: str, system: Optional[str] = None) -> List[Dict[str, str]]:
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})
        return messages

    async def _create(self, messages: List[Dict[str, str]], temperature: float, **kwargs):
        """Call chat.completions.create, falling back to the next model on 429."""
        client = self._get_client()

        last_error = None
        for model in self.models:
            try:
                return await asyncio.wait_for(
                    client.chat.completions.create(
                        messages=messages,
                        model=model,
                        max_tokens=self.max_tokens,
                        temperature=temperature,
                        **kwargs
                    ),
                    timeout=self.timeout
                )
            except RateLimitError as e:
                last_error = e
                if model != self.models[-1]:
                    logger.warning(f"Rate limited on {model}, falling back")
                    continue
            except asyncio.TimeoutError:
                raise CompletionError(f"Completion timed out after {self.timeout}s")
            except APIError as e:
                raise CompletionError("Completion request failed", details=str(e)) from e

        raise CompletionError("Rate limit exceeded on all models", details=str(last_error))

    async def complete(
        self,
        prompt: str,
        system: Optional[str] = None,
        temperature: float = 0.7
    ) -> str:
        """Return the model's free-text answer, whitespace-trimmed."""
        response = await self._create(self._build_messages(prompt, system), temperature)

        if not response.choices or response.choices[0].message.content is None:
            raise CompletionError("Completion returned no content")
        return response.choices[0].message.content.strip()

    async def stream(
        self,
        messages: List[Dict[str, str]],
        temperature: float = 0.7
    ) -> AsyncGenerator[str, None]:
        """Stream response tokens.

        The upstream stream is closed when the consumer stops early
        (aclose() or garbage collection), so abandoning is side-effect free.
        """
        stream = await self._create(messages, temperature, stream=True)
        try:
            async for chunk in stream:
                if chunk.choices and chunk.choices[0].delta.content:
                    yield chunk.choices[0].delta.content
        except APIError as e:
            raise CompletionError("Completion stream failed", details=str(e)) from e
        finally:
            await stream.close()

    async def complete_structured(
        self,
        prompt: str,
        schema: Type[ModelT],
        system: Optional[str] = None,
        temperature: float = 0.7
    ) -> ModelT:
        """Return a validated instance of schema.

        Raises:
            CompletionError: upstream failure
            SchemaViolation: the model's JSON did not match schema
        """
        schema_hint = (
            "\n\nRespond with a single JSON object matching this JSON schema:\n"
            + json.dumps(schema.model_json_schema())
        )
        response = await self._create(
            self._build_messages(prompt + schema_hint, system),
            temperature,
            response_format={"type": "json_object"}
        )

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise SchemaViolation("Structured completion returned empty content")

        try:
            return schema.model_validate_json(content)
        except PydanticValidationError as e:
            raise SchemaViolation(
                f"Structured completion did not match {schema.__name__}",
                details=str(e)
            ) from e
