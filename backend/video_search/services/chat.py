"""
Transcript chat: a streamed assistant reply about the lecture videos,
optionally grounded in transcript excerpts supplied by the caller.
"""

import logging
from typing import AsyncGenerator, Dict, List, Optional

from video_search.models.schemas import ChatMessage
from video_search.services.errors import InvalidInput
from video_search.services.llm import CompletionService
from video_search.services.prompts import (
    CHAT_SYSTEM_NO_CONTEXT, CHAT_SYSTEM_WITH_CONTEXT, CORPUS_NAME
)
from video_search.services.streaming import StreamEvent, guarded_stream

logger = logging.getLogger(__name__)

MAX_HISTORY = 10
ALLOWED_ROLES = ("user", "assistant")


class ChatResponder:

    def __init__(self, completion: CompletionService, temperature: float = 0.7):
        self.completion = completion
        self.temperature = temperature

    @staticmethod
    def build_messages(
        messages: List[ChatMessage],
        context: Optional[str] = None
    ) -> List[Dict[str, str]]:
        """System prompt plus the last MAX_HISTORY turns.

        Raises:
            InvalidInput: no messages, or a role other than user/assistant
        """
        if not messages:
            raise InvalidInput("At least one message is required")
        for msg in messages:
            if msg.role not in ALLOWED_ROLES:
                raise InvalidInput(f"Unsupported message role: {msg.role!r}")

        if context and context.strip():
            system = CHAT_SYSTEM_WITH_CONTEXT.format(corpus=CORPUS_NAME, context=context.strip())
        else:
            system = CHAT_SYSTEM_NO_CONTEXT.format(corpus=CORPUS_NAME)

        history = [{"role": m.role, "content": m.content} for m in messages[-MAX_HISTORY:]]
        return [{"role": "system", "content": system}] + history

    def respond(
        self,
        messages: List[ChatMessage],
        context: Optional[str] = None,
        correlation_id: str = "-"
    ) -> AsyncGenerator[StreamEvent, None]:
        payload = self.build_messages(messages, context)
        logger.info(
            f"[{correlation_id}] Chat request: {len(messages)} messages | context={bool(context)}"
        )
        tokens = self.completion.stream(payload, temperature=self.temperature)
        return guarded_stream(
            tokens, "chat", correlation_id,
            error_message="Failed to generate response"
        )
