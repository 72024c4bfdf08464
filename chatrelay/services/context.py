"""Conversation context assembly - turns stored history plus a new prompt into a model call.

A turn resolves (or creates) the caller's conversation, reads the prior
history, stores the user message, sends a single flattened prompt to the LLM,
stores the reply, and on the first turn replaces the provisional title.
"""

import asyncio
import contextlib
import logging
import weakref
from dataclasses import dataclass
from typing import Protocol, Sequence

from chatrelay.core.config import settings
from chatrelay.core.errors import InferenceError, NotFoundError
from chatrelay.models.conversation import ChatMessage, Conversation, Role
from chatrelay.services.llm.base import BaseLLMProvider, LLMResponse
from chatrelay.services.store import ConversationStore

logger = logging.getLogger(__name__)

ELLIPSIS = "..."
CONTEXT_TEMPLATE = (
    "Previous conversation:\n{previous}\n\n"
    "Current message:\n{prompt}\n\n"
    "Please respond remembering our previous conversation and maintain context."
)
_ROLE_LABELS = {
    Role.USER.value: "User",
    Role.ASSISTANT.value: "Assistant",
}


class HistoryEntry(Protocol):
    role: str
    content: str


@dataclass
class TurnResult:
    reply_text: str
    conversation_id: str


def provisional_title(prompt: str, length: int = 50) -> str:
    """Title given to a conversation when it is created. Always ends with an ellipsis."""
    return prompt[:length] + ELLIPSIS


def finalize_title(prompt: str, length: int = 50) -> str:
    """Title set after the first completed turn. Ellipsis only when the prompt was cut."""
    return prompt[:length] + (ELLIPSIS if len(prompt) > length else "")


def build_prompt(history: Sequence[HistoryEntry], prompt: str) -> str:
    """Flatten prior turns and the new prompt into the text sent to the model.

    With no history the prompt is passed through untouched. Entries whose role
    is neither user nor assistant are left out of the rendered lines, but any
    fetched entry at all switches on the framed format.
    """
    if not history:
        return prompt

    lines = []
    for msg in history:
        label = _ROLE_LABELS.get(msg.role)
        if label is not None:
            lines.append(f"{label}: {msg.content}")
    lines.append(f"User: {prompt}")

    return CONTEXT_TEMPLATE.format(previous="\n".join(lines[:-1]), prompt=prompt)


class ConversationLocks:
    """One asyncio.Lock per conversation id, dropped once nobody holds a reference."""

    def __init__(self):
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()

    def get(self, conversation_id: str) -> asyncio.Lock:
        lock = self._locks.get(conversation_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[conversation_id] = lock
        return lock


class ContextAssembler:
    def __init__(
        self,
        store: ConversationStore,
        llm: BaseLLMProvider,
        history_limit: int | None = None,
        list_history_limit: int | None = None,
        title_length: int | None = None,
        inference_timeout: float | None = None,
        serialize_turns: bool | None = None,
    ):
        self.store = store
        self.llm = llm
        self.history_limit = settings.history_limit if history_limit is None else history_limit
        self.list_history_limit = settings.list_history_limit if list_history_limit is None else list_history_limit
        self.title_length = settings.title_length if title_length is None else title_length
        self.inference_timeout = settings.inference_timeout if inference_timeout is None else inference_timeout
        self.serialize_turns = settings.serialize_turns if serialize_turns is None else serialize_turns
        self._locks = ConversationLocks()

    def _resolve_conversation(self, user_id: str, prompt: str, conversation_id: str | None) -> Conversation:
        if conversation_id:
            conv = self.store.get_conversation(user_id, conversation_id)
            if conv is not None:
                return conv
            logger.debug(f"Conversation {conversation_id} not found for user {user_id}, starting a new one")
        return self.store.create_conversation(user_id, provisional_title(prompt, self.title_length))

    def _turn_lock(self, conversation_id: str):
        if not self.serialize_turns:
            return contextlib.nullcontext()
        return self._locks.get(conversation_id)

    async def _generate(self, context: str) -> LLMResponse:
        if self.inference_timeout is None:
            return await self.llm.generate(context)
        try:
            return await asyncio.wait_for(self.llm.generate(context), timeout=self.inference_timeout)
        except asyncio.TimeoutError as e:
            raise InferenceError(f"Model did not respond within {self.inference_timeout}s") from e

    async def handle_turn(self, user_id: str, prompt: str, conversation_id: str | None = None) -> TurnResult:
        conv = self._resolve_conversation(user_id, prompt, conversation_id)

        async with self._turn_lock(conv.id):
            # History must be read before the new user message is stored
            history = self.store.recent_messages(user_id, conv.id, self.history_limit)
            self.store.add_message(user_id, conv.id, Role.USER, prompt)

            context = build_prompt(history, prompt)
            logger.info(f"Context length: {len(history) + 1} messages ({len(history)} previous + 1 current)")
            logger.debug(f"Full context preview: {context[:200]}...")

            response = await self._generate(context)

            # No rollback of the user message if this fails
            self.store.add_message(user_id, conv.id, Role.ASSISTANT, response.content, touch=True)

            if not history:
                self.store.update_title(user_id, conv.id, finalize_title(prompt, self.title_length))

        return TurnResult(reply_text=response.content, conversation_id=conv.id)

    def list_conversations(self, user_id: str) -> list[Conversation]:
        return self.store.list_conversations(user_id)

    def list_history(self, user_id: str, conversation_id: str) -> list[ChatMessage]:
        if self.store.get_conversation(user_id, conversation_id) is None:
            raise NotFoundError(f"Conversation {conversation_id} not found")
        return self.store.recent_messages(user_id, conversation_id, self.list_history_limit)

    def delete_conversation(self, user_id: str, conversation_id: str) -> None:
        if not self.store.delete_conversation(user_id, conversation_id):
            raise NotFoundError(f"Conversation {conversation_id} not found")
        logger.info(f"User {user_id} deleted conversation {conversation_id}")
