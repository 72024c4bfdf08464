"""Ownership-filtered persistence for conversations and their messages.

Every query carries a ``user_id`` predicate, so a caller can only ever see or
modify rows belonging to conversations they own. SQLAlchemy failures are
surfaced as :class:`StoreError`.
"""

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from chatrelay.core.errors import NotFoundError, StoreError
from chatrelay.models.conversation import ChatMessage, Conversation, Role

logger = logging.getLogger(__name__)


class ConversationStore:
    def __init__(self, engine: Engine):
        self.engine = engine

    @contextmanager
    def _session(self) -> Iterator[Session]:
        with Session(self.engine) as session:
            try:
                yield session
            except SQLAlchemyError as e:
                session.rollback()
                logger.error(f"Store operation failed: {e}")
                raise StoreError(str(e)) from e

    def _owned(self, session: Session, user_id: str, conversation_id: str) -> Conversation | None:
        return session.exec(
            select(Conversation)
            .where(Conversation.id == conversation_id)
            .where(Conversation.user_id == user_id)
        ).first()

    def get_conversation(self, user_id: str, conversation_id: str) -> Conversation | None:
        with self._session() as session:
            return self._owned(session, user_id, conversation_id)

    def create_conversation(self, user_id: str, title: str) -> Conversation:
        with self._session() as session:
            conv = Conversation(user_id=user_id, title=title)
            session.add(conv)
            session.commit()
            session.refresh(conv)
            logger.debug(f"Created conversation {conv.id} for user {user_id}")
            return conv

    def list_conversations(self, user_id: str) -> list[Conversation]:
        with self._session() as session:
            return list(session.exec(
                select(Conversation)
                .where(Conversation.user_id == user_id)
                .order_by(Conversation.updated_at.desc())  # type: ignore
            ).all())

    def recent_messages(self, user_id: str, conversation_id: str, limit: int) -> list[ChatMessage]:
        """Up to `limit` messages of an owned conversation, oldest first."""
        with self._session() as session:
            return list(session.exec(
                select(ChatMessage)
                .join(Conversation)
                .where(ChatMessage.conversation_id == conversation_id)
                .where(Conversation.user_id == user_id)
                .order_by(ChatMessage.created_at)  # type: ignore
                .limit(limit)
            ).all())

    def add_message(
        self, user_id: str, conversation_id: str, role: Role, content: str, touch: bool = False
    ) -> ChatMessage:
        with self._session() as session:
            conv = self._owned(session, user_id, conversation_id)
            if conv is None:
                raise NotFoundError(f"Conversation {conversation_id} not found")

            msg = ChatMessage(conversation_id=conversation_id, role=role.value, content=content)
            session.add(msg)
            if touch:
                conv.updated_at = datetime.now(timezone.utc)
                session.add(conv)
            session.commit()
            session.refresh(msg)
            return msg

    def update_title(self, user_id: str, conversation_id: str, title: str) -> None:
        with self._session() as session:
            conv = self._owned(session, user_id, conversation_id)
            if conv is None:
                raise NotFoundError(f"Conversation {conversation_id} not found")
            conv.title = title
            session.add(conv)
            session.commit()

    def delete_conversation(self, user_id: str, conversation_id: str) -> bool:
        """Delete an owned conversation and its messages in one transaction."""
        with self._session() as session:
            conv = self._owned(session, user_id, conversation_id)
            if conv is None:
                return False

            # Delete messages first
            messages = session.exec(
                select(ChatMessage).where(ChatMessage.conversation_id == conversation_id)
            ).all()
            for msg in messages:
                session.delete(msg)

            session.delete(conv)
            session.commit()
            logger.debug(f"Deleted conversation {conversation_id} ({len(messages)} messages)")
            return True
