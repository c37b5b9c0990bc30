"""Conversation service — owner-scoped CRUD over practice transcripts.

Learn: Every read, update and delete filters on BOTH the conversation id
and the caller's user id in a single statement. A conversation that
belongs to someone else therefore looks exactly like one that does not
exist (404, never 403), and two concurrent requests race on the
database's row atomicity rather than on application locks.
"""

import uuid
from typing import Optional

import structlog
from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from lingopal.db.models import Conversation, utcnow
from lingopal.errors import NotFoundError
from lingopal.services.user_service import parse_id

logger = structlog.get_logger()

NOT_FOUND = "Conversation not found"


def starter_message(assistant_name: str, scenario: str) -> dict:
    """The AI greeting every new conversation opens with."""
    return {
        "id": "starter-0",
        "sender": "ai",
        "text": (
            f"Hello! I'm {assistant_name}. Let's start our {scenario} practice. "
            "What would you like to talk about?"
        ),
        "translation": (
            f"Xin chào! Tôi là {assistant_name}. Hãy bắt đầu buổi luyện tập về "
            f"{scenario}. Bạn muốn nói về điều gì?"
        ),
    }


def default_title(assistant_name: str, scenario: str) -> str:
    return f"{assistant_name} - {scenario[:1].upper()}{scenario[1:]} Practice"


class ConversationService:
    """Business logic for conversations. All methods take the owner's id."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(
        self,
        owner_id: uuid.UUID,
        *,
        assistant_name: str,
        gender: str,
        scenario: str,
    ) -> Conversation:
        conversation = Conversation(
            user_id=owner_id,
            title=default_title(assistant_name, scenario),
            assistant_name=assistant_name,
            gender=gender,
            scenario=scenario,
            messages=[starter_message(assistant_name, scenario)],
        )
        self.db.add(conversation)
        await self.db.commit()
        await self.db.refresh(conversation)
        logger.info(
            "conversation.created",
            conversation_id=str(conversation.id),
            scenario=scenario,
        )
        return conversation

    async def list_for_owner(self, owner_id: uuid.UUID) -> list[Conversation]:
        result = await self.db.execute(
            select(Conversation)
            .where(Conversation.user_id == owner_id)
            .order_by(Conversation.updated_at.desc())
        )
        return list(result.scalars().all())

    async def get(self, owner_id: uuid.UUID, conversation_id: str) -> Conversation:
        conv_id = parse_id(conversation_id)
        if conv_id is None:
            raise NotFoundError(NOT_FOUND)
        result = await self.db.execute(
            select(Conversation)
            .where(Conversation.id == conv_id, Conversation.user_id == owner_id)
            .execution_options(populate_existing=True)
        )
        conversation = result.scalars().first()
        if not conversation:
            raise NotFoundError(NOT_FOUND)
        return conversation

    async def update(
        self,
        owner_id: uuid.UUID,
        conversation_id: str,
        *,
        title: Optional[str] = None,
        messages: Optional[list[dict]] = None,
    ) -> Conversation:
        """Replace title and/or messages in one conditional UPDATE."""
        conv_id = parse_id(conversation_id)
        if conv_id is None:
            raise NotFoundError(NOT_FOUND)

        values: dict = {"updated_at": utcnow()}
        if title is not None:
            values["title"] = title
        if messages is not None:
            values["messages"] = messages

        result = await self.db.execute(
            update(Conversation)
            .where(Conversation.id == conv_id, Conversation.user_id == owner_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            await self.db.rollback()
            raise NotFoundError(NOT_FOUND)
        await self.db.commit()
        return await self.get(owner_id, conversation_id)

    async def delete(self, owner_id: uuid.UUID, conversation_id: str) -> None:
        conv_id = parse_id(conversation_id)
        if conv_id is None:
            raise NotFoundError(NOT_FOUND)
        result = await self.db.execute(
            delete(Conversation)
            .where(Conversation.id == conv_id, Conversation.user_id == owner_id)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            await self.db.rollback()
            raise NotFoundError(NOT_FOUND)
        await self.db.commit()
        logger.info("conversation.deleted", conversation_id=str(conv_id))
