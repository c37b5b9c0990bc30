"""Conversation API routes — owner-scoped CRUD.

Learn: The owner always comes from the resolved identity, never from
the request body or URL. Ids that are malformed, unknown, or owned by
someone else all produce the same 404.
"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from lingopal.auth.dependencies import CurrentIdentity, get_current_user
from lingopal.db.engine import get_db
from lingopal.schemas.conversation import (
    ConversationCreate,
    ConversationRead,
    ConversationUpdate,
)
from lingopal.services.conversation_service import ConversationService

router = APIRouter(prefix="/conversations")


def _svc(db: AsyncSession = Depends(get_db)) -> ConversationService:
    return ConversationService(db)


@router.post("", response_model=ConversationRead, status_code=201)
async def create_conversation(
    body: ConversationCreate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: ConversationService = Depends(_svc),
):
    """Start a conversation, seeded with the assistant's greeting."""
    return await svc.create(
        identity.user_id,
        assistant_name=body.assistant_name,
        gender=body.gender,
        scenario=body.scenario,
    )


@router.get("", response_model=list[ConversationRead])
async def list_conversations(
    identity: CurrentIdentity = Depends(get_current_user),
    svc: ConversationService = Depends(_svc),
):
    return await svc.list_for_owner(identity.user_id)


@router.get("/{conversation_id}", response_model=ConversationRead)
async def get_conversation(
    conversation_id: str,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: ConversationService = Depends(_svc),
):
    return await svc.get(identity.user_id, conversation_id)


@router.patch("/{conversation_id}", response_model=ConversationRead)
async def update_conversation(
    conversation_id: str,
    body: ConversationUpdate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: ConversationService = Depends(_svc),
):
    messages = (
        [m.model_dump() for m in body.messages] if body.messages is not None else None
    )
    return await svc.update(
        identity.user_id, conversation_id, title=body.title, messages=messages
    )


@router.delete("/{conversation_id}", status_code=204)
async def delete_conversation(
    conversation_id: str,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: ConversationService = Depends(_svc),
):
    await svc.delete(identity.user_id, conversation_id)
    return Response(status_code=204)
