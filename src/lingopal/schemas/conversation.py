"""Pydantic schemas for practice conversations."""

import uuid
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from lingopal.schemas.user import Gender


class Message(BaseModel):
    id: str = Field(..., min_length=1, max_length=100)
    sender: Literal["user", "ai"]
    text: str = Field(..., min_length=1)
    translation: Optional[str] = None


def _unique_ids(messages: Optional[list[Message]]) -> Optional[list[Message]]:
    if messages is None:
        return messages
    seen: set[str] = set()
    for msg in messages:
        if msg.id in seen:
            raise ValueError(f"duplicate message id '{msg.id}'")
        seen.add(msg.id)
    return messages


class ConversationCreate(BaseModel):
    assistant_name: str = Field(..., min_length=1, max_length=100)
    gender: Gender
    scenario: str = Field(..., min_length=1, max_length=50)


class ConversationUpdate(BaseModel):
    """Replace the message list and/or the title. Omitted fields are left alone."""
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    messages: Optional[list[Message]] = None

    @field_validator("messages")
    @classmethod
    def message_ids_unique(cls, v):
        return _unique_ids(v)


class ConversationRead(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    title: str
    assistant_name: str
    gender: str
    scenario: str
    messages: list[Message]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
