"""Pydantic schemas for the AI practice endpoints.

Two kinds of models live here:
- request/response bodies of /api/ai/*
- the structured-output contracts handed to the model as response_schema
"""

from typing import Literal

from pydantic import BaseModel, Field


# ─── Chat history (Gemini content format) ───────────────

class Part(BaseModel):
    text: str


class HistoryTurn(BaseModel):
    role: Literal["user", "model"]
    parts: list[Part] = Field(..., min_length=1)


# ─── Requests ───────────────────────────────────────────

class ChatRequest(BaseModel):
    history: list[HistoryTurn] = Field(..., min_length=1)
    assistant_name: str = Field(..., min_length=1)
    scenario: str = Field(..., min_length=1)


class SuggestionsRequest(BaseModel):
    text_to_improve: str = Field(..., min_length=1)


class TopicSuggestionRequest(BaseModel):
    scenario: str = Field(..., min_length=1)
    history: list[HistoryTurn]


# ─── Responses ──────────────────────────────────────────

class TutorReply(BaseModel):
    response: str
    translation: str


class PracticeSentence(BaseModel):
    sentence: str
    ipa: str


# ─── Model output contracts ─────────────────────────────

class BilingualOutput(BaseModel):
    englishResponse: str = Field(
        description="A friendly, natural English reply or suggestion."
    )
    vietnameseTranslation: str = Field(
        description="The Vietnamese translation of the English text."
    )


class SuggestionsOutput(BaseModel):
    suggestions: list[str] = Field(description="A list of 3 alternative sentences.")


class SentenceOutput(BaseModel):
    sentence: str = Field(description="The generated English sentence.")
    ipa: str = Field(
        description="The IPA transcription of the sentence using slashes, e.g., /həˈloʊ/."
    )
