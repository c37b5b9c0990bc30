"""Tutor AI — structured calls to Gemini for the practice features.

Learn: Every feature is one generate_content call with:
- a system instruction (the persona / coaching role)
- response_mime_type="application/json" and a pydantic response_schema,
  so the model answers in a fixed JSON shape we can validate

Calls are single-attempt. Any failure (transport, quota, a reply that
doesn't match the schema) becomes AIServiceError; the API layer turns
that into a placeholder body of the endpoint's normal shape.
"""

from typing import Optional, TypeVar

import structlog
from google import genai
from google.genai import types
from pydantic import BaseModel

from lingopal.config import Settings
from lingopal.schemas.ai import (
    BilingualOutput,
    HistoryTurn,
    PracticeSentence,
    SentenceOutput,
    SuggestionsOutput,
    TutorReply,
)

logger = structlog.get_logger()

OutputT = TypeVar("OutputT", bound=BaseModel)

COACH_INSTRUCTION = (
    "You are an expert English language coach. "
    "Your goal is to help users improve their phrasing."
)

HINT_INSTRUCTION = (
    "You are an AI assistant helping a user who is stuck in an English "
    "conversation practice. You provide a single, natural-sounding suggestion "
    "for what they could say next. You will provide both the English "
    "suggestion and its Vietnamese translation."
)

SENTENCE_INSTRUCTION = (
    "You are an English teacher creating practice materials. You will provide "
    "a sentence and its International Phonetic Alphabet (IPA) transcription."
)

RANDOM_SENTENCE_PROMPT = (
    "Generate a single, interesting, and grammatically correct English sentence "
    "that is suitable for a language learner to practice reading. The sentence "
    "should be between 10 and 15 words long."
)


class AIServiceError(Exception):
    """The AI service failed or returned something unusable."""


def persona_instruction(scenario: str, assistant_name: str) -> str:
    """System instruction for the conversation partner, by scenario."""
    if scenario == "restaurant":
        return (
            f"You are {assistant_name}, a friendly and patient waiter at a restaurant. "
            "Your goal is to help the user practice ordering food and drinks in English. "
            "Guide them through the menu, take their order, and handle any questions "
            "they might have about the dishes. Be polite and professional."
        )
    if scenario == "interview":
        return (
            f"You are {assistant_name}, a professional hiring manager conducting a job "
            "interview. Your goal is to help the user practice their interview skills "
            "in English. Ask them common interview questions (e.g., \"Tell me about "
            "yourself,\" \"What are your strengths?\"). Keep your tone professional "
            "and encouraging."
        )
    return (
        f"You are an English speaking practice partner named {assistant_name}. "
        "Your goal is to help the user practice speaking English. Keep your "
        "English responses natural and engaging."
    )


def topic_prompt(scenario: str, history: list[HistoryTurn]) -> str:
    recent = "\n".join(
        f"{turn.role}: {turn.parts[0].text}" for turn in history[-4:]
    )
    return (
        "The user is practicing their English in a conversation with an AI. "
        f"The scenario is '{scenario}'. The user has asked for a hint on what to "
        "say next. Based on the last few messages of the conversation, provide one "
        "single, engaging question or topic suggestion to keep the conversation "
        "going. The suggestion should be something the user can naturally say to "
        "the AI.\n\n"
        f"Recent conversation:\n{recent}\n\n"
        "Your suggestion should be just the sentence the user could say."
    )


def to_contents(history: list[HistoryTurn]) -> list[types.Content]:
    return [
        types.Content(
            role=turn.role,
            parts=[types.Part.from_text(text=part.text) for part in turn.parts],
        )
        for turn in history
    ]


class TutorAI:
    """Gemini-backed practice helpers. The SDK client is created on first use."""

    def __init__(self, settings: Settings):
        self.api_key = settings.ai_api_key
        self.model = settings.ai_model
        self._client: Optional[genai.Client] = None

    @property
    def client(self) -> genai.Client:
        if self._client is None:
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    async def _generate(
        self,
        contents,
        system_instruction: str,
        schema: type[OutputT],
        feature: str,
    ) -> OutputT:
        try:
            response = await self.client.aio.models.generate_content(
                model=self.model,
                contents=contents,
                config=types.GenerateContentConfig(
                    system_instruction=system_instruction,
                    response_mime_type="application/json",
                    response_schema=schema,
                ),
            )
            return schema.model_validate_json((response.text or "").strip())
        except Exception as e:
            logger.error("ai.request_failed", feature=feature, error=str(e))
            raise AIServiceError(str(e)) from e

    # ─── Features ───────────────────────────────────────

    async def chat_reply(
        self, history: list[HistoryTurn], assistant_name: str, scenario: str
    ) -> TutorReply:
        out = await self._generate(
            to_contents(history),
            persona_instruction(scenario, assistant_name),
            BilingualOutput,
            feature="chat",
        )
        return TutorReply(response=out.englishResponse, translation=out.vietnameseTranslation)

    async def suggest_rephrasings(self, text_to_improve: str) -> list[str]:
        out = await self._generate(
            f'The user said: "{text_to_improve}". Provide 3 alternative, more natural, '
            "or more sophisticated ways to say the same thing.",
            COACH_INSTRUCTION,
            SuggestionsOutput,
            feature="suggestions",
        )
        return out.suggestions

    async def suggest_topic(
        self, scenario: str, history: list[HistoryTurn]
    ) -> TutorReply:
        out = await self._generate(
            topic_prompt(scenario, history),
            HINT_INSTRUCTION,
            BilingualOutput,
            feature="topic_suggestion",
        )
        return TutorReply(
            response=f'How about this: "{out.englishResponse}"',
            translation=f'Thử nói thế này xem: "{out.vietnameseTranslation}"',
        )

    async def random_sentence(self) -> PracticeSentence:
        out = await self._generate(
            RANDOM_SENTENCE_PROMPT,
            SENTENCE_INSTRUCTION,
            SentenceOutput,
            feature="random_sentence",
        )
        return PracticeSentence(sentence=out.sentence, ipa=out.ipa)
