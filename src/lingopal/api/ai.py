"""AI practice API — chat replies, rephrasings, hints, practice sentences.

Learn: These endpoints never surface a raw AI failure. When the model
call fails they answer 503 with a body of the SAME shape as a success
(an empty list, or a placeholder reply), so the frontend renders the
result without special-case error parsing.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from lingopal.dependencies import get_tutor_ai
from lingopal.schemas.ai import (
    ChatRequest,
    PracticeSentence,
    SuggestionsRequest,
    TopicSuggestionRequest,
    TutorReply,
)
from lingopal.services.tutor_ai import AIServiceError, TutorAI

router = APIRouter(prefix="/ai")

CHAT_FALLBACK = TutorReply(
    response="An error occurred while communicating with the AI service.",
    translation="Đã xảy ra lỗi khi giao tiếp với dịch vụ AI.",
)

TOPIC_FALLBACK = TutorReply(
    response="An error occurred while trying to get a suggestion.",
    translation="Đã xảy ra lỗi khi cố gắng lấy gợi ý.",
)

SENTENCE_FALLBACK = PracticeSentence(
    sentence="An error occurred while communicating with the AI service.",
    ipa="",
)


def _degraded(content) -> JSONResponse:
    if hasattr(content, "model_dump"):
        content = content.model_dump()
    return JSONResponse(status_code=503, content=content)


@router.post("/chat", response_model=TutorReply)
async def chat(body: ChatRequest, ai: TutorAI = Depends(get_tutor_ai)):
    """Next reply from the conversation partner, with a translation."""
    try:
        return await ai.chat_reply(body.history, body.assistant_name, body.scenario)
    except AIServiceError:
        return _degraded(CHAT_FALLBACK)


@router.post("/suggestions", response_model=list[str])
async def suggestions(body: SuggestionsRequest, ai: TutorAI = Depends(get_tutor_ai)):
    """Three more natural ways to say what the user wrote."""
    try:
        return await ai.suggest_rephrasings(body.text_to_improve)
    except AIServiceError:
        return _degraded([])


@router.post("/topic-suggestion", response_model=TutorReply)
async def topic_suggestion(
    body: TopicSuggestionRequest, ai: TutorAI = Depends(get_tutor_ai)
):
    """A hint for what the user could say next."""
    try:
        return await ai.suggest_topic(body.scenario, body.history)
    except AIServiceError:
        return _degraded(TOPIC_FALLBACK)


@router.post("/random-sentence", response_model=PracticeSentence)
async def random_sentence(ai: TutorAI = Depends(get_tutor_ai)):
    """A 10–15 word reading-practice sentence with its IPA."""
    try:
        return await ai.random_sentence()
    except AIServiceError:
        return _degraded(SENTENCE_FALLBACK)
