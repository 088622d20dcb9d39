"""
Ask router - answer a question from the user's notes.
"""

from fastapi import APIRouter, Depends

from app.deps import get_answer_service, get_current_user
from app.schemas.ask import AskRequest, AskResponse
from app.services.answer_service import AnswerService
from app.services.session_service import SessionUser

router = APIRouter(prefix="/api", tags=["ask"])


@router.post("/ask", response_model=AskResponse)
async def ask(
    payload: AskRequest,
    user: SessionUser = Depends(get_current_user),
    answers: AnswerService = Depends(get_answer_service),
):
    """
    Answer `question` using the caller's most recent notes as context.

    Raises:
        400 missing_question
        401 no_user / invalid_session / session_expired
        502 upstream_error: the model failed
        504 upstream_timeout: the model did not answer in time
    """
    answer = await answers.answer(payload.question, owner=user.subject)
    return AskResponse(answer=answer.text, notes_used=answer.notes_used)
