"""
Ask schemas - question in, answer out.
"""

from typing import Optional

from app.schemas.common import CamelModel


class AskRequest(CamelModel):
    """
    Example request body:
    {"question": "What did I write about Rome?"}

    Optional so that a missing question yields 400 missing_question
    rather than a generic validation error.
    """
    question: Optional[str] = None


class AskResponse(CamelModel):
    answer: str
    notes_used: int = 0
