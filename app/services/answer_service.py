"""
Answer service - answers a question using the caller's recent notes.

Flow:
=====
1. Load the newest notes of the caller (bounded count)
2. Build a context string cut at a fixed character budget
3. Send question + context to the generation provider under a timeout
4. Strip "SOURCES:" lines from the reply and return it

No notes is not an error: the model is asked with an empty context.
Upstream failures are not retried.
"""

import asyncio
import logging
import re
import uuid
from dataclasses import dataclass

from app.ai.monitoring.logger import ai_logger
from app.ai.prompts.ask_prompts import ASK_SYSTEM_PROMPT, build_ask_prompt, build_notes_context
from app.ai.providers.base import AIProvider
from app.core.errors import ClientError, UpstreamError, UpstreamTimeout
from app.services.notes_service import NotesService

logger = logging.getLogger("companion.ai.answers")

# "SOURCES:", "Sources:", "**SOURCES:**", "  sources :" ...
SOURCES_LINE = re.compile(r"^\s*[*_#>\s]*sources\s*:", re.IGNORECASE)


def strip_sources_lines(text: str) -> str:
    """Drop every line that starts a citation block."""
    kept = [line for line in text.splitlines() if not SOURCES_LINE.match(line)]
    return "\n".join(kept).strip()


@dataclass(frozen=True)
class Answer:
    text: str
    notes_used: int


class AnswerService:
    """
    Answer composer.

    Example:
        service = AnswerService(provider, NotesService(db), timeout=60)
        answer = await service.answer("What did I write about Rome?", owner="sub-123")
    """

    def __init__(
        self,
        provider: AIProvider,
        notes: NotesService,
        notes_limit: int = 50,
        context_char_limit: int = 12000,
        temperature: float = 0.3,
        max_tokens: int = 1024,
        timeout: float = 60.0,
    ):
        self.provider = provider
        self.notes = notes
        self.notes_limit = notes_limit
        self.context_char_limit = context_char_limit
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout

    async def answer(self, question: str, owner: str) -> Answer:
        """
        Answer `question` for the owner of the session.

        Raises:
            ClientError: empty question (400 missing_question)
            UpstreamTimeout: provider did not answer within `timeout` (504)
            UpstreamError: provider failed or returned nothing (502)
        """
        question = (question or "").strip()
        if not question:
            raise ClientError("Question is required", error="missing_question")

        request_id = uuid.uuid4().hex[:12]

        # Sync SQLAlchemy session; keep the query off the event loop
        notes = await asyncio.to_thread(self.notes.recent, owner, self.notes_limit)
        context = build_notes_context(
            ((note.title, note.body) for note in notes),
            self.context_char_limit,
        )
        prompt = build_ask_prompt(question, context)

        ai_logger.log_request(
            request_id=request_id,
            prompt=prompt,
            provider=self.provider.provider_type.value,
            model=self.provider.model,
            user_id=owner,
            metadata={"notes": len(notes), "context_chars": len(context)},
        )

        try:
            response = await asyncio.wait_for(
                self.provider.generate(
                    prompt=prompt,
                    system_prompt=ASK_SYSTEM_PROMPT,
                    temperature=self.temperature,
                    max_tokens=self.max_tokens,
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            ai_logger.log_error(request_id, f"No answer within {self.timeout}s", stage="timeout")
            raise UpstreamTimeout(f"The model did not answer within {self.timeout:g} seconds")

        ai_logger.log_response(request_id, response)

        if not response.success:
            # Full provider error stays in the log line above
            raise UpstreamError("The model could not answer right now")

        text = strip_sources_lines(response.content)
        if not text:
            ai_logger.log_error(request_id, "Answer empty after cleanup", stage="generation")
            raise UpstreamError("The model returned an empty answer")

        return Answer(text=text, notes_used=len(notes))
