"""
Tests for AnswerService and the ask prompt helpers.

The generation provider is faked; these tests check what is sent to it
and how its reply (or failure) is turned into an Answer or an error.
"""

import threading

import pytest
from sqlalchemy.orm import Session

from app.ai.prompts.ask_prompts import (
    NO_NOTES_PLACEHOLDER,
    NOTE_SEPARATOR,
    build_ask_prompt,
    build_notes_context,
    format_note,
)
from app.core.errors import ClientError, UpstreamError, UpstreamTimeout
from app.services.answer_service import AnswerService, strip_sources_lines
from app.services.notes_service import NotesService

from tests.conftest import FakeAIProvider


OWNER = "google-sub-alice"


def make_service(db: Session, provider: FakeAIProvider, **kwargs) -> AnswerService:
    return AnswerService(provider=provider, notes=NotesService(db), **kwargs)


class TestPromptHelpers:
    """Tests for context and prompt construction."""

    def test_format_note(self):
        assert format_note("Title", "Body") == "Title\nBody"
        assert format_note("", "Body only") == "Body only"
        assert format_note("Title only", "") == "Title only"
        assert format_note("  ", "  ") == ""

    def test_context_joins_newest_first(self):
        context = build_notes_context([("new", "b1"), ("old", "b2")], char_limit=1000)

        assert context == f"new\nb1{NOTE_SEPARATOR}old\nb2"

    def test_context_is_cut_at_char_limit(self):
        notes = [("", "x" * 100), ("", "y" * 100)]

        context = build_notes_context(notes, char_limit=120)

        assert len(context) == 120
        assert context.startswith("x" * 100)

    def test_empty_notes_are_skipped(self):
        assert build_notes_context([("", ""), ("a", "")], char_limit=100) == "a"

    def test_prompt_contains_question_and_context(self):
        prompt = build_ask_prompt("  Where is Rome?  ", "Rome\nItaly")

        assert "Where is Rome?" in prompt
        assert "Rome\nItaly" in prompt

    def test_prompt_without_notes(self):
        assert NO_NOTES_PLACEHOLDER in build_ask_prompt("Anything?", "")


class TestStripSources:
    """Tests for removal of citation lines."""

    @pytest.mark.parametrize("line", [
        "SOURCES: note 1, note 2",
        "Sources: none",
        "**SOURCES:** note 3",
        "  sources : x",
        "# Sources: a",
    ])
    def test_sources_lines_removed(self, line):
        assert strip_sources_lines(f"The answer.\n{line}") == "The answer."

    def test_other_lines_kept(self):
        text = "Line one.\nThe word sources: appears mid-line here.\nLine three."

        assert strip_sources_lines(text) == text


class TestAnswer:
    """Tests for AnswerService.answer."""

    @pytest.mark.asyncio
    async def test_notes_are_read_off_the_event_loop(self, db: Session):
        loop_thread = threading.get_ident()
        query_threads = []

        class RecordingNotes(NotesService):
            def recent(self, owner, limit):
                query_threads.append(threading.get_ident())
                return super().recent(owner, limit)

        service = AnswerService(provider=FakeAIProvider(), notes=RecordingNotes(db))

        await service.answer("Q?", owner=OWNER)

        assert len(query_threads) == 1
        assert query_threads[0] != loop_thread

    @pytest.mark.asyncio
    async def test_answer_uses_recent_notes(self, db: Session):
        notes = NotesService(db)
        notes.create(OWNER, title="Rome", body="Colosseum at 10am")
        notes.create("someone-else", title="Secret", body="do not leak")
        provider = FakeAIProvider(content="Visit the Colosseum at 10am.")

        answer = await make_service(db, provider).answer("When is the Rome visit?", owner=OWNER)

        assert answer.text == "Visit the Colosseum at 10am."
        assert answer.notes_used == 1
        assert "Colosseum at 10am" in provider.prompts[0]
        assert "do not leak" not in provider.prompts[0]
        assert "When is the Rome visit?" in provider.prompts[0]

    @pytest.mark.asyncio
    async def test_generation_settings_are_passed(self, db: Session):
        provider = FakeAIProvider()

        await make_service(db, provider, temperature=0.1, max_tokens=256).answer("Q?", owner=OWNER)

        assert provider.calls[0]["temperature"] == 0.1
        assert provider.calls[0]["max_tokens"] == 256
        assert provider.calls[0]["system_prompt"]

    @pytest.mark.asyncio
    async def test_notes_limit(self, db: Session):
        notes = NotesService(db)
        for i in range(5):
            notes.create(OWNER, title=f"note-{i}")
        provider = FakeAIProvider()

        answer = await make_service(db, provider, notes_limit=2).answer("Q?", owner=OWNER)

        assert answer.notes_used == 2
        assert "note-4" in provider.prompts[0]
        assert "note-3" in provider.prompts[0]
        assert "note-2" not in provider.prompts[0]

    @pytest.mark.asyncio
    async def test_context_char_limit(self, db: Session):
        NotesService(db).create(OWNER, body="z" * 5000)
        provider = FakeAIProvider()

        await make_service(db, provider, context_char_limit=300).answer("Q?", owner=OWNER)

        assert "z" * 300 in provider.prompts[0]
        assert "z" * 301 not in provider.prompts[0]

    @pytest.mark.asyncio
    async def test_no_notes_is_not_an_error(self, db: Session):
        provider = FakeAIProvider(content="I have nothing on that.")

        answer = await make_service(db, provider).answer("Anything?", owner=OWNER)

        assert answer.text == "I have nothing on that."
        assert answer.notes_used == 0
        assert NO_NOTES_PLACEHOLDER in provider.prompts[0]

    @pytest.mark.asyncio
    async def test_sources_are_stripped(self, db: Session):
        provider = FakeAIProvider(content="It is on Friday.\nSOURCES: note 2")

        answer = await make_service(db, provider).answer("When?", owner=OWNER)

        assert answer.text == "It is on Friday."

    @pytest.mark.asyncio
    @pytest.mark.parametrize("question", [None, "", "   "])
    async def test_missing_question(self, db: Session, question):
        provider = FakeAIProvider()

        with pytest.raises(ClientError) as exc_info:
            await make_service(db, provider).answer(question, owner=OWNER)

        assert exc_info.value.error == "missing_question"
        assert provider.prompts == []

    @pytest.mark.asyncio
    async def test_timeout(self, db: Session):
        provider = FakeAIProvider(delay=1.0)

        with pytest.raises(UpstreamTimeout) as exc_info:
            await make_service(db, provider, timeout=0.05).answer("Slow?", owner=OWNER)

        assert exc_info.value.status_code == 504

    @pytest.mark.asyncio
    async def test_provider_failure(self, db: Session):
        provider = FakeAIProvider(fail="quota exceeded")

        with pytest.raises(UpstreamError) as exc_info:
            await make_service(db, provider).answer("Q?", owner=OWNER)

        assert exc_info.value.status_code == 502
        # Provider's raw error is logged, not returned
        assert "quota" not in exc_info.value.message

    @pytest.mark.asyncio
    async def test_answer_that_is_only_sources(self, db: Session):
        provider = FakeAIProvider(content="SOURCES: note 1")

        with pytest.raises(UpstreamError):
            await make_service(db, provider).answer("Q?", owner=OWNER)
