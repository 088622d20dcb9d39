"""
Ask Prompts - templates for answering a question from the user's notes.

The model gets one prompt holding both the question and the note context,
plus a short system instruction. Context is already cut to the character
budget by the caller.
"""

from typing import Iterable, Tuple

ASK_SYSTEM_PROMPT = """You are a personal notes assistant.
Answer the user's question using the notes provided below when they are relevant.
If the notes do not contain the answer, say so briefly and answer from general knowledge.
Answer in the language of the question. Be concise.
Do not list sources or add a SOURCES section."""

NO_NOTES_PLACEHOLDER = "(the user has no notes yet)"

NOTE_SEPARATOR = "\n\n---\n\n"


def format_note(title: str, body: str) -> str:
    """Render one note as `title` on the first line and `body` below it."""
    title = (title or "").strip()
    body = (body or "").strip()
    if title and body:
        return f"{title}\n{body}"
    return title or body


def build_notes_context(notes: Iterable[Tuple[str, str]], char_limit: int) -> str:
    """
    Join (title, body) pairs newest-first and cut at `char_limit` characters.

    Notes arrive newest first, so the cut drops the oldest material.
    """
    rendered = [text for text in (format_note(title, body) for title, body in notes) if text]
    return NOTE_SEPARATOR.join(rendered)[:char_limit]


def build_ask_prompt(question: str, context: str) -> str:
    """Embed the question and the notes context in a single prompt."""
    return f"""NOTES (newest first):
{context.strip() or NO_NOTES_PLACEHOLDER}

QUESTION:
{question.strip()}

ANSWER:"""
