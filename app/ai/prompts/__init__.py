"""
Prompts Module - prompt templates for AI interactions.

Keeping prompts in one place makes them easy to iterate on and to test.
"""

from app.ai.prompts.ask_prompts import (
    ASK_SYSTEM_PROMPT,
    build_ask_prompt,
    build_notes_context,
)

__all__ = [
    "ASK_SYSTEM_PROMPT",
    "build_ask_prompt",
    "build_notes_context",
]
