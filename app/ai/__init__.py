"""
AI Module - text generation for /api/ask.

Module Structure:
================
- providers/: generation provider clients (Gemini)
- prompts/: prompt templates
- monitoring/: structured logging of every generation call

Flow:
=====
1. User: "What did I write about Rome?"
2. AnswerService loads the user's newest notes and builds the context
3. The prompt goes to the provider under a timeout
4. The reply is cleaned and returned
"""

__version__ = "0.1.0"
