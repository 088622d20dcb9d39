"""
AI Providers Module - clients for the text-generation API.

Every provider has the same interface:
    response = await provider.generate(prompt, **kwargs)
"""

from app.ai.providers.base import AIProvider, AIResponse, ProviderType, TokenUsage
from app.ai.providers.gemini import GeminiProvider

__all__ = [
    "AIProvider",
    "AIResponse",
    "ProviderType",
    "TokenUsage",
    "GeminiProvider",
]
