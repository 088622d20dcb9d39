"""
Gemini Provider - Google's GenAI SDK.

Uses the SDK's async surface (client.aio) so a timeout in the caller
cancels the in-flight HTTP request instead of leaving a thread behind.
"""

import time
import logging
from typing import Optional

from google import genai
from google.genai import types

from app.ai.providers.base import (
    AIProvider,
    AIResponse,
    ProviderType,
    TokenUsage
)

logger = logging.getLogger("companion.ai.gemini")


class GeminiProvider(AIProvider):
    provider_type = ProviderType.GEMINI

    def __init__(self, api_key: str, model: str = "gemini-2.5-flash"):
        self.model = model
        self.api_key = api_key

        if self.api_key:
            self._client = genai.Client(api_key=self.api_key)
            logger.info(f"Gemini provider initialized with model: {self.model}")
        else:
            self._client = None
            logger.warning("Gemini API key not configured; /api/ask will fail with 502")

    async def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 1024,
        **kwargs
    ) -> AIResponse:
        start_time = time.time()

        if not self._client:
            return self._error("API key missing", start_time)

        try:
            config = types.GenerateContentConfig(
                temperature=temperature,
                max_output_tokens=max_tokens,
                system_instruction=system_prompt,
            )

            response = await self._client.aio.models.generate_content(
                model=self.model,
                contents=prompt,
                config=config,
            )

            latency_ms = self._measure_latency(start_time)
            content = response.text or ""

            if not content:
                return self._error(f"Empty response (finish_reason={self._finish_reason(response)})", start_time)

            return AIResponse(
                content=content,
                provider=self.provider_type,
                model=self.model,
                usage=self._extract_usage(response),
                latency_ms=latency_ms,
                success=True,
                metadata={"finish_reason": self._finish_reason(response)},
            )

        except Exception as e:
            # SDK raises its own APIError family plus httpx errors; all are
            # reported, none escape
            logger.error(f"Gemini generation failed: {e}")
            return self._error(str(e), start_time)

    # --- private helpers ---

    def _extract_usage(self, response) -> TokenUsage:
        # The SDK returns None when usage is not reported
        usage = response.usage_metadata
        if not usage:
            return TokenUsage()
        return TokenUsage(
            prompt_tokens=usage.prompt_token_count or 0,
            completion_tokens=usage.candidates_token_count or 0,
        )

    def _finish_reason(self, response) -> Optional[str]:
        if response.candidates and response.candidates[0].finish_reason:
            reason = response.candidates[0].finish_reason
            return getattr(reason, "value", str(reason))
        return None

    def _error(self, msg, start_time):
        return self._create_error_response(
            error=msg, model=self.model, latency_ms=self._measure_latency(start_time)
        )
