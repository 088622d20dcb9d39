"""
AI Logger - Structured logging for generation calls.

Each entry is a JSON object on one line, tagged with a request id so a
request, its response and any error can be correlated:
- ai_request:  model, prompt length and preview, user
- ai_response: latency, token usage, success/error
- ai_error:    stage where the pipeline failed
"""

import json
import logging
from datetime import datetime, timezone
from typing import Optional, Dict, Any

from app.ai.providers.base import AIResponse

logger = logging.getLogger("companion.ai")


class AILogger:
    """
    Structured logger for AI operations.

    Usage:
        ai_logger.log_request(request_id="abc123", prompt=prompt,
                              provider="gemini", model="gemini-2.5-flash")
        ai_logger.log_response(request_id="abc123", response=ai_response)
    """

    def __init__(self):
        self._logger = logger

    def log_request(
        self,
        request_id: str,
        prompt: str,
        provider: str,
        model: str,
        user_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Log an AI request.

        Only a short preview of the prompt is logged; notes are user data.
        """
        log_data = {
            "event": "ai_request",
            "request_id": request_id,
            "provider": provider,
            "model": model,
            "prompt_length": len(prompt),
            "prompt_preview": prompt[:100] + "..." if len(prompt) > 100 else prompt,
            "user_id": user_id,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

        if metadata:
            log_data["metadata"] = metadata

        self._logger.info(f"AI Request: {json.dumps(log_data)}")

    def log_response(
        self,
        request_id: str,
        response: AIResponse,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Log an AI response (WARNING level when the provider failed)."""
        log_data = {
            "event": "ai_response",
            "request_id": request_id,
            "provider": response.provider.value,
            "model": response.model,
            "success": response.success,
            "latency_ms": round(response.latency_ms, 2),
            "tokens": {
                "prompt": response.usage.prompt_tokens,
                "completion": response.usage.completion_tokens,
                "total": response.usage.total_tokens,
            },
            "response_length": len(response.content),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

        if not response.success:
            log_data["error"] = response.error

        if metadata:
            log_data["metadata"] = metadata

        level = logging.INFO if response.success else logging.WARNING
        self._logger.log(level, f"AI Response: {json.dumps(log_data)}")

    def log_error(
        self,
        request_id: str,
        error: str,
        stage: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Log an error in the AI pipeline.

        Args:
            request_id: Request identifier
            error: Error message
            stage: Where the error occurred (context, generation, timeout)
            metadata: Additional context
        """
        log_data = {
            "event": "ai_error",
            "request_id": request_id,
            "error": error,
            "stage": stage,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

        if metadata:
            log_data["metadata"] = metadata

        self._logger.error(f"AI Error: {json.dumps(log_data)}")


# ---------------------------------------------------------------------------
# SINGLETON INSTANCE
# ---------------------------------------------------------------------------
ai_logger = AILogger()
