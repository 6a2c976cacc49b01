"""LLM provider abstraction via LiteLLM Router.

Provides the text-generation and speech-to-text collaborator used by the
summary pipeline and the transcription endpoint:
- GPT-4o as the primary reasoning model, Claude Sonnet 4 as fallback
- Whisper for audio segment transcription
- Per-call stage metadata for metrics
"""

from __future__ import annotations

from typing import BinaryIO

import structlog
from litellm import Router

from src.meetscribe.config import get_settings
from src.meetscribe.core.monitoring import track_llm_call

logger = structlog.get_logger(__name__)


class LLMService:
    """LLM provider abstraction with LiteLLM Router.

    Configures a "reasoning" model group for summaries and deadline
    extraction and a "transcription" group for speech-to-text. The router
    retries and falls back across deployments within a group.
    """

    def __init__(self) -> None:
        settings = get_settings()
        self._transcription_language = settings.TRANSCRIPTION_LANGUAGE

        model_list = []

        if settings.OPENAI_API_KEY:
            model_list.append({
                "model_name": "reasoning",
                "litellm_params": {
                    "model": "openai/gpt-4o",
                    "api_key": settings.OPENAI_API_KEY,
                },
            })
            model_list.append({
                "model_name": "transcription",
                "litellm_params": {
                    "model": settings.TRANSCRIPTION_MODEL,
                    "api_key": settings.OPENAI_API_KEY,
                },
            })

        # Fallback reasoning model: Claude Sonnet 4
        if settings.ANTHROPIC_API_KEY:
            model_list.append({
                "model_name": "reasoning",
                "litellm_params": {
                    "model": "anthropic/claude-sonnet-4-20250514",
                    "api_key": settings.ANTHROPIC_API_KEY,
                },
            })

        if not model_list:
            logger.warning("No LLM API keys configured -- LLM service will be unavailable")
            self.router = None
            return

        self.router = Router(
            model_list=model_list,
            num_retries=settings.LLM_MAX_RETRIES,
            timeout=settings.LLM_TIMEOUT,
            allowed_fails=3,
            cooldown_time=30,
        )

    async def completion(
        self,
        messages: list[dict],
        model: str = "reasoning",
        max_tokens: int = 2048,
        temperature: float = 0.2,
        metadata: dict | None = None,
    ) -> dict:
        """Execute a completion call through the LiteLLM Router.

        Args:
            messages: List of message dicts with 'role' and 'content'.
            model: Model group name.
            max_tokens: Maximum tokens in the response.
            temperature: Sampling temperature (0-2).
            metadata: Additional metadata; ``stage`` labels the call in metrics.

        Returns:
            Dict with content, model and usage.

        Raises:
            RuntimeError: If no LLM API keys are configured.
        """
        if not self.router:
            raise RuntimeError("No LLM API keys configured")

        call_metadata = dict(metadata or {})
        stage = str(call_metadata.get("stage", "unknown"))

        async with track_llm_call(model, stage) as tracker:
            response = await self.router.acompletion(
                model=model,
                messages=messages,
                max_tokens=max_tokens,
                temperature=temperature,
                metadata=call_metadata,
            )

            usage = {}
            if hasattr(response, "usage") and response.usage:
                usage = {
                    "prompt_tokens": response.usage.prompt_tokens,
                    "completion_tokens": response.usage.completion_tokens,
                    "total_tokens": response.usage.total_tokens,
                }
                tracker["prompt_tokens"] = usage["prompt_tokens"]
                tracker["completion_tokens"] = usage["completion_tokens"]

        return {
            "content": response.choices[0].message.content,
            "model": response.model,
            "usage": usage,
        }

    async def transcribe(self, audio_file: BinaryIO) -> str:
        """Transcribe one audio file with the speech-to-text model group.

        Args:
            audio_file: Open binary file. Its name's extension tells the
                provider the container format.

        Returns:
            The transcribed text (may be empty for silence).

        Raises:
            RuntimeError: If no transcription deployment is configured.
        """
        if not self.router:
            raise RuntimeError("No LLM API keys configured")

        async with track_llm_call("transcription", "transcribe"):
            response = await self.router.atranscription(
                model="transcription",
                file=audio_file,
                language=self._transcription_language,
            )
        return response.text or ""


# ── Singleton ─────────────────────────────────────────────────────────────────

_llm_service: LLMService | None = None


def get_llm_service() -> LLMService:
    """Get or create the LLM service singleton."""
    global _llm_service
    if _llm_service is None:
        _llm_service = LLMService()
    return _llm_service
