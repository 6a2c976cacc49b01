"""Shared test doubles.

Provides:
- ScriptedLLM: in-memory text-generation double answering per pipeline stage
- A scratch artifact directory per test
"""

from __future__ import annotations

import pytest


class ScriptedLLM:
    """LLM double keyed by the ``stage`` metadata of each completion call.

    A response may be a string or an exception instance to raise. Stages
    without a scripted response answer with ``default``.
    """

    def __init__(self, responses: dict | None = None, default: str = "summary text") -> None:
        self.responses = dict(responses or {})
        self.default = default
        self.calls: list[tuple[str, list[dict]]] = []
        self.router = object()

    async def completion(
        self,
        messages: list[dict],
        model: str = "reasoning",
        max_tokens: int = 2048,
        temperature: float = 0.2,
        metadata: dict | None = None,
    ) -> dict:
        stage = (metadata or {}).get("stage", "unknown")
        self.calls.append((stage, messages))
        response = self.responses.get(stage, self.default)
        if isinstance(response, Exception):
            raise response
        return {"content": response, "model": "test-model", "usage": {}}

    def stages(self) -> list[str]:
        return [stage for stage, _ in self.calls]


@pytest.fixture
def scripted_llm():
    """Factory for ScriptedLLM instances."""
    return ScriptedLLM


@pytest.fixture
def artifact_dir(tmp_path):
    path = tmp_path / "artifacts"
    path.mkdir()
    return path
