"""Deadline extraction -- action items with due dates from a transcript.

The extraction model is asked for a bare JSON array, but its output is not
trusted: code fences are stripped and the result is validated. Anything
unusable degrades to an UnparsedDeadlines value carrying the reason, so
extraction can never abort a summary request.
"""

from __future__ import annotations

import json
import re
from datetime import date

import structlog
from pydantic import TypeAdapter, ValidationError

from src.meetscribe.summaries.schemas import (
    DeadlineExtraction,
    DeadlineItem,
    ParsedDeadlines,
    UnparsedDeadlines,
)

logger = structlog.get_logger(__name__)

_FENCE_RE = re.compile(r"^```[A-Za-z]*[ \t]*\n?|\n?```$")

_items_adapter = TypeAdapter(list[DeadlineItem])

DEADLINE_PROMPT_TEMPLATE = """You are an assistant that extracts structured data from meeting transcripts.
Analyze the following transcript. Today's date is {today}.
Your task is to identify any mention of specific tasks, action items, or deadlines.

Extract the findings into a valid JSON array of objects. Each object must have three keys:
1. "summary": A concise title for the task or action item.
2. "description": A brief, one-sentence explanation of the task.
3. "dueDate": The deadline for the task, formatted strictly as YYYY-MM-DD. Resolve relative terms like "next Friday" or "end of the month" against today's date.

If no specific tasks or deadlines are mentioned, you MUST respond with an empty array: [].
Do not include tasks that are already completed.
Respond with the JSON array only.

Transcript:
\"\"\"{transcript}\"\"\"

JSON Output:"""


def strip_code_fences(raw: str) -> str:
    """Remove a markdown code fence wrapped around a model response."""
    return _FENCE_RE.sub("", raw.strip()).strip()


def parse_deadlines(raw: str) -> DeadlineExtraction:
    """Parse a model response into deadline items.

    Args:
        raw: Model output, optionally wrapped in a code fence.

    Returns:
        ParsedDeadlines for a JSON array of objects, otherwise
        UnparsedDeadlines with the reason. Never raises.
    """
    cleaned = strip_code_fences(raw or "")
    if not cleaned:
        return UnparsedDeadlines(reason="empty response", raw=raw or "")

    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        return UnparsedDeadlines(reason=f"invalid JSON: {exc.msg}", raw=raw)

    try:
        items = _items_adapter.validate_python(data)
    except ValidationError as exc:
        return UnparsedDeadlines(
            reason=f"schema mismatch: {exc.error_count()} error(s)",
            raw=raw,
        )

    return ParsedDeadlines(items=items)


class DeadlineExtractor:
    """Asks the text-generation model for deadlines and parses the answer.

    Args:
        llm_service: LLMService (or compatible) exposing ``completion``.
        temperature: Sampling temperature for the extraction call.
    """

    def __init__(self, llm_service: object, temperature: float = 0.2) -> None:
        self._llm = llm_service
        self._temperature = temperature

    async def extract(self, transcript: str, today: date) -> DeadlineExtraction:
        """Extract deadlines, resolving relative dates against ``today``."""
        prompt = DEADLINE_PROMPT_TEMPLATE.format(
            today=today.isoformat(),
            transcript=transcript,
        )

        try:
            response = await self._llm.completion(
                messages=[{"role": "user", "content": prompt}],
                model="reasoning",
                max_tokens=1024,
                temperature=self._temperature,
                metadata={"stage": "deadlines"},
            )
        except Exception as exc:
            logger.warning("deadline_extraction_call_failed", error=str(exc))
            return UnparsedDeadlines(reason=f"model call failed: {exc}")

        result = parse_deadlines(response.get("content") or "")
        if isinstance(result, UnparsedDeadlines):
            logger.warning(
                "deadline_parse_failed",
                reason=result.reason,
                raw=result.raw[:500],
            )
        else:
            logger.info("deadlines_extracted", count=len(result.items))
        return result
