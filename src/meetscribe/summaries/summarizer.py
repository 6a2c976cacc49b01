"""Summarizer -- prose summary of a meeting transcript.

Two strategies, chosen by the requested depth:
- brief: one model call over the whole transcript, constrained to the key
  points, decisions, critical action items and next steps.
- detailed: map-reduce. The transcript is split into overlapping chunks,
  each chunk is summarized independently, then the partial summaries are
  combined into one comprehensive summary.

Summarization is mandatory for a request, so any model failure raises
SummarizationError rather than degrading.
"""

from __future__ import annotations

import structlog

from src.meetscribe.summaries.chunker import chunk_text
from src.meetscribe.summaries.errors import SummarizationError
from src.meetscribe.summaries.schemas import PipelineStage, SummaryDepth

logger = structlog.get_logger(__name__)


# ── System Prompts ───────────────────────────────────────────────────────────

BRIEF_SYSTEM_PROMPT = (
    "You are summarizing a meeting transcript for a busy attendee. Produce a "
    "brief summary of 3-5 bullet points covering only:\n"
    "1) Key points discussed\n"
    "2) Decisions made\n"
    "3) Critical action items\n"
    "4) Next steps\n\n"
    "Keep the whole summary under 200 words. Do not invent details that are "
    "not in the transcript."
)

CHUNK_SUMMARY_SYSTEM_PROMPT = (
    "You are summarizing one segment of a longer meeting transcript. Write a "
    "concise summary of this segment. Keep every decision, action item, owner "
    "and date that is mentioned, and note who said what where it matters."
)

REDUCE_SYSTEM_PROMPT = (
    "You are combining partial summaries of consecutive segments of one "
    "meeting into a single comprehensive summary. Cover:\n"
    "1) The topics discussed\n"
    "2) The viewpoints raised\n"
    "3) Decisions made, with their context\n"
    "4) The full list of action items\n"
    "5) Follow-ups and open questions\n\n"
    "Merge information repeated across adjacent segments instead of listing "
    "it twice."
)


class Summarizer:
    """Produces summary text from a transcript with the text-generation model.

    Args:
        llm_service: LLMService (or compatible) exposing ``completion``.
        chunk_size: Characters per chunk in detailed mode.
        chunk_overlap: Characters shared by consecutive chunks.
        temperature: Sampling temperature for every call.
    """

    def __init__(
        self,
        llm_service: object,
        chunk_size: int = 3000,
        chunk_overlap: int = 200,
        temperature: float = 0.2,
    ) -> None:
        self._llm = llm_service
        self._chunk_size = chunk_size
        self._chunk_overlap = chunk_overlap
        self._temperature = temperature

    async def summarize(self, transcript: str, depth: SummaryDepth) -> str:
        """Summarize ``transcript`` at the requested depth.

        Raises:
            SummarizationError: If any model call fails or returns nothing.
        """
        if depth == SummaryDepth.BRIEF:
            return await self._complete(BRIEF_SYSTEM_PROMPT, f"Transcript:\n{transcript}", "summary.brief")
        return await self._map_reduce(transcript)

    async def _map_reduce(self, transcript: str) -> str:
        # MAP phase: sequential so provider rate limits are not hit in bursts
        chunks = chunk_text(transcript, self._chunk_size, self._chunk_overlap)
        partials: list[str] = []
        for i, chunk in enumerate(chunks):
            partial = await self._complete(
                CHUNK_SUMMARY_SYSTEM_PROMPT,
                f"Transcript segment {i + 1} of {len(chunks)}:\n{chunk}",
                "summary.map",
            )
            partials.append(partial)

        logger.info("summary_chunks_mapped", chunks=len(chunks))

        # REDUCE phase
        combined = "\n\n---\n\n".join(
            f"Segment {i + 1}:\n{p}" for i, p in enumerate(partials)
        )
        return await self._complete(
            REDUCE_SYSTEM_PROMPT,
            f"Segment summaries:\n{combined}",
            "summary.reduce",
        )

    async def _complete(self, system_prompt: str, user_content: str, stage: str) -> str:
        try:
            response = await self._llm.completion(
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_content},
                ],
                model="reasoning",
                temperature=self._temperature,
                metadata={"stage": stage},
            )
        except Exception as exc:
            logger.error("summary_model_call_failed", stage=stage, error=str(exc))
            raise SummarizationError(
                "Failed to generate the meeting summary",
                stage=PipelineStage.SUMMARIZED,
            ) from exc

        content = (response.get("content") or "").strip()
        if not content:
            raise SummarizationError(
                "The summary model returned an empty response",
                stage=PipelineStage.SUMMARIZED,
            )
        return content
