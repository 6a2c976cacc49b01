"""Summary pipeline: transcript in, summary, deadlines and delivery out."""

from src.meetscribe.summaries.errors import (
    DeliveryCredentialError,
    DeliveryError,
    InvalidSummaryRequestError,
    SummarizationError,
    SummaryPipelineError,
)
from src.meetscribe.summaries.pipeline import SummaryPipeline
from src.meetscribe.summaries.schemas import (
    DeadlineItem,
    PipelineStage,
    SummaryDepth,
    SummaryRequest,
    SummaryResult,
)

__all__ = [
    "DeadlineItem",
    "DeliveryCredentialError",
    "DeliveryError",
    "InvalidSummaryRequestError",
    "PipelineStage",
    "SummarizationError",
    "SummaryDepth",
    "SummaryPipeline",
    "SummaryPipelineError",
    "SummaryRequest",
    "SummaryResult",
]
