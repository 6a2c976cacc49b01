"""Calendar fan-out -- one all-day event per extracted deadline.

Each item is attempted independently and produces its own outcome; the
loop never stops at the first failure and the fan-out itself never raises.
Items run one after another because a Google API service object is not
safe to share across threads.
"""

from __future__ import annotations

import structlog
from google.oauth2.credentials import Credentials

from src.meetscribe.core.monitoring import calendar_events_total
from src.meetscribe.services.gsuite import CalendarEvent, GoogleCalendarService
from src.meetscribe.summaries.schemas import CalendarOutcome, DeadlineItem, FanoutResult

logger = structlog.get_logger(__name__)

DEFAULT_EVENT_DESCRIPTION = "Deadline identified from meeting session."


class CalendarFanout:
    """Creates calendar entries for deadline items with isolated failures."""

    def __init__(self, calendar_service: GoogleCalendarService) -> None:
        self._calendar = calendar_service

    async def create_events(
        self,
        items: list[DeadlineItem],
        credentials: Credentials | None,
    ) -> FanoutResult:
        """Attempt one event per item.

        Args:
            items: Extracted deadline items, possibly empty.
            credentials: Request credentials; None when none could be
                obtained, in which case every schedulable item fails.

        Returns:
            FanoutResult with one outcome per item.
        """
        outcomes = [await self._create_one(item, credentials) for item in items]
        result = FanoutResult(outcomes=outcomes)
        logger.info(
            "calendar_fanout_completed",
            attempted=len(items),
            created=result.created_count,
        )
        return result

    async def _create_one(
        self,
        item: DeadlineItem,
        credentials: Credentials | None,
    ) -> CalendarOutcome:
        if not item.is_schedulable:
            calendar_events_total.labels(outcome="skipped").inc()
            return CalendarOutcome(item=item, created=False, reason="missing summary or due date")

        if credentials is None:
            calendar_events_total.labels(outcome="failed").inc()
            return CalendarOutcome(item=item, created=False, reason="no delivery credential")

        try:
            day = item.due_day()
        except ValueError:
            logger.warning("calendar_due_date_invalid", summary=item.summary, due_date=item.due_date)
            calendar_events_total.labels(outcome="failed").inc()
            return CalendarOutcome(item=item, created=False, reason=f"invalid due date {item.due_date!r}")

        event = CalendarEvent(
            summary=item.summary.strip(),
            description=item.description or DEFAULT_EVENT_DESCRIPTION,
            day=day,
        )
        try:
            created = await self._calendar.create_event(event, credentials)
        except Exception as exc:
            logger.warning("calendar_event_failed", summary=item.summary, error=str(exc))
            calendar_events_total.labels(outcome="failed").inc()
            return CalendarOutcome(item=item, created=False, reason=str(exc) or type(exc).__name__)

        calendar_events_total.labels(outcome="created").inc()
        return CalendarOutcome(item=item, created=True, event_id=created.event_id)
