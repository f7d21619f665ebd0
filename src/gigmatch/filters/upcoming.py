"""Drop events that already took place."""

from datetime import date, datetime
from typing import Callable

from ..logging import get_logger
from ..models import Event
from . import BaseFilter

logger = get_logger(__name__)


def parse_event_date(value: str | None) -> date | None:
    """Parse an ISO 8601 date or datetime string to a date, or None if it cannot be read."""
    if not value:
        return None
    text = value.strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return None


class UpcomingEventFilter(BaseFilter):
    """Keep events dated today or later, compared by calendar day.

    Events whose date cannot be parsed are kept: a parser gap must not
    silently hide a real event.
    """

    def __init__(self, today: Callable[[], date] = date.today):
        """Initialize the filter.

        Args:
            today: Returns the current day; injectable for tests
        """
        self._today = today

    @property
    def name(self) -> str:
        return "upcoming"

    def exclusion_reason(self, event: Event) -> str | None:
        event_date = parse_event_date(event.date)
        if event_date is None:
            logger.warning("unparseable_event_date", event_id=event.id, date=event.date)
            return None
        today = self._today()
        if event_date < today:
            return f"Date {event.date} is before {today}"
        return None
