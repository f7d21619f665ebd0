"""Match-quality threshold filter for scored events."""

from ..models import Event
from . import BaseFilter


class QualityFilter(BaseFilter):
    """Drop events whose vibe match is below a minimum score.

    Unscored events (vibe_match None) count as 0.
    """

    def __init__(self, min_score: int = 75):
        """Initialize the quality filter.

        Args:
            min_score: Minimum vibe match (0-100)
        """
        if not 0 <= min_score <= 100:
            raise ValueError("min_score must be between 0 and 100")
        self.min_score = min_score

    @property
    def name(self) -> str:
        return f"quality(>={self.min_score})"

    def exclusion_reason(self, event: Event) -> str | None:
        score = event.vibe_match or 0
        if score >= self.min_score:
            return None
        return f"Vibe match {score} below threshold {self.min_score}"
