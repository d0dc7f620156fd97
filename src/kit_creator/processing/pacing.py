"""
Pacing policies for sequential image batches.

A policy decides how long to wait before the next remote call, given how
the previous one went. Batches never run calls concurrently, so this delay
is the only rate limiting between items.
"""

from typing import Optional

from ..config import INTER_CALL_DELAY_SECONDS
from ..core.models import ItemOutcome


class PacingPolicy:
    """Base policy: no delay."""

    def wait_before_next(self, previous_outcome: ItemOutcome) -> float:
        """Return the number of seconds to wait before the next call."""
        return 0.0


class NoPacing(PacingPolicy):
    """Run calls back to back (tests, or services without a per-minute limit)."""
    pass


class FixedIntervalPacing(PacingPolicy):
    """Wait a fixed interval between calls, regardless of the previous outcome."""

    def __init__(self, interval: float = INTER_CALL_DELAY_SECONDS):
        self.interval = interval

    def wait_before_next(self, previous_outcome: ItemOutcome) -> float:
        return self.interval


def default_pacing(pacing: Optional[PacingPolicy] = None) -> PacingPolicy:
    """Return pacing, or the production fixed-interval policy when None."""
    return pacing if pacing is not None else FixedIntervalPacing()
