"""State enumeration and moving average used by the squelch."""

from __future__ import annotations

import enum
from dataclasses import dataclass

_DECAY_FACTOR = 0.99
_NEW_FACTOR = 1.0 - _DECAY_FACTOR


class SquelchState(enum.IntEnum):
    """Squelch states; OPEN and CLOSING let audio through."""

    CLOSED = 0  # audio is suppressed
    OPENING = 1  # transitioning closed -> open
    CLOSING = 2  # transitioning open -> closed
    LOW_SIGNAL_ABORT = 3  # like CLOSING but audio is suppressed
    OPEN = 4  # audio not suppressed


@dataclass
class MovingAverage:
    """Exponential moving average kept both uncapped and capped."""

    full: float = 0.001
    capped: float = 0.001

    def update(self, sample: float, cap: float) -> None:
        """Fold one sample into both averages, limiting the capped one to ``cap``."""
        self.full = self.full * _DECAY_FACTOR + sample * _NEW_FACTOR
        # When both the average and the sample are at or above the cap the
        # result is the cap itself, which lets the level fall quickly later.
        if self.capped >= cap and sample >= cap:
            self.capped = cap
        else:
            self.capped = min(cap, self.capped * _DECAY_FACTOR + sample * _NEW_FACTOR)