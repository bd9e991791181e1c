"""
Bar State - OHLCV accumulator shared by every sampling policy.
"""

from datetime import datetime
from typing import Optional, Union

from ..core.constants import BarPhase
from ..core.exceptions import BarStateError
from ..core.types import Bar, Tick


class BarState:
    """
    Running open/high/low/close/volume/notional of the bar being built.

    Whether an open price exists is tracked by an explicit phase, never by
    testing the price against zero, so zero-priced prints open bars like
    any other.

    Invariant while OPEN:
        low <= open, close <= high
        notional == sum(price * volume * multiplier) since the last seed
    """

    def __init__(self, multiplier: float = 1.0):
        """
        Initialize an empty accumulator.

        Args:
            multiplier: Notional multiplier applied to every absorbed tick
        """
        self.multiplier = multiplier
        self.reset()

    @property
    def has_open(self) -> bool:
        return self.phase is BarPhase.OPEN

    def seed(self, tick: Tick, marker: Union[str, datetime]) -> None:
        """
        Start a bar at this tick's price.

        Does not count the tick's volume; callers absorb it next.
        """
        if self.phase is BarPhase.FLUSHED:
            raise BarStateError("Cannot seed a flushed bar state")

        self.phase = BarPhase.OPEN
        self.open = self.high = self.low = self.close = tick.price
        self.volume = 0.0
        self.notional = 0.0
        self.open_marker = marker

    def absorb(self, tick: Tick) -> None:
        """Fold a tick into the open bar."""
        if self.phase is not BarPhase.OPEN:
            raise BarStateError(
                "absorb() called before seed()",
                phase=self.phase.value,
                tick=tick.raw_timestamp
            )

        self.high = max(self.high, tick.price)
        self.low = min(self.low, tick.price)
        self.close = tick.price
        self.volume += tick.volume
        self.notional += tick.notional(self.multiplier)

    def reset(self) -> None:
        """Back to the not-yet-open state."""
        self.phase = BarPhase.NOT_STARTED
        self.open = self.high = self.low = self.close = 0.0
        self.volume = 0.0
        self.notional = 0.0
        self.open_marker: Optional[Union[str, datetime]] = None

    def mark_flushed(self) -> None:
        self.phase = BarPhase.FLUSHED

    def to_bar(self, open_time: str) -> Bar:
        """Snapshot the current values into an immutable Bar."""
        return Bar(
            open_time=open_time,
            open=self.open,
            high=self.high,
            low=self.low,
            close=self.close,
            volume=self.volume,
            notional=self.notional
        )

    def __repr__(self) -> str:
        return (
            f"BarState(phase={self.phase.value}, open={self.open}, high={self.high}, "
            f"low={self.low}, close={self.close}, volume={self.volume}, "
            f"notional={self.notional})"
        )
