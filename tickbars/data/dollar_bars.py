"""
Dollar Bars - Samples a bar each time traded notional crosses a threshold.
"""

from typing import Optional

from ..core.constants import BarType, DEFAULT_DOLLAR_THRESHOLD
from ..core.exceptions import InvalidConfigError
from ..core.types import Bar, Tick
from .bar_policy import BarPolicy


class DollarBarPolicy(BarPolicy):
    """
    Emits a bar once cumulative price * volume * multiplier reaches the
    threshold.

    Rules:
    - The first tick after an emission seeds the next bar; its raw
      timestamp token becomes the bar's open time, untouched.
    - The tick that crosses the threshold closes the current bar and is
      part of it.
    - A crossing tick whose raw timestamp token is byte-identical to the
      previous tick's does not close the bar. Block prints split across
      several rows at the same instant stay together. Tokens are compared
      as text, never as parsed instants.
    - flush() always returns a bar, even an empty one.
    """

    bar_type = BarType.DOLLAR

    def __init__(self, dollar_threshold: float = DEFAULT_DOLLAR_THRESHOLD, multiplier: float = 1.0):
        """
        Initialize dollar bar policy.

        Args:
            dollar_threshold: Notional that closes a bar
            multiplier: Notional multiplier (contract size, point value)
        """
        if dollar_threshold <= 0:
            raise InvalidConfigError(
                "dollar_threshold must be positive",
                dollar_threshold=dollar_threshold
            )
        super().__init__(multiplier=multiplier)
        self.dollar_threshold = dollar_threshold
        self.duplicate_guard: Optional[str] = None
        self.suppressed = 0

    def ingest(self, tick: Tick) -> Optional[Bar]:
        self._check_not_flushed()
        self.ticks_seen += 1

        if not self.state.has_open:
            self.state.seed(tick, tick.raw_timestamp)
        self.state.absorb(tick)

        bar = None
        if self.state.notional >= self.dollar_threshold:
            if tick.raw_timestamp != self.duplicate_guard:
                bar = self.state.to_bar(self.state.open_marker)
                self.state.reset()
                self.bars_emitted += 1
            else:
                self.suppressed += 1

        self.duplicate_guard = tick.raw_timestamp
        return bar

    def flush(self) -> Bar:
        """
        Write out whatever the state holds.

        Below threshold, or empty when no tick followed the last emission;
        an empty state yields a bar with a blank open time and zero values.
        """
        marker = self.state.open_marker if self.state.has_open else ""
        bar = self.state.to_bar(marker)
        self.state.mark_flushed()
        self.bars_emitted += 1
        self.logger.debug(
            "Flushed trailing dollar bar",
            open_time=marker,
            notional=bar.notional,
            suppressed=self.suppressed
        )
        return bar
