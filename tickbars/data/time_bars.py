"""
Time Bars - Samples a bar at fixed wall-clock minute boundaries.
"""

from typing import Optional

from ..core.constants import (
    BarType, BAR_TIME_FORMAT, DEFAULT_INTERVAL_MINUTES, ROUNDING_MINUTES
)
from ..core.exceptions import InvalidConfigError
from ..core.types import Bar, Tick
from .bar_policy import BarPolicy
from .timestamps import EXCHANGE_TZ, round_to_minutes


class TimeBarPolicy(BarPolicy):
    """
    Emits a bar on the first tick whose minute-of-hour is a multiple of
    the interval.

    A boundary minute fires once: further ticks in the same minute keep
    accumulating into the next bar. The triggering tick belongs to the bar
    it closes.

    The reported open time is the bar's first tick rounded to the nearest
    ROUNDING_MINUTES, whatever the interval. A 5 minute run therefore
    reports times on a 15 minute grid.

    Open times are rendered on the New York clock whatever the tick
    timestamp encoding.
    """

    bar_type = BarType.TIME

    def __init__(self, interval_minutes: int = DEFAULT_INTERVAL_MINUTES, multiplier: float = 1.0):
        """
        Initialize time bar policy.

        Args:
            interval_minutes: Boundary spacing in minutes (1-60)
            multiplier: Notional multiplier
        """
        if not 1 <= interval_minutes <= 60:
            raise InvalidConfigError(
                "interval_minutes must be between 1 and 60",
                interval_minutes=interval_minutes
            )
        super().__init__(multiplier=multiplier)
        self.interval_minutes = interval_minutes
        self.last_emitted_minute: Optional[int] = None

    def ingest(self, tick: Tick) -> Optional[Bar]:
        self._check_not_flushed()
        self.ticks_seen += 1

        if not self.state.has_open:
            self.state.seed(tick, tick.timestamp)
        self.state.absorb(tick)

        minute = tick.timestamp.minute
        if minute % self.interval_minutes != 0 or minute == self.last_emitted_minute:
            return None

        bar = self._close_bar()
        self.last_emitted_minute = minute
        return bar

    def flush(self) -> Optional[Bar]:
        """
        Close the trailing partial period.

        Returns the partial bar when ticks arrived after the last boundary,
        None when the state is empty.
        """
        bar = None
        if self.state.has_open:
            bar = self._close_bar()
            self.logger.debug("Flushed partial time bar", open_time=bar.open_time)
        self.state.mark_flushed()
        return bar

    def _close_bar(self) -> Bar:
        # unix ticks arrive in UTC; bar files carry exchange wall-clock time
        opened = self.state.open_marker.astimezone(EXCHANGE_TZ)
        open_time = round_to_minutes(opened, ROUNDING_MINUTES)
        bar = self.state.to_bar(open_time.strftime(BAR_TIME_FORMAT))
        self.state.reset()
        self.bars_emitted += 1
        return bar
