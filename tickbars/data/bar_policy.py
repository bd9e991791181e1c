"""
Bar Policy - Abstract base class for tick sampling policies.

Policy Lifecycle:
1. ingest() called for every tick, in file order, across all of a run's files
2. Policy folds the tick into its BarState
3. Policy returns a completed Bar (or None)
4. flush() called once at end of input for the trailing bar, if any

Policies hold no I/O; the engine reads ticks and writes bars.
"""

from abc import ABC, abstractmethod
from typing import Optional

from ..core.config import BarOptions
from ..core.constants import BarPhase, BarType
from ..core.exceptions import BarStateError, InvalidConfigError
from ..core.types import Bar, Tick
from .bar_state import BarState


class BarPolicy(ABC):
    """
    Abstract base class for bar sampling policies.

    Subclasses must implement:
    - ingest()
    - flush()
    """

    bar_type: BarType

    def __init__(self, multiplier: float = 1.0):
        self.state = BarState(multiplier=multiplier)
        self.ticks_seen = 0
        self.bars_emitted = 0

        from ..monitoring.logger import get_logger
        self.logger = get_logger(f"{__name__}.{self.bar_type.value}")

    @abstractmethod
    def ingest(self, tick: Tick) -> Optional[Bar]:
        """
        Process a tick and return a bar if it closes one.

        Args:
            tick: Next tick in stream order

        Returns:
            Completed Bar, or None while still accumulating
        """
        pass

    @abstractmethod
    def flush(self) -> Optional[Bar]:
        """
        Finish the run.

        Returns:
            The trailing bar to write, or None when there is nothing to write
        """
        pass

    def _check_not_flushed(self) -> None:
        if self.state.phase is BarPhase.FLUSHED:
            raise BarStateError("Tick ingested after final flush", bar_type=self.bar_type.value)


def make_policy(bar_type: BarType, options: BarOptions) -> BarPolicy:
    """Build the policy for bar_type from run options."""
    from .time_bars import TimeBarPolicy
    from .dollar_bars import DollarBarPolicy

    try:
        bar_type = BarType(bar_type)
    except ValueError:
        raise InvalidConfigError("Unknown bar type", bar_type=bar_type) from None

    if bar_type == BarType.TIME:
        return TimeBarPolicy(
            interval_minutes=options.interval_minutes,
            multiplier=options.multiplier
        )
    if bar_type == BarType.DOLLAR:
        return DollarBarPolicy(
            dollar_threshold=options.dollar_threshold,
            multiplier=options.multiplier
        )
    raise InvalidConfigError("Unknown bar type", bar_type=bar_type.value)
