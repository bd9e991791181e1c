"""Core data types for tickbars.

This module defines the fundamental data structures that flow through the
sampling pipeline using dataclasses:
- float for prices, volumes and notional (ticks arrive as text floats)
- datetime for all parsed timestamps (timezone-aware)
- Raw timestamp tokens kept verbatim alongside the parsed instant
- Validation in __post_init__ where needed
- Emitted bars are frozen
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from .exceptions import InvalidBarError, ProcessingError


# ============================================================================
# Market Data Types
# ============================================================================

@dataclass(frozen=True)
class Tick:
    """
    Single trade print.

    Attributes:
        raw_timestamp: Timestamp token exactly as it appeared in the input row
        timestamp: Parsed, timezone-aware instant
        price: Last trade price
        volume: Trade size
    """
    raw_timestamp: str
    timestamp: datetime
    price: float
    volume: float

    def notional(self, multiplier: float = 1.0) -> float:
        """Traded value: price * volume * multiplier."""
        return self.price * self.volume * multiplier


@dataclass(frozen=True)
class Bar:
    """
    Emitted OHLCV bar.

    Validates OHLC integrity on creation. open_time is already rendered as
    text: a rounded boundary for time bars, the raw open token for dollar
    bars, empty for a degenerate flush.
    """
    open_time: str
    open: float
    high: float
    low: float
    close: float
    volume: float
    notional: float

    def __post_init__(self):
        """Validate bar integrity."""
        # High must be >= max(open, close)
        if self.high < max(self.open, self.close):
            raise InvalidBarError(
                f"Invalid bar: high ({self.high}) < max(open, close)",
                open_time=self.open_time
            )

        # Low must be <= min(open, close)
        if self.low > min(self.open, self.close):
            raise InvalidBarError(
                f"Invalid bar: low ({self.low}) > min(open, close)",
                open_time=self.open_time
            )

    @property
    def is_empty(self) -> bool:
        """True for the degenerate bar flushed from a never-seeded state."""
        return self.open_time == "" and self.volume == 0

    def to_row(self) -> list:
        """Values in output column order."""
        return [
            self.open_time, self.open, self.high, self.low,
            self.close, self.volume, self.notional
        ]


@dataclass(frozen=True)
class IngestionMeta:
    """
    Watermark kept by the tick collector for incremental downloads.

    Only referenced here: input files are expected to be deduplicated
    against it already.
    """
    min_timestamp: datetime
    max_timestamp: datetime

    def admits(self, timestamp: datetime) -> bool:
        """True when a tick at timestamp would be new to the collector."""
        return timestamp > self.max_timestamp


# ============================================================================
# Analytics Types
# ============================================================================

@dataclass(frozen=True)
class VolatilityRow:
    """
    One day rollover of the daily volatility series.

    ewma is None until the lookback bootstrap completes.
    """
    start: datetime
    end: datetime
    ret: float
    ewma: Optional[float] = None


# ============================================================================
# Processing Types
# ============================================================================

@dataclass
class BatchResult:
    """
    Outcome of a multi-symbol run.

    Every symbol is attempted; successes and failures are collected side by
    side.
    """
    outputs: Dict[str, str] = field(default_factory=dict)
    errors: Dict[str, Exception] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def failed_symbols(self) -> List[str]:
        return list(self.errors.keys())

    def raise_for_errors(self) -> None:
        """Raise one ProcessingError carrying every per-symbol failure."""
        if self.errors:
            raise ProcessingError(
                list(self.errors.values()),
                failed=",".join(self.errors.keys())
            )
