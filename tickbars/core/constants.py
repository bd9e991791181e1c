"""System-wide constants and enumerations for bar sampling.

This module defines the enumerations, file layout values and default
parameters used throughout tickbars. These values provide sensible defaults
and standardize string values across the codebase.
"""

from datetime import timedelta
from enum import Enum


# ============================================================================
# Enumerations
# ============================================================================

class BarType(str, Enum):
    """Enumeration of bar sampling policies.

    - TIME: Close a bar at fixed wall-clock minute boundaries
    - DOLLAR: Close a bar once cumulative traded notional crosses a threshold
    """
    TIME = "time"
    DOLLAR = "dollar"


class TimestampType(str, Enum):
    """Enumeration of raw tick timestamp encodings.

    - IQFEED: "YYYY-MM-DD HH:MM:SS.fff" in exchange local time (New York)
    - UNIX: Seconds since the epoch, UTC
    """
    IQFEED = "iqfeed"
    UNIX = "unix"


class BarPhase(str, Enum):
    """Lifecycle of a bar accumulator.

    - NOT_STARTED: No tick absorbed since creation or the last reset
    - OPEN: Seeded with an open price and accumulating
    - FLUSHED: Final state written at end of input, no further ticks accepted
    """
    NOT_STARTED = "NOT_STARTED"
    OPEN = "OPEN"
    FLUSHED = "FLUSHED"


# ============================================================================
# File Layout
# ============================================================================

BAR_COLUMNS = ["date_time", "open", "high", "low", "close", "volume", "cum_dollars"]
"""Output schema of every bar file, in row order."""

VOLATILITY_COLUMNS = ["start_date_time", "end_date_time", "return", "ewma"]

TICK_FILE_SUFFIX: str = ".csv"

BAR_FILE_TIME_FORMAT: str = "%Y-%m-%d-%H-%M-%S"
"""strftime pattern used after the bar type prefix in output file names."""

BAR_TIME_FORMAT: str = "%Y-%m-%d %H:%M:%S"
"""Format of the reported open time of a time bar."""

EXCHANGE_TIMEZONE: str = "America/New_York"

UNDEFINED_MARKER: str = "NaN"


# ============================================================================
# Sampling Defaults
# ============================================================================

DEFAULT_DELIMITER: str = ","
DEFAULT_TIMESTAMP_INDEX: int = 1
DEFAULT_LAST_INDEX: int = 2
DEFAULT_VOLUME_INDEX: int = 3
DEFAULT_MULTIPLIER: float = 1.0

DEFAULT_INTERVAL_MINUTES: int = 15

ROUNDING_MINUTES: int = 15
"""Granularity of the reported time-bar open time.

Applied regardless of the configured interval, so a 5 minute bar is still
reported on a 15 minute grid.
"""

DEFAULT_DOLLAR_THRESHOLD: float = 7_000_000.0

RETENTION_WINDOW: timedelta = timedelta(minutes=5)
"""Output files last modified longer ago than this are swept after a run."""

TICK_CHUNK_SIZE: int = 50_000


# ============================================================================
# Volatility Defaults
# ============================================================================

DEFAULT_LOOKBACK_DAYS: int = 20
DEFAULT_SMOOTHING: float = 2.0

DAY_LENGTH: timedelta = timedelta(days=1)
"""Gap between bars that starts a new volatility day. Not calendar aware."""
