"""Exception hierarchy for tickbars.

This module defines all custom exceptions used throughout the bar sampling
pipeline. All exceptions inherit from TickBarsError for easy catching and
handling.
"""

from typing import Any, Dict, List


class TickBarsError(Exception):
    """Base exception for all tickbars errors.

    All custom exceptions inherit from this class, allowing callers to catch
    any sampling related error in one place.
    """

    def __init__(self, message: str, **context: Any):
        """Initialize the exception with a message and optional context.

        Args:
            message: Error message describing what went wrong
            **context: Additional context information for logging and debugging
        """
        super().__init__(message)
        self.context: Dict[str, Any] = context

    def __str__(self) -> str:
        """Return string representation including context."""
        if self.context:
            ctx = ', '.join(f'{k}={v}' for k, v in self.context.items())
            return f"{super().__str__()} [{ctx}]"
        return super().__str__()


# ============================================================================
# Configuration Exceptions
# ============================================================================

class InvalidConfigError(TickBarsError):
    """Raised when configuration contains invalid values.

    Examples are a multi-character delimiter, a negative column index, a
    non-positive interval or an unknown timestamp type.
    """


# ============================================================================
# Data Exceptions
# ============================================================================

class TickParseError(TickBarsError):
    """Raised when a tick row cannot be parsed.

    A malformed timestamp or numeric field, or a row missing a configured
    column. Fatal to the file being read; rows are never skipped.
    """


class InvalidBarError(TickBarsError):
    """Raised when a bar violates low <= open, close <= high."""


class BarStateError(TickBarsError):
    """Raised when the bar accumulator is driven out of order.

    Absorbing a tick before the state was seeded, or ingesting a tick after
    the final flush.
    """


# ============================================================================
# Processing Exceptions
# ============================================================================

class RetentionError(TickBarsError):
    """Raised when a stale bar file cannot be deleted."""


class ProcessingError(TickBarsError):
    """Aggregates every failure of a batch run into one error.

    The batch keeps going after a symbol fails; once it is over, all the
    underlying causes are raised together.
    """

    def __init__(self, errors: List[Exception], **context: Any):
        self.errors: List[Exception] = list(errors)
        message = f"{len(self.errors)} error(s) during processing: " + "; ".join(
            f"{type(e).__name__}: {e}" for e in self.errors
        )
        super().__init__(message, **context)
