"""
Data Layer - Tick ingestion and bar construction.

This module provides the bar sampling pipeline:
- Streaming tick parsing from delimited text
- Time and dollar bar policies over a shared OHLCV accumulator
- Append-only bar files and retention of old outputs
- Single and multi-symbol runs

Main Components:
    BarEngine: Orchestrates runs over a storage backend
    TimeBarPolicy: Fixed minute-boundary sampling
    DollarBarPolicy: Cumulative notional sampling
    BarState: Shared OHLCV accumulator
    TickReader: Delimited text to Tick objects
    RetentionSweeper: Deletes stale bar files
"""

from .bar_state import BarState
from .bar_policy import BarPolicy, make_policy
from .time_bars import TimeBarPolicy
from .dollar_bars import DollarBarPolicy
from .tick_reader import TickReader
from .bar_writer import BarWriter
from .storage import BarStorage, LocalFileStorage, MemoryStorage
from .retention import RetentionSweeper
from .bar_engine import BarEngine, read_symbols

__all__ = [
    "BarState",
    "BarPolicy",
    "make_policy",
    "TimeBarPolicy",
    "DollarBarPolicy",
    "TickReader",
    "BarWriter",
    "BarStorage",
    "LocalFileStorage",
    "MemoryStorage",
    "RetentionSweeper",
    "BarEngine",
    "read_symbols",
]
