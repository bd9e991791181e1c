"""
tickbars - Tick-to-bar sampling and daily volatility.

Turns ordered trade ticks into OHLCV time bars or dollar bars and
derives an EWMA daily volatility series from finished bar files.
"""

__version__ = "0.1.0"
