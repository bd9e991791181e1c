"""
Analytics computed from finished bar files.

Modules:
- volatility: EWMA daily volatility with a simple-mean bootstrap
"""

from .volatility import DailyVolatilityEstimator, daily_volatility, read_bar_file
