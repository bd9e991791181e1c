"""
Daily Volatility - EWMA of day-over-day returns from a bar file.

A new day starts when a bar is more than 24 hours after the current day
anchor; weekends and holidays are not special-cased.

    ret_d  = close_d / close_{d-1} - 1
    seed   = mean(ret) over the first `lookback` returns
    ewma_d = ret_d * (s / (1 + L)) + ewma_{d-1} * (1 - s / (1 + L))

with L = lookback and s = smoothing.
"""

from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

import numpy as np
import pandas as pd

from ..core.constants import (
    BarType, TimestampType, DAY_LENGTH, DEFAULT_LOOKBACK_DAYS, DEFAULT_SMOOTHING,
    VOLATILITY_COLUMNS,
)
from ..core.exceptions import InvalidConfigError, TickParseError
from ..core.types import VolatilityRow
from ..data.timestamps import parse_timestamp


class DailyVolatilityEstimator:
    """
    Streaming EWMA daily volatility.

    Day 1 is the first bar. Each rollover yields a row; its ewma stays None
    until day lookback + 1, where it is seeded with the plain mean of the
    `lookback` returns seen so far.
    """

    def __init__(self, lookback: int = DEFAULT_LOOKBACK_DAYS, smoothing: float = DEFAULT_SMOOTHING):
        if lookback < 1:
            raise InvalidConfigError("lookback must be at least 1", lookback=lookback)
        self.lookback = lookback
        self.smoothing = smoothing
        self.alpha = smoothing / (1.0 + lookback)

        self.n_days = 0
        self.anchor_time: Optional[datetime] = None
        self.anchor_close: Optional[float] = None
        self.running_sum = 0.0
        self.ewma: Optional[float] = None

    def update(self, bar_time: datetime, close: float) -> Optional[VolatilityRow]:
        """
        Feed the next bar.

        Returns:
            A VolatilityRow when this bar starts a new day, else None
        """
        if self.anchor_time is None:
            self.n_days = 1
            self.anchor_time = bar_time
            self.anchor_close = close
            return None

        if bar_time - self.anchor_time <= DAY_LENGTH:
            return None

        self.n_days += 1
        ret = close / self.anchor_close - 1.0

        if self.n_days <= self.lookback:
            self.running_sum += ret
        elif self.n_days == self.lookback + 1:
            # simple mean bootstraps the average
            self.running_sum += ret
            self.ewma = self.running_sum / self.lookback
        else:
            self.ewma = ret * self.alpha + self.ewma * (1.0 - self.alpha)

        row = VolatilityRow(start=self.anchor_time, end=bar_time, ret=ret, ewma=self.ewma)
        self.anchor_time = bar_time
        self.anchor_close = close
        return row

    def estimate(self, bars: Iterable[Tuple[datetime, float]]) -> List[VolatilityRow]:
        """Run (timestamp, close) pairs through update() and keep the rows."""
        rows = []
        for bar_time, close in bars:
            row = self.update(bar_time, close)
            if row is not None:
                rows.append(row)
        return rows

    @staticmethod
    def to_frame(rows: List[VolatilityRow]) -> pd.DataFrame:
        """Rows as a DataFrame; undefined ewma becomes NaN."""
        return pd.DataFrame(
            [
                [r.start, r.end, r.ret, np.nan if r.ewma is None else r.ewma]
                for r in rows
            ],
            columns=VOLATILITY_COLUMNS
        )


def bar_time_encoding(path, timestamp_type: TimestampType) -> TimestampType:
    """
    Encoding of a bar file's date_time column.

    Time bar files (named time-...) always hold New York wall-clock text;
    dollar bar files hold the raw tick tokens.
    """
    if Path(path).name.startswith(f"{BarType.TIME.value}-"):
        return TimestampType.IQFEED
    return TimestampType(timestamp_type)


def read_bar_file(path, timestamp_type: TimestampType = TimestampType.IQFEED) -> pd.DataFrame:
    """
    Load a bar file for volatility estimation.

    Rows with a blank date_time (the empty trailing flush of a dollar bar
    run) are dropped. timestamp_type is the tick encoding and only applies
    to dollar bar files.

    Returns:
        DataFrame with columns: timestamp, close
    """
    df = pd.read_csv(path, dtype={'date_time': str}, keep_default_na=False)
    if 'date_time' not in df.columns or 'close' not in df.columns:
        raise TickParseError("Bar file is missing date_time or close", path=str(path))

    df = df[df['date_time'].str.strip() != '']
    encoding = bar_time_encoding(path, timestamp_type)
    timestamps = [parse_timestamp(token, encoding) for token in df['date_time']]
    try:
        closes = df['close'].astype(float).tolist()
    except ValueError as e:
        raise TickParseError("Malformed close price", path=str(path)) from e
    return pd.DataFrame({'timestamp': timestamps, 'close': closes})


def daily_volatility(
    path,
    lookback: int = DEFAULT_LOOKBACK_DAYS,
    smoothing: float = DEFAULT_SMOOTHING,
    timestamp_type: TimestampType = TimestampType.IQFEED
) -> pd.DataFrame:
    """
    EWMA daily volatility series of a bar file.

    Returns:
        DataFrame with columns: start_date_time, end_date_time, return, ewma
    """
    bars = read_bar_file(path, timestamp_type=timestamp_type)
    estimator = DailyVolatilityEstimator(lookback=lookback, smoothing=smoothing)
    rows = estimator.estimate(zip(bars['timestamp'], bars['close']))
    return estimator.to_frame(rows)
