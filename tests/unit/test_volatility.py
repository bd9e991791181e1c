"""
Unit tests for EWMA daily volatility.

Tests use synthetic bar series with known expected results.
"""

from datetime import datetime, timedelta, timezone

import numpy as np
import pandas as pd
import pytest

from tickbars.core.constants import TimestampType
from tickbars.core.exceptions import InvalidConfigError
from tickbars.indicators.volatility import (
    DailyVolatilityEstimator, daily_volatility, read_bar_file
)


START = datetime(2021, 1, 4, 16, 0, tzinfo=timezone.utc)
STEP = timedelta(days=1, hours=1)


def _daily_bars(n: int, seed: int = 3):
    """n bars spaced a bit more than a day apart with random closes."""
    rng = np.random.default_rng(seed)
    closes = 100.0 * np.cumprod(1 + rng.normal(0, 0.01, n))
    return [(START + i * STEP, float(c)) for i, c in enumerate(closes)]


def _returns(bars):
    return [bars[i][1] / bars[i - 1][1] - 1 for i in range(1, len(bars))]


def test_bootstrap_seeds_with_mean():
    """Day 21 reports the mean of the 20 returns."""
    bars = _daily_bars(21)
    rows = DailyVolatilityEstimator(lookback=20).estimate(bars)

    assert len(rows) == 20
    assert all(r.ewma is None for r in rows[:19])
    assert rows[19].ewma == pytest.approx(np.mean(_returns(bars)))


def test_ewma_update_after_seed():
    bars = _daily_bars(23)
    rows = DailyVolatilityEstimator(lookback=20, smoothing=2.0).estimate(bars)
    rets = _returns(bars)
    alpha = 2.0 / 21.0

    seed = np.mean(rets[:20])
    day22 = rets[20] * alpha + seed * (1 - alpha)
    day23 = rets[21] * alpha + day22 * (1 - alpha)

    assert rows[20].ewma == pytest.approx(day22)
    assert rows[21].ewma == pytest.approx(day23)


def test_rows_carry_anchor_window_and_return():
    bars = _daily_bars(3)
    rows = DailyVolatilityEstimator(lookback=5).estimate(bars)

    assert rows[0].start == bars[0][0]
    assert rows[0].end == bars[1][0]
    assert rows[1].start == bars[1][0]
    assert rows[0].ret == pytest.approx(bars[1][1] / bars[0][1] - 1)


def test_intraday_bars_do_not_roll():
    est = DailyVolatilityEstimator(lookback=2)
    assert est.update(START, 100.0) is None
    assert est.update(START + timedelta(hours=3), 101.0) is None
    assert est.update(START + timedelta(hours=23), 102.0) is None
    assert est.n_days == 1


def test_exactly_one_day_does_not_roll():
    est = DailyVolatilityEstimator(lookback=2)
    est.update(START, 100.0)
    assert est.update(START + timedelta(days=1), 101.0) is None
    assert est.update(START + timedelta(days=1, seconds=1), 101.0) is not None


def test_anchor_moves_only_on_rollover():
    """Returns compare against the bar that opened the previous day."""
    est = DailyVolatilityEstimator(lookback=2)
    est.update(START, 100.0)
    est.update(START + timedelta(hours=12), 150.0)
    row = est.update(START + timedelta(hours=25), 110.0)
    assert row.ret == pytest.approx(0.10)


def test_frame_marks_undefined_as_nan():
    rows = DailyVolatilityEstimator(lookback=3).estimate(_daily_bars(6))
    frame = DailyVolatilityEstimator.to_frame(rows)

    assert list(frame.columns) == ["start_date_time", "end_date_time", "return", "ewma"]
    assert frame["ewma"].iloc[:2].isna().all()
    assert frame["ewma"].iloc[2:].notna().all()
    assert not (frame["ewma"].iloc[:2] == 0).any()


def test_invalid_lookback():
    with pytest.raises(InvalidConfigError):
        DailyVolatilityEstimator(lookback=0)


# ── Bar file input ───────────────────────────────────────────────────


@pytest.fixture
def dollar_bar_file(tmp_path):
    """Dollar bar file with IQFeed open times and an empty trailing flush."""
    lines = ["date_time,open,high,low,close,volume,cum_dollars"]
    day = datetime(2021, 1, 4, 9, 30)
    for i in range(6):
        stamp = (day + i * STEP).strftime("%Y-%m-%d %H:%M:%S.000")
        close = 100 + i
        lines.append(f"{stamp},{close},{close},{close},{close},10.0,{close * 10}.0")
    lines.append(",0.0,0.0,0.0,0.0,0.0,0.0")
    path = tmp_path / "dollar-2021-01-11-10-00-00.csv"
    path.write_text("\n".join(lines) + "\n")
    return path


def test_read_bar_file_skips_empty_flush(dollar_bar_file):
    bars = read_bar_file(dollar_bar_file)
    assert len(bars) == 6
    assert bars["close"].tolist() == [100.0, 101.0, 102.0, 103.0, 104.0, 105.0]


def test_daily_volatility_from_file(dollar_bar_file):
    frame = daily_volatility(dollar_bar_file, lookback=3)

    assert len(frame) == 5
    assert frame["return"].iloc[0] == pytest.approx(0.01)
    assert pd.isna(frame["ewma"].iloc[1])
    assert frame["ewma"].iloc[2] == pytest.approx(np.mean([1 / 100, 1 / 101, 1 / 102]))


def test_time_bar_file_read_as_wall_clock_for_unix_ticks(tmp_path):
    path = tmp_path / "time-2021-01-07-10-00-00.csv"
    path.write_text(
        "date_time,open,high,low,close,volume,cum_dollars\n"
        "2021-01-04 09:30:00,1,1,1,100.0,1,1\n"
        "2021-01-05 10:30:00,1,1,1,101.0,1,1\n"
    )

    bars = read_bar_file(path, timestamp_type=TimestampType.UNIX)

    assert [t.hour for t in bars["timestamp"]] == [9, 10]
    assert str(bars["timestamp"].iloc[0].tzinfo) == "America/New_York"


def test_dollar_bar_file_uses_tick_encoding(tmp_path):
    path = tmp_path / "dollar-2021-01-07-10-00-00.csv"
    path.write_text(
        "date_time,open,high,low,close,volume,cum_dollars\n"
        "1609770600,1,1,1,100.0,1,1\n"
    )

    bars = read_bar_file(path, timestamp_type=TimestampType.UNIX)

    assert bars["timestamp"].iloc[0] == datetime(2021, 1, 4, 14, 30, tzinfo=timezone.utc)
