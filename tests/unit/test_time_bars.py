"""
Unit tests for time bar sampling.
"""

import pytest

from tickbars.core.config import BarOptions
from tickbars.core.constants import BarType
from tickbars.core.exceptions import InvalidConfigError
from tickbars.core.types import Tick
from tickbars.data.bar_policy import make_policy
from tickbars.data.dollar_bars import DollarBarPolicy
from tickbars.data.time_bars import TimeBarPolicy
from tickbars.data.timestamps import parse_iqfeed, parse_unix


def _tick(clock: str, price: float = 100.0, volume: float = 10.0, day: str = "2021-01-04") -> Tick:
    token = f"{day} {clock}.000"
    return Tick(raw_timestamp=token, timestamp=parse_iqfeed(token), price=price, volume=volume)


def _emissions(policy: TimeBarPolicy, ticks):
    return [(t, bar) for t in ticks for bar in [policy.ingest(t)] if bar is not None]


def test_emits_on_boundary_minutes_once():
    """Ticks at minutes 5, 12, 15, 16, 30 emit at 15 and 30 only."""
    policy = TimeBarPolicy(interval_minutes=15)
    ticks = [
        _tick("09:05:00", 10),
        _tick("09:12:00", 12),
        _tick("09:15:00", 11),
        _tick("09:16:00", 13),
        _tick("09:30:00", 9),
    ]
    emitted = _emissions(policy, ticks)

    assert [t.timestamp.minute for t, _ in emitted] == [15, 30]

    first, second = emitted[0][1], emitted[1][1]
    assert first.open_time == "2021-01-04 09:00:00"
    assert (first.open, first.high, first.low, first.close) == (10, 12, 10, 11)
    assert first.volume == 30

    assert second.open_time == "2021-01-04 09:15:00"
    assert (second.open, second.high, second.low, second.close) == (13, 13, 9, 9)
    assert second.volume == 20

    # nothing arrived after the 09:30 boundary
    assert policy.flush() is None


def test_same_boundary_minute_fires_once():
    policy = TimeBarPolicy(interval_minutes=15)
    ticks = [
        _tick("09:14:00"),
        _tick("09:15:01"),
        _tick("09:15:30"),
        _tick("09:15:59"),
        _tick("09:30:00"),
    ]
    emitted = _emissions(policy, ticks)

    assert len(emitted) == 2
    assert emitted[0][1].volume == 20
    # the later 09:15 ticks roll into the next bar
    assert emitted[1][1].volume == 30


def test_consecutive_emissions_never_share_a_minute():
    policy = TimeBarPolicy(interval_minutes=5)
    clocks = [f"09:{m:02d}:{s:02d}" for m in range(0, 60) for s in (0, 20, 40)]
    emitted = _emissions(policy, [_tick(c) for c in clocks])

    minutes = [t.timestamp.minute for t, _ in emitted]
    assert len(minutes) == 12
    assert all(a != b for a, b in zip(minutes, minutes[1:]))


def test_first_tick_on_boundary_emits():
    policy = TimeBarPolicy(interval_minutes=15)
    bar = policy.ingest(_tick("10:00:05"))
    assert bar is not None
    assert bar.open_time == "2021-01-04 10:00:00"


def test_open_time_rounds_to_quarter_hour_regardless_of_interval():
    policy = TimeBarPolicy(interval_minutes=5)
    emitted = _emissions(policy, [
        _tick("09:01:00"),
        _tick("09:05:00"),
        _tick("09:06:00"),
        _tick("09:10:00"),
        _tick("09:11:00"),
        _tick("09:15:00"),
    ])
    assert [b.open_time for _, b in emitted] == [
        "2021-01-04 09:00:00",
        "2021-01-04 09:00:00",
        "2021-01-04 09:15:00",
    ]


@pytest.mark.parametrize("opened, expected", [
    ("09:07:29", "2021-01-04 09:00:00"),
    ("09:07:30", "2021-01-04 09:15:00"),
    ("09:52:29", "2021-01-04 09:45:00"),
    ("09:52:30", "2021-01-04 10:00:00"),
    ("23:53:00", "2021-01-05 00:00:00"),
])
def test_open_time_rounding(opened, expected):
    policy = TimeBarPolicy(interval_minutes=15)
    policy.ingest(_tick(opened))
    bar = policy.flush()
    assert bar.open_time == expected


def test_flush_returns_partial_period():
    policy = TimeBarPolicy(interval_minutes=15)
    assert policy.ingest(_tick("09:15:00", volume=5)) is not None
    assert policy.ingest(_tick("09:20:00", price=101, volume=7)) is None

    bar = policy.flush()
    assert bar.volume == 7
    assert bar.close == 101


def test_volume_conservation():
    policy = TimeBarPolicy(interval_minutes=15)
    ticks = [_tick(f"{h:02d}:{m:02d}:00", volume=h + m) for h in (9, 10) for m in range(0, 60, 7)]
    bars = [b for _, b in _emissions(policy, ticks)]
    final = policy.flush()
    if final is not None:
        bars.append(final)
    assert sum(b.volume for b in bars) == sum(t.volume for t in ticks)


def test_zero_price_opens_bar():
    policy = TimeBarPolicy(interval_minutes=15)
    policy.ingest(_tick("09:10:00", price=0.0))
    bar = policy.ingest(_tick("09:15:00", price=3.0))
    assert bar.open == 0.0
    assert bar.low == 0.0


def test_notional_uses_multiplier():
    policy = TimeBarPolicy(interval_minutes=15, multiplier=10)
    bar = policy.ingest(_tick("09:15:00", price=2.0, volume=3.0))
    assert bar.notional == 60.0


@pytest.mark.parametrize("interval", [0, 61, -5])
def test_invalid_interval(interval):
    with pytest.raises(InvalidConfigError):
        TimeBarPolicy(interval_minutes=interval)


def test_make_policy_from_options():
    options = BarOptions(interval_minutes=5, dollar_threshold=250.0, multiplier=2.0)

    time_policy = make_policy(BarType.TIME, options)
    assert isinstance(time_policy, TimeBarPolicy)
    assert time_policy.interval_minutes == 5

    dollar_policy = make_policy("dollar", options)
    assert isinstance(dollar_policy, DollarBarPolicy)
    assert dollar_policy.dollar_threshold == 250.0
    assert dollar_policy.state.multiplier == 2.0


def test_make_policy_unknown_type():
    with pytest.raises(InvalidConfigError):
        make_policy("volume", BarOptions())


def test_unix_ticks_report_new_york_open_time():
    """Epoch ticks at 14:31 and 14:45 UTC open a bar at 09:30 New York."""
    policy = TimeBarPolicy(interval_minutes=15)
    opened = 1609770660  # 2021-01-04 14:31:00 UTC
    for token in (str(opened), str(opened + 14 * 60)):
        bar = policy.ingest(Tick(raw_timestamp=token, timestamp=parse_unix(token), price=1.0, volume=1.0))

    assert bar.open_time == "2021-01-04 09:30:00"
