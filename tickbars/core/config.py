"""
Configuration - YAML backed settings for sampling runs.

Layout of config/config.yaml:

    paths:
      ticks_dir: ticks
      bars_dir: bars
    bars:
      delimiter: ","
      multiplier: 1.0
      timestamp_index: 1
      last_index: 2
      volume_index: 3
      timestamp_type: iqfeed
      interval_minutes: 15
      dollar_threshold: 7000000
      retention_minutes: 5
    volatility:
      lookback: 20
      smoothing: 2.0
    monitoring:
      log_level: INFO
      log_file: null

Every key is optional. Command-line flags override file values.
"""

from dataclasses import dataclass, field, replace
from datetime import timedelta
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .constants import (
    TimestampType,
    DEFAULT_DELIMITER, DEFAULT_TIMESTAMP_INDEX, DEFAULT_LAST_INDEX,
    DEFAULT_VOLUME_INDEX, DEFAULT_MULTIPLIER, DEFAULT_INTERVAL_MINUTES,
    DEFAULT_DOLLAR_THRESHOLD, DEFAULT_LOOKBACK_DAYS, DEFAULT_SMOOTHING,
    RETENTION_WINDOW,
)
from .exceptions import InvalidConfigError


@dataclass(frozen=True)
class BarOptions:
    """
    Parsing and sampling parameters for a bar run.

    Attributes:
        delimiter: Single-character field separator of tick files
        multiplier: Notional multiplier for instruments whose price is not
            1:1 with traded value
        timestamp_index: Zero-based column of the timestamp
        last_index: Zero-based column of the last trade price
        volume_index: Zero-based column of the trade size
        timestamp_type: Encoding of the timestamp column
        interval_minutes: Time bar interval
        dollar_threshold: Notional that closes a dollar bar
        retention_minutes: Age after which old bar files are swept
    """
    delimiter: str = DEFAULT_DELIMITER
    multiplier: float = DEFAULT_MULTIPLIER
    timestamp_index: int = DEFAULT_TIMESTAMP_INDEX
    last_index: int = DEFAULT_LAST_INDEX
    volume_index: int = DEFAULT_VOLUME_INDEX
    timestamp_type: TimestampType = TimestampType.IQFEED
    interval_minutes: int = DEFAULT_INTERVAL_MINUTES
    dollar_threshold: float = DEFAULT_DOLLAR_THRESHOLD
    retention_minutes: float = RETENTION_WINDOW.total_seconds() / 60

    def __post_init__(self):
        """Validate and normalize option values."""
        if len(self.delimiter) != 1:
            raise InvalidConfigError(
                "Delimiter must be a single character",
                delimiter=repr(self.delimiter)
            )

        for name in ("timestamp_index", "last_index", "volume_index"):
            value = getattr(self, name)
            if not isinstance(value, int) or value < 0:
                raise InvalidConfigError(f"{name} must be a non-negative integer", value=value)

        if not 1 <= self.interval_minutes <= 60:
            raise InvalidConfigError(
                "interval_minutes must be between 1 and 60",
                interval_minutes=self.interval_minutes
            )

        if self.dollar_threshold <= 0:
            raise InvalidConfigError(
                "dollar_threshold must be positive",
                dollar_threshold=self.dollar_threshold
            )

        if self.retention_minutes < 0:
            raise InvalidConfigError(
                "retention_minutes must not be negative",
                retention_minutes=self.retention_minutes
            )

        if not isinstance(self.timestamp_type, TimestampType):
            try:
                object.__setattr__(self, 'timestamp_type', TimestampType(str(self.timestamp_type).lower()))
            except ValueError:
                raise InvalidConfigError(
                    "Unknown timestamp type",
                    timestamp_type=self.timestamp_type
                ) from None

    @property
    def retention_window(self) -> timedelta:
        return timedelta(minutes=self.retention_minutes)

    @property
    def max_index(self) -> int:
        """Highest column a tick row must have."""
        return max(self.timestamp_index, self.last_index, self.volume_index)


@dataclass(frozen=True)
class VolatilityOptions:
    """EWMA daily volatility parameters."""
    lookback: int = DEFAULT_LOOKBACK_DAYS
    smoothing: float = DEFAULT_SMOOTHING

    def __post_init__(self):
        if self.lookback < 1:
            raise InvalidConfigError("lookback must be at least 1", lookback=self.lookback)
        if self.smoothing <= 0:
            raise InvalidConfigError("smoothing must be positive", smoothing=self.smoothing)


@dataclass(frozen=True)
class AppConfig:
    """Complete application configuration."""
    ticks_dir: str = "ticks"
    bars_dir: str = "bars"
    bars: BarOptions = field(default_factory=BarOptions)
    volatility: VolatilityOptions = field(default_factory=VolatilityOptions)
    log_level: str = "INFO"
    log_file: Optional[str] = None

    def with_bar_overrides(self, **overrides: Any) -> "AppConfig":
        """Copy with bar options replaced; None values are ignored."""
        values = {k: v for k, v in overrides.items() if v is not None}
        if not values:
            return self
        return replace(self, bars=replace(self.bars, **values))


def _section(raw: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = raw.get(name) or {}
    if not isinstance(section, dict):
        raise InvalidConfigError(f"Config section '{name}' must be a mapping")
    return section


def load_config(config_file: Optional[str] = None) -> AppConfig:
    """
    Load configuration from a YAML file.

    Args:
        config_file: Path to the YAML file. A missing path or file yields
            the defaults.

    Returns:
        AppConfig instance
    """
    if config_file is None or not Path(config_file).exists():
        return AppConfig()

    with open(config_file, 'r') as f:
        try:
            raw = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise InvalidConfigError("Config file is not valid YAML", path=config_file) from e

    if not isinstance(raw, dict):
        raise InvalidConfigError("Config root must be a mapping", path=config_file)

    paths = _section(raw, 'paths')
    monitoring = _section(raw, 'monitoring')

    try:
        bars = BarOptions(**_section(raw, 'bars'))
        volatility = VolatilityOptions(**_section(raw, 'volatility'))
    except TypeError as e:
        raise InvalidConfigError(str(e), path=config_file) from e

    return AppConfig(
        ticks_dir=paths.get('ticks_dir', 'ticks'),
        bars_dir=paths.get('bars_dir', 'bars'),
        bars=bars,
        volatility=volatility,
        log_level=str(monitoring.get('log_level', 'INFO')).upper(),
        log_file=monitoring.get('log_file'),
    )
