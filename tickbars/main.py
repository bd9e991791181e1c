"""
tickbars command line - Bar sampling and daily volatility.

Commands:
    tickbars bars <time|dollar> <symbol | symbols.txt> [options]
        Build bars from ticks/<symbol>/*.csv into bars/<symbol>/.
        A symbol argument ending in .txt is read as a list of symbols;
        every symbol is attempted and all failures are reported together.

    tickbars vol <bar_file>
        Print the EWMA daily volatility series of a bar file as CSV.

Exit codes: 0 on success, 1 on any failure.
"""

import argparse
import sys
import time
from typing import List, Optional

from .core.config import AppConfig, load_config
from .core.constants import BarType, TimestampType, UNDEFINED_MARKER
from .core.exceptions import ProcessingError, TickBarsError
from .data.bar_engine import BarEngine, read_symbols
from .data.storage import LocalFileStorage
from .indicators.volatility import daily_volatility
from .monitoring.logger import get_logger, setup_logger

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tickbars", description="Time series data processing tool")
    parser.add_argument('--config', default='config/config.yaml', help='Configuration file path')
    parser.add_argument('--debug', action='store_true', help='Verbose logging')

    sub = parser.add_subparsers(dest='command')

    p_bars = sub.add_parser('bars', help='Build bars from ticks')
    p_bars.add_argument('bar_type', choices=[t.value for t in BarType])
    p_bars.add_argument('symbol', help='Symbol, or a .txt file with one symbol per line')
    p_bars.add_argument('--multiply', type=float, dest='multiplier', help='Notional multiplier')
    p_bars.add_argument('--delimiter', help='Tick file field delimiter')
    p_bars.add_argument('--timestamp_index', type=int, help='Zero-based timestamp column')
    p_bars.add_argument('--last_index', type=int, help='Zero-based last price column')
    p_bars.add_argument('--volume_index', type=int, help='Zero-based volume column')
    p_bars.add_argument('--timestamp_type', choices=[t.value for t in TimestampType])
    p_bars.add_argument('--interval', type=int, dest='interval_minutes', help='Time bar interval in minutes')
    p_bars.add_argument('--dollar_threshold', type=float, help='Notional per dollar bar')
    p_bars.set_defaults(func=run_bars)

    p_vol = sub.add_parser('vol', help='Daily volatility from a bar file')
    p_vol.add_argument('input_file')
    p_vol.add_argument('--timestamp_type', choices=[t.value for t in TimestampType])
    p_vol.set_defaults(func=run_vol)

    return parser


def run_bars(args: argparse.Namespace, config: AppConfig) -> None:
    """Build bars for one symbol or a symbols file."""
    config = config.with_bar_overrides(
        multiplier=args.multiplier,
        delimiter=args.delimiter,
        timestamp_index=args.timestamp_index,
        last_index=args.last_index,
        volume_index=args.volume_index,
        timestamp_type=args.timestamp_type,
        interval_minutes=args.interval_minutes,
        dollar_threshold=args.dollar_threshold,
    )
    engine = BarEngine(
        LocalFileStorage(ticks_dir=config.ticks_dir, bars_dir=config.bars_dir),
        options=config.bars
    )
    bar_type = BarType(args.bar_type)

    if args.symbol.endswith('.txt'):
        result = engine.run_batch(read_symbols(args.symbol), bar_type)
        result.raise_for_errors()
    else:
        try:
            engine.run(args.symbol, bar_type)
        except Exception as e:
            raise ProcessingError([e], symbol=args.symbol) from e


def run_vol(args: argparse.Namespace, config: AppConfig) -> None:
    """Print the volatility series of a bar file to stdout."""
    timestamp_type = TimestampType(args.timestamp_type or config.bars.timestamp_type)
    try:
        frame = daily_volatility(
            args.input_file,
            lookback=config.volatility.lookback,
            smoothing=config.volatility.smoothing,
            timestamp_type=timestamp_type
        )
    except Exception as e:
        raise ProcessingError([e], input_file=args.input_file) from e
    frame.to_csv(sys.stdout, index=False, na_rep=UNDEFINED_MARKER)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    start = time.monotonic()
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        config = load_config(args.config)
    except TickBarsError as e:
        setup_logger(level="INFO")
        logger.error("Invalid configuration", error=str(e))
        return 1

    # vol writes its CSV to stdout
    setup_logger(
        level="DEBUG" if args.debug else config.log_level,
        log_file=config.log_file,
        stream=sys.stderr if args.command == 'vol' else None
    )

    try:
        args.func(args, config)
    except ProcessingError as e:
        for cause in e.errors:
            logger.error("Something went wrong", error=f"{type(cause).__name__}: {cause}")
        return 1
    except (TickBarsError, OSError) as e:
        logger.error("Something went wrong", error=str(e))
        return 1

    logger.info("Finished all", seconds=round(time.monotonic() - start, 3))
    return 0


if __name__ == "__main__":
    sys.exit(main())
