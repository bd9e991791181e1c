"""
Bar Engine - Runs tick files through a sampling policy into bar files.

Responsibilities:
1. List a symbol's tick files, oldest first
2. Stream every tick through one policy instance
3. Write emitted bars, then the trailing flush, to a new bar file;
   a failed run leaves no file behind
4. Sweep stale bar files of the symbol
5. Run many symbols, collecting failures instead of stopping
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from ..core.config import BarOptions
from ..core.constants import BarType, BAR_FILE_TIME_FORMAT
from ..core.types import BatchResult
from .bar_policy import BarPolicy, make_policy
from .bar_writer import BarWriter
from .retention import RetentionSweeper
from .storage import BarStorage
from .tick_reader import TickReader
from .timestamps import EXCHANGE_TZ

from ..monitoring.logger import get_logger
logger = get_logger(__name__)


class BarEngine:
    """
    Sequential bar builder for one or many symbols.

    One policy, hence one BarState, lives for a whole run: a bar may start
    in one tick file and finish in the next.
    """

    def __init__(
        self,
        storage: BarStorage,
        options: Optional[BarOptions] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        """
        Initialize bar engine.

        Args:
            storage: Source of tick files and target of bar files
            options: Parsing and sampling options
            clock: Returns the current time (UTC-aware); names output files
                and drives retention
        """
        self.storage = storage
        self.options = options or BarOptions()
        self.clock = clock or (lambda: datetime.now(timezone.utc))

        self.reader = TickReader(self.options)
        self.sweeper = RetentionSweeper(
            storage,
            window=self.options.retention_window,
            clock=self.clock
        )

    def output_name(self, bar_type: BarType) -> str:
        """File name of a new run: <bar_type>-<New York time>.csv"""
        now = self.clock().astimezone(EXCHANGE_TZ)
        return f"{BarType(bar_type).value}-{now.strftime(BAR_FILE_TIME_FORMAT)}.csv"

    def run(self, symbol: str, bar_type: BarType) -> str:
        """
        Build bars for one symbol.

        Args:
            symbol: Symbol whose tick directory is read
            bar_type: Sampling policy

        Returns:
            Path of the bar file written

        Raises:
            TickBarsError: On parse or policy errors
            OSError: On I/O failures
        """
        policy = make_policy(bar_type, self.options)
        tick_files = self.storage.list_tick_files(symbol)
        out_path = None

        try:
            with self.storage.create_bar_file(symbol, self.output_name(policy.bar_type)) as (out_path, stream):
                logger.info(
                    f"Sampling {policy.bar_type.value} bars",
                    symbol=symbol,
                    out_file=out_path,
                    tick_files=len(tick_files)
                )
                writer = BarWriter(stream)
                self._write_bars(policy, tick_files, writer)
        except Exception:
            if out_path is not None:
                self._discard(out_path)
            raise

        self.sweeper.sweep(symbol, keep=out_path)

        logger.info(
            "Finished bars",
            symbol=symbol,
            out_file=out_path,
            ticks=policy.ticks_seen,
            bars=writer.rows_written,
            volume=writer.volume_written
        )
        return out_path

    def _write_bars(self, policy: BarPolicy, tick_files: List[str], writer: BarWriter) -> None:
        """Stream every tick file through policy, then flush."""
        for tick_path in tick_files:
            with self.storage.open_ticks(tick_path) as tick_stream:
                for tick in self.reader.read(tick_stream, source=tick_path):
                    bar = policy.ingest(tick)
                    if bar is not None:
                        writer.write(bar)
            logger.debug("Finished tick file", path=tick_path, ticks=policy.ticks_seen)

        final = policy.flush()
        if final is not None:
            writer.write(final)

    def _discard(self, out_path: str) -> None:
        """Remove the partial output of a failed run."""
        try:
            self.storage.delete(out_path)
        except OSError as e:
            logger.error("Couldn't remove partial bar file", path=out_path, error=str(e))

    def run_batch(self, symbols: Iterable[str], bar_type: BarType) -> BatchResult:
        """
        Build bars for many symbols, one after another.

        A failing symbol is logged and recorded; the rest still run.

        Returns:
            BatchResult with the output path or the error of every symbol
        """
        result = BatchResult()

        for symbol in symbols:
            try:
                result.outputs[symbol] = self.run(symbol, bar_type)
            except Exception as e:
                logger.error("Failed to build bars", symbol=symbol, error=str(e))
                result.errors[symbol] = e

        logger.info(
            "Finished batch",
            succeeded=len(result.outputs),
            failed=len(result.errors)
        )
        return result


def read_symbols(path: str) -> List[str]:
    """
    Symbols listed one per line, in file order.

    Blank lines are ignored and repeats dropped: two runs of one symbol in
    the same clock second would name the same output file.
    """
    lines = Path(path).read_text().splitlines()
    symbols = [line.strip() for line in lines if line.strip()]
    return list(dict.fromkeys(symbols))
