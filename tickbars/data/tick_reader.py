"""
Tick Reader - Streams ticks out of delimited text files.

Files carry a header row. Columns are picked by zero-based position so
vendor layouts with extra fields work without renaming anything.
"""

from typing import Iterator, TextIO

import pandas as pd

from ..core.config import BarOptions
from ..core.exceptions import TickParseError
from ..core.types import Tick
from ..core.constants import TICK_CHUNK_SIZE
from .timestamps import parse_timestamp


class TickReader:
    """
    Parses tick rows into Tick objects.

    Reads with pandas in chunks, every column as text, so the raw timestamp
    token reaches the dollar bar duplicate guard exactly as written.
    """

    def __init__(self, options: BarOptions, chunk_size: int = TICK_CHUNK_SIZE):
        self.options = options
        self.chunk_size = chunk_size

    def read(self, stream: TextIO, source: str = "<stream>") -> Iterator[Tick]:
        """
        Yield ticks from a text stream in file order.

        Args:
            stream: Open text stream positioned at the header row
            source: Name used in error context

        Raises:
            TickParseError: On a malformed field or a short row
        """
        try:
            chunks = pd.read_csv(
                stream,
                sep=self.options.delimiter,
                dtype=str,
                keep_default_na=False,
                header=0,
                index_col=False,
                chunksize=self.chunk_size,
            )
        except pd.errors.EmptyDataError:
            return

        row_number = 1
        try:
            for chunk in chunks:
                if chunk.shape[1] <= self.options.max_index:
                    raise TickParseError(
                        "Tick file has fewer columns than configured",
                        source=source,
                        columns=chunk.shape[1],
                        required=self.options.max_index + 1
                    )

                timestamps = chunk.iloc[:, self.options.timestamp_index]
                prices = chunk.iloc[:, self.options.last_index]
                volumes = chunk.iloc[:, self.options.volume_index]

                for raw_ts, raw_price, raw_volume in zip(timestamps, prices, volumes):
                    row_number += 1
                    yield self._parse_row(raw_ts, raw_price, raw_volume, source, row_number)
        except pd.errors.ParserError as e:
            raise TickParseError(str(e), source=source) from e

    def _parse_row(
        self,
        raw_ts: str,
        raw_price: str,
        raw_volume: str,
        source: str,
        row_number: int
    ) -> Tick:
        # pandas fills short rows with NaN even when reading as text
        if not all(isinstance(v, str) for v in (raw_ts, raw_price, raw_volume)):
            raise TickParseError("Tick row is missing fields", source=source, row=row_number)

        try:
            price = float(raw_price)
            volume = float(raw_volume)
        except ValueError:
            raise TickParseError(
                "Malformed numeric field",
                source=source,
                row=row_number,
                price=repr(raw_price),
                volume=repr(raw_volume)
            ) from None

        try:
            timestamp = parse_timestamp(raw_ts, self.options.timestamp_type)
        except TickParseError as e:
            e.context.update(source=source, row=row_number)
            raise

        return Tick(raw_timestamp=raw_ts, timestamp=timestamp, price=price, volume=volume)
