"""
Bar Writer - Append-only CSV sink for emitted bars.
"""

import csv
from typing import TextIO

from ..core.constants import BAR_COLUMNS
from ..core.types import Bar


class BarWriter:
    """
    Writes bars as rows of date_time,open,high,low,close,volume,cum_dollars.

    The header goes out on creation; rows are only ever appended.
    """

    def __init__(self, stream: TextIO):
        """
        Initialize bar writer.

        Args:
            stream: Writable text stream opened with newline=''
        """
        self.stream = stream
        self._writer = csv.writer(stream, lineterminator='\n')
        self._writer.writerow(BAR_COLUMNS)
        self.rows_written = 0
        self.volume_written = 0.0

    def write(self, bar: Bar) -> None:
        """Append one bar."""
        self._writer.writerow(bar.to_row())
        self.rows_written += 1
        self.volume_written += bar.volume
