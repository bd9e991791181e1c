"""
Retention - Removes bar files left behind by earlier runs.
"""

from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

from ..core.constants import RETENTION_WINDOW
from ..core.exceptions import RetentionError
from .storage import BarStorage


class RetentionSweeper:
    """
    Deletes a symbol's bar files older than the retention window.

    The file just written is always kept. A file whose modification time
    cannot be read is logged and skipped; a file that cannot be deleted
    fails the sweep.

    Not safe against a second run sweeping the same symbol concurrently.
    """

    def __init__(
        self,
        storage: BarStorage,
        window: timedelta = RETENTION_WINDOW,
        clock: Optional[Callable[[], datetime]] = None
    ):
        """
        Initialize retention sweeper.

        Args:
            storage: Storage holding the bar files
            window: Maximum age of files that survive a sweep
            clock: Returns the current time (UTC-aware)
        """
        self.storage = storage
        self.window = window
        self.clock = clock or (lambda: datetime.now(timezone.utc))

        from ..monitoring.logger import get_logger
        self.logger = get_logger(__name__)

    def sweep(self, symbol: str, keep: str) -> List[str]:
        """
        Delete stale bar files of symbol.

        Args:
            symbol: Symbol whose bar directory is swept
            keep: Path of the file written by the current run

        Returns:
            Paths that were deleted

        Raises:
            RetentionError: If a stale file cannot be deleted
        """
        now = self.clock()
        deleted = []

        for path in self.storage.list_bar_files(symbol):
            if path == keep:
                continue

            try:
                modified = self.storage.modified_at(path)
            except OSError as e:
                self.logger.warning("Couldn't read bar file metadata, skipping", path=path, error=str(e))
                continue

            if now - modified <= self.window:
                continue

            try:
                self.storage.delete(path)
            except OSError as e:
                raise RetentionError("Couldn't delete stale bar file", path=path, symbol=symbol) from e

            deleted.append(path)
            self.logger.debug("Deleted stale bar file", path=path, age=str(now - modified))

        if deleted:
            self.logger.info("Swept old bar files", symbol=symbol, deleted=len(deleted))
        return deleted
