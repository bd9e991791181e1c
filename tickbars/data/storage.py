"""
Storage - File system access for tick inputs and bar outputs.

Every directory listing, read, write and delete the engine performs goes
through a BarStorage, so runs can be driven from memory in tests.

Layout on disk:
    <ticks_dir>/<symbol>/*.csv        tick files, read oldest first
    <bars_dir>/<symbol>/<name>.csv    bar files, one per run
"""

import io
import os
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterator, List, Optional, TextIO, Tuple

from ..core.constants import TICK_FILE_SUFFIX


class BarStorage(ABC):
    """Abstract access to tick and bar files of each symbol."""

    @abstractmethod
    def list_tick_files(self, symbol: str) -> List[str]:
        """Tick files of symbol in ascending creation order."""
        pass

    @abstractmethod
    def open_ticks(self, path: str) -> TextIO:
        """Open a tick file for reading."""
        pass

    @abstractmethod
    def create_bar_file(self, symbol: str, name: str):
        """
        Context manager creating a new bar file.

        Yields:
            (path, writable text stream)
        """
        pass

    @abstractmethod
    def list_bar_files(self, symbol: str) -> List[str]:
        """Every file in the symbol's bar directory."""
        pass

    @abstractmethod
    def modified_at(self, path: str) -> datetime:
        """Last modification time (UTC). Raises OSError if unavailable."""
        pass

    @abstractmethod
    def delete(self, path: str) -> None:
        """Remove a bar file. Raises OSError on failure."""
        pass


class LocalFileStorage(BarStorage):
    """
    Storage on the local file system.

    Tick files are ordered by birth time where the platform records it,
    otherwise by inode change time.
    """

    def __init__(self, ticks_dir: str = "ticks", bars_dir: str = "bars"):
        """
        Initialize local storage.

        Args:
            ticks_dir: Root directory of per-symbol tick directories
            bars_dir: Root directory of per-symbol bar directories
        """
        self.ticks_dir = Path(ticks_dir)
        self.bars_dir = Path(bars_dir)

    def tick_dir(self, symbol: str) -> Path:
        return self.ticks_dir / symbol

    def bar_dir(self, symbol: str) -> Path:
        return self.bars_dir / symbol

    @staticmethod
    def _created_at(path: Path) -> float:
        stat = path.stat()
        return getattr(stat, 'st_birthtime', stat.st_ctime)

    def list_tick_files(self, symbol: str) -> List[str]:
        files = [
            p for p in self.tick_dir(symbol).iterdir()
            if p.is_file() and p.name.endswith(TICK_FILE_SUFFIX)
        ]
        files.sort(key=lambda p: (self._created_at(p), p.name))
        return [str(p) for p in files]

    def open_ticks(self, path: str) -> TextIO:
        return open(path, 'r', newline='')

    @contextmanager
    def create_bar_file(self, symbol: str, name: str) -> Iterator[Tuple[str, TextIO]]:
        out_dir = self.bar_dir(symbol)
        out_dir.mkdir(parents=True, exist_ok=True)
        out_path = out_dir / name
        with open(out_path, 'x', newline='') as f:
            yield str(out_path), f

    def list_bar_files(self, symbol: str) -> List[str]:
        out_dir = self.bar_dir(symbol)
        if not out_dir.exists():
            return []
        return sorted(str(p) for p in out_dir.iterdir())

    def modified_at(self, path: str) -> datetime:
        return datetime.fromtimestamp(os.stat(path).st_mtime, tz=timezone.utc)

    def delete(self, path: str) -> None:
        os.remove(path)


class MemoryStorage(BarStorage):
    """
    In-memory storage with explicit file times.

    Tick files keep insertion order as creation order. Bar files get their
    modification time from `clock` when written, or from add_bar_file().
    """

    def __init__(self, clock=None):
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.tick_files: Dict[str, Dict[str, str]] = {}
        self.bar_files: Dict[str, Dict[str, str]] = {}
        self.mtimes: Dict[str, datetime] = {}

    def add_tick_file(self, symbol: str, name: str, content: str) -> str:
        path = f"ticks/{symbol}/{name}"
        self.tick_files.setdefault(symbol, {})[path] = content
        return path

    def add_bar_file(self, symbol: str, name: str, content: str = "",
                     modified_at: Optional[datetime] = None) -> str:
        path = f"bars/{symbol}/{name}"
        self.bar_files.setdefault(symbol, {})[path] = content
        self.mtimes[path] = modified_at or self.clock()
        return path

    def read_bar_file(self, path: str) -> str:
        symbol = path.split('/')[1]
        return self.bar_files[symbol][path]

    def list_tick_files(self, symbol: str) -> List[str]:
        if symbol not in self.tick_files:
            raise FileNotFoundError(f"No tick directory for {symbol}")
        return list(self.tick_files[symbol])

    def open_ticks(self, path: str) -> TextIO:
        symbol = path.split('/')[1]
        try:
            return io.StringIO(self.tick_files[symbol][path])
        except KeyError:
            raise FileNotFoundError(path) from None

    @contextmanager
    def create_bar_file(self, symbol: str, name: str) -> Iterator[Tuple[str, TextIO]]:
        path = f"bars/{symbol}/{name}"
        files = self.bar_files.setdefault(symbol, {})
        if path in files:
            raise FileExistsError(path)
        buffer = io.StringIO()
        try:
            yield path, buffer
        finally:
            files[path] = buffer.getvalue()
            self.mtimes[path] = self.clock()

    def list_bar_files(self, symbol: str) -> List[str]:
        return sorted(self.bar_files.get(symbol, {}))

    def modified_at(self, path: str) -> datetime:
        try:
            return self.mtimes[path]
        except KeyError:
            raise FileNotFoundError(path) from None

    def delete(self, path: str) -> None:
        symbol = path.split('/')[1]
        files = self.bar_files.get(symbol, {})
        if path not in files:
            raise FileNotFoundError(path)
        del files[path]
        self.mtimes.pop(path, None)
