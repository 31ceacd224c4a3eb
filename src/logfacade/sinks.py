"""
Log sink abstractions and concrete implementations.
"""

from __future__ import annotations

import gzip
import logging
import os
import re
import shutil
import sys
import threading
import time
from abc import ABC, abstractmethod
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Iterable

import orjson

from .constants import SECONDS_PER_DAY


def orjson_dumps(v: Any, *, default: Any = None) -> str:
    """Fast JSON serialization using orjson."""
    return orjson.dumps(v, default=default, option=orjson.OPT_UTC_Z | orjson.OPT_NAIVE_UTC | orjson.OPT_NON_STR_KEYS).decode()


# =============================================================================
# Sink Abstraction (Strategy Pattern)
# =============================================================================


class BaseSink(ABC):
    """Abstract base class for log sinks. Sinks receive one rendered record per call."""

    @abstractmethod
    def write(self, line: str) -> None:
        """Write a single rendered record (without line terminator)."""
        ...

    def flush(self) -> None:
        pass

    @abstractmethod
    def close(self) -> None:
        """Close the sink and release resources."""
        ...


class StdioSink(BaseSink):
    """Standard I/O sink.

    Args:
        stream: Output stream (default: the current stdout at write time)
    """

    def __init__(self, stream: Any = None):
        self._stream = stream
        self._lock = threading.Lock()

    @property
    def stream(self) -> Any:
        return self._stream if self._stream is not None else sys.stdout

    def write(self, line: str) -> None:
        stream = self.stream
        with self._lock:
            stream.write(line + "\n")
            stream.flush()

    def close(self) -> None:
        pass


class FanoutSink(BaseSink):
    """Writes every record to each child sink."""

    def __init__(self, sinks: Iterable[BaseSink]):
        self._sinks = list(sinks)

    def write(self, line: str) -> None:
        for sink in self._sinks:
            sink.write(line)

    def flush(self) -> None:
        for sink in self._sinks:
            sink.flush()

    def close(self) -> None:
        for sink in self._sinks:
            sink.close()


# =============================================================================
# File Rotation
# =============================================================================


def _gzip_namer(name: str) -> str:
    return name + ".gz"


def _gzip_rotator(source: str, dest: str) -> None:
    with open(source, "rb") as src, gzip.open(dest, "wb") as dst:
        shutil.copyfileobj(src, dst)
    os.remove(source)


class AgeLimitedRotatingFileHandler(RotatingFileHandler):
    """RotatingFileHandler that also drops rotated files older than ``max_age_days``."""

    def __init__(self, filename: str, *, max_age_days: int = 0, compress: bool = False, **kwargs: Any):
        super().__init__(filename, **kwargs)
        self.max_age_days = max_age_days
        if compress:
            self.namer = _gzip_namer
            self.rotator = _gzip_rotator
        self._backup_pattern = re.compile(re.escape(os.path.basename(self.baseFilename)) + r"\.(\d+)(\.gz)?$")

    def backups(self) -> list[Path]:
        """Rotated files currently present next to the active file."""
        directory = Path(self.baseFilename).parent
        return sorted(p for p in directory.iterdir() if self._backup_pattern.match(p.name))

    def doRollover(self) -> None:
        super().doRollover()
        self._remove_surplus()
        self._remove_expired()

    def _remove_surplus(self) -> None:
        # Drops indexes above backupCount; when an index exists both plain and
        # gzipped (compress toggled between runs) the newer file is kept.
        if self.backupCount <= 0:
            return
        newest: dict[int, tuple[float, Path]] = {}
        for backup in self.backups():
            index = int(self._backup_pattern.match(backup.name).group(1))
            try:
                mtime = backup.stat().st_mtime
                if index > self.backupCount:
                    backup.unlink()
                    continue
            except FileNotFoundError:
                continue
            kept = newest.get(index)
            if kept is None:
                newest[index] = (mtime, backup)
                continue
            older = backup if mtime < kept[0] else kept[1]
            if older is kept[1]:
                newest[index] = (mtime, backup)
            older.unlink(missing_ok=True)

    def _remove_expired(self) -> None:
        if self.max_age_days <= 0:
            return
        cutoff = time.time() - self.max_age_days * SECONDS_PER_DAY
        for backup in self.backups():
            try:
                if backup.stat().st_mtime < cutoff:
                    backup.unlink()
            except FileNotFoundError:
                continue


class RotatingFileSink(BaseSink):
    """Local file sink with size based rotation, backup count, age limit and optional gzip."""

    def __init__(
        self,
        path: str | Path,
        max_bytes: int = 10 * 1024 * 1024,
        backup_count: int = 5,
        max_age_days: int = 0,
        compress: bool = False,
    ):
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._handler = AgeLimitedRotatingFileHandler(
            str(self._path),
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
            max_age_days=max_age_days,
            compress=compress,
        )
        self._handler.setFormatter(logging.Formatter("%(message)s"))

    def backups(self) -> list[Path]:
        return self._handler.backups()

    def write(self, line: str) -> None:
        # handle() takes the handler lock, rolls over when needed and routes
        # I/O errors to handleError instead of raising.
        self._handler.handle(logging.makeLogRecord({"msg": line, "levelno": logging.INFO}))

    def flush(self) -> None:
        self._handler.flush()

    def close(self) -> None:
        self._handler.close()


# =============================================================================
# structlog Wrapped Logger
# =============================================================================


class SinkLogger:
    """Wrapped logger for structlog that hands rendered records to a sink."""

    def __init__(self, sink: BaseSink):
        self._sink = sink

    def msg(self, message: str) -> None:
        self._sink.write(message)

    log = debug = info = warn = warning = msg
    fatal = failure = err = error = critical = exception = msg
