"""
Core logging configuration, the process-wide root logger and the
package-level convenience functions.

Call :func:`configure_logging` once, early at startup. Reconfiguring replaces
the root logger but is not coordinated with threads that are logging at the
same time.
"""

from __future__ import annotations

import logging
import os
import threading
from typing import Any

from .backend import build_backend
from .config import LoggerConfig
from .constants import BYTES_PER_MB, FALLBACK_LOG_DIR, LOG_FILE_SUFFIX
from .exceptions import LogPanic
from .logger import StructLogger, render_args, render_template
from .sinks import BaseSink, FanoutSink, RotatingFileSink, StdioSink
from .types import Level, parse_level

_log = logging.getLogger(__name__)

# =============================================================================
# Global State
# =============================================================================


class _RootCell:
    """Lock-guarded holder of the configured root logger and its sink."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._logger: StructLogger | None = None
        self._sink: BaseSink | None = None
        self.configured = False

    def get(self) -> StructLogger | None:
        return self._logger

    def install(self, logger: StructLogger | None, sink: BaseSink | None) -> None:
        with self._lock:
            previous = self._sink
            self._logger, self._sink = logger, sink
            self.configured = logger is not None
        if previous is not None and previous is not sink:
            previous.close()


_root = _RootCell()


def get_logger() -> StructLogger | None:
    """Return the configured root logger, or None before configuration."""
    return _root.get()


def is_configured() -> bool:
    return _root.configured


def reset_logging() -> None:
    """Drop the root logger and close its sink (package functions print again)."""
    _root.install(None, None)


# =============================================================================
# Configuration Logic
# =============================================================================


def path_exists(path: str) -> bool:
    return bool(path) and os.path.exists(path)


def resolve_log_dir(path: str) -> str:
    """Return the configured directory, or the working directory when it does not exist."""
    if not path_exists(path):
        _log.warning("Log path %r does not exist or is not accessible, using default path: ./", path)
        path = FALLBACK_LOG_DIR
    if path.endswith("/") or path.endswith(os.sep):
        path = path[:-1]
    return path


def _build_sink(config: LoggerConfig, directory: str) -> BaseSink:
    max_size, max_backups, max_age = config.resolve_rotation()
    file_sink = RotatingFileSink(
        f"{directory}/{config.name}{LOG_FILE_SUFFIX}",
        max_bytes=max_size * BYTES_PER_MB,
        backup_count=max_backups,
        max_age_days=max_age,
        compress=config.compress,
    )
    if config.stdio:
        return FanoutSink([file_sink, StdioSink()])
    return file_sink


def configure_logging(config: LoggerConfig | None = None, **overrides: Any) -> StructLogger:
    """
    Configure the root logger and install it for the package-level functions.

    Args:
        config: Logger options; built from ``LOG_*`` environment variables when omitted
        **overrides: Option values replacing those of ``config``

    Returns:
        The installed root logger, for callers that pass it around explicitly.
    """
    if config is None:
        config = LoggerConfig(**overrides)
    elif overrides:
        config = LoggerConfig(**{**config.model_dump(), **overrides})

    # 1. Resolve output directory
    directory = resolve_log_dir(config.path)

    # 2. Rotating sink
    sink = _build_sink(config, directory)

    # 3. Level and backend
    level = parse_level(config.level)
    backend = build_backend(sink, level, config.format)

    # 4. Root logger
    root = StructLogger(backend=backend, level=level, include_caller=config.caller)
    _root.install(root, sink)
    return root


# =============================================================================
# Package-level API
# =============================================================================


def _fallback(message: str) -> None:
    print(message, flush=True)


def print_(*args: Any) -> None:
    root = _root.get()
    if root is None:
        _fallback(render_args(args))
    else:
        root.print(*args)


def printf(template: str, *args: Any) -> None:
    root = _root.get()
    if root is None:
        _fallback(render_template(template, args))
    else:
        root.printf(template, *args)


def println(*args: Any) -> None:
    root = _root.get()
    if root is None:
        _fallback(render_args(args))
    else:
        root.println(*args)


def trace(*args: Any) -> None:
    root = _root.get()
    if root is None:
        _fallback(render_args(args))
    else:
        root.trace(*args)


def tracef(template: str, *args: Any) -> None:
    root = _root.get()
    if root is None:
        _fallback(render_template(template, args))
    else:
        root.tracef(template, *args)


def debug(*args: Any) -> None:
    root = _root.get()
    if root is None:
        _fallback(render_args(args))
    else:
        root.debug(*args)


def debugf(template: str, *args: Any) -> None:
    root = _root.get()
    if root is None:
        _fallback(render_template(template, args))
    else:
        root.debugf(template, *args)


def info(*args: Any) -> None:
    root = _root.get()
    if root is None:
        _fallback(render_args(args))
    else:
        root.info(*args)


def infof(template: str, *args: Any) -> None:
    root = _root.get()
    if root is None:
        _fallback(render_template(template, args))
    else:
        root.infof(template, *args)


def warn(*args: Any) -> None:
    root = _root.get()
    if root is None:
        _fallback(render_args(args))
    else:
        root.warn(*args)


def warnf(template: str, *args: Any) -> None:
    root = _root.get()
    if root is None:
        _fallback(render_template(template, args))
    else:
        root.warnf(template, *args)


def error(*args: Any) -> None:
    root = _root.get()
    if root is None:
        _fallback(render_args(args))
    else:
        root.error(*args)


def errorf(template: str, *args: Any) -> None:
    root = _root.get()
    if root is None:
        _fallback(render_template(template, args))
    else:
        root.errorf(template, *args)


def fatal(*args: Any) -> None:
    root = _root.get()
    if root is None:
        _fallback(render_args(args))
        raise SystemExit(1)
    root.fatal(*args)


def fatalf(template: str, *args: Any) -> None:
    root = _root.get()
    if root is None:
        message = render_template(template, args)
        _fallback(message)
        raise SystemExit(1)
    root.fatalf(template, *args)


def panic(*args: Any) -> None:
    root = _root.get()
    if root is None:
        message = render_args(args)
        _fallback(message)
        raise LogPanic(message)
    root.panic(*args)


def panicf(template: str, *args: Any) -> None:
    root = _root.get()
    if root is None:
        message = render_template(template, args)
        _fallback(message)
        raise LogPanic(message)
    root.panicf(template, *args)


def get_level() -> Level | None:
    root = _root.get()
    return root.get_level() if root is not None else None
