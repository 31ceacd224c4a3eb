"""
Structured logging facade.

Wraps a structlog backend writing to a size/age rotated file behind a small,
stable Logger interface:

- leveled calls (trace .. panic), plain and printf-style (``infof``)
- scoped child loggers through ``with_prefix``, ``with_section``, ``with_fields``
- optional ``[file:line]`` message prefix
- package-level functions delegating to the root logger installed by
  ``configure_logging``; before that they print to stdout

Library: structlog + orjson, configuration through pydantic-settings.
"""

from .config import LogFormat, LoggerConfig
from .core import (
    configure_logging,
    debug,
    debugf,
    error,
    errorf,
    fatal,
    fatalf,
    get_level,
    get_logger,
    info,
    infof,
    is_configured,
    panic,
    panicf,
    print_,
    printf,
    println,
    reset_logging,
    trace,
    tracef,
    warn,
    warnf,
)
from .exceptions import LogPanic
from .logger import Logger, StructLogger
from .types import Fields, HasFields, Level, Loggable, add_fields_from, merge_fields, parse_level, render_fields

__all__ = [
    "Fields",
    "HasFields",
    "Level",
    "LogFormat",
    "LogPanic",
    "Loggable",
    "Logger",
    "LoggerConfig",
    "StructLogger",
    "add_fields_from",
    "configure_logging",
    "debug",
    "debugf",
    "error",
    "errorf",
    "fatal",
    "fatalf",
    "get_level",
    "get_logger",
    "info",
    "infof",
    "is_configured",
    "merge_fields",
    "panic",
    "panicf",
    "parse_level",
    "print_",
    "printf",
    "println",
    "render_fields",
    "reset_logging",
    "trace",
    "tracef",
    "warn",
    "warnf",
]
