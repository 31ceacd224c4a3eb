"""
structlog backend construction and processors.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

import structlog
from structlog.processors import CallsiteParameter
from structlog.typing import EventDict, Processor, WrappedLogger

from .config import LogFormat
from .constants import PACKAGE_NAME, ROOT_LOGGER_NAME
from .formatters import console_renderer, json_renderer
from .sinks import BaseSink, SinkLogger
from .types import Level

# Key used by the facade to force the rendered level name (trace, fatal, panic)
SEVERITY_KEY = "_severity"

# Key bound on the backend carrying the dot-joined prefix chain
NAME_KEY = "_name"

# Module prefix skipped when locating the calling frame
IGNORED_MODULE_PREFIX = PACKAGE_NAME + "."

# Record keys owned by the processor chain, plus the parameter names of bind()
RESERVED_KEYS = frozenset(
    {
        "self",
        "event",
        "message",
        "level",
        "timestamp",
        "logger",
        "caller",
        "filename",
        "lineno",
        "stack",
        "stack_info",
        "exception",
        "exc_info",
        SEVERITY_KEY,
        NAME_KEY,
    }
)

# Prefix given to field keys that collide with RESERVED_KEYS
FIELD_KEY_PREFIX = "field."

# The backend has no trace tier, so trace shares debug.
NATIVE_LEVELS = {
    Level.PANIC: logging.CRITICAL,
    Level.FATAL: logging.CRITICAL,
    Level.ERROR: logging.ERROR,
    Level.WARN: logging.WARNING,
    Level.INFO: logging.INFO,
    Level.DEBUG: logging.DEBUG,
    Level.TRACE: logging.DEBUG,
}


# =============================================================================
# Structlog Processors
# =============================================================================


def apply_severity(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Replace the native level name with the facade's own one when given."""
    severity = event_dict.pop(SEVERITY_KEY, None)
    if severity is not None:
        event_dict["level"] = severity
    return event_dict


def add_timestamp(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add ISO 8601 timestamp to log event."""
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def add_logger_name(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add logger name to log event."""
    event_dict["logger"] = event_dict.pop(NAME_KEY, None) or ROOT_LOGGER_NAME
    return event_dict


def add_caller(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Collapse filename and lineno into a single ``file:line`` caller value."""
    filename = event_dict.pop("filename", None)
    lineno = event_dict.pop("lineno", None)
    if filename is not None:
        event_dict["caller"] = f"{filename}:{lineno}"
    return event_dict


def rename_event_key(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Rename 'event' to 'message'."""
    if "event" in event_dict:
        event_dict["message"] = event_dict.pop("event")
    return event_dict


def build_processors(fmt: LogFormat | str = LogFormat.CONSOLE) -> list[Processor]:
    renderer = json_renderer if LogFormat(fmt) is LogFormat.JSON else console_renderer
    return [
        structlog.stdlib.add_log_level,
        apply_severity,
        add_timestamp,
        add_logger_name,
        structlog.processors.CallsiteParameterAdder(
            [CallsiteParameter.FILENAME, CallsiteParameter.LINENO],
            additional_ignores=[IGNORED_MODULE_PREFIX],
        ),
        add_caller,
        structlog.processors.StackInfoRenderer(additional_ignores=[IGNORED_MODULE_PREFIX]),
        structlog.processors.format_exc_info,
        rename_event_key,
        renderer,
    ]


def build_backend(
    sink: BaseSink,
    level: Level = Level.INFO,
    fmt: LogFormat | str = LogFormat.CONSOLE,
) -> structlog.typing.FilteringBoundLogger:
    """Create a level-filtered structlog logger writing rendered records to ``sink``."""
    wrapper_class = structlog.make_filtering_bound_logger(NATIVE_LEVELS[level])
    return wrapper_class(SinkLogger(sink), build_processors(fmt), {})


def backend_field_key(key: str) -> str:
    """Key under which a field is bound on the backend."""
    if key in RESERVED_KEYS:
        return FIELD_KEY_PREFIX + key
    return key
