"""
Record renderers.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import orjson
from structlog.typing import EventDict, WrappedLogger

from .constants import ROOT_LOGGER_NAME
from .sinks import orjson_dumps

# =============================================================================
# Console Formatter (Aligned Columns)
# =============================================================================


class ConsoleFormatter:
    """Handles human-readable log rendering (fixed width, right-aligned).

    Layout: ``timestamp | LEVEL | logger | caller | message key=value ...``
    with the stack trace, when present, on the following lines.
    """

    EXCLUDED_KEYS = {"level", "message", "event", "logger", "timestamp", "caller", "stack", "exception", "_name"}
    TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%f"
    TIMESTAMP_WIDTH = 26
    LEVEL_WIDTH = 5
    LOGGER_WIDTH = 24
    CALLER_WIDTH = 24
    SEPARATOR = " | "

    @staticmethod
    def _fit_right(text: str, width: int) -> str:
        if width <= 0:
            return text
        if len(text) > width:
            if width <= 3:
                text = text[-width:]
            else:
                text = "..." + text[-(width - 3) :]
        return f"{text:>{width}}"

    @classmethod
    def _format_timestamp(cls, raw_timestamp: str | None) -> str:
        if raw_timestamp:
            try:
                dt = datetime.fromisoformat(raw_timestamp.replace("Z", "+00:00"))
                if dt.tzinfo is None:
                    dt = dt.replace(tzinfo=timezone.utc)
                return dt.astimezone().strftime(cls.TIMESTAMP_FORMAT)
            except (ValueError, TypeError):
                pass
        return datetime.now().strftime(cls.TIMESTAMP_FORMAT)

    @classmethod
    def format(cls, event_dict: EventDict) -> str:
        """Format an event dict into an aligned string."""
        level = str(event_dict.get("level", "info")).upper()
        message = str(event_dict.get("message", event_dict.get("event", "")))
        logger_name = str(event_dict.get("logger", ROOT_LOGGER_NAME))
        caller = str(event_dict.get("caller", ""))

        extras = [f"{k}={v}" for k, v in event_dict.items() if k not in cls.EXCLUDED_KEYS]
        if extras:
            message = f"{message} " + " ".join(extras)

        line = cls.SEPARATOR.join(
            [
                cls._fit_right(cls._format_timestamp(event_dict.get("timestamp")), cls.TIMESTAMP_WIDTH),
                cls._fit_right(level, cls.LEVEL_WIDTH),
                cls._fit_right(logger_name, cls.LOGGER_WIDTH),
                cls._fit_right(caller, cls.CALLER_WIDTH),
                message,
            ]
        )

        for key in ("stack", "exception"):
            if event_dict.get(key):
                line += "\n" + str(event_dict[key])
        return line


# =============================================================================
# structlog Renderers
# =============================================================================


def console_renderer(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> str:
    """Render the event as one aligned console line."""
    return ConsoleFormatter.format(event_dict)


def json_renderer(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> str:
    """Render the event as one JSON object.

    Values orjson cannot encode (e.g. integers wider than 64 bits) are written as their repr.
    """
    try:
        return orjson_dumps(event_dict, default=repr)
    except orjson.JSONEncodeError:
        return orjson_dumps({k: _encodable(v) for k, v in event_dict.items()}, default=repr)


def _encodable(value: Any) -> Any:
    try:
        orjson_dumps(value, default=repr)
    except orjson.JSONEncodeError:
        return repr(value)
    return value
