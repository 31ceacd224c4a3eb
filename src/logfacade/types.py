"""
Severity levels and structured fields.
"""

from __future__ import annotations

import logging
from enum import IntEnum
from typing import TYPE_CHECKING, Any, Dict, Mapping, Protocol

if TYPE_CHECKING:
    from .logger import Logger

Fields = Dict[str, Any]

_log = logging.getLogger(__name__)


class Level(IntEnum):
    """Severity tiers ordered from most to least severe."""

    PANIC = 0
    FATAL = 1
    ERROR = 2
    WARN = 3
    INFO = 4
    DEBUG = 5
    TRACE = 6

    def __str__(self) -> str:
        return self.name.lower()

    def permits(self, call_level: Level) -> bool:
        """Whether a logger configured at this level emits a call at ``call_level``.

        Trace calls need the configured level to be exactly TRACE; every other
        tier is emitted when it is at least as severe as the configured level.
        """
        if call_level is Level.TRACE:
            return self is Level.TRACE
        return call_level <= self


_LEVEL_NAMES = {
    "trace": Level.TRACE,
    "debug": Level.DEBUG,
    "info": Level.INFO,
    "warn": Level.WARN,
    "warning": Level.WARN,
    "error": Level.ERROR,
}


def parse_level(name: str | None) -> Level:
    """Map a case-insensitive severity name to a Level, defaulting to INFO."""
    level = _LEVEL_NAMES.get((name or "").strip().lower())
    if level is None:
        _log.warning("Unknown log level %r, using info", name)
        return Level.INFO
    return level


def merge_fields(base: Mapping[str, Any] | None, overrides: Mapping[str, Any] | None) -> Fields:
    """Return a new field set with ``overrides`` applied on top of ``base``."""
    merged: Fields = dict(base or {})
    merged.update(overrides or {})
    return merged


def render_fields(fields: Mapping[str, Any]) -> str:
    """Render fields as space separated ``key=value`` tokens."""
    return " ".join(f"{k}={v!r}" for k, v in fields.items())


class HasFields(Protocol):
    """Anything that carries structured context."""

    def fields(self) -> Fields: ...


class Loggable(Protocol):
    """Anything that owns a scoped logger."""

    def log(self) -> Logger: ...


def add_fields_from(logger: Logger, *sources: HasFields) -> Logger:
    """Fold the fields of every source into ``logger``.

    Loggers satisfy HasFields themselves; pass ``value.log()`` for a Loggable.
    """
    for source in sources:
        logger = logger.with_fields(source.fields())
    return logger
