"""
Logger interface and its structlog-backed implementation.
"""

from __future__ import annotations

import dataclasses
import inspect
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Tuple

from structlog.typing import FilteringBoundLogger

from .backend import NAME_KEY, SEVERITY_KEY, backend_field_key
from .constants import PACKAGE_NAME
from .exceptions import LogPanic
from .types import Fields, Level, merge_fields

CallerResolver = Callable[[], Optional[Tuple[str, int]]]

# Trace shares the backend debug tier; fatal and panic share critical.
_BACKEND_METHODS = {
    Level.TRACE: "debug",
    Level.DEBUG: "debug",
    Level.INFO: "info",
    Level.WARN: "warning",
    Level.ERROR: "error",
    Level.FATAL: "critical",
    Level.PANIC: "critical",
}


def find_caller() -> tuple[str, int] | None:
    """Return ``(file basename, line)`` of the first frame outside this package."""
    frame = inspect.currentframe()
    try:
        while frame is not None:
            module = frame.f_globals.get("__name__", "")
            if module != PACKAGE_NAME and not module.startswith(PACKAGE_NAME + "."):
                return os.path.basename(frame.f_code.co_filename), frame.f_lineno
            frame = frame.f_back
        return None
    finally:
        del frame


def render_args(args: tuple[Any, ...]) -> str:
    return " ".join(str(arg) for arg in args)


def render_template(template: str, args: tuple[Any, ...]) -> str:
    """printf-style substitution; a template without arguments is used verbatim."""
    if not args:
        return template
    return template % args


class Logger(ABC):
    """Leveled, field-annotated logger.

    ``with_*`` methods never mutate the receiver; they return a child logger.
    """

    @abstractmethod
    def print(self, *args: Any) -> None: ...

    @abstractmethod
    def printf(self, template: str, *args: Any) -> None: ...

    @abstractmethod
    def println(self, *args: Any) -> None: ...

    @abstractmethod
    def trace(self, *args: Any) -> None: ...

    @abstractmethod
    def tracef(self, template: str, *args: Any) -> None: ...

    @abstractmethod
    def debug(self, *args: Any) -> None: ...

    @abstractmethod
    def debugf(self, template: str, *args: Any) -> None: ...

    @abstractmethod
    def info(self, *args: Any) -> None: ...

    @abstractmethod
    def infof(self, template: str, *args: Any) -> None: ...

    @abstractmethod
    def warn(self, *args: Any) -> None: ...

    @abstractmethod
    def warnf(self, template: str, *args: Any) -> None: ...

    @abstractmethod
    def error(self, *args: Any) -> None: ...

    @abstractmethod
    def errorf(self, template: str, *args: Any) -> None: ...

    @abstractmethod
    def fatal(self, *args: Any) -> None:
        """Log at fatal level, then exit the process with status 1."""

    @abstractmethod
    def fatalf(self, template: str, *args: Any) -> None: ...

    @abstractmethod
    def panic(self, *args: Any) -> None:
        """Log at panic level with a stack trace, then raise LogPanic."""

    @abstractmethod
    def panicf(self, template: str, *args: Any) -> None: ...

    @abstractmethod
    def with_prefix(self, prefix: str) -> Logger: ...

    @abstractmethod
    def prefix(self) -> str: ...

    @abstractmethod
    def with_section(self, section: str) -> Logger: ...

    @abstractmethod
    def section(self) -> str: ...

    @abstractmethod
    def with_fields(self, fields: Fields) -> Logger: ...

    @abstractmethod
    def fields(self) -> Fields: ...

    @abstractmethod
    def set_level(self, level: Level) -> None: ...

    @abstractmethod
    def get_level(self) -> Level: ...


@dataclass(frozen=True, eq=False)
class StructLogger(Logger):
    """Logger backed by a level-filtered structlog logger.

    Args:
        backend: structlog logger; its minimum level must match ``level``
        level: configured minimum level
        prefixes: name chain, rendered dot-joined as the logger name
        field_set: structured context bound on ``backend``
        include_caller: prefix every message with ``[file:line] ``
        caller_resolver: returns the calling ``(file, line)``
    """

    backend: FilteringBoundLogger
    level: Level = Level.INFO
    prefixes: Tuple[str, ...] = ()
    field_set: Fields = field(default_factory=dict)
    include_caller: bool = False
    caller_resolver: CallerResolver = find_caller

    def _emit(self, level: Level, message: str, **kw: Any) -> None:
        # The backend has no trace tier, so trace is gated here.
        if not self.level.permits(level):
            return
        if self.include_caller:
            location = self.caller_resolver()
            if location is not None:
                message = f"[{location[0]}:{location[1]}] {message}"
        kw[SEVERITY_KEY] = str(level)
        getattr(self.backend, _BACKEND_METHODS[level])(message, **kw)

    def _fatal(self, message: str) -> None:
        self._emit(Level.FATAL, message)
        raise SystemExit(1)

    def _panic(self, message: str) -> None:
        self._emit(Level.PANIC, message, stack_info=True)
        raise LogPanic(message)

    def print(self, *args: Any) -> None:
        self._emit(Level.INFO, render_args(args))

    def printf(self, template: str, *args: Any) -> None:
        self._emit(Level.INFO, render_template(template, args))

    def println(self, *args: Any) -> None:
        self._emit(Level.INFO, render_args(args))

    def trace(self, *args: Any) -> None:
        self._emit(Level.TRACE, render_args(args))

    def tracef(self, template: str, *args: Any) -> None:
        self._emit(Level.TRACE, render_template(template, args))

    def debug(self, *args: Any) -> None:
        self._emit(Level.DEBUG, render_args(args))

    def debugf(self, template: str, *args: Any) -> None:
        self._emit(Level.DEBUG, render_template(template, args))

    def info(self, *args: Any) -> None:
        self._emit(Level.INFO, render_args(args))

    def infof(self, template: str, *args: Any) -> None:
        self._emit(Level.INFO, render_template(template, args))

    def warn(self, *args: Any) -> None:
        self._emit(Level.WARN, render_args(args))

    def warnf(self, template: str, *args: Any) -> None:
        self._emit(Level.WARN, render_template(template, args))

    def error(self, *args: Any) -> None:
        self._emit(Level.ERROR, render_args(args))

    def errorf(self, template: str, *args: Any) -> None:
        self._emit(Level.ERROR, render_template(template, args))

    def fatal(self, *args: Any) -> None:
        self._fatal(render_args(args))

    def fatalf(self, template: str, *args: Any) -> None:
        self._fatal(render_template(template, args))

    def panic(self, *args: Any) -> None:
        self._panic(render_args(args))

    def panicf(self, template: str, *args: Any) -> None:
        self._panic(render_template(template, args))

    def with_prefix(self, prefix: str) -> StructLogger:
        prefixes = self.prefixes + (prefix,)
        return dataclasses.replace(
            self,
            backend=self.backend.bind(**{NAME_KEY: ".".join(prefixes)}),
            prefixes=prefixes,
        )

    def prefix(self) -> str:
        return ".".join(self.prefixes)

    def with_section(self, section: str) -> StructLogger:
        return dataclasses.replace(
            self,
            backend=self.backend.bind(section=section),
            field_set=merge_fields(self.field_set, {"section": section}),
        )

    def section(self) -> str:
        # Always empty; the section is only visible through fields().
        return ""

    def with_fields(self, fields: Fields) -> StructLogger:
        return dataclasses.replace(
            self,
            backend=self.backend.bind(**{backend_field_key(k): v for k, v in fields.items()}),
            field_set=merge_fields(self.field_set, fields),
        )

    def fields(self) -> Fields:
        return dict(self.field_set)

    def set_level(self, level: Level) -> None:
        """No-op: the level is fixed when the backend is built."""

    def get_level(self) -> Level:
        return self.level
