import io
import os

import pytest

from logfacade import reset_logging
from logfacade.backend import build_backend
from logfacade.logger import StructLogger
from logfacade.sinks import StdioSink
from logfacade.types import Level


class MemorySink(StdioSink):
    """StdioSink writing to an in-memory buffer."""

    def __init__(self):
        super().__init__(stream=io.StringIO())

    @property
    def lines(self) -> list[str]:
        return self.stream.getvalue().splitlines()


@pytest.fixture(autouse=True)
def clean_root_logger():
    """Each test starts and ends without an installed root logger."""
    reset_logging()
    yield
    reset_logging()


@pytest.fixture
def memory_sink() -> MemorySink:
    return MemorySink()


@pytest.fixture
def make_logger(memory_sink):
    def _make(level: Level = Level.INFO, fmt: str = "json", **kwargs) -> StructLogger:
        return StructLogger(backend=build_backend(memory_sink, level, fmt), level=level, **kwargs)

    return _make


@pytest.fixture(autouse=True)
def clean_log_environment(monkeypatch):
    """Keep LOG_* variables of the calling shell out of LoggerConfig."""
    for name in list(os.environ):
        if name.startswith("LOG_"):
            monkeypatch.delenv(name)
