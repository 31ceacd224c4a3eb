"""
Exceptions raised by the logging facade.
"""

from __future__ import annotations


class LogPanic(Exception):
    """Raised after a panic-level record has been written.

    Carries the rendered message so that a top-level handler can report it.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message
