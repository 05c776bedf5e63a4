"""Levelled reporting of messages, errors and fatal events, plus a simple timer."""

from __future__ import annotations

import enum
import sys
import time
from typing import TextIO

FAIL_MESSAGE = "FATAL Error.  Exiting\n"


class MessageKind(enum.Enum):
    """Kinds of events, each with its printed label and minimum verbosity."""

    WARN = ("WARNING", 2)
    ERROR = ("ERROR", 1)
    FATAL = ("FATAL ERROR", 0)

    def __init__(self, label: str, level: int) -> None:
        self.label = label
        self.level = level


class FatalError(Exception):
    """Raised when a fatal event is reported."""


class Reporter:
    """Writes messages to an output stream and, optionally, a log file."""

    def __init__(self, verblevel: int = 0, out: TextIO | None = None) -> None:
        self.verblevel = verblevel
        self._out = out
        self._log: TextIO | None = None

    @property
    def out(self) -> TextIO:
        return self._out if self._out is not None else sys.stdout

    @property
    def logging(self) -> bool:
        """Whether output is currently copied to a log file."""
        return self._log is not None

    def set_logfile(self, file_name: str) -> None:
        """Copy all further output to ``file_name``; raises OSError on failure."""
        log = open(file_name, "w", encoding="utf-8")
        self.close()
        self._log = log

    def close(self) -> None:
        """Close the log file, if one is open."""
        if self._log is not None:
            self._log.close()
            self._log = None

    def _emit(self, text: str) -> None:
        out = self.out
        out.write(text)
        out.flush()
        if self._log is not None:
            self._log.write(text)
            self._log.flush()

    def report(self, level: int, message: str) -> None:
        """Write ``message`` and a newline if ``level`` is within the verbosity."""
        if level <= self.verblevel:
            self._emit(message + "\n")

    def report_noreturn(self, level: int, message: str) -> None:
        """Like :meth:`report`, without the trailing newline."""
        if level <= self.verblevel:
            self._emit(message)

    def report_event(self, kind: MessageKind, message: str) -> None:
        """Report a warning, error or fatal event.

        A logged event closes the log file. A fatal event raises FatalError.
        """
        if self.verblevel < kind.level:
            return

        out = self.out
        out.write(f"{kind.label}: {message}\n")
        out.flush()

        if self._log is not None:
            self._log.write(f"Error: {message}\n")
            self._log.flush()
            self.close()

        if kind is MessageKind.FATAL:
            out.write(FAIL_MESSAGE)
            out.flush()
            raise FatalError(message)


class Stopwatch:
    """Wall-clock timer that reports the time since its last reading."""

    def __init__(self) -> None:
        self.last = time.time()
        self.first = self.last

    @property
    def elapsed(self) -> float:
        """Seconds between creation and the last reading."""
        return self.last - self.first

    def delta(self) -> float:
        """Return seconds since the previous reading and reset to now."""
        now = time.time()
        delta = now - self.last
        self.last = now
        return delta