"""Checked allocation and guarded execution of code under test."""

from __future__ import annotations

import contextlib
import random
import signal
import threading
from collections.abc import Callable, Iterator
from dataclasses import dataclass

from .report import MessageKind, Reporter

MAGIC_HEADER = 0xDEADBEEF
MAGIC_FREE = 0xFFFFFFFF
MAGIC_FOOTER = 0xBEEFDEAD
FILLCHAR = 0x55

TIME_LIMIT_MESSAGE = (
    "Time limit exceeded.  Either you are in an infinite loop, or your "
    "code is too inefficient"
)


class HarnessError(Exception):
    """Raised to abandon a guarded operation."""


@dataclass(eq=False)
class Block:
    """An allocated block: its payload and the markers guarding it."""

    payload: bytearray
    header: int = MAGIC_HEADER
    footer: int = MAGIC_FOOTER

    @property
    def size(self) -> int:
        return len(self.payload)


class Harness:
    """Tracks allocations made by code under test and catches misuse."""

    def __init__(self, reporter: Reporter) -> None:
        self.reporter = reporter
        self.fail_probability = 0
        self.cautious_mode = True
        self.noallocate_mode = False
        self.time_limit: float = 1
        self._allocated: dict[int, Block] = {}
        self._error_occurred = False
        self._error_message = ""
        self._depth = 0

    def _fail_allocation(self) -> bool:
        return random.random() < 0.01 * self.fail_probability

    def malloc(self, size: int) -> Block | None:
        """Allocate a block of ``size`` bytes filled with FILLCHAR.

        Returns None when a simulated allocation failure occurs.
        """
        if self.noallocate_mode:
            self.reporter.report_event(MessageKind.FATAL, "Calls to malloc disallowed")
            return None
        if self._fail_allocation():
            self.reporter.report_event(MessageKind.WARN, "Malloc returning NULL")
            return None
        block = Block(bytearray([FILLCHAR]) * size)
        self._allocated[id(block)] = block
        return block

    def calloc(self, nelem: int, elsize: int) -> Block | None:
        """Allocate ``nelem * elsize`` zeroed bytes."""
        block = self.malloc(nelem * elsize)
        if block is not None:
            block.payload[:] = bytes(block.size)
        return block

    def _error(self, message: str) -> None:
        self.reporter.report_event(MessageKind.ERROR, message)
        self._error_occurred = True

    def free(self, block: Block | None) -> None:
        """Release ``block``, reporting blocks that look unallocated or corrupt."""
        if self.noallocate_mode:
            self.reporter.report_event(MessageKind.FATAL, "Calls to free disallowed")
            return
        if block is None:
            return

        address = hex(id(block))
        known = id(block) in self._allocated
        if self.cautious_mode and not known:
            self._error(f"Attempted to free unallocated block.  Address = {address}")
        if block.header != MAGIC_HEADER:
            self._error(
                "Attempted to free unallocated or corrupted block.  "
                f"Address = {address}"
            )
        if block.footer != MAGIC_FOOTER:
            self._error(
                f"Corruption detected in block with address {address} when "
                "attempting to free it"
            )

        block.header = MAGIC_FREE
        block.footer = MAGIC_FREE
        block.payload[:] = bytearray([FILLCHAR]) * block.size
        if known:
            del self._allocated[id(block)]

    def strdup(self, s: str) -> Block | None:
        """Allocate a NUL-terminated UTF-8 copy of ``s``."""
        data = s.encode("utf-8") + b"\0"
        block = self.malloc(len(data))
        if block is None:
            return None
        block.payload[:] = data
        return block

    def allocation_check(self) -> int:
        """Number of blocks currently allocated."""
        return len(self._allocated)

    def error_check(self) -> bool:
        """Return whether an error occurred since the last check, and reset."""
        occurred = self._error_occurred
        self._error_occurred = False
        return occurred

    def _arm_timer(self) -> Callable[[], None] | None:
        if not hasattr(signal, "SIGALRM") or not hasattr(signal, "setitimer"):
            return None
        if threading.current_thread() is not threading.main_thread():
            return None

        def on_alarm(signum, frame):
            self.trigger_exception(TIME_LIMIT_MESSAGE)

        previous = signal.signal(signal.SIGALRM, on_alarm)
        signal.setitimer(signal.ITIMER_REAL, self.time_limit)

        def disarm() -> None:
            signal.setitimer(signal.ITIMER_REAL, 0)
            signal.signal(signal.SIGALRM, previous)

        return disarm

    @contextlib.contextmanager
    def guard(self, limit_time: bool = False) -> Iterator[Harness]:
        """Run the body of a ``with`` block as a risky operation.

        A call to :meth:`trigger_exception`, or running past the time limit
        when ``limit_time`` is set, abandons the body and reports the error.
        """
        disarm = self._arm_timer() if limit_time else None
        self._depth += 1
        try:
            try:
                yield self
            finally:
                if disarm is not None:
                    disarm()
                self._depth -= 1
        except HarnessError:
            if self._error_message:
                self.reporter.report_event(MessageKind.ERROR, self._error_message)
        finally:
            self._error_message = ""

    def trigger_exception(self, message: str) -> None:
        """Abandon the innermost guarded operation, or exit if there is none."""
        self._error_occurred = True
        self._error_message = message
        if self._depth > 0:
            raise HarnessError(message)
        raise SystemExit(1)