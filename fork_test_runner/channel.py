"""Result channel shared between the orchestrator and forked test processes."""

import logging
import mmap
import multiprocessing
import struct
from enum import IntEnum
from types import TracebackType
from typing import Self

from fork_test_runner.models.result import Kind, SuiteSummary
from fork_test_runner.models.suite import Suite, Test

log = logging.getLogger(__name__)

# passed, failed, skipped, errors, phase, current test index
_LAYOUT = struct.Struct("=4Qii")
_FIELDS = [struct.Struct("=Q")] * 4 + [struct.Struct("=i")] * 2
_OFFSETS = [0, 8, 16, 24, 32, 36]

_COUNTER_SLOTS = {
    Kind.PASS: 0,
    Kind.FAIL: 1,
    Kind.SKIP: 2,
    Kind.ERROR: 3,
}
_PHASE_SLOT = 4
_CURRENT_TEST_SLOT = 5
_NO_TEST = -1


class Phase(IntEnum):
    """Where execution of the suite currently stands."""

    SUITE_SETUP = 0
    TEST_SETUP = 1
    TEST_RUN = 2
    TEST_TEARDOWN = 3
    SUITE_TEARDOWN = 4


class ChannelError(Exception):
    """Raised when the shared result channel cannot be used."""


class ResultChannel:
    """Outcome counters and execution phase in a ``MAP_SHARED`` mapping.

    The mapping is created before any test process is forked, so every child
    writes to the same physical pages the orchestrator reads. All accesses go
    through a lock taken from the ``fork`` multiprocessing context.
    """

    def __init__(self, suite: Suite, buffer: mmap.mmap, lock) -> None:
        self.suite = suite
        self._buffer = buffer
        self._lock = lock
        self._closed = False

    @classmethod
    def allocate(cls, suite: Suite) -> Self:
        """Map a zeroed shared region for ``suite``.

        Raises:
            ChannelError: If the mapping or the lock cannot be created

        """
        try:
            buffer = mmap.mmap(-1, _LAYOUT.size, flags=mmap.MAP_SHARED)
            lock = multiprocessing.get_context("fork").Lock()
        except (OSError, ValueError) as exc:
            raise ChannelError(f"cannot allocate result channel: {exc}") from exc

        _LAYOUT.pack_into(buffer, 0, 0, 0, 0, 0, Phase.SUITE_SETUP, _NO_TEST)
        log.debug("Allocated result channel (%d bytes)", _LAYOUT.size)
        return cls(suite, buffer, lock)

    @property
    def closed(self) -> bool:
        return self._closed

    def reset_lock(self) -> None:
        """Replace the lock after a child was killed by a signal.

        A child killed while counting a result never releases the lock it
        holds. Only the orchestrator is alive at that point, so handing out a
        fresh lock before the next fork is safe.
        """
        try:
            self._lock = multiprocessing.get_context("fork").Lock()
        except OSError as exc:
            raise ChannelError(f"cannot replace result channel lock: {exc}") from exc
        log.debug("Replaced result channel lock")

    def increment(self, kind: Kind) -> None:
        """Atomically count one result of ``kind``; ``INFO`` is not counted."""
        if not kind.is_terminal:
            return
        slot = _COUNTER_SLOTS[kind]
        with self._lock:
            self._write_slot(slot, self._read_slot(slot) + 1)

    @property
    def phase(self) -> Phase:
        with self._lock:
            return Phase(self._read()[_PHASE_SLOT])

    @phase.setter
    def phase(self, phase: Phase) -> None:
        self._set(_PHASE_SLOT, int(phase))

    @property
    def current_test(self) -> Test | None:
        """The test being executed, or None outside of the test loop."""
        with self._lock:
            index = self._read()[_CURRENT_TEST_SLOT]
        if index == _NO_TEST:
            return None
        return self.suite.tests[index]

    def enter_test(self, index: int) -> None:
        if not 0 <= index < len(self.suite.tests):
            raise IndexError(f"suite has no test at index {index}")
        self._set(_CURRENT_TEST_SLOT, index)

    def leave_test(self) -> None:
        self._set(_CURRENT_TEST_SLOT, _NO_TEST)

    def snapshot(self, *, aborted: bool = False) -> SuiteSummary:
        """Copy the counters into an immutable summary."""
        with self._lock:
            passed, failed, skipped, errors, _, _ = self._read()
        return SuiteSummary(
            passed=passed,
            failed=failed,
            skipped=skipped,
            errors=errors,
            aborted=aborted,
        )

    def close(self) -> None:
        """Unmap the shared region. Closing twice is a no-op."""
        if self._closed:
            return
        try:
            self._buffer.close()
        except (OSError, BufferError) as exc:
            raise ChannelError(f"cannot release result channel: {exc}") from exc
        self._closed = True
        log.debug("Released result channel")

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def _set(self, slot: int, value: int) -> None:
        with self._lock:
            self._write_slot(slot, value)

    def _read(self) -> tuple[int, ...]:
        self._check_open()
        return _LAYOUT.unpack_from(self._buffer, 0)

    def _read_slot(self, slot: int) -> int:
        self._check_open()
        return _FIELDS[slot].unpack_from(self._buffer, _OFFSETS[slot])[0]

    def _write_slot(self, slot: int, value: int) -> None:
        # Touches only the bytes of its own field.
        _FIELDS[slot].pack_into(self._buffer, _OFFSETS[slot], value)

    def _check_open(self) -> None:
        if self._closed:
            raise ChannelError("result channel is closed")
