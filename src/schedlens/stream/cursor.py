"""Sequential trace reader.

TraceCursor validates the ``cpus=<N>`` header, then decodes one line per
``next()`` call. Each step carries a read-only snapshot of the wake-state
table taken right after that line was decoded; snapshots never change
when later lines are decoded.

Usage:
    with TraceCursor.open("trace.txt") as cursor:
        for step in cursor:
            if isinstance(step.action.event, SchedMigrateTask):
                cause = classify_migration(step.action.event, step.states, topology)

The sequence is forward-only. Re-reading a trace means opening a new cursor.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from os import PathLike
from typing import IO

from schedlens.errors import SchedLensError
from schedlens.trace import Action, TraceFormatError, Unsupported, decode_line
from schedlens.wakestate import WakeState, WakeStateError, WakeStateTracker

logger = logging.getLogger(__name__)

HEADER_KEY = "cpus="
PROGRESS_INTERVAL = 10000


class TraceHeaderError(SchedLensError):
    """Raised when the first line is missing or is not ``cpus=<N> ...``."""

    pass


@dataclass(frozen=True, slots=True)
class TraceStep:
    """One decoded line with the wake state as of that line.

    Attributes:
        action: The decoded line.
        states: Read-only copy of the wake-state table after decoding.
        first_timestamp: Timestamp of the first decoded line of the trace.
    """

    action: Action
    states: Mapping[int, WakeState]
    first_timestamp: float

    @property
    def relative_time(self) -> float:
        """Seconds since the first decoded line."""
        return self.action.timestamp - self.first_timestamp


def parse_header(line: str | None) -> int:
    """Read the cpu count from a ``cpus=<N> ...`` header line.

    Raises:
        TraceHeaderError: If the line is absent or malformed.
    """
    if line is None:
        raise TraceHeaderError("Unable to read trace: input is empty")

    tokens = line.split()
    if not tokens or not tokens[0].startswith(HEADER_KEY):
        raise TraceHeaderError(
            f"Invalid format: expected '{HEADER_KEY}<N>' in the first line, got {line.strip()!r}"
        )

    value = tokens[0].removeprefix(HEADER_KEY)
    if not (value.isascii() and value.isdigit()):
        raise TraceHeaderError(f"Invalid cpu count in header: {tokens[0]!r}")
    return int(value)


class TraceCursor:
    """Pull-based decoder over the lines of one trace.

    Owns the wake-state table for this trace. Each cursor starts from an
    empty table, so separate traces never share state.

    Args:
        lines: Trace lines, header first.
        source: Name used in log messages.

    Raises:
        TraceHeaderError: If the header is missing or malformed.
    """

    def __init__(self, lines: Iterable[str], source: str = "<lines>") -> None:
        self._lines: Iterator[str] = iter(lines)
        self._source = source
        self._file: IO[str] | None = None
        self._tracker = WakeStateTracker()
        self._line_number = 1
        self._actions = 0
        self._skipped = 0
        self._exhausted = False
        self._unsupported: set[str] = set()
        self._replaced_bytes = False
        self.first_timestamp: float | None = None
        self.last_timestamp: float | None = None

        self.cpu_count = parse_header(next(self._lines, None))
        logger.info("Opened trace %s with %d cpus", source, self.cpu_count)

    @classmethod
    def open(cls, path: str | PathLike[str]) -> TraceCursor:
        """Open a trace file. The cursor closes it on exhaustion or ``close()``.

        Bytes that are not valid UTF-8 (usually inside task names) are replaced
        with U+FFFD rather than aborting the scan; the first such line is logged
        at debug level.
        """
        handle = open(path, encoding="utf-8", errors="replace")  # noqa: SIM115
        try:
            cursor = cls(handle, source=str(path))
        except BaseException:
            handle.close()
            raise
        cursor._file = handle
        return cursor

    @property
    def duration(self) -> float:
        """Seconds between the first and last decoded lines so far."""
        if self.first_timestamp is None or self.last_timestamp is None:
            return 0.0
        return self.last_timestamp - self.first_timestamp

    @property
    def lines_read(self) -> int:
        return self._line_number

    @property
    def actions_decoded(self) -> int:
        return self._actions

    @property
    def lines_skipped(self) -> int:
        return self._skipped

    def states(self) -> Mapping[int, WakeState]:
        """Read-only copy of the current wake-state table."""
        return self._tracker.snapshot()

    def next(self) -> TraceStep | None:
        """Decode the next line that carries an event.

        Returns:
            The next TraceStep, or None once the input is exhausted.

        Raises:
            TraceFormatError: If a line is malformed (line number attached).
            WakeStateError: If sched_wakeup_new has no prior fork or wake.
        """
        if self._exhausted:
            return None

        for line in self._lines:
            self._line_number += 1
            if self._line_number % PROGRESS_INTERVAL == 0:
                logger.debug("Read %d lines, decoded %d actions", self._line_number, self._actions)
            if self._file is not None and not self._replaced_bytes and "\ufffd" in line:
                self._replaced_bytes = True
                logger.debug(
                    "Replaced undecodable bytes in %s, first at line %d", self._source, self._line_number
                )

            try:
                action = decode_line(line.split(), self._tracker)
            except TraceFormatError as e:
                e.line_number = self._line_number
                raise
            except WakeStateError as e:
                raise WakeStateError(f"line {self._line_number}: {e}") from e

            if action is None:
                self._skipped += 1
                continue

            self._actions += 1
            if isinstance(action.event, Unsupported):
                self._note_unsupported(action.event.name)
            if self.first_timestamp is None:
                self.first_timestamp = action.timestamp
            self.last_timestamp = action.timestamp
            return TraceStep(
                action=action,
                states=self._tracker.snapshot(),
                first_timestamp=self.first_timestamp,
            )

        self._finish()
        return None

    def _note_unsupported(self, name: str) -> None:
        # Once per event name per trace
        if name not in self._unsupported:
            self._unsupported.add(name)
            logger.debug("No decoder for event %r in %s, recording as unsupported", name, self._source)

    def _finish(self) -> None:
        self.close()
        logger.info(
            "Finished %s: %d lines, %d actions, %d skipped, %.6fs traced",
            self._source,
            self._line_number,
            self._actions,
            self._skipped,
            self.duration,
        )

    def close(self) -> None:
        """Release the underlying file if this cursor opened it."""
        self._exhausted = True
        if self._file is not None:
            self._file.close()
            self._file = None

    def __iter__(self) -> Iterator[TraceStep]:
        return self

    def __next__(self) -> TraceStep:
        step = self.next()
        if step is None:
            raise StopIteration
        return step

    def __enter__(self) -> TraceCursor:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
