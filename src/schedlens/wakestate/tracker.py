"""Wake-state tracker.

WakeStateTracker is the only owner of the per-pid table. The decoder
writes to it; everything else reads through ``snapshot()``, which returns
a detached read-only copy so a consumer holding it is unaffected by the
next decoded line. The copy is reused until the table next changes, so
lines that do not touch wake state share one snapshot.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from schedlens.errors import SchedLensError
from schedlens.wakestate.models import NumaPending, Waking, WakeState, Woken


class WakeStateError(SchedLensError):
    """Raised when an event requires wake history that is not there."""

    pass


class WakeStateTracker:
    """Last-write-wins table of pid -> WakeState.

    Absence of a pid means its wake provenance is unknown.
    """

    def __init__(self) -> None:
        self._states: dict[int, WakeState] = {}
        self._snapshot: Mapping[int, WakeState] | None = None

    def __len__(self) -> int:
        return len(self._states)

    def __contains__(self, pid: object) -> bool:
        return pid in self._states

    def get(self, pid: int) -> WakeState | None:
        """Current state of a pid, or None if nothing relevant was seen."""
        return self._states.get(pid)

    def _set(self, pid: int, state: WakeState) -> None:
        self._states[pid] = state
        self._snapshot = None

    def record_waking(self, pid: int, origin_cpu: int, target_cpu: int) -> None:
        """sched_waking: a waker on ``origin_cpu`` chose ``target_cpu``."""
        self._set(pid, Waking(origin_cpu=origin_cpu, target_cpu=target_cpu))

    def record_fork(self, child_pid: int, cpu: int) -> None:
        """sched_process_fork: seed the child as waking on the forking cpu."""
        self._set(child_pid, Waking(origin_cpu=cpu, target_cpu=cpu))

    def record_wakeup(self, pid: int) -> WakeState | None:
        """sched_wakeup: mark the task woken.

        Returns:
            The state that was replaced, so the caller can recover the
            waker cpu as a ``prev_cpu`` hint.
        """
        previous = self._states.get(pid)
        self._set(pid, Woken())
        return previous

    def record_wakeup_new(self, pid: int) -> Waking:
        """sched_wakeup_new: consume the fork-seeded Waking state.

        Returns:
            The Waking state recorded at fork time.

        Raises:
            WakeStateError: If the pid has no Waking state (no fork was seen).
        """
        previous = self._states.get(pid)
        if not isinstance(previous, Waking):
            raise WakeStateError(
                f"sched_wakeup_new for pid {pid} without prior fork/wake (state: {previous!r})"
            )
        self._set(pid, Woken())
        return previous

    def record_numa(self, pid: int, src_cpu: int, dst_cpu: int) -> None:
        """sched_swap_numa / sched_move_numa: the balancer intends src_cpu -> dst_cpu."""
        self._set(pid, NumaPending(src_cpu=src_cpu, dst_cpu=dst_cpu))

    def snapshot(self) -> Mapping[int, WakeState]:
        """Read-only copy of the table, detached from later updates.

        Returns the same object until a ``record_*`` call changes the table.
        """
        if self._snapshot is None:
            self._snapshot = MappingProxyType(dict(self._states))
        return self._snapshot
