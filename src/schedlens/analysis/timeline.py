"""Per-CPU run timeline built from context switches.

Between two consecutive sched_switch events on a cpu, the task that ran
is the ``prev`` task of the later switch. Time before the first switch
on a cpu has no known owner and produces no segment.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from schedlens.trace import Action, SchedSwitch


@dataclass(frozen=True, slots=True)
class RunSegment:
    """A task occupying a cpu, in seconds relative to the trace start."""

    start: float
    end: float
    pid: int
    command: str

    @property
    def length(self) -> float:
        return self.end - self.start

    def to_dict(self) -> dict[str, Any]:
        return {"start": self.start, "end": self.end, "pid": self.pid, "command": self.command}


@dataclass
class CpuTimeline:
    """Accumulates run segments per cpu from a stream of actions."""

    segments: dict[int, list[RunSegment]] = field(default_factory=dict)
    _last_switch: dict[int, float] = field(default_factory=dict, repr=False)

    def add(self, action: Action, first_timestamp: float) -> None:
        """Feed one action. Non-switch actions are ignored."""
        event = action.event
        if not isinstance(event, SchedSwitch):
            return

        now = action.timestamp - first_timestamp
        started = self._last_switch.get(action.cpu)
        if started is not None:
            segment = RunSegment(start=started, end=now, pid=event.prev.pid, command=event.prev.command)
            self.segments.setdefault(action.cpu, []).append(segment)
        self._last_switch[action.cpu] = now

    def cpus(self) -> list[int]:
        """CPUs with at least one segment, ascending."""
        return sorted(self.segments)

    def busy_time(self, cpu: int) -> float:
        """Total non-idle time on a cpu (pid 0 is the idle task)."""
        return sum(s.length for s in self.segments.get(cpu, []) if s.pid != 0)

    def to_dict(self) -> dict[str, Any]:
        return {str(cpu): [s.to_dict() for s in self.segments[cpu]] for cpu in self.cpus()}
