"""Decoded scheduler events.

One frozen dataclass per supported tracepoint, plus ``Unsupported`` for
anything else. ``Event`` is the closed union of them; consumers dispatch
with ``isinstance`` or ``match``.

Usage:
    action = decode_line(tokens, tracker)
    if isinstance(action.event, SchedMigrateTask):
        cause = classify_migration(action.event, tracker.snapshot(), topology)
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, ClassVar


class EventKind(Enum):
    """Tracepoint names the decoder understands."""

    WAKING = "sched_waking"
    WAKE_IDLE_NO_IPI = "sched_wake_idle_without_ipi"
    WAKEUP = "sched_wakeup"
    WAKEUP_NEW = "sched_wakeup_new"
    MIGRATE_TASK = "sched_migrate_task"
    SWITCH = "sched_switch"
    PROCESS_FREE = "sched_process_free"
    PROCESS_EXEC = "sched_process_exec"
    PROCESS_FORK = "sched_process_fork"
    PROCESS_WAIT = "sched_process_wait"
    PROCESS_EXIT = "sched_process_exit"
    SWAP_NUMA = "sched_swap_numa"
    STICK_NUMA = "sched_stick_numa"
    MOVE_NUMA = "sched_move_numa"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True, slots=True)
class TaskRef:
    """Task identity as printed inside an event body."""

    command: str
    pid: int
    priority: int


@dataclass(frozen=True, slots=True)
class NumaArgs:
    """One side of a NUMA balancing event. cpu and nid may be -1."""

    pid: int
    tgid: int
    ngid: int
    cpu: int
    nid: int


@dataclass(frozen=True, slots=True)
class SchedWaking:
    kind: ClassVar[EventKind] = EventKind.WAKING

    task: TaskRef
    target_cpu: int


@dataclass(frozen=True, slots=True)
class SchedWakeIdleNoIpi:
    kind: ClassVar[EventKind] = EventKind.WAKE_IDLE_NO_IPI

    cpu: int


@dataclass(frozen=True, slots=True)
class SchedWakeup:
    """Task became runnable.

    Attributes:
        prev_cpu: CPU that issued the preceding sched_waking, if one was seen.
    """

    kind: ClassVar[EventKind] = EventKind.WAKEUP

    task: TaskRef
    cpu: int
    prev_cpu: int | None = None


@dataclass(frozen=True, slots=True)
class SchedWakeupNew:
    """First wakeup of a freshly forked task.

    Attributes:
        parent_cpu: CPU recorded when the task was forked.
    """

    kind: ClassVar[EventKind] = EventKind.WAKEUP_NEW

    task: TaskRef
    cpu: int
    parent_cpu: int


@dataclass(frozen=True, slots=True)
class SchedMigrateTask:
    kind: ClassVar[EventKind] = EventKind.MIGRATE_TASK

    task: TaskRef
    orig_cpu: int
    dest_cpu: int

    @property
    def pid(self) -> int:
        return self.task.pid


@dataclass(frozen=True, slots=True)
class SchedSwitch:
    """Context switch from ``prev`` to ``next``.

    Attributes:
        prev_state: Scheduler state letter(s) of the outgoing task (R, S, D, ...).
    """

    kind: ClassVar[EventKind] = EventKind.SWITCH

    prev: TaskRef
    prev_state: str
    next: TaskRef


@dataclass(frozen=True, slots=True)
class SchedProcessFree:
    kind: ClassVar[EventKind] = EventKind.PROCESS_FREE

    task: TaskRef


@dataclass(frozen=True, slots=True)
class SchedProcessExec:
    kind: ClassVar[EventKind] = EventKind.PROCESS_EXEC

    filename: str
    pid: int
    old_pid: int


@dataclass(frozen=True, slots=True)
class SchedProcessFork:
    kind: ClassVar[EventKind] = EventKind.PROCESS_FORK

    command: str
    pid: int
    child_command: str
    child_pid: int


@dataclass(frozen=True, slots=True)
class SchedProcessWait:
    kind: ClassVar[EventKind] = EventKind.PROCESS_WAIT

    task: TaskRef


@dataclass(frozen=True, slots=True)
class SchedProcessExit:
    kind: ClassVar[EventKind] = EventKind.PROCESS_EXIT

    task: TaskRef


@dataclass(frozen=True, slots=True)
class SchedSwapNuma:
    kind: ClassVar[EventKind] = EventKind.SWAP_NUMA

    src: NumaArgs
    dest: NumaArgs


@dataclass(frozen=True, slots=True)
class SchedStickNuma:
    kind: ClassVar[EventKind] = EventKind.STICK_NUMA

    src: NumaArgs
    dest: NumaArgs


@dataclass(frozen=True, slots=True)
class SchedMoveNuma:
    """Single task moved by the NUMA balancer. ``dest`` repeats the task ids."""

    kind: ClassVar[EventKind] = EventKind.MOVE_NUMA

    src: NumaArgs
    dest: NumaArgs


@dataclass(frozen=True, slots=True)
class Unsupported:
    """Any tracepoint without a decoder. The raw name is kept for reporting."""

    kind: ClassVar[EventKind] = EventKind.UNSUPPORTED

    name: str


Event = (
    SchedWaking
    | SchedWakeIdleNoIpi
    | SchedWakeup
    | SchedWakeupNew
    | SchedMigrateTask
    | SchedSwitch
    | SchedProcessFree
    | SchedProcessExec
    | SchedProcessFork
    | SchedProcessWait
    | SchedProcessExit
    | SchedSwapNuma
    | SchedStickNuma
    | SchedMoveNuma
    | Unsupported
)
"""Closed union of every decoded event variant."""


@dataclass(frozen=True, slots=True)
class Action:
    """One decoded trace line.

    Attributes:
        process: Command name of the task running when the event fired.
        pid: Pid of that task.
        cpu: CPU the event was recorded on.
        timestamp: Trace clock in seconds.
        event: Event-specific payload.
    """

    process: str
    pid: int
    cpu: int
    timestamp: float
    event: Event

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return {
            "process": self.process,
            "pid": self.pid,
            "cpu": self.cpu,
            "timestamp": self.timestamp,
            "event": self.event.kind.value,
            "fields": asdict(self.event),
        }
