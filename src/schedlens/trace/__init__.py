"""Trace tokenizer and event decoder.

Usage:
    from schedlens.trace import decode_line, SchedMigrateTask
    from schedlens.wakestate import WakeStateTracker

    tracker = WakeStateTracker()
    action = decode_line("bash-42 [001] 10.5: sched_wake_idle_without_ipi: cpu=3".split(), tracker)
"""

from schedlens.trace.decoder import MIN_TOKENS, decode_event, decode_line
from schedlens.trace.events import (
    Action,
    Event,
    EventKind,
    NumaArgs,
    SchedMigrateTask,
    SchedMoveNuma,
    SchedProcessExec,
    SchedProcessExit,
    SchedProcessFork,
    SchedProcessFree,
    SchedProcessWait,
    SchedStickNuma,
    SchedSwapNuma,
    SchedSwitch,
    SchedWakeIdleNoIpi,
    SchedWakeup,
    SchedWakeupNew,
    SchedWaking,
    TaskRef,
    Unsupported,
)
from schedlens.trace.tokenizer import TraceFormatError, split_compound, take_keyed

__all__ = [
    # Decoding
    "MIN_TOKENS",
    "decode_event",
    "decode_line",
    "split_compound",
    "take_keyed",
    "TraceFormatError",
    # Records
    "Action",
    "Event",
    "EventKind",
    "NumaArgs",
    "TaskRef",
    # Event variants
    "SchedMigrateTask",
    "SchedMoveNuma",
    "SchedProcessExec",
    "SchedProcessExit",
    "SchedProcessFork",
    "SchedProcessFree",
    "SchedProcessWait",
    "SchedStickNuma",
    "SchedSwapNuma",
    "SchedSwitch",
    "SchedWakeIdleNoIpi",
    "SchedWakeup",
    "SchedWakeupNew",
    "SchedWaking",
    "Unsupported",
]
