"""Line decoder: whitespace tokens -> Action.

Header layout::

    <command>-<pid> [<cpu>] <timestamp>: <event_name>: <body...>

The body is decoded by one function per tracepoint. Decoding also applies
the event's effect on the wake-state table, so it is not pure: the same
line fed to two independent trackers yields equal Actions but updates
each tracker separately.

Usage:
    tracker = WakeStateTracker()
    action = decode_line(line.split(), tracker)
"""

from __future__ import annotations

from collections.abc import Sequence

from schedlens.trace.events import (
    Action,
    Event,
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
from schedlens.trace.tokenizer import (
    parse_cpu_bracket,
    parse_priority,
    parse_signed,
    parse_timestamp,
    parse_unsigned,
    split_compound,
    take_keyed,
    token_at,
)
from schedlens.wakestate import Waking, WakeStateTracker

MIN_TOKENS = 3
"""Lines with fewer whitespace tokens are skipped, not decoded."""


def _keyed_task(tokens: Sequence[str], index: int) -> tuple[TaskRef, int]:
    """``comm=<name> pid=<pid> prio=<prio>`` -> TaskRef and index of the prio token."""
    command, pid, index = take_keyed(tokens, index, "comm=", "pid=")
    priority = parse_signed(token_at(tokens, index + 1), "prio=")
    return TaskRef(command=command, pid=pid, priority=priority), index + 1


def _compound_task(tokens: Sequence[str], index: int) -> tuple[TaskRef, int]:
    """``<name>:<pid> [<prio>]`` -> TaskRef and index of the prio token."""
    command, pid, index = split_compound(tokens, index, ":")
    priority = parse_priority(token_at(tokens, index + 1))
    # Some report versions print sched_wakeup as comm=<name>:<pid>
    command = command.removeprefix("comm=")
    return TaskRef(command=command, pid=pid, priority=priority), index + 1


def _numa_args(tokens: Sequence[str], index: int, prefix: str) -> NumaArgs:
    return NumaArgs(
        pid=parse_unsigned(token_at(tokens, index), f"{prefix}pid="),
        tgid=parse_unsigned(token_at(tokens, index + 1), f"{prefix}tgid="),
        ngid=parse_unsigned(token_at(tokens, index + 2), f"{prefix}ngid="),
        cpu=parse_signed(token_at(tokens, index + 3), f"{prefix}cpu="),
        nid=parse_signed(token_at(tokens, index + 4), f"{prefix}nid="),
    )


def _decode_waking(tokens: Sequence[str], index: int, cpu: int, tracker: WakeStateTracker) -> Event:
    task, index = _keyed_task(tokens, index)
    target_cpu = parse_unsigned(token_at(tokens, index + 1), "target_cpu=")
    tracker.record_waking(task.pid, origin_cpu=cpu, target_cpu=target_cpu)
    return SchedWaking(task=task, target_cpu=target_cpu)


def _decode_wakeup(tokens: Sequence[str], index: int, tracker: WakeStateTracker) -> Event:
    task, index = _compound_task(tokens, index)
    target = parse_unsigned(token_at(tokens, index + 1), "CPU:")
    previous = tracker.record_wakeup(task.pid)
    prev_cpu = previous.origin_cpu if isinstance(previous, Waking) else None
    return SchedWakeup(task=task, cpu=target, prev_cpu=prev_cpu)


def _decode_wakeup_new(tokens: Sequence[str], index: int, tracker: WakeStateTracker) -> Event:
    task, index = _compound_task(tokens, index)
    target = parse_unsigned(token_at(tokens, index + 1), "CPU:")
    forked = tracker.record_wakeup_new(task.pid)
    return SchedWakeupNew(task=task, cpu=target, parent_cpu=forked.target_cpu)


def _decode_migrate(tokens: Sequence[str], index: int) -> Event:
    task, index = _keyed_task(tokens, index)
    orig_cpu = parse_unsigned(token_at(tokens, index + 1), "orig_cpu=")
    dest_cpu = parse_unsigned(token_at(tokens, index + 2), "dest_cpu=")
    return SchedMigrateTask(task=task, orig_cpu=orig_cpu, dest_cpu=dest_cpu)


def _decode_switch(tokens: Sequence[str], index: int) -> Event:
    # prev_comm:prev_pid [prio] STATE ==> next_comm:next_pid [prio]
    prev, index = _compound_task(tokens, index)
    prev_state = token_at(tokens, index + 1)
    next_task, _ = _compound_task(tokens, index + 3)
    return SchedSwitch(prev=prev, prev_state=prev_state, next=next_task)


def _decode_exec(tokens: Sequence[str], index: int) -> Event:
    filename, pid, index = take_keyed(tokens, index, "filename=", "pid=")
    old_pid = parse_unsigned(token_at(tokens, index + 1), "old_pid=")
    return SchedProcessExec(filename=filename, pid=pid, old_pid=old_pid)


def _decode_fork(tokens: Sequence[str], index: int, cpu: int, tracker: WakeStateTracker) -> Event:
    command, pid, index = take_keyed(tokens, index, "comm=", "pid=")
    child_command, child_pid, _ = take_keyed(tokens, index + 1, "child_comm=", "child_pid=")
    tracker.record_fork(child_pid, cpu)
    return SchedProcessFork(command=command, pid=pid, child_command=child_command, child_pid=child_pid)


def _decode_swap_numa(tokens: Sequence[str], index: int, tracker: WakeStateTracker) -> Event:
    src = _numa_args(tokens, index, "src_")
    dest = _numa_args(tokens, index + 5, "dst_")
    # Both tasks trade places
    tracker.record_numa(src.pid, src_cpu=src.cpu, dst_cpu=dest.cpu)
    tracker.record_numa(dest.pid, src_cpu=dest.cpu, dst_cpu=src.cpu)
    return SchedSwapNuma(src=src, dest=dest)


def _decode_stick_numa(tokens: Sequence[str], index: int) -> Event:
    return SchedStickNuma(src=_numa_args(tokens, index, "src_"), dest=_numa_args(tokens, index + 5, "dst_"))


def _decode_move_numa(tokens: Sequence[str], index: int, tracker: WakeStateTracker) -> Event:
    pid = parse_unsigned(token_at(tokens, index), "pid=")
    tgid = parse_unsigned(token_at(tokens, index + 1), "tgid=")
    ngid = parse_unsigned(token_at(tokens, index + 2), "ngid=")
    src = NumaArgs(
        pid=pid,
        tgid=tgid,
        ngid=ngid,
        cpu=parse_signed(token_at(tokens, index + 3), "src_cpu="),
        nid=parse_signed(token_at(tokens, index + 4), "src_nid="),
    )
    dest = NumaArgs(
        pid=pid,
        tgid=tgid,
        ngid=ngid,
        cpu=parse_signed(token_at(tokens, index + 5), "dst_cpu="),
        nid=parse_signed(token_at(tokens, index + 6), "dst_nid="),
    )
    tracker.record_numa(pid, src_cpu=src.cpu, dst_cpu=dest.cpu)
    return SchedMoveNuma(src=src, dest=dest)


def decode_event(
    name: str, tokens: Sequence[str], index: int, cpu: int, tracker: WakeStateTracker
) -> Event:
    """Decode an event body starting at ``tokens[index]``.

    Args:
        name: Tracepoint name without the trailing colon.
        tokens: Whitespace-split line.
        index: Position of the first body token.
        cpu: CPU column of the line (the cpu the event fired on).
        tracker: Wake-state table to update.

    Returns:
        The decoded event, or ``Unsupported`` for unknown tracepoints.

    Raises:
        TraceFormatError: If a field of a known tracepoint is missing or not numeric.
        WakeStateError: If sched_wakeup_new has no prior Waking state.
    """
    match name:
        case "sched_waking":
            return _decode_waking(tokens, index, cpu, tracker)
        case "sched_wake_idle_without_ipi":
            return SchedWakeIdleNoIpi(cpu=parse_unsigned(token_at(tokens, index), "cpu="))
        case "sched_wakeup":
            return _decode_wakeup(tokens, index, tracker)
        case "sched_wakeup_new":
            return _decode_wakeup_new(tokens, index, tracker)
        case "sched_migrate_task":
            return _decode_migrate(tokens, index)
        case "sched_switch":
            return _decode_switch(tokens, index)
        case "sched_process_free":
            task, _ = _keyed_task(tokens, index)
            return SchedProcessFree(task=task)
        case "sched_process_exec":
            return _decode_exec(tokens, index)
        case "sched_process_fork":
            return _decode_fork(tokens, index, cpu, tracker)
        case "sched_process_wait":
            task, _ = _keyed_task(tokens, index)
            return SchedProcessWait(task=task)
        case "sched_process_exit":
            task, _ = _keyed_task(tokens, index)
            return SchedProcessExit(task=task)
        case "sched_swap_numa":
            return _decode_swap_numa(tokens, index, tracker)
        case "sched_stick_numa":
            return _decode_stick_numa(tokens, index)
        case "sched_move_numa":
            return _decode_move_numa(tokens, index, tracker)
        case _:
            return Unsupported(name=name)


def decode_line(tokens: Sequence[str], tracker: WakeStateTracker) -> Action | None:
    """Decode one whitespace-split trace line.

    Args:
        tokens: The line split on whitespace.
        tracker: Wake-state table updated by wake, fork and NUMA events.

    Returns:
        The decoded Action, or None if the line has fewer than three tokens.

    Raises:
        TraceFormatError: If the header or a known event body is malformed.
        WakeStateError: If sched_wakeup_new has no prior Waking state.
    """
    if len(tokens) < MIN_TOKENS:
        return None

    process, pid, index = split_compound(tokens, 0, "-")
    cpu = parse_cpu_bracket(token_at(tokens, index + 1))
    timestamp = parse_timestamp(token_at(tokens, index + 2))
    name = token_at(tokens, index + 3).removesuffix(":")

    event = decode_event(name, tokens, index + 4, cpu, tracker)
    return Action(process=process, pid=pid, cpu=cpu, timestamp=timestamp, event=event)
