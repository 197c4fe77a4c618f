"""Per-task wake-path states.

A task's entry is overwritten, never merged, by each relevant event.
The entry answers one question for the classifier: if this task migrates
next, what most recently put it in motion?

Usage:
    state = Waking(origin_cpu=1, target_cpu=2)
    state = Woken()
    state = NumaPending(src_cpu=5, dst_cpu=9)
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Waking:
    """A wakeup is in flight: the waker on ``origin_cpu`` targeted ``target_cpu``.

    Also seeded for freshly forked children, with both cpus set to the
    forking cpu.
    """

    origin_cpu: int
    target_cpu: int


@dataclass(frozen=True, slots=True)
class Woken:
    """The task has been woken and is runnable; later moves are balancer driven."""


@dataclass(frozen=True, slots=True)
class NumaPending:
    """The NUMA balancer announced a move of this task from src_cpu to dst_cpu."""

    src_cpu: int
    dst_cpu: int


WakeState = Waking | Woken | NumaPending
"""Exactly one of the three per-task states."""
