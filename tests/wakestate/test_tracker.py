"""Tests for the wake-state tracker.

Why these tests exist:
- Entries are last-write-wins, one per pid
- Snapshots must be read-only and detached from later updates
"""

import pytest

from schedlens.wakestate import NumaPending, Waking, WakeStateError, Woken


def test_empty_tracker_has_no_provenance(tracker) -> None:
    assert tracker.get(1) is None
    assert 1 not in tracker
    assert len(tracker) == 0


def test_last_write_wins(tracker) -> None:
    """Each relevant event replaces the previous state, never merges."""
    tracker.record_waking(10, origin_cpu=1, target_cpu=2)
    tracker.record_numa(10, src_cpu=2, dst_cpu=3)
    assert tracker.get(10) == NumaPending(2, 3)

    previous = tracker.record_wakeup(10)
    assert previous == NumaPending(2, 3)
    assert tracker.get(10) == Woken()
    assert len(tracker) == 1


def test_fork_seeds_waking_on_forking_cpu(tracker) -> None:
    tracker.record_fork(20, cpu=4)
    assert tracker.get(20) == Waking(origin_cpu=4, target_cpu=4)


def test_wakeup_new_consumes_waking(tracker) -> None:
    tracker.record_fork(20, cpu=4)
    assert tracker.record_wakeup_new(20) == Waking(4, 4)
    assert tracker.get(20) == Woken()


@pytest.mark.parametrize("setup", [None, "woken", "numa"])
def test_wakeup_new_requires_waking(tracker, setup) -> None:
    if setup == "woken":
        tracker.record_wakeup(20)
    elif setup == "numa":
        tracker.record_numa(20, 1, 2)

    with pytest.raises(WakeStateError):
        tracker.record_wakeup_new(20)


def test_snapshot_is_detached(tracker) -> None:
    """CRITICAL: a snapshot does not change when the tracker does.

    Why: consumers inspect a step's states while the next line is decoded.
    """
    tracker.record_waking(10, 1, 2)
    snapshot = tracker.snapshot()

    tracker.record_wakeup(10)
    tracker.record_fork(11, 0)

    assert snapshot == {10: Waking(1, 2)}
    assert 11 not in snapshot


def test_snapshot_is_read_only(tracker) -> None:
    tracker.record_waking(10, 1, 2)
    snapshot = tracker.snapshot()
    with pytest.raises(TypeError):
        snapshot[10] = Woken()  # type: ignore[index]


def test_snapshot_reused_until_table_changes(tracker) -> None:
    """Reads without an intervening record_* call share one snapshot.

    Why: switch and migrate lines leave the table untouched; copying it for
    every decoded line would make a scan O(lines x pids).
    """
    tracker.record_waking(10, 1, 2)
    first = tracker.snapshot()
    assert tracker.snapshot() is first

    tracker.record_wakeup(10)
    second = tracker.snapshot()
    assert second is not first
    assert first == {10: Waking(1, 2)}
    assert second == {10: Woken()}
