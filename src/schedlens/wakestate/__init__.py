"""Per-task wake-state tracking.

Usage:
    from schedlens.wakestate import WakeStateTracker, Waking

    tracker = WakeStateTracker()
    tracker.record_waking(pid=10, origin_cpu=1, target_cpu=2)
    assert tracker.snapshot()[10] == Waking(1, 2)
"""

from schedlens.wakestate.models import NumaPending, Waking, WakeState, Woken
from schedlens.wakestate.tracker import WakeStateError, WakeStateTracker

__all__ = [
    "NumaPending",
    "Waking",
    "WakeState",
    "WakeStateError",
    "WakeStateTracker",
    "Woken",
]
