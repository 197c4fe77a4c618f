"""Migration causality classifier.

Attributes a sched_migrate_task to the most recent wake-path event of
the migrating task:

- Waking: the task is being woken, so the move is unblock placement.
- Woken: the task was already runnable, so the move is load balancing.
- NumaPending(src, dst): NUMA balancing if the move is exactly src -> dst,
  otherwise the intent is unrelated and the move is load balancing.

Placement and balancing are then split on/off socket by comparing the
(socket_id, range_id) slots of both cpus.

The classifier never mutates wake state. Repeated migrations under the
same stale state all classify alike until a new wake or NUMA event
replaces it.
"""

from __future__ import annotations

from collections.abc import Mapping

from schedlens.classify.models import MigrationCause
from schedlens.topology import TopologyMap
from schedlens.trace import SchedMigrateTask
from schedlens.wakestate import NumaPending, Waking, WakeState, Woken


def _by_socket(
    on_socket: MigrationCause,
    off_socket: MigrationCause,
    event: SchedMigrateTask,
    topology: TopologyMap,
) -> MigrationCause:
    # Ranges of one socket are distinct slots, so crossing them is off-socket
    if topology.get_socket(event.orig_cpu) == topology.get_socket(event.dest_cpu):
        return on_socket
    return off_socket


def classify_migration(
    event: SchedMigrateTask,
    states: Mapping[int, WakeState],
    topology: TopologyMap,
) -> MigrationCause:
    """Infer why a task migrated.

    Args:
        event: The decoded migrate-task event.
        states: Wake-state snapshot taken after the event was decoded.
        topology: Resolver used for the on/off-socket split.

    Returns:
        The migration cause, ``UNCLASSIFIED`` if the task has no wake state.

    Raises:
        TopologyError: If either cpu is outside the declared topology.
    """
    state = states.get(event.pid)
    if state is None:
        return MigrationCause.UNCLASSIFIED

    if isinstance(state, NumaPending):
        if (event.orig_cpu, event.dest_cpu) == (state.src_cpu, state.dst_cpu):
            return MigrationCause.NUMA_BALANCING
        state = Woken()

    if isinstance(state, Waking):
        return _by_socket(
            MigrationCause.ON_SOCKET_UNBLOCK_PLACEMENT,
            MigrationCause.OFF_SOCKET_UNBLOCK_PLACEMENT,
            event,
            topology,
        )

    return _by_socket(
        MigrationCause.ON_SOCKET_LOAD_BALANCING,
        MigrationCause.OFF_SOCKET_LOAD_BALANCING,
        event,
        topology,
    )
