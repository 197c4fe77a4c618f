"""Migration cause labels."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from schedlens.trace import Action, SchedMigrateTask


class MigrationCause(Enum):
    """Why a task moved between CPUs."""

    ON_SOCKET_UNBLOCK_PLACEMENT = "on_socket_unblock_placement"
    """Placed on a new cpu in the same socket while being woken."""

    OFF_SOCKET_UNBLOCK_PLACEMENT = "off_socket_unblock_placement"
    """Placed on a cpu in another socket while being woken."""

    ON_SOCKET_LOAD_BALANCING = "on_socket_load_balancing"
    """Runnable task pulled within its socket by the load balancer."""

    OFF_SOCKET_LOAD_BALANCING = "off_socket_load_balancing"
    """Runnable task pulled across sockets by the load balancer."""

    NUMA_BALANCING = "numa_balancing"
    """Move announced by a preceding sched_swap_numa / sched_move_numa."""

    UNCLASSIFIED = "unclassified"
    """No wake history for the task; the cause cannot be attributed."""

    @property
    def is_unblock_placement(self) -> bool:
        return self in (
            MigrationCause.ON_SOCKET_UNBLOCK_PLACEMENT,
            MigrationCause.OFF_SOCKET_UNBLOCK_PLACEMENT,
        )

    @property
    def is_load_balancing(self) -> bool:
        return self in (
            MigrationCause.ON_SOCKET_LOAD_BALANCING,
            MigrationCause.OFF_SOCKET_LOAD_BALANCING,
        )


@dataclass(frozen=True, slots=True)
class ClassifiedMigration:
    """A migrate-task action paired with its inferred cause."""

    action: Action
    cause: MigrationCause

    @property
    def event(self) -> SchedMigrateTask:
        return self.action.event  # type: ignore[return-value]

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return {
            "timestamp": self.action.timestamp,
            "pid": self.event.pid,
            "command": self.event.task.command,
            "orig_cpu": self.event.orig_cpu,
            "dest_cpu": self.event.dest_cpu,
            "cause": self.cause.value,
        }
