"""CPU to socket resolution and socket-grouped layout.

TopologyMap is built once from the machine description and never mutated.
Every cpu id below ``cpu_count`` is resolved eagerly, so a topology that
leaves a cpu uncovered fails at construction rather than mid-scan.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from schedlens.errors import SchedLensError

if TYPE_CHECKING:
    from schedlens.config import MachineSettings


class TopologyError(SchedLensError):
    """Raised when a cpu id is not covered by the declared topology."""

    pass


@dataclass(frozen=True, slots=True)
class SocketSlot:
    """Location of a cpu in the declared topology.

    Attributes:
        socket_id: Index of the socket whose ranges contain the cpu.
        range_id: Index of the matching range within that socket.
    """

    socket_id: int
    range_id: int


@dataclass(frozen=True, slots=True)
class TopologyMap:
    """Immutable socket/slot lookup for every cpu of a machine.

    Args:
        cpu_count: Number of logical CPUs.
        cores_per_socket: Physical cores per socket.
        threads_per_core: Hardware threads per core.
        numa_node_ranges: Per socket, ordered inclusive (low, high) cpu ranges.
        socket_order: Group cpu positions by socket when True, identity otherwise.

    Raises:
        TopologyError: If a cpu in ``0..cpu_count`` falls outside every range,
            or the socket-grouped layout maps two cpus to the same position.
    """

    cpu_count: int
    cores_per_socket: int
    threads_per_core: int
    numa_node_ranges: tuple[tuple[tuple[int, int], ...], ...]
    socket_order: bool = False
    _slots: tuple[SocketSlot, ...] = field(init=False, repr=False, compare=False)
    _layout: tuple[int, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        slots = tuple(self._find_slot(cpu) for cpu in range(self.cpu_count))
        object.__setattr__(self, "_slots", slots)

        if not self.socket_order:
            layout = tuple(range(self.cpu_count))
        else:
            layout = tuple(self._grouped_position(cpu, slots[cpu]) for cpu in range(self.cpu_count))
            if sorted(layout) != list(range(self.cpu_count)):
                raise TopologyError(
                    "Socket-grouped layout is not a permutation of "
                    f"0..{self.cpu_count}: ranges must be aligned to cores_per_socket"
                )
        object.__setattr__(self, "_layout", layout)

    @classmethod
    def from_ranges(
        cls,
        cpu_count: int,
        cores_per_socket: int,
        threads_per_core: int,
        numa_node_ranges: Sequence[Sequence[Sequence[int]]],
        socket_order: bool = False,
    ) -> TopologyMap:
        """Build from nested lists as they appear in a config file."""
        ranges = tuple(
            tuple((int(low), int(high)) for low, high in socket_ranges)
            for socket_ranges in numa_node_ranges
        )
        return cls(
            cpu_count=cpu_count,
            cores_per_socket=cores_per_socket,
            threads_per_core=threads_per_core,
            numa_node_ranges=ranges,
            socket_order=socket_order,
        )

    @classmethod
    def from_settings(cls, machine: MachineSettings) -> TopologyMap:
        """Build from validated machine settings."""
        return cls.from_ranges(
            cpu_count=machine.cpus,
            cores_per_socket=machine.cores_per_socket,
            threads_per_core=machine.threads_per_core,
            numa_node_ranges=machine.numa_node_ranges,
            socket_order=machine.socket_order,
        )

    def _find_slot(self, cpu: int) -> SocketSlot:
        # First match in declaration order wins
        for socket_id, socket_ranges in enumerate(self.numa_node_ranges):
            for range_id, (low, high) in enumerate(socket_ranges):
                if low <= cpu <= high:
                    return SocketSlot(socket_id=socket_id, range_id=range_id)
        raise TopologyError(f"CPU {cpu} is outside every declared numa_node_range")

    def _grouped_position(self, cpu: int, slot: SocketSlot) -> int:
        return (
            slot.socket_id * self.cores_per_socket * self.threads_per_core
            + cpu % self.cores_per_socket
            + slot.range_id * self.cores_per_socket
        )

    def _check_cpu(self, cpu: int) -> None:
        if not 0 <= cpu < self.cpu_count:
            raise TopologyError(f"CPU {cpu} is outside 0..{self.cpu_count}")

    def get_socket(self, cpu: int) -> SocketSlot:
        """Resolve the socket and range containing a cpu.

        Args:
            cpu: Kernel cpu id.

        Returns:
            The first matching (socket_id, range_id) in declaration order.

        Raises:
            TopologyError: If the cpu is not covered by the topology.
        """
        self._check_cpu(cpu)
        return self._slots[cpu]

    def layout(self, cpu: int) -> int:
        """Display position of a cpu, contiguous per socket when socket_order is on."""
        self._check_cpu(cpu)
        return self._layout[cpu]
