"""Shared test fixtures."""

import sys

import pytest

# Ensure src is in path
sys.path.insert(0, "src")

from schedlens import TopologyMap, WakeStateTracker


@pytest.fixture
def tracker():
    """Fresh, empty wake-state table."""
    return WakeStateTracker()


@pytest.fixture
def two_sockets():
    """8 cpus: socket 0 = 0-3, socket 1 = 4-7."""
    return TopologyMap.from_ranges(
        cpu_count=8,
        cores_per_socket=4,
        threads_per_core=1,
        numa_node_ranges=[[[0, 3]], [[4, 7]]],
    )


@pytest.fixture
def smt_sockets():
    """16 cpus, 2 sockets x 4 cores x 2 threads, kernel numbering interleaved.

    Socket 0 = 0-3 and 8-11, socket 1 = 4-7 and 12-15.
    """
    return TopologyMap.from_ranges(
        cpu_count=16,
        cores_per_socket=4,
        threads_per_core=2,
        numa_node_ranges=[[[0, 3], [8, 11]], [[4, 7], [12, 15]]],
        socket_order=True,
    )


@pytest.fixture
def ten_cpus():
    """10 cpus: socket 0 = 0-4, socket 1 = 5-9."""
    return TopologyMap.from_ranges(
        cpu_count=10,
        cores_per_socket=5,
        threads_per_core=1,
        numa_node_ranges=[[[0, 4]], [[5, 9]]],
    )


def trace_text(*lines: str, cpus: int = 4) -> list[str]:
    """Build trace lines with a cpus= header."""
    return [f"cpus={cpus}\n", *(f"{line}\n" for line in lines)]
