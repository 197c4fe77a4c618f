"""Tests for whole-trace summaries and batch analysis."""

import logging

import pytest
from conftest import trace_text

from schedlens import (
    AnalysisSettings,
    MachineSettings,
    MigrationCause,
    TopologyError,
    TopologyMap,
    TraceCursor,
    TraceFormatError,
    analyze_files,
    summarize_trace,
)
from schedlens.trace import EventKind

TRACE = [
    "bash-100 [001] 1.000000: sched_waking: comm=worker pid=10 prio=120 target_cpu=002",
    "bash-100 [001] 1.000100: sched_migrate_task: comm=worker pid=10 prio=120 orig_cpu=1 dest_cpu=2",
    "<idle>-0 [002] 1.000200: sched_wakeup: worker:10 [120] CPU:002",
    "<idle>-0 [002] 1.000300: sched_switch: swapper/2:0 [120] R ==> worker:10 [120]",
    "worker-10 [002] 1.500000: sched_switch: worker:10 [120] S ==> swapper/2:0 [120]",
    "ksoftirqd/3-30 [003] 1.600000: sched_migrate_task: comm=worker pid=10 prio=120 orig_cpu=2 dest_cpu=3",
    "ksoftirqd/3-30 [003] 1.700000: sched_migrate_task: comm=stranger pid=99 prio=120 orig_cpu=0 dest_cpu=1",
    "ksoftirqd/3-30 [003] 2.000000: irq_handler_entry: irq=30 name=eth0",
]


@pytest.fixture
def four_cpus():
    return TopologyMap.from_ranges(
        cpu_count=4, cores_per_socket=2, threads_per_core=1, numa_node_ranges=[[[0, 1]], [[2, 3]]]
    )


@pytest.fixture
def settings():
    return AnalysisSettings(
        machine=MachineSettings(
            cpus=4,
            sockets=2,
            cores_per_socket=2,
            numa_nodes=2,
            numa_node_ranges=[[[0, 1]], [[2, 3]]],
        )
    )


def test_summary_classifies_in_trace_order(four_cpus) -> None:
    summary = summarize_trace(TraceCursor(trace_text(*TRACE)), four_cpus)

    assert [m.cause for m in summary.migrations] == [
        MigrationCause.OFF_SOCKET_UNBLOCK_PLACEMENT,
        MigrationCause.ON_SOCKET_LOAD_BALANCING,
        MigrationCause.UNCLASSIFIED,
    ]
    assert summary.event_counts[EventKind.MIGRATE_TASK] == 3
    assert summary.event_counts[EventKind.UNSUPPORTED] == 1
    assert summary.first_timestamp == 1.0
    assert summary.duration == pytest.approx(1.0)
    assert summary.timeline.segments[2][0].pid == 10


@pytest.mark.parametrize(("policy", "expected"), [("surface", 3), ("drop", 2), ("log", 2)])
def test_unclassified_policy(four_cpus, policy, expected) -> None:
    summary = summarize_trace(TraceCursor(trace_text(*TRACE)), four_cpus, unclassified=policy)
    assert len(summary.migrations) == expected


def test_log_policy_emits_debug(four_cpus, caplog) -> None:
    with caplog.at_level(logging.DEBUG, logger="schedlens.analysis.summary"):
        summarize_trace(TraceCursor(trace_text(*TRACE)), four_cpus, unclassified="log")
    assert "pid 99" in caplog.text


def test_trace_larger_than_topology_is_fatal(four_cpus) -> None:
    with pytest.raises(TopologyError):
        summarize_trace(TraceCursor(trace_text(cpus=8)), four_cpus)


def test_event_on_unknown_cpu_is_fatal(four_cpus) -> None:
    line = "bash-1 [007] 1.0: sched_wake_idle_without_ipi: cpu=1"
    with pytest.raises(TopologyError):
        summarize_trace(TraceCursor(trace_text(line)), four_cpus)


def test_to_dict(four_cpus) -> None:
    data = summarize_trace(TraceCursor(trace_text(*TRACE)), four_cpus).to_dict()
    assert data["migration_counts"]["unclassified"] == 1
    assert data["event_counts"]["sched_switch"] == 2
    assert data["migrations"][0]["cause"] == "off_socket_unblock_placement"
    assert data["timeline"]["2"][0]["command"] == "worker"


def test_analyze_files_runs_each_trace_independently(tmp_path, settings) -> None:
    """Wake history from one file never leaks into the next."""
    first = tmp_path / "a.txt"
    first.write_text("".join(trace_text(TRACE[0])))
    second = tmp_path / "b.txt"
    second.write_text("".join(trace_text(TRACE[1])))

    summaries = analyze_files([first, second], settings)

    assert [s.source for s in summaries] == [str(first), str(second)]
    assert summaries[1].migration_counts == {MigrationCause.UNCLASSIFIED: 1}


def test_analyze_files_stops_on_fatal_error(tmp_path, settings) -> None:
    bad = tmp_path / "bad.txt"
    bad.write_text("cpus=4\nbash-1 [001] 1.0: sched_waking: comm=x pid=1 prio=1 target_cpu=?\n")
    with pytest.raises(TraceFormatError):
        analyze_files([bad], settings)
