"""Whole-trace analysis.

Drives a TraceCursor to the end, classifies every migration and collects
what a renderer needs: event counts, classified migrations and the
per-cpu run timeline.

Usage:
    settings = AnalysisSettings()
    for summary in analyze_files(["a.txt", "b.txt"], settings):
        print(summary.migration_counts)
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field
from os import PathLike
from typing import Any, Literal

from schedlens.analysis.timeline import CpuTimeline
from schedlens.classify import ClassifiedMigration, MigrationCause, classify_migration
from schedlens.config import AnalysisSettings
from schedlens.stream import TraceCursor
from schedlens.topology import TopologyError, TopologyMap
from schedlens.trace import EventKind, SchedMigrateTask

logger = logging.getLogger(__name__)

UnclassifiedPolicy = Literal["drop", "log", "surface"]


@dataclass
class TraceSummary:
    """Result of analysing one trace.

    Attributes:
        source: Name of the trace.
        cpu_count: CPU count from the trace header.
        first_timestamp: Timestamp of the first decoded line (None if empty).
        duration: Seconds between first and last decoded lines.
        event_counts: Number of actions per event kind.
        migrations: Migrations in trace order with their causes.
        timeline: Per-cpu run segments.
    """

    source: str
    cpu_count: int
    first_timestamp: float | None = None
    duration: float = 0.0
    event_counts: Counter[EventKind] = field(default_factory=Counter)
    migrations: list[ClassifiedMigration] = field(default_factory=list)
    timeline: CpuTimeline = field(default_factory=CpuTimeline)

    @property
    def migration_counts(self) -> Counter[MigrationCause]:
        return Counter(m.cause for m in self.migrations)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return {
            "source": self.source,
            "cpu_count": self.cpu_count,
            "first_timestamp": self.first_timestamp,
            "duration": self.duration,
            "event_counts": {kind.value: n for kind, n in self.event_counts.items()},
            "migration_counts": {cause.value: n for cause, n in self.migration_counts.items()},
            "migrations": [m.to_dict() for m in self.migrations],
            "timeline": self.timeline.to_dict(),
        }


def summarize_trace(
    cursor: TraceCursor,
    topology: TopologyMap,
    unclassified: UnclassifiedPolicy = "surface",
    source: str = "<lines>",
) -> TraceSummary:
    """Consume a cursor and build its summary.

    Args:
        cursor: Freshly opened cursor; it is read to exhaustion.
        topology: Machine topology the trace was recorded on.
        unclassified: Migrations without wake history are dropped,
            logged at debug level and dropped, or kept in the summary.
        source: Name recorded in the summary.

    Raises:
        TopologyError: If the trace has more cpus than the topology, or an
            event references a cpu outside it.
        TraceFormatError: If a line is malformed.
        WakeStateError: If sched_wakeup_new has no prior fork or wake.
    """
    if cursor.cpu_count > topology.cpu_count:
        raise TopologyError(
            f"Trace {source} reports {cursor.cpu_count} cpus, topology declares {topology.cpu_count}"
        )

    summary = TraceSummary(source=source, cpu_count=cursor.cpu_count)
    for step in cursor:
        action = step.action
        topology.get_socket(action.cpu)  # fail fast on cpus outside the topology
        summary.event_counts[action.event.kind] += 1
        summary.timeline.add(action, step.first_timestamp)

        if not isinstance(action.event, SchedMigrateTask):
            continue

        cause = classify_migration(action.event, step.states, topology)
        if cause is MigrationCause.UNCLASSIFIED and unclassified != "surface":
            if unclassified == "log":
                logger.debug(
                    "Unclassified migration of pid %d (%d -> %d) at %.6f",
                    action.event.pid,
                    action.event.orig_cpu,
                    action.event.dest_cpu,
                    action.timestamp,
                )
            continue
        summary.migrations.append(ClassifiedMigration(action=action, cause=cause))

    summary.first_timestamp = cursor.first_timestamp
    summary.duration = cursor.duration
    return summary


def analyze_file(path: str | PathLike[str], settings: AnalysisSettings) -> TraceSummary:
    """Open, decode and summarize one trace file."""
    topology = TopologyMap.from_settings(settings.machine)
    with TraceCursor.open(path) as cursor:
        return summarize_trace(cursor, topology, settings.unclassified, source=str(path))


def analyze_files(
    paths: Iterable[str | PathLike[str]], settings: AnalysisSettings
) -> list[TraceSummary]:
    """Analyse traces one after another, each with its own wake-state table.

    Stops at the first fatal error; no partial list is returned.
    """
    summaries = [analyze_file(path, settings) for path in paths]
    logger.info("Analysed %d traces", len(summaries))
    return summaries
