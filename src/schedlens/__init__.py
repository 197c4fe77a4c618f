"""SchedLens: scheduler trace decoding and migration cause analysis.

Usage:
    from schedlens import TopologyMap, TraceCursor, SchedMigrateTask, classify_migration

    topology = TopologyMap.from_settings(settings.machine)
    with TraceCursor.open("trace.txt") as cursor:
        for step in cursor:
            if isinstance(step.action.event, SchedMigrateTask):
                cause = classify_migration(step.action.event, step.states, topology)
"""

__version__ = "0.1.0"

from schedlens.errors import SchedLensError

# Topology
from schedlens.topology import SocketSlot, TopologyError, TopologyMap

# Decoding
from schedlens.trace import (
    Action,
    Event,
    EventKind,
    SchedMigrateTask,
    TraceFormatError,
    decode_line,
)

# Wake state
from schedlens.wakestate import (
    NumaPending,
    Waking,
    WakeState,
    WakeStateError,
    WakeStateTracker,
    Woken,
)

# Classification
from schedlens.classify import ClassifiedMigration, MigrationCause, classify_migration

# Stream driver
from schedlens.stream import TraceCursor, TraceHeaderError, TraceStep

# Configuration
from schedlens.config import AnalysisSettings, MachineSettings

# Analysis
from schedlens.analysis import (
    CpuTimeline,
    RunSegment,
    TraceSummary,
    analyze_file,
    analyze_files,
    summarize_trace,
)

__all__ = [
    # Version
    "__version__",
    # Errors
    "SchedLensError",
    "TopologyError",
    "TraceFormatError",
    "TraceHeaderError",
    "WakeStateError",
    # Topology
    "SocketSlot",
    "TopologyMap",
    # Decoding
    "Action",
    "Event",
    "EventKind",
    "SchedMigrateTask",
    "decode_line",
    # Wake state
    "NumaPending",
    "Waking",
    "WakeState",
    "WakeStateTracker",
    "Woken",
    # Classification
    "ClassifiedMigration",
    "MigrationCause",
    "classify_migration",
    # Stream
    "TraceCursor",
    "TraceStep",
    # Config
    "AnalysisSettings",
    "MachineSettings",
    # Analysis
    "CpuTimeline",
    "RunSegment",
    "TraceSummary",
    "analyze_file",
    "analyze_files",
    "summarize_trace",
]
