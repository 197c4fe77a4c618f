"""Trace analysis built on the stream driver and classifier.

Usage:
    from schedlens.analysis import analyze_files

    summaries = analyze_files(paths, settings)
"""

from schedlens.analysis.summary import TraceSummary, analyze_file, analyze_files, summarize_trace
from schedlens.analysis.timeline import CpuTimeline, RunSegment

__all__ = [
    "CpuTimeline",
    "RunSegment",
    "TraceSummary",
    "analyze_file",
    "analyze_files",
    "summarize_trace",
]
