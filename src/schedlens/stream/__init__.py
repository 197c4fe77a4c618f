"""Trace stream driver.

Usage:
    from schedlens.stream import TraceCursor

    with TraceCursor.open("trace.txt") as cursor:
        while (step := cursor.next()) is not None:
            ...
"""

from schedlens.stream.cursor import TraceCursor, TraceHeaderError, TraceStep, parse_header

__all__ = [
    "TraceCursor",
    "TraceHeaderError",
    "TraceStep",
    "parse_header",
]
