"""Base exception for fatal trace analysis failures.

Each component defines its own subclass next to the code that raises it.
A scan either completes or stops on the first of these.
"""


class SchedLensError(Exception):
    """Root of every fatal error raised while resolving topology or decoding a trace."""

    pass
