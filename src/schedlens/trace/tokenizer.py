"""Token-level helpers for trace-cmd style report lines.

Task names may contain the field delimiter and even whitespace, so the
``name<sep>pid`` fields cannot be found with a fixed split. Two routines
handle this:

- ``split_compound``: try to split the current token on its last ``sep``
  and read the suffix as a pid; on failure add the token to the name and
  widen the window by one token.
- ``take_keyed``: strip ``name_key`` from the first token, then widen the
  window until a token starting with ``id_key`` is found.

Both return the index of the token holding the pid so the caller can
continue from there.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from schedlens.errors import SchedLensError


class TraceFormatError(SchedLensError):
    """Raised when a trace line does not match the expected format.

    Attributes:
        token: The token that failed to decode, if any.
        line_number: 1-based line in the input, set by the stream driver.
    """

    def __init__(self, message: str, token: str | None = None, line_number: int | None = None):
        self.token = token
        self.line_number = line_number
        super().__init__(message)

    def __str__(self) -> str:
        message = super().__str__()
        if self.line_number is not None:
            return f"line {self.line_number}: {message}"
        return message


_TIMESTAMP = re.compile(r"[0-9]+(?:\.[0-9]+)?")


def _is_unsigned(text: str) -> bool:
    return text.isascii() and text.isdigit()


def token_at(tokens: Sequence[str], index: int) -> str:
    """Return ``tokens[index]`` or fail with a format error if the line is short."""
    if index >= len(tokens):
        raise TraceFormatError(f"Expected a field at position {index}, line has {len(tokens)}")
    return tokens[index]


def strip_key(token: str, key: str) -> str:
    """Remove a ``key=`` style prefix when present."""
    return token.removeprefix(key)


def parse_unsigned(token: str, key: str = "") -> int:
    """Parse a non-negative integer field, after removing ``key``.

    Raises:
        TraceFormatError: If the value is not a plain run of decimal digits.
    """
    value = strip_key(token, key)
    if not _is_unsigned(value):
        raise TraceFormatError(f"Expected unsigned integer for {key or 'field'}, got {token!r}", token)
    return int(value)


def parse_signed(token: str, key: str = "") -> int:
    """Parse an integer field that may be negative (e.g. ``src_cpu=-1``)."""
    value = strip_key(token, key)
    digits = value[1:] if value.startswith("-") else value
    if not _is_unsigned(digits):
        raise TraceFormatError(f"Expected integer for {key or 'field'}, got {token!r}", token)
    return int(value)


def parse_priority(token: str) -> int:
    """Parse a bracketed priority such as ``[120]``."""
    return parse_signed(token.strip("[]"))


def parse_cpu_bracket(token: str) -> int:
    """Parse a bracketed cpu column such as ``[002]``."""
    return parse_unsigned(token.strip("[]"))


def parse_timestamp(token: str) -> float:
    """Parse a ``seconds.micros:`` timestamp column.

    Only ``digits[.digits]`` is accepted; ``nan``, ``inf``, signs and
    underscores are format errors.
    """
    value = token.removesuffix(":")
    if not _TIMESTAMP.fullmatch(value):
        raise TraceFormatError(f"Expected timestamp, got {token!r}", token)
    return float(value)


def split_compound(tokens: Sequence[str], start: int, sep: str) -> tuple[str, int, int]:
    """Decode a ``name<sep>pid`` field whose name may span several tokens.

    Args:
        tokens: Whitespace-split line.
        start: Index of the first token of the field.
        sep: Delimiter between name and pid (``-`` in headers, ``:`` in bodies).

    Returns:
        Tuple of (name, pid, index of the token that held the pid).

    Raises:
        TraceFormatError: If no token in the rest of the line ends in ``sep<digits>``.
    """
    parts: list[str] = []
    for index in range(start, len(tokens)):
        token = tokens[index]
        base, found, suffix = token.rpartition(sep)
        if found and _is_unsigned(suffix):
            parts.append(base)
            return " ".join(parts), int(suffix), index
        parts.append(token)

    raise TraceFormatError(
        f"No '{sep}<pid>' suffix found from position {start}",
        tokens[start] if start < len(tokens) else None,
    )


def take_keyed(tokens: Sequence[str], start: int, name_key: str, id_key: str) -> tuple[str, int, int]:
    """Decode ``name_key<name> id_key<pid>`` where the name may contain spaces.

    Example:
        take_keyed("comm=my worker pid=42 prio=120".split(), 0, "comm=", "pid=")
        -> ("my worker", 42, 3)

    Returns:
        Tuple of (name, pid, index of the ``id_key`` token).

    Raises:
        TraceFormatError: If the ``id_key`` token is missing or not numeric.
    """
    parts = [strip_key(token_at(tokens, start), name_key)]
    for index in range(start + 1, len(tokens)):
        token = tokens[index]
        if token.startswith(id_key):
            return " ".join(parts), parse_unsigned(token, id_key), index
        parts.append(token)

    raise TraceFormatError(f"Missing '{id_key}' field after '{name_key}'", tokens[start])
