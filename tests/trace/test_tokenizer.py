"""Tests for trial-split tokenization.

Why these tests exist:
- Task names may contain the delimiter and whitespace; pids must still be exact
- The same routine decodes headers (-), wakeup/switch bodies (:) and keyed fields
"""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from schedlens.trace import TraceFormatError, split_compound, take_keyed
from schedlens.trace.tokenizer import parse_signed, parse_timestamp, parse_unsigned


@pytest.mark.parametrize(
    ("line", "sep", "expected"),
    [
        ("bash-1234 [001]", "-", ("bash", 1234, 0)),
        ("my-proc-name-4321 [2]", "-", ("my-proc-name", 4321, 0)),
        ("Web Content-777 [003]", "-", ("Web Content", 777, 1)),
        ("<idle>-0 [000]", "-", ("<idle>", 0, 0)),
        ("kworker/u8:2:95 [120]", ":", ("kworker/u8:2", 95, 0)),
        ("other proc:9 [120]", ":", ("other proc", 9, 1)),
        ("a b c-d-5 x", "-", ("a b c-d", 5, 2)),
    ],
    ids=["plain", "hyphenated", "spaced", "idle", "colon-in-name", "spaced-colon", "mixed"],
)
def test_split_compound(line, sep, expected) -> None:
    """split_compound widens the window until a numeric suffix is found."""
    assert split_compound(line.split(), 0, sep) == expected


def test_split_compound_non_numeric_suffix_widens() -> None:
    """A suffix like '-beta' is part of the name, not a pid."""
    assert split_compound(["app-beta", "worker-12"], 0, "-") == ("app-beta worker", 12, 1)


def test_split_compound_without_pid_is_fatal() -> None:
    with pytest.raises(TraceFormatError):
        split_compound(["no", "pid", "here"], 0, "-")


names = st.lists(
    st.text(alphabet="abcxyz-_/<>:.", min_size=1, max_size=8),
    min_size=1,
    max_size=3,
)


@given(words=names, pid=st.integers(min_value=0, max_value=4_194_304))
def test_split_compound_recovers_pid(words, pid) -> None:
    """PROPERTY: '<name>-<pid>' decodes to the exact pid for any name whose
    earlier words do not themselves end in '-<digits>'.
    """
    tokens = " ".join(words).split()
    if not tokens:
        return
    line = [*tokens[:-1], f"{tokens[-1]}-{pid}", "[001]"]
    name, decoded, index = split_compound(line, 0, "-")
    assert decoded == pid
    assert name == " ".join(tokens)
    assert index == len(tokens) - 1


@pytest.mark.parametrize(
    ("line", "name_key", "id_key", "expected"),
    [
        ("comm=bash pid=42 prio=120", "comm=", "pid=", ("bash", 42, 1)),
        ("comm=my worker pid=42 prio=120", "comm=", "pid=", ("my worker", 42, 2)),
        ("comm= pid=7", "comm=", "pid=", ("", 7, 1)),
        ("child_comm=a b c child_pid=9", "child_comm=", "child_pid=", ("a b c", 9, 3)),
        ("filename=/usr/bin/my app pid=5 old_pid=5", "filename=", "pid=", ("/usr/bin/my app", 5, 2)),
    ],
    ids=["simple", "spaced", "empty-name", "child", "filename"],
)
def test_take_keyed(line, name_key, id_key, expected) -> None:
    assert take_keyed(line.split(), 0, name_key, id_key) == expected


def test_take_keyed_missing_id_is_fatal() -> None:
    with pytest.raises(TraceFormatError, match="pid="):
        take_keyed(["comm=bash", "prio=120"], 0, "comm=", "pid=")


def test_take_keyed_non_numeric_id_is_fatal() -> None:
    with pytest.raises(TraceFormatError):
        take_keyed(["comm=bash", "pid=abc"], 0, "comm=", "pid=")


@pytest.mark.parametrize(
    ("parse", "token", "key", "expected"),
    [
        (parse_unsigned, "target_cpu=003", "target_cpu=", 3),
        (parse_unsigned, "CPU:002", "CPU:", 2),
        (parse_signed, "src_cpu=-1", "src_cpu=", -1),
        (parse_signed, "prio=120", "prio=", 120),
    ],
)
def test_numeric_fields(parse, token, key, expected) -> None:
    assert parse(token, key) == expected


@pytest.mark.parametrize("token", ["target_cpu=x", "target_cpu=-1", "target_cpu=", "target_cpu=1.5"])
def test_unsigned_rejects_garbage(token) -> None:
    """Numeric decode failures are fatal, signalling an unknown format."""
    with pytest.raises(TraceFormatError) as excinfo:
        parse_unsigned(token, "target_cpu=")
    assert excinfo.value.token == token


def test_timestamp() -> None:
    assert parse_timestamp("10.500000:") == 10.5
    with pytest.raises(TraceFormatError):
        parse_timestamp("d..2.")


@pytest.mark.parametrize(
    "token",
    ["nan:", "inf:", "1_0.5:", "-3.0:", "1e3:", "2.:", ".5:"],
    ids=["nan", "inf", "underscore", "negative", "exponent", "trailing-dot", "leading-dot"],
)
def test_timestamp_rejects_non_decimal_forms(token: str) -> None:
    """float() accepts all of these; a trace clock never prints them.

    CRITICAL: a NaN or negative timestamp would silently corrupt duration
    and the run timeline instead of failing on format drift.
    """
    with pytest.raises(TraceFormatError) as excinfo:
        parse_timestamp(token)
    assert excinfo.value.token == token
