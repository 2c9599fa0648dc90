from __future__ import annotations

import io

import pytest

from respcodec import Config
from respcodec._reader import (
    parse_integer,
    read_bulk_body,
    read_exactly,
    read_line,
    run,
)
from respcodec.exceptions import DeserializeError, IntParsingError, IOFailureError


class BrokenSource:
    def readline(self, size=-1):
        raise ConnectionResetError("reset by peer")

    def read(self, size=-1):
        raise ConnectionResetError("reset by peer")


class TrickleSource(io.BytesIO):
    def read(self, size=-1):
        return super().read(min(size, 1))


@pytest.mark.parametrize(
    "data, expected",
    [
        (b"PONG\r\n", b"PONG"),
        (b"PONG\n", b"PONG"),
        (b"\r\n", b""),
        (b"\n", b""),
        (b"a\rb\r\n", b"a\rb"),
    ],
)
def test_read_line(data, expected):
    assert run(read_line(), io.BytesIO(data)) == expected


def test_read_line_leaves_remaining_data():
    source = io.BytesIO(b"first\r\nsecond\n")
    assert run(read_line(), source) == b"first"
    assert run(read_line(), source) == b"second"


@pytest.mark.parametrize("data", [b"", b"PONG", b"PONG\r"])
def test_read_line_closed_stream(data):
    with pytest.raises(IOFailureError):
        run(read_line(), io.BytesIO(data))


def test_read_line_too_long():
    Config.max_line_length = 4
    with pytest.raises(DeserializeError, match="exceeds 4 bytes"):
        run(read_line(), io.BytesIO(b"+PONGPONG\r\n"))


def test_read_exactly():
    assert run(read_exactly(3), io.BytesIO(b"foobar")) == b"foo"
    assert run(read_exactly(0), io.BytesIO(b"")) == b""


def test_read_exactly_partial_reads():
    assert run(read_exactly(6), TrickleSource(b"foobar")) == b"foobar"


def test_read_exactly_closed_stream():
    with pytest.raises(IOFailureError, match="after 3 of 5 bytes"):
        run(read_exactly(5), io.BytesIO(b"foo"))


def test_read_broken_stream():
    with pytest.raises(IOFailureError, match="reset by peer"):
        run(read_line(), BrokenSource())
    with pytest.raises(IOFailureError, match="reset by peer"):
        run(read_exactly(1), BrokenSource())


@pytest.mark.parametrize("data", [b"hello\r\n", b"hello\n"])
def test_read_bulk_body(data):
    assert run(read_bulk_body(5), io.BytesIO(data)) == b"hello"


def test_read_bulk_body_binary_safe():
    assert run(read_bulk_body(4), io.BytesIO(b"a\r\nb\r\n")) == b"a\r\nb"


def test_read_bulk_body_unterminated():
    with pytest.raises(DeserializeError, match="not terminated"):
        run(read_bulk_body(3), io.BytesIO(b"fooXX\r\n"))


def test_read_bulk_body_too_large():
    Config.max_bulk_length = 2
    with pytest.raises(DeserializeError, match="exceeds 2 bytes"):
        run(read_bulk_body(3), io.BytesIO(b"foo\r\n"))


@pytest.mark.parametrize(
    "line, expected",
    [
        (b"0", 0),
        (b"42", 42),
        (b"-1", -1),
        (b"9223372036854775807", 2**63 - 1),
        (b"-9223372036854775808", -(2**63)),
    ],
)
def test_parse_integer(line, expected):
    assert parse_integer(line) == expected


@pytest.mark.parametrize(
    "line",
    [b"", b"-", b"+1", b" 1", b"1_000", b"1.5", b"abc", b"9223372036854775808"],
)
def test_parse_integer_invalid(line):
    with pytest.raises(IntParsingError):
        parse_integer(line)
