"""
Line and length delimited reads, written without I/O.

Decoding is expressed as generators that yield :class:`ReadLine` and
:class:`ReadExactly` requests and receive the requested bytes back. A
blocking driver (:func:`run`) serves the requests from a buffered file
like object and an async driver (:func:`run_async`) from an anyio
:class:`~anyio.streams.buffered.BufferedByteReceiveStream`, so both share
every decoding rule.
"""

from __future__ import annotations

import re

from anyio import (
    BrokenResourceError,
    ClosedResourceError,
    DelimiterNotFound,
    EndOfStream,
    IncompleteRead,
)
from anyio.streams.buffered import BufferedByteReceiveStream

from respcodec.config import Config
from respcodec.constants import I64_MAX, I64_MIN, SYM_CR, SYM_EMPTY, SYM_LF
from respcodec.exceptions import DeserializeError, IntParsingError, IOFailureError
from respcodec.typing import ByteSource, Generator, List, NamedTuple, T, Union

_INTEGER = re.compile(rb"-?[0-9]+")


class ReadLine(NamedTuple):
    #: maximum number of bytes to read, terminator included
    limit: int


class ReadExactly(NamedTuple):
    size: int


Request = Union[ReadLine, ReadExactly]
Reads = Generator[Request, bytes, T]


def read_line() -> Reads[bytes]:
    """
    Reads through the next ``\\n`` and returns the line without its
    terminator. A ``\\r`` directly preceding the ``\\n`` is stripped as well.
    Lines longer than ``Config.max_line_length``, terminator included, are
    rejected whichever driver serves the read.
    """
    limit = Config.max_line_length
    data = yield ReadLine(limit)
    if not data.endswith(SYM_LF):
        if len(data) >= limit:
            raise DeserializeError(f"Line exceeds {limit} bytes")
        raise IOFailureError("Stream closed before the end of a line")
    if len(data) > limit:
        raise DeserializeError(f"Line exceeds {limit} bytes")
    data = data[:-1]
    if data.endswith(SYM_CR):
        data = data[:-1]
    return data


def read_exactly(size: int) -> Reads[bytes]:
    if size == 0:
        return SYM_EMPTY
    data = yield ReadExactly(size)
    if len(data) != size:
        raise IOFailureError(f"Stream closed after {len(data)} of {size} bytes")
    return data


def read_bulk_body(size: int) -> Reads[bytes]:
    """
    Reads a bulk string body of ``size`` bytes followed by its line terminator
    """
    if size > Config.max_bulk_length:
        raise DeserializeError(
            f"Bulk string of {size} bytes exceeds {Config.max_bulk_length} bytes"
        )
    data = yield from read_exactly(size)
    terminator = yield from read_line()
    if terminator:
        raise DeserializeError(f"Bulk string not terminated by CRLF: {terminator!r}")
    return data


def parse_integer(line: bytes) -> int:
    """
    Parses the payload of an integer, length or count line as a base 10
    signed 64 bit integer
    """
    if not _INTEGER.fullmatch(line):
        raise IntParsingError(line)
    value = int(line)
    if not I64_MIN <= value <= I64_MAX:
        raise IntParsingError(line)
    return value


def _serve(request: Request, source: ByteSource) -> bytes:
    try:
        if isinstance(request, ReadLine):
            return source.readline(request.limit)
        chunks: List[bytes] = []
        remaining = request.size
        while remaining > 0:
            chunk = source.read(remaining)
            if not chunk:
                break
            chunks.append(chunk)
            remaining -= len(chunk)
        return SYM_EMPTY.join(chunks)
    except OSError as e:
        raise IOFailureError(f"Failed to read from stream: {e}") from e


def run(reads: Reads[T], source: ByteSource) -> T:
    """
    Drives ``reads`` to completion, blocking on ``source`` for every request
    """
    try:
        request = next(reads)
        while True:
            request = reads.send(_serve(request, source))
    except StopIteration as result:
        return result.value  # type: ignore[no-any-return]
    finally:
        reads.close()


async def _serve_async(request: Request, stream: BufferedByteReceiveStream) -> bytes:
    try:
        if isinstance(request, ReadLine):
            try:
                return await stream.receive_until(SYM_LF, request.limit) + SYM_LF
            except DelimiterNotFound as e:
                raise DeserializeError(f"Line exceeds {request.limit} bytes") from e
        return await stream.receive_exactly(request.size)
    except (
        IncompleteRead,
        EndOfStream,
        BrokenResourceError,
        ClosedResourceError,
        OSError,
    ) as e:
        raise IOFailureError(f"Failed to read from stream: {e!r}") from e


async def run_async(reads: Reads[T], stream: BufferedByteReceiveStream) -> T:
    """
    Drives ``reads`` to completion, awaiting ``stream`` for every request
    """
    try:
        request = next(reads)
        while True:
            request = reads.send(await _serve_async(request, stream))
    except StopIteration as result:
        return result.value  # type: ignore[no-any-return]
    finally:
        reads.close()
