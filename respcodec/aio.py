"""
Async entry points over anyio streams.

Sources may be any anyio byte stream (or object stream of :class:`bytes`);
they are wrapped in a :class:`~anyio.streams.buffered.BufferedByteReceiveStream`
unless one is passed in. Callers that decode several frames from the same
stream should create the buffered stream once and pass it to every call,
since it holds on to bytes received past the end of a frame.
"""

from __future__ import annotations

import logging

from anyio import BrokenResourceError, ClosedResourceError
from anyio.abc import ByteReceiveStream, ByteSendStream, ObjectReceiveStream, ObjectSendStream
from anyio.streams.buffered import BufferedByteReceiveStream

from respcodec._decoder import Decoder
from respcodec._encoder import Encoder
from respcodec._reader import run_async
from respcodec._writer import Writer
from respcodec.codec import as_reply, resolve_shape
from respcodec.constants import Mode
from respcodec.exceptions import IOFailureError
from respcodec.reply import Reply
from respcodec.shapes import shape_of
from respcodec.typing import Any, Optional, Union, add_runtime_checks

logger = logging.getLogger(__name__)

#: Streams accepted as a source of bytes
AnyByteSource = Union[
    BufferedByteReceiveStream, ByteReceiveStream, ObjectReceiveStream[bytes]
]
#: Streams accepted as a sink of bytes
AnyByteSink = Union[ByteSendStream, ObjectSendStream[bytes]]


def buffered(stream: AnyByteSource) -> BufferedByteReceiveStream:
    if isinstance(stream, BufferedByteReceiveStream):
        return stream
    return BufferedByteReceiveStream(stream)


async def _flush(writer: Writer, sink: AnyByteSink, command: bool) -> int:
    data = writer.getvalue(command)
    try:
        await sink.send(data)
    except (BrokenResourceError, ClosedResourceError, OSError) as e:
        raise IOFailureError(f"Failed to write frame: {e!r}") from e
    return len(data)


@add_runtime_checks
async def encode_command(
    value: Any, sink: AnyByteSink, shape: Optional[Any] = None, encoding: str = "utf-8"
) -> int:
    """
    Sends a command frame to ``sink``

    :return: the number of bytes sent
    """
    writer = Encoder(Mode.COMMAND, encoding).encode_command(
        value, resolve_shape(shape, value)
    )
    written = await _flush(writer, sink, command=True)
    logger.debug("Sent command %r (%d bytes)", value, written)
    return written


@add_runtime_checks
async def encode_reply(
    value: Any, sink: AnyByteSink, shape: Optional[Any] = None, encoding: str = "utf-8"
) -> int:
    """
    Sends a reply frame to ``sink``

    :return: the number of bytes sent
    """
    writer = Encoder(Mode.REPLY, encoding).encode_reply(value, resolve_shape(shape, value))
    written = await _flush(writer, sink, command=False)
    logger.debug("Sent reply (%d bytes)", written)
    return written


@add_runtime_checks
async def decode_command(source: AnyByteSource, shape: Any, encoding: str = "utf-8") -> Any:
    """
    Receives one command frame from ``source``

    :param shape: the shape (or annotation) of the command enum
    """
    value = await run_async(
        Decoder(Mode.COMMAND, encoding).decode_command(shape_of(shape)), buffered(source)
    )
    logger.debug("Received command %r", value)
    return value


@add_runtime_checks
async def decode_reply(
    source: AnyByteSource, shape: Any, encoding: str = "utf-8"
) -> Reply[Any]:
    """
    Receives one reply frame from ``source``

    :param shape: the shape (or annotation) the reply is expected to have
    :return: :class:`~respcodec.reply.Ok` with the decoded value, or
     :class:`~respcodec.reply.ErrorReply` if the peer replied with an error
    """
    return as_reply(
        await run_async(
            Decoder(Mode.REPLY, encoding).decode_reply(shape_of(shape)), buffered(source)
        )
    )
