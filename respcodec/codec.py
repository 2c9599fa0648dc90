"""
Blocking entry points.

The same shape drives both directions: a client calls
:func:`encode_command` and :func:`decode_reply`, a server calls
:func:`decode_command` and :func:`encode_reply`.
"""

from __future__ import annotations

import io
import logging

from respcodec._decoder import Decoder
from respcodec._encoder import Encoder
from respcodec._reader import run
from respcodec.constants import Mode
from respcodec.reply import ErrorReply, Ok, Reply
from respcodec.shapes import Shape, infer_shape, shape_of
from respcodec.typing import Any, ByteSink, ByteSource, Optional, add_runtime_checks

logger = logging.getLogger(__name__)


def resolve_shape(shape: Any, value: Any = None) -> Shape:
    """
    :param shape: a :class:`~respcodec.shapes.Shape`, a type annotation or
     ``None`` to infer the shape from ``value``
    """
    if shape is None:
        return infer_shape(value)
    return shape_of(shape)


def as_reply(value: Any) -> Reply[Any]:
    """
    Selects the arm of the reply result once the decode pass is complete:
    an error token as the outermost value is an :class:`ErrorReply`,
    anything else is :class:`Ok`.
    """
    if isinstance(value, ErrorReply):
        return value
    return Ok(value)


@add_runtime_checks
def pack_command(value: Any, shape: Optional[Any] = None, encoding: str = "utf-8") -> bytes:
    """
    Encodes a command, including the terminating CRLF of the command frame

    :param value: an enum value naming the command
    :param shape: the shape (or annotation) of the command enum. Inferred from
     ``value`` if not provided.
    :param encoding: encoding used for :class:`str` values
    """
    return (
        Encoder(Mode.COMMAND, encoding)
        .encode_command(value, resolve_shape(shape, value))
        .getvalue(command=True)
    )


@add_runtime_checks
def pack_reply(value: Any, shape: Optional[Any] = None, encoding: str = "utf-8") -> bytes:
    """
    Encodes a reply

    :param value: the reply value, or an :class:`~respcodec.reply.ErrorReply`
    :param shape: the shape (or annotation) of the reply. Inferred from
     ``value`` if not provided.
    :param encoding: encoding used for :class:`str` values
    """
    return (
        Encoder(Mode.REPLY, encoding)
        .encode_reply(value, resolve_shape(shape, value))
        .getvalue()
    )


@add_runtime_checks
def encode_command(
    value: Any, sink: ByteSink, shape: Optional[Any] = None, encoding: str = "utf-8"
) -> int:
    """
    Writes a command frame to ``sink``

    :return: the number of bytes written
    """
    writer = Encoder(Mode.COMMAND, encoding).encode_command(
        value, resolve_shape(shape, value)
    )
    written = writer.flush_to(sink, command=True)
    logger.debug("Encoded command %r (%d bytes)", value, written)
    return written


@add_runtime_checks
def encode_reply(
    value: Any, sink: ByteSink, shape: Optional[Any] = None, encoding: str = "utf-8"
) -> int:
    """
    Writes a reply frame to ``sink``

    :return: the number of bytes written
    """
    writer = Encoder(Mode.REPLY, encoding).encode_reply(value, resolve_shape(shape, value))
    written = writer.flush_to(sink)
    logger.debug("Encoded reply (%d bytes)", written)
    return written


@add_runtime_checks
def decode_command(source: ByteSource, shape: Any, encoding: str = "utf-8") -> Any:
    """
    Reads one command frame from ``source``, blocking until it is complete

    :param shape: the shape (or annotation) of the command enum
    :return: the decoded enum value
    """
    value = run(Decoder(Mode.COMMAND, encoding).decode_command(shape_of(shape)), source)
    logger.debug("Decoded command %r", value)
    return value


@add_runtime_checks
def decode_reply(source: ByteSource, shape: Any, encoding: str = "utf-8") -> Reply[Any]:
    """
    Reads one reply frame from ``source``, blocking until it is complete

    :param shape: the shape (or annotation) the reply is expected to have
    :return: :class:`~respcodec.reply.Ok` with the decoded value, or
     :class:`~respcodec.reply.ErrorReply` if the peer replied with an error
    """
    return as_reply(
        run(Decoder(Mode.REPLY, encoding).decode_reply(shape_of(shape)), source)
    )


def unpack_command(data: bytes, shape: Any, encoding: str = "utf-8") -> Any:
    """
    Decodes a command from a complete frame
    """
    return decode_command(io.BytesIO(data), shape, encoding)


def unpack_reply(data: bytes, shape: Any, encoding: str = "utf-8") -> Reply[Any]:
    """
    Decodes a reply from a complete frame
    """
    return decode_reply(io.BytesIO(data), shape, encoding)
