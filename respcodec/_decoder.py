from __future__ import annotations

import logging

from respcodec._reader import Reads, parse_integer, read_bulk_body, read_line
from respcodec.constants import NIL_LENGTH, Mode, RESPDataType
from respcodec.exceptions import (
    DeserializeError,
    IntConversionError,
    InvalidSizeForCommandArrayError,
    InvalidTypeForCommandError,
    InvalidTypeForReplyError,
    UnsupportedTypeError,
)
from respcodec.reply import ErrorReply
from respcodec.shapes import (
    Boolean,
    Bytes,
    Char,
    Enum,
    Integer,
    Option,
    Ref,
    Seq,
    Shape,
    Text,
    Tuple,
    Unsupported,
    VariantKind,
)
from respcodec.typing import Any, List

logger = logging.getLogger(__name__)

_MARKERS = frozenset(RESPDataType)


class Decoder:
    """
    Maps RESP tokens back to a value of a requested shape.

    All methods are generators of read requests (see :mod:`respcodec._reader`)
    and must be driven by :func:`respcodec._reader.run` or
    :func:`respcodec._reader.run_async`.
    """

    def __init__(self, mode: Mode, encoding: str = "utf-8") -> None:
        self.mode = mode
        self.encoding = encoding

    def decode_command(self, shape: Shape) -> Reads[Any]:
        if not isinstance(shape, Enum):
            raise InvalidTypeForCommandError(
                f"Commands must be decoded as enums, got {shape.type_name}"
            )
        marker, payload = yield from self.read_header()
        if marker != RESPDataType.ARRAY:
            raise InvalidTypeForCommandError(
                f"Commands must be arrays, got {chr(marker)!r}"
            )
        value = yield from self.decode_variant(shape, parse_integer(payload))
        terminator = yield from read_line()
        if terminator:
            raise DeserializeError(
                f"Expected an empty line after the command, got {terminator!r}"
            )
        return value

    def decode_reply(self, shape: Shape) -> Reads[Any]:
        return (yield from self.decode(shape))

    def read_header(self) -> Reads[tuple[int, bytes]]:
        line = yield from read_line()
        if not line:
            raise DeserializeError("Expected a RESP token, got an empty line")
        return line[0], line[1:]

    def decode(self, shape: Shape) -> Reads[Any]:
        marker, payload = yield from self.read_header()
        return (yield from self.decode_token(marker, payload, shape))

    def decode_token(self, marker: int, payload: bytes, shape: Shape) -> Reads[Any]:
        if marker not in _MARKERS:
            raise DeserializeError(f"Protocol Error: {chr(marker)}, {payload!r}")
        if marker == RESPDataType.ERROR:
            if self.mode == Mode.COMMAND:
                raise DeserializeError("Error replies are not valid in a command")
            message = self.decode_text(payload)
            logger.debug("Error reply received: %s", message)
            return ErrorReply(message)
        if isinstance(shape, Unsupported):
            raise UnsupportedTypeError(shape.name)

        length = 0
        if marker in (RESPDataType.BULK_STRING, RESPDataType.ARRAY):
            length = parse_integer(payload)
            if length == NIL_LENGTH:
                if isinstance(shape, Option):
                    return None
                raise DeserializeError(f"Unexpected nil for {shape.type_name}")
            if length < NIL_LENGTH:
                raise DeserializeError(f"Invalid length {length}")
        while isinstance(shape, (Option, Ref)):
            shape = shape.inner if isinstance(shape, Option) else shape.resolve()

        if isinstance(shape, Boolean):
            value = self.expect_integer(marker, payload, shape)
            if value not in (0, 1):
                raise DeserializeError(f"Expected 0 or 1 for a bool, got {value}")
            return value == 1
        elif isinstance(shape, Integer):
            value = self.expect_integer(marker, payload, shape)
            if not shape.low <= value <= shape.high:
                raise IntConversionError(value, shape.low, shape.high)
            return value
        elif isinstance(shape, (Text, Char, Bytes)):
            if marker == RESPDataType.SIMPLE_STRING:
                data = payload
            elif marker == RESPDataType.BULK_STRING:
                data = yield from read_bulk_body(length)
            else:
                raise self.unexpected(marker, shape)
            if isinstance(shape, Bytes):
                return data
            text = self.decode_text(data)
            if isinstance(shape, Char) and (len(text) != 1 or not text.isascii()):
                raise DeserializeError(f"Expected a single ascii character, got {text!r}")
            return text
        elif isinstance(shape, Seq):
            if marker != RESPDataType.ARRAY:
                raise self.unexpected(marker, shape)
            if shape.length is not None and length != shape.length:
                raise DeserializeError(
                    f"Expected an array of {shape.length} items, got {length}"
                )
            items: List[Any] = []
            for _ in range(length):
                items.append((yield from self.decode(shape.item)))
            return items
        elif isinstance(shape, Tuple):
            if marker != RESPDataType.ARRAY:
                raise self.unexpected(marker, shape)
            if length != len(shape.items):
                raise DeserializeError(
                    f"Expected an array of {len(shape.items)} items, got {length}"
                )
            members: List[Any] = []
            for item in shape.items:
                members.append((yield from self.decode(item)))
            return tuple(members)
        elif isinstance(shape, Enum):
            if marker != RESPDataType.ARRAY:
                raise self.unexpected(marker, shape)
            if self.mode == Mode.COMMAND:
                return (yield from self.decode_variant(shape, length))
            return (yield from self.decode_unnamed_variant(shape, length))
        raise UnsupportedTypeError(type(shape).__name__)

    def decode_variant(self, shape: Enum, count: int) -> Reads[Any]:
        """
        Decodes the elements of a command array of ``count`` elements: the
        variant name followed by its fields. Trailing optional fields that
        were omitted by the sender decode as ``None``.
        """
        if count <= 0:
            raise InvalidSizeForCommandArrayError(count)
        marker, payload = yield from self.read_header()
        if marker == RESPDataType.BULK_STRING:
            length = parse_integer(payload)
            if length < 0:
                raise DeserializeError("Command name can not be nil")
            name = self.decode_text((yield from read_bulk_body(length)))
        elif marker == RESPDataType.SIMPLE_STRING:
            name = self.decode_text(payload)
        else:
            raise DeserializeError(
                f"Expected the command name as a bulk string, got {chr(marker)!r}"
            )
        variant = shape.variant_named(name)
        if variant is None:
            raise DeserializeError(
                f"Unknown variant {name!r} for {shape.name}, expected one of: "
                f"{', '.join(v.wire_name for v in shape.variants)}"
            )
        supplied = count - 1
        if supplied > len(variant.fields):
            raise DeserializeError(
                f"{variant.wire_name} takes at most {len(variant.fields)} arguments, "
                f"got {supplied}"
            )
        values: List[Any] = []
        for field in variant.fields[:supplied]:
            values.append((yield from self.decode(field)))
        for field in variant.fields[supplied:]:
            if not isinstance(field, Option):
                raise DeserializeError(f"Missing argument for {variant.wire_name}")
            values.append(None)
        return variant.construct(values)

    def decode_unnamed_variant(self, shape: Enum, count: int) -> Reads[Any]:
        """
        Replies carry tuple variants without their name, so the variant
        is selected by arity and must be unambiguous
        """
        tuple_variants = [v for v in shape.variants if v.kind == VariantKind.TUPLE]
        if not tuple_variants:
            raise InvalidTypeForReplyError(
                f"{shape.name} has no variant that can be used as a reply"
            )
        candidates = [v for v in tuple_variants if len(v.fields) == count]
        if len(candidates) != 1:
            raise DeserializeError(
                f"Can not select a variant of {shape.name} for an array of {count} items"
            )
        variant = candidates[0]
        values: List[Any] = []
        for field in variant.fields:
            values.append((yield from self.decode(field)))
        return variant.construct(values)

    def expect_integer(self, marker: int, payload: bytes, shape: Shape) -> int:
        if marker != RESPDataType.INT:
            raise self.unexpected(marker, shape)
        return parse_integer(payload)

    def decode_text(self, data: bytes) -> str:
        try:
            return data.decode(self.encoding)
        except UnicodeDecodeError as e:
            raise DeserializeError(f"Invalid {self.encoding} data: {data!r}") from e

    def unexpected(self, marker: int, shape: Shape) -> DeserializeError:
        return DeserializeError(
            f"Unexpected {RESPDataType(marker).name} token for {shape.type_name}"
        )
