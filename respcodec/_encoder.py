from __future__ import annotations

import collections.abc

from respcodec._writer import Writer
from respcodec.constants import SYM_CR, SYM_LF, Mode
from respcodec.exceptions import (
    IntConversionError,
    InvalidTypeForCommandError,
    InvalidTypeForReplyError,
    SerializeError,
    UnknownSizeError,
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
    Variant,
    VariantKind,
)
from respcodec.typing import Any, Iterable, List


class Encoder:
    """
    Maps a value of a given shape to RESP tokens. The mode changes how
    absent optionals and enum variants are represented.
    """

    def __init__(self, mode: Mode, encoding: str = "utf-8") -> None:
        self.mode = mode
        self.encoding = encoding
        self.writer = Writer()

    def encode_command(self, value: Any, shape: Shape) -> Writer:
        if not isinstance(shape, Enum):
            raise InvalidTypeForCommandError(
                f"Commands must be enum values, got {shape.type_name}"
            )
        self.encode(value, shape, self.writer)
        return self.writer

    def encode_reply(self, value: Any, shape: Shape) -> Writer:
        self.encode(value, shape, self.writer)
        return self.writer

    def encode(self, value: Any, shape: Shape, writer: Writer) -> None:
        if isinstance(shape, Ref):
            shape = shape.resolve()
        if isinstance(value, ErrorReply):
            if self.mode == Mode.COMMAND:
                raise SerializeError("Error replies can not be sent in a command")
            writer.write_error(value.message.encode(self.encoding))
        elif isinstance(shape, Option):
            if value is None:
                if self.mode == Mode.REPLY:
                    writer.write_nil()
            else:
                self.encode(value, shape.inner, writer)
        elif value is None:
            raise SerializeError(f"None is not a valid {shape.type_name}")
        elif isinstance(shape, Boolean):
            if not isinstance(value, bool):
                raise SerializeError(f"Expected bool, got {value!r}")
            writer.write_integer(1 if value else 0)
        elif isinstance(shape, Integer):
            writer.write_integer(self.check_integer(value, shape))
        elif isinstance(shape, Char):
            if not isinstance(value, str) or len(value) != 1:
                raise SerializeError(f"Expected a single character, got {value!r}")
            if not value.isascii():
                raise UnsupportedTypeError("non ascii char")
            self.encode_string(value.encode("ascii"), writer)
        elif isinstance(shape, Text):
            if not isinstance(value, str):
                raise SerializeError(f"Expected str, got {value!r}")
            self.encode_string(value.encode(self.encoding), writer)
        elif isinstance(shape, Bytes):
            if not isinstance(value, (bytes, bytearray, memoryview)):
                raise SerializeError(f"Expected bytes, got {value!r}")
            writer.write_bulk_string(value)
        elif isinstance(shape, Seq):
            self.encode_sequence(value, shape, writer)
        elif isinstance(shape, Tuple):
            if not isinstance(value, (tuple, list)) or len(value) != len(shape.items):
                raise SerializeError(
                    f"Expected a sequence of {len(shape.items)} items, got {value!r}"
                )
            self.encode_array(value, shape.items, writer)
        elif isinstance(shape, Enum):
            self.encode_variant(value, shape, writer)
        elif isinstance(shape, Unsupported):
            raise UnsupportedTypeError(shape.name)
        else:
            raise UnsupportedTypeError(type(shape).__name__)

    def check_integer(self, value: Any, shape: Integer) -> int:
        if not isinstance(value, int):
            raise SerializeError(f"Expected int, got {value!r}")
        if not shape.wire_low <= value <= shape.wire_high:
            raise IntConversionError(value, shape.wire_low, shape.wire_high)
        return int(value)

    def encode_string(self, data: bytes, writer: Writer) -> None:
        if SYM_CR in data or SYM_LF in data:
            writer.write_bulk_string(data)
        else:
            writer.write_simple_string(data)

    def encode_sequence(self, value: Any, shape: Seq, writer: Writer) -> None:
        if isinstance(value, (str, bytes, bytearray, memoryview)) or not isinstance(
            value, collections.abc.Iterable
        ):
            raise SerializeError(f"Expected a sequence, got {value!r}")
        if self.mode == Mode.REPLY and not isinstance(value, collections.abc.Sized):
            raise UnknownSizeError(
                "Sequences without a known length can not be sent as a reply"
            )
        items: List[Any] = list(value)
        if shape.length is not None and len(items) != shape.length:
            raise SerializeError(
                f"Expected a sequence of {shape.length} items, got {len(items)}"
            )
        self.encode_array(items, [shape.item] * len(items), writer)

    def encode_array(
        self, values: Iterable[Any], shapes: Iterable[Shape], writer: Writer
    ) -> None:
        """
        Writes an array of ``values``. Elements are accumulated first so that
        the header reflects the tokens actually emitted: absent optionals are
        dropped from commands.
        """
        elements = Writer()
        for item, item_shape in zip(values, shapes):
            self.encode(item, item_shape, elements)
        writer.write_array(elements)

    def encode_variant(self, value: Any, shape: Enum, writer: Writer) -> None:
        variant: Variant = shape.variant_of(value)
        fields = variant.fields_of(value)
        if len(fields) != len(variant.fields):
            raise SerializeError(
                f"Variant {variant.name} expects {len(variant.fields)} fields, got {len(fields)}"
            )
        if self.mode == Mode.REPLY:
            if variant.kind != VariantKind.TUPLE:
                raise InvalidTypeForReplyError(
                    f"Variant {shape.name}.{variant.name} can not be used as a reply"
                )
            self.encode_array(fields, variant.fields, writer)
        else:
            elements = Writer()
            elements.write_bulk_string(variant.wire_name.encode(self.encoding))
            for item, item_shape in zip(fields, variant.fields):
                self.encode(item, item_shape, elements)
            writer.write_array(elements)
