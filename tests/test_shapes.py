from __future__ import annotations

import concurrent.futures
import dataclasses
import enum
import threading
from typing import Annotated, Optional, Sequence, Union

import pytest

from respcodec import shapes
from respcodec.exceptions import SerializeError
from respcodec.shapes import (
    U8,
    U64,
    AsciiChar,
    Boolean,
    Bytes,
    Char,
    Enum,
    Integer,
    Option,
    Ref,
    Seq,
    Tagged,
    TaggedValue,
    Text,
    Tuple,
    Unsupported,
    Variant,
    VariantKind,
    infer_shape,
    shape_of,
)


class Command(Tagged):
    pass


@dataclasses.dataclass
class Ping(Command):
    pass


@dataclasses.dataclass
class Get(Command):
    key: str


@dataclasses.dataclass
class SetKey(Command):
    __variant_name__ = "SET"

    key: str
    value: bytes
    ttl: Optional[int] = None


@dataclasses.dataclass
class Wrap(Command):
    __variant_kind__ = VariantKind.TUPLE

    values: list[int]


class Color(enum.Enum):
    RED = 1
    GREEN = 2


class Tree(Tagged):
    pass


@dataclasses.dataclass
class Leaf(Tree):
    value: int


@dataclasses.dataclass
class Branch(Tree):
    left: Tree
    right: Optional[Tree] = None


class Point:
    pass


@pytest.mark.parametrize(
    "annotation, expected",
    [
        (bool, Boolean()),
        (int, Integer()),
        (str, Text()),
        (bytes, Bytes()),
        (bytearray, Bytes()),
        (U8, Integer(8, signed=False)),
        (U64, Integer(64, signed=False)),
        (AsciiChar, Char()),
        (Annotated[int, "doc"], Integer()),
        (Optional[int], Option(Integer())),
        (int | None, Option(Integer())),
        (list[str], Seq(Text())),
        (Sequence[bytes], Seq(Bytes())),
        (tuple[int, ...], Seq(Integer())),
        (tuple[int, str], Tuple((Integer(), Text()))),
        (list[Optional[str]], Seq(Option(Text()))),
        (float, Unsupported("float")),
        (dict, Unsupported("map")),
        (dict[str, int], Unsupported("map")),
        (Union[int, str], Unsupported("union")),
        (Point, Unsupported("Point")),
    ],
)
def test_shape_of(annotation, expected):
    assert shape_of(annotation) == expected


def test_shape_of_shape():
    shape = Seq(Text(), length=2)
    assert shape_of(shape) is shape


def test_shape_of_tagged():
    shape = shape_of(Command)
    assert shape == Enum(
        "Command",
        (
            Variant("Ping"),
            Variant("Get", (Text(),)),
            Variant("SET", (Text(), Bytes(), Option(Integer()))),
            Variant("Wrap", (Seq(Integer()),), VariantKind.TUPLE),
        ),
    )
    assert [v.kind for v in shape.variants] == [
        VariantKind.UNIT,
        VariantKind.NEWTYPE,
        VariantKind.TUPLE,
        VariantKind.TUPLE,
    ]
    assert shape_of(Get) == shape


def test_shape_of_enum():
    shape = shape_of(Color)
    assert shape == Enum("Color", (Variant("RED"), Variant("GREEN")))
    assert shape.variant_of(Color.GREEN).name == "GREEN"


def test_variant_named_is_case_insensitive():
    shape = shape_of(Command)
    assert shape.variant_named("ping").source is Ping
    assert shape.variant_named("Set").source is SetKey
    assert shape.variant_named("pong") is None


def test_variant_values():
    variant = shape_of(Command).variant_of(SetKey("k", b"v"))
    assert variant.wire_name == "SET"
    assert variant.fields_of(SetKey("k", b"v", 1)) == ("k", b"v", 1)
    assert variant.construct(["k", b"v", None]) == SetKey("k", b"v")


def test_tagged_value_variant():
    variant = Variant("echo", (Text(),))
    assert variant.matches(TaggedValue("ECHO", ("hi",)))
    assert not variant.matches(TaggedValue("PING"))
    assert variant.construct(["hi"]) == TaggedValue("echo", ("hi",))


def test_variant_of_unknown_value():
    with pytest.raises(SerializeError, match="not a variant of Command"):
        shape_of(Command).variant_of(Color.RED)


def test_invalid_shapes():
    with pytest.raises(ValueError):
        Integer(12)
    with pytest.raises(ValueError):
        Variant("PING", (Text(),), VariantKind.UNIT)
    with pytest.raises(ValueError):
        Variant("GET", (Text(), Text()), VariantKind.NEWTYPE)


def test_integer_ranges():
    assert (Integer(8).low, Integer(8).high) == (-128, 127)
    assert (Integer(8, signed=False).low, Integer(8, signed=False).high) == (0, 255)
    assert Integer(64, signed=False).wire_high == 2**63 - 1
    assert Integer(64, signed=False).type_name == "u64"


@pytest.mark.parametrize(
    "value, expected",
    [
        (True, Boolean()),
        (1, Integer()),
        ("a", Text()),
        (b"a", Bytes()),
        (None, Option(Bytes())),
        ([1, "a"], Tuple((Integer(), Text()))),
        ((b"a",), Tuple((Bytes(),))),
        (1.5, Unsupported("float")),
        ({"a": 1}, Unsupported("dict")),
    ],
)
def test_infer_shape(value, expected):
    assert infer_shape(value) == expected


def test_infer_shape_of_variants():
    assert infer_shape(Ping()) == shape_of(Command)
    assert infer_shape(Color.RED) == shape_of(Color)
    assert infer_shape(TaggedValue("ECHO", ("hi",))) == Enum(
        "ECHO", (Variant("ECHO", (Text(),)),)
    )


def test_recursive_tagged():
    shape = shape_of(Tree)
    assert shape.variant_named("branch").fields == (Ref(Tree), Option(Ref(Tree)))
    assert shape.variant_named("branch").fields[0].resolve() is shape
    assert shape_of(Leaf) is shape


def test_shape_of_from_threads():
    expected = shape_of(Command), shape_of(Tree)
    workers = 8
    barrier = threading.Barrier(workers)

    def derive():
        barrier.wait()
        derived = []
        for _ in range(500):
            shapes._tagged_enum.cache_clear()
            derived.append((shape_of(Command), shape_of(Tree)))
        return derived

    with concurrent.futures.ThreadPoolExecutor(workers) as executor:
        futures = [executor.submit(derive) for _ in range(workers)]
        for future in futures:
            assert all(result == expected for result in future.result())
