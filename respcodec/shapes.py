"""
Shape descriptors
-----------------

Every value that crosses the wire is described by a :class:`Shape`. Shapes
form a closed tagged union that the encoder and decoder dispatch on, and
can either be built explicitly or derived from a type annotation with
:func:`shape_of`::

    class Command(Tagged):
        pass

    @dataclasses.dataclass
    class Ping(Command):
        pass

    @dataclasses.dataclass
    class Get(Command):
        key: str

    shape_of(Command)
    # Enum(name='Command', variants=(Variant(name='Ping', ...), Variant(name='Get', ...)))
"""

from __future__ import annotations

import collections.abc
import dataclasses
import enum
import functools
import types
import typing

from respcodec.constants import I64_MAX, I64_MIN
from respcodec.exceptions import SerializeError
from respcodec.typing import (
    Annotated,
    Any,
    ClassVar,
    NamedTuple,
    Optional,
)

_SEQUENCE_ORIGINS = {
    list,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
    collections.abc.Collection,
    collections.abc.Iterable,
}
_MAPPING_ORIGINS = {
    dict,
    collections.abc.Mapping,
    collections.abc.MutableMapping,
}


class Shape:
    """
    Base class of all shape descriptors
    """

    __slots__ = ()

    @property
    def type_name(self) -> str:
        return self.__class__.__name__.lower()


@dataclasses.dataclass(frozen=True)
class Boolean(Shape):
    """``bool`` encoded as the integer 0 or 1"""


@dataclasses.dataclass(frozen=True)
class Integer(Shape):
    """
    Fixed width integer encoded as a RESP integer. Values outside the
    declared width, or outside the signed 64 bit range, can not be encoded.
    """

    bits: int = 64
    signed: bool = True

    def __post_init__(self) -> None:
        if self.bits not in (8, 16, 32, 64):
            raise ValueError(f"Unsupported integer width: {self.bits}")

    @property
    def low(self) -> int:
        return -(2 ** (self.bits - 1)) if self.signed else 0

    @property
    def high(self) -> int:
        return 2 ** (self.bits - 1) - 1 if self.signed else 2**self.bits - 1

    @property
    def wire_low(self) -> int:
        return max(self.low, I64_MIN)

    @property
    def wire_high(self) -> int:
        return min(self.high, I64_MAX)

    @property
    def type_name(self) -> str:
        return f"{'i' if self.signed else 'u'}{self.bits}"


@dataclasses.dataclass(frozen=True)
class Char(Shape):
    """A single ascii character"""


@dataclasses.dataclass(frozen=True)
class Text(Shape):
    """A unicode string"""


@dataclasses.dataclass(frozen=True)
class Bytes(Shape):
    """A binary safe byte string, always framed as a bulk string"""


@dataclasses.dataclass(frozen=True)
class Option(Shape):
    """
    A value that may be absent (``None``). Absent values are omitted from
    commands and sent as a nil bulk string in replies.
    """

    inner: Shape


@dataclasses.dataclass(frozen=True)
class Seq(Shape):
    """
    A homogeneous sequence. When :attr:`length` is set, the sequence must
    hold exactly that many items.
    """

    item: Shape
    length: Optional[int] = None


@dataclasses.dataclass(frozen=True)
class Tuple(Shape):
    """A fixed size heterogeneous sequence"""

    items: tuple[Shape, ...]


class VariantKind(enum.Enum):
    #: no payload
    UNIT = "unit"
    #: exactly one payload field
    NEWTYPE = "newtype"
    #: any number of payload fields
    TUPLE = "tuple"


class TaggedValue(NamedTuple):
    """
    Value of a variant that was declared without a python class
    """

    name: str
    fields: tuple[Any, ...] = ()


@dataclasses.dataclass(frozen=True)
class Variant:
    """
    One case of an :class:`Enum`. On the wire a variant is identified by
    its upper cased :attr:`name`.
    """

    name: str
    fields: tuple[Shape, ...] = ()
    kind: Optional[VariantKind] = None
    #: the python object values of this variant are built from: a class,
    #: an :class:`enum.Enum` member or ``None`` for :class:`TaggedValue`
    source: Any = dataclasses.field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        if self.kind is None:
            if not self.fields:
                kind = VariantKind.UNIT
            elif len(self.fields) == 1:
                kind = VariantKind.NEWTYPE
            else:
                kind = VariantKind.TUPLE
            object.__setattr__(self, "kind", kind)
        elif self.kind == VariantKind.UNIT and self.fields:
            raise ValueError(f"Unit variant {self.name} can not have fields")
        elif self.kind == VariantKind.NEWTYPE and len(self.fields) != 1:
            raise ValueError(f"Newtype variant {self.name} must have exactly one field")

    @property
    def wire_name(self) -> str:
        return self.name.upper()

    def matches(self, value: Any) -> bool:
        if self.source is None:
            return isinstance(value, TaggedValue) and value.name.upper() == self.wire_name
        if isinstance(self.source, enum.Enum):
            return value is self.source
        return type(value) is self.source

    def fields_of(self, value: Any) -> tuple[Any, ...]:
        if self.source is None:
            return tuple(value.fields)
        if isinstance(self.source, enum.Enum):
            return ()
        if dataclasses.is_dataclass(value):
            return tuple(getattr(value, f.name) for f in dataclasses.fields(value))
        return ()

    def construct(self, values: list[Any]) -> Any:
        if self.source is None:
            return TaggedValue(self.name, tuple(values))
        if isinstance(self.source, enum.Enum):
            return self.source
        return self.source(*values)


@dataclasses.dataclass(frozen=True)
class Enum(Shape):
    """
    A tagged union. Commands must always be enums: the variant is the
    command name and its fields are the arguments.
    """

    name: str
    variants: tuple[Variant, ...]

    def variant_named(self, name: str) -> Optional[Variant]:
        """
        Case insensitive lookup of a variant by its wire name
        """
        match = None
        wanted = name.upper()
        for variant in self.variants:
            if match is None and variant.wire_name == wanted:
                match = variant
        return match

    def variant_of(self, value: Any) -> Variant:
        for variant in self.variants:
            if variant.matches(value):
                return variant
        raise SerializeError(f"{value!r} is not a variant of {self.name}")


@dataclasses.dataclass(frozen=True)
class Ref(Shape):
    """
    Reference to an enum whose shape is still being derived, used for
    enums that contain themselves. Resolved from the cached enum shape
    when it is used.
    """

    target: type

    def resolve(self) -> Shape:
        return shape_of(self.target)

    @property
    def type_name(self) -> str:
        return self.target.__name__


@dataclasses.dataclass(frozen=True)
class Unsupported(Shape):
    """
    A type with no RESP2 representation (maps, structs, floats).
    Encoding or decoding it always fails.
    """

    name: str

    @property
    def type_name(self) -> str:
        return self.name


class Tagged:
    """
    Base class for tagged unions declared as a class hierarchy. Direct
    subclasses of :class:`Tagged` are enums; their (dataclass) subclasses
    are the variants, in declaration order::

        class Reply(Tagged):
            pass

        @dataclasses.dataclass
        class Range(Reply):
            start: int
            end: int

    The variant name defaults to the class name and can be overridden with
    ``__variant_name__``. The kind is inferred from the number of fields and
    can be forced with ``__variant_kind__``.
    """

    __tagged_root__: ClassVar[type[Tagged]]
    __tagged_variants__: ClassVar[list[type[Tagged]]]
    __variant_name__: ClassVar[str]
    __variant_kind__: ClassVar[Optional[VariantKind]] = None

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if Tagged in cls.__bases__:
            cls.__tagged_root__ = cls
            cls.__tagged_variants__ = []
        else:
            # dataclass(slots=True) recreates the class, replace it in place
            variants = cls.__tagged_variants__
            for idx, existing in enumerate(variants):
                if existing.__qualname__ == cls.__qualname__:
                    variants[idx] = cls
                    break
            else:
                variants.append(cls)
        if "__variant_name__" not in cls.__dict__:
            cls.__variant_name__ = cls.__name__
        _tagged_enum.cache_clear()


def _variant_for_class(cls: type[Tagged], seen: frozenset[type]) -> Variant:
    fields: tuple[Shape, ...] = ()
    if dataclasses.is_dataclass(cls):
        hints = typing.get_type_hints(cls, include_extras=True)
        fields = tuple(
            _shape_of(hints[f.name], seen) for f in dataclasses.fields(cls) if f.init
        )
    return Variant(cls.__variant_name__, fields, cls.__variant_kind__, source=cls)


def _build_tagged_enum(root: type[Tagged], seen: frozenset[type]) -> Enum:
    seen = seen | {root}
    return Enum(
        root.__name__,
        tuple(_variant_for_class(v, seen) for v in root.__tagged_variants__),
    )


@functools.cache
def _tagged_enum(root: type[Tagged]) -> Enum:
    """
    Shape of a tagged hierarchy, cached per root. The cache is cleared
    whenever a variant is registered.
    """
    return _build_tagged_enum(root, frozenset())


def _enum_for_class(cls: type, seen: frozenset[type]) -> Shape:
    if issubclass(cls, Tagged):
        root = cls.__tagged_root__
        if root in seen:
            return Ref(root)
        if not seen:
            return _tagged_enum(root)
        return _build_tagged_enum(root, seen)
    return Enum(
        cls.__name__,
        tuple(Variant(member.name, source=member) for member in cls),
    )


def shape_of(tp: Any) -> Shape:
    """
    Derive the shape of a type annotation

    - ``bool``, ``int``, ``str``, ``bytes`` map to :class:`Boolean`,
      :class:`Integer` (signed 64 bit), :class:`Text` and :class:`Bytes`
    - ``Optional[X]`` / ``X | None`` map to :class:`Option`
    - ``list[X]``, ``Sequence[X]`` and ``tuple[X, ...]`` map to :class:`Seq`
    - ``tuple[X, Y]`` maps to :class:`Tuple`
    - :class:`enum.Enum` subclasses and :class:`Tagged` hierarchies map to :class:`Enum`
    - ``Annotated[X, shape]`` uses the first :class:`Shape` found in the metadata
    - anything else (``float``, mappings, plain classes) maps to :class:`Unsupported`

    :param tp: a type annotation or an existing :class:`Shape`
    """
    return _shape_of(tp, frozenset())


def _shape_of(tp: Any, seen: frozenset[type]) -> Shape:
    if isinstance(tp, Shape):
        return tp
    origin = typing.get_origin(tp)
    args = typing.get_args(tp)

    if origin is Annotated:
        for meta in args[1:]:
            if isinstance(meta, Shape):
                return meta
        return _shape_of(args[0], seen)
    if origin is typing.Union or origin is types.UnionType:
        present = [arg for arg in args if arg is not type(None)]
        if len(present) == 1 and len(present) < len(args):
            return Option(_shape_of(present[0], seen))
        return Unsupported("union")
    if tp is bool:
        return Boolean()
    if tp is int:
        return Integer()
    if tp is str:
        return Text()
    if tp in (bytes, bytearray, memoryview):
        return Bytes()
    if origin is tuple:
        if len(args) == 2 and args[1] is Ellipsis:
            return Seq(_shape_of(args[0], seen))
        return Tuple(tuple(_shape_of(arg, seen) for arg in args))
    if origin in _SEQUENCE_ORIGINS and args:
        return Seq(_shape_of(args[0], seen))
    if tp in _MAPPING_ORIGINS or origin in _MAPPING_ORIGINS:
        return Unsupported("map")
    if isinstance(tp, type):
        if issubclass(tp, enum.Enum) or (issubclass(tp, Tagged) and tp is not Tagged):
            return _enum_for_class(tp, seen)
        return Unsupported(tp.__name__)
    return Unsupported(repr(tp))


def infer_shape(value: Any) -> Shape:
    """
    Derive a shape from a value, used when a value is encoded without
    an explicit shape. Lists and tuples are treated as fixed tuples of
    the shapes of their items and ``None`` as an absent option.
    """
    if isinstance(value, bool):
        return Boolean()
    if isinstance(value, int):
        return Integer()
    if isinstance(value, str):
        return Text()
    if isinstance(value, (bytes, bytearray, memoryview)):
        return Bytes()
    if value is None:
        return Option(Bytes())
    if isinstance(value, TaggedValue):
        return Enum(
            value.name,
            (Variant(value.name, tuple(infer_shape(f) for f in value.fields)),),
        )
    if isinstance(value, (enum.Enum, Tagged)):
        return _enum_for_class(type(value), frozenset())
    if isinstance(value, (list, tuple)):
        return Tuple(tuple(infer_shape(item) for item in value))
    return Unsupported(type(value).__name__)


#: Shapes for fixed width integers, usable as annotations
I8 = Annotated[int, Integer(8)]
I16 = Annotated[int, Integer(16)]
I32 = Annotated[int, Integer(32)]
I64 = Annotated[int, Integer(64)]
U8 = Annotated[int, Integer(8, signed=False)]
U16 = Annotated[int, Integer(16, signed=False)]
U32 = Annotated[int, Integer(32, signed=False)]
U64 = Annotated[int, Integer(64, signed=False)]
#: A single ascii character, usable as an annotation
AsciiChar = Annotated[str, Char()]
