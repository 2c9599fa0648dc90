from __future__ import annotations

import warnings
from collections.abc import (
    Callable,
    Generator,
    Iterable,
    Mapping,
)
from typing import (
    TYPE_CHECKING,
    Annotated,
    Any,
    ClassVar,
    Final,
    Generic,
    List,
    Literal,
    NamedTuple,
    NoReturn,
    Optional,
    ParamSpec,
    Protocol,
    TypeVar,
    Union,
    runtime_checkable,
)

from typing_extensions import Self

from respcodec.config import Config

_runtime_checks = False
_beartype_found = False

try:
    import beartype

    _beartype_found = True
except ImportError:  # pragma: no cover
    pass

if Config.runtime_checks and not TYPE_CHECKING:  # pragma: no cover
    if _beartype_found:
        _runtime_checks = True
    else:
        warnings.warn(
            "Runtime checks were enabled via environment variable RESPCODEC_RUNTIME_CHECKS"
            " but could not import beartype"
        )

RUNTIME_TYPECHECKS = _runtime_checks

P = ParamSpec("P")
R = TypeVar("R")
T = TypeVar("T")


def safe_beartype(func: Callable[P, R]) -> Callable[P, R]:
    if TYPE_CHECKING:
        return func

    return beartype.beartype(func) if _beartype_found else func


def add_runtime_checks(func: Callable[P, R]) -> Callable[P, R]:
    if RUNTIME_TYPECHECKS and not TYPE_CHECKING:
        return safe_beartype(func)

    return func


@runtime_checkable
class ByteSource(Protocol):
    """
    A blocking, buffered byte source such as a binary file object,
    :class:`io.BytesIO` or the result of :meth:`socket.socket.makefile`
    """

    def readline(self, size: int = ..., /) -> bytes: ...

    def read(self, size: int = ..., /) -> bytes: ...


@runtime_checkable
class ByteSink(Protocol):
    """
    A blocking byte sink
    """

    def write(self, data: bytes, /) -> Any: ...


#: Python values accepted by :meth:`bytes` based shapes
BytesLike = Union[bytes, bytearray, memoryview]

__all__ = [
    "Annotated",
    "Any",
    "ByteSink",
    "ByteSource",
    "BytesLike",
    "Callable",
    "ClassVar",
    "Final",
    "Generator",
    "Generic",
    "Iterable",
    "List",
    "Literal",
    "Mapping",
    "NamedTuple",
    "NoReturn",
    "Optional",
    "P",
    "R",
    "RUNTIME_TYPECHECKS",
    "Self",
    "T",
    "Union",
    "add_runtime_checks",
]
