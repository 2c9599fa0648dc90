from __future__ import annotations

import io

import pytest

from respcodec import typing as respcodec_typing
from respcodec.typing import ByteSink, ByteSource, add_runtime_checks


@pytest.mark.parametrize("name", respcodec_typing.__all__)
def test_exported_names_resolve(name):
    assert getattr(respcodec_typing, name) is not None


def test_only_used_names_are_exported():
    assert not {"AsyncGenerator", "Hashable", "Iterator", "T_co"} & set(
        respcodec_typing.__all__
    )


@pytest.mark.skipif(
    respcodec_typing.RUNTIME_TYPECHECKS, reason="runtime checks are enabled"
)
def test_add_runtime_checks_without_checks():
    def identity(value: int) -> int:
        return value

    assert add_runtime_checks(identity) is identity


def test_byte_protocols():
    assert isinstance(io.BytesIO(), ByteSource)
    assert isinstance(io.BytesIO(), ByteSink)
    assert not isinstance(object(), ByteSource)
