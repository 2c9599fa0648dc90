from __future__ import annotations

import pytest

from respcodec import Config


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def default_config():
    yield
    Config.max_bulk_length = None
    Config.max_line_length = None
