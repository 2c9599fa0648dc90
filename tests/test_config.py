from __future__ import annotations

import pytest

from respcodec import Config, unpack_reply
from respcodec.exceptions import DeserializeError


class TestConfig:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("RESPCODEC_MAX_BULK_LENGTH", raising=False)
        monkeypatch.delenv("RESPCODEC_MAX_LINE_LENGTH", raising=False)
        monkeypatch.delenv("RESPCODEC_RUNTIME_CHECKS", raising=False)
        assert Config.max_bulk_length == 512 * 1024 * 1024
        assert Config.max_line_length == 64 * 1024
        assert not Config.runtime_checks

    def test_environment(self, monkeypatch):
        monkeypatch.setenv("RESPCODEC_MAX_BULK_LENGTH", "16")
        monkeypatch.setenv("RESPCODEC_MAX_LINE_LENGTH", "32")
        monkeypatch.setenv("RESPCODEC_RUNTIME_CHECKS", "True")
        assert Config.max_bulk_length == 16
        assert Config.max_line_length == 32
        assert Config.runtime_checks

    def test_explicit_overrides_environment(self, monkeypatch):
        monkeypatch.setenv("RESPCODEC_MAX_BULK_LENGTH", "16")
        Config.max_bulk_length = 4
        assert Config.max_bulk_length == 4
        Config.max_bulk_length = None
        assert Config.max_bulk_length == 16

    def test_bulk_limit_from_environment(self, monkeypatch):
        monkeypatch.setenv("RESPCODEC_MAX_BULK_LENGTH", "4")
        assert unpack_reply(b"$4\r\nabcd\r\n", bytes).unwrap() == b"abcd"
        with pytest.raises(DeserializeError):
            unpack_reply(b"$5\r\nabcde\r\n", bytes)

    def test_line_limit(self):
        Config.max_line_length = 8
        with pytest.raises(DeserializeError):
            unpack_reply(b"+" + b"x" * 16 + b"\r\n", str)
