from __future__ import annotations

import os

_TRUTHY = ["1", "true", "t"]


class __Config:
    def __init__(self) -> None:
        self.__max_bulk_length: int | None = None
        self.__max_line_length: int | None = None

    @property
    def runtime_checks(self) -> bool:
        """
        Whether runtime type checks are to be enabled for the public entry points.
        Can be enabled by setting the environment variable ``RESPCODEC_RUNTIME_CHECKS``
        to ``true``
        """
        return os.environ.get("RESPCODEC_RUNTIME_CHECKS", "").lower() in _TRUTHY

    @property
    def max_bulk_length(self) -> int:
        """
        Largest bulk string body (in bytes) accepted while decoding. Defaults to
        512 MiB (the redis server's ``proto-max-bulk-len``). Can be changed by
        setting the environment variable ``RESPCODEC_MAX_BULK_LENGTH`` or by
        explicitly setting ``respcodec.Config.max_bulk_length``
        """
        if self.__max_bulk_length is not None:
            return self.__max_bulk_length
        return int(os.environ.get("RESPCODEC_MAX_BULK_LENGTH", 512 * 1024 * 1024))

    @max_bulk_length.setter
    def max_bulk_length(self, value: int | None) -> None:
        self.__max_bulk_length = value

    @property
    def max_line_length(self) -> int:
        """
        Largest line (simple string, error, integer or length header) accepted
        while decoding, terminator included. Defaults to 64 KiB. Can be changed
        by setting the environment variable ``RESPCODEC_MAX_LINE_LENGTH`` or by
        explicitly setting ``respcodec.Config.max_line_length``
        """
        if self.__max_line_length is not None:
            return self.__max_line_length
        return int(os.environ.get("RESPCODEC_MAX_LINE_LENGTH", 64 * 1024))

    @max_line_length.setter
    def max_line_length(self, value: int | None) -> None:
        self.__max_line_length = value


#: Used to configure global behaviors of the respcodec library
Config = __Config()
