"""
RESP2 wire grammar constants
"""

from __future__ import annotations

import enum

from respcodec.typing import Final


class RESPDataType(enum.IntEnum):
    """
    Markers used to signal the type of the token that follows.

    Only the RESP2 subset is supported. See the
    `RESP protocol spec <https://redis.io/docs/develop/reference/protocol-spec>`__
    """

    SIMPLE_STRING = ord(b"+")
    ERROR = ord(b"-")
    INT = ord(b":")
    BULK_STRING = ord(b"$")
    ARRAY = ord(b"*")


class Mode(enum.Enum):
    """
    Direction of a frame. The same shape maps to different wire tokens
    depending on whether a command or a reply is being produced.
    """

    #: client to server: the top level value is an enum naming the command
    COMMAND = "command"
    #: server to client: any supported shape, or an error reply
    REPLY = "reply"


SYM_STAR: Final[bytes] = b"*"
SYM_DOLLAR: Final[bytes] = b"$"
SYM_PLUS: Final[bytes] = b"+"
SYM_MINUS: Final[bytes] = b"-"
SYM_COLON: Final[bytes] = b":"
SYM_CRLF: Final[bytes] = b"\r\n"
SYM_CR: Final[bytes] = b"\r"
SYM_LF: Final[bytes] = b"\n"
SYM_EMPTY: Final[bytes] = b""
SYM_NIL: Final[bytes] = b"$-1\r\n"

#: Lengths used by RESP to signal a nil bulk string or array
NIL_LENGTH: Final[int] = -1

I64_MIN: Final[int] = -(2**63)
I64_MAX: Final[int] = 2**63 - 1
