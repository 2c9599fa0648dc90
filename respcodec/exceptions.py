from __future__ import annotations

from respcodec.typing import Optional


class RespError(Exception):
    """
    Base exception from which all other exceptions in respcodec
    derive from.
    """


class SerializeError(RespError):
    """
    Raised when a value cannot be encoded with the requested shape
    """


class DeserializeError(RespError):
    """
    Raised when the incoming stream does not hold a valid frame
    for the requested shape
    """


class UnsupportedTypeError(SerializeError):
    """
    Raised for shapes that have no RESP2 representation
    (maps, structs, floats and non-ascii characters)
    """

    def __init__(self, type_name: str) -> None:
        self.type_name = type_name
        super().__init__(f"{type_name} is not supported in RESP")


class IOFailureError(RespError, OSError):
    """
    Raised when the underlying byte stream fails or is closed
    before a full frame could be read or written
    """


class IntConversionError(RespError, OverflowError):
    """
    Raised when an integer does not fit its declared width or
    the signed 64 bit range of a RESP integer
    """

    def __init__(self, value: int, low: int, high: int) -> None:
        self.value = value
        super().__init__(f"{value} is out of range [{low}, {high}]")


class IntParsingError(DeserializeError):
    """
    Raised when a length, count or integer line is not a base 10
    signed 64 bit integer
    """

    def __init__(self, line: bytes) -> None:
        self.line = line
        super().__init__(f"Invalid integer line: {line!r}")


class InvalidTypeForCommandError(RespError):
    """
    Raised when a command is not an enum value, or when an incoming
    command frame is not an array
    """


class InvalidTypeForReplyError(RespError):
    """
    Raised when a unit or newtype variant is used as a reply
    """


class UnknownSizeError(SerializeError):
    """
    Raised when a sequence without a known length is encoded as a reply
    """


class InvalidSizeForCommandArrayError(DeserializeError):
    """
    Raised when an incoming command array declares zero or
    a negative number of elements
    """

    def __init__(self, size: int) -> None:
        self.size = size
        super().__init__(f"Invalid size for command array: {size}")


class ReplyError(RespError):
    """
    Raised by :meth:`respcodec.reply.ErrorReply.unwrap` to surface an
    error reply sent by the peer as an exception
    """

    #: The error code (first word of the error message) if any
    code: Optional[str]

    def __init__(self, message: str, code: Optional[str] = None) -> None:
        self.message = message
        self.code = code
        super().__init__(message)


class WrongTypeError(ReplyError):
    """
    Raised when an operation is performed on a key
    containing a datatype that doesn't support the operation
    """


class NoScriptError(ReplyError):
    pass


class ReadOnlyError(ReplyError):
    pass


class BusyLoadingError(ReplyError):
    pass


class ExecAbortError(ReplyError):
    pass


class AuthenticationRequiredError(ReplyError):
    """
    Raised when authentication parameters are required
    but not provided
    """


class AuthenticationFailureError(ReplyError):
    """
    Raised when authentication parameters were provided
    but were invalid
    """


class AuthorizationError(ReplyError):
    pass


class UnknownCommandError(ReplyError):
    """
    Raised when the peer returns an error response relating
    to an unknown command.
    """
