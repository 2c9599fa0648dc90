"""
Result type returned by reply decoding.

A well formed error reply from the peer is data, not a failure of the
decode call: :func:`respcodec.decode_reply` returns either :class:`Ok`
wrapping the decoded value or :class:`ErrorReply` carrying the message::

    match decode_reply(stream, str):
        case Ok(value):
            ...
        case ErrorReply(message):
            ...
"""

from __future__ import annotations

import dataclasses

from respcodec.exceptions import (
    AuthenticationFailureError,
    AuthenticationRequiredError,
    AuthorizationError,
    BusyLoadingError,
    ExecAbortError,
    NoScriptError,
    ReadOnlyError,
    ReplyError,
    UnknownCommandError,
    WrongTypeError,
)
from respcodec.typing import (
    ClassVar,
    Generic,
    Literal,
    Mapping,
    NoReturn,
    Optional,
    T,
    Union,
)


@dataclasses.dataclass(frozen=True)
class Ok(Generic[T]):
    """
    Successfully decoded reply
    """

    value: T

    is_error: ClassVar[Literal[False]] = False

    def unwrap(self) -> T:
        return self.value


@dataclasses.dataclass(frozen=True)
class ErrorReply:
    """
    An error reply (``-<message>\\r\\n``). Returned by reply decoding
    when the peer reported an error, and accepted by reply encoding to
    send one.
    """

    message: str

    is_error: ClassVar[Literal[True]] = True

    EXCEPTION_CLASSES: ClassVar[
        Mapping[str, Union[type[ReplyError], Mapping[str, type[ReplyError]]]]
    ] = {
        "ERR": {
            "unknown command": UnknownCommandError,
            "unknown subcommand": UnknownCommandError,
        },
        "EXECABORT": ExecAbortError,
        "LOADING": BusyLoadingError,
        "NOAUTH": AuthenticationRequiredError,
        "NOPERM": AuthorizationError,
        "NOSCRIPT": NoScriptError,
        "READONLY": ReadOnlyError,
        "WRONGPASS": AuthenticationFailureError,
        "WRONGTYPE": WrongTypeError,
    }

    @property
    def code(self) -> Optional[str]:
        """
        The error code, by convention the first upper case word of
        the message (``ERR``, ``WRONGTYPE`` ...)
        """
        code = self.message.split(" ", 1)[0]
        return code if code and code.isupper() else None

    @property
    def detail(self) -> str:
        """
        The message without the error code
        """
        if self.code:
            return self.message[len(self.code) + 1 :]
        return self.message

    def exception(self) -> ReplyError:
        """
        The exception representing this error reply

        :meta private:
        """
        code, detail = self.code, self.detail
        exception_class: Union[
            type[ReplyError], Mapping[str, type[ReplyError]]
        ] = ReplyError
        if code in self.EXCEPTION_CLASSES:
            exception_class = self.EXCEPTION_CLASSES[code]
            if not isinstance(exception_class, type):
                options = exception_class.items()
                exception_class = ReplyError
                for prefix, exc in options:
                    if detail.lower().startswith(prefix):
                        exception_class = exc
                        break
        return exception_class(self.message, code)

    def unwrap(self) -> NoReturn:
        """
        :raises ReplyError: (or the subclass registered for :attr:`code`) always
        """
        raise self.exception()


#: The outcome of decoding a reply
Reply = Union[Ok[T], ErrorReply]
