from __future__ import annotations

from respcodec.constants import (
    SYM_COLON,
    SYM_CR,
    SYM_CRLF,
    SYM_DOLLAR,
    SYM_EMPTY,
    SYM_LF,
    SYM_MINUS,
    SYM_NIL,
    SYM_PLUS,
    SYM_STAR,
)
from respcodec.exceptions import IOFailureError, SerializeError
from respcodec.typing import ByteSink, BytesLike, List, Self


class Writer:
    """
    Accumulates RESP framed tokens for a single top level value
    """

    __slots__ = ("chunks", "tokens")

    def __init__(self) -> None:
        self.chunks: List[bytes] = []
        #: number of complete tokens written at this level
        self.tokens: int = 0

    def write_simple_string(self, data: bytes) -> Self:
        if SYM_CR in data or SYM_LF in data:
            raise SerializeError("Simple strings can not contain CR or LF")
        self.chunks.append(SYM_EMPTY.join((SYM_PLUS, data, SYM_CRLF)))
        self.tokens += 1
        return self

    def write_error(self, message: bytes) -> Self:
        if SYM_CR in message or SYM_LF in message:
            raise SerializeError("Error replies can not contain CR or LF")
        self.chunks.append(SYM_EMPTY.join((SYM_MINUS, message, SYM_CRLF)))
        self.tokens += 1
        return self

    def write_integer(self, value: int) -> Self:
        self.chunks.append(SYM_EMPTY.join((SYM_COLON, b"%d" % value, SYM_CRLF)))
        self.tokens += 1
        return self

    def write_bulk_string(self, data: BytesLike) -> Self:
        data = bytes(data)
        self.chunks.append(
            SYM_EMPTY.join((SYM_DOLLAR, b"%d" % len(data), SYM_CRLF, data, SYM_CRLF))
        )
        self.tokens += 1
        return self

    def write_nil(self) -> Self:
        self.chunks.append(SYM_NIL)
        self.tokens += 1
        return self

    def write_array_header(self, length: int) -> Self:
        """
        Starts an array of ``length`` elements. The elements are expected to
        follow, and are not accounted for in :attr:`tokens`
        """
        self.chunks.append(SYM_EMPTY.join((SYM_STAR, b"%d" % length, SYM_CRLF)))
        return self

    def write_array(self, elements: Writer) -> Self:
        """
        Writes an array whose elements were accumulated in ``elements``,
        using the number of tokens it holds as the array length
        """
        self.write_array_header(elements.tokens)
        self.chunks.extend(elements.chunks)
        self.tokens += 1
        return self

    def getvalue(self, command: bool = False) -> bytes:
        """
        :param command: whether this is a complete command frame, which is
         delimited by an extra CRLF after the outermost array
        """
        if command:
            return SYM_EMPTY.join(self.chunks + [SYM_CRLF])
        return SYM_EMPTY.join(self.chunks)

    def flush_to(self, sink: ByteSink, command: bool = False) -> int:
        """
        Writes the frame to ``sink`` in a single call

        :return: the number of bytes written
        """
        data = self.getvalue(command)
        try:
            sink.write(data)
            flush = getattr(sink, "flush", None)
            if flush is not None:
                flush()
        except OSError as e:
            raise IOFailureError(f"Failed to write frame: {e}") from e
        return len(data)
