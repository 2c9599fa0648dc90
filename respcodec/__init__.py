"""
respcodec
---------

respcodec maps typed python values to and from the RESP2 wire format,
for commands as well as replies, with one shape description driving
both directions.
"""

from __future__ import annotations

import logging

from respcodec.codec import (
    decode_command,
    decode_reply,
    encode_command,
    encode_reply,
    pack_command,
    pack_reply,
    unpack_command,
    unpack_reply,
)
from respcodec.config import Config
from respcodec.constants import Mode, RESPDataType
from respcodec.reply import ErrorReply, Ok, Reply
from respcodec.shapes import Shape, Tagged, TaggedValue, shape_of

from . import _version

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

__all__ = [
    "Config",
    "ErrorReply",
    "Mode",
    "Ok",
    "RESPDataType",
    "Reply",
    "Shape",
    "Tagged",
    "TaggedValue",
    "decode_command",
    "decode_reply",
    "encode_command",
    "encode_reply",
    "pack_command",
    "pack_reply",
    "shape_of",
    "unpack_command",
    "unpack_reply",
]

__version__ = _version.__version__
