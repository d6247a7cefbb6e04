#-------------------------------------------------------------------#
# Copyright (C) 2019-2023 by Serguei Tarassov <serge@arbinada.com>  #
# Distributed freely under the MIT License                          #
#-------------------------------------------------------------------#

"""
Streaming JSON structural parsing, JSON string escaping and compact-size
binary integers
"""

from .errors import TextPos, CodecMessage, CodecError, ParseError, MalformedLiteralError, \
    InvalidCharacterError, KeyTooLongError, CorruptEncodingError, BufferFullError
from .buffers import GrowingBuffer, ExternalBuffer
from .parse_context import EOF, ParseContext, Checkpoint
from .json_sax import CAPACITY_EXCEEDED, JSON_KEY_MAX_LENGTH, json_escape, json_escape_to, \
    json_unescape, skip_json_whitespace, read_json_string, expect_json_string_ascii, \
    expect_json_string_ascii_permissive, expect_json_string_ascii_into, match_json_string, \
    expect_json_string, match_json_null, expect_json_bool, iter_json_array, iter_json_object, \
    iter_json_object_ascii, expect_json_array, expect_json_object, expect_json_object_ascii, \
    match_json_object, expect_json, parse_json
from .compact_size import CompactSize, compact_size_length, encode_compact_size, \
    decode_compact_size, write_compact_size, read_compact_size
from .store import StoreWriter, StoreReader

__version__ = "1.0.0"
