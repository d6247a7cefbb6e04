#-------------------------------------------------------------------#
# Copyright (C) 2019-2023 by Serguei Tarassov <serge@arbinada.com>  #
# Distributed freely under the MIT License                          #
#-------------------------------------------------------------------#

"""
Error kinds and message registry shared by the codecs
"""


class TextPos:
    def __init__(self, line: int = 1, col: int = 1) -> None:
        self.line = line
        self.col = col

    def __str__(self) -> str:
        return f"Line: {self.line}, col: {self.col}"

    def __repr__(self) -> str:
        return f"TextPos({self.line}, {self.col})"

    def __eq__(self, other) -> bool:
        if not isinstance(other, TextPos):
            return NotImplemented
        return self.line == other.line and self.col == other.col

    def make_copy(self):
        return TextPos(self.line, self.col)


class CodecMessage:
    # Cursor messages
    ERR_EXPECTED_LITERAL_FMT           = 1010
    ERR_UNEXPECTED_TEXT_END            = 1020
    ERR_EXPECTED_EOF                   = 1030
    ERR_INVALID_NUMBER                 = 1040
    ERR_EXPECTED_INTEGER               = 1045
    # String messages
    ERR_EXPECTED_STRING                = 2010
    ERR_UNCLOSED_STRING                = 2020
    ERR_UNRECOGNIZED_ESCAPE_SEQ_FMT    = 2030
    ERR_INVALID_HEX_ESCAPE             = 2040
    ERR_NON_ASCII_CHAR                 = 2050
    ERR_INVALID_CHAR_FMT               = 2060
    ERR_UNPAIRED_SURROGATE             = 2070
    ERR_INVALID_UTF8                   = 2080
    # Structure messages
    ERR_EXPECTED_BOOL                  = 3010
    ERR_EXPECTED_VALUE_BUT_FOUND_FMT   = 3020
    ERR_KEY_TOO_LONG_FMT               = 3030

    _MESSAGES = {
        ERR_EXPECTED_LITERAL_FMT         : "Expected '{}'",
        ERR_UNEXPECTED_TEXT_END          : "Unexpected end of text",
        ERR_EXPECTED_EOF                 : "End of document expected",
        ERR_INVALID_NUMBER               : "Invalid number",
        ERR_EXPECTED_INTEGER             : "Integer expected",
        #
        ERR_EXPECTED_STRING              : "String expected",
        ERR_UNCLOSED_STRING              : "Unclosed string",
        ERR_UNRECOGNIZED_ESCAPE_SEQ_FMT  : "Unrecognized escape sequence: {}",
        ERR_INVALID_HEX_ESCAPE           : "Invalid hexadecimal in \\u escape",
        ERR_NON_ASCII_CHAR               : "Non-ASCII string character",
        ERR_INVALID_CHAR_FMT             : "Invalid character in JSON string: 0x{:02x}",
        ERR_UNPAIRED_SURROGATE           : "Unpaired surrogate in string",
        ERR_INVALID_UTF8                 : "Invalid UTF-8 in string",
        #
        ERR_EXPECTED_BOOL                : "Expected bool (true or false)",
        ERR_EXPECTED_VALUE_BUT_FOUND_FMT : "Expected value but '{}' found",
        ERR_KEY_TOO_LONG_FMT             : "JSON key is too long (limit is {} bytes)",
    }

    @staticmethod
    def text(msg_id: int, *args) -> str:
        msg = CodecMessage._MESSAGES.get(msg_id, None)
        if msg is None:
            return f"Unknown message ID: {msg_id}"
        return msg.format(*args)


class CodecError(Exception):
    """
    Base exception class for the package
    """


class ParseError(CodecError):
    def __init__(self, pos: TextPos, msg_id: int, *args) -> None:
        self._pos = pos
        self._msg_id = msg_id
        super().__init__(CodecMessage.text(msg_id, *args))

    def __str__(self) -> str:
        result = ""
        if self._pos is not None:
            result += f"{str(self._pos)}. "
        result += super().__str__()
        return result

    @property
    def msg_id(self) -> int:
        return self._msg_id

    @property
    def pos(self) -> TextPos:
        return self._pos


class MalformedLiteralError(ParseError):
    """
    A required literal or structure was absent
    """


class InvalidCharacterError(ParseError):
    """
    A byte that cannot be escaped, or a non-ASCII unit where ASCII is required
    """


class KeyTooLongError(ParseError):
    """
    An object key overflowed the fixed key buffer. The document is
    pathological rather than malformed, so this is never backtracked over.
    """


class CorruptEncodingError(CodecError):
    """
    A binary encoding is truncated or structurally invalid
    """


class BufferFullError(IndexError):
    """
    Raised by fixed-capacity buffers instead of growing
    """
