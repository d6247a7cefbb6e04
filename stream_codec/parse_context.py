#-------------------------------------------------------------------#
# Copyright (C) 2019-2023 by Serguei Tarassov <serge@arbinada.com>  #
# Distributed freely under the MIT License                          #
#-------------------------------------------------------------------#

"""
Checkpointing parse cursor over an immutable byte sequence

The JSON functions only use peek/advance/eof, literal matching,
checkpoint/revert and error(), so any object offering the same
methods can stand in for ParseContext.
"""

import enum

from .errors import TextPos, CodecMessage, MalformedLiteralError

EOF = None

NEWLINE = 0x0A
MINUS   = 0x2D
PLUS    = 0x2B
DOT     = 0x2E
ZERO    = 0x30
DIGITS  = frozenset(b"0123456789")
EXPS    = frozenset(b"eE")


class NumericKind(enum.IntEnum):
    UNKNOWN = 0
    INTEGER = 10
    DECIMAL = 20
    FLOAT   = 30


class NumericParser:
    """
    Byte-at-a-time recognizer for the JSON number grammar
    """

    def __init__(self) -> None:
        self._char_count = 0
        self._digit_count = 0
        self._leading_zero = False
        self._type = NumericKind.UNKNOWN
        self._accepting_type = NumericKind.INTEGER
        self._value = bytearray()

    def accept(self, c: int):
        self._char_count += 1
        self._value.append(c)

    def read_char(self, c: int) -> bool:
        if c == MINUS:
            if self._char_count != 0:
                return False
            self.accept(c)
        elif c == PLUS:
            if self._accepting_type == NumericKind.FLOAT and self._char_count == 0:
                self.accept(c)
            else:
                return False
        elif c == DOT:
            if self._accepting_type == NumericKind.INTEGER and self._digit_count > 0:
                self.accept(c)
                self._accepting_type = NumericKind.DECIMAL
                self._type = NumericKind.UNKNOWN
            else:
                return False
        elif c in DIGITS:
            if self._accepting_type == NumericKind.INTEGER and self._leading_zero:
                return False
            if self._accepting_type == NumericKind.INTEGER and self._digit_count == 0 and c == ZERO:
                self._leading_zero = True
            self.accept(c)
            self._digit_count += 1
            self._type = self._accepting_type
        elif c in EXPS:
            if self._accepting_type != NumericKind.FLOAT and self._type != NumericKind.UNKNOWN:
                self.accept(c)
                self._char_count = 0
                self._digit_count = 0
                self._type = NumericKind.UNKNOWN
                self._accepting_type = NumericKind.FLOAT
            else:
                return False
        else:
            return False
        return True

    @property
    def type(self) -> NumericKind:
        return self._type

    @property
    def text(self) -> str:
        return self._value.decode("ascii")

    def value(self):
        if self._type == NumericKind.INTEGER:
            return int(self.text)
        return float(self.text)


class Checkpoint:
    """
    Saved cursor position. Used as a context manager the position is
    restored on exit unless commit() was called.
    """

    def __init__(self, context, state: tuple) -> None:
        self._context = context
        self._state = state
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    def commit(self):
        self._context.commit(self)

    def revert(self):
        self._context.revert(self)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        if not self._released:
            if exc_type is not None:
                # Checkpoints left open by the failing code are dropped
                self._context._unwind_to(self)
            self._context.revert(self)
        return False


def _as_literal(text) -> bytes:
    if isinstance(text, str):
        return text.encode("ascii")
    if isinstance(text, int):
        return bytes((text,))
    return bytes(text)


def _source_bytes(source) -> bytes:
    if isinstance(source, str):
        return source.encode("utf-8")
    if isinstance(source, (bytes, bytearray, memoryview)):
        return bytes(source)
    if hasattr(source, "read"):
        data = source.read()
        return data.encode("utf-8") if isinstance(data, str) else bytes(data)
    raise TypeError(f"Unsupported source type: {type(source).__name__}")


class ParseContext:
    """
    Cursor over a byte sequence with line/column tracking and nested
    checkpoints
    """

    def __init__(self, source, filename: str = "<string>") -> None:
        self._data = _source_bytes(source)
        self._len = len(self._data)
        self._filename = filename
        self._ofs = 0
        self._line = 1
        self._col = 1
        self._checkpoints = []

    def __repr__(self) -> str:
        return f"ParseContext({self._filename!r}, offset={self._ofs}, {self.pos})"

    @property
    def filename(self) -> str:
        return self._filename

    @property
    def offset(self) -> int:
        return self._ofs

    @property
    def pos(self) -> TextPos:
        return TextPos(self._line, self._col)

    def eof(self) -> bool:
        return self._ofs >= self._len

    def peek(self):
        if self._ofs >= self._len:
            return EOF
        return self._data[self._ofs]

    def advance(self) -> int:
        ofs = self._ofs
        if ofs >= self._len:
            self.error(CodecMessage.ERR_UNEXPECTED_TEXT_END)
        c = self._data[ofs]
        self._ofs = ofs + 1
        if c == NEWLINE:
            self._line += 1
            self._col = 1
        else:
            self._col += 1
        return c

    def _skip(self, n: int):
        start = self._ofs
        end = start + n
        nl = self._data.rfind(b"\n", start, end)
        if nl < 0:
            self._col += n
        else:
            self._line += self._data.count(b"\n", start, end)
            self._col = end - nl
        self._ofs = end

    def match_literal(self, text) -> bool:
        lit = _as_literal(text)
        if not self._data.startswith(lit, self._ofs):
            return False
        self._skip(len(lit))
        return True

    def expect_literal(self, text):
        if not self.match_literal(text):
            self.error(CodecMessage.ERR_EXPECTED_LITERAL_FMT, _as_literal(text).decode("latin-1"))

    def expect_eof(self):
        if not self.eof():
            self.error(CodecMessage.ERR_EXPECTED_EOF)

    def match_number(self):
        """
        Match a JSON number and return it as int or float, or None with
        the cursor unchanged.
        """
        np = NumericParser()
        with self.checkpoint() as token:
            c = self.peek()
            while c is not EOF and np.read_char(c):
                self.advance()
                c = self.peek()
            if np.type == NumericKind.UNKNOWN:
                return None
            token.commit()
        return np.value()

    def expect_number(self):
        value = self.match_number()
        if value is None:
            self.error(CodecMessage.ERR_INVALID_NUMBER)
        return value

    def expect_int(self) -> int:
        value = self.match_number()
        if not isinstance(value, int):
            self.error(CodecMessage.ERR_EXPECTED_INTEGER)
        return value

    def checkpoint(self) -> Checkpoint:
        token = Checkpoint(self, (self._ofs, self._line, self._col))
        self._checkpoints.append(token)
        return token

    def _release(self, token: Checkpoint):
        if token._released or not self._checkpoints or self._checkpoints[-1] is not token:
            raise RuntimeError("Checkpoints must be released once, in LIFO order")
        self._checkpoints.pop()
        token._released = True

    def _unwind_to(self, token: Checkpoint):
        if token not in self._checkpoints:
            return
        while self._checkpoints[-1] is not token:
            self._checkpoints.pop()._released = True

    def revert(self, token: Checkpoint):
        self._release(token)
        self._ofs, self._line, self._col = token._state

    def commit(self, token: Checkpoint):
        self._release(token)

    def error(self, msg_id: int, *args):
        raise MalformedLiteralError(self.pos, msg_id, *args)
