#-------------------------------------------------------------------#
# Copyright (C) 2019-2023 by Serguei Tarassov <serge@arbinada.com>  #
# Distributed freely under the MIT License                          #
#-------------------------------------------------------------------#

"""
JSON stream (SAX) parsing over a ParseContext

The structural functions do not build documents: they call back (or
yield) once per array element or object member with the cursor
positioned at the value, and the caller decides how to consume it.

expect_* functions raise on malformed input and leave the cursor
wherever the failure happened. match_* functions never raise for
grammar mismatches: on failure the cursor is restored to where it was
before the call and a sentinel is returned.
"""

import logging

from .buffers import GrowingBuffer, ExternalBuffer
from .errors import CodecMessage, MalformedLiteralError, InvalidCharacterError, \
    KeyTooLongError, BufferFullError
from .parse_context import EOF, ParseContext

logger = logging.getLogger(__name__)

CAPACITY_EXCEEDED   = -1
JSON_KEY_MAX_LENGTH = 1024

SPACE       = 0x20
QUOTE       = 0x22
BACKSLASH   = 0x5C
LETTER_U    = 0x75
WHITESPACES = frozenset(b" \t\r\n")
HEX_VALUES  = {c: int(chr(c), 16) for c in b"0123456789abcdefABCDEF"}

ESCAPE_CHARS = {
    ord('"'): ord('"'),
    ord('\\'): ord('\\'),
    ord('/'): ord('/'),
    ord('b'): ord('\b'),
    ord('f'): ord('\f'),
    ord('n'): ord('\n'),
    ord('r'): ord('\r'),
    ord('t'): ord('\t')
}

ESCAPED_OUTPUT = {
    ord('"'): b'\\"',
    ord('\\'): b'\\\\',
    ord('\b'): b'\\b',
    ord('\f'): b'\\f',
    ord('\n'): b'\\n',
    ord('\r'): b'\\r',
    ord('\t'): b'\\t'
}

# Scanner failures are (error class, message id, *args)
_NON_ASCII = (InvalidCharacterError, CodecMessage.ERR_NON_ASCII_CHAR)
_OVERFLOW  = (BufferFullError, None)


def _raise_failure(context: ParseContext, failure: tuple):
    error_class, msg_id, *args = failure
    raise error_class(context.pos, msg_id, *args)


#
# Escaping
#
def _as_bytes(text) -> bytes:
    if isinstance(text, str):
        return text.encode("utf-8")
    return bytes(text)


def _json_escape_core(data: bytes, out: GrowingBuffer):
    for c in data:
        if SPACE <= c < 0x7F and c != QUOTE and c != BACKSLASH:
            out.push_back(c)
            continue
        esc = ESCAPED_OUTPUT.get(c)
        if esc is None:
            raise InvalidCharacterError(None, CodecMessage.ERR_INVALID_CHAR_FMT, c)
        out.extend(esc)


def json_escape(text) -> str:
    """
    Escape text for embedding between double quotes.

    Only printable ASCII and the named control characters are accepted,
    anything else (including every byte of a multi-byte UTF-8 sequence)
    raises InvalidCharacterError.
    """
    data = _as_bytes(text)
    # Worst case is two output bytes per input byte
    out = GrowingBuffer(2 * len(data) + 4)
    _json_escape_core(data, out)
    return out.as_text()


def json_escape_to(text, stream):
    stream.write(json_escape(text))


def json_unescape(text) -> bytes:
    """
    Decode the body of a JSON string literal (without the quotes)
    """
    data = _as_bytes(text)
    context = ParseContext(b'"' + data + b'"')
    out = GrowingBuffer(len(data) + 1)
    read_json_string(context, out.push_back,
                     lambda unit: out.extend(chr(unit).encode("utf-8", "surrogatepass")))
    context.expect_eof()
    return out.as_bytes()


#
# Strings
#
def skip_json_whitespace(context: ParseContext):
    c = context.peek()
    # Fast path for the usual case of no whitespace
    if c is EOF or c > SPACE or c not in WHITESPACES:
        return
    while c in WHITESPACES:
        context.advance()
        c = context.peek()


def _scan_hex4(context: ParseContext):
    unit = 0
    for _i in range(4):
        digit = HEX_VALUES.get(context.peek())
        if digit is None:
            return None
        context.advance()
        unit = (unit << 4) | digit
    return unit


def _scan_json_string(context: ParseContext, push_byte, push_utf16):
    """
    Non-raising string reader shared by the expect and match forms.

    The push callbacks return None to continue or a failure tuple to
    stop. Returns None on success, otherwise the failure tuple.
    Surrogate pairs are handed to push_utf16 as two separate units.
    """
    skip_json_whitespace(context)
    if context.peek() != QUOTE:
        return (MalformedLiteralError, CodecMessage.ERR_EXPECTED_STRING)
    context.advance()
    while True:
        c = context.peek()
        if c is EOF:
            return (MalformedLiteralError, CodecMessage.ERR_UNCLOSED_STRING)
        context.advance()
        if c == QUOTE:
            return None
        if c != BACKSLASH:
            failure = push_byte(c)
            if failure is not None:
                return failure
            continue

        c = context.peek()
        if c is EOF:
            return (MalformedLiteralError, CodecMessage.ERR_UNCLOSED_STRING)
        context.advance()
        esc = ESCAPE_CHARS.get(c)
        if esc is not None:
            failure = push_byte(esc)
        elif c == LETTER_U:
            unit = _scan_hex4(context)
            if unit is None:
                return (MalformedLiteralError, CodecMessage.ERR_INVALID_HEX_ESCAPE)
            failure = push_utf16(unit)
        else:
            return (MalformedLiteralError, CodecMessage.ERR_UNRECOGNIZED_ESCAPE_SEQ_FMT, "\\" + chr(c))
        if failure is not None:
            return failure


def read_json_string(context: ParseContext, push_byte, push_utf16):
    """
    Read a quoted string, forwarding plain and simply-escaped bytes to
    push_byte and each \\uXXXX code unit to push_utf16
    """
    def on_byte(c):
        push_byte(c)

    def on_unit(unit):
        push_utf16(unit)

    failure = _scan_json_string(context, on_byte, on_unit)
    if failure is not None:
        _raise_failure(context, failure)


def _ascii_pusher(buffer):
    push_back = buffer.push_back

    def push(c):
        if c > 127:
            return _NON_ASCII
        push_back(c)
    return push


def expect_json_string_ascii(context: ParseContext) -> str:
    result = GrowingBuffer()
    push = _ascii_pusher(result)
    failure = _scan_json_string(context, push, push)
    if failure is not None:
        _raise_failure(context, failure)
    return result.as_text()


def expect_json_string_ascii_permissive(context: ParseContext, replacement) -> str:
    """
    Like expect_json_string_ascii but non-ASCII units are replaced
    """
    if isinstance(replacement, str):
        replacement = ord(replacement)
    if not 0 <= replacement <= 127:
        raise ValueError(f"Replacement must be an ASCII character, got {replacement!r}")
    result = GrowingBuffer()
    push_back = result.push_back

    def push(c):
        push_back(replacement if c > 127 else c)

    failure = _scan_json_string(context, push, push)
    if failure is not None:
        _raise_failure(context, failure)
    return result.as_text()


def expect_json_string_ascii_into(context: ParseContext, buffer, max_length: int) -> int:
    """
    Decode an ASCII string into caller-owned memory.

    Returns the number of bytes written, or CAPACITY_EXCEEDED if the
    string does not fit in max_length bytes. Overflow is reported only
    through the return value; malformed or non-ASCII input still raises.
    """
    sink = ExternalBuffer(buffer, max_length)

    def push(c):
        if c > 127:
            return _NON_ASCII
        if sink.pos == sink.capacity:
            return _OVERFLOW
        sink.push_back(c)

    failure = _scan_json_string(context, push, push)
    if failure is _OVERFLOW:
        return CAPACITY_EXCEEDED
    if failure is not None:
        _raise_failure(context, failure)
    return sink.pos


def match_json_string(context: ParseContext):
    """
    Speculative expect_json_string_ascii: returns the string, or None
    with the cursor unchanged
    """
    result = GrowingBuffer()
    push = _ascii_pusher(result)
    with context.checkpoint() as token:
        if _scan_json_string(context, push, push) is not None:
            logger.debug("No JSON string match at offset %d", context.offset)
            return None
        token.commit()
    return result.as_text()


def expect_json_string(context: ParseContext) -> str:
    """
    Decode a string to full Unicode. Raw bytes are read as UTF-8 and
    \\uXXXX surrogate pairs are combined into one code point.
    """
    # Raw byte runs and escaped units are kept apart so that surrogates
    # only ever come from \u escapes
    pieces = []
    raw = GrowingBuffer()

    def flush_raw():
        if len(raw):
            try:
                pieces.append(raw.as_bytes().decode("utf-8"))
            except UnicodeDecodeError:
                raise InvalidCharacterError(context.pos, CodecMessage.ERR_INVALID_UTF8) from None
            raw.clear()

    def on_byte(c):
        raw.push_back(c)

    def on_unit(unit):
        flush_raw()
        pieces.append(chr(unit))

    failure = _scan_json_string(context, on_byte, on_unit)
    if failure is not None:
        _raise_failure(context, failure)
    flush_raw()
    text = "".join(pieces)
    try:
        # A UTF-16 round trip pairs up the surrogates
        return text.encode("utf-16-le", "surrogatepass").decode("utf-16-le")
    except UnicodeDecodeError:
        raise InvalidCharacterError(context.pos, CodecMessage.ERR_UNPAIRED_SURROGATE) from None


#
# Literals
#
def match_json_null(context: ParseContext) -> bool:
    skip_json_whitespace(context)
    return context.match_literal(b"null")


def expect_json_bool(context: ParseContext) -> bool:
    skip_json_whitespace(context)
    if context.match_literal(b"true"):
        return True
    elif context.match_literal(b"false"):
        return False
    context.error(CodecMessage.ERR_EXPECTED_BOOL)


#
# Containers
#
def iter_json_array(context: ParseContext):
    """
    Yield (index, context) for each element of an array; null is an
    empty array. The consumer must read the element before asking for
    the next one.
    """
    skip_json_whitespace(context)
    if context.match_literal(b"null"):
        return
    context.expect_literal(b"[")
    skip_json_whitespace(context)
    if context.match_literal(b"]"):
        return

    index = 0
    while True:
        skip_json_whitespace(context)
        yield index, context
        skip_json_whitespace(context)
        if not context.match_literal(b","):
            break
        index += 1

    skip_json_whitespace(context)
    context.expect_literal(b"]")


def _iter_json_members(context: ParseContext, read_key):
    skip_json_whitespace(context)
    if context.match_literal(b"null"):
        return
    context.expect_literal(b"{")
    skip_json_whitespace(context)
    if context.match_literal(b"}"):
        return

    while True:
        skip_json_whitespace(context)
        key = read_key(context)
        skip_json_whitespace(context)
        context.expect_literal(b":")
        skip_json_whitespace(context)
        yield key, context
        skip_json_whitespace(context)
        if not context.match_literal(b","):
            break

    skip_json_whitespace(context)
    context.expect_literal(b"}")


def iter_json_object(context: ParseContext):
    """
    Yield (key, context) for each member of an object, with the cursor
    positioned at the value; null is an empty object
    """
    return _iter_json_members(context, expect_json_string_ascii)


def iter_json_object_ascii(context: ParseContext):
    """
    Same as iter_json_object but keys are decoded through one fixed
    JSON_KEY_MAX_LENGTH byte buffer. A longer key raises KeyTooLongError.
    """
    key_buffer = bytearray(JSON_KEY_MAX_LENGTH)

    def read_key(ctx):
        done = expect_json_string_ascii_into(ctx, key_buffer, JSON_KEY_MAX_LENGTH)
        if done == CAPACITY_EXCEEDED:
            raise KeyTooLongError(ctx.pos, CodecMessage.ERR_KEY_TOO_LONG_FMT, JSON_KEY_MAX_LENGTH)
        return key_buffer[:done].decode("ascii")

    return _iter_json_members(context, read_key)


def expect_json_array(context: ParseContext, on_entry):
    for index, ctx in iter_json_array(context):
        on_entry(index, ctx)


def expect_json_object(context: ParseContext, on_entry):
    for key, ctx in iter_json_object(context):
        on_entry(key, ctx)


def expect_json_object_ascii(context: ParseContext, on_entry):
    for key, ctx in iter_json_object_ascii(context):
        on_entry(key, ctx)


def _match_json_key(context: ParseContext):
    result = GrowingBuffer()
    push = _ascii_pusher(result)
    if _scan_json_string(context, push, push) is not None:
        return None
    return result.as_text()


def _match_json_members(context: ParseContext, on_entry) -> bool:
    skip_json_whitespace(context)
    if context.match_literal(b"null"):
        return True
    if not context.match_literal(b"{"):
        return False
    skip_json_whitespace(context)
    if context.match_literal(b"}"):
        return True

    while True:
        skip_json_whitespace(context)
        key = _match_json_key(context)
        if key is None:
            return False
        skip_json_whitespace(context)
        if not context.match_literal(b":"):
            return False
        skip_json_whitespace(context)
        if not on_entry(key, context):
            return False
        skip_json_whitespace(context)
        if not context.match_literal(b","):
            break

    skip_json_whitespace(context)
    return context.match_literal(b"}")


def match_json_object(context: ParseContext, on_entry) -> bool:
    """
    Speculative object parse. on_entry(key, context) returns a truthy
    value to accept the member. Returns False, with the cursor restored,
    if the text is not an object or any member is rejected. Errors raised
    by on_entry itself propagate after the cursor is restored.
    """
    with context.checkpoint() as token:
        if _match_json_members(context, on_entry):
            token.commit()
            return True
        logger.debug("No JSON object match at offset %d", context.offset)
    return False


#
# Whole values
#
def _open_json_value(context: ParseContext):
    """
    Returns (value, entries). For arrays and objects value is the empty
    container and entries iterates its members, otherwise entries is None.
    """
    skip_json_whitespace(context)
    c = context.peek()
    if c == QUOTE:
        return expect_json_string(context), None
    elif context.match_literal(b"null"):
        return None, None
    elif context.match_literal(b"true"):
        return True, None
    elif context.match_literal(b"false"):
        return False, None
    elif c == ord("["):
        return [], iter_json_array(context)
    elif c == ord("{"):
        return {}, _iter_json_members(context, expect_json_string)
    value = context.match_number()
    if value is None:
        found = "end of text" if c is EOF else chr(c)
        raise MalformedLiteralError(context.pos, CodecMessage.ERR_EXPECTED_VALUE_BUT_FOUND_FMT, found)
    return value, None


def expect_json(context: ParseContext):
    """
    Read any JSON value into Python objects.

    Open containers are kept on an explicit stack, so nesting depth is
    not bounded by the interpreter recursion limit.
    """
    value, entries = _open_json_value(context)
    if entries is None:
        return value
    stack = [(value, entries)]
    while True:
        container, entries = stack[-1]
        entry = next(entries, None)
        if entry is None:
            stack.pop()
            if not stack:
                return container
            continue
        key, ctx = entry
        child, child_entries = _open_json_value(ctx)
        if isinstance(container, list):
            container.append(child)
        else:
            container[key] = child
        if child_entries is not None:
            stack.append((child, child_entries))


def parse_json(source):
    """
    Parse a complete document; trailing data other than whitespace is an
    error
    """
    context = source if isinstance(source, ParseContext) else ParseContext(source)
    value = expect_json(context)
    skip_json_whitespace(context)
    context.expect_eof()
    return value
