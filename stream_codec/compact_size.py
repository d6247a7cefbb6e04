#-------------------------------------------------------------------#
# Copyright (C) 2019-2023 by Serguei Tarassov <serge@arbinada.com>  #
# Distributed freely under the MIT License                          #
#-------------------------------------------------------------------#

"""
Compact size: minimal self-describing encoding of unsigned 64-bit values

The number of leading one bits in the first byte gives the number of
bytes that follow; the remaining bits of the first byte and the
following bytes hold the value, most significant first.

    0xxxxxxx                     7 bits
    10xxxxxx + 1 byte           14 bits
    110xxxxx + 2 bytes          21 bits
    ...
    11111110 + 7 bytes          56 bits
    11111111 + 8 bytes          64 bits
"""

import logging

from .errors import CorruptEncodingError

logger = logging.getLogger(__name__)

COMPACT_SIZE_MAX_BYTES = 9
COMPACT_SIZE_MAX       = (1 << 64) - 1

# Value bits available to an encoding of 1..9 bytes
_VALUE_BITS = (7, 14, 21, 28, 35, 42, 49, 56, 64)


def _check_value(value: int):
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"Compact size must be an int, got {type(value).__name__}")
    if value < 0 or value > COMPACT_SIZE_MAX:
        raise ValueError(f"Compact size out of range: {value}")


def compact_size_length(value: int) -> int:
    _check_value(value)
    for length, bits in enumerate(_VALUE_BITS, 1):
        if value >> bits == 0:
            return length


def encoded_length(first_byte: int) -> int:
    """
    Total encoding length announced by the first byte
    """
    leading_ones = 8 - (~first_byte & 0xFF).bit_length()
    return leading_ones + 1


def encode_compact_size(value: int) -> bytes:
    length = compact_size_length(value)
    if length == COMPACT_SIZE_MAX_BYTES:
        return b"\xff" + value.to_bytes(8, "big")
    raw = value.to_bytes(length, "big")
    marker = (0xFF << (9 - length)) & 0xFF
    return bytes((raw[0] | marker,)) + raw[1:]


def _decode_body(first_byte: int, rest: bytes) -> int:
    length = len(rest) + 1
    value = int.from_bytes(rest, "big")
    if length < COMPACT_SIZE_MAX_BYTES:
        value |= (first_byte & (0xFF >> length)) << (8 * len(rest))
    if length > 1 and value >> _VALUE_BITS[length - 2] == 0:
        logger.debug("Rejected non-minimal %d byte compact size for %d", length, value)
        raise CorruptEncodingError(f"Non-minimal {length} byte compact size encoding of {value}")
    return value


def decode_compact_size(data, offset: int = 0):
    """
    Decode one value from data at offset. Returns (value, bytes consumed).
    """
    if offset >= len(data):
        raise CorruptEncodingError("Truncated compact size: no data")
    first_byte = data[offset]
    length = encoded_length(first_byte)
    rest = bytes(data[offset + 1:offset + length])
    if len(rest) != length - 1:
        raise CorruptEncodingError(
            f"Truncated compact size: expected {length} bytes, got {len(rest) + 1}")
    return _decode_body(first_byte, rest), length


def write_compact_size(store, value: int) -> int:
    encoded = encode_compact_size(value)
    store.write_bytes(encoded)
    return len(encoded)


def read_compact_size(store) -> int:
    first_byte = store.read_byte()
    length = encoded_length(first_byte)
    rest = store.read_bytes(length - 1) if length > 1 else b""
    return _decode_body(first_byte, rest)


class CompactSize:
    """
    Unsigned size stored in compact form
    """

    def __init__(self, value: int = 0) -> None:
        _check_value(value)
        self._value = value

    @classmethod
    def reconstitute(cls, store):
        return cls(read_compact_size(store))

    def serialize(self, store):
        write_compact_size(store, self._value)

    @property
    def value(self) -> int:
        return self._value

    @property
    def size(self) -> int:
        return compact_size_length(self._value)

    def __int__(self) -> int:
        return self._value

    def __index__(self) -> int:
        return self._value

    def __eq__(self, other) -> bool:
        if isinstance(other, CompactSize):
            return self._value == other._value
        if isinstance(other, int):
            return self._value == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._value)

    def __repr__(self) -> str:
        return f"CompactSize({self._value})"
