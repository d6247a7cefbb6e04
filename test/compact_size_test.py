#!/usr/bin/env python3

#-------------------------------------------------------------------#
# Copyright (C) 2019-2023 by Serguei Tarassov <serge@arbinada.com>  #
# Distributed freely under the MIT License                          #
#-------------------------------------------------------------------#

"""
Tests of the compact size codec and binary stores
"""

import io
import sys
import os
import unittest

sys.path.append(os.path.realpath(os.path.join(os.path.dirname(__file__), "..")))
from stream_codec.compact_size import COMPACT_SIZE_MAX, CompactSize, compact_size_length, \
    encode_compact_size, decode_compact_size
from stream_codec.errors import CorruptEncodingError
from stream_codec.store import StoreWriter, StoreReader


def _minimal_length(value: int) -> int:
    length = 1
    while length < 9 and value >= 1 << (7 * length):
        length += 1
    return length


class CompactSizeTest(unittest.TestCase):

    def _check_round_trip(self, value: int):
        writer = StoreWriter()
        CompactSize(value).serialize(writer)
        self.assertEqual(_minimal_length(value), writer.offset, f"length of {value}")
        reader = StoreReader(writer.getvalue())
        self.assertEqual(value, CompactSize.reconstitute(reader), f"value {value}")
        self.assertEqual(writer.offset, reader.offset, f"consumed for {value}")

    def test_powers_of_two(self):
        for i in range(64):
            val = 1 << i
            self._check_round_trip(val - 1)
            self._check_round_trip(val)
            self._check_round_trip(val + 1)
        self._check_round_trip(COMPACT_SIZE_MAX)

    def test_known_encodings(self):
        self.assertEqual(b"\x00", encode_compact_size(0))
        self.assertEqual(b"\x7f", encode_compact_size(127))
        self.assertEqual(b"\x80\x80", encode_compact_size(128))
        self.assertEqual(b"\xbf\xff", encode_compact_size((1 << 14) - 1))
        self.assertEqual(b"\xc0\x40\x00", encode_compact_size(1 << 14))
        self.assertEqual(b"\xfe" + b"\xff" * 7, encode_compact_size((1 << 56) - 1))
        self.assertEqual(b"\xff\x01" + b"\x00" * 7, encode_compact_size(1 << 56))
        self.assertEqual(b"\xff" * 9, encode_compact_size(COMPACT_SIZE_MAX))

    def test_lengths(self):
        self.assertEqual(1, compact_size_length(0))
        self.assertEqual(2, compact_size_length(128))
        self.assertEqual(8, compact_size_length((1 << 56) - 1))
        self.assertEqual(9, compact_size_length(1 << 56))
        self.assertEqual(3, CompactSize(1 << 14).size)

    def test_out_of_range(self):
        with self.assertRaises(ValueError):
            encode_compact_size(-1)
        with self.assertRaises(ValueError):
            CompactSize(COMPACT_SIZE_MAX + 1)
        with self.assertRaises(TypeError):
            encode_compact_size(1.0)

    def test_decode_buffer(self):
        data = encode_compact_size(300) + encode_compact_size(5)
        value, consumed = decode_compact_size(data)
        self.assertEqual((300, 2), (value, consumed))
        self.assertEqual((5, 1), decode_compact_size(data, consumed))

    def test_truncated(self):
        for value in [128, 1 << 20, 1 << 40, COMPACT_SIZE_MAX]:
            encoded = encode_compact_size(value)
            for cut in range(len(encoded)):
                with self.assertRaises(CorruptEncodingError, msg=f"{value} cut at {cut}"):
                    decode_compact_size(encoded[:cut])
                with self.assertRaises(CorruptEncodingError, msg=f"{value} cut at {cut}"):
                    StoreReader(encoded[:cut]).read_compact_size()

    def test_non_minimal(self):
        for encoded in [b"\x80\x05", b"\xc0\x00\x7f", b"\xfe\x00\x00\x00\x00\x00\x00\x01",
                        b"\xff\x00\xff\xff\xff\xff\xff\xff\xff"]:
            with self.assertRaises(CorruptEncodingError, msg=repr(encoded)):
                decode_compact_size(encoded)
            with self.assertRaises(CorruptEncodingError, msg=repr(encoded)):
                StoreReader(encoded).read_compact_size()

    def test_value_semantics(self):
        self.assertEqual(CompactSize(5), CompactSize(5))
        self.assertEqual(CompactSize(5), 5)
        self.assertNotEqual(CompactSize(5), CompactSize(6))
        self.assertEqual(5, int(CompactSize(5)))
        self.assertEqual("CompactSize(5)", repr(CompactSize(5)))
        self.assertEqual(1, len({CompactSize(7), CompactSize(7)}))


class StoreTest(unittest.TestCase):

    def test_sequence(self):
        stream = io.BytesIO()
        writer = StoreWriter(stream)
        self.assertEqual(1, writer.write_compact_size(3))
        writer.write_string("déjà")
        writer.write_byte(0x2A)
        writer.write_compact_size(1 << 30)
        self.assertEqual(len(stream.getvalue()), writer.offset)

        reader = StoreReader(io.BytesIO(stream.getvalue()))
        self.assertEqual(3, reader.read_compact_size())
        self.assertEqual("déjà", reader.read_string())
        self.assertEqual(0x2A, reader.read_byte())
        self.assertEqual(1 << 30, reader.read_compact_size())
        self.assertEqual(writer.offset, reader.offset)
        with self.assertRaises(CorruptEncodingError):
            reader.read_byte()

    def test_truncated_string(self):
        writer = StoreWriter()
        writer.write_string("hello")
        with self.assertRaises(CorruptEncodingError):
            StoreReader(writer.getvalue()[:-1]).read_string()

    def test_invalid_utf8_string(self):
        with self.assertRaises(CorruptEncodingError):
            StoreReader(b"\x01\xff").read_string()


if __name__ == "__main__":
    unittest.main()
