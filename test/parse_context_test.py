#!/usr/bin/env python3

#-------------------------------------------------------------------#
# Copyright (C) 2019-2023 by Serguei Tarassov <serge@arbinada.com>  #
# Distributed freely under the MIT License                          #
#-------------------------------------------------------------------#

"""
Tests of the parse cursor
"""

import io
import sys
import os
import unittest

sys.path.append(os.path.realpath(os.path.join(os.path.dirname(__file__), "..")))
from stream_codec.errors import TextPos, CodecMessage, MalformedLiteralError
from stream_codec.parse_context import EOF, NumericKind, NumericParser, ParseContext


class ParseContextTest(unittest.TestCase):

    def test_sources(self):
        for source in ["ab", b"ab", bytearray(b"ab"), memoryview(b"ab"), io.BytesIO(b"ab"), io.StringIO("ab")]:
            context = ParseContext(source)
            self.assertEqual(ord("a"), context.advance(), repr(source))
            self.assertEqual(ord("b"), context.advance(), repr(source))
            self.assertTrue(context.eof(), repr(source))
        with self.assertRaises(TypeError):
            ParseContext(42)

    def test_empty(self):
        context = ParseContext("")
        self.assertTrue(context.eof())
        self.assertIs(EOF, context.peek())
        with self.assertRaises(MalformedLiteralError) as ctx:
            context.advance()
        self.assertEqual(CodecMessage.ERR_UNEXPECTED_TEXT_END, ctx.exception.msg_id)

    def test_positions(self):
        context = ParseContext("ab\ncd\r\n\ne")
        self.assertEqual(TextPos(1, 1), context.pos)
        context.advance()
        context.advance()
        self.assertEqual(TextPos(1, 3), context.pos)
        context.advance()
        self.assertEqual(TextPos(2, 1), context.pos)
        self.assertTrue(context.match_literal("cd\r\n\n"))
        self.assertEqual(TextPos(4, 1), context.pos)
        self.assertEqual(8, context.offset)
        self.assertEqual(ord("e"), context.peek())

    def test_literals(self):
        context = ParseContext("null,true")
        self.assertFalse(context.match_literal("nul "))
        self.assertEqual(0, context.offset)
        self.assertTrue(context.match_literal(b"null"))
        self.assertTrue(context.match_literal(ord(",")))
        context.expect_literal("true")
        context.expect_eof()
        with self.assertRaises(MalformedLiteralError) as ctx:
            ParseContext("[1]").expect_literal("{")
        self.assertEqual(CodecMessage.ERR_EXPECTED_LITERAL_FMT, ctx.exception.msg_id)
        self.assertEqual("Line: 1, col: 1. Expected '{'", str(ctx.exception))
        with self.assertRaises(MalformedLiteralError):
            ParseContext("x").expect_eof()

    def test_checkpoint_revert(self):
        context = ParseContext("abc\ndef")
        token = context.checkpoint()
        context.match_literal("abc\nd")
        self.assertEqual(TextPos(2, 2), context.pos)
        context.revert(token)
        self.assertEqual(0, context.offset)
        self.assertEqual(TextPos(1, 1), context.pos)
        self.assertTrue(token.released)

    def test_checkpoint_commit(self):
        context = ParseContext("abc")
        with context.checkpoint() as token:
            context.advance()
            token.commit()
        self.assertEqual(1, context.offset)
        with context.checkpoint():
            context.advance()
        self.assertEqual(1, context.offset)

    def test_checkpoint_reverts_on_error(self):
        context = ParseContext("abc")
        with self.assertRaises(MalformedLiteralError):
            with context.checkpoint():
                context.advance()
                context.expect_literal("x")
        self.assertEqual(0, context.offset)

    def test_checkpoint_error_drops_inner_checkpoints(self):
        context = ParseContext("abcd")
        with self.assertRaises(MalformedLiteralError):
            with context.checkpoint():
                context.advance()
                inner = context.checkpoint()
                context.advance()
                context.expect_literal("x")
        self.assertEqual(0, context.offset)
        self.assertTrue(inner.released)
        with self.assertRaises(RuntimeError):
            context.revert(inner)
        with context.checkpoint() as token:
            context.advance()
            token.commit()
        self.assertEqual(1, context.offset)

    def test_nested_checkpoints(self):
        context = ParseContext("abcd")
        outer = context.checkpoint()
        context.advance()
        inner = context.checkpoint()
        context.advance()
        with self.assertRaises(RuntimeError):
            context.revert(outer)
        context.commit(inner)
        self.assertEqual(2, context.offset)
        context.revert(outer)
        self.assertEqual(0, context.offset)
        with self.assertRaises(RuntimeError):
            context.revert(outer)

    def test_numbers(self):
        self.assertEqual(123, ParseContext("123").expect_number())
        self.assertEqual(-12, ParseContext("-12]").expect_int())
        self.assertEqual(0.5, ParseContext("0.5").expect_number())
        self.assertEqual(-1.5e-3, ParseContext("-1.5e-3").expect_number())
        self.assertEqual(2e10, ParseContext("2E+10").expect_number())
        context = ParseContext("01")
        self.assertEqual(0, context.expect_number())
        self.assertEqual(1, context.offset)
        with self.assertRaises(MalformedLiteralError) as ctx:
            ParseContext("1.5").expect_int()
        self.assertEqual(CodecMessage.ERR_EXPECTED_INTEGER, ctx.exception.msg_id)

    def test_number_mismatch(self):
        for text in ["", "-", "x", "1.", "1e", ".5", "-.", "1.e5"]:
            context = ParseContext(text)
            self.assertIsNone(context.match_number(), text)
            self.assertEqual(0, context.offset, text)
            with self.assertRaises(MalformedLiteralError, msg=text):
                context.expect_number()


class NumericParserTest(unittest.TestCase):

    def _check_number(self, text: str, kind: NumericKind, title: str):
        np = NumericParser()
        for c in text.encode("ascii"):
            self.assertTrue(np.read_char(c), title)
        self.assertEqual(kind, np.type, title)
        self.assertEqual(text, np.text, title)

    def test_kinds(self):
        self._check_number("12345", NumericKind.INTEGER, "Num 1.1")
        self._check_number("-0", NumericKind.INTEGER, "Num 1.2")
        self._check_number("123.456", NumericKind.DECIMAL, "Num 2.1")
        self._check_number("-0.0", NumericKind.DECIMAL, "Num 2.2")
        self._check_number("1.23456E10", NumericKind.FLOAT, "Num 3.1")
        self._check_number("-1.23456e-10", NumericKind.FLOAT, "Num 3.2")
        self._check_number("1e+5", NumericKind.FLOAT, "Num 3.3")

    def test_rejections(self):
        np = NumericParser()
        self.assertTrue(np.read_char(ord("0")))
        self.assertFalse(np.read_char(ord("0")))
        np = NumericParser()
        self.assertTrue(np.read_char(ord("1")))
        self.assertFalse(np.read_char(ord("-")))
        self.assertFalse(np.read_char(ord("+")))


if __name__ == "__main__":
    unittest.main()
