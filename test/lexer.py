"""
Lexer behavioral tests (token classification, '=' splitting, length guard).

Scope
- Validate classification of every token kind (short, compound, long, negated, literal).
- Validate '=' splitting rules and the positions where no split happens.
- Validate the length guard and that empty strings are skipped.
- Validate format() and the lex/format round trip.

Conventions
- Test method names follow CamelCase per project convention.
- Tokens are compared by value (kind + payload).
"""

import unittest
from unittest import TestCase

from argschema.faults import LexError
from argschema.lexer import (
    MAX_ARGUMENT_LENGTH,
    ShortFlag,
    CompoundFlag,
    LongFlag,
    NegatedFlag,
    ValueLiteral,
    lex,
    format as render,
)


class TestClassification(TestCase):
    """Each argument shape maps to exactly one token kind."""

    def testShortFlag(self):
        self.assertEqual(lex(["-v"]), [ShortFlag("v")])

    def testCompoundFlag(self):
        self.assertEqual(lex(["-abc"]), [CompoundFlag(("a", "b", "c"))])

    def testCompoundFlagAcceptsString(self):
        self.assertEqual(CompoundFlag("abc"), CompoundFlag(("a", "b", "c")))

    def testLongFlag(self):
        self.assertEqual(lex(["--verbose"]), [LongFlag("verbose")])

    def testNegatedFlag(self):
        self.assertEqual(lex(["--no-color"]), [NegatedFlag(LongFlag("color"))])

    def testNoPrefixNeedsDashAfterNo(self):
        self.assertEqual(lex(["--none"]), [LongFlag("none")])

    def testBareWordIsLiteral(self):
        self.assertEqual(lex(["file.txt"]), [ValueLiteral("file.txt")])

    def testSingleDashIsLiteral(self):
        self.assertEqual(lex(["-"]), [ValueLiteral("-")])

    def testNegativeNumberIsFlag(self):
        self.assertEqual(lex(["-5"]), [ShortFlag("5")])
        self.assertEqual(lex(["-42"]), [CompoundFlag("42")])

    def testEmptyStringsAreSkipped(self):
        self.assertEqual(lex(["", "a", ""]), [ValueLiteral("a")])

    def testOrderIsPreserved(self):
        self.assertEqual(
            lex(["-v", "--name", "Carol", "rest"]),
            [ShortFlag("v"), LongFlag("name"), ValueLiteral("Carol"), ValueLiteral("rest")],
        )

    def testKindsAreNotInterchangeable(self):
        self.assertNotEqual(ShortFlag("a"), ValueLiteral("a"))
        self.assertNotEqual(LongFlag("a"), NegatedFlag(LongFlag("a")))

    def testTokensAreImmutable(self):
        token = ShortFlag("v")
        with self.assertRaises(AttributeError):
            token.char = "x"

    def testTokensAreHashable(self):
        self.assertEqual(len({ShortFlag("v"), ShortFlag("v"), LongFlag("v")}), 2)

    def testStringArgumentRejected(self):
        with self.assertRaises(TypeError):
            lex("-v")


class TestEqualsSplitting(TestCase):
    """'-x=value' and '--name=value' yield a flag followed by a literal."""

    def testLongFlagSplit(self):
        self.assertEqual(lex(["--name=Carol"]), [LongFlag("name"), ValueLiteral("Carol")])

    def testShortFlagSplit(self):
        self.assertEqual(lex(["-n=Carol"]), [ShortFlag("n"), ValueLiteral("Carol")])

    def testSplitsAtFirstEquals(self):
        self.assertEqual(lex(["--expr=a=b"]), [LongFlag("expr"), ValueLiteral("a=b")])

    def testEmptyValueAfterEquals(self):
        self.assertEqual(lex(["--name="]), [LongFlag("name"), ValueLiteral("")])

    def testNegatedFlagSplit(self):
        self.assertEqual(lex(["--no-color=x"]), [NegatedFlag(LongFlag("color")), ValueLiteral("x")])

    def testNoSplitForEqualsAtIndexOne(self):
        self.assertEqual(lex(["-=value"]), [CompoundFlag("=value")])

    def testNoSplitForLiteral(self):
        self.assertEqual(lex(["key=value"]), [ValueLiteral("key=value")])


class TestLengthGuard(TestCase):
    """Overlong arguments are rejected before tokenization."""

    def testArgumentAtLimitAccepted(self):
        self.assertEqual(lex(["a" * MAX_ARGUMENT_LENGTH]), [ValueLiteral("a" * MAX_ARGUMENT_LENGTH)])

    def testArgumentOverLimitRejected(self):
        with self.assertRaises(LexError) as context:
            lex(["a" * (MAX_ARGUMENT_LENGTH + 1)])
        self.assertIn("32768", context.exception.message)
        self.assertIn("a" * 50 + "...", context.exception.message)


class TestFormat(TestCase):
    """format() spells tokens back as they appear on a command line."""

    def testFormatEachKind(self):
        self.assertEqual(render(ShortFlag("v")), "-v")
        self.assertEqual(render(CompoundFlag("abc")), "-abc")
        self.assertEqual(render(LongFlag("name")), "--name")
        self.assertEqual(render(NegatedFlag(LongFlag("color"))), "--no-color")
        self.assertEqual(render(ValueLiteral("text")), "text")

    def testFormatRejectsNonTokens(self):
        with self.assertRaises(TypeError):
            render("-v")

    def testFormatStaysModuleQualified(self):
        import argschema

        self.assertNotIn("format", argschema.__all__)
        self.assertIs(argschema.lexer.format, render)

    def testRoundTrip(self):
        args = ["-v", "-abc", "--name", "Carol", "--no-color", "file.txt", "--out=x"]
        tokens = lex(args)
        self.assertEqual(lex(list(map(render, tokens))), tokens)


if __name__ == "__main__":
    unittest.main()
