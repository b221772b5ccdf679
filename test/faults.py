"""
Fault behavioral tests (codes, replacement, triggering, rendering).

Scope
- Validate FaultCode.normalize() with and without a host __codes__ mapping.
- Validate copy.replace() on faults keeps type, message and options.
- Validate trigger() raising, printing and exiting.
- Validate rich rendering of faults and warnings.

Conventions
- Test method names follow CamelCase per project convention.
- Host overrides in __main__ are patched with unittest.mock.
"""

import contextlib
import copy
import io
import sys
import unittest
from unittest import TestCase, mock

from rich.console import Console

from argschema import (
    FaultCode,
    ParseFault,
    UnknownArgumentError,
    MissingRequiredError,
    MissingSubcommandError,
    ReservedFlagWarning,
    trigger,
)


def capture(renderable):
    console = Console(file=io.StringIO(), width=120, color_system=None)
    console.print(renderable)
    return console.file.getvalue()


class TestFaultCode(TestCase):
    """Codes normalize to strings, remappable by the host."""

    def testNormalizeDefault(self):
        self.assertEqual(FaultCode.UNKNOWN_ARGUMENT.normalize(), "11111")

    def testNormalizeWithHostMapping(self):
        codes = {FaultCode.UNKNOWN_ARGUMENT: "E-UNKNOWN"}
        with mock.patch.object(sys.modules["__main__"], "__codes__", codes, create=True):
            self.assertEqual(FaultCode.UNKNOWN_ARGUMENT.normalize(), "E-UNKNOWN")
            self.assertEqual(FaultCode.MISSING_VALUE.normalize(), "11113")


class TestParseFault(TestCase):
    """Faults carry a message and read-only options."""

    def testMessageAndOptions(self):
        fault = UnknownArgumentError("Unknown argument '-x'", hint="try --help")
        self.assertEqual(str(fault), "Unknown argument '-x'")
        self.assertEqual(fault.options["hint"], "try --help")
        with self.assertRaises(TypeError):
            fault.options["hint"] = "other"

    def testCodeAndTitle(self):
        fault = MissingSubcommandError("SubCommand 'command' is required")
        self.assertIs(fault.code, FaultCode.MISSING_SUBCOMMAND)
        self.assertEqual(fault.title, "missing subcommand")
        self.assertIsInstance(fault, MissingRequiredError)

    def testReplaceKeepsTypeAndMergesOptions(self):
        fault = UnknownArgumentError("Unknown argument '-x'", hint="try --help")
        replaced = copy.replace(fault, prog="app")
        self.assertIsInstance(replaced, UnknownArgumentError)
        self.assertEqual(replaced.message, fault.message)
        self.assertEqual(dict(replaced.options), {"hint": "try --help", "prog": "app"})
        self.assertNotIn("prog", fault.options)


class TestTrigger(TestCase):
    """trigger() raises outside a shell and prints inside one."""

    def testRaisesByDefault(self):
        with self.assertRaises(UnknownArgumentError):
            trigger(UnknownArgumentError("Unknown argument '-x'"))

    def testShellExits(self):
        stderr = io.StringIO()
        with contextlib.redirect_stderr(stderr), self.assertRaises(SystemExit) as context:
            trigger(ParseFault("boom"), shell=True, colorful=False)
        self.assertEqual(context.exception.code, 1)
        self.assertIn("boom", stderr.getvalue())

    def testShellDeferredReturns(self):
        stderr = io.StringIO()
        with contextlib.redirect_stderr(stderr):
            self.assertIsNone(trigger(ParseFault("boom"), shell=True, deferred=True, colorful=False))
        self.assertIn("boom", stderr.getvalue())

    def testRejectsNonFaults(self):
        with self.assertRaises(TypeError):
            trigger(ValueError("boom"))


class TestRendering(TestCase):
    """Faults and warnings render a header, message and hint."""

    def testHeaderMessageAndHint(self):
        fault = UnknownArgumentError("Unknown argument '-x'", prog="app", hint="try 'app --help'", colorful=False)
        output = capture(fault)
        self.assertIn("[ app — 11111 | Unknown Argument ]", output)
        self.assertIn("Unknown argument '-x'", output)
        self.assertIn("→ try 'app --help'", output)

    def testHostProgramName(self):
        with mock.patch.object(sys.modules["__main__"], "__prog__", "tool", create=True):
            self.assertIn("[ tool — ", capture(ParseFault("boom", prog="app")))

    def testFancyPanel(self):
        output = capture(ParseFault("boom", prog="app", fancy=True, colorful=False))
        self.assertIn("boom", output)
        self.assertIn("╭", output)

    def testWarningRendering(self):
        warning = ReservedFlagWarning(
            "Argument 'host' uses reserved help flag '-h'",
            code=FaultCode.RESERVED_HELP_FLAG,
            prog="app",
        )
        self.assertIn("12111 | Reserved Flag", capture(warning))
        self.assertEqual(str(warning), "Argument 'host' uses reserved help flag '-h'")


if __name__ == "__main__":
    unittest.main()
