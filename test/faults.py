"""
Faults module behavioral tests (codes, hierarchy, rendering).

Scope
- Validate FaultCode normalization with and without host remapping (__codes__).
- Validate the exception hierarchy callers rely on in except clauses.
- Validate message/options carriage and rich rendering.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import io
import sys
import unittest
from unittest import TestCase, mock

from rich.console import Console

from kopt.faults import (
    FaultCode,
    OptionException,
    ParseError,
    UnknownOptionError,
    AmbiguousOptionError,
    MissingArgumentError,
    FlagAssignmentError,
    MissingRequiredOptionError,
    InvalidValueError,
    ConversionError,
    UnknownOptionKeyError,
    DuplicateOptionError,
)


def render(renderable):
    console = Console(file=io.StringIO(), width=200, color_system=None)
    console.print(renderable)
    return console.file.getvalue()


class TestFaultCode(TestCase):
    def testNormalizeDefaultsToNumber(self):
        self.assertEqual(FaultCode.UNKNOWN_OPTION.normalize(), "21101")

    def testNormalizeHonorsHostCodes(self):
        codes = {FaultCode.UNKNOWN_OPTION: "E-UNKNOWN"}
        with mock.patch.object(sys.modules["__main__"], "__codes__", codes, create=True):
            self.assertEqual(FaultCode.UNKNOWN_OPTION.normalize(), "E-UNKNOWN")
            self.assertEqual(FaultCode.INVALID_VALUE.normalize(), "21122")

    def testCodesAreUnique(self):
        self.assertEqual(len(set(FaultCode)), len(FaultCode.__members__))


class TestHierarchy(TestCase):
    def testParseFaults(self):
        for exception in (
                UnknownOptionError,
                AmbiguousOptionError,
                MissingArgumentError,
                FlagAssignmentError,
                MissingRequiredOptionError,
                InvalidValueError,
        ):
            with self.subTest(exception=exception.__name__):
                self.assertTrue(issubclass(exception, ParseError))
                self.assertTrue(issubclass(exception, OptionException))

    def testAmbiguityIsUnknownOption(self):
        self.assertTrue(issubclass(AmbiguousOptionError, UnknownOptionError))

    def testAccessAndDeclarationFaultsAreNotParseFaults(self):
        for exception in (ConversionError, UnknownOptionKeyError, DuplicateOptionError):
            with self.subTest(exception=exception.__name__):
                self.assertFalse(issubclass(exception, ParseError))
                self.assertTrue(issubclass(exception, OptionException))

    def testBuiltinCompatibility(self):
        self.assertTrue(issubclass(UnknownOptionKeyError, KeyError))
        self.assertTrue(issubclass(DuplicateOptionError, ValueError))


class TestOptionException(TestCase):
    def setUp(self):
        self.fault = UnknownOptionError(
            "unknown option '-z' at first position",
            program="prog",
            code=FaultCode.UNKNOWN_OPTION,
            title="unknown option",
            hint="check the usage for the declared options",
            colorful=False,
            input="-z",
        )

    def testMessage(self):
        self.assertEqual(self.fault.message, "unknown option '-z' at first position")
        self.assertEqual(str(self.fault), "unknown option '-z' at first position")

    def testKeyErrorMessageIsNotQuoted(self):
        fault = UnknownOptionKeyError("no option is declared as 'x'", key="x")
        self.assertEqual(str(fault), "no option is declared as 'x'")

    def testOptionsAreReadOnly(self):
        self.assertEqual(self.fault.options["input"], "-z")
        with self.assertRaises(TypeError):
            self.fault.options["input"] = "-y"

    def testRichRendering(self):
        self.assertEqual(
            render(self.fault),
            "[ prog — 21101 | Unknown Option ]\n"
            "unknown option '-z' at first position\n"
            " → check the usage for the declared options\n",
        )

    def testRichRenderingWithoutContext(self):
        output = render(OptionException("boom", colorful=False))
        self.assertIn("boom", output)
        self.assertIn("| Error ]", output)


if __name__ == "__main__":
    unittest.main()
