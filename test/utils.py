"""
Tests for the utilities module.

This module verifies:
- The Unset sentinel (singleton identity, falsy semantics, finality).
- coalesce() preserving legitimate falsey values.
- rename() in both function and decorator forms.
- mirror() exposing copies of private containers.
"""
import unittest
from unittest import TestCase

from kopt.utils import Unset, UnsetType, coalesce, rename, mirror


class UnsetTest(TestCase):
    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)

    def testFalsy(self):
        self.assertFalse(Unset)
        self.assertIsNot(Unset, None)

    def testRepr(self):
        self.assertEqual(repr(Unset), "Unset")

    def testFinal(self):
        with self.assertRaises(TypeError):
            class Subclass(UnsetType):  # NOQA: F-841
                pass

    def testUnionWithTypes(self):
        self.assertIsInstance("text", str | Unset)
        self.assertIsInstance(Unset, str | Unset)
        self.assertNotIsInstance(1, str | Unset)

    def testUnionWithUnsetOnTheLeft(self):
        self.assertIsInstance("text", Unset | str)
        self.assertIsInstance(Unset, Unset | str)
        self.assertNotIsInstance(1, Unset | str)


class CoalesceTest(TestCase):
    def testUnsetIsReplaced(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))

    def testFalseyValuesArePreserved(self):
        for value in (None, 0, "", []):
            with self.subTest(value=value):
                self.assertIs(coalesce(value, "fallback"), value)


class RenameTest(TestCase):
    def testFunctionForm(self):
        def f():
            pass

        self.assertIs(rename(f, "g"), f)
        self.assertEqual(f.__name__, "g")
        self.assertEqual(f.__qualname__, "g")

    def testDecoratorForm(self):
        @rename("h")
        def f():
            pass

        self.assertEqual(f.__name__, "h")

    def testBadArguments(self):
        with self.assertRaises(TypeError):
            rename()
        with self.assertRaises(TypeError):
            rename(1, "x")
        with self.assertRaises(TypeError):
            rename(1)


class MirrorTest(TestCase):
    def testReadOnlyCopy(self):
        class Holder:
            items = mirror("items")

            def __init__(self):
                self._items = ["a", ("b", "c")]

        holder = Holder()
        self.assertEqual(holder.items, ["a", ["b", "c"]])
        holder.items.append("d")
        self.assertEqual(holder.items, ["a", ["b", "c"]])
        with self.assertRaises(AttributeError):
            holder.items = []

    def testScalarsPassThrough(self):
        class Holder:
            name = mirror("name")
            _name = "number"

        self.assertEqual(Holder().name, "number")

    def testNameMustBeString(self):
        with self.assertRaises(TypeError):
            mirror(1)


if __name__ == "__main__":
    unittest.main()
