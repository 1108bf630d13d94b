"""
Tests for the Unset sentinel and the small helpers around it.

This module verifies:
- Singleton identity, falsiness and representation of Unset.
- Copying, deep copying and pickling preserve identity.
- Finality (UnsetType cannot be subclassed).
- coalesce(), rename(), freeze() and mirror() behavior.
"""
import copy
import pickle
import unittest
from types import MappingProxyType
from unittest import TestCase

from gantry.utils import *


class UnsetTest(TestCase):

    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)
        self.assertIs(UnsetType(), UnsetType())

    def testFalsyButNotNone(self):
        self.assertFalse(Unset)
        self.assertIsNotNone(Unset)
        self.assertNotEqual(Unset, None)
        self.assertNotEqual(Unset, ())

    def testRepr(self):
        self.assertEqual(repr(Unset), "Unset")

    def testCopies(self):
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy(Unset), Unset)
        self.assertIs(pickle.loads(pickle.dumps(Unset)), Unset)

    def testFinal(self):
        with self.assertRaises(TypeError):
            class Subclass(UnsetType):
                pass

    def testUnion(self):
        self.assertTrue(isinstance(Unset, str | Unset))
        self.assertTrue(isinstance("x", Unset | str))
        self.assertFalse(isinstance(1, str | Unset))


class HelpersTest(TestCase):

    def testCoalesce(self):
        self.assertEqual(coalesce("name", "fallback"), "name")
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertIsNone(coalesce(Unset))
        self.assertEqual(coalesce(0, 5), 0)

    def testRenameDirect(self):
        def function():
            pass

        self.assertIs(rename(function, "renamed"), function)
        self.assertEqual(function.__name__, "renamed")
        self.assertEqual(function.__qualname__, "renamed")

    def testRenameDecorator(self):
        @rename("renamed")
        def function():
            pass

        self.assertEqual(function.__name__, "renamed")

    def testRenameValidation(self):
        with self.assertRaises(TypeError):
            rename()
        with self.assertRaises(TypeError):
            rename(len, "length")
        with self.assertRaises(TypeError):
            rename(1)
        with self.assertRaises(TypeError):
            rename(lambda: None, 1)

    def testFreeze(self):
        self.assertEqual(freeze([1, 2]), (1, 2))
        self.assertIsInstance(freeze({"a": 1}), MappingProxyType)
        self.assertEqual(freeze({1, 2}), frozenset({1, 2}))
        self.assertEqual(freeze("text"), "text")
        self.assertIs(freeze(Unset), Unset)

    def testMirror(self):
        class Holder:
            value = mirror("value")

            def __init__(self):
                self._value = 3

        holder = Holder()
        self.assertEqual(holder.value, 3)
        with self.assertRaises(AttributeError):
            holder.value = 4


if __name__ == "__main__":
    unittest.main()
