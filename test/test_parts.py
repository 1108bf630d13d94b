"""
Command part tests (construction, normalization, sealing).

Scope
- Argument, Flag and ValueFlag metadata validation.
- Arity normalization from defaults.
- Read-only fields, reprs, and the closed set of part classes.

Conventions
- Test method names follow CamelCase per project convention.
- Never pass explicit None for any parameter; omit instead.
"""

from __future__ import annotations

import inspect
import unittest
import warnings
from unittest import TestCase

from gantry import parts
from gantry import Argument, Arity, Flag, ValueFlag, Unset, IDENTITY


class TestArgument(TestCase):

    def testDefaults(self):
        a = Argument("target")
        self.assertEqual(a.name, "target")
        self.assertIsNone(a.descr)
        self.assertIs(a.converter, Unset)
        self.assertIs(a.type, str)
        self.assertIs(a.arity, Arity.SINGLE)
        self.assertIs(a.default, Unset)
        self.assertTrue(a.required)

    def testDescrTrimmed(self):
        self.assertEqual(Argument("target", "  Where to go  ").descr, "Where to go")

    def testDescrValidated(self):
        with self.assertRaises(ValueError):
            Argument("target", "   ")
        with self.assertRaises(TypeError):
            Argument("target", None)

    def testNameValidated(self):
        with self.assertRaises(ValueError):
            Argument("")
        with self.assertRaises(ValueError):
            Argument("1st")
        with self.assertRaises(ValueError):
            Argument("two words")
        with self.assertRaises(TypeError):
            Argument(3)
        self.assertEqual(Argument("leave-id").name, "leave-id")
        self.assertEqual(Argument("ñame").name, "ñame")

    def testDefaultImpliesOptional(self):
        a = Argument("leaveId", default=["air"])
        self.assertIs(a.arity, Arity.OPTIONAL)
        self.assertEqual(a.default, ("air",))
        self.assertFalse(a.required)

    def testVariadicKeepsArityWithDefault(self):
        a = Argument("files", arity=Arity.VARIADIC, default=["a", "b"])
        self.assertIs(a.arity, Arity.VARIADIC)
        self.assertEqual(a.default, ("a", "b"))

    def testDefaultMustBeStrings(self):
        with self.assertRaises(TypeError):
            Argument("leaveId", default="air")
        with self.assertRaises(TypeError):
            Argument("leaveId", default=[1])
        with self.assertRaises(TypeError):
            Argument("leaveId", default=5)

    def testOptionalDefaultHoldsOneToken(self):
        with self.assertRaises(ValueError):
            Argument("leaveId", arity=Arity.OPTIONAL, default=["a", "b"])

    def testConverterValidated(self):
        with self.assertRaises(TypeError):
            Argument("target", converter=str)
        self.assertIs(Argument("target", converter=IDENTITY).converter, IDENTITY)

    def testArityValidated(self):
        with self.assertRaises(TypeError):
            Argument("target", arity="?")

    def testTypeMustBeHashable(self):
        with self.assertRaises(TypeError):
            Argument("target", type=[])

    def testReadOnly(self):
        a = Argument("target")
        with self.assertRaises(AttributeError):
            a.name = "other"

    def testRepr(self):
        self.assertIn("name='target'", repr(Argument("target")))
        self.assertTrue(repr(Argument("target")).startswith("argument("))


class TestFlags(TestCase):

    def testFlag(self):
        f = Flag("e", "Also cut entities")
        self.assertEqual(f.char, "e")
        self.assertEqual(f.name, "e")
        self.assertEqual(f.descr, "Also cut entities")
        self.assertEqual(f.usage(), "[-e]")

    def testCharValidated(self):
        for char in ("", "ab", "-", " "):
            with self.subTest(char=char):
                with self.assertRaises(ValueError):
                    Flag(char)
        with self.assertRaises(TypeError):
            Flag(1)

    def testDigitCharRejected(self):
        for char in ("5", "0", "٣"):
            with self.subTest(char=char):
                with self.assertRaises(ValueError):
                    Flag(char)
                with self.assertRaises(ValueError):
                    ValueFlag(char)

    def testSourceCompilesWithoutWarnings(self):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            compile(inspect.getsource(parts), parts.__file__, "exec")

    def testValueFlag(self):
        f = ValueFlag("m", "Mask", IDENTITY, metavar="mask")
        self.assertEqual(f.char, "m")
        self.assertIs(f.converter, IDENTITY)
        self.assertEqual(f.metavar, "mask")
        self.assertEqual(f.usage(), "[-m <mask>]")

    def testValueFlagMetavarDefault(self):
        self.assertEqual(ValueFlag("m").metavar, "value")
        with self.assertRaises(ValueError):
            ValueFlag("m", metavar=" ")

    def testTypenames(self):
        self.assertEqual(ValueFlag.__typename__, "value-flag")
        self.assertTrue(repr(ValueFlag("m")).startswith("value-flag("))


class TestClosedUnion(TestCase):

    def testSealed(self):
        for base in (Argument, Flag, ValueFlag):
            with self.subTest(base=base.__name__):
                with self.assertRaises(TypeError):
                    type("Special", (base,), {})

    def testIdentityEquality(self):
        self.assertNotEqual(Flag("e"), Flag("e"))
        self.assertEqual(len({Flag("e"), Flag("e")}), 2)


if __name__ == "__main__":
    unittest.main()
