"""
Arguments module tests (option/param definitions, decorators, ArgumentList).

Scope
- Validate definition-time errors (TypeError/ValueError) for malformed names,
  argument modes, defaults and callables.
- Validate identity (key, formatted_name) and immutability.
- Validate decorator forms binding the decorated function as on_parsed.
- Validate ArgumentList binding, indexing and the '--' raw record.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from arbor import (
    Argument,
    ArgumentList,
    OptionDefinition,
    ParamDefinition,
    flag,
    optional,
    option,
    param,
    required,
)
from arbor.faults import ArgumentCountMismatchError, IllegalArgumentValueError


class TestOptionDefinition(TestCase):
    """Validation and identity of option definitions."""

    def testKeyPrefersLongName(self):
        self.assertEqual(OptionDefinition("v", "verbose").key, "verbose")
        self.assertEqual(OptionDefinition("v").key, "v")
        self.assertEqual(OptionDefinition(long="verbose").key, "verbose")

    def testFormattedName(self):
        self.assertEqual(OptionDefinition("v", "verbose").formatted_name, "--verbose")
        self.assertEqual(OptionDefinition("v").formatted_name, "-v")

    def testBothNamesAbsentRaises(self):
        with self.assertRaises(TypeError):
            OptionDefinition()

    def testMalformedShortNameRaises(self):
        for short in ("ab", "-", " ", ""):
            with self.subTest(short=short), self.assertRaises(ValueError):
                OptionDefinition(short)

    def testMalformedLongNameRaises(self):
        for long in ("x", "-verbose", "--verbose", "a=b", "two words"):
            with self.subTest(long=long), self.assertRaises(ValueError):
                OptionDefinition(long=long)

    def testArgumentModeNormalization(self):
        self.assertIs(OptionDefinition("p", argument="required").argument, Argument.REQUIRED)
        self.assertIs(OptionDefinition("p", argument=Argument.OPTIONAL).argument, Argument.OPTIONAL)
        self.assertIs(OptionDefinition("p").argument, Argument.FORBIDDEN)
        with self.assertRaises(ValueError):
            OptionDefinition("p", argument="sometimes")

    def testForbiddenArgumentRejectsTruthyDefault(self):
        with self.assertRaises(ValueError):
            OptionDefinition("v", "verbose", default="yes")
        self.assertIs(OptionDefinition("v", "verbose", default=False).default, False)

    def testDefaultIsKeptAsGiven(self):
        tags = ["x"]
        self.assertIs(OptionDefinition("t", "tag", argument="required", default=tags).default, tags)

    def testTakesValue(self):
        self.assertFalse(OptionDefinition("v").takes_value)
        self.assertTrue(OptionDefinition("p", argument="optional").takes_value)
        self.assertTrue(OptionDefinition("p", argument="required").takes_value)

    def testCallablesAreChecked(self):
        with self.assertRaises(TypeError):
            OptionDefinition("p", argument="required", transform="int")
        with self.assertRaises(TypeError):
            OptionDefinition("p", on_parsed=42)

    def testDescriptionIsTrimmed(self):
        self.assertEqual(OptionDefinition("v", description="  be chatty \n").description, "be chatty")
        with self.assertRaises(ValueError):
            OptionDefinition("v", description="   ")

    def testFieldsAreReadOnly(self):
        definition = OptionDefinition("v", "verbose")
        with self.assertRaises(AttributeError):
            definition.short = "x"

    def testRepr(self):
        text = repr(OptionDefinition("v", "verbose"))
        self.assertTrue(text.startswith("option-definition("))
        self.assertIn("long='verbose'", text)


class TestDecorators(TestCase):
    """Decorator forms build definitions around on_parsed hooks."""

    def testRequiredDecorator(self):
        @required("p", "port", "port to listen on", transform=int)
        def onPort(value, command):
            pass

        self.assertIsInstance(onPort, OptionDefinition)
        self.assertIs(onPort.argument, Argument.REQUIRED)
        self.assertIs(onPort.transform, int)
        self.assertEqual(onPort.on_parsed.__name__, "onPort")

    def testOptionalAndFlagDecorators(self):
        @optional("a", "animal", "pick an animal", default="donkey")
        def onAnimal(value, command):
            pass

        @flag("v", "verbose", "be chatty", multiple=True)
        def onVerbose(value, command):
            pass

        self.assertIs(onAnimal.argument, Argument.OPTIONAL)
        self.assertEqual(onAnimal.default, "donkey")
        self.assertIs(onVerbose.argument, Argument.FORBIDDEN)
        self.assertTrue(onVerbose.multiple)

    def testOptionValidatesEagerly(self):
        with self.assertRaises(TypeError):
            option()
        with self.assertRaises(TypeError):
            option("v")(42)

    def testParamFactory(self):
        definition = param("count", int)
        self.assertIsInstance(definition, ParamDefinition)
        self.assertEqual(definition.name, "count")
        with self.assertRaises(ValueError):
            param(" ")
        with self.assertRaises(TypeError):
            param("count", "int")


class TestArgumentList(TestCase):
    """Binding of positional tokens and lookups by position or name."""

    def testPassThroughWithoutParams(self):
        arguments = ArgumentList(["a", "b"])
        self.assertEqual(len(arguments), 2)
        self.assertEqual(arguments[0], "a")
        self.assertEqual(arguments[-1], "b")
        self.assertIsNone(arguments[5])
        self.assertIsNone(arguments["a"])
        self.assertEqual(arguments, ["a", "b"])
        self.assertEqual(list(arguments), ["a", "b"])
        self.assertEqual(arguments.to_list(), ["a", "b"])
        self.assertIn("b", arguments)

    def testDoubleDashIsRawOnly(self):
        arguments = ArgumentList(["a", "--", "b", "--"])
        self.assertEqual(arguments, ["a", "b"])
        self.assertEqual(arguments.raw, ("a", "--", "b", "--"))

    def testNamedBindingPreservesOrder(self):
        arguments = ArgumentList(["3", "x"], params=[param("count", int), param("name")])
        self.assertEqual(arguments[0], 3)
        self.assertEqual(arguments["count"], 3)
        self.assertEqual(arguments[1], "x")
        self.assertEqual(arguments["name"], "x")
        self.assertIsNone(arguments["missing"])
        self.assertEqual(arguments[0:1], [3])

    def testCountMismatchRaises(self):
        with self.assertRaises(ArgumentCountMismatchError) as context:
            ArgumentList(["a"], params=[param("x"), param("y")])
        self.assertEqual((context.exception.expected, context.exception.actual), (2, 1))
        self.assertEqual(
            context.exception.message,
            "incorrect number of arguments given: expected 2, but got 1"
        )

    def testExplicitlyNoParams(self):
        self.assertEqual(ArgumentList([], no_params=True), [])
        with self.assertRaises(ArgumentCountMismatchError) as context:
            ArgumentList(["a"], no_params=True)
        self.assertEqual((context.exception.expected, context.exception.actual), (0, 1))

    def testTransformFailureRaises(self):
        with self.assertRaises(IllegalArgumentValueError) as context:
            ArgumentList(["many"], params=[param("count", int)])
        self.assertEqual(context.exception.message, "invalid value 'many' for count parameter")
        self.assertIsInstance(context.exception.__cause__, ValueError)

    def testInvalidKeyTypeRaises(self):
        arguments = ArgumentList(["a"])
        with self.assertRaises(TypeError):
            arguments[1.5]
        with self.assertRaises(TypeError):
            arguments[None]

    def testVerbatimKeepsEverything(self):
        arguments = ArgumentList.verbatim(["-x", "--", "y"])
        self.assertEqual(arguments, ["-x", "--", "y"])
        self.assertEqual(arguments.raw, ("-x", "--", "y"))


if __name__ == "__main__":
    unittest.main()
