"""
Parser tests (single-pass scan of options, clusters, values and stops).

Scope
- Long options (inline and spaced values), short clusters, '--' and '-'.
- Value consumption rules: no swallowing of dash-prefixed lookaheads,
  optional fallbacks, required failures.
- Storage: multiple accumulation, transforms, default back-fill.
- Observers and the stop signal; on_parsed hooks.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from arbor import OptionDefinition, Parser, PartitioningObserver, param
from arbor.faults import IllegalOptionError, IllegalOptionValueError, OptionRequiresAnArgumentError


def definitions():
    return [
        OptionDefinition("a", "aaa", "opt a", "optional"),
        OptionDefinition("b", "bbb", "opt b"),
        OptionDefinition("c", "ccc", "opt c"),
        OptionDefinition("r", "req", "a required one", "required"),
        OptionDefinition("p", "port", "a number", "required", transform=int),
    ]


def parse(tokens, *args, **kwargs):
    return Parser(tokens, definitions(), *args, **kwargs).run()


class TestParserBasics(TestCase):
    """Positionals, '--' handling and long options."""

    def testNoOptionsGiven(self):
        parser = parse(["foo", "bar", "--", "baz"])
        self.assertEqual(parser.options, {})
        self.assertEqual(parser.positionals, ["foo", "bar", "baz"])
        self.assertEqual(parser.raw, ["foo", "bar", "--", "baz"])

    def testBareDashIsPositional(self):
        parser = parse(["-", "-b"])
        self.assertEqual(parser.positionals, ["-"])
        self.assertEqual(parser.options, {"bbb": True})

    def testDoubleDashEndsOptions(self):
        parser = parse(["-b", "--", "-c", "--ccc"])
        self.assertEqual(parser.options, {"bbb": True})
        self.assertEqual(parser.positionals, ["-c", "--ccc"])

    def testSecondDoubleDashIsRecordedAndExcluded(self):
        parser = parse(["a", "--", "b", "--", "c"])
        self.assertEqual(parser.positionals, ["a", "b", "c"])
        self.assertEqual(parser.raw, ["a", "--", "b", "--", "c"])

    def testLongForbidden(self):
        self.assertEqual(parse(["--bbb"]).options, {"bbb": True})

    def testLongInlineAndSpacedValues(self):
        self.assertEqual(parse(["--req=xyz"]).options, {"req": "xyz"})
        self.assertEqual(parse(["--req", "xyz", "foo"]).options, {"req": "xyz"})
        self.assertEqual(parse(["--req", "xyz", "foo"]).positionals, ["foo"])
        self.assertEqual(parse(["--req=a=b"]).options, {"req": "a=b"})

    def testUnknownLongOptionRaises(self):
        with self.assertRaises(IllegalOptionError) as context:
            parse(["--nope"])
        self.assertEqual(context.exception.message, "illegal option -- nope")

    def testForbiddenArgumentWithInlineValueRaises(self):
        with self.assertRaises(IllegalOptionValueError):
            parse(["--bbb=yes"])

    def testRequiredValueMissingRaises(self):
        with self.assertRaises(OptionRequiresAnArgumentError) as context:
            parse(["--req"])
        self.assertEqual(context.exception.message, "option requires an argument -- req")

    def testRequiredNeverSwallowsDashPrefixedLookahead(self):
        with self.assertRaises(OptionRequiresAnArgumentError):
            parse(["--req", "-b"])
        with self.assertRaises(OptionRequiresAnArgumentError):
            parse(["--req", "--"])

    def testOptionalWithoutValueIsTrue(self):
        parser = parse(["--aaa", "-b"])
        self.assertEqual(parser.options, {"aaa": True, "bbb": True})

    def testOptionalConsumesValue(self):
        parser = parse(["--aaa", "xyz", "foo"])
        self.assertEqual(parser.options, {"aaa": "xyz"})
        self.assertEqual(parser.positionals, ["foo"])


class TestShortClusters(TestCase):
    """Clusters of short options."""

    def testForbiddenCluster(self):
        self.assertEqual(parse(["-bc"]).options, {"bbb": True, "ccc": True})

    def testAllForbiddenCluster(self):
        parser = Parser(["-abc"], [OptionDefinition("a"), OptionDefinition("b"), OptionDefinition("c")]).run()
        self.assertEqual(parser.options, {"a": True, "b": True, "c": True})

    def testRequiredNotLastRaises(self):
        with self.assertRaises(OptionRequiresAnArgumentError) as context:
            parse(["-brc", "value"])
        self.assertEqual(context.exception.key, "r")

    def testRequiredLastReadsNextToken(self):
        parser = parse(["-bcr", "value"])
        self.assertEqual(parser.options, {"bbb": True, "ccc": True, "req": "value"})

    def testUnknownShortRaises(self):
        with self.assertRaises(IllegalOptionError) as context:
            parse(["-bz"])
        self.assertEqual(context.exception.key, "z")


class TestStorage(TestCase):
    """Multiple values, transforms and default back-fill."""

    def testMultipleAccumulates(self):
        verbose = OptionDefinition("v", "verbose", multiple=True)
        output = OptionDefinition("o", "output", argument="required", multiple=True)
        parser = Parser(["-v", "-vv", "--verbose", "-o", "x", "--output=y"], [verbose, output]).run()
        self.assertEqual(parser.options, {"verbose": [True] * 4, "output": ["x", "y"]})

    def testLastWriteWins(self):
        self.assertEqual(parse(["--req", "x", "--req", "y"]).options, {"req": "y"})

    def testTransformIsApplied(self):
        self.assertEqual(parse(["--port", "8080"]).options, {"port": 8080})
        self.assertEqual(parse(["-p", "8080"]).options, {"port": 8080})

    def testTransformFailureRaises(self):
        with self.assertRaises(IllegalOptionValueError) as context:
            parse(["--port=eighty"])
        self.assertEqual(context.exception.message, "invalid value 'eighty' for --port option")
        self.assertEqual(context.exception.value, "eighty")

    def testFallbackValuesAreNotTransformed(self):
        count = OptionDefinition("n", "count", argument="optional", transform=int)
        self.assertEqual(Parser(["--count"], [count]).run().options, {"count": True})

    def testOptionalDefaultWhenNoValue(self):
        animal = OptionDefinition("a", "animal", argument="optional", default="donkey")
        self.assertEqual(Parser(["--animal"], [animal]).run().options, {"animal": "donkey"})
        self.assertEqual(Parser(["--animal", "gi"], [animal]).run().options, {"animal": "gi"})

    def testContainerDefaultsAreBackFilledUnchanged(self):
        tags = OptionDefinition("t", "tag", argument="required", multiple=True, default=["x"])
        salt = OptionDefinition(long="salt", argument="required", default=b"hi")
        env = OptionDefinition(long="env", argument="optional", default={"a": "1"})
        options = Parser([], [tags, salt, env]).run().options
        self.assertEqual(options["tag"], ["x"])
        self.assertIsInstance(options["tag"], list)
        self.assertEqual(options["salt"], b"hi")
        self.assertIs(type(options["env"]), dict)

    def testOptionalFallbackKeepsContainerDefault(self):
        env = OptionDefinition(long="env", argument="optional", default={"a": "1"})
        self.assertIs(type(Parser(["--env"], [env]).run().options["env"]), dict)

    def testDefaultBackFillWithoutHook(self):
        calls = []
        animal = OptionDefinition(
            "a", "animal", argument="optional", default="donkey",
            on_parsed=lambda value, command: calls.append(value)
        )
        self.assertEqual(Parser([], [animal]).run().options, {"animal": "donkey"})
        self.assertEqual(calls, [])
        self.assertEqual(Parser([], [animal], fill_defaults=False).run().options, {})

    def testReparsingIsDeterministic(self):
        tokens = ["-bc", "--req", "x", "foo", "--", "-a"]
        first, second = parse(tokens), parse(tokens)
        self.assertEqual(first.options, second.options)
        self.assertEqual(first.raw, second.raw)

    def testArgumentsBinding(self):
        parser = parse(["-b", "1", "x"], [param("count", int), param("name")])
        arguments = parser.arguments()
        self.assertEqual(arguments["count"], 1)
        self.assertEqual(arguments["name"], "x")


class TestObservers(TestCase):
    """Hooks, observers and the stop signal."""

    def testHookFiresOncePerOccurrence(self):
        calls = []
        verbose = OptionDefinition(
            "v", "verbose", multiple=True,
            on_parsed=lambda value, command: calls.append((value, command))
        )
        Parser(["-v", "-v"], [verbose], command="owner").run()
        self.assertEqual(calls, [(True, "owner"), (True, "owner")])

    def testObserverSeesOptionsAndArguments(self):
        events = []

        class Recorder:
            def option_added(self, key, value, parser):
                events.append(("option", key, value))

            def argument_added(self, token, parser):
                events.append(("argument", token))

        parse(["-b", "x", "--", "y"], observer=Recorder())
        self.assertEqual(events, [("option", "bbb", True), ("argument", "x"), ("argument", "y")])

    def testPartitioningStopsAtFirstPositional(self):
        observer = PartitioningObserver()
        parser = parse(["-r", "666", "sub", "-b", "file"], observer=observer, fill_defaults=False)
        self.assertEqual(parser.options, {"req": "666"})
        self.assertEqual(observer.last_argument, "sub")
        self.assertEqual(parser.unprocessed, ["-b", "file"])
        self.assertFalse(parser.running)

    def testPartitioningWithoutPositional(self):
        observer = PartitioningObserver()
        parser = parse(["-b"], observer=observer)
        self.assertIsNone(observer.last_argument)
        self.assertEqual(parser.unprocessed, [])

    def testStringTokensRejected(self):
        with self.assertRaises(TypeError):
            Parser("-b", definitions())


if __name__ == "__main__":
    unittest.main()
