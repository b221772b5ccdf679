"""
Schema behavioral tests (argument construction, sanitization, schema faults, warnings).

Scope
- Validate NamedArgument/Positional/Subcommand construction and derived metadata.
- Validate type/value errors for malformed parameters.
- Validate SchemaConfigurationFault for conflicting specs.
- Validate ReservedFlagWarning for flags shadowed by help/version.

Conventions
- Test method names follow CamelCase per project convention.
- Never pass explicit None for any parameter; omit instead.
"""

import unittest
import warnings
from unittest import TestCase

from argschema import (
    Action,
    NamedArgument,
    Positional,
    Subcommand,
    CommandSchema,
    ValueKind,
    Range,
    SchemaConfigurationFault,
    ReservedFlagWarning,
)
from argschema.utils import Unset


class TestNamedArgument(TestCase):
    """Behavioral tests for NamedArgument specifications."""

    def testRequiresAtLeastOneFlag(self):
        with self.assertRaises(TypeError):
            NamedArgument("name")

    def testShortMustBeSingleCharacter(self):
        with self.assertRaises(ValueError):
            NamedArgument("name", "nm")

    def testFieldMustBeIdentifier(self):
        with self.assertRaises(ValueError):
            NamedArgument("not-valid", "n")

    def testDefaultActionIsSet(self):
        self.assertIs(NamedArgument("name", "n", "name").action, Action.SET)

    def testBooleanKindDefaultsToSetTrue(self):
        argument = NamedArgument("verbose", "v", kind=ValueKind.BOOL)
        self.assertIs(argument.action, Action.SET_TRUE)
        self.assertIs(argument.initial, False)

    def testAppendImpliesMultiple(self):
        argument = NamedArgument("tags", "t", "tag", action=Action.APPEND)
        self.assertTrue(argument.multiple)
        self.assertEqual(argument.initial, [])

    def testCountIsInteger(self):
        argument = NamedArgument("verbosity", "v", action=Action.COUNT)
        self.assertIs(argument.kind, ValueKind.INT)
        self.assertEqual(argument.initial, 0)

    def testSetFalseDefaultsTrue(self):
        self.assertIs(NamedArgument("color", long="color", action=Action.SET_FALSE).initial, True)

    def testNegatableRequiresBoolean(self):
        with self.assertRaises(TypeError):
            NamedArgument("name", "n", negatable=True)

    def testChoicesRequireValue(self):
        with self.assertRaises(TypeError):
            NamedArgument("verbose", "v", action=Action.SET_TRUE, choices=("a",))

    def testValidationsMustBeConstraints(self):
        with self.assertRaises(TypeError):
            NamedArgument("port", "p", validations=[lambda value: True])

    def testFlagsAndLabels(self):
        argument = NamedArgument("name", "n", "name")
        self.assertEqual(argument.flags, ("-n", "--name"))
        self.assertEqual(argument.display, "-n, --name")
        self.assertEqual(argument.label, "--name")
        self.assertEqual(NamedArgument("name", "n").label, "-n")

    def testDefaultIsCopiedOut(self):
        argument = NamedArgument("tags", "t", action=Action.APPEND, default=["x"])
        argument.initial.append("y")
        self.assertEqual(argument.initial, ["x"])

    def testUnsetMetadata(self):
        argument = NamedArgument("name", "n")
        self.assertIs(argument.long, Unset)
        self.assertIsNone(argument.help)

    def testRepr(self):
        self.assertTrue(repr(NamedArgument("name", "n")).startswith("named-argument(field='name'"))


class TestPositional(TestCase):
    """Behavioral tests for Positional specifications."""

    def testIndexMustBeNonNegative(self):
        with self.assertRaises(ValueError):
            Positional("file", -1)

    def testIndexMustBeInteger(self):
        with self.assertRaises(TypeError):
            Positional("file", "0")

    def testLabel(self):
        self.assertEqual(Positional("file", 0).label, "<file>")

    def testTrailingInitialIsEmptyList(self):
        self.assertEqual(Positional("rest", 1, last=True).initial, [])


class TestSubcommand(TestCase):
    """Behavioral tests for Subcommand slots."""

    def testVariantsFromPairsKeepOrder(self):
        slot = Subcommand("command", [("b", CommandSchema("b")), ("a", CommandSchema("a"))])
        self.assertEqual(list(slot.variants), ["b", "a"])

    def testDuplicateDiscriminatorFaults(self):
        with self.assertRaises(SchemaConfigurationFault):
            Subcommand("command", [("a", CommandSchema("a")), ("a", CommandSchema("a"))])

    def testVariantMustBeSchema(self):
        with self.assertRaises(TypeError):
            Subcommand("command", {"a": object()})

    def testDiscriminatorCannotLookLikeFlag(self):
        with self.assertRaises(ValueError):
            Subcommand("command", {"-a": CommandSchema("a")})

    def testAtLeastOneVariant(self):
        with self.assertRaises(ValueError):
            Subcommand("command", {})


class TestCommandSchema(TestCase):
    """Cross-argument checks performed by CommandSchema."""

    def testNameMustBeNonEmpty(self):
        with self.assertRaises(ValueError):
            CommandSchema("  ")

    def testArgumentsMustBeSpecs(self):
        with self.assertRaises(TypeError):
            CommandSchema("app", ["--name"])

    def testDuplicateShortFlag(self):
        with self.assertRaises(SchemaConfigurationFault) as context:
            CommandSchema("app", [NamedArgument("one", "x"), NamedArgument("two", "x")])
        self.assertEqual(
            context.exception.message,
            "Duplicate short flag '-x' found on arguments 'one' and 'two'",
        )

    def testDuplicateLongOption(self):
        with self.assertRaises(SchemaConfigurationFault) as context:
            CommandSchema("app", [NamedArgument("one", long="same"), NamedArgument("two", long="same")])
        self.assertEqual(
            context.exception.message,
            "Duplicate long option '--same' found on arguments 'one' and 'two'",
        )

    def testShortFlagMustBeAlphanumeric(self):
        with self.assertRaises(SchemaConfigurationFault) as context:
            CommandSchema("app", [NamedArgument("odd", "?")])
        self.assertIn("Short flags must be alphanumeric", context.exception.message)

    def testLongOptionCannotContainWhitespace(self):
        with self.assertRaises(SchemaConfigurationFault) as context:
            CommandSchema("app", [NamedArgument("odd", long="two words")])
        self.assertIn("cannot contain whitespace", context.exception.message)

    def testDuplicateField(self):
        with self.assertRaises(SchemaConfigurationFault):
            CommandSchema("app", [NamedArgument("name", "a"), NamedArgument("name", "b")])

    def testMultipleSubcommandSlots(self):
        with self.assertRaises(SchemaConfigurationFault) as context:
            CommandSchema("app", [
                Subcommand("one", {"a": CommandSchema("a")}),
                Subcommand("two", {"b": CommandSchema("b")}),
            ])
        self.assertIn("Only one subcommand property is allowed", context.exception.message)

    def testMultipleTrailingPositionals(self):
        with self.assertRaises(SchemaConfigurationFault):
            CommandSchema("app", [Positional("a", 0, last=True), Positional("b", 1, last=True)])

    def testTrailingPositionalMustBeLast(self):
        with self.assertRaises(SchemaConfigurationFault):
            CommandSchema("app", [Positional("rest", 0, last=True), Positional("first", 1)])

    def testDuplicatePositionalIndex(self):
        with self.assertRaises(SchemaConfigurationFault):
            CommandSchema("app", [Positional("a", 0), Positional("b", 0)])

    def testVersionActionNeedsVersion(self):
        with self.assertRaises(SchemaConfigurationFault):
            CommandSchema("app", [NamedArgument("show", long="show-version", action=Action.VERSION)])

    def testPositionalsSortedByIndex(self):
        schema = CommandSchema("app", [Positional("second", 1), Positional("first", 0)])
        self.assertEqual([positional.field for positional in schema.positionals], ["first", "second"])

    def testLookups(self):
        name = NamedArgument("name", "n", "name", validations=[Range(1, 2)])
        schema = CommandSchema("app", [name])
        self.assertIs(schema.short("n"), name)
        self.assertIs(schema.long("name"), name)
        self.assertIsNone(schema.short("x"))
        self.assertIsNone(schema.subcommand)


class TestReservedFlags(TestCase):
    """Flags shadowed by the built-in help/version emit warnings."""

    def testReservedHelpFlagWarns(self):
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            CommandSchema("app", [NamedArgument("host", "h", "host")])
        self.assertEqual(len(caught), 1)
        self.assertIs(caught[0].category, ReservedFlagWarning)
        self.assertIn("reserved help flag '-h'", str(caught[0].message))

    def testReservedVersionFlagWarnsOnlyWhenVersioned(self):
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            CommandSchema("app", [NamedArgument("verbose", "V")])
            CommandSchema("app", [NamedArgument("verbose", "V")], version="1.0")
        self.assertEqual(len(caught), 1)
        self.assertIn("Version will take precedence", str(caught[0].message))

    def testHelpActionDoesNotWarn(self):
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            CommandSchema("app", [NamedArgument("help", "h", "help", action=Action.HELP)])
        self.assertEqual(caught, [])


if __name__ == "__main__":
    unittest.main()
