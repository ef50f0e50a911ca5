"""
Builtin extension tests.

Scope
- author / long_description: structural edits of descr and further information.
- help_subcommand / version_subcommand: injected self-referential children.
- default_values / require / env_vars: description annotations and reconciliation
  of user, default and environment values (user values always win).
- Configuration mistakes raise ValueError while extending.

Conventions
- Test method names follow CamelCase per project convention.
- Rendered output is captured by swapping adorn.rendering.console for an in-memory console.
- The environment is always passed explicitly as a plain dict.
"""

from __future__ import annotations

import io
import unittest
from unittest import TestCase, mock

from rich.console import Console

from adorn import (
    Command,
    Flag,
    MissingRequiredFlagError,
    ParsedArguments,
    ParsedFlag,
    Source,
    UnknownSubcommandError,
    extend,
    postprocess,
)
from adorn import rendering
from adorn.extensions import (
    author,
    default_values,
    env_vars,
    help_subcommand,
    long_description,
    require,
    version_subcommand,
)


class RenderingTestCase(TestCase):

    def setUp(self) -> None:
        self.output = io.StringIO()
        patch = mock.patch.object(rendering, "console", Console(file=self.output, width=120, color_system=None))
        patch.start()
        self.addCleanup(patch.stop)


class TestAuthor(TestCase):

    def testPrependsName(self):
        tool = extend([author("Jane Doe")], Command("tool", "fetches things"))
        self.assertEqual(tool.descr, "Jane Doe\nfetches things")

    def testWithoutDescription(self):
        self.assertEqual(author("Jane Doe").extend(Command("tool")).descr, "Jane Doe")

    def testNameIsTrimmedBeforePrepending(self):
        tool = author("  Jane Doe \n").extend(Command("tool", "fetches things"))
        self.assertEqual(tool.descr, "Jane Doe\nfetches things")
        self.assertEqual(author("\tJane Doe").extend(Command("tool")).descr, "Jane Doe")

    def testEmptyNameRejected(self):
        with self.assertRaises(ValueError):
            author("  ")


class TestLongDescription(TestCase):

    def testAddsSection(self):
        tool = long_description("""
            fetches records
            page by page
        """).extend(Command("tool"))
        self.assertEqual(tool.further, "DESCRIPTION:\n  fetches records\n  page by page")

    def testKeepsExistingContent(self):
        tool = long_description("second").extend(Command("tool", further="first"))
        self.assertEqual(tool.further, "first\n\nDESCRIPTION:\n  second")

    def testSectionsAccumulate(self):
        tool = extend([long_description("one"), long_description("two")], Command("tool"))
        self.assertEqual(tool.further, "DESCRIPTION:\n  one\n\nDESCRIPTION:\n  two")


class TestDefaultValues(TestCase):

    def setUp(self) -> None:
        self.command = Command("tool", flags=[Flag("level", "log level"), Flag("format")])

    def testAnnotatesDescriptions(self):
        tool = default_values({"level": "info", "--format": "json"}).extend(self.command)
        self.assertEqual(tool.switches["level"].descr, "log level [Default: `info`]")
        self.assertEqual(tool.switches["format"].descr, "[Default: `json`]")

    def testUnknownFlagRejected(self):
        with self.assertRaises(ValueError):
            default_values({"color": "auto"}).extend(self.command)

    def testMalformedPairsRejected(self):
        with self.assertRaises(TypeError):
            default_values("level=info")
        with self.assertRaises(TypeError):
            default_values([("level", "info", "extra")])
        with self.assertRaises(ValueError):
            default_values([("level", "info"), ("--level", "debug")])

    def testSuppliesDefault(self):
        extensions = [default_values([("level", "info")])]
        tool = extend(extensions, self.command)
        parsed = postprocess(extensions, tool, ParsedArguments(), {})
        self.assertEqual(parsed["level"].value, "info")
        self.assertEqual(parsed["level"].source, Source.DEFAULT)

    def testUserValueWins(self):
        extensions = [default_values([("level", "info")])]
        tool = extend(extensions, self.command)
        parsed = ParsedArguments([ParsedFlag(tool.switches["level"], "debug", Source.USER)])
        parsed = postprocess(extensions, tool, parsed, {})
        self.assertEqual(parsed["level"].value, "debug")
        self.assertEqual(parsed["level"].source, Source.USER)
        self.assertEqual(len(parsed.flags), 1)


class TestRequire(TestCase):

    def setUp(self) -> None:
        self.command = Command("tool", flags=[Flag("token", "api token", env="TOKEN"), Flag("user")], version="1.0.0")

    def testAnnotatesDescriptions(self):
        tool = require(["token", "user"]).extend(self.command)
        self.assertEqual(tool.switches["token"].descr, "[Required] api token")
        self.assertEqual(tool.switches["user"].descr, "[Required]")

    def testUnknownFlagRejected(self):
        with self.assertRaises(ValueError):
            require(["password"]).extend(self.command)

    def testMalformedNamesRejected(self):
        with self.assertRaises(TypeError):
            require("token")
        with self.assertRaises(ValueError):
            require(["token", "--token"])

    def testMissingFlagFails(self):
        extensions = [require(["token"])]
        tool = extend(extensions, self.command)
        with self.assertRaises(MissingRequiredFlagError) as context:
            postprocess(extensions, tool, ParsedArguments(), {})
        self.assertIn("token", context.exception.message)
        self.assertIn("TOKEN", context.exception.options["hint"])

    def testFirstMissingInRequiredOrder(self):
        extensions = [require(["user", "token"])]
        tool = extend(extensions, self.command)
        with self.assertRaises(MissingRequiredFlagError) as context:
            postprocess(extensions, tool, ParsedArguments(), {})
        self.assertIn("--user", context.exception.message)
        self.assertNotIn("--token", context.exception.message)

    def testHelpSkipsValidation(self):
        extensions = [require(["token"])]
        tool = extend(extensions, self.command)
        parsed = ParsedArguments([ParsedFlag(tool.switches["help"], True)])
        self.assertIs(postprocess(extensions, tool, parsed, {}), parsed)

    def testVersionSkipsValidation(self):
        extensions = [require(["token"])]
        tool = extend(extensions, self.command)
        parsed = ParsedArguments([ParsedFlag(tool.switches["version"], True)])
        self.assertIs(postprocess(extensions, tool, parsed, {}), parsed)

    def testSuppliedFlagPasses(self):
        extensions = [require(["token"])]
        tool = extend(extensions, self.command)
        parsed = ParsedArguments([ParsedFlag(tool.switches["token"], "abc")])
        self.assertIs(postprocess(extensions, tool, parsed, {}), parsed)

    def testDefaultsAndEnvironmentSatisfyWhenDeclaredFirst(self):
        extensions = [default_values({"user": "root"}), env_vars(), require(["token", "user"])]
        tool = extend(extensions, self.command)
        parsed = postprocess(extensions, tool, ParsedArguments(), {"TOKEN": "xyz"})
        self.assertEqual(parsed.get("token"), "xyz")
        self.assertEqual(parsed.get("user"), "root")

    def testDeclaredBeforeSuppliersSeesStaleArguments(self):
        extensions = [require(["user"]), default_values({"user": "root"})]
        tool = extend(extensions, self.command)
        with self.assertRaises(MissingRequiredFlagError):
            postprocess(extensions, tool, ParsedArguments(), {})


class TestEnvVars(TestCase):

    def setUp(self) -> None:
        self.command = Command("tool", flags=[Flag("api-key", "signing key", env="API_KEY"), Flag("level")])
        self.extensions = [env_vars()]
        self.tool = extend(self.extensions, self.command)

    def testAnnotatesOnlyBoundFlags(self):
        self.assertEqual(self.tool.switches["api-key"].descr, "signing key [env: API_KEY]")
        self.assertIsNone(self.tool.switches["level"].descr)

    def testEnvironmentSuppliesValue(self):
        parsed = postprocess(self.extensions, self.tool, ParsedArguments(), {"API_KEY": "xyz"})
        self.assertEqual(parsed["api-key"].value, "xyz")
        self.assertEqual(parsed["api-key"].source, Source.ENVIRONMENT)

    def testUserValueWins(self):
        parsed = ParsedArguments([ParsedFlag(self.tool.switches["api-key"], "abc")])
        parsed = postprocess(self.extensions, self.tool, parsed, {"API_KEY": "xyz"})
        self.assertEqual(parsed["api-key"].value, "abc")
        self.assertEqual(parsed["api-key"].source, Source.USER)
        self.assertEqual(len(parsed.flags), 1)

    def testUnsetVariableSuppliesNothing(self):
        parsed = postprocess(self.extensions, self.tool, ParsedArguments(), {"OTHER": "1"})
        self.assertNotIn("api-key", parsed)

    def testEnvironmentWinsOverLaterDefaults(self):
        extensions = [env_vars(), default_values({"api-key": "none"})]
        tool = extend(extensions, self.command)
        parsed = postprocess(extensions, tool, ParsedArguments(), {"API_KEY": "xyz"})
        self.assertEqual(parsed["api-key"].source, Source.ENVIRONMENT)


class TestHelpSubcommand(RenderingTestCase):

    def setUp(self) -> None:
        super().setUp()
        self.command = Command("tool", "fetches things", flags=[Flag("level", "log level")], version="1.0.0")

    def testInjectsHelpChild(self):
        tool = help_subcommand().extend(self.command)
        self.assertEqual([child.name for child in tool.children], ["help"])

    def testRendersParentHelpListingItself(self):
        tool = help_subcommand().extend(self.command)
        self.assertEqual(tool.subcommands["help"].run(ParsedArguments()), 0)
        output = self.output.getvalue()
        self.assertIn("usage: tool", output)
        self.assertIn("fetches things", output)
        self.assertIn("show help for this command", output)

    def testRendersAnnotationsOfDefaultPriorityExtensions(self):
        tool = extend([help_subcommand(), default_values({"level": "info"}), version_subcommand()], self.command)
        tool.subcommands["help"].run(ParsedArguments())
        output = self.output.getvalue()
        self.assertIn("[Default: `info`]", output)
        self.assertIn("show the version and exit", output)

    def testRendersNamedSubcommand(self):
        tool = extend([version_subcommand(), help_subcommand()], self.command)
        tool.subcommands["help"].run(ParsedArguments(operands=["version"]))
        self.assertIn("usage: version", self.output.getvalue())

    def testUnknownNamedSubcommandFaults(self):
        tool = help_subcommand().extend(self.command)
        with self.assertRaises(UnknownSubcommandError):
            tool.subcommands["help"].run(ParsedArguments(operands=["nope"]))

    def testDuplicateHelpRejected(self):
        with self.assertRaises(ValueError):
            extend([help_subcommand(), help_subcommand()], self.command)

    def testChildInheritsRuntimeFlags(self):
        tool = help_subcommand().extend(Command("tool", shell=True, colorful=True))
        self.assertTrue(tool.subcommands["help"].shell)
        self.assertTrue(tool.subcommands["help"].colorful)


class TestVersionSubcommand(RenderingTestCase):

    def testRequiresVersion(self):
        with self.assertRaises(ValueError):
            version_subcommand().extend(Command("tool"))

    def testPrintsParentVersion(self):
        tool = version_subcommand().extend(Command("tool", version="2.1.0"))
        self.assertEqual(tool.subcommands["version"].run(ParsedArguments()), 0)
        self.assertIn("tool — 2.1.0", self.output.getvalue())


if __name__ == "__main__":
    unittest.main()
