"""
Builtin extensions.

Each builtin is an adorn.pipeline.Extension subclass with a lowercase factory
next to it (author(...) builds an Author, and so on). Every factory accepts a
keyword-only `priority` override.

Structural only
- author(name)              prepends "{name}\\n" to the command description.
- long_description(text)    appends a "DESCRIPTION:" section to the further information.

Self-referential subcommands (see adorn.nodes.graft)
- help_subcommand()         injects "help"; renders the parent's help (priority 0).
- version_subcommand()      injects "version"; prints the parent's version banner.

Flag values (see adorn.reconcile)
- default_values(pairs)     annotates flags with [Default: `value`] and supplies the
                            default when the user did not.
- require(names)            annotates flags with [Required] and fails when nothing
                            supplied them (unless help/version was asked for).
- env_vars()                annotates flags with [env: NAME] and supplies values from
                            the environment when the user did not.

Configuration mistakes (unknown flag names, a version subcommand on a versionless
command) raise ValueError while extending: they are bugs in the CLI definition.
"""
import copy
import logging
import operator
import textwrap
from collections.abc import Iterable, Mapping

from .commands import Command, ParsedFlag, Source, flagname
from .faults import FaultCode, MissingRequiredFlagError, getdoc
from .nodes import graft
from .pipeline import Extension
from .reconcile import diff_by, union_left_by
from .rendering import show_help, show_version
from .utils import *

logger = logging.getLogger(__name__)


def _lookup(extension, command, name, /):
    try:
        return command.switches[name]
    except KeyError:
        raise ValueError(
            f"{type(extension).__name__} names unknown flag {name!r} on command {command.name!r}"
        ) from None


def _retouch(command, names, update, /):
    """Return `command` with update(flag) as the description of every flag named in `names`."""
    flags = tuple(
        copy.replace(flag, descr=update(flag)) if flag.name in names else flag
        for flag in command.flags
    )
    return copy.replace(command, flags=flags)


def _sanitize_names(cls, names, /):
    if isinstance(names, str) or not isinstance(names, Iterable):
        raise TypeError(f"{cls.__name__} names must be an iterable of strings")
    sanitized = []
    for name in names:
        if not isinstance(name, str):
            raise TypeError(f"{cls.__name__} names must be strings")
        elif not (name := name.strip().removeprefix("--")):
            raise ValueError(f"{cls.__name__} names cannot be empty-strings")
        elif name in sanitized:
            raise ValueError(f"{cls.__name__} names cannot contain duplicates")
        sanitized.append(name)
    return tuple(sanitized)


class Author(Extension):
    """
    Prepend "{name}\\n" to the command description.

    The name is stripped of surrounding whitespace, and Command trims its
    description, so a command without one ends up with descr == name.
    """

    def __init__(self, name, /, *, priority=Unset):
        super().__init__(priority=priority)
        if not isinstance(name, str):
            raise TypeError("Author 'name' must be a string")
        elif not (name := name.strip()):
            raise ValueError("Author 'name' cannot be empty")
        self.name = name

    def extend(self, command, /):
        return copy.replace(command, descr=f"{self.name}\n{command.descr or ''}")


class LongDescription(Extension):

    def __init__(self, text, /, *, priority=Unset):
        super().__init__(priority=priority)
        if not isinstance(text, str):
            raise TypeError("LongDescription 'text' must be a string")
        elif not (text := textwrap.dedent(text).strip()):
            raise ValueError("LongDescription 'text' cannot be empty")
        self.text = text

    def extend(self, command, /):
        section = "DESCRIPTION:\n" + textwrap.indent(self.text, "  ")
        if command.further:
            section = f"{command.further}\n\n{section}"
        return copy.replace(command, further=section)


class HelpSubcommand(Extension):
    """
    Inject a "help" subcommand.

    `tool help` renders the help of `tool` as it stood right after the graft
    (including the help subcommand itself); `tool help NAME ...` walks the
    operands as a route and renders that subcommand's help instead.
    """
    priority = 0

    def extend(self, command, /):
        child = Command(
            "help",
            "show help for this command or one of its subcommands",
            shell=command.shell,
            fancy=command.fancy,
            colorful=command.colorful,
        )
        return graft(command, child, self._bind)

    @staticmethod
    def _bind(parent):
        @rename("help")
        def handler(parsed, /):
            return show_help(parent.resolve(parsed.operands))
        return handler


class VersionSubcommand(Extension):
    """Inject a "version" subcommand printing the parent's version banner."""

    def extend(self, command, /):
        if not command.version:
            raise ValueError(f"VersionSubcommand requires command {command.name!r} to have a version")
        child = Command(
            "version",
            "show the version and exit",
            shell=command.shell,
            fancy=command.fancy,
            colorful=command.colorful,
        )
        return graft(command, child, self._bind)

    @staticmethod
    def _bind(parent):
        @rename("version")
        def handler(parsed, /):
            return show_version(parent)
        return handler


class DefaultValues(Extension):
    """
    Supply default values for flags the user did not pass.

    Parameters
    - pairs: Mapping[str, object] | Iterable[tuple[str, object]]
      long names (with or without "--") to default values.
    """

    def __init__(self, pairs, /, *, priority=Unset):
        super().__init__(priority=priority)
        if isinstance(pairs, Mapping):
            pairs = pairs.items()
        elif not isinstance(pairs, Iterable) or isinstance(pairs, str):
            raise TypeError("DefaultValues 'pairs' must be a mapping or an iterable of pairs")
        try:
            names, values = zip(*pairs) if (pairs := tuple(pairs)) else ((), ())
        except (TypeError, ValueError):
            raise TypeError("DefaultValues 'pairs' must be a mapping or an iterable of pairs") from None
        self.pairs = tuple(zip(_sanitize_names(type(self), names), values))

    def extend(self, command, /):
        defaults = {_lookup(self, command, name).name: value for name, value in self.pairs}
        return _retouch(command, defaults, lambda flag: _suffix(flag.descr, f"[Default: `{defaults[flag.name]}`]"))

    def postprocess(self, command, parsed, /, environ):
        defaults = tuple(
            ParsedFlag(_lookup(self, command, name), value, Source.DEFAULT) for name, value in self.pairs
        )
        flags = union_left_by(flagname, parsed.flags, defaults)
        logger.debug("defaults supplied %s", [entry.flag.name for entry in flags if entry.source is Source.DEFAULT])
        return copy.replace(parsed, flags=flags)


class Require(Extension):
    """
    Fail when a required flag was supplied by nobody (user, default or environment).

    Only the first missing flag, in declaration order of `names`, is reported.
    Nothing is checked when a help or version flag was parsed.
    """

    def __init__(self, names, /, *, priority=Unset):
        super().__init__(priority=priority)
        self.names = _sanitize_names(type(self), names)

    def extend(self, command, /):
        for name in self.names:
            _lookup(self, command, name)
        return _retouch(command, self.names, lambda flag: _prefix(flag.descr, "[Required]"))

    def postprocess(self, command, parsed, /, environ):
        if "help" in parsed or "version" in parsed:
            return parsed

        required = [_lookup(self, command, name) for name in self.names]
        missing = diff_by(operator.attrgetter("name"), required, map(flagname, parsed.flags))
        if not missing:
            return parsed

        flag = missing[0]
        logger.debug("required flags missing: %s", [flag.name for flag in missing])
        hint = "pass it as '%s%s'" % (flag.long, f" {flag.label}" if flag.label else "")
        if flag.env:
            hint += " or set the %s environment variable" % flag.env
        raise MissingRequiredFlagError(
            "missing required flag %r" % flag.long,
            title="missing required flag",
            code=FaultCode.MISSING_REQUIRED_FLAG,
            flag=flag,
            hint=hint,
            docs=getdoc(FaultCode.MISSING_REQUIRED_FLAG)
        )


class EnvVars(Extension):
    """Supply values from environment variables for flags declaring one (user values win)."""

    def extend(self, command, /):
        names = {flag.name for flag in command.flags if flag.env}
        return _retouch(command, names, lambda flag: _suffix(flag.descr, f"[env: {flag.env}]"))

    def postprocess(self, command, parsed, /, environ):
        supplied = tuple(
            ParsedFlag(flag, environ[flag.env], Source.ENVIRONMENT)
            for flag in command.flags
            if flag.env and flag.env in environ
        )
        logger.debug("environment supplied %s", [entry.flag.name for entry in supplied])
        return copy.replace(parsed, flags=union_left_by(flagname, parsed.flags, supplied))


def _suffix(descr, note, /):
    return f"{descr} {note}" if descr else note


def _prefix(descr, note, /):
    return f"{note} {descr}" if descr else note


def author(name, /, *, priority=Unset):
    return Author(name, priority=priority)


def long_description(text, /, *, priority=Unset):
    return LongDescription(text, priority=priority)


def help_subcommand(*, priority=Unset):
    return HelpSubcommand(priority=priority)


def version_subcommand(*, priority=Unset):
    return VersionSubcommand(priority=priority)


def default_values(pairs, /, *, priority=Unset):
    return DefaultValues(pairs, priority=priority)


def require(names, /, *, priority=Unset):
    return Require(names, priority=priority)


def env_vars(*, priority=Unset):
    return EnvVars(priority=priority)


__all__ = (
    "Author",
    "LongDescription",
    "HelpSubcommand",
    "VersionSubcommand",
    "DefaultValues",
    "Require",
    "EnvVars",
    "author",
    "long_description",
    "help_subcommand",
    "version_subcommand",
    "default_values",
    "require",
    "env_vars",
)
