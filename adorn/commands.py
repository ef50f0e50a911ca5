r"""
Adorn host model: the immutable command tree and the parsed-argument values.

What this module provides
- Flag: a named input a command accepts (long name is the unique key), optionally
  bound to an environment variable.
- Command: one node of the command tree (name, descr, further information,
  flags, children, version, run handler, and the runtime flags shell/fancy/colorful).
- Source: where a parsed value came from (user, default, environment).
- ParsedFlag: (flag, value, source) triple produced by a parser or synthesized by
  an extension.
- ParsedArguments: the parsed flags, the positional operands and the route of
  selected subcommands.

Core ideas
- Values, not objects: nothing here is mutated after construction. Extensions derive
  new values with copy.replace(value, field=...), which re-runs the constructor and
  therefore re-validates every field.
- Builtin switches: every Command carries a presence-only "help" flag, and a "version"
  flag when it has a version, unless flags with those names were declared.
- Read-only surface: all fields are exposed via properties generated from
  __introspectable__; containers are tuples or MappingProxyType views.

Quick start
    from adorn import Command, Flag

    tool = Command(
        "tool",
        "fetch things from the api",
        flags=[Flag("api-key", "key used to sign requests", env="API_KEY")],
        version="1.2.0",
        run=lambda parsed: print(parsed.get("api-key")),
    )

Name rules
- Flag names match r"[^\W\d_](-?[^\W_]+)*" once a leading "--" is stripped.
- Short aliases are one letter (a leading "-" is stripped).
- Environment variable names match r"[A-Za-z_][A-Za-z0-9_]*".
"""
import difflib
import enum
import functools
import operator
import re
from collections.abc import Iterable
from types import MappingProxyType
from typing import NamedTuple

from .faults import FaultCode, UnknownSubcommandError, getdoc
from .utils import *


class HostType(type):
    """
    Metaclass shared by the host values.

    Responsibilities
    - Derive __typename__ from the class name (camel-case split with hyphens) for
      messages ("parsed-arguments 'flags' must be ...").
    - Expose every name in __introspectable__ as a read-only property over "_{name}".
    - Provide stable __repr__/__rich_repr__ implementations.
    - Provide __replace__ (copy.replace support) and value equality over the
      introspectable fields.
    """
    __introspectable__ = ()

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        @rename("__eq__")
        def __eq__(self, other):
            if type(self) is not type(other):
                return NotImplemented
            return all(getattr(self, name) == getattr(other, name) for name in type(self).__introspectable__)
        self.__eq__ = __eq__

        @rename("__hash__")
        def __hash__(self):
            return hash(tuple(getattr(self, name) for name in type(self).__introspectable__ if name != "run"))
        self.__hash__ = __hash__

        return self


def _replay(object):
    # None read back from a field means “was not provided”
    return Unset if object is None else object


def _sanitize_text(cls, metadata, name, /):
    """
    Internal: validate an optional text field (descr/further/version).

    - Unset becomes None.
    - Strings are trimmed and must not be empty afterwards.
    """
    if not isinstance(object := metadata[name], str | Unset):
        raise TypeError(f"{cls.__typename__} {name!r} must be a string")
    elif isinstance(object, str) and not (object := object.strip()):
        raise ValueError(f"{cls.__typename__} {name!r} cannot be empty")
    metadata[name] = coalesce(object)


def _sanitize_flag(cls, metadata, /):
    """
    Internal: validate and normalize Flag metadata in place.

    Raises
    - TypeError for wrong value types.
    - ValueError for empty or malformed names.
    """
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not re.fullmatch(r"[^\W\d_](-?[^\W_]+)*", name := name.strip().removeprefix("--")):
        raise ValueError(f"{cls.__typename__} 'name' must be a valid long option name (got {metadata['name']!r})")
    metadata["name"] = name

    _sanitize_text(cls, metadata, "descr")

    if not isinstance(short := metadata["short"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'short' must be a string")
    elif isinstance(short, str) and not re.fullmatch(r"[^\W\d_]", short := short.strip().removeprefix("-")):
        raise ValueError(f"{cls.__typename__} 'short' must be a single letter")
    metadata["short"] = coalesce(short)

    if not isinstance(env := metadata["env"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'env' must be a string")
    elif isinstance(env, str) and not re.fullmatch(r"[A-Za-z_][A-Za-z0-9_]*", env := env.strip()):
        raise ValueError(f"{cls.__typename__} 'env' must be a valid environment variable name")
    metadata["env"] = coalesce(env)

    if not isinstance(metavar := metadata["metavar"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'metavar' must be a string")
    elif isinstance(metavar, str) and not (metavar := metavar.strip()):
        raise ValueError(f"{cls.__typename__} 'metavar' cannot be empty")
    elif metavar and metadata["switch"]:
        raise TypeError(f"switch {cls.__typename__} cannot have a metavar")
    metadata["metavar"] = coalesce(metavar)


class Flag(metaclass=HostType):
    """
    Named input specification.

    Highlights
    - name: the long name without leading dashes ("api-key"); unique within a command.
    - descr: short help text (None when omitted). Extensions annotate it.
    - short: optional one-letter alias ("k").
    - env: optional environment variable that may supply the value.
    - metavar: label for the value in help; defaults to the upper-cased name.
    - switch: presence-only (no value), like --help.
    - hidden: suppressed from help output.
    """

    __introspectable__ = (
        "name",
        "descr",
        "short",
        "env",
        "metavar",
        "switch",
        "hidden",
    )

    def __new__(
            cls,
            name,
            /,
            descr=Unset,
            *,
            short=Unset,
            env=Unset,
            metavar=Unset,
            switch=False,
            hidden=False,
    ):
        metadata = {
            "name": name,
            "descr": descr,
            "short": short,
            "env": env,
            "metavar": metavar,
            "switch": bool(switch),
            "hidden": bool(hidden),
        }
        _sanitize_flag(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    @property
    def long(self):
        """The spelled-out option, e.g. "--api-key"."""
        return "--" + self.name

    @property
    def label(self):
        """The value label shown in usage lines, e.g. "<API-KEY>" (None for switches)."""
        if self.switch:
            return None
        return self.metavar or f"<{self.name.upper()}>"

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        fields = {name: _replay(getattr(self, name)) for name in type(self).__introspectable__} | overrides
        return type(self)(fields.pop("name"), **{name: _replay(object) for name, object in fields.items()})


def _builtin_flags(metadata, flags):
    """
    Internal: append the builtin help/version switches unless already declared.

    Short aliases are only claimed when free.
    """
    names = {flag.name for flag in flags}
    shorts = {flag.short for flag in flags if flag.short}

    if "help" not in names:
        flags.append(Flag(
            "help", "show this help message and exit", short="h" if "h" not in shorts else Unset, switch=True
        ))
    if metadata["version"] and "version" not in names:
        flags.append(Flag(
            "version", "show this version message and exit", short="v" if "v" not in shorts else Unset, switch=True
        ))


def _process_members(cls, metadata, /):
    """
    Internal: validate flags and children, enforcing unique names.

    Raises
    - TypeError when a member has the wrong type.
    - ValueError on duplicated flag names, short aliases, or child names.
    """
    if not isinstance(metadata["flags"], Iterable):
        raise TypeError(f"{cls.__typename__} 'flags' must be an iterable of flags")
    flags = []
    names = set()
    shorts = set()
    for flag in metadata["flags"]:
        if not isinstance(flag, Flag):
            raise TypeError(f"{cls.__typename__} 'flags' must be an iterable of flags")
        elif flag.name in names:
            raise ValueError(f"{cls.__typename__} flag name {flag.name!r} is already in use")
        elif flag.short and flag.short in shorts:
            raise ValueError(f"{cls.__typename__} flag alias {flag.short!r} is already in use")
        names.add(flag.name)
        if flag.short:
            shorts.add(flag.short)
        flags.append(flag)
    _builtin_flags(metadata, flags)
    metadata["flags"] = tuple(flags)

    if not isinstance(metadata["children"], Iterable):
        raise TypeError(f"{cls.__typename__} 'children' must be an iterable of commands")
    children = []
    for child in metadata["children"]:
        if not isinstance(child, Command):
            raise TypeError(f"{cls.__typename__} 'children' must be an iterable of commands")
        elif any(child.name == sibling.name for sibling in children):
            raise ValueError(f"{cls.__typename__} subcommand name {child.name!r} is already in use")
        children.append(child)
    metadata["children"] = tuple(children)


class Command(metaclass=HostType):
    """
    One node of the command tree.

    Responsibilities
    - Carry the static definition rendered by help and consumed by extensions.
    - Own its children (ordered, unique by name) and flags (ordered, unique by long name).
    - Route a sequence of subcommand names to the selected node (resolve()).

    Notes
    - run(parsed) is called when this node is selected; its return value (None → 0)
      is the exit code. A command without a run handler renders its help.
    - shell/fancy/colorful decide how help and faults are surfaced (see adorn.faults).
    """

    __introspectable__ = (
        "name",
        "descr",
        "further",
        "flags",
        "children",
        "version",
        "run",
        "shell",
        "fancy",
        "colorful",
    )

    def __new__(
            cls,
            name,
            /,
            descr=Unset,
            further=Unset,
            flags=(),
            children=(),
            version=Unset,
            run=Unset,
            *,
            shell=False,
            fancy=False,
            colorful=False,
    ):
        """
        Construct a Command.

        Parameters
        - name: str, non-empty, no whitespace.
        - descr: str | Unset — short description (first paragraph of help).
        - further: str | Unset — long-form text rendered after the flags.
        - flags: Iterable[Flag] — unique by long name.
        - children: Iterable[Command] — unique by name.
        - version: str | Unset — enables the builtin "version" flag.
        - run: Callable[[ParsedArguments], int | None] | Unset.
        - shell, fancy, colorful: bool — surfacing policy.

        Raises
        - TypeError/ValueError on invalid metadata or name conflicts.
        """
        metadata = {
            "name": name,
            "descr": descr,
            "further": further,
            "flags": flags,
            "children": children,
            "version": version,
            "run": run,
            "shell": bool(shell),
            "fancy": bool(fancy),
            "colorful": bool(colorful),
        }

        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} 'name' must be a string")
        elif not re.fullmatch(r"\S+", name := name.strip()):
            raise ValueError(f"{cls.__typename__} 'name' must be a non-empty word")
        metadata["name"] = name

        for field in ("descr", "further", "version"):
            _sanitize_text(cls, metadata, field)

        if not callable(run) and run is not Unset:
            raise TypeError(f"{cls.__typename__} 'run' must be callable")
        metadata["run"] = coalesce(run)

        _process_members(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    @property
    def switches(self):
        """Read-only mapping of long name → Flag, in declaration order."""
        return MappingProxyType({flag.name: flag for flag in self.flags})

    @property
    def subcommands(self):
        """Read-only mapping of name → child Command, in declaration order."""
        return MappingProxyType({child.name: child for child in self.children})

    def resolve(self, route, /):
        """
        Walk `route` (subcommand names) down from this node and return the selected node.

        Raises
        - UnknownSubcommandError when a name does not match a child; the hint
          suggests the closest spelling.
        """
        command = self
        trail = [self.name]
        for name in route:
            try:
                command = command.subcommands[name]
            except KeyError:
                suggestions = difflib.get_close_matches(name, command.subcommands.keys(), 5)
                try:
                    hint = "did you mean %r? you can also run '%s --help' to see all subcommands" % (
                        suggestions[0],
                        " ".join(trail)
                    )
                except IndexError:
                    hint = "try '%s --help' to see all available subcommands" % " ".join(trail)
                raise UnknownSubcommandError(
                    "unknown subcommand %r for %r" % (name, " ".join(trail)),
                    title="unknown subcommand",
                    code=FaultCode.UNKNOWN_SUBCOMMAND,
                    input=name,
                    suggestions=suggestions,
                    hint=hint,
                    docs=getdoc(FaultCode.UNKNOWN_SUBCOMMAND)
                ) from None
            trail.append(name)
        return command

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        fields = {name: _replay(getattr(self, name)) for name in type(self).__introspectable__} | overrides
        return type(self)(fields.pop("name"), **{name: _replay(object) for name, object in fields.items()})


class Source(enum.Enum):
    """Where a parsed value came from."""
    USER = "user"
    DEFAULT = "default"
    ENVIRONMENT = "environment"


class ParsedFlag(NamedTuple):
    """A flag paired with its value and the source that supplied it."""
    flag: Flag
    value: object
    source: Source = Source.USER


flagname = operator.attrgetter("flag.name")
"""Reconciliation key of a ParsedFlag: its flag's long name."""


class ParsedArguments(metaclass=HostType):
    """
    The result of parsing raw input against a command.

    Fields
    - flags: tuple[ParsedFlag, ...] in parse order.
    - operands: tuple[str, ...] positional arguments.
    - route: tuple[str, ...] names of the subcommands selected below the parsed command.

    Queries take long names with or without the leading "--":
    - "token" in parsed       → a value for --token is present
    - parsed["token"]         → its ParsedFlag (KeyError when absent)
    - parsed.get("token", d)  → its value, or d
    """

    __introspectable__ = (
        "flags",
        "operands",
        "route",
    )

    def __new__(cls, flags=(), operands=(), route=()):
        if not isinstance(flags, Iterable):
            raise TypeError(f"{cls.__typename__} 'flags' must be an iterable of parsed flags")
        flags = tuple(flags)
        if not all(isinstance(flag, ParsedFlag) for flag in flags):
            raise TypeError(f"{cls.__typename__} 'flags' must be an iterable of parsed flags")

        if isinstance(operands, str) or not isinstance(operands, Iterable):
            raise TypeError(f"{cls.__typename__} 'operands' must be an iterable of strings")
        operands = tuple(operands)
        if not all(isinstance(operand, str) for operand in operands):
            raise TypeError(f"{cls.__typename__} 'operands' must be an iterable of strings")

        if isinstance(route, str) or not isinstance(route, Iterable):
            raise TypeError(f"{cls.__typename__} 'route' must be an iterable of strings")
        route = tuple(route)
        if not all(isinstance(name, str) for name in route):
            raise TypeError(f"{cls.__typename__} 'route' must be an iterable of strings")

        self = super().__new__(cls)
        self._flags = flags
        self._operands = operands
        self._route = route
        return self

    def __contains__(self, name):
        name = name.removeprefix("--")
        return any(parsed.flag.name == name for parsed in self.flags)

    def __getitem__(self, name):
        name = name.removeprefix("--")
        for parsed in self.flags:
            if parsed.flag.name == name:
                return parsed
        raise KeyError(name)

    def get(self, name, default=None, /):
        try:
            return self[name].value
        except KeyError:
            return default

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(**{name: getattr(self, name) for name in type(self).__introspectable__} | overrides)


__all__ = (
    "Flag",
    "Command",
    "Source",
    "ParsedFlag",
    "ParsedArguments",
    "flagname",
)
