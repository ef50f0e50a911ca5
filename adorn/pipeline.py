"""
Adorn extension pipeline: order extensions, extend a command, postprocess parsed arguments.

What this module provides
- Extension: base class. Subclasses override extend(command) and/or
  postprocess(command, parsed, environ); both default to the identity.
- extension(...): build an ad-hoc Extension from plain callables.
- arrange(extensions): pipeline order (ascending priority, stable on ties).
- extend(extensions, command): structural phase (fold of extend()).
- postprocess(extensions, command, parsed, environ): validation phase (fold of
  postprocess()); the first raised CommandException stops the chain.
- invoke(command, extensions, parsed): host runner tying both phases to dispatch
  and fault reporting.

Ordering
- Extensions run by ascending priority; equal priorities keep declaration order.
- DEFAULT_PRIORITY (-1) is used by every builtin except the help subcommand,
  which runs at 0 so the help it renders already shows the annotations and
  subcommands added by the others.
- Declare value suppliers (default_values, env_vars) before require: postprocess
  steps run in the same order as the structural ones.

Quick start
    from adorn import Command, Flag, ParsedArguments, invoke
    from adorn.extensions import help_subcommand, default_values, require

    tool = Command("tool", flags=[Flag("level"), Flag("token")], run=print)
    invoke(tool, [default_values({"level": "info"}), require(["token"]), help_subcommand()],
           ParsedArguments())
"""
import logging
import operator
import os

from .commands import Command, ParsedArguments
from .faults import CommandException, trigger
from .rendering import show_help, show_version
from .utils import *

logger = logging.getLogger(__name__)

DEFAULT_PRIORITY = -1


class Extension:
    """
    One extension: a structural transform plus a parsed-arguments transform.

    Contract
    - extend(command) returns a new Command; it must not depend on anything but
      the command. It may raise ValueError/TypeError for configuration mistakes.
    - postprocess(command, parsed, environ) receives the fully extended command
      and returns new ParsedArguments, or raises a CommandException.
    """
    priority = DEFAULT_PRIORITY

    def __init__(self, *, priority=Unset):
        if not isinstance(priority, int | Unset) or isinstance(priority, bool):
            raise TypeError(f"{type(self).__name__} 'priority' must be an integer")
        if priority is not Unset:
            self.priority = priority

    def extend(self, command, /):
        return command

    def postprocess(self, command, parsed, /, environ):
        return parsed

    def __repr__(self):
        return f"{type(self).__name__}(priority={self.priority})"


class _Adhoc(Extension):

    def __init__(self, extend, postprocess, *, priority):
        super().__init__(priority=priority)
        self._extend = extend
        self._postprocess = postprocess

    def extend(self, command, /):
        return self._extend(command) if self._extend else command

    def postprocess(self, command, parsed, /, environ):
        return self._postprocess(command, parsed, environ) if self._postprocess else parsed

    def __repr__(self):
        return f"extension(extend={self._extend!r}, postprocess={self._postprocess!r}, priority={self.priority})"


def extension(*, extend=Unset, postprocess=Unset, priority=Unset):
    """
    Build an Extension from callables.

    Parameters
    - extend: Callable[[Command], Command] | Unset
    - postprocess: Callable[[Command, ParsedArguments, Mapping], ParsedArguments] | Unset
    - priority: int | Unset (DEFAULT_PRIORITY when Unset)
    """
    if extend is not Unset and not callable(extend):
        raise TypeError("extension() 'extend' must be callable")
    if postprocess is not Unset and not callable(postprocess):
        raise TypeError("extension() 'postprocess' must be callable")
    return _Adhoc(coalesce(extend), coalesce(postprocess), priority=priority)


def arrange(extensions, /):
    """Return the extensions in pipeline order (ascending priority, stable)."""
    extensions = list(extensions)
    for extension in extensions:
        if not isinstance(extension, Extension):
            raise TypeError("pipeline members must be extensions")
    return tuple(sorted(extensions, key=operator.attrgetter("priority")))


def extend(extensions, command, /):
    """Apply every extension's extend() to `command` in pipeline order."""
    if not isinstance(command, Command):
        raise TypeError("extend() second argument must be a command")
    for extension in arrange(extensions):
        logger.debug("extending %r with %r", command.name, extension)
        command = extension.extend(command)
        if not isinstance(command, Command):
            raise TypeError(f"{extension!r} extend() must return a command")
    return command


def postprocess(extensions, command, parsed, /, environ=Unset):
    """
    Thread `parsed` through every extension's postprocess() in pipeline order.

    `command` is the fully extended command, passed to each step as context.
    `environ` defaults to os.environ. A CommandException raised by a step
    propagates immediately; later steps do not run.
    """
    if not isinstance(parsed, ParsedArguments):
        raise TypeError("postprocess() third argument must be parsed arguments")
    environ = coalesce(environ, os.environ)
    for extension in arrange(extensions):
        logger.debug("postprocessing %r with %r", command.name, extension)
        parsed = extension.postprocess(command, parsed, environ)
        if not isinstance(parsed, ParsedArguments):
            raise TypeError(f"{extension!r} postprocess() must return parsed arguments")
    return parsed


def invoke(command, extensions=(), parsed=Unset, /, environ=Unset):
    """
    Run `command` with `extensions` against already parsed arguments.

    Phases
    - extend the command, then resolve parsed.route to the selected node.
    - postprocess when the selected node is the extended command itself; routed
      subcommands are dispatched without their parent's validation chain.
    - a parsed "help" flag shows help, a parsed "version" flag shows the version,
      otherwise the node's run handler is called (no handler shows help).

    Returns
    - the exit code: the handler's return value, 0 when it returns None.

    Faults
    - CommandException is routed through trigger(): printed and exit 1 in shell
      mode, re-raised otherwise.
    """
    parsed = coalesce(parsed, ParsedArguments())
    extended = extend(extensions, command)
    selected = extended

    try:
        selected = extended.resolve(parsed.route)
        if selected is extended:
            parsed = postprocess(extensions, extended, parsed, environ)
        if "help" in parsed and parsed["help"].flag.switch:
            return show_help(selected)
        if "version" in parsed and parsed["version"].flag.switch and selected.version:
            return show_version(selected)
        if selected.run is None:
            return show_help(selected)
        code = selected.run(parsed)
    except CommandException as fault:
        logger.debug("routing %s from %r", type(fault).__name__, selected.name)
        trigger(fault, tool=selected, shell=selected.shell, fancy=selected.fancy, colorful=selected.colorful)
    return 0 if code is None else code


__all__ = (
    "DEFAULT_PRIORITY",
    "Extension",
    "extension",
    "arrange",
    "extend",
    "postprocess",
    "invoke",
)
