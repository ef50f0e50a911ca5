"""
User-facing faults raised while extensions validate parsed arguments.

Adorn separates two kinds of failure:

- a broken CLI definition (unknown flag name in default_values, a version
  subcommand on a versionless command, duplicated names) raises ValueError or
  TypeError while the command is built or extended. It is a bug and should
  crash with a traceback;
- bad user input (a required flag nobody supplied, an unknown subcommand)
  raises a CommandException subclass. invoke() routes it through trigger(),
  which prints it and exits 1 in shell mode and re-raises it otherwise.

Host hooks read from __main__
- __codes__: FaultCode -> label shown instead of the numeric code.
- __docs__: FaultCode -> documentation string, fetched with getdoc().
- __styles__: palette overrides for the rendered fault.
- __prog__: program name shown in the header instead of the command name.
"""
import copy
import sys
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


def _host(name, default, /):
    return getattr(__import__("__main__"), name, default)


class FaultCode(IntEnum):
    """Stable numeric identifiers, grouped by area (1110x routing, 1112x flags, 1113x extensions)."""
    UNKNOWN_SUBCOMMAND = 11102
    MISSING_REQUIRED_FLAG = 11126
    DELEGATED_ERROR = 11131

    def normalize(self):
        """The label shown to users: the host's __codes__ entry, else the number."""
        return str(_host("__codes__", {}).get(self, self.value))


_PALETTE = {
    "prog-name": "bold #E6E6F0",
    "code": "bold #00E5FF",
    "error-title": "bold #FF4DA6",
    "error-message": "#C8C8D0",
    "hint-arrow": "#9CE19C dim",
    "hint": "italic #9CE19C",
}


class CommandException(Exception):
    """
    Base class of every user-facing fault.

    `message` is the one-line description; `options` is a read-only mapping of
    rendering context:
    - title, code, hint, docs: copy for the user (code is a FaultCode).
    - tool: the Command that was running.
    - shell, fancy, colorful: surfacing policy, filled in by trigger().
    Extensions may attach extra keys (flag, input, suggestions) for callers.
    """

    def __init__(self, message=Unset, /, **options):
        if not isinstance(message, str | Unset):
            raise TypeError(f"{type(self).__name__} message must be a string")
        super().__init__(*(() if message is Unset else (message,)))
        self.message = message
        self.options = MappingProxyType(options)

    def __rich__(self):
        colorful = self.options.get("colorful", False)
        styles = _PALETTE | _host("__styles__", {})

        def paint(fragment, key):
            if not fragment:
                return Text("")
            return Text(str(fragment), styles.get(key, "") if colorful else "")

        name = _host("__prog__", getattr(self.options.get("tool"), "name", ""))
        code = self.options.get("code", FaultCode.DELEGATED_ERROR)
        title = self.options.get("title", "error").title()
        header = Text.assemble(
            "[ ", paint(name, "prog-name"), " — ", paint(code.normalize(), "code"),
            " | ", paint(title, "error-title"), " ]",
        )

        body = [paint(self.message, "error-message")]
        if hint := self.options.get("hint"):
            body.append(Text.assemble(paint(" → ", "hint-arrow"), paint(hint, "hint")))

        if self.options.get("fancy", False):
            return Panel(Group(*body), title=header, title_align="left")
        return Group(header, *body)

    def __trigger__(self):
        if self.options.get("shell", False):
            console.print(self)
            sys.exit(1)
        raise self from None

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **(dict(self.options) | overrides))


class UnknownSubcommandError(CommandException):
    """A route named a subcommand that does not exist."""


class MissingRequiredFlagError(CommandException):
    """A flag listed by require() was supplied by nobody."""


class ExtensionError(CommandException):
    """Base for faults raised by third-party extensions (code DELEGATED_ERROR by default)."""


def trigger(fault, /, **options):
    """
    Surface `fault` with `options` merged into its own (copy.replace).

    Shell mode prints the fault on the stderr console and exits 1; otherwise the
    merged fault is raised. `fault` must implement __replace__ and __trigger__.
    """
    for hook in ("__replace__", "__trigger__"):
        if not callable(getattr(fault, hook, None)):
            raise TypeError(f"trigger() argument must implement {hook}")
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """The host's __docs__ entry for `code`, or None."""
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a FaultCode")
    return _host("__docs__", {}).get(code)


__all__ = (
    "CommandException",
    "UnknownSubcommandError",
    "MissingRequiredFlagError",
    "ExtensionError",
    "FaultCode",
    "trigger",
    "getdoc",
)
