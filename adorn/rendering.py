"""
Help and version views of adorn commands.

- render_help(command) builds a rich renderable: usage line, description,
  subcommand table, flags section and further information.
- render_version(command) builds the "name — version" banner.
- show_help / show_version print them on the module console and return 0, so
  they double as run handlers (see the help and version subcommands).

A __styles__ mapping in __main__ overrides palette entries. Styles are only
applied to colorful commands; fancy commands are framed in a panel.
"""
from rich.box import ROUNDED
from rich.console import Console, Group
from rich.containers import Lines
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

console = Console()

_HELP_PALETTE = {
    "usage-label": "bold #00E6FF",
    "program-name": "bold #FF4D94",
    "description-section": "italic #A3A3A3",
    "further-section": "#D1D5DB",
    "group-label": "bold #FFFFFF",
    "argument-description": "#9CA3AF",
    "option-name": "bold #00E6FF",
    "flag-name": "bold #22C55E",
    "metavar": "bold #FFD600",
    "children-title": "bold #FFFFFF",
    "children-table": "#4B5563",
    "children": "bold #36C5F0",
    "children-description": "#9CA3AF",
    "panel-title": "bold #FF4D94",
}

_VERSION_PALETTE = {
    "program-name": "bold #FF4D94",
    "program-version": "bold #00E6FF",
    "panel-title": "bold #FF4D94",
}

# Column where flag descriptions start.
_INDENT = 24


class _Painter:
    """Resolve palette keys to styles for one command (no styles unless colorful)."""

    def __init__(self, command, palette, /):
        self.colorful = command.colorful
        self.styles = palette | getattr(__import__("__main__"), "__styles__", {})

    def style(self, key, /):
        return self.styles.get(key, "") if self.colorful else ""

    def __call__(self, fragment, key="", /):
        if not fragment:
            return Text("")
        return Text(str(fragment), self.style(key))


def _framed(command, renderable, label, paint, /):
    if not command.fancy:
        return renderable
    title = Text(f"[ {command.name} {label} ]".upper(), style=paint.style("panel-title"))
    return Panel(renderable, title=title, title_align="left")


def _wrap(pieces, limit, /):
    """Greedily pack `pieces` into lines of at most `limit` cells (a piece never splits)."""
    lines = Lines()
    for piece in pieces:
        if lines and len(lines[-1]) + 1 + len(piece) <= limit:
            lines[-1].append(" ").append(piece)
        else:
            lines.append(piece)
    return lines


def render_help(command, /):
    """Build the help view of `command`."""
    paint = _Painter(command, _HELP_PALETTE)
    width = console.width - 4 * command.fancy
    flags = [flag for flag in command.flags if not flag.hidden]

    def spelled(flag):
        key = "flag-name" if flag.switch else "option-name"
        names = [paint(f"-{flag.short}", key)] if flag.short else []
        names.append(paint(flag.long, key))
        signature = Text(" | ").join(names)
        if flag.label:
            signature.append(" ").append(paint(flag.label, "metavar"))
        return signature

    head = Text.assemble(paint("usage", "usage-label"), ": ", paint(command.name, "program-name"), " ")
    pieces = [Text.assemble("[", spelled(flag), "]") for flag in flags]
    if command.children:
        pieces.append(paint("<command> ...", "metavar"))
    margin = len(head)
    for index, line in enumerate(_wrap(pieces, width - margin)):
        head.append(line if not index else Text("\n" + " " * margin).append(line))
    renders = [head.append("\n")]

    if command.descr:
        renders.append(paint(command.descr, "description-section").append("\n"))

    if command.children:
        table = Table(
            "name", "help",
            title=paint("commands", "children-title"),
            width=int(width * 2 / 3),
            box=ROUNDED,
            style=paint.style("children-table"),
            header_style=paint.style("children-title"),
        )
        for child in command.children:
            about = child.descr or f"run '{command.name} {child.name} --help' for details"
            table.add_row(paint(child.name, "children"), paint(about, "children-description"))
        renders.append(table)

    if flags:
        section = Text("\n" if command.children else "")
        section.append(paint("flags", "group-label")).append(":\n")
        for flag in flags:
            entry = Text("  ").append(spelled(flag))
            if flag.descr:
                wrapped = paint(flag.descr, "argument-description").wrap(console, max(width - _INDENT, 16))
                entry.append("\n" + " " * _INDENT if len(entry) >= _INDENT else " " * (_INDENT - len(entry)))
                entry.append(Text("\n" + " " * _INDENT).join(wrapped))
            section.append(entry).append("\n")
        renders.append(section)

    if command.further:
        renders.append(paint(command.further, "further-section"))

    if isinstance(renders[-1], Text):
        renders[-1].rstrip()
    return _framed(command, Group(*renders), "help", paint)


def render_version(command, /):
    """Build the version banner of `command`: "<name> — <version>"."""
    paint = _Painter(command, _VERSION_PALETTE)
    banner = Text(" — ").join((
        paint(command.name, "program-name"),
        paint(command.version or "unversioned", "program-version"),
    ))
    return _framed(command, banner, "version", paint)


def show_help(command, /):
    console.print(render_help(command))
    return 0


def show_version(command, /):
    console.print(render_version(command))
    return 0


__all__ = (
    "console",
    "render_help",
    "render_version",
    "show_help",
    "show_version",
)
