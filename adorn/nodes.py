"""
Self-referential subcommands on an immutable command tree.

A help or version subcommand must act on the command that contains it, and
that command only exists once the subcommand has been added to it. graft()
breaks the cycle in two phases instead of tying a mutable knot:

1. the child is built with a no-op placeholder handler;
2. the parent is rebuilt with that child appended (the interim parent);
3. bind(interim) builds the real handler, closing over the interim parent;
4. the child is rebuilt with only its handler replaced;
5. the placeholder is swapped for the finished child at the same index.

The handler therefore sees the tree exactly as it was right after the graft:
the child itself and every sibling present at that point. Extensions applied
afterwards receive the step-5 parent and may still wrap or annotate the child,
but the handler does not observe their edits.
"""
import copy
import logging

from .commands import Command
from .utils import rename

logger = logging.getLogger(__name__)


@rename("placeholder")
def _placeholder(parsed, /):
    return 0


def graft(parent, child, bind, /):
    """
    Append `child` to `parent` with a handler built by `bind(interim_parent)`.

    Parameters
    - parent: Command receiving the child.
    - child: Command to append; its own run handler is discarded.
    - bind: Callable[[Command], Callable] returning the child's run handler.

    Returns
    - the final parent (a new Command).

    Raises
    - TypeError when parent/child are not commands or bind is not callable.
    - ValueError when the child's name is already used by a sibling.
    """
    if not isinstance(parent, Command) or not isinstance(child, Command):
        raise TypeError("graft() parent and child must be commands")
    if not callable(bind):
        raise TypeError("graft() bind must be callable")

    placeholder = copy.replace(child, run=_placeholder)
    interim = copy.replace(parent, children=(*parent.children, placeholder))
    index = len(interim.children) - 1

    final = copy.replace(placeholder, run=bind(interim))

    children = list(interim.children)
    children[index] = final
    logger.debug("grafted %r under %r at index %d", final.name, parent.name, index)
    return copy.replace(interim, children=children)


__all__ = (
    "graft",
)
