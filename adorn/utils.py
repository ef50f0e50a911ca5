"""
Small helpers shared by the adorn host model, the pipeline and the extensions.

- Unset: the "argument omitted" marker. It is falsey, prints as "Unset" and
  takes part in isinstance unions (isinstance(descr, str | Unset)).
- coalesce(value, default): materialize Unset into a concrete value.
- rename(...): give generated handlers readable names for reprs and tracebacks.
- mirror(name): read-only property over the "_{name}" slot of a host value.

    >>> coalesce(Unset, "info")
    'info'
    >>> coalesce("", "info")
    ''
"""
import builtins
import functools
from typing import final


@final
class UnsetType:
    """
    Type of the Unset marker.

    Host constructors keep None for "known to be absent" (a command without a
    version) and need a second value for "the caller did not say".
    """

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __init_subclass__(cls, **options):
        raise TypeError(f"{cls.__name__!r} cannot extend the Unset marker type")

    def __or__(self, other, /):
        try:
            return type(self) | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"


Unset = UnsetType()


def coalesce(object, default=None, /):
    """Return `default` when `object` is Unset, `object` otherwise (even when falsey)."""
    if object is Unset:
        return default
    return object


def _retitle(target, name, /):
    if not builtins.callable(target):
        raise TypeError(f"rename() target must be callable, not {type(target).__name__}")
    if not isinstance(name, str):
        raise TypeError(f"rename() name must be a string, not {type(name).__name__}")
    try:
        target.__name__ = target.__qualname__ = name
    except (AttributeError, TypeError):
        raise TypeError(f"rename() cannot retitle {target!r}") from None
    return target


def rename(*parameters):
    """
    Retitle a callable.

    rename(target, name) renames `target` in place and returns it; rename(name)
    returns a decorator doing the same to the function it decorates.
    """
    if len(parameters) == 2:
        return _retitle(*parameters)
    if len(parameters) != 1:
        raise TypeError(f"rename() takes 1 or 2 arguments ({len(parameters)} given)")

    name, = parameters
    if not isinstance(name, str):
        raise TypeError(f"rename() name must be a string, not {type(name).__name__}")

    def decorator(target):
        return _retitle(target, name)

    return _retitle(decorator, "rename")


def mirror(name, /):
    """Read-only property serving the "_{name}" slot (host values only store immutable objects)."""
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")
    return property(_retitle(lambda self: getattr(self, "_" + name), name))


__all__ = (
    "Unset",
    "UnsetType",
    "coalesce",
    "rename",
    "mirror",
)
