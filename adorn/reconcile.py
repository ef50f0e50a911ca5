"""
Flag reconciliation primitives (left-biased merge and keyed difference).

Both helpers are pure, total and stable: surviving elements keep their input
order and an empty result is a valid outcome. They work on any iterables and
any hashable key; the extensions use adorn.commands.flagname as the key so
that exactly one value per long name survives.

- union_left_by(key, primary, secondary)
  every element of primary, then the elements of secondary whose key does not
  occur in primary. Used so user-supplied values win over defaults and
  environment-derived values.

- diff_by(key, candidates, excluded)
  the elements of candidates whose key is not in excluded. Used to find the
  required flags nothing has supplied.

Examples
    >>> union_left_by(str.lower, ["A", "b"], ["a", "C"])
    ('A', 'b', 'C')
    >>> diff_by(len, ["x", "yy", "zzz"], {2})
    ('x', 'zzz')
"""
import logging

logger = logging.getLogger(__name__)


def union_left_by(key, primary, secondary, /):
    primary = tuple(primary)
    seen = set(map(key, primary))
    merged = primary + tuple(object for object in secondary if key(object) not in seen)
    logger.debug("union kept %d primary and %d secondary entries", len(primary), len(merged) - len(primary))
    return merged


def diff_by(key, candidates, excluded, /):
    excluded = set(excluded)
    return tuple(object for object in candidates if key(object) not in excluded)


__all__ = (
    "union_left_by",
    "diff_by",
)
