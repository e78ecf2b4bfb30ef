"""
Set algebra over entity identifiers.

Relationship fields (``doctors``, ``clinics``, ``health_services``) are
sets of opaque string ids.  These helpers always return a fresh ``set``
and leave their arguments untouched, so callers can compare the result
with the stored value to find out whether anything changed.
"""

from typing import Iterable, Set


def add_to_set(current: Iterable[str], ids: Iterable[str]) -> Set[str]:
    """Return ``current`` with every id from ``ids`` added."""
    result = set(current)
    result.update(ids)
    return result


def pull(current: Iterable[str], ids: Iterable[str]) -> Set[str]:
    """Return ``current`` without any id from ``ids``."""
    return set(current).difference(ids)


def union_all(groups: Iterable[Iterable[str]]) -> Set[str]:
    """Deduplicated union of several id collections."""
    result: Set[str] = set()
    for group in groups:
        result.update(group)
    return result
