"""
Spatial oracle - surface-to-surface distance between footprints.

Everything with a ``position`` and a ``radius`` (sites, structures, units)
can be measured. Distances are recomputed on every call; the sorted views
are new tuples, so one policy sorting for its own needs can never reorder
a collection another policy reads in the same turn.
"""

from __future__ import annotations

import math
from typing import Iterable, Optional, Protocol, TypeVar


class Footprint(Protocol):
    @property
    def position(self): ...

    @property
    def radius(self) -> int: ...


T = TypeVar("T", bound=Footprint)


def surface_distance(a: Footprint, b: Footprint) -> int:
    """
    Center distance minus both radii, floored.

    Negative when the footprints overlap. Symmetric in its operands.
    """
    dx = b.position.x - a.position.x
    dy = b.position.y - a.position.y
    return math.floor(math.hypot(dx, dy) - (a.radius + b.radius))


def nearest_first(origin: Footprint, items: Iterable[T], farthest: bool = False) -> tuple[T, ...]:
    """
    Return ``items`` ordered by surface distance to ``origin``.

    Nearest first by default; ``farthest=True`` reverses the ordering.
    Ties keep their input order in both directions.
    """
    keyed = [(surface_distance(origin, item), index, item) for index, item in enumerate(items)]
    if farthest:
        keyed.sort(key=lambda entry: (-entry[0], entry[1]))
    else:
        keyed.sort(key=lambda entry: (entry[0], entry[1]))
    return tuple(item for _, _, item in keyed)


def nearest(origin: Footprint, items: Iterable[T]) -> Optional[T]:
    """The closest item to ``origin``, or None when there is nothing to measure."""
    ordered = nearest_first(origin, items)
    return ordered[0] if ordered else None
