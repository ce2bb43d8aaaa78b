"""Axis-aligned overlap tests between widget footprints."""

from __future__ import annotations
from typing import Iterable

from .models import Widget


def overlaps(a: Widget, b: Widget) -> bool:
    """Return True if the footprints of ``a`` and ``b`` intersect.

    Two rectangles do NOT intersect when one lies entirely to the left,
    right, above or below the other; anything else is an overlap.
    Touching edges are not an overlap.  A widget never overlaps itself,
    which is decided by id so that copies of the same widget are skipped
    too.
    """
    a_id = getattr(a, "id", None)
    if a_id is not None and a_id == getattr(b, "id", None):
        return False

    disjoint = (
        a.x + a.w <= b.x      # a is left of b
        or a.x >= b.x + b.w   # a is right of b
        or a.y + a.h <= b.y   # a is above b
        or a.y >= b.y + b.h   # a is below b
    )
    return not disjoint


def any_collision(widget: Widget, others: Iterable[Widget]) -> bool:
    """Return True if ``widget`` overlaps any other widget in ``others``."""
    return any(overlaps(widget, other) for other in others)


def find_collisions(widget: Widget, others: Iterable[Widget]) -> list[Widget]:
    """Return every widget in ``others`` that ``widget`` overlaps."""
    return [other for other in others if overlaps(widget, other)]


def find_overlapping_pairs(widgets: list[Widget]) -> list[tuple[Widget, Widget]]:
    """Return all overlapping pairs in a widget list (each pair once)."""
    pairs = []
    for i, first in enumerate(widgets):
        for second in widgets[i + 1:]:
            if overlaps(first, second):
                pairs.append((first, second))
    return pairs
