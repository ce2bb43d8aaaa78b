"""
Widget type registry: size rules per widget type.

The layout engine treats widget types as opaque tags.  Everything it
needs to know about a type (minimum size, default size, how far
auto-layout may grow it, which category it belongs to) comes from a
``SizeConstraint`` registered here.

Category ordering
-----------------
Auto-arrange groups widgets by category before packing them with
``preserve_order`` so related widgets stay together:

    user → scene → social → inventory → quests → other

Within the user category a fixed type order puts the identity widgets
first (info, mood, stats, attributes).
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from .models import GridSize, SizeConstraint, Widget

logger = logging.getLogger(__name__)


CATEGORY_ORDER: dict[str, int] = {
    "user": 1,
    "scene": 2,
    "social": 3,
    "inventory": 4,
    "quests": 5,
    "other": 6,
}

USER_TYPE_ORDER: dict[str, int] = {
    "userInfo": 1,
    "userMood": 2,
    "userStats": 3,
    "userAttributes": 4,
}

_UNORDERED = 999


class WidgetRegistry:
    """Central catalog of widget type size rules."""

    def __init__(self):
        self.widgets: dict[str, SizeConstraint] = {}

    @classmethod
    def from_constraints(cls, constraints: dict[str, SizeConstraint]) -> "WidgetRegistry":
        registry = cls()
        for widget_type, constraint in constraints.items():
            registry.register(widget_type, constraint)
        return registry

    def register(self, widget_type: str, constraint: SizeConstraint) -> None:
        """Register (or replace) the size rules for a widget type.

        Raises:
            ValueError: If ``widget_type`` is empty.
        """
        if not widget_type or not isinstance(widget_type, str):
            raise ValueError("Widget type must be a non-empty string")
        if widget_type in self.widgets:
            logger.warning(f"Widget type '{widget_type}' already registered, overwriting")
        self.widgets[widget_type] = constraint
        logger.debug(f"Registered widget type: {widget_type}")

    def get(self, widget_type: str) -> Optional[SizeConstraint]:
        constraint = self.widgets.get(widget_type)
        if constraint is None:
            logger.warning(f"Widget type '{widget_type}' not found")
        return constraint

    def has(self, widget_type: str) -> bool:
        return widget_type in self.widgets

    def __len__(self) -> int:
        return len(self.widgets)

    # --- Size lookups (silent for unknown types: the caller has a default) ---

    def min_size(self, widget_type: str, columns: int) -> GridSize:
        if not self.has(widget_type):
            return GridSize(w=1, h=1)
        return self.widgets[widget_type].resolve_min_size(columns)

    def default_size(self, widget_type: str, columns: int) -> Optional[GridSize]:
        if not self.has(widget_type):
            return None
        return self.widgets[widget_type].resolve_default_size(columns)

    def max_auto_size(self, widget_type: str, columns: int) -> Optional[GridSize]:
        if not self.has(widget_type):
            return None
        return self.widgets[widget_type].resolve_max_auto_size(columns)

    def category(self, widget_type: str) -> str:
        if not self.has(widget_type):
            return "other"
        return self.widgets[widget_type].category

    # --- Bulk helpers used before auto-arrange ---

    def reset_sizes_to_default(self, widgets: Iterable[Widget], columns: int) -> int:
        """Reset each widget to its type's default size for ``columns``.

        Widgets whose type is unregistered (logged) or has no default
        size are left alone.  Returns the number of widgets whose size
        actually changed.
        """
        changed = 0
        for widget in widgets:
            constraint = self.get(widget.type)
            if constraint is None:
                continue
            size = constraint.resolve_default_size(columns)
            if size is None:
                continue
            if (widget.w, widget.h) != (size.w, size.h):
                logger.debug(f"Reset {widget.id} from {widget.w}x{widget.h} to {size.w}x{size.h}")
                widget.w = size.w
                widget.h = size.h
                changed += 1
        logger.info(f"Reset {changed} widgets to default sizes")
        return changed

    def sort_by_category(self, widgets: Iterable[Widget]) -> list[Widget]:
        """Order widgets by category, keeping input order within a category."""
        def sort_key(widget: Widget) -> tuple[int, int]:
            category = self.category(widget.type)
            type_rank = _UNORDERED
            if category == "user":
                type_rank = USER_TYPE_ORDER.get(widget.type, _UNORDERED)
            return (CATEGORY_ORDER.get(category, _UNORDERED), type_rank)

        return sorted(widgets, key=sort_key)
