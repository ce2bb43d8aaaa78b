"""
GridEngine: one responsive widget grid.

Wires the column resolver, coordinate transform, reflow and auto-layout
around a single ``GridConfig`` and exposes them the way their consumers
use them:

  - a drag controller calls ``snap_to_cell`` while the pointer moves and
    ``drop_widget`` once on drop
  - a resize controller calls ``to_pixel_rect`` during the gesture
  - an orchestrator calls ``set_container_width`` on resize,
    ``auto_layout`` on request or when the column count changes, and
    ``to_viewport_rect`` for every widget it renders

Everything is synchronous and mutates the caller's widgets in place.
The column-change callback runs inside ``set_container_width`` and is
free to call ``auto_layout`` on this same engine.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from .autolayout import AutoLayoutPacker, OccupancyMap
from .collision import any_collision
from .columns import ColumnResolver, ColumnsChangeCallback, calculate_columns
from .models import GridConfig, GridSize, LayoutRecipe, Widget
from .reflow import reflow
from .registry import WidgetRegistry
from .transform import CoordinateTransform, GridCell, PixelRect, ViewportRect


PLACEMENT_SEARCH_ROWS = 20   # rows scanned for a slot for a newly added widget


class GridEngine:
    """Layout engine for one grid container."""

    def __init__(
        self,
        config: Optional[GridConfig] = None,
        registry: Optional[WidgetRegistry] = None,
        on_columns_change: Optional[ColumnsChangeCallback] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.config = config or GridConfig()
        self.registry = registry
        self.log = logger or logging.getLogger(__name__)
        self.resolver = ColumnResolver(self.config, on_columns_change, logger=self.log)
        self.transform = CoordinateTransform(self.config, self.resolver)

        self.log.debug(
            f"Grid engine initialized: {self.columns} columns, "
            f"row height {self.transform.row_height}rem, gap {self.config.gap}rem, "
            f"mobile={self.is_mobile()}, "
            f"{len(self.registry) if self.registry is not None else 0} widget types"
        )

    @classmethod
    def from_recipe(cls, recipe: LayoutRecipe, **kwargs) -> "GridEngine":
        """Engine for a recipe's grid settings and widget type rules."""
        registry = WidgetRegistry.from_constraints(recipe.widget_types)
        return cls(config=recipe.grid, registry=registry, **kwargs)

    # --- Columns ---

    @property
    def columns(self) -> int:
        return self.resolver.columns

    @property
    def on_columns_change(self) -> Optional[ColumnsChangeCallback]:
        return self.resolver.on_columns_change

    @on_columns_change.setter
    def on_columns_change(self, callback: Optional[ColumnsChangeCallback]) -> None:
        self.resolver.on_columns_change = callback

    def is_mobile(self) -> bool:
        return self.resolver.is_mobile()

    def calculate_columns(self, container_width: float) -> int:
        return calculate_columns(container_width, self.is_mobile())

    def set_container_width(self, width: float) -> bool:
        """Record a container resize.  Returns True if the column count changed."""
        return self.resolver.set_container_width(width)

    def set_screen_width(self, width: float) -> bool:
        return self.resolver.set_screen_width(width)

    def set_viewport_height(self, height: Optional[float]) -> None:
        self.config.viewport_height = height

    # --- Coordinates ---

    def to_pixel_rect(self, widget: Widget) -> PixelRect:
        return self.transform.to_pixel_rect(widget)

    def to_viewport_rect(self, widget: Widget) -> ViewportRect:
        return self.transform.to_viewport_rect(widget)

    def snap_to_cell(self, pixel_x: float, pixel_y: float) -> GridCell:
        return self.transform.snap_to_cell(pixel_x, pixel_y)

    def grid_height(self, widgets: Iterable[Widget]) -> float:
        """Total grid height in rem."""
        return self.transform.grid_height(widgets)

    def max_visible_rows(self) -> int:
        return self.transform.max_visible_rows()

    # --- Collisions and reflow ---

    def detect_collision(self, widget: Widget, widgets: Iterable[Widget]) -> bool:
        return any_collision(widget, widgets)

    def reflow(self, widgets: list[Widget]) -> list[Widget]:
        return reflow(widgets, log=self.log)

    def drop_widget(self, widget: Widget, widgets: list[Widget]) -> bool:
        """Commit a dropped widget at its current cell.

        If it lands on other widgets they are pushed down (the dropped
        widget goes first in reading order, so it keeps its cell against
        a widget sharing its origin).  Returns True if a reflow happened.
        """
        others = [w for w in widgets if w.id != widget.id]
        if not any_collision(widget, others):
            return False

        self.log.info(f"Drop of {widget.id} at ({widget.x},{widget.y}) collides, reflowing")
        reflow([widget, *others], log=self.log)
        return True

    # --- Auto-layout ---

    def auto_layout(self, widgets: list[Widget], preserve_order: bool = False) -> list[Widget]:
        """Repack ``widgets`` in place for the current column count."""
        packer = AutoLayoutPacker(
            self.columns,
            max_visible_rows=self.max_visible_rows(),
            registry=self.registry,
            logger=self.log,
        )
        return packer.pack(widgets, preserve_order=preserve_order)

    # --- Validation and placement helpers ---

    def validate_widget(self, widget: Widget, min_size: Optional[GridSize] = None) -> Widget:
        """Return a copy of ``widget`` clamped into the current grid.

        Width is clamped to the column count even when that is below the
        type's minimum width; a narrow grid wins over the widget's own
        minimum.
        """
        if min_size is None:
            if self.registry is not None:
                min_size = self.registry.min_size(widget.type, self.columns)
            else:
                min_size = GridSize(w=1, h=1)

        columns = self.columns
        w = min(max(min_size.w, widget.w), columns)
        h = max(min_size.h, widget.h)
        x = max(0, min(widget.x, columns - w))
        y = max(0, widget.y)
        return widget.model_copy(update={"x": x, "y": y, "w": w, "h": h})

    def find_available_position(self, size: GridSize, widgets: Iterable[Widget]) -> GridCell:
        """First free cell for a new widget of ``size``.

        Scans the top ``PLACEMENT_SEARCH_ROWS`` rows; if nothing fits the
        widget goes below everything.
        """
        widgets = list(widgets)
        occupancy = OccupancyMap(self.columns)
        for widget in widgets:
            occupancy.mark_widget(widget)

        w = min(size.w, self.columns)
        for y in range(PLACEMENT_SEARCH_ROWS):
            for x in range(self.columns - w + 1):
                if occupancy.is_free(x, y, w, size.h):
                    return GridCell(x=x, y=y)

        bottom = max((wd.y + wd.h for wd in widgets), default=0)
        self.log.debug(f"No free slot for {size.w}x{size.h}, placing at bottom row {bottom}")
        return GridCell(x=0, y=bottom)
