"""
Auto-layout algorithm for Grid-MCP.

Repacks a whole widget set so it uses the current column count with as
little vertical extent as possible.  Four passes run over a shared
occupancy map:

  1. Ordering   : keep the caller's order (for category-grouped tabs)
                  or sort by area, largest first, taller first on ties.
  2. Placement  : first-fit scan, row by row then column by column,
                  for the first free footprint.  A widget that would
                  land below ``SHRINK_ROW_THRESHOLD`` tries every
                  narrower width and keeps whichever lands highest,
                  trading width for an earlier row.
  3. Compaction : top to bottom, lift each widget to the smallest free
                  row at its column, closing gaps left by out-of-order
                  placement.
  4. Expansion  : in reading order, grow each widget's height one row
                  at a time while the row below is free and inside the
                  visible area, then its width one column at a time,
                  both bounded by the type's ``max_auto_size``.

After the passes no two widgets overlap and every widget fits the
column count.  Widgets may still reach past the visible area when their
own size demands it; that overflow is tolerated, not an error.

When widgets are sorted by area and already formed a valid layout, a
repack that came out taller is discarded and the original geometry is
restored, so running auto-layout on its own output never makes the
layout taller.  A caller-supplied order is always applied.

These are heuristics, not an optimal bin packing.
"""

from __future__ import annotations

import logging
from typing import Optional

from .collision import find_overlapping_pairs
from .models import GridSize, LayoutError, Widget
from .registry import WidgetRegistry
from .transform import DEFAULT_MAX_VISIBLE_ROWS


# --- Tunables ---

MAX_SEARCH_ROWS = 1000          # rows scanned for a free slot before giving up
SHRINK_ROW_THRESHOLD = 100      # below this row, try narrower widths
DEFAULT_MAX_AUTO_HEIGHT = 3     # expansion bound for types without max_auto_size


# ---------------------------------------------------------------------------
# Occupancy map
# ---------------------------------------------------------------------------

class OccupancyMap:
    """Which widget occupies each grid cell, keyed by ``(col, row)``.

    Built and thrown away inside a single layout pass.  Columns are
    bounded by the grid; rows are not.
    """

    def __init__(self, columns: int):
        self.columns = columns
        self._cells: dict[tuple[int, int], str] = {}

    def __len__(self) -> int:
        return len(self._cells)

    def owner(self, col: int, row: int) -> Optional[str]:
        return self._cells.get((col, row))

    def is_free(self, x: int, y: int, w: int, h: int) -> bool:
        """True if the whole footprint is inside the columns and unoccupied."""
        if x < 0 or y < 0 or x + w > self.columns:
            return False
        cells = self._cells
        for row in range(y, y + h):
            for col in range(x, x + w):
                if (col, row) in cells:
                    return False
        return True

    def mark(self, widget_id: str, x: int, y: int, w: int, h: int) -> None:
        for row in range(y, y + h):
            for col in range(x, x + w):
                self._cells[(col, row)] = widget_id

    def clear(self, x: int, y: int, w: int, h: int) -> None:
        for row in range(y, y + h):
            for col in range(x, x + w):
                self._cells.pop((col, row), None)

    def mark_widget(self, widget: Widget) -> None:
        self.mark(widget.id, widget.x, widget.y, widget.w, widget.h)

    def clear_widget(self, widget: Widget) -> None:
        self.clear(widget.x, widget.y, widget.w, widget.h)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def layout_extent(widgets: list[Widget]) -> int:
    """Number of rows the layout spans (bottom of the lowest widget)."""
    return max((w.y + w.h for w in widgets), default=0)


def is_valid_layout(widgets: list[Widget], columns: int) -> bool:
    """True if every widget fits the columns and none overlap."""
    for widget in widgets:
        if widget.x < 0 or widget.y < 0 or widget.x + widget.w > columns:
            return False
    return not find_overlapping_pairs(widgets)


def _snapshot(widgets: list[Widget]) -> list[tuple[int, int, int, int]]:
    return [(w.x, w.y, w.w, w.h) for w in widgets]


def _restore(widgets: list[Widget], snapshot: list[tuple[int, int, int, int]]) -> None:
    for widget, (x, y, w, h) in zip(widgets, snapshot):
        widget.x, widget.y, widget.w, widget.h = x, y, w, h


# ---------------------------------------------------------------------------
# Packer
# ---------------------------------------------------------------------------

class AutoLayoutPacker:
    """Repacks widget sets for one column count and visible height."""

    def __init__(
        self,
        columns: int,
        max_visible_rows: int = DEFAULT_MAX_VISIBLE_ROWS,
        registry: Optional[WidgetRegistry] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.columns = columns
        self.max_visible_rows = max_visible_rows
        self.registry = registry
        self.log = logger or logging.getLogger(__name__)

    def pack(self, widgets: list[Widget], preserve_order: bool = False) -> list[Widget]:
        """Reposition (and possibly resize) every widget in place.

        Returns the same list.

        Raises:
            LayoutError: If a widget cannot be placed within
                ``MAX_SEARCH_ROWS`` rows.
        """
        if not widgets:
            return widgets

        self.log.info(
            f"Auto-layout started: {len(widgets)} widgets, {self.columns} columns, "
            f"preserve_order={preserve_order}, max_visible_rows={self.max_visible_rows}"
        )

        was_valid = is_valid_layout(widgets, self.columns)
        extent_before = layout_extent(widgets)
        snapshot = _snapshot(widgets)

        ordered = self.order(widgets, preserve_order)
        occupancy = OccupancyMap(self.columns)

        self._place(ordered, occupancy)
        compacted = self._compact(ordered, occupancy)
        expanded = self._expand(ordered, occupancy)

        extent_after = layout_extent(widgets)
        if not preserve_order and was_valid and extent_after > extent_before:
            _restore(widgets, snapshot)
            self.log.info(
                f"Repacked layout spans {extent_after} rows, existing spans {extent_before}; "
                f"keeping existing layout"
            )
            return widgets

        self.log.info(
            f"Auto-layout complete: {compacted} widgets compacted, {expanded} expansions, "
            f"{extent_after} rows"
        )
        return widgets

    # --- Pass 1: ordering ---

    @staticmethod
    def order(widgets: list[Widget], preserve_order: bool = False) -> list[Widget]:
        if preserve_order:
            return list(widgets)
        return sorted(widgets, key=lambda w: (-(w.w * w.h), -w.h))

    # --- Pass 2: placement ---

    def _find_position(self, occupancy: OccupancyMap, w: int, h: int) -> tuple[int, int]:
        for y in range(MAX_SEARCH_ROWS):
            for x in range(self.columns - w + 1):
                if occupancy.is_free(x, y, w, h):
                    return x, y
        raise LayoutError(
            f"No free {w}x{h} slot within {MAX_SEARCH_ROWS} rows of a {self.columns}-column grid"
        )

    def _place(self, ordered: list[Widget], occupancy: OccupancyMap) -> None:
        for widget in ordered:
            if widget.h > MAX_SEARCH_ROWS:
                raise LayoutError(
                    f"Widget {widget.id!r} is {widget.h} rows tall, more than the "
                    f"{MAX_SEARCH_ROWS}-row search limit"
                )

            target_w = max(1, min(widget.w, self.columns))
            target_h = widget.h
            x, y = self._find_position(occupancy, target_w, target_h)

            if y > SHRINK_ROW_THRESHOLD and target_w > 1:
                for try_w in range(target_w - 1, 0, -1):
                    try_x, try_y = self._find_position(occupancy, try_w, target_h)
                    if try_y < y:
                        x, y, target_w = try_x, try_y, try_w
                self.log.debug(f"{widget.id} narrowed to w={target_w} to land at row {y}")

            widget.x, widget.y, widget.w, widget.h = x, y, target_w, target_h
            occupancy.mark_widget(widget)
            self.log.debug(f"Placed {widget.id} at ({x},{y}) size {target_w}x{target_h}")

    # --- Pass 3: compaction ---

    def _compact(self, ordered: list[Widget], occupancy: OccupancyMap) -> int:
        moved = 0
        for widget in sorted(ordered, key=lambda w: w.y):
            original_y = widget.y
            if original_y == 0:
                continue

            occupancy.clear_widget(widget)
            for try_y in range(original_y):
                if occupancy.is_free(widget.x, try_y, widget.w, widget.h):
                    widget.y = try_y
                    moved += 1
                    self.log.debug(f"Compacted {widget.id} from y={original_y} to y={try_y}")
                    break
            occupancy.mark_widget(widget)
        return moved

    # --- Pass 4: expansion ---

    def max_size_for(self, widget: Widget) -> GridSize:
        """Expansion bound for a widget at the current column count."""
        if self.registry is not None:
            size = self.registry.max_auto_size(widget.type, self.columns)
            if size is not None:
                return size
        return GridSize(w=self.columns, h=DEFAULT_MAX_AUTO_HEIGHT)

    def _expand(self, ordered: list[Widget], occupancy: OccupancyMap) -> int:
        expansions = 0
        for widget in sorted(ordered, key=lambda w: (w.y, w.x)):
            max_size = self.max_size_for(widget)
            original_w, original_h = widget.w, widget.h
            occupancy.clear_widget(widget)

            for try_h in range(widget.h + 1, max_size.h + 1):
                # y + h is the row after the widget, so it may equal the row count
                if widget.y + try_h > self.max_visible_rows:
                    break
                if not occupancy.is_free(widget.x, widget.y, widget.w, try_h):
                    break
                widget.h = try_h
                expansions += 1

            for try_w in range(widget.w + 1, min(max_size.w, self.columns) + 1):
                if not occupancy.is_free(widget.x, widget.y, try_w, widget.h):
                    break
                widget.w = try_w
                expansions += 1

            occupancy.mark_widget(widget)
            if (widget.w, widget.h) != (original_w, original_h):
                self.log.debug(
                    f"Expanded {widget.id}: {original_w}x{original_h} -> {widget.w}x{widget.h}"
                )
        return expansions


def auto_layout(
    widgets: list[Widget],
    columns: int,
    max_visible_rows: int = DEFAULT_MAX_VISIBLE_ROWS,
    registry: Optional[WidgetRegistry] = None,
    preserve_order: bool = False,
) -> list[Widget]:
    """Repack ``widgets`` in place for ``columns`` columns."""
    packer = AutoLayoutPacker(columns, max_visible_rows=max_visible_rows, registry=registry)
    return packer.pack(widgets, preserve_order=preserve_order)
