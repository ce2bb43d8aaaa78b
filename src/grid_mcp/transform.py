"""
Coordinate transforms between grid cells and render-ready rectangles.

Three coordinate systems meet here:

  grid cells : integer (x, y, w, h) stored on widgets
  pixels     : absolute container pixels, used for live drag/resize
               feedback and for turning a pointer position back into a
               cell
  viewport   : horizontal values as a percentage of the container
               width and vertical values in rem, so a rendered layout
               survives container resizes and screen-density changes
               without being recomputed

Layout of one row of an N-column grid (every gap is ``gap`` wide):

    | gap | col | gap | col | ... | col | gap |

so a column is ``(container_width - gap * (N + 1)) / N`` wide.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterable, Optional

from .columns import ColumnResolver, is_mobile_screen
from .models import GridConfig, Widget

logger = logging.getLogger(__name__)


DEFAULT_ROW_HEIGHT = 5.0         # rem
MOBILE_ROW_HEIGHT = 3.5          # rem; shorter rows keep phones from squashing content
DEFAULT_MAX_VISIBLE_ROWS = 100   # used until the viewport height is known


@dataclass
class PixelRect:
    """Absolute pixel rectangle inside the grid container."""
    left: float
    top: float
    width: float
    height: float


@dataclass
class ViewportRect:
    """Render-ready rectangle: horizontal in %, vertical in rem."""
    left: float
    top: float
    width: float
    height: float

    def to_css(self) -> dict[str, str]:
        return {
            "left": f"{self.left:.2f}%",
            "top": f"{self.top:.2f}rem",
            "width": f"{self.width:.2f}%",
            "height": f"{self.height:.2f}rem",
        }


@dataclass
class GridCell:
    """A grid cell origin (column, row)."""
    x: int
    y: int


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


class CoordinateTransform:
    """Converts between grid cells, pixels and viewport units for one grid."""

    def __init__(self, config: GridConfig, resolver: ColumnResolver):
        self.config = config
        self.resolver = resolver

    # --- Units ---

    @property
    def columns(self) -> int:
        return self.resolver.columns

    @property
    def row_height(self) -> float:
        """Row height in rem (device default when not configured)."""
        if self.config.row_height is not None:
            return self.config.row_height
        if is_mobile_screen(self.config.screen_width):
            return MOBILE_ROW_HEIGHT
        return DEFAULT_ROW_HEIGHT

    @property
    def gap(self) -> float:
        """Gap in rem."""
        return self.config.gap

    def rem_to_pixels(self, rem: float) -> float:
        return rem * self.config.root_font_size

    def pixels_to_rem(self, pixels: float) -> float:
        return pixels / self.config.root_font_size

    def _column_width_px(self) -> float:
        gap_px = self.rem_to_pixels(self.gap)
        columns = self.columns
        return (self.config.container_width - gap_px * (columns + 1)) / columns

    # --- Grid → pixels ---

    def to_pixel_rect(self, widget: Widget) -> PixelRect:
        """Absolute pixel rectangle for a widget footprint."""
        self.resolver.ensure_measured()

        gap_px = self.rem_to_pixels(self.gap)
        row_height_px = self.rem_to_pixels(self.row_height)
        col_width = self._column_width_px()

        return PixelRect(
            left=widget.x * (col_width + gap_px) + gap_px,
            top=widget.y * (row_height_px + gap_px) + gap_px,
            width=widget.w * col_width + (widget.w - 1) * gap_px,
            height=widget.h * row_height_px + (widget.h - 1) * gap_px,
        )

    # --- Grid → viewport units ---

    def to_viewport_rect(self, widget: Widget) -> ViewportRect:
        """Render-ready rectangle for a widget footprint.

        Horizontal values are a percentage of the container width and
        vertical values are rem.  The gap share of the container is taken
        from the rem gap value, so the percentages stay independent of the
        root font size; they agree with ``to_pixel_rect`` to within a
        fraction of a cell.
        """
        self.resolver.ensure_measured()

        columns = self.columns
        gap_percent = self.gap / self.config.container_width * 100
        col_width_percent = (100 - gap_percent * (columns + 1)) / columns

        row_height = self.row_height
        gap = self.gap

        return ViewportRect(
            left=widget.x * (col_width_percent + gap_percent) + gap_percent,
            top=widget.y * (row_height + gap) + gap,
            width=widget.w * col_width_percent + (widget.w - 1) * gap_percent,
            height=widget.h * row_height + (widget.h - 1) * gap,
        )

    # --- Pixels → grid ---

    def snap_to_cell(self, pixel_x: float, pixel_y: float) -> GridCell:
        """Nearest grid cell for a pixel position inside the container.

        Inverse of ``to_pixel_rect`` for the origin.  Columns are clamped
        to the grid; rows only at the top since the grid grows downward
        without limit.
        """
        self.resolver.ensure_measured()

        gap_px = self.rem_to_pixels(self.gap)
        row_height_px = self.rem_to_pixels(self.row_height)
        col_width = self._column_width_px()

        x = _round_half_up((pixel_x - gap_px) / (col_width + gap_px))
        y = _round_half_up((pixel_y - gap_px) / (row_height_px + gap_px))

        return GridCell(
            x=max(0, min(x, self.columns - 1)),
            y=max(0, y),
        )

    # --- Extents ---

    def grid_height(self, widgets: Iterable[Widget]) -> float:
        """Total height in rem needed to show every widget."""
        bottoms = [w.y + w.h for w in widgets]
        if not bottoms:
            return 0.0
        return max(bottoms) * (self.row_height + self.gap) + self.gap

    def max_visible_rows(self, viewport_height: Optional[float] = None) -> int:
        """How many whole rows fit in the visible grid area.

        ``N`` rows need ``N`` row heights and ``N - 1`` gaps, hence the
        extra gap in the numerator.
        """
        height = viewport_height if viewport_height is not None else self.config.viewport_height
        if not height or height <= 0:
            return DEFAULT_MAX_VISIBLE_ROWS

        height_rem = self.pixels_to_rem(height)
        rows = math.floor((height_rem + self.gap) / (self.row_height + self.gap))
        logger.debug(f"Viewport height {height}px = {height_rem:.2f}rem -> {rows} visible rows")
        return rows
