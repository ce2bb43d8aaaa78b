"""
Data models for Grid-MCP: the widget grid vocabulary.

A dashboard is a responsive grid of integer cells.  Widgets occupy
rectangular blocks of cells and are described entirely by their origin
and size in grid units:

    Widget
    ├── x, y   : top-left cell (column, row); rows are unbounded
    └── w, h   : footprint in columns and rows

The column count is never stored on a widget.  It is derived at runtime
from the container width (2–4 columns, see ``columns.py``), which is why
the engine renormalizes layouts whenever it changes.

Widget *types* are opaque tags.  A ``SizeConstraint`` per type tells the
auto-layout packer how small a widget may get and how far it may grow.
Sizes can be fixed (``GridSize``), keyed by column count
(``ColumnSizes``), or computed by a callable ``columns -> GridSize``.

A ``LayoutRecipe`` bundles grid settings, type constraints and widgets;
it is the YAML input format consumed by the MCP tools.
"""

from __future__ import annotations
from typing import Callable, Optional, Union
from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class LayoutError(Exception):
    """A layout pass could not converge.

    Raised when a search or collision-resolution loop exceeds its
    iteration ceiling, which only happens with corrupted widget data
    (degenerate sizes, impossible configurations restored from damaged
    state).  Callers recover by discarding the layout and substituting a
    default one.
    """


# ---------------------------------------------------------------------------
# Sizes
# ---------------------------------------------------------------------------

class GridSize(BaseModel):
    """A footprint in grid units (columns × rows)."""
    w: int = Field(ge=1)
    h: int = Field(ge=1)


class ColumnSizes(BaseModel):
    """A size table keyed by column count.

    ``for_columns`` picks the entry with the largest key not above the
    current column count, falling back to the smallest key when every
    entry is for wider grids.

    Example (YAML)::

        max_auto_size:
          by_columns:
            2: {w: 2, h: 8}
            3: {w: 3, h: 10}
    """
    by_columns: dict[int, GridSize]

    def for_columns(self, columns: int) -> GridSize:
        keys = sorted(self.by_columns)
        eligible = [k for k in keys if k <= columns]
        key = eligible[-1] if eligible else keys[0]
        return self.by_columns[key]


SizeSpec = Union[GridSize, ColumnSizes, Callable[[int], GridSize]]


def resolve_size(spec: Optional[SizeSpec], columns: int) -> Optional[GridSize]:
    """Resolve a size spec for the given column count.

    Callables may return a ``GridSize`` or a plain ``{"w": .., "h": ..}``
    mapping.
    """
    if spec is None:
        return None
    if isinstance(spec, GridSize):
        return spec
    if isinstance(spec, ColumnSizes):
        return spec.for_columns(columns)
    result = spec(columns)
    if isinstance(result, GridSize):
        return result
    return GridSize.model_validate(result)


class SizeConstraint(BaseModel):
    """Size rules for one widget type.

    Attributes:
        label:         Human-readable name of the widget type.
        category:      Grouping used for category-aware ordering
                       (user, scene, social, inventory, quests, other).
        min_size:      Smallest footprint the widget is usable at.
        default_size:  Footprint given to freshly added or reset widgets.
        max_auto_size: Upper bound for the auto-layout expansion pass.
                       When unset the packer grows up to the full column
                       count and 3 rows.
    """
    label: Optional[str] = None
    category: str = "other"
    min_size: SizeSpec = Field(default_factory=lambda: GridSize(w=1, h=1))
    default_size: Optional[SizeSpec] = None
    max_auto_size: Optional[SizeSpec] = None

    def resolve_min_size(self, columns: int) -> GridSize:
        return resolve_size(self.min_size, columns)

    def resolve_default_size(self, columns: int) -> Optional[GridSize]:
        return resolve_size(self.default_size, columns)

    def resolve_max_auto_size(self, columns: int) -> Optional[GridSize]:
        return resolve_size(self.max_auto_size, columns)


# ---------------------------------------------------------------------------
# Widget
# ---------------------------------------------------------------------------

class Widget(BaseModel):
    """A widget footprint on the grid.

    Widgets belong to the caller.  The engine mutates ``x``, ``y``,
    ``w`` and ``h`` in place during reflow and auto-layout; everything
    else (``type``, ``config``) is carried through untouched.

    The layout algorithms only read ``id``, ``type``, ``x``, ``y``,
    ``w`` and ``h``, so any object exposing those attributes can be laid
    out. This model is what the recipe parser produces.
    """
    id: str
    type: str = "default"
    x: int = Field(default=0, ge=0)
    y: int = Field(default=0, ge=0)
    w: int = Field(default=1, ge=1)
    h: int = Field(default=1, ge=1)
    config: dict = Field(default_factory=dict)

    @property
    def area(self) -> int:
        return self.w * self.h

    @property
    def bottom(self) -> int:
        """First row below the widget."""
        return self.y + self.h


# ---------------------------------------------------------------------------
# Grid configuration
# ---------------------------------------------------------------------------

class GridConfig(BaseModel):
    """Per-engine grid settings.

    ``row_height`` and ``gap`` are in rem so the vertical rhythm follows
    the device's font scale; ``root_font_size`` converts them to pixels.
    ``row_height`` left unset resolves to 5 rem on desktop and 3.5 rem on
    mobile screens.

    ``container_width`` is the measured pixel width of the grid container
    and is updated by the caller on resize; ``0`` means not yet measured.
    ``viewport_height`` is the visible pixel height of the grid area and
    caps how far auto-layout lets widgets grow downward.
    """
    row_height: Optional[float] = None
    gap: float = 0.75
    root_font_size: float = 16.0
    container_width: float = 0.0
    screen_width: float = 1920.0
    viewport_height: Optional[float] = None


# ---------------------------------------------------------------------------
# Recipe (root, what the MCP tools consume)
# ---------------------------------------------------------------------------

class LayoutRecipe(BaseModel):
    """A complete layout scenario: grid settings, type rules, widgets.

    ``preserve_order`` asks auto-layout to keep the widget list order
    instead of sorting by area (used for category-grouped tabs).
    """
    title: str = "Untitled Layout"
    theme: str = "dark"
    grid: GridConfig = Field(default_factory=GridConfig)
    widget_types: dict[str, SizeConstraint] = Field(default_factory=dict)
    widgets: list[Widget] = Field(default_factory=list)
    preserve_order: bool = False

    def get_widget(self, widget_id: str) -> Optional[Widget]:
        """Look up a widget by id."""
        for widget in self.widgets:
            if widget.id == widget_id:
                return widget
        return None
