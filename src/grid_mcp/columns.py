"""
Responsive column resolution.

The grid has 2, 3 or 4 columns depending on how wide its container is.
Phones always get 2 columns regardless of the container, because the
panel usually spans the whole (narrow) screen there.

Desktop thresholds (container width in pixels):
  - < 370:   2 columns
  - 370–449: 3 columns
  - ≥ 450:   4 columns

``ColumnResolver`` owns the current column count for one grid and calls
back synchronously when it changes so the owner can re-run auto-layout.
The callback may re-enter the engine (a nested auto-layout followed by
a re-render); that call chain is expected.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from .models import GridConfig


MOBILE_BREAKPOINT = 1000          # screen width (px) at or below which a device is mobile
FALLBACK_CONTAINER_WIDTH = 350    # side-panel estimate used before the first measurement
DEFAULT_COLUMNS = 2

TWO_COLUMN_LIMIT = 370
THREE_COLUMN_LIMIT = 450

ColumnsChangeCallback = Callable[[int, int], None]


def is_mobile_screen(screen_width: float) -> bool:
    """Return True for screens at or below the mobile breakpoint."""
    return screen_width <= MOBILE_BREAKPOINT


def calculate_columns(container_width: float, is_mobile_device: bool = False) -> int:
    """Column count for a container width and device class."""
    if is_mobile_device:
        return 2
    if container_width < TWO_COLUMN_LIMIT:
        return 2
    if container_width < THREE_COLUMN_LIMIT:
        return 3
    return 4


class ColumnResolver:
    """Tracks the column count of one grid as its container is resized.

    The resolver reads and writes ``container_width`` and ``screen_width``
    on the shared ``GridConfig`` so the coordinate transform always sees
    the same measurements.
    """

    def __init__(
        self,
        config: GridConfig,
        on_columns_change: Optional[ColumnsChangeCallback] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.config = config
        self.on_columns_change = on_columns_change
        self.log = logger or logging.getLogger(__name__)
        self.columns = DEFAULT_COLUMNS
        if config.container_width > 0:
            # Initial measurement: nothing has been laid out yet, so no callback.
            self.columns = calculate_columns(config.container_width, self.is_mobile())

    @property
    def container_width(self) -> float:
        return self.config.container_width

    def is_mobile(self) -> bool:
        return is_mobile_screen(self.config.screen_width)

    def set_container_width(self, width: float) -> bool:
        """Store a new container width and recompute the column count.

        Returns True if the column count changed (after notifying the
        column-change callback), False otherwise.
        """
        self.config.container_width = width
        self.log.debug(f"Container width set to {width}px")
        return self._recompute()

    def set_screen_width(self, width: float) -> bool:
        """Store a new screen width (device class) and recompute columns."""
        self.config.screen_width = width
        return self._recompute()

    def ensure_measured(self) -> None:
        """Substitute the fallback width if the container was never measured.

        Columns are recomputed for the fallback width without notifying
        the callback: nothing observable has been laid out against an
        unmeasured container yet.
        """
        if self.config.container_width > 0:
            return
        self.log.warning(
            f"Container width not set, using default {FALLBACK_CONTAINER_WIDTH}px"
        )
        self.config.container_width = FALLBACK_CONTAINER_WIDTH
        self.columns = calculate_columns(FALLBACK_CONTAINER_WIDTH, self.is_mobile())

    def _recompute(self) -> bool:
        old_columns = self.columns
        self.columns = calculate_columns(self.config.container_width, self.is_mobile())
        if self.columns == old_columns:
            return False

        self.log.info(f"Column count changed from {old_columns} to {self.columns}")
        if self.on_columns_change is not None:
            self.on_columns_change(self.columns, old_columns)
        return True
