"""
Drop-triggered overlap resolution.

When a widget is dropped onto occupied cells the layout is not reverted;
instead every widget is visited in reading order (top to bottom, then
left to right) and pushed straight down until it clears everything that
was visited before it.  Widgets earlier in reading order are never moved
by later ones, and nothing ever moves up or sideways.
"""

from __future__ import annotations

import logging
from typing import Optional

from .collision import any_collision
from .models import LayoutError, Widget

logger = logging.getLogger(__name__)


MAX_REFLOW_STEPS = 1000   # per widget; only corrupted data gets anywhere near this


def reflow(
    widgets: list[Widget],
    max_steps: int = MAX_REFLOW_STEPS,
    log: Optional[logging.Logger] = None,
) -> list[Widget]:
    """Push overlapping widgets down until no two widgets overlap.

    Widgets are mutated in place.  Returns the widgets in the reading
    order they were settled in (the input list itself is not reordered).
    The sort is stable, so of two widgets sharing an origin the one
    listed first keeps its place.

    Raises:
        LayoutError: If a widget still collides after ``max_steps``
            downward moves.
    """
    log = log or logger
    settled_order = sorted(widgets, key=lambda w: (w.y, w.x))

    for index, widget in enumerate(settled_order):
        settled = settled_order[:index]
        start_y = widget.y
        steps = 0
        while any_collision(widget, settled):
            if steps >= max_steps:
                raise LayoutError(
                    f"Widget {widget.id!r} still overlaps after {max_steps} reflow steps"
                )
            widget.y += 1
            steps += 1

        if widget.y != start_y:
            log.debug(f"Reflow pushed {widget.id} from y={start_y} to y={widget.y}")

    log.info(f"Reflowed {len(widgets)} widgets")
    return settled_order
