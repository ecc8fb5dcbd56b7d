"""
Grid Placement

Wrapping grid layout for fixed-size cells:
- How many cells fit on a row for a given width
- Container size for a measure pass
- Per-index cell origin, spreading leftover row width evenly between
  and around the cells

The animation panel only talks to a PlacementStrategy, so other layouts
can be swapped in without subclassing the panel.
"""

import logging
import math
from dataclasses import dataclass
from typing import List

from ..geometry import Point, Size, is_valid, require

logger = logging.getLogger(__name__)


def items_per_row(available_width: float, item_width: float, item_count: int) -> int:
    """Number of cells on each row.

    An unbounded (infinite) width puts every item on one row.
    """
    require(not math.isnan(available_width) and available_width >= 0,
            f"available width must be >= 0, got {available_width}")
    if math.isinf(available_width):
        return item_count
    return max(1, int(math.floor(available_width / item_width)))


def container_height(item_count: int, per_row: int, item_height: float) -> float:
    """Height needed for ``item_count`` cells at ``per_row`` cells per row.

    Always reserves one row past the last full row. A degenerate row count
    (no items on an unbounded row) yields 0.
    """
    rows = math.floor(item_count / per_row) + 1 if per_row else math.nan
    height = item_height * rows
    return height if is_valid(height) else 0.0


def cell_origin(index: int, per_row: int, item_size: Size,
                panel_width: float, total: int) -> Point:
    """Top-left corner of the cell at ``index``.

    When items wrap onto more than one row, the width left over on a row is
    split into ``per_row`` equal gaps: half a gap on each outer edge and a
    full gap between neighbours.
    """
    fudge = 0.0
    if total > per_row:
        fudge = (panel_width - per_row * item_size.width) / per_row
        require(fudge >= 0, f"negative row spacing {fudge} for width {panel_width}")

    row = index // per_row
    column = index % per_row
    return Point(0.5 * fudge + column * (item_size.width + fudge),
                 row * item_size.height)


@dataclass(frozen=True)
class GridLayout:
    """Result of a grid computation."""
    item_count: int
    item_size: Size
    items_per_row: int
    container_size: Size
    resolved_width: float

    def cell_origin(self, index: int) -> Point:
        """Cell origin at ``index`` for this layout's resolved width."""
        return cell_origin(index, self.items_per_row, self.item_size,
                           self.resolved_width, self.item_count)

    def row_column(self, index: int):
        """(row, column) of ``index``."""
        return divmod(index, self.items_per_row)


def compute_layout(item_count: int, item_size: Size, available_width: float) -> GridLayout:
    """Measure a grid of ``item_count`` cells within ``available_width``.

    Args:
        item_count: Number of items to place
        item_size: Size of every cell
        available_width: Width offered by the host, may be infinite

    Returns:
        GridLayout with per-row count, container size and a cell origin lookup
        resolved against the measured container width
    """
    require(item_count >= 0, f"item count must be >= 0, got {item_count}")
    require(is_valid(item_size) and item_size.width > 0 and item_size.height > 0,
            f"item size must be positive and finite, got {item_size}")

    per_row = items_per_row(available_width, item_size.width, item_count)
    width = per_row * item_size.width
    height = container_height(item_count, per_row, item_size.height)

    return GridLayout(
        item_count=item_count,
        item_size=item_size,
        items_per_row=per_row,
        container_size=Size(width, height),
        resolved_width=width,
    )


class PlacementStrategy:
    """Computes cell targets for the animating panel.

    Subclasses provide ``cell_size``, ``measure`` and ``arrange``.
    """

    @property
    def cell_size(self) -> Size:
        raise NotImplementedError

    def measure(self, item_count: int, available_width: float) -> Size:
        """Desired container size for ``item_count`` items."""
        raise NotImplementedError

    def arrange(self, item_count: int, final_width: float) -> List[Point]:
        """Cell origins for every index given the resolved container width."""
        raise NotImplementedError


class GridPlacement(PlacementStrategy):
    """Wrapping grid of equally sized cells."""

    def __init__(self, item_size: Size):
        require(is_valid(item_size) and item_size.width > 0 and item_size.height > 0,
                f"item size must be positive and finite, got {item_size}")
        self._item_size = item_size

    @property
    def cell_size(self) -> Size:
        return self._item_size

    def measure(self, item_count: int, available_width: float) -> Size:
        return compute_layout(item_count, self._item_size, available_width).container_size

    def arrange(self, item_count: int, final_width: float) -> List[Point]:
        # The resolved width may differ from the measured one, so recount
        require(is_valid(final_width), f"final width must be finite, got {final_width}")
        per_row = max(1, int(math.floor(final_width / self._item_size.width)))

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Arranging %d items, %d per row, width=%.1f",
                item_count, per_row, final_width,
            )

        return [
            cell_origin(i, per_row, self._item_size, final_width, item_count)
            for i in range(item_count)
        ]
