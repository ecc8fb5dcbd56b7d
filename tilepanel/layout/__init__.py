"""Grid placement for the animating tile panel."""

from .grid import (
    GridLayout,
    GridPlacement,
    PlacementStrategy,
    cell_origin,
    compute_layout,
    container_height,
    items_per_row,
)

__all__ = [
    "GridLayout",
    "GridPlacement",
    "PlacementStrategy",
    "cell_origin",
    "compute_layout",
    "container_height",
    "items_per_row",
]
