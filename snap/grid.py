"""Pure 3x3 grid geometry for drag-to-snap placement.

Everything here is stateless and side-effect free: the selection session calls into it
on every pointer event, and the overlay painter uses the same edge math to draw the grid
lines, so what the user sees and where the window lands always agree.
"""

from __future__ import annotations

from dataclasses import dataclass
import math


# Fixed grid resolution. The snap tool always partitions the surface into thirds.
GRID_ROWS = 3
GRID_COLS = 3


class InvalidBounds(ValueError):
    """
    Raised when a bounding surface has no usable area (w <= 0 or h <= 0).

    Carries the offending bounds so diagnostics can report exactly what the host
    surface returned at press time.
    """

    def __init__(self, bounds: "Rect") -> None:
        super().__init__(f"bounds must have positive width and height, got {bounds.w}x{bounds.h}")
        self.bounds = bounds


@dataclass(frozen=True)
class Point:
    """Surface-local pointer position in pixels (origin top-left, y-down)."""
    x: float
    y: float


@dataclass(frozen=True)
class Rect:
    """
    Axis-aligned rectangle in surface-local pixels.

    Used for three things:
    - the live (normalized) selection while dragging
    - the bounding surface of one session (x = y = 0)
    - one of the nine snapped grid cells

    Width/height are never negative for rects produced by this module.
    """
    x: float
    y: float
    w: float
    h: float

    @property
    def centroid(self) -> Point:
        """Geometric center, the single point that decides which cell wins."""
        return Point(x=self.x + self.w / 2.0, y=self.y + self.h / 2.0)

    def translated(self, dx: float, dy: float) -> "Rect":
        """Same size, origin shifted by (dx, dy)."""
        return Rect(x=self.x + dx, y=self.y + dy, w=self.w, h=self.h)

    def as_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y, "w": self.w, "h": self.h}


def round_half_up(v: float) -> int:
    """
    Round to the nearest integer, with .5 going up.

    Python's round() uses banker's rounding (round(600.5) == 600), which would move
    cell edges on surfaces whose thirds land exactly on a half pixel.
    """
    return int(math.floor(v + 0.5))


def normalize(anchor: Point, current: Point) -> Rect:
    """
    Build the selection rectangle spanned by two arbitrary corner points.

    The drag may go in any direction, so the origin is the component-wise minimum and
    the extent is the absolute difference. anchor == current yields a zero-area rect,
    which is a valid selection.
    """
    return Rect(
        x=min(anchor.x, current.x),
        y=min(anchor.y, current.y),
        w=abs(anchor.x - current.x),
        h=abs(anchor.y - current.y),
    )


def _require_valid(bounds: Rect) -> None:
    if not (bounds.w > 0 and bounds.h > 0):
        raise InvalidBounds(bounds)


def cell_rect(bounds: Rect, *, col: int, row: int) -> Rect:
    """
    Return the cell at (col, row) of the 3x3 partition of `bounds`.

    Origins are rounded from the exact fractional edge so every call for the same
    bounds yields the same nine rects; no rounding error accumulates across cells.
    """
    _require_valid(bounds)
    cell_w = bounds.w / GRID_COLS
    cell_h = bounds.h / GRID_ROWS
    return Rect(
        x=bounds.x + round_half_up(col * cell_w),
        y=bounds.y + round_half_up(row * cell_h),
        w=round_half_up(cell_w),
        h=round_half_up(cell_h),
    )


def _grid_coord(v: float, parts: int) -> int:
    # Clamp before floor so infinite offsets land on an edge cell; NaN maps to 0.
    if math.isnan(v):
        return 0
    return int(math.floor(min(max(v, 0.0), float(parts - 1))))


def cell_at(rect: Rect, bounds: Rect) -> tuple[int, int]:
    """
    Return the (col, row) whose cell contains the centroid of `rect`.

    Tie-break policy:
    - floor() sends a centroid lying exactly on a cell boundary to the higher-index cell.
    - Centroids outside `bounds` are clamped to the nearest edge cell instead of failing.

    Raises:
        InvalidBounds: bounds.w <= 0 or bounds.h <= 0.
    """
    _require_valid(bounds)
    cell_w = bounds.w / GRID_COLS
    cell_h = bounds.h / GRID_ROWS

    c = rect.centroid
    col = _grid_coord((c.x - bounds.x) / cell_w, GRID_COLS)
    row = _grid_coord((c.y - bounds.y) / cell_h, GRID_ROWS)
    return col, row


def snap_to_grid(rect: Rect, bounds: Rect) -> Rect:
    """
    Snap an arbitrary rectangle to the nearest cell of the 3x3 grid over `bounds`.

    `rect` does not need to lie inside `bounds`. The result is always exactly one of the
    nine cells returned by grid_cells(bounds).

    Raises:
        InvalidBounds: bounds.w <= 0 or bounds.h <= 0.
    """
    col, row = cell_at(rect, bounds)
    return cell_rect(bounds, col=col, row=row)


def cell_index(*, col: int, row: int) -> int:
    """Row-major 0-based index of a cell (0 = top-left, 8 = bottom-right)."""
    return row * GRID_COLS + col


def grid_cells(bounds: Rect) -> list[Rect]:
    """All nine cells of `bounds`, row-major."""
    return [cell_rect(bounds, col=col, row=row) for row in range(GRID_ROWS) for col in range(GRID_COLS)]


def grid_edges(size: int, parts: int) -> list[int]:
    """
    Split a 1D span into `parts` and return the parts+1 edge offsets.

    - out[0] == 0 and out[parts] == size
    - intermediate edges are rounded the same way cell origins are, so drawn grid lines
      sit exactly on the snapped cell edges.
    """
    out = [round_half_up(i * size / parts) for i in range(parts + 1)]
    out[0] = 0
    out[parts] = int(size)
    return out
