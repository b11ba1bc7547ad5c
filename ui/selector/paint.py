# ui/selector/paint.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from PySide6.QtCore import QRectF, Qt
from PySide6.QtGui import QColor, QPainter, QPen

from snap.grid import GRID_COLS, GRID_ROWS, Rect, grid_edges


@dataclass(frozen=True)
class PaintConfig:
    """
    Rendering configuration for the snap overlay.

    Styling:
    - dim: full-surface translucent fill behind everything.
    - grid: color of the 3x3 grid lines; grid_line_px their width (0 hides them).
    - selection_fill / outline: live selection rectangle; outline_px the outline width.
    """
    dim: QColor
    grid: QColor
    selection_fill: QColor
    outline: QColor
    grid_line_px: int
    outline_px: int


class OverlayPainter:
    """
    Paints the snap overlay contents.

    Layers, bottom to top:
    - dimmed background over the whole surface
    - grid lines at the same rounded edges the snap uses for cell origins
    - the live selection (fill + outline) while a drag is in progress

    Zero-size selections are drawn at least 1px wide/high so a fresh press is visible.
    """

    def __init__(self, *, cfg: PaintConfig) -> None:
        self._cfg = cfg

    def paint(self, p: QPainter, *, widget_w: int, widget_h: int, selection: Optional[Rect]) -> None:
        # SOURCE composition replaces whatever the compositor had there with our translucent dim.
        p.setCompositionMode(QPainter.CompositionMode.CompositionMode_Source)
        p.fillRect(0, 0, int(widget_w), int(widget_h), self._cfg.dim)
        p.setCompositionMode(QPainter.CompositionMode.CompositionMode_SourceOver)

        if int(self._cfg.grid_line_px) > 0:
            pen = QPen(self._cfg.grid)
            pen.setWidth(int(self._cfg.grid_line_px))
            p.setPen(pen)
            p.setBrush(Qt.BrushStyle.NoBrush)

            x_edges = grid_edges(int(widget_w), GRID_COLS)
            y_edges = grid_edges(int(widget_h), GRID_ROWS)

            # Internal boundaries only; the outer edges coincide with the screen edges.
            for i in range(1, GRID_COLS):
                p.drawLine(x_edges[i], 0, x_edges[i], int(widget_h))
            for i in range(1, GRID_ROWS):
                p.drawLine(0, y_edges[i], int(widget_w), y_edges[i])

        if selection is None:
            return

        w = max(1.0, float(selection.w))
        h = max(1.0, float(selection.h))
        r = QRectF(float(selection.x), float(selection.y), w, h)

        p.setRenderHint(QPainter.RenderHint.Antialiasing, True)
        p.setPen(Qt.PenStyle.NoPen)
        p.setBrush(self._cfg.selection_fill)
        p.drawRect(r)

        if int(self._cfg.outline_px) > 0:
            # Inset by half the pen width so the stroke stays inside the selection.
            half = float(self._cfg.outline_px) / 2.0
            outline = QPen(self._cfg.outline)
            outline.setWidth(int(self._cfg.outline_px))
            p.setPen(outline)
            p.setBrush(Qt.BrushStyle.NoBrush)
            p.drawRect(r.adjusted(half, half, -half, -half))
