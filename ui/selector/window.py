"""Top-level Qt overlay window for drag-to-snap placement.

`SnapOverlayWindow` is glue only: it turns Qt mouse/key events into `SelectionSession`
calls, reports its own rect as the session bounds, and repaints whenever the session
publishes a new live selection. All snapping decisions live in `snap/`.
"""

from __future__ import annotations

from typing import Callable, Optional

from PySide6.QtCore import Qt
from PySide6.QtGui import QPainter
from PySide6.QtWidgets import QWidget

from snap.grid import Rect
from snap.session import SelectionSession, SessionDiagnostics, Sink
from ui.selector.paint import OverlayPainter, PaintConfig
from wm.sink import OriginProvider


class SnapOverlayWindow(QWidget):
    """
    Frameless, always-on-top, translucent overlay covering one screen.

    Input routing:
    - Left press/move/release -> session.pointer_down / pointer_move / pointer_up,
      in widget-local coordinates (the overlay's own top-left is the surface origin).
    - Escape -> session.cancel() while dragging; while idle it closes the overlay.

    Lifecycle:
    - one_shot=True: the overlay closes after the first snap or cancel. It is hidden just
      before the release is handed to the session so the sink acts on the window that
      was active before the overlay appeared.
    - one_shot=False: stays open for repeated placements until Escape (idle) or quit.
    """

    def __init__(
        self,
        *,
        paint_cfg: PaintConfig,
        make_sink: Callable[[OriginProvider], Sink],
        on_close: Callable[[], None],
        diagnostics: Optional[SessionDiagnostics] = None,
        one_shot: bool = True,
    ) -> None:
        super().__init__()

        self._on_close = on_close
        self._one_shot = bool(one_shot)
        self._closing = False

        # Latest live selection published by the session (None when idle).
        self._selection: Optional[Rect] = None

        self._painter = OverlayPainter(cfg=paint_cfg)

        # The sink is built here so its origin lookup can late-bind to this window's screen.
        self._session = SelectionSession(
            bounds=self._surface_bounds,
            sink=make_sink(self._screen_origin),
            on_rect_changed=self._on_rect_changed,
            diagnostics=diagnostics,
        )

        self.setWindowTitle("gridsnap")
        self.setWindowFlags(Qt.WindowType.FramelessWindowHint | Qt.WindowType.WindowStaysOnTopHint)
        self.setAttribute(Qt.WidgetAttribute.WA_TranslucentBackground, True)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)
        self.setCursor(Qt.CursorShape.CrossCursor)

        # Required to receive move events while the button is held on every platform.
        self.setMouseTracking(True)

    @property
    def session(self) -> SelectionSession:
        return self._session

    def _surface_bounds(self) -> Rect:
        """Current overlay extent; queried by the session on every press."""
        return Rect(x=0, y=0, w=int(self.width()), h=int(self.height()))

    def _screen_origin(self) -> tuple[int, int]:
        """
        Global top-left of the screen the overlay covers.

        Screen geometry is used rather than window position because Wayland compositors
        do not report top-level window positions to clients.
        """
        sc = self.screen()
        if sc is None:
            return 0, 0
        g = sc.geometry()
        return int(g.x()), int(g.y())

    def _on_rect_changed(self, rect: Optional[Rect]) -> None:
        self._selection = rect
        self.update()

    def _finish(self) -> None:
        if self._one_shot:
            self.close()

    def closeEvent(self, event) -> None:  # type: ignore[override]
        """
        Qt close event.

        A drag still in progress is cancelled (never applied) before the close
        propagates via _on_close.
        """
        if self._closing:
            event.accept()
            return
        self._closing = True
        self._session.cancel()
        self._on_close()
        event.accept()

    def paintEvent(self, event) -> None:  # type: ignore[override]
        _ = event
        p = QPainter(self)
        try:
            self._painter.paint(p, widget_w=self.width(), widget_h=self.height(), selection=self._selection)
        finally:
            p.end()

    def mousePressEvent(self, event) -> None:  # type: ignore[override]
        if event.button() != Qt.MouseButton.LeftButton:
            return
        pos = event.position()
        self._session.pointer_down(float(pos.x()), float(pos.y()))

    def mouseMoveEvent(self, event) -> None:  # type: ignore[override]
        if not self._session.is_dragging:
            return
        pos = event.position()
        self._session.pointer_move(float(pos.x()), float(pos.y()))

    def mouseReleaseEvent(self, event) -> None:  # type: ignore[override]
        if event.button() != Qt.MouseButton.LeftButton or not self._session.is_dragging:
            return
        pos = event.position()
        if self._one_shot:
            # Give focus back to the previously active window before the sink runs.
            self.hide()
        self._session.pointer_up(float(pos.x()), float(pos.y()))
        self._finish()

    def keyPressEvent(self, event) -> None:  # type: ignore[override]
        if event.key() != Qt.Key.Key_Escape:
            super().keyPressEvent(event)
            return
        if self._session.is_dragging:
            self._session.cancel()
            self._finish()
            return
        self.close()
