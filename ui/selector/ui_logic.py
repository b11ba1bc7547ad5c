# ui/selector/ui_logic.py
from __future__ import annotations

import threading
from typing import Callable, Optional

from PySide6.QtCore import QTimer
from PySide6.QtGui import QColor
from PySide6.QtWidgets import QApplication

from config.config import AppConfig, Rgba
from snap.session import SessionDiagnostics, Sink
from ui.selector.paint import PaintConfig
from ui.selector.window import SnapOverlayWindow
from wm.sink import OriginProvider


def _qcolor(rgba: Rgba) -> QColor:
    r, g, b, a = rgba
    return QColor(int(r), int(g), int(b), int(a))


def paint_config_from(cfg: AppConfig) -> PaintConfig:
    """Map validated config colors/widths onto the painter's Qt types."""
    return PaintConfig(
        dim=_qcolor(cfg.dim_rgba),
        grid=_qcolor(cfg.grid_rgba),
        selection_fill=_qcolor(cfg.selection_rgba),
        outline=_qcolor(cfg.outline_rgba),
        grid_line_px=int(cfg.grid_line_px),
        outline_px=int(cfg.outline_px),
    )


def run_snap_ui(
    *,
    cfg: AppConfig,
    make_sink: Callable[[OriginProvider], Sink],
    on_close: Callable[[], None],
    quit_flag: threading.Event,
    diagnostics: Optional[SessionDiagnostics] = None,
) -> None:
    """
    Start (or attach to) the Qt application and show the snap overlay fullscreen.

    Threading model:
    - This function must be called from the UI thread and blocks until the overlay closes.
    - quit_flag is set by another thread (e.g. the /quit route via the quit watcher).

    Shutdown:
    - Closing the overlay (snap in one-shot mode, Escape, or quit_flag) calls on_close
      and stops the event loop. The overlay may already be hidden at that point, so we
      quit explicitly instead of relying on last-window-closed.
    """
    # If a QApplication already exists (common in embedded/hosted contexts), reuse it.
    app = QApplication.instance() or QApplication([])

    def handle_close() -> None:
        on_close()
        app.quit()

    w = SnapOverlayWindow(
        paint_cfg=paint_config_from(cfg),
        make_sink=make_sink,
        on_close=handle_close,
        diagnostics=diagnostics,
        one_shot=bool(cfg.one_shot),
    )
    w.showFullScreen()
    w.raise_()
    w.activateWindow()

    # Quit polling: check the threading.Event without blocking the UI loop.
    quit_timer = QTimer()
    quit_timer.setInterval(200)

    def on_quit_tick() -> None:
        if quit_flag.is_set():
            quit_timer.stop()
            w.close()
            app.quit()

    # Qt signal signature expects a callable; typing stubs sometimes mismatch, hence ignore.
    quit_timer.timeout.connect(on_quit_tick)  # type: ignore[arg-type]
    quit_timer.start()

    # Start the Qt event loop. This returns when app.quit() is called.
    app.exec()
