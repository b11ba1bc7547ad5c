"""Selection session: owns one drag-select-snap cycle at a time.

`SelectionSession` is the thin adapter around the pure `transition` function. It is the
only place that:
- reads the host surface bounds (fresh on every press),
- calls the window-manager sink,
- notifies the presentation layer and diagnostics.

It holds no global state; construct one per overlay (or per test).
"""

from __future__ import annotations

from typing import Callable, Optional, Protocol

from snap.grid import Point, Rect, cell_at, cell_index
from snap.state_machine import (
    IDLE,
    Abort,
    Apply,
    Cancel,
    Dragging,
    Feedback,
    PointerDown,
    PointerMove,
    PointerUp,
    SessionEffect,
    SessionEvent,
    SessionState,
    transition,
)


class Sink(Protocol):
    """
    Window-manager command sink.

    Contract:
    - apply(cell) moves the target window origin to (cell.x, cell.y) and resizes it to
      (cell.w, cell.h). Move and resize may be issued as two independent commands.
    - Best-effort and fire-and-forget: never raises into the session, returns nothing.
    """

    def apply(self, cell: Rect) -> None: ...


class SessionDiagnostics(Protocol):
    """Observer for session outcomes (status store, tests)."""

    def record_begin(self, *, bounds: Rect) -> None: ...

    def record_snap(self, *, rect: Rect, cell: Rect, index: int, bounds: Rect) -> None: ...

    def record_abort(self, *, reason: str, detail: str) -> None: ...


class SelectionSession:
    """
    Drives pointer/cancel events through the snap state machine and executes effects.

    Args:
        bounds: zero-arg provider of the current surface extent; called on every press.
        sink: receives exactly one apply(cell) per completed drag.
        on_rect_changed: optional presentation callback; Rect while dragging, None when cleared.
        diagnostics: optional outcome observer.
    """

    def __init__(
        self,
        *,
        bounds: Callable[[], Rect],
        sink: Sink,
        on_rect_changed: Optional[Callable[[Optional[Rect]], None]] = None,
        diagnostics: Optional[SessionDiagnostics] = None,
    ) -> None:
        self._bounds = bounds
        self._sink = sink
        self._on_rect_changed = on_rect_changed
        self._diagnostics = diagnostics
        self._state: SessionState = IDLE

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_dragging(self) -> bool:
        return isinstance(self._state, Dragging)

    def pointer_down(self, x: float, y: float) -> None:
        # Read per press: the surface may have been resized since the last cycle.
        bounds = self._bounds()
        self.dispatch(PointerDown(point=Point(x, y), bounds=bounds))

    def pointer_move(self, x: float, y: float) -> None:
        self.dispatch(PointerMove(point=Point(x, y)))

    def pointer_up(self, x: float, y: float) -> Optional[Rect]:
        """Finish the drag. Returns the cell handed to the sink, or None if nothing was applied."""
        applied = [e for e in self.dispatch(PointerUp(point=Point(x, y))) if isinstance(e, Apply)]
        return applied[0].cell if applied else None

    def cancel(self) -> None:
        self.dispatch(Cancel())

    def dispatch(self, event: SessionEvent) -> list[SessionEffect]:
        """
        Apply one event: swap in the new state first, then run the effects in order.

        The state is committed before any callback runs, so a callback that re-enters the
        session (e.g. a feedback listener closing the overlay and cancelling) sees Idle.
        """
        self._state, effects = transition(self._state, event)
        for effect in effects:
            self._run(effect)
        # After the effects, so a replaced drag's abort is recorded before the new begin.
        if isinstance(event, PointerDown) and self._diagnostics is not None:
            self._diagnostics.record_begin(bounds=event.bounds)
        return effects

    def _run(self, effect: SessionEffect) -> None:
        if isinstance(effect, Feedback):
            if self._on_rect_changed is not None:
                self._on_rect_changed(effect.rect)
        elif isinstance(effect, Apply):
            cell = effect.cell
            print(
                "[session]",
                "snap",
                "rect=",
                (effect.rect.x, effect.rect.y, effect.rect.w, effect.rect.h),
                "cell=",
                (cell.x, cell.y, cell.w, cell.h),
                flush=True,
            )
            self._sink.apply(cell)
            if self._diagnostics is not None:
                col, row = cell_at(effect.rect, effect.bounds)
                self._diagnostics.record_snap(
                    rect=effect.rect,
                    cell=cell,
                    index=cell_index(col=col, row=row),
                    bounds=effect.bounds,
                )
        elif isinstance(effect, Abort):
            detail = str(effect.error) if effect.error is not None else ""
            if effect.reason == "invalid_bounds":
                print("[session]", "aborted:", detail, flush=True)
            if self._diagnostics is not None:
                self._diagnostics.record_abort(reason=effect.reason, detail=detail)
