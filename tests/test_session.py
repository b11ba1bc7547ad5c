"""SelectionSession adapter: bounds capture, sink calls, feedback and diagnostics."""

from __future__ import annotations

from typing import Optional

from snap.grid import Rect
from snap.session import SelectionSession
from snap.state_machine import Dragging, Idle


class RecordingSink:
    def __init__(self) -> None:
        self.cells: list[Rect] = []

    def apply(self, cell: Rect) -> None:
        self.cells.append(cell)


class RecordingDiagnostics:
    def __init__(self) -> None:
        self.events: list[tuple] = []

    def record_begin(self, *, bounds: Rect) -> None:
        self.events.append(("begin", bounds))

    def record_snap(self, *, rect: Rect, cell: Rect, index: int, bounds: Rect) -> None:
        self.events.append(("snap", cell, index))

    def record_abort(self, *, reason: str, detail: str) -> None:
        self.events.append(("abort", reason))


class SurfaceStub:
    """Mutable host surface whose size can change between cycles."""

    def __init__(self, w: float, h: float) -> None:
        self.w = w
        self.h = h
        self.queries = 0

    def bounds(self) -> Rect:
        self.queries += 1
        return Rect(0, 0, self.w, self.h)


def _session(surface: SurfaceStub):
    sink = RecordingSink()
    feedback: list[Optional[Rect]] = []
    diag = RecordingDiagnostics()
    s = SelectionSession(bounds=surface.bounds, sink=sink, on_rect_changed=feedback.append, diagnostics=diag)
    return s, sink, feedback, diag


def test_full_cycle_applies_once_and_returns_to_idle() -> None:
    s, sink, feedback, diag = _session(SurfaceStub(900, 600))

    s.pointer_down(10, 10)
    assert s.is_dragging
    s.pointer_move(20, 25)
    cell = s.pointer_up(40, 40)

    assert cell == Rect(0, 0, 300, 200)
    assert sink.cells == [Rect(0, 0, 300, 200)]
    assert isinstance(s.state, Idle)
    assert feedback == [Rect(10, 10, 0, 0), Rect(10, 10, 10, 15), None]
    assert diag.events == [("begin", Rect(0, 0, 900, 600)), ("snap", Rect(0, 0, 300, 200), 0)]


def test_bottom_right_scenario() -> None:
    s, sink, _, diag = _session(SurfaceStub(900, 600))

    s.pointer_down(850, 550)
    s.pointer_up(880, 590)

    assert sink.cells == [Rect(600, 400, 300, 200)]
    assert diag.events[-1] == ("snap", Rect(600, 400, 300, 200), 8)


def test_cancel_then_release_makes_no_sink_call() -> None:
    s, sink, feedback, diag = _session(SurfaceStub(900, 600))

    s.pointer_down(5, 5)
    s.cancel()
    assert s.pointer_up(100, 100) is None

    assert sink.cells == []
    assert feedback == [Rect(5, 5, 0, 0), None]
    assert diag.events[-1] == ("abort", "cancel")


def test_cancel_when_idle_is_silent() -> None:
    s, sink, feedback, diag = _session(SurfaceStub(900, 600))

    s.cancel()
    s.cancel()

    assert sink.cells == []
    assert feedback == []
    assert diag.events == []


def test_move_and_release_without_press_do_nothing() -> None:
    surface = SurfaceStub(900, 600)
    s, sink, feedback, _ = _session(surface)

    s.pointer_move(50, 50)
    assert s.pointer_up(60, 60) is None

    assert sink.cells == []
    assert feedback == []
    assert surface.queries == 0


def test_each_cycle_uses_its_own_fresh_bounds() -> None:
    surface = SurfaceStub(900, 600)
    s, sink, _, _ = _session(surface)

    s.pointer_down(700, 10)
    s.pointer_up(710, 20)

    # Surface resized between cycles (e.g. monitor mode change).
    surface.w, surface.h = 1920, 1080
    s.pointer_down(700, 10)
    s.pointer_up(710, 20)

    assert surface.queries == 2
    assert sink.cells == [Rect(600, 0, 300, 200), Rect(640, 0, 640, 360)]


def test_resize_during_drag_does_not_affect_that_drag() -> None:
    surface = SurfaceStub(900, 600)
    s, sink, _, _ = _session(surface)

    s.pointer_down(850, 550)
    surface.w, surface.h = 3000, 3000
    s.pointer_move(860, 560)
    s.pointer_up(880, 590)

    assert sink.cells == [Rect(600, 400, 300, 200)]


def test_invalid_bounds_never_call_sink_and_recover() -> None:
    surface = SurfaceStub(0, 0)
    s, sink, feedback, diag = _session(surface)

    s.pointer_down(10, 10)
    assert s.pointer_up(40, 40) is None

    assert sink.cells == []
    assert isinstance(s.state, Idle)
    assert feedback[-1] is None
    assert diag.events[-1] == ("abort", "invalid_bounds")

    # Next press with a usable surface works normally.
    surface.w, surface.h = 900, 600
    s.pointer_down(10, 10)
    assert s.pointer_up(40, 40) == Rect(0, 0, 300, 200)
    assert sink.cells == [Rect(0, 0, 300, 200)]


def test_optional_collaborators_can_be_omitted() -> None:
    sink = RecordingSink()
    s = SelectionSession(bounds=lambda: Rect(0, 0, 900, 600), sink=sink)

    s.pointer_down(450, 300)
    assert isinstance(s.state, Dragging)
    s.pointer_up(450, 300)

    assert sink.cells == [Rect(300, 200, 300, 200)]


def test_feedback_listener_may_cancel_reentrantly() -> None:
    # A presentation layer that closes the overlay on clear re-enters cancel(); state is already Idle.
    sink = RecordingSink()
    holder: dict[str, SelectionSession] = {}

    def on_rect(rect: Optional[Rect]) -> None:
        if rect is None:
            holder["s"].cancel()

    s = SelectionSession(bounds=lambda: Rect(0, 0, 900, 600), sink=sink, on_rect_changed=on_rect)
    holder["s"] = s

    s.pointer_down(10, 10)
    s.pointer_up(40, 40)

    assert sink.cells == [Rect(0, 0, 300, 200)]
    assert isinstance(s.state, Idle)


def test_release_at_infinity_snaps_to_edge_cell() -> None:
    s, sink, _, _ = _session(SurfaceStub(900, 600))

    s.pointer_down(10, 10)
    assert s.pointer_up(float("inf"), 10) == Rect(600, 0, 300, 200)

    s.pointer_down(10, 10)
    assert s.pointer_up(float("-inf"), 10) == Rect(0, 0, 300, 200)

    assert sink.cells == [Rect(600, 0, 300, 200), Rect(0, 0, 300, 200)]
    assert isinstance(s.state, Idle)


def test_second_press_records_restart_before_new_begin() -> None:
    surface = SurfaceStub(900, 600)
    s, sink, feedback, diag = _session(surface)

    s.pointer_down(10, 10)
    surface.w, surface.h = 600, 300
    s.pointer_down(500, 250)
    s.pointer_up(550, 280)

    assert diag.events == [
        ("begin", Rect(0, 0, 900, 600)),
        ("abort", "restart"),
        ("begin", Rect(0, 0, 600, 300)),
        ("snap", Rect(400, 200, 200, 100), 8),
    ]
    assert sink.cells == [Rect(400, 200, 200, 100)]
    assert feedback == [Rect(10, 10, 0, 0), Rect(500, 250, 0, 0), None]
