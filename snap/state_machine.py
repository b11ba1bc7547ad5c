from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional, Union

from snap.grid import InvalidBounds, Point, Rect, normalize, snap_to_grid


# ----------------------------
# States
# ----------------------------

@dataclass(frozen=True)
class Idle:
    """No drag in progress. Also the terminal state of every cycle."""


@dataclass(frozen=True)
class Dragging:
    """
    An active drag.

    Fields:
    - anchor: where the pointer went down.
    - current: latest pointer position seen for this drag.
    - bounds: surface extent captured at press time. Kept for the whole cycle so a surface
      resize mid-drag cannot change where this drag snaps.
    """
    anchor: Point
    current: Point
    bounds: Rect


SessionState = Union[Idle, Dragging]

IDLE = Idle()


# ----------------------------
# Events (host -> session)
# ----------------------------

@dataclass(frozen=True)
class PointerDown:
    # Bounds are read by the adapter at the moment the press is delivered.
    point: Point
    bounds: Rect


@dataclass(frozen=True)
class PointerMove:
    point: Point


@dataclass(frozen=True)
class PointerUp:
    point: Point


@dataclass(frozen=True)
class Cancel:
    pass


SessionEvent = Union[PointerDown, PointerMove, PointerUp, Cancel]


# ----------------------------
# Effects (session -> outside world)
# ----------------------------

@dataclass(frozen=True)
class Feedback:
    """Live selection for the presentation layer; None clears it."""
    rect: Optional[Rect]


@dataclass(frozen=True)
class Apply:
    """
    Move/resize the target window to `cell`.

    `rect` (the released selection) and `bounds` are carried for diagnostics only;
    the sink consumes `cell`.
    """
    cell: Rect
    rect: Rect
    bounds: Rect


AbortReason = Literal["cancel", "invalid_bounds", "restart"]


@dataclass(frozen=True)
class Abort:
    """A drag ended without placing the window."""
    reason: AbortReason
    error: Optional[InvalidBounds] = None


SessionEffect = Union[Feedback, Apply, Abort]


def transition(state: SessionState, event: SessionEvent) -> tuple[SessionState, list[SessionEffect]]:
    """
    Advance the drag-select-snap cycle by one event.

    Pure: no I/O, no callbacks. Everything that should happen as a result is returned in
    the effects list, in the order the adapter should execute it.

    Rules (priority order):
      1) Cancel always lands in Idle. Only an active drag produces effects
         (clear feedback + Abort("cancel")); cancelling while idle is a no-op.
      2) PointerDown starts a drag at the pressed point with the bounds carried by the
         event. A second press while dragging ends the old drag with Abort("restart")
         before starting the new one, so every begun drag has exactly one outcome.
      3) PointerMove / PointerUp while Idle are ignored (malformed ordering is not an error).
      4) PointerMove while dragging updates `current` and re-emits the normalized rect.
      5) PointerUp while dragging snaps normalize(anchor, up_point) against the press-time
         bounds and emits exactly one Apply. If the bounds have no area, the cycle aborts
         with Abort("invalid_bounds") and no Apply.
    """
    if isinstance(event, Cancel):
        if isinstance(state, Dragging):
            return IDLE, [Feedback(None), Abort("cancel")]
        return IDLE, []

    if isinstance(event, PointerDown):
        p = event.point
        effects: list[SessionEffect] = [Feedback(normalize(p, p))]
        if isinstance(state, Dragging):
            effects.insert(0, Abort("restart"))
        return Dragging(anchor=p, current=p, bounds=event.bounds), effects

    if not isinstance(state, Dragging):
        return state, []

    if isinstance(event, PointerMove):
        nxt = Dragging(anchor=state.anchor, current=event.point, bounds=state.bounds)
        return nxt, [Feedback(normalize(nxt.anchor, nxt.current))]

    if isinstance(event, PointerUp):
        rect = normalize(state.anchor, event.point)
        try:
            cell = snap_to_grid(rect, state.bounds)
        except InvalidBounds as e:
            return IDLE, [Feedback(None), Abort("invalid_bounds", e)]
        return IDLE, [Apply(cell=cell, rect=rect, bounds=state.bounds), Feedback(None)]

    raise TypeError(f"unknown session event: {event!r}")
