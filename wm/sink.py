# wm/sink.py
"""Window-manager sinks: turn a snapped cell into move/resize commands.

Every sink here honours the `snap.session.Sink` contract: `apply(cell)` returns nothing
and never raises. Failures are printed and dropped at this boundary.
"""

from __future__ import annotations

import subprocess
from typing import Callable, Optional, Sequence

from snap.grid import Rect


# Provider for the overlay's global top-left, so surface-local cells can be expressed in
# the window manager's layout coordinates.
OriginProvider = Callable[[], tuple[int, int]]


def _global_cell(cell: Rect, origin: Optional[OriginProvider]) -> tuple[int, int, int, int]:
    """
    Translate a surface-local cell into integer global coordinates.

    The origin lookup itself is best-effort: a failing provider falls back to (0, 0),
    which is correct for the common single-monitor case.
    """
    ox, oy = 0, 0
    if origin is not None:
        try:
            ox, oy = origin()
        except Exception as e:
            print("[sink]", "origin lookup failed, using (0, 0):", e, flush=True)
    g = cell.translated(ox, oy)
    return int(g.x), int(g.y), int(g.w), int(g.h)


def hyprctl_commands(*, x: int, y: int, w: int, h: int) -> list[list[str]]:
    """
    Dispatcher argument lists for a move-then-resize of the active window.

    `exact` makes Hyprland treat the numbers as absolute pixels rather than deltas.
    """
    return [
        ["dispatch", "moveactive", "exact", str(x), str(y)],
        ["dispatch", "resizeactive", "exact", str(w), str(h)],
    ]


class HyprctlSink:
    """
    Moves/resizes the active Hyprland window through the `hyprctl` CLI.

    Dispatch model:
    - Each command is spawned as a detached child process; we never wait for it, never
      read its output, and never retry.
    - batch=False issues two processes (move, then resize). Their relative ordering is
      up to the compositor.
    - batch=True issues one `hyprctl --batch "...; ..."` so both dispatches run in order
      inside a single request.

    Failure behavior:
    - OSError (binary missing, not executable, fork failure) is printed and swallowed.
    """

    def __init__(
        self,
        *,
        hyprctl_path: str = "hyprctl",
        batch: bool = False,
        origin: Optional[OriginProvider] = None,
    ) -> None:
        self._hyprctl = str(hyprctl_path)
        self._batch = bool(batch)
        self._origin = origin

    def apply(self, cell: Rect) -> None:
        x, y, w, h = _global_cell(cell, self._origin)
        cmds = hyprctl_commands(x=x, y=y, w=w, h=h)

        if self._batch:
            self._spawn([self._hyprctl, "--batch", " ; ".join(" ".join(c) for c in cmds)])
            return

        for c in cmds:
            self._spawn([self._hyprctl, *c])

    def _spawn(self, argv: Sequence[str]) -> None:
        try:
            subprocess.Popen(
                list(argv),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
        except OSError as e:
            print("[sink]", "failed to run", argv[0], "->", e, flush=True)


class PrintSink:
    """Dry-run sink: prints the hyprctl commands it would have issued."""

    def __init__(self, *, origin: Optional[OriginProvider] = None) -> None:
        self._origin = origin

    def apply(self, cell: Rect) -> None:
        x, y, w, h = _global_cell(cell, self._origin)
        for c in hyprctl_commands(x=x, y=y, w=w, h=h):
            print("[sink]", "dry-run: hyprctl", " ".join(c), flush=True)


def build_sink(*, backend: str, hyprctl_path: str, batch: bool, origin: Optional[OriginProvider] = None):
    """
    Construct the sink named by configuration.

    Raises:
        ValueError: unknown backend (config validation normally catches this earlier).
    """
    b = str(backend).strip().lower()
    if b == "hyprctl":
        return HyprctlSink(hyprctl_path=hyprctl_path, batch=batch, origin=origin)
    if b == "print":
        return PrintSink(origin=origin)
    raise ValueError(f"unknown wm backend: {backend!r}")
