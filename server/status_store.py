# File commentary: server/status_store.py - session diagnostics shared by the overlay and HTTP routes.
"""Thread-safe in-memory store of snap-session outcomes.

The overlay's `SelectionSession` writes into it from the Qt thread; the status server
reads it from uvicorn's thread. Keeping this logic centralized keeps the server routes
thin and the session free of any HTTP concern.
"""

from __future__ import annotations

from collections import deque
import threading
import time
from typing import Any, Deque, Dict, List, Optional

from snap.grid import Rect, grid_cells


# JSON-ish payload type used at the server boundary.
JsonDict = Dict[str, Any]


class StatusStore:
    """
    Thread-safe store for session diagnostics.

    Responsibilities:
      - Counters for begun drags and their outcomes. Every begun drag ends in exactly one
        of snaps, cancels, invalid_bounds or restarts once it is no longer active.
      - Last captured bounds, last snap, last abort
      - Bounded history of recent session events
      - Quit signalling (web endpoint requests shutdown; main loop polls this)

    Implements the `snap.session.SessionDiagnostics` protocol.

    Threading model:
      - All state is protected by a single lock; operations are small and bounded.
      - Getters return fresh dicts/lists so callers never see mutable internals.
    """

    def __init__(self, *, history_size: int = 200) -> None:
        self._lock = threading.Lock()
        self._started_ts = time.time()

        self._begun = 0
        self._snaps = 0
        self._cancels = 0
        self._invalid_bounds = 0
        self._restarts = 0

        self._last_bounds: Optional[Rect] = None
        self._last_snap: Optional[JsonDict] = None
        self._last_abort: Optional[JsonDict] = None

        self._history: Deque[JsonDict] = deque(maxlen=max(1, int(history_size)))

        # Shutdown request flag set by /quit endpoint, read by the quit watcher.
        self._quit_requested = False

    # ----------------------------
    # SessionDiagnostics
    # ----------------------------

    def record_begin(self, *, bounds: Rect) -> None:
        with self._lock:
            self._begun += 1
            self._last_bounds = bounds
            self._append_locked({"event": "begin", "bounds": bounds.as_dict()})

    def record_snap(self, *, rect: Rect, cell: Rect, index: int, bounds: Rect) -> None:
        snap = {
            "rect": rect.as_dict(),
            "cell": cell.as_dict(),
            "index": int(index),
            "bounds": bounds.as_dict(),
        }
        with self._lock:
            self._snaps += 1
            self._last_snap = snap
            self._append_locked({"event": "snap", **snap})

    def record_abort(self, *, reason: str, detail: str) -> None:
        abort = {"reason": str(reason), "detail": str(detail)}
        with self._lock:
            if reason == "cancel":
                self._cancels += 1
            elif reason == "invalid_bounds":
                self._invalid_bounds += 1
            elif reason == "restart":
                self._restarts += 1
            self._last_abort = abort
            self._append_locked({"event": "abort", **abort})

    def _append_locked(self, entry: JsonDict) -> None:
        # Caller must hold self._lock.
        self._history.append({"ts": time.time(), **entry})

    # ----------------------------
    # Readers
    # ----------------------------

    def get_payload(self) -> JsonDict:
        """Public /status schema."""
        with self._lock:
            return {
                "uptime_seconds": max(0.0, time.time() - self._started_ts),
                "counts": {
                    "begun": self._begun,
                    "snaps": self._snaps,
                    "cancels": self._cancels,
                    "invalid_bounds": self._invalid_bounds,
                    "restarts": self._restarts,
                },
                "last_bounds": None if self._last_bounds is None else self._last_bounds.as_dict(),
                "last_snap": None if self._last_snap is None else dict(self._last_snap),
                "last_abort": None if self._last_abort is None else dict(self._last_abort),
                "quit_requested": self._quit_requested,
            }

    def get_history(self) -> List[JsonDict]:
        with self._lock:
            return [dict(e) for e in self._history]

    def get_grid(self) -> List[JsonDict]:
        """
        The nine cells for the last captured bounds, row-major.

        Empty before the first press, and when the last bounds had no area.
        """
        with self._lock:
            bounds = self._last_bounds
        if bounds is None or bounds.w <= 0 or bounds.h <= 0:
            return []
        return [c.as_dict() for c in grid_cells(bounds)]

    # ----------------------------
    # Quit signalling
    # ----------------------------

    def request_quit(self) -> None:
        with self._lock:
            self._quit_requested = True

    def quit_requested(self) -> bool:
        with self._lock:
            return self._quit_requested
