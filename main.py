"""Application composition root for the gridsnap overlay.

This module wires together all subsystems:
- Config loading
- Session diagnostics store
- Optional FastAPI status server thread
- Window-manager sink (hyprctl or dry-run)
- Qt snap overlay

The goal is to keep cross-component lifecycle management in one place so the rest of
the codebase can remain focused on single responsibilities.
"""

from __future__ import annotations

import argparse
from dataclasses import replace
import threading
import traceback

from config.config import load_config
from server.server import run_server_in_thread
from server.status_store import StatusStore
from snap.session import Sink
from ui.selector.ui_logic import run_snap_ui
from wm.sink import OriginProvider, build_sink


def _parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="gridsnap")
    p.add_argument("--config", default="./config/config.json", help="Path to config.json")
    p.add_argument("--dry-run", action="store_true", help="Print hyprctl commands instead of running them.")
    p.add_argument("--server", action="store_true", help="Serve session status over HTTP (overrides config).")
    return p.parse_args()


def main() -> int:
    """
    Application entry point.

    High-level responsibilities:
    - Load config and apply CLI overrides.
    - Start the status server when enabled.
    - Run the snap overlay (Qt event loop) in the main thread.
    - Bridge server quit requests into the overlay through a shared quit flag.
    """
    args = _parse_args()

    try:
        cfg = load_config(args.config)
    except ValueError as e:
        print("[config]", "invalid config:", e, flush=True)
        return 2

    if args.dry_run:
        cfg = replace(cfg, wm_backend="print")
    if args.server:
        cfg = replace(cfg, server_enabled=True)

    # Store is shared by the overlay (writer, UI thread) and the HTTP routes (reader).
    store = StatusStore(history_size=cfg.history_size)

    if cfg.server_enabled:
        run_server_in_thread(host=cfg.server_host, port=cfg.server_port, store=store)

    # Quit coordination primitive used across threads:
    # - overlay close sets it
    # - quit watcher sets it when /quit is requested
    quit_flag = threading.Event()

    def on_close() -> None:
        quit_flag.set()
        try:
            store.request_quit()
        except Exception:
            traceback.print_exc()

    def make_sink(origin: OriginProvider) -> Sink:
        return build_sink(
            backend=cfg.wm_backend,
            hyprctl_path=cfg.hyprctl_path,
            batch=cfg.wm_batch,
            origin=origin,
        )

    def quit_watcher() -> None:
        """Poll store.quit_requested() and raise quit_flag so the UI timer closes the overlay."""
        while not quit_flag.is_set():
            if store.quit_requested():
                quit_flag.set()
                break
            # Wait with timeout so we can respond quickly without busy looping.
            quit_flag.wait(0.1)

    threading.Thread(target=quit_watcher, name="quit-watcher", daemon=True).start()

    # Blocks until the overlay closes / app quits.
    run_snap_ui(
        cfg=cfg,
        make_sink=make_sink,
        on_close=on_close,
        quit_flag=quit_flag,
        diagnostics=store,
    )

    quit_flag.set()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
