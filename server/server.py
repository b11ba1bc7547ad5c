"""FastAPI application assembly and server-thread launcher.

This module exposes a small read-mostly API over the snap session diagnostics.
Endpoints are intentionally thin and delegate state ownership to `StatusStore` so HTTP
concerns remain separate from the selection logic.
"""

from __future__ import annotations

import threading

import uvicorn
from fastapi import FastAPI
from fastapi.responses import JSONResponse

from server.status_store import StatusStore


def create_app(store: StatusStore) -> FastAPI:
    """
    Build the FastAPI application.

    Endpoints:
        GET  /status   counters + last bounds/snap/abort
        GET  /history  recent session events (oldest first)
        GET  /grid     the nine cells of the last captured bounds
        POST /quit     request overlay shutdown

    Thread safety is handled by StatusStore; routes assume store methods are safe.
    """
    app = FastAPI()

    @app.get("/status")
    async def status() -> JSONResponse:
        return JSONResponse(store.get_payload())

    @app.get("/history")
    async def history() -> JSONResponse:
        return JSONResponse({"history": store.get_history()})

    @app.get("/grid")
    async def grid() -> JSONResponse:
        return JSONResponse({"cells": store.get_grid()})

    @app.post("/quit")
    async def quit_app() -> JSONResponse:
        """
        Request application shutdown.

        The server itself does not exit the process; it signals via StatusStore so the
        main thread can close the overlay and stop the Qt event loop cleanly.
        """
        store.request_quit()
        return JSONResponse({"ok": True})

    return app


def run_server_in_thread(*, host: str, port: int, store: StatusStore) -> threading.Thread:
    """
    Run the FastAPI server in a background daemon thread.

    Notes:
    - `log_level="error"` keeps console noise low; adjust if debugging routing issues.
    - Shutdown is coordinated through StatusStore.quit_requested in the main thread.
    """
    app = create_app(store)

    def _run() -> None:
        # Uvicorn manages its own event loop internally.
        uvicorn.run(app, host=host, port=port, log_level="error")

    print("[server]", f"status API on http://{host}:{int(port)}", flush=True)
    t = threading.Thread(target=_run, name="status-server", daemon=True)
    t.start()
    return t
