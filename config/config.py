"""Configuration schema and JSON validation helpers.

`load_config` validates and normalizes runtime settings from `config/config.json`
into an immutable `AppConfig`, so downstream modules can assume a coherent shape and
focus on behavior instead of defensive parsing.
"""

from __future__ import annotations

from dataclasses import dataclass
import json
from pathlib import Path
import sys
from typing import Any, Dict, Tuple


# RGBA color as 4 ints in [0, 255]; maps directly onto QColor(r, g, b, a).
Rgba = Tuple[int, int, int, int]

# Sinks that `wm.backend` may name.
WM_BACKENDS = ("hyprctl", "print")


@dataclass(frozen=True)
class AppConfig:
    """
    Strongly-typed, validated application configuration loaded from a JSON file.

    Purpose:
    - Provide a single, immutable source of truth for runtime settings.
    - Perform validation once at startup so the rest of the code can assume correctness.

    Every section is optional; missing keys fall back to the defaults below, which
    reproduce the stock look of the overlay and the hyprctl sink.

    Expected JSON structure (overview):

    {
      "wm": { "backend": "hyprctl", "hyprctl_path": "hyprctl", "batch": false },
      "ui": {
        "dim_rgba": [5, 15, 36, 140],
        "grid_rgba": [255, 255, 255, 64],
        "selection_rgba": [56, 189, 247, 64],
        "outline_rgba": [56, 189, 247, 230],
        "grid_line_px": 1,
        "outline_px": 2,
        "one_shot": true
      },
      "server": { "enabled": false, "host": "127.0.0.1", "port": 8736, "history_size": 200 }
    }
    """

    # -----------------------------
    # Window-manager sink
    # -----------------------------
    wm_backend: str = "hyprctl"
    hyprctl_path: str = "hyprctl"
    wm_batch: bool = False

    # -----------------------------
    # Overlay look and lifecycle
    # -----------------------------
    dim_rgba: Rgba = (5, 15, 36, 140)
    grid_rgba: Rgba = (255, 255, 255, 64)
    selection_rgba: Rgba = (56, 189, 247, 64)
    outline_rgba: Rgba = (56, 189, 247, 230)
    grid_line_px: int = 1
    outline_px: int = 2
    one_shot: bool = True

    # -----------------------------
    # Status server
    # -----------------------------
    server_enabled: bool = False
    server_host: str = "127.0.0.1"
    server_port: int = 8736
    history_size: int = 200


def _opt_obj(raw: Dict[str, Any], key: str) -> Dict[str, Any]:
    """
    Optional JSON object section.

    Missing/None => empty dict (all defaults); anything but an object => error.
    """
    v = raw.get(key)
    if v is None:
        return {}
    if not isinstance(v, dict):
        raise ValueError(f"Missing or invalid '{key}' object in config (expected object)")
    return v


def _opt_bool(v: Any, key: str, default: bool) -> bool:
    """
    Optional boolean with default.

    Prevents accidental configs like "true"/"false" (strings) from silently passing.
    """
    if v is None:
        return default
    if isinstance(v, bool):
        return v
    raise ValueError(f"Missing or invalid '{key}' (expected boolean)")


def _opt_int(v: Any, key: str, default: int) -> int:
    """
    Optional integer with default.

    Accepts int or integral float (JSON 2 or 2.0). Booleans are rejected even though
    bool is an int subclass in Python.
    """
    if v is None:
        return default
    if isinstance(v, bool) or not isinstance(v, (int, float)) or int(v) != v:
        raise ValueError(f"Missing or invalid '{key}' (expected integer)")
    return int(v)


def _opt_str(v: Any, key: str, default: str) -> str:
    """Optional non-empty string with default; returned stripped."""
    if v is None:
        return default
    if isinstance(v, str) and v.strip():
        return v.strip()
    raise ValueError(f"Missing or invalid '{key}' (expected non-empty string)")


def _opt_rgba(v: Any, key: str, default: Rgba) -> Rgba:
    """Optional [r, g, b, a] list of ints in [0, 255]."""
    if v is None:
        return default
    if not isinstance(v, list) or len(v) != 4:
        raise ValueError(f"Missing or invalid '{key}' (expected [r, g, b, a])")
    out = [_opt_int(c, key, 0) for c in v]
    if any(c < 0 or c > 255 for c in out):
        raise ValueError(f"{key} components must be in [0, 255]")
    return (out[0], out[1], out[2], out[3])


def parse_config(raw: Dict[str, Any]) -> AppConfig:
    """
    Validate an already-parsed JSON document and build an `AppConfig`.

    Raises:
        ValueError: invalid types or failed constraints.
    """
    if not isinstance(raw, dict):
        raise ValueError("config root must be a JSON object")

    d = AppConfig()
    wm = _opt_obj(raw, "wm")
    ui = _opt_obj(raw, "ui")
    server = _opt_obj(raw, "server")

    # ---- Window manager ----
    # Normalize backend to lowercase so "HyprCtl" and "hyprctl" compare equal.
    wm_backend = _opt_str(wm.get("backend"), "wm.backend", d.wm_backend).lower()
    if wm_backend not in WM_BACKENDS:
        raise ValueError(f"wm.backend must be one of: {', '.join(WM_BACKENDS)}")
    hyprctl_path = _opt_str(wm.get("hyprctl_path"), "wm.hyprctl_path", d.hyprctl_path)
    wm_batch = _opt_bool(wm.get("batch"), "wm.batch", d.wm_batch)

    # ---- UI overlay ----
    dim_rgba = _opt_rgba(ui.get("dim_rgba"), "ui.dim_rgba", d.dim_rgba)
    grid_rgba = _opt_rgba(ui.get("grid_rgba"), "ui.grid_rgba", d.grid_rgba)
    selection_rgba = _opt_rgba(ui.get("selection_rgba"), "ui.selection_rgba", d.selection_rgba)
    outline_rgba = _opt_rgba(ui.get("outline_rgba"), "ui.outline_rgba", d.outline_rgba)
    grid_line_px = _opt_int(ui.get("grid_line_px"), "ui.grid_line_px", d.grid_line_px)
    outline_px = _opt_int(ui.get("outline_px"), "ui.outline_px", d.outline_px)
    one_shot = _opt_bool(ui.get("one_shot"), "ui.one_shot", d.one_shot)

    if grid_line_px < 0:
        raise ValueError("ui.grid_line_px must be >= 0")
    if outline_px < 0:
        raise ValueError("ui.outline_px must be >= 0")

    # ---- Status server ----
    server_enabled = _opt_bool(server.get("enabled"), "server.enabled", d.server_enabled)
    server_host = _opt_str(server.get("host"), "server.host", d.server_host)
    server_port = _opt_int(server.get("port"), "server.port", d.server_port)
    history_size = _opt_int(server.get("history_size"), "server.history_size", d.history_size)

    if not (1 <= server_port <= 65535):
        raise ValueError("server.port must be in [1, 65535]")
    if history_size <= 0:
        raise ValueError("server.history_size must be > 0")

    return AppConfig(
        wm_backend=wm_backend,
        hyprctl_path=hyprctl_path,
        wm_batch=wm_batch,
        dim_rgba=dim_rgba,
        grid_rgba=grid_rgba,
        selection_rgba=selection_rgba,
        outline_rgba=outline_rgba,
        grid_line_px=grid_line_px,
        outline_px=outline_px,
        one_shot=one_shot,
        server_enabled=server_enabled,
        server_host=server_host,
        server_port=server_port,
        history_size=history_size,
    )


def load_config(path: str) -> AppConfig:
    """
    Load and validate config from a JSON file and return an `AppConfig`.

    A missing file is not an error: the snap tool is usually launched from a compositor
    keybinding with no config at all, so defaults are returned instead.

    Raises:
        ValueError: invalid types or failed constraints.
        OSError: file exists but cannot be read.
        json.JSONDecodeError: invalid JSON.
    """
    p = Path(path)
    if not p.exists():
        print("[config]", "no config at", str(p), "- using defaults", file=sys.stderr, flush=True)
        return AppConfig()

    with p.open("r", encoding="utf-8") as f:
        raw: Dict[str, Any] = json.load(f)
    return parse_config(raw)
