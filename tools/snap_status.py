#!/usr/bin/env python3
"""CLI utility to inspect (or stop) a running gridsnap overlay through its status API."""
from __future__ import annotations

import argparse
import json
from pathlib import Path
import sys
from typing import Any

import httpx

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config.config import load_config


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="snap-status")
    p.add_argument("--config", default="./config/config.json", help="Path to config.json")
    p.add_argument("--quit", action="store_true", help="Ask the running overlay to close")
    p.add_argument("--timeout", type=float, default=1.0, help="HTTP timeout in seconds")
    return p.parse_args(argv)


def base_url(host: str, port: int) -> str:
    # A server bound to 0.0.0.0 is reachable on loopback; "http://0.0.0.0" is not a valid target.
    h = "127.0.0.1" if host == "0.0.0.0" else str(host)
    return f"http://{h}:{int(port)}"


def fetch_status(client: httpx.Client, base: str) -> dict[str, Any]:
    res = client.get(f"{base}/status", headers={"Cache-Control": "no-store"})
    res.raise_for_status()
    return res.json()


def request_quit(client: httpx.Client, base: str) -> bool:
    res = client.post(f"{base}/quit")
    res.raise_for_status()
    data = res.json()
    return bool(data.get("ok")) if isinstance(data, dict) else False


def main(argv: list[str] | None = None, *, client: httpx.Client | None = None) -> int:
    args = _parse_args(argv)

    try:
        cfg = load_config(args.config)
    except ValueError as e:
        print(f"ERROR: invalid config {args.config}: {e}", file=sys.stderr)
        return 1

    base = base_url(cfg.server_host, cfg.server_port)
    own_client = client is None
    c = client if client is not None else httpx.Client(timeout=float(args.timeout))
    try:
        if args.quit:
            ok = request_quit(c, base)
            print("quit requested" if ok else "quit not acknowledged")
            return 0 if ok else 3
        print(json.dumps(fetch_status(c, base), indent=2))
        return 0
    except httpx.HTTPError as e:
        print(f"ERROR: gridsnap status API not reachable at {base}: {e}", file=sys.stderr)
        return 2
    finally:
        if own_client:
            c.close()


if __name__ == "__main__":
    raise SystemExit(main())
