"""Config loading and validation."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from config.config import AppConfig, load_config, parse_config

_REPO_CONFIG = Path(__file__).resolve().parents[1] / "config" / "config.json"


def _write(tmp_path: Path, raw: dict) -> str:
    p = tmp_path / "config.json"
    p.write_text(json.dumps(raw), encoding="utf-8")
    return str(p)


def test_missing_file_uses_defaults(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    cfg = load_config(str(tmp_path / "absent.json"))
    out, err = capsys.readouterr()
    assert out == ""
    assert "[config]" in err
    assert cfg == AppConfig()
    assert cfg.wm_backend == "hyprctl"
    assert cfg.one_shot is True
    assert cfg.server_enabled is False


def test_shipped_config_matches_defaults() -> None:
    assert load_config(str(_REPO_CONFIG)) == AppConfig()


def test_empty_document_uses_defaults() -> None:
    assert parse_config({}) == AppConfig()


def test_values_are_read_and_normalized(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        {
            "wm": {"backend": " PRINT ", "hyprctl_path": "/opt/hypr/hyprctl", "batch": True},
            "ui": {"dim_rgba": [0, 0, 0, 200], "grid_line_px": 2.0, "one_shot": False},
            "server": {"enabled": True, "port": 9000, "history_size": 10},
        },
    )
    cfg = load_config(path)

    assert cfg.wm_backend == "print"
    assert cfg.hyprctl_path == "/opt/hypr/hyprctl"
    assert cfg.wm_batch is True
    assert cfg.dim_rgba == (0, 0, 0, 200)
    assert cfg.grid_line_px == 2
    assert cfg.one_shot is False
    assert cfg.server_enabled is True
    assert cfg.server_port == 9000
    assert cfg.history_size == 10
    # Untouched keys keep defaults.
    assert cfg.outline_rgba == AppConfig().outline_rgba


@pytest.mark.parametrize(
    "raw, key",
    [
        ({"wm": []}, "wm"),
        ({"wm": {"backend": "xdotool"}}, "wm.backend"),
        ({"wm": {"batch": "yes"}}, "wm.batch"),
        ({"ui": {"dim_rgba": [1, 2, 3]}}, "ui.dim_rgba"),
        ({"ui": {"grid_rgba": [0, 0, 0, 256]}}, "ui.grid_rgba"),
        ({"ui": {"outline_px": -1}}, "ui.outline_px"),
        ({"ui": {"grid_line_px": 1.5}}, "ui.grid_line_px"),
        ({"ui": {"one_shot": 1}}, "ui.one_shot"),
        ({"server": {"port": 0}}, "server.port"),
        ({"server": {"port": True}}, "server.port"),
        ({"server": {"history_size": 0}}, "server.history_size"),
        ({"server": {"host": "  "}}, "server.host"),
    ],
)
def test_invalid_values_raise_with_key(raw: dict, key: str) -> None:
    with pytest.raises(ValueError) as exc:
        parse_config(raw)
    assert key in str(exc.value)


def test_root_must_be_object() -> None:
    with pytest.raises(ValueError):
        parse_config([])  # type: ignore[arg-type]
