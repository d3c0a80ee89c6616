from __future__ import annotations

from pathlib import Path
import os

APP_NAME = "trafficwatch"


def config_root() -> Path:
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        base = Path(xdg)
    else:
        base = Path.home() / ".config"
    root = base / APP_NAME
    root.mkdir(parents=True, exist_ok=True)
    return root


def default_reports_path() -> Path:
    return Path.cwd() / "reports"
