from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from trafficwatch.paths import config_root, default_reports_path

DEFAULT_GEOCODE_URL = "https://nominatim.openstreetmap.org/reverse"
DEFAULT_USER_AGENT = "trafficwatch/0.1"
DEFAULT_RECIPIENT = "violations@usa.gov"


@dataclass(slots=True)
class GeocodeConfig:
    enabled: bool = True
    url: str = DEFAULT_GEOCODE_URL
    user_agent: str = DEFAULT_USER_AGENT
    timeout: float = 10.0


@dataclass(slots=True)
class ReportConfig:
    default_email: str = DEFAULT_RECIPIENT
    signature: str = "Concerned Citizen"
    output_dir: Path = field(default_factory=default_reports_path)


@dataclass(slots=True)
class UIConfig:
    show_banner: bool = True


@dataclass(slots=True)
class AppConfig:
    geocode: GeocodeConfig = field(default_factory=GeocodeConfig)
    report: ReportConfig = field(default_factory=ReportConfig)
    ui: UIConfig = field(default_factory=UIConfig)


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    out = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _merge(out[k], v)
        else:
            out[k] = v
    return out


def _to_config(data: dict[str, Any]) -> AppConfig:
    geocode = GeocodeConfig(**data.get("geocode", {}))
    report_data = dict(data.get("report", {}))
    if "output_dir" in report_data:
        report_data["output_dir"] = Path(str(report_data["output_dir"])).expanduser()
    report = ReportConfig(**report_data)
    ui = UIConfig(**data.get("ui", {}))
    return AppConfig(geocode=geocode, report=report, ui=ui)


def default_config_path() -> Path:
    return config_root() / "config.yaml"


def load_config(config_path: Path | None = None, overrides: dict[str, Any] | None = None) -> AppConfig:
    path = config_path or default_config_path()
    base: dict[str, Any] = {}
    if path.exists():
        loaded = yaml.safe_load(path.read_text())
        if isinstance(loaded, dict):
            base = loaded
    if overrides:
        base = _merge(base, overrides)
    return _to_config(base)


def write_default_config(path: Path | None = None) -> Path:
    target = path or default_config_path()
    target.parent.mkdir(parents=True, exist_ok=True)
    if target.exists():
        return target
    target.write_text(
        yaml.safe_dump(
            {
                "geocode": {
                    "enabled": True,
                    "url": DEFAULT_GEOCODE_URL,
                    "user_agent": DEFAULT_USER_AGENT,
                    "timeout": 10.0,
                },
                "report": {
                    "default_email": DEFAULT_RECIPIENT,
                    "signature": "Concerned Citizen",
                    "output_dir": str(default_reports_path()),
                },
                "ui": {"show_banner": True},
            },
            sort_keys=False,
        )
    )
    return target
