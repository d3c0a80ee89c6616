from pathlib import Path

import yaml

from trafficwatch.config import AppConfig, load_config, write_default_config


def test_missing_config_uses_defaults(tmp_path: Path) -> None:
    cfg = load_config(tmp_path / "absent.yaml")
    assert isinstance(cfg, AppConfig)
    assert cfg.geocode.enabled is True
    assert cfg.geocode.url.endswith("/reverse")
    assert cfg.report.default_email == "violations@usa.gov"


def test_write_default_config_round_trips(tmp_path: Path) -> None:
    path = write_default_config(tmp_path / "cfg" / "config.yaml")
    assert path.exists()
    data = yaml.safe_load(path.read_text())
    assert data["geocode"]["user_agent"].startswith("trafficwatch/")

    path.write_text("geocode:\n  enabled: false\n")
    assert write_default_config(path) == path
    assert "enabled: false" in path.read_text()


def test_overrides_merge_nested(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text(
        yaml.safe_dump(
            {
                "geocode": {"timeout": 4, "user_agent": "custom/2"},
                "report": {"signature": "Jo", "output_dir": "~/tw-reports"},
            }
        )
    )
    cfg = load_config(path, overrides={"geocode": {"timeout": 1.5}, "ui": {"show_banner": False}})
    assert cfg.geocode.timeout == 1.5
    assert cfg.geocode.user_agent == "custom/2"
    assert cfg.report.signature == "Jo"
    assert cfg.report.output_dir == Path("~/tw-reports").expanduser()
    assert cfg.ui.show_banner is False
