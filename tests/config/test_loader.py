import pytest

from vpinlauncher.config.loader import (
    ConfigError,
    apply_defaults,
    get_config_value,
    load_config,
    require_path,
)


@pytest.mark.unit
def test_load_config_applies_defaults(tmp_path):
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        """
paths:
  emulator: /opt/vpinball/VPinballX_GL
  tables: /tables
  snapshots: /snapshots
  nvram: /nvram
snapshots:
  popup_errors: true
"""
    )

    cfg = load_config(str(config_path))

    assert cfg["paths"]["tables"] == "/tables"
    assert cfg["snapshots"]["popup_errors"] is True
    assert cfg["snapshots"]["extension"] == ".png"
    assert cfg["logging"]["level"] == "INFO"


@pytest.mark.unit
def test_load_config_default_location(tmp_path, monkeypatch, make_config):
    make_config()
    monkeypatch.chdir(tmp_path)

    cfg = load_config()

    assert cfg["paths"]["nvram"].endswith("nvram")


@pytest.mark.unit
def test_load_config_missing_file_raises(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        load_config(str(tmp_path / "does-not-exist.yaml"))


@pytest.mark.unit
def test_load_config_invalid_yaml(tmp_path):
    config_path = tmp_path / "config.yaml"
    config_path.write_text("invalid: [unclosed")

    with pytest.raises(ConfigError, match="Invalid YAML"):
        load_config(str(config_path))


@pytest.mark.unit
def test_load_config_requires_mapping(tmp_path):
    config_path = tmp_path / "config.yaml"
    config_path.write_text("- just\n- a list\n")

    with pytest.raises(ConfigError):
        load_config(str(config_path))


@pytest.mark.unit
def test_apply_defaults_does_not_share_state():
    first = apply_defaults({})
    first["snapshots"]["extension"] = ".jpg"

    assert apply_defaults({})["snapshots"]["extension"] == ".png"


@pytest.mark.unit
def test_get_config_value():
    cfg = {"scores": {"layouts": {"bk_l4.nv": {"size": 4}}}}

    assert get_config_value(cfg, "scores.layouts.bk_l4.nv") is None
    assert get_config_value(cfg, "scores.layouts") == {"bk_l4.nv": {"size": 4}}
    assert get_config_value(cfg, "paths.tables", "fallback") == "fallback"


@pytest.mark.unit
def test_require_path(tmp_path):
    cfg = {"paths": {"tables": str(tmp_path), "emulator": ""}}

    assert require_path(cfg, "tables") == tmp_path
    with pytest.raises(ConfigError, match="paths.emulator"):
        require_path(cfg, "emulator")


@pytest.mark.unit
@pytest.mark.parametrize("section", ["logging", "snapshots", "scores"])
def test_load_config_empty_section_keeps_defaults(tmp_path, section):
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        f"""
paths:
  emulator: /opt/vpinball/VPinballX_GL
  tables: /tables
  snapshots: /snapshots
  nvram: /nvram
{section}:
#  level: DEBUG
"""
    )

    cfg = load_config(str(config_path))

    assert cfg[section] == apply_defaults({})[section]
