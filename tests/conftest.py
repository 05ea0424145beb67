"""
Shared pytest fixtures and utilities for the vpinlauncher test suite.
"""

import stat
from pathlib import Path
from typing import Any, Callable, Dict

import pytest
import yaml


@pytest.fixture
def tables_dir(tmp_path: Path) -> Path:
    """
    Tables directory with a few tables and some entries the scanner must skip.
    """
    path = tmp_path / "tables"
    path.mkdir()
    for name in [
        "Fathom (Bally 1981).vpx",
        "Black Knight (Williams 1980).vpx",
        "Viper.vpx",
        "readme.txt",
        ".hidden.vpx",
    ]:
        (path / name).write_bytes(b"vpx")
    (path / "subdir.vpx").mkdir()
    return path


@pytest.fixture
def make_emulator(tmp_path: Path) -> Callable[[str], Path]:
    """
    Write an executable shell script standing in for the emulator.

    Usage:
        exe = make_emulator('echo "Player closed."')
    """

    def _builder(body: str, name: str = "fake_vpinball") -> Path:
        script = tmp_path / name
        script.write_text(f"#!/bin/sh\n{body}\n")
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return script

    return _builder


@pytest.fixture
def base_config(tmp_path: Path, tables_dir: Path) -> Dict[str, Any]:
    """
    Minimal valid configuration pointing into the temp workspace.
    """
    snapshots = tmp_path / "snapshots"
    snapshots.mkdir()
    nvram = tmp_path / "nvram"
    nvram.mkdir()
    return {
        "paths": {
            "emulator": str(tmp_path / "fake_vpinball"),
            "tables": str(tables_dir),
            "snapshots": str(snapshots),
            "nvram": str(nvram),
        },
        "snapshots": {"extension": ".png", "popup_errors": False},
        "scores": {"layouts": {}},
        "logging": {"level": "INFO", "console": True, "file": None},
    }


@pytest.fixture
def make_config(tmp_path: Path, base_config: Dict[str, Any]) -> Callable[[Dict[str, Any]], Path]:
    """
    Create a config.yaml in a temp directory.

    Usage:
        path = make_config({"snapshots": {"popup_errors": True}})
    """

    def _builder(overrides: Dict[str, Any] | None = None) -> Path:
        config = base_config
        if overrides:
            config = merge_dicts(base_config, overrides)

        cfg_path = tmp_path / "config.yaml"
        cfg_path.write_text(yaml.safe_dump(config))
        return cfg_path

    return _builder


def merge_dicts(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Shallow+deep merge helper for fixture config dictionaries.
    """
    result: Dict[str, Any] = dict(base)
    for key, value in override.items():
        if (
            key in result
            and isinstance(result[key], dict)
            and isinstance(value, dict)
        ):
            result[key] = merge_dicts(result[key], value)
        else:
            result[key] = value
    return result
