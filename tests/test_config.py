"""Tests for the YAML-backed tool settings."""

from pathlib import Path

import pytest

from yapmesh.config import ModelSettings, load_settings, save_settings, settings_from_dict
from yapmesh.snap import SnapMode
from yapmesh.soft_select import FalloffCurve
from yapmesh.uv_project import ProjectionAxis, UvProjection


def test_defaults():
    settings = ModelSettings()
    assert settings.world_grid_size == 0.5
    assert settings.smooth_iterations == 3
    assert settings.uv_projection is UvProjection.BOX
    assert settings.snap_mode is SnapMode.NONE
    assert settings.boolean_engine == "native"


def test_to_dict_uses_enum_values():
    data = ModelSettings().to_dict()
    assert data["uv_projection"] == "box"
    assert data["uv_axis"] == "y"
    assert data["soft_falloff"] == "smooth"
    assert data["weld_threshold"] == 0.01


def test_from_dict_normalises_enum_names():
    settings = settings_from_dict({"snap_mode": "GRID", "uv_axis": "z"})
    assert settings.snap_mode is SnapMode.GRID
    assert settings.uv_axis is ProjectionAxis.Z


def test_from_empty_mapping():
    assert settings_from_dict(None) == ModelSettings()
    assert settings_from_dict({}) == ModelSettings()


def test_invalid_enum_value():
    with pytest.raises(ValueError, match="soft_falloff"):
        settings_from_dict({"soft_falloff": "wobbly"})


def test_unknown_keys_rejected():
    with pytest.raises(ValueError, match="bogus"):
        settings_from_dict({"bogus": 1, "smooth_factor": 0.1})


def test_negative_iterations_rejected():
    with pytest.raises(ValueError):
        ModelSettings(smooth_iterations=-1)


def test_save_and_load(tmp_path: Path):
    settings = ModelSettings(bevel_width=0.05, soft_falloff=FalloffCurve.SHARP)
    path = save_settings(settings, tmp_path / "conf" / "tools.yaml")
    assert path.exists()
    text = path.read_text(encoding="utf-8")
    assert "soft_falloff: sharp" in text
    loaded = load_settings(str(path))
    assert loaded == settings


def test_load_missing_file(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_settings(tmp_path / "missing.yaml")


def test_load_empty_file(tmp_path: Path):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    assert load_settings(path) == ModelSettings()


def test_load_rejects_non_mapping(tmp_path: Path):
    path = tmp_path / "list.yaml"
    path.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_settings(path)
