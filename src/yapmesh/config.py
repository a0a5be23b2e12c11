"""Tool settings for the editing operations, loadable from YAML."""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from enum import Enum
from pathlib import Path
from typing import Any, Dict

import yaml

from yapmesh.snap import SnapMode
from yapmesh.soft_select import FalloffCurve
from yapmesh.uv_project import ProjectionAxis, UvProjection

_ENUM_FIELDS = {
    "uv_projection": UvProjection,
    "uv_axis": ProjectionAxis,
    "snap_mode": SnapMode,
    "soft_falloff": FalloffCurve,
}


@dataclass
class ModelSettings:
    """Default parameters handed to the editing operations by a caller."""

    world_grid_size: float = 0.5
    uv_grid_size: float = 0.1
    surface_angle_threshold: float = 30.0
    extrude_distance: float = 0.0
    inset_fraction: float = 0.2
    bevel_width: float = 0.1
    weld_threshold: float = 0.01
    smooth_iterations: int = 3
    smooth_factor: float = 0.5
    simplify_ratio: float = 0.5
    remesh_edge_length: float = 0.25
    uv_projection: UvProjection = UvProjection.BOX
    uv_axis: ProjectionAxis = ProjectionAxis.Y
    uv_scale: float = 1.0
    auto_smooth_angle: float = 30.0
    snap_grid_size: float = 0.25
    snap_mode: SnapMode = SnapMode.NONE
    soft_radius: float = 1.0
    soft_falloff: FalloffCurve = FalloffCurve.SMOOTH
    vertex_pick_threshold: float = 20.0
    edge_pick_threshold: float = 15.0
    boolean_engine: str = "native"

    def __post_init__(self) -> None:
        for name, enum_cls in _ENUM_FIELDS.items():
            value = getattr(self, name)
            if not isinstance(value, enum_cls):
                try:
                    setattr(self, name, enum_cls(str(value).lower()))
                except ValueError:
                    choices = ", ".join(m.value for m in enum_cls)
                    raise ValueError(f"invalid {name} {value!r}; expected one of: {choices}") from None
        if self.smooth_iterations < 0:
            raise ValueError("smooth_iterations must be non-negative")

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        for key, value in data.items():
            if isinstance(value, Enum):
                data[key] = value.value
        return data


def settings_from_dict(data: Dict[str, Any] | None) -> ModelSettings:
    """Build :class:`ModelSettings` from a mapping, rejecting unknown keys."""

    if not data:
        return ModelSettings()
    if not isinstance(data, dict):
        raise ValueError(f"settings must be a mapping, got {type(data)!r}")
    known = {f.name for f in fields(ModelSettings)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"unknown settings keys: {', '.join(unknown)}")
    return ModelSettings(**data)


def load_settings(path: Path | str) -> ModelSettings:
    """Load a YAML settings file and return the normalised ``ModelSettings``."""

    settings_path = Path(path)
    if not settings_path.exists():
        raise FileNotFoundError(f"settings file not found: {settings_path}")
    with settings_path.open("r", encoding="utf-8") as fp:
        data = yaml.safe_load(fp) or {}
    if not isinstance(data, dict):
        raise ValueError(f"settings file must be a mapping, got {type(data)!r}")
    return settings_from_dict(data)


def save_settings(settings: ModelSettings, path: Path | str) -> Path:
    settings_path = Path(path)
    settings_path.parent.mkdir(parents=True, exist_ok=True)
    with settings_path.open("w", encoding="utf-8") as fp:
        yaml.safe_dump(settings.to_dict(), fp, sort_keys=False)
    return settings_path


__all__ = ["ModelSettings", "load_settings", "save_settings", "settings_from_dict"]
