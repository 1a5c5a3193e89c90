"""Typed configuration loader for `config.yaml`."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, cast

import yaml

from .choropleth import DEFAULT_PALETTE


def _mapping(value: Any, field_name: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ValueError(f"Expected mapping for '{field_name}'")
    return cast(Mapping[str, Any], value)


def _str(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Expected non-empty string for '{field_name}'")
    return value.strip()


def _int(value: Any, field_name: str) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValueError(f"Expected integer for '{field_name}'")
    return value


def _float(value: Any, field_name: str) -> float:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    raise ValueError(f"Expected float for '{field_name}'")


def _bool(value: Any, field_name: str) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"Expected bool for '{field_name}'")
    return value


def _str_list(value: Any, field_name: str) -> tuple[str, ...]:
    if not isinstance(value, list):
        raise ValueError(f"Expected list for '{field_name}'")
    out: list[str] = []
    for idx, item in enumerate(value):
        out.append(_str(item, f"{field_name}[{idx}]"))
    return tuple(out)


def _path_from_cfg(value: Any, field_name: str, root_dir: Path) -> Path:
    raw = _str(value, field_name)
    p = Path(raw)
    return p if p.is_absolute() else root_dir / p


@dataclass(frozen=True, slots=True)
class ProjectConfig:
    name: str

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> ProjectConfig:
        return cls(name=_str(raw.get("name"), "project.name"))


@dataclass(frozen=True, slots=True)
class PathsConfig:
    boundaries_dir: Path
    mountains_dir: Path
    municipalities_dir: Path | None
    climbs_store: Path
    build_root: Path
    manifests_dir: Path
    reports_dir: Path
    logs_dir: Path

    @property
    def required_input_dirs(self) -> tuple[Path, ...]:
        return (self.boundaries_dir, self.mountains_dir)

    @property
    def build_directories(self) -> tuple[Path, ...]:
        return (
            self.build_root,
            self.manifests_dir,
            self.reports_dir,
            self.logs_dir,
        )

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], root_dir: Path) -> PathsConfig:
        municipalities_raw = raw.get("municipalities_dir")
        return cls(
            boundaries_dir=_path_from_cfg(raw.get("boundaries_dir"), "paths.boundaries_dir", root_dir),
            mountains_dir=_path_from_cfg(raw.get("mountains_dir"), "paths.mountains_dir", root_dir),
            municipalities_dir=(
                None
                if municipalities_raw is None
                else _path_from_cfg(municipalities_raw, "paths.municipalities_dir", root_dir)
            ),
            climbs_store=_path_from_cfg(raw.get("climbs_store"), "paths.climbs_store", root_dir),
            build_root=_path_from_cfg(raw.get("build_root"), "paths.build_root", root_dir),
            manifests_dir=_path_from_cfg(raw.get("manifests_dir"), "paths.manifests_dir", root_dir),
            reports_dir=_path_from_cfg(raw.get("reports_dir"), "paths.reports_dir", root_dir),
            logs_dir=_path_from_cfg(raw.get("logs_dir"), "paths.logs_dir", root_dir),
        )


@dataclass(frozen=True, slots=True)
class MatchingConfig:
    name_fields: tuple[str, ...] = ("name", "adm2_en")
    fuzzy: bool = True
    geometric_fallback: bool = False
    strict: bool = False

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> MatchingConfig:
        name_fields = _str_list(raw.get("name_fields", ["name", "adm2_en"]), "matching.name_fields")
        if not name_fields:
            raise ValueError("matching.name_fields must list at least one property name")
        return cls(
            name_fields=name_fields,
            fuzzy=_bool(raw.get("fuzzy", True), "matching.fuzzy"),
            geometric_fallback=_bool(
                raw.get("geometric_fallback", False), "matching.geometric_fallback"
            ),
            strict=_bool(raw.get("strict", False), "matching.strict"),
        )


@dataclass(frozen=True, slots=True)
class MapConfig:
    initial_center: tuple[float, float]
    initial_zoom: float
    min_zoom: float
    label_min_zoom: float

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> MapConfig:
        center_raw = raw.get("initial_center", [20, 132])
        if not isinstance(center_raw, list) or len(center_raw) != 2:
            raise ValueError("Expected [lat, lon] list for 'map.initial_center'")
        lat = _float(center_raw[0], "map.initial_center[0]")
        lon = _float(center_raw[1], "map.initial_center[1]")
        if lat < -90.0 or lat > 90.0:
            raise ValueError("map.initial_center latitude must be between -90 and 90")
        if lon < -180.0 or lon > 180.0:
            raise ValueError("map.initial_center longitude must be between -180 and 180")

        initial_zoom = _float(raw.get("initial_zoom", 6), "map.initial_zoom")
        min_zoom = _float(raw.get("min_zoom", 3), "map.min_zoom")
        label_min_zoom = _float(raw.get("label_min_zoom", 5), "map.label_min_zoom")
        if min_zoom < 0:
            raise ValueError("map.min_zoom must be >= 0")
        if initial_zoom < min_zoom:
            raise ValueError("map.initial_zoom cannot be lower than map.min_zoom")
        return cls(
            initial_center=(lat, lon),
            initial_zoom=initial_zoom,
            min_zoom=min_zoom,
            label_min_zoom=label_min_zoom,
        )

    @classmethod
    def default(cls) -> MapConfig:
        return cls.from_mapping({})


@dataclass(frozen=True, slots=True)
class ChoroplethConfig:
    palette: tuple[str, ...]

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> ChoroplethConfig:
        palette_raw = raw.get("palette")
        if palette_raw is None:
            return cls.default()
        palette = _str_list(palette_raw, "choropleth.palette")
        if len(palette) != len(DEFAULT_PALETTE):
            raise ValueError(
                f"choropleth.palette must list exactly {len(DEFAULT_PALETTE)} colors "
                "(empty bucket first)"
            )
        return cls(palette=palette)

    @classmethod
    def default(cls) -> ChoroplethConfig:
        return cls(palette=DEFAULT_PALETTE)


@dataclass(frozen=True, slots=True)
class RemoteConfig:
    provinces_url: str
    request_timeout_s: int
    user_agent: str
    max_retries: int
    retry_backoff_s: float

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> RemoteConfig:
        max_retries = _int(raw.get("max_retries", 3), "remote.max_retries")
        retry_backoff_s = _float(raw.get("retry_backoff_s", 1.0), "remote.retry_backoff_s")
        request_timeout_s = _int(raw.get("request_timeout_s", 30), "remote.request_timeout_s")
        if max_retries < 0:
            raise ValueError("remote.max_retries must be >= 0")
        if retry_backoff_s <= 0:
            raise ValueError("remote.retry_backoff_s must be > 0")
        if request_timeout_s <= 0:
            raise ValueError("remote.request_timeout_s must be > 0")

        return cls(
            provinces_url=_str(raw.get("provinces_url"), "remote.provinces_url"),
            request_timeout_s=request_timeout_s,
            user_agent=_str(raw.get("user_agent", "peakmap/0.1"), "remote.user_agent"),
            max_retries=max_retries,
            retry_backoff_s=retry_backoff_s,
        )


@dataclass(frozen=True, slots=True)
class AppConfig:
    source_path: Path
    project: ProjectConfig
    paths: PathsConfig
    matching: MatchingConfig
    map: MapConfig
    choropleth: ChoroplethConfig
    remote: RemoteConfig | None

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], source_path: Path) -> AppConfig:
        root_dir = source_path.parent.resolve()
        matching_raw = raw.get("matching")
        map_raw = raw.get("map")
        choropleth_raw = raw.get("choropleth")
        remote_raw = raw.get("remote")
        return cls(
            source_path=source_path.resolve(),
            project=ProjectConfig.from_mapping(_mapping(raw.get("project"), "project")),
            paths=PathsConfig.from_mapping(_mapping(raw.get("paths"), "paths"), root_dir),
            matching=(
                MatchingConfig()
                if matching_raw is None
                else MatchingConfig.from_mapping(_mapping(matching_raw, "matching"))
            ),
            map=(
                MapConfig.default()
                if map_raw is None
                else MapConfig.from_mapping(_mapping(map_raw, "map"))
            ),
            choropleth=(
                ChoroplethConfig.default()
                if choropleth_raw is None
                else ChoroplethConfig.from_mapping(_mapping(choropleth_raw, "choropleth"))
            ),
            remote=(
                None
                if remote_raw is None
                else RemoteConfig.from_mapping(_mapping(remote_raw, "remote"))
            ),
        )


def load_config(path: str | Path) -> AppConfig:
    """Load and validate the YAML config file into typed settings."""
    cfg_path = Path(path).resolve()
    if not cfg_path.exists():
        raise FileNotFoundError(f"Config file not found: {cfg_path}")
    with cfg_path.open("r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh)
    if not isinstance(raw, Mapping):
        raise ValueError("Top-level config must be a YAML mapping")
    return AppConfig.from_mapping(cast(Mapping[str, Any], raw), cfg_path)
