"""Domain models and the GeoJSON ingestion boundary.

Raw feature property bags are parsed into typed records here so that the
index and assigner never see untyped GeoJSON. Province features without a
usable name are kept (they still render); mountain features that cannot be
placed on the map are quarantined with a reason.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping, Sequence

from .names import usable_name

UNKNOWN_PROVINCE = "Unknown Province"
UNNAMED_MOUNTAIN = "Unnamed Mountain"


class FeatureSchemaError(ValueError):
    """Raised when a raw collection does not have a GeoJSON shape at all."""


def _number_or_none(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def format_number(value: float) -> str:
    """Render a number the way the map client prints it (`121`, not `121.0`)."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def _template_text(value: Any, present: bool) -> str:
    if not present:
        return "undefined"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return format_number(value)
    return str(value)


def _feature_id(value: Any) -> str | None:
    """Keep any non-empty string or non-zero number id as text."""
    if isinstance(value, str):
        return value or None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return format_number(value) if value else None


def _str_tuple(value: Any) -> tuple[str, ...]:
    if isinstance(value, str):
        return (value,) if value.strip() else ()
    if isinstance(value, list):
        return tuple(item for item in value if isinstance(item, str) and item.strip())
    return ()


def _properties(feature: Mapping[str, Any]) -> Mapping[str, Any]:
    props = feature.get("properties")
    return props if isinstance(props, Mapping) else {}


def collection_features(raw: Any, label: str) -> list[Any]:
    """Return the `features` list of a raw FeatureCollection (None -> empty)."""
    if raw is None:
        return []
    if not isinstance(raw, Mapping):
        raise FeatureSchemaError(f"Expected mapping for {label} collection")
    features = raw.get("features")
    if features is None:
        return []
    if not isinstance(features, list):
        raise FeatureSchemaError(f"Expected list for '{label}.features'")
    return features


@dataclass(frozen=True, slots=True)
class QuarantinedFeature:
    """Feature rejected at the ingestion boundary."""

    kind: str
    position: int
    reason: str

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "position": self.position, "reason": self.reason}


@dataclass(frozen=True, slots=True)
class ProvinceFeature:
    """Province polygon with its candidate names in registration order."""

    position: int
    feature_id: Any
    names: tuple[str, ...]
    geometry: Mapping[str, Any] | None
    raw: Mapping[str, Any]

    @property
    def display_name(self) -> str:
        return self.names[0] if self.names else UNKNOWN_PROVINCE

    @classmethod
    def from_mapping(
        cls,
        data: Mapping[str, Any],
        *,
        position: int,
        name_fields: Sequence[str],
    ) -> ProvinceFeature:
        props = _properties(data)
        names: list[str] = []
        for field_name in name_fields:
            name = usable_name(props.get(field_name))
            if name is not None and name not in names:
                names.append(name)
        geometry = data.get("geometry")
        return cls(
            position=position,
            feature_id=data.get("id"),
            names=tuple(names),
            geometry=geometry if isinstance(geometry, Mapping) else None,
            raw=data,
        )


@dataclass(frozen=True, slots=True)
class MountainFeature:
    """Mountain point as declared in the source dataset (id may be absent).

    `source_name` is the raw `name` property rendered as text; synthesized ids
    are built from it rather than from the cleaned display `name`.
    """

    position: int
    id: str | None
    name: str
    lon: float
    lat: float
    elevation: float | None = None
    prominence: float | None = None
    declared_provinces: tuple[str, ...] | None = None
    region: tuple[str, ...] = ()
    alt_names: tuple[str, ...] = ()
    island_group: str | None = None
    source_name: str = "undefined"

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], *, position: int) -> MountainFeature:
        geometry = data.get("geometry")
        if not isinstance(geometry, Mapping) or geometry.get("type") != "Point":
            raise FeatureSchemaError("Mountain geometry must be a GeoJSON Point")
        coords = geometry.get("coordinates")
        if not isinstance(coords, (list, tuple)) or len(coords) < 2:
            raise FeatureSchemaError("Mountain Point needs [lon, lat] coordinates")
        lon = _number_or_none(coords[0])
        lat = _number_or_none(coords[1])
        if lon is None or lat is None:
            raise FeatureSchemaError("Mountain coordinates must be numeric")

        props = _properties(data)
        id_raw = props.get("id")
        name_raw = props.get("name")
        elevation = _number_or_none(props.get("elevation"))
        if elevation is None:
            elevation = _number_or_none(props.get("elev"))

        prov_raw = props.get("prov")
        declared: tuple[str, ...] | None
        if isinstance(prov_raw, list):
            declared = tuple(item for item in prov_raw if isinstance(item, str) and item)
        else:
            declared = None

        island_raw = props.get("isl_grp")
        return cls(
            position=position,
            id=_feature_id(id_raw),
            name=name_raw.strip() if isinstance(name_raw, str) and name_raw.strip() else UNNAMED_MOUNTAIN,
            lon=lon,
            lat=lat,
            elevation=elevation,
            prominence=_number_or_none(props.get("prom")),
            declared_provinces=declared,
            region=_str_tuple(props.get("region")),
            alt_names=_str_tuple(props.get("alt_names")),
            island_group=island_raw if isinstance(island_raw, str) and island_raw else None,
            source_name=_template_text(name_raw, "name" in props),
        )

    def with_id(self, mountain_id: str) -> Mountain:
        return Mountain(
            id=mountain_id,
            name=self.name,
            lon=self.lon,
            lat=self.lat,
            elevation=self.elevation,
            prominence=self.prominence,
            declared_provinces=self.declared_provinces,
            region=self.region,
            alt_names=self.alt_names,
            island_group=self.island_group,
        )


@dataclass(frozen=True, slots=True)
class Mountain:
    """Mountain with its stable identifier assigned."""

    id: str
    name: str
    lon: float
    lat: float
    elevation: float | None = None
    prominence: float | None = None
    declared_provinces: tuple[str, ...] | None = None
    region: tuple[str, ...] = ()
    alt_names: tuple[str, ...] = ()
    island_group: str | None = None

    @property
    def coordinates(self) -> tuple[float, float]:
        return (self.lon, self.lat)

    def to_feature(self) -> dict[str, Any]:
        props: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "elevation": self.elevation,
            "prom": self.prominence,
            "prov": list(self.declared_provinces) if self.declared_provinces is not None else None,
            "region": list(self.region),
            "alt_names": list(self.alt_names),
            "isl_grp": self.island_group,
        }
        return {
            "type": "Feature",
            "properties": props,
            "geometry": {"type": "Point", "coordinates": [self.lon, self.lat]},
        }


@dataclass(slots=True, eq=False)
class Province:
    """One province identity shared by all of its names."""

    id: str
    feature: ProvinceFeature
    names: list[str] = field(default_factory=list)
    mountain_count: int = 0
    mountains: list[Mountain] = field(default_factory=list)

    @property
    def display_name(self) -> str:
        return self.feature.display_name

    def add_mountain(self, mountain: Mountain) -> None:
        self.mountains.append(mountain)
        self.mountain_count += 1


@dataclass(frozen=True, slots=True)
class AssociationManifest:
    """Build metadata written next to association artifacts."""

    generated_at_utc: str
    config_hash_sha256: str
    git_commit: str | None
    summary: Mapping[str, int]
    artifacts: Mapping[str, str]

    @classmethod
    def create(
        cls,
        *,
        config_hash_sha256: str,
        git_commit: str | None,
        summary: Mapping[str, int],
        artifacts: Mapping[str, str],
    ) -> AssociationManifest:
        now = datetime.now(timezone.utc).isoformat()
        return cls(
            generated_at_utc=now,
            config_hash_sha256=config_hash_sha256,
            git_commit=git_commit,
            summary=summary,
            artifacts=artifacts,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "generated_at_utc": self.generated_at_utc,
            "config_hash_sha256": self.config_hash_sha256,
            "git_commit": self.git_commit,
            "summary": dict(self.summary),
            "artifacts": dict(self.artifacts),
        }


def parse_province_features(
    raw: Any,
    *,
    name_fields: Sequence[str] = ("name", "adm2_en"),
) -> tuple[list[ProvinceFeature], list[QuarantinedFeature]]:
    provinces: list[ProvinceFeature] = []
    quarantined: list[QuarantinedFeature] = []
    for position, item in enumerate(collection_features(raw, "boundaries")):
        if not isinstance(item, Mapping):
            quarantined.append(QuarantinedFeature("province", position, "feature is not a mapping"))
            continue
        provinces.append(
            ProvinceFeature.from_mapping(item, position=position, name_fields=name_fields)
        )
    return provinces, quarantined


def parse_mountain_features(raw: Any) -> tuple[list[MountainFeature], list[QuarantinedFeature]]:
    mountains: list[MountainFeature] = []
    quarantined: list[QuarantinedFeature] = []
    for position, item in enumerate(collection_features(raw, "mountains")):
        if not isinstance(item, Mapping):
            quarantined.append(QuarantinedFeature("mountain", position, "feature is not a mapping"))
            continue
        try:
            mountains.append(MountainFeature.from_mapping(item, position=position))
        except FeatureSchemaError as exc:
            quarantined.append(QuarantinedFeature("mountain", position, str(exc)))
    return mountains, quarantined
