"""Builders for raw GeoJSON features used across the test suite."""

from __future__ import annotations

from typing import Any

from peakmap.selection import MapViewport


def square(min_lon: float, min_lat: float, size: float = 1.0) -> dict[str, Any]:
    return {
        "type": "Polygon",
        "coordinates": [
            [
                [min_lon, min_lat],
                [min_lon + size, min_lat],
                [min_lon + size, min_lat + size],
                [min_lon, min_lat + size],
                [min_lon, min_lat],
            ]
        ],
    }


def province(
    name: Any = None,
    *,
    adm2_en: Any = None,
    feature_id: Any = None,
    geometry: dict[str, Any] | None = None,
) -> dict[str, Any]:
    props: dict[str, Any] = {}
    if name is not None:
        props["name"] = name
    if adm2_en is not None:
        props["adm2_en"] = adm2_en
    feature: dict[str, Any] = {
        "type": "Feature",
        "properties": props,
        "geometry": geometry if geometry is not None else square(120.0, 16.0),
    }
    if feature_id is not None:
        feature["id"] = feature_id
    return feature


def mountain(
    name: str,
    lon: float = 120.9,
    lat: float = 16.6,
    *,
    prov: Any = None,
    mountain_id: Any = None,
    **props: Any,
) -> dict[str, Any]:
    properties: dict[str, Any] = {"name": name, **props}
    if prov is not None:
        properties["prov"] = prov
    if mountain_id is not None:
        properties["id"] = mountain_id
    return {
        "type": "Feature",
        "properties": properties,
        "geometry": {"type": "Point", "coordinates": [lon, lat]},
    }


def collection(features: list[Any]) -> dict[str, Any]:
    return {"type": "FeatureCollection", "features": features}


class RecordingViewport(MapViewport):
    """Map viewport double that records every command it is asked to apply."""

    def __init__(self) -> None:
        self.commands: list[Any] = []

    def apply(self, command: Any) -> None:
        self.commands.append(command)

    def of_type(self, command_type: type) -> list[Any]:
        return [command for command in self.commands if isinstance(command, command_type)]

    def clear(self) -> None:
        self.commands.clear()
