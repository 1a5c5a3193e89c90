"""Province/mountain GeoJSON file loading."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

_LOGGER = logging.getLogger("peakmap.geojson_io")

BOUNDARY_SUFFIX = ".json"
MOUNTAIN_SUFFIX = ".geojson"


@dataclass(frozen=True, slots=True)
class ProvinceData:
    """Raw province boundary and mountain collections, as loaded."""

    boundaries: dict[str, Any]
    mountains: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {"boundaries": self.boundaries, "mountains": self.mountains}

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> ProvinceData:
        boundaries = raw.get("boundaries")
        mountains = raw.get("mountains")
        if not isinstance(boundaries, Mapping) or not isinstance(mountains, Mapping):
            raise ValueError("Province payload must contain 'boundaries' and 'mountains' collections")
        return cls(boundaries=dict(boundaries), mountains=dict(mountains))


def empty_collection() -> dict[str, Any]:
    return {"type": "FeatureCollection", "features": []}


def load_province_data(boundaries_dir: Path, mountains_dir: Path) -> ProvinceData:
    """Concatenate every region boundary file and every mountain file."""
    for path, label in ((boundaries_dir, "Boundaries"), (mountains_dir, "Mountains")):
        if not path.is_dir():
            raise FileNotFoundError(f"{label} directory not found: {path}")

    boundaries = _concat_collections(boundaries_dir, BOUNDARY_SUFFIX)
    mountains = _concat_collections(mountains_dir, MOUNTAIN_SUFFIX)
    _LOGGER.info(
        "Loaded %d province boundaries and %d mountains",
        len(boundaries["features"]),
        len(mountains["features"]),
    )
    return ProvinceData(boundaries=boundaries, mountains=mountains)


def load_municipality_boundaries(directory: Path) -> dict[str, dict[str, Any]]:
    """Municipality collections keyed by the province code in each file name.

    File names look like `municities-provdist-102800000.0.01.json`; the code is
    the third dash-separated token up to its first dot.
    """
    if not directory.is_dir():
        raise FileNotFoundError(f"Municipality directory not found: {directory}")

    by_province: dict[str, dict[str, Any]] = {}
    for path in sorted(directory.iterdir()):
        if path.suffix != BOUNDARY_SUFFIX:
            continue
        code = province_code_from_filename(path.name)
        if code is None:
            _LOGGER.warning("Skipping municipality file with unexpected name: %s", path.name)
            continue
        data = _read_collection(path)
        if data is not None:
            by_province[code] = data
    return by_province


def province_code_from_filename(filename: str) -> str | None:
    parts = filename.split("-")
    if len(parts) < 3:
        return None
    code = parts[2].split(".")[0]
    return code or None


def _concat_collections(directory: Path, suffix: str) -> dict[str, Any]:
    collection = empty_collection()
    for path in sorted(directory.iterdir()):
        if path.suffix != suffix or not path.is_file():
            continue
        _LOGGER.debug("Reading %s", path)
        data = _read_collection(path)
        if data is not None:
            collection["features"].extend(data["features"])
    return collection


def _read_collection(path: Path) -> dict[str, Any] | None:
    with path.open("r", encoding="utf-8") as fh:
        data = json.load(fh)
    if not isinstance(data, dict) or not isinstance(data.get("features"), list):
        _LOGGER.warning("Ignoring %s: not a GeoJSON FeatureCollection", path)
        return None
    return data
