"""
Shared fixtures for the peakmap test suite.

Provides:
- luzon_collections: small province/mountain collections (Benguet, Ifugao, ...)
- viewport: recording map viewport
- climb_store: in-memory climb status store
- project_config: a config.yaml plus data directories under tmp_path
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
import yaml

from factories import RecordingViewport, collection, mountain, province, square
from peakmap.climbs import InMemoryClimbStore


@pytest.fixture
def luzon_collections() -> tuple[dict[str, Any], dict[str, Any]]:
    """Boundaries and mountains where one declared name matches nothing."""
    boundaries = collection(
        [
            province("Benguet", feature_id="benguet", geometry=square(120.5, 16.2)),
            province("Ifugao", adm2_en="IFUGAO", feature_id="ifugao", geometry=square(121.5, 16.7)),
        ]
    )
    mountains = collection(
        [
            mountain("Pulag", 120.887, 16.587, prov=["benguet"], elevation=2928),
            mountain("Amuyao", 121.86, 17.0, prov=["Ifugao"], elev=2702),
            mountain("Unknown Peak", 125.0, 10.0, prov=["Nowhere"]),
        ]
    )
    return boundaries, mountains


@pytest.fixture
def viewport() -> RecordingViewport:
    return RecordingViewport()


@pytest.fixture
def climb_store() -> InMemoryClimbStore:
    return InMemoryClimbStore()


def _write(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload), encoding="utf-8")


@pytest.fixture
def project_config(tmp_path: Path, luzon_collections) -> Path:
    """Write data files and a config.yaml under tmp_path; return the config path."""
    boundaries, mountains = luzon_collections
    _write(tmp_path / "data" / "regions" / "car.json", boundaries)
    _write(tmp_path / "data" / "mountains" / "car.geojson", mountains)
    _write(
        tmp_path / "data" / "municities" / "municities-provdist-1401100000.0.01.json",
        collection([province("La Trinidad")]),
    )

    raw = {
        "project": {"name": "test-peaks"},
        "paths": {
            "boundaries_dir": "data/regions",
            "mountains_dir": "data/mountains",
            "municipalities_dir": "data/municities",
            "climbs_store": "build/climbs.json",
            "build_root": "build",
            "manifests_dir": "build/manifests",
            "reports_dir": "build/reports",
            "logs_dir": "build/logs",
        },
    }
    config_path = tmp_path / "config.yaml"
    config_path.write_text(yaml.safe_dump(raw), encoding="utf-8")
    return config_path
