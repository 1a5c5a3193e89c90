"""Optional point-in-polygon fallback for mountains without declared provinces."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Sequence

from .models import Province

_LOGGER = logging.getLogger("peakmap.geometry")


class ProvinceLocator:
    """Find the provinces whose polygons cover a (lon, lat) point."""

    def __init__(self, provinces: Sequence[Province]) -> None:
        shape = _require_shapely_shape()
        prep = _require_shapely_prep()
        self._entries: list[tuple[Province, Any, Any]] = []
        for province in provinces:
            geometry = province.feature.geometry
            if geometry is None:
                continue
            try:
                geom = shape(geometry)
            except Exception as exc:
                _LOGGER.warning(
                    "Skipping unreadable geometry for province %s: %s", province.id, exc
                )
                continue
            if geom.is_empty:
                continue
            self._entries.append((province, geom, prep(geom)))

    def __len__(self) -> int:
        return len(self._entries)

    def locate(self, lon: float, lat: float) -> list[Province]:
        point_factory = _require_shapely_point_factory()
        point = point_factory(lon, lat)
        hits: list[Province] = []
        for province, geom, prepared in self._entries:
            min_x, min_y, max_x, max_y = geom.bounds
            if lon < min_x or lon > max_x or lat < min_y or lat > max_y:
                continue
            if prepared.covers(point):
                hits.append(province)
        return hits


@lru_cache(maxsize=1)
def _require_shapely_shape() -> Any:
    try:
        from shapely.geometry import shape
    except ImportError as exc:  # pragma: no cover
        raise RuntimeError("shapely is required for the geometric province fallback") from exc
    return shape


@lru_cache(maxsize=1)
def _require_shapely_prep() -> Any:
    try:
        from shapely.prepared import prep
    except ImportError as exc:  # pragma: no cover
        raise RuntimeError("shapely is required for the geometric province fallback") from exc
    return prep


@lru_cache(maxsize=1)
def _require_shapely_point_factory() -> Any:
    try:
        from shapely.geometry import Point
    except ImportError as exc:  # pragma: no cover
        raise RuntimeError("shapely is required for point checks in the province fallback") from exc
    return Point
