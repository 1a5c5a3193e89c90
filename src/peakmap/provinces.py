"""Province name index: every known name resolves to one shared Province."""

from __future__ import annotations

import copy
import logging
from typing import Any, Iterable, Iterator, Mapping

from .models import Mountain, Province, ProvinceFeature
from .names import normalize_name

_LOGGER = logging.getLogger("peakmap.provinces")


class ProvinceIndex:
    """Lookup table from province names (raw and normalized) to identities.

    Every province feature gets a `Province` record so it can be selected on
    the map, but only features with a usable name are reachable by name. When
    two different provinces normalize to the same name the later one wins;
    this is a dataset-quality risk that is logged, not corrected.
    """

    def __init__(self) -> None:
        self._provinces: list[Province] = []
        self._by_id: dict[str, Province] = {}
        self._by_normalized: dict[str, Province] = {}
        self._by_exact: dict[str, Province] = {}
        self.collisions: list[tuple[str, str, str]] = []

    @classmethod
    def build(cls, features: Iterable[ProvinceFeature]) -> ProvinceIndex:
        index = cls()
        for feature in features:
            index.register(feature)
        _LOGGER.debug(
            "Province index built: provinces=%d names=%d collisions=%d",
            len(index._provinces),
            len(index._by_exact),
            len(index.collisions),
        )
        return index

    def register(self, feature: ProvinceFeature) -> Province:
        province = Province(id=self._identity_for(feature), feature=feature)
        self._provinces.append(province)
        self._by_id[province.id] = province

        if not feature.names:
            _LOGGER.debug(
                "Province feature #%d has no usable name; it renders but cannot receive mountains",
                feature.position,
            )
            return province

        for name in feature.names:
            key = normalize_name(name)
            previous = self._by_normalized.get(key)
            if previous is not None and previous is not province:
                self.collisions.append((key, previous.id, province.id))
                _LOGGER.warning(
                    "Province name '%s' of %s overrides earlier province %s",
                    name,
                    province.id,
                    previous.id,
                )
            self._by_normalized[key] = province
            province.names.append(name)
            # A raw name stays with the first province that registered it.
            self._by_exact.setdefault(name, province)
        return province

    def _identity_for(self, feature: ProvinceFeature) -> str:
        if feature.feature_id is not None:
            candidate = str(feature.feature_id)
            if candidate not in self._by_id:
                return candidate
            _LOGGER.warning(
                "Duplicate province feature id '%s' at #%d; using positional identity",
                candidate,
                feature.position,
            )
        candidate = f"province-{feature.position}"
        suffix = 1
        while candidate in self._by_id:
            candidate = f"province-{feature.position}-{suffix}"
            suffix += 1
        return candidate

    def __len__(self) -> int:
        return len(self._provinces)

    def __iter__(self) -> Iterator[Province]:
        return iter(self._provinces)

    def __contains__(self, province_id: object) -> bool:
        return province_id in self._by_id

    @property
    def provinces(self) -> tuple[Province, ...]:
        return tuple(self._provinces)

    def get(self, province_id: str) -> Province | None:
        return self._by_id.get(province_id)

    def lookup(self, name: str) -> Province | None:
        """Resolve a name case- and whitespace-insensitively."""
        return self._by_normalized.get(normalize_name(name))

    def lookup_exact(self, name: str) -> Province | None:
        """Province that registered exactly this raw name."""
        return self._by_exact.get(name)

    def known_names(self) -> tuple[str, ...]:
        """Registered raw names in insertion order (the fuzzy scan order)."""
        return tuple(self._by_exact)

    def known_entries(self) -> tuple[tuple[str, Province], ...]:
        """`(raw name, owning province)` pairs in insertion order."""
        return tuple(self._by_exact.items())

    def clear_associations(self) -> None:
        for province in self._provinces:
            province.mountain_count = 0
            province.mountains.clear()

    @property
    def total_associations(self) -> int:
        return sum(province.mountain_count for province in self._provinces)

    def mountains_by_name(self) -> dict[str, tuple[Mountain, ...]]:
        """Normalized province name -> mountains attributed to that province."""
        return {
            key: tuple(province.mountains)
            for key, province in self._by_normalized.items()
        }

    def annotate(self) -> dict[str, Any]:
        """Return the province collection with `mountainCount` on every feature."""
        features: list[dict[str, Any]] = []
        for province in self._provinces:
            feature = dict(copy.deepcopy(province.feature.raw))
            props_raw = feature.get("properties")
            props = dict(props_raw) if isinstance(props_raw, Mapping) else {}
            props["mountainCount"] = province.mountain_count
            feature["properties"] = props
            if feature.get("id") is None:
                feature["id"] = province.id
            features.append(feature)
        return {"type": "FeatureCollection", "features": features}
