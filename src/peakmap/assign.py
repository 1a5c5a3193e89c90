"""Mountain-to-province association via tiered name resolution."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Sequence

from .geometry import ProvinceLocator
from .models import Mountain, MountainFeature, Province, format_number
from .names import normalize_name
from .provinces import ProvinceIndex

_LOGGER = logging.getLogger("peakmap.assign")


class MatchTier(str, Enum):
    EXACT = "exact"
    NORMALIZED = "normalized"
    FUZZY = "fuzzy"
    GEOMETRY = "geometry"


@dataclass(frozen=True, slots=True)
class Association:
    mountain_id: str
    province_id: str
    declared_name: str | None
    tier: MatchTier

    def to_dict(self) -> dict[str, Any]:
        return {
            "mountain_id": self.mountain_id,
            "province_id": self.province_id,
            "declared_name": self.declared_name,
            "tier": self.tier.value,
        }


@dataclass(frozen=True, slots=True)
class UnmatchedName:
    mountain_id: str
    mountain_name: str
    declared_name: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "mountain_id": self.mountain_id,
            "mountain_name": self.mountain_name,
            "declared_name": self.declared_name,
        }


@dataclass(slots=True)
class AssignmentResult:
    """Outcome of one association batch."""

    mountains: list[Mountain] = field(default_factory=list)
    associations: list[Association] = field(default_factory=list)
    unmatched: list[UnmatchedName] = field(default_factory=list)
    repeated: list[Association] = field(default_factory=list)
    unassociated_mountain_ids: list[str] = field(default_factory=list)
    duplicate_ids: list[str] = field(default_factory=list)

    def tier_counts(self) -> dict[str, int]:
        counts = {tier.value: 0 for tier in MatchTier}
        for association in self.associations:
            counts[association.tier.value] += 1
        return counts

    def summary(self) -> dict[str, int]:
        return {
            "mountains_total": len(self.mountains),
            "associations": len(self.associations),
            "unmatched_names": len(self.unmatched),
            "repeated_names": len(self.repeated),
            "unassociated_mountains": len(self.unassociated_mountain_ids),
            "duplicate_mountain_ids": len(self.duplicate_ids),
            **{f"tier_{tier}": count for tier, count in self.tier_counts().items()},
        }


def mountain_id_for(name: str, lon: float, lat: float, counter: int) -> str:
    return f"mountain-{name}-{format_number(lon)}-{format_number(lat)}-{counter}"


class MountainAssigner:
    """Resolve each mountain's declared province names against an index.

    Resolution per declared name stops at the first tier that succeeds:
    exact raw name, normalized name, then (when enabled) a linear scan over
    known names accepting equality or substring containment either way. The
    scan follows province insertion order, so the first hit wins even when a
    longer name would also match.
    """

    def __init__(self, *, fuzzy: bool = True, geometric_fallback: bool = False) -> None:
        self.fuzzy = fuzzy
        self.geometric_fallback = geometric_fallback

    def assign(self, index: ProvinceIndex, mountains: Sequence[MountainFeature]) -> AssignmentResult:
        index.clear_associations()
        result = AssignmentResult()
        locator: ProvinceLocator | None = None
        counter = 0
        seen_ids: set[str] = set()

        for feature in mountains:
            if feature.id is None:
                mountain_id = mountain_id_for(
                    feature.source_name, feature.lon, feature.lat, counter
                )
                counter += 1
            else:
                mountain_id = feature.id
            if mountain_id in seen_ids:
                result.duplicate_ids.append(mountain_id)
                _LOGGER.warning("Mountain id '%s' appears more than once in the dataset", mountain_id)
            seen_ids.add(mountain_id)

            mountain = feature.with_id(mountain_id)
            result.mountains.append(mountain)
            matched: set[str] = set()

            if mountain.declared_provinces is None:
                if self.geometric_fallback:
                    if locator is None:
                        locator = ProvinceLocator(index.provinces)
                    for province in locator.locate(mountain.lon, mountain.lat):
                        self._attach(result, matched, mountain, province, None, MatchTier.GEOMETRY)
                else:
                    _LOGGER.debug("Mountain '%s' declares no province list", mountain.name)
            else:
                for declared in mountain.declared_provinces:
                    resolved = self.resolve(index, declared)
                    if resolved is None:
                        result.unmatched.append(UnmatchedName(mountain.id, mountain.name, declared))
                        _LOGGER.debug(
                            "No province matches '%s' declared by mountain '%s'",
                            declared,
                            mountain.name,
                        )
                        continue
                    province, tier = resolved
                    self._attach(result, matched, mountain, province, declared, tier)

            if not matched:
                result.unassociated_mountain_ids.append(mountain.id)

        _LOGGER.info(
            "Assigned %d mountains: associations=%d unmatched_names=%d unassociated=%d",
            len(result.mountains),
            len(result.associations),
            len(result.unmatched),
            len(result.unassociated_mountain_ids),
        )
        return result

    def resolve(self, index: ProvinceIndex, declared: str) -> tuple[Province, MatchTier] | None:
        needle = normalize_name(declared)
        if not needle:
            return None

        province = index.lookup_exact(declared)
        if province is not None:
            return (province, MatchTier.EXACT)

        province = index.lookup(declared)
        if province is not None:
            return (province, MatchTier.NORMALIZED)

        if not self.fuzzy:
            return None
        for known, owner in index.known_entries():
            candidate = normalize_name(known)
            if candidate == needle or needle in candidate or candidate in needle:
                return (owner, MatchTier.FUZZY)
        return None

    @staticmethod
    def _attach(
        result: AssignmentResult,
        matched: set[str],
        mountain: Mountain,
        province: Province,
        declared: str | None,
        tier: MatchTier,
    ) -> None:
        association = Association(mountain.id, province.id, declared, tier)
        if province.id in matched:
            result.repeated.append(association)
            return
        matched.add(province.id)
        province.add_mountain(mountain)
        result.associations.append(association)
