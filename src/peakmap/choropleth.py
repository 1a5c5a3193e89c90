"""Mountain-count choropleth buckets and their fill colors."""

from __future__ import annotations

from enum import Enum
from typing import Sequence


class Bucket(str, Enum):
    EMPTY = "empty"
    TIER1 = "tier1"
    TIER2 = "tier2"
    TIER3 = "tier3"
    TIER4 = "tier4"
    TIER5 = "tier5"
    TIER6 = "tier6"
    TIER7 = "tier7"


# Lower bound (inclusive) of each non-empty bucket, highest first.
_THRESHOLDS: tuple[tuple[int, Bucket], ...] = (
    (25, Bucket.TIER7),
    (20, Bucket.TIER6),
    (15, Bucket.TIER5),
    (10, Bucket.TIER4),
    (5, Bucket.TIER3),
    (3, Bucket.TIER2),
    (1, Bucket.TIER1),
)

BUCKET_ORDER: tuple[Bucket, ...] = tuple(Bucket)

DEFAULT_PALETTE: tuple[str, ...] = (
    "#EAEAEA",
    "#E5F5E0",
    "#C7E9C0",
    "#A1D99B",
    "#74C476",
    "#41AB5D",
    "#238B45",
    "#006D2C",
)


def classify(count: int) -> Bucket:
    """Map a province mountain count to its choropleth bucket."""
    if count < 0:
        raise ValueError(f"Mountain count must be >= 0, got {count}")
    for lower_bound, bucket in _THRESHOLDS:
        if count >= lower_bound:
            return bucket
    return Bucket.EMPTY


class ChoroplethClassifier:
    """Bucket classifier bound to a color palette (one color per bucket)."""

    def __init__(self, palette: Sequence[str] = DEFAULT_PALETTE) -> None:
        if len(palette) != len(BUCKET_ORDER):
            raise ValueError(
                f"Palette must have {len(BUCKET_ORDER)} colors, got {len(palette)}"
            )
        self._colors = dict(zip(BUCKET_ORDER, palette))

    def classify(self, count: int) -> Bucket:
        return classify(count)

    def color(self, bucket: Bucket) -> str:
        return self._colors[bucket]

    def color_for(self, count: int) -> str:
        return self._colors[classify(count)]

    def legend(self) -> list[tuple[Bucket, str]]:
        return [(bucket, self._colors[bucket]) for bucket in BUCKET_ORDER]
