"""Climbed-mountain status stores."""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, Mapping

from .util import write_json

_LOGGER = logging.getLogger("peakmap.climbs")


class ClimbStatusStore(ABC):
    """Capability the map session needs from climb persistence."""

    @abstractmethod
    def get(self, mountain_id: str) -> bool:
        """Whether the mountain is marked climbed (unknown ids are not)."""

    @abstractmethod
    def toggle(self, mountain_id: str) -> bool:
        """Flip the flag and return the new value."""


class InMemoryClimbStore(ClimbStatusStore):
    """Key -> climbed flag map; unknown ids read as not climbed."""

    def __init__(self, initial: Mapping[str, bool] | None = None) -> None:
        self._climbed: dict[str, bool] = {}
        if initial:
            for mountain_id, climbed in initial.items():
                self._climbed[str(mountain_id)] = bool(climbed)

    def get(self, mountain_id: str) -> bool:
        return self._climbed.get(mountain_id, False)

    def toggle(self, mountain_id: str) -> bool:
        value = not self.get(mountain_id)
        self._set(mountain_id, value)
        return value

    def mark_climbed(self, mountain_id: str) -> None:
        self._set(mountain_id, True)

    def mark_not_climbed(self, mountain_id: str) -> None:
        self._set(mountain_id, False)

    def reset(self) -> None:
        self._climbed.clear()
        self._changed()

    def climbed_count(self, mountain_ids: Iterable[str]) -> int:
        return sum(1 for mountain_id in mountain_ids if self.get(mountain_id))

    def as_dict(self) -> dict[str, bool]:
        return dict(self._climbed)

    def _set(self, mountain_id: str, value: bool) -> None:
        self._climbed[mountain_id] = value
        self._changed()

    def _changed(self) -> None:
        """Hook for persistent subclasses."""


class JsonFileClimbStore(InMemoryClimbStore):
    """Climb store persisted as a JSON object in a single file."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(_load_climbs(path))

    def _changed(self) -> None:
        write_json(self.path, self.as_dict())


def _load_climbs(path: Path) -> dict[str, bool]:
    if not path.exists():
        return {}
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise ValueError(f"Failed reading climb store {path}: {exc}") from exc
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ValueError(f"Expected JSON object in climb store {path}")

    out: dict[str, bool] = {}
    for key, value in raw.items():
        if not isinstance(value, bool):
            _LOGGER.warning("Ignoring non-boolean climb status for '%s' in %s", key, path)
            continue
        out[str(key)] = value
    return out
