"""Province selection/hover state machine and its map session controller.

`transition` is a pure function: it takes the current `SelectionState` and an
event and returns the next state plus the viewport commands that realize it.
`SelectionController` owns one session's state, applies the commands to a
`MapViewport` and reads/writes climb status through an injected store.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from enum import Enum
from typing import Sequence, Union

from .climbs import ClimbStatusStore
from .config import MapConfig
from .models import Mountain
from .provinces import ProvinceIndex

_LOGGER = logging.getLogger("peakmap.selection")

DEFAULT_LABEL_MIN_ZOOM = 5.0


class ProvinceVisual(str, Enum):
    NORMAL = "normal"
    FADED = "faded"
    SELECTED = "selected"
    HOVERED = "hovered"
    HOVERED_FADED = "hovered_faded"


# Viewport commands


@dataclass(frozen=True, slots=True)
class SetProvinceVisual:
    province_id: str
    visual: ProvinceVisual


@dataclass(frozen=True, slots=True)
class BringToFront:
    province_id: str


@dataclass(frozen=True, slots=True)
class SetTooltip:
    province_id: str
    enabled: bool


@dataclass(frozen=True, slots=True)
class ShowMountains:
    mountains: tuple[Mountain, ...]


@dataclass(frozen=True, slots=True)
class HideMountains:
    pass


@dataclass(frozen=True, slots=True)
class DrawLabels:
    mountains: tuple[Mountain, ...]


@dataclass(frozen=True, slots=True)
class ClearLabels:
    pass


@dataclass(frozen=True, slots=True)
class OpenDetailPanel:
    province_id: str


@dataclass(frozen=True, slots=True)
class CloseDetailPanel:
    pass


@dataclass(frozen=True, slots=True)
class RefreshMountainMarker:
    mountain_id: str
    climbed: bool


Command = Union[
    SetProvinceVisual,
    BringToFront,
    SetTooltip,
    ShowMountains,
    HideMountains,
    DrawLabels,
    ClearLabels,
    OpenDetailPanel,
    CloseDetailPanel,
    RefreshMountainMarker,
]


# Events


@dataclass(frozen=True, slots=True)
class Hover:
    province_id: str


@dataclass(frozen=True, slots=True)
class Unhover:
    province_id: str


@dataclass(frozen=True, slots=True)
class Click:
    province_id: str


@dataclass(frozen=True, slots=True)
class ZoomChanged:
    zoom: float


@dataclass(frozen=True, slots=True)
class DatasetReload:
    pass


@dataclass(frozen=True, slots=True)
class Teardown:
    pass


Event = Union[Hover, Unhover, Click, ZoomChanged, DatasetReload, Teardown]


@dataclass(frozen=True, slots=True)
class SelectionState:
    selected_province_id: str | None = None
    hovered_province_id: str | None = None
    visible_mountains: tuple[Mountain, ...] = ()
    zoom: float = 0.0

    @property
    def phase(self) -> str:
        if self.selected_province_id is None:
            return "idle" if self.hovered_province_id is None else "hovering"
        if self.hovered_province_id is None:
            return "selected"
        return "selected_hovering"


class MapViewport(ABC):
    """Receiver of paint/visibility intents (the actual map widget)."""

    @abstractmethod
    def apply(self, command: Command) -> None:
        """Paint or toggle whatever `command` describes."""


def transition(
    state: SelectionState,
    event: Event,
    index: ProvinceIndex | None,
    *,
    label_min_zoom: float = DEFAULT_LABEL_MIN_ZOOM,
) -> tuple[SelectionState, list[Command]]:
    """Compute the next selection state and the commands that realize it.

    Events that reference provinces unknown to `index`, or that arrive before
    any dataset is loaded, leave the state unchanged and produce no commands.
    """
    if isinstance(event, ZoomChanged):
        return _zoom_changed(state, event.zoom, label_min_zoom)
    if isinstance(event, (DatasetReload, Teardown)):
        return _reset(state)

    if index is None or event.province_id not in index:
        return (state, [])
    if isinstance(event, Hover):
        return _hover(state, event.province_id)
    if isinstance(event, Unhover):
        return _unhover(state, event.province_id)
    if isinstance(event, Click):
        if event.province_id == state.selected_province_id:
            return _deselect(state, index)
        return _select(state, event.province_id, index, label_min_zoom)
    raise TypeError(f"Unsupported selection event: {event!r}")


def _baseline(state: SelectionState, province_id: str) -> ProvinceVisual:
    if state.selected_province_id is None:
        return ProvinceVisual.NORMAL
    if province_id == state.selected_province_id:
        return ProvinceVisual.SELECTED
    return ProvinceVisual.FADED


def _hover(state: SelectionState, province_id: str) -> tuple[SelectionState, list[Command]]:
    commands: list[Command] = []
    selected = state.selected_province_id
    previous = state.hovered_province_id
    if previous is not None and previous != province_id and previous != selected:
        commands.append(SetProvinceVisual(previous, _baseline(state, previous)))

    new_state = replace(state, hovered_province_id=province_id)
    if province_id == selected:
        return (new_state, commands)

    visual = ProvinceVisual.HOVERED if selected is None else ProvinceVisual.HOVERED_FADED
    commands.append(SetProvinceVisual(province_id, visual))
    commands.append(BringToFront(province_id))
    if selected is not None:
        commands.append(BringToFront(selected))
    return (new_state, commands)


def _unhover(state: SelectionState, province_id: str) -> tuple[SelectionState, list[Command]]:
    new_state = state
    if state.hovered_province_id == province_id:
        new_state = replace(state, hovered_province_id=None)
    if province_id == state.selected_province_id:
        return (new_state, [])
    return (new_state, [SetProvinceVisual(province_id, _baseline(state, province_id))])


def _select(
    state: SelectionState,
    province_id: str,
    index: ProvinceIndex,
    label_min_zoom: float,
) -> tuple[SelectionState, list[Command]]:
    province = index.get(province_id)
    if province is None:
        return (state, [])

    commands: list[Command] = []
    previous = state.selected_province_id
    if previous is not None:
        commands.append(HideMountains())
        commands.append(ClearLabels())

    for other in index:
        if other.id == province_id:
            continue
        if other.id == state.hovered_province_id:
            commands.append(SetProvinceVisual(other.id, ProvinceVisual.HOVERED_FADED))
        else:
            commands.append(SetProvinceVisual(other.id, ProvinceVisual.FADED))
    commands.append(SetProvinceVisual(province_id, ProvinceVisual.SELECTED))
    commands.append(BringToFront(province_id))
    commands.append(SetTooltip(province_id, False))
    if previous is not None:
        commands.append(SetTooltip(previous, True))

    mountains = tuple(province.mountains)
    if mountains:
        commands.append(ShowMountains(mountains))
        if state.zoom > label_min_zoom:
            commands.append(DrawLabels(mountains))
    commands.append(OpenDetailPanel(province_id))

    _LOGGER.debug(
        "Selected province %s (%s) with %d mountains",
        province_id,
        province.display_name,
        len(mountains),
    )
    new_state = SelectionState(
        selected_province_id=province_id,
        hovered_province_id=state.hovered_province_id,
        visible_mountains=mountains,
        zoom=state.zoom,
    )
    return (new_state, commands)


def _deselect(state: SelectionState, index: ProvinceIndex) -> tuple[SelectionState, list[Command]]:
    commands: list[Command] = []
    for province in index:
        if province.id == state.hovered_province_id:
            commands.append(SetProvinceVisual(province.id, ProvinceVisual.HOVERED))
        else:
            commands.append(SetProvinceVisual(province.id, ProvinceVisual.NORMAL))
    if state.selected_province_id is not None:
        commands.append(SetTooltip(state.selected_province_id, True))
    commands.extend([HideMountains(), ClearLabels(), CloseDetailPanel()])

    _LOGGER.debug("Deselected province %s", state.selected_province_id)
    new_state = SelectionState(hovered_province_id=state.hovered_province_id, zoom=state.zoom)
    return (new_state, commands)


def _zoom_changed(
    state: SelectionState,
    zoom: float,
    label_min_zoom: float,
) -> tuple[SelectionState, list[Command]]:
    # Labels are always cleared and redrawn in full, never patched.
    commands: list[Command] = [ClearLabels()]
    if state.selected_province_id is not None and state.visible_mountains and zoom > label_min_zoom:
        commands.append(DrawLabels(state.visible_mountains))
    return (replace(state, zoom=zoom), commands)


def _reset(state: SelectionState) -> tuple[SelectionState, list[Command]]:
    commands: list[Command] = [HideMountains(), ClearLabels(), CloseDetailPanel()]
    return (SelectionState(zoom=state.zoom), commands)


@dataclass(frozen=True, slots=True)
class MountainStatus:
    mountain: Mountain
    climbed: bool


@dataclass(frozen=True, slots=True)
class ProvinceDetail:
    """What the detail panel shows for the selected province."""

    province_id: str
    name: str
    mountains: tuple[MountainStatus, ...]

    @property
    def total(self) -> int:
        return len(self.mountains)

    @property
    def climbed_count(self) -> int:
        return sum(1 for item in self.mountains if item.climbed)

    @property
    def progress_pct(self) -> float:
        if not self.mountains:
            return 0.0
        return round(self.climbed_count / self.total * 100, 2)


class SelectionController:
    """One map session: owns selection state, drives the viewport."""

    def __init__(
        self,
        viewport: MapViewport,
        climb_store: ClimbStatusStore,
        *,
        label_min_zoom: float = DEFAULT_LABEL_MIN_ZOOM,
        initial_zoom: float = 0.0,
    ) -> None:
        self._viewport = viewport
        self._climb_store = climb_store
        self.label_min_zoom = label_min_zoom
        self._state = SelectionState(zoom=initial_zoom)
        self._index: ProvinceIndex | None = None

    @classmethod
    def from_config(
        cls,
        viewport: MapViewport,
        climb_store: ClimbStatusStore,
        map_cfg: MapConfig,
    ) -> SelectionController:
        return cls(
            viewport,
            climb_store,
            label_min_zoom=map_cfg.label_min_zoom,
            initial_zoom=map_cfg.initial_zoom,
        )

    @property
    def state(self) -> SelectionState:
        return self._state

    @property
    def index(self) -> ProvinceIndex | None:
        return self._index

    @property
    def is_loaded(self) -> bool:
        return self._index is not None

    def load_dataset(self, index: ProvinceIndex) -> list[Command]:
        """Install a freshly built index, resetting any previous selection."""
        commands = self.dispatch(DatasetReload())
        self._index = index
        _LOGGER.info("Map session loaded %d provinces", len(index))
        return commands

    def teardown(self) -> list[Command]:
        commands = self.dispatch(Teardown())
        self._index = None
        return commands

    def hover(self, province_id: str) -> list[Command]:
        return self.dispatch(Hover(province_id))

    def unhover(self, province_id: str) -> list[Command]:
        return self.dispatch(Unhover(province_id))

    def click(self, province_id: str) -> list[Command]:
        return self.dispatch(Click(province_id))

    def zoom_changed(self, zoom: float) -> list[Command]:
        return self.dispatch(ZoomChanged(zoom))

    def close_panel(self) -> list[Command]:
        """Closing the detail panel behaves like re-clicking the selection."""
        selected = self._state.selected_province_id
        if selected is None:
            return []
        return self.click(selected)

    def dispatch(self, event: Event) -> list[Command]:
        new_state, commands = transition(
            self._state,
            event,
            self._index,
            label_min_zoom=self.label_min_zoom,
        )
        self._state = new_state
        for command in commands:
            self._viewport.apply(command)
        return commands

    def is_climbed(self, mountain_id: str) -> bool:
        return self._climb_store.get(mountain_id)

    def toggle_climbed(self, mountain_id: str) -> bool:
        climbed = self._climb_store.toggle(mountain_id)
        if any(mountain.id == mountain_id for mountain in self._state.visible_mountains):
            self._viewport.apply(RefreshMountainMarker(mountain_id, climbed))
        return climbed

    def detail(self) -> ProvinceDetail | None:
        selected = self._state.selected_province_id
        if selected is None or self._index is None:
            return None
        province = self._index.get(selected)
        if province is None:
            return None
        return ProvinceDetail(
            province_id=province.id,
            name=province.display_name,
            mountains=_mountain_statuses(self._state.visible_mountains, self._climb_store),
        )


def _mountain_statuses(
    mountains: Sequence[Mountain],
    store: ClimbStatusStore,
) -> tuple[MountainStatus, ...]:
    return tuple(MountainStatus(mountain, store.get(mountain.id)) for mountain in mountains)
