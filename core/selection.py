"""Selected-record and active-surface state for a session.

Every transition is total: unknown keys clear the selection and unknown
surfaces fall back to the map. Selection is only ever shown on the map
surface, so selecting from the list switches surfaces.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import AbstractSet, Literal, Optional

Surface = Literal["map", "list"]

MAP: Surface = "map"
LIST: Surface = "list"
SURFACES = (MAP, LIST)


@dataclass(frozen=True)
class ViewState:
    selected_key: Optional[str] = None
    active_surface: Surface = MAP
    show_stats: bool = False

    @property
    def has_selection(self) -> bool:
        return self.selected_key is not None


def select_business(state: ViewState, key: Optional[str], valid_keys: AbstractSet[str]) -> ViewState:
    if key is None or key not in valid_keys:
        return clear_selection(state)
    return replace(state, selected_key=key, active_surface=MAP)


def clear_selection(state: ViewState) -> ViewState:
    return replace(state, selected_key=None)


def set_active_surface(state: ViewState, surface: str) -> ViewState:
    return replace(state, active_surface=surface if surface in SURFACES else MAP)


def toggle_stats(state: ViewState) -> ViewState:
    return replace(state, show_stats=not state.show_stats)


def reconcile_selection(state: ViewState, valid_keys: AbstractSet[str]) -> ViewState:
    if state.selected_key is not None and state.selected_key not in valid_keys:
        return clear_selection(state)
    return state
