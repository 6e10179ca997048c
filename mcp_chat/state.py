"""Immutable UI state snapshots and their transitions."""

import dataclasses
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from .constants import Panel

logger = logging.getLogger(__name__)

_PANEL_FIELDS: dict[Panel, str] = {
    "history": "history_open",
    "settings": "settings_open",
    "model_dropdown": "model_dropdown_open",
}


@dataclass(frozen=True)
class UiState:
    selected_model_id: str
    dark_mode: bool = True
    history_open: bool = False
    settings_open: bool = False
    model_dropdown_open: bool = False

    def is_open(self, panel: Panel) -> bool:
        return getattr(self, _PANEL_FIELDS[panel])


def select_model(state: UiState, model_id: str) -> UiState:
    return dataclasses.replace(state, selected_model_id=model_id, model_dropdown_open=False)


def toggle_dark_mode(state: UiState) -> UiState:
    return dataclasses.replace(state, dark_mode=not state.dark_mode)


def set_panel(state: UiState, panel: Panel, is_open: bool) -> UiState:
    return dataclasses.replace(state, **{_PANEL_FIELDS[panel]: is_open})


def toggle_panel(state: UiState, panel: Panel) -> UiState:
    return set_panel(state, panel, not state.is_open(panel))


StateListener = Callable[[UiState], None]


class UiStateStore:
    """Holds the current snapshot; subscribers see every change."""

    def __init__(self, initial: UiState) -> None:
        self._state = initial
        self._listeners: list[StateListener] = []

    @property
    def state(self) -> UiState:
        return self._state

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def dispatch(
        self,
        transition: Callable[..., UiState],
        *args: Any,
    ) -> UiState:
        updated = transition(self._state, *args)
        if updated == self._state:
            return self._state

        self._state = updated
        logger.debug("UI state updated", extra={"transition": transition.__name__})
        for listener in list(self._listeners):
            listener(updated)
        return updated
