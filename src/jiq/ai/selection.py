"""Selection and hover tracking over the current suggestion list."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, TypeVar

__all__ = ["SelectionState"]

T = TypeVar("T")


@dataclass(slots=True)
class SelectionState:
    """Navigation index state for one suggestion list.

    ``navigation_active`` is only set by keyboard traversal
    (:meth:`navigate_next`/:meth:`navigate_previous`); direct selection via
    :meth:`select_index` leaves it off so renderers can highlight the two
    cases differently.
    """

    selected_index: int | None = None
    hovered_index: int | None = None
    navigation_active: bool = False

    def navigate_next(self, count: int) -> None:
        if count <= 0:
            return
        self.navigation_active = True
        if self.selected_index is None:
            self.selected_index = 0
        else:
            self.selected_index = (self.selected_index + 1) % count

    def navigate_previous(self, count: int) -> None:
        if count <= 0:
            return
        self.navigation_active = True
        if self.selected_index is None or self.selected_index == 0:
            self.selected_index = count - 1
        else:
            self.selected_index = min(self.selected_index, count) - 1

    def select_index(self, index: int) -> None:
        self.selected_index = index
        self.navigation_active = False

    def clear_selection(self) -> None:
        self.selected_index = None
        self.navigation_active = False

    def is_navigation_active(self) -> bool:
        return self.navigation_active

    def set_hovered(self, index: int | None) -> None:
        self.hovered_index = index

    def clear_hover(self) -> None:
        self.hovered_index = None

    def selected_suggestion(self, suggestions: Sequence[T]) -> T | None:
        """Return the selected entry, or None when nothing valid is selected."""

        index = self.selected_index
        if index is None or not 0 <= index < len(suggestions):
            return None
        return suggestions[index]
