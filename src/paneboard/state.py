"""Mutable keyboard session state and focus navigation."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from paneboard.layout.models import BASE_LAYER, Layout, Modifier


class Direction(str, Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"


@dataclass
class KeyboardState:
    active_layer: str = BASE_LAYER
    active_modifiers: set[Modifier] = field(default_factory=set)
    focus: tuple[int, int] = (0, 0)

    def reset(self) -> None:
        self.active_layer = BASE_LAYER
        self.active_modifiers.clear()
        self.focus = (0, 0)

    def toggle_modifier(self, modifier: Modifier) -> bool:
        """Flip ``modifier`` and return whether it is now held."""
        if modifier in self.active_modifiers:
            self.active_modifiers.discard(modifier)
            return False
        self.active_modifiers.add(modifier)
        return True

    def move(self, direction: Direction, layout: Layout) -> tuple[int, int]:
        """Move focus one key, wrapping at every layout edge."""
        row, column = self.clamped_focus(layout)
        if direction == Direction.LEFT:
            column = (column - 1) % len(layout.rows[row])
        elif direction == Direction.RIGHT:
            column = (column + 1) % len(layout.rows[row])
        elif direction == Direction.UP:
            row = (row - 1) % len(layout.rows)
            column = min(column, len(layout.rows[row]) - 1)
        elif direction == Direction.DOWN:
            row = (row + 1) % len(layout.rows)
            column = min(column, len(layout.rows[row]) - 1)
        else:
            raise ValueError(f"Unsupported direction: {direction}")
        self.focus = (row, column)
        return self.focus

    def clamped_focus(self, layout: Layout) -> tuple[int, int]:
        row, column = self.focus
        row = min(max(row, 0), len(layout.rows) - 1)
        column = min(max(column, 0), len(layout.rows[row]) - 1)
        return row, column
