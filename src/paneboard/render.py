"""What to draw for the current keyboard state."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from paneboard.dispatch import resolution_layer
from paneboard.layout.models import DEFAULT_KEY_HEIGHT, Key, KeyKind, Layout, Modifier, parse_modifier
from paneboard.state import KeyboardState

KEY_GAP = 1


class KeyStyle(str, Enum):
    NEUTRAL = "neutral"
    ONE_SHOT = "one-shot"
    STICKY = "sticky"
    LAYER_ACTIVE = "layer-active"


@dataclass(frozen=True)
class KeyView:
    row: int
    column: int
    x: int
    y: int
    width: int
    height: int
    label: str
    style: KeyStyle
    focused: bool

    def lines(self) -> list[str]:
        return box_lines(self.label, self.width, self.height)

    def contains(self, x: int, y: int) -> bool:
        return self.x <= x < self.x + self.width and self.y <= y < self.y + self.height


def box_lines(label: str, width: int, height: int = DEFAULT_KEY_HEIGHT) -> list[str]:
    """Box-drawn key cell with the label centred on the middle line."""
    inner = width - 2
    if len(label) > inner:
        label = label[:inner]
    label_row = (height - 1) // 2
    lines = ["┌" + "─" * inner + "┐"]
    for row in range(1, height - 1):
        text = label.center(inner) if row == label_row else " " * inner
        lines.append("│" + text + "│")
    lines.append("└" + "─" * inner + "┘")
    return lines


def key_style(key: Key, state: KeyboardState, sticky_modifiers: Iterable[Modifier]) -> KeyStyle:
    if key.kind == KeyKind.MODIFIER:
        modifier = parse_modifier(key.binding_for(state.active_layer))
        if modifier is None or modifier not in state.active_modifiers:
            return KeyStyle.NEUTRAL
        return KeyStyle.STICKY if modifier in set(sticky_modifiers) else KeyStyle.ONE_SHOT
    if key.kind == KeyKind.LAYER and key.binding_for(state.active_layer) == state.active_layer:
        return KeyStyle.LAYER_ACTIVE
    return KeyStyle.NEUTRAL


def build_key_views(
    layout: Layout,
    state: KeyboardState,
    *,
    sticky_modifiers: Iterable[Modifier] = (),
    origin: tuple[int, int] = (0, 0),
) -> list[KeyView]:
    sticky = frozenset(sticky_modifiers)
    label_layer = resolution_layer(layout, state.active_layer, state.active_modifiers)
    origin_x, origin_y = origin
    views: list[KeyView] = []
    y = origin_y
    for row_index, row in enumerate(layout.rows):
        x = origin_x
        for column_index, key in enumerate(row.keys):
            x += key.gap
            views.append(
                KeyView(
                    row=row_index,
                    column=column_index,
                    x=x,
                    y=y,
                    width=key.width,
                    height=key.height,
                    label=key.label_for(label_layer),
                    style=key_style(key, state, sticky),
                    focused=state.focus == (row_index, column_index),
                )
            )
            x += key.width + KEY_GAP
        y += max(key.height for key in row.keys)
    return views


def frame_size(views: Iterable[KeyView]) -> tuple[int, int]:
    width = 0
    height = 0
    for view in views:
        width = max(width, view.x + view.width)
        height = max(height, view.y + view.height)
    return width, height


def status_line(state: KeyboardState, *, target: str, message: str = "") -> str:
    held = "+".join(modifier.value for modifier in Modifier if modifier in state.active_modifiers)
    parts = [f"layer:{state.active_layer}", f"target:{target}"]
    if held:
        parts.append(f"mods:{held}")
    if message:
        parts.append(message)
    return "  ".join(parts)


def view_at(views: Iterable[KeyView], x: int, y: int) -> KeyView | None:
    for view in views:
        if view.contains(x, y):
            return view
    return None
