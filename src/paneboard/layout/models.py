"""Keyboard layout domain models."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

BASE_LAYER = "base"
SHIFT_LAYER = "shift"
DEFAULT_KEY_WIDTH = 5
DEFAULT_KEY_HEIGHT = 3
MIN_KEY_WIDTH = 3
MIN_KEY_HEIGHT = 3
MIN_PREVIEW_COLUMNS = 3


class KeyKind(str, Enum):
    LITERAL = "literal"
    CONTROL = "control"
    MODIFIER = "modifier"
    LAYER = "layer"


class Modifier(str, Enum):
    SHIFT = "Shift"
    CTRL = "Ctrl"
    ALT = "Alt"


_MODIFIER_ALIASES = {
    "shift": Modifier.SHIFT,
    "s-": Modifier.SHIFT,
    "ctrl": Modifier.CTRL,
    "control": Modifier.CTRL,
    "c-": Modifier.CTRL,
    "alt": Modifier.ALT,
    "meta": Modifier.ALT,
    "m-": Modifier.ALT,
}


# Control key name -> tmux send-keys key name.
CONTROL_KEYS: dict[str, str] = {
    "Enter": "Enter",
    "Tab": "Tab",
    "BTab": "BTab",
    "Escape": "Escape",
    "Space": "Space",
    "Backspace": "BSpace",
    "BSpace": "BSpace",
    "Delete": "DC",
    "DC": "DC",
    "Insert": "IC",
    "IC": "IC",
    "Up": "Up",
    "Down": "Down",
    "Left": "Left",
    "Right": "Right",
    "Home": "Home",
    "End": "End",
    "PageUp": "PPage",
    "PPage": "PPage",
    "PageDown": "NPage",
    "NPage": "NPage",
    **{f"F{number}": f"F{number}" for number in range(1, 13)},
}

# tmux names that accept C-/M-/S- prefixes.
MODIFIABLE_CONTROLS = frozenset(
    {"Up", "Down", "Left", "Right", "Home", "End", "PPage", "NPage", "Tab", "Enter", "BSpace", "DC", "Space"}
)


def parse_modifier(value: str) -> Modifier | None:
    return _MODIFIER_ALIASES.get(value.strip().lower())


def control_key_name(value: str) -> str | None:
    return CONTROL_KEYS.get(value.strip())


def _freeze(bindings: Mapping[str, str]) -> Mapping[str, str]:
    return MappingProxyType(dict(bindings))


@dataclass(frozen=True)
class Key:
    kind: KeyKind
    bindings: Mapping[str, str]
    label: str = ""
    sticky: bool = False
    width: int = DEFAULT_KEY_WIDTH
    height: int = DEFAULT_KEY_HEIGHT
    # Blank cells left empty before the key.
    gap: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "bindings", _freeze(self.bindings))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Key):
            return NotImplemented
        return (
            self.kind == other.kind
            and dict(self.bindings) == dict(other.bindings)
            and self.label == other.label
            and self.sticky == other.sticky
            and self.width == other.width
            and self.height == other.height
            and self.gap == other.gap
        )

    def __hash__(self) -> int:
        return hash(
            (
                self.kind,
                tuple(sorted(self.bindings.items())),
                self.label,
                self.sticky,
                self.width,
                self.height,
                self.gap,
            )
        )

    def binding_for(self, layer: str) -> str:
        """Binding for ``layer``, falling back to the base layer."""
        if layer in self.bindings:
            return self.bindings[layer]
        return self.bindings[BASE_LAYER]

    def label_for(self, layer: str) -> str:
        if self.label and (layer == BASE_LAYER or layer not in self.bindings):
            return self.label
        binding = self.binding_for(layer)
        if self.kind == KeyKind.LITERAL and binding == " ":
            return "Space"
        return binding


@dataclass(frozen=True)
class Row:
    keys: tuple[Key, ...]

    def __len__(self) -> int:
        return len(self.keys)

    def __getitem__(self, index: int) -> Key:
        return self.keys[index]


@dataclass(frozen=True)
class Layout:
    rows: tuple[Row, ...]
    layers: tuple[str, ...] = (BASE_LAYER, SHIFT_LAYER)
    name: str = "custom"
    default_width: int = DEFAULT_KEY_WIDTH
    default_height: int = DEFAULT_KEY_HEIGHT
    preview_columns: int | None = None
    source: str = field(default="", compare=False)

    def key_at(self, row: int, column: int) -> Key:
        return self.rows[row].keys[column]

    def has_layer(self, layer: str) -> bool:
        return layer in self.layers

    def iter_keys(self) -> list[tuple[int, int, Key]]:
        return [
            (row_index, column_index, key)
            for row_index, row in enumerate(self.rows)
            for column_index, key in enumerate(row.keys)
        ]
