"""Keyboard layout package."""

from .loader import default_layout, dump_layout, load_layout, load_layout_text, parse_layout
from .models import BASE_LAYER, SHIFT_LAYER, Key, KeyKind, Layout, Modifier, Row

__all__ = [
    "BASE_LAYER",
    "default_layout",
    "dump_layout",
    "Key",
    "KeyKind",
    "Layout",
    "load_layout",
    "load_layout_text",
    "Modifier",
    "parse_layout",
    "Row",
    "SHIFT_LAYER",
]
