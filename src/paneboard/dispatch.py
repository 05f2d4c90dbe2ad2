"""Key activation to tmux key-token resolution.

Tokens use the key names understood by ``tmux send-keys``: printable
characters are sent as themselves, named keys use tmux names (``Enter``,
``BSpace``, ``PPage``) and modifiers are written as ``C-``, ``M-`` and ``S-``
prefixes, always in that order. A lone ``;`` ends a tmux command, so it is
escaped as ``\\;``.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from paneboard.errors import ExitCode, PaneboardError
from paneboard.layout.models import (
    MODIFIABLE_CONTROLS,
    SHIFT_LAYER,
    Key,
    KeyKind,
    Layout,
    Modifier,
    control_key_name,
)

_ESCAPED_CHARACTERS = {";": "\\;", " ": "Space"}


@dataclass(frozen=True)
class DispatchPayload:
    target: str
    tokens: tuple[str, ...]
    modifiers: frozenset[Modifier] = frozenset()


def _prefix(modifiers: Iterable[Modifier], *, include_shift: bool) -> str:
    held = set(modifiers)
    prefix = ""
    if Modifier.CTRL in held:
        prefix += "C-"
    if Modifier.ALT in held:
        prefix += "M-"
    if include_shift and Modifier.SHIFT in held:
        prefix += "S-"
    return prefix


def resolution_layer(layout: Layout, active_layer: str, modifiers: Iterable[Modifier]) -> str:
    if Modifier.SHIFT in set(modifiers) and layout.has_layer(SHIFT_LAYER):
        return SHIFT_LAYER
    return active_layer


def encode_character(char: str, modifiers: Iterable[Modifier] = ()) -> str:
    held = set(modifiers)
    if Modifier.CTRL in held:
        if char.isascii() and char.isalpha():
            char = char.lower()
        elif char == " ":
            char = "Space"
        prefix = _prefix(held, include_shift=False)
        return prefix + char
    if Modifier.ALT in held:
        return _prefix(held, include_shift=False) + ("Space" if char == " " else char)
    return _ESCAPED_CHARACTERS.get(char, char)


def encode_control(name: str, modifiers: Iterable[Modifier] = ()) -> str:
    tmux_name = control_key_name(name)
    if tmux_name is None:
        raise PaneboardError(
            f"Unknown control key: {name}",
            code=ExitCode.VALIDATION_ERROR,
            hint="Use a named key such as Enter, Tab, Escape, Backspace or Up.",
        )
    if tmux_name not in MODIFIABLE_CONTROLS:
        return tmux_name
    return _prefix(modifiers, include_shift=True) + tmux_name


def resolve(
    key: Key,
    *,
    layout: Layout,
    active_layer: str,
    modifiers: Iterable[Modifier],
    target: str,
) -> DispatchPayload:
    """Build the payload for a literal or control key activation."""
    held = frozenset(modifiers)
    binding = key.binding_for(resolution_layer(layout, active_layer, held))
    if key.kind == KeyKind.LITERAL:
        tokens = tuple(encode_character(char, held) for char in binding)
    elif key.kind == KeyKind.CONTROL:
        tokens = (encode_control(binding, held),)
    elif key.kind in (KeyKind.MODIFIER, KeyKind.LAYER):
        raise PaneboardError(
            f"{key.kind.value} keys do not produce a payload",
            code=ExitCode.RUNTIME_ERROR,
        )
    else:
        raise PaneboardError(f"Unsupported key kind: {key.kind}", code=ExitCode.RUNTIME_ERROR)
    return DispatchPayload(target=target, tokens=tokens, modifiers=held)
