"""Keyboard state machine driven by input events."""

from __future__ import annotations

import logging as py_logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum

from paneboard.dispatch import DispatchPayload, resolve
from paneboard.errors import DeliveryError, LayoutError, PaneboardError, UndefinedBindingError
from paneboard.layout.models import BASE_LAYER, Key, KeyKind, Layout, Modifier, parse_modifier
from paneboard.preview import SentKeyPreview
from paneboard.sender import PaneSender
from paneboard.state import Direction, KeyboardState

logger = py_logging.getLogger(__name__)


class InputEvent(str, Enum):
    MOVE_UP = "move-up"
    MOVE_DOWN = "move-down"
    MOVE_LEFT = "move-left"
    MOVE_RIGHT = "move-right"
    ACTIVATE = "activate"
    RELOAD = "reload"
    QUIT = "quit"


@dataclass(frozen=True)
class KeyPress:
    """Pointer activation of the key at (row, column)."""

    row: int
    column: int


_MOVES = {
    InputEvent.MOVE_UP: Direction.UP,
    InputEvent.MOVE_DOWN: Direction.DOWN,
    InputEvent.MOVE_LEFT: Direction.LEFT,
    InputEvent.MOVE_RIGHT: Direction.RIGHT,
}


@dataclass(frozen=True)
class EngineResult:
    event: InputEvent
    payload: DispatchPayload | None = None
    error: PaneboardError | None = None
    status: str = ""
    quit: bool = False


def sticky_modifiers_for(layout: Layout, configured: Iterable[Modifier] = ()) -> frozenset[Modifier]:
    sticky = set(configured)
    for _, _, key in layout.iter_keys():
        if key.kind != KeyKind.MODIFIER or not key.sticky:
            continue
        for binding in key.bindings.values():
            modifier = parse_modifier(binding)
            if modifier is not None:
                sticky.add(modifier)
    return frozenset(sticky)


class KeyboardEngine:
    def __init__(
        self,
        layout: Layout,
        *,
        sender: PaneSender,
        target: str,
        state: KeyboardState | None = None,
        sticky_modifiers: Iterable[Modifier] = (),
        preview: SentKeyPreview | None = None,
        reloader: Callable[[], Layout] | None = None,
    ) -> None:
        self._layout = layout
        self.sender = sender
        self.target = target
        self.state = state or KeyboardState()
        self.preview = preview
        self.reloader = reloader
        self._configured_sticky = frozenset(sticky_modifiers)
        self.sticky_modifiers = sticky_modifiers_for(layout, self._configured_sticky)
        self.state.focus = self.state.clamped_focus(layout)

    @property
    def layout(self) -> Layout:
        return self._layout

    @property
    def focused_key(self) -> Key:
        row, column = self.state.focus
        return self._layout.key_at(row, column)

    def handle(self, event: InputEvent | KeyPress) -> EngineResult:
        if isinstance(event, KeyPress):
            return self.press(event.row, event.column)
        if event in _MOVES:
            focus = self.state.move(_MOVES[event], self._layout)
            logger.debug("focus-move direction=%s focus=%s", _MOVES[event].value, focus)
            return EngineResult(event=event)
        if event == InputEvent.ACTIVATE:
            return self.activate()
        if event == InputEvent.RELOAD:
            return self.reload_from_source()
        if event == InputEvent.QUIT:
            logger.info("keyboard-quit requested")
            return EngineResult(event=event, quit=True)
        raise ValueError(f"Unsupported input event: {event}")

    def press(self, row: int, column: int) -> EngineResult:
        """Focus the key at (row, column) and activate it."""
        if not (0 <= row < len(self._layout.rows) and 0 <= column < len(self._layout.rows[row])):
            logger.debug("key-press ignored row=%s column=%s", row, column)
            return EngineResult(event=InputEvent.ACTIVATE)
        self.state.focus = (row, column)
        return self.activate()

    def activate(self) -> EngineResult:
        key = self.focused_key
        if key.kind in (KeyKind.LITERAL, KeyKind.CONTROL):
            return self._dispatch(key)
        if key.kind == KeyKind.MODIFIER:
            return self._toggle_modifier(key)
        if key.kind == KeyKind.LAYER:
            return self._switch_layer(key)
        raise PaneboardError(f"Unsupported key kind: {key.kind}")

    def _dispatch(self, key: Key) -> EngineResult:
        try:
            payload = resolve(
                key,
                layout=self._layout,
                active_layer=self.state.active_layer,
                modifiers=self.state.active_modifiers,
                target=self.target,
            )
        except PaneboardError as exc:
            logger.error("dispatch-resolve failed focus=%s error=%s", self.state.focus, exc)
            return EngineResult(event=InputEvent.ACTIVATE, error=exc, status=exc.message)

        try:
            self.sender.deliver(payload.target, payload.tokens)
        except DeliveryError as exc:
            logger.warning(
                "dispatch-deliver failed target=%s tokens=%s error=%s",
                payload.target,
                list(payload.tokens),
                exc,
            )
            self._clear_one_shot()
            return EngineResult(event=InputEvent.ACTIVATE, payload=payload, error=exc, status=exc.message)

        logger.debug("dispatch-deliver ok target=%s tokens=%s", payload.target, list(payload.tokens))
        if self.preview is not None:
            self.preview.record(payload.tokens)
        self._clear_one_shot()
        return EngineResult(event=InputEvent.ACTIVATE, payload=payload)

    def _clear_one_shot(self) -> None:
        consumed = {modifier for modifier in self.state.active_modifiers if modifier not in self.sticky_modifiers}
        if consumed:
            self.state.active_modifiers.difference_update(consumed)
            logger.debug("modifiers-cleared one_shot=%s", sorted(item.value for item in consumed))

    def _degrade(self, error: UndefinedBindingError) -> EngineResult:
        logger.warning("undefined-binding focus=%s error=%s", self.state.focus, error)
        self.state.active_layer = BASE_LAYER
        return EngineResult(event=InputEvent.ACTIVATE, error=error, status=error.message)

    def _toggle_modifier(self, key: Key) -> EngineResult:
        binding = key.binding_for(self.state.active_layer)
        modifier = parse_modifier(binding)
        if modifier is None:
            return self._degrade(
                UndefinedBindingError(
                    f"Unknown modifier '{binding}'",
                    hint="Use Shift, Ctrl or Alt.",
                )
            )
        held = self.state.toggle_modifier(modifier)
        logger.debug("modifier-toggle modifier=%s held=%s", modifier.value, held)
        return EngineResult(event=InputEvent.ACTIVATE)

    def _switch_layer(self, key: Key) -> EngineResult:
        layer = key.binding_for(self.state.active_layer)
        if not self._layout.has_layer(layer):
            return self._degrade(
                UndefinedBindingError(
                    f"Undefined layer '{layer}'",
                    hint="Declare the layer in the layout 'layers' list.",
                )
            )
        self.state.active_layer = layer
        logger.debug("layer-switch layer=%s", layer)
        return EngineResult(event=InputEvent.ACTIVATE)

    def reload(self, layout: Layout) -> None:
        """Swap in a new layout and reset focus and layer state."""
        self._layout = layout
        self.sticky_modifiers = sticky_modifiers_for(layout, self._configured_sticky)
        self.state.reset()
        logger.info("layout-reload name=%s rows=%s", layout.name, len(layout.rows))

    def reload_from_source(self) -> EngineResult:
        if self.reloader is None:
            return EngineResult(event=InputEvent.RELOAD, status="Reload is not available.")
        try:
            layout = self.reloader()
        except LayoutError as exc:
            logger.error("layout-reload failed error=%s", exc)
            return EngineResult(event=InputEvent.RELOAD, error=exc, status=exc.message)
        self.reload(layout)
        return EngineResult(event=InputEvent.RELOAD, status=f"Reloaded layout '{layout.name}'.")
