"""blessed-backed keyboard screen and raw key and mouse input."""

from __future__ import annotations

import logging as py_logging
import signal
from collections.abc import Callable, Iterator
from contextlib import AbstractContextManager, ExitStack, contextmanager
from typing import Protocol

from blessed import Terminal

from paneboard.engine import InputEvent, KeyPress
from paneboard.render import KeyStyle, KeyView, frame_size, view_at

logger = py_logging.getLogger(__name__)

# Rows above the keys; row 0 holds the sent-key preview.
KEYS_TOP = 1

_NAMED_EVENTS = {
    "KEY_UP": InputEvent.MOVE_UP,
    "KEY_DOWN": InputEvent.MOVE_DOWN,
    "KEY_LEFT": InputEvent.MOVE_LEFT,
    "KEY_RIGHT": InputEvent.MOVE_RIGHT,
    "KEY_ENTER": InputEvent.ACTIVATE,
    "KEY_ESCAPE": InputEvent.QUIT,
}
_CHAR_EVENTS = {
    "k": InputEvent.MOVE_UP,
    "j": InputEvent.MOVE_DOWN,
    "h": InputEvent.MOVE_LEFT,
    "l": InputEvent.MOVE_RIGHT,
    " ": InputEvent.ACTIVATE,
    "\r": InputEvent.ACTIVATE,
    "\n": InputEvent.ACTIVATE,
    "r": InputEvent.RELOAD,
    "q": InputEvent.QUIT,
    "\x03": InputEvent.QUIT,
}
_MOUSE_PRESS = "MOUSE_LEFT"
_TERMINATION_SIGNALS = tuple(
    getattr(signal, name) for name in ("SIGTERM", "SIGHUP") if hasattr(signal, name)
)

KeyLocator = Callable[[int, int], tuple[int, int] | None]


class InputSource(Protocol):
    def next_event(self) -> InputEvent | KeyPress: ...


class Screen(Protocol):
    @property
    def width(self) -> int: ...

    def session(self) -> AbstractContextManager[None]: ...

    def draw(self, views: list[KeyView], *, preview: str, status: str) -> None: ...


def event_for_key(name: str | None, text: str) -> InputEvent | None:
    if name and name in _NAMED_EVENTS:
        return _NAMED_EVENTS[name]
    return _CHAR_EVENTS.get(text)


class BlessedInputSource:
    """Read keystrokes and left clicks from ``term``.

    Clicks are mapped to keys through ``locate(x, y)``, which returns the
    ``(row, column)`` of the key drawn at that cell or None.
    """

    def __init__(self, term: Terminal, *, locate: KeyLocator | None = None) -> None:
        self.term = term
        self.locate = locate

    def next_event(self) -> InputEvent | KeyPress:
        while True:
            keystroke = self.term.inkey()
            if keystroke.name == _MOUSE_PRESS:
                press = self._press_for(keystroke.mouse_xy)
                if press is not None:
                    return press
                continue
            event = event_for_key(keystroke.name, str(keystroke))
            if event is not None:
                return event
            logger.debug("input-ignored name=%s text=%r", keystroke.name, str(keystroke))

    def _press_for(self, position: tuple[int, int]) -> KeyPress | None:
        x, y = position
        located = self.locate(x, y) if self.locate is not None else None
        if located is None:
            logger.debug("mouse-press missed x=%s y=%s", x, y)
            return None
        return KeyPress(*located)


def _raise_exit(signum: int, _frame: object) -> None:
    raise SystemExit(128 + signum)


@contextmanager
def termination_signals_unwind() -> Iterator[None]:
    """Turn SIGTERM/SIGHUP into SystemExit so terminal modes are restored."""
    previous = {}
    for signum in _TERMINATION_SIGNALS:
        previous[signum] = signal.signal(signum, _raise_exit)
    try:
        yield
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler)


class BlessedScreen:
    def __init__(self, term: Terminal) -> None:
        self.term = term
        self._views: list[KeyView] = []

    @property
    def width(self) -> int:
        return self.term.width

    @contextmanager
    def session(self) -> Iterator[None]:
        with ExitStack() as stack:
            stack.enter_context(termination_signals_unwind())
            stack.enter_context(self.term.fullscreen())
            stack.enter_context(self.term.cbreak())
            stack.enter_context(self.term.hidden_cursor())
            stack.enter_context(self.term.mouse_enabled())
            logger.debug("terminal-session entered size=%sx%s", self.term.width, self.term.height)
            yield
        logger.debug("terminal-session released")

    def key_at(self, x: int, y: int) -> tuple[int, int] | None:
        view = view_at(self._views, x, y - KEYS_TOP)
        if view is None:
            return None
        return view.row, view.column

    def _style(self, view: KeyView) -> str:
        term = self.term
        style = ""
        if view.style == KeyStyle.ONE_SHOT:
            style += term.italic
        elif view.style == KeyStyle.STICKY:
            style += term.bold + term.underline
        elif view.style == KeyStyle.LAYER_ACTIVE:
            style += term.bold
        if view.focused:
            style += term.reverse
        return style

    def draw(self, views: list[KeyView], *, preview: str, status: str) -> None:
        term = self.term
        self._views = list(views)
        _, height = frame_size(views)
        chunks = [term.home, term.clear]
        chunks.append(term.move_xy(0, 0) + term.bold + preview[: term.width] + term.normal)
        for view in views:
            style = self._style(view)
            for offset, line in enumerate(view.lines()):
                chunks.append(term.move_xy(view.x, view.y + KEYS_TOP + offset) + style + line + term.normal)
        status_row = height + KEYS_TOP
        chunks.append(term.move_xy(0, status_row) + term.dim + status[: term.width] + term.normal)
        print("".join(chunks), end="", flush=True)
