"""Interactive keyboard session loop."""

from __future__ import annotations

import logging as py_logging

from paneboard.engine import EngineResult, KeyboardEngine
from paneboard.render import build_key_views, status_line
from paneboard.terminal import InputSource, Screen

logger = py_logging.getLogger(__name__)


class KeyboardApp:
    """Blocking render/read/handle loop; the only owner of keyboard state."""

    def __init__(self, engine: KeyboardEngine, *, input_source: InputSource, screen: Screen) -> None:
        self.engine = engine
        self.input_source = input_source
        self.screen = screen
        self.status = ""
        self.handled_events = 0

    def render(self) -> None:
        engine = self.engine
        views = build_key_views(engine.layout, engine.state, sticky_modifiers=engine.sticky_modifiers)
        preview = ""
        if engine.preview is not None:
            preview = engine.preview.text(engine.layout.preview_columns or self.screen.width)
        self.screen.draw(
            views,
            preview=preview,
            status=status_line(engine.state, target=engine.target, message=self.status),
        )

    def step(self) -> EngineResult:
        event = self.input_source.next_event()
        result = self.engine.handle(event)
        self.handled_events += 1
        self.status = result.status
        if result.error is not None:
            logger.info("keyboard-status event=%s status=%s", event, result.status)
        return result

    def run(self) -> int:
        logger.info(
            "keyboard-session start layout=%s target=%s",
            self.engine.layout.name,
            self.engine.target,
        )
        with self.screen.session():
            try:
                while True:
                    self.render()
                    if self.step().quit:
                        break
            except KeyboardInterrupt:
                logger.info("keyboard-session interrupted")
        logger.info("keyboard-session end events=%s", self.handled_events)
        return 0
