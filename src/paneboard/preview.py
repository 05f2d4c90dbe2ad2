"""Sent-key preview strip."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

_VISIBLE_ALIASES = {"Space": " ", "\\;": ";"}


def visible_text(token: str) -> str | None:
    """Printable text for ``token``, or None for named/modified keys."""
    if token in _VISIBLE_ALIASES:
        return _VISIBLE_ALIASES[token]
    if len(token) == 1 and token.isprintable():
        return token
    return None


@dataclass
class SentKeyPreview:
    """Either a run of printable characters or repeats of one named key."""

    history: list[str] = field(default_factory=list)
    max_entries: int = 256

    def record(self, tokens: Iterable[str]) -> None:
        for token in tokens:
            self._record_one(token)
        if len(self.history) > self.max_entries:
            del self.history[: len(self.history) - self.max_entries]

    def _record_one(self, token: str) -> None:
        last = self.history[-1] if self.history else None
        if visible_text(token) is not None:
            if last is not None and visible_text(last) is None:
                self.history.clear()
        elif last != token:
            self.history.clear()
        self.history.append(token)

    def clear(self) -> None:
        self.history.clear()

    @property
    def is_repeat(self) -> bool:
        return bool(self.history) and visible_text(self.history[-1]) is None

    def text(self, width: int | None = None) -> str:
        if not self.history:
            return ""
        if self.is_repeat:
            line = f"> {self.history[-1]}"
            if len(self.history) > 1:
                line += f" (x{len(self.history)})"
        else:
            typed = "".join(visible_text(token) or "" for token in self.history)
            line = f"> {typed}"
        if width is not None and len(line) > width:
            line = "> " + line[len(line) - max(width - 2, 0) :]
        return line
