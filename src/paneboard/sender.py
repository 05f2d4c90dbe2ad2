"""Delivery of resolved key tokens into a tmux pane."""

from __future__ import annotations

import logging as py_logging
import subprocess
from collections.abc import Callable, Sequence
from typing import Protocol

from paneboard.errors import DeliveryTimeout, TargetNotFound, TransportFailure

logger = py_logging.getLogger(__name__)

DEFAULT_TARGET = "{last}"
DEFAULT_TIMEOUT_SECONDS = 5.0

_TARGET_MISSING_MARKERS = (
    "can't find pane",
    "can't find window",
    "can't find session",
    "can't find client",
    "no such pane",
    "no such window",
    "no such session",
)


class PaneSender(Protocol):
    def deliver(self, target: str, tokens: Sequence[str]) -> None: ...


def build_send_keys_command(target: str, tokens: Sequence[str], *, tmux: str = "tmux") -> list[str]:
    return [tmux, "send-keys", "-t", target, *tokens]


def _is_missing_target(stderr: str) -> bool:
    text = stderr.lower()
    return any(marker in text for marker in _TARGET_MISSING_MARKERS)


class TmuxPaneSender:
    """Send every payload as one ``tmux send-keys`` invocation."""

    def __init__(
        self,
        *,
        runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        tmux: str = "tmux",
    ) -> None:
        self.runner = runner
        self.timeout_seconds = timeout_seconds
        self.tmux = tmux

    def deliver(self, target: str, tokens: Sequence[str]) -> None:
        if not tokens:
            logger.debug("send-keys skipped target=%s reason=empty-payload", target)
            return
        command = build_send_keys_command(target, tokens, tmux=self.tmux)
        logger.debug("send-keys target=%s tokens=%s", target, list(tokens))
        try:
            completed = self.runner(
                command,
                capture_output=True,
                text=True,
                check=False,
                timeout=self.timeout_seconds,
            )
        except subprocess.TimeoutExpired as exc:
            logger.error("send-keys timed out target=%s timeout=%ss", target, self.timeout_seconds)
            raise DeliveryTimeout(
                f"Sending keys to pane {target} timed out.",
                hint="Check that the tmux server is responsive.",
                target=target,
            ) from exc
        except OSError as exc:
            logger.error("send-keys could not start tmux target=%s error=%s", target, exc)
            raise TransportFailure(
                "Could not run tmux.",
                hint=str(exc) or "Install tmux and make sure it is on PATH.",
                target=target,
            ) from exc
        except (ValueError, UnicodeError) as exc:
            logger.error("send-keys rejected tokens target=%s tokens=%r error=%s", target, list(tokens), exc)
            raise TransportFailure(
                "Keys could not be passed to tmux.",
                hint=str(exc) or "Remove control characters from the key binding.",
                target=target,
            ) from exc

        if completed.returncode == 0:
            return

        stderr = (completed.stderr or "").strip()
        if _is_missing_target(stderr):
            logger.warning("send-keys target missing target=%s stderr=%s", target, stderr)
            raise TargetNotFound(
                f"Target pane {target} no longer exists.",
                hint="Restart paneboard with a live --target pane.",
                target=target,
            )
        logger.warning(
            "send-keys failed target=%s returncode=%s stderr=%s",
            target,
            completed.returncode,
            stderr,
        )
        raise TransportFailure(
            f"tmux send-keys failed with exit code {completed.returncode}.",
            hint=stderr or "Inspect the tmux server state.",
            target=target,
            returncode=completed.returncode,
        )


class LoggingPaneSender:
    """Dry-run sender that only records what would be sent."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, tuple[str, ...]]] = []

    def deliver(self, target: str, tokens: Sequence[str]) -> None:
        self.sent.append((target, tuple(tokens)))
        logger.info("dry-run send-keys target=%s tokens=%s", target, list(tokens))
