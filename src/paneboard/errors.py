"""Deterministic error model and exit code contract."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


class ExitCode(IntEnum):
    SUCCESS = 0
    INVALID_ARGS = 2
    CONFIG_ERROR = 3
    RUNTIME_ERROR = 4
    LAYOUT_ERROR = 5
    DELIVERY_ERROR = 6
    VALIDATION_ERROR = 7


@dataclass
class PaneboardError(Exception):
    message: str
    code: ExitCode = ExitCode.RUNTIME_ERROR
    hint: str = ""

    def __str__(self) -> str:
        if self.hint:
            return f"{self.message} Hint: {self.hint}"
        return self.message


@dataclass
class LayoutError(PaneboardError):
    """Layout document could not be turned into a Layout."""

    code: ExitCode = ExitCode.LAYOUT_ERROR


@dataclass
class LayoutParseError(LayoutError):
    source: str = ""
    line: int = 0
    column: int = 0


@dataclass
class LayoutValidationError(LayoutError):
    code: ExitCode = ExitCode.VALIDATION_ERROR


@dataclass
class LayoutIOError(LayoutError):
    pass


@dataclass
class UndefinedBindingError(PaneboardError):
    """A key refers to a layer or modifier the layout does not define."""

    code: ExitCode = ExitCode.VALIDATION_ERROR


@dataclass
class DeliveryError(PaneboardError):
    target: str = ""
    code: ExitCode = ExitCode.DELIVERY_ERROR


@dataclass
class TargetNotFound(DeliveryError):
    pass


@dataclass
class TransportFailure(DeliveryError):
    returncode: int | None = None


@dataclass
class DeliveryTimeout(DeliveryError):
    pass


def user_facing_error(message: str, *, hint: str = "") -> str:
    message = message.rstrip(".")
    if hint:
        return f"Error: {message}. Next step: {hint}"
    return f"Error: {message}."
