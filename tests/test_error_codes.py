from __future__ import annotations

import pytest

from paneboard.errors import (
    DeliveryError,
    DeliveryTimeout,
    ExitCode,
    LayoutError,
    LayoutIOError,
    LayoutParseError,
    LayoutValidationError,
    PaneboardError,
    TargetNotFound,
    TransportFailure,
    UndefinedBindingError,
    user_facing_error,
)
from paneboard.logging import LOG_LEVELS, configure_logging


def test_exit_codes_are_deterministic() -> None:
    assert int(ExitCode.SUCCESS) == 0
    assert int(ExitCode.INVALID_ARGS) == 2
    assert int(ExitCode.CONFIG_ERROR) == 3
    assert int(ExitCode.LAYOUT_ERROR) == 5
    assert int(ExitCode.DELIVERY_ERROR) == 6
    assert int(ExitCode.VALIDATION_ERROR) == 7


def test_paneboard_error_string_contains_hint() -> None:
    err = PaneboardError("tmux not found", code=ExitCode.RUNTIME_ERROR, hint="Install tmux")

    assert "Install tmux" in str(err)


@pytest.mark.parametrize(
    ("error", "code"),
    [
        (LayoutParseError("bad json", source="x.jsonc", line=1, column=2), ExitCode.LAYOUT_ERROR),
        (LayoutIOError("missing file"), ExitCode.LAYOUT_ERROR),
        (LayoutValidationError("no rows"), ExitCode.VALIDATION_ERROR),
        (UndefinedBindingError("Undefined layer 'x'"), ExitCode.VALIDATION_ERROR),
        (TargetNotFound("gone", target="%1"), ExitCode.DELIVERY_ERROR),
        (TransportFailure("failed", returncode=1), ExitCode.DELIVERY_ERROR),
        (DeliveryTimeout("slow"), ExitCode.DELIVERY_ERROR),
    ],
)
def test_error_families_carry_their_exit_code(error: PaneboardError, code: ExitCode) -> None:
    assert error.code == code


def test_error_hierarchy() -> None:
    assert issubclass(LayoutParseError, LayoutError)
    assert issubclass(LayoutValidationError, LayoutError)
    assert issubclass(TargetNotFound, DeliveryError)
    assert issubclass(DeliveryTimeout, DeliveryError)
    assert not issubclass(UndefinedBindingError, LayoutError)


def test_user_facing_error_template() -> None:
    text = user_facing_error("Target pane %1 no longer exists.", hint="Pick a live pane")

    assert text == "Error: Target pane %1 no longer exists. Next step: Pick a live pane"


def test_user_facing_error_without_hint() -> None:
    assert user_facing_error("Could not run tmux") == "Error: Could not run tmux."


def test_logging_levels() -> None:
    logger = configure_logging("WARN")

    assert logger.level == LOG_LEVELS["WARN"]
