from __future__ import annotations

from paneboard.layout.models import Key, KeyKind, Layout, Modifier, Row
from paneboard.state import Direction, KeyboardState


def _literal(char: str) -> Key:
    return Key(kind=KeyKind.LITERAL, bindings={"base": char})


def _layout(*row_lengths: int) -> Layout:
    return Layout(rows=tuple(Row(keys=tuple(_literal("x") for _ in range(length))) for length in row_lengths))


def test_left_and_right_wrap_within_row() -> None:
    layout = _layout(3)
    state = KeyboardState()

    assert state.move(Direction.LEFT, layout) == (0, 2)
    assert state.move(Direction.RIGHT, layout) == (0, 0)
    assert state.move(Direction.RIGHT, layout) == (0, 1)


def test_up_and_down_wrap_across_rows() -> None:
    layout = _layout(2, 2, 2)
    state = KeyboardState()

    assert state.move(Direction.UP, layout) == (2, 0)
    assert state.move(Direction.DOWN, layout) == (0, 0)


def test_vertical_move_clamps_column_to_shorter_row() -> None:
    layout = _layout(5, 2)
    state = KeyboardState(focus=(0, 4))

    assert state.move(Direction.DOWN, layout) == (1, 1)
    assert state.move(Direction.UP, layout) == (0, 1)


def test_stale_focus_is_clamped_before_moving() -> None:
    layout = _layout(2)
    state = KeyboardState(focus=(7, 9))

    assert state.clamped_focus(layout) == (0, 1)
    assert state.move(Direction.RIGHT, layout) == (0, 0)


def test_toggle_modifier_flips_membership() -> None:
    state = KeyboardState()

    assert state.toggle_modifier(Modifier.CTRL) is True
    assert state.active_modifiers == {Modifier.CTRL}
    assert state.toggle_modifier(Modifier.CTRL) is False
    assert state.active_modifiers == set()


def test_reset_restores_defaults() -> None:
    state = KeyboardState(active_layer="symbols", active_modifiers={Modifier.ALT}, focus=(1, 1))

    state.reset()

    assert state == KeyboardState()
