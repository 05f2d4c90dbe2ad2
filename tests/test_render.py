from __future__ import annotations

from paneboard.layout.models import DEFAULT_KEY_HEIGHT as KEY_HEIGHT
from paneboard.layout.models import Key, KeyKind, Layout, Modifier, Row
from paneboard.render import KEY_GAP, KeyStyle, box_lines, build_key_views, frame_size, status_line, view_at
from paneboard.state import KeyboardState

_A = Key(kind=KeyKind.LITERAL, bindings={"base": "a", "shift": "A"})
_SHIFT = Key(kind=KeyKind.MODIFIER, bindings={"base": "Shift"}, label="Shft", width=6)
_CTRL = Key(kind=KeyKind.MODIFIER, bindings={"base": "Ctrl"})
_SYM = Key(kind=KeyKind.LAYER, bindings={"base": "symbols"}, label="Sym")
_SPACE = Key(kind=KeyKind.LITERAL, bindings={"base": " "}, width=9)
_LAYOUT = Layout(
    rows=(Row(keys=(_A, _SHIFT)), Row(keys=(_CTRL, _SYM, _SPACE))),
    layers=("base", "shift", "symbols"),
)


def test_box_lines_center_label() -> None:
    assert box_lines("Esc", 5) == ["┌───┐", "│Esc│", "└───┘"]
    assert box_lines("a", 5)[1] == "│ a │"


def test_box_lines_truncate_long_label() -> None:
    assert box_lines("Backspace", 5)[1] == "│Bac│"


def test_views_are_positioned_row_by_row() -> None:
    views = build_key_views(_LAYOUT, KeyboardState())

    positions = [(view.row, view.column, view.x, view.y) for view in views]
    assert positions == [
        (0, 0, 0, 0),
        (0, 1, 5 + KEY_GAP, 0),
        (1, 0, 0, KEY_HEIGHT),
        (1, 1, 5 + KEY_GAP, KEY_HEIGHT),
        (1, 2, 10 + 2 * KEY_GAP, KEY_HEIGHT),
    ]
    assert frame_size(views) == (19 + 2 * KEY_GAP, 2 * KEY_HEIGHT)


def test_origin_offsets_every_view() -> None:
    views = build_key_views(_LAYOUT, KeyboardState(), origin=(2, 1))

    assert (views[0].x, views[0].y) == (2, 1)


def test_focus_is_marked_on_one_view() -> None:
    views = build_key_views(_LAYOUT, KeyboardState(focus=(1, 2)))

    focused = [view for view in views if view.focused]
    assert [(view.row, view.column) for view in focused] == [(1, 2)]
    assert focused[0].label == "Space"


def test_labels_follow_held_shift() -> None:
    state = KeyboardState(active_modifiers={Modifier.SHIFT})

    views = build_key_views(_LAYOUT, state)

    assert views[0].label == "A"
    assert views[1].label == "Shft"


def test_modifier_styles_distinguish_one_shot_and_sticky() -> None:
    state = KeyboardState(active_modifiers={Modifier.SHIFT, Modifier.CTRL})

    views = build_key_views(_LAYOUT, state, sticky_modifiers=[Modifier.CTRL])
    styles = {(view.row, view.column): view.style for view in views}

    assert styles[(0, 0)] == KeyStyle.NEUTRAL
    assert styles[(0, 1)] == KeyStyle.ONE_SHOT
    assert styles[(1, 0)] == KeyStyle.STICKY


def test_layer_key_for_active_layer_is_highlighted() -> None:
    views = build_key_views(_LAYOUT, KeyboardState(active_layer="symbols"))

    assert views[3].style == KeyStyle.LAYER_ACTIVE
    assert views[3].label == "Sym"


def test_status_line_lists_layer_target_and_modifiers() -> None:
    state = KeyboardState(active_layer="symbols", active_modifiers={Modifier.ALT, Modifier.CTRL})

    assert status_line(state, target="%4") == "layer:symbols  target:%4  mods:Ctrl+Alt"


def test_status_line_appends_message() -> None:
    text = status_line(KeyboardState(), target="{last}", message="Target pane %9 no longer exists.")

    assert text == "layer:base  target:{last}  Target pane %9 no longer exists."


def test_taller_box_keeps_label_on_middle_line() -> None:
    assert box_lines("Tab", 5, 4) == ["┌───┐", "│Tab│", "│   │", "└───┘"]
    assert box_lines("Tab", 5, 5) == ["┌───┐", "│   │", "│Tab│", "│   │", "└───┘"]


def test_gap_shifts_key_right() -> None:
    spaced = Key(kind=KeyKind.LITERAL, bindings={"base": "b"}, gap=3)
    layout = Layout(rows=(Row(keys=(_A, spaced)),))

    views = build_key_views(layout, KeyboardState())

    assert views[1].x == 5 + KEY_GAP + 3
    assert frame_size(views) == (5 + KEY_GAP + 3 + 5, KEY_HEIGHT)


def test_tall_key_pushes_next_row_down() -> None:
    tall = Key(kind=KeyKind.CONTROL, bindings={"base": "Enter"}, height=5)
    layout = Layout(rows=(Row(keys=(_A, tall)), Row(keys=(_CTRL,))))

    views = build_key_views(layout, KeyboardState())

    assert [view.height for view in views] == [KEY_HEIGHT, 5, KEY_HEIGHT]
    assert views[2].y == 5
    assert len(views[1].lines()) == 5
    assert frame_size(views) == (5 + KEY_GAP + 5, 5 + KEY_HEIGHT)


def test_view_at_hits_key_cells_and_misses_gaps() -> None:
    views = build_key_views(_LAYOUT, KeyboardState())

    hit = view_at(views, 5 + KEY_GAP + 2, 1)
    assert hit is not None
    assert (hit.row, hit.column) == (0, 1)
    assert view_at(views, 5, 0) is None
    assert view_at(views, 0, 2 * KEY_HEIGHT) is None
