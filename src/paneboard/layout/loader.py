"""Layout document loading, validation and serialisation."""

from __future__ import annotations

import json
import logging as py_logging
from importlib import resources
from pathlib import Path

from paneboard import jsonc
from paneboard.errors import LayoutIOError, LayoutValidationError
from paneboard.layout.models import (
    BASE_LAYER,
    DEFAULT_KEY_HEIGHT,
    DEFAULT_KEY_WIDTH,
    MIN_KEY_HEIGHT,
    MIN_KEY_WIDTH,
    MIN_PREVIEW_COLUMNS,
    SHIFT_LAYER,
    Key,
    KeyKind,
    Layout,
    Row,
    control_key_name,
    parse_modifier,
)

logger = py_logging.getLogger(__name__)

DEFAULT_LAYOUT_RESOURCE = "default-layout.jsonc"
_DEFAULT_LAYERS = (BASE_LAYER, SHIFT_LAYER)
_VALID_KINDS = {kind.value: kind for kind in KeyKind}


def _invalid(message: str, source: str, *, hint: str = "") -> LayoutValidationError:
    return LayoutValidationError(f"{source}: {message}", hint=hint)


def _parse_layers(value: object, source: str) -> tuple[str, ...]:
    if value is None:
        return _DEFAULT_LAYERS
    if not isinstance(value, list) or not all(isinstance(item, str) and item.strip() for item in value):
        raise _invalid("'layers' must be a list of non-empty layer names", source)
    layers: list[str] = [BASE_LAYER]
    for item in value:
        name = item.strip()
        if name not in layers:
            layers.append(name)
    return tuple(layers)


def _parse_size(value: object, default: int, minimum: int, field: str, where: str, source: str) -> int:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int):
        raise _invalid(f"{where}: {field} must be an integer", source)
    if value < minimum:
        raise _invalid(f"{where}: {field} must be at least {minimum}", source)
    return value


def _parse_blank(value: object, where: str, source: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise _invalid(f"{where}: blank must be a positive number of cells", source)
    return value


def _parse_preview(value: object, source: str) -> int | None:
    if value is None:
        return None
    if not isinstance(value, dict):
        raise _invalid("'preview' must be an object", source)
    columns = value.get("columns")
    if columns is None:
        raise _invalid("preview: missing required field 'columns'", source)
    return _parse_size(columns, 0, MIN_PREVIEW_COLUMNS, "columns", "preview", source)


def _check_binding(kind: KeyKind, layer: str, output: object, where: str, source: str) -> str:
    if not isinstance(output, str) or output == "":
        raise _invalid(f"{where}: binding for layer '{layer}' must be a non-empty string", source)
    if kind == KeyKind.LITERAL and not output.isprintable():
        raise _invalid(
            f"{where}: literal binding for layer '{layer}' contains non-printable characters",
            source,
            hint="Use a control key for Enter, Tab, Escape and other named keys.",
        )
    if kind == KeyKind.CONTROL and control_key_name(output) is None:
        raise _invalid(
            f"{where}: unknown control key '{output}'",
            source,
            hint="Use a named key such as Enter, Tab, Escape, Backspace or Up.",
        )
    return output


def _parse_key(
    value: object,
    *,
    layers: tuple[str, ...],
    default_width: int,
    default_height: int,
    auto_shift: bool,
    gap: int,
    where: str,
    source: str,
) -> Key:
    if isinstance(value, str):
        if value == "":
            raise _invalid(f"{where}: shorthand key cannot be empty", source)
        value = {"kind": KeyKind.LITERAL.value, "bindings": {BASE_LAYER: value}}
    if not isinstance(value, dict):
        raise _invalid(f"{where}: key must be an object or a string", source)

    raw_kind = value.get("kind")
    if raw_kind is None:
        raise _invalid(f"{where}: missing required field 'kind'", source)
    kind = _VALID_KINDS.get(str(raw_kind).strip().lower())
    if kind is None:
        accepted = ", ".join(_VALID_KINDS)
        raise _invalid(f"{where}: unknown key kind '{raw_kind}'", source, hint=f"Use one of: {accepted}.")

    raw_bindings = value.get("bindings")
    if raw_bindings is None:
        raise _invalid(f"{where}: missing required field 'bindings'", source)
    if not isinstance(raw_bindings, dict):
        raise _invalid(f"{where}: 'bindings' must be an object", source)
    if BASE_LAYER not in raw_bindings:
        raise _invalid(
            f"{where}: missing binding for the '{BASE_LAYER}' layer",
            source,
            hint="Every key needs a base binding; other layers fall back to it.",
        )

    bindings: dict[str, str] = {}
    for layer, output in raw_bindings.items():
        if layer not in layers:
            raise _invalid(
                f"{where}: binding references undeclared layer '{layer}'",
                source,
                hint="Add the layer to the top-level 'layers' list.",
            )
        bindings[layer] = _check_binding(kind, layer, output, where, source)

    base = bindings[BASE_LAYER]
    if (
        auto_shift
        and kind == KeyKind.LITERAL
        and SHIFT_LAYER in layers
        and SHIFT_LAYER not in bindings
        and len(base) == 1
        and base.isascii()
        and base.islower()
    ):
        bindings[SHIFT_LAYER] = base.upper()

    if kind == KeyKind.MODIFIER:
        for output in bindings.values():
            if parse_modifier(output) is None:
                logger.warning("layout-load unknown-modifier source=%s key=%s modifier=%s", source, where, output)
    elif kind == KeyKind.LAYER:
        for output in bindings.values():
            if output not in layers:
                logger.warning("layout-load undeclared-layer-target source=%s key=%s layer=%s", source, where, output)

    label = value.get("label", "")
    if not isinstance(label, str):
        raise _invalid(f"{where}: label must be a string", source)

    sticky = value.get("sticky", False)
    if not isinstance(sticky, bool):
        raise _invalid(f"{where}: sticky must be true or false", source)

    return Key(
        kind=kind,
        bindings=bindings,
        label=label,
        sticky=sticky if kind == KeyKind.MODIFIER else False,
        width=_parse_size(value.get("width"), default_width, MIN_KEY_WIDTH, "width", where, source),
        height=_parse_size(value.get("height"), default_height, MIN_KEY_HEIGHT, "height", where, source),
        gap=gap,
    )


def _parse_row(
    raw_row: object,
    *,
    row_index: int,
    layers: tuple[str, ...],
    default_width: int,
    default_height: int,
    auto_shift: bool,
    source: str,
) -> Row:
    if not isinstance(raw_row, list) or not raw_row:
        raise _invalid(f"rows[{row_index}] must be a non-empty list of keys", source)
    keys: list[Key] = []
    gap = 0
    for column_index, raw_key in enumerate(raw_row):
        where = f"rows[{row_index}][{column_index}]"
        if isinstance(raw_key, dict) and "blank" in raw_key:
            gap += _parse_blank(raw_key["blank"], where, source)
            continue
        keys.append(
            _parse_key(
                raw_key,
                layers=layers,
                default_width=default_width,
                default_height=default_height,
                auto_shift=auto_shift,
                gap=gap,
                where=where,
                source=source,
            )
        )
        gap = 0
    if not keys:
        raise _invalid(f"rows[{row_index}] must contain at least one key", source)
    return Row(keys=tuple(keys))


def parse_layout(payload: object, *, source: str = "<string>") -> Layout:
    """Validate a decoded layout document and build a Layout.

    Rows hold keys as objects or string shorthands; ``{"blank": n}`` entries
    leave ``n`` empty cells before the next key of the row.
    """
    if not isinstance(payload, dict):
        raise _invalid("layout document must be an object", source)

    layers = _parse_layers(payload.get("layers"), source)
    default_width = _parse_size(
        payload.get("default_width"), DEFAULT_KEY_WIDTH, MIN_KEY_WIDTH, "width", "default_width", source
    )
    default_height = _parse_size(
        payload.get("default_height"), DEFAULT_KEY_HEIGHT, MIN_KEY_HEIGHT, "height", "default_height", source
    )
    preview_columns = _parse_preview(payload.get("preview"), source)
    auto_shift = payload.get("auto_shift", True)
    if not isinstance(auto_shift, bool):
        raise _invalid("'auto_shift' must be true or false", source)
    name = payload.get("name", Path(source).stem or "custom")
    if not isinstance(name, str):
        raise _invalid("'name' must be a string", source)

    raw_rows = payload.get("rows")
    if raw_rows is None:
        raise _invalid("missing required field 'rows'", source)
    if not isinstance(raw_rows, list) or not raw_rows:
        raise _invalid("'rows' must be a non-empty list", source)

    rows = tuple(
        _parse_row(
            raw_row,
            row_index=row_index,
            layers=layers,
            default_width=default_width,
            default_height=default_height,
            auto_shift=auto_shift,
            source=source,
        )
        for row_index, raw_row in enumerate(raw_rows)
    )

    layout = Layout(
        rows=rows,
        layers=layers,
        name=name,
        default_width=default_width,
        default_height=default_height,
        preview_columns=preview_columns,
        source=source,
    )
    logger.debug(
        "layout-load parsed source=%s name=%s rows=%s keys=%s",
        source,
        name,
        len(layout.rows),
        len(layout.iter_keys()),
    )
    return layout


def load_layout_text(text: str, *, source: str = "<string>") -> Layout:
    return parse_layout(jsonc.loads(text, source=source), source=source)


def load_layout(path: str | Path) -> Layout:
    resolved = Path(path).expanduser()
    try:
        text = resolved.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as exc:
        raise LayoutIOError(
            f"Cannot read layout file {resolved}",
            hint=str(exc) or "Check the path and file permissions.",
        ) from exc
    return load_layout_text(text, source=str(resolved))


def default_layout() -> Layout:
    text = resources.files("paneboard.layout").joinpath(DEFAULT_LAYOUT_RESOURCE).read_text(encoding="utf-8")
    return load_layout_text(text, source=DEFAULT_LAYOUT_RESOURCE)


def layout_to_dict(layout: Layout) -> dict[str, object]:
    rows: list[list[dict[str, object]]] = []
    for row in layout.rows:
        items: list[dict[str, object]] = []
        for key in row.keys:
            if key.gap:
                items.append({"blank": key.gap})
            item: dict[str, object] = {"kind": key.kind.value, "bindings": dict(key.bindings)}
            if key.label:
                item["label"] = key.label
            if key.sticky:
                item["sticky"] = True
            if key.width != layout.default_width:
                item["width"] = key.width
            if key.height != layout.default_height:
                item["height"] = key.height
            items.append(item)
        rows.append(items)
    document: dict[str, object] = {
        "name": layout.name,
        "layers": list(layout.layers),
        "default_width": layout.default_width,
        "default_height": layout.default_height,
        "auto_shift": False,
    }
    if layout.preview_columns is not None:
        document["preview"] = {"columns": layout.preview_columns}
    document["rows"] = rows
    return document


def dump_layout(layout: Layout) -> str:
    return json.dumps(layout_to_dict(layout), ensure_ascii=False, indent=2) + "\n"
