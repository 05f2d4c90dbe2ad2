"""Comment-tolerant JSON (JSONC) decoding for hand-edited documents."""

from __future__ import annotations

import json

from paneboard.errors import LayoutParseError

_MAX_SNIPPET_CHARS = 80


def _blank(text: str) -> str:
    return "".join(char if char in "\r\n" else " " for char in text)


def strip_jsonc_comments(raw: str) -> str:
    """Blank out // and /* */ comments while preserving JSON strings.

    Comment characters are replaced by spaces (newlines are kept) so decoder
    positions still point into the original text.
    """
    output: list[str] = []
    index = 0
    in_string = False
    escaped = False
    text_length = len(raw)
    while index < text_length:
        char = raw[index]
        if in_string:
            output.append(char)
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            index += 1
            continue
        if char == '"':
            in_string = True
            output.append(char)
            index += 1
            continue
        if char == "/" and index + 1 < text_length and raw[index + 1] == "/":
            start = index
            index += 2
            while index < text_length and raw[index] not in "\r\n":
                index += 1
            output.append(_blank(raw[start:index]))
            continue
        if char == "/" and index + 1 < text_length and raw[index + 1] == "*":
            start = index
            index += 2
            while index < text_length:
                if raw[index] == "*" and index + 1 < text_length and raw[index + 1] == "/":
                    index += 2
                    break
                index += 1
            output.append(_blank(raw[start:index]))
            continue
        output.append(char)
        index += 1
    return "".join(output)


def fix_json_trailing_commas(raw: str) -> str:
    """Blank trailing commas before object/array terminators."""
    output: list[str] = []
    index = 0
    in_string = False
    escaped = False
    text_length = len(raw)
    while index < text_length:
        char = raw[index]
        if in_string:
            output.append(char)
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            index += 1
            continue
        if char == '"':
            in_string = True
            output.append(char)
            index += 1
            continue
        if char == ",":
            lookahead = index + 1
            while lookahead < text_length and raw[lookahead] in " \t\r\n":
                lookahead += 1
            if lookahead < text_length and raw[lookahead] in "}]":
                output.append(" ")
                index += 1
                continue
        output.append(char)
        index += 1
    return "".join(output)


def format_error_location(source: str, text: str, line: int, column: int) -> str:
    lines = text.splitlines()
    current = lines[line - 1] if 0 < line <= len(lines) else ""
    error_pos = max(0, min(column - 1, len(current)))
    half = _MAX_SNIPPET_CHARS // 2
    start = max(0, error_pos - half)
    end = min(len(current), error_pos + half + 1)

    snippet = current[start:end]
    caret_col = error_pos - start + 1
    if start > 0:
        snippet = "..." + snippet
        caret_col += 3
    if end < len(current):
        snippet += "..."

    return "\n".join(
        [
            f"--> {source}:{line}:{column}",
            f"{line:4} |{snippet}",
            f"     |{'^':>{caret_col}} error",
        ]
    )


def loads(text: str, *, source: str = "<string>") -> object:
    cleaned = fix_json_trailing_commas(strip_jsonc_comments(text))
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise LayoutParseError(
            f"Malformed layout document {source}: {exc.msg}",
            hint=format_error_location(source, text, exc.lineno, exc.colno),
            source=source,
            line=exc.lineno,
            column=exc.colno,
        ) from exc
