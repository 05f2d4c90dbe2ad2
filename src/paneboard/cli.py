"""Public CLI contract and entrypoint."""

from __future__ import annotations

import argparse
import logging as py_logging
import sys
from collections.abc import Callable, Sequence
from pathlib import Path

from pydantic import ValidationError

from .config import MAX_TIMEOUT_SECONDS, MIN_TIMEOUT_SECONDS, AppConfig, load_config, save_config
from .engine import KeyboardEngine
from .errors import ExitCode, LayoutError, PaneboardError, user_facing_error
from .layout import Layout, default_layout, dump_layout, load_layout
from .logging import LOG_LEVELS, configure_logging, default_log_path, normalize_level
from .preview import SentKeyPreview
from .sender import LoggingPaneSender, PaneSender, TmuxPaneSender

logger = py_logging.getLogger(__name__)


def _log_level_type(value: str) -> str:
    normalized = normalize_level(value)
    if normalized is None:
        accepted = ", ".join(LOG_LEVELS)
        raise argparse.ArgumentTypeError(f"--log-level must be one of: {accepted}")
    return normalized


def _timeout_type(value: str) -> float:
    try:
        seconds = float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("--timeout must be a number") from exc
    if seconds < MIN_TIMEOUT_SECONDS or seconds > MAX_TIMEOUT_SECONDS:
        raise argparse.ArgumentTypeError(
            f"--timeout must be between {MIN_TIMEOUT_SECONDS} and {MAX_TIMEOUT_SECONDS}"
        )
    return seconds


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="paneboard",
        description="On-screen keyboard that sends keys to another tmux pane.",
    )
    parser.add_argument("--layout", type=Path, default=None, help="JSONC layout file")
    parser.add_argument("--target", default=None, help="tmux target pane (default: {last})")
    parser.add_argument("--config", type=Path, default=None, help="TOML config file")
    parser.add_argument("--timeout", type=_timeout_type, default=None, help="send-keys timeout in seconds")
    parser.add_argument("--dry-run", action="store_true", help="Log keys instead of sending them")
    parser.add_argument("--check-layout", action="store_true", help="Validate the layout and exit")
    parser.add_argument("--dump-layout", action="store_true", help="Print the effective layout as JSON")
    parser.add_argument("--write-config", action="store_true", help="Persist the effective config and exit")
    parser.add_argument("--log-level", type=_log_level_type, default=None)
    parser.add_argument("--log-file", type=Path, default=None)
    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = build_parser()
    return parser.parse_args(argv)


def resolve_config(namespace: argparse.Namespace) -> AppConfig:
    config = load_config(namespace.config)
    try:
        if namespace.layout is not None:
            config.layout_path = str(namespace.layout.expanduser())
        if namespace.target is not None:
            config.target_pane = namespace.target
        if namespace.timeout is not None:
            config.send_timeout_seconds = namespace.timeout
        if namespace.log_level is not None:
            config.log_level = namespace.log_level
    except ValidationError as exc:
        raise PaneboardError(
            "Invalid configuration value.",
            code=ExitCode.CONFIG_ERROR,
            hint=str(exc.errors()[0].get("msg", "Check command line values.")),
        ) from exc
    return config


def layout_loader(config: AppConfig) -> Callable[[], Layout]:
    if not config.layout_path:
        return default_layout
    path = Path(config.layout_path)
    return lambda: load_layout(path)


def resolve_layout(config: AppConfig, *, strict: bool) -> Layout:
    try:
        return layout_loader(config)()
    except LayoutError as exc:
        if strict or not config.fallback_to_default_layout:
            raise
        logger.error("layout-load failed path=%s error=%s; using built-in layout", config.layout_path, exc)
        print(user_facing_error(exc.message, hint="Using the built-in layout instead"), file=sys.stderr)
        return default_layout()


def layout_summary(layout: Layout) -> str:
    keys = sum(len(row) for row in layout.rows)
    return f"Layout '{layout.name}' OK: {len(layout.rows)} rows, {keys} keys, layers: {', '.join(layout.layers)}"


def build_engine(config: AppConfig, layout: Layout, *, dry_run: bool = False) -> KeyboardEngine:
    sender: PaneSender
    if dry_run:
        sender = LoggingPaneSender()
    else:
        sender = TmuxPaneSender(timeout_seconds=config.send_timeout_seconds)
    return KeyboardEngine(
        layout,
        sender=sender,
        target=config.target_pane,
        sticky_modifiers=config.sticky_modifier_set(),
        preview=SentKeyPreview() if config.preview_enabled else None,
        reloader=layout_loader(config),
    )


def launch_keyboard(engine: KeyboardEngine) -> int:
    from blessed import Terminal

    from paneboard.app import KeyboardApp
    from paneboard.terminal import BlessedInputSource, BlessedScreen

    term = Terminal()
    if not term.is_a_tty:
        raise PaneboardError(
            "paneboard needs an interactive terminal.",
            code=ExitCode.RUNTIME_ERROR,
            hint="Run it inside a tmux pane.",
        )
    screen = BlessedScreen(term)
    app = KeyboardApp(engine, input_source=BlessedInputSource(term, locate=screen.key_at), screen=screen)
    return app.run()


def _is_interactive(namespace: argparse.Namespace) -> bool:
    return not (namespace.check_layout or namespace.dump_layout or namespace.write_config)


def main(
    argv: Sequence[str] | None = None,
    *,
    app_runner: Callable[[KeyboardEngine], int | None] | None = None,
) -> int:
    log_path = default_log_path()
    logger = configure_logging(log_file=log_path)
    parser = build_parser()
    try:
        namespace = parser.parse_args(argv)
    except SystemExit as exc:
        if exc.code not in (None, 0):
            logger.warning("Argument parsing failed with exit code %s", exc.code)
        return int(exc.code or 0)

    if namespace.log_file is not None:
        log_path = namespace.log_file.expanduser()

    try:
        config = resolve_config(namespace)
        logger = configure_logging(
            level=config.log_level,
            log_file=log_path,
            console=not _is_interactive(namespace),
        )

        if namespace.write_config:
            written = save_config(config, namespace.config)
            logger.info("config-written path=%s", written)
            print(written)
            return int(ExitCode.SUCCESS)

        if namespace.check_layout or namespace.dump_layout:
            layout = resolve_layout(config, strict=True)
            if namespace.dump_layout:
                print(dump_layout(layout), end="")
            else:
                print(layout_summary(layout))
            return int(ExitCode.SUCCESS)

        layout = resolve_layout(config, strict=False)
        engine = build_engine(config, layout, dry_run=namespace.dry_run)
        logger.debug("Starting keyboard session dry_run=%s", namespace.dry_run)
        runner = app_runner or launch_keyboard
        result = runner(engine)
        if isinstance(result, int):
            return result
        return int(ExitCode.SUCCESS)
    except PaneboardError as exc:
        logger.error(
            "Handled PaneboardError (code=%s): %s",
            int(exc.code),
            exc.message,
            exc_info=logger.isEnabledFor(py_logging.DEBUG),
        )
        print(user_facing_error(exc.message, hint=exc.hint), file=sys.stderr)
        return int(exc.code)
    except Exception:
        logger.exception("Unhandled exception in CLI entrypoint")
        try:
            hint = f"Inspect logs: {log_path}"
            print(user_facing_error("Unexpected runtime failure", hint=hint), file=sys.stderr)
        except Exception:
            pass
        return int(ExitCode.RUNTIME_ERROR)


def run(argv: Sequence[str] | None = None) -> int:
    return main(argv)
