"""CLI entry point for kanban-tui."""

from __future__ import annotations

# Python version check - must be before any imports that use 3.12+ syntax.
import sys

if sys.version_info < (3, 12):  # noqa: UP036
    print("Error: kanban-tui requires Python 3.12 or higher.")
    print(
        "You are running Python {}.{}".format(  # noqa: UP032
            sys.version_info.major, sys.version_info.minor
        )
    )
    sys.exit(1)

_original_unraisablehook = sys.unraisablehook


def _suppress_event_loop_closed(unraisable: sys.UnraisableHookArgs) -> None:
    """Suppress 'Event loop is closed' errors from asyncio cleanup."""
    if isinstance(unraisable.exc_value, RuntimeError) and "Event loop is closed" in str(
        unraisable.exc_value
    ):
        return
    _original_unraisablehook(unraisable)


# Workaround for Py3.12 asyncio cleanup errors (fixed in 3.13.1+).
sys.unraisablehook = _suppress_event_loop_closed


import logging  # noqa: E402
from pathlib import Path  # noqa: E402

import click  # noqa: E402

from kanban_tui import __version__  # noqa: E402
from kanban_tui.paths import (  # noqa: E402
    get_config_path,
    get_debug_log_path,
    get_session_path,
    get_themes_dir,
)


@click.group(invoke_without_command=True)
@click.option("--version", is_flag=True, help="Show version and exit")
@click.pass_context
def cli(ctx: click.Context, version: bool) -> None:
    """Keyboard and mouse driven kanban boards for the terminal."""
    if version:
        click.echo(f"kanban-tui {__version__}")
        ctx.exit(0)

    if ctx.invoked_subcommand is None:
        ctx.invoke(tui)


@cli.command()
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to config.json (defaults to the user config directory)",
)
@click.option(
    "--save-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Override the save directory for this run",
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    is_flag=False,
    flag_value=str(get_debug_log_path()),
    help="Write the in-app log to a file on exit (default: data dir debug.log)",
)
@click.option("--debug", is_flag=True, envvar="KANBAN_TUI_DEBUG", help="Enable debug mode")
def tui(
    config_path: Path | None, save_dir: Path | None, log_file: Path | None, debug: bool
) -> None:
    """Run the kanban TUI (default command)."""
    from kanban_tui.app import KanbanApp
    from kanban_tui.config import load_config
    from kanban_tui.controller import Controller
    from kanban_tui.debug_log import export_logs_to_file, setup_debug_logging
    from kanban_tui.storage.cloud import InMemoryCloudClient
    from kanban_tui.themes import all_themes

    setup_debug_logging(logging.DEBUG if debug else logging.INFO)

    path = config_path or get_config_path()
    loaded = load_config(path)
    config = loaded.config
    changes: dict[str, object] = {}
    if save_dir is not None:
        changes["save_directory"] = save_dir
    if debug:
        changes["debug_mode"] = True
    if changes:
        config = config.with_values(**changes)

    themes_dir = get_themes_dir()
    controller = Controller(
        config,
        themes=all_themes(themes_dir),
        config_path=path,
        themes_dir=themes_dir,
        session_path=get_session_path(),
        config_error=loaded.error,
    )
    app = KanbanApp(controller, cloud=InMemoryCloudClient())
    app.run()

    if log_file is not None:
        count = export_logs_to_file(log_file)
        click.echo(f"Wrote {count} log entries to {log_file}")


@cli.command()
def themes() -> None:
    """List built-in and user themes."""
    from kanban_tui.themes import all_themes

    for theme in all_themes(get_themes_dir()):
        click.echo(theme.name)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
