#!/usr/bin/env python3
# Copyright (C) 2026 Alex Stoyanov
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License along with this program.
# If not, see <https://www.gnu.org/licenses/>.


from __future__ import annotations

import sys

import typer
from rich.markup import escape
from rich.traceback import install as install_rich_traceback

from ..config import init_user_config, user_config_needs_init
from . import command_registry
from .core.common import _get_version
from .ui import configure_ui, console, console_err, isatty

app = typer.Typer(add_completion=False, help="Encrypted directory backup and restore.")


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"cryptobackup {_get_version()}")
        raise typer.Exit()


def _init_config_callback(value: bool) -> None:
    if not value:
        return
    try:
        config_dir = init_user_config()
    except OSError as exc:
        console_err.print(f"[error]Error:[/error] {escape(str(exc))}")
        raise typer.Exit(code=2)
    console.print(f"User config ready at [path]{escape(str(config_dir))}[/path]")
    raise typer.Exit()


def _prepare_environment(
    *,
    quiet: bool,
    no_color: bool,
    no_animations: bool,
    debug: bool,
) -> None:
    configure_ui(no_color=no_color, no_animations=no_animations)
    if debug:
        install_rich_traceback(show_locals=True)
    if user_config_needs_init():
        config_dir = init_user_config()
        if not quiet:
            console.print(f"[muted]Initialized user config at {escape(str(config_dir))}[/muted]")


@app.callback(invoke_without_command=True)
def cli(
    ctx: typer.Context,
    config: str | None = typer.Option(
        None,
        "--config",
        help="Use this TOML config file.",
        rich_help_panel="Global",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Show full tracebacks on errors.",
        rich_help_panel="Debug",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        help="Hide progress and summaries.",
        rich_help_panel="Global",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable colored output.",
        rich_help_panel="Accessibility",
    ),
    no_animations: bool = typer.Option(
        False,
        "--no-animations",
        help="Drop the spinner and transfer speed from progress bars.",
        rich_help_panel="Accessibility",
    ),
    init_config: bool = typer.Option(
        False,
        "--init-config",
        help="Write the default config.toml to the user config directory and exit.",
        callback=_init_config_callback,
        is_eager=True,
        rich_help_panel="Config",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
        rich_help_panel="Info",
    ),
) -> None:
    _ = init_config, version
    try:
        _prepare_environment(
            quiet=quiet,
            no_color=no_color,
            no_animations=no_animations,
            debug=debug,
        )
    except OSError as exc:
        console_err.print(f"[error]Error:[/error] {escape(str(exc))}")
        raise typer.Exit(code=2)
    ctx.obj = {"config": config, "debug": debug, "quiet": quiet}
    if ctx.invoked_subcommand is None:
        if not isatty(sys.stdin):
            console_err.print(
                "[error]Error:[/error] No subcommand provided. "
                "Run `cryptobackup --help` for usage."
            )
            raise typer.Exit(code=2)
        console.print(ctx.get_help())


command_registry.register(app)


def main() -> None:
    app()
