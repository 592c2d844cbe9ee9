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

import functools
from pathlib import Path

import typer

from ..core.common import PASSPHRASE_ENV, _ctx_value, _run_cli
from ..core.types import RestoreArgs
from ..flows.restore import run_restore_command

_RESTORE_HELP = (
    "Decrypt a backup tree into an output directory.\n\n"
    "Examples:\n"
    "  cryptobackup restore /mnt/backups/backup-2026-01-01T10:00:00+0000 -o ~/restored\n"
    "  cryptobackup restore /mnt/backups/latest -o ~/restored --only docs\n"
)


def register(app: typer.Typer) -> None:
    app.command(help=_RESTORE_HELP)(restore)


def restore(
    ctx: typer.Context,
    backup_root: Path = typer.Argument(
        ...,
        help="Backup run directory (the one holding cryptobackup.info).",
        show_default=False,
    ),
    output: Path = typer.Option(
        ...,
        "--output",
        "-o",
        help="Directory to restore into.",
        rich_help_panel="Outputs",
    ),
    only: list[str] | None = typer.Option(
        None,
        "--only",
        help="Restore only this top-level tree (repeatable).",
        rich_help_panel="Inputs",
    ),
    passphrase: str | None = typer.Option(
        None,
        "--passphrase",
        help=f"Passphrase to decrypt with (or set {PASSPHRASE_ENV}).",
        rich_help_panel="Encryption",
    ),
    config: str | None = typer.Option(
        None,
        "--config",
        help="Use this config file.",
        rich_help_panel="Config",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        help="Hide non-error output.",
        rich_help_panel="Behavior",
    ),
) -> None:
    debug_value = bool(_ctx_value(ctx, "debug"))
    args = RestoreArgs(
        backup_root=str(backup_root),
        output=str(output),
        only=list(only or []),
        config=config or _ctx_value(ctx, "config"),
        passphrase=passphrase,
        debug=debug_value,
        quiet=quiet or bool(_ctx_value(ctx, "quiet")),
    )
    _run_cli(functools.partial(run_restore_command, args), debug=debug_value)
