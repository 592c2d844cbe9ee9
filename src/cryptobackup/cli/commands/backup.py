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
from ..core.types import BackupArgs
from ..flows.backup import run_backup_command

_BACKUP_HELP = (
    "Encrypt source directories into a new backup tree.\n\n"
    "Examples:\n"
    "  cryptobackup backup --source ~/docs --destination /mnt/backups\n"
    "  cryptobackup backup -s ~/docs -s ~/photos --no-timestamp -d /mnt/backups/latest\n"
)


def register(app: typer.Typer) -> None:
    app.command(help=_BACKUP_HELP)(backup)


def backup(
    ctx: typer.Context,
    source: list[Path] | None = typer.Option(
        None,
        "--source",
        "-s",
        help="Directory to back up (repeatable; default: backup.directories).",
        rich_help_panel="Inputs",
    ),
    destination: str | None = typer.Option(
        None,
        "--destination",
        "-d",
        help="Directory that receives the backup (default: backup.destination).",
        rich_help_panel="Outputs",
    ),
    timestamped: bool | None = typer.Option(
        None,
        "--timestamp/--no-timestamp",
        help="Write into a fresh backup-<timestamp> directory under the destination.",
        show_default=False,
        rich_help_panel="Outputs",
    ),
    force: bool = typer.Option(
        False,
        "--force",
        help="Overwrite an existing metadata file in the destination.",
        rich_help_panel="Outputs",
    ),
    passphrase: str | None = typer.Option(
        None,
        "--passphrase",
        help=f"Passphrase to encrypt with (or set {PASSPHRASE_ENV}).",
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
    args = BackupArgs(
        config=config or _ctx_value(ctx, "config"),
        source=[str(path) for path in (source or [])],
        destination=destination,
        timestamped=timestamped,
        passphrase=passphrase,
        force=force,
        debug=debug_value,
        quiet=quiet or bool(_ctx_value(ctx, "quiet")),
    )
    _run_cli(functools.partial(run_backup_command, args), debug=debug_value)
