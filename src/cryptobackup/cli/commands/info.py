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

from ..core.common import _ctx_value, _run_cli
from ..core.types import InfoArgs
from ..flows.restore import run_info_command


def register(app: typer.Typer) -> None:
    app.command(help="Show the metadata record of a backup.")(info)


def info(
    ctx: typer.Context,
    backup_root: Path = typer.Argument(
        ...,
        help="Backup run directory (the one holding cryptobackup.info).",
        show_default=False,
    ),
) -> None:
    debug_value = bool(_ctx_value(ctx, "debug"))
    args = InfoArgs(backup_root=str(backup_root), debug=debug_value)
    _run_cli(functools.partial(run_info_command, args), debug=debug_value)
