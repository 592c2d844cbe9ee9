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

"""Shared consoles, theme and transfer progress for the backup commands."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from contextlib import contextmanager

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    ProgressColumn,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
    TransferSpeedColumn,
)
from rich.table import Table
from rich.theme import Theme

THEME = Theme(
    {
        "accent": "cyan",
        "path": "bold blue",
        "ok": "green",
        "partial": "yellow",
        "error": "red",
        "muted": "dim",
    }
)

console = Console(theme=THEME)
console_err = Console(theme=THEME, stderr=True)

_STATE = {"animations": True}


def isatty(stream) -> bool:
    try:
        return bool(stream.isatty())
    except (OSError, ValueError, AttributeError):
        return False


def configure_ui(*, no_color: bool = False, no_animations: bool = False) -> None:
    """Turn color or animations off.

    Switches only ever disable, so a config file cannot undo ``--no-color``.
    """
    if no_color:
        console.no_color = True
        console_err.no_color = True
    if no_animations:
        _STATE["animations"] = False


def animations_enabled() -> bool:
    return _STATE["animations"]


def _transfer_columns(*, byte_units: str) -> list[ProgressColumn]:
    columns: list[ProgressColumn] = [
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        DownloadColumn(binary_units=byte_units == "binary"),
        TextColumn("[muted]{task.fields[files]} files"),
    ]
    if animations_enabled():
        columns.insert(0, SpinnerColumn(style="accent"))
        columns.extend((TransferSpeedColumn(), TimeElapsedColumn()))
    return columns


@contextmanager
def transfer_progress(*, quiet: bool, byte_units: str = "binary") -> Iterator[Progress | None]:
    """Progress display counting plaintext bytes and finished files.

    Yields ``None`` when quiet. Off a terminal the display is disabled but
    still accepts updates.
    """
    if quiet:
        yield None
        return
    progress = Progress(
        *_transfer_columns(byte_units=byte_units),
        console=console,
        transient=True,
        refresh_per_second=10 if animations_enabled() else 2,
        disable=not console.is_terminal,
    )
    with progress:
        yield progress


def build_kv_table(rows: Sequence[tuple[str, str]], *, title: str | None = None) -> Table:
    table = Table(title=title, show_header=False, box=box.SIMPLE, show_lines=False)
    table.add_column("Field", style="bold", no_wrap=True)
    table.add_column("Value")
    for key, value in rows:
        table.add_row(str(key), str(value))
    return table


def panel(title: str, renderable, *, style: str = "accent") -> Panel:
    return Panel(
        renderable,
        title=title,
        title_align="left",
        border_style=style,
        box=box.ROUNDED,
        padding=(1, 2),
    )


__all__ = [
    "THEME",
    "animations_enabled",
    "build_kv_table",
    "configure_ui",
    "console",
    "console_err",
    "isatty",
    "panel",
    "transfer_progress",
]
