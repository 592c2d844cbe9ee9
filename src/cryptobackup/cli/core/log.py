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

from collections.abc import Iterable

from rich.markup import escape

from ...core.models import ReplicationFailure
from ..ui import console_err


def _warn(message: str, *, quiet: bool) -> None:
    if quiet:
        return
    console_err.print(f"[partial]Warning:[/partial] {escape(message)}")


def _report_failures(failures: Iterable[ReplicationFailure]) -> int:
    """Print every per-entry failure; these are shown even in quiet mode."""
    count = 0
    for failure in failures:
        console_err.print(
            f"[error]Error:[/error] {escape(failure.path)} "
            f"[muted]({failure.kind})[/muted] {escape(failure.message)}"
        )
        count += 1
    return count
