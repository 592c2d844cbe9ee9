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

import os
import stat
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from rich.markup import escape
from rich.progress import Progress, TaskID

from ...core.models import EntryKind, ReplicationEvent


def plaintext_bytes(roots: Iterable[Path], *, overhead: int = 0) -> int:
    """Sum regular file sizes below ``roots``, less ``overhead`` per file.

    Used only to size the progress bar, so unreadable entries are skipped.
    """
    total = 0
    for root in roots:
        for dirpath, _dirnames, filenames in os.walk(root):
            for name in filenames:
                try:
                    st = os.lstat(os.path.join(dirpath, name))
                except OSError:
                    continue
                if stat.S_ISREG(st.st_mode):
                    total += max(st.st_size - overhead, 0)
    return total


@dataclass
class ReplicationTracker:
    """Feeds replication events into a transfer progress display."""

    progress: Progress | None
    label: str
    total_bytes: int | None = None
    task_id: TaskID | None = None
    files: int = 0
    bytes_done: int = 0

    def __post_init__(self) -> None:
        if self.progress is not None:
            self.task_id = self.progress.add_task(self.label, total=self.total_bytes, files=0)

    def __call__(self, event: ReplicationEvent) -> None:
        if event.failure is None and event.kind is EntryKind.FILE:
            self.files += 1
            self.bytes_done += event.size
        if self.progress is None or self.task_id is None:
            return
        self.progress.update(
            self.task_id,
            completed=self.bytes_done,
            files=self.files,
            description=f"{self.label} {escape(_short_name(event.path))}",
        )


def _short_name(path: str, *, limit: int = 48) -> str:
    if len(path) <= limit:
        return path
    return "..." + path[-(limit - 3):]
