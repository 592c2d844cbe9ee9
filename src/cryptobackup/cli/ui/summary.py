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

from datetime import datetime

from rich.markup import escape

from ...core.models import RunStatistics
from ...crypto.kdf import KDF_NAME
from ...formats.metadata import BackupMetadata
from ..core.types import BackupResult, RestoreResult, TreeOutcome
from . import build_kv_table, console, panel

_BINARY_UNITS = ("B", "KiB", "MiB", "GiB", "TiB", "PiB")
_DECIMAL_UNITS = ("B", "kB", "MB", "GB", "TB", "PB")


def format_bytes(count: int | float, *, units: str = "binary") -> str:
    if units == "binary":
        base, names = 1024.0, _BINARY_UNITS
    elif units == "decimal":
        base, names = 1000.0, _DECIMAL_UNITS
    else:
        raise ValueError(f"unknown byte units: {units}")
    value = float(count)
    if value < base:
        return f"{int(value)} B"
    index = 0
    while value >= base and index < len(names) - 1:
        value /= base
        index += 1
    return f"{value:.1f} {names[index]}"


def format_duration(seconds: float) -> str:
    if seconds < 1:
        return f"{seconds * 1000:.0f} ms"
    if seconds < 60:
        return f"{seconds:.2f} s"
    minutes, secs = divmod(int(round(seconds)), 60)
    hours, minutes = divmod(minutes, 60)
    if hours:
        return f"{hours}h {minutes:02d}m {secs:02d}s"
    return f"{minutes}m {secs:02d}s"


def format_throughput(bytes_per_second: float, *, units: str = "binary") -> str:
    return f"{format_bytes(bytes_per_second, units=units)}/s"


def _count_rows(stats: RunStatistics) -> list[tuple[str, str]]:
    return [
        ("Files", str(stats.files)),
        ("Directories", str(stats.directories)),
        ("Symlinks", str(stats.symlinks)),
    ]


def _trees_value(trees: tuple[TreeOutcome, ...]) -> str:
    if not trees:
        return "none"
    return ", ".join(escape(tree.name) for tree in trees)


def print_backup_summary(result: BackupResult, *, units: str, quiet: bool) -> None:
    if quiet:
        return
    stats = result.statistics
    rows = [
        ("Backup", escape(str(result.run_root))),
        ("Metadata", escape(str(result.metadata_path))),
        ("Trees", _trees_value(result.trees)),
        ("Encrypted", format_bytes(stats.bytes_processed, units=units)),
        ("Elapsed", format_duration(stats.elapsed_seconds)),
        ("Throughput", format_throughput(stats.throughput, units=units)),
        *_count_rows(stats),
        ("Failures", str(stats.failures)),
    ]
    style = "ok" if result.ok else "partial"
    console.print(panel("Backup summary", build_kv_table(rows), style=style))


def print_restore_summary(result: RestoreResult, *, units: str, quiet: bool) -> None:
    if quiet:
        return
    stats = result.statistics
    rows = [
        ("Backup", escape(str(result.backup_root))),
        ("Output", escape(str(result.output_dir))),
        ("Trees", _trees_value(result.trees)),
        ("Decrypted", format_bytes(stats.bytes_processed, units=units)),
        ("Elapsed", format_duration(stats.elapsed_seconds)),
        ("Throughput", format_throughput(stats.throughput, units=units)),
        *_count_rows(stats),
        ("Failures", str(stats.failures)),
    ]
    style = "ok" if result.ok else "partial"
    console.print(panel("Restore summary", build_kv_table(rows), style=style))


def print_metadata_info(root: str, record: BackupMetadata) -> None:
    created = datetime.fromtimestamp(record.created_at).astimezone()
    rows = [
        ("Backup", escape(root)),
        ("Version", str(record.version)),
        ("Created", created.isoformat(timespec="seconds")),
        ("Cipher", record.cipher),
        ("KDF", KDF_NAME),
        ("Time cost", str(record.kdf.time_cost)),
        ("Memory cost", f"{record.kdf.memory_cost} KiB"),
        ("Parallelism", str(record.kdf.parallelism)),
        ("Key length", f"{record.key_length} bytes"),
        ("Salt", record.salt.hex()),
    ]
    for name, path in sorted(record.sources.items()):
        rows.append((f"Source {escape(name)}", escape(path)))
    console.print(panel("Backup metadata", build_kv_table(rows)))
