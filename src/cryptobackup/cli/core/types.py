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

from dataclasses import dataclass, field
from pathlib import Path

from ...core.models import ReplicationFailure, ReplicationResult, RunStatistics
from ...crypto.kdf import DEFAULT_KDF_PARAMS, KdfParams


@dataclass(frozen=True)
class BackupPlan:
    sources: tuple[Path, ...]
    destination: Path
    timestamped: bool = True
    kdf: KdfParams = DEFAULT_KDF_PARAMS
    overwrite: bool = False


@dataclass(frozen=True)
class TreeOutcome:
    name: str
    source: Path
    target: Path
    result: ReplicationResult


@dataclass(frozen=True)
class BackupResult:
    run_root: Path
    metadata_path: Path
    trees: tuple[TreeOutcome, ...]
    statistics: RunStatistics
    failures: tuple[ReplicationFailure, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.failures


@dataclass(frozen=True)
class RestoreResult:
    backup_root: Path
    output_dir: Path
    trees: tuple[TreeOutcome, ...]
    statistics: RunStatistics
    failures: tuple[ReplicationFailure, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.failures


@dataclass
class BackupArgs:
    """Typed container for backup command arguments."""

    config: str | None = None
    source: list[str] = field(default_factory=list)
    destination: str | None = None
    timestamped: bool | None = None
    passphrase: str | None = None
    force: bool = False
    debug: bool = False
    quiet: bool = False


@dataclass
class RestoreArgs:
    """Typed container for restore command arguments."""

    backup_root: str = ""
    output: str = ""
    only: list[str] = field(default_factory=list)
    config: str | None = None
    passphrase: str | None = None
    debug: bool = False
    quiet: bool = False


@dataclass
class InfoArgs:
    backup_root: str = ""
    debug: bool = False
