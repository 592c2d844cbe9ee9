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
from pathlib import Path

from ...config import AppConfig
from .types import BackupArgs, BackupPlan


def plan_from_args(args: BackupArgs, config: AppConfig) -> BackupPlan:
    raw_sources = list(args.source) if args.source else list(config.backup.directories)
    if not raw_sources:
        raise ValueError(
            "no source directories: pass --source DIR or set backup.directories in "
            f"{config.path}"
        )
    sources = tuple(_absolute(raw) for raw in raw_sources)
    destination = _absolute(args.destination or config.backup.destination)
    timestamped = config.backup.timestamped if args.timestamped is None else args.timestamped
    return BackupPlan(
        sources=sources,
        destination=destination,
        timestamped=timestamped,
        kdf=config.kdf,
        overwrite=args.force,
    )


def _absolute(raw: str) -> Path:
    return Path(os.path.abspath(Path(raw).expanduser()))
