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
import time
from datetime import datetime
from pathlib import Path

from ...core.bounds import KEY_LEN
from ...core.models import ReplicationResult, RunStatistics
from ...core.validation import path_is_within, require_entry_name
from ...crypto.kdf import derive_key
from ...crypto.stream import StreamCipher
from ...formats.metadata import METADATA_FILENAME, BackupMetadata, write_metadata
from ...tree.replicator import EventCallback, replicate_tree
from ..core.types import BackupPlan, BackupResult, TreeOutcome

RUN_DIR_PREFIX = "backup-"
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S%z"


def backup_run_root(
    destination: Path,
    *,
    timestamped: bool,
    now: datetime | None = None,
) -> Path:
    if not timestamped:
        return destination
    moment = now or datetime.now().astimezone()
    return destination / f"{RUN_DIR_PREFIX}{moment.strftime(TIMESTAMP_FORMAT)}"


def source_tree_name(path: Path) -> str:
    resolved = Path(os.path.abspath(path))
    return resolved.name or "root"


def plan_targets(sources: tuple[Path, ...] | list[Path]) -> list[tuple[str, Path]]:
    """Pair each source with the name of its subtree under the run root."""
    if not sources:
        raise ValueError("no source directories configured")
    targets: list[tuple[str, Path]] = []
    seen: dict[str, Path] = {}
    for raw in sources:
        configured = Path(os.path.abspath(Path(raw).expanduser()))
        name = require_entry_name(source_tree_name(configured), label="source name")
        # A source given as a symlink to a directory is backed up under the link name.
        source = Path(os.path.realpath(configured))
        if name == METADATA_FILENAME:
            raise ValueError(f"source name collides with the metadata file: {source}")
        if name in seen:
            raise ValueError(f"duplicate source name '{name}' from {seen[name]} and {source}")
        seen[name] = source
        targets.append((name, source))
    return targets


def run_backup(
    plan: BackupPlan,
    passphrase: str,
    *,
    on_event: EventCallback | None = None,
    now: datetime | None = None,
) -> BackupResult:
    targets = plan_targets(plan.sources)
    destination = Path(os.path.abspath(plan.destination.expanduser()))
    run_root = backup_run_root(destination, timestamped=plan.timestamped, now=now)
    for _name, source in targets:
        if not plan.timestamped and path_is_within(Path(os.path.realpath(run_root)), source):
            raise ValueError(
                f"destination {run_root} is inside source {source}; "
                "use a timestamped run or another destination"
            )

    key, salt = derive_key(passphrase, None, KEY_LEN, params=plan.kdf)
    run_root.mkdir(parents=True, exist_ok=True)
    record = BackupMetadata(
        salt=salt,
        kdf=plan.kdf,
        key_length=len(key),
        sources={name: str(source) for name, source in targets},
    )
    metadata_file = write_metadata(record, run_root, overwrite=plan.overwrite)

    started = time.monotonic()
    total = ReplicationResult()
    trees: list[TreeOutcome] = []
    with StreamCipher.new_for_encryption(key) as cipher:
        for name, source in targets:
            target = run_root / name
            result = replicate_tree(
                source,
                target,
                cipher,
                on_event=on_event,
                exclude=(run_root, target),
            )
            trees.append(TreeOutcome(name=name, source=source, target=target, result=result))
            total.merge(result)
    elapsed = time.monotonic() - started

    return BackupResult(
        run_root=run_root,
        metadata_path=metadata_file,
        trees=tuple(trees),
        statistics=RunStatistics.from_result(total, elapsed_seconds=elapsed),
        failures=tuple(total.failures),
    )