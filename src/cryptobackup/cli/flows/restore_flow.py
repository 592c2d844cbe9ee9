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
from collections.abc import Sequence
from pathlib import Path

from ...core.models import ReplicationResult, RunStatistics
from ...core.validation import paths_overlap
from ...crypto.kdf import derive_key
from ...crypto.stream import StreamCipher
from ...formats.metadata import read_metadata
from ...tree.replicator import EventCallback, replicate_tree
from ..core.types import RestoreResult, TreeOutcome


def list_backup_trees(backup_root: Path) -> list[Path]:
    """Top-level replicated subtrees of a backup run, sorted by name."""
    trees = [
        child
        for child in backup_root.iterdir()
        if child.is_dir() and not child.is_symlink()
    ]
    return sorted(trees, key=lambda item: item.name)


def select_trees(trees: list[Path], only: Sequence[str] | None) -> list[Path]:
    if not only:
        return trees
    available = {tree.name: tree for tree in trees}
    unknown = sorted(set(only) - set(available))
    if unknown:
        names = ", ".join(unknown)
        raise ValueError(f"not found in backup: {names}")
    return [tree for tree in trees if tree.name in set(only)]


def check_restore_targets(root: Path, output: Path, trees: Sequence[Path]) -> None:
    """Refuse output locations that would write into the backup being read."""
    for tree in trees:
        target = output / tree.name
        if paths_overlap(target, root):
            raise ValueError(
                f"restore target {target} overlaps the backup at {root}; "
                "choose an output directory outside the backup"
            )


def run_restore(
    backup_root: str | os.PathLike[str],
    output_dir: str | os.PathLike[str],
    passphrase: str,
    *,
    only: Sequence[str] | None = None,
    on_event: EventCallback | None = None,
) -> RestoreResult:
    root = Path(os.path.realpath(Path(backup_root).expanduser()))
    output = Path(os.path.realpath(Path(output_dir).expanduser()))
    metadata = read_metadata(root)
    trees = select_trees(list_backup_trees(root), only)
    check_restore_targets(root, output, trees)

    key, _salt = derive_key(
        passphrase,
        metadata.salt,
        metadata.key_length,
        params=metadata.kdf,
    )
    output.mkdir(parents=True, exist_ok=True)

    started = time.monotonic()
    total = ReplicationResult()
    outcomes: list[TreeOutcome] = []
    with StreamCipher.new_for_decryption(key) as cipher:
        for tree in trees:
            target = output / tree.name
            result = replicate_tree(tree, target, cipher, on_event=on_event, exclude=(output,))
            outcomes.append(TreeOutcome(name=tree.name, source=tree, target=target, result=result))
            total.merge(result)
    elapsed = time.monotonic() - started

    return RestoreResult(
        backup_root=root,
        output_dir=output,
        trees=tuple(outcomes),
        statistics=RunStatistics.from_result(total, elapsed_seconds=elapsed),
        failures=tuple(total.failures),
    )
