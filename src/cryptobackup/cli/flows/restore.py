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

from pathlib import Path

from ...config import load_app_config
from ...core.bounds import FRAME_OVERHEAD
from ...formats.metadata import read_metadata
from ..core.common import _resolve_passphrase
from ..core.log import _report_failures, _warn
from ..core.types import InfoArgs, RestoreArgs
from ..io.events import ReplicationTracker, plaintext_bytes
from ..ui import configure_ui, transfer_progress
from ..ui.summary import print_metadata_info, print_restore_summary
from .restore_flow import list_backup_trees, run_restore, select_trees


def _restore_total(backup_root: str, only: list[str] | None) -> int | None:
    """Plaintext size of the selected trees, or None when it cannot be known yet."""
    try:
        trees = select_trees(list_backup_trees(Path(backup_root)), only or None)
    except (OSError, ValueError):
        return None
    return plaintext_bytes(trees, overhead=FRAME_OVERHEAD)


def run_restore_command(args: RestoreArgs) -> int:
    config = load_app_config(args.config)
    configure_ui(no_color=config.ui.no_color, no_animations=config.ui.no_animations)
    quiet = args.quiet or config.ui.quiet
    passphrase = _resolve_passphrase(args.passphrase, confirm=False)
    total = None if quiet else _restore_total(args.backup_root, args.only)
    with transfer_progress(quiet=quiet, byte_units=config.ui.byte_units) as progress_bar:
        tracker = ReplicationTracker(progress_bar, "Decrypting", total_bytes=total)
        result = run_restore(
            args.backup_root,
            args.output,
            passphrase,
            only=args.only or None,
            on_event=tracker,
        )
    if not result.trees:
        _warn(f"no backed-up trees found in {result.backup_root}", quiet=quiet)
    _report_failures(result.failures)
    print_restore_summary(result, units=config.ui.byte_units, quiet=quiet)
    return 0 if result.ok else 1


def run_info_command(args: InfoArgs) -> int:
    record = read_metadata(args.backup_root)
    print_metadata_info(args.backup_root, record)
    return 0
