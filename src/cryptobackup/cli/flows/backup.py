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

from ...config import load_app_config
from ..core.common import _resolve_passphrase
from ..core.log import _report_failures
from ..core.plan import plan_from_args
from ..core.types import BackupArgs
from ..io.events import ReplicationTracker, plaintext_bytes
from ..ui import configure_ui, transfer_progress
from ..ui.summary import print_backup_summary
from .backup_flow import run_backup


def run_backup_command(args: BackupArgs) -> int:
    config = load_app_config(args.config)
    configure_ui(no_color=config.ui.no_color, no_animations=config.ui.no_animations)
    quiet = args.quiet or config.ui.quiet
    plan = plan_from_args(args, config)
    passphrase = _resolve_passphrase(args.passphrase, confirm=True)
    total = None if quiet else plaintext_bytes(plan.sources)
    with transfer_progress(quiet=quiet, byte_units=config.ui.byte_units) as progress_bar:
        tracker = ReplicationTracker(progress_bar, "Encrypting", total_bytes=total)
        result = run_backup(plan, passphrase, on_event=tracker)
    _report_failures(result.failures)
    print_backup_summary(result, units=config.ui.byte_units, quiet=quiet)
    return 0 if result.ok else 1
