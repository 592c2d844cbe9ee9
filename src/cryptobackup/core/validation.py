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

import base64
import binascii
from pathlib import Path
from typing import Any


def require_dict(value: object, *, label: str) -> dict[str, Any]:
    """Validate that value is a dict."""
    if not isinstance(value, dict):
        raise ValueError(f"{label} must be an object")
    return value


def require_keys(mapping: dict[str, Any], keys: tuple[str, ...], *, label: str) -> None:
    """Validate that all keys are present in mapping."""
    for key in keys:
        if key not in mapping:
            raise ValueError(f"{label} {key} is required")


def require_positive_int(value: object, *, label: str) -> int:
    """Validate that value is a positive integer (> 0), rejecting bools."""
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValueError(f"{label} must be a positive int")
    return value


def require_str(value: object, *, label: str) -> str:
    if not isinstance(value, str) or not value:
        raise ValueError(f"{label} must be a non-empty string")
    return value


def decode_b64_field(value: object, *, label: str) -> bytes:
    """Decode a strict base64 string field."""
    text = require_str(value, label=label)
    try:
        return base64.b64decode(text.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError) as exc:
        raise ValueError(f"{label} must be valid base64") from exc


def encode_b64_field(value: bytes) -> str:
    return base64.b64encode(value).decode("ascii")


def require_entry_name(name: str, *, label: str = "name") -> str:
    """Validate a single path component used as a top-level backup entry."""
    if not name or name in {".", ".."}:
        raise ValueError(f"{label} must be a non-empty path component")
    if "/" in name or "\\" in name or "\x00" in name:
        raise ValueError(f"{label} must not contain path separators: {name!r}")
    return name


def path_is_within(path: Path, parent: Path) -> bool:
    """True when ``path`` is ``parent`` or lies below it (lexically)."""
    try:
        path.relative_to(parent)
    except ValueError:
        return False
    return True


def paths_overlap(first: Path, second: Path) -> bool:
    return path_is_within(first, second) or path_is_within(second, first)
