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

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal, cast

from ..crypto.kdf import DEFAULT_KDF_PARAMS, KdfParams
from .installer import resolve_config_path

ByteUnits = Literal["binary", "decimal"]

DEFAULT_DESTINATION = "~"


@dataclass(frozen=True)
class BackupDefaults:
    directories: tuple[str, ...] = ()
    destination: str = DEFAULT_DESTINATION
    timestamped: bool = True


@dataclass(frozen=True)
class UiDefaults:
    quiet: bool = False
    no_color: bool = False
    no_animations: bool = False
    byte_units: ByteUnits = "binary"


@dataclass(frozen=True)
class AppConfig:
    path: Path
    backup: BackupDefaults = field(default_factory=BackupDefaults)
    kdf: KdfParams = DEFAULT_KDF_PARAMS
    ui: UiDefaults = field(default_factory=UiDefaults)


def load_app_config(path: str | Path | None = None) -> AppConfig:
    config_path = resolve_config_path(path)
    data = _load_toml(config_path)
    return AppConfig(
        path=config_path,
        backup=_parse_backup_defaults(_get_dict(data, "backup")),
        kdf=_parse_kdf_params(_get_dict(data, "kdf")),
        ui=_parse_ui_defaults(_get_dict(data, "ui")),
    )


def _parse_backup_defaults(cfg: dict[str, object]) -> BackupDefaults:
    return BackupDefaults(
        directories=_parse_directories(cfg.get("directories"), field="backup.directories"),
        destination=(
            _parse_optional_str(cfg.get("destination"), field="backup.destination")
            or DEFAULT_DESTINATION
        ),
        timestamped=_parse_bool(cfg.get("timestamped"), field="backup.timestamped", default=True),
    )


def _parse_kdf_params(cfg: dict[str, object]) -> KdfParams:
    return KdfParams(
        time_cost=_parse_positive_int(
            cfg.get("time_cost"),
            field="kdf.time_cost",
            default=DEFAULT_KDF_PARAMS.time_cost,
        ),
        memory_cost=_parse_positive_int(
            cfg.get("memory_cost"),
            field="kdf.memory_cost",
            default=DEFAULT_KDF_PARAMS.memory_cost,
        ),
        parallelism=_parse_positive_int(
            cfg.get("parallelism"),
            field="kdf.parallelism",
            default=DEFAULT_KDF_PARAMS.parallelism,
        ),
    )


def _parse_ui_defaults(cfg: dict[str, object]) -> UiDefaults:
    return UiDefaults(
        quiet=_parse_bool(cfg.get("quiet"), field="ui.quiet", default=False),
        no_color=_parse_bool(cfg.get("no_color"), field="ui.no_color", default=False),
        no_animations=_parse_bool(
            cfg.get("no_animations"),
            field="ui.no_animations",
            default=False,
        ),
        byte_units=_parse_byte_units(cfg.get("byte_units"), field="ui.byte_units"),
    )


def _load_toml(path: Path) -> dict[str, object]:
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"invalid config file {path}: {exc}") from exc


def _get_dict(data: dict[str, object], key: str) -> dict[str, object]:
    value = data.get(key)
    if isinstance(value, dict):
        return value
    return {}


def _parse_directories(value: object, *, field: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, list):
        raise ValueError(f"{field} must be a list of paths")
    directories: list[str] = []
    for item in value:
        if not isinstance(item, str) or not item.strip():
            raise ValueError(f"{field} entries must be non-empty strings")
        directories.append(item.strip())
    return tuple(directories)


def _parse_optional_str(value: object, *, field: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"{field} must be a string")
    normalized = value.strip()
    return normalized or None


def _parse_bool(value: object, *, field: str, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        if value in (0, 1):
            return bool(value)
        raise ValueError(f"{field} must be a boolean")
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {"1", "true", "yes", "on"}:
            return True
        if normalized in {"0", "false", "no", "off"}:
            return False
    raise ValueError(f"{field} must be a boolean")


def _parse_positive_int(value: object, *, field: str, default: int) -> int:
    if value is None:
        return default
    if isinstance(value, bool):
        raise ValueError(f"{field} must be a positive integer")
    if isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError as exc:
            raise ValueError(f"{field} must be a positive integer") from exc
    if not isinstance(value, int) or value <= 0:
        raise ValueError(f"{field} must be a positive integer")
    return value


def _parse_byte_units(value: object, *, field: str) -> ByteUnits:
    if value is None:
        return "binary"
    if not isinstance(value, str):
        raise ValueError(f"{field} must be 'binary' or 'decimal'")
    normalized = value.strip().lower()
    if normalized not in {"binary", "decimal"}:
        raise ValueError(f"{field} must be 'binary' or 'decimal'")
    return cast(ByteUnits, normalized)
