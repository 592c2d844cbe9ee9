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

import json
import os
import time
from dataclasses import dataclass, field
from pathlib import Path

from ..core.bounds import KEY_LEN, MAX_METADATA_BYTES, MIN_SALT_LEN
from ..core.errors import MetadataExistsError, MetadataNotFoundError, MetadataParseError
from ..core.validation import (
    decode_b64_field,
    encode_b64_field,
    require_dict,
    require_entry_name,
    require_keys,
    require_positive_int,
    require_str,
)
from ..crypto.kdf import DEFAULT_KDF_PARAMS, KDF_NAME, KdfParams
from ..crypto.stream import CIPHER_NAME

METADATA_FILENAME = "cryptobackup.info"
METADATA_VERSION = 1

_REQUIRED_FIELDS = ("version", "salt")


@dataclass(frozen=True)
class BackupMetadata:
    salt: bytes
    kdf: KdfParams = DEFAULT_KDF_PARAMS
    key_length: int = KEY_LEN
    cipher: str = CIPHER_NAME
    created_at: float = field(default_factory=time.time)
    sources: dict[str, str] = field(default_factory=dict)
    version: int = METADATA_VERSION

    def to_dict(self) -> dict[str, object]:
        return {
            "version": self.version,
            "salt": encode_b64_field(self.salt),
            "key_length": self.key_length,
            "kdf": self.kdf.to_dict(),
            "cipher": self.cipher,
            "created_at": self.created_at,
            "sources": dict(self.sources),
        }

    @classmethod
    def from_dict(cls, data: object) -> BackupMetadata:
        mapping = require_dict(data, label="metadata")
        require_keys(mapping, _REQUIRED_FIELDS, label="metadata")
        version = require_positive_int(mapping["version"], label="metadata version")
        if version != METADATA_VERSION:
            raise ValueError(f"unsupported metadata version: {version}")
        salt = decode_b64_field(mapping["salt"], label="metadata salt")
        if len(salt) < MIN_SALT_LEN:
            raise ValueError(f"metadata salt must be at least {MIN_SALT_LEN} bytes")
        key_length = require_positive_int(
            mapping.get("key_length", KEY_LEN), label="metadata key_length"
        )
        if key_length != KEY_LEN:
            raise ValueError(f"unsupported key_length: {key_length}")
        cipher = mapping.get("cipher", CIPHER_NAME)
        if cipher != CIPHER_NAME:
            raise ValueError(f"unsupported cipher: {cipher}")
        created_at = mapping.get("created_at", 0.0)
        if isinstance(created_at, bool) or not isinstance(created_at, (int, float)):
            raise ValueError("metadata created_at must be a number")
        return cls(
            salt=salt,
            kdf=_parse_kdf(mapping.get("kdf")),
            key_length=key_length,
            cipher=cipher,
            created_at=float(created_at),
            sources=_parse_sources(mapping.get("sources")),
            version=version,
        )


def metadata_path(root: str | os.PathLike[str]) -> Path:
    return Path(root) / METADATA_FILENAME


def encode_metadata(record: BackupMetadata) -> bytes:
    return (json.dumps(record.to_dict(), indent=2, sort_keys=True) + "\n").encode("utf-8")


def decode_metadata(data: bytes) -> BackupMetadata:
    if len(data) > MAX_METADATA_BYTES:
        raise MetadataParseError(
            f"metadata exceeds MAX_METADATA_BYTES ({MAX_METADATA_BYTES}): {len(data)} bytes"
        )
    try:
        decoded = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise MetadataParseError(f"metadata is not valid JSON: {exc}") from exc
    try:
        return BackupMetadata.from_dict(decoded)
    except ValueError as exc:
        raise MetadataParseError(str(exc)) from exc


def write_metadata(
    record: BackupMetadata,
    root: str | os.PathLike[str],
    *,
    overwrite: bool = False,
) -> Path:
    path = metadata_path(root)
    payload = encode_metadata(record)
    mode = "wb" if overwrite else "xb"
    try:
        with path.open(mode) as handle:
            handle.write(payload)
    except FileExistsError as exc:
        raise MetadataExistsError(
            f"backup metadata already exists at {path}; refusing to overwrite"
        ) from exc
    return path


def read_metadata(root: str | os.PathLike[str]) -> BackupMetadata:
    path = metadata_path(root)
    try:
        data = path.read_bytes()
    except FileNotFoundError as exc:
        raise MetadataNotFoundError(f"backup metadata not found: {path}") from exc
    return decode_metadata(data)


def _parse_kdf(value: object) -> KdfParams:
    if value is None:
        return DEFAULT_KDF_PARAMS
    cfg = require_dict(value, label="metadata kdf")
    name = cfg.get("name", KDF_NAME)
    if name != KDF_NAME:
        raise ValueError(f"unsupported kdf: {name}")
    require_keys(cfg, ("time_cost", "memory_cost", "parallelism"), label="metadata kdf")
    return KdfParams(
        time_cost=require_positive_int(cfg["time_cost"], label="metadata kdf time_cost"),
        memory_cost=require_positive_int(cfg["memory_cost"], label="metadata kdf memory_cost"),
        parallelism=require_positive_int(cfg["parallelism"], label="metadata kdf parallelism"),
    )


def _parse_sources(value: object) -> dict[str, str]:
    if value is None:
        return {}
    cfg = require_dict(value, label="metadata sources")
    sources: dict[str, str] = {}
    for name, path in cfg.items():
        require_entry_name(name, label="metadata source name")
        sources[name] = require_str(path, label=f"metadata source {name}")
    return sources
