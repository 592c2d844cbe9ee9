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

from dataclasses import dataclass

from argon2.exceptions import HashingError
from argon2.low_level import Type, hash_secret_raw
from Crypto.Random import get_random_bytes

from ..core.bounds import (
    ARGON2_MEMORY_COST,
    ARGON2_PARALLELISM,
    ARGON2_TIME_COST,
    KEY_LEN,
    MAX_KEY_LEN,
    MIN_KEY_LEN,
    MIN_SALT_LEN,
    SALT_LEN,
)
from ..core.errors import KeyDerivationError
from ..core.validation import require_positive_int

KDF_NAME = "argon2id"

# argon2 requires at least 8 KiB of memory per lane.
_MIN_MEMORY_PER_LANE = 8


@dataclass(frozen=True)
class KdfParams:
    time_cost: int = ARGON2_TIME_COST
    memory_cost: int = ARGON2_MEMORY_COST
    parallelism: int = ARGON2_PARALLELISM

    def __post_init__(self) -> None:
        require_positive_int(self.time_cost, label="kdf time_cost")
        require_positive_int(self.memory_cost, label="kdf memory_cost")
        require_positive_int(self.parallelism, label="kdf parallelism")
        if self.memory_cost < _MIN_MEMORY_PER_LANE * self.parallelism:
            raise ValueError(
                f"kdf memory_cost must be at least {_MIN_MEMORY_PER_LANE} KiB per lane "
                f"({_MIN_MEMORY_PER_LANE * self.parallelism} KiB for parallelism "
                f"{self.parallelism})"
            )

    def to_dict(self) -> dict[str, object]:
        return {
            "name": KDF_NAME,
            "time_cost": self.time_cost,
            "memory_cost": self.memory_cost,
            "parallelism": self.parallelism,
        }


DEFAULT_KDF_PARAMS = KdfParams()


def generate_salt(length: int = SALT_LEN) -> bytes:
    try:
        return get_random_bytes(length)
    except (OSError, NotImplementedError) as exc:
        raise KeyDerivationError(f"unable to read system entropy: {exc}") from exc


def derive_key(
    passphrase: str,
    salt: bytes | None = None,
    key_length: int = KEY_LEN,
    *,
    params: KdfParams = DEFAULT_KDF_PARAMS,
) -> tuple[bytes, bytes]:
    """Derive a symmetric key from a passphrase with Argon2id.

    When ``salt`` is None a fresh random salt is generated (backup path) and
    returned so the caller can persist it. A given salt is used unchanged
    (restore path), which reproduces the original key.
    """
    if isinstance(key_length, bool) or not isinstance(key_length, int):
        raise KeyDerivationError("key length must be an integer")
    if key_length < MIN_KEY_LEN or key_length > MAX_KEY_LEN:
        raise KeyDerivationError(
            f"key length must be between {MIN_KEY_LEN} and {MAX_KEY_LEN} bytes, got {key_length}"
        )
    if not passphrase:
        raise KeyDerivationError("passphrase cannot be empty")
    if salt is None:
        salt = generate_salt()
    elif len(salt) < MIN_SALT_LEN:
        raise KeyDerivationError(f"salt must be at least {MIN_SALT_LEN} bytes")
    salt = bytes(salt)

    try:
        key = hash_secret_raw(
            secret=passphrase.encode("utf-8"),
            salt=salt,
            time_cost=params.time_cost,
            memory_cost=params.memory_cost,
            parallelism=params.parallelism,
            hash_len=key_length,
            type=Type.ID,
        )
    except HashingError as exc:
        raise KeyDerivationError(f"argon2 failed: {exc}") from exc
    return key, salt
