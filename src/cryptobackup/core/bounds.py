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

# Argon2id salt length generated for every backup run.
SALT_LEN = 64

# Shortest salt accepted when reading metadata written elsewhere.
MIN_SALT_LEN = 16

# Derived key length (AES-256).
KEY_LEN = 32

# Key lengths accepted by the key deriver.
MIN_KEY_LEN = 16
MAX_KEY_LEN = 32

# AES-CTR initial counter block length.
IV_LEN = 16

# HMAC-SHA256 tag length.
TAG_LEN = 32

# Bytes added to every encrypted file (iv + tag).
FRAME_OVERHEAD = IV_LEN + TAG_LEN

# Read size for the streaming copy loop.
COPY_CHUNK_SIZE = 65_536

# Default Argon2id cost parameters (memory in KiB).
ARGON2_TIME_COST = 3
ARGON2_MEMORY_COST = 32 * 1024
ARGON2_PARALLELISM = 4

# Largest metadata file accepted on read.
MAX_METADATA_BYTES = 65_536


__all__ = [
    "ARGON2_MEMORY_COST",
    "ARGON2_PARALLELISM",
    "ARGON2_TIME_COST",
    "COPY_CHUNK_SIZE",
    "FRAME_OVERHEAD",
    "IV_LEN",
    "KEY_LEN",
    "MAX_KEY_LEN",
    "MAX_METADATA_BYTES",
    "MIN_KEY_LEN",
    "MIN_SALT_LEN",
    "SALT_LEN",
    "TAG_LEN",
]
