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


class CryptoBackupError(RuntimeError):
    """Base class for errors raised by the backup engine."""


class KeyDerivationError(CryptoBackupError):
    pass


class InvalidParameterError(CryptoBackupError, ValueError):
    pass


class ModeMismatchError(CryptoBackupError):
    pass


class CipherClosedError(CryptoBackupError):
    pass


class AuthenticationError(CryptoBackupError):
    """Tag verification failed: tampered data or wrong passphrase/salt."""


class MetadataNotFoundError(CryptoBackupError):
    pass


class MetadataParseError(CryptoBackupError, ValueError):
    pass


class MetadataExistsError(CryptoBackupError, FileExistsError):
    pass


@dataclass
class UnsupportedEntryError(CryptoBackupError):
    path: str
    file_type: str

    def __str__(self) -> str:
        return f"unsupported file type ({self.file_type}): {self.path}"


def error_kind(exc: BaseException) -> str:
    """Short label used when reporting a per-entry failure."""
    if isinstance(exc, CryptoBackupError):
        return exc.__class__.__name__
    if isinstance(exc, OSError):
        return "IOError"
    return exc.__class__.__name__
