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
import stat
from dataclasses import dataclass, field
from enum import Enum


class EntryKind(str, Enum):
    DIRECTORY = "directory"
    FILE = "file"
    SYMLINK = "symlink"
    OTHER = "other"


@dataclass(frozen=True)
class FileEntry:
    path: str
    kind: EntryKind
    uid: int
    gid: int
    mode: int
    size: int = 0
    link_target: str | None = None

    @property
    def permissions(self) -> int:
        return stat.S_IMODE(self.mode)

    @classmethod
    def from_path(cls, path: str | os.PathLike[str]) -> FileEntry:
        raw = os.fspath(path)
        st = os.lstat(raw)
        if stat.S_ISLNK(st.st_mode):
            return cls(
                path=raw,
                kind=EntryKind.SYMLINK,
                uid=st.st_uid,
                gid=st.st_gid,
                mode=st.st_mode,
                link_target=os.readlink(raw),
            )
        if stat.S_ISDIR(st.st_mode):
            kind = EntryKind.DIRECTORY
        elif stat.S_ISREG(st.st_mode):
            kind = EntryKind.FILE
        else:
            kind = EntryKind.OTHER
        size = st.st_size if kind is EntryKind.FILE else 0
        return cls(path=raw, kind=kind, uid=st.st_uid, gid=st.st_gid, mode=st.st_mode, size=size)


@dataclass(frozen=True)
class ReplicationFailure:
    path: str
    kind: str
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.kind}: {self.message}"


@dataclass(frozen=True)
class ReplicationEvent:
    path: str
    kind: EntryKind
    size: int = 0
    failure: ReplicationFailure | None = None


@dataclass
class ReplicationResult:
    bytes_processed: int = 0
    files: int = 0
    directories: int = 0
    symlinks: int = 0
    failures: list[ReplicationFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    def merge(self, other: ReplicationResult) -> None:
        self.bytes_processed += other.bytes_processed
        self.files += other.files
        self.directories += other.directories
        self.symlinks += other.symlinks
        self.failures.extend(other.failures)


@dataclass(frozen=True)
class RunStatistics:
    bytes_processed: int
    elapsed_seconds: float
    files: int = 0
    directories: int = 0
    symlinks: int = 0
    failures: int = 0

    @property
    def throughput(self) -> float:
        if self.elapsed_seconds <= 0:
            return 0.0
        return self.bytes_processed / self.elapsed_seconds

    @classmethod
    def from_result(cls, result: ReplicationResult, *, elapsed_seconds: float) -> RunStatistics:
        return cls(
            bytes_processed=result.bytes_processed,
            elapsed_seconds=elapsed_seconds,
            files=result.files,
            directories=result.directories,
            symlinks=result.symlinks,
            failures=len(result.failures),
        )
