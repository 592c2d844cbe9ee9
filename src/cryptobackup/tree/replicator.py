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

"""Recursive tree copy that streams every regular file through a cipher.

Failure policy is best-effort: a failing entry is recorded in the result (and
reported through ``on_event``), left without output, and its siblings carry on.
Errors that mean the cipher itself is misused are not caught.
"""

from __future__ import annotations

import contextlib
import errno
import os
import stat
import tempfile
from collections.abc import Callable, Iterable

from ..core.bounds import COPY_CHUNK_SIZE
from ..core.errors import AuthenticationError, UnsupportedEntryError, error_kind
from ..core.models import (
    EntryKind,
    FileEntry,
    ReplicationEvent,
    ReplicationFailure,
    ReplicationResult,
)
from ..crypto.stream import StreamCipher

EventCallback = Callable[[ReplicationEvent], None]

_ENTRY_ERRORS = (OSError, AuthenticationError, UnsupportedEntryError)
_PARTIAL_SUFFIX = ".partial"


def replicate_tree(
    source_root: str | os.PathLike[str],
    dest_root: str | os.PathLike[str],
    cipher: StreamCipher,
    *,
    on_event: EventCallback | None = None,
    exclude: Iterable[str | os.PathLike[str]] = (),
    chunk_size: int = COPY_CHUNK_SIZE,
) -> ReplicationResult:
    walker = _TreeWalker(
        cipher,
        on_event=on_event,
        exclude={os.path.realpath(path) for path in exclude},
        chunk_size=chunk_size,
    )
    return walker.run(os.fspath(source_root), os.fspath(dest_root))


def ensure_directory(path: str) -> None:
    os.makedirs(path, mode=0o755, exist_ok=True)


def replicate_symlink(entry: FileEntry, dest: str) -> None:
    target = entry.link_target
    if target is None:
        raise ValueError(f"symlink entry has no target: {entry.path}")
    if os.path.lexists(dest):
        if not os.path.islink(dest):
            raise FileExistsError(errno.EEXIST, "destination exists and is not a symlink", dest)
        if os.readlink(dest) == target:
            return
        os.unlink(dest)
    os.symlink(target, dest)


def replicate_file(
    entry: FileEntry,
    dest: str,
    cipher: StreamCipher,
    *,
    chunk_size: int = COPY_CHUNK_SIZE,
) -> int:
    """Stream one file through the cipher; returns its plaintext size.

    Output goes to a hidden temporary file next to ``dest`` that replaces it
    only once the whole stream (including tag verification) succeeded.
    """
    dest_dir, name = os.path.split(dest)
    fd, partial = tempfile.mkstemp(prefix=f".{name}.", suffix=_PARTIAL_SUFFIX, dir=dest_dir or ".")
    try:
        with os.fdopen(fd, "wb") as out, open(entry.path, "rb") as source:
            stream = cipher.transform(source, chunk_size=chunk_size)
            for chunk in stream:
                out.write(chunk)
            stream.finalize()
        os.replace(partial, dest)
    except BaseException:
        with contextlib.suppress(FileNotFoundError):
            os.unlink(partial)
        raise
    return stream.plaintext_size


def copy_attributes(entry: FileEntry, dest: str) -> None:
    """Mirror ownership and (except for symlinks) permission bits onto ``dest``."""
    current = os.lstat(dest)
    if (current.st_uid, current.st_gid) != (entry.uid, entry.gid):
        os.lchown(dest, entry.uid, entry.gid)
    if entry.kind is not EntryKind.SYMLINK:
        os.chmod(dest, entry.permissions)


def _describe_file_type(mode: int) -> str:
    if stat.S_ISFIFO(mode):
        return "fifo"
    if stat.S_ISSOCK(mode):
        return "socket"
    if stat.S_ISCHR(mode):
        return "character device"
    if stat.S_ISBLK(mode):
        return "block device"
    return "unknown"


class _TreeWalker:
    def __init__(
        self,
        cipher: StreamCipher,
        *,
        on_event: EventCallback | None,
        exclude: set[str],
        chunk_size: int,
    ) -> None:
        self.cipher = cipher
        self.on_event = on_event
        self.exclude = exclude
        self.chunk_size = chunk_size
        self.result = ReplicationResult()

    def run(self, source_root: str, dest_root: str) -> ReplicationResult:
        try:
            root = FileEntry.from_path(source_root)
            if root.kind is not EntryKind.DIRECTORY:
                raise NotADirectoryError(errno.ENOTDIR, "source is not a directory", source_root)
            ensure_directory(dest_root)
        except OSError as exc:
            self._fail(source_root, EntryKind.DIRECTORY, exc)
            return self.result
        self._walk(source_root, dest_root)
        try:
            copy_attributes(root, dest_root)
        except OSError as exc:
            self._fail(source_root, EntryKind.DIRECTORY, exc)
        return self.result

    def _walk(self, source_dir: str, dest_dir: str) -> None:
        try:
            names = sorted(os.listdir(source_dir))
        except OSError as exc:
            self._fail(source_dir, EntryKind.DIRECTORY, exc)
            return
        for name in names:
            source = os.path.join(source_dir, name)
            if self.exclude and os.path.realpath(source) in self.exclude:
                continue
            self._replicate_entry(source, os.path.join(dest_dir, name))

    def _replicate_entry(self, source: str, dest: str) -> None:
        try:
            entry = FileEntry.from_path(source)
        except OSError as exc:
            self._fail(source, EntryKind.OTHER, exc)
            return
        size = 0
        try:
            if entry.kind is EntryKind.DIRECTORY:
                ensure_directory(dest)
                self._walk(entry.path, dest)
                self.result.directories += 1
            elif entry.kind is EntryKind.SYMLINK:
                replicate_symlink(entry, dest)
                self.result.symlinks += 1
            elif entry.kind is EntryKind.FILE:
                size = replicate_file(entry, dest, self.cipher, chunk_size=self.chunk_size)
                self.result.files += 1
                self.result.bytes_processed += size
            else:
                raise UnsupportedEntryError(entry.path, _describe_file_type(entry.mode))
            copy_attributes(entry, dest)
        except _ENTRY_ERRORS as exc:
            self._fail(source, entry.kind, exc)
            return
        self._emit(ReplicationEvent(path=source, kind=entry.kind, size=size))

    def _fail(self, path: str, kind: EntryKind, exc: BaseException) -> None:
        failure = ReplicationFailure(path=path, kind=error_kind(exc), message=str(exc))
        self.result.failures.append(failure)
        self._emit(ReplicationEvent(path=path, kind=kind, failure=failure))

    def _emit(self, event: ReplicationEvent) -> None:
        if self.on_event is not None:
            self.on_event(event)
