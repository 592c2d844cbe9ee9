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


import os
import stat
import unittest
from pathlib import Path
from unittest import mock

from cryptobackup.core.bounds import FRAME_OVERHEAD
from cryptobackup.core.models import EntryKind, FileEntry, ReplicationEvent
from cryptobackup.crypto.stream import StreamCipher
from cryptobackup.tree import replicator
from cryptobackup.tree.replicator import replicate_symlink, replicate_tree
from tests.test_support import (
    SAMPLE_A_TXT,
    SAMPLE_BIG_BIN,
    build_sample_tree,
    fast_key,
    sample_tree_bytes,
    temp_directory,
)


def _mode(path: Path) -> int:
    return stat.S_IMODE(os.lstat(path).st_mode)


class TestReplicateTree(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls.key = fast_key()

    def _encrypt(self, source: Path, dest: Path, **kwargs):
        with StreamCipher.new_for_encryption(self.key) as cipher:
            return replicate_tree(source, dest, cipher, **kwargs)

    def _decrypt(self, source: Path, dest: Path, key: bytes | None = None, **kwargs):
        with StreamCipher.new_for_decryption(key or self.key) as cipher:
            return replicate_tree(source, dest, cipher, **kwargs)

    def test_encrypts_every_file_and_mirrors_structure(self) -> None:
        with temp_directory() as tmp:
            source = build_sample_tree(tmp / "src")
            dest = tmp / "enc"
            result = self._encrypt(source, dest)

            self.assertTrue(result.ok, result.failures)
            self.assertEqual(result.bytes_processed, sample_tree_bytes())
            self.assertEqual(result.files, 3)
            self.assertEqual(result.directories, 2)
            self.assertEqual(result.symlinks, 1)

            encrypted = (dest / "a.txt").read_bytes()
            self.assertEqual(len(encrypted), len(SAMPLE_A_TXT) + FRAME_OVERHEAD)
            self.assertNotIn(b"quick brown fox", encrypted)
            self.assertEqual((dest / "empty.dat").stat().st_size, FRAME_OVERHEAD)
            self.assertEqual(os.readlink(dest / "link"), "a.txt")
            self.assertTrue((dest / "sub" / "deeper").is_dir())

    def test_round_trip_restores_content_and_permissions(self) -> None:
        with temp_directory() as tmp:
            source = build_sample_tree(tmp / "src")
            self._encrypt(source, tmp / "enc")
            result = self._decrypt(tmp / "enc", tmp / "out")

            self.assertTrue(result.ok, result.failures)
            self.assertEqual(result.bytes_processed, sample_tree_bytes())
            out = tmp / "out"
            self.assertEqual((out / "a.txt").read_bytes(), SAMPLE_A_TXT)
            self.assertEqual((out / "sub" / "big.bin").read_bytes(), SAMPLE_BIG_BIN)
            self.assertEqual((out / "empty.dat").read_bytes(), b"")
            self.assertEqual(_mode(out / "a.txt"), 0o640)
            self.assertEqual(_mode(out / "sub" / "deeper"), 0o750)
            self.assertEqual(_mode(out), _mode(source))
            self.assertEqual(os.readlink(out / "link"), "a.txt")
            src_stat = os.lstat(source / "a.txt")
            out_stat = os.lstat(out / "a.txt")
            self.assertEqual((out_stat.st_uid, out_stat.st_gid), (src_stat.st_uid, src_stat.st_gid))

    def test_rerun_into_same_destination(self) -> None:
        with temp_directory() as tmp:
            source = build_sample_tree(tmp / "src")
            self._encrypt(source, tmp / "enc")
            (source / "a.txt").write_bytes(b"changed")
            result = self._encrypt(source, tmp / "enc")
            self.assertTrue(result.ok, result.failures)
            self._decrypt(tmp / "enc", tmp / "out")
            self.assertEqual((tmp / "out" / "a.txt").read_bytes(), b"changed")
            leftovers = [name for name in os.listdir(tmp / "enc") if name.endswith(".partial")]
            self.assertEqual(leftovers, [])

    def test_tampered_file_fails_alone_and_leaves_no_output(self) -> None:
        with temp_directory() as tmp:
            source = build_sample_tree(tmp / "src")
            self._encrypt(source, tmp / "enc")
            tampered = bytearray((tmp / "enc" / "a.txt").read_bytes())
            tampered[20] ^= 0xFF
            (tmp / "enc" / "a.txt").write_bytes(bytes(tampered))

            result = self._decrypt(tmp / "enc", tmp / "out")

            self.assertEqual(len(result.failures), 1)
            failure = result.failures[0]
            self.assertEqual(failure.path, str(tmp / "enc" / "a.txt"))
            self.assertEqual(failure.kind, "AuthenticationError")
            self.assertFalse((tmp / "out" / "a.txt").exists())
            self.assertEqual(os.listdir(tmp / "out").count("a.txt"), 0)
            self.assertFalse(any(name.endswith(".partial") for name in os.listdir(tmp / "out")))
            self.assertEqual((tmp / "out" / "sub" / "big.bin").read_bytes(), SAMPLE_BIG_BIN)
            self.assertEqual(result.bytes_processed, len(SAMPLE_BIG_BIN))

    def test_wrong_key_fails_every_file(self) -> None:
        with temp_directory() as tmp:
            source = build_sample_tree(tmp / "src")
            self._encrypt(source, tmp / "enc")
            result = self._decrypt(tmp / "enc", tmp / "out", key=fast_key("wrong"))

            self.assertEqual(result.bytes_processed, 0)
            self.assertEqual(result.files, 0)
            self.assertEqual(len(result.failures), 3)
            self.assertTrue(all(f.kind == "AuthenticationError" for f in result.failures))
            self.assertTrue((tmp / "out" / "sub" / "deeper").is_dir())
            self.assertTrue((tmp / "out" / "link").is_symlink())

    @unittest.skipUnless(hasattr(os, "mkfifo"), "requires mkfifo")
    def test_unsupported_entry_is_reported(self) -> None:
        with temp_directory() as tmp:
            source = build_sample_tree(tmp / "src")
            os.mkfifo(source / "pipe")
            result = self._encrypt(source, tmp / "enc")

            self.assertEqual(len(result.failures), 1)
            self.assertEqual(result.failures[0].kind, "UnsupportedEntryError")
            self.assertIn("fifo", result.failures[0].message)
            self.assertFalse(os.path.lexists(tmp / "enc" / "pipe"))
            self.assertEqual(result.files, 3)

    def test_source_must_be_directory(self) -> None:
        with temp_directory() as tmp:
            (tmp / "file").write_bytes(b"x")
            result = self._encrypt(tmp / "file", tmp / "enc")
            self.assertEqual(len(result.failures), 1)
            self.assertEqual(result.failures[0].kind, "IOError")
            self.assertFalse((tmp / "enc").exists())

    def test_missing_source(self) -> None:
        with temp_directory() as tmp:
            result = self._encrypt(tmp / "missing", tmp / "enc")
            self.assertFalse(result.ok)

    def test_exclude_skips_subtree(self) -> None:
        with temp_directory() as tmp:
            source = build_sample_tree(tmp / "src")
            result = self._encrypt(source, tmp / "enc", exclude=(source / "sub",))
            self.assertTrue(result.ok)
            self.assertFalse((tmp / "enc" / "sub").exists())
            self.assertEqual(result.bytes_processed, len(SAMPLE_A_TXT))

    def test_events_are_emitted_in_sorted_order(self) -> None:
        events: list[ReplicationEvent] = []
        with temp_directory() as tmp:
            source = build_sample_tree(tmp / "src")
            self._encrypt(source, tmp / "enc", on_event=events.append)
        names = [os.path.relpath(event.path, source) for event in events]
        self.assertEqual(
            names,
            ["a.txt", "empty.dat", "link", "sub/big.bin", "sub/deeper", "sub"],
        )
        self.assertEqual(events[0].kind, EntryKind.FILE)
        self.assertEqual(events[0].size, len(SAMPLE_A_TXT))

    def test_ownership_change_only_when_needed(self) -> None:
        with temp_directory() as tmp:
            source = build_sample_tree(tmp / "src")
            with mock.patch.object(replicator.os, "lchown") as lchown:
                self._encrypt(source, tmp / "enc")
            lchown.assert_not_called()


class TestReplicateSymlink(unittest.TestCase):
    def test_existing_regular_file_is_not_replaced(self) -> None:
        with temp_directory() as tmp:
            (tmp / "target").write_text("x", encoding="utf-8")
            entry = FileEntry(
                path=str(tmp / "link"),
                kind=EntryKind.SYMLINK,
                uid=0,
                gid=0,
                mode=0o120777,
                link_target="target",
            )
            with self.assertRaises(FileExistsError):
                replicate_symlink(entry, str(tmp / "target"))

    def test_stale_link_is_retargeted(self) -> None:
        with temp_directory() as tmp:
            (tmp / "dest").symlink_to("old")
            entry = FileEntry(
                path=str(tmp / "link"),
                kind=EntryKind.SYMLINK,
                uid=0,
                gid=0,
                mode=0o120777,
                link_target="new",
            )
            replicate_symlink(entry, str(tmp / "dest"))
            self.assertEqual(os.readlink(tmp / "dest"), "new")


if __name__ == "__main__":
    unittest.main()
