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


import io
import unittest

from cryptobackup.core.bounds import FRAME_OVERHEAD, IV_LEN, TAG_LEN
from cryptobackup.core.errors import (
    AuthenticationError,
    CipherClosedError,
    CryptoBackupError,
    InvalidParameterError,
    ModeMismatchError,
)
from cryptobackup.crypto.stream import CipherMode, StreamCipher, expand_subkeys
from tests.test_support import fast_key


def _encrypt(key: bytes, data: bytes, *, chunk_size: int = 7) -> bytes:
    with StreamCipher.new_for_encryption(key) as cipher:
        stream = cipher.encrypt(io.BytesIO(data), chunk_size=chunk_size)
        output = b"".join(stream)
        stream.finalize()
    return output


def _decrypt(key: bytes, data: bytes, *, chunk_size: int = 5) -> bytes:
    with StreamCipher.new_for_decryption(key) as cipher:
        stream = cipher.decrypt(io.BytesIO(data), chunk_size=chunk_size)
        output = b"".join(stream)
        stream.finalize()
    return output


class TestStreamCipher(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls.key = fast_key()
        cls.other_key = fast_key("wrong")

    def test_round_trip_with_odd_chunk_sizes(self) -> None:
        payload = bytes(range(256)) * 9 + b"tail"
        for enc_chunk, dec_chunk in ((1, 1), (7, 5), (64, 1000), (4096, 33)):
            with self.subTest(enc_chunk=enc_chunk, dec_chunk=dec_chunk):
                frame = _encrypt(self.key, payload, chunk_size=enc_chunk)
                self.assertEqual(len(frame), len(payload) + FRAME_OVERHEAD)
                self.assertEqual(_decrypt(self.key, frame, chunk_size=dec_chunk), payload)

    def test_empty_input(self) -> None:
        frame = _encrypt(self.key, b"")
        self.assertEqual(len(frame), IV_LEN + TAG_LEN)
        self.assertEqual(_decrypt(self.key, frame), b"")

    def test_plaintext_size_and_tag(self) -> None:
        with StreamCipher.new_for_encryption(self.key) as cipher:
            stream = cipher.encrypt(io.BytesIO(b"hello world"))
            self.assertIsNone(stream.tag)
            frame = b"".join(stream)
        self.assertEqual(stream.plaintext_size, 11)
        self.assertEqual(stream.tag, frame[-TAG_LEN:])

    def test_iv_is_fresh_per_stream(self) -> None:
        first = _encrypt(self.key, b"same data")
        second = _encrypt(self.key, b"same data")
        self.assertNotEqual(first[:IV_LEN], second[:IV_LEN])
        self.assertNotEqual(first, second)

    def test_every_flipped_bit_is_detected(self) -> None:
        frame = _encrypt(self.key, b"abc")
        self.assertEqual(len(frame), 3 + FRAME_OVERHEAD)
        for index in range(len(frame)):
            for bit in range(8):
                tampered = bytearray(frame)
                tampered[index] ^= 1 << bit
                with self.subTest(index=index, bit=bit):
                    with self.assertRaises(AuthenticationError):
                        _decrypt(self.key, bytes(tampered))

    def test_truncation_is_detected(self) -> None:
        frame = _encrypt(self.key, b"some data to truncate")
        for size in (0, IV_LEN - 1, IV_LEN, IV_LEN + TAG_LEN - 1, len(frame) - 1):
            with self.subTest(size=size):
                with self.assertRaises(AuthenticationError):
                    _decrypt(self.key, frame[:size])

    def test_wrong_key_fails_authentication(self) -> None:
        frame = _encrypt(self.key, b"secret")
        with self.assertRaises(AuthenticationError):
            _decrypt(self.other_key, frame)

    def test_finalize_before_consumption_raises(self) -> None:
        with StreamCipher.new_for_encryption(self.key) as cipher:
            stream = cipher.encrypt(io.BytesIO(b"pending"))
            with self.assertRaises(CryptoBackupError):
                stream.finalize()

    def test_mode_mismatch(self) -> None:
        with StreamCipher.new_for_encryption(self.key) as cipher:
            with self.assertRaises(ModeMismatchError):
                cipher.decrypt(io.BytesIO(b""))
        with StreamCipher(self.key, CipherMode.DECRYPT) as cipher:
            with self.assertRaises(ModeMismatchError):
                cipher.encrypt(io.BytesIO(b""))

    def test_transform_follows_mode(self) -> None:
        with StreamCipher.new_for_encryption(self.key) as cipher:
            frame = b"".join(cipher.transform(io.BytesIO(b"abc")))
        with StreamCipher.new_for_decryption(self.key) as cipher:
            self.assertEqual(b"".join(cipher.transform(io.BytesIO(frame))), b"abc")

    def test_closed_cipher_is_unusable(self) -> None:
        cipher = StreamCipher.new_for_encryption(self.key)
        cipher.close()
        self.assertTrue(cipher.closed)
        with self.assertRaises(CipherClosedError):
            cipher.encrypt(io.BytesIO(b"data"))

    def test_invalid_key(self) -> None:
        for key in (b"", b"\x00" * 16, b"\x00" * 33, "not-bytes"):
            with self.subTest(key=key):
                with self.assertRaises(InvalidParameterError):
                    StreamCipher.new_for_encryption(key)  # type: ignore[arg-type]


class TestExpandSubkeys(unittest.TestCase):
    def test_subkeys_are_distinct_and_stable(self) -> None:
        key = fast_key()
        enc_a, mac_a = expand_subkeys(key)
        enc_b, mac_b = expand_subkeys(key)
        self.assertNotEqual(enc_a, mac_a)
        self.assertNotIn(enc_a, (key, mac_a))
        self.assertEqual((enc_a, mac_a), (enc_b, mac_b))


if __name__ == "__main__":
    unittest.main()
