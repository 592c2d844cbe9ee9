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

"""Streaming authenticated encryption for single files.

Frame layout: ``iv (16) || AES-256-CTR ciphertext || HMAC-SHA256(iv || ciphertext)``.
The encryption and authentication subkeys are expanded independently from the
derived key with HKDF, so neither role ever sees the other's key material.
"""

from __future__ import annotations

from collections.abc import Iterator
from enum import Enum
from typing import BinaryIO

from Crypto.Cipher import AES
from Crypto.Hash import HMAC, SHA256
from Crypto.Protocol.KDF import HKDF
from Crypto.Random import get_random_bytes

from ..core.bounds import COPY_CHUNK_SIZE, IV_LEN, KEY_LEN, TAG_LEN
from ..core.errors import (
    AuthenticationError,
    CipherClosedError,
    CryptoBackupError,
    InvalidParameterError,
    ModeMismatchError,
)

CIPHER_NAME = "aes-256-ctr+hmac-sha256"

_ENC_CONTEXT = b"cryptobackup/v1/aes-256-ctr"
_MAC_CONTEXT = b"cryptobackup/v1/hmac-sha256"


class CipherMode(str, Enum):
    ENCRYPT = "encrypt"
    DECRYPT = "decrypt"


def expand_subkeys(key: bytes) -> tuple[bytes, bytes]:
    """Split a derived key into independent (encryption, authentication) subkeys."""
    if not isinstance(key, (bytes, bytearray, memoryview)):
        raise InvalidParameterError("key must be bytes")
    if len(key) != KEY_LEN:
        raise InvalidParameterError(f"key must be {KEY_LEN} bytes, got {len(key)}")
    master = bytes(key)
    enc_key = HKDF(master, KEY_LEN, None, SHA256, context=_ENC_CONTEXT)
    mac_key = HKDF(master, KEY_LEN, None, SHA256, context=_MAC_CONTEXT)
    return enc_key, mac_key


class CipherStream:
    """Lazy output of one encrypt/decrypt call.

    Iterating yields byte chunks. ``tag`` stays None until the source has been
    fully consumed (and, when decrypting, verified).
    """

    def __init__(self) -> None:
        self.plaintext_size = 0
        self.tag: bytes | None = None
        self._chunks: Iterator[bytes] = iter(())

    def __iter__(self) -> CipherStream:
        return self

    def __next__(self) -> bytes:
        return next(self._chunks)

    def finalize(self) -> bytes:
        if self.tag is None:
            raise CryptoBackupError("cipher stream has not been fully consumed")
        return self.tag


class StreamCipher:
    def __init__(self, key: bytes, mode: CipherMode) -> None:
        enc_key, mac_key = expand_subkeys(key)
        self.mode = CipherMode(mode)
        self._enc_key = bytearray(enc_key)
        self._mac_key = bytearray(mac_key)
        self._closed = False

    @classmethod
    def new_for_encryption(cls, key: bytes) -> StreamCipher:
        return cls(key, CipherMode.ENCRYPT)

    @classmethod
    def new_for_decryption(cls, key: bytes) -> StreamCipher:
        return cls(key, CipherMode.DECRYPT)

    def __enter__(self) -> StreamCipher:
        return self

    def __exit__(self, *_exc: object) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        for buffer in (self._enc_key, self._mac_key):
            for index in range(len(buffer)):
                buffer[index] = 0
        self._closed = True

    def encrypt(self, source: BinaryIO, *, chunk_size: int = COPY_CHUNK_SIZE) -> CipherStream:
        self._require_mode(CipherMode.ENCRYPT)
        iv = get_random_bytes(IV_LEN)
        stream = CipherStream()
        stream._chunks = self._encrypt_chunks(stream, source, iv, chunk_size)
        return stream

    def decrypt(self, source: BinaryIO, *, chunk_size: int = COPY_CHUNK_SIZE) -> CipherStream:
        self._require_mode(CipherMode.DECRYPT)
        stream = CipherStream()
        stream._chunks = self._decrypt_chunks(stream, source, chunk_size)
        return stream

    def transform(self, source: BinaryIO, *, chunk_size: int = COPY_CHUNK_SIZE) -> CipherStream:
        """Run whichever direction this cipher was built for."""
        if self.mode is CipherMode.ENCRYPT:
            return self.encrypt(source, chunk_size=chunk_size)
        return self.decrypt(source, chunk_size=chunk_size)

    def _require_mode(self, mode: CipherMode) -> None:
        if self._closed:
            raise CipherClosedError("cipher has been closed")
        if self.mode is not mode:
            raise ModeMismatchError(
                f"cipher was created for {self.mode.value}, cannot {mode.value}"
            )

    def _new_ctr(self, iv: bytes):
        if len(iv) != IV_LEN:
            raise InvalidParameterError(f"iv must be {IV_LEN} bytes, got {len(iv)}")
        return AES.new(bytes(self._enc_key), AES.MODE_CTR, nonce=b"", initial_value=iv)

    def _new_mac(self) -> HMAC.HMAC:
        return HMAC.new(bytes(self._mac_key), digestmod=SHA256)

    def _encrypt_chunks(
        self,
        stream: CipherStream,
        source: BinaryIO,
        iv: bytes,
        chunk_size: int,
    ) -> Iterator[bytes]:
        ctr = self._new_ctr(iv)
        mac = self._new_mac()
        mac.update(iv)
        yield iv
        while True:
            chunk = source.read(chunk_size)
            if not chunk:
                break
            stream.plaintext_size += len(chunk)
            ciphertext = ctr.encrypt(chunk)
            mac.update(ciphertext)
            yield ciphertext
        tag = mac.digest()
        stream.tag = tag
        yield tag

    def _decrypt_chunks(
        self,
        stream: CipherStream,
        source: BinaryIO,
        chunk_size: int,
    ) -> Iterator[bytes]:
        iv = _read_exact(source, IV_LEN)
        if len(iv) != IV_LEN:
            raise AuthenticationError("encrypted frame is truncated (missing iv)")
        ctr = self._new_ctr(iv)
        mac = self._new_mac()
        mac.update(iv)
        # The last TAG_LEN bytes seen so far may be the tag; hold them back.
        pending = b""
        while True:
            chunk = source.read(chunk_size)
            if not chunk:
                break
            pending += chunk
            if len(pending) <= TAG_LEN:
                continue
            body = pending[:-TAG_LEN]
            pending = pending[-TAG_LEN:]
            mac.update(body)
            plaintext = ctr.decrypt(body)
            stream.plaintext_size += len(plaintext)
            yield plaintext
        if len(pending) != TAG_LEN:
            raise AuthenticationError("encrypted frame is truncated (missing tag)")
        try:
            mac.verify(pending)
        except ValueError:
            raise AuthenticationError("authentication tag mismatch") from None
        stream.tag = pending


def _read_exact(source: BinaryIO, size: int) -> bytes:
    data = b""
    while len(data) < size:
        chunk = source.read(size - len(data))
        if not chunk:
            break
        data += chunk
    return data
