"""AES-256-GCM encryption of configuration secrets and key-file handling."""

from __future__ import annotations

import base64
import binascii
import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

PREFIX = "ENC:"
KEY_SIZE = 32
NONCE_SIZE = 12


class CryptoError(ValueError):
    """Raised when a key is invalid or data cannot be decrypted."""


class Crypter:
    """Encrypts and decrypts strings with AES-GCM."""

    def __init__(self, key: bytes) -> None:
        if len(key) != KEY_SIZE:
            raise CryptoError(
                f"invalid key size: expected {KEY_SIZE} bytes, got {len(key)}"
            )
        self._aead = AESGCM(bytes(key))

    def encrypt(self, plaintext: str) -> str:
        """Return ``ENC:<base64(nonce + ciphertext)>``."""
        nonce = os.urandom(NONCE_SIZE)
        sealed = self._aead.encrypt(nonce, plaintext.encode("utf-8"), None)
        return PREFIX + base64.b64encode(nonce + sealed).decode("ascii")

    def decrypt(self, encoded: str) -> str:
        """Decrypt a value produced by :meth:`encrypt`."""
        if not encoded.startswith(PREFIX):
            raise CryptoError(f"invalid format: missing '{PREFIX}' prefix")
        raw = encoded[len(PREFIX):]
        try:
            data = base64.b64decode(raw, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise CryptoError(f"invalid base64 data: {exc}") from exc
        if len(data) < NONCE_SIZE:
            raise CryptoError("ciphertext too short")
        nonce, ciphertext = data[:NONCE_SIZE], data[NONCE_SIZE:]
        try:
            plaintext = self._aead.decrypt(nonce, ciphertext, None)
        except InvalidTag as exc:
            raise CryptoError("decryption failed: message authentication failed") from exc
        return plaintext.decode("utf-8", errors="surrogateescape")


def is_encrypted(s: str) -> bool:
    """Tell whether a string carries the encrypted-value prefix."""
    return s.startswith(PREFIX)


def load_or_generate_key(path: str | os.PathLike[str]) -> bytes:
    """Load the key at ``path``, creating a new random one (mode 0600) if absent."""
    path = os.fspath(path)
    try:
        with open(path, "rb") as fh:
            key = fh.read()
    except FileNotFoundError:
        pass
    except OSError as exc:
        raise CryptoError(f"failed to read key file: {exc}") from exc
    else:
        if len(key) != KEY_SIZE:
            raise CryptoError(
                f"invalid key file size in '{path}': expected {KEY_SIZE}, got {len(key)}"
            )
        return key

    key = os.urandom(KEY_SIZE)

    directory = os.path.dirname(path)
    if directory:
        try:
            os.makedirs(directory, mode=0o700, exist_ok=True)
        except OSError as exc:
            raise CryptoError(f"failed to create directory '{directory}': {exc}") from exc

    try:
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "wb") as fh:
            fh.write(key)
    except OSError as exc:
        raise CryptoError(f"failed to save key file: {exc}") from exc

    return key