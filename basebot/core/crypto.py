#!/usr/bin/env python3
"""
BASEBOT - Secret Codec

AES-256-GCM encryption for wallet export blobs.
One static key per process, one random nonce per record.
"""

import binascii
import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from basebot.exceptions import ConfigError, DecryptionError

KEY_SIZE_BYTES = 32
NONCE_SIZE_BYTES = 16


class SecretCodec:
    """
    Symmetric encrypt/decrypt of wallet exports.

    GCM authenticates the ciphertext, so a wrong key or a flipped byte
    raises DecryptionError instead of returning garbage.
    """

    def __init__(self, key: bytes):
        if len(key) != KEY_SIZE_BYTES:
            raise ConfigError(
                f"Encryption key must be {KEY_SIZE_BYTES} bytes, got {len(key)}"
            )
        self._aesgcm = AESGCM(key)

    @classmethod
    def from_hex(cls, key_hex: str) -> "SecretCodec":
        """Build the codec from the hex-encoded key. Fails at startup, not first use."""
        try:
            key = binascii.unhexlify(key_hex.strip())
        except (binascii.Error, ValueError) as e:
            raise ConfigError(f"Encryption key is not valid hex: {e}") from e
        return cls(key)

    def encrypt(self, plaintext: bytes) -> tuple[bytes, bytes]:
        """
        Encrypt with a fresh nonce.

        Returns:
            Tuple of (nonce, ciphertext)
        """
        nonce = os.urandom(NONCE_SIZE_BYTES)
        return nonce, self._aesgcm.encrypt(nonce, plaintext, None)

    def decrypt(self, nonce: bytes, ciphertext: bytes) -> bytes:
        """
        Decrypt a record.

        Raises:
            DecryptionError: wrong key, tampered or truncated data, bad nonce
        """
        if len(nonce) != NONCE_SIZE_BYTES:
            raise DecryptionError(f"Nonce must be {NONCE_SIZE_BYTES} bytes, got {len(nonce)}")
        try:
            return self._aesgcm.decrypt(nonce, ciphertext, None)
        except (InvalidTag, ValueError) as e:
            raise DecryptionError("Ciphertext failed authentication") from e
