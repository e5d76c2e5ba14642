"""AES-256-GCM encryption of stored certificate passwords.

Ciphertext layout (base64 encoded):

    salt (64 bytes) | iv (16 bytes) | tag (16 bytes) | ciphertext

The salt is random and carried for format compatibility with passwords
already stored; the key is used directly and never derived from it.
"""

from __future__ import annotations

import base64
import binascii
import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from signflow.domain.errors import PasswordEncryptionError

SALT_LENGTH = 64
IV_LENGTH = 16
TAG_LENGTH = 16
KEY_LENGTH = 32
_HEX_KEY_LENGTH = KEY_LENGTH * 2


def parse_encryption_key(raw_key: str | None) -> bytes:
    """Turn the configured key into 32 raw bytes.

    Args:
        raw_key: 64 hexadecimal characters, or a UTF-8 string of exactly
            32 bytes.

    Returns:
        The 32-byte AES key.

    Raises:
        PasswordEncryptionError: If the key is missing or malformed.
    """
    if not raw_key:
        raise PasswordEncryptionError(
            "CERTIFICATE_PASSWORD_KEY is not configured. "
            "Set a 32-byte key (64 hexadecimal characters)."
        )
    if len(raw_key) == _HEX_KEY_LENGTH:
        try:
            return bytes.fromhex(raw_key)
        except ValueError:
            raise PasswordEncryptionError(
                "CERTIFICATE_PASSWORD_KEY must be a 64-character hexadecimal string"
            ) from None
    key = raw_key.encode("utf-8")
    if len(key) != KEY_LENGTH:
        raise PasswordEncryptionError(
            f"CERTIFICATE_PASSWORD_KEY must be exactly {KEY_LENGTH} bytes, "
            f"got {len(key)}. Use 64 hexadecimal characters or a 32-byte "
            "UTF-8 string."
        )
    return key


class AesGcmPasswordCipher:
    """Encrypts and decrypts certificate passwords with AES-256-GCM."""

    def __init__(self, raw_key: str | None) -> None:
        self._raw_key = raw_key

    def _aesgcm(self) -> AESGCM:
        # Resolved per call so a missing key only fails password operations
        return AESGCM(parse_encryption_key(self._raw_key))

    def encrypt(self, password: str) -> str:
        """Encrypt a plaintext password.

        Raises:
            PasswordEncryptionError: If the password is empty or the key
                is invalid.
        """
        if not password:
            raise PasswordEncryptionError("Password must not be empty")
        aesgcm = self._aesgcm()
        salt = os.urandom(SALT_LENGTH)
        iv = os.urandom(IV_LENGTH)
        sealed = aesgcm.encrypt(iv, password.encode("utf-8"), None)
        ciphertext, tag = sealed[:-TAG_LENGTH], sealed[-TAG_LENGTH:]
        return base64.b64encode(salt + iv + tag + ciphertext).decode("ascii")

    def decrypt(self, encrypted: str) -> str:
        """Decrypt a password produced by encrypt().

        Raises:
            PasswordEncryptionError: If the input is empty, corrupt, or was
                encrypted with another key.
        """
        if not encrypted:
            raise PasswordEncryptionError("Encrypted password must not be empty")
        aesgcm = self._aesgcm()
        try:
            combined = base64.b64decode(encrypted, validate=True)
            header = SALT_LENGTH + IV_LENGTH + TAG_LENGTH
            if len(combined) < header:
                raise ValueError("ciphertext too short")
            iv = combined[SALT_LENGTH : SALT_LENGTH + IV_LENGTH]
            tag = combined[SALT_LENGTH + IV_LENGTH : header]
            ciphertext = combined[header:]
            plaintext = aesgcm.decrypt(iv, ciphertext + tag, None)
            return plaintext.decode("utf-8")
        except (InvalidTag, ValueError, binascii.Error) as e:
            raise PasswordEncryptionError(
                f"Failed to decrypt password: {type(e).__name__}. "
                "Check that the encryption key is correct."
            ) from e
