"""Encryption of credentials at rest.

Values are encrypted with AES-256 in CTR mode using a fresh random IV per
call. The plaintext is suffixed with a site-wide salt before encryption and
decryption only succeeds when the recovered plaintext ends with that salt:

    encrypt(x) = base64(iv || AES-CTR(key, iv, x || salt))

CTR mode has no authentication tag, so the salt suffix is the integrity
check. A wrong key, a wrong salt or a tampered ciphertext yields CryptoError
instead of garbage plaintext.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import logging
import os
import secrets
import string

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from onesearch.config import Settings
from onesearch.errors import CryptoError, InsecureSecretError

logger = logging.getLogger(__name__)

IV_LENGTH = 16

# Used only when no site-wide secrets are configured.
FALLBACK_KEY = "this-is-not-a-real-key-change-me"
FALLBACK_SALT = "this-is-not-a-real-salt-change-me"

TOKEN_LENGTH = 128
_TOKEN_ALPHABET = string.ascii_letters + string.digits


def generate_token(length: int = TOKEN_LENGTH) -> str:
    """Generate a random alphanumeric shared token."""
    return "".join(secrets.choice(_TOKEN_ALPHABET) for _ in range(length))


class SecretStore:
    """Symmetric encrypt/decrypt keyed by the site-wide secret."""

    def __init__(self, key: str | None = None, salt: str | None = None):
        self.insecure = not key or not salt
        key = key or FALLBACK_KEY
        salt = salt or FALLBACK_SALT

        # AES-256 needs exactly 32 key bytes whatever the configured secret is
        self._key = hashlib.sha256(key.encode("utf-8")).digest()
        self._salt = salt.encode("utf-8")

        if self.insecure:
            logger.warning(
                "Encryption key or salt not configured; using insecure fallback secrets"
            )

    @classmethod
    def from_settings(cls, settings: Settings) -> "SecretStore":
        """Build from settings, refusing fallback secrets in production."""
        if settings.is_production and not (settings.encryption_key and settings.encryption_salt):
            raise InsecureSecretError()
        return cls(settings.encryption_key, settings.encryption_salt)

    def _cipher(self, iv: bytes) -> Cipher:
        return Cipher(algorithms.AES(self._key), modes.CTR(iv))

    def encrypt(self, plaintext: str) -> str:
        """Encrypt a value, returning base64(iv || ciphertext)."""
        iv = os.urandom(IV_LENGTH)
        encryptor = self._cipher(iv).encryptor()
        ciphertext = encryptor.update(plaintext.encode("utf-8") + self._salt)
        ciphertext += encryptor.finalize()
        return base64.b64encode(iv + ciphertext).decode("ascii")

    def decrypt(self, encoded: str) -> str:
        """Decrypt a value produced by :meth:`encrypt`.

        Raises:
            CryptoError: If the value is not valid base64, is too short, or
                does not end with the expected salt once decrypted.
        """
        try:
            raw = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError) as e:
            raise CryptoError("Stored secret is not valid base64.") from e

        if len(raw) <= IV_LENGTH:
            raise CryptoError("Stored secret is truncated.")

        iv, ciphertext = raw[:IV_LENGTH], raw[IV_LENGTH:]
        decryptor = self._cipher(iv).decryptor()
        value = decryptor.update(ciphertext) + decryptor.finalize()

        if not value.endswith(self._salt):
            raise CryptoError()

        try:
            return value[: -len(self._salt)].decode("utf-8")
        except UnicodeDecodeError as e:
            raise CryptoError() from e

    def decrypt_or_none(self, encoded: str | None) -> str | None:
        """Decrypt a value, treating a missing or unusable secret as None."""
        if not encoded:
            return None
        try:
            return self.decrypt(encoded)
        except CryptoError:
            logger.warning("Discarding stored secret that failed its integrity check")
            return None
