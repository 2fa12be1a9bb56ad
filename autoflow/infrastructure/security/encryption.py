"""Provider token encryption (Fernet) for stored app connections."""

import base64

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from autoflow.core.config import get_settings

DECRYPTION_ERROR_MSG = "Failed to decrypt token - invalid or corrupted data"


class TokenEncryptor:
    """Encrypt/decrypt provider access tokens using Fernet.

    The key is derived from credential_encryption_secret (or secret_key)
    and encryption_salt, unless both are given explicitly.
    """

    def __init__(self, secret: str | None = None, salt: str | None = None) -> None:
        if secret is None or salt is None:
            settings = get_settings()
            if secret is None:
                configured = settings.credential_encryption_secret or settings.secret_key
                secret = configured.get_secret_value()
            if salt is None:
                salt = settings.encryption_salt.get_secret_value()
        self._fernet = Fernet(self._derive_key(secret, salt))

    @staticmethod
    def _derive_key(secret: str, salt: str) -> bytes:
        """Derive 32-byte key via PBKDF2-HMAC-SHA256."""
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=32,
            salt=salt.encode(),
            iterations=100_000,
        )
        return base64.urlsafe_b64encode(kdf.derive(secret.encode()))

    def encrypt(self, token: str) -> str:
        """Encrypt a token to a string safe for storage."""
        return self._fernet.encrypt(token.encode()).decode()

    def decrypt(self, encrypted: str) -> str:
        """Decrypt a stored token.

        Raises:
            ValueError: If the ciphertext is invalid or was made with another key.
        """
        try:
            return self._fernet.decrypt(encrypted.encode()).decode()
        except InvalidToken as e:
            raise ValueError(DECRYPTION_ERROR_MSG) from e
