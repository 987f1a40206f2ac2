"""
Token encryption — encrypt / decrypt Slack access tokens at rest.

Uses Fernet (AES-128-CBC + HMAC-SHA256) from the ``cryptography`` library.
The default cipher is built from ``config.token_encryption_key``
(env var: ``TOKEN_ENCRYPTION_KEY``).

If no key is configured, encryption is **disabled** and tokens are stored
as plaintext (with a startup warning).  Generate a key with::

    python -c "from cryptography.fernet import Fernet; print(Fernet.generate_key().decode())"
"""

from __future__ import annotations

import logging
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken

from config.settings import config

logger = logging.getLogger(__name__)


class TokenCipher:
    """Fernet wrapper that degrades to a passthrough when no key is set."""

    def __init__(self, key: str = "") -> None:
        self._fernet: Optional[Fernet] = None
        if not key:
            logger.warning(
                "TOKEN_ENCRYPTION_KEY not set — Slack access tokens will be stored as plaintext."
            )
            return
        self._fernet = Fernet(key.encode() if isinstance(key, str) else key)
        logger.info("Token encryption enabled (Fernet/AES-128-CBC)")

    @property
    def enabled(self) -> bool:
        return self._fernet is not None

    def encrypt(self, plaintext: str) -> str:
        """
        Encrypt a token string for database storage.

        Returns the Fernet ciphertext (URL-safe base64), or the plaintext
        unchanged when encryption is disabled.
        """
        if self._fernet is None:
            return plaintext
        return self._fernet.encrypt(plaintext.encode()).decode()

    def decrypt(self, ciphertext: str) -> str:
        """
        Decrypt a token string read from the database.

        Rows written before encryption was enabled are not valid Fernet
        tokens and are returned as-is.
        """
        if self._fernet is None:
            return ciphertext
        try:
            return self._fernet.decrypt(ciphertext.encode()).decode()
        except InvalidToken:
            logger.warning("Stored token is not Fernet ciphertext; returning it unchanged")
            return ciphertext


_default_cipher: Optional[TokenCipher] = None


def get_token_cipher() -> TokenCipher:
    """Lazy-initialise the process-wide cipher once."""
    global _default_cipher
    if _default_cipher is None:
        _default_cipher = TokenCipher(config.token_encryption_key)
    return _default_cipher
