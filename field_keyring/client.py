"""
Keyring client facade.

This is the main entry point for users of the library. A Keyring binds a key
set to its configuration and exposes the four operations storage glue needs:
encrypt, decrypt, digest and current_key_id.
"""

from collections.abc import Mapping
from typing import Any

import structlog

from field_keyring.config import KeyringConfig
from field_keyring.crypto.envelope import decrypt_envelope, encrypt_message
from field_keyring.crypto.envelope import digest as _digest
from field_keyring.crypto.key_store import KeySet, RawKeys
from field_keyring.exceptions import AuthenticationFailedError
from field_keyring.models.crypto import Algorithm

logger = structlog.get_logger(__name__)


class Keyring:
    """
    Encrypts field values under the newest key and decrypts them under any key.

    Example:
        ```python
        keyring = Keyring(
            {1: "uDiMcWVNTuz//naQ88sOcN+E40CyBRGzGTT7OkoBS6M="},
            KeyringConfig(digest_salt="salt"),
        )

        encrypted, keyring_id, digest = keyring.encrypt("user@example.com")

        # Persist all three; later:
        email = keyring.decrypt(encrypted, keyring_id)
        ```

    Rotation is adding a key with a higher id. New encryptions use it, while
    values stored under older ids keep decrypting as long as their key stays
    on the keyring.
    """

    def __init__(self, keys: RawKeys, config: KeyringConfig) -> None:
        """
        Args:
            keys: Mapping of key id to base64 secret.
            config: Keyring configuration.

        Raises:
            ConfigurationError: If the keys are invalid for the configured algorithm.
        """
        self._config = config
        self._keys = KeySet.build(keys, config.encryption)
        logger.debug(
            "Keyring initialized",
            encryption=str(config.encryption),
            key_ids=self._keys.ids,
            current_key_id=self.current_key_id,
        )

    @property
    def algorithm(self) -> Algorithm:
        return self._config.encryption

    @property
    def key_ids(self) -> tuple[int, ...]:
        return self._keys.ids

    @property
    def current_key_id(self) -> int:
        """Id of the key used for new encryptions."""
        return self._keys.current.key_id

    def encrypt(self, message: str) -> tuple[str, int, str]:
        """
        Encrypt a message with the current key.

        Args:
            message: Plaintext string.

        Returns:
            Tuple of (envelope, keyring_id, digest).

        Raises:
            InvalidInputTypeError: If message is not a string.
        """
        key = self._keys.current
        envelope = encrypt_message(key, self.algorithm, message)
        return envelope, key.key_id, self.digest(message)

    def decrypt(self, envelope: str, keyring_id: int | str) -> str:
        """
        Decrypt an envelope with the key it was encrypted under.

        Args:
            envelope: Base64 envelope returned by encrypt().
            keyring_id: Key id returned by encrypt() alongside the envelope.

        Returns:
            Plaintext string.

        Raises:
            UnknownKeyIdError: If keyring_id is not on this keyring.
            MalformedEnvelopeError: If the envelope cannot be parsed.
            AuthenticationFailedError: If the envelope was tampered with.
            DecryptionFailedError: If the authenticated ciphertext is invalid.
        """
        key = self._keys.find(keyring_id)
        if key.key_id != self.current_key_id:
            logger.debug("Decrypting with legacy key", key_id=key.key_id)

        try:
            return decrypt_envelope(key, self.algorithm, envelope)
        except AuthenticationFailedError:
            logger.warning("Envelope authentication failed", key_id=key.key_id)
            raise

    def digest(self, message: str) -> str:
        """Salted SHA-1 of message, for equality lookups."""
        return _digest(message, self._config.digest_salt)

    def __repr__(self) -> str:
        return f"Keyring(encryption={str(self.algorithm)!r}, key_ids={self.key_ids!r})"


def keyring(keys: RawKeys, options: Mapping[str, Any] | None = None, **overrides: Any) -> Keyring:
    """
    Create a keyring from raw keys and an options mapping.

    Options are merged over DEFAULT_OPTIONS; keyword overrides win over both.

    Args:
        keys: Mapping of key id to base64 secret.
        options: Options mapping with "encryption" and "digest_salt".
        **overrides: Individual options.

    Returns:
        A new Keyring.

    Raises:
        ConfigurationError: If options or keys are invalid.
    """
    return Keyring(keys, KeyringConfig.from_options(options, **overrides))
