"""
Field-level encryption at rest with transparent key rotation.

Example:
    ```python
    from field_keyring import keyring

    krng = keyring(
        {1: "uDiMcWVNTuz//naQ88sOcN+E40CyBRGzGTT7OkoBS6M="},
        {"digest_salt": "salt"},
    )

    encrypted, keyring_id, digest = krng.encrypt("user@example.com")
    assert krng.decrypt(encrypted, keyring_id) == "user@example.com"

    # Rotate: add a key with a higher id, keep the old one for reads.
    krng = keyring(
        {
            1: "uDiMcWVNTuz//naQ88sOcN+E40CyBRGzGTT7OkoBS6M=",
            2: "VN8UXRVMNbIh9FWEFVde0q7GUA1SGOie1+FgAKlNYHc=",
        },
        {"digest_salt": "salt"},
    )
    ```
"""

from field_keyring.config import DEFAULT_OPTIONS, KeyringConfig
from field_keyring.crypto.envelope import digest
from field_keyring.crypto.key_store import KeySet
from field_keyring.exceptions import (
    AuthenticationFailedError,
    ConfigurationError,
    CryptoError,
    DecryptionFailedError,
    DuplicateKeyIdError,
    EmptyKeyringError,
    InvalidAlgorithmError,
    InvalidInputTypeError,
    KeyringError,
    MalformedEnvelopeError,
    MalformedKeyError,
    MissingDigestSaltError,
    NonIntegerKeyIdError,
    UnknownKeyIdError,
    WrongKeyLengthError,
)
from field_keyring.client import Keyring, keyring
from field_keyring.models.crypto import Algorithm, KeyDescriptor

__version__ = "0.1.0"

__all__ = [
    # Main entry points
    "Keyring",
    "keyring",
    "digest",
    "KeyringConfig",
    "DEFAULT_OPTIONS",
    # Models
    "Algorithm",
    "KeyDescriptor",
    "KeySet",
    # Exceptions
    "KeyringError",
    "ConfigurationError",
    "InvalidAlgorithmError",
    "EmptyKeyringError",
    "NonIntegerKeyIdError",
    "DuplicateKeyIdError",
    "MalformedKeyError",
    "WrongKeyLengthError",
    "MissingDigestSaltError",
    "UnknownKeyIdError",
    "InvalidInputTypeError",
    "CryptoError",
    "MalformedEnvelopeError",
    "AuthenticationFailedError",
    "DecryptionFailedError",
]
