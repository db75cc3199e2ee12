"""
field_keyring exception hierarchy.

All exceptions inherit from KeyringError for easy catching.
"""

from typing import Any


class KeyringError(Exception):
    """Base exception for all field_keyring errors."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        if self.context:
            ctx = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({ctx})"
        return self.message


class ConfigurationError(KeyringError):
    """Keyring could not be constructed from the given keys or options."""


class InvalidAlgorithmError(ConfigurationError):
    """Encryption algorithm is not one of the supported AES-CBC variants."""

    def __init__(self, message: str, *, algorithm: object) -> None:
        super().__init__(message, algorithm=algorithm)
        self.algorithm = algorithm


class EmptyKeyringError(ConfigurationError):
    """No keys were supplied."""

    def __init__(self, message: str = "You must initialize the keyring with at least one key") -> None:
        super().__init__(message)


class NonIntegerKeyIdError(ConfigurationError):
    """A key id does not parse to a non-negative integer."""

    def __init__(self, message: str, *, key_id: object) -> None:
        super().__init__(message, key_id=key_id)
        self.key_id = key_id


class DuplicateKeyIdError(ConfigurationError):
    """Two raw key ids coerce to the same integer."""

    def __init__(self, message: str, *, key_id: int) -> None:
        super().__init__(message, key_id=key_id)
        self.key_id = key_id


class MalformedKeyError(ConfigurationError):
    """Key secret is not valid base64."""

    def __init__(self, message: str, *, key_id: int) -> None:
        super().__init__(message, key_id=key_id)
        self.key_id = key_id


class WrongKeyLengthError(ConfigurationError):
    """Decoded key secret does not match the algorithm's expected size."""

    def __init__(self, message: str, *, key_id: int, expected: int, actual: int) -> None:
        super().__init__(message, key_id=key_id, expected=expected, actual=actual)
        self.key_id = key_id
        self.expected = expected
        self.actual = actual


class MissingDigestSaltError(ConfigurationError):
    """The digest_salt option was omitted."""

    def __init__(
        self,
        message: str = (
            "Please provide `digest_salt` option; "
            "you can disable this error by explicitly passing an empty string."
        ),
    ) -> None:
        super().__init__(message)


class UnknownKeyIdError(KeyringError, LookupError):
    """No key with the requested id is available on the keyring."""

    def __init__(self, message: str, *, key_id: object) -> None:
        super().__init__(message, key_id=key_id)
        self.key_id = key_id


class InvalidInputTypeError(KeyringError, TypeError):
    """A message or envelope was not a string."""

    def __init__(self, message: str, *, received: str) -> None:
        super().__init__(message, received=received)
        self.received = received


class CryptoError(KeyringError):
    """Cryptographic operation failed."""


class MalformedEnvelopeError(CryptoError):
    """Envelope is not valid base64 or is shorter than tag and nonce."""


class AuthenticationFailedError(CryptoError):
    """Envelope authentication tag does not match its contents."""

    def __init__(self, message: str = "Envelope authentication failed", *, key_id: int | None = None) -> None:
        super().__init__(message, key_id=key_id)
        self.key_id = key_id


class DecryptionFailedError(CryptoError):
    """Authenticated ciphertext could not be decrypted or decoded."""
