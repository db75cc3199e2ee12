"""
Cryptographic domain models.
"""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Self

from field_keyring.exceptions import InvalidAlgorithmError, WrongKeyLengthError


class Algorithm(StrEnum):
    """Supported symmetric encryption algorithms."""

    AES_128_CBC = "aes-128-cbc"
    AES_192_CBC = "aes-192-cbc"
    AES_256_CBC = "aes-256-cbc"

    @property
    def key_size(self) -> int:
        """Get encryption key size in bytes for this algorithm."""
        match self:
            case Algorithm.AES_128_CBC:
                return 16
            case Algorithm.AES_192_CBC:
                return 24
            case Algorithm.AES_256_CBC:
                return 32

    @property
    def secret_size(self) -> int:
        """Get the size of a raw key secret (signing key + encryption key)."""
        return self.key_size * 2

    @property
    def block_size(self) -> int:
        """Get block size in bytes for this algorithm."""
        return 16

    @classmethod
    def parse(cls, value: object) -> Self:
        """
        Resolve an algorithm from its name.

        Args:
            value: An Algorithm member or its name, e.g. "aes-256-cbc".

        Returns:
            The matching Algorithm.

        Raises:
            InvalidAlgorithmError: If the value names no supported algorithm.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.lower())
            except ValueError:
                pass
        msg = f"Invalid encryption algorithm: {value}"
        raise InvalidAlgorithmError(msg, algorithm=value)


@dataclass(frozen=True, kw_only=True)
class KeyDescriptor:
    """
    One key of a keyring.

    Attributes:
        key_id: Non-negative integer id, unique within the keyring.
        encryption_key: AES key bytes.
        signing_key: HMAC-SHA256 key bytes, same length as encryption_key.
    """

    key_id: int
    encryption_key: bytes = field(repr=False)
    signing_key: bytes = field(repr=False)

    def __post_init__(self) -> None:
        if self.key_id < 0:
            msg = f"Key id must be non-negative, got {self.key_id}"
            raise ValueError(msg)
        if len(self.encryption_key) != len(self.signing_key):
            msg = "Encryption and signing keys must have the same length"
            raise ValueError(msg)

    @classmethod
    def from_secret(cls, key_id: int, secret: bytes, algorithm: Algorithm) -> Self:
        """
        Split a decoded secret into signing and encryption keys.

        The first half of the secret is the signing key, the second half the
        encryption key.

        Args:
            key_id: Id of the key.
            secret: Decoded secret, exactly twice the algorithm's key size.
            algorithm: Algorithm the key will be used with.

        Returns:
            The key descriptor.

        Raises:
            WrongKeyLengthError: If the secret has the wrong size.
        """
        expected = algorithm.secret_size
        if len(secret) != expected:
            msg = f"Expected key to be {expected} bytes long; got {len(secret)} instead"
            raise WrongKeyLengthError(msg, key_id=key_id, expected=expected, actual=len(secret))

        key_size = algorithm.key_size
        return cls(
            key_id=key_id,
            signing_key=bytes(secret[:key_size]),
            encryption_key=bytes(secret[key_size:]),
        )
