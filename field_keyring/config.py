"""
Keyring configuration.
"""

from collections.abc import Mapping
from dataclasses import dataclass, fields
from types import MappingProxyType
from typing import Any, Self

from field_keyring.exceptions import ConfigurationError, MissingDigestSaltError
from field_keyring.models.crypto import Algorithm

DEFAULT_OPTIONS: Mapping[str, Any] = MappingProxyType({"encryption": Algorithm.AES_128_CBC})


@dataclass(frozen=True, kw_only=True)
class KeyringConfig:
    """
    Attributes:
        encryption: Encryption algorithm. Accepts an Algorithm or its name,
            e.g. "aes-256-cbc".
        digest_salt: String appended to every message before hashing it for
            lookup digests. Required; pass "" explicitly to disable salting.
    """

    encryption: Algorithm = Algorithm.AES_128_CBC
    digest_salt: str | None = None

    def __post_init__(self) -> None:
        if self.digest_salt is None:
            raise MissingDigestSaltError()
        if not isinstance(self.digest_salt, str):
            msg = "digest_salt must be a string"
            raise ConfigurationError(msg, received=type(self.digest_salt).__name__)
        object.__setattr__(self, "encryption", Algorithm.parse(self.encryption))

    @classmethod
    def from_options(cls, options: Mapping[str, Any] | None = None, **overrides: Any) -> Self:
        """
        Build a config from DEFAULT_OPTIONS, then options, then overrides.

        Args:
            options: Caller-supplied options mapping.
            **overrides: Individual options, taking precedence over the mapping.

        Returns:
            The validated config.

        Raises:
            ConfigurationError: If an option name is unknown.
            MissingDigestSaltError: If digest_salt is not provided.
            InvalidAlgorithmError: If encryption names no supported algorithm.
        """
        merged = {**DEFAULT_OPTIONS, **(options or {}), **overrides}

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(merged) - known)
        if unknown:
            msg = f"Unknown keyring options: {', '.join(unknown)}"
            raise ConfigurationError(msg, options=unknown)

        return cls(**merged)
