"""
Key set management for a keyring.

Raw keys arrive as a mapping of integer-like ids to base64 secrets. Each secret
is decoded and split once, at construction; the resulting KeySet is immutable and
only answers two questions: which key is current (highest id), and which key
has a given id.
"""

import base64
import binascii
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import Self

import structlog

from field_keyring.exceptions import (
    DuplicateKeyIdError,
    EmptyKeyringError,
    MalformedKeyError,
    NonIntegerKeyIdError,
    UnknownKeyIdError,
)
from field_keyring.models.crypto import Algorithm, KeyDescriptor

logger = structlog.get_logger(__name__)

RawKeys = Mapping[str | int, str | bytes]


def _parse_key_id(value: object) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 0 else None
    if isinstance(value, str):
        text = value.strip()
        if text.isascii() and text.isdigit():
            return int(text, 10)
    return None


def _decode_secret(key_id: int, value: str | bytes) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    try:
        return base64.b64decode(value.strip(), validate=True)
    except (binascii.Error, ValueError, TypeError, AttributeError) as e:
        msg = "Key secret must be a base64-encoded string"
        raise MalformedKeyError(msg, key_id=key_id) from e


@dataclass(frozen=True)
class KeySet:
    """
    Immutable set of keys indexed by integer id.

    Use KeySet.build() to construct from raw configuration values.
    """

    algorithm: Algorithm
    keys: tuple[KeyDescriptor, ...]

    def __post_init__(self) -> None:
        if not self.keys:
            raise EmptyKeyringError()

    @classmethod
    def build(cls, raw_keys: RawKeys, algorithm: Algorithm | str) -> Self:
        """
        Build a key set from a mapping of id to secret.

        Args:
            raw_keys: Mapping of key id (int or numeric string) to a base64
                secret. Bytes values are taken as already-decoded secrets.
            algorithm: Encryption algorithm, or its name.

        Returns:
            The validated key set.

        Raises:
            InvalidAlgorithmError: If the algorithm is not supported.
            EmptyKeyringError: If no keys are given.
            NonIntegerKeyIdError: If an id is not a non-negative integer.
            DuplicateKeyIdError: If two ids coerce to the same integer.
            MalformedKeyError: If a secret is not valid base64.
            WrongKeyLengthError: If a secret has the wrong decoded length.
        """
        algorithm = Algorithm.parse(algorithm)

        if not raw_keys:
            raise EmptyKeyringError()

        descriptors: dict[int, KeyDescriptor] = {}
        for raw_id, value in raw_keys.items():
            key_id = _parse_key_id(raw_id)
            if key_id is None:
                msg = "All keyring keys must be non-negative integer numbers"
                raise NonIntegerKeyIdError(msg, key_id=raw_id)
            if key_id in descriptors:
                msg = f"Key id {key_id} is defined more than once"
                raise DuplicateKeyIdError(msg, key_id=key_id)

            secret = _decode_secret(key_id, value)
            descriptors[key_id] = KeyDescriptor.from_secret(key_id, secret, algorithm)

        key_set = cls(algorithm=algorithm, keys=tuple(descriptors.values()))
        logger.debug("Key set loaded", key_ids=key_set.ids, algorithm=str(algorithm))
        return key_set

    @property
    def current(self) -> KeyDescriptor:
        """The key with the highest id, used for every new encryption."""
        return max(self.keys, key=lambda key: key.key_id)

    def find(self, key_id: object) -> KeyDescriptor:
        """
        Find a key by its id.

        Args:
            key_id: Key id; numeric strings and integers are equivalent.

        Returns:
            The matching key.

        Raises:
            UnknownKeyIdError: If no key has that id.
        """
        parsed = _parse_key_id(key_id)
        if parsed is not None:
            for key in self.keys:
                if key.key_id == parsed:
                    return key

        msg = f"key={key_id} is not available on keyring"
        raise UnknownKeyIdError(msg, key_id=key_id)

    @property
    def ids(self) -> tuple[int, ...]:
        """All key ids in ascending order."""
        return tuple(sorted(key.key_id for key in self.keys))

    def __len__(self) -> int:
        return len(self.keys)

    def __iter__(self) -> Iterator[KeyDescriptor]:
        return iter(self.keys)

    def __contains__(self, key_id: object) -> bool:
        parsed = _parse_key_id(key_id)
        return parsed is not None and any(key.key_id == parsed for key in self.keys)
