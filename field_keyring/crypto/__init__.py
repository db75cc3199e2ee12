"""
Cryptographic operations for field_keyring.

This module provides:
- Key set construction, current-key selection and lookup by id
- Authenticated AES-CBC + HMAC-SHA256 envelopes
- Salted SHA-1 digests for equality lookups
"""

from field_keyring.crypto.envelope import (
    HEADER_SIZE,
    NONCE_SIZE,
    TAG_SIZE,
    decrypt_envelope,
    digest,
    encrypt_message,
)
from field_keyring.crypto.key_store import KeySet

__all__ = [
    "KeySet",
    "HEADER_SIZE",
    "NONCE_SIZE",
    "TAG_SIZE",
    "decrypt_envelope",
    "digest",
    "encrypt_message",
]
