"""
Domain models for field_keyring.

These are immutable (frozen) dataclasses and enums shared by the key store and
the envelope codec.
"""

from field_keyring.models.crypto import Algorithm, KeyDescriptor

__all__ = [
    "Algorithm",
    "KeyDescriptor",
]
