"""
Authenticated envelope encoding for encrypted field values.

An envelope is the base64 encoding of:

    HMAC-SHA256(signing_key, nonce || ciphertext)   32 bytes
    nonce                                           16 bytes
    AES-CBC(encryption_key, nonce, message)         PKCS7 padded

The tag is verified before any decryption is attempted. Whitespace inside an
envelope (e.g. MIME line breaks) is ignored when decoding.
"""

import base64
import binascii
import hashlib
import os

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, hmac, padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from field_keyring.exceptions import (
    AuthenticationFailedError,
    DecryptionFailedError,
    InvalidInputTypeError,
    MalformedEnvelopeError,
    MissingDigestSaltError,
)
from field_keyring.models.crypto import Algorithm, KeyDescriptor

TAG_SIZE = 32
NONCE_SIZE = 16
HEADER_SIZE = TAG_SIZE + NONCE_SIZE


def encrypt_message(key: KeyDescriptor, algorithm: Algorithm, message: str) -> str:
    """
    Encrypt a message into a base64 envelope.

    Args:
        key: Key to encrypt and sign with.
        algorithm: Algorithm the key belongs to.
        message: Plaintext string.

    Returns:
        Base64-encoded envelope.

    Raises:
        InvalidInputTypeError: If message is not a string or cannot be encoded as UTF-8.
    """
    _require_str(message, "encrypt")

    nonce = os.urandom(NONCE_SIZE)
    padder = padding.PKCS7(algorithm.block_size * 8).padder()
    padded = padder.update(_encode(message, "encrypt")) + padder.finalize()

    encryptor = _cipher(key, nonce).encryptor()
    ciphertext = encryptor.update(padded) + encryptor.finalize()

    tag = _sign(key.signing_key, nonce + ciphertext)
    return base64.b64encode(tag + nonce + ciphertext).decode("ascii")


def decrypt_envelope(key: KeyDescriptor, algorithm: Algorithm, envelope: str) -> str:
    """
    Verify and decrypt a base64 envelope.

    Args:
        key: Key the envelope was encrypted with.
        algorithm: Algorithm the key belongs to.
        envelope: Base64-encoded envelope.

    Returns:
        Decrypted plaintext string.

    Raises:
        InvalidInputTypeError: If envelope is not a string.
        MalformedEnvelopeError: If envelope is not base64 or is too short.
        AuthenticationFailedError: If the authentication tag does not match.
        DecryptionFailedError: If the authenticated ciphertext cannot be decrypted.
    """
    _require_str(envelope, "decrypt")

    try:
        decoded = base64.b64decode("".join(envelope.split()), validate=True)
    except (binascii.Error, ValueError) as e:
        msg = "Envelope is not valid base64"
        raise MalformedEnvelopeError(msg) from e

    if len(decoded) < HEADER_SIZE:
        msg = f"Envelope too short: {len(decoded)} < {HEADER_SIZE}"
        raise MalformedEnvelopeError(msg)

    tag = decoded[:TAG_SIZE]
    nonce = decoded[TAG_SIZE:HEADER_SIZE]
    ciphertext = decoded[HEADER_SIZE:]

    _verify(key, nonce + ciphertext, tag)

    try:
        decryptor = _cipher(key, nonce).decryptor()
        padded = decryptor.update(ciphertext) + decryptor.finalize()
        unpadder = padding.PKCS7(algorithm.block_size * 8).unpadder()
        plaintext = unpadder.update(padded) + unpadder.finalize()
        return plaintext.decode("utf-8")
    except (ValueError, UnicodeDecodeError) as e:
        msg = "Failed to decrypt authenticated envelope"
        raise DecryptionFailedError(msg, key_id=key.key_id) from e


def digest(message: str, digest_salt: str | None) -> str:
    """
    Compute the salted SHA-1 digest of a message.

    Used for equality lookups, never for confidentiality.

    Args:
        message: Plaintext string.
        digest_salt: Salt appended to the message; "" disables salting.

    Returns:
        Lowercase hex SHA-1 of message followed by salt (40 characters).

    Raises:
        MissingDigestSaltError: If digest_salt is None.
        InvalidInputTypeError: If message is not a string or cannot be encoded as UTF-8.
    """
    if digest_salt is None:
        raise MissingDigestSaltError()

    if not isinstance(message, str):
        msg = f'You can only generate SHA1 digests from strings (received "{type(message).__name__}" instead)'
        raise InvalidInputTypeError(msg, received=type(message).__name__)

    return hashlib.sha1(_encode(f"{message}{digest_salt}", "digest")).hexdigest()


def _encode(value: str, operation: str) -> bytes:
    try:
        return value.encode("utf-8")
    except UnicodeEncodeError as e:
        msg = f"Can only {operation} strings encodable as UTF-8 (lone surrogate at position {e.start})"
        raise InvalidInputTypeError(msg, received="str") from e


def _require_str(value: object, operation: str) -> None:
    if not isinstance(value, str):
        msg = f"Can only {operation} strings (received {type(value).__name__!r} instead)"
        raise InvalidInputTypeError(msg, received=type(value).__name__)


def _cipher(key: KeyDescriptor, nonce: bytes) -> Cipher:
    return Cipher(algorithms.AES(key.encryption_key), modes.CBC(nonce))


def _sign(signing_key: bytes, data: bytes) -> bytes:
    mac = hmac.HMAC(signing_key, hashes.SHA256())
    mac.update(data)
    return mac.finalize()


def _verify(key: KeyDescriptor, data: bytes, tag: bytes) -> None:
    mac = hmac.HMAC(key.signing_key, hashes.SHA256())
    mac.update(data)
    try:
        mac.verify(tag)
    except InvalidSignature as e:
        raise AuthenticationFailedError(key_id=key.key_id) from e
