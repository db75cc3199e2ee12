import base64
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor

import pytest
from structlog.testing import capture_logs

from field_keyring import Keyring, KeyringConfig, digest, keyring
from field_keyring.crypto.envelope import HEADER_SIZE, TAG_SIZE
from field_keyring.exceptions import (
    AuthenticationFailedError,
    EmptyKeyringError,
    InvalidAlgorithmError,
    InvalidInputTypeError,
    MissingDigestSaltError,
    NonIntegerKeyIdError,
    UnknownKeyIdError,
    WrongKeyLengthError,
)
from field_keyring.tests.constants import (
    DIGEST_42,
    DIGEST_42_SALT_A,
    KEY_128,
    KEY_128_ROTATED,
    KEYS_BY_ALGORITHM,
    OPENSSL_ENVELOPE_42,
)


def test_keyring_raises_on_missing_digest_salt() -> None:
    with pytest.raises(MissingDigestSaltError, match="Please provide `digest_salt` option"):
        keyring({0: KEY_128})


def test_keyring_raises_on_empty_keys() -> None:
    with pytest.raises(EmptyKeyringError):
        keyring({}, {"digest_salt": ""})


def test_keyring_raises_on_non_integer_keys() -> None:
    with pytest.raises(NonIntegerKeyIdError):
        keyring({"a": KEY_128}, {"digest_salt": ""})


def test_keyring_raises_on_invalid_algorithm() -> None:
    with pytest.raises(InvalidAlgorithmError):
        keyring({0: KEY_128}, {"encryption": "aes-512-cbc", "digest_salt": ""})


def test_keyring_raises_on_wrong_key_length() -> None:
    half = base64.b64encode(base64.b64decode(KEY_128)[:16]).decode("ascii")

    with pytest.raises(WrongKeyLengthError):
        keyring({0: half}, {"digest_salt": ""})


def test_encrypt_and_decrypt_with_every_algorithm(make_keyring: Callable[..., Keyring]) -> None:
    for encryption, secret in KEYS_BY_ALGORITHM.items():
        krng = make_keyring({0: secret}, encryption=encryption)

        encrypted, keyring_id, _ = krng.encrypt("42")

        assert encrypted != "42"
        assert krng.decrypt(encrypted, keyring_id) == "42"


def test_encrypt_returns_digest_without_salt(make_keyring: Callable[..., Keyring]) -> None:
    krng = make_keyring()

    encrypted, keyring_id, value_digest = krng.encrypt("42")

    assert keyring_id == 0
    assert value_digest == DIGEST_42
    assert krng.decrypt(encrypted, keyring_id) == "42"


def test_encrypt_returns_digest_using_salt(make_keyring: Callable[..., Keyring]) -> None:
    krng = make_keyring(digest_salt="a")

    _, _, value_digest = krng.encrypt("42")

    assert value_digest == DIGEST_42_SALT_A
    assert krng.digest("42") == DIGEST_42_SALT_A
    assert digest("42", "a") == DIGEST_42_SALT_A


def test_decrypt_with_separate_keyring_instance(make_keyring: Callable[..., Keyring]) -> None:
    encrypted, keyring_id, _ = make_keyring().encrypt("42")

    assert make_keyring().decrypt(encrypted, keyring_id) == "42"


def test_decrypt_envelope_produced_by_openssl(make_keyring: Callable[..., Keyring]) -> None:
    assert make_keyring().decrypt(OPENSSL_ENVELOPE_42, 0) == "42"


def test_encrypt_sets_keyring_id(make_keyring: Callable[..., Keyring]) -> None:
    _, keyring_id, _ = make_keyring({0: KEY_128}).encrypt("42")
    assert keyring_id == 0

    _, keyring_id, _ = make_keyring({1: KEY_128}).encrypt("42")
    assert keyring_id == 1


def test_rotation_encrypts_with_new_key_and_decrypts_old_values(
    make_keyring: Callable[..., Keyring],
) -> None:
    keys: dict[int | str, str] = {1: KEY_128}
    old_encrypted, old_id, _ = make_keyring(keys).encrypt("EMAIL")
    assert old_id == 1

    keys[2] = KEY_128_ROTATED
    rotated = make_keyring(keys)
    new_encrypted, new_id, _ = rotated.encrypt("EMAIL")

    assert rotated.current_key_id == 2
    assert new_id == 2
    assert rotated.decrypt(new_encrypted, new_id) == "EMAIL"
    assert rotated.decrypt(old_encrypted, old_id) == "EMAIL"


def test_rotation_keeps_digest_stable(make_keyring: Callable[..., Keyring]) -> None:
    _, _, before = make_keyring({1: KEY_128}, digest_salt="s").encrypt("EMAIL")
    _, _, after = make_keyring({1: KEY_128, 2: KEY_128_ROTATED}, digest_salt="s").encrypt("EMAIL")

    assert before == after


def test_decrypt_accepts_string_keyring_id(make_keyring: Callable[..., Keyring]) -> None:
    krng = make_keyring({7: KEY_128})
    encrypted, _, _ = krng.encrypt("42")

    assert krng.decrypt(encrypted, "7") == "42"


def test_decrypt_raises_on_unknown_keyring_id(make_keyring: Callable[..., Keyring]) -> None:
    krng = make_keyring({1: KEY_128})
    encrypted, _, _ = krng.encrypt("42")

    with pytest.raises(UnknownKeyIdError, match="key=2 is not available on keyring"):
        krng.decrypt(encrypted, 2)


def test_decrypt_raises_on_unknown_keyring_id_for_garbage(make_keyring: Callable[..., Keyring]) -> None:
    with pytest.raises(UnknownKeyIdError):
        make_keyring({1: KEY_128}).decrypt("garbage", 9)


def test_decrypt_fails_after_old_key_is_removed(make_keyring: Callable[..., Keyring]) -> None:
    encrypted, keyring_id, _ = make_keyring({1: KEY_128}).encrypt("42")

    with pytest.raises(UnknownKeyIdError):
        make_keyring({2: KEY_128_ROTATED}).decrypt(encrypted, keyring_id)


def test_decrypt_raises_on_tampered_envelope(make_keyring: Callable[..., Keyring]) -> None:
    krng = make_keyring()
    encrypted, keyring_id, _ = krng.encrypt("42")
    decoded = bytearray(base64.b64decode(encrypted))
    decoded[-1] ^= 0xFF
    tampered = base64.b64encode(bytes(decoded)).decode("ascii")

    with pytest.raises(AuthenticationFailedError):
        krng.decrypt(tampered, keyring_id)


def test_decrypt_logs_authentication_failure(make_keyring: Callable[..., Keyring]) -> None:
    krng = make_keyring({3: KEY_128})
    encrypted, _, _ = krng.encrypt("42")
    decoded = bytearray(base64.b64decode(encrypted))
    decoded[0] ^= 0x01
    tampered = base64.b64encode(bytes(decoded)).decode("ascii")

    with capture_logs() as logs, pytest.raises(AuthenticationFailedError):
        krng.decrypt(tampered, 3)

    assert {"event": "Envelope authentication failed", "key_id": 3, "log_level": "warning"} in logs


def test_decrypt_logs_legacy_key_use(make_keyring: Callable[..., Keyring]) -> None:
    encrypted, _, _ = make_keyring({1: KEY_128}).encrypt("42")
    krng = make_keyring({1: KEY_128, 2: KEY_128_ROTATED})

    with capture_logs() as logs:
        krng.decrypt(encrypted, 1)

    assert {"event": "Decrypting with legacy key", "key_id": 1, "log_level": "debug"} in logs


def test_logs_never_contain_plaintext(make_keyring: Callable[..., Keyring]) -> None:
    with capture_logs() as logs:
        krng = make_keyring({1: KEY_128})
        encrypted, keyring_id, _ = krng.encrypt("top secret")
        krng.decrypt(encrypted, keyring_id)

    assert "top secret" not in repr(logs)
    assert KEY_128 not in repr(logs)


def test_encrypt_raises_on_non_string(make_keyring: Callable[..., Keyring]) -> None:
    with pytest.raises(InvalidInputTypeError):
        make_keyring().encrypt(1234)  # type: ignore[arg-type]


def test_encrypt_and_digest_raise_keyring_error_on_lone_surrogate(
    make_keyring: Callable[..., Keyring],
) -> None:
    krng = make_keyring()

    with pytest.raises(InvalidInputTypeError):
        krng.encrypt("\ud800")
    with pytest.raises(InvalidInputTypeError):
        krng.digest("a\udc80")


def test_digest_raises_on_non_string(make_keyring: Callable[..., Keyring]) -> None:
    with pytest.raises(InvalidInputTypeError):
        make_keyring().digest(None)  # type: ignore[arg-type]


def test_keyring_accepts_config_object() -> None:
    krng = Keyring({0: KEY_128}, KeyringConfig(digest_salt="a"))

    assert krng.digest("42") == DIGEST_42_SALT_A
    assert str(krng.algorithm) == "aes-128-cbc"


def test_keyring_accepts_keyword_overrides() -> None:
    krng = keyring({0: KEY_128}, digest_salt="")

    assert krng.current_key_id == 0


def test_key_ids_are_sorted(make_keyring: Callable[..., Keyring]) -> None:
    krng = make_keyring({"10": KEY_128, 2: KEY_128_ROTATED})

    assert krng.key_ids == (2, 10)
    assert krng.current_key_id == 10


def test_repr_hides_key_material(make_keyring: Callable[..., Keyring]) -> None:
    krng = make_keyring({1: KEY_128})

    assert repr(krng) == "Keyring(encryption='aes-128-cbc', key_ids=(1,))"


def test_concurrent_encryption_uses_unique_nonces(make_keyring: Callable[..., Keyring]) -> None:
    krng = make_keyring()

    with ThreadPoolExecutor(max_workers=8) as executor:
        results = list(executor.map(lambda i: krng.encrypt(f"value-{i}"), range(200)))

    nonces = {base64.b64decode(encrypted)[TAG_SIZE:HEADER_SIZE] for encrypted, _, _ in results}
    assert len(nonces) == 200
    for i, (encrypted, keyring_id, _) in enumerate(results):
        assert krng.decrypt(encrypted, keyring_id) == f"value-{i}"
