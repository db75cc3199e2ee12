from collections.abc import Callable

import pytest

from field_keyring.client import Keyring, keyring
from field_keyring.tests.constants import KEY_128


@pytest.fixture
def make_keyring() -> Callable[..., Keyring]:
    def _make(
        keys: dict[int | str, str] | None = None,
        encryption: str = "aes-128-cbc",
        digest_salt: str = "",
    ) -> Keyring:
        return keyring(keys or {0: KEY_128}, {"encryption": encryption, "digest_salt": digest_salt})

    return _make
