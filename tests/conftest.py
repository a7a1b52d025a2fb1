"""Shared fixtures and helpers for protectpath tests."""

from typing import Iterable, List

import pytest

from protectpath.core.exceptions import AuthenticationError, DerivationError
from protectpath.security.crypto import decrypt_bytes, encrypt_bytes
from protectpath.security.random import RandomSource

INTEGRATION_PASSWORD = "Integration_Test_Password_2025!"
WRONG_PASSWORD = "Wrong_Password_123!"


class ScriptedRandom(RandomSource):
    """Returns pre-recorded chunks in order; records the requested lengths."""

    def __init__(self, chunks: Iterable[bytes]):
        self._chunks: List[bytes] = list(chunks)
        self.requests: List[int] = []

    def token_bytes(self, length: int) -> bytes:
        self.requests.append(length)
        chunk = self._chunks.pop(0)
        assert len(chunk) == length
        return chunk


class BrokenRandom(RandomSource):
    def token_bytes(self, length: int) -> bytes:
        raise DerivationError("no entropy")


def container_rejecting(plaintext: bytes, password: str, wrong: str) -> bytes:
    """
    Encrypt ``plaintext`` so that ``wrong`` is rejected by the padding check.

    A wrong key still yields valid PKCS#7 padding about once in 256 tries; the
    format cannot detect that, so tests that expect a rejection pick a
    container for which the rejection actually happens.
    """
    for _ in range(16):
        blob = encrypt_bytes(plaintext, password)
        try:
            decrypt_bytes(blob, wrong)
        except AuthenticationError:
            return blob
    raise AssertionError("could not build a container that rejects the wrong password")


@pytest.fixture
def scripted_random():
    def make(salt: bytes = b"\x11" * 32, iv: bytes = b"\x22" * 16) -> ScriptedRandom:
        return ScriptedRandom([salt, iv])

    return make
