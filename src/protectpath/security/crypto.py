"""AES-256-CBC encryption of byte buffers into the salt/IV/ciphertext container.

There is no authentication tag in this format. On decrypt the only check is
PKCS#7 padding, so a wrong password and a corrupted file look the same and
both surface as ``AuthenticationError``.
"""
from __future__ import annotations

import logging
from typing import Callable, Optional

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from protectpath.core.exceptions import AuthenticationError, FormatError
from protectpath.core.models import OperationState
from .container import BLOCK_SIZE, IV_SIZE, decode, encode
from .kdf import derive_key_into, generate_salt
from .random import RandomSource, default_random_source
from .secret import SecretBuffer, SecretInput

logger = logging.getLogger(__name__)

StateHook = Callable[[OperationState], None]


def _noop(state: OperationState) -> None:
    pass


def aes_cbc_encrypt(key: bytes | bytearray, iv: bytes, plaintext: bytes) -> bytes:
    padder = padding.PKCS7(BLOCK_SIZE * 8).padder()
    padded = padder.update(plaintext) + padder.finalize()
    encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
    return encryptor.update(padded) + encryptor.finalize()


def aes_cbc_decrypt(key: bytes | bytearray, iv: bytes, ciphertext: bytes) -> bytes:
    if len(ciphertext) % BLOCK_SIZE != 0:
        raise FormatError("ciphertext is not a multiple of the cipher block size")
    decryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
    padded = decryptor.update(ciphertext) + decryptor.finalize()
    unpadder = padding.PKCS7(BLOCK_SIZE * 8).unpadder()
    try:
        return unpadder.update(padded) + unpadder.finalize()
    except ValueError as e:
        raise AuthenticationError("wrong password or corrupted data") from e


def encrypt_bytes(
    plaintext: bytes,
    password: SecretInput,
    rng: Optional[RandomSource] = None,
    on_state: Optional[StateHook] = None,
) -> bytes:
    """
    Encrypt ``plaintext`` under ``password`` and return the container bytes.

    A fresh salt and IV are drawn for every call, so encrypting the same
    input twice never yields the same container.
    """
    on_state = on_state or _noop
    rng = rng or default_random_source()

    # draw randomness first so an RNG failure aborts before any work
    salt = generate_salt(rng)
    iv = rng.token_bytes(IV_SIZE)

    with SecretBuffer.from_password(password) as pw:
        on_state(OperationState.DERIVING)
        with derive_key_into(pw, salt) as key:
            on_state(OperationState.TRANSFORMING)
            ciphertext = aes_cbc_encrypt(key.value, iv, plaintext)

    container = encode(salt, iv, ciphertext)
    logger.debug("encrypted %d bytes into %d-byte container", len(plaintext), len(container))
    return container


def decrypt_bytes(
    container: bytes,
    password: SecretInput,
    on_state: Optional[StateHook] = None,
) -> bytes:
    """
    Recover the plaintext from ``container``.

    Raises:
        FormatError: container shorter than 64 bytes or not block aligned
        AuthenticationError: padding check failed after decryption
        DerivationError: empty password or KDF failure
    """
    on_state = on_state or _noop
    salt, iv, ciphertext = decode(container)
    if len(ciphertext) % BLOCK_SIZE != 0:
        raise FormatError("container length is not aligned to the cipher block size")

    with SecretBuffer.from_password(password) as pw:
        on_state(OperationState.DERIVING)
        with derive_key_into(pw, salt) as key:
            on_state(OperationState.TRANSFORMING)
            plaintext = aes_cbc_decrypt(key.value, iv, ciphertext)

    logger.debug("decrypted %d-byte container into %d bytes", len(container), len(plaintext))
    return plaintext
