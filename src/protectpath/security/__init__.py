"""Security helpers: key derivation, container codec and AES-CBC engines.

This package provides:
- PBKDF2-HMAC-SHA256 key derivation with fixed interoperability parameters
- the salt || IV || ciphertext container codec
- byte-level encrypt/decrypt built on the ``cryptography`` package
- scoped secret buffers and the secure random capability
"""

from .kdf import generate_salt, derive_key, kdf_params_to_dict
from .container import Container, encode, decode, expected_container_size
from .crypto import encrypt_bytes, decrypt_bytes
from .random import RandomSource, SystemRandomSource, default_random_source
from .secret import SecretBuffer

__all__ = [
    "generate_salt",
    "derive_key",
    "kdf_params_to_dict",
    "Container",
    "encode",
    "decode",
    "expected_container_size",
    "encrypt_bytes",
    "decrypt_bytes",
    "RandomSource",
    "SystemRandomSource",
    "default_random_source",
    "SecretBuffer",
]
