"""Fixed three-part container layout shared with the OpenSSL reference tool.

Layout (no header, no version byte, no integrity tag):
- bytes 0..31: salt for PBKDF2
- bytes 32..47: AES-CBC initialization vector
- bytes 48..end: AES-256-CBC ciphertext, PKCS#7 padded

The smallest valid container is 64 bytes: the header plus one cipher block,
which is what an empty plaintext encrypts to.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Any, Tuple

from protectpath.core.exceptions import FormatError
from .kdf import SALT_SIZE

IV_SIZE = 16
BLOCK_SIZE = 16
HEADER_SIZE = SALT_SIZE + IV_SIZE
MIN_CONTAINER_SIZE = HEADER_SIZE + BLOCK_SIZE


@dataclass(frozen=True)
class Container:
    salt: bytes
    iv: bytes
    ciphertext: bytes

    def to_bytes(self) -> bytes:
        return encode(self.salt, self.iv, self.ciphertext)

    @classmethod
    def from_bytes(cls, data: bytes) -> "Container":
        return cls(*decode(data))

    def __len__(self) -> int:
        return HEADER_SIZE + len(self.ciphertext)


def encode(salt: bytes, iv: bytes, ciphertext: bytes) -> bytes:
    """Concatenate salt || iv || ciphertext."""
    if len(salt) != SALT_SIZE:
        raise ValueError(f"salt must be {SALT_SIZE} bytes")
    if len(iv) != IV_SIZE:
        raise ValueError(f"iv must be {IV_SIZE} bytes")
    return bytes(salt) + bytes(iv) + bytes(ciphertext)


def decode(data: bytes) -> Tuple[bytes, bytes, bytes]:
    """
    Split a container into (salt, iv, ciphertext).

    Only the minimum size is checked here; a ciphertext of the wrong length
    is caught by the block cipher during decryption.
    """
    if len(data) < MIN_CONTAINER_SIZE:
        raise FormatError("container too small")
    data = bytes(data)
    return data[:SALT_SIZE], data[SALT_SIZE:HEADER_SIZE], data[HEADER_SIZE:]


def expected_container_size(plaintext_size: int) -> int:
    """Container length for a plaintext of ``plaintext_size`` bytes."""
    if plaintext_size < 0:
        raise ValueError("plaintext_size must be >= 0")
    # PKCS#7 always adds 1..16 bytes, a full block when already aligned
    return HEADER_SIZE + BLOCK_SIZE * (plaintext_size // BLOCK_SIZE + 1)


def inspect(data: bytes) -> Dict[str, Any]:
    """Describe the non-secret parts of a container without decrypting it."""
    size = len(data)
    info: Dict[str, Any] = {
        "size": size,
        "valid_size": size >= MIN_CONTAINER_SIZE,
        "block_aligned": size >= HEADER_SIZE and (size - HEADER_SIZE) % BLOCK_SIZE == 0,
    }
    if size >= MIN_CONTAINER_SIZE:
        salt, iv, ciphertext = decode(data)
        info["salt"] = salt.hex()
        info["iv"] = iv.hex()
        info["ciphertext_size"] = len(ciphertext)
        info["max_plaintext_size"] = len(ciphertext) - 1
    return info
