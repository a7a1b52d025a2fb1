import logging
from typing import Dict

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from protectpath.core.exceptions import DerivationError
from .random import RandomSource, default_random_source
from .secret import SecretBuffer, SecretInput, wipe

logger = logging.getLogger(__name__)

# Fixed interoperability parameters; the reference tool uses the same values.
SALT_SIZE = 32
KEY_SIZE = 32
ITERATIONS = 100_000
DIGEST = "SHA256"


def generate_salt(rng: RandomSource | None = None) -> bytes:
    """Return a fresh 32-byte salt from the secure random source."""
    return (rng or default_random_source()).token_bytes(SALT_SIZE)


def _derive(password: bytes | bytearray, salt: bytes) -> bytes:
    if len(password) == 0:
        raise DerivationError("password must not be empty")
    if len(salt) != SALT_SIZE:
        raise DerivationError(f"salt must be exactly {SALT_SIZE} bytes, got {len(salt)}")
    try:
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=KEY_SIZE,
            salt=bytes(salt),
            iterations=ITERATIONS,
        )
        return kdf.derive(password)
    except Exception as e:
        raise DerivationError(f"key derivation failed: {e}") from e


def derive_key(password: SecretInput, salt: bytes) -> bytes:
    """
    Derive the 32-byte AES key from a password using PBKDF2-HMAC-SHA256.

    String passwords are encoded as UTF-8. The password copy made here is
    wiped before returning.
    """
    with SecretBuffer.from_password(password) as pw:
        return _derive(pw.value, salt)


def derive_key_into(password: SecretBuffer, salt: bytes) -> SecretBuffer:
    """Same as :func:`derive_key` but keeps the key in a wipeable buffer."""
    logger.debug("deriving key: pbkdf2-hmac-%s iterations=%d", DIGEST.lower(), ITERATIONS)
    key = bytearray(_derive(password.value, salt))
    try:
        return SecretBuffer(key)
    finally:
        wipe(key)


def kdf_params_to_dict() -> Dict:
    return {
        "algo": "pbkdf2",
        "digest": DIGEST,
        "iterations": ITERATIONS,
        "salt_size": SALT_SIZE,
        "key_size": KEY_SIZE,
    }
