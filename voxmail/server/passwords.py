"""
Password hashing with PBKDF2-HMAC-SHA256.

Stored format: ``pbkdf2_sha256$<iterations>$<salt b64>$<hash b64>``. The
iteration count is stored with the hash, so raising KDF_ITERATIONS does
not invalidate existing accounts.
"""

import base64
import logging
import secrets

from cryptography.exceptions import InvalidKey
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from voxmail.config import get_section

logger = logging.getLogger(__name__)

ALGORITHM = "pbkdf2_sha256"
SALT_BYTES = 16
KEY_LENGTH = 32

# KDF iterations (from args/voxmail.yaml security section)
KDF_ITERATIONS = int(get_section("security").get("kdf_iterations", 100000))


def _kdf(salt: bytes, iterations: int) -> PBKDF2HMAC:
    return PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_LENGTH,
        salt=salt,
        iterations=iterations,
    )


def hash_password(password: str) -> str:
    salt = secrets.token_bytes(SALT_BYTES)
    key = _kdf(salt, KDF_ITERATIONS).derive(password.encode())
    return "$".join(
        (
            ALGORITHM,
            str(KDF_ITERATIONS),
            base64.b64encode(salt).decode(),
            base64.b64encode(key).decode(),
        )
    )


def verify_password(password: str, stored: str) -> bool:
    """Constant-time check of ``password`` against a stored hash."""
    try:
        algorithm, iterations, salt_b64, key_b64 = stored.split("$")
        if algorithm != ALGORITHM:
            return False
        salt = base64.b64decode(salt_b64)
        key = base64.b64decode(key_b64)
        _kdf(salt, int(iterations)).verify(password.encode(), key)
    except InvalidKey:
        return False
    except ValueError as e:
        logger.warning(f"Malformed password hash: {e}")
        return False
    return True
