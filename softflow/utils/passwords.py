# softflow/utils/passwords.py
from __future__ import annotations

import hashlib
import hmac
import logging
import secrets

logger = logging.getLogger(__name__)

# scrypt parameters. Hashes created by the previous Node back-end used the
# same defaults (N=16384, r=8, p=1, 64-byte key), so they verify unchanged.
SCRYPT_N = 2 ** 14
SCRYPT_R = 8
SCRYPT_P = 1
KEY_LENGTH = 64
SALT_BYTES = 16
SEPARATOR = "."


def _derive(password: str, salt: str) -> bytes:
    # The salt's hex text (not its decoded bytes) is the KDF salt.
    return hashlib.scrypt(
        password.encode("utf-8"),
        salt=salt.encode("utf-8"),
        n=SCRYPT_N,
        r=SCRYPT_R,
        p=SCRYPT_P,
        dklen=KEY_LENGTH,
        maxmem=64 * 1024 * 1024,
    )


# =========================
# Password hashing / verify
# =========================
def hash_password(plain_password: str) -> str:
    """
    Hash a plaintext password with scrypt and a random salt.

    Returns ``"<hexKey>.<hexSalt>"``.
    """
    if not isinstance(plain_password, str) or not plain_password:
        raise ValueError("Password must be a non-empty string.")
    salt = secrets.token_hex(SALT_BYTES)
    key = _derive(plain_password, salt)
    return f"{key.hex()}{SEPARATOR}{salt}"


def verify_password(candidate: str, stored: str | None) -> bool:
    """
    Check ``candidate`` against a stored ``"<hexKey>.<hexSalt>"`` hash.

    Fails closed: malformed input or any error during derivation returns
    False, never raises.
    """
    if not stored or not isinstance(stored, str) or SEPARATOR not in stored:
        logger.warning("Stored password has no salt separator")
        return False

    hashed, _, salt = stored.partition(SEPARATOR)
    if not hashed or not salt:
        logger.warning("Stored password is missing its hash or salt")
        return False

    if not isinstance(candidate, str):
        return False

    try:
        expected = bytes.fromhex(hashed)
        supplied = _derive(candidate, salt)
        return hmac.compare_digest(expected, supplied)
    except Exception:
        logger.exception("Error comparing passwords")
        return False
