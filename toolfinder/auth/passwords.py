"""
Password hashing with bcrypt.

Only the hash is ever stored. bcrypt embeds the salt and cost factor in the
hash string, so verification needs nothing but the stored value.
"""

import logging

import bcrypt

logger = logging.getLogger(__name__)

# bcrypt only uses the first 72 bytes of the password
_BCRYPT_MAX_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(password: str, rounds: int = 12) -> str:
    """
    Hash a plaintext password.

    Args:
        password: Plaintext password
        rounds: bcrypt cost factor (BCRYPT_ROUNDS setting)

    Returns:
        bcrypt hash as a UTF-8 string
    """
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(_encode(password), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check a plaintext password against a stored bcrypt hash."""
    try:
        return bcrypt.checkpw(_encode(password), password_hash.encode("utf-8"))
    except ValueError:
        # Stored value is not a valid bcrypt hash
        logger.error("Stored password hash is malformed")
        return False
