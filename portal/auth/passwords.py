"""
Password hashing with bcrypt.
"""
import logging

import bcrypt

logger = logging.getLogger(__name__)

DEFAULT_BCRYPT_ROUNDS = 12

# bcrypt only uses the first 72 bytes; newer releases reject longer input
BCRYPT_MAX_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode('utf-8')[:BCRYPT_MAX_BYTES]


def hash_password(password: str, bcrypt_rounds: int = DEFAULT_BCRYPT_ROUNDS) -> str:
    """Hash a password.

    Args:
        password: Plain-text password
        bcrypt_rounds: Cost factor (lowered in tests)
    """
    if not password:
        raise ValueError("Password cannot be empty")
    salt = bcrypt.gensalt(rounds=bcrypt_rounds)
    return bcrypt.hashpw(_encode(password), salt).decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    """Check a password against a stored hash. Malformed hashes never match."""
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(_encode(password), password_hash.encode('utf-8'))
    except ValueError:
        logger.warning("Stored password hash is malformed")
        return False
