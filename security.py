"""
Password hashing

Passwords are stored as PBKDF2-HMAC-SHA256 digests with a random 16-byte
salt, encoded as ``<salt hex>$<digest hex>``.
"""

import hashlib
import hmac
import os

ITERATIONS = 100_000


def hash_password(password: str) -> str:
    """Hash a password with a fresh random salt.

    Args:
        password: The plain text password.

    Returns:
        str: Salt and digest in hex, separated by ``$``.
    """
    salt = os.urandom(16)
    dk = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, ITERATIONS)
    return f"{salt.hex()}${dk.hex()}"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a plain password against a stored ``salt$digest`` string.

    This is the credential check for ``users.password_hash``. No route calls
    it yet; a login endpoint would use it to compare submitted passwords.
    Malformed hashes never match.
    """
    try:
        salt_hex, hash_hex = hashed_password.split("$", 1)
        salt = bytes.fromhex(salt_hex)
        stored_hash = bytes.fromhex(hash_hex)
    except ValueError:
        return False
    dk = hashlib.pbkdf2_hmac("sha256", plain_password.encode("utf-8"), salt, ITERATIONS)
    return hmac.compare_digest(dk, stored_hash)
