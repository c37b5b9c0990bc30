"""Password hashing utilities.

Learn: Uses bcrypt for secure password hashing. bcrypt automatically
handles salting and is resistant to rainbow table attacks.
The work factor (rounds=12) takes ~100ms per hash on modern hardware.
"""

import hashlib

import bcrypt


def hash_password(password: str) -> str:
    """Hash a password with bcrypt.

    Learn: bcrypt includes a random salt automatically and produces
    hashes starting with "$2b$". Passwords are truncated to 72 bytes
    (bcrypt's limit).
    """
    pw_bytes = password.encode("utf-8")[:72]
    salt = bcrypt.gensalt(rounds=12)
    return bcrypt.hashpw(pw_bytes, salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its bcrypt hash. Malformed hashes never match."""
    try:
        pw_bytes = password.encode("utf-8")[:72]
        hash_bytes = password_hash.encode("utf-8")
        return bcrypt.checkpw(pw_bytes, hash_bytes)
    except (ValueError, TypeError, AttributeError):
        return False


def hash_reset_token(token: str) -> str:
    """SHA-256 digest of a password reset token, as stored in the database.

    Reset tokens are long random strings, so a fast unsalted digest is
    enough and keeps the lookup a plain indexed equality.
    """
    return hashlib.sha256(token.encode("utf-8")).hexdigest()
