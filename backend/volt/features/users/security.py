"""
Password hashing and bearer tokens.

Passwords: PBKDF2-HMAC-SHA256, stored as
    pbkdf2_sha256$<iterations>$<salt hex>$<hash hex>
Tokens: random URL-safe strings; only their SHA-256 is persisted.
"""

import hashlib
import hmac
import secrets

from volt.config import settings

ALGORITHM = "pbkdf2_sha256"
SALT_BYTES = 16
TOKEN_BYTES = 32


def hash_password(password: str, iterations: int | None = None) -> str:
    """Hash a password with a fresh salt."""
    iterations = iterations or settings.password_hash_iterations
    salt = secrets.token_bytes(SALT_BYTES)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)
    return f"{ALGORITHM}${iterations}${salt.hex()}${digest.hex()}"


def verify_password(password: str, stored: str) -> bool:
    """Check a password against a stored hash (constant time)."""
    try:
        algorithm, iterations, salt_hex, digest_hex = stored.split("$")
        if algorithm != ALGORITHM:
            return False
        digest = hashlib.pbkdf2_hmac(
            "sha256", password.encode("utf-8"), bytes.fromhex(salt_hex), int(iterations)
        )
    except ValueError:
        return False
    return hmac.compare_digest(digest.hex(), digest_hex)


def generate_token() -> str:
    return secrets.token_urlsafe(TOKEN_BYTES)


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()
