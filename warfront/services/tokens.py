"""
Opaque bearer and one-time tokens.

Plaintext tokens are handed to the caller exactly once; only their SHA-256
digest is persisted.
"""

import hashlib
import secrets

TOKEN_BYTES = 32


def generate_token() -> str:
    """Create a new url-safe random token."""
    return secrets.token_urlsafe(TOKEN_BYTES)


def hash_token(token: str) -> str:
    """Digest used to store and look up a token."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()
