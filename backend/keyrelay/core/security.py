# keyrelay/core/security.py

import hmac
import secrets

TOKEN_BYTES = 16


def generate_token() -> str:
    """128-bit random API key, hex encoded (32 characters)."""
    return secrets.token_hex(TOKEN_BYTES)


def verify_api_key(supplied, expected: str) -> bool:
    """Constant-time comparison of a presented key against the stored token.

    A missing or empty key never matches.
    """
    if not supplied or not expected:
        return False
    return hmac.compare_digest(supplied.encode("utf-8"), expected.encode("utf-8"))
