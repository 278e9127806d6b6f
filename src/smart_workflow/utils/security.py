"""Credential helpers.

The admin password is never stored or returned in clear text. It is kept as
a bcrypt hash (``$2b$<cost>$<salt+digest>``), so the algorithm version and
work factor travel with every stored value.
"""

from typing import Any

import bcrypt

DEFAULT_ROUNDS = 10

# bcrypt only reads the first 72 bytes of a password
_MAX_PASSWORD_BYTES = 72


def hash_password(password: str, rounds: int = DEFAULT_ROUNDS) -> str:
    """Return a bcrypt hash of *password* suitable for storage.

    Example:
        ```python
        stored = hash_password("s3cret")
        # Returns: "$2b$10$N9qo8uLOickgx2ZMRZoMye..."
        ```
    """
    secret = password.encode()[:_MAX_PASSWORD_BYTES]
    return bcrypt.hashpw(secret, bcrypt.gensalt(rounds=rounds)).decode()


def verify_password(password: str, stored: str | None) -> bool:
    """Check *password* against a hash produced by :func:`hash_password`."""
    if not stored:
        return False
    try:
        return bcrypt.checkpw(password.encode()[:_MAX_PASSWORD_BYTES], stored.encode())
    except ValueError:
        return False


def mask_sensitive_data(
    data: dict[str, Any],
    sensitive_keys: list[str] | None = None,
    mask_char: str = "*",
) -> dict[str, Any]:
    """Mask sensitive values in a dictionary before it is logged.

    Example:
        ```python
        mask_sensitive_data({"email": "a@b.c", "password": "x"})
        # Returns: {"email": "a@b.c", "password": "***MASKED***"}
        ```
    """
    if sensitive_keys is None:
        sensitive_keys = [
            "password",
            "secret",
            "token",
            "api_key",
            "apikey",
            "database_url",
        ]

    masked = data.copy()

    for key in masked:
        key_lower = key.lower()
        if any(sensitive in key_lower for sensitive in sensitive_keys):
            masked[key] = f"{mask_char * 3}MASKED{mask_char * 3}"

    return masked


__all__ = [
    "hash_password",
    "mask_sensitive_data",
    "verify_password",
]
