"""Application-level record ids.

Every record is addressed by a string of the form
``<prefix>_<timestamp-base36><random-base36>`` (for example
``tsk_lx2k9c1q4h7d0a9z``). The store's native identifier is never used for
cross-record references.
"""
from __future__ import annotations

import secrets
import string
import time

_BASE36_ALPHABET = string.digits + string.ascii_lowercase


def to_base36(value: int) -> str:
    """Encode a non-negative integer in lowercase base 36.

    Example:
        ```python
        to_base36(35)    # "z"
        to_base36(36)    # "10"
        ```
    """
    if value < 0:
        raise ValueError("to_base36 expects a non-negative integer")
    if value == 0:
        return "0"
    digits: list[str] = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36_ALPHABET[rem])
    return "".join(reversed(digits))


def generate_id(prefix: str, random_length: int = 8) -> str:
    """Generate a record id for the entity type named by *prefix*.

    The timestamp part is the current time in milliseconds so ids sort
    roughly by creation time; the random part uses ``secrets``.

    Args:
        prefix: Entity prefix without the trailing underscore ("tsk", "prj" ...)
        random_length: Number of random base-36 characters

    Returns:
        Generated id

    Example:
        ```python
        generate_id("prj")
        # Returns: "prj_lx2k9c1q4h7d0a9z"
        ```
    """
    if not prefix:
        raise ValueError("generate_id requires a non-empty prefix")
    time_part = to_base36(time.time_ns() // 1_000_000)
    random_part = "".join(secrets.choice(_BASE36_ALPHABET) for _ in range(random_length))
    return f"{prefix.rstrip('_')}_{time_part}{random_part}"


__all__ = ["generate_id", "to_base36"]
