"""Utility helpers: id generation, credential hashing, database compatibility."""

from smart_workflow.utils.db_compat import DbDialect, detect_dialect, requires_static_pool
from smart_workflow.utils.ids import generate_id, to_base36
from smart_workflow.utils.security import (
    hash_password,
    mask_sensitive_data,
    verify_password,
)

__all__ = [
    "DbDialect",
    "detect_dialect",
    "generate_id",
    "hash_password",
    "mask_sensitive_data",
    "requires_static_pool",
    "to_base36",
    "verify_password",
]
