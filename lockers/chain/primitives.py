"""
Hashing primitives shared by the audit log and the locker engine.
"""

import hashlib
import json
from enum import Enum


GENESIS_HASH = "0" * 16


class _EnumEncoder(json.JSONEncoder):
    """JSON encoder that handles Enum values."""
    def default(self, obj):
        if isinstance(obj, Enum):
            return obj.value
        if isinstance(obj, (set, frozenset)):
            return sorted(obj)
        return super().default(obj)


def canonical_json(data) -> str:
    """Serialize data with sorted keys and no whitespace."""
    return json.dumps(data, sort_keys=True, separators=(',', ':'), cls=_EnumEncoder)


def hash_data(data: dict) -> str:
    """Compute deterministic hash of a dictionary."""
    return hashlib.sha256(canonical_json(data).encode()).hexdigest()[:16]


def hash_text(text: str) -> str:
    """Hash free text (dispute reasons, freeze notes) for audit events."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()[:16]


def is_hex_digest(value: str, max_length: int = 64) -> bool:
    """Check that a value is a non-empty lowercase/uppercase hex string."""
    if not isinstance(value, str) or not 0 < len(value) <= max_length:
        return False
    return all(c in "0123456789abcdefABCDEF" for c in value)
