"""Plain-data conversion and hashing for kernel state objects."""

import hashlib
import json
from dataclasses import fields, is_dataclass
from enum import Enum
from typing import Any


def to_plain(obj: Any) -> Any:
    """Recursively convert dataclasses, enums and containers to JSON-ready data.

    Dataclass fields whose name starts with an underscore are skipped.
    """
    if is_dataclass(obj) and not isinstance(obj, type):
        return {
            f.name: to_plain(getattr(obj, f.name))
            for f in fields(obj)
            if not f.name.startswith("_")
        }
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, dict):
        return {str(to_plain(k)): to_plain(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_plain(v) for v in obj]
    if isinstance(obj, set):
        return sorted(to_plain(v) for v in obj)
    return obj


def canonical_json(obj: Any) -> str:
    return json.dumps(to_plain(obj), sort_keys=True, separators=(",", ":"))


def state_hash(obj: Any) -> str:
    """SHA-256 of the canonical JSON form, used in the settlement audit trail."""
    return hashlib.sha256(canonical_json(obj).encode("utf-8")).hexdigest()
