"""ID generation contracts.

Two ID strategies:
- Stable (normalizer): SHA-256 over kind and position parts, 8 hex chars.
  Loading the same persisted config twice yields the same ids.
- Fresh (editor): an :class:`IdSource` hands out a new unique id per call.
  Used when the user adds a define or a macro.

INVARIANT: IDs are permanent. Once assigned, an entity's id never changes.
"""

from __future__ import annotations

import hashlib
import uuid
from typing import Protocol

ID_PREFIXES: dict[str, str] = {
    "key": "key_",
    "define": "def_",
    "macro": "mac_",
}


class IdSource(Protocol):
    """Anything that produces session-unique opaque string ids."""

    def new_id(self) -> str: ...


class UuidIdSource:
    """Default :class:`IdSource` backed by ``uuid4``."""

    def new_id(self) -> str:
        return uuid.uuid4().hex


def stable_id(kind: str, *parts: object) -> str:
    """Deterministic id for an entity found at a fixed place in a config.

    Returns ``{prefix}{8 hex chars}``; the hex is the head of SHA-256 over
    the ``/``-joined *parts*.

    Examples:
        >>> stable_id("key", 0, "0x01") == stable_id("key", 0, "0x01")
        True
    """
    prefix = ID_PREFIXES[kind]
    joined = "/".join(str(p) for p in parts)
    digest = hashlib.sha256(joined.encode("utf-8")).hexdigest()[:8]
    return f"{prefix}{digest}"
