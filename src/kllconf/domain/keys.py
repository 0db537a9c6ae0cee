"""Key-name tables and key code resolution.

A :data:`KeyTable` maps firmware key codes to display-level :class:`Key`
definitions for one locale. Tables are supplied by the host application;
this module only resolves codes against them.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TypeAlias

from kllconf.domain.models import Key

KeyTable: TypeAlias = Mapping[str, Key]


def placeholder_key(code: str, label: str | None = None) -> Key:
    """Stand-in for a code the active table cannot resolve."""
    return Key(code=code, label=label or code, unknown=True)


def resolve_key(code: str, table: KeyTable | None, label: str | None = None) -> Key:
    """Look *code* up in *table*, falling back to a placeholder.

    A missing table (unknown locale) resolves every code to a placeholder.
    *label* is the label stored alongside the code in the persisted config;
    it is only used for placeholders.
    """
    if table is not None:
        key = table.get(code)
        if key is not None:
            return key
    return placeholder_key(code, label)
