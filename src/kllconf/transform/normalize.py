"""Persisted (firmware-shaped) config -> editable model.

INVARIANT: normalize() is pure. The same ``raw`` and key table always
produce an equal EditableConfig, ids included.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from kllconf.domain.errors import ErrorCode
from kllconf.domain.ids import stable_id
from kllconf.domain.keys import KeyTable, resolve_key
from kllconf.domain.models import (
    Animation,
    Define,
    EditableConfig,
    Key,
    LayerKey,
    Led,
    Macro,
    MatrixItem,
    layer_key,
)

logger = logging.getLogger(__name__)


class _Resolver:
    """Resolves key codes and remembers the ones the table lacks."""

    def __init__(self, table: KeyTable | None) -> None:
        self._table = table
        self.unknown: list[str] = []

    def __call__(self, code: Any, label: str | None = None) -> Key:
        key = resolve_key(str(code), self._table, label)
        if key.unknown and key.code not in self.unknown:
            self.unknown.append(key.code)
        return key


def _extras(entry: Mapping[str, Any], *owned: str) -> dict[str, Any]:
    return {k: v for k, v in entry.items() if k not in owned}


def _layer_entry(entry: Any, resolve: _Resolver) -> Key:
    # Persisted layer entries are {"key": code, "label": ...}; bare codes are accepted too.
    if isinstance(entry, Mapping):
        return resolve(entry.get("key", ""), entry.get("label"))
    return resolve(entry)


def _matrix(raw: Sequence[Mapping[str, Any]], resolve: _Resolver) -> list[MatrixItem]:
    items = []
    for index, entry in enumerate(raw):
        layers = {
            layer_key(layer): _layer_entry(value, resolve)
            for layer, value in (entry.get("layers") or {}).items()
        }
        uid = stable_id("key", index, entry.get("code", ""))
        items.append(MatrixItem(uid=uid, layers=layers, **_extras(entry, "uid", "layers")))
    return items


def _defines(raw: Sequence[Mapping[str, Any]]) -> list[Define]:
    return [
        Define(
            id=stable_id("define", index, d.get("name", "")),
            name=str(d.get("name", "")),
            value=str(d.get("value", "")),
            **_extras(d, "id", "name", "value"),
        )
        for index, d in enumerate(raw)
    ]


def _animations(raw: Mapping[str, Mapping[str, Any]]) -> dict[str, Animation]:
    animations = {}
    for name, data in raw.items():
        persisted = data.get("frames")
        if persisted is None or isinstance(persisted, str):
            frames = persisted or ""
        else:
            persisted = [str(f) for f in persisted]
            frames = "\n".join(persisted)
        animations[name] = Animation(
            settings=data.get("settings") or "",
            frames=frames,
            persisted_frames=persisted,
            **_extras(data, "settings", "frames", "persisted_frames"),
        )
    return animations


def _sequences(raw: Sequence[Sequence[Any]] | None, resolve: _Resolver) -> list[list[Key]]:
    if raw is None:
        return [[]]
    return [[_layer_entry(token, resolve) for token in combo] for combo in raw]


def _macros(
    raw: Mapping[Any, Sequence[Mapping[str, Any]]], resolve: _Resolver
) -> dict[LayerKey, list[Macro]]:
    macros: dict[LayerKey, list[Macro]] = {}
    for layer, entries in raw.items():
        key = layer_key(layer)
        macros[key] = [
            Macro(
                id=stable_id("macro", key, index, m.get("name", "")),
                name=m.get("name", ""),
                trigger=_sequences(m.get("trigger"), resolve),
                output=_sequences(m.get("output"), resolve),
                **_extras(m, "id", "name", "trigger", "output"),
            )
            for index, m in enumerate(entries)
        ]
    return macros


def normalize(raw: Mapping[str, Any] | None, key_table: KeyTable | None) -> EditableConfig:
    """Build the editable model from a persisted config.

    Any missing field normalizes to an empty container. Codes absent from
    *key_table* (or every code, when the table is None) become placeholder
    keys; each distinct one is reported once in ``warnings``.
    """
    raw = raw or {}
    resolve = _Resolver(key_table)

    editable = EditableConfig(
        header={str(k): str(v) for k, v in (raw.get("header") or {}).items()},
        matrix=_matrix(raw.get("matrix") or [], resolve),
        defines=_defines(raw.get("defines") or []),
        leds=[Led(**led) for led in raw.get("leds") or []],
        custom={layer_key(k): v for k, v in (raw.get("custom") or {}).items()},
        animations=_animations(raw.get("animations") or {}),
        macros=_macros(raw.get("macros") or {}, resolve),
        warnings=[f"{ErrorCode.UNKNOWN_KEY_CODE}: {code}" for code in resolve.unknown],
    )

    if resolve.unknown:
        logger.debug(
            "Unresolved key codes replaced by placeholders: %s",
            ", ".join(resolve.unknown),
        )
    return editable
