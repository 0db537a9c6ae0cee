"""Editable model -> persisted (firmware-shaped) config fragments.

The output only contains the fields the editor owns. Callers merge it
over the originally loaded document with :func:`merge_config`, so every
field the editor does not understand passes through untouched.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from kllconf.domain.models import (
    Animation,
    EditableConfig,
    Key,
    Led,
    Macro,
    MatrixItem,
    PersistedConfig,
)


def _key(key: Key) -> dict[str, str]:
    return {"key": key.code, "label": key.label}


def _matrix_item(item: MatrixItem) -> dict[str, Any]:
    return {
        **(item.model_extra or {}),
        "layers": {layer: _key(key) for layer, key in item.layers.items()},
    }


def _led(led: Led) -> dict[str, Any]:
    return dict(led.model_extra or {})


def _frames(animation: Animation) -> list[str] | str:
    persisted = animation.persisted_frames
    if isinstance(persisted, str):
        return animation.frames
    if persisted is not None and "\n".join(persisted) == animation.frames:
        return list(persisted)
    return animation.frames.split("\n") if animation.frames else []


def _animation(animation: Animation) -> dict[str, Any]:
    return {
        **(animation.model_extra or {}),
        "settings": animation.settings,
        "frames": _frames(animation),
    }


def _macro(macro: Macro) -> dict[str, Any]:
    return {
        **(macro.model_extra or {}),
        "name": macro.name,
        "trigger": [[key.code for key in combo] for combo in macro.trigger],
        "output": [[key.code for key in combo] for combo in macro.output],
    }


def mangle(editable: EditableConfig) -> PersistedConfig:
    """Convert editable fields back to their persisted shape.

    Fields that are ``None`` on *editable* are left out of the result.
    Ids and placeholder flags are editor-only and never written.
    """
    out: PersistedConfig = {}
    if editable.header is not None:
        out["header"] = dict(editable.header)
    if editable.matrix is not None:
        out["matrix"] = [_matrix_item(item) for item in editable.matrix]
    if editable.defines is not None:
        out["defines"] = [
            {**(d.model_extra or {}), "name": d.name, "value": d.value} for d in editable.defines
        ]
    if editable.leds is not None:
        out["leds"] = [_led(led) for led in editable.leds]
    if editable.custom is not None:
        out["custom"] = dict(editable.custom)
    if editable.animations is not None:
        out["animations"] = {name: _animation(a) for name, a in editable.animations.items()}
    if editable.macros is not None:
        out["macros"] = {
            layer: [_macro(m) for m in macros] for layer, macros in editable.macros.items()
        }
    return out


def merge_config(raw: Mapping[str, Any] | None, mangled: Mapping[str, Any]) -> PersistedConfig:
    """Overlay *mangled* onto *raw*; mangled fields always win."""
    return {**(raw or {}), **mangled}
