"""Editable configuration models.

All models are frozen. Edits build new instances with ``model_copy`` and
new containers around them, so any previously captured value (an undo
snapshot, a rendered view) stays valid.

Matrix items, defines, LEDs, animations and macros accept extra fields: whatever the
firmware format carries beyond what the editor understands rides along
and is written back unchanged by the mangler.
"""

from __future__ import annotations

from typing import Any, TypeAlias

from pydantic import BaseModel, Field

LayerKey: TypeAlias = str
PersistedConfig: TypeAlias = dict[str, Any]


def layer_key(layer: int | str) -> LayerKey:
    """Layer index as used for dict keys (``0`` -> ``"0"``)."""
    return str(layer)


class Key(BaseModel):
    """A display-level key definition resolved from a firmware key code.

    ``unknown`` marks the placeholder built for a code that the active
    key-name table does not know.
    """

    model_config = {"frozen": True}

    code: str
    label: str = ""
    unknown: bool = False


class MatrixItem(BaseModel):
    """One physical key position and its per-layer key assignments.

    ``uid`` is the editor handle; a persisted ``id`` is an ordinary extra
    field and is written back untouched.
    """

    model_config = {"frozen": True, "extra": "allow"}

    uid: str
    layers: dict[LayerKey, Key] = Field(default_factory=dict)

    def with_layer(self, layer: int | str, key: Key) -> MatrixItem:
        """Copy of this item with *layer* replaced (or created) by *key*."""
        return self.model_copy(update={"layers": {**self.layers, layer_key(layer): key}})


class Define(BaseModel):
    """A named constant emitted into generated firmware source."""

    model_config = {"frozen": True, "extra": "allow"}

    id: str
    name: str
    value: str


class Led(BaseModel):
    """Opaque LED descriptor; fields are whatever the firmware export holds."""

    model_config = {"frozen": True, "extra": "allow"}


class Animation(BaseModel):
    """LED animation; ``frames`` is the newline-joined frame list."""

    model_config = {"frozen": True, "extra": "allow"}

    settings: str = ""
    frames: str = ""
    # frames exactly as loaded; lets the mangler keep their persisted shape
    persisted_frames: list[str] | str | None = Field(default=None, exclude=True)


class Macro(BaseModel):
    """Trigger/output key sequences bound on one layer."""

    model_config = {"frozen": True, "extra": "allow"}

    id: str
    name: str = "New Macro"
    trigger: list[list[Key]] = Field(default_factory=lambda: [[]])
    output: list[list[Key]] = Field(default_factory=lambda: [[]])


class EditableConfig(BaseModel):
    """The editor-facing shape of a persisted configuration.

    Attributes:
        header: Header name -> value.
        matrix: Physical key positions in firmware order.
        defines: Ordered define list.
        leds: LED descriptors, passed through.
        custom: Layer key -> raw KLL fragment.
        animations: Animation name -> animation.
        macros: Layer key -> ordered macros of that layer.
        warnings: Non-fatal issues hit while normalizing (e.g. unknown codes).

    ``None`` means the field is absent and will be omitted when mangled.
    """

    model_config = {"frozen": True}

    header: dict[str, str] | None = None
    matrix: list[MatrixItem] | None = None
    defines: list[Define] | None = None
    leds: list[Led] | None = None
    custom: dict[LayerKey, str] | None = None
    animations: dict[str, Animation] | None = None
    macros: dict[LayerKey, list[Macro]] | None = None
    warnings: list[str] = Field(default_factory=list)
