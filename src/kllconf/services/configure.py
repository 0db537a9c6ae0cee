"""ConfigureSession — the mutation operations of the configuration editor.

Every operation reads what it needs from the :class:`ConfigureState`,
builds a new value for the one field it touches, and writes it back with
``set``. Containers held in the store are never mutated in place.

Entities are matched by id, never by object identity: a stale copy of a
matrix item or macro still addresses the current entry with the same id.

INVARIANT: ``selected`` is either None or an item present in ``matrix``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from typing import Any, TypeVar

from pydantic import BaseModel

from kllconf.config.logging import configure_logging
from kllconf.config.settings import KllconfSettings
from kllconf.domain.errors import ErrorCode, PreconditionViolation
from kllconf.domain.ids import IdSource, UuidIdSource
from kllconf.domain.keys import KeyTable
from kllconf.domain.models import (
    Animation,
    Define,
    EditableConfig,
    Key,
    Macro,
    MatrixItem,
    PersistedConfig,
    layer_key,
)
from kllconf.state.store import ConfigureState
from kllconf.transform import mangle, merge_config, normalize

logger = logging.getLogger(__name__)


_T = TypeVar("_T", bound=BaseModel)


def _index_of(items: Sequence[_T], wanted: str, *, field: str = "id") -> int | None:
    for index, item in enumerate(items):
        if getattr(item, field) == wanted:
            return index
    return None


def _replace_at(items: Sequence[_T], index: int, item: _T) -> list[_T]:
    return [*items[:index], item, *items[index + 1 :]]


def _not_found(op: str, **detail: Any) -> None:
    logger.debug("%s: %s is a no-op (%s)", ErrorCode.TARGET_NOT_FOUND, op, detail)


def _not_loaded(key: str) -> PreconditionViolation:
    return PreconditionViolation(f"No {key} loaded; call update_config() first", key=key)


class ConfigureSession:
    """Editing session over one keyboard configuration.

    Parameters:
        state: Store to operate on; a fresh one is created when omitted.
        locales: Locale id -> key-name table, supplied by the host.
        id_source: Produces ids for added defines and macros.
        settings: Session settings; defaults come from ``KLLCONF_*`` env vars.
    """

    def __init__(
        self,
        state: ConfigureState | None = None,
        *,
        locales: Mapping[str, KeyTable] | None = None,
        id_source: IdSource | None = None,
        settings: KllconfSettings | None = None,
    ) -> None:
        self._settings = settings or KllconfSettings()
        self._state = state or ConfigureState(ui=self._settings.ui)
        self._locales: Mapping[str, KeyTable] = locales or {}
        self._ids: IdSource = id_source or UuidIdSource()

    @classmethod
    def from_settings(
        cls,
        settings: KllconfSettings | None = None,
        **kwargs: Any,
    ) -> ConfigureSession:
        """Host entry point: configure logging from *settings*, then build a session.

        ``verbose`` and ``log_json`` are applied through
        :func:`~kllconf.config.logging.configure_logging`. Hosts that manage
        logging themselves use the constructor directly.
        """
        settings = settings or KllconfSettings()
        configure_logging(verbose=settings.verbose, log_json=settings.log_json)
        return cls(settings=settings, **kwargs)

    @property
    def state(self) -> ConfigureState:
        return self._state

    # ------------------------------------------------------------------
    # Load / export
    # ------------------------------------------------------------------

    def reset(self) -> None:
        """Drop the loaded config and return to the empty state."""
        self._state.reset()

    def update_config(self, raw: PersistedConfig, locale: str | None = None) -> EditableConfig:
        """Load *raw* into the store, replacing every editable field.

        An unknown *locale* is not an error: keys resolve to placeholders.
        Returns the normalized model so callers can inspect ``warnings``.
        """
        locale = locale or self._settings.default_locale
        table = self._locales.get(locale)
        if table is None:
            logger.debug("No key table for locale %s; all keys become placeholders", locale)

        editable = normalize(raw, table)
        self._state.set("raw", raw)
        self._state.set("headers", editable.header)
        self._state.set("matrix", editable.matrix)
        self._state.set("defines", editable.defines)
        self._state.set("leds", editable.leds)
        self._state.set("custom", editable.custom)
        self._state.set("animations", editable.animations)
        self._state.set("macros", editable.macros)

        selected = self._state.get("selected")
        if selected is not None:
            matrix = editable.matrix or []
            index = _index_of(matrix, selected.uid, field="uid")
            self._state.set("selected", None if index is None else matrix[index])

        logger.debug(
            "Loaded config: %d keys, %d defines, %d animations, %d unresolved codes",
            len(editable.matrix or []),
            len(editable.defines or []),
            len(editable.animations or {}),
            len(editable.warnings),
        )
        return editable

    def current_config(self) -> PersistedConfig:
        """Persisted form of the current edits, merged over the loaded document."""
        editable = EditableConfig(
            header=self._state.get("headers"),
            matrix=self._state.get("matrix"),
            defines=self._state.get("defines"),
            leds=self._state.get("leds"),
            custom=self._state.get("custom"),
            animations=self._state.get("animations"),
            macros=self._state.get("macros"),
        )
        return merge_config(self._state.get("raw"), mangle(editable))

    # ------------------------------------------------------------------
    # Selection / layer
    # ------------------------------------------------------------------

    def select(self, item: MatrixItem | None) -> MatrixItem | None:
        """Select the matrix entry with ``item.uid``, or clear the selection."""
        if item is None:
            self._state.set("selected", None)
            return None
        matrix = self._require("matrix")
        index = _index_of(matrix, item.uid, field="uid")
        if index is None:
            _not_found("select", uid=item.uid)
            return None
        return self._state.set("selected", matrix[index])

    def set_layer(self, layer: int) -> None:
        if layer < 0:
            raise ValueError(f"Layer must be non-negative, got {layer}")
        self._state.set("layer", layer)

    # ------------------------------------------------------------------
    # Keymap / custom KLL / headers
    # ------------------------------------------------------------------

    def update_selected(self, key: Key) -> MatrixItem | None:
        """Assign *key* to the selected item on the current layer.

        Silent no-op when nothing is selected.
        """
        selected = self._state.get("selected")
        if selected is None:
            return None
        updated = self.update_keymap(selected, key)
        if updated is None:
            self._state.set("selected", None)
        return updated

    def update_keymap(self, target: MatrixItem, key: Key) -> MatrixItem | None:
        """Replace *target*'s entry for the current layer with *key*.

        Every other item, and every other layer of the target, is left as
        is. Returns the rebuilt item, or None when *target* is not in the
        matrix (the matrix is then unchanged). A selected target is
        re-pointed at the rebuilt item.
        """
        layer = self._state.get("layer")
        updated: MatrixItem | None = None

        def apply(matrix: list[MatrixItem]) -> list[MatrixItem]:
            nonlocal updated
            index = _index_of(matrix, target.uid, field="uid")
            if index is None:
                _not_found("update_keymap", uid=target.uid)
                return matrix
            updated = matrix[index].with_layer(layer, key)
            return _replace_at(matrix, index, updated)

        self._update("matrix", apply)
        selected = self._state.get("selected")
        if updated is not None and selected is not None and selected.uid == updated.uid:
            self._state.set("selected", updated)
        return updated

    def update_custom_kll(self, kll: str) -> None:
        """Overwrite the custom KLL fragment of the current layer."""
        layer = layer_key(self._state.get("layer"))
        self._update("custom", lambda custom: {**custom, layer: kll})

    def update_header(self, name: str, value: str) -> None:
        self._update("headers", lambda headers: {**headers, name: value})

    # ------------------------------------------------------------------
    # Defines
    # ------------------------------------------------------------------

    def update_define(self, define_id: str, name: str, value: str) -> None:
        """Replace name and value of the define with *define_id*, if any."""
        self._update(
            "defines",
            lambda defines: [
                d.model_copy(update={"name": name, "value": value}) if d.id == define_id else d
                for d in defines
            ],
        )

    def add_define(self, name: str, value: str) -> Define:
        define = Define(id=self._ids.new_id(), name=name, value=value)
        self._update("defines", lambda defines: [*defines, define])
        return define

    def delete_define(self, define_id: str) -> None:
        self._update("defines", lambda defines: [d for d in defines if d.id != define_id])

    # ------------------------------------------------------------------
    # Animations
    # ------------------------------------------------------------------

    def add_animation(self, name: str) -> None:
        """Insert an empty animation, replacing any existing one named *name*."""
        self._update("animations", lambda animations: {**animations, name: Animation()})

    def rename_animation(self, prev: str, updated: str) -> None:
        """Move animation *prev* to *updated*; an existing *updated* is overwritten.

        No-op when *prev* does not exist.
        """

        def apply(animations: dict[str, Animation]) -> dict[str, Animation]:
            if prev not in animations:
                _not_found("rename_animation", name=prev)
                return animations
            moved = animations[prev]
            renamed = {name: a for name, a in animations.items() if name != prev}
            renamed[updated] = moved
            return renamed

        self._update("animations", apply)

    def update_animation(self, name: str, data: Mapping[str, Any]) -> Animation:
        """Shallow-merge *data* into animation *name*.

        A missing animation is created from the defaults plus *data*.
        """
        merged: Animation | None = None

        def apply(animations: dict[str, Animation]) -> dict[str, Animation]:
            nonlocal merged
            current = animations.get(name)
            if current is None:
                logger.debug("Animation %s does not exist; creating it", name)
            base = {}
            if current is not None:
                base = {**current.model_dump(), "persisted_frames": current.persisted_frames}
            merged = Animation.model_validate({**base, **data})
            return {**animations, name: merged}

        self._update("animations", apply)
        assert merged is not None
        return merged

    def delete_animation(self, name: str) -> None:
        self._update(
            "animations",
            lambda animations: {n: a for n, a in animations.items() if n != name},
        )

    # ------------------------------------------------------------------
    # Macros
    # ------------------------------------------------------------------

    def update_macro(self, layer: int | str, macro: Macro, updated: Macro) -> None:
        """Replace the macro with ``macro.id`` on *layer*, keeping its position.

        No-op when the macro is not on that layer.
        """
        lk = layer_key(layer)

        def apply(macros: dict[str, list[Macro]]) -> dict[str, list[Macro]]:
            entries = self._layer_macros(macros, lk)
            index = _index_of(entries, macro.id)
            if index is None:
                _not_found("update_macro", layer=lk, macro_id=macro.id)
                return macros
            return {**macros, lk: _replace_at(entries, index, updated)}

        self._update("macros", apply)

    def add_macro(self, layer: int | str) -> Macro:
        """Append a blank macro to *layer*. The layer's macro list must exist."""
        lk = layer_key(layer)
        macro = Macro(id=self._ids.new_id())

        def apply(macros: dict[str, list[Macro]]) -> dict[str, list[Macro]]:
            return {**macros, lk: [*self._layer_macros(macros, lk), macro]}

        self._update("macros", apply)
        return macro

    def delete_macro(self, layer: int | str, macro: Macro) -> None:
        """Remove the first macro on *layer* with ``macro.id``."""
        lk = layer_key(layer)

        def apply(macros: dict[str, list[Macro]]) -> dict[str, list[Macro]]:
            entries = self._layer_macros(macros, lk)
            index = _index_of(entries, macro.id)
            if index is None:
                _not_found("delete_macro", layer=lk, macro_id=macro.id)
                return macros
            return {**macros, lk: [*entries[:index], *entries[index + 1 :]]}

        self._update("macros", apply)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _require(self, key: str) -> Any:
        value = self._state.get(key)
        if value is None:
            raise _not_loaded(key)
        return value

    def _update(self, key: str, fn: Callable[[Any], Any]) -> Any:
        def updater(current: Any) -> Any:
            if current is None:
                raise _not_loaded(key)
            return fn(current)

        return self._state.set(key, updater)

    @staticmethod
    def _layer_macros(macros: Mapping[str, list[Macro]], lk: str) -> list[Macro]:
        entries = macros.get(lk)
        if entries is None:
            raise PreconditionViolation(f"No macro list for layer {lk}", layer=lk)
        return entries
