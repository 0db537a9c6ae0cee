"""ConfigureState — observable key-value store for one editing session.

The schema is fixed: every key the editor and its views share is listed
in :data:`STATE_KEYS`. Writes go through :meth:`ConfigureState.set`,
which notifies pluggy ``state_changed`` hooks synchronously.

INVARIANT: Subscriber failures are warnings, never errors. A broken view
must not abort the mutation that triggered it.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import pluggy

from kllconf.config.models import UiConfig
from kllconf.state.hookspecs import PROJECT_NAME, StateHookSpec, hookimpl

logger = logging.getLogger(__name__)

# Cleared by reset(); ``loading`` and ``ui`` survive it.
SESSION_KEYS: tuple[str, ...] = (
    "layer",
    "layout",
    "selected",
    "keyboard_hidden",
    "raw",
    "headers",
    "matrix",
    "defines",
    "leds",
    "custom",
    "animations",
    "macros",
)

STATE_KEYS: tuple[str, ...] = ("loading", *SESSION_KEYS, "ui")

_SESSION_DEFAULTS: dict[str, Any] = {key: None for key in SESSION_KEYS} | {
    "layer": 0,
    "keyboard_hidden": False,
}


class _KeySubscriber:
    """Adapts a per-key callback to the ``state_changed`` hook."""

    def __init__(self, key: str, callback: Callable[[Any], None]) -> None:
        self._key = key
        self._callback = callback

    @hookimpl
    def state_changed(self, key: str, value: Any) -> None:
        if key == self._key:
            self._callback(value)


class ConfigureState:
    """Authoritative mutable state of the configuration editor.

    Parameters:
        ui: Sizing constants for the view; defaults to :class:`UiConfig`.

    Usage::

        state = ConfigureState()
        state.set("layer", 1)
        state.set("headers", lambda headers: {**(headers or {}), "Author": "me"})
    """

    def __init__(self, ui: UiConfig | None = None) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(StateHookSpec)
        self._values: dict[str, Any] = {
            "loading": False,
            **_SESSION_DEFAULTS,
            "ui": ui or UiConfig(),
        }

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def get(self, key: str) -> Any:
        """Current value of *key*. Raises KeyError for keys outside the schema."""
        self._check_key(key)
        return self._values[key]

    def set(self, key: str, value: Any) -> Any:
        """Store *value* under *key* and notify subscribers.

        A callable *value* is treated as an updater: it is called with the
        current value and its return value is stored. Returns the stored value.
        """
        self._check_key(key)
        if callable(value):
            value = value(self._values[key])
        self._values[key] = value
        self._notify(key, value)
        return value

    def reset(self) -> None:
        """Restore the editing-session fields to their initial values."""
        for key in SESSION_KEYS:
            self.set(key, _SESSION_DEFAULTS[key])
        self._call_each("state_reset")

    def snapshot(self) -> dict[str, Any]:
        """Shallow copy of every key's current value."""
        return dict(self._values)

    def register(self, plugin: object, name: str | None = None) -> None:
        """Register an observer implementing ``state_changed`` / ``state_reset``."""
        self._pm.register(plugin, name=name)

    def unregister(self, plugin: object) -> None:
        if self._pm.is_registered(plugin):
            self._pm.unregister(plugin)

    def subscribe(self, key: str, callback: Callable[[Any], None]) -> Callable[[], None]:
        """Stream values of *key* to *callback*.

        The callback receives the current value right away and every
        subsequently set value. Returns a function that unsubscribes.
        """
        self._check_key(key)
        subscriber = _KeySubscriber(key, callback)
        self.register(subscriber)
        callback(self._values[key])
        return lambda: self.unregister(subscriber)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _check_key(self, key: str) -> None:
        if key not in self._values:
            raise KeyError(f"Unknown state key: {key!r}")

    def _notify(self, key: str, value: Any) -> None:
        self._call_each("state_changed", key=key, value=value)

    def _call_each(self, name: str, **kwargs: Any) -> None:
        """Call every implementation of hook *name*; one failure does not stop the rest."""
        hook = getattr(self._pm.hook, name)
        for impl in reversed(hook.get_hookimpls()):
            try:
                impl.function(**{arg: kwargs[arg] for arg in impl.argnames})
            except Exception:
                if "key" in kwargs:
                    logger.warning(
                        "%s subscriber failed for %s", name, kwargs["key"], exc_info=True
                    )
                else:
                    logger.warning("%s subscriber failed", name, exc_info=True)
