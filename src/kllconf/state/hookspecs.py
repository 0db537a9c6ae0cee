"""Pluggy hook specifications for store change notifications.

Views and other observers register a plugin object implementing
``state_changed``; :class:`~kllconf.state.store.ConfigureState` calls it
synchronously after every ``set``.
"""

from __future__ import annotations

from typing import Any

import pluggy

PROJECT_NAME = "kllconf"

hookspec = pluggy.HookspecMarker(PROJECT_NAME)
hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


class StateHookSpec:
    """Hook specifications for the configure store."""

    @hookspec
    def state_changed(self, key: str, value: Any) -> None:
        """Called after *key* was set to *value*."""

    @hookspec
    def state_reset(self) -> None:
        """Called once after the editing-session fields were reset."""
