"""Shared pytest fixtures and test helpers for kllconf tests."""

from __future__ import annotations

import itertools
from typing import Any

import pytest

from kllconf.config.settings import KllconfSettings
from kllconf.domain.keys import KeyTable
from kllconf.domain.models import Key
from kllconf.services.configure import ConfigureSession
from kllconf.state.store import ConfigureState

EN_US: KeyTable = {
    "ESC": Key(code="ESC", label="Esc"),
    "A": Key(code="A", label="A"),
    "B": Key(code="B", label="B"),
    "LSHIFT": Key(code="LSHIFT", label="Shift"),
    "F1": Key(code="F1", label="F1"),
}


class CountingIdSource:
    """Deterministic IdSource: ``id-1``, ``id-2``, ..."""

    def __init__(self) -> None:
        self._counter = itertools.count(1)

    def new_id(self) -> str:
        return f"id-{next(self._counter)}"


def make_raw() -> dict[str, Any]:
    """A complete persisted config whose labels agree with EN_US."""
    return {
        "header": {"Name": "TestBoard", "Layout": "ANSI"},
        "matrix": [
            {
                "code": "0x01",
                "x": 0,
                "y": 0,
                "layers": {
                    "0": {"key": "ESC", "label": "Esc"},
                    "1": {"key": "F1", "label": "F1"},
                },
            },
            {"code": "0x02", "x": 1, "y": 0, "layers": {"0": {"key": "A", "label": "A"}}},
            {"code": "0x03", "x": 2, "y": 0, "layers": {"0": {"key": "B", "label": "B"}}},
        ],
        "defines": [{"name": "DEBOUNCE", "value": "5"}],
        "leds": [{"id": 1, "scanCode": "0x01", "x": 0, "y": 0}],
        "custom": {"0": "U\"A\" : U\"B\";", "1": ""},
        "animations": {"blink": {"settings": "loop", "frames": ["A[0]", "A[1]"]}},
        "macros": {
            "0": [{"name": "Shout", "trigger": [["LSHIFT", "A"]], "output": [["B"], ["B"]]}],
            "1": [],
        },
        "keyboard": "MD1",
        "variant": "standard",
    }


@pytest.fixture
def raw_config() -> dict[str, Any]:
    return make_raw()


@pytest.fixture
def key_table() -> KeyTable:
    return EN_US


@pytest.fixture
def settings() -> KllconfSettings:
    return KllconfSettings(default_locale="en_US")


@pytest.fixture
def state(settings: KllconfSettings) -> ConfigureState:
    return ConfigureState(ui=settings.ui)


@pytest.fixture
def session(state: ConfigureState, settings: KllconfSettings) -> ConfigureSession:
    """Empty session (nothing loaded) with deterministic ids."""
    return ConfigureSession(
        state,
        locales={"en_US": EN_US},
        id_source=CountingIdSource(),
        settings=settings,
    )


@pytest.fixture
def loaded(session: ConfigureSession, raw_config: dict[str, Any]) -> ConfigureSession:
    """Session with ``raw_config`` loaded under the en_US table."""
    session.update_config(raw_config, "en_US")
    return session
