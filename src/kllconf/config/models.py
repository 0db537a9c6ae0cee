"""Pydantic configuration models with code-baked defaults.

Every section is frozen; overrides arrive through init kwargs or
``KLLCONF_*`` environment variables (see :mod:`kllconf.config.settings`).
"""

from __future__ import annotations

from pydantic import BaseModel


class UiConfig(BaseModel):
    """Sizing constants consumed by the keyboard view.

    Held in the store under ``ui`` and never cleared by ``reset()``.
    """

    model_config = {"frozen": True}

    backdrop_padding: int = 20
    size_factor: int = 16
    led_factor: int = 17
