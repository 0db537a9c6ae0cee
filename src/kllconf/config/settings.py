"""Unified settings — init kwargs, env vars, and code defaults in one object.

Priority chain (highest to lowest):
  1. Init kwargs  — values passed by the embedding application
  2. Env vars     — ``KLLCONF_*`` prefix, ``__`` for nested sections
  3. Code defaults — baked into the section models

No config file is read here; persisting anything is the host's job.
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from kllconf.config.models import UiConfig


class KllconfSettings(BaseSettings):
    """Settings for an editing session.

    Attributes:
        verbose: Enable DEBUG-level output for the ``kllconf`` logger.
        log_json: Render log records as JSON lines instead of console text.
            Both are applied by ``ConfigureSession.from_settings``.
        default_locale: Key-name table used when ``update_config`` is called
            without an explicit locale.
        ui: Sizing constants copied into the store's ``ui`` field.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "KLLCONF_",
        "env_nested_delimiter": "__",
    }

    verbose: bool = False
    log_json: bool = False
    default_locale: str = "en_US"
    ui: UiConfig = Field(default_factory=UiConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Drop dotenv and secret-file sources; only kwargs and env apply."""
        return (init_settings, env_settings)
