"""
pydantic-settings integration.

ConfigSettingsSource feeds a Config snapshot into a
``pydantic_settings.BaseSettings`` class, so layered strata configuration
can sit alongside pydantic-settings' own sources:

    class AppSettings(pydantic_settings.BaseSettings):
        port: int = 80

        @classmethod
        def settings_customise_sources(
            cls, settings_cls, init_settings, env_settings, dotenv_settings,
            file_secret_settings,
        ):
            return (init_settings, ConfigSettingsSource(settings_cls, CONFIG))

Sources listed earlier take precedence in pydantic-settings.
"""

import collections.abc as _abc
import typing as _typing

import pydantic.fields as _pydantic_fields
import pydantic_settings as _pydantic_settings

import strata.config as config_mod
import strata.path as path


class ConfigSettingsSource(_pydantic_settings.PydanticBaseSettingsSource):
    """
    Settings source backed by a strata Config.

    The Config is built on first use if it has not been built already.
    Pydantic validates the returned data; strata only supplies it.
    """

    def __init__(
        self,
        settings_cls: type[_pydantic_settings.BaseSettings],
        config: config_mod.Config,
    ) -> None:
        super().__init__(settings_cls)
        self._config = config

    @property
    def strata_config(self) -> config_mod.Config:
        return self._config

    def get_field_value(
        self,
        field: _pydantic_fields.FieldInfo,  # noqa: ARG002 - required by pydantic-settings interface
        field_name: str,
    ) -> tuple[_typing.Any, str, bool]:
        """
        Get value for a field from the snapshot.

        Returns:
            Tuple of (value, field_name, is_complex).
            is_complex is True if the value is a dict or list.
        """
        node = self._config.snapshot.get(path.Path([path.Key(field_name)]))
        if node is None:
            return None, field_name, False
        data = node.to_python()
        return data, field_name, isinstance(data, (_abc.Mapping, list))

    def __call__(self) -> dict[str, _typing.Any]:
        """
        Return the merged snapshot as a plain dict for pydantic validation.

        Unknown keys are included; the settings class decides whether to
        keep, ignore or reject them through its ``extra`` setting.
        """
        return self._config.to_dict()
