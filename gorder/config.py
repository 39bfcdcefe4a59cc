"""Service configuration read from a YAML file, overridable from the environment."""

from __future__ import annotations

import os
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import yaml

DEFAULT_CONFIG_NAME = "global"
DEFAULT_SEARCH_PATHS = ("../common/config",)
_ENV_BINDINGS = {"stripe-key": "STRIPE_KEY"}
_EXTENSIONS = ("yaml", "yml")


def _lower_keys(data: Any) -> Any:
    if isinstance(data, Mapping):
        return {str(key).lower(): _lower_keys(value) for key, value in data.items()}
    return data


class Config:
    """Case-insensitive, dotted-key view over nested settings."""

    def __init__(
        self,
        data: Mapping[str, Any] | None = None,
        *,
        automatic_env: bool = False,
        env_bindings: Mapping[str, str] | None = None,
    ) -> None:
        self._data = _lower_keys(dict(data or {}))
        self._automatic_env = automatic_env
        self._env_bindings = {k.lower(): v for k, v in (env_bindings or {}).items()}

    def _lookup(self, key: str) -> Any:
        node: Any = self._data
        for part in key.split("."):
            if not isinstance(node, Mapping) or part not in node:
                return None
            node = node[part]
        return node

    def get(self, key: str, default: Any = None) -> Any:
        """Value for a dotted key; the environment takes precedence over the file."""
        key = key.lower()
        bound = self._env_bindings.get(key)
        if bound:
            value = os.environ.get(bound)
            if value:
                return value
        if self._automatic_env:
            value = os.environ.get(key.upper())
            if value:
                return value
        value = self._lookup(key)
        return default if value is None else value

    def get_str(self, key: str) -> str:
        """Value as text, or an empty string when missing or not scalar."""
        value = self.get(key)
        if value is None or isinstance(value, (Mapping, list)):
            return ""
        if isinstance(value, bool):
            return "true" if value else "false"
        return str(value)

    def sub(self, name: str) -> "Config":
        """Settings nested under ``name`` as their own configuration."""
        value = self._lookup(name.lower())
        if not isinstance(value, Mapping):
            raise KeyError(name)
        return Config(value)


def load_config(
    config_name: str = DEFAULT_CONFIG_NAME,
    search_paths: Iterable[str | os.PathLike] = DEFAULT_SEARCH_PATHS,
) -> Config:
    """Find ``<config_name>.yaml`` in the search paths and load it."""
    paths = list(search_paths)
    for directory in paths:
        for extension in _EXTENSIONS:
            candidate = Path(directory) / f"{config_name}.{extension}"
            if candidate.is_file():
                with candidate.open(encoding="utf-8") as stream:
                    data = yaml.safe_load(stream) or {}
                if not isinstance(data, Mapping):
                    raise ValueError(f"{candidate}: top level must be a mapping")
                return Config(data, automatic_env=True, env_bindings=_ENV_BINDINGS)
    searched = [str(p) for p in paths]
    raise FileNotFoundError(f'config file "{config_name}" not found in {searched}')