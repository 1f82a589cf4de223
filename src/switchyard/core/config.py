# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Configuration loading and binding.

Sources, lowest priority first:

1. ``switchyard-defaults.yaml`` shipped in ``switchyard.resources``
2. the application's YAML or TOML file
3. profile overlays next to it (``switchyard-prod.yaml`` for profile ``prod``)
4. ``SWITCHYARD_*`` environment variables, looked up per key on every ``get``
"""

from __future__ import annotations

import dataclasses
import importlib.resources
import os
import re
import tomllib
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar, get_type_hints

import yaml  # type: ignore[import-untyped]
from pydantic import BaseModel, ValidationError

from switchyard.kernel.exceptions import ConfigurationException

T = TypeVar("T")

_PLACEHOLDER_RE = re.compile(r"\$\{([^}]+)\}")
_MAX_PLACEHOLDER_DEPTH = 10

_CONFIG_PROPERTIES_ATTR = "__switchyard_config_prefix__"

_ENV_PREFIX = "SWITCHYARD_"
_PROFILES_ENV = "SWITCHYARD_PROFILES"

_MISSING = object()


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("true", "1", "yes", "on")


# Environment values are strings; dataclass fields of these types get converted.
_COERCIONS: dict[Any, Callable[[str], Any]] = {int: int, float: float, bool: _parse_bool}


def config_properties(prefix: str) -> Callable[[type[T]], type[T]]:
    """Mark a class as bindable to a configuration prefix.

    Works with both dataclasses and Pydantic BaseModel subclasses.

    Usage:
        @config_properties(prefix="switchyard.application")
        class ApplicationProperties(BaseModel):
            max_messages: int = Field(default=1, ge=1)
    """

    def decorator(cls: type[T]) -> type[T]:
        setattr(cls, _CONFIG_PROPERTIES_ATTR, prefix)
        return cls

    return decorator


def env_key(key: str) -> str:
    """Environment variable overriding *key*: ``switchyard.application.max-messages`` -> ``SWITCHYARD_APPLICATION_MAX_MESSAGES``."""
    name = key.removeprefix("switchyard.")
    return _ENV_PREFIX + re.sub(r"[.\-]", "_", name).upper()


class Config:
    """Nested configuration with dot-notation access.

    Values are looked up in this order: the ``SWITCHYARD_*`` environment
    variable for the key, then the loaded data. String values may contain
    ``${ENV_VAR}``, ``${other.key}`` or ``${key:fallback}`` placeholders,
    which are expanded on read.
    """

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = data or {}
        self._loaded_sources: list[str] = []

    @property
    def loaded_sources(self) -> list[str]:
        """Files merged into this config, in merge order."""
        return list(self._loaded_sources)

    def to_dict(self) -> dict[str, Any]:
        return dict(self._data)

    @classmethod
    def from_file(
        cls,
        path: str | Path,
        active_profiles: list[str] | None = None,
        load_defaults: bool = True,
    ) -> Config:
        """Load *path* (YAML, or TOML by suffix) on top of the package defaults.

        Profiles default to the comma-separated ``SWITCHYARD_PROFILES``
        variable. A missing file or profile overlay is skipped.
        """
        path = Path(path)
        if active_profiles is None:
            active_profiles = [p.strip() for p in os.environ.get(_PROFILES_ENV, "").split(",") if p.strip()]

        layers: list[tuple[str, dict[str, Any]]] = []
        if load_defaults:
            layers.append(("switchyard-defaults.yaml (package defaults)", cls._load_package_defaults()))

        if path.exists():
            layers.append((str(path), cls._load_config_data(path)))
            for profile in active_profiles:
                overlay = path.with_name(f"{path.stem}-{profile}{path.suffix}")
                if overlay.exists():
                    layers.append((f"{overlay} (profile: {profile})", cls._load_config_data(overlay)))

        data: dict[str, Any] = {}
        for _, layer in layers:
            data = cls._deep_merge(data, layer)

        instance = cls(data)
        instance._loaded_sources = [source for source, _ in layers]
        return instance

    @staticmethod
    def _load_config_data(path: Path) -> dict[str, Any]:
        if path.suffix == ".toml":
            with open(path, "rb") as f:
                return tomllib.load(f)
        with open(path) as f:
            return yaml.safe_load(f) or {}

    @staticmethod
    def _load_package_defaults() -> dict[str, Any]:
        defaults_file = importlib.resources.files("switchyard.resources").joinpath(
            "switchyard-defaults.yaml"
        )
        with importlib.resources.as_file(defaults_file) as p, open(p) as f:
            return yaml.safe_load(f) or {}

    @staticmethod
    def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Recursively merge override into base, with override values winning."""
        merged = dict(base)
        for key, value in override.items():
            if isinstance(merged.get(key), dict) and isinstance(value, dict):
                merged[key] = Config._deep_merge(merged[key], value)
            else:
                merged[key] = value
        return merged

    def get(self, key: str, default: Any = None) -> Any:
        """Value for a dot-notation *key*, or *default* when it is absent."""
        override = os.environ.get(env_key(key))
        if override is not None:
            return override

        value = self._lookup(key)
        if value is _MISSING:
            return default
        if isinstance(value, str):
            return self._expand(value)
        return value

    def _lookup(self, key: str) -> Any:
        node: Any = self._data
        for part in key.split("."):
            if not isinstance(node, dict) or node.get(part) is None:
                return _MISSING
            node = node[part]
        return node

    def _expand(self, value: str, depth: int = 0) -> str:
        if "${" not in value:
            return value
        if depth > _MAX_PLACEHOLDER_DEPTH:
            raise ConfigurationException(
                f"Placeholders in '{value}' nest too deeply; check for circular references.",
                context={"value": value},
            )

        def substitute(match: re.Match[str]) -> str:
            ref, sep, fallback = match.group(1).partition(":")

            if ref in os.environ:
                return os.environ[ref]

            found = self._lookup(ref)
            if found is not _MISSING:
                return self._expand(str(found), depth + 1)

            if sep:
                return fallback

            raise ConfigurationException(
                f"Cannot resolve placeholder '${{{match.group(1)}}}': not found in environment or config",
                context={"placeholder": match.group(1)},
            )

        return _PLACEHOLDER_RE.sub(substitute, value)

    def get_section(self, prefix: str) -> dict[str, Any]:
        """The mapping stored under *prefix*, or an empty dict."""
        section = self._lookup(prefix)
        return section if isinstance(section, dict) else {}

    def bind(self, config_cls: type[T]) -> T:
        """Build a ``@config_properties`` class from its section.

        Each field may be overridden through its environment variable, so
        ``SWITCHYARD_APPLICATION_MAX_MESSAGES=5`` wins over the file value.
        Pydantic models are validated; dataclass fields of type ``int``,
        ``float`` and ``bool`` are converted from strings.
        """
        prefix = getattr(config_cls, _CONFIG_PROPERTIES_ATTR, None)
        if prefix is None:
            raise ConfigurationException(f"{config_cls.__name__} is not decorated with @config_properties")

        if isinstance(config_cls, type) and issubclass(config_cls, BaseModel):
            return self._bind_model(config_cls, prefix)  # type: ignore[return-value]
        return self._bind_dataclass(config_cls, prefix)

    def _field_values(self, prefix: str, names: list[str]) -> dict[str, Any]:
        values: dict[str, Any] = {}
        for name in names:
            value = self.get(f"{prefix}.{name}")
            if value is not None:
                values[name] = value
        return values

    def _bind_model(self, model_cls: type[BaseModel], prefix: str) -> BaseModel:
        values = self._field_values(prefix, list(model_cls.model_fields))
        try:
            return model_cls.model_validate(values)
        except ValidationError as exc:
            raise ConfigurationException(
                f"Configuration validation failed for '{model_cls.__name__}' (prefix='{prefix}'):\n{exc}",
                context={"prefix": prefix, "errors": exc.errors()},
            ) from exc

    def _bind_dataclass(self, config_cls: type[T], prefix: str) -> T:
        hints = get_type_hints(config_cls)
        fields = [f.name for f in dataclasses.fields(config_cls)]  # type: ignore[arg-type]

        kwargs = self._field_values(prefix, fields)
        for name, value in kwargs.items():
            coerce = _COERCIONS.get(hints.get(name))
            if coerce is not None and isinstance(value, str):
                try:
                    kwargs[name] = coerce(value)
                except ValueError as exc:
                    raise ConfigurationException(
                        f"Cannot convert '{value}' for {config_cls.__name__}.{name}",
                        context={"prefix": prefix, "field": name},
                    ) from exc

        return config_cls(**kwargs)
