"""
lictool.config - User Configuration
===================================

Settings live in a TOML file, by default ``config.toml`` inside
``typer.get_app_dir("lictool")`` (``~/.config/lictool`` on Linux). The
``LICTOOL_CONFIG`` environment variable or the ``--config`` option point
elsewhere.

Example File
------------
.. code-block:: toml

    timeout = 5
    cache_ttl_hours = 72
    unfilled = "keep"

    [defaults]
    author = "Jane Doe"
    email = "jane@example.com"

Every key is optional. Reading uses ``tomllib``; ``lictool config set`` edits
the file through ``tomlkit`` so comments and layout survive.
"""

from __future__ import annotations

import os
import tomllib
from datetime import timedelta
from enum import Enum
from pathlib import Path
from typing import Any

import tomlkit
from tomlkit.exceptions import TOMLKitError
import typer
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from lictool.cache import atomic_write_text
from lictool.catalog import DEFAULT_BASE_URL, DEFAULT_TIMEOUT
from lictool.errors import ConfigError
from lictool.placeholders import canonical_field
from lictool.renderer import UnfilledPolicy


APP_NAME = "lictool"
CONFIG_ENV_VAR = "LICTOOL_CONFIG"
CONFIG_FILENAME = "config.toml"


def default_config_path() -> Path:
    """Config file location, honouring ``$LICTOOL_CONFIG``."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path(typer.get_app_dir(APP_NAME)) / CONFIG_FILENAME


def default_cache_dir() -> Path:
    """``$XDG_CACHE_HOME/lictool``, falling back to ``~/.cache/lictool``."""
    base = os.environ.get("XDG_CACHE_HOME")
    root = Path(base) if base else Path.home() / ".cache"
    return root / APP_NAME


class Settings(BaseModel):
    """
    Validated lictool settings.

    Attributes
    ----------
    base_url : str
        Root URL of the SPDX license list server.
    timeout : float
        Network timeout in seconds.
    cache_ttl_hours : float
        Age after which cached records are refreshed.
    cache_dir : Path
        Directory of the persisted cache.
    unfilled : UnfilledPolicy
        ``empty`` renders unfilled optional placeholders as nothing,
        ``keep`` leaves the placeholder text in place.
    offline : bool
        Never contact the server.
    defaults : dict[str, str]
        Default field values, e.g. ``author``.
    """

    model_config = ConfigDict(extra="forbid")

    base_url: str = Field(default=DEFAULT_BASE_URL, min_length=1)
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)
    cache_ttl_hours: float = Field(default=168, ge=0)
    cache_dir: Path = Field(default_factory=default_cache_dir)
    unfilled: UnfilledPolicy = UnfilledPolicy.EMPTY
    offline: bool = False
    defaults: dict[str, str] = Field(default_factory=dict)

    @field_validator("defaults")
    @classmethod
    def fold_default_keys(cls, v: dict[str, str]) -> dict[str, str]:
        """Store defaults under canonical field names."""
        return {canonical_field(k): value for k, value in v.items()}

    @field_validator("cache_dir")
    @classmethod
    def expand_cache_dir(cls, v: Path) -> Path:
        return v.expanduser()

    @property
    def cache_ttl(self) -> timedelta:
        return timedelta(hours=self.cache_ttl_hours)


def load_settings(path: Path | None = None) -> Settings:
    """
    Load settings from ``path`` (default: :func:`default_config_path`).

    A missing file yields the defaults.

    Raises
    ------
    ConfigError
        If the file is not valid TOML or holds invalid values.
    """
    path = path or default_config_path()
    if not path.exists():
        return Settings()

    try:
        with path.open("rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(path, str(e)) from e

    try:
        return Settings.model_validate(data)
    except ValidationError as e:
        raise ConfigError(path, _describe(e)) from e


def _describe(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(p) for p in item["loc"]) or "<root>"
        parts.append(f"{location}: {item['msg']}")
    return "; ".join(parts)


def _toml_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Path):
        return str(value)
    return value


def set_setting(path: Path, key: str, value: str) -> Settings:
    """
    Set one key in the config file and return the resulting settings.

    ``key`` is a top-level setting name or ``defaults.<field>``. ``value`` is
    coerced to the setting's type before anything is written, so a bad value
    leaves the file untouched. The rewrite keeps the file's permission
    bits.

    Raises
    ------
    ConfigError
        Unknown key, invalid value, or unreadable existing file.
    """
    if path.exists():
        try:
            doc = tomlkit.parse(path.read_text(encoding="utf-8"))
        except (OSError, TOMLKitError) as e:
            raise ConfigError(path, str(e)) from e
    else:
        doc = tomlkit.document()

    data = doc.unwrap()
    section, _, name = key.partition(".")
    if section == "defaults" and name:
        data.setdefault("defaults", {})[name] = value
    elif key in Settings.model_fields and key != "defaults":
        data[key] = value
    else:
        valid = ", ".join([*(k for k in Settings.model_fields if k != "defaults"), "defaults.<field>"])
        raise ConfigError(path, f"Unknown setting '{key}'. Valid: {valid}")

    try:
        settings = Settings.model_validate(data)
    except ValidationError as e:
        raise ConfigError(path, _describe(e)) from e

    if section == "defaults" and name:
        if "defaults" not in doc:
            doc["defaults"] = tomlkit.table()
        doc["defaults"][name] = value
    else:
        doc[key] = _toml_value(getattr(settings, key))

    atomic_write_text(path, tomlkit.dumps(doc))
    return settings
