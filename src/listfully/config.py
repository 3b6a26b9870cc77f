"""User configuration in ~/.listfully/config.yaml."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from listfully.engine.errors import ListfullyError
from listfully.engine.models import SortMode
from listfully.engine.ordering import DEFAULT_ORDER_DELTA
from listfully.engine.positioning import HOVER_THRESHOLD

HOME_ENV_VAR = "LISTFULLY_HOME"
CONFIG_FILENAME = "config.yaml"
GUEST_OWNER = "guest"


class ConfigError(ListfullyError):
    """Raised when the configuration file is unreadable or invalid."""


class ListfullyConfig(BaseModel):
    """Settings that shape a session. Unset ``data_dir`` means ``<home>/data``."""

    owner_id: str = Field(default=GUEST_OWNER, min_length=1)
    data_dir: str | None = None
    order_key_delta: float = Field(default=DEFAULT_ORDER_DELTA, gt=0)
    default_sort_mode: SortMode = SortMode.CUSTOM
    hover_threshold: float = Field(default=HOVER_THRESHOLD, gt=0, lt=0.5)

    def resolved_data_dir(self) -> Path:
        if self.data_dir:
            return Path(self.data_dir).expanduser()
        return config_home() / "data"


def config_home() -> Path:
    override = os.environ.get(HOME_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".listfully"


def _config_path() -> Path:
    return config_home() / CONFIG_FILENAME


def load_config() -> ListfullyConfig:
    """Load config from disk; a missing file yields defaults."""
    config_path = _config_path()
    if not config_path.exists():
        return ListfullyConfig()

    yaml = YAML()
    try:
        with config_path.open("r", encoding="utf-8") as handle:
            payload = yaml.load(handle) or {}
    except (OSError, YAMLError) as exc:
        raise ConfigError(f"Failed to parse {config_path}: {exc}") from exc

    if not isinstance(payload, dict):
        raise ConfigError(f"Expected a mapping in {config_path}")
    try:
        return ListfullyConfig.model_validate(dict(payload))
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration in {config_path}: {exc}") from exc


def save_config(config: ListfullyConfig) -> Path:
    """Persist config, preserving keys this version does not know about."""
    config_path = _config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    yaml = YAML()
    yaml.preserve_quotes = True

    payload: Any = {}
    if config_path.exists():
        with config_path.open("r", encoding="utf-8") as handle:
            payload = yaml.load(handle) or {}
    if not isinstance(payload, dict):
        payload = {}

    for key, value in config.model_dump(mode="json").items():
        if value is None:
            payload.pop(key, None)
        else:
            payload[key] = value

    with config_path.open("w", encoding="utf-8") as handle:
        yaml.dump(payload, handle)
    return config_path


def update_config(config: ListfullyConfig, key: str, value: str) -> ListfullyConfig:
    """Return ``config`` with ``key`` set from its string form."""
    if key not in ListfullyConfig.model_fields:
        known = ", ".join(sorted(ListfullyConfig.model_fields))
        raise ConfigError(f"Unknown config key {key!r}. Expected one of: {known}")
    data = config.model_dump()
    if value == "":
        del data[key]
    else:
        data[key] = value
    try:
        return ListfullyConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid value for {key}: {exc.errors()[0]['msg']}") from exc
