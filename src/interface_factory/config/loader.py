from __future__ import annotations

import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from interface_factory.config.models import FactorySettings

CONFIG_ENV_VAR = "INTERFACE_FACTORY_CONFIG"


class ConfigError(ValueError):
    # Raised for invalid factory config (fail fast).
    pass


def load_yaml_config(path: Path) -> dict[str, object]:
    # Returns a raw mapping for validation; an empty file means "all defaults".
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"Cannot read config file: {path}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Config file is not valid YAML: {path}") from exc
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError("Config root must be a mapping")
    return raw


def validate_settings(raw: object) -> FactorySettings:
    if not isinstance(raw, dict):
        raise ConfigError("Config root must be a mapping")
    try:
        return FactorySettings.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc


def load_settings(path: Path | str) -> FactorySettings:
    return validate_settings(load_yaml_config(Path(path)))


def settings_from_env(environ: dict[str, str] | None = None) -> FactorySettings:
    # INTERFACE_FACTORY_CONFIG points at a YAML file; unset means defaults.
    env = environ if environ is not None else os.environ
    raw_path = env.get(CONFIG_ENV_VAR, "").strip()
    if not raw_path:
        return FactorySettings()
    return load_settings(Path(raw_path))
