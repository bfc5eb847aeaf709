from .loader import CONFIG_ENV_VAR, ConfigError, load_settings, load_yaml_config, settings_from_env, validate_settings
from .models import FactorySettings, LoggingSettings

__all__ = [
    "CONFIG_ENV_VAR",
    "ConfigError",
    "FactorySettings",
    "LoggingSettings",
    "load_settings",
    "load_yaml_config",
    "settings_from_env",
    "validate_settings",
]
