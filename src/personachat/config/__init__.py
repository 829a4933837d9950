"""Configuration management."""

from personachat.config.loader import (
    ConfigError,
    ConfigValidationError,
    EnvironmentVariableError,
    expand_env_vars,
    load_config,
)
from personachat.config.models import (
    DEFAULT_MODELS,
    Config,
    LLMSettings,
    LoggingConfig,
    ProviderConfig,
    ServerConfig,
)

__all__ = [
    "DEFAULT_MODELS",
    "Config",
    "ConfigError",
    "ConfigValidationError",
    "EnvironmentVariableError",
    "LLMSettings",
    "LoggingConfig",
    "ProviderConfig",
    "ServerConfig",
    "expand_env_vars",
    "load_config",
]
