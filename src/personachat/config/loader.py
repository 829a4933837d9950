"""Load the YAML configuration file and expand environment variables."""

import os
import re
from pathlib import Path
from typing import Any

import yaml

from personachat.config.models import (
    DEFAULT_MODELS,
    Config,
    LLMSettings,
    LoggingConfig,
    ProviderConfig,
    ServerConfig,
)
from personachat.domain.entities import FewShotExample, Persona, ProviderId


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """A configuration value is missing or invalid."""


class EnvironmentVariableError(ConfigError):
    """A referenced environment variable is not set."""


# ${VAR_NAME} or ${VAR_NAME:-default}
ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::-([^}]*))?\}")


def expand_env_vars(value: str) -> str:
    """Replace ``${VAR}`` and ``${VAR:-default}`` with environment values.

    Args:
        value: String to expand.

    Returns:
        The string with every reference replaced.

    Raises:
        EnvironmentVariableError: A variable without default is not set.
    """
    if not value:
        return value

    def replace_var(match: re.Match[str]) -> str:
        var_name = match.group(1)
        default = match.group(2)
        env_value = os.environ.get(var_name)
        if env_value is None:
            if default is not None:
                return default
            raise EnvironmentVariableError(
                f"Environment variable '{var_name}' is not set"
            )
        return env_value

    return ENV_VAR_PATTERN.sub(replace_var, value)


def _expand_recursive(data: Any) -> Any:
    """Expand environment variables in every string of a nested structure."""
    if isinstance(data, dict):
        return {key: _expand_recursive(value) for key, value in data.items()}
    elif isinstance(data, list):
        return [_expand_recursive(item) for item in data]
    elif isinstance(data, str):
        return expand_env_vars(data)
    else:
        return data


def _validate_required_field(data: dict[str, Any], field: str, parent: str = "") -> Any:
    """Return a required field.

    Raises:
        ConfigValidationError: The field is missing or null.
    """
    if field not in data or data[field] is None:
        full_path = f"{parent}.{field}" if parent else field
        raise ConfigValidationError(f"Required field '{full_path}' is missing")
    return data[field]


def _as_number(value: Any, path: str, kind: type) -> Any:
    try:
        return kind(value)
    except (TypeError, ValueError) as e:
        raise ConfigValidationError(f"'{path}' must be a number, got {value!r}") from e


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def _as_origins(value: Any) -> list[str]:
    """Origins from a YAML list or a comma-separated string (e.g. from ${CORS_ORIGINS})."""
    if value is None:
        return []
    if isinstance(value, str):
        return [origin.strip() for origin in value.split(",") if origin.strip()]
    if isinstance(value, list):
        return [str(origin) for origin in value]
    raise ConfigValidationError("server.cors_origins must be a list or a string")


def _parse_server(data: dict[str, Any]) -> ServerConfig:
    max_length = data.get("max_message_length")
    return ServerConfig(
        host=data.get("host", "0.0.0.0"),
        port=_as_number(data.get("port", 3000), "server.port", int),
        reply_delay_seconds=_as_number(
            data.get("reply_delay_seconds", 0.5), "server.reply_delay_seconds", float
        ),
        expose_error_details=_as_bool(data.get("expose_error_details", False)),
        max_message_length=(
            None
            if max_length in (None, "")
            else _as_number(max_length, "server.max_message_length", int)
        ),
        static_dir=data.get("static_dir") or None,
        cors_origins=_as_origins(data.get("cors_origins", ["*"])),
    )


def _parse_provider(provider: ProviderId, data: dict[str, Any]) -> ProviderConfig:
    parent = f"llm.providers.{provider.value}"
    timeout = data.get("timeout")
    return ProviderConfig(
        model=_validate_required_field(data, "model", parent),
        # An empty key (e.g. "${OPENAI_API_KEY:-}") means "not configured"
        api_key=data.get("api_key") or None,
        temperature=_as_number(data.get("temperature", 0.8), f"{parent}.temperature", float),
        max_tokens=_as_number(data.get("max_tokens", 1000), f"{parent}.max_tokens", int),
        timeout=(
            None if timeout in (None, "") else _as_number(timeout, f"{parent}.timeout", float)
        ),
        probe_model=data.get("probe_model") or None,
    )


def _parse_llm(data: dict[str, Any]) -> LLMSettings:
    default_value = _validate_required_field(data, "default_provider", "llm")
    default_provider = ProviderId.parse(default_value)
    if default_provider is None:
        raise ConfigValidationError(
            f"'llm.default_provider' must be one of "
            f"{[p.value for p in ProviderId]}, got {default_value!r}"
        )

    providers_data = data.get("providers") or {}
    providers: dict[ProviderId, ProviderConfig] = {}
    for key, item in providers_data.items():
        provider = ProviderId.parse(key)
        if provider is None:
            raise ConfigValidationError(f"Unknown provider 'llm.providers.{key}'")
        providers[provider] = _parse_provider(provider, item or {})

    # Every known provider gets an entry so health checks can report it
    for provider, model in DEFAULT_MODELS.items():
        providers.setdefault(provider, ProviderConfig(model=model))

    return LLMSettings(default_provider=default_provider, providers=providers)


def _parse_persona(data: dict[str, Any], index: int) -> Persona:
    parent = f"personas[{index}]"
    background = _validate_required_field(data, "background", parent)
    if not isinstance(background, list) or not background:
        raise ConfigValidationError(f"'{parent}.background' must be a non-empty list")
    system_prompt = _validate_required_field(data, "system_prompt", parent)
    if not str(system_prompt).strip():
        raise ConfigValidationError(f"'{parent}.system_prompt' must not be empty")

    examples = tuple(
        FewShotExample(
            user=_validate_required_field(example, "user", f"{parent}.examples[{i}]"),
            assistant=_validate_required_field(
                example, "assistant", f"{parent}.examples[{i}]"
            ),
        )
        for i, example in enumerate(data.get("examples") or [])
    )

    return Persona(
        id=str(_validate_required_field(data, "id", parent)),
        name=_validate_required_field(data, "name", parent),
        avatar=data.get("avatar", ""),
        greeting=_validate_required_field(data, "greeting", parent),
        system_prompt=system_prompt,
        background=tuple(str(fact) for fact in background),
        examples=examples,
        fallback_lines=tuple(data.get("fallback_lines") or ()),
        title=data.get("title"),
        bio=data.get("bio"),
    )


def _parse_personas(data: Any) -> list[Persona]:
    if not isinstance(data, list) or not data:
        raise ConfigValidationError("'personas' must be a non-empty list")
    personas = [_parse_persona(item, i) for i, item in enumerate(data)]
    seen: set[str] = set()
    for persona in personas:
        if persona.id in seen:
            raise ConfigValidationError(f"Duplicate persona id '{persona.id}'")
        seen.add(persona.id)
    return personas


def load_config(path: str | Path) -> Config:
    """Load the configuration file.

    Args:
        path: Path to config.yaml.

    Returns:
        Config object.

    Raises:
        FileNotFoundError: The file does not exist.
        ConfigValidationError: A required field is missing or invalid.
        EnvironmentVariableError: A referenced variable is not set.
        yaml.YAMLError: YAML syntax error.
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, encoding="utf-8") as f:
        raw_data = yaml.safe_load(f) or {}

    data = _expand_recursive(raw_data)

    llm = _parse_llm(_validate_required_field(data, "llm"))
    personas = _parse_personas(_validate_required_field(data, "personas"))
    server = _parse_server(data.get("server") or {})

    logging_config: LoggingConfig | None = None
    logging_data = data.get("logging")
    if logging_data:
        logging_config = LoggingConfig(
            level=logging_data.get("level", "INFO"),
            format=logging_data.get(
                "format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            ),
            loggers=logging_data.get("loggers"),
            debug_llm_messages=_as_bool(logging_data.get("debug_llm_messages", False)),
        )

    return Config(server=server, llm=llm, personas=personas, logging=logging_config)
