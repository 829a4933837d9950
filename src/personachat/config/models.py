"""Configuration dataclasses."""

from dataclasses import dataclass, field

from personachat.domain.entities import Persona, ProviderId

DEFAULT_MODELS: dict[ProviderId, str] = {
    ProviderId.OPENAI: "gpt-3.5-turbo",
    ProviderId.GEMINI: "gemini/gemini-2.0-flash",
}


@dataclass
class ServerConfig:
    """HTTP/WebSocket server settings.

    Attributes:
        host: Interface to bind.
        port: Port to listen on. Use 0 for any available port.
        reply_delay_seconds: Pause before a generated reply is delivered.
        expose_error_details: Include raw provider error text in error events.
        max_message_length: Reject longer user messages (None for no limit).
        static_dir: Directory served at ``/`` (None to disable).
        cors_origins: Origins allowed to call the HTTP API (empty to disable).
    """

    host: str = "0.0.0.0"
    port: int = 3000
    reply_delay_seconds: float = 0.5
    expose_error_details: bool = False
    max_message_length: int | None = None
    static_dir: str | None = None
    cors_origins: list[str] = field(default_factory=lambda: ["*"])


@dataclass
class ProviderConfig:
    """Settings for one LLM provider (passed through to LiteLLM).

    Attributes:
        model: LiteLLM model name.
        api_key: Credential; None means the provider is not configured.
        temperature: Sampling temperature.
        max_tokens: Maximum tokens per reply.
        timeout: Request timeout in seconds (None for LiteLLM's default).
        probe_model: Model used by connection tests (defaults to ``model``).
    """

    model: str
    api_key: str | None = None
    temperature: float = 0.8
    max_tokens: int = 1000
    timeout: float | None = None
    probe_model: str | None = None

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)


@dataclass
class LLMSettings:
    """Provider selection and per-provider settings."""

    default_provider: ProviderId
    providers: dict[ProviderId, ProviderConfig] = field(
        default_factory=lambda: {
            provider: ProviderConfig(model=model)
            for provider, model in DEFAULT_MODELS.items()
        }
    )


@dataclass
class LoggingConfig:
    """Logging settings."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    loggers: dict[str, str] | None = None
    debug_llm_messages: bool = False


@dataclass
class Config:
    """Application configuration."""

    server: ServerConfig
    llm: LLMSettings
    personas: list[Persona]
    logging: LoggingConfig | None = None
