import logging
from dataclasses import dataclass, field
from typing import Mapping

from prsync.application.ports import DiffSummarizer
from prsync.domain.errors import ConfigurationError
from prsync.infrastructure.ai.anthropic import AnthropicProvider
from prsync.infrastructure.ai.openai import OpenAIProvider
from prsync.infrastructure.config.settings import Settings
from prsync.infrastructure.observability.logging_utils import log_event


logger = logging.getLogger(__name__)

_PROVIDER_API_KEY_ENV = {
    "anthropic": "ANTHROPIC_API_KEY",
    "openai": "OPENAI_API_KEY",
}


@dataclass(frozen=True)
class AIProviderRuntime:
    provider: str
    model: str
    api_key: str = field(repr=False)
    adapter: DiffSummarizer = field(repr=False)


def resolve_ai_provider_name(settings: Settings) -> str:
    provider = settings.ai_provider
    if provider not in _PROVIDER_API_KEY_ENV:
        supported = ", ".join(sorted(_PROVIDER_API_KEY_ENV.keys()))
        raise ConfigurationError(f"Invalid AI_PROVIDER '{provider}'. Supported values: {supported}")
    return provider


def build_ai_provider_runtime(settings: Settings, environ: Mapping[str, str]) -> AIProviderRuntime:
    provider = resolve_ai_provider_name(settings)

    adapter: AnthropicProvider | OpenAIProvider
    if provider == "openai":
        adapter = OpenAIProvider.from_env(environ, max_tokens=settings.max_tokens)
    else:
        adapter = AnthropicProvider.from_env(environ, max_tokens=settings.max_tokens)

    log_event(
        logger,
        logging.INFO,
        "ai.provider.selected",
        provider=provider,
        model=adapter.model,
    )
    return AIProviderRuntime(
        provider=provider,
        model=adapter.model,
        api_key=environ[_PROVIDER_API_KEY_ENV[provider]],
        adapter=adapter,
    )
