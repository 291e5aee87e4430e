# src/llm/client_factory.py — v1
"""Factory: instantiate a text generator from provider name."""

from __future__ import annotations

import importlib
import logging

from designscan.config.settings import Settings
from designscan.llm.base_client import BaseTextGenerator

logger = logging.getLogger(__name__)

# Registry of provider name → adapter class path (lazy import).
_PROVIDER_REGISTRY: dict[str, str] = {
    "anthropic": "designscan.llm.adapters.anthropic_adapter.AnthropicAdapter",
    "openai": "designscan.llm.adapters.openai_adapter.OpenAIAdapter",
}


class UnsupportedProviderError(ValueError):
    """Raised when a provider is not registered."""


def create_text_generator(
    provider: str | None = None,
    model: str | None = None,
    settings: Settings | None = None,
    **kwargs: object,
) -> BaseTextGenerator:
    """Instantiate the correct adapter from provider name.

    Args:
        provider: Provider identifier. Defaults to ``settings.llm_provider``.
        model: Model name. Defaults to ``settings.llm_model``.
        settings: Application settings (for API keys and defaults).
        **kwargs: Additional provider-specific arguments.

    Raises:
        UnsupportedProviderError: If provider is not registered.
    """
    if settings is not None:
        provider = provider or settings.llm_provider
        model = model or settings.llm_model
    provider = provider or "anthropic"

    if provider not in _PROVIDER_REGISTRY:
        raise UnsupportedProviderError(
            f"Unsupported LLM provider: {provider!r}. "
            f"Available: {', '.join(sorted(_PROVIDER_REGISTRY))}"
        )

    adapter_cls = _import_class(_PROVIDER_REGISTRY[provider])

    init_kwargs = dict(kwargs)
    if model:
        init_kwargs["model"] = model

    if settings is not None:
        if provider == "anthropic":
            init_kwargs.setdefault("api_key", settings.anthropic_api_key)
        elif provider == "openai":
            init_kwargs.setdefault("api_key", settings.openai_api_key)

    logger.debug("Creating text generator: provider=%s, model=%s", provider, model)
    return adapter_cls(**init_kwargs)


def register_provider(name: str, class_path: str) -> None:
    """Register a custom provider adapter.

    Args:
        name: Provider identifier.
        class_path: Fully qualified class path implementing BaseTextGenerator.
    """
    _PROVIDER_REGISTRY[name] = class_path
    logger.info("Registered text generator provider: %s → %s", name, class_path)


def _import_class(class_path: str) -> type:
    """Dynamically import a class from its fully qualified path."""
    module_path, class_name = class_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    return getattr(module, class_name)
