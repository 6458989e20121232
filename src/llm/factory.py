"""LLM provider factory with auto-detection."""

import os

from shared_types import LLMProviderName

from .base import LLMError, LLMProvider

_PROVIDER_ENV_KEYS = {
    LLMProviderName.CLAUDE: "ANTHROPIC_API_KEY",
    LLMProviderName.OPENAI: "OPENAI_API_KEY",
}

_AUTO_DETECT_ORDER = [LLMProviderName.CLAUDE, LLMProviderName.OPENAI]


def create_llm_provider(
    provider: str | None = None,
    api_key: str | None = None,
    model: str | None = None,
    client=None,
) -> LLMProvider:
    """Create an LLM provider instance.

    Args:
        provider: "claude", "openai", "auto", or None (auto-detect)
        api_key: Explicit API key (overrides env var)
        model: Model name (None = provider default)
        client: Pre-built SDK client for testing/DI

    Returns:
        LLMProvider instance
    """
    resolved = provider or "auto"

    if resolved == "auto":
        resolved = _auto_detect_provider(api_key)

    if resolved not in _PROVIDER_ENV_KEYS:
        raise LLMError(f"Unknown provider: {resolved}. Use: claude, openai")

    if not api_key and not client:
        env_var = _PROVIDER_ENV_KEYS[resolved]
        api_key = os.getenv(env_var)
        if not api_key:
            raise LLMError(f"No API key for provider {resolved}. Set {env_var}.")

    if resolved == LLMProviderName.CLAUDE:
        from .providers.claude import ClaudeProvider

        return ClaudeProvider(api_key=api_key, model=model, client=client)
    from .providers.openai import OpenAIProvider

    return OpenAIProvider(api_key=api_key, model=model, client=client)


def detect_available_provider(api_key: str | None = None) -> str | None:
    """Provider name usable with the current key/env, or None."""
    try:
        return _auto_detect_provider(api_key)
    except LLMError:
        return None


def _detect_provider_from_key(api_key: str) -> str | None:
    """Infer provider from API key prefix."""
    if api_key.startswith("sk-ant-"):
        return LLMProviderName.CLAUDE
    if api_key.startswith("sk-"):
        return LLMProviderName.OPENAI
    return None


def _auto_detect_provider(api_key: str | None = None) -> str:
    """Detect provider from explicit key prefix, then env vars."""
    if api_key:
        inferred = _detect_provider_from_key(api_key)
        if inferred:
            return inferred

    for name in _AUTO_DETECT_ORDER:
        env_var = _PROVIDER_ENV_KEYS[name]
        if os.getenv(env_var):
            return name
    raise LLMError("No LLM API key found. Set one of: ANTHROPIC_API_KEY, OPENAI_API_KEY")
