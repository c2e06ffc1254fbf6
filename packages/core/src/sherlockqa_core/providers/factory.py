from __future__ import annotations

from sherlockqa_core.config import DEFAULT_CONFIG
from sherlockqa_core.exceptions import ConfigError
from sherlockqa_core.providers.base import BaseReviewer

# Replaces the OpenAI default model name when the provider is anthropic.
ANTHROPIC_DEFAULT_MODEL = "claude-sonnet-4-20250514"


def _require(config: dict, key: str, env_var: str) -> str:
    value = config.get(key)
    if not value:
        raise ConfigError(f"{env_var} environment variable is not set.")
    return value


def get_reviewer(config: dict) -> BaseReviewer:
    """Instantiate the provider named by config["provider"]."""
    provider = config.get("provider", "openai")
    common = {
        "model": config.get("model", DEFAULT_CONFIG["model"]),
        "max_tokens": config.get("max_tokens", 4096),
        "persona": config.get("persona") or "",
        "domain_knowledge": config.get("domain_knowledge") or "",
        "code_quality": bool(config.get("code_quality")),
        "max_diff_chars": config.get("max_diff_chars", 50000),
    }

    if provider == "openai":
        from sherlockqa_core.providers.openai import OpenAIReviewer

        return OpenAIReviewer(api_key=_require(config, "openai_api_key", "OPENAI_API_KEY"), **common)

    if provider in ("azure", "azure-responses"):
        from sherlockqa_core.providers.azure import AzureOpenAIReviewer, AzureResponsesReviewer

        api_key = _require(config, "azure_api_key", "AZURE_OPENAI_API_KEY")
        endpoint = _require(config, "azure_endpoint", "AZURE_OPENAI_ENDPOINT")
        if provider == "azure":
            return AzureOpenAIReviewer(
                api_key=api_key,
                endpoint=endpoint,
                deployment=config.get("azure_deployment"),
                api_version=config.get("azure_api_version"),
                **common,
            )
        return AzureResponsesReviewer(
            api_key=api_key, endpoint=endpoint, api_version=config.get("azure_api_version"), **common
        )

    if provider == "anthropic":
        from sherlockqa_core.providers.anthropic import AnthropicReviewer

        if common["model"] == DEFAULT_CONFIG["model"]:
            common["model"] = ANTHROPIC_DEFAULT_MODEL
        return AnthropicReviewer(api_key=_require(config, "anthropic_api_key", "ANTHROPIC_API_KEY"), **common)

    raise ConfigError(f"Unknown provider: {provider!r}.")
