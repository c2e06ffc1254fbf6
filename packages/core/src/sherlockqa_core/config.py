import os
from pathlib import Path
from typing import Optional

import yaml

from sherlockqa_core.exceptions import ConfigError
from sherlockqa_core.placement import Severity
from sherlockqa_core.reconcile import REVIEW_MARKER
from sherlockqa_core.render import Layout
from sherlockqa_core.scenarios import DEFAULT_OVERLAP_THRESHOLD

PROVIDERS = ("openai", "azure", "azure-responses", "anthropic")

DEFAULT_CONFIG: dict = {
    "provider": "openai",
    "model": "gpt-4",
    "min_severity": "warning",
    "ignore_patterns": [],  # "*.lock", "dist/", exact paths or substrings
    "persona": "",
    "domain_knowledge": "",
    "max_tokens": 4096,
    "max_diff_chars": 50000,
    "auto_approve": False,
    "code_quality": False,
    "layout": "detailed",
    "review_marker": REVIEW_MARKER,
    "scenario_overlap_threshold": DEFAULT_OVERLAP_THRESHOLD,
    "azure_deployment": None,  # None = same as model
    "azure_api_version": None,  # None = provider default
}


def _split_patterns(value) -> list[str]:
    """Accept patterns as a list or as the comma-separated string form."""
    if not value:
        return []
    if isinstance(value, str):
        value = value.split(",")
    return [str(p).strip() for p in value if str(p).strip()]


def load_config(config_path: str = ".sherlockqa.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .sherlockqa.yml in the current directory
      3. CLI argument overrides
    Credentials always come from the environment.
    """
    config = {**DEFAULT_CONFIG, "ignore_patterns": list(DEFAULT_CONFIG["ignore_patterns"])}

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        if not isinstance(file_config, dict):
            raise ConfigError(f"{config_path} must contain a mapping, got {type(file_config).__name__}")
        config.update(file_config)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    config["ignore_patterns"] = _split_patterns(config.get("ignore_patterns"))

    # Resolve credentials from environment variables
    config["github_token"] = os.environ.get("GITHUB_TOKEN")
    config["openai_api_key"] = os.environ.get("OPENAI_API_KEY")
    config["anthropic_api_key"] = os.environ.get("ANTHROPIC_API_KEY")
    config["azure_api_key"] = os.environ.get("AZURE_OPENAI_API_KEY")
    config["azure_endpoint"] = os.environ.get("AZURE_OPENAI_ENDPOINT") or config.get("azure_endpoint")

    return config


def validate_config(config: dict) -> None:
    """Raise ConfigError for values that would only fail later, mid-review."""
    if config.get("provider") not in PROVIDERS:
        raise ConfigError(f"Unknown provider: {config.get('provider')!r}. Choose one of: {', '.join(PROVIDERS)}.")
    if Severity.parse(config.get("min_severity")) is None:
        raise ConfigError(
            f"Unknown min_severity: {config.get('min_severity')!r}. Choose suggestion, warning or error."
        )
    try:
        Layout(config.get("layout"))
    except ValueError:
        raise ConfigError(f"Unknown layout: {config.get('layout')!r}. Choose compact or detailed.")
    threshold = config.get("scenario_overlap_threshold")
    if isinstance(threshold, bool) or not isinstance(threshold, (int, float)) or not 0 < threshold <= 1:
        raise ConfigError(f"scenario_overlap_threshold must be in (0, 1], got {threshold!r}.")
    if not config.get("review_marker"):
        raise ConfigError("review_marker must not be empty.")
