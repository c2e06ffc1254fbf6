"""Exception hierarchy for sherlockqa.

The pure review core (diff indexing, placement, scenario matching, body
composition) never raises these; they belong to the layers that talk to the
outside world: configuration loading and the model providers.
"""

from __future__ import annotations


class SherlockQAError(Exception):
    """Base class for every error raised by sherlockqa."""


class ConfigError(SherlockQAError):
    """Raised when .sherlockqa.yml or CLI overrides hold an invalid value."""


class ProviderError(SherlockQAError):
    """Raised when a model provider cannot produce a response after retrying."""
