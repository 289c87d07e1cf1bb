"""Configuration error definitions."""

from __future__ import annotations

from modelcat.errors import ModelcatError


class ConfigurationError(ModelcatError):
    """Raised when configuration values are invalid."""


class MissingConfigurationError(ConfigurationError):
    """Raised when required configuration values are absent or blank."""
