"""Core configuration and exception modules."""

from fv_studio.core.config import Settings, get_settings, reset_settings
from fv_studio.core.exceptions import (
    AnalysisError,
    AuthorizationError,
    ConfigurationError,
    ExternalServiceError,
    StudioError,
    SynthesisError,
    ValidationError,
)

__all__ = [
    # Exceptions (sorted alphabetically)
    "AnalysisError",
    "AuthorizationError",
    "ConfigurationError",
    "ExternalServiceError",
    # Configuration
    "Settings",
    "StudioError",
    "SynthesisError",
    "ValidationError",
    "get_settings",
    "reset_settings",
]
