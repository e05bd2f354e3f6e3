"""fv-studio configuration settings.

Environment-based configuration for the Gemini collaborators, export and
logging. Values are read from environment variables or a ``.env`` file.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from fv_studio.core.exceptions import ConfigurationError
from fv_studio.models import IMAGE_SIZES, SIZE_PRESETS, ImageSize

StrategyFormat = Literal["structured", "freeform"]
ClientLifetime = Literal["per_call", "shared"]


class Settings(BaseSettings):
    """Configuration for the generation engine and its Gemini collaborators.

    Attributes:
        gemini_api_key: Gemini API key (optional until a service is called)
        analysis_model: Model ID used for strategy extraction
        synthesis_model: Model ID used for image synthesis
        image_size: Output resolution requested from the synthesizer
        strategy_format: Whether analysis yields a structured or freeform strategy
        thinking_budget: Thinking token budget for structured analysis
        client_lifetime: ``per_call`` builds a fresh client for every call so
            rotated credentials are honoured; ``shared`` reuses one client
        default_size_preset: Size preset a new session starts with
        export_dir: Directory exported revisions are written to
        export_prefix: Filename prefix for exported revisions
        log_level: Logging level for the ``fv_studio`` logger
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
        populate_by_name=True,
    )

    gemini_api_key: SecretStr | None = Field(
        default=None,
        alias="GEMINI_API_KEY",
        description="Gemini API key",
    )

    analysis_model: str = Field(
        default="gemini-3-pro-preview",
        alias="FV_ANALYSIS_MODEL",
        description="Model used to extract the success strategy",
    )
    synthesis_model: str = Field(
        default="gemini-3-pro-image-preview",
        alias="FV_SYNTHESIS_MODEL",
        description="Model used to synthesize visuals",
    )
    image_size: ImageSize = Field(
        default="1K",
        alias="FV_IMAGE_SIZE",
        description=f"Synthesis resolution, one of {IMAGE_SIZES}",
    )
    strategy_format: StrategyFormat = Field(
        default="structured",
        alias="FV_STRATEGY_FORMAT",
        description="Structured five-field strategy or freeform blueprint",
    )
    thinking_budget: int = Field(
        default=16000,
        ge=0,
        alias="FV_THINKING_BUDGET",
        description="Thinking budget for structured analysis (0 disables)",
    )
    client_lifetime: ClientLifetime = Field(
        default="per_call",
        alias="FV_CLIENT_LIFETIME",
        description="Service client lifetime policy",
    )

    default_size_preset: str = Field(
        default="std",
        alias="FV_DEFAULT_SIZE",
        description="Size preset used when a session starts",
    )
    export_dir: Path = Field(
        default=Path(),
        alias="FV_EXPORT_DIR",
        description="Directory exported revisions are written to",
    )
    export_prefix: str = Field(
        default="fv",
        alias="FV_EXPORT_PREFIX",
        description="Filename prefix for exported revisions",
    )
    log_level: str = Field(
        default="INFO",
        alias="FV_LOG_LEVEL",
        description="Logging level",
    )

    @field_validator("default_size_preset")
    @classmethod
    def validate_size_preset(cls, v: str) -> str:
        """Validate the preset name is known."""
        if v not in SIZE_PRESETS:
            msg = f"Invalid size preset: {v}. Must be one of: {', '.join(SIZE_PRESETS)}"
            raise ValueError(msg)
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize the logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid_levels:
            msg = f"Invalid log level: {v}. Must be one of: {', '.join(sorted(valid_levels))}"
            raise ValueError(msg)
        return v.upper()

    def get_api_key(self) -> str:
        """Get the Gemini API key as a plain string.

        Returns:
            The API key value.

        Raises:
            ConfigurationError: If no API key is configured.
        """
        if self.gemini_api_key is None or not self.gemini_api_key.get_secret_value():
            msg = (
                "GEMINI_API_KEY environment variable not set. "
                "Set it with: export GEMINI_API_KEY='your-api-key'"
            )
            raise ConfigurationError(msg, details={"missing_keys": ["GEMINI_API_KEY"]})
        return self.gemini_api_key.get_secret_value()


_settings_instance: Settings | None = None


def get_settings() -> Settings:
    """Get default settings (singleton, reads from environment).

    Returns:
        Settings instance.
    """
    global _settings_instance  # noqa: PLW0603
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance


def reset_settings() -> None:
    """Reset singleton so the next get_settings() re-reads the environment."""
    global _settings_instance  # noqa: PLW0603
    _settings_instance = None
