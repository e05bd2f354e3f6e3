"""Gemini-backed strategy extraction, synthesis and authorization.

Note: The google-genai types are dynamically loaded, causing reportUnknown*
warnings under strict type checking.
"""
# ruff: noqa: PLC0415

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

import pydantic

from fv_studio.core.config import Settings, get_settings, reset_settings
from fv_studio.core.exceptions import (
    AnalysisError,
    AuthorizationError,
    ConfigurationError,
    ExternalServiceError,
    SynthesisError,
)
from fv_studio.models import FreeformStrategy, ImagePayload, StructuredStrategy
from fv_studio.request_builder import (
    AnalysisRequest,
    ImagePart,
    SynthesisRequest,
    build_analysis_request,
)

if TYPE_CHECKING:
    from fv_studio.request_builder import Part

logger = logging.getLogger(__name__)

SERVICE_NAME = "gemini"

# Lazy import for google.genai
_genai = None
_types = None

# Substrings of API error messages that mean the key itself is unusable
_AUTH_FAILURE_MARKERS = (
    "API key not valid",
    "API_KEY_INVALID",
    "Requested entity was not found",
)


def _get_genai() -> tuple[Any, Any]:
    """Lazy import google.genai to avoid import errors when not installed."""
    global _genai, _types  # noqa: PLW0603
    if _genai is None:
        try:
            from google import genai
            from google.genai import types

            _genai = genai
            _types = types
        except ImportError as e:
            msg = (
                "google-genai package not installed. "
                "Install with: pip install google-genai"
            )
            raise ImportError(msg) from e
    return _genai, _types


def _map_api_error(
    error: Exception, default: type[ExternalServiceError], action: str
) -> AuthorizationError | ExternalServiceError:
    """Translate an SDK exception into a project exception."""
    status = getattr(error, "code", None)
    status_code = status if isinstance(status, int) else None
    message = str(error)

    if status_code in (401, 403) or any(m in message for m in _AUTH_FAILURE_MARKERS):
        return AuthorizationError(
            f"Gemini rejected the credentials during {action}: {message}",
            service_name=SERVICE_NAME,
            status_code=status_code,
        )
    return default(
        f"Gemini {action} failed: {message}",
        service_name=SERVICE_NAME,
        status_code=status_code,
    )


class _GeminiCollaborator:
    """Shared client handling for the Gemini collaborators.

    With ``client_lifetime="per_call"`` a client is built for every request
    from freshly read settings, so a rotated API key takes effect on the
    next call. With ``"shared"`` the first client is reused.
    """

    def __init__(self, settings: Settings | None = None, model: str | None = None) -> None:
        self._settings = settings
        self._model = model
        self._shared_client: Any = None

    @property
    def settings(self) -> Settings:
        return self._settings or get_settings()

    def _client(self) -> Any:
        settings = self.settings
        if settings.client_lifetime == "shared" and self._shared_client is not None:
            return self._shared_client

        genai, _ = _get_genai()
        client = genai.Client(api_key=settings.get_api_key())
        if settings.client_lifetime == "shared":
            self._shared_client = client
        return client

    @staticmethod
    def _to_contents(parts: Sequence[Part]) -> list[Any]:
        _, types = _get_genai()
        contents: list[Any] = []
        for part in parts:
            if isinstance(part, ImagePart):
                contents.append(
                    types.Part.from_bytes(
                        data=part.payload.data,
                        mime_type=part.payload.mime_type,
                    )
                )
            else:
                contents.append(types.Part.from_text(text=part.text))
        return contents


class GeminiStrategyExtractor(_GeminiCollaborator):
    """StrategyExtractor backed by a Gemini text model."""

    async def analyze(
        self, images: Sequence[ImagePayload], hints: str | None = None
    ) -> StructuredStrategy | FreeformStrategy:
        """Analyse reference images into a strategy.

        Args:
            images: Reference images.
            hints: Optional user instructions appended to the prompt.

        Returns:
            A StructuredStrategy or FreeformStrategy, depending on the
            ``strategy_format`` setting.

        Raises:
            AnalysisError: If the call fails or the answer has the wrong shape.
            AuthorizationError: If Gemini rejects the API key.
            ConfigurationError: If no API key is configured.

        """
        settings = self.settings
        request = build_analysis_request(images, hints, settings.strategy_format)
        text = await self._call(request)

        if request.strategy_format == "freeform":
            if not text.strip():
                msg = "Analysis returned an empty blueprint"
                raise AnalysisError(msg, service_name=SERVICE_NAME)
            return FreeformStrategy(blueprint=text.strip())

        try:
            return StructuredStrategy.model_validate_json(text)
        except pydantic.ValidationError as e:
            msg = "Analysis result not parseable as the expected strategy shape"
            raise AnalysisError(
                msg,
                service_name=SERVICE_NAME,
                details={"response_excerpt": text[:200]},
            ) from e

    async def _call(self, request: AnalysisRequest) -> str:
        _, types = _get_genai()
        settings = self.settings
        model_id = self._model or settings.analysis_model

        config_kwargs: dict[str, Any] = {}
        if request.strategy_format == "structured":
            config_kwargs["response_mime_type"] = "application/json"
            if settings.thinking_budget:
                config_kwargs["thinking_config"] = types.ThinkingConfig(
                    thinking_budget=settings.thinking_budget
                )

        client = self._client()
        logger.debug("Calling %s with %d part(s)", model_id, len(request.parts))
        try:
            response = await client.aio.models.generate_content(
                model=model_id,
                contents=self._to_contents(request.parts),
                config=types.GenerateContentConfig(**config_kwargs),
            )
        except Exception as e:
            raise _map_api_error(e, AnalysisError, "analysis") from e

        text = getattr(response, "text", None)
        if not text:
            msg = "Analysis returned no text"
            raise AnalysisError(msg, service_name=SERVICE_NAME)
        return text


class GeminiSynthesizer(_GeminiCollaborator):
    """Synthesizer backed by a Gemini image model."""

    async def generate(self, request: SynthesisRequest) -> ImagePayload:
        """Run a synthesis request.

        Args:
            request: Ordered request from build_synthesis_request.

        Returns:
            The first final (non-thought) image in the response.

        Raises:
            SynthesisError: If the call fails or no image is returned.
            AuthorizationError: If Gemini rejects the API key.
            ConfigurationError: If no API key is configured.

        """
        _, types = _get_genai()
        settings = self.settings
        model_id = self._model or settings.synthesis_model

        generate_config = types.GenerateContentConfig(
            response_modalities=["IMAGE", "TEXT"],
            image_config=types.ImageConfig(
                aspect_ratio=request.aspect_ratio,
                image_size=settings.image_size,
            ),
        )

        client = self._client()
        logger.debug(
            "Calling %s (%s, %s)", model_id, request.aspect_ratio, settings.image_size
        )
        try:
            response = await client.aio.models.generate_content(
                model=model_id,
                contents=self._to_contents(request.parts),
                config=generate_config,
            )
        except Exception as e:
            raise _map_api_error(e, SynthesisError, "synthesis") from e

        if not response.candidates:
            details = {}
            feedback = getattr(response, "prompt_feedback", None)
            if feedback is not None:
                details["prompt_feedback"] = str(feedback)
            msg = "Synthesis returned no candidates"
            raise SynthesisError(msg, service_name=SERVICE_NAME, details=details)

        content = response.candidates[0].content
        for part in (content.parts if content is not None else None) or []:
            # Thought parts are intermediate reasoning images
            if getattr(part, "thought", False):
                continue
            if part.inline_data is not None and part.inline_data.data:
                return ImagePayload(
                    mime_type=part.inline_data.mime_type or "image/png",
                    data=part.inline_data.data,
                )

        msg = "No image payload present in synthesis result"
        raise SynthesisError(msg, service_name=SERVICE_NAME)


class ApiKeyAuthorizer:
    """Authorizer that treats a configured Gemini API key as permission.

    ``authorize`` re-reads the environment, so exporting a new key and
    retrying is enough to recover from an AuthorizationError.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings

    def _has_key(self) -> bool:
        settings = self._settings or get_settings()
        try:
            settings.get_api_key()
        except ConfigurationError:
            return False
        return True

    async def is_authorized(self) -> bool:
        return self._has_key()

    async def authorize(self) -> bool:
        if self._settings is None:
            reset_settings()
        ok = self._has_key()
        if not ok:
            logger.warning("GEMINI_API_KEY is not set; authorization failed")
        return ok
