"""Pytest configuration and fixtures for fv-studio tests."""

from __future__ import annotations

import base64
import os
from collections.abc import Sequence
from unittest.mock import patch

import pytest

from fv_studio.core.config import reset_settings
from fv_studio.core.exceptions import AnalysisError, SynthesisError
from fv_studio.models import (
    Dimensions,
    FreeformStrategy,
    ImagePayload,
    StructuredStrategy,
    UploadedAsset,
)
from fv_studio.request_builder import SynthesisRequest

TEST_API_KEY = "test-gemini-key"


class FakeExtractor:
    """In-memory StrategyExtractor that records its calls."""

    def __init__(self, strategy=None, error: Exception | None = None) -> None:
        self.strategy = strategy or StructuredStrategy(
            target="busy parents",
            value_prop="ready in five minutes",
            visual_hierarchy="headline, product, call to action",
            color_strategy="warm orange for appetite",
            copy_suggestion="Dinner, solved.",
        )
        self.error = error
        self.calls: list[tuple[list[ImagePayload], str | None]] = []

    async def analyze(
        self, images: Sequence[ImagePayload], hints: str | None = None
    ):
        self.calls.append((list(images), hints))
        if self.error is not None:
            raise self.error
        return self.strategy


class FakeSynthesizer:
    """In-memory Synthesizer returning a distinct artifact per call."""

    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.requests: list[SynthesisRequest] = []

    async def generate(self, request: SynthesisRequest) -> ImagePayload:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return ImagePayload(
            mime_type="image/png", data=f"artifact-{len(self.requests)}".encode()
        )


class FakeAuthorizer:
    """Authorizer with a scripted answer."""

    def __init__(self, authorized: bool = True, grant_on_authorize: bool = True) -> None:
        self.authorized = authorized
        self.grant_on_authorize = grant_on_authorize
        self.check_calls = 0
        self.authorize_calls = 0

    async def is_authorized(self) -> bool:
        self.check_calls += 1
        return self.authorized

    async def authorize(self) -> bool:
        self.authorize_calls += 1
        self.authorized = self.grant_on_authorize
        return self.authorized


@pytest.fixture(autouse=True)
def reset_settings_after_test():
    """Reset settings singleton after each test."""
    yield
    reset_settings()


@pytest.fixture
def mock_env_vars():
    """Set the Gemini API key for testing."""
    with patch.dict(os.environ, {"GEMINI_API_KEY": TEST_API_KEY}):
        yield


@pytest.fixture
def sample_image_bytes() -> bytes:
    """Return sample PNG image bytes (1x1 red pixel)."""
    return base64.b64decode(
        "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mP8z8DwHwAFBQIA"
        "X8jx0gAAAABJRU5ErkJggg=="
    )


@pytest.fixture
def make_asset(sample_image_bytes: bytes):
    """Factory for uploaded assets with distinct payloads."""

    def _make(name: str = "asset.png", data: bytes | None = None) -> UploadedAsset:
        payload = ImagePayload(mime_type="image/png", data=data or sample_image_bytes + name.encode())
        return UploadedAsset(payload=payload, name=name)

    return _make


@pytest.fixture
def structured_strategy() -> StructuredStrategy:
    return StructuredStrategy(
        target="busy parents",
        value_prop="ready in five minutes",
        visual_hierarchy="headline, product, call to action",
        color_strategy="warm orange for appetite",
        copy_suggestion="Dinner, solved.",
    )


@pytest.fixture
def freeform_strategy() -> FreeformStrategy:
    return FreeformStrategy(blueprint="Centered product on a pastel gradient, bold serif headline.")


@pytest.fixture
def standard_dimensions() -> Dimensions:
    return Dimensions(width=1200, height=900)


@pytest.fixture
def extractor() -> FakeExtractor:
    return FakeExtractor()


@pytest.fixture
def synthesizer() -> FakeSynthesizer:
    return FakeSynthesizer()


@pytest.fixture
def failing_extractor() -> FakeExtractor:
    return FakeExtractor(error=AnalysisError("model overloaded", service_name="fake"))


@pytest.fixture
def failing_synthesizer() -> FakeSynthesizer:
    return FakeSynthesizer(error=SynthesisError("No image payload present in result"))


@pytest.fixture
def authorizer() -> FakeAuthorizer:
    return FakeAuthorizer()
