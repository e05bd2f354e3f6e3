"""Interfaces of the external services the orchestrator depends on.

Implementations backed by Google Gemini live in ``fv_studio.gemini``; tests
supply in-memory fakes.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from fv_studio.models import FreeformStrategy, ImagePayload, StructuredStrategy
    from fv_studio.request_builder import SynthesisRequest


@runtime_checkable
class StrategyExtractor(Protocol):
    """Derives a success strategy from reference images."""

    async def analyze(
        self, images: Sequence[ImagePayload], hints: str | None = None
    ) -> StructuredStrategy | FreeformStrategy:
        """Analyse ``images`` and return a strategy.

        Raises:
            AnalysisError: If the call fails or its result has the wrong shape.
            AuthorizationError: If the service rejects the caller.
        """
        ...


@runtime_checkable
class Synthesizer(Protocol):
    """Produces an image from an ordered synthesis request."""

    async def generate(self, request: SynthesisRequest) -> ImagePayload:
        """Run ``request`` and return the synthesized image.

        Raises:
            SynthesisError: If the call fails or no image is returned.
            AuthorizationError: If the service rejects the caller.
        """
        ...


@runtime_checkable
class Authorizer(Protocol):
    """Confirms or obtains permission to call the model services."""

    async def is_authorized(self) -> bool: ...

    async def authorize(self) -> bool:
        """Run the (re-)authorization flow and report whether it succeeded."""
        ...
