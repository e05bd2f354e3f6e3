"""Data models for the generation-session engine.

All values are frozen pydantic models: assets, strategies and revisions are
shared by reference between the session and in-flight requests, so nothing
here may change after construction.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, PositiveInt

from fv_studio.aspect import ASPECT_RATIOS, AspectRatio, map_to_supported_ratio

ImageSize = Literal["1K", "2K", "4K"]

# Valid output sizes for the synthesis model
IMAGE_SIZES: list[ImageSize] = ["1K", "2K", "4K"]


class ImagePayload(BaseModel):
    """Raw image bytes with their MIME type."""

    model_config = ConfigDict(frozen=True)

    mime_type: str = Field(default="image/png", description="MIME type, e.g. image/png")
    data: bytes = Field(repr=False, description="Raw image bytes")


class UploadedAsset(BaseModel):
    """An image the user supplied, either as a reference or as product material.

    Attributes:
        id: Unique identifier, generated on ingestion
        payload: The image itself
        name: Optional original filename
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    payload: ImagePayload
    name: str | None = None

    @property
    def mime_type(self) -> str:
        return self.payload.mime_type


class StructuredStrategy(BaseModel):
    """Success strategy extracted as five named fields.

    The analysis service answers in JSON with camelCase keys; both the
    aliases and the field names are accepted.

    Attributes:
        target: Audience the reference visual aims at, and its pain point
        value_prop: How the main selling point is conveyed at a glance
        visual_hierarchy: Intended order in which the eye reads the layout
        color_strategy: Psychological intent behind the colour choices
        copy_suggestion: Headline copy that keeps the structure for a new product
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    kind: Literal["structured"] = "structured"
    target: str = ""
    value_prop: str = Field(default="", alias="valueProp")
    visual_hierarchy: str = Field(default="", alias="visualHierarchy")
    color_strategy: str = Field(default="", alias="colorStrategy")
    copy_suggestion: str = Field(default="", alias="copySuggestion")


class FreeformStrategy(BaseModel):
    """Success strategy expressed as a free-text reconstruction blueprint."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["freeform"] = "freeform"
    blueprint: str


Strategy = Annotated[StructuredStrategy | FreeformStrategy, Field(discriminator="kind")]

# Display labels for StructuredStrategy fields, in prompt order
STRATEGY_FIELD_LABELS: dict[str, str] = {
    "target": "Target audience",
    "value_prop": "Value proposition",
    "visual_hierarchy": "Visual hierarchy",
    "color_strategy": "Color strategy",
    "copy_suggestion": "Headline copy",
}


class Dimensions(BaseModel):
    """Requested output size in pixels."""

    model_config = ConfigDict(frozen=True)

    width: PositiveInt
    height: PositiveInt

    @property
    def aspect_ratio(self) -> AspectRatio:
        """Closest supported aspect ratio for these dimensions."""
        return map_to_supported_ratio(self.width, self.height)

    def __str__(self) -> str:
        return f"{self.width}x{self.height}"


class SizePreset(BaseModel):
    """A named output size offered to the user."""

    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    dimensions: Dimensions


SIZE_PRESETS: dict[str, SizePreset] = {
    "std": SizePreset(
        id="std", label="Standard (1200x900)", dimensions=Dimensions(width=1200, height=900)
    ),
    "sq": SizePreset(
        id="sq", label="Square (1080x1080)", dimensions=Dimensions(width=1080, height=1080)
    ),
    "pt": SizePreset(
        id="pt", label="Portrait (1080x1920)", dimensions=Dimensions(width=1080, height=1920)
    ),
    "wd": SizePreset(
        id="wd", label="Wide (1920x1080)", dimensions=Dimensions(width=1920, height=1080)
    ),
}

DEFAULT_SIZE_PRESET = "std"


class RevisionEntry(BaseModel):
    """Snapshot of one successful synthesis.

    Attributes:
        artifact: The synthesized image
        dimensions: Dimensions active when the request was built
        strategy: Strategy active when the request was built
        sequence: Session-unique sequence number (never reused, even after
            a branch is discarded)
        instruction: User text or adjustment that produced this revision
        created_at: When the revision was recorded
    """

    model_config = ConfigDict(frozen=True)

    artifact: ImagePayload
    dimensions: Dimensions
    strategy: Strategy
    sequence: int = Field(ge=0)
    instruction: str = ""
    created_at: datetime = Field(default_factory=lambda: datetime.now(tz=UTC))


__all__ = [
    "ASPECT_RATIOS",
    "DEFAULT_SIZE_PRESET",
    "IMAGE_SIZES",
    "SIZE_PRESETS",
    "STRATEGY_FIELD_LABELS",
    "AspectRatio",
    "Dimensions",
    "FreeformStrategy",
    "ImagePayload",
    "ImageSize",
    "RevisionEntry",
    "SizePreset",
    "Strategy",
    "StructuredStrategy",
    "UploadedAsset",
]
