"""Request construction for the analysis and synthesis services.

The synthesis service is order-sensitive: every image part must come
before the single instruction text, and in revision mode the previous
artifact sits between the assets and the text. SynthesisRequest enforces
that ordering when it is constructed, so a malformed request can never
reach a collaborator.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from fv_studio.aspect import AspectRatio
from fv_studio.models import (
    STRATEGY_FIELD_LABELS,
    Dimensions,
    FreeformStrategy,
    ImagePayload,
    Strategy,
    StructuredStrategy,
    UploadedAsset,
)

DEFAULT_ADJUSTMENT = "minor refinement"

RequestMode = Literal["initial", "revision"]


class ImagePart(BaseModel):
    """An inline image sent to a model service."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["image"] = "image"
    payload: ImagePayload


class TextPart(BaseModel):
    """An instruction text sent to a model service."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["text"] = "text"
    text: str


Part = Annotated[ImagePart | TextPart, Field(discriminator="kind")]


class _OrderedParts(BaseModel):
    """Parts list with the images-then-one-text ordering enforced."""

    model_config = ConfigDict(frozen=True)

    parts: tuple[Part, ...]

    @model_validator(mode="after")
    def check_part_order(self) -> _OrderedParts:
        if not self.parts or not isinstance(self.parts[-1], TextPart):
            msg = "request must end with exactly one text part"
            raise ValueError(msg)
        if any(isinstance(part, TextPart) for part in self.parts[:-1]):
            msg = "image parts must precede the instruction text"
            raise ValueError(msg)
        return self

    @property
    def images(self) -> list[ImagePayload]:
        return [part.payload for part in self.parts if isinstance(part, ImagePart)]

    @property
    def text(self) -> str:
        return self.parts[-1].text  # type: ignore[union-attr]


class SynthesisRequest(_OrderedParts):
    """Immutable request handed to a Synthesizer.

    Attributes:
        parts: Asset images, then the previous artifact (revision mode
            only), then the instruction text
        aspect_ratio: Normalized aspect-ratio tag for the output
        mode: ``initial`` or ``revision``
    """

    aspect_ratio: AspectRatio
    mode: RequestMode


class AnalysisRequest(_OrderedParts):
    """Immutable request handed to the analysis model: references, then prompt."""

    strategy_format: Literal["structured", "freeform"] = "structured"


def _strategy_lines(strategy: StructuredStrategy | FreeformStrategy) -> list[str]:
    if isinstance(strategy, FreeformStrategy):
        return ["BLUEPRINT:", strategy.blueprint.strip()]
    lines = ["STRATEGY:"]
    for field_name, label in STRATEGY_FIELD_LABELS.items():
        value = getattr(strategy, field_name, "") or "(not specified)"
        lines.append(f"- {label}: {value}")
    return lines


def build_synthesis_request(
    strategy: Strategy,
    assets: Sequence[UploadedAsset],
    user_text: str,
    dimensions: Dimensions,
    previous_artifact: ImagePayload | None = None,
) -> SynthesisRequest:
    """Build the synthesis request for an initial generation or a revision.

    Args:
        strategy: Active strategy (structured or freeform).
        assets: Product assets to include, in order.
        user_text: Additional request (initial mode) or adjustment
            instruction (revision mode).
        dimensions: Active output dimensions, normalized to a ratio tag.
        previous_artifact: Image being revised. Its presence selects
            revision mode.

    Returns:
        A new SynthesisRequest. The asset list is snapshotted, so later
        changes to the caller's list do not affect it.

    """
    aspect_ratio = dimensions.aspect_ratio
    parts: list[ImagePart | TextPart] = [ImagePart(payload=asset.payload) for asset in assets]

    if previous_artifact is not None:
        parts.append(ImagePart(payload=previous_artifact))
        adjustment = user_text.strip() or DEFAULT_ADJUSTMENT
        text = "\n".join(
            [
                "TASK: Revise the previous result (the last image) while keeping "
                "everything that is not mentioned unchanged.",
                f"ADJUSTMENT: {adjustment}",
                f"ASPECT RATIO: {aspect_ratio}",
            ]
        )
        mode: RequestMode = "revision"
    else:
        lines = [
            "TASK: Generate a new visual that applies the strategy below, using the "
            "provided images as product material.",
            "Keep the composition, mood and typography placement of the references "
            "as faithfully as possible.",
            "",
            *_strategy_lines(strategy),
            "",
            f"ADDITIONAL REQUEST: {user_text.strip() or '(none)'}",
            f"ASPECT RATIO: {aspect_ratio}",
        ]
        text = "\n".join(lines)
        mode = "initial"

    parts.append(TextPart(text=text))
    return SynthesisRequest(parts=tuple(parts), aspect_ratio=aspect_ratio, mode=mode)


_STRUCTURED_ANALYSIS_PROMPT = """\
You are a seasoned web marketer and creative director.
Analyse the attached high-performing first-view visuals and extract the
reasons they succeed: not only the surface design but the psychological
hooks and information design behind it.

Answer with a single JSON object using exactly these keys:
{
  "target": "the specific audience this visual targets and their pain point",
  "valueProp": "how the single strongest selling point is conveyed at a glance",
  "visualHierarchy": "the intended reading order and layout rules",
  "colorStrategy": "the psychological effect of the colour combination",
  "copySuggestion": "the strongest headline copy that keeps this structure for a new product"
}"""

_FREEFORM_ANALYSIS_PROMPT = """\
You are a world-class art director and visual analyst.
Analyse the attached reference images in terms of colour, light,
composition and texture.

Goal: write the blueprint an image generation model needs to rebuild this
visual with the highest possible fidelity.

Structure the answer as:
- Composition: placement of elements, whitespace, eye-flow logic
- Colour: dominant tones and lighting direction
- Texture: surface detail (matte, gloss, grain)
- Master prompt: a detailed English prompt for reconstruction"""


def build_analysis_request(
    images: Sequence[ImagePayload],
    hints: str | None = None,
    strategy_format: Literal["structured", "freeform"] = "structured",
) -> AnalysisRequest:
    """Build the analysis request: reference images first, prompt last.

    Args:
        images: Reference images to analyse.
        hints: Optional extra instructions from the user.
        strategy_format: Which Strategy shape the prompt asks for.

    Returns:
        A new AnalysisRequest.

    """
    prompt = (
        _STRUCTURED_ANALYSIS_PROMPT
        if strategy_format == "structured"
        else _FREEFORM_ANALYSIS_PROMPT
    )
    if hints and hints.strip():
        prompt = f"{prompt}\n\nAdditional user request: {hints.strip()}"

    parts: list[ImagePart | TextPart] = [ImagePart(payload=image) for image in images]
    parts.append(TextPart(text=prompt))
    return AnalysisRequest(parts=tuple(parts), strategy_format=strategy_format)
