"""fv-studio: strategy-driven visual generation.

Derives a reusable success strategy from reference visuals, then
iteratively synthesizes new visuals that combine the strategy with
user-supplied assets, keeping a branching revision history.

Features:
    - Strategy extraction as a structured five-field record or a freeform blueprint
    - Aspect-ratio normalization to the five ratios the synthesizer supports
    - Ordered, immutable synthesis requests (images first, instruction last)
    - Linear revision history with branch truncation on append
    - Explicit session state machine with guarded transitions

Example:
    >>> from fv_studio import GenerationOrchestrator, map_to_supported_ratio
    >>> map_to_supported_ratio(1920, 1080)
    '16:9'

"""

from fv_studio.aspect import ASPECT_RATIOS, AspectRatio, map_to_supported_ratio
from fv_studio.history import RevisionHistory
from fv_studio.models import (
    SIZE_PRESETS,
    Dimensions,
    FreeformStrategy,
    ImagePayload,
    RevisionEntry,
    Strategy,
    StructuredStrategy,
    UploadedAsset,
)
from fv_studio.orchestrator import GenerationOrchestrator
from fv_studio.request_builder import (
    ImagePart,
    SynthesisRequest,
    TextPart,
    build_synthesis_request,
)
from fv_studio.session import SessionState, SessionStatus, transition

__all__ = [
    "ASPECT_RATIOS",
    "SIZE_PRESETS",
    "AspectRatio",
    "Dimensions",
    "FreeformStrategy",
    "GenerationOrchestrator",
    "ImagePart",
    "ImagePayload",
    "RevisionEntry",
    "RevisionHistory",
    "SessionState",
    "SessionStatus",
    "Strategy",
    "StructuredStrategy",
    "SynthesisRequest",
    "TextPart",
    "UploadedAsset",
    "build_synthesis_request",
    "map_to_supported_ratio",
    "transition",
]

__version__ = "0.1.0"
