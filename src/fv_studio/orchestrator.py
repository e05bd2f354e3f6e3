"""Generation orchestrator: the façade over one generation session.

The orchestrator owns the session state and the user's inputs (reference
images, product assets, output size, request text). Each operation runs
the state-machine guard first, so a ValidationError leaves everything
untouched and no collaborator is called. Collaborator failures move the
session to ERROR but keep the strategy and history, so a retry never
requires uploading the inputs again.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import TYPE_CHECKING

import pydantic

from fv_studio.core.exceptions import (
    AnalysisError,
    AuthorizationError,
    StudioError,
    SynthesisError,
    ValidationError,
)
from fv_studio.export import export_revision
from fv_studio.models import (
    DEFAULT_SIZE_PRESET,
    SIZE_PRESETS,
    Dimensions,
    ImagePayload,
    RevisionEntry,
    UploadedAsset,
)
from fv_studio.request_builder import build_synthesis_request
from fv_studio.session import (
    AnalysisFailed,
    AnalysisSucceeded,
    EditStrategy,
    Reset,
    Retry,
    SelectRevision,
    SessionAction,
    SessionError,
    SessionEvent,
    SessionState,
    SessionStatus,
    StartAnalysis,
    StartRevision,
    StartSynthesis,
    SynthesisFailed,
    SynthesisSucceeded,
    transition,
)

if TYPE_CHECKING:
    from pathlib import Path

    from fv_studio.collaborators import Authorizer, StrategyExtractor, Synthesizer
    from fv_studio.history import RevisionHistory
    from fv_studio.models import Strategy

logger = logging.getLogger(__name__)


class GenerationOrchestrator:
    """Runs the analyze -> synthesize -> revise workflow for one session.

    Example:
        ```python
        orchestrator = GenerationOrchestrator(extractor, synthesizer)
        orchestrator.add_reference_asset(load_uploaded_asset(Path("ref.png")))
        await orchestrator.analyze()

        orchestrator.add_asset(load_uploaded_asset(Path("product.png")))
        await orchestrator.synthesize_initial()
        await orchestrator.request_revision("brighter background")
        orchestrator.select_revision(0)
        ```
    """

    def __init__(
        self,
        extractor: StrategyExtractor,
        synthesizer: Synthesizer,
        authorizer: Authorizer | None = None,
        *,
        dimensions: Dimensions | None = None,
        session_id: str | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            extractor: Strategy extraction collaborator.
            synthesizer: Image synthesis collaborator.
            authorizer: Optional authorization collaborator. Without one the
                session is always considered authorized.
            dimensions: Initial output size (defaults to the standard preset).
            session_id: Identifier used in exported filenames.
        """
        self._extractor = extractor
        self._synthesizer = synthesizer
        self._authorizer = authorizer
        self._authorized: bool | None = None if authorizer is not None else True
        self._needs_reauthorization = False

        self.session_id = session_id or uuid.uuid4().hex[:8]
        self._state = SessionState()

        self._reference_assets: list[UploadedAsset] = []
        self._assets: list[UploadedAsset] = []
        self._dimensions = dimensions or SIZE_PRESETS[DEFAULT_SIZE_PRESET].dimensions
        self._user_text = ""

    # Read-only views

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def status(self) -> SessionStatus:
        return self._state.status

    @property
    def strategy(self) -> Strategy | None:
        return self._state.strategy

    @property
    def history(self) -> RevisionHistory:
        return self._state.history

    @property
    def current_artifact(self) -> ImagePayload | None:
        return self._state.history.current_artifact

    @property
    def last_error(self) -> SessionError | None:
        return self._state.last_error

    @property
    def authorized(self) -> bool:
        """Cached authorization signal; False until confirmed."""
        return bool(self._authorized)

    @property
    def reference_assets(self) -> tuple[UploadedAsset, ...]:
        return tuple(self._reference_assets)

    @property
    def assets(self) -> tuple[UploadedAsset, ...]:
        return tuple(self._assets)

    @property
    def dimensions(self) -> Dimensions:
        return self._dimensions

    @property
    def user_text(self) -> str:
        return self._user_text

    # Inputs

    def add_reference_asset(self, asset: UploadedAsset) -> UploadedAsset:
        self._reference_assets.append(asset)
        return asset

    def remove_reference_asset(self, asset_id: str) -> bool:
        """Remove a reference image by id; returns False when it is unknown."""
        return self._remove(self._reference_assets, asset_id)

    def add_asset(self, asset: UploadedAsset) -> UploadedAsset:
        self._assets.append(asset)
        return asset

    def remove_asset(self, asset_id: str) -> bool:
        """Remove a product asset by id; returns False when it is unknown."""
        return self._remove(self._assets, asset_id)

    @staticmethod
    def _remove(assets: list[UploadedAsset], asset_id: str) -> bool:
        for i, asset in enumerate(assets):
            if asset.id == asset_id:
                del assets[i]
                return True
        return False

    def set_dimensions(self, width: int, height: int) -> Dimensions:
        """Set the output size used by the next synthesis or revision.

        Raises:
            ValidationError: If either side is not a positive integer.
        """
        try:
            self._dimensions = Dimensions(width=width, height=height)
        except pydantic.ValidationError as e:
            msg = f"Width and height must be positive integers, got {width}x{height}"
            raise ValidationError(msg, field="dimensions", value=f"{width}x{height}") from e
        return self._dimensions

    def select_size_preset(self, preset_id: str) -> Dimensions:
        """Switch to a named size preset.

        Raises:
            ValidationError: If the preset is unknown.
        """
        preset = SIZE_PRESETS.get(preset_id)
        if preset is None:
            msg = f"Unknown size preset '{preset_id}'. Valid options: {list(SIZE_PRESETS)}"
            raise ValidationError(msg, field="size_preset", value=preset_id)
        self._dimensions = preset.dimensions
        return self._dimensions

    def set_user_text(self, text: str) -> None:
        self._user_text = text

    # Session operations

    async def analyze(self, hints: str | None = None) -> Strategy:
        """Extract a strategy from the reference images.

        Args:
            hints: Optional extra instructions for the analysis.

        Returns:
            The new active strategy (replacing any previous one).

        Raises:
            ValidationError: If there are no reference images or the
                session is busy; nothing changes.
            AnalysisError: If extraction fails; the session moves to ERROR.
            AuthorizationError: If access is refused; the session moves to
                ERROR and authorization must be re-run.
        """
        self._apply(StartAnalysis(reference_count=len(self._reference_assets)))
        return await self._run_analysis(hints)

    async def synthesize_initial(self) -> RevisionEntry:
        """Synthesize a first visual from the strategy and product assets.

        Returns:
            The new revision, which becomes the current one.

        Raises:
            ValidationError: If there are no assets or no strategy.
            SynthesisError: If synthesis fails; the session moves to ERROR.
            AuthorizationError: If access is refused.
        """
        self._apply(StartSynthesis(asset_count=len(self._assets)))
        return await self._run_synthesis(SessionAction.SYNTHESIZE_INITIAL, self._user_text)

    async def request_revision(self, instruction: str = "") -> RevisionEntry:
        """Refine the currently selected revision.

        Entries after the cursor are discarded when the result is appended.

        Args:
            instruction: Adjustment to apply; blank means a minor refinement.

        Returns:
            The new revision.

        Raises:
            ValidationError: If no revision is selected or there is no
                strategy.
            SynthesisError: If synthesis fails; the session moves to ERROR.
            AuthorizationError: If access is refused.
        """
        self._apply(StartRevision(instruction=instruction))
        return await self._run_synthesis(SessionAction.REQUEST_REVISION, instruction)

    async def retry(self, instruction: str | None = None) -> Strategy | RevisionEntry:
        """Re-attempt the operation that moved the session to ERROR.

        Args:
            instruction: Replacement adjustment for a failed revision. The
                original instruction is reused when omitted.

        Raises:
            ValidationError: If the session is not in ERROR or the retried
                operation's guard is not met.
        """
        state = self._state
        action = state.failed_action
        self._apply(
            Retry(
                reference_count=len(self._reference_assets),
                asset_count=len(self._assets),
            )
        )
        logger.info("Retrying %s", action.value if action else "operation")
        if action is SessionAction.ANALYZE:
            return await self._run_analysis(state.failed_hints)
        if action is SessionAction.REQUEST_REVISION:
            text = instruction if instruction is not None else (state.failed_instruction or "")
            return await self._run_synthesis(action, text)
        return await self._run_synthesis(SessionAction.SYNTHESIZE_INITIAL, self._user_text)

    def select_revision(self, index: int) -> RevisionEntry | None:
        """Move the cursor to ``index`` (ignored when out of range).

        Returns:
            The revision now under the cursor.
        """
        self._apply(SelectRevision(index=index))
        return self._state.history.current

    def edit_strategy(self, strategy: Strategy) -> Strategy:
        """Replace the active strategy with a user-edited one."""
        self._apply(EditStrategy(strategy=strategy))
        return strategy

    def reset(self) -> None:
        """Return to IDLE, clearing strategy, history and error.

        Uploaded images and the chosen size are kept.

        Raises:
            ValidationError: If an analysis or synthesis is in progress.
        """
        self._apply(Reset())
        logger.info("Session %s reset", self.session_id)

    # Export

    def export_revision(
        self, index: int, output_dir: Path, prefix: str = "fv"
    ) -> Path:
        """Write revision ``index`` to a uniquely named file.

        Raises:
            ValidationError: If ``index`` is out of range.
        """
        history = self._state.history
        if not 0 <= index < len(history):
            msg = f"No revision at index {index}"
            raise ValidationError(msg, field="index", value=index)
        return export_revision(history[index], output_dir, self.session_id, prefix)

    def export_current(self, output_dir: Path, prefix: str = "fv") -> Path:
        """Write the revision under the cursor to a uniquely named file."""
        return self.export_revision(self._state.history.cursor, output_dir, prefix)

    # Internals

    def _apply(self, event: SessionEvent) -> None:
        self._state = transition(self._state, event)

    async def _run_analysis(self, hints: str | None) -> Strategy:
        images = [asset.payload for asset in self._reference_assets]
        try:
            await self._ensure_authorized()
            logger.info("Analyzing %d reference image(s)", len(images))
            strategy = await self._extractor.analyze(images, hints)
        except asyncio.CancelledError:
            self._apply(
                AnalysisFailed(
                    error=SessionError.from_exception(AnalysisError("Analysis cancelled")),
                    hints=hints,
                )
            )
            logger.warning("Analysis cancelled")
            raise
        except Exception as e:
            error = self._as_studio_error(e, AnalysisError)
            self._apply(
                AnalysisFailed(error=SessionError.from_exception(error), hints=hints)
            )
            logger.warning("Analysis failed: %s", error.message)
            if error is e:
                raise
            raise error from e

        self._apply(AnalysisSucceeded(strategy=strategy))
        logger.info("Analysis complete (%s strategy)", strategy.kind)
        return strategy

    async def _run_synthesis(self, action: SessionAction, text: str) -> RevisionEntry:
        state = self._state
        strategy = state.strategy
        dimensions = self._dimensions
        is_revision = action is SessionAction.REQUEST_REVISION
        previous = state.history.current_artifact if is_revision else None
        failed_instruction = text if is_revision else None
        try:
            request = build_synthesis_request(strategy, self._assets, text, dimensions, previous)
            await self._ensure_authorized()
            logger.info(
                "Synthesizing (%s, %s, %d part(s))",
                request.mode,
                request.aspect_ratio,
                len(request.parts),
            )
            artifact = await self._synthesizer.generate(request)
        except asyncio.CancelledError:
            self._apply(
                SynthesisFailed(
                    error=SessionError.from_exception(SynthesisError("Synthesis cancelled")),
                    instruction=failed_instruction,
                )
            )
            logger.warning("Synthesis cancelled")
            raise
        except Exception as e:
            error = self._as_studio_error(e, SynthesisError)
            self._apply(
                SynthesisFailed(
                    error=SessionError.from_exception(error),
                    instruction=failed_instruction,
                ),
            )
            logger.warning("Synthesis failed: %s", error.message)
            if error is e:
                raise
            raise error from e

        entry = RevisionEntry(
            artifact=artifact,
            dimensions=dimensions,
            strategy=strategy,
            sequence=self._state.history.next_sequence,
            instruction=text,
        )
        self._apply(SynthesisSucceeded(entry=entry))
        logger.info(
            "Revision %d recorded (history length %d)",
            entry.sequence,
            len(self._state.history),
        )
        return entry

    def _as_studio_error(
        self, error: Exception, default: type[StudioError]
    ) -> StudioError:
        if isinstance(error, AuthorizationError):
            self._authorized = False
            self._needs_reauthorization = True
            return error
        if isinstance(error, StudioError):
            return error
        return default(f"{type(error).__name__}: {error}")

    async def _ensure_authorized(self) -> None:
        if self._authorizer is None:
            return
        if self._authorized and not self._needs_reauthorization:
            return

        if self._needs_reauthorization:
            logger.info("Re-running authorization before retrying")
            ok = await self._authorizer.authorize()
        else:
            ok = await self._authorizer.is_authorized() or await self._authorizer.authorize()

        self._authorized = ok
        if not ok:
            msg = "Not authorized to call the model services"
            raise AuthorizationError(msg)
        self._needs_reauthorization = False
