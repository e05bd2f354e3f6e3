"""Session state machine for the analysis / synthesis workflow.

The session is an immutable value and ``transition`` is a pure function
``(state, event) -> state``. Guards that fail raise ValidationError and
return nothing, so the caller's state is left exactly as it was.

Transitions:
    IDLE                --StartAnalysis-->       ANALYZING
    REVIEWING_STRATEGY  --StartAnalysis-->       ANALYZING (re-analysis)
    ANALYZING           --AnalysisSucceeded-->   REVIEWING_STRATEGY
    ANALYZING           --AnalysisFailed-->      ERROR
    REVIEWING_STRATEGY  --StartSynthesis-->      GENERATING
    SUCCESS             --StartSynthesis-->      GENERATING
    SUCCESS             --StartRevision-->       GENERATING
    GENERATING          --SynthesisSucceeded-->  SUCCESS
    GENERATING          --SynthesisFailed-->     ERROR
    ERROR               --Retry-->               ANALYZING or GENERATING
    not busy            --Reset-->               IDLE
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from fv_studio.core.exceptions import StudioError, ValidationError
from fv_studio.history import RevisionHistory
from fv_studio.models import RevisionEntry, Strategy

logger = logging.getLogger(__name__)


class SessionStatus(str, Enum):
    """Workflow phase of a session."""

    IDLE = "IDLE"
    ANALYZING = "ANALYZING"
    REVIEWING_STRATEGY = "REVIEWING_STRATEGY"
    GENERATING = "GENERATING"
    SUCCESS = "SUCCESS"
    ERROR = "ERROR"


BUSY_STATUSES = frozenset({SessionStatus.ANALYZING, SessionStatus.GENERATING})


class SessionAction(str, Enum):
    """Operations that call an external collaborator."""

    ANALYZE = "analyze"
    SYNTHESIZE_INITIAL = "synthesize_initial"
    REQUEST_REVISION = "request_revision"


class SessionError(BaseModel):
    """The last failure, as surfaced to the caller."""

    model_config = ConfigDict(frozen=True)

    kind: str
    message: str
    code: str | None = None
    details: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_exception(cls, error: BaseException) -> SessionError:
        if isinstance(error, StudioError):
            return cls(
                kind=error.kind,
                message=error.message,
                code=error.error_code,
                details=dict(error.details),
            )
        return cls(kind=type(error).__name__, message=str(error))


class SessionState(BaseModel):
    """Immutable snapshot of one generation session.

    Attributes:
        status: Current workflow phase
        strategy: The single active strategy, or None before analysis
        history: Revisions produced so far
        last_error: Last failure, cleared when a new action starts
        failed_action: Action a Retry would re-attempt
        failed_instruction: Instruction of a failed revision, reused on retry
        failed_hints: Hints of a failed analysis, reused on retry
        pending_action: Action currently in flight
    """

    model_config = ConfigDict(frozen=True)

    status: SessionStatus = SessionStatus.IDLE
    strategy: Strategy | None = None
    history: RevisionHistory = Field(default_factory=RevisionHistory)
    last_error: SessionError | None = None
    failed_action: SessionAction | None = None
    failed_instruction: str | None = None
    failed_hints: str | None = None
    pending_action: SessionAction | None = None

    @property
    def is_busy(self) -> bool:
        return self.status in BUSY_STATUSES


# Events


class _Event(BaseModel):
    model_config = ConfigDict(frozen=True)


class StartAnalysis(_Event):
    kind: Literal["start_analysis"] = "start_analysis"
    reference_count: int = Field(ge=0)


class AnalysisSucceeded(_Event):
    kind: Literal["analysis_succeeded"] = "analysis_succeeded"
    strategy: Strategy


class AnalysisFailed(_Event):
    kind: Literal["analysis_failed"] = "analysis_failed"
    error: SessionError
    hints: str | None = None


class StartSynthesis(_Event):
    kind: Literal["start_synthesis"] = "start_synthesis"
    asset_count: int = Field(ge=0)


class StartRevision(_Event):
    kind: Literal["start_revision"] = "start_revision"
    instruction: str = ""


class SynthesisSucceeded(_Event):
    kind: Literal["synthesis_succeeded"] = "synthesis_succeeded"
    entry: RevisionEntry


class SynthesisFailed(_Event):
    kind: Literal["synthesis_failed"] = "synthesis_failed"
    error: SessionError
    instruction: str | None = None


class Retry(_Event):
    kind: Literal["retry"] = "retry"
    reference_count: int = Field(default=0, ge=0)
    asset_count: int = Field(default=0, ge=0)


class EditStrategy(_Event):
    kind: Literal["edit_strategy"] = "edit_strategy"
    strategy: Strategy


class SelectRevision(_Event):
    kind: Literal["select_revision"] = "select_revision"
    index: int


class Reset(_Event):
    kind: Literal["reset"] = "reset"


SessionEvent = Annotated[
    StartAnalysis
    | AnalysisSucceeded
    | AnalysisFailed
    | StartSynthesis
    | StartRevision
    | SynthesisSucceeded
    | SynthesisFailed
    | Retry
    | EditStrategy
    | SelectRevision
    | Reset,
    Field(discriminator="kind"),
]


# Guards


def _reject_if_busy(state: SessionState, operation: str) -> None:
    if state.is_busy:
        pending = state.pending_action.value if state.pending_action else "an operation"
        msg = f"Cannot {operation} while {pending} is in progress"
        raise ValidationError(msg, field="status", value=state.status.value)


def _require_status(
    state: SessionState, allowed: frozenset[SessionStatus], operation: str
) -> None:
    if state.status not in allowed:
        msg = f"Cannot {operation} from status {state.status.value}"
        raise ValidationError(msg, field="status", value=state.status.value)


def _guard_analysis(reference_count: int) -> None:
    if reference_count < 1:
        msg = "At least one reference image is required for analysis"
        raise ValidationError(msg, field="reference_assets", value=reference_count)


def _guard_synthesis(state: SessionState, asset_count: int) -> None:
    if state.strategy is None:
        msg = "A strategy is required before synthesis; run analysis first"
        raise ValidationError(msg, field="strategy")
    if asset_count < 1:
        msg = "At least one asset is required for synthesis"
        raise ValidationError(msg, field="assets", value=asset_count)


def _guard_revision(state: SessionState) -> None:
    if state.strategy is None:
        msg = "A strategy is required before requesting a revision"
        raise ValidationError(msg, field="strategy")
    if not state.history.has_valid_cursor:
        msg = "No revision is selected to refine"
        raise ValidationError(msg, field="cursor", value=state.history.cursor)


def _start(state: SessionState, action: SessionAction, status: SessionStatus) -> SessionState:
    return state.model_copy(
        update={
            "status": status,
            "pending_action": action,
            "last_error": None,
        }
    )


def _fail(
    state: SessionState,
    error: SessionError,
    instruction: str | None = None,
    hints: str | None = None,
) -> SessionState:
    return state.model_copy(
        update={
            "status": SessionStatus.ERROR,
            "last_error": error,
            "failed_action": state.pending_action,
            "failed_instruction": instruction,
            "failed_hints": hints,
            "pending_action": None,
        }
    )


def _require_pending(state: SessionState, *actions: SessionAction) -> None:
    if state.pending_action not in actions:
        msg = f"No matching operation in progress (status {state.status.value})"
        raise ValidationError(msg, field="status", value=state.status.value)


def _retry(state: SessionState, event: Retry) -> SessionState:
    action = state.failed_action
    if action is SessionAction.ANALYZE:
        _guard_analysis(event.reference_count)
        return _start(state, action, SessionStatus.ANALYZING)
    if action is SessionAction.SYNTHESIZE_INITIAL:
        _guard_synthesis(state, event.asset_count)
        return _start(state, action, SessionStatus.GENERATING)
    if action is SessionAction.REQUEST_REVISION:
        _guard_revision(state)
        return _start(state, action, SessionStatus.GENERATING)
    msg = "There is no failed operation to retry"
    raise ValidationError(msg, field="failed_action")


def transition(state: SessionState, event: SessionEvent) -> SessionState:
    """Apply ``event`` to ``state`` and return the resulting state.

    Args:
        state: Current session state (never modified).
        event: The event to apply.

    Returns:
        The new session state.

    Raises:
        ValidationError: If the event is not allowed in the current status
            or its guard is not met.

    """
    new_state = _apply(state, event)
    if new_state.status is not state.status:
        logger.debug(
            "Session %s -> %s on %s", state.status.value, new_state.status.value, event.kind
        )
    return new_state


def _apply(state: SessionState, event: SessionEvent) -> SessionState:  # noqa: PLR0911
    if isinstance(event, StartAnalysis):
        _reject_if_busy(state, "start analysis")
        _require_status(
            state,
            frozenset({SessionStatus.IDLE, SessionStatus.REVIEWING_STRATEGY}),
            "start analysis",
        )
        _guard_analysis(event.reference_count)
        return _start(state, SessionAction.ANALYZE, SessionStatus.ANALYZING)

    if isinstance(event, AnalysisSucceeded):
        _require_pending(state, SessionAction.ANALYZE)
        return state.model_copy(
            update={
                "status": SessionStatus.REVIEWING_STRATEGY,
                "strategy": event.strategy,
                "pending_action": None,
                "failed_action": None,
                "failed_instruction": None,
                "failed_hints": None,
            }
        )

    if isinstance(event, AnalysisFailed):
        _require_pending(state, SessionAction.ANALYZE)
        return _fail(state, event.error, hints=event.hints)

    if isinstance(event, StartSynthesis):
        _reject_if_busy(state, "start synthesis")
        _require_status(
            state,
            frozenset({SessionStatus.REVIEWING_STRATEGY, SessionStatus.SUCCESS}),
            "start synthesis",
        )
        _guard_synthesis(state, event.asset_count)
        return _start(state, SessionAction.SYNTHESIZE_INITIAL, SessionStatus.GENERATING)

    if isinstance(event, StartRevision):
        _reject_if_busy(state, "request a revision")
        _require_status(state, frozenset({SessionStatus.SUCCESS}), "request a revision")
        _guard_revision(state)
        return _start(state, SessionAction.REQUEST_REVISION, SessionStatus.GENERATING)

    if isinstance(event, SynthesisSucceeded):
        _require_pending(state, SessionAction.SYNTHESIZE_INITIAL, SessionAction.REQUEST_REVISION)
        return state.model_copy(
            update={
                "status": SessionStatus.SUCCESS,
                "history": state.history.append(event.entry),
                "pending_action": None,
                "failed_action": None,
                "failed_instruction": None,
                "failed_hints": None,
            }
        )

    if isinstance(event, SynthesisFailed):
        _require_pending(state, SessionAction.SYNTHESIZE_INITIAL, SessionAction.REQUEST_REVISION)
        return _fail(state, event.error, event.instruction)

    if isinstance(event, Retry):
        _reject_if_busy(state, "retry")
        _require_status(state, frozenset({SessionStatus.ERROR}), "retry")
        return _retry(state, event)

    if isinstance(event, EditStrategy):
        _reject_if_busy(state, "edit the strategy")
        if state.strategy is None:
            msg = "There is no strategy to edit; run analysis first"
            raise ValidationError(msg, field="strategy")
        return state.model_copy(update={"strategy": event.strategy})

    if isinstance(event, SelectRevision):
        return state.model_copy(update={"history": state.history.navigate(event.index)})

    if isinstance(event, Reset):
        _reject_if_busy(state, "reset")
        # Sequence numbers keep counting so exported filenames stay unique.
        return SessionState(
            history=RevisionHistory(next_sequence=state.history.next_sequence)
        )

    msg = f"Unknown event: {event!r}"
    raise ValidationError(msg, field="event")
