"""Workflow state snapshot.

The :class:`WorkflowState` is the whole of a caller's progress through a
workflow. It is never stored server-side: it travels inside the opaque state
token and every transition produces a new, independent copy.
"""

from __future__ import annotations

import copy
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, PositiveInt
from pydantic.alias_generators import to_camel

from litestar_navigator.core.types import HistoryEventType, Variables, WorkflowStatus

__all__ = [
    "CheckpointResponse",
    "DecisionOutcome",
    "HistoryEntry",
    "LastError",
    "LoopState",
    "WorkflowState",
    "add_history_event",
    "checkpoint_response_key",
    "create_initial_state",
    "utcnow",
]


def utcnow() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def checkpoint_response_key(activity_id: str, checkpoint_id: str) -> str:
    """Build the ``checkpoint_responses`` key for a checkpoint of an activity."""
    return f"{activity_id}-{checkpoint_id}"


class _StateModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class HistoryError(_StateModel):
    message: str
    code: str | None = None


class HistoryEntry(_StateModel):
    """One append-only entry of the state history."""

    timestamp: datetime
    type: HistoryEventType
    activity: str | None = None
    step: PositiveInt | None = None
    checkpoint: str | None = None
    decision: str | None = None
    loop: str | None = None
    data: dict[str, Any] | None = None
    error: HistoryError | None = None


class CheckpointResponse(_StateModel):
    """The option chosen for a checkpoint and when."""

    option_id: str
    responded_at: datetime


class DecisionOutcome(_StateModel):
    """The branch taken at a decision. Recorded only."""

    branch_id: str
    decided_at: datetime
    transitioned_to: str | None = None


class LoopState(_StateModel):
    """Runtime progress of one active loop.

    Attributes:
        activity_id: Activity declaring the loop.
        loop_id: The loop's id within the activity.
        current_iteration: 0-based iteration counter.
        total_items: Number of items supplied when the loop was started.
        current_item: The item of the current iteration.
        started_at: When the loop was started.
    """

    activity_id: str
    loop_id: str
    current_iteration: NonNegativeInt = 0
    total_items: NonNegativeInt | None = None
    current_item: Any = None
    started_at: datetime


class LastError(_StateModel):
    message: str
    code: str | None = None
    activity: str | None = None
    step: PositiveInt | None = None
    timestamp: datetime


class WorkflowState(_StateModel):
    """Snapshot of a caller's progress through a workflow.

    Attributes:
        workflow_id: Id of the navigated workflow.
        workflow_version: Version of the navigated workflow.
        state_version: Counter bumped every time a history event is recorded.
        started_at: When the run was started.
        updated_at: When the last history event was recorded.
        completed_at: When the run reached ``completed``, if it has.
        current_activity: Id of the activity the caller is in.
        current_step: 1-based index of the next step, absent when all are done.
        completed_steps: Activity id to completed 1-based step indices.
        checkpoint_responses: ``"{activity}-{checkpoint}"`` to the recorded response.
        decision_outcomes: Recorded decision outcomes, never evaluated here.
        active_loops: Loops in progress, most recently started last.
        variables: Free-form variable bag.
        history: Append-only event log.
        status: Overall run status.
        last_error: The last error recorded against the run, if any.
    """

    workflow_id: str
    workflow_version: str
    state_version: PositiveInt = 1
    started_at: datetime
    updated_at: datetime
    completed_at: datetime | None = None
    current_activity: str
    current_step: PositiveInt | None = None
    completed_steps: dict[str, list[PositiveInt]] = Field(default_factory=dict)
    checkpoint_responses: dict[str, CheckpointResponse] = Field(default_factory=dict)
    decision_outcomes: dict[str, DecisionOutcome] = Field(default_factory=dict)
    active_loops: list[LoopState] = Field(default_factory=list)
    variables: Variables = Field(default_factory=dict)
    history: list[HistoryEntry] = Field(default_factory=list)
    status: WorkflowStatus = WorkflowStatus.RUNNING
    last_error: LastError | None = None

    def replace(self, **changes: Any) -> WorkflowState:
        """Return a structurally independent copy with ``changes`` applied."""
        return self.model_copy(deep=True, update=copy.deepcopy(changes))

    def completed_in(self, activity_id: str) -> list[int]:
        """Return the completed step indices recorded for an activity."""
        return self.completed_steps.get(activity_id, [])

    def find_loop(self, activity_id: str, loop_id: str | None = None) -> LoopState | None:
        """Return the active loop of an activity, optionally matching a loop id."""
        for loop in self.active_loops:
            if loop.activity_id == activity_id and (loop_id is None or loop.loop_id == loop_id):
                return loop
        return None

    @property
    def is_terminal(self) -> bool:
        """Whether the run has reached ``completed`` or ``aborted``."""
        return self.status in {WorkflowStatus.COMPLETED, WorkflowStatus.ABORTED}


def create_initial_state(
    workflow_id: str,
    workflow_version: str,
    initial_activity: str,
    initial_variables: Variables | None = None,
) -> WorkflowState:
    """Create the fresh state of a new run.

    The run starts ``running`` at the first step of ``initial_activity`` with a
    single ``workflow_started`` history entry.

    Args:
        workflow_id: Id of the workflow to navigate.
        workflow_version: Version of that workflow.
        initial_activity: Id of the activity to start in.
        initial_variables: Optional initial variable bag.

    Returns:
        The new WorkflowState.
    """
    now = utcnow()
    return WorkflowState(
        workflow_id=workflow_id,
        workflow_version=workflow_version,
        started_at=now,
        updated_at=now,
        current_activity=initial_activity,
        current_step=1,
        variables=dict(initial_variables or {}),
        history=[
            HistoryEntry(
                timestamp=now,
                type=HistoryEventType.WORKFLOW_STARTED,
                activity=initial_activity,
                data={"initialVariables": initial_variables} if initial_variables else None,
            )
        ],
    )


def add_history_event(state: WorkflowState, event_type: HistoryEventType, **details: Any) -> WorkflowState:
    """Append a history entry, returning a new state.

    Args:
        state: The state to extend. It is not modified.
        event_type: Kind of event.
        **details: Optional HistoryEntry fields (``activity``, ``step``, ``checkpoint``,
            ``decision``, ``loop``, ``data``, ``error``).

    Returns:
        A copy of ``state`` with the entry appended, ``state_version`` bumped and
        ``updated_at`` refreshed.
    """
    now = utcnow()
    entry = HistoryEntry(timestamp=now, type=event_type, **details)
    return state.replace(
        state_version=state.state_version + 1,
        updated_at=now,
        history=[*state.history, entry],
    )
