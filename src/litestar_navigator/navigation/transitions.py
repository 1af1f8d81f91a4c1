"""State transitions.

Every function here takes a workflow descriptor and a state snapshot and
returns a :class:`TransitionResult`. Functions never mutate their input and
never raise for business conditions: a failure echoes the original state back
unchanged together with a :class:`~litestar_navigator.navigation.types.NavigationError`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from litestar_navigator.core.state import CheckpointResponse, LoopState, checkpoint_response_key, utcnow
from litestar_navigator.core.types import NavigationErrorCode
from litestar_navigator.navigation.compute import (
    get_current_activity,
    get_default_transition,
    is_activity_complete,
    is_checkpoint_blocking,
)
from litestar_navigator.navigation.types import NavigationError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from litestar_navigator.core.definition import Activity, Workflow
    from litestar_navigator.core.state import WorkflowState

__all__ = [
    "TransitionResult",
    "advance_loop",
    "complete_step",
    "respond_to_checkpoint",
    "transition_to_activity",
    "try_default_transition",
]


@dataclass(frozen=True)
class TransitionResult:
    """Outcome of a transition.

    Attributes:
        success: Whether the transition was applied.
        state: The new state on success, the untouched input state on failure.
        error: The failure, when ``success`` is false.
    """

    success: bool
    state: WorkflowState
    error: NavigationError | None = None

    @classmethod
    def ok(cls, state: WorkflowState) -> TransitionResult:
        return cls(success=True, state=state)

    @classmethod
    def fail(cls, state: WorkflowState, code: NavigationErrorCode, message: str) -> TransitionResult:
        return cls(success=False, state=state, error=NavigationError(code=code, message=message))


def complete_step(workflow: Workflow, state: WorkflowState, step_id: str) -> TransitionResult:
    """Mark a step of the current activity as completed.

    On success the step's 1-based index is appended to the activity's
    completed steps and ``current_step`` moves to the lowest index not yet
    completed, or to ``None`` when every step is done.

    Args:
        workflow: The workflow descriptor.
        state: The state snapshot.
        step_id: Id of the step to complete.

    Returns:
        The TransitionResult. Failure codes: ``ACTIVITY_NOT_FOUND``,
        ``CHECKPOINT_BLOCKING``, ``STEP_NOT_FOUND``, ``STEP_ALREADY_COMPLETE``.
    """
    activity = get_current_activity(workflow, state)
    if activity is None:
        return _activity_not_found(state)

    if is_checkpoint_blocking(workflow, state):
        return TransitionResult.fail(
            state,
            NavigationErrorCode.CHECKPOINT_BLOCKING,
            "Must respond to checkpoint before completing steps",
        )

    step_number = activity.step_index(step_id)
    if step_number is None:
        return TransitionResult.fail(
            state,
            NavigationErrorCode.STEP_NOT_FOUND,
            f"Step '{step_id}' not found in activity '{activity.id}'",
        )

    completed = state.completed_in(activity.id)
    if step_number in completed:
        return TransitionResult.fail(
            state,
            NavigationErrorCode.STEP_ALREADY_COMPLETE,
            f"Step '{step_id}' is already completed",
        )

    now_completed = [*completed, step_number]
    return TransitionResult.ok(
        state.replace(
            completed_steps={**state.completed_steps, activity.id: now_completed},
            current_step=_next_incomplete_step(activity, now_completed),
        )
    )


def respond_to_checkpoint(
    workflow: Workflow,
    state: WorkflowState,
    checkpoint_id: str,
    option_id: str,
) -> TransitionResult:
    """Record the option chosen for a checkpoint of the current activity.

    Only the raw choice is recorded. The option's declared effect is left to
    the caller to apply.

    Args:
        workflow: The workflow descriptor.
        state: The state snapshot.
        checkpoint_id: Id of the checkpoint being answered.
        option_id: Id of the chosen option.

    Returns:
        The TransitionResult. Failure codes: ``ACTIVITY_NOT_FOUND``,
        ``CHECKPOINT_NOT_FOUND``, ``OPTION_NOT_FOUND``, ``CHECKPOINT_ALREADY_RESPONDED``.
    """
    activity = get_current_activity(workflow, state)
    if activity is None:
        return _activity_not_found(state)

    checkpoint = activity.get_checkpoint(checkpoint_id)
    if checkpoint is None:
        return TransitionResult.fail(
            state,
            NavigationErrorCode.CHECKPOINT_NOT_FOUND,
            f"Checkpoint '{checkpoint_id}' not found in activity '{activity.id}'",
        )

    if checkpoint.get_option(option_id) is None:
        return TransitionResult.fail(
            state,
            NavigationErrorCode.OPTION_NOT_FOUND,
            f"Option '{option_id}' not found in checkpoint '{checkpoint_id}'",
        )

    key = checkpoint_response_key(activity.id, checkpoint_id)
    if key in state.checkpoint_responses:
        return TransitionResult.fail(
            state,
            NavigationErrorCode.CHECKPOINT_ALREADY_RESPONDED,
            f"Checkpoint '{checkpoint_id}' already has a response",
        )

    response = CheckpointResponse(option_id=option_id, responded_at=utcnow())
    return TransitionResult.ok(
        state.replace(checkpoint_responses={**state.checkpoint_responses, key: response})
    )


def transition_to_activity(workflow: Workflow, state: WorkflowState, target_activity_id: str) -> TransitionResult:
    """Move to another activity along a declared transition.

    The new activity starts at step 1. Completed steps and checkpoint
    responses of earlier activities are kept as the run's audit trail.

    Args:
        workflow: The workflow descriptor.
        state: The state snapshot.
        target_activity_id: Id of the activity to move to.

    Returns:
        The TransitionResult. Failure codes: ``ACTIVITY_NOT_FOUND``,
        ``ACTIVITY_NOT_COMPLETE``, ``TARGET_ACTIVITY_NOT_FOUND``, ``INVALID_TRANSITION``.
    """
    current = get_current_activity(workflow, state)
    if current is None:
        return TransitionResult.fail(
            state,
            NavigationErrorCode.ACTIVITY_NOT_FOUND,
            f"Current activity '{state.current_activity}' not found",
        )

    if not is_activity_complete(workflow, state):
        return TransitionResult.fail(
            state,
            NavigationErrorCode.ACTIVITY_NOT_COMPLETE,
            "Current activity must be completed before transitioning",
        )

    if workflow.get_activity(target_activity_id) is None:
        return TransitionResult.fail(
            state,
            NavigationErrorCode.TARGET_ACTIVITY_NOT_FOUND,
            f"Target activity '{target_activity_id}' not found in workflow",
        )

    if not any(transition.to == target_activity_id for transition in current.transitions):
        return TransitionResult.fail(
            state,
            NavigationErrorCode.INVALID_TRANSITION,
            f"Transition from '{current.id}' to '{target_activity_id}' is not allowed",
        )

    return TransitionResult.ok(state.replace(current_activity=target_activity_id, current_step=1))


def advance_loop(
    workflow: Workflow,
    state: WorkflowState,
    loop_id: str,
    items: Sequence[Any] | None = None,
) -> TransitionResult:
    """Start a loop of the current activity or move it to its next item.

    Starting a loop needs a non-empty ``items`` sequence. The state keeps only
    the current item and the item count, so callers must resupply the same
    ``items`` on every advance. A loop whose next iteration reaches its item
    count is removed from ``active_loops``.

    Args:
        workflow: The workflow descriptor.
        state: The state snapshot.
        loop_id: Id of the loop.
        items: The items iterated over.

    Returns:
        The TransitionResult. Failure codes: ``ACTIVITY_NOT_FOUND``,
        ``LOOP_ITEMS_REQUIRED``.
    """
    activity = get_current_activity(workflow, state)
    if activity is None:
        return _activity_not_found(state)

    position = next(
        (
            index
            for index, loop in enumerate(state.active_loops)
            if loop.activity_id == activity.id and loop.loop_id == loop_id
        ),
        None,
    )

    if position is None:
        if not items:
            return TransitionResult.fail(
                state,
                NavigationErrorCode.LOOP_ITEMS_REQUIRED,
                "Items array required to start a new loop",
            )
        started = LoopState(
            activity_id=activity.id,
            loop_id=loop_id,
            current_iteration=0,
            total_items=len(items),
            current_item=items[0],
            started_at=utcnow(),
        )
        return TransitionResult.ok(state.replace(active_loops=[*state.active_loops, started], current_step=1))

    existing = state.active_loops[position]
    next_iteration = existing.current_iteration + 1

    if next_iteration >= (existing.total_items or 0):
        remaining = [loop for index, loop in enumerate(state.active_loops) if index != position]
        return TransitionResult.ok(state.replace(active_loops=remaining))

    advanced = existing.model_copy(
        update={
            "current_iteration": next_iteration,
            "current_item": items[next_iteration] if items and next_iteration < len(items) else None,
        }
    )
    loops = list(state.active_loops)
    loops[position] = advanced
    return TransitionResult.ok(state.replace(active_loops=loops, current_step=1))


def try_default_transition(workflow: Workflow, state: WorkflowState) -> TransitionResult:
    """Follow the default transition once the current activity is complete.

    Returns:
        The TransitionResult. Failure codes: ``ACTIVITY_NOT_COMPLETE``,
        ``NO_DEFAULT_TRANSITION``, plus those of :func:`transition_to_activity`.
    """
    if not is_activity_complete(workflow, state):
        return TransitionResult.fail(state, NavigationErrorCode.ACTIVITY_NOT_COMPLETE, "Activity not yet complete")

    target = get_default_transition(workflow, state)
    if target is None:
        return TransitionResult.fail(
            state,
            NavigationErrorCode.NO_DEFAULT_TRANSITION,
            "No default transition defined for current activity",
        )

    return transition_to_activity(workflow, state, target)


def _next_incomplete_step(activity: Activity, completed: list[int]) -> int | None:
    return next((index for index in range(1, len(activity.steps) + 1) if index not in completed), None)


def _activity_not_found(state: WorkflowState) -> TransitionResult:
    return TransitionResult.fail(
        state,
        NavigationErrorCode.ACTIVITY_NOT_FOUND,
        f"Activity '{state.current_activity}' not found in workflow",
    )
