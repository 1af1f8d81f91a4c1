"""Position and affordance calculation.

Pure functions deriving the caller's position and the actions currently open
to it from a workflow descriptor and a state snapshot. Nothing here mutates
its inputs.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from litestar_navigator.core.state import checkpoint_response_key
from litestar_navigator.core.types import ActionType
from litestar_navigator.navigation.types import (
    Action,
    AvailableActions,
    BlockedAction,
    Position,
    PositionActivity,
    PositionLoop,
    PositionStep,
)

if TYPE_CHECKING:
    from litestar_navigator.core.definition import Activity, Checkpoint, Step, Workflow
    from litestar_navigator.core.state import WorkflowState

__all__ = [
    "compute_available_actions",
    "compute_position",
    "generate_situation_message",
    "get_active_checkpoint",
    "get_current_activity",
    "get_current_step",
    "get_default_transition",
    "get_remaining_steps",
    "is_activity_complete",
    "is_checkpoint_blocking",
    "is_workflow_complete",
]


def get_current_activity(workflow: Workflow, state: WorkflowState) -> Activity | None:
    """Return the definition of the activity the state points at."""
    return workflow.get_activity(state.current_activity)


def get_current_step(workflow: Workflow, state: WorkflowState) -> Step | None:
    """Return the definition of the pending step, if there is one."""
    activity = get_current_activity(workflow, state)
    if activity is None or state.current_step is None:
        return None
    return activity.get_step(state.current_step)


def get_remaining_steps(workflow: Workflow, state: WorkflowState) -> list[Step]:
    """Return the steps of the current activity that are not completed yet."""
    activity = get_current_activity(workflow, state)
    if activity is None:
        return []
    completed = state.completed_in(activity.id)
    return [step for index, step in enumerate(activity.steps, start=1) if index not in completed]


def compute_position(workflow: Workflow, state: WorkflowState) -> Position:
    """Compute the current position within a workflow.

    The loop shown is the last entry of ``active_loops``, whichever activity it
    belongs to.

    Args:
        workflow: The workflow descriptor.
        state: The state snapshot.

    Returns:
        The Position of the caller.
    """
    activity = get_current_activity(workflow, state)
    position = Position(
        workflow=workflow.id,
        activity=PositionActivity(
            id=state.current_activity,
            name=activity.name if activity else state.current_activity,
        ),
    )

    if state.current_step is not None and activity is not None:
        step = activity.get_step(state.current_step)
        if step is not None:
            position.step = PositionStep(id=step.id, index=state.current_step, name=step.name)

    if state.active_loops:
        active_loop = state.active_loops[-1]
        loop_activity = workflow.get_activity(active_loop.activity_id)
        loop_def = loop_activity.get_loop(active_loop.loop_id) if loop_activity else None
        position.loop = PositionLoop(
            id=active_loop.loop_id,
            name=(loop_def.name if loop_def else None) or active_loop.loop_id,
            iteration=active_loop.current_iteration + 1,
            total=active_loop.total_items,
            item=_render_item(active_loop.current_item),
        )

    return position


def get_active_checkpoint(workflow: Workflow, state: WorkflowState) -> Checkpoint | None:
    """Return the checkpoint currently blocking progress, if any.

    Checkpoints are scanned in declared order; the first one that is required,
    blocking and unanswered wins.
    """
    activity = get_current_activity(workflow, state)
    if activity is None:
        return None

    for checkpoint in activity.checkpoints:
        if not (checkpoint.required and checkpoint.blocking):
            continue
        if checkpoint_response_key(activity.id, checkpoint.id) not in state.checkpoint_responses:
            return checkpoint
    return None


def is_checkpoint_blocking(workflow: Workflow, state: WorkflowState) -> bool:
    return get_active_checkpoint(workflow, state) is not None


def compute_available_actions(workflow: Workflow, state: WorkflowState) -> AvailableActions:
    """Compute the actions open to the caller.

    The branches are evaluated in strict priority order and each one
    short-circuits the rest:

    1. An active checkpoint makes responding required and blocks step completion.
    2. A loop running in the current activity requires completing its body step.
    3. Otherwise the pending step of the activity is required.

    Unless a checkpoint blocks, ``get_resource`` is always offered as optional.

    Args:
        workflow: The workflow descriptor.
        state: The state snapshot.

    Returns:
        The AvailableActions.
    """
    actions = AvailableActions()

    activity = get_current_activity(workflow, state)
    if activity is None:
        return actions

    checkpoint = get_active_checkpoint(workflow, state)
    if checkpoint is not None:
        actions.required.append(
            Action(
                action=ActionType.RESPOND_TO_CHECKPOINT,
                checkpoint=checkpoint.id,
                description=f"Respond to checkpoint: {checkpoint.message}",
            )
        )
        actions.blocked.append(
            BlockedAction(
                action=ActionType.COMPLETE_STEP,
                reason=f"Checkpoint '{checkpoint.id}' requires response before proceeding",
            )
        )
        return actions

    active_loop = state.find_loop(activity.id)
    if active_loop is not None:
        loop_def = activity.get_loop(active_loop.loop_id)
        if loop_def is not None and loop_def.steps:
            loop_step_index = state.current_step or 1
            if loop_step_index <= len(loop_def.steps):
                actions.required.append(_complete_step_action(loop_def.steps[loop_step_index - 1]))
        return actions

    if state.current_step is not None:
        step = activity.get_step(state.current_step)
        if step is not None:
            actions.required.append(_complete_step_action(step))

    actions.optional.append(
        Action(action=ActionType.GET_RESOURCE, description="Get guidance resource for current activity")
    )
    return actions


def is_activity_complete(workflow: Workflow, state: WorkflowState) -> bool:
    """Check whether the current activity can be left.

    An activity is complete when every required step index is recorded as
    completed, no checkpoint blocks, and no loop of the activity is running.
    """
    activity = get_current_activity(workflow, state)
    if activity is None:
        return False

    completed = state.completed_in(activity.id)
    if any(index not in completed for index in activity.required_step_indices()):
        return False

    if is_checkpoint_blocking(workflow, state):
        return False

    return state.find_loop(activity.id) is None


def is_workflow_complete(workflow: Workflow, state: WorkflowState) -> bool:
    """Check whether the run has finished: a complete activity with nowhere to go."""
    activity = get_current_activity(workflow, state)
    if activity is None or activity.transitions:
        return False
    return is_activity_complete(workflow, state)


def get_default_transition(workflow: Workflow, state: WorkflowState) -> str | None:
    """Return the target of the default transition, else of the first one, else None."""
    activity = get_current_activity(workflow, state)
    if activity is None or not activity.transitions:
        return None

    for transition in activity.transitions:
        if transition.is_default:
            return transition.to
    return activity.transitions[0].to


def generate_situation_message(workflow: Workflow, state: WorkflowState) -> str:
    """Summarize the situation, e.g. ``"Activity: Plan | Step 2: Design"``."""
    position = compute_position(workflow, state)
    parts = [f"Activity: {position.activity.name}"]

    if position.step is not None:
        parts.append(f"Step {position.step.index}: {position.step.name}")

    if position.loop is not None:
        total = f" of {position.loop.total}" if position.loop.total else ""
        parts.append(f"Loop: {position.loop.name} (iteration {position.loop.iteration}{total})")

    checkpoint = get_active_checkpoint(workflow, state)
    if checkpoint is not None:
        parts.append(f"Checkpoint: {checkpoint.message}")

    return " | ".join(parts)


def _complete_step_action(step: Step) -> Action:
    return Action(
        action=ActionType.COMPLETE_STEP,
        step=step.id,
        description=f"Complete: {step.name}",
        effectivities=list(step.effectivities) if step.effectivities else None,
    )


def _render_item(item: Any) -> str | None:
    if item is None:
        return None
    if isinstance(item, str):
        return item
    return json.dumps(item)
