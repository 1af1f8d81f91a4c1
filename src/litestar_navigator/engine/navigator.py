"""Navigation service.

The navigator is the stateful-looking facade over the stateless core: every
call takes a state token, decodes it, applies at most one transition, records
what happened in the history and returns a fresh token inside a
:class:`~litestar_navigator.navigation.types.NavigationResponse`.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from litestar_navigator.core.state import add_history_event, create_initial_state, utcnow
from litestar_navigator.core.types import ActionType, HistoryEventType, Variables, WorkflowStatus
from litestar_navigator.engine.audit import audited
from litestar_navigator.exceptions import InvalidActionError, WorkflowNotFoundError
from litestar_navigator.navigation.codec import decode_state, encode_state
from litestar_navigator.navigation.compute import (
    compute_available_actions,
    compute_position,
    generate_situation_message,
    get_active_checkpoint,
    is_workflow_complete,
)
from litestar_navigator.navigation.transitions import (
    TransitionResult,
    advance_loop,
    complete_step,
    respond_to_checkpoint,
    transition_to_activity,
    try_default_transition,
)
from litestar_navigator.navigation.types import ActiveCheckpoint, CheckpointStatus, NavigationResponse

if TYPE_CHECKING:
    from collections.abc import Sequence

    from litestar_navigator.core.definition import Workflow
    from litestar_navigator.core.state import WorkflowState
    from litestar_navigator.engine.registry import WorkflowRegistry
    from litestar_navigator.navigation.types import NavigationError

__all__ = ["WorkflowNavigator"]

logger = logging.getLogger(__name__)


class WorkflowNavigator:
    """Drive workflow runs through state tokens.

    The navigator holds no run state of its own. Everything it needs to
    continue a run travels in the token.

    Example:
        >>> navigator = WorkflowNavigator(registry)
        >>> response = navigator.start("code-review")
        >>> response = navigator.act(response.state, "complete_step", step_id="read-diff")
    """

    def __init__(self, registry: WorkflowRegistry) -> None:
        """Initialize the navigator.

        Args:
            registry: Registry used to resolve workflow descriptors.
        """
        self.registry = registry

    def resolve_workflow(self, workflow_id: str, version: str | None = None) -> Workflow:
        """Return the descriptor of a run.

        The exact version is preferred; when it is no longer registered the
        latest registered version is used.

        Raises:
            WorkflowNotFoundError: If no version of the workflow is registered.
        """
        if version is not None and self.registry.has_workflow(workflow_id, version):
            return self.registry.get_definition(workflow_id, version)
        try:
            workflow = self.registry.get_definition(workflow_id)
        except KeyError as e:
            raise WorkflowNotFoundError(workflow_id) from e
        if version is not None:
            logger.warning(
                "Workflow version not registered, using latest",
                extra={"workflow_id": workflow_id, "requested": version, "resolved": workflow.version},
            )
        return workflow

    @audited("nav_start")
    def start(self, workflow_id: str, initial_variables: Variables | None = None) -> NavigationResponse:
        """Start a new run at the workflow's initial activity.

        Args:
            workflow_id: Id of the workflow to run.
            initial_variables: Optional initial variable bag.

        Returns:
            The NavigationResponse for the fresh state.

        Raises:
            WorkflowNotFoundError: If the workflow is not registered.
        """
        workflow = self.resolve_workflow(workflow_id)
        state = create_initial_state(workflow.id, workflow.version, workflow.initial_activity, initial_variables)
        state = self._finish_if_complete(workflow, state)
        return self._respond(workflow, state, f"Started workflow: {workflow.title}")

    @audited("nav_situation")
    def situation(self, token: str) -> NavigationResponse:
        """Describe where a run is and what can be done next.

        Raises:
            StateCodecError: If the token cannot be decoded.
            WorkflowNotFoundError: If the run's workflow is not registered.
        """
        state = decode_state(token)
        workflow = self.resolve_workflow(state.workflow_id, state.workflow_version)
        return self._respond(workflow, state, generate_situation_message(workflow, state), token=token)

    @audited("nav_action")
    def act(
        self,
        token: str,
        action: ActionType | str,
        *,
        step_id: str | None = None,
        checkpoint_id: str | None = None,
        option_id: str | None = None,
        activity_id: str | None = None,
        loop_id: str | None = None,
        loop_items: Sequence[Any] | None = None,
    ) -> NavigationResponse:
        """Apply one action to a run.

        A rejected action yields ``success=False`` with the error and the
        token that was passed in, so the caller can simply retry from it.

        Args:
            token: The current state token.
            action: One of ``complete_step``, ``respond_to_checkpoint``,
                ``transition``, ``advance_loop`` or ``default_transition``.
            step_id: Step to complete.
            checkpoint_id: Checkpoint to respond to.
            option_id: Chosen checkpoint option.
            activity_id: Target activity of a transition.
            loop_id: Loop to start or advance.
            loop_items: Items of the loop; required when starting it.

        Returns:
            The NavigationResponse.

        Raises:
            StateCodecError: If the token cannot be decoded.
            WorkflowNotFoundError: If the run's workflow is not registered.
            InvalidActionError: If the action is unknown, lacks a parameter, or the
                run has already completed or been aborted.
        """
        action_type = _parse_action(action)
        state = decode_state(token)
        if state.is_terminal:
            raise InvalidActionError(action_type, f"workflow run is already {state.status}")
        workflow = self.resolve_workflow(state.workflow_id, state.workflow_version)
        activity_before = state.current_activity

        if action_type is ActionType.COMPLETE_STEP:
            _require(action_type, step_id=step_id)
            result = complete_step(workflow, state, step_id)
            activity = workflow.get_activity(activity_before)
            step_number = activity.step_index(step_id) if activity else None
            events = [
                (
                    HistoryEventType.STEP_COMPLETED,
                    {"activity": activity_before, "step": step_number, "data": {"stepId": step_id}},
                )
            ]
            summary = f"Completed step '{step_id}'"

        elif action_type is ActionType.RESPOND_TO_CHECKPOINT:
            _require(action_type, checkpoint_id=checkpoint_id, option_id=option_id)
            result = respond_to_checkpoint(workflow, state, checkpoint_id, option_id)
            events = [
                (
                    HistoryEventType.CHECKPOINT_RESPONSE,
                    {"activity": activity_before, "checkpoint": checkpoint_id, "data": {"optionId": option_id}},
                )
            ]
            summary = f"Responded to checkpoint '{checkpoint_id}' with '{option_id}'"

        elif action_type in {ActionType.TRANSITION, ActionType.DEFAULT_TRANSITION}:
            if action_type is ActionType.TRANSITION:
                _require(action_type, activity_id=activity_id)
                result = transition_to_activity(workflow, state, activity_id)
            else:
                result = try_default_transition(workflow, state)
            target = result.state.current_activity
            events = [
                (HistoryEventType.ACTIVITY_EXITED, {"activity": activity_before}),
                (HistoryEventType.ACTIVITY_ENTERED, {"activity": target}),
            ]
            summary = f"Moved from '{activity_before}' to '{target}'"

        elif action_type is ActionType.ADVANCE_LOOP:
            _require(action_type, loop_id=loop_id)
            result = advance_loop(workflow, state, loop_id, loop_items)
            event, summary = _loop_event(state, result.state, activity_before, loop_id)
            events = [event]

        else:
            raise InvalidActionError(action_type, "not a state-changing action")

        if not result.success:
            return self._reject(workflow, state, token, result)

        new_state = result.state
        for event_type, details in events:
            new_state = add_history_event(new_state, event_type, **details)
        new_state = self._finish_if_complete(workflow, new_state)
        return self._respond(workflow, new_state, f"{summary}. {generate_situation_message(workflow, new_state)}")

    @audited("nav_checkpoint")
    def checkpoint(self, token: str) -> CheckpointStatus:
        """Report the checkpoint currently requiring a response, if any.

        Raises:
            StateCodecError: If the token cannot be decoded.
            WorkflowNotFoundError: If the run's workflow is not registered.
        """
        state = decode_state(token)
        workflow = self.resolve_workflow(state.workflow_id, state.workflow_version)
        checkpoint = get_active_checkpoint(workflow, state)
        if checkpoint is None:
            return CheckpointStatus(active=False, message="No active checkpoint")
        return CheckpointStatus(
            active=True,
            message=checkpoint.message,
            checkpoint=ActiveCheckpoint.from_checkpoint(checkpoint),
        )

    def _finish_if_complete(self, workflow: Workflow, state: WorkflowState) -> WorkflowState:
        if state.is_terminal or not is_workflow_complete(workflow, state):
            return state
        logger.info("Workflow run completed", extra={"workflow_id": workflow.id, "activity": state.current_activity})
        completed = state.replace(status=WorkflowStatus.COMPLETED, completed_at=utcnow(), current_step=None)
        return add_history_event(completed, HistoryEventType.WORKFLOW_COMPLETED, activity=state.current_activity)

    def _respond(
        self,
        workflow: Workflow,
        state: WorkflowState,
        message: str,
        *,
        token: str | None = None,
        error: NavigationError | None = None,
    ) -> NavigationResponse:
        checkpoint = get_active_checkpoint(workflow, state)
        return NavigationResponse(
            success=error is None,
            position=compute_position(workflow, state),
            message=message,
            available_actions=compute_available_actions(workflow, state),
            state=token if token is not None else encode_state(state),
            checkpoint=ActiveCheckpoint.from_checkpoint(checkpoint) if checkpoint else None,
            complete=state.status is WorkflowStatus.COMPLETED or is_workflow_complete(workflow, state),
            error=error,
        )

    def _reject(
        self, workflow: Workflow, state: WorkflowState, token: str, result: TransitionResult
    ) -> NavigationResponse:
        logger.info(
            "Navigation action rejected",
            extra={"workflow_id": workflow.id, "code": str(result.error.code), "reason": result.error.message},
        )
        return self._respond(workflow, state, result.error.message, token=token, error=result.error)


def _parse_action(action: ActionType | str) -> ActionType:
    try:
        return ActionType(action)
    except ValueError:
        raise InvalidActionError(str(action), "unknown action") from None


def _require(action: ActionType, **params: Any) -> None:
    missing = [name for name, value in params.items() if value is None]
    if missing:
        raise InvalidActionError(action, f"missing required parameter(s): {', '.join(missing)}")


def _loop_event(
    before: WorkflowState, after: WorkflowState, activity_id: str, loop_id: str
) -> tuple[tuple[HistoryEventType, dict[str, Any]], str]:
    previous = before.find_loop(activity_id, loop_id)
    current = after.find_loop(activity_id, loop_id)
    details: dict[str, Any] = {"activity": activity_id, "loop": loop_id}

    if previous is None:
        total = current.total_items if current else None
        return (HistoryEventType.LOOP_STARTED, {**details, "data": {"totalItems": total}}), f"Started loop '{loop_id}'"
    if current is None:
        return (HistoryEventType.LOOP_COMPLETED, details), f"Completed loop '{loop_id}'"
    return (
        (HistoryEventType.LOOP_ITERATION, {**details, "data": {"iteration": current.current_iteration + 1}}),
        f"Advanced loop '{loop_id}' to iteration {current.current_iteration + 1}",
    )
