"""Tests for position and affordance calculation."""

from __future__ import annotations

import pytest

from litestar_navigator.core.definition import Activity, Step, Workflow
from litestar_navigator.core.state import CheckpointResponse, LoopState, WorkflowState, utcnow
from litestar_navigator.core.types import ActionType
from litestar_navigator.navigation.compute import (
    compute_available_actions,
    compute_position,
    generate_situation_message,
    get_active_checkpoint,
    get_current_step,
    get_default_transition,
    get_remaining_steps,
    is_activity_complete,
    is_checkpoint_blocking,
    is_workflow_complete,
)
from tests.conftest import CODE_REVIEW, make_workflow, start_state


def _loop(activity_id: str, loop_id: str, iteration: int = 0, total: int | None = 2, item: object = "a") -> LoopState:
    return LoopState(
        activity_id=activity_id,
        loop_id=loop_id,
        current_iteration=iteration,
        total_items=total,
        current_item=item,
        started_at=utcnow(),
    )


def _answered(state: WorkflowState, key: str = "review-gate", option: str = "yes") -> WorkflowState:
    return state.replace(checkpoint_responses={key: CheckpointResponse(option_id=option, responded_at=utcnow())})


@pytest.mark.unit
class TestComputePosition:
    """Tests for compute_position."""

    def test_fresh_state(self, simple_workflow: Workflow) -> None:
        """A fresh run is at step 1 of the initial activity."""
        position = compute_position(simple_workflow, start_state(simple_workflow))

        assert position.workflow == "simple-task"
        assert position.activity.id == "task"
        assert position.activity.name == "Do Task"
        assert position.step is not None
        assert (position.step.id, position.step.index, position.step.name) == ("step-1", 1, "First step")
        assert position.loop is None

    def test_no_pending_step(self, simple_workflow: Workflow) -> None:
        """No step is shown once every step is done."""
        state = start_state(simple_workflow).replace(current_step=None, completed_steps={"task": [1, 2]})

        assert compute_position(simple_workflow, state).step is None

    def test_unknown_activity_falls_back_to_id(self, simple_workflow: Workflow) -> None:
        """An activity missing from the descriptor is shown by its id."""
        state = start_state(simple_workflow).replace(current_activity="ghost")
        position = compute_position(simple_workflow, state)

        assert position.activity.id == "ghost"
        assert position.activity.name == "ghost"
        assert position.step is None

    def test_loop_display(self, batch_workflow: Workflow) -> None:
        """The running loop is shown with a 1-based iteration."""
        state = start_state(batch_workflow).replace(active_loops=[_loop("process", "loop-x", iteration=1, item="b")])
        loop = compute_position(batch_workflow, state).loop

        assert loop is not None
        assert (loop.id, loop.name, loop.iteration, loop.total, loop.item) == ("loop-x", "Each item", 2, 2, "b")

    def test_loop_display_uses_last_started_loop(self, batch_workflow: Workflow) -> None:
        """With several loops running the last one started is shown."""
        state = start_state(batch_workflow).replace(
            active_loops=[_loop("process", "loop-x"), _loop("elsewhere", "other-loop", item={"file": "a.py"})]
        )
        loop = compute_position(batch_workflow, state).loop

        assert loop.id == "other-loop"
        assert loop.name == "other-loop"
        assert loop.item == '{"file": "a.py"}'


@pytest.mark.unit
class TestActiveCheckpoint:
    """Tests for get_active_checkpoint and is_checkpoint_blocking."""

    def test_unanswered_blocking_checkpoint(self, review_workflow: Workflow) -> None:
        """An unanswered required, blocking checkpoint is active."""
        state = start_state(review_workflow)

        checkpoint = get_active_checkpoint(review_workflow, state)
        assert checkpoint is not None
        assert checkpoint.id == "gate"
        assert is_checkpoint_blocking(review_workflow, state) is True

    def test_answered_checkpoint(self, review_workflow: Workflow) -> None:
        """A recorded response clears the checkpoint."""
        state = _answered(start_state(review_workflow))

        assert get_active_checkpoint(review_workflow, state) is None
        assert is_checkpoint_blocking(review_workflow, state) is False

    @pytest.mark.parametrize("flag", ["required", "blocking"])
    def test_non_blocking_checkpoint_is_ignored(self, flag: str) -> None:
        """Optional or non-blocking checkpoints never block."""
        raw = make_workflow(CODE_REVIEW).model_dump(by_alias=True)
        raw["activities"][0]["checkpoints"][0][flag] = False
        workflow = Workflow.model_validate(raw)

        assert get_active_checkpoint(workflow, start_state(workflow)) is None


@pytest.mark.unit
class TestComputeAvailableActions:
    """Tests for compute_available_actions."""

    def test_pending_step(self, simple_workflow: Workflow) -> None:
        """The pending step is required and guidance is optional."""
        actions = compute_available_actions(simple_workflow, start_state(simple_workflow))

        assert len(actions.required) == 1
        required = actions.required[0]
        assert required.action is ActionType.COMPLETE_STEP
        assert required.step == "step-1"
        assert required.description == "Complete: First step"
        assert [a.action for a in actions.optional] == [ActionType.GET_RESOURCE]
        assert actions.optional[0].description == "Get guidance resource for current activity"
        assert actions.blocked == []

    def test_checkpoint_takes_priority(self, review_workflow: Workflow) -> None:
        """An active checkpoint must be answered and blocks step completion."""
        actions = compute_available_actions(review_workflow, start_state(review_workflow))

        assert len(actions.required) == 1
        assert actions.required[0].action is ActionType.RESPOND_TO_CHECKPOINT
        assert actions.required[0].checkpoint == "gate"
        assert actions.required[0].description == "Respond to checkpoint: Proceed with review?"
        assert actions.optional == []
        assert len(actions.blocked) == 1
        assert actions.blocked[0].action is ActionType.COMPLETE_STEP
        assert actions.blocked[0].reason == "Checkpoint 'gate' requires response before proceeding"

    def test_effectivities_are_exposed(self, review_workflow: Workflow) -> None:
        """Capability tags of a step travel with its action."""
        actions = compute_available_actions(review_workflow, _answered(start_state(review_workflow)))

        assert actions.required[0].step == "work"
        assert actions.required[0].effectivities == ["code-read"]

    def test_running_loop_requires_body_step(self, batch_workflow: Workflow) -> None:
        """Inside a loop the body step is required and nothing is optional."""
        state = start_state(batch_workflow).replace(active_loops=[_loop("process", "loop-x")])
        actions = compute_available_actions(batch_workflow, state)

        assert [(a.action, a.step) for a in actions.required] == [(ActionType.COMPLETE_STEP, "handle-item")]
        assert actions.optional == []

    def test_loop_of_other_activity_is_ignored(self, batch_workflow: Workflow) -> None:
        """Only loops of the current activity drive the actions."""
        state = start_state(batch_workflow).replace(active_loops=[_loop("elsewhere", "loop-x")])
        actions = compute_available_actions(batch_workflow, state)

        assert [a.step for a in actions.required] == ["finish"]

    def test_all_steps_done(self, simple_workflow: Workflow) -> None:
        """With no pending step only guidance remains."""
        state = start_state(simple_workflow).replace(current_step=None, completed_steps={"task": [1, 2]})
        actions = compute_available_actions(simple_workflow, state)

        assert actions.required == []
        assert [a.action for a in actions.optional] == [ActionType.GET_RESOURCE]

    def test_unknown_activity(self, simple_workflow: Workflow) -> None:
        """Nothing can be done in an activity the descriptor lacks."""
        state = start_state(simple_workflow).replace(current_activity="x")
        actions = compute_available_actions(simple_workflow, state)

        assert (actions.required, actions.optional, actions.blocked) == ([], [], [])


@pytest.mark.unit
class TestCompletion:
    """Tests for is_activity_complete, is_workflow_complete and helpers."""

    def test_activity_incomplete_until_required_steps_done(self, simple_workflow: Workflow) -> None:
        """Every required step must be completed."""
        state = start_state(simple_workflow)

        assert is_activity_complete(simple_workflow, state) is False
        assert is_activity_complete(simple_workflow, state.replace(completed_steps={"task": [1]})) is False
        assert is_activity_complete(simple_workflow, state.replace(completed_steps={"task": [1, 2]})) is True

    def test_required_steps_checked_at_their_positions(self) -> None:
        """An optional first step does not stand in for a required later one."""
        workflow = Workflow(
            id="w",
            version="1.0.0",
            title="W",
            initial_activity="a",
            activities=[
                Activity(
                    id="a",
                    name="A",
                    steps=[Step(id="optional", name="Optional", required=False), Step(id="needed", name="Needed")],
                )
            ],
        )
        state = start_state(workflow)

        assert is_activity_complete(workflow, state.replace(completed_steps={"a": [1]})) is False
        assert is_activity_complete(workflow, state.replace(completed_steps={"a": [2]})) is True

    def test_optional_steps_may_be_skipped(self, review_workflow: Workflow) -> None:
        """Optional steps are not needed to complete an activity."""
        state = start_state(review_workflow).replace(current_activity="merge", completed_steps={"merge": [1]})

        assert is_activity_complete(review_workflow, state) is True

    def test_blocking_checkpoint_prevents_completion(self, review_workflow: Workflow) -> None:
        """A pending checkpoint keeps the activity open."""
        state = start_state(review_workflow).replace(completed_steps={"review": [1]})

        assert is_activity_complete(review_workflow, state) is False
        assert is_activity_complete(review_workflow, _answered(state)) is True

    def test_running_loop_prevents_completion(self, batch_workflow: Workflow) -> None:
        """A running loop keeps the activity open."""
        state = start_state(batch_workflow).replace(completed_steps={"process": [1]})

        assert is_activity_complete(batch_workflow, state) is True
        assert is_activity_complete(batch_workflow, state.replace(active_loops=[_loop("process", "loop-x")])) is False

    def test_workflow_complete(self, simple_workflow: Workflow) -> None:
        """A run is complete in a finished activity with no way out."""
        state = start_state(simple_workflow)

        assert is_workflow_complete(simple_workflow, state) is False
        assert is_workflow_complete(simple_workflow, state.replace(completed_steps={"task": [1, 2]})) is False
        assert is_workflow_complete(simple_workflow, state.replace(current_activity="done")) is True

    def test_default_transition(self, review_workflow: Workflow, simple_workflow: Workflow) -> None:
        """The flagged transition wins, else the first, else none."""
        state = start_state(review_workflow)
        assert get_default_transition(review_workflow, state) == "merge"

        raw = review_workflow.model_dump(by_alias=True)
        raw["activities"][0]["transitions"] = [{"to": "abandon"}, {"to": "merge"}]
        unflagged = Workflow.model_validate(raw)
        assert get_default_transition(unflagged, state) == "abandon"

        at_end = start_state(simple_workflow).replace(current_activity="done")
        assert get_default_transition(simple_workflow, at_end) is None

    def test_current_and_remaining_steps(self, simple_workflow: Workflow) -> None:
        """The pending step and the unfinished steps are reported."""
        state = start_state(simple_workflow).replace(completed_steps={"task": [1]}, current_step=2)

        assert get_current_step(simple_workflow, state).id == "step-2"
        assert [step.id for step in get_remaining_steps(simple_workflow, state)] == ["step-2"]


@pytest.mark.unit
class TestSituationMessage:
    """Tests for generate_situation_message."""

    def test_activity_and_step(self, simple_workflow: Workflow) -> None:
        """Activity and pending step are named."""
        message = generate_situation_message(simple_workflow, start_state(simple_workflow))

        assert message == "Activity: Do Task | Step 1: First step"

    def test_checkpoint(self, review_workflow: Workflow) -> None:
        """A pending checkpoint is mentioned last."""
        message = generate_situation_message(review_workflow, start_state(review_workflow))

        assert message == "Activity: Review Changes | Step 1: Review the diff | Checkpoint: Proceed with review?"

    def test_loop(self, batch_workflow: Workflow) -> None:
        """A running loop is shown with its progress."""
        state = start_state(batch_workflow).replace(active_loops=[_loop("process", "loop-x")])

        assert generate_situation_message(batch_workflow, state) == (
            "Activity: Process Items | Step 1: Finish | Loop: Each item (iteration 1 of 2)"
        )

    def test_loop_without_total(self, batch_workflow: Workflow) -> None:
        """The total is omitted when unknown."""
        state = start_state(batch_workflow).replace(active_loops=[_loop("process", "loop-x", total=None)])

        assert generate_situation_message(batch_workflow, state).endswith("Loop: Each item (iteration 1)")
