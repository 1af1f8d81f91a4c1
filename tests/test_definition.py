"""Tests for workflow descriptor models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from litestar_navigator.core.definition import Activity, Checkpoint, Step, Workflow
from litestar_navigator.core.types import LoopType
from tests.conftest import BATCH, CODE_REVIEW, SIMPLE_TASK, make_workflow


@pytest.mark.unit
class TestWorkflowParsing:
    """Tests for parsing definitions."""

    def test_parse_camel_case_definition(self, review_workflow: Workflow) -> None:
        """Definitions use camelCase keys."""
        assert review_workflow.id == "code-review"
        assert review_workflow.initial_activity == "review"
        assert review_workflow.activities[0].transitions[0].is_default is True
        option = review_workflow.activities[0].checkpoints[0].options[1]
        assert option.effect is not None
        assert option.effect.transition_to == "abandon"

    def test_populate_by_field_name(self) -> None:
        """Snake-case field names are accepted too."""
        workflow = Workflow(
            id="w",
            version="1.0.0",
            title="W",
            initial_activity="a",
            activities=[Activity(id="a", name="A")],
        )

        assert workflow.initial_activity == "a"

    def test_defaults(self, simple_workflow: Workflow) -> None:
        """Steps are required, checkpoints blocking, loops forEach by default."""
        step = simple_workflow.activities[0].steps[0]
        assert step.required is True
        assert step.effectivities is None

        checkpoint = Checkpoint(id="c", message="?", options=[{"id": "ok", "label": "OK"}])
        assert checkpoint.required is True
        assert checkpoint.blocking is True

        batch = make_workflow(BATCH)
        assert batch.activities[0].loops[0].type is LoopType.FOR_EACH

    def test_descriptor_is_frozen(self, simple_workflow: Workflow) -> None:
        """Descriptors cannot be modified after parsing."""
        with pytest.raises(ValidationError):
            simple_workflow.title = "Changed"

    @pytest.mark.parametrize("version", ["1.0", "v1.0.0", "latest"])
    def test_version_must_be_semantic(self, version: str) -> None:
        """Versions follow MAJOR.MINOR.PATCH."""
        with pytest.raises(ValidationError):
            make_workflow(SIMPLE_TASK, version=version)

    def test_activities_required(self) -> None:
        """A workflow needs at least one activity."""
        with pytest.raises(ValidationError):
            make_workflow(SIMPLE_TASK, activities=[])

    def test_checkpoint_needs_options(self) -> None:
        """A checkpoint offers at least one option."""
        with pytest.raises(ValidationError):
            Checkpoint(id="c", message="?", options=[])

    def test_dump_uses_aliases(self, review_workflow: Workflow) -> None:
        """Dumping by alias reproduces the definition format."""
        data = review_workflow.model_dump(by_alias=True, exclude_none=True)

        assert data["initialActivity"] == "review"
        assert data["activities"][0]["transitions"][0] == {"to": "merge", "isDefault": True}


@pytest.mark.unit
class TestActivityLookups:
    """Tests for Activity helpers."""

    def test_get_step_is_one_based(self, simple_workflow: Workflow) -> None:
        """Steps are addressed by 1-based index."""
        activity = simple_workflow.get_activity("task")
        assert activity is not None

        assert activity.get_step(1).id == "step-1"
        assert activity.get_step(2).id == "step-2"
        assert activity.get_step(0) is None
        assert activity.get_step(3) is None

    def test_step_index(self, simple_workflow: Workflow) -> None:
        """Step ids map to their 1-based index."""
        activity = simple_workflow.get_activity("task")

        assert activity.step_index("step-2") == 2
        assert activity.step_index("missing") is None

    def test_required_step_indices(self) -> None:
        """Only required steps are listed, at their real positions."""
        activity = Activity(
            id="a",
            name="A",
            steps=[
                Step(id="optional", name="Optional", required=False),
                Step(id="needed", name="Needed"),
            ],
        )

        assert activity.required_step_indices() == [2]

    def test_lookups(self, review_workflow: Workflow, batch_workflow: Workflow) -> None:
        """Checkpoints, options, loops and activities are found by id."""
        review = review_workflow.get_activity("review")
        checkpoint = review.get_checkpoint("gate")

        assert checkpoint.get_option("no").label == "No"
        assert checkpoint.get_option("maybe") is None
        assert review.get_checkpoint("missing") is None
        assert batch_workflow.activities[0].get_loop("loop-x").name == "Each item"
        assert review_workflow.get_activity("missing") is None


@pytest.mark.unit
class TestIntegrityCheck:
    """Tests for Workflow.check_integrity."""

    @pytest.mark.parametrize("raw", [SIMPLE_TASK, CODE_REVIEW, BATCH])
    def test_sample_definitions_are_consistent(self, raw: dict) -> None:
        """The sample definitions have no integrity problems."""
        assert make_workflow(raw).check_integrity() == []

    def test_unknown_initial_activity(self) -> None:
        """initialActivity must name an activity."""
        problems = make_workflow(SIMPLE_TASK, initialActivity="nowhere").check_integrity()

        assert problems == ["initialActivity: activity 'nowhere' not found"]

    def test_unknown_transition_target(self) -> None:
        """Transitions must target declared activities."""
        workflow = Workflow(
            id="w",
            version="1.0.0",
            title="W",
            initial_activity="a",
            activities=[Activity(id="a", name="A", transitions=[{"to": "nowhere"}])],
        )

        assert workflow.check_integrity() == ["activities.a.transitions: target activity 'nowhere' not found"]

    def test_duplicate_ids(self) -> None:
        """Duplicate activity and step ids are reported."""
        workflow = Workflow(
            id="w",
            version="1.0.0",
            title="W",
            initial_activity="a",
            activities=[
                Activity(id="a", name="A", steps=[Step(id="s", name="S"), Step(id="s", name="S again")]),
                Activity(id="a", name="A again"),
            ],
        )

        problems = workflow.check_integrity()

        assert "activities: duplicate id 'a'" in problems
        assert "activities.a.steps: duplicate id 's'" in problems

    def test_option_effect_targets(self) -> None:
        """Option effects may only reference declared activities."""
        workflow = Workflow(
            id="w",
            version="1.0.0",
            title="W",
            initial_activity="a",
            activities=[
                Activity(
                    id="a",
                    name="A",
                    checkpoints=[
                        {
                            "id": "c",
                            "message": "?",
                            "options": [{"id": "skip", "label": "Skip", "effect": {"skipActivities": ["ghost"]}}],
                        }
                    ],
                )
            ],
        )

        assert workflow.check_integrity() == [
            "activities.a.checkpoints.c: option 'skip' references unknown activity 'ghost'"
        ]

    def test_decision_branch_targets(self) -> None:
        """Decision branches may only target declared activities."""
        workflow = Workflow(
            id="w",
            version="1.0.0",
            title="W",
            initial_activity="a",
            activities=[
                Activity(
                    id="a",
                    name="A",
                    decisions=[{"id": "d", "branches": [{"id": "b", "label": "B", "transitionTo": "ghost"}]}],
                )
            ],
        )

        assert workflow.check_integrity() == ["activities.a.decisions.d: branch 'b' targets unknown activity 'ghost'"]
