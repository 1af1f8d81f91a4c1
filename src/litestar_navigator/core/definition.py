"""Workflow descriptor models.

This module provides the immutable, declarative description of a workflow:
activities with their steps, checkpoints, decisions, loops and transitions.
Descriptors are parsed from JSON with camelCase keys and are treated as trusted
once :meth:`Workflow.check_integrity` reports no problems.
"""

from __future__ import annotations

from collections import Counter
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from litestar_navigator.core.types import LoopType

__all__ = [
    "Activity",
    "Checkpoint",
    "CheckpointOption",
    "Decision",
    "DecisionBranch",
    "Loop",
    "OptionEffect",
    "Step",
    "Transition",
    "VariableDefinition",
    "Workflow",
]


class _DescriptorModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class Step(_DescriptorModel):
    """Smallest unit of work within an activity.

    Attributes:
        id: Identifier, unique within the activity.
        name: Human-readable name.
        description: Optional longer explanation.
        required: Whether the step must be completed before leaving the activity.
        effectivities: Capability tags the actor needs to perform the step.
    """

    id: str
    name: str
    description: str | None = None
    required: bool = True
    effectivities: list[str] | None = None


class OptionEffect(_DescriptorModel):
    """Declared consequences of choosing a checkpoint option.

    Effects are recorded in the definition only; the navigation core never
    applies them.
    """

    set_variable: dict[str, Any] | None = None
    transition_to: str | None = None
    skip_activities: list[str] | None = None


class CheckpointOption(_DescriptorModel):
    """A choice offered by a checkpoint."""

    id: str
    label: str
    description: str | None = None
    effect: OptionEffect | None = None


class Checkpoint(_DescriptorModel):
    """Blocking decision point that needs an external response.

    Attributes:
        id: Identifier, unique within the activity.
        name: Optional short name.
        message: The question put to the actor.
        required: Whether a response is mandatory.
        blocking: Whether steps are blocked until a response is recorded.
        options: The choices on offer, at least one.
    """

    id: str
    name: str | None = None
    message: str
    required: bool = True
    blocking: bool = True
    options: list[CheckpointOption] = Field(min_length=1)

    def get_option(self, option_id: str) -> CheckpointOption | None:
        """Look up an option by id."""
        return next((option for option in self.options if option.id == option_id), None)


class DecisionBranch(_DescriptorModel):
    """One outcome of a decision."""

    id: str
    label: str
    transition_to: str
    is_default: bool = False


class Decision(_DescriptorModel):
    """Conditional branching point. Outcomes are recorded, not evaluated."""

    id: str
    name: str | None = None
    message: str | None = None
    branches: list[DecisionBranch] = Field(default_factory=list)


class Loop(_DescriptorModel):
    """Bounded iteration over a caller-supplied item list.

    Attributes:
        id: Identifier, unique within the activity.
        name: Optional display name; the id is shown when absent.
        type: Iteration style.
        variable: Name under which the current item is exposed to the actor.
        steps: The loop body.
    """

    id: str
    name: str | None = None
    type: LoopType = LoopType.FOR_EACH
    variable: str | None = None
    steps: list[Step] = Field(default_factory=list)


class Transition(_DescriptorModel):
    """Edge from the owning activity to another activity."""

    to: str
    is_default: bool = False


class Activity(_DescriptorModel):
    """A workflow stage.

    Attributes:
        id: Identifier, unique within the workflow.
        name: Human-readable name.
        version: Optional activity version.
        description: Optional longer explanation.
        steps: Ordered steps; a step's 1-based position is its index in state.
        checkpoints: Checkpoints, evaluated in declared order.
        decisions: Decisions, recorded but not evaluated.
        loops: Loop declarations.
        transitions: Outgoing transitions to other activities.
    """

    id: str
    name: str
    version: str | None = None
    description: str | None = None
    steps: list[Step] = Field(default_factory=list)
    checkpoints: list[Checkpoint] = Field(default_factory=list)
    decisions: list[Decision] = Field(default_factory=list)
    loops: list[Loop] = Field(default_factory=list)
    transitions: list[Transition] = Field(default_factory=list)

    def get_step(self, index: int) -> Step | None:
        """Return the step at a 1-based index, if any."""
        if 1 <= index <= len(self.steps):
            return self.steps[index - 1]
        return None

    def step_index(self, step_id: str) -> int | None:
        """Return the 1-based index of a step id, if the step exists."""
        for position, step in enumerate(self.steps, start=1):
            if step.id == step_id:
                return position
        return None

    def get_checkpoint(self, checkpoint_id: str) -> Checkpoint | None:
        """Look up a checkpoint by id."""
        return next((cp for cp in self.checkpoints if cp.id == checkpoint_id), None)

    def get_loop(self, loop_id: str) -> Loop | None:
        """Look up a loop by id."""
        return next((loop for loop in self.loops if loop.id == loop_id), None)

    def required_step_indices(self) -> list[int]:
        """Return the 1-based indices of all required steps."""
        return [position for position, step in enumerate(self.steps, start=1) if step.required]


class VariableDefinition(_DescriptorModel):
    """Declaration of a workflow-level variable."""

    name: str
    type: Literal["string", "number", "boolean", "array", "object"]
    description: str | None = None
    default_value: Any = None
    required: bool = False


class Workflow(_DescriptorModel):
    """Declarative workflow structure.

    The Workflow is the blueprint navigated by the engine. It is immutable and
    only ever read by the navigation functions.

    Attributes:
        id: Unique workflow identifier.
        version: Semantic version string.
        title: Human-readable title.
        description: Optional longer explanation.
        author: Optional author.
        tags: Optional free-form tags.
        rules: Optional rules governing execution, passed through to callers.
        variables: Declared workflow variables.
        initial_activity: Id of the first activity.
        activities: The activities, at least one.

    Example:
        >>> workflow = Workflow.model_validate(
        ...     {
        ...         "id": "review",
        ...         "version": "1.0.0",
        ...         "title": "Review",
        ...         "initialActivity": "read",
        ...         "activities": [{"id": "read", "name": "Read", "steps": [{"id": "s", "name": "S"}]}],
        ...     }
        ... )
        >>> workflow.check_integrity()
        []
    """

    id: str
    version: str = Field(pattern=r"^\d+\.\d+\.\d+$")
    title: str
    description: str | None = None
    author: str | None = None
    tags: list[str] | None = None
    rules: list[str] | None = None
    variables: list[VariableDefinition] = Field(default_factory=list)
    initial_activity: str
    activities: list[Activity] = Field(min_length=1)

    def get_activity(self, activity_id: str) -> Activity | None:
        """Look up an activity by id."""
        return next((activity for activity in self.activities if activity.id == activity_id), None)

    def check_integrity(self) -> list[str]:
        """Check referential integrity beyond what the field schema enforces.

        Returns:
            List of problem messages. Empty list if the workflow is consistent.
        """
        errors: list[str] = []
        activity_ids = {activity.id for activity in self.activities}

        errors.extend(_duplicates("activities", [activity.id for activity in self.activities]))

        if self.initial_activity not in activity_ids:
            errors.append(f"initialActivity: activity '{self.initial_activity}' not found")

        for activity in self.activities:
            prefix = f"activities.{activity.id}"
            errors.extend(_duplicates(f"{prefix}.steps", [step.id for step in activity.steps]))
            errors.extend(_duplicates(f"{prefix}.checkpoints", [cp.id for cp in activity.checkpoints]))
            errors.extend(_duplicates(f"{prefix}.loops", [loop.id for loop in activity.loops]))

            for transition in activity.transitions:
                if transition.to not in activity_ids:
                    errors.append(f"{prefix}.transitions: target activity '{transition.to}' not found")

            for decision in activity.decisions:
                for branch in decision.branches:
                    if branch.transition_to not in activity_ids:
                        errors.append(
                            f"{prefix}.decisions.{decision.id}: branch '{branch.id}' targets "
                            f"unknown activity '{branch.transition_to}'"
                        )

            for checkpoint in activity.checkpoints:
                cp_prefix = f"{prefix}.checkpoints.{checkpoint.id}"
                errors.extend(_duplicates(f"{cp_prefix}.options", [option.id for option in checkpoint.options]))
                for option in checkpoint.options:
                    if option.effect is None:
                        continue
                    targets = list(option.effect.skip_activities or [])
                    if option.effect.transition_to:
                        targets.append(option.effect.transition_to)
                    for target in targets:
                        if target not in activity_ids:
                            errors.append(f"{cp_prefix}: option '{option.id}' references unknown activity '{target}'")

        return errors


def _duplicates(path: str, ids: list[str]) -> list[str]:
    return [f"{path}: duplicate id '{item}'" for item, count in Counter(ids).items() if count > 1]
