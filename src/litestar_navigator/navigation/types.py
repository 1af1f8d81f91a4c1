"""Output types of the navigation core.

These dataclasses describe "where am I and what can I do next". They are
plain data and serialize directly in Litestar responses.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from litestar_navigator.core.types import ActionType, NavigationErrorCode

if TYPE_CHECKING:
    from litestar_navigator.core.definition import Checkpoint

__all__ = [
    "Action",
    "ActiveCheckpoint",
    "AvailableActions",
    "BlockedAction",
    "CheckpointOptionView",
    "CheckpointStatus",
    "NavigationError",
    "NavigationResponse",
    "Position",
    "PositionActivity",
    "PositionLoop",
    "PositionStep",
]


@dataclass
class PositionActivity:
    id: str
    name: str


@dataclass
class PositionStep:
    id: str
    index: int
    name: str


@dataclass
class PositionLoop:
    """Display information about the most recently started loop.

    Attributes:
        id: Loop id.
        name: Loop name, or the id when the loop declares none.
        iteration: 1-based iteration number.
        total: Total number of items, if known.
        item: Text rendering of the current item, if any.
    """

    id: str
    name: str
    iteration: int
    total: int | None = None
    item: str | None = None


@dataclass
class Position:
    """Human-readable position within a workflow.

    Attributes:
        workflow: Workflow id.
        activity: The current activity.
        step: The current step, when one is pending.
        loop: The most recently started active loop, if any.
    """

    workflow: str
    activity: PositionActivity
    step: PositionStep | None = None
    loop: PositionLoop | None = None


@dataclass
class Action:
    """An action the caller can take.

    Attributes:
        action: Kind of action.
        step: Step id for ``complete_step``.
        checkpoint: Checkpoint id for ``respond_to_checkpoint``.
        description: Human-readable description.
        effectivities: Capability tags required to perform the action.
    """

    action: ActionType
    step: str | None = None
    checkpoint: str | None = None
    description: str | None = None
    effectivities: list[str] | None = None


@dataclass
class BlockedAction:
    action: ActionType
    reason: str


@dataclass
class AvailableActions:
    """Actions categorized by requirement."""

    required: list[Action] = field(default_factory=list)
    optional: list[Action] = field(default_factory=list)
    blocked: list[BlockedAction] = field(default_factory=list)


@dataclass
class CheckpointOptionView:
    id: str
    label: str
    description: str | None = None


@dataclass
class ActiveCheckpoint:
    """The checkpoint currently requiring a response."""

    id: str
    message: str
    options: list[CheckpointOptionView]

    @classmethod
    def from_checkpoint(cls, checkpoint: Checkpoint) -> ActiveCheckpoint:
        """Build the view of a checkpoint definition."""
        return cls(
            id=checkpoint.id,
            message=checkpoint.message,
            options=[
                CheckpointOptionView(id=option.id, label=option.label, description=option.description)
                for option in checkpoint.options
            ],
        )


@dataclass
class NavigationError:
    code: NavigationErrorCode
    message: str


@dataclass
class NavigationResponse:
    """Response envelope returned for every navigation call.

    Attributes:
        success: Whether the requested operation succeeded.
        position: Where the caller is.
        message: Human-readable summary of what happened.
        available_actions: What the caller can do next.
        state: The state token to send with the next call.
        checkpoint: The checkpoint requiring a response, if any.
        complete: Whether the workflow run is complete.
        error: The failure, when ``success`` is false.
    """

    success: bool
    position: Position
    message: str
    available_actions: AvailableActions
    state: str
    checkpoint: ActiveCheckpoint | None = None
    complete: bool = False
    error: NavigationError | None = None


@dataclass
class CheckpointStatus:
    active: bool
    message: str
    checkpoint: ActiveCheckpoint | None = None
