"""Data Transfer Objects for the navigation web API.

Request bodies and the response shapes that are not already provided by the
navigation core.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

__all__ = [
    "HealthDTO",
    "NavigationActionDTO",
    "ServiceInfo",
    "StartNavigationDTO",
    "StateTokenDTO",
    "TransitionsDTO",
]


@dataclass
class StartNavigationDTO:
    """DTO for starting a new workflow run.

    Attributes:
        workflow_id: Id of the workflow to run.
        initial_variables: Initial variable bag of the run.
    """

    workflow_id: str
    initial_variables: dict[str, Any] | None = None


@dataclass
class StateTokenDTO:
    """DTO carrying only a state token."""

    state: str


@dataclass
class NavigationActionDTO:
    """DTO for applying an action to a run.

    Attributes:
        state: The current state token.
        action: One of ``complete_step``, ``respond_to_checkpoint``, ``transition``,
            ``advance_loop`` or ``default_transition``.
        step_id: Step to complete.
        checkpoint_id: Checkpoint to respond to.
        option_id: Chosen checkpoint option.
        activity_id: Target activity of a transition.
        loop_id: Loop to start or advance.
        loop_items: Items of the loop, required when starting it.
    """

    state: str
    action: str
    step_id: str | None = None
    checkpoint_id: str | None = None
    option_id: str | None = None
    activity_id: str | None = None
    loop_id: str | None = None
    loop_items: list[Any] | None = None


@dataclass
class TransitionsDTO:
    """DTO for the transitions reachable from an activity.

    Attributes:
        from_activity: The source activity.
        valid_transitions: Activities reachable in one move.
        to_activity: The target that was checked, if one was given.
        valid: Whether the move to ``to_activity`` is declared.
        reason: Why the move is not valid.
    """

    from_activity: str
    valid_transitions: list[str]
    to_activity: str | None = None
    valid: bool | None = None
    reason: str | None = None


@dataclass
class ServiceInfo:
    name: str
    version: str
    started_at: float


@dataclass
class HealthDTO:
    status: str
    service: str
    version: str
    workflows: int
    uptime_seconds: float
