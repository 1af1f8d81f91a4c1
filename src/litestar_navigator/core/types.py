"""Core type definitions for litestar-navigator.

This module defines the enumerations shared by the descriptor, the state
snapshot, the navigation core and the web layer.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any, TypeAlias

__all__ = [
    "ActionType",
    "CodecErrorCode",
    "HistoryEventType",
    "LoopType",
    "NavigationErrorCode",
    "Variables",
    "WorkflowStatus",
]


class WorkflowStatus(StrEnum):
    """Overall status of a navigated workflow run.

    Attributes:
        RUNNING: The run is in progress.
        PAUSED: The caller paused the run.
        SUSPENDED: The run is waiting on something outside the workflow.
        COMPLETED: The final activity is complete. Terminal.
        ABORTED: The run was abandoned. Terminal.
        ERROR: The run hit an unrecoverable error.
    """

    RUNNING = "running"
    PAUSED = "paused"
    SUSPENDED = "suspended"
    COMPLETED = "completed"
    ABORTED = "aborted"
    ERROR = "error"


class HistoryEventType(StrEnum):
    """Kinds of entries recorded in the state history."""

    WORKFLOW_STARTED = "workflow_started"
    WORKFLOW_COMPLETED = "workflow_completed"
    WORKFLOW_ABORTED = "workflow_aborted"
    ACTIVITY_ENTERED = "activity_entered"
    ACTIVITY_EXITED = "activity_exited"
    ACTIVITY_SKIPPED = "activity_skipped"
    STEP_STARTED = "step_started"
    STEP_COMPLETED = "step_completed"
    CHECKPOINT_REACHED = "checkpoint_reached"
    CHECKPOINT_RESPONSE = "checkpoint_response"
    DECISION_REACHED = "decision_reached"
    DECISION_BRANCH_TAKEN = "decision_branch_taken"
    LOOP_STARTED = "loop_started"
    LOOP_ITERATION = "loop_iteration"
    LOOP_COMPLETED = "loop_completed"
    LOOP_BREAK = "loop_break"
    VARIABLE_SET = "variable_set"
    ERROR = "error"


class LoopType(StrEnum):
    """Iteration style declared by a loop."""

    FOR_EACH = "forEach"
    WHILE = "while"


class ActionType(StrEnum):
    """Actions a caller can be offered or can request.

    Attributes:
        COMPLETE_STEP: Mark a step of the current activity as done.
        RESPOND_TO_CHECKPOINT: Choose an option of a blocking checkpoint.
        TRANSITION: Move to another activity.
        ADVANCE_LOOP: Start a loop or move it to its next item.
        DEFAULT_TRANSITION: Move along the current activity's default transition.
        GET_RESOURCE: Hint that auxiliary guidance is available.
    """

    COMPLETE_STEP = "complete_step"
    RESPOND_TO_CHECKPOINT = "respond_to_checkpoint"
    TRANSITION = "transition"
    ADVANCE_LOOP = "advance_loop"
    DEFAULT_TRANSITION = "default_transition"
    GET_RESOURCE = "get_resource"


class NavigationErrorCode(StrEnum):
    """Codes of the recoverable failures returned by transition functions."""

    ACTIVITY_NOT_FOUND = "ACTIVITY_NOT_FOUND"
    CHECKPOINT_BLOCKING = "CHECKPOINT_BLOCKING"
    STEP_NOT_FOUND = "STEP_NOT_FOUND"
    STEP_ALREADY_COMPLETE = "STEP_ALREADY_COMPLETE"
    CHECKPOINT_NOT_FOUND = "CHECKPOINT_NOT_FOUND"
    OPTION_NOT_FOUND = "OPTION_NOT_FOUND"
    CHECKPOINT_ALREADY_RESPONDED = "CHECKPOINT_ALREADY_RESPONDED"
    TARGET_ACTIVITY_NOT_FOUND = "TARGET_ACTIVITY_NOT_FOUND"
    INVALID_TRANSITION = "INVALID_TRANSITION"
    ACTIVITY_NOT_COMPLETE = "ACTIVITY_NOT_COMPLETE"
    LOOP_ITEMS_REQUIRED = "LOOP_ITEMS_REQUIRED"
    NO_DEFAULT_TRANSITION = "NO_DEFAULT_TRANSITION"


class CodecErrorCode(StrEnum):
    """Stages at which decoding a state token can fail."""

    INVALID_FORMAT = "INVALID_FORMAT"
    DECODE_FAILED = "DECODE_FAILED"
    DECOMPRESS_FAILED = "DECOMPRESS_FAILED"
    VALIDATION_FAILED = "VALIDATION_FAILED"


Variables: TypeAlias = dict[str, Any]
"""Type alias for the free-form workflow variable bag."""
