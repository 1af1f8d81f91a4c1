"""Core domain module for litestar-navigator.

This module exports the workflow descriptor models, the state snapshot and the
shared enumerations.
"""

from __future__ import annotations

from litestar_navigator.core.definition import (
    Activity,
    Checkpoint,
    CheckpointOption,
    Decision,
    DecisionBranch,
    Loop,
    OptionEffect,
    Step,
    Transition,
    VariableDefinition,
    Workflow,
)
from litestar_navigator.core.state import (
    CheckpointResponse,
    DecisionOutcome,
    HistoryEntry,
    LoopState,
    WorkflowState,
    add_history_event,
    checkpoint_response_key,
    create_initial_state,
)
from litestar_navigator.core.types import (
    ActionType,
    CodecErrorCode,
    HistoryEventType,
    LoopType,
    NavigationErrorCode,
    Variables,
    WorkflowStatus,
)

__all__ = [
    "ActionType",
    "Activity",
    "Checkpoint",
    "CheckpointOption",
    "CheckpointResponse",
    "CodecErrorCode",
    "Decision",
    "DecisionBranch",
    "DecisionOutcome",
    "HistoryEntry",
    "HistoryEventType",
    "Loop",
    "LoopState",
    "LoopType",
    "NavigationErrorCode",
    "OptionEffect",
    "Step",
    "Transition",
    "VariableDefinition",
    "Variables",
    "Workflow",
    "WorkflowState",
    "WorkflowStatus",
    "add_history_event",
    "checkpoint_response_key",
    "create_initial_state",
]
