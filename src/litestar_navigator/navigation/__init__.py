"""Workflow navigation engine.

The position/affordance calculator, the pure transition functions and the
state token codec.
"""

from __future__ import annotations

from litestar_navigator.navigation.codec import (
    decode_state,
    encode_state,
    get_compression_ratio,
    get_token_version,
    is_valid_token_format,
)
from litestar_navigator.navigation.compute import (
    compute_available_actions,
    compute_position,
    generate_situation_message,
    get_active_checkpoint,
    get_current_activity,
    get_current_step,
    get_default_transition,
    get_remaining_steps,
    is_activity_complete,
    is_checkpoint_blocking,
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
from litestar_navigator.navigation.types import (
    Action,
    ActiveCheckpoint,
    AvailableActions,
    BlockedAction,
    CheckpointStatus,
    NavigationError,
    NavigationResponse,
    Position,
)

__all__ = [
    "Action",
    "ActiveCheckpoint",
    "AvailableActions",
    "BlockedAction",
    "CheckpointStatus",
    "NavigationError",
    "NavigationResponse",
    "Position",
    "TransitionResult",
    "advance_loop",
    "complete_step",
    "compute_available_actions",
    "compute_position",
    "decode_state",
    "encode_state",
    "generate_situation_message",
    "get_active_checkpoint",
    "get_compression_ratio",
    "get_current_activity",
    "get_current_step",
    "get_default_transition",
    "get_remaining_steps",
    "get_token_version",
    "is_activity_complete",
    "is_checkpoint_blocking",
    "is_valid_token_format",
    "is_workflow_complete",
    "respond_to_checkpoint",
    "transition_to_activity",
    "try_default_transition",
]
