"""Litestar Navigator - Stateless workflow navigation for Litestar.

This package guides a caller through a declarative workflow (activities made
of steps, checkpoints, loops and transitions) without keeping any server-side
run state: the whole run travels in a compressed, versioned state token.

Key Features:
    - JSON workflow definitions validated with pydantic
    - Position and available-action calculation
    - Pure, non-mutating state transitions
    - Self-describing ``v1.gzB64.`` state tokens
    - Litestar plugin with a REST API

Example:
    >>> from litestar_navigator import WorkflowNavigator, WorkflowRegistry
    >>>
    >>> registry = WorkflowRegistry()
    >>> registry.load_directory("./workflows")
    >>> navigator = WorkflowNavigator(registry)
    >>> response = navigator.start("code-review")
    >>> response = navigator.act(response.state, "complete_step", step_id="read-diff")
"""

from __future__ import annotations

from litestar_navigator.__metadata__ import __project__, __version__
from litestar_navigator.core import Workflow, WorkflowState
from litestar_navigator.engine import WorkflowNavigator, WorkflowRegistry
from litestar_navigator.exceptions import (
    InvalidActionError,
    NavigatorError,
    StateCodecError,
    WorkflowNotFoundError,
    WorkflowValidationError,
)
from litestar_navigator.navigation import NavigationResponse, decode_state, encode_state
from litestar_navigator.plugin import NavigatorPlugin, NavigatorPluginConfig

__all__ = (
    "InvalidActionError",
    "NavigationResponse",
    "NavigatorError",
    "NavigatorPlugin",
    "NavigatorPluginConfig",
    "StateCodecError",
    "Workflow",
    "WorkflowNavigator",
    "WorkflowNotFoundError",
    "WorkflowRegistry",
    "WorkflowState",
    "WorkflowValidationError",
    "__project__",
    "__version__",
    "decode_state",
    "encode_state",
)
