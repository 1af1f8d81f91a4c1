"""Workflow loading, registry and the navigation service."""

from __future__ import annotations

from litestar_navigator.engine.audit import audited
from litestar_navigator.engine.loader import (
    DEFAULT_META_WORKFLOW_ID,
    TransitionCheck,
    WorkflowManifestEntry,
    get_valid_transitions,
    list_workflows,
    load_workflow,
    load_workflows,
    parse_workflow,
    validate_transition,
)
from litestar_navigator.engine.navigator import WorkflowNavigator
from litestar_navigator.engine.registry import WorkflowRegistry

__all__ = [
    "DEFAULT_META_WORKFLOW_ID",
    "TransitionCheck",
    "WorkflowManifestEntry",
    "WorkflowNavigator",
    "WorkflowRegistry",
    "audited",
    "get_valid_transitions",
    "list_workflows",
    "load_workflow",
    "load_workflows",
    "parse_workflow",
    "validate_transition",
]
