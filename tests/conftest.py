"""Shared test fixtures for litestar-navigator test suite."""

from __future__ import annotations

import copy
import json
import logging
from typing import TYPE_CHECKING, Any

import pytest

from litestar_navigator.core.definition import Workflow
from litestar_navigator.core.state import WorkflowState, create_initial_state
from litestar_navigator.engine.navigator import WorkflowNavigator
from litestar_navigator.engine.registry import WorkflowRegistry

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

SIMPLE_TASK: dict[str, Any] = {
    "id": "simple-task",
    "version": "1.0.0",
    "title": "Simple Task",
    "initialActivity": "task",
    "activities": [
        {
            "id": "task",
            "name": "Do Task",
            "steps": [
                {"id": "step-1", "name": "First step"},
                {"id": "step-2", "name": "Second step"},
            ],
            "transitions": [{"to": "done", "isDefault": True}],
        },
        {"id": "done", "name": "Done"},
    ],
}

CODE_REVIEW: dict[str, Any] = {
    "id": "code-review",
    "version": "1.0.0",
    "title": "Code Review",
    "description": "Review a change before merging it",
    "tags": ["review"],
    "initialActivity": "review",
    "activities": [
        {
            "id": "review",
            "name": "Review Changes",
            "steps": [{"id": "work", "name": "Review the diff", "effectivities": ["code-read"]}],
            "checkpoints": [
                {
                    "id": "gate",
                    "name": "Go / no-go",
                    "message": "Proceed with review?",
                    "options": [
                        {"id": "yes", "label": "Yes"},
                        {"id": "no", "label": "No", "effect": {"transitionTo": "abandon"}},
                    ],
                }
            ],
            "transitions": [{"to": "merge", "isDefault": True}, {"to": "abandon"}],
        },
        {
            "id": "merge",
            "name": "Merge",
            "steps": [
                {"id": "merge-pr", "name": "Merge the PR"},
                {"id": "notify", "name": "Notify author", "required": False},
            ],
        },
        {"id": "abandon", "name": "Abandon"},
    ],
}

BATCH: dict[str, Any] = {
    "id": "batch",
    "version": "1.0.0",
    "title": "Batch Processing",
    "initialActivity": "process",
    "activities": [
        {
            "id": "process",
            "name": "Process Items",
            "steps": [{"id": "finish", "name": "Finish"}],
            "loops": [
                {
                    "id": "loop-x",
                    "name": "Each item",
                    "variable": "item",
                    "steps": [{"id": "handle-item", "name": "Handle item"}],
                }
            ],
        }
    ],
}


def make_workflow(raw: dict[str, Any], **overrides: Any) -> Workflow:
    """Build a workflow from a raw definition, with top-level keys overridden."""
    data = copy.deepcopy(raw)
    data.update(overrides)
    return Workflow.model_validate(data)


def start_state(workflow: Workflow, **variables: Any) -> WorkflowState:
    """Create the fresh state of a workflow run."""
    return create_initial_state(workflow.id, workflow.version, workflow.initial_activity, variables or None)


@pytest.fixture
def simple_workflow() -> Workflow:
    """Two-step activity followed by a terminal activity."""
    return make_workflow(SIMPLE_TASK)


@pytest.fixture
def review_workflow() -> Workflow:
    """Activity gated by a blocking checkpoint."""
    return make_workflow(CODE_REVIEW)


@pytest.fixture
def batch_workflow() -> Workflow:
    """Single activity with a loop."""
    return make_workflow(BATCH)


@pytest.fixture
def workflow_dir(tmp_path: Path) -> Path:
    """Directory of workflow definitions, including a meta file and a broken one.

    Returns:
        Path holding batch.json, code-review.json, simple-task.json, meta.json
        and broken.json.
    """
    for raw in (SIMPLE_TASK, CODE_REVIEW, BATCH):
        (tmp_path / f"{raw['id']}.json").write_text(json.dumps(raw))
    (tmp_path / "meta.json").write_text(json.dumps({"resources": ["shared-guide.md"]}))
    (tmp_path / "broken.json").write_text(json.dumps({"id": "broken", "version": "one", "title": "Broken"}))
    return tmp_path


@pytest.fixture
def workflow_registry(
    simple_workflow: Workflow, review_workflow: Workflow, batch_workflow: Workflow
) -> WorkflowRegistry:
    """Registry holding the three sample workflows."""
    registry = WorkflowRegistry()
    for workflow in (simple_workflow, review_workflow, batch_workflow):
        registry.register(workflow)
    return registry


@pytest.fixture
def navigator(workflow_registry: WorkflowRegistry) -> WorkflowNavigator:
    """Navigator over the sample registry."""
    return WorkflowNavigator(workflow_registry)


@pytest.fixture
def audit_records() -> Iterator[list[logging.LogRecord]]:
    """Capture records of the audit logger regardless of logging configuration."""
    records: list[logging.LogRecord] = []

    class _Collector(logging.Handler):
        def emit(self, record: logging.LogRecord) -> None:
            records.append(record)

    audit_logger = logging.getLogger("litestar_navigator.audit")
    handler = _Collector(level=logging.DEBUG)
    previous_level = audit_logger.level
    audit_logger.addHandler(handler)
    audit_logger.setLevel(logging.DEBUG)
    yield records
    audit_logger.removeHandler(handler)
    audit_logger.setLevel(previous_level)
