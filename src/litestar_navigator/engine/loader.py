"""Loading workflow definitions from JSON files.

Definitions live as ``<workflow_dir>/<workflow_id>.json``. The reserved meta
workflow id names a namespace for shared content and is never loaded as a
navigable workflow.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from pydantic import ValidationError

from litestar_navigator.core.definition import Workflow
from litestar_navigator.exceptions import WorkflowNotFoundError, WorkflowValidationError
from litestar_navigator.navigation.codec import format_validation_errors

__all__ = [
    "DEFAULT_META_WORKFLOW_ID",
    "TransitionCheck",
    "WorkflowManifestEntry",
    "get_valid_transitions",
    "list_workflows",
    "load_workflow",
    "load_workflows",
    "parse_workflow",
    "validate_transition",
]

logger = logging.getLogger(__name__)

DEFAULT_META_WORKFLOW_ID = "meta"


@dataclass
class WorkflowManifestEntry:
    id: str
    title: str
    version: str
    description: str | None = None

    @classmethod
    def from_workflow(cls, workflow: Workflow) -> WorkflowManifestEntry:
        return cls(id=workflow.id, title=workflow.title, version=workflow.version, description=workflow.description)


@dataclass
class TransitionCheck:
    valid: bool
    reason: str | None = None


def parse_workflow(raw: str | bytes, source: str) -> Workflow:
    """Parse and fully validate a workflow definition.

    Args:
        raw: The JSON document.
        source: Name used in error messages, usually the workflow id.

    Returns:
        The validated Workflow.

    Raises:
        WorkflowValidationError: If the document is not valid JSON, does not match
            the schema, or fails the integrity check.
    """
    try:
        workflow = Workflow.model_validate_json(raw)
    except ValidationError as e:
        raise WorkflowValidationError(source, format_validation_errors(e)) from e

    problems = workflow.check_integrity()
    if problems:
        raise WorkflowValidationError(source, problems)
    return workflow


def load_workflow(workflow_dir: str | Path, workflow_id: str) -> Workflow:
    """Load a single workflow definition from a directory.

    Args:
        workflow_dir: Directory holding ``<id>.json`` files.
        workflow_id: Id of the workflow to load.

    Returns:
        The validated Workflow.

    Raises:
        WorkflowNotFoundError: If no definition file exists for the id.
        WorkflowValidationError: If the definition is invalid.
    """
    path = Path(workflow_dir) / f"{workflow_id}.json"
    if not path.is_file():
        raise WorkflowNotFoundError(workflow_id)

    try:
        workflow = parse_workflow(path.read_bytes(), workflow_id)
    except WorkflowValidationError:
        logger.exception("Failed to load workflow", extra={"workflow_id": workflow_id, "path": str(path)})
        raise

    logger.info("Workflow loaded", extra={"workflow_id": workflow.id, "version": workflow.version})
    return workflow


def load_workflows(workflow_dir: str | Path, meta_workflow_id: str = DEFAULT_META_WORKFLOW_ID) -> list[Workflow]:
    """Load every valid workflow definition of a directory.

    Invalid definitions are logged and skipped so one broken file does not take
    the others down.

    Args:
        workflow_dir: Directory holding ``<id>.json`` files.
        meta_workflow_id: Reserved id that is never loaded.

    Returns:
        The loaded workflows, sorted by file name.
    """
    directory = Path(workflow_dir)
    if not directory.is_dir():
        logger.warning("Workflow directory not found", extra={"workflow_dir": str(directory)})
        return []

    workflows = []
    for path in sorted(directory.glob("*.json")):
        if path.stem == meta_workflow_id:
            continue
        try:
            workflows.append(load_workflow(directory, path.stem))
        except WorkflowValidationError:
            continue
    return workflows


def list_workflows(
    workflow_dir: str | Path, meta_workflow_id: str = DEFAULT_META_WORKFLOW_ID
) -> list[WorkflowManifestEntry]:
    """Return the manifest entries of every valid workflow of a directory."""
    workflows = load_workflows(workflow_dir, meta_workflow_id)
    return [WorkflowManifestEntry.from_workflow(workflow) for workflow in workflows]


def get_valid_transitions(workflow: Workflow, from_activity_id: str) -> list[str]:
    """Collect every activity reachable from an activity in one move.

    Targets come from declared transitions, decision branches and checkpoint
    option effects, in that order, without duplicates.
    """
    activity = workflow.get_activity(from_activity_id)
    if activity is None:
        return []

    targets = [transition.to for transition in activity.transitions]
    for decision in activity.decisions:
        targets.extend(branch.transition_to for branch in decision.branches)
    for checkpoint in activity.checkpoints:
        targets.extend(
            option.effect.transition_to
            for option in checkpoint.options
            if option.effect is not None and option.effect.transition_to
        )
    return list(dict.fromkeys(targets))


def validate_transition(workflow: Workflow, from_activity_id: str, to_activity_id: str) -> TransitionCheck:
    """Check whether a move between two activities is declared by the workflow."""
    if workflow.get_activity(from_activity_id) is None:
        return TransitionCheck(valid=False, reason=f"Source activity not found: {from_activity_id}")
    if workflow.get_activity(to_activity_id) is None:
        return TransitionCheck(valid=False, reason=f"Target activity not found: {to_activity_id}")

    valid = get_valid_transitions(workflow, from_activity_id)
    if to_activity_id not in valid:
        return TransitionCheck(valid=False, reason=f"No valid transition. Valid: {', '.join(valid) or 'none'}")
    return TransitionCheck(valid=True)
