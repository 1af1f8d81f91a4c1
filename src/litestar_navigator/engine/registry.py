"""Workflow registry for managing workflow definitions.

This module provides a registry for storing, retrieving, and managing
workflow descriptors with support for versioning.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from litestar_navigator.engine.loader import DEFAULT_META_WORKFLOW_ID, load_workflows

if TYPE_CHECKING:
    from pathlib import Path

    from litestar_navigator.core.definition import Workflow

__all__ = ["WorkflowRegistry"]


def _version_key(version: str) -> tuple[int, ...]:
    return tuple(int(part) for part in version.split("."))


class WorkflowRegistry:
    """Registry for storing and retrieving workflow descriptors.

    The registry maintains a mapping of workflow ids to versions and their
    descriptors, enabling lookup of a specific or the latest version.

    Attributes:
        _definitions: Nested dict mapping id -> version -> Workflow.
    """

    def __init__(self) -> None:
        """Initialize an empty workflow registry."""
        self._definitions: dict[str, dict[str, Workflow]] = {}

    def __len__(self) -> int:
        return len(self._definitions)

    def register(self, workflow: Workflow) -> None:
        """Register a workflow descriptor, replacing one with the same id and version.

        Args:
            workflow: The descriptor to register.

        Example:
            >>> registry = WorkflowRegistry()
            >>> registry.register(workflow)
        """
        self._definitions.setdefault(workflow.id, {})[workflow.version] = workflow

    def load_directory(self, workflow_dir: str | Path, meta_workflow_id: str = DEFAULT_META_WORKFLOW_ID) -> int:
        """Register every valid workflow definition found in a directory.

        Args:
            workflow_dir: Directory holding ``<id>.json`` files.
            meta_workflow_id: Reserved id that is never loaded.

        Returns:
            The number of workflows registered.
        """
        workflows = load_workflows(workflow_dir, meta_workflow_id)
        for workflow in workflows:
            self.register(workflow)
        return len(workflows)

    def get_definition(self, workflow_id: str, version: str | None = None) -> Workflow:
        """Retrieve a workflow descriptor by id and optional version.

        Args:
            workflow_id: The workflow id.
            version: The workflow version. If None, returns the latest version.

        Returns:
            The Workflow for the requested id.

        Raises:
            KeyError: If the workflow id or version is not found.

        Example:
            >>> workflow = registry.get_definition("code-review")
            >>> workflow_v1 = registry.get_definition("code-review", "1.0.0")
        """
        if workflow_id not in self._definitions:
            msg = f"Workflow '{workflow_id}' not found in registry"
            raise KeyError(msg)

        versions = self._definitions[workflow_id]

        if version is None:
            version = max(versions, key=_version_key)

        if version not in versions:
            available = ", ".join(versions.keys())
            msg = f"Version '{version}' not found for workflow '{workflow_id}'. Available versions: {available}"
            raise KeyError(msg)

        return versions[version]

    def list_definitions(self, latest_only: bool = True) -> list[Workflow]:
        """List all registered workflow descriptors.

        Args:
            latest_only: If True, only return the latest version of each workflow.
                If False, return all versions.

        Returns:
            List of Workflow objects.
        """
        definitions: list[Workflow] = []

        for versions in self._definitions.values():
            if latest_only:
                definitions.append(versions[max(versions, key=_version_key)])
            else:
                definitions.extend(versions[v] for v in sorted(versions, key=_version_key))

        return definitions

    def unregister(self, workflow_id: str, version: str | None = None) -> None:
        """Remove a workflow from the registry.

        Args:
            workflow_id: The workflow id.
            version: The specific version to remove. If None, removes all versions.
        """
        if workflow_id not in self._definitions:
            return

        if version is None:
            del self._definitions[workflow_id]
            return

        self._definitions[workflow_id].pop(version, None)
        if not self._definitions[workflow_id]:
            del self._definitions[workflow_id]

    def has_workflow(self, workflow_id: str, version: str | None = None) -> bool:
        """Check if a workflow exists in the registry.

        Args:
            workflow_id: The workflow id.
            version: Optional specific version to check.

        Returns:
            True if the workflow exists, False otherwise.
        """
        if workflow_id not in self._definitions:
            return False

        if version is None:
            return True

        return version in self._definitions[workflow_id]

    def get_versions(self, workflow_id: str) -> list[str]:
        """Get all versions for a workflow, oldest first.

        Raises:
            KeyError: If the workflow id is not found.
        """
        if workflow_id not in self._definitions:
            msg = f"Workflow '{workflow_id}' not found in registry"
            raise KeyError(msg)

        return sorted(self._definitions[workflow_id], key=_version_key)
