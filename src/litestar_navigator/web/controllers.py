"""REST API controllers for workflow navigation.

This module provides the route handlers of the navigation API:
- WorkflowDefinitionController: Browse workflow descriptors and their transitions
- NavigationController: Start runs and move them forward through state tokens
- health: Service liveness and basic statistics
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any, ClassVar

from litestar import Controller, get, post
from litestar.exceptions import NotFoundException
from litestar.params import Parameter
from litestar.status_codes import HTTP_200_OK

from litestar_navigator.engine.loader import WorkflowManifestEntry, get_valid_transitions, validate_transition
from litestar_navigator.engine.navigator import WorkflowNavigator  # noqa: TC001 - needed for DI
from litestar_navigator.engine.registry import WorkflowRegistry  # noqa: TC001 - needed for DI
from litestar_navigator.exceptions import WorkflowNotFoundError
from litestar_navigator.navigation.types import CheckpointStatus, NavigationResponse  # noqa: TC001
from litestar_navigator.web.dto import (
    HealthDTO,
    NavigationActionDTO,
    ServiceInfo,
    StartNavigationDTO,
    StateTokenDTO,
    TransitionsDTO,
)

if TYPE_CHECKING:
    from litestar_navigator.core.definition import Workflow

__all__ = [
    "NavigationController",
    "WorkflowDefinitionController",
    "health",
]


def _dump(model: Any) -> dict[str, Any]:
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)


def _get_workflow(registry: WorkflowRegistry, workflow_id: str, version: str | None = None) -> Workflow:
    try:
        return registry.get_definition(workflow_id, version=version)
    except KeyError as e:
        raise WorkflowNotFoundError(workflow_id, version) from e


class WorkflowDefinitionController(Controller):
    """API controller for workflow descriptors.

    Descriptors are returned in their JSON definition format (camelCase keys).

    Tags: Workflow Definitions
    """

    path = "/workflows"
    tags: ClassVar[list[str]] = ["Workflow Definitions"]

    @get("/")
    async def list_workflows(self, workflow_registry: WorkflowRegistry) -> list[WorkflowManifestEntry]:
        """List the latest version of every registered workflow.

        Args:
            workflow_registry: Injected workflow registry.

        Returns:
            List of manifest entries.
        """
        return [WorkflowManifestEntry.from_workflow(workflow) for workflow in workflow_registry.list_definitions()]

    @get("/{workflow_id:str}")
    async def get_workflow(
        self,
        workflow_id: str,
        workflow_registry: WorkflowRegistry,
        version: str | None = Parameter(
            default=None,
            description="Specific version to retrieve. If omitted, returns latest.",
        ),
    ) -> dict[str, Any]:
        """Get the full descriptor of a workflow.

        Args:
            workflow_id: The workflow id.
            workflow_registry: Injected workflow registry.
            version: Optional specific version to retrieve.

        Returns:
            The workflow descriptor.

        Raises:
            WorkflowNotFoundError: If the workflow or version is not registered.
        """
        return _dump(_get_workflow(workflow_registry, workflow_id, version))

    @get("/{workflow_id:str}/activities/{activity_id:str}")
    async def get_activity(
        self,
        workflow_id: str,
        activity_id: str,
        workflow_registry: WorkflowRegistry,
    ) -> dict[str, Any]:
        """Get one activity of the latest version of a workflow.

        Raises:
            WorkflowNotFoundError: If the workflow is not registered.
            NotFoundException: If the activity does not exist.
        """
        activity = _get_workflow(workflow_registry, workflow_id).get_activity(activity_id)
        if activity is None:
            raise NotFoundException(detail=f"Activity '{activity_id}' not found in workflow '{workflow_id}'")
        return _dump(activity)

    @get("/{workflow_id:str}/activities/{activity_id:str}/checkpoints/{checkpoint_id:str}")
    async def get_checkpoint(
        self,
        workflow_id: str,
        activity_id: str,
        checkpoint_id: str,
        workflow_registry: WorkflowRegistry,
    ) -> dict[str, Any]:
        """Get one checkpoint of an activity.

        Raises:
            WorkflowNotFoundError: If the workflow is not registered.
            NotFoundException: If the activity or the checkpoint does not exist.
        """
        activity = _get_workflow(workflow_registry, workflow_id).get_activity(activity_id)
        if activity is None:
            raise NotFoundException(detail=f"Activity '{activity_id}' not found in workflow '{workflow_id}'")
        checkpoint = activity.get_checkpoint(checkpoint_id)
        if checkpoint is None:
            raise NotFoundException(detail=f"Checkpoint '{checkpoint_id}' not found in activity '{activity_id}'")
        return _dump(checkpoint)

    @get("/{workflow_id:str}/transitions")
    async def get_transitions(
        self,
        workflow_id: str,
        workflow_registry: WorkflowRegistry,
        from_activity: str = Parameter(description="Activity to move from."),
        to_activity: str | None = Parameter(default=None, description="Optional target to validate."),
    ) -> TransitionsDTO:
        """List the activities reachable from an activity, optionally checking one target.

        Args:
            workflow_id: The workflow id.
            workflow_registry: Injected workflow registry.
            from_activity: Activity to move from.
            to_activity: Optional target activity to validate.

        Returns:
            The reachable activities and, with ``to_activity``, the verdict.

        Raises:
            WorkflowNotFoundError: If the workflow is not registered.
            NotFoundException: If ``from_activity`` does not exist.
        """
        workflow = _get_workflow(workflow_registry, workflow_id)
        if workflow.get_activity(from_activity) is None:
            raise NotFoundException(detail=f"Activity '{from_activity}' not found in workflow '{workflow_id}'")

        result = TransitionsDTO(
            from_activity=from_activity,
            valid_transitions=get_valid_transitions(workflow, from_activity),
        )
        if to_activity is not None:
            check = validate_transition(workflow, from_activity, to_activity)
            result.to_activity = to_activity
            result.valid = check.valid
            result.reason = check.reason
        return result


class NavigationController(Controller):
    """API controller for navigating workflow runs.

    Every endpoint takes and returns an opaque state token; the server keeps no
    run state.

    Tags: Navigation
    """

    path = "/navigation"
    tags: ClassVar[list[str]] = ["Navigation"]

    @post("/start")
    async def start(self, data: StartNavigationDTO, workflow_navigator: WorkflowNavigator) -> NavigationResponse:
        """Start a new run of a workflow.

        Args:
            data: The workflow to run and its initial variables.
            workflow_navigator: Injected navigator.

        Returns:
            The navigation response for the fresh run.
        """
        return workflow_navigator.start(data.workflow_id, data.initial_variables)

    @post("/situation", status_code=HTTP_200_OK)
    async def situation(self, data: StateTokenDTO, workflow_navigator: WorkflowNavigator) -> NavigationResponse:
        """Describe the position of a run and the actions open to it."""
        return workflow_navigator.situation(data.state)

    @post("/action", status_code=HTTP_200_OK)
    async def act(self, data: NavigationActionDTO, workflow_navigator: WorkflowNavigator) -> NavigationResponse:
        """Apply one action to a run.

        A rejected action is not an HTTP error: the response has
        ``success=false``, the error, and the unchanged token.

        Args:
            data: The state token, the action and its parameters.
            workflow_navigator: Injected navigator.

        Returns:
            The navigation response.
        """
        return workflow_navigator.act(
            data.state,
            data.action,
            step_id=data.step_id,
            checkpoint_id=data.checkpoint_id,
            option_id=data.option_id,
            activity_id=data.activity_id,
            loop_id=data.loop_id,
            loop_items=data.loop_items,
        )

    @post("/checkpoint", status_code=HTTP_200_OK)
    async def checkpoint(self, data: StateTokenDTO, workflow_navigator: WorkflowNavigator) -> CheckpointStatus:
        """Report the checkpoint a run must respond to, if any."""
        return workflow_navigator.checkpoint(data.state)


@get("/health", tags=["Health"])
async def health(workflow_registry: WorkflowRegistry, navigator_service_info: ServiceInfo) -> HealthDTO:
    """Report service liveness."""
    return HealthDTO(
        status="ok",
        service=navigator_service_info.name,
        version=navigator_service_info.version,
        workflows=len(workflow_registry),
        uptime_seconds=round(time.monotonic() - navigator_service_info.started_at, 3),
    )
