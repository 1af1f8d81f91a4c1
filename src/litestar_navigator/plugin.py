"""Litestar plugin for workflow navigation.

This module provides the NavigatorPlugin for integrating litestar-navigator
with Litestar applications.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from litestar.di import Provide
from litestar.plugins import InitPluginProtocol

from litestar_navigator.engine.loader import DEFAULT_META_WORKFLOW_ID
from litestar_navigator.engine.navigator import WorkflowNavigator
from litestar_navigator.engine.registry import WorkflowRegistry
from litestar_navigator.web.dto import ServiceInfo

if TYPE_CHECKING:
    from litestar.config.app import AppConfig

    from litestar_navigator.core.definition import Workflow

__all__ = ["NavigatorPlugin", "NavigatorPluginConfig"]

logger = logging.getLogger(__name__)


@dataclass
class NavigatorPluginConfig:
    """Configuration for the NavigatorPlugin.

    Attributes:
        registry: Optional pre-configured WorkflowRegistry. If not provided,
            a new one will be created.
        workflow_dir: Optional directory of ``<id>.json`` definitions loaded
            into the registry on app startup.
        meta_workflow_id: Reserved workflow id skipped when loading ``workflow_dir``.
        auto_register_workflows: Workflow descriptors to register on app startup.
        dependency_key_registry: The key used for dependency injection of
            the WorkflowRegistry. Defaults to "workflow_registry".
        dependency_key_navigator: The key used for dependency injection of
            the WorkflowNavigator. Defaults to "workflow_navigator".
        enable_api: Whether to enable the REST API endpoints. Defaults to True.
        api_path_prefix: URL path prefix for all navigation API endpoints.
            Defaults to "/navigator".
        api_guards: List of Litestar guards to apply to all navigation API endpoints.
        api_tags: OpenAPI tags to apply to navigation API endpoints.
        include_api_in_schema: Whether to include API endpoints in OpenAPI schema.
            Defaults to True.
        service_name: Name reported by the health endpoint.
        service_version: Version reported by the health endpoint.
    """

    registry: WorkflowRegistry | None = None
    workflow_dir: str | Path | None = None
    meta_workflow_id: str = DEFAULT_META_WORKFLOW_ID
    auto_register_workflows: list[Workflow] = field(default_factory=list)
    dependency_key_registry: str = "workflow_registry"
    dependency_key_navigator: str = "workflow_navigator"
    enable_api: bool = True
    api_path_prefix: str = "/navigator"
    api_guards: list[Any] = field(default_factory=list)
    api_tags: list[str] = field(default_factory=lambda: ["Navigator"])
    include_api_in_schema: bool = True
    service_name: str = "workflow-navigator"
    service_version: str = "1.0.0"


class NavigatorPlugin(InitPluginProtocol):
    """Litestar plugin for workflow navigation.

    This plugin loads workflow descriptors into a WorkflowRegistry, provides
    the registry and a WorkflowNavigator through dependency injection, and
    mounts the navigation REST API.

    Example:
        Loading definitions from a directory::

            from litestar import Litestar
            from litestar_navigator import NavigatorPlugin, NavigatorPluginConfig

            app = Litestar(
                plugins=[NavigatorPlugin(config=NavigatorPluginConfig(workflow_dir="./workflows"))],
            )

        Using in a route handler::

            from litestar import post
            from litestar_navigator import WorkflowNavigator


            @post("/runs/{workflow_id:str}")
            async def start_run(workflow_id: str, workflow_navigator: WorkflowNavigator) -> dict:
                response = workflow_navigator.start(workflow_id)
                return {"state": response.state, "message": response.message}
    """

    __slots__ = ("_config", "_navigator", "_registry")

    def __init__(self, config: NavigatorPluginConfig | None = None) -> None:
        """Initialize the plugin.

        Args:
            config: Optional configuration for the plugin.
        """
        self._config = config or NavigatorPluginConfig()
        self._registry: WorkflowRegistry | None = None
        self._navigator: WorkflowNavigator | None = None

    @property
    def registry(self) -> WorkflowRegistry:
        """Get the workflow registry.

        Raises:
            RuntimeError: If accessed before plugin initialization.
        """
        if self._registry is None:
            msg = "NavigatorPlugin has not been initialized. Access registry after app startup."
            raise RuntimeError(msg)
        return self._registry

    @property
    def navigator(self) -> WorkflowNavigator:
        """Get the workflow navigator.

        Raises:
            RuntimeError: If accessed before plugin initialization.
        """
        if self._navigator is None:
            msg = "NavigatorPlugin has not been initialized. Access navigator after app startup."
            raise RuntimeError(msg)
        return self._navigator

    def on_app_init(self, app_config: AppConfig) -> AppConfig:
        """Initialize the plugin when the Litestar app starts.

        This method:
        1. Creates or uses the provided WorkflowRegistry
        2. Loads ``workflow_dir`` and registers any auto_register_workflows
        3. Creates the WorkflowNavigator
        4. Adds dependency providers to the app config
        5. Optionally registers REST API controllers if enable_api=True

        Args:
            app_config: The Litestar application configuration.

        Returns:
            The modified application configuration.
        """
        self._registry = self._config.registry if self._config.registry is not None else WorkflowRegistry()

        if self._config.workflow_dir is not None:
            loaded = self._registry.load_directory(self._config.workflow_dir, self._config.meta_workflow_id)
            logger.info(
                "Workflow definitions loaded",
                extra={"workflow_dir": str(self._config.workflow_dir), "count": loaded},
            )

        for workflow in self._config.auto_register_workflows:
            self._registry.register(workflow)

        self._navigator = WorkflowNavigator(registry=self._registry)
        service_info = ServiceInfo(
            name=self._config.service_name,
            version=self._config.service_version,
            started_at=time.monotonic(),
        )

        def provide_registry() -> WorkflowRegistry:
            return self._registry  # type: ignore[return-value]

        def provide_navigator() -> WorkflowNavigator:
            return self._navigator  # type: ignore[return-value]

        def provide_service_info() -> ServiceInfo:
            return service_info

        app_config.dependencies[self._config.dependency_key_registry] = Provide(
            provide_registry,
            sync_to_thread=False,
        )
        app_config.dependencies[self._config.dependency_key_navigator] = Provide(
            provide_navigator,
            sync_to_thread=False,
        )
        app_config.dependencies["navigator_service_info"] = Provide(
            provide_service_info,
            sync_to_thread=False,
        )

        if self._config.enable_api:
            from litestar import Router

            from litestar_navigator.web.controllers import NavigationController, WorkflowDefinitionController, health
            from litestar_navigator.web.exceptions import exception_handlers

            navigator_router = Router(
                path=self._config.api_path_prefix,
                route_handlers=[WorkflowDefinitionController, NavigationController, health],
                guards=self._config.api_guards,
                tags=self._config.api_tags,
                include_in_schema=self._config.include_api_in_schema,
            )
            app_config.route_handlers.append(navigator_router)
            app_config.exception_handlers.update(exception_handlers)  # type: ignore[arg-type]

        return app_config
