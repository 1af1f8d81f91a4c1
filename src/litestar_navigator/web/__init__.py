"""REST API for litestar-navigator.

The API is mounted automatically when using NavigatorPlugin with
enable_api=True (the default).

Example:
    Mount the API under a custom prefix with an authentication guard::

        from litestar import Litestar
        from litestar_navigator import NavigatorPlugin, NavigatorPluginConfig

        app = Litestar(
            plugins=[
                NavigatorPlugin(
                    config=NavigatorPluginConfig(
                        workflow_dir="./workflows",
                        api_path_prefix="/api/navigator",
                        api_guards=[require_auth_guard],
                    )
                ),
            ],
        )
"""

from __future__ import annotations

from litestar_navigator.web.controllers import NavigationController, WorkflowDefinitionController, health
from litestar_navigator.web.dto import (
    HealthDTO,
    NavigationActionDTO,
    ServiceInfo,
    StartNavigationDTO,
    StateTokenDTO,
    TransitionsDTO,
)
from litestar_navigator.web.exceptions import exception_handlers

__all__ = [
    "HealthDTO",
    "NavigationActionDTO",
    "NavigationController",
    "ServiceInfo",
    "StartNavigationDTO",
    "StateTokenDTO",
    "TransitionsDTO",
    "WorkflowDefinitionController",
    "exception_handlers",
    "health",
]
