"""Application factory for running the navigator as a standalone service.

Example:
    Serve with uvicorn (``pip install litestar-navigator[server]``)::

        NAVIGATOR_WORKFLOW_DIR=./workflows uvicorn --factory litestar_navigator.app:create_app
"""

from __future__ import annotations

from litestar import Litestar

from litestar_navigator.log import get_logging_config
from litestar_navigator.plugin import NavigatorPlugin, NavigatorPluginConfig
from litestar_navigator.settings import NavigatorSettings

__all__ = ["create_app"]


def create_app(settings: NavigatorSettings | None = None) -> Litestar:
    """Create the navigator application.

    Args:
        settings: Service settings. Read from ``NAVIGATOR_*`` environment
            variables when omitted.

    Returns:
        The configured Litestar application.
    """
    settings = settings or NavigatorSettings()
    plugin = NavigatorPlugin(
        config=NavigatorPluginConfig(
            workflow_dir=settings.workflow_dir,
            meta_workflow_id=settings.meta_workflow_id,
            api_path_prefix=settings.api_path_prefix,
            service_name=settings.service_name,
            service_version=settings.service_version,
        )
    )
    return Litestar(
        plugins=[plugin],
        logging_config=get_logging_config(settings.log_level),
    )
