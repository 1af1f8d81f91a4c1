"""Minimal example of litestar-navigator integration.

This example serves the definitions of ``./workflows`` and adds one custom
route that starts a release run through the injected navigator.

Run with:
    cd examples/minimal
    litestar run

Or:
    uvicorn app:app --reload

Then walk a run:
    curl -X POST localhost:8000/releases/2.0.0
    curl -X POST localhost:8000/navigator/navigation/action \\
        -H 'Content-Type: application/json' \\
        -d '{"state": "<token>", "action": "complete_step", "step_id": "bump"}'
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from litestar import Litestar, post

from litestar_navigator import NavigatorPlugin, NavigatorPluginConfig, WorkflowNavigator
from litestar_navigator.log import get_logging_config


@post("/releases/{version:str}")
async def start_release(version: str, workflow_navigator: WorkflowNavigator) -> dict[str, Any]:
    """Start a release run and return the token with the first actions."""
    response = workflow_navigator.start("release", {"version": version})
    return {
        "state": response.state,
        "message": response.message,
        "next": [action.step for action in response.available_actions.required],
    }


app = Litestar(
    route_handlers=[start_release],
    plugins=[
        NavigatorPlugin(
            config=NavigatorPluginConfig(workflow_dir=Path(__file__).parent / "workflows"),
        ),
    ],
    logging_config=get_logging_config(),
    debug=True,
)
