"""Environment-driven settings.

Every setting can be given through a ``NAVIGATOR_``-prefixed environment
variable, e.g. ``NAVIGATOR_WORKFLOW_DIR=./workflows``.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = ["NavigatorSettings"]


class NavigatorSettings(BaseSettings):
    """Settings for the navigation service."""

    model_config = SettingsConfigDict(env_prefix="NAVIGATOR_", extra="ignore")

    workflow_dir: Path = Field(default=Path("./workflows"), description="Directory holding <id>.json definitions.")
    meta_workflow_id: str = Field(
        default="meta",
        description="Reserved workflow id naming the shared-content namespace; never navigable.",
    )
    service_name: str = "workflow-navigator"
    service_version: str = "1.0.0"
    api_path_prefix: str = "/navigator"
    log_level: str = Field(default="INFO", pattern=r"(?i)^(debug|info|warning|error|critical)$")
