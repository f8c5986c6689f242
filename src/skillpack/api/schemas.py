"""
Pydantic request models for the HTTP API.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class RemoveRequest(BaseModel):
    """Remove request body. Without ``for`` the full-source install is removed."""

    model_config = ConfigDict(populate_by_name=True)

    agent: str | None = Field(None, alias="for", description="claude | codex | gemini | all")
    scope: str = Field("global", description="global | project")


class InstallRequest(RemoveRequest):
    """Install request body."""

    overwrite: bool = Field(False, description="Replace an existing full-source install")
