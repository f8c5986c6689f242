"""
Skills MCP server

Exposes the skill catalog and installer over the MCP stdio transport.

Start with:
    skills mcp

Tools:
    - list_skills / search_skills / list_categories
    - get_skill_info / get_skill_docs / get_requirements
    - install_skill / remove_skill

Resources:
    - skills://registry: full catalog
    - skills://{name}: one skill with its requirements
"""

import json
import logging
from collections.abc import Callable
from typing import Any, Optional

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError

from ..errors import SkillError
from ..service import SkillService, first_failure, results_payload

logger = logging.getLogger(__name__)

INSTRUCTIONS = """Skills MCP Server - browse and install skill bundles.

Available tools:
- list_skills: list skills, optionally filtered by category
- search_skills: search by name, description or tag
- get_skill_info: metadata, install status and requirements
- get_skill_docs: SKILL.md / README.md / CLAUDE.md content
- get_requirements: environment variables, dependencies, CLI command
- list_categories: categories with skill counts
- install_skill: copy a skill into .skills/, or write a SKILL.md for an agent
- remove_skill: undo an install

Examples:
- search_skills(query="image")
- install_skill(name="image", agent="claude", scope="project")
"""


def _dump(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)


def _call(operation: Callable[[], Any]) -> str:
    """Run a service call, turning SkillError into an error-flagged tool result"""
    try:
        return _dump(operation())
    except SkillError as e:
        raise ToolError(e.message) from e


def create_mcp_server(service: SkillService) -> FastMCP:
    """
    Build the MCP server around a service

    Args:
        service: Shared skill service

    Returns:
        FastMCP instance, not yet running
    """
    mcp = FastMCP(name="skills", instructions=INSTRUCTIONS)

    @mcp.tool()
    def list_skills(category: Optional[str] = None) -> str:
        """
        List available skills.

        Args:
            category: Only skills in this category (e.g. "Content Generation")
        """
        return _call(lambda: service.list_skills(category=category))

    @mcp.tool()
    def search_skills(query: str) -> str:
        """
        Search skills by name, description or tag.

        Args:
            query: Search text
        """
        return _call(lambda: service.search(query))

    @mcp.tool()
    def get_skill_info(name: str) -> str:
        """
        Get a skill's metadata, install status and requirements.

        Args:
            name: Skill name (e.g. "image")
        """
        return _call(lambda: service.skill_info(name))

    @mcp.tool()
    def get_skill_docs(name: str, file: Optional[str] = None) -> str:
        """
        Get a skill's documentation.

        Args:
            name: Skill name
            file: skill, readme or claude (default: best available)
        """
        return _call(lambda: service.skill_docs(name, file=file))

    @mcp.tool()
    def get_requirements(name: str) -> str:
        """
        Get the environment variables, dependencies and CLI command a skill needs.

        Args:
            name: Skill name
        """
        return _call(lambda: service.requirements(name))

    @mcp.tool()
    def list_categories() -> str:
        """List all categories with their skill counts."""
        return _call(service.categories)

    @mcp.tool()
    def install_skill(
        name: str,
        agent: Optional[str] = None,
        scope: str = "global",
        overwrite: bool = False,
    ) -> str:
        """
        Install a skill.

        Without agent the full source is copied into .skills/. With agent
        (claude, codex, gemini or all) a SKILL.md is written to the agent's
        skills directory.

        Args:
            name: Skill name
            agent: Target agent, or "all"
            scope: global or project (agent installs only)
            overwrite: Replace an existing full-source install
        """
        try:
            results = service.install(name, agent=agent, scope=scope, overwrite=overwrite)
        except SkillError as e:
            raise ToolError(e.message) from e
        payload = _dump(results_payload(results))
        if first_failure(results):
            raise ToolError(payload)
        return payload

    @mcp.tool()
    def remove_skill(name: str, agent: Optional[str] = None, scope: str = "global") -> str:
        """
        Remove an installed skill.

        Args:
            name: Skill name
            agent: Target agent, or "all"; omit for the full-source install
            scope: global or project
        """
        try:
            results = service.remove(name, agent=agent, scope=scope)
        except SkillError as e:
            raise ToolError(e.message) from e
        payload = _dump(results_payload(results))
        if first_failure(results):
            raise ToolError(payload)
        return payload

    @mcp.resource("skills://registry", mime_type="application/json")
    def registry_resource() -> str:
        """Full skill catalog"""
        return _dump(service.registry_resource())

    @mcp.resource("skills://{name}", mime_type="application/json")
    def skill_resource(name: str) -> str:
        """One skill with its requirements"""
        return _dump(service.skill_resource(name))

    return mcp


def run_mcp_server(service: SkillService) -> None:
    """Serve over stdio until the client disconnects"""
    logger.info(f"Starting skills MCP server ({len(service.registry)} skills)")
    create_mcp_server(service).run()
