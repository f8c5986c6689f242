"""MCP server tools and resources (in-process FastMCP calls)."""

import json

import pytest
from mcp.server.fastmcp.exceptions import ToolError

from skillpack.mcp_servers.skills import create_mcp_server


@pytest.fixture
def mcp(service):
    return create_mcp_server(service)


def _text(result):
    # call_tool returns either content blocks or (content blocks, structured output)
    content = result[0] if isinstance(result, tuple) else result
    return json.loads(content[0].text)


async def _resource(mcp, uri):
    contents = list(await mcp.read_resource(uri))
    return json.loads(contents[0].content)


class TestTools:
    async def test_registered_tools(self, mcp):
        names = {tool.name for tool in await mcp.list_tools()}
        assert names == {
            "list_skills",
            "search_skills",
            "get_skill_info",
            "get_skill_docs",
            "get_requirements",
            "list_categories",
            "install_skill",
            "remove_skill",
        }

    async def test_list_matches_service(self, mcp, service):
        assert _text(await mcp.call_tool("list_skills", {})) == service.list_skills()

    async def test_search(self, mcp):
        records = _text(await mcp.call_tool("search_skills", {"query": "citations"}))
        assert [r["name"] for r in records] == ["deep-research"]

    async def test_info_scenario(self, mcp):
        info = _text(await mcp.call_tool("get_skill_info", {"name": "image"}))
        assert info["category"] == "Content Generation"
        assert "OPENAI_API_KEY" in info["envVars"]
        assert info["cliCommand"] == "skill-image"

    async def test_requirements(self, mcp, service):
        result = _text(await mcp.call_tool("get_requirements", {"name": "deep-research"}))
        assert result == service.requirements("deep-research")

    async def test_docs(self, mcp):
        docs = _text(await mcp.call_tool("get_skill_docs", {"name": "image", "file": "readme"}))
        assert docs["content"].startswith("# Image Generator")

    async def test_categories(self, mcp):
        assert len(_text(await mcp.call_tool("list_categories", {}))) == 17

    async def test_invalid_name_is_an_error(self, mcp):
        with pytest.raises(ToolError, match="Invalid"):
            await mcp.call_tool("get_skill_info", {"name": "BAD.NAME"})

    async def test_unknown_skill_is_an_error(self, mcp):
        with pytest.raises(ToolError, match="not found"):
            await mcp.call_tool("get_skill_info", {"name": "nonexistent-xyz-123"})


class TestInstallTools:
    async def test_install_and_remove(self, mcp, project_dir):
        installed = _text(await mcp.call_tool("install_skill", {"name": "image"}))
        assert installed["success"] is True
        assert (project_dir / ".skills" / "skill-image").is_dir()

        removed = _text(await mcp.call_tool("remove_skill", {"name": "image"}))
        assert removed == {"skill": "image", "removed": True, "success": True}

    async def test_install_for_agent(self, mcp, home_dir):
        results = _text(await mcp.call_tool("install_skill", {"name": "image", "agent": "gemini"}))
        assert results[0]["agent"] == "gemini"
        assert (home_dir / ".gemini" / "skills" / "skill-image" / "SKILL.md").is_file()

    async def test_install_not_found(self, mcp):
        with pytest.raises(ToolError, match="not found"):
            await mcp.call_tool("install_skill", {"name": "nonexistent-xyz-123"})

    async def test_already_installed(self, mcp):
        await mcp.call_tool("install_skill", {"name": "todo"})
        with pytest.raises(ToolError, match="Already installed"):
            await mcp.call_tool("install_skill", {"name": "todo"})

    async def test_unknown_agent(self, mcp):
        with pytest.raises(ToolError, match="Unknown agent"):
            await mcp.call_tool("install_skill", {"name": "image", "agent": "cursor"})


class TestResources:
    async def test_registry(self, mcp, service):
        assert await _resource(mcp, "skills://registry") == service.list_skills()

    async def test_skill(self, mcp):
        info = await _resource(mcp, "skills://image")
        assert info["name"] == "image"
        assert info["cliCommand"] == "skill-image"
