"""CLI adapter (typer CliRunner)."""

import json

import pytest
from typer.testing import CliRunner

from skillpack.main import app

runner = CliRunner()


@pytest.fixture
def invoke(cli_env):
    def _invoke(*args):
        return runner.invoke(app, list(args))

    return _invoke


class TestBrowse:
    def test_list_json(self, invoke):
        result = invoke("list", "--json")
        assert result.exit_code == 0
        records = json.loads(result.stdout)
        assert [r["name"] for r in records] == ["deep-research", "image", "todo"]

    def test_list_table(self, invoke):
        result = invoke("list")
        assert result.exit_code == 0
        assert "image" in result.stdout

    def test_list_unknown_category(self, invoke):
        result = invoke("list", "--category", "Astrology")
        assert result.exit_code == 1
        assert "Unknown category" in result.output

    def test_search_json(self, invoke):
        result = invoke("search", "citations", "--json")
        assert result.exit_code == 0
        assert [r["name"] for r in json.loads(result.stdout)] == ["deep-research"]

    def test_search_blank(self, invoke):
        result = invoke("search", "   ", "--json")
        assert result.exit_code == 0
        assert json.loads(result.stdout) == []

    def test_info_scenario(self, invoke):
        result = invoke("info", "image", "--json")
        assert result.exit_code == 0
        info = json.loads(result.stdout)
        assert info["category"] == "Content Generation"
        assert info["cliCommand"] == "skill-image"

    def test_info_human(self, invoke):
        result = invoke("info", "image")
        assert result.exit_code == 0
        assert "Image Generator" in result.stdout

    def test_requires_json(self, invoke):
        result = invoke("requires", "image", "--json")
        assert result.exit_code == 0
        requirements = json.loads(result.stdout)
        assert "OPENAI_API_KEY" in requirements["envVars"]
        assert requirements["cliCommand"] == "skill-image"

    def test_docs(self, invoke):
        result = invoke("docs", "image")
        assert result.exit_code == 0
        assert result.stdout.startswith("# Image Generator")

    def test_docs_missing_file(self, invoke):
        result = invoke("docs", "image", "--file", "claude")
        assert result.exit_code == 1
        assert "No CLAUDE.md found" in result.output

    def test_categories_json(self, invoke):
        result = invoke("categories", "--json")
        assert result.exit_code == 0
        categories = json.loads(result.stdout)
        assert len(categories) == 17
        assert sum(c["count"] for c in categories) == 3

    def test_version(self, invoke):
        result = invoke("--version")
        assert result.exit_code == 0
        assert "skillpack v" in result.stdout


class TestErrors:
    @pytest.mark.parametrize("command", ["info", "requires", "docs", "install", "remove"])
    def test_invalid_name(self, invoke, command):
        result = invoke(command, "BAD.NAME")
        assert result.exit_code != 0
        assert "Invalid" in result.output

    @pytest.mark.parametrize("command", ["info", "requires", "docs", "install"])
    def test_not_found(self, invoke, command):
        result = invoke(command, "nonexistent-xyz-123")
        assert result.exit_code != 0
        assert "not found" in result.output

    def test_install_not_found_json(self, invoke):
        result = invoke("install", "nonexistent-xyz-123", "--json")
        assert result.exit_code == 1
        payload = json.loads(result.stdout)
        assert payload["success"] is False
        assert "not found" in payload["error"]

    def test_unknown_agent(self, invoke):
        result = invoke("install", "image", "--for", "cursor")
        assert result.exit_code == 1
        assert "Unknown agent" in result.output


class TestInstall:
    def test_install_and_remove(self, invoke, project_dir):
        result = invoke("install", "image", "--json")
        assert result.exit_code == 0
        assert json.loads(result.stdout)["success"] is True
        assert (project_dir / ".skills" / "skill-image" / "package.json").is_file()

        again = invoke("install", "image")
        assert again.exit_code == 1
        assert "Already installed" in again.output

        assert invoke("install", "image", "--overwrite").exit_code == 0

        removed = invoke("remove", "image", "--json")
        assert removed.exit_code == 0
        assert json.loads(removed.stdout) == {"skill": "image", "removed": True, "success": True}

        second = invoke("remove", "image", "--json")
        assert second.exit_code == 0
        assert json.loads(second.stdout)["removed"] is False

    def test_install_several(self, invoke):
        result = invoke("install", "image", "todo", "--json")
        assert result.exit_code == 0
        assert [p["skill"] for p in json.loads(result.stdout)] == ["image", "todo"]

    def test_install_for_all_agents(self, invoke, home_dir):
        result = invoke("install", "image", "--for", "all", "--json")
        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert [p["agent"] for p in payload] == ["claude", "codex", "gemini"]
        for agent in ("claude", "codex", "gemini"):
            assert (home_dir / f".{agent}" / "skills" / "skill-image" / "SKILL.md").is_file()

    def test_install_for_agent_project_scope(self, invoke, project_dir):
        result = invoke("install", "deep-research", "--for", "claude", "--scope", "project")
        assert result.exit_code == 0
        assert (project_dir / ".claude" / "skills" / "skill-deep-research" / "SKILL.md").is_file()

    def test_init(self, invoke, project_dir):
        invoke("install", "image")
        result = invoke("init")
        assert result.exit_code == 0
        assert "OPENAI_API_KEY=" in (project_dir / ".env.example").read_text()
        assert ".skills/" in (project_dir / ".gitignore").read_text()

    def test_init_without_installs(self, invoke, project_dir):
        result = invoke("init")
        assert result.exit_code == 0
        assert "No skills installed" in result.stdout
        assert not (project_dir / ".gitignore").exists()
