"""HTTP API (FastAPI TestClient)."""

import pytest
from fastapi.testclient import TestClient

from skillpack.api.server import CORS_HEADERS, SECURITY_HEADERS, create_app


@pytest.fixture
def client(service):
    return TestClient(create_app(service))


class TestCatalogRoutes:
    def test_root(self, client):
        data = client.get("/").json()
        assert data["service"] == "skillpack"
        assert data["skills"] == 3

    def test_list(self, client):
        response = client.get("/api/skills")
        assert response.status_code == 200
        assert [r["name"] for r in response.json()] == ["deep-research", "image", "todo"]

    def test_list_by_category(self, client):
        response = client.get("/api/skills", params={"category": "Content Generation"})
        assert [r["name"] for r in response.json()] == ["image"]

    def test_list_unknown_category(self, client):
        response = client.get("/api/skills", params={"category": "Astrology"})
        assert response.status_code == 400
        assert "Unknown category" in response.json()["error"]

    def test_categories(self, client):
        categories = client.get("/api/categories").json()
        assert len(categories) == 17

    def test_search(self, client):
        response = client.get("/api/skills/search", params={"q": "ai"})
        assert [r["name"] for r in response.json()] == ["image", "todo"]

    def test_search_without_query(self, client):
        assert client.get("/api/skills/search").json() == []

    def test_detail_scenario(self, client):
        response = client.get("/api/skills/image")
        assert response.status_code == 200
        info = response.json()
        assert info["category"] == "Content Generation"
        assert "OPENAI_API_KEY" in info["envVars"]
        assert info["cliCommand"] == "skill-image"

    def test_detail_invalid_name(self, client):
        response = client.get("/api/skills/BAD.NAME")
        assert response.status_code == 400
        assert "Invalid" in response.json()["error"]

    def test_detail_not_found(self, client):
        response = client.get("/api/skills/nonexistent-xyz-123")
        assert response.status_code == 404
        assert "not found" in response.json()["error"]

    def test_docs(self, client):
        data = client.get("/api/skills/deep-research/docs").json()
        assert data["hasSkillMd"] is True
        assert data["content"].startswith("---")

    def test_docs_bad_file(self, client):
        response = client.get("/api/skills/image/docs", params={"file": "changelog"})
        assert response.status_code == 400


class TestInstallRoutes:
    def test_install_and_remove(self, client, project_dir):
        response = client.post("/api/skills/image/install")
        assert response.status_code == 200
        assert response.json()["success"] is True
        assert (project_dir / ".skills" / "skill-image").is_dir()

        again = client.post("/api/skills/image/install")
        assert again.status_code == 200
        assert again.json()["success"] is False

        assert client.post("/api/skills/image/install", json={"overwrite": True}).json()["success"]

        removed = client.post("/api/skills/image/remove")
        assert removed.json() == {"skill": "image", "removed": True, "success": True}
        assert client.post("/api/skills/image/remove").json()["removed"] is False

    def test_install_not_found(self, client):
        response = client.post("/api/skills/nonexistent-xyz-123/install")
        assert response.status_code == 404
        body = response.json()
        assert body["success"] is False
        assert "not found" in body["error"]

    def test_install_invalid_name(self, client):
        response = client.post("/api/skills/BAD.NAME/install")
        assert response.status_code == 400
        assert "Invalid" in response.json()["error"]

    def test_install_for_agent(self, client, home_dir):
        response = client.post("/api/skills/image/install", json={"for": "claude"})
        assert response.status_code == 200
        assert response.json()[0]["agent"] == "claude"
        assert (home_dir / ".claude" / "skills" / "skill-image" / "SKILL.md").is_file()

    def test_install_for_all_project_scope(self, client, project_dir):
        response = client.post(
            "/api/skills/deep-research/install", json={"for": "all", "scope": "project"}
        )
        assert [r["agent"] for r in response.json()] == ["claude", "codex", "gemini"]
        removed = client.post(
            "/api/skills/deep-research/remove", json={"for": "all", "scope": "project"}
        )
        assert all(r["removed"] for r in removed.json())

    def test_unknown_agent(self, client):
        response = client.post("/api/skills/image/install", json={"for": "cursor"})
        assert response.status_code == 400
        assert "Unknown agent" in response.json()["error"]

    def test_malformed_body(self, client):
        response = client.post("/api/skills/image/install", json={"overwrite": "maybe"})
        assert response.status_code == 400


class TestHeaders:
    def test_security_headers_on_api(self, client):
        response = client.get("/api/skills")
        for header, value in SECURITY_HEADERS.items():
            assert response.headers[header] == value

    def test_security_headers_on_errors(self, client):
        response = client.get("/api/skills/nonexistent-xyz-123")
        assert response.headers["X-Content-Type-Options"] == "nosniff"

    def test_options_preflight(self, client):
        response = client.options("/api/skills/image/install")
        assert response.status_code == 204
        for header, value in CORS_HEADERS.items():
            assert response.headers[header] == value

    def test_unknown_path(self, client):
        response = client.get("/no/such/path")
        assert response.status_code == 404
        assert response.json() == {"error": "Not found"}
