"""Shared fixtures: a small fabricated skill catalog under tmp_path."""

import json
from pathlib import Path

import pytest

from skillpack.service import SkillService
from skillpack.skills.installer import Installer
from skillpack.skills.registry import SkillRegistry


def write(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def build_catalog(root: Path) -> Path:
    """
    Catalog contents:
    - skill-image: package.json only (no SKILL.md), exposes a bin
    - skill-deep-research: SKILL.md front matter, Python sources
    - todo: unprefixed directory, lower-case category in package.json
    - skill-broken: no description, skipped by the loader
    """
    image = root / "skill-image"
    write(
        image / "package.json",
        json.dumps(
            {
                "name": "@skills/skill-image",
                "description": "Generate images with AI providers",
                "displayName": "Image Generator",
                "keywords": ["images", "dall-e"],
                "bin": {"skill-image": "./bin/cli.js"},
                "dependencies": {"openai": "^4.0.0", "commander": "^12.0.0"},
                "skill": {"category": "Content Generation", "tags": ["image", "generation", "ai"]},
            }
        ),
    )
    write(
        image / "src" / "index.ts",
        'const key = process.env.OPENAI_API_KEY;\n'
        'const region = process.env["AWS_REGION"];\n'
        'spawn("ffmpeg", ["-i", input, output]);\n',
    )
    write(image / "README.md", "# Image Generator\n\nCreate images from prompts.\n\n## Usage\n\nRun it.\n")
    write(image / "node_modules" / "dep" / "index.js", "process.env.SHOULD_NOT_APPEAR;\n")

    research = root / "skill-deep-research"
    write(
        research / "SKILL.md",
        "---\n"
        "name: deep-research\n"
        "description: Multi-source web research with citations\n"
        "category: Research & Writing\n"
        "tags: [research, web, citations]\n"
        "---\n\n"
        "# Deep Research\n\nAsk a question, get a report.\n",
    )
    write(
        research / "main.py",
        'import os\nimport subprocess\n\n'
        'KEY = os.getenv("EXA_API_KEY")\n'
        'subprocess.run(["pandoc", "report.md", "-o", "report.pdf"])\n',
    )
    write(research / "requirements.txt", "requests>=2.31\n# pinned\nhttpx==0.27.0\n-e .\n")
    write(research / ".env.example", "EXA_API_KEY=\nFIRECRAWL_API_KEY=\n")

    todo = root / "todo"
    write(
        todo / "package.json",
        json.dumps(
            {
                "name": "skill-todo",
                "description": "Track todos in plain text",
                "skill": {"category": "productivity & organization"},
            }
        ),
    )

    write(root / "skill-broken" / "SKILL.md", "---\nname: broken\ncategory: Communication\n---\n")
    (root / "node_modules" / "skill-ignored").mkdir(parents=True)
    (root / ".hidden").mkdir()
    return root


@pytest.fixture
def catalog_dir(tmp_path):
    return build_catalog(tmp_path / "catalog")


@pytest.fixture
def project_dir(tmp_path):
    path = tmp_path / "project"
    path.mkdir()
    return path


@pytest.fixture
def home_dir(tmp_path):
    path = tmp_path / "home"
    path.mkdir()
    return path


@pytest.fixture
def registry(catalog_dir):
    return SkillRegistry.from_directory(catalog_dir)


@pytest.fixture
def installer(registry, project_dir, home_dir):
    return Installer(
        registry,
        install_root=project_dir / ".skills",
        home_dir=home_dir,
        project_dir=project_dir,
    )


@pytest.fixture
def service(registry, installer):
    return SkillService(registry, installer)


@pytest.fixture
def cli_env(monkeypatch, catalog_dir, project_dir, home_dir):
    """Point the CLI's settings at the fabricated catalog"""
    monkeypatch.setenv("SKILLPACK_SKILLS_DIR", str(catalog_dir))
    monkeypatch.setenv("SKILLPACK_PROJECT_ROOT", str(project_dir))
    monkeypatch.setenv("SKILLPACK_HOME_DIR", str(home_dir))
    # keep log records (skill-broken, failed installs) out of captured output
    monkeypatch.setenv("SKILLPACK_LOG_LEVEL", "CRITICAL")
    monkeypatch.chdir(project_dir)
    return project_dir
