"""
skillpack - skill bundle manager

Installs skill bundles into a project (.skills/) or as SKILL.md descriptors
for Claude, Codex and Gemini, through a CLI, an MCP server and an HTTP API.
"""


def _resolve_version() -> str:
    """
    Resolve the package version.

    Prefers the source checkout's pyproject.toml (always current for
    editable installs), then installed package metadata.
    """
    import tomllib
    from importlib.metadata import PackageNotFoundError
    from importlib.metadata import version as meta_version
    from pathlib import Path

    pyproject_path = Path(__file__).parent.parent.parent / "pyproject.toml"
    if pyproject_path.exists():
        try:
            with open(pyproject_path, "rb") as f:
                return tomllib.load(f)["project"]["version"]
        except (OSError, KeyError, tomllib.TOMLDecodeError):
            pass

    try:
        return meta_version("skillpack")
    except PackageNotFoundError:
        return "0.0.0-dev"


__version__ = _resolve_version()

__author__ = "skillpack"
