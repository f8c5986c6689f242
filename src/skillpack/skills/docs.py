"""
Skill documentation

- read_docs: the bundle's SKILL.md / README.md / CLAUDE.md
- synthesize_descriptor: the SKILL.md written for agent installs
- generate_env_example: .env.example for a project's installed skills
"""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml

from .parser import SKILL_MD, SkillMeta
from .requirements import Requirements

logger = logging.getLogger(__name__)

README_MD = "README.md"
CLAUDE_MD = "CLAUDE.md"

# --file values accepted by the docs command
DOC_FILES = {
    "skill": SKILL_MD,
    "readme": README_MD,
    "claude": CLAUDE_MD,
}


@dataclass(frozen=True)
class SkillDocs:
    """Documentation files of one bundle; None when the file is absent"""

    skill_md: Optional[str] = None
    readme: Optional[str] = None
    claude_md: Optional[str] = None

    def best_doc(self) -> Optional[str]:
        """SKILL.md, then README.md, then CLAUDE.md"""
        return self.skill_md or self.readme or self.claude_md

    def get(self, key: str) -> Optional[str]:
        """Content by --file key (skill, readme, claude)"""
        return {
            "skill": self.skill_md,
            "readme": self.readme,
            "claude": self.claude_md,
        }[key]


def _read_if_exists(path: Path) -> Optional[str]:
    if not path.is_file():
        return None
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Cannot read {path}: {e}")
        return None


def read_docs(meta: SkillMeta) -> SkillDocs:
    return SkillDocs(
        skill_md=_read_if_exists(meta.source_dir / SKILL_MD),
        readme=_read_if_exists(meta.source_dir / README_MD),
        claude_md=_read_if_exists(meta.source_dir / CLAUDE_MD),
    )


def _strip_title(markdown: str) -> str:
    """Drop a leading ``# Title`` line and the blank line after it"""
    lines = markdown.splitlines()
    start = 0
    if lines and lines[0].startswith("# "):
        start = 1
        if len(lines) > 1 and not lines[1].strip():
            start = 2
    return "\n".join(lines[start:]).strip()


def synthesize_descriptor(
    meta: SkillMeta, requirements: Optional[Requirements] = None
) -> Optional[str]:
    """
    Build the SKILL.md an agent runtime reads

    The bundle's own SKILL.md is used verbatim when it has one. Otherwise
    a descriptor is generated from the catalog entry and README.md (or
    CLAUDE.md).

    Args:
        meta: Catalog entry
        requirements: Extracted requirements, used for the CLI section

    Returns:
        Descriptor text, or None when the bundle directory is gone
    """
    if not meta.source_dir.is_dir():
        logger.warning(f"Source directory missing for {meta.name}: {meta.source_dir}")
        return None

    docs = read_docs(meta)
    if docs.skill_md:
        return docs.skill_md

    front_matter = yaml.safe_dump(
        {"name": meta.name, "description": meta.description},
        sort_keys=False,
        allow_unicode=True,
        width=1000,
    )

    sections = [f"# {meta.display_name}", "", meta.description]

    body_source = docs.readme or docs.claude_md
    if body_source:
        body = _strip_title(body_source)
        if body:
            sections += ["", body]

    if requirements and requirements.cli_command:
        sections += ["", "## CLI", "", "```bash", f"{requirements.cli_command} --help", "```"]

    sections += ["", f"Category: {meta.category}", f"Tags: {', '.join(meta.tags)}"]

    return f"---\n{front_matter}---\n\n" + "\n".join(sections) + "\n"


def generate_env_example(entries: Mapping[str, Sequence[str]]) -> str:
    """
    Render a .env.example

    Variables are sorted and grouped by their prefix (``OPENAI_API_KEY`` ->
    ``OPENAI``), each preceded by the skills that use it.

    Args:
        entries: Variable name -> names of the skills that read it

    Returns:
        File content, or an empty string when there are no variables
    """
    if not entries:
        return ""

    lines = [
        "# Environment variables for installed skills",
        "# Auto-generated by: skills init",
        "",
    ]

    last_prefix = ""
    for env_var in sorted(entries):
        prefix = env_var.split("_", 1)[0]
        if prefix != last_prefix:
            if last_prefix:
                lines.append("")
            lines.append(f"# {prefix}")
            last_prefix = prefix
        lines.append(f"# Used by: {', '.join(entries[env_var])}")
        lines.append(f"{env_var}=")

    return "\n".join(lines) + "\n"
