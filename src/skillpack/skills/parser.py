"""
Skill manifest parser

Reads a bundle's manifest into a SkillMeta record. Two sources are merged:

- SKILL.md YAML front matter (name, description, displayName, category, tags)
- package.json (name, description, displayName, keywords, and a ``skill``
  object carrying category / tags / displayName)

Front matter wins over package.json.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from .validation import is_valid_skill_name, strip_skill_prefix

logger = logging.getLogger(__name__)


CATEGORIES: tuple[str, ...] = (
    "Development Tools",
    "Business & Marketing",
    "Productivity & Organization",
    "Project Management",
    "Content Generation",
    "Finance & Compliance",
    "Data & Analysis",
    "Media Processing",
    "Design & Branding",
    "Web & Browser",
    "Research & Writing",
    "Science & Academic",
    "Education & Learning",
    "Communication",
    "Health & Wellness",
    "Travel & Lifestyle",
    "Event Management",
)

_CATEGORY_LOOKUP = {c.lower(): c for c in CATEGORIES}

SKILL_MD = "SKILL.md"
PACKAGE_JSON = "package.json"


def canonical_category(value: str) -> Optional[str]:
    """Case-insensitive lookup into CATEGORIES"""
    if not isinstance(value, str):
        return None
    return _CATEGORY_LOOKUP.get(value.strip().lower())


@dataclass(frozen=True)
class SkillMeta:
    """
    Catalog entry for one skill bundle.

    Immutable once loaded. ``source_dir`` is where the bundle lives on disk
    and is never serialized.
    """

    name: str
    display_name: str
    description: str
    category: str
    tags: tuple[str, ...] = ()
    source_dir: Path = field(default=Path("."), compare=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "displayName": self.display_name,
            "description": self.description,
            "category": self.category,
            "tags": list(self.tags),
        }


def split_front_matter(content: str) -> tuple[dict[str, Any], str]:
    """
    Split a markdown document into (front matter, body).

    Documents without a front matter block return ``({}, content)``.

    Raises:
        ValueError: the front matter block is not valid YAML mapping
    """
    match = SkillParser.FRONTMATTER_PATTERN.match(content)
    if not match:
        return {}, content

    try:
        data = yaml.safe_load(match.group(1)) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML front matter: {e}") from e

    if not isinstance(data, dict):
        raise ValueError("Front matter must be a mapping")
    return data, match.group(2)


def _as_tags(value: Any) -> list[str]:
    if isinstance(value, str):
        value = value.split(",")
    if not isinstance(value, (list, tuple)):
        return []
    tags = []
    for item in value:
        tag = str(item).strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tags


def _title_from_name(name: str) -> str:
    return " ".join(part.capitalize() for part in name.split("-") if part)


class SkillParser:
    """
    Manifest parser

    Turns one bundle directory into a SkillMeta, raising ValueError when
    the directory has no usable manifest.
    """

    FRONTMATTER_PATTERN = re.compile(r"^---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|$)(.*)$", re.DOTALL)

    def parse_directory(self, skill_dir: Path) -> SkillMeta:
        """
        Parse a bundle directory

        Args:
            skill_dir: Bundle directory

        Returns:
            SkillMeta

        Raises:
            ValueError: no manifest, or a required field is missing/invalid
        """
        front = self._read_front_matter(skill_dir / SKILL_MD)
        package = self._read_package_json(skill_dir / PACKAGE_JSON)

        if front is None and package is None:
            raise ValueError(f"No {SKILL_MD} or {PACKAGE_JSON} in {skill_dir}")

        return self._build_meta(front or {}, package or {}, skill_dir)

    def _read_front_matter(self, path: Path) -> Optional[dict[str, Any]]:
        if not path.is_file():
            return None
        content = path.read_text(encoding="utf-8")
        try:
            data, _ = split_front_matter(content)
        except ValueError as e:
            raise ValueError(f"{e} in {path}") from e
        return data

    def _read_package_json(self, path: Path) -> Optional[dict[str, Any]]:
        if not path.is_file():
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {path}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"{path} must contain a JSON object")
        return data

    def _build_meta(self, front: dict, package: dict, skill_dir: Path) -> SkillMeta:
        """Merge front matter and package.json into a SkillMeta"""
        skill_block = package.get("skill") if isinstance(package.get("skill"), dict) else {}

        # "@scope/skill-image" -> "image"
        package_name = str(package.get("name") or "").rsplit("/", 1)[-1]
        raw_name = front.get("name") or package_name or skill_dir.name
        name = strip_skill_prefix(str(raw_name).strip())
        if not is_valid_skill_name(name):
            raise ValueError(f"Invalid skill name '{raw_name}' in {skill_dir}")

        description = front.get("description") or package.get("description")
        if not description or not str(description).strip():
            raise ValueError(f"Missing required 'description' in {skill_dir}")

        raw_category = front.get("category") or skill_block.get("category") or ""
        category = canonical_category(raw_category)
        if category is None:
            raise ValueError(f"Unknown or missing category '{raw_category}' in {skill_dir}")

        display_name = (
            front.get("displayName")
            or front.get("display_name")
            or skill_block.get("displayName")
            or package.get("displayName")
            or _title_from_name(name)
        )

        tags = (
            _as_tags(front.get("tags"))
            or _as_tags(skill_block.get("tags"))
            or _as_tags(package.get("keywords"))
        )

        if skill_dir.name not in (name, f"skill-{name}"):
            logger.warning(
                f"Skill directory name '{skill_dir.name}' does not match skill name '{name}'"
            )

        return SkillMeta(
            name=name,
            display_name=str(display_name).strip(),
            description=" ".join(str(description).split()),
            category=category,
            tags=tuple(tags),
            source_dir=skill_dir.resolve(),
        )


# Global parser instance
skill_parser = SkillParser()


def parse_skill_directory(skill_dir: Path) -> SkillMeta:
    """Convenience: parse a bundle directory"""
    return skill_parser.parse_directory(skill_dir)
