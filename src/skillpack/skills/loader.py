"""
Skill catalog loader

Scans the catalog root for bundle directories and parses their manifests:
- one bundle per immediate subdirectory
- directories without a usable manifest are logged and skipped
- result is sorted by name, first bundle wins on duplicate names
"""

import logging
from pathlib import Path

from .parser import SkillMeta, SkillParser

logger = logging.getLogger(__name__)

# Directories under the catalog root that never hold a bundle
IGNORED_DIRECTORIES = {"node_modules", "__pycache__"}


class SkillLoader:
    """
    Skill catalog loader

    Loading is idempotent: an unchanged directory tree always yields an
    equivalent catalog.
    """

    def __init__(self, parser: SkillParser | None = None):
        self.parser = parser or SkillParser()

    def discover_skill_directories(self, root: Path) -> list[Path]:
        """
        List candidate bundle directories in stable (sorted) order

        Args:
            root: Catalog root

        Returns:
            Bundle directories
        """
        if not root.is_dir():
            logger.warning(f"Skill directory not found: {root}")
            return []

        directories = []
        for item in sorted(root.iterdir(), key=lambda p: p.name):
            if not item.is_dir():
                continue
            if item.name.startswith(".") or item.name in IGNORED_DIRECTORIES:
                continue
            directories.append(item)
        return directories

    def load_skill(self, skill_dir: Path) -> SkillMeta | None:
        """
        Load one bundle

        Returns:
            SkillMeta, or None when the manifest cannot be parsed
        """
        try:
            return self.parser.parse_directory(skill_dir)
        except (ValueError, OSError, UnicodeDecodeError) as e:
            logger.warning(f"Skipping {skill_dir.name}: {e}")
            return None

    def load_from_directory(self, root: Path) -> list[SkillMeta]:
        """
        Load every bundle under ``root``

        Args:
            root: Catalog root

        Returns:
            SkillMeta list sorted by name
        """
        skills: dict[str, SkillMeta] = {}

        for skill_dir in self.discover_skill_directories(root):
            meta = self.load_skill(skill_dir)
            if meta is None:
                continue
            if meta.name in skills:
                logger.warning(
                    f"Duplicate skill '{meta.name}' in {skill_dir}, "
                    f"keeping {skills[meta.name].source_dir}"
                )
                continue
            skills[meta.name] = meta
            logger.debug(f"Loaded skill: {meta.name}")

        logger.info(f"Loaded {len(skills)} skills from {root}")
        return sorted(skills.values(), key=lambda m: m.name)


def load_catalog(root: Path | str) -> list[SkillMeta]:
    """Load the catalog under ``root``"""
    return SkillLoader().load_from_directory(Path(root))
