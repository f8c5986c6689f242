"""
Skill registry

Read-only view over a loaded catalog. Built once at process start and
handed to every adapter.
"""

import logging
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Optional

from ..errors import SkillNotFoundError, UnknownCategoryError
from .loader import load_catalog
from .parser import CATEGORIES, SkillMeta, canonical_category
from .search import SearchIndex

logger = logging.getLogger(__name__)


class SkillRegistry:
    """
    Skill registry

    Provides:
    - lookup by name
    - filtering by category
    - category counts
    - search
    """

    def __init__(self, skills: Iterable[SkillMeta] = ()):
        self._skills: dict[str, SkillMeta] = {}
        for meta in skills:
            if meta.name in self._skills:
                logger.warning(f"Skill '{meta.name}' already registered, keeping first")
                continue
            self._skills[meta.name] = meta
        self._index = SearchIndex(self._skills.values())

    @classmethod
    def from_directory(cls, root: Path | str) -> "SkillRegistry":
        """Load the catalog under ``root`` into a registry"""
        return cls(load_catalog(root))

    def all(self) -> list[SkillMeta]:
        """All skills in catalog order"""
        return list(self._skills.values())

    def get(self, name: str) -> Optional[SkillMeta]:
        return self._skills.get(name)

    def require(self, name: str) -> SkillMeta:
        """
        Get a skill or fail

        Raises:
            SkillNotFoundError: name is not in the catalog
        """
        meta = self._skills.get(name)
        if meta is None:
            raise SkillNotFoundError(name)
        return meta

    def by_category(self, category: str) -> list[SkillMeta]:
        """
        Skills in one category

        Args:
            category: Category name, matched case-insensitively

        Raises:
            UnknownCategoryError: category is not one of CATEGORIES
        """
        canonical = canonical_category(category)
        if canonical is None:
            raise UnknownCategoryError(category, CATEGORIES)
        return [meta for meta in self._skills.values() if meta.category == canonical]

    def list_categories(self) -> list[tuple[str, int]]:
        """Every category with its skill count, in the fixed category order"""
        counts = dict.fromkeys(CATEGORIES, 0)
        for meta in self._skills.values():
            counts[meta.category] += 1
        return list(counts.items())

    def search(self, query: str) -> list[SkillMeta]:
        return self._index.search(query)

    def __len__(self) -> int:
        return len(self._skills)

    def __contains__(self, name: object) -> bool:
        return name in self._skills

    def __iter__(self) -> Iterator[SkillMeta]:
        return iter(self._skills.values())
