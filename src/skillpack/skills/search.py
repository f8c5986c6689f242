"""
Skill search index

Case-insensitive substring search over name, display name, description
and tags. Matches keep catalog order.
"""

from collections.abc import Iterable

from .parser import SkillMeta


class SearchIndex:
    """Substring index over a fixed catalog"""

    def __init__(self, skills: Iterable[SkillMeta]):
        self._entries: list[tuple[SkillMeta, tuple[str, ...]]] = [
            (meta, self._fields(meta)) for meta in skills
        ]

    @staticmethod
    def _fields(meta: SkillMeta) -> tuple[str, ...]:
        return (
            meta.name.lower(),
            meta.display_name.lower(),
            meta.description.lower(),
            *(tag.lower() for tag in meta.tags),
        )

    def search(self, query: str) -> list[SkillMeta]:
        """
        Search the catalog

        Args:
            query: Search text; empty or whitespace-only matches nothing

        Returns:
            Matching skills in catalog order
        """
        needle = (query or "").strip().lower()
        if not needle:
            return []
        return [meta for meta, fields in self._entries if any(needle in f for f in fields)]
