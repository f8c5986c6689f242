"""
skillpack skill catalog

- parser: SKILL.md / package.json manifests -> SkillMeta
- loader: catalog directory scan
- registry: lookup, categories, search
- requirements: static env var / dependency scan
- docs: documentation and SKILL.md descriptors
- installer: full-source and agent installs
"""

from .docs import SkillDocs, generate_env_example, read_docs, synthesize_descriptor
from .installer import (
    AGENT_DIRECTORIES,
    Agent,
    InstallResult,
    Installer,
    InstallTarget,
    RemoveResult,
    Scope,
    agent_skill_path,
    expand_agents,
)
from .loader import SkillLoader, load_catalog
from .parser import CATEGORIES, SkillMeta, SkillParser
from .registry import SkillRegistry
from .requirements import Requirements, RequirementsExtractor
from .search import SearchIndex
from .validation import normalize_skill_name, validate_name, validate_path

__all__ = [
    # Data
    "CATEGORIES",
    "SkillMeta",
    "Requirements",
    "SkillDocs",
    # Catalog
    "SkillParser",
    "SkillLoader",
    "load_catalog",
    "SkillRegistry",
    "SearchIndex",
    "RequirementsExtractor",
    # Docs
    "read_docs",
    "synthesize_descriptor",
    "generate_env_example",
    # Install
    "Agent",
    "Scope",
    "AGENT_DIRECTORIES",
    "InstallTarget",
    "InstallResult",
    "RemoveResult",
    "Installer",
    "agent_skill_path",
    "expand_agents",
    # Validation
    "validate_name",
    "validate_path",
    "normalize_skill_name",
]
