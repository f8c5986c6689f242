"""
Skill service

The one place where catalog, requirements, docs and installer operations are
turned into plain records. The CLI, the MCP server and the HTTP API all call
this class, so equivalent inputs give equivalent outputs on every transport.

Usage:
    from skillpack.config import Settings
    from skillpack.service import SkillService

    service = SkillService.from_settings(Settings())
    service.skill_info("image")
"""

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional, Union

from .errors import ErrorType, FilesystemError, SkillError
from .skills.docs import DOC_FILES, generate_env_example, read_docs, synthesize_descriptor
from .skills.installer import InstallResult, Installer, RemoveResult, Scope, expand_agents
from .skills.parser import SkillMeta
from .skills.registry import SkillRegistry
from .skills.requirements import RequirementsExtractor
from .skills.validation import validate_name, validate_path

if TYPE_CHECKING:
    from .config import Settings

logger = logging.getLogger(__name__)

GITIGNORE_ENTRY = ".skills/"

Result = Union[InstallResult, RemoveResult]


class SkillService:
    """
    Transport-neutral skill operations

    Validation errors and unknown skills raise SkillError subclasses.
    Install and remove outcomes come back as result lists.
    """

    def __init__(
        self,
        registry: SkillRegistry,
        installer: Installer,
        extractor: Optional[RequirementsExtractor] = None,
    ):
        self.registry = registry
        self.installer = installer
        self.extractor = extractor or RequirementsExtractor()

    @classmethod
    def from_settings(cls, settings: "Settings") -> "SkillService":
        """Build the service (and its registry) from settings"""
        registry = SkillRegistry.from_directory(settings.skills_dir)
        installer = Installer(
            registry,
            install_root=settings.install_root,
            home_dir=settings.home_dir,
            project_dir=settings.project_root,
        )
        logger.debug(
            f"Service ready: {len(registry)} skills from {settings.skills_dir}, "
            f"installing into {settings.install_root}"
        )
        return cls(registry, installer)

    # ==================== records ====================

    def _listing(self, meta: SkillMeta, installed: set[str]) -> dict[str, Any]:
        record = meta.to_dict()
        record["installed"] = meta.name in installed
        return record

    def _installed(self) -> set[str]:
        return set(self.installer.list_installed())

    def _require(self, name: str) -> SkillMeta:
        validate_name(name)
        return self.registry.require(name)

    # ==================== catalog ====================

    def list_skills(
        self, category: Optional[str] = None, installed_only: bool = False
    ) -> list[dict[str, Any]]:
        """
        Listing records, optionally filtered

        Raises:
            UnknownCategoryError: category is not one of CATEGORIES
        """
        skills = self.registry.by_category(category) if category else self.registry.all()
        installed = self._installed()
        records = [self._listing(meta, installed) for meta in skills]
        if installed_only:
            records = [r for r in records if r["installed"]]
        return records

    def search(self, query: str) -> list[dict[str, Any]]:
        installed = self._installed()
        return [self._listing(meta, installed) for meta in self.registry.search(query)]

    def skill_info(self, name: str) -> dict[str, Any]:
        """Listing record plus requirements"""
        meta = self._require(name)
        record = self._listing(meta, self._installed())
        record.update(self.extractor.extract(meta).to_dict())
        return record

    def requirements(self, name: str) -> dict[str, Any]:
        meta = self._require(name)
        return self.extractor.extract(meta).to_dict()

    def skill_docs(self, name: str, file: Optional[str] = None) -> dict[str, Any]:
        """
        Documentation of a skill

        Args:
            name: Skill name
            file: skill, readme or claude; default is the best available doc

        Returns:
            {skill, hasSkillMd, hasReadme, hasClaudeMd, content}
        """
        if file is not None and file not in DOC_FILES:
            raise SkillError(
                f"Invalid docs file: {file}. Available: {', '.join(DOC_FILES)}",
                error_type=ErrorType.VALIDATION,
            )
        meta = self._require(name)
        docs = read_docs(meta)
        return {
            "skill": meta.name,
            "hasSkillMd": docs.skill_md is not None,
            "hasReadme": docs.readme is not None,
            "hasClaudeMd": docs.claude_md is not None,
            "content": docs.get(file) if file else docs.best_doc(),
        }

    def categories(self) -> list[dict[str, Any]]:
        return [
            {"name": name, "count": count} for name, count in self.registry.list_categories()
        ]

    def registry_resource(self) -> list[dict[str, Any]]:
        """Full catalog, as exposed by the ``skills://registry`` resource"""
        return self.list_skills()

    def skill_resource(self, name: str) -> dict[str, Any]:
        return self.skill_info(name)

    # ==================== install ====================

    def synthesize(self, meta: SkillMeta) -> Optional[str]:
        """Descriptor generator handed to agent installs"""
        return synthesize_descriptor(meta, self.extractor.extract(meta))

    def install(
        self,
        name: str,
        agent: Optional[str] = None,
        scope: str = "global",
        overwrite: bool = False,
    ) -> list[InstallResult]:
        """
        Install a skill

        Without ``agent`` the bundle is copied into the workspace. With an
        agent (or ``all``) a SKILL.md is written per agent; one failing
        agent does not stop the others.

        Raises:
            InvalidNameError / UnknownAgentError / UnknownScopeError
        """
        validate_name(name)
        if agent is None:
            return [self.installer.install_skill(name, overwrite=overwrite)]

        agents = expand_agents(agent)
        target_scope = Scope.parse(scope)
        return [
            self.installer.install_skill_for_agent(name, a, target_scope, self.synthesize)
            for a in agents
        ]

    def remove(
        self, name: str, agent: Optional[str] = None, scope: str = "global"
    ) -> list[RemoveResult]:
        """Remove a skill; absent installs report removed=False"""
        validate_name(name)
        if agent is None:
            return [self.installer.remove_skill(name)]

        agents = expand_agents(agent)
        target_scope = Scope.parse(scope)
        return [self.installer.remove_skill_for_agent(name, a, target_scope) for a in agents]

    # ==================== project ====================

    def init_project(self) -> dict[str, Any]:
        """
        Prepare the project for its installed skills

        Writes ``.env.example`` for the environment variables the installed
        skills read and adds ``.skills/`` to ``.gitignore``.

        Returns:
            {installed, envExample, envVars, gitignoreUpdated}
        """
        project = self.installer.project_dir
        installed = self.installer.list_installed()

        usage: dict[str, list[str]] = {}
        for name in installed:
            meta = self.registry.get(name)
            if meta is None:
                logger.warning(f"Installed skill '{name}' is not in the catalog, skipping")
                continue
            for env_var in self.extractor.extract(meta).env_vars:
                usage.setdefault(env_var, []).append(name)

        try:
            env_path = None
            content = generate_env_example(usage)
            if content:
                env_path = validate_path(".env.example", project)
                env_path.write_text(content, encoding="utf-8")
                logger.info(f"Wrote {env_path}")

            gitignore_updated = self._ensure_gitignore(validate_path(".gitignore", project))
        except OSError as e:
            raise FilesystemError.from_os_error(e) from e

        return {
            "installed": installed,
            "envExample": str(env_path) if env_path else None,
            "envVars": sorted(usage),
            "gitignoreUpdated": gitignore_updated,
        }

    def _ensure_gitignore(self, path: Path) -> bool:
        existing = path.read_text(encoding="utf-8") if path.exists() else ""
        if GITIGNORE_ENTRY in existing.splitlines():
            return False
        if not existing:
            separator = ""
        elif existing.endswith("\n"):
            separator = "\n"
        else:
            separator = "\n\n"
        with path.open("a", encoding="utf-8") as f:
            f.write(f"{separator}# Installed skills\n{GITIGNORE_ENTRY}\n")
        return True


def first_failure(results: Sequence[Result]) -> Optional[Result]:
    """First failed result, if any"""
    return next((r for r in results if not r.success), None)


def results_payload(results: Sequence[Result]) -> Union[dict[str, Any], list[dict[str, Any]]]:
    """
    JSON body for install/remove results

    A full-source operation gives one object; agent operations give a list
    with one entry per agent.
    """
    if len(results) == 1 and results[0].agent is None:
        return results[0].to_dict()
    return [r.to_dict() for r in results]
