"""
Skill installer

Two install modes:
- full-source: copy the bundle into ``<project>/.skills/skill-<name>``
- agent-targeted: write one generated SKILL.md into an agent's skills
  directory (``~/.claude/skills/skill-<name>/SKILL.md`` and friends)

Install state is read back from the filesystem; the destination of each
mode is computed by a single function that every operation goes through.
Trees are staged next to the destination and renamed into place, so a
reader never sees a half-copied install.
"""

import errno
import logging
import os
import shutil
import tempfile
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from ..errors import (
    AlreadyInstalledError,
    ErrorType,
    FilesystemError,
    SkillError,
    UnknownAgentError,
    UnknownScopeError,
)
from .parser import SKILL_MD, SkillMeta
from .registry import SkillRegistry
from .validation import SKILL_DIR_PREFIX, normalize_skill_name, validate_name, validate_path

logger = logging.getLogger(__name__)

# Never copied into a full-source install
COPY_IGNORE = shutil.ignore_patterns(".git", "node_modules")

ALL_AGENTS = "all"


class Agent(Enum):
    """Agent runtimes that read SKILL.md descriptors"""

    CLAUDE = "claude"
    CODEX = "codex"
    GEMINI = "gemini"

    @classmethod
    def parse(cls, value: "str | Agent") -> "Agent":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise UnknownAgentError(str(value), [a.value for a in cls]) from None


class Scope(Enum):
    GLOBAL = "global"
    PROJECT = "project"

    @classmethod
    def parse(cls, value: "str | Scope") -> "Scope":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise UnknownScopeError(str(value), [s.value for s in cls]) from None


# Agent -> config directory, under the home dir (global) or the project (project)
AGENT_DIRECTORIES: dict[Agent, str] = {
    Agent.CLAUDE: ".claude",
    Agent.CODEX: ".codex",
    Agent.GEMINI: ".gemini",
}

_unmapped = set(Agent) - set(AGENT_DIRECTORIES)
if _unmapped:
    raise RuntimeError(f"No skills directory configured for agents: {sorted(a.value for a in _unmapped)}")


def expand_agents(value: "str | Agent") -> list[Agent]:
    """``all`` -> every agent, anything else -> that one agent"""
    if isinstance(value, str) and value.strip().lower() == ALL_AGENTS:
        return list(Agent)
    return [Agent.parse(value)]


@dataclass(frozen=True)
class InstallTarget:
    agent: Agent
    scope: Scope


def agent_skills_dir(agent: Agent, scope: Scope, home_dir: Path, project_dir: Path) -> Path:
    base = home_dir if scope is Scope.GLOBAL else project_dir
    return base / AGENT_DIRECTORIES[agent] / "skills"


def agent_skill_path(
    name: str, agent: Agent, scope: Scope, home_dir: Path, project_dir: Path
) -> Path:
    """Directory that holds the SKILL.md of ``name`` for one agent target"""
    return agent_skills_dir(agent, scope, home_dir, project_dir) / normalize_skill_name(name)


@dataclass(frozen=True)
class InstallResult:
    """Outcome of one install"""

    skill: str
    success: bool
    error: Optional[str] = None
    error_type: Optional[ErrorType] = None
    path: Optional[str] = None
    agent: Optional[str] = None
    scope: Optional[str] = None

    @classmethod
    def failed(
        cls, skill: str, error: SkillError, target: Optional[InstallTarget] = None
    ) -> "InstallResult":
        return cls(
            skill=skill,
            success=False,
            error=error.message,
            error_type=error.error_type,
            agent=target.agent.value if target else None,
            scope=target.scope.value if target else None,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"skill": self.skill}
        if self.agent is not None:
            data["agent"] = self.agent
            data["scope"] = self.scope
        data["success"] = self.success
        if self.error is not None:
            data["error"] = self.error
        if self.path is not None:
            data["path"] = self.path
        return data


@dataclass(frozen=True)
class RemoveResult:
    """Outcome of one removal; removing something absent is still a success"""

    skill: str
    removed: bool
    success: bool = True
    error: Optional[str] = None
    error_type: Optional[ErrorType] = None
    agent: Optional[str] = None
    scope: Optional[str] = None

    @classmethod
    def failed(
        cls, skill: str, error: SkillError, target: Optional[InstallTarget] = None
    ) -> "RemoveResult":
        return cls(
            skill=skill,
            removed=False,
            success=False,
            error=error.message,
            error_type=error.error_type,
            agent=target.agent.value if target else None,
            scope=target.scope.value if target else None,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"skill": self.skill}
        if self.agent is not None:
            data["agent"] = self.agent
            data["scope"] = self.scope
        data["removed"] = self.removed
        data["success"] = self.success
        if self.error is not None:
            data["error"] = self.error
        return data


Synthesizer = Callable[[SkillMeta], Optional[str]]


class Installer:
    """
    Skill installer

    Args:
        registry: Catalog to install from
        install_root: Directory receiving full-source installs (``.skills``)
        home_dir: Base of global agent directories
        project_dir: Base of project agent directories
    """

    def __init__(
        self,
        registry: SkillRegistry,
        install_root: Path,
        home_dir: Path,
        project_dir: Path,
    ):
        self.registry = registry
        self.install_root = Path(install_root)
        self.home_dir = Path(home_dir)
        self.project_dir = Path(project_dir)

    # ==================== destinations ====================

    def skill_install_path(self, name: str) -> Path:
        return self.install_root / normalize_skill_name(name)

    def agent_skill_path(self, name: str, agent: Agent, scope: Scope) -> Path:
        return agent_skill_path(name, agent, scope, self.home_dir, self.project_dir)

    def _agent_skills_dir(self, target: InstallTarget) -> Path:
        # the agent directory itself may be a symlink (dotfile managers);
        # containment is checked for the skill-<name> entry only
        return agent_skills_dir(target.agent, target.scope, self.home_dir, self.project_dir)

    # ==================== state ====================

    def is_installed(self, name: str) -> bool:
        return self.skill_install_path(name).is_dir()

    def is_installed_for_agent(self, name: str, agent: Agent, scope: Scope) -> bool:
        return (self.agent_skill_path(name, agent, scope) / SKILL_MD).is_file()

    def list_installed(self) -> list[str]:
        """Names of the full-source installs under install_root"""
        if not self.install_root.is_dir():
            return []
        return sorted(
            item.name[len(SKILL_DIR_PREFIX):]
            for item in self.install_root.iterdir()
            if item.is_dir() and item.name.startswith(SKILL_DIR_PREFIX)
        )

    # ==================== full-source ====================

    def install_skill(self, name: str, overwrite: bool = False) -> InstallResult:
        """
        Copy a bundle into the workspace

        Args:
            name: Skill name
            overwrite: Replace an existing install

        Returns:
            InstallResult; failures are reported, never raised
        """
        try:
            dest = self._install_skill(name, overwrite)
        except SkillError as e:
            logger.info(f"Install of {name} failed: {e.message}")
            return InstallResult.failed(name, e)
        except OSError as e:
            error = FilesystemError.from_os_error(e)
            logger.error(f"Install of {name} failed: {error.message}")
            return InstallResult.failed(name, error)

        logger.info(f"Installed {name} to {dest}")
        return InstallResult(skill=name, success=True, path=str(dest))

    def _install_skill(self, name: str, overwrite: bool) -> Path:
        validate_name(name)
        meta = self.registry.require(name)

        dest = self.skill_install_path(name)
        self.install_root.mkdir(parents=True, exist_ok=True)
        dest = validate_path(dest, self.install_root)

        if dest.exists() and not overwrite:
            raise AlreadyInstalledError(name)

        _copy_tree_into_place(meta.source_dir, dest, overwrite)
        return dest

    def remove_skill(self, name: str) -> RemoveResult:
        """Delete a full-source install; absent installs give removed=False"""
        try:
            validate_name(name)
            dest = validate_path(self.skill_install_path(name), self.install_root)
            removed = _remove_tree(dest)
        except SkillError as e:
            return RemoveResult.failed(name, e)
        except OSError as e:
            error = FilesystemError.from_os_error(e)
            logger.error(f"Remove of {name} failed: {error.message}")
            return RemoveResult.failed(name, error)

        if removed:
            logger.info(f"Removed {name} from {self.install_root}")
        return RemoveResult(skill=name, removed=removed)

    # ==================== agent-targeted ====================

    def install_skill_for_agent(
        self,
        name: str,
        agent: "str | Agent",
        scope: "str | Scope",
        synthesize: Synthesizer,
    ) -> InstallResult:
        """
        Write a SKILL.md descriptor for one agent

        Always overwrites an existing descriptor.

        Args:
            name: Skill name
            agent: Target agent
            scope: global or project
            synthesize: Produces the descriptor text for a catalog entry

        Returns:
            InstallResult carrying agent and scope
        """
        target: Optional[InstallTarget] = None
        try:
            target = InstallTarget(Agent.parse(agent), Scope.parse(scope))
            dest_dir = self._install_skill_for_agent(name, target, synthesize)
        except SkillError as e:
            return InstallResult.failed(name, e, target)
        except OSError as e:
            error = FilesystemError.from_os_error(e)
            logger.error(f"Install of {name} for {target.agent.value} failed: {error.message}")
            return InstallResult.failed(name, error, target)

        logger.info(f"Installed {name} for {target.agent.value} ({target.scope.value}) at {dest_dir}")
        return InstallResult(
            skill=name,
            success=True,
            path=str(dest_dir),
            agent=target.agent.value,
            scope=target.scope.value,
        )

    def _install_skill_for_agent(
        self, name: str, target: InstallTarget, synthesize: Synthesizer
    ) -> Path:
        validate_name(name)
        meta = self.registry.require(name)

        dest_dir = validate_path(
            self.agent_skill_path(name, target.agent, target.scope), self._agent_skills_dir(target)
        )

        content = synthesize(meta)
        if not content:
            raise SkillError(
                f"No SKILL.md found and could not generate one for '{name}'",
                error_type=ErrorType.NOT_FOUND,
            )

        dest_dir.mkdir(parents=True, exist_ok=True)
        _write_file_atomic(dest_dir / SKILL_MD, content)
        return dest_dir

    def remove_skill_for_agent(
        self, name: str, agent: "str | Agent", scope: "str | Scope"
    ) -> RemoveResult:
        """Delete an agent descriptor directory; absent gives removed=False"""
        target: Optional[InstallTarget] = None
        try:
            target = InstallTarget(Agent.parse(agent), Scope.parse(scope))
            validate_name(name)
            dest_dir = validate_path(
                self.agent_skill_path(name, target.agent, target.scope),
                self._agent_skills_dir(target),
            )
            removed = _remove_tree(dest_dir)
        except SkillError as e:
            return RemoveResult.failed(name, e, target)
        except OSError as e:
            error = FilesystemError.from_os_error(e)
            logger.error(f"Remove of {name} for {target.agent.value} failed: {error.message}")
            return RemoveResult.failed(name, error, target)

        if removed:
            logger.info(f"Removed {name} for {target.agent.value} ({target.scope.value})")
        return RemoveResult(
            skill=name, removed=removed, agent=target.agent.value, scope=target.scope.value
        )


def _copy_tree_into_place(source: Path, dest: Path, overwrite: bool) -> None:
    """
    Copy ``source`` to ``dest`` through a staging directory

    The staging directory is a hidden sibling of ``dest`` (same filesystem),
    so the final step is a rename. Whatever occupies ``dest`` at that moment
    is moved into the staging directory and deleted with it; with several
    concurrent writers the last rename wins.
    """
    staging = Path(tempfile.mkdtemp(prefix=f".{dest.name}.", suffix=".tmp", dir=dest.parent))
    try:
        staged = staging / dest.name
        shutil.copytree(source, staged, ignore=COPY_IGNORE, symlinks=True)

        while True:
            try:
                os.rename(staged, dest)
                return
            except OSError as e:
                if e.errno not in (errno.ENOTEMPTY, errno.EEXIST):
                    raise
            if not overwrite:
                raise AlreadyInstalledError(dest.name[len(SKILL_DIR_PREFIX):])
            try:
                os.rename(dest, staging / f".previous-{uuid.uuid4().hex[:8]}")
            except FileNotFoundError:
                # another writer moved it first
                pass
    finally:
        shutil.rmtree(staging, ignore_errors=True)


def _remove_tree(dest: Path) -> bool:
    """Rename ``dest`` aside and delete it; False when it does not exist"""
    if not dest.exists():
        return False
    aside = dest.with_name(f".{dest.name}.{uuid.uuid4().hex[:8]}.removing")
    try:
        os.rename(dest, aside)
    except FileNotFoundError:
        # removed concurrently
        return False
    shutil.rmtree(aside)
    return True


def _write_file_atomic(path: Path, content: str) -> None:
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        tmp_path.chmod(0o644)
        os.replace(tmp_path, path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise
