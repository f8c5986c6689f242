"""
Skill requirements extractor

Best-effort static scan of a bundle's sources:
- environment variables read through the usual JS / Python idioms
- third-party packages from package.json, requirements.txt, pyproject.toml
- system binaries invoked through spawn/exec/subprocess style calls
- the CLI command the bundle exposes, if any

Whatever cannot be read is skipped; the result is "requirements observed so
far", never an error.
"""

import json
import logging
import os
import re
import threading
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from .parser import PACKAGE_JSON, SkillMeta

logger = logging.getLogger(__name__)

SKIP_DIRECTORIES = {
    "node_modules",
    ".git",
    "dist",
    "build",
    ".venv",
    "venv",
    "__pycache__",
    "coverage",
    ".next",
    ".turbo",
}

SOURCE_SUFFIXES = {".ts", ".tsx", ".js", ".jsx", ".mjs", ".cjs", ".py", ".sh", ".bash"}

ENV_EXAMPLE_FILES = (".env.example", ".env.local.example")

# Larger files are generated or vendored; not worth scanning
MAX_SOURCE_BYTES = 1024 * 1024

_NAME = r"([A-Za-z_][A-Za-z0-9_]*)"
_QUOTED_NAME = rf"""["']{_NAME}["']"""

ENV_VAR_PATTERN = re.compile(
    "|".join(
        [
            rf"\bprocess\.env\.{_NAME}",
            rf"\bprocess\.env\[\s*{_QUOTED_NAME}\s*\]",
            rf"\bBun\.env\.{_NAME}",
            rf"\bDeno\.env\.get\(\s*{_QUOTED_NAME}",
            rf"\bimport\.meta\.env\.{_NAME}",
            rf"\bos\.environ\[\s*{_QUOTED_NAME}\s*\]",
            rf"\bos\.environ\.get\(\s*{_QUOTED_NAME}",
            rf"\bos\.getenv\(\s*{_QUOTED_NAME}",
        ]
    )
)

ENV_EXAMPLE_LINE = re.compile(r"^\s*(?:export\s+)?([A-Za-z_][A-Za-z0-9_]*)\s*=", re.MULTILINE)

_COMMAND = r"([A-Za-z0-9_.-]+)"

INVOCATION_PATTERN = re.compile(
    "|".join(
        [
            # spawn("ffmpeg", ...), execSync(`git status`), Bun.spawn(["yt-dlp", ...])
            rf"\b(?:Bun\.)?(?:spawnSync|spawn|execFileSync|execFile|execSync|exec)\(\s*\[?\s*[`'\"]{_COMMAND}",
            # Bun shell: $`pandoc ...`
            rf"\$`\s*{_COMMAND}",
            rf"\bsubprocess\.(?:run|call|Popen|check_call|check_output)\(\s*\[?\s*[rf]?[`'\"]{_COMMAND}",
            rf"\bos\.system\(\s*[rf]?['\"]{_COMMAND}",
        ]
    )
)

# Command word -> reported system dependency
SYSTEM_BINARIES = {
    "ffmpeg": "ffmpeg",
    "ffprobe": "ffmpeg",
    "yt-dlp": "yt-dlp",
    "docker": "docker",
    "git": "git",
    "pandoc": "pandoc",
    "convert": "imagemagick",
    "magick": "imagemagick",
    "wkhtmltopdf": "wkhtmltopdf",
    "python": "python",
    "python3": "python",
    "chromium": "chromium",
    "pdftotext": "poppler",
    "tesseract": "tesseract",
    "sox": "sox",
    "whisper": "whisper",
    "node": "node",
    "bun": "bun",
}

REQUIREMENT_NAME = re.compile(r"^\s*([A-Za-z0-9][A-Za-z0-9._-]*)")


@dataclass(frozen=True)
class Requirements:
    """What a bundle needs at runtime, as far as a static scan can tell"""

    env_vars: tuple[str, ...] = ()
    system_deps: tuple[str, ...] = ()
    dependencies: tuple[str, ...] = ()
    cli_command: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "envVars": list(self.env_vars),
            "systemDeps": list(self.system_deps),
            "dependencies": list(self.dependencies),
            "cliCommand": self.cli_command,
        }


def _add(seen: list[str], value: str) -> None:
    if value not in seen:
        seen.append(value)


def _first_group(match: re.Match[str]) -> str:
    return next(g for g in match.groups() if g)


def _read_text(path: Path) -> Optional[str]:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.debug(f"Skipping unreadable file {path}: {e}")
        return None


class RequirementsExtractor:
    """
    Requirements extractor

    Results are memoized per skill name for the lifetime of the instance.
    """

    def __init__(self):
        self._cache: dict[str, Requirements] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._lock = threading.Lock()

    def _name_lock(self, name: str) -> threading.Lock:
        with self._lock:
            return self._locks.setdefault(name, threading.Lock())

    def extract(self, meta: SkillMeta) -> Requirements:
        """
        Extract the requirements of one bundle

        Scans of different skills run in parallel; concurrent calls for the
        same skill scan once.

        Args:
            meta: Catalog entry

        Returns:
            Requirements (possibly empty)
        """
        cached = self._cache.get(meta.name)
        if cached is not None:
            return cached

        with self._name_lock(meta.name):
            cached = self._cache.get(meta.name)
            if cached is None:
                requirements = self._scan(meta)
                cached = self._cache.setdefault(meta.name, requirements)
                logger.debug(f"Extracted requirements for {meta.name}: {cached}")
            return cached

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()
            self._locks.clear()

    def _scan(self, meta: SkillMeta) -> Requirements:
        source_dir = meta.source_dir
        env_vars: list[str] = []
        system_deps: list[str] = []

        for path in self._iter_source_files(source_dir):
            text = _read_text(path)
            if text is None:
                continue
            for match in ENV_VAR_PATTERN.finditer(text):
                _add(env_vars, _first_group(match))
            for match in INVOCATION_PATTERN.finditer(text):
                dep = SYSTEM_BINARIES.get(_first_group(match))
                if dep:
                    _add(system_deps, dep)

        for name in ENV_EXAMPLE_FILES:
            path = source_dir / name
            if not path.is_file():
                continue
            text = _read_text(path)
            if text is None:
                continue
            for match in ENV_EXAMPLE_LINE.finditer(text):
                _add(env_vars, match.group(1))

        package = self._load_json(source_dir / PACKAGE_JSON)
        pyproject = self._load_toml(source_dir / "pyproject.toml")

        return Requirements(
            env_vars=tuple(env_vars),
            system_deps=tuple(system_deps),
            dependencies=tuple(self._dependencies(source_dir, package, pyproject)),
            cli_command=self._cli_command(meta.name, package, pyproject),
        )

    def _iter_source_files(self, source_dir: Path):
        for dirpath, dirnames, filenames in os.walk(source_dir):
            dirnames[:] = sorted(d for d in dirnames if d not in SKIP_DIRECTORIES)
            for filename in sorted(filenames):
                path = Path(dirpath) / filename
                if path.suffix not in SOURCE_SUFFIXES:
                    continue
                try:
                    if path.stat().st_size > MAX_SOURCE_BYTES:
                        logger.debug(f"Skipping large file {path}")
                        continue
                except OSError as e:
                    logger.debug(f"Skipping {path}: {e}")
                    continue
                yield path

    def _load_json(self, path: Path) -> dict:
        if not path.is_file():
            return {}
        text = _read_text(path)
        if text is None:
            return {}
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            logger.debug(f"Skipping invalid JSON {path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _load_toml(self, path: Path) -> dict:
        if not path.is_file():
            return {}
        text = _read_text(path)
        if text is None:
            return {}
        try:
            return tomllib.loads(text)
        except tomllib.TOMLDecodeError as e:
            logger.debug(f"Skipping invalid TOML {path}: {e}")
            return {}

    def _dependencies(self, source_dir: Path, package: dict, pyproject: dict) -> list[str]:
        deps: list[str] = []

        npm_deps = package.get("dependencies")
        if isinstance(npm_deps, dict):
            for name in npm_deps:
                _add(deps, name)

        requirements_txt = source_dir / "requirements.txt"
        if requirements_txt.is_file():
            text = _read_text(requirements_txt) or ""
            for line in text.splitlines():
                line = line.split("#", 1)[0]
                if line.strip().startswith("-"):
                    continue
                match = REQUIREMENT_NAME.match(line)
                if match:
                    _add(deps, match.group(1))

        project = pyproject.get("project") if isinstance(pyproject.get("project"), dict) else {}
        for spec in project.get("dependencies") or []:
            match = REQUIREMENT_NAME.match(str(spec))
            if match:
                _add(deps, match.group(1))

        return deps

    def _cli_command(self, name: str, package: dict, pyproject: dict) -> Optional[str]:
        bin_entry = package.get("bin")
        has_bin = (isinstance(bin_entry, str) and bin_entry.strip()) or (
            isinstance(bin_entry, dict) and bin_entry
        )

        project = pyproject.get("project") if isinstance(pyproject.get("project"), dict) else {}
        has_scripts = bool(project.get("scripts"))

        if not (has_bin or has_scripts):
            return None

        return f"skill-{name}"
