"""
Skill name and path safety checks

Every name or path that comes from user input goes through here before the
filesystem is touched.
"""

import os
import re
from pathlib import Path

from ..errors import BlockedPathError, InvalidNameError

SKILL_NAME_PATTERN = re.compile(r"^[a-z0-9-]+$")

# On-disk directory prefix of a bundle (skills/skill-image)
SKILL_DIR_PREFIX = "skill-"

# (pattern, reason) pairs matched against the resolved POSIX-style path
_SENSITIVE_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"(^|/)\.ssh(/|$)"), "SSH directory"),
    (re.compile(r"(^|/)id_(rsa|dsa|ecdsa|ed25519)(\.pub)?$"), "SSH key"),
    (re.compile(r"^/etc/(shadow|gshadow|passwd|sudoers)$"), "system account database"),
    (re.compile(r"(^|/)\.env(\.[a-z0-9_-]+)?$"), "environment file"),
    (re.compile(r"(^|/)\.aws/credentials$"), "AWS credentials"),
    (re.compile(r"(^|/)\.(netrc|pgpass|git-credentials)$"), "credential file"),
    (re.compile(r"(^|/)\.docker/config\.json$"), "Docker credentials"),
    (re.compile(r"(^|/)\.kube/config$"), "Kubernetes credentials"),
    (re.compile(r"(^|/)\.gnupg(/|$)"), "GnuPG keyring"),
]

# .env.example style templates are documentation, not secrets
_ENV_TEMPLATE_SUFFIXES = (".example", ".sample", ".template")


def is_valid_skill_name(name: str) -> bool:
    return bool(name) and SKILL_NAME_PATTERN.match(name) is not None


def validate_name(name: str) -> str:
    """
    Check a skill name.

    Args:
        name: Skill name as given by the caller

    Returns:
        The unchanged name

    Raises:
        InvalidNameError: name is empty or not ``^[a-z0-9-]+$``
    """
    if not isinstance(name, str) or not is_valid_skill_name(name):
        raise InvalidNameError(str(name))
    return name


def normalize_skill_name(name: str) -> str:
    """Directory name of a skill: ``image`` -> ``skill-image``"""
    validate_name(name)
    if name.startswith(SKILL_DIR_PREFIX):
        return name
    return f"{SKILL_DIR_PREFIX}{name}"


def strip_skill_prefix(dir_name: str) -> str:
    """Inverse of normalize_skill_name: ``skill-image`` -> ``image``"""
    if dir_name.startswith(SKILL_DIR_PREFIX) and len(dir_name) > len(SKILL_DIR_PREFIX):
        return dir_name[len(SKILL_DIR_PREFIX):]
    return dir_name


def _sensitive_reason(path: Path) -> str | None:
    posix = path.as_posix()
    for pattern, reason in _SENSITIVE_PATTERNS:
        if pattern.search(posix):
            if reason == "environment file" and posix.endswith(_ENV_TEMPLATE_SUFFIXES):
                continue
            return reason
    return None


def validate_path(path: str | os.PathLike[str], root: str | os.PathLike[str]) -> Path:
    """
    Resolve a user-supplied path and make sure it stays inside ``root``.

    Relative paths are resolved against ``root``. Symlinks are followed, so
    a link pointing outside ``root`` is rejected as well.

    Args:
        path: Path to check
        root: Directory the path must stay within

    Returns:
        The resolved path

    Raises:
        BlockedPathError: path escapes root or names a sensitive location
    """
    root_path = Path(root).expanduser().resolve()
    candidate = Path(path).expanduser()
    if not candidate.is_absolute():
        candidate = root_path / candidate
    resolved = candidate.resolve()

    if resolved != root_path and root_path not in resolved.parents:
        raise BlockedPathError(str(path), f"escapes {root_path}")

    reason = _sensitive_reason(resolved)
    if reason:
        raise BlockedPathError(str(path), f"matches denylist ({reason})")

    return resolved
