"""
Structured skillpack errors

Provides the ErrorType enum and the SkillError hierarchy so every adapter
(CLI, MCP, HTTP) can classify a failure the same way.

Usage:
    from skillpack.errors import SkillNotFoundError

    raise SkillNotFoundError("image")
"""

import logging
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class ErrorType(Enum):
    """Error classes shared by all transports"""

    VALIDATION = "validation"  # bad skill name, agent, scope or category
    BLOCKED = "blocked"  # path-safety rejection
    NOT_FOUND = "not_found"  # skill (or docs file) does not exist
    ALREADY_INSTALLED = "already_installed"  # normal no-op outcome
    FILESYSTEM = "filesystem"  # permission / IO failures


# HTTP status per error class. Operational outcomes stay 200 with success=false.
_HTTP_STATUS: dict[ErrorType, int] = {
    ErrorType.VALIDATION: 400,
    ErrorType.BLOCKED: 400,
    ErrorType.NOT_FOUND: 404,
    ErrorType.ALREADY_INSTALLED: 200,
    ErrorType.FILESYSTEM: 200,
}


class SkillError(Exception):
    """
    Base class for all expected skillpack failures.

    Carries the error class and a human-readable message; adapters turn it
    into an exit code, an HTTP status or an error-flagged tool result.
    """

    error_type: ErrorType = ErrorType.FILESYSTEM

    def __init__(
        self,
        message: str,
        *,
        error_type: ErrorType | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        if error_type is not None:
            self.error_type = error_type
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the JSON error body used by the HTTP API"""
        result: dict[str, Any] = {"error": self.message}
        if self.details:
            result["details"] = self.details
        return result

    @property
    def http_status(self) -> int:
        return http_status(self.error_type)


class InvalidNameError(SkillError):
    error_type = ErrorType.VALIDATION

    def __init__(self, name: str) -> None:
        super().__init__(
            f"Invalid skill name: '{name}'. "
            "Use lowercase letters, numbers and hyphens only.",
            details={"name": name},
        )


class BlockedPathError(SkillError):
    error_type = ErrorType.BLOCKED

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Blocked path '{path}': {reason}", details={"path": path})


class SkillNotFoundError(SkillError):
    error_type = ErrorType.NOT_FOUND

    def __init__(self, name: str) -> None:
        super().__init__(f"Skill '{name}' not found", details={"name": name})


class UnknownAgentError(SkillError):
    error_type = ErrorType.VALIDATION

    def __init__(self, agent: str, available: list[str]) -> None:
        super().__init__(
            f"Unknown agent: {agent}. Available: {', '.join(available)}, all",
            details={"agent": agent},
        )


class UnknownScopeError(SkillError):
    error_type = ErrorType.VALIDATION

    def __init__(self, scope: str, available: list[str]) -> None:
        super().__init__(
            f"Unknown scope: {scope}. Available: {', '.join(available)}",
            details={"scope": scope},
        )


class UnknownCategoryError(SkillError):
    error_type = ErrorType.VALIDATION

    def __init__(self, category: str, available: list[str] | tuple[str, ...]) -> None:
        super().__init__(
            f"Unknown category: {category}. Available: {', '.join(available)}",
            details={"category": category},
        )


class AlreadyInstalledError(SkillError):
    error_type = ErrorType.ALREADY_INSTALLED

    def __init__(self, name: str) -> None:
        super().__init__(
            "Already installed. Use --overwrite to replace.", details={"name": name}
        )


class FilesystemError(SkillError):
    error_type = ErrorType.FILESYSTEM

    @classmethod
    def from_os_error(cls, exc: OSError) -> "FilesystemError":
        logger.debug(f"Filesystem error: {exc!r}")
        if exc.strerror and exc.filename:
            return cls(f"{exc.strerror}: {exc.filename}")
        return cls(str(exc))


def http_status(error_type: ErrorType) -> int:
    """Map an error class to the HTTP status the API answers with"""
    return _HTTP_STATUS.get(error_type, 200)
