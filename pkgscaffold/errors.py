"""Exception hierarchy for the package scaffolder.

Every failure the generation orchestrator reports back to its caller is a
``ScaffoldError`` subclass, so callers can tell expected failures (unknown
framework, bad configuration, missing template, filesystem trouble) from
programming errors.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from pkgscaffold.models import ValidationIssue


class ScaffoldError(Exception):
    """Base class for all expected scaffolding failures."""


class GeneratorNotFoundError(ScaffoldError):
    """Raised when no generator is registered for a framework or id."""

    def __init__(self, framework: str) -> None:
        self.framework = framework
        super().__init__(f"No generator found for framework: {framework}")


class ValidationError(ScaffoldError):
    """Raised when a configuration fails generator validation.

    ``issues`` holds the error-severity issues that caused the failure.
    """

    def __init__(self, issues: Sequence["ValidationIssue"]) -> None:
        self.issues = list(issues)
        super().__init__("\n".join(issue.message for issue in self.issues))


class TemplateNotFoundError(ScaffoldError):
    """Raised when a template reference cannot be resolved."""

    def __init__(self, reference: str, tried: Sequence[str] = ()) -> None:
        self.reference = reference
        self.tried = list(tried)
        message = f"Template not found: {reference}"
        if self.tried:
            message += f" (also tried: {', '.join(self.tried)})"
        super().__init__(message)


class WriteError(ScaffoldError):
    """Raised when a directory or file cannot be written."""

    def __init__(self, path: str | Path, reason: str) -> None:
        self.path = Path(path)
        super().__init__(f"Failed to write {path}: {reason}")


class HookError(ScaffoldError):
    """Raised when a generator's post-generation hook fails."""

    def __init__(self, generator_id: str, cause: BaseException) -> None:
        self.generator_id = generator_id
        self.cause = cause
        super().__init__(f"Post-generation hook of {generator_id} failed: {cause}")


class PresetNotFoundError(ScaffoldError):
    """Raised when an unknown preset name is requested."""

    def __init__(self, name: str, available: Sequence[str] = ()) -> None:
        self.name = name
        message = f"Unknown preset: {name}"
        if available:
            message += f" (available: {', '.join(available)})"
        super().__init__(message)


class ProjectDetectionError(ScaffoldError):
    """Raised when a directory does not hold a package ``add`` can work with."""

    def __init__(self, path: str | Path, reason: str) -> None:
        self.path = Path(path)
        super().__init__(f"Could not detect a package in {path}: {reason}")


class InvalidItemError(ScaffoldError):
    """Raised when an item type or name does not suit the detected project."""
