"""Best-practice checks for an existing npm package directory.

Reads ``package.json`` (and, where a check needs it, ``tsconfig.json``,
``src/index.ts`` and the ``dist`` directory) and reports problems that
affect consumers: missing or broken ``exports``, absent type declarations,
tree-shaking blockers, peer dependency mistakes, deprecated fields and an
empty build output.
"""

from __future__ import annotations

import json
import re
import time
from pathlib import Path
from typing import Any, Callable, Optional

from pydantic import BaseModel, ConfigDict, Field

from pkgscaffold.models import Severity, ValidationIssue
from pkgscaffold.utils import load_json


# ---------------------------------------------------------------------------
# Data Models
# ---------------------------------------------------------------------------

CATEGORIES: tuple[str, ...] = (
    "exports",
    "types",
    "sideEffects",
    "treeShaking",
    "peerDeps",
    "deprecated",
    "buildOutput",
)


class CheckResult(BaseModel):
    """Outcome of one check category."""
    model_config = ConfigDict(frozen=True)

    category: str
    passed: bool = Field(..., description="True when no issue has error severity")
    issues: list[ValidationIssue] = Field(default_factory=list)
    duration: float = Field(default=0.0, description="Time spent in ms")


# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------

_RE_EXPORT_ALL = re.compile(r"export \* from")
_RE_FIRST_NUMBER = re.compile(r"\d+")

# More ``export * from`` lines than this in src/index.ts is a heavy barrel.
_BARREL_LIMIT = 5
_MIN_NODE_MAJOR = 18


def _issue(
    severity: Severity,
    category: str,
    message: str,
    suggestion: Optional[str] = None,
    *,
    json_path: Optional[str] = None,
    file: Optional[str] = None,
) -> ValidationIssue:
    return ValidationIssue(
        severity=severity,
        category=category,
        message=message,
        suggestion=suggestion,
        json_path=json_path,
        file=file,
    )


# ---------------------------------------------------------------------------
# Checker
# ---------------------------------------------------------------------------


class PackageChecker:
    """Runs the best-practice checks against the package at *path*."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self.package_json: dict[str, Any] | None = None

    def run(self, categories: list[str] | None = None) -> list[CheckResult]:
        """Run *categories* (all of them by default) in their canonical order.

        Raises:
            ValueError: If an unknown category name is requested.
        """
        selected = list(CATEGORIES) if categories is None else list(categories)
        unknown = [name for name in selected if name not in CATEGORIES]
        if unknown:
            raise ValueError(
                f"Unknown check categories: {', '.join(unknown)} "
                f"(available: {', '.join(CATEGORIES)})"
            )

        self.package_json = self._load_package_json()
        if self.package_json is None:
            return [CheckResult(
                category="exports",
                passed=False,
                issues=[_issue(Severity.ERROR, "exports", "No package.json found")],
            )]

        checks: dict[str, Callable[[dict[str, Any]], list[ValidationIssue]]] = {
            "exports": self.check_exports,
            "types": self.check_types,
            "sideEffects": self.check_side_effects,
            "treeShaking": self.check_tree_shaking,
            "peerDeps": self.check_peer_deps,
            "deprecated": self.check_deprecated,
            "buildOutput": self.check_build_output,
        }

        results: list[CheckResult] = []
        for category in CATEGORIES:
            if category not in selected:
                continue
            start = time.perf_counter()
            issues = checks[category](self.package_json)
            results.append(CheckResult(
                category=category,
                passed=not any(i.severity == Severity.ERROR for i in issues),
                issues=issues,
                duration=(time.perf_counter() - start) * 1000.0,
            ))
        return results

    def _load_package_json(self) -> dict[str, Any] | None:
        path = self.path / "package.json"
        if not path.is_file():
            return None
        return load_json(path)

    # -- Checks ------------------------------------------------------------

    def check_exports(self, pkg: dict[str, Any]) -> list[ValidationIssue]:
        exports = pkg.get("exports")
        if not exports:
            return [_issue(
                Severity.WARNING, "exports",
                'No "exports" field found in package.json',
                "Add an \"exports\" field to specify package entry points",
                json_path="exports",
            )]

        if isinstance(exports, str):
            exports = {".": {"default": exports}}
        main = exports.get(".") if isinstance(exports, dict) else None
        if not main:
            return [_issue(
                Severity.ERROR, "exports",
                'No main export (".") found in exports field',
                'Add a "." entry to exports for the main package entry point',
                json_path='exports["."]',
            )]
        if isinstance(main, str):
            main = {"default": main}

        issues: list[ValidationIssue] = []
        if not main.get("types"):
            issues.append(_issue(
                Severity.WARNING, "exports",
                'No "types" entry in main export',
                "Add \"types\" entry pointing to your .d.ts file",
                json_path='exports["."].types',
            ))
        if not main.get("import") and not main.get("default"):
            issues.append(_issue(
                Severity.ERROR, "exports",
                'No "import" or "default" entry in main export',
                'Add an "import" entry for ESM consumers',
                json_path='exports["."].import',
            ))

        for key, value in main.items():
            if isinstance(value, str) and not (self.path / value).exists():
                issues.append(_issue(
                    Severity.WARNING, "exports",
                    f"Export file does not exist: {value}",
                    "Run build command or fix the path",
                    json_path=f'exports["."].{key}',
                    file=value,
                ))
        return issues

    def check_types(self, pkg: dict[str, Any]) -> list[ValidationIssue]:
        issues: list[ValidationIssue] = []
        if not pkg.get("types") and not pkg.get("typings"):
            issues.append(_issue(
                Severity.WARNING, "types",
                'No "types" field in package.json',
                'Add a "types" field pointing to your main .d.ts file',
                json_path="types",
            ))

        dist = self.path / "dist"
        if dist.is_dir() and not any(dist.rglob("*.d.ts")):
            issues.append(_issue(
                Severity.WARNING, "types",
                "No .d.ts files found in dist directory",
                "Ensure TypeScript is configured to emit declaration files",
            ))

        tsconfig_path = self.path / "tsconfig.json"
        if tsconfig_path.is_file():
            try:
                tsconfig = load_json(tsconfig_path)
            except json.JSONDecodeError:
                issues.append(_issue(
                    Severity.WARNING, "types",
                    "tsconfig.json could not be parsed",
                    "Remove comments or trailing commas from tsconfig.json",
                    file="tsconfig.json",
                ))
            else:
                if not tsconfig.get("compilerOptions", {}).get("declaration"):
                    issues.append(_issue(
                        Severity.WARNING, "types",
                        "TypeScript declarations are not enabled",
                        'Set "declaration": true in tsconfig.json compilerOptions',
                        file="tsconfig.json",
                    ))
        return issues

    def check_side_effects(self, pkg: dict[str, Any]) -> list[ValidationIssue]:
        if "sideEffects" in pkg:
            return []
        return [_issue(
            Severity.WARNING, "sideEffects",
            'No "sideEffects" field in package.json',
            'Add "sideEffects": false for tree-shaking optimization, or list files with side effects',
            json_path="sideEffects",
        )]

    def check_tree_shaking(self, pkg: dict[str, Any]) -> list[ValidationIssue]:
        issues: list[ValidationIssue] = []
        if not pkg.get("module") and not pkg.get("exports"):
            issues.append(_issue(
                Severity.WARNING, "treeShaking",
                'No "module" or "exports" field for ESM entry point',
                'Add a "module" field or "exports" for better tree-shaking',
                json_path="module",
            ))
        if pkg.get("type") != "module":
            issues.append(_issue(
                Severity.INFO, "treeShaking",
                'Package type is not "module"',
                'Consider using "type": "module" for ESM-first approach',
                json_path="type",
            ))

        index = self.path / "src" / "index.ts"
        if index.is_file():
            count = len(_RE_EXPORT_ALL.findall(index.read_text(encoding="utf-8")))
            if count > _BARREL_LIMIT:
                issues.append(_issue(
                    Severity.INFO, "treeShaking",
                    f"Heavy barrel exports detected ({count} re-exports)",
                    "Consider using direct imports for better tree-shaking",
                    file="src/index.ts",
                ))
        return issues

    def check_peer_deps(self, pkg: dict[str, Any]) -> list[ValidationIssue]:
        issues: list[ValidationIssue] = []
        peers = pkg.get("peerDependencies") or {}
        deps = pkg.get("dependencies") or {}

        for name, version in peers.items():
            if name in deps:
                issues.append(_issue(
                    Severity.ERROR, "peerDeps",
                    f'"{name}" is both a dependency and peerDependency',
                    "Remove from dependencies if it should be a peer dependency",
                    json_path=f"dependencies.{name}",
                ))
            if not str(version).startswith(("^", ">=")):
                issues.append(_issue(
                    Severity.WARNING, "peerDeps",
                    f'Peer dependency "{name}" has restrictive version: {version}',
                    "Consider using a caret range (^) for better compatibility",
                    json_path=f"peerDependencies.{name}",
                ))
        return issues

    def check_deprecated(self, pkg: dict[str, Any]) -> list[ValidationIssue]:
        issues: list[ValidationIssue] = []
        if pkg.get("typings"):
            issues.append(_issue(
                Severity.INFO, "deprecated",
                '"typings" field is deprecated',
                'Use "types" instead of "typings"',
                json_path="typings",
            ))

        node_range = (pkg.get("engines") or {}).get("node")
        if node_range:
            match = _RE_FIRST_NUMBER.search(str(node_range))
            if match and int(match.group()) < _MIN_NODE_MAJOR:
                issues.append(_issue(
                    Severity.WARNING, "deprecated",
                    f"Node.js {match.group()} is end-of-life",
                    f"Update engines.node to >={_MIN_NODE_MAJOR}.0.0",
                    json_path="engines.node",
                ))

        main = pkg.get("main")
        if pkg.get("type") == "module" and str(main or "").endswith(".js") and not pkg.get("exports"):
            issues.append(_issue(
                Severity.WARNING, "deprecated",
                'Using "main" field without "exports" is a legacy pattern',
                'Add an "exports" field for modern module resolution',
                json_path="main",
            ))
        return issues

    def check_build_output(self, pkg: dict[str, Any]) -> list[ValidationIssue]:
        dist = self.path / "dist"
        if not dist.is_dir():
            return [_issue(
                Severity.WARNING, "buildOutput",
                'No "dist" directory found',
                "Run the build command to generate output files",
            )]

        issues: list[ValidationIssue] = []
        if not any(dist.rglob("*.js")):
            issues.append(_issue(
                Severity.WARNING, "buildOutput",
                "No JavaScript files found in dist",
                "Ensure build is configured correctly",
            ))
        if not any(dist.rglob("*.map")):
            issues.append(_issue(
                Severity.INFO, "buildOutput",
                "No source maps found in dist",
                "Consider enabling source maps for debugging",
            ))
        return issues


def check_package(path: str | Path, categories: list[str] | None = None) -> list[CheckResult]:
    return PackageChecker(path).run(categories)
