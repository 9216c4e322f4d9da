"""Pydantic v2 models for the package scaffolder.

Defines the value objects that flow between the generator plugins, the
registry, and the generation orchestrator: generator metadata, dependency
and export declarations, file specifications, the caller-supplied
configuration, validation issues, and the final generation result.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class Framework(str, Enum):
    """Framework tag a generator targets."""
    REACT = "react"
    VUE = "vue"
    SVELTE = "svelte"
    ANGULAR = "angular"
    SOLID = "solid"
    QWIK = "qwik"
    PREACT = "preact"
    LIT = "lit"
    ASTRO = "astro"
    NODE = "node"
    DENO = "deno"
    BUN = "bun"
    VANILLA = "vanilla"


class PackageType(str, Enum):
    """Kind of package being generated."""
    LIBRARY = "library"
    PLUGIN = "plugin"
    UTILITY = "utility"
    CLI = "cli"
    SDK = "sdk"
    INTEGRATION = "integration"
    ADAPTER = "adapter"


class RuntimeTarget(str, Enum):
    """Runtime environment the package is built for."""
    BROWSER = "browser"
    NODE = "node"
    EDGE = "edge"
    UNIVERSAL = "universal"


class ModuleFormat(str, Enum):
    ESM = "esm"
    CJS = "cjs"
    DUAL = "dual"


class BuildSystem(str, Enum):
    TSUP = "tsup"
    VITE = "vite"
    ROLLUP = "rollup"
    UNBUILD = "unbuild"
    ESBUILD = "esbuild"


class PackageManager(str, Enum):
    NPM = "npm"
    PNPM = "pnpm"
    YARN = "yarn"
    BUN = "bun"


class DependencyKind(str, Enum):
    """Manifest section a dependency is written to."""
    RUNTIME = "dependency"
    DEV = "devDependency"
    PEER = "peerDependency"
    OPTIONAL = "optionalDependency"


class Severity(str, Enum):
    """Severity of a validation issue. Only ``error`` blocks generation."""
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


# ---------------------------------------------------------------------------
# Extension flags
# ---------------------------------------------------------------------------

CI_PROVIDERS: tuple[str, ...] = ("github-actions", "gitlab-ci", "none")

# Recognised keys of ``GeneratorConfig.extensions``.  A tuple value lists the
# allowed strings, ``bool`` marks an on/off flag.
EXTENSION_FLAGS: dict[str, Any] = {
    "ci_provider": CI_PROVIDERS,
    "husky": bool,
    "commitlint": bool,
    "semantic_release": bool,
    "changesets": bool,
    "storybook": bool,
}


# ---------------------------------------------------------------------------
# Generator metadata & declarations
# ---------------------------------------------------------------------------

class GeneratorMeta(BaseModel):
    """Identity and capabilities of a generator plugin."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Unique generator identifier, e.g. 'react-library'")
    name: str = Field(..., description="Human-readable generator name")
    framework: Framework = Field(..., description="Framework tag this generator targets")
    description: str = Field(default="", description="What the generator creates")
    version: str = Field(default="1.0.0", description="Generator version")
    supported_package_types: tuple[PackageType, ...] = Field(default=())
    supported_runtime_targets: tuple[RuntimeTarget, ...] = Field(default=())
    recommended_build_system: BuildSystem = Field(default=BuildSystem.TSUP)


class DependencySpec(BaseModel):
    """A single dependency declaration."""
    model_config = ConfigDict(frozen=True)

    name: str
    version: str = Field(..., description="Semver range, e.g. '^18.0.0'")
    kind: DependencyKind = Field(default=DependencyKind.RUNTIME)


class ExportEntry(BaseModel):
    """One conditional-exports rule for the manifest ``exports`` field.

    Every entry must resolve an ``import`` or a ``default`` path.
    """
    model_config = ConfigDict(frozen=True)

    path: str = Field(..., description="Export subpath, e.g. '.' or './bin'")
    types_path: Optional[str] = None
    import_path: Optional[str] = None
    require_path: Optional[str] = None
    default_path: Optional[str] = None

    @model_validator(mode="after")
    def _require_entry_point(self) -> "ExportEntry":
        if not self.import_path and not self.default_path:
            raise ValueError(
                f"Export '{self.path}' must define an import or default path"
            )
        return self


class GeneratedFile(BaseModel):
    """A file a generator wants written into the output directory.

    ``template`` is a template reference when ``is_template`` is true and the
    literal file content otherwise.  ``condition``, when set, is evaluated
    against the configuration and the file is skipped if it returns false.
    """
    model_config = ConfigDict(frozen=True)

    path: str = Field(..., description="Path relative to the package root")
    template: str
    is_template: bool = True
    condition: Optional[Callable[[Any], bool]] = None

    def applies_to(self, config: "GeneratorConfig") -> bool:
        return self.condition is None or bool(self.condition(config))


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

class GeneratorConfig(BaseModel):
    """Everything the caller decided about the package to generate.

    Structural typing only; name/out_dir emptiness and membership of the
    package type and runtime target are checked by the generator.
    """
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="npm package name, optionally scoped")
    description: str = Field(default="")
    package_type: PackageType = Field(default=PackageType.LIBRARY)
    runtime_target: RuntimeTarget = Field(default=RuntimeTarget.BROWSER)
    module_format: ModuleFormat = Field(default=ModuleFormat.ESM)
    build_system: BuildSystem = Field(default=BuildSystem.TSUP)
    package_manager: PackageManager = Field(default=PackageManager.NPM)
    license: str = Field(default="MIT")
    author: str = Field(default="")
    repository: Optional[str] = Field(default=None)
    out_dir: str = Field(..., description="Directory the package is written to")
    include_example: bool = Field(default=False)
    framework_options: dict[str, Any] = Field(default_factory=dict)
    extensions: dict[str, bool | str] = Field(
        default_factory=dict,
        description="Named feature flags, see EXTENSION_FLAGS",
    )
    additional_dev_deps: dict[str, str] = Field(default_factory=dict)
    additional_scripts: dict[str, str] = Field(default_factory=dict)

    def flag(self, key: str) -> bool:
        """Return whether a boolean extension flag is switched on."""
        return self.extensions.get(key) is True

    @property
    def ci_provider(self) -> str:
        value = self.extensions.get("ci_provider", "none")
        return value if isinstance(value, str) else "none"

    @property
    def is_dual(self) -> bool:
        return self.module_format == ModuleFormat.DUAL

    @property
    def js_extension(self) -> str:
        """Extension of the primary build output: ``.cjs`` for CommonJS-only packages."""
        return ".cjs" if self.module_format == ModuleFormat.CJS else ".js"


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

class ValidationIssue(BaseModel):
    """A single problem found while validating a configuration or package."""
    model_config = ConfigDict(frozen=True)

    severity: Severity
    category: str = Field(default="config")
    message: str
    suggestion: Optional[str] = None
    file: Optional[str] = None
    json_path: Optional[str] = None


class ValidationResult(BaseModel):
    """Outcome of validation: valid iff no issue has error severity."""
    model_config = ConfigDict(frozen=True)

    issues: tuple[ValidationIssue, ...] = ()

    @property
    def valid(self) -> bool:
        return not any(i.severity == Severity.ERROR for i in self.issues)

    def errors(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == Severity.ERROR]

    def warnings(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == Severity.WARNING]


def check_extensions(extensions: dict[str, Any]) -> list[ValidationIssue]:
    """Check an extension map against the closed set of recognised flags."""
    issues: list[ValidationIssue] = []
    for key, value in extensions.items():
        allowed = EXTENSION_FLAGS.get(key)
        if allowed is None:
            issues.append(ValidationIssue(
                severity=Severity.ERROR,
                category="extensions",
                message=f'Unknown extension flag "{key}"',
                suggestion=f"Recognised flags: {', '.join(EXTENSION_FLAGS)}",
            ))
        elif allowed is bool and not isinstance(value, bool):
            issues.append(ValidationIssue(
                severity=Severity.ERROR,
                category="extensions",
                message=f'Extension flag "{key}" must be true or false, got {value!r}',
            ))
        elif isinstance(allowed, tuple) and value not in allowed:
            issues.append(ValidationIssue(
                severity=Severity.ERROR,
                category="extensions",
                message=f'Extension flag "{key}" must be one of {", ".join(allowed)}, got {value!r}',
            ))
    return issues


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------

class GenerationResult(BaseModel):
    """What one generation run produced."""
    model_config = ConfigDict(frozen=True)

    success: bool
    files: list[str] = Field(default_factory=list, description="Written paths, relative")
    warnings: list[str] = Field(default_factory=list)
    error: Optional[str] = None
    next_steps: list[str] = Field(default_factory=list)
