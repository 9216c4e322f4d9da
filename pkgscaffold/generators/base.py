"""Generator contract and the shared behaviour every framework generator gets.

A framework plugin only describes what is specific to its framework (its
metadata, dependencies, files, manifest extras and advisory checks).
``BaseGenerator`` wraps a plugin and supplies everything common to all
packages: the toolchain dependencies, the root export entry, the shared
config files, the common manifest extras and the structural validation.
New frameworks are added by writing a plugin; nothing here changes.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Protocol, runtime_checkable

from pkgscaffold.models import (
    BuildSystem,
    DependencyKind,
    DependencySpec,
    ExportEntry,
    GeneratedFile,
    GenerationResult,
    GeneratorConfig,
    GeneratorMeta,
    ModuleFormat,
    Severity,
    ValidationIssue,
    ValidationResult,
)
from pkgscaffold.utils import package_name_problems


# ---------------------------------------------------------------------------
# Contracts
# ---------------------------------------------------------------------------


@runtime_checkable
class Generator(Protocol):
    """What the registry stores and the orchestrator drives."""

    meta: GeneratorMeta

    def get_dependencies(self, config: GeneratorConfig) -> list[DependencySpec]: ...

    def get_exports(self, config: GeneratorConfig) -> list[ExportEntry]: ...

    def get_files(self, config: GeneratorConfig) -> list[GeneratedFile]: ...

    def get_package_json_extras(self, config: GeneratorConfig) -> dict[str, Any]: ...

    def validate(self, config: GeneratorConfig) -> ValidationResult: ...

    def post_generate(self, config: GeneratorConfig, result: GenerationResult) -> None: ...


class FrameworkPlugin(Protocol):
    """Framework-specific half of a generator.

    Plugins may also define ``extra_exports(config) -> list[ExportEntry]``
    and ``post_generate(config, result) -> None``; both are optional.
    """

    meta: GeneratorMeta

    def dependencies(self, config: GeneratorConfig) -> list[DependencySpec]: ...

    def files(self, config: GeneratorConfig) -> list[GeneratedFile]: ...

    def package_json_extras(self, config: GeneratorConfig) -> dict[str, Any]: ...

    def check_config(self, config: GeneratorConfig) -> list[ValidationIssue]: ...


# ---------------------------------------------------------------------------
# Declaration helpers used by plugins
# ---------------------------------------------------------------------------


def dep(name: str, version: str, kind: DependencyKind = DependencyKind.RUNTIME) -> DependencySpec:
    return DependencySpec(name=name, version=version, kind=kind)


def dev_dep(name: str, version: str) -> DependencySpec:
    return DependencySpec(name=name, version=version, kind=DependencyKind.DEV)


def peer_dep(name: str, version: str) -> DependencySpec:
    return DependencySpec(name=name, version=version, kind=DependencyKind.PEER)


def optional_dep(name: str, version: str) -> DependencySpec:
    return DependencySpec(name=name, version=version, kind=DependencyKind.OPTIONAL)


def template_file(
    path: str,
    reference: str,
    condition: Optional[Callable[[GeneratorConfig], bool]] = None,
) -> GeneratedFile:
    return GeneratedFile(path=path, template=reference, is_template=True, condition=condition)


def literal_file(
    path: str,
    content: str,
    condition: Optional[Callable[[GeneratorConfig], bool]] = None,
) -> GeneratedFile:
    return GeneratedFile(path=path, template=content, is_template=False, condition=condition)


def wants_example(config: GeneratorConfig) -> bool:
    return config.include_example


def example_files(framework: str, names: list[str]) -> list[GeneratedFile]:
    """Files of the ``example/`` sub-project, written only when requested."""
    return [
        template_file(f"example/{name}", f"{framework}/example/{name}.j2", condition=wants_example)
        for name in names
    ]


def warning(message: str, suggestion: str | None = None) -> ValidationIssue:
    return ValidationIssue(
        severity=Severity.WARNING, category="config", message=message, suggestion=suggestion
    )


def info(message: str, suggestion: str | None = None) -> ValidationIssue:
    return ValidationIssue(
        severity=Severity.INFO, category="config", message=message, suggestion=suggestion
    )


def error(message: str, suggestion: str | None = None) -> ValidationIssue:
    return ValidationIssue(
        severity=Severity.ERROR, category="config", message=message, suggestion=suggestion
    )


# ---------------------------------------------------------------------------
# Common declarations
# ---------------------------------------------------------------------------

# Build system -> toolchain dev dependencies.
_BUILD_DEPENDENCIES: dict[BuildSystem, list[tuple[str, str]]] = {
    BuildSystem.TSUP: [("tsup", "^8.3.0")],
    BuildSystem.VITE: [("vite", "^6.0.0"), ("vite-plugin-dts", "^4.3.0")],
    BuildSystem.ROLLUP: [
        ("rollup", "^4.28.0"),
        ("@rollup/plugin-typescript", "^12.1.0"),
        ("@rollup/plugin-node-resolve", "^16.0.0"),
    ],
    BuildSystem.UNBUILD: [("unbuild", "^3.0.0")],
    BuildSystem.ESBUILD: [("esbuild", "^0.24.0")],
}

# Build system -> (output path, template reference).  esbuild is driven from
# the package scripts and has no config file.
_BUILD_CONFIG_FILES: dict[BuildSystem, tuple[str, str]] = {
    BuildSystem.TSUP: ("tsup.config.ts", "common/tsup.config.ts.j2"),
    BuildSystem.VITE: ("vite.config.ts", "common/vite.config.ts.j2"),
    BuildSystem.ROLLUP: ("rollup.config.ts", "common/rollup.config.ts.j2"),
    BuildSystem.UNBUILD: ("build.config.ts", "common/unbuild.config.ts.j2"),
}

PACKAGE_FILES: list[str] = ["dist", "README.md", "LICENSE", "CHANGELOG.md"]


def _extension_files() -> list[GeneratedFile]:
    """Tooling files switched on by configuration extension flags."""
    return [
        template_file(
            ".github/workflows/ci.yml",
            "common/github-ci.yml.j2",
            condition=lambda c: c.ci_provider == "github-actions",
        ),
        template_file(
            ".gitlab-ci.yml",
            "common/gitlab-ci.yml.j2",
            condition=lambda c: c.ci_provider == "gitlab-ci",
        ),
        template_file(".husky/pre-commit", "common/husky-pre-commit.j2",
                      condition=lambda c: c.flag("husky")),
        template_file("commitlint.config.js", "common/commitlint.config.js.j2",
                      condition=lambda c: c.flag("commitlint")),
        template_file(".releaserc.json", "common/releaserc.json.j2",
                      condition=lambda c: c.flag("semantic_release")),
        template_file(".changeset/config.json", "common/changeset-config.json.j2",
                      condition=lambda c: c.flag("changesets")),
        template_file(".storybook/main.ts", "common/storybook-main.ts.j2",
                      condition=lambda c: c.flag("storybook")),
    ]


# ---------------------------------------------------------------------------
# BaseGenerator
# ---------------------------------------------------------------------------


class BaseGenerator:
    """Composes the common generator behaviour with a framework plugin.

    Implements the ``Generator`` contract.  Common declarations always come
    first in every list so shared config files are written before the
    framework files that may reference them.
    """

    def __init__(self, plugin: FrameworkPlugin) -> None:
        self.plugin = plugin
        self.meta: GeneratorMeta = plugin.meta

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.meta.id} ({self.meta.framework.value})>"

    # -- Dependencies --------------------------------------------------------

    def get_dependencies(self, config: GeneratorConfig) -> list[DependencySpec]:
        return [*self.common_dependencies(config), *self.plugin.dependencies(config)]

    def common_dependencies(self, config: GeneratorConfig) -> list[DependencySpec]:
        deps = [
            dev_dep("typescript", "^5.7.0"),
            dev_dep("@types/node", "^22.0.0"),
        ]
        deps.extend(dev_dep(name, version) for name, version in _BUILD_DEPENDENCIES[config.build_system])
        deps.append(dev_dep("vitest", "^2.1.0"))
        deps.extend(dev_dep(name, version) for name, version in config.additional_dev_deps.items())
        return deps

    # -- Exports -------------------------------------------------------------

    def get_exports(self, config: GeneratorConfig) -> list[ExportEntry]:
        exports = [self.root_export(config)]
        extra = getattr(self.plugin, "extra_exports", None)
        if extra is not None:
            exports.extend(extra(config))
        return exports

    def root_export(self, config: GeneratorConfig) -> ExportEntry:
        """The ``.`` entry; dual packages also get a CommonJS ``require`` path.

        CommonJS-only packages expose ``index.cjs`` as the default condition
        and have no ``import`` condition.
        """
        main = f"./dist/index{config.js_extension}"
        return ExportEntry(
            path=".",
            types_path="./dist/index.d.ts",
            import_path=None if config.module_format == ModuleFormat.CJS else main,
            require_path="./dist/index.cjs" if config.is_dual else None,
            default_path=main,
        )

    # -- Files ---------------------------------------------------------------

    def get_files(self, config: GeneratorConfig) -> list[GeneratedFile]:
        return [*self.common_files(config), *self.plugin.files(config)]

    def common_files(self, config: GeneratorConfig) -> list[GeneratedFile]:
        files = [
            template_file("tsconfig.json", "common/tsconfig.json.j2"),
            template_file("README.md", "common/README.md.j2"),
            template_file("LICENSE", "common/LICENSE.j2"),
            template_file(".gitignore", "common/gitignore.j2"),
            template_file(".npmignore", "common/npmignore.j2"),
            template_file("CHANGELOG.md", "common/CHANGELOG.md.j2"),
        ]
        build_config = _BUILD_CONFIG_FILES.get(config.build_system)
        if build_config is not None:
            files.append(template_file(*build_config))
        files.append(template_file("vitest.config.ts", "common/vitest.config.ts.j2"))
        files.extend(_extension_files())
        return files

    # -- Manifest extras -----------------------------------------------------

    def get_package_json_extras(self, config: GeneratorConfig) -> dict[str, Any]:
        """Common extras overlaid with the plugin's; the plugin wins on collisions."""
        return {**self.common_package_json_extras(config), **self.plugin.package_json_extras(config)}

    def common_package_json_extras(self, config: GeneratorConfig) -> dict[str, Any]:
        return {
            "sideEffects": False,
            "files": list(PACKAGE_FILES),
        }

    # -- Validation ----------------------------------------------------------

    def validate(self, config: GeneratorConfig) -> ValidationResult:
        issues: list[ValidationIssue] = []
        meta = self.meta

        if not config.name or not config.name.strip():
            issues.append(error("Package name is required"))
        else:
            problems = package_name_problems(config.name)
            if problems:
                issues.append(error(
                    f'Invalid package name "{config.name}": {problems[0]}',
                    suggestion="Use a lowercase, URL-safe name such as my-package or @scope/my-package",
                ))

        if config.package_type not in meta.supported_package_types:
            issues.append(error(
                f'Package type "{config.package_type.value}" is not supported by {meta.name}',
                suggestion="Supported types: "
                + ", ".join(t.value for t in meta.supported_package_types),
            ))

        if config.runtime_target not in meta.supported_runtime_targets:
            issues.append(error(
                f'Runtime target "{config.runtime_target.value}" is not supported by {meta.name}',
                suggestion="Supported targets: "
                + ", ".join(t.value for t in meta.supported_runtime_targets),
            ))

        if not config.out_dir or not config.out_dir.strip():
            issues.append(error("Output directory is required"))

        issues.extend(self.plugin.check_config(config))
        return ValidationResult(issues=tuple(issues))

    # -- Hooks ---------------------------------------------------------------

    def post_generate(self, config: GeneratorConfig, result: GenerationResult) -> None:
        hook = getattr(self.plugin, "post_generate", None)
        if hook is not None:
            hook(config, result)
