"""Package generation orchestrator.

Takes a framework tag and a ``GeneratorConfig``, resolves the primary
generator for the framework from a ``GeneratorRegistry``, and materialises
the package: every applicable generated file is rendered, formatted and
written under ``config.out_dir``, then ``package.json`` is synthesised from
the generator's dependencies, exports and manifest extras.

A run is one-shot and not transactional.  When it fails partway through,
the files written so far stay on disk and are listed in the failed result.
"""

from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pkgscaffold import __version__
from pkgscaffold.errors import (
    GeneratorNotFoundError,
    HookError,
    ScaffoldError,
    TemplateNotFoundError,
    ValidationError,
    WriteError,
)
from pkgscaffold.generators.base import Generator
from pkgscaffold.models import (
    BuildSystem,
    DependencyKind,
    DependencySpec,
    ExportEntry,
    GeneratedFile,
    GenerationResult,
    GeneratorConfig,
    ModuleFormat,
    PackageManager,
    Severity,
    check_extensions,
)
from pkgscaffold.registry import GeneratorRegistry, create_default_registry
from pkgscaffold.scaffolder.formatting import FormatError, format_content
from pkgscaffold.scaffolder.templates import TemplateRenderer
from pkgscaffold.utils import dump_json, print_debug


# ---------------------------------------------------------------------------
# Manifest constants
# ---------------------------------------------------------------------------

INITIAL_VERSION = "0.0.1"

BUILD_SCRIPTS: dict[BuildSystem, str] = {
    BuildSystem.TSUP: "tsup",
    BuildSystem.VITE: "vite build",
    BuildSystem.ROLLUP: "rollup -c",
    BuildSystem.UNBUILD: "unbuild",
}

DEV_SCRIPTS: dict[BuildSystem, str] = {
    BuildSystem.TSUP: "tsup --watch",
    BuildSystem.VITE: "vite build --watch",
    BuildSystem.ROLLUP: "rollup -c -w",
    BuildSystem.UNBUILD: "unbuild --watch",
}

INSTALL_COMMANDS: dict[PackageManager, str] = {
    PackageManager.NPM: "npm install",
    PackageManager.PNPM: "pnpm install",
    PackageManager.YARN: "yarn",
    PackageManager.BUN: "bun install",
}

# Manifest section for each dependency kind, in the order they are written.
DEPENDENCY_SECTIONS: dict[DependencyKind, str] = {
    DependencyKind.RUNTIME: "dependencies",
    DependencyKind.DEV: "devDependencies",
    DependencyKind.PEER: "peerDependencies",
    DependencyKind.OPTIONAL: "optionalDependencies",
}


# esbuild has no config file; its output files are named on the command line.
_ESBUILD_OUTPUTS: dict[ModuleFormat, list[tuple[str, str]]] = {
    ModuleFormat.ESM: [("esm", "index.js")],
    ModuleFormat.CJS: [("cjs", "index.cjs")],
    ModuleFormat.DUAL: [("esm", "index.js"), ("cjs", "index.cjs")],
}


def esbuild_command(module_format: ModuleFormat, watch: bool = False) -> str:
    commands = [
        f"esbuild src/index.ts --bundle --outfile=dist/{outfile} --format={fmt}"
        for fmt, outfile in _ESBUILD_OUTPUTS[module_format]
    ]
    if watch:
        # Watch mode rebuilds the primary output only.
        return f"{commands[0]} --watch"
    return " && ".join(commands)


def build_script(build_system: BuildSystem, module_format: ModuleFormat = ModuleFormat.ESM) -> str:
    if build_system == BuildSystem.ESBUILD:
        return esbuild_command(module_format)
    return BUILD_SCRIPTS.get(build_system, "tsc")


def dev_script(build_system: BuildSystem, module_format: ModuleFormat = ModuleFormat.ESM) -> str:
    if build_system == BuildSystem.ESBUILD:
        return esbuild_command(module_format, watch=True)
    return DEV_SCRIPTS.get(build_system, "tsc --watch")


# ---------------------------------------------------------------------------
# Context and manifest synthesis
# ---------------------------------------------------------------------------


def group_dependencies(deps: list[DependencySpec]) -> dict[DependencyKind, dict[str, str]]:
    """Fold *deps* into one name -> range map per kind; the last entry per name wins."""
    grouped: dict[DependencyKind, dict[str, str]] = {kind: {} for kind in DependencyKind}
    for dep in deps:
        grouped[dep.kind][dep.name] = dep.version
    return grouped


def export_conditions(entry: ExportEntry, dual: bool) -> dict[str, str]:
    """Translate *entry* into the nested conditional-exports shape."""
    conditions: dict[str, str] = {}
    if entry.types_path:
        conditions["types"] = entry.types_path
    if entry.import_path:
        conditions["import"] = entry.import_path
    if dual and entry.require_path:
        conditions["require"] = entry.require_path
    default = entry.default_path or entry.import_path
    if default:
        conditions["default"] = default
    return conditions


def build_exports(exports: list[ExportEntry], dual: bool) -> dict[str, dict[str, str]]:
    return {entry.path: export_conditions(entry, dual) for entry in exports}


def build_template_context(generator: Generator, config: GeneratorConfig) -> dict[str, Any]:
    """Return the single context every template of a run is rendered with."""
    now = datetime.now(timezone.utc)
    grouped = group_dependencies(generator.get_dependencies(config))
    extras = generator.get_package_json_extras(config)

    return {
        **config.model_dump(mode="json"),
        "current_year": now.year,
        "date": now.date().isoformat(),
        "js_extension": config.js_extension,
        "cli_version": __version__,
        "dependencies": grouped[DependencyKind.RUNTIME],
        "dev_dependencies": grouped[DependencyKind.DEV],
        "peer_dependencies": grouped[DependencyKind.PEER],
        "optional_dependencies": grouped[DependencyKind.OPTIONAL],
        "exports": [entry.model_dump() for entry in generator.get_exports(config)],
        **extras,
        "framework": generator.meta.framework.value,
        "generator_id": generator.meta.id,
    }


def build_package_json(generator: Generator, config: GeneratorConfig) -> dict[str, Any]:
    """Synthesise the package.json manifest for *config*.

    Fixed fields come first; generator extras are merged on top except for
    ``scripts``, which is merged key by key so the fixed build, dev and test
    scripts survive unless a generator replaces them.  Preset-supplied
    ``additional_scripts`` are applied last.
    """
    extras = dict(generator.get_package_json_extras(config))

    scripts = {
        "build": build_script(config.build_system, config.module_format),
        "dev": dev_script(config.build_system, config.module_format),
        "test": "vitest",
        "test:coverage": "vitest --coverage",
        "typecheck": "tsc --noEmit",
        "prepublishOnly": "npm run build",
    }
    scripts.update(extras.pop("scripts", {}))
    scripts.update(config.additional_scripts)

    manifest: dict[str, Any] = {
        "name": config.name,
        "version": INITIAL_VERSION,
        "description": config.description,
        "type": "module",
        "main": f"./dist/index{config.js_extension}",
        "module": "./dist/index.js",
        "types": "./dist/index.d.ts",
        "exports": build_exports(generator.get_exports(config), config.is_dual),
        "files": ["dist", "README.md", "LICENSE", "CHANGELOG.md"],
        "scripts": scripts,
        "keywords": [],
        "author": config.author,
        "license": config.license,
        "sideEffects": False,
    }
    if config.module_format == ModuleFormat.CJS:
        # CommonJS-only builds have no ES module entry.
        del manifest["module"]
    manifest.update(extras)

    if config.repository:
        manifest["repository"] = {"type": "git", "url": config.repository}

    grouped = group_dependencies(generator.get_dependencies(config))
    for kind, section in DEPENDENCY_SECTIONS.items():
        if grouped[kind]:
            manifest[section] = dict(sorted(grouped[kind].items()))

    return manifest


def next_steps(config: GeneratorConfig) -> list[str]:
    """Commands to run after generation; no ``cd`` when the package is the working directory."""
    steps = [
        INSTALL_COMMANDS.get(config.package_manager, "npm install"),
        "npm run build",
        "npm run test",
    ]
    target = Path(config.out_dir).resolve()
    if target != Path.cwd().resolve():
        steps.insert(0, f"cd {target.name}")
    return steps


def _is_executable(relative_path: str) -> bool:
    return relative_path.endswith(".sh") or relative_path.startswith(".husky/")


def alternate_references(reference: str, framework: str) -> list[str]:
    """Fallback references tried when *reference* is not found.

    A reference written with a redundant ``common/`` segment or without its
    framework directory resolves to the framework directory, and one that
    repeats its framework prefix resolves with the prefix stripped.  Any
    other template-authoring mistake is fatal.
    """
    stripped = reference.replace(f"{framework}/", "").replace("common/", "")
    candidates = [f"{framework}/{stripped}", reference.replace(f"{framework}/", "")]
    alternates: list[str] = []
    for candidate in candidates:
        if candidate != reference and candidate not in alternates:
            alternates.append(candidate)
    return alternates


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------


class PackageGenerator:
    """Drives one generator through a generation run.

    The registry is injected by the caller; use
    ``pkgscaffold.registry.create_default_registry()`` for the built-ins.
    """

    def __init__(
        self,
        registry: GeneratorRegistry,
        renderer: TemplateRenderer | None = None,
    ) -> None:
        self.registry = registry
        self.renderer = renderer or TemplateRenderer()

    # -- Public API --------------------------------------------------------

    def generate_package(self, framework: str, config: GeneratorConfig) -> GenerationResult:
        """Generate a package for *framework* into ``config.out_dir``.

        Every expected failure is reported as a failed ``GenerationResult``
        carrying the error message and the files written before it.  No
        file is written when resolution or validation fails.
        """
        written: list[str] = []
        warnings: list[str] = []
        try:
            generator = self._resolve(framework)
            warnings.extend(self._validate(generator, config))

            out_dir = self._prepare_output_dir(config.out_dir)
            context = build_template_context(generator, config)

            for entry in generator.get_files(config):
                if not entry.applies_to(config):
                    print_debug(f"Skipping {entry.path}")
                    continue
                content = self._content_for(entry, context, generator.meta.framework.value)
                content = self._format(content, entry.path, warnings)
                self._write(out_dir, entry.path, content)
                written.append(entry.path)

            manifest = build_package_json(generator, config)
            self._write(out_dir, "package.json", dump_json(manifest))
            written.append("package.json")

            result = GenerationResult(
                success=True,
                files=list(written),
                warnings=list(warnings),
                next_steps=next_steps(config),
            )
            self._run_post_generate(generator, config, result)
            return result
        except (ScaffoldError, OSError) as exc:
            return GenerationResult(
                success=False,
                files=list(written),
                warnings=list(warnings),
                error=str(exc),
            )

    # -- Steps -------------------------------------------------------------

    def _resolve(self, framework: str) -> Generator:
        generator = self.registry.get_primary(framework)
        if generator is None:
            raise GeneratorNotFoundError(framework)
        print_debug(f"Using generator {generator.meta.id} for {framework}")
        return generator

    def _validate(self, generator: Generator, config: GeneratorConfig) -> list[str]:
        """Validate *config*; return warning messages or raise on any error."""
        extension_issues = check_extensions(config.extensions)
        if extension_issues:
            raise ValidationError(extension_issues)

        validation = generator.validate(config)
        if not validation.valid:
            raise ValidationError(validation.errors())
        return [
            issue.message
            for issue in validation.issues
            if issue.severity == Severity.WARNING
        ]

    def _prepare_output_dir(self, out_dir: str) -> Path:
        path = Path(out_dir)
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise WriteError(path, exc.strerror or str(exc)) from exc
        return path

    def _content_for(self, entry: GeneratedFile, context: dict[str, Any], framework: str) -> str:
        if not entry.is_template:
            return entry.template
        try:
            return self.renderer.render(entry.template, context)
        except TemplateNotFoundError:
            alternates = alternate_references(entry.template, framework)
            for alternate in alternates:
                try:
                    content = self.renderer.render(alternate, context)
                except TemplateNotFoundError:
                    continue
                print_debug(f"Resolved {entry.template} as {alternate}")
                return content
            raise TemplateNotFoundError(entry.template, tried=alternates) from None

    def _format(self, content: str, path: str, warnings: list[str]) -> str:
        try:
            return format_content(content, path)
        except FormatError as exc:
            warnings.append(f"Could not format {path}: {exc}")
            return content

    def _write(self, out_dir: Path, relative_path: str, content: str) -> None:
        target = out_dir / relative_path
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(target, "w", encoding="utf-8", newline="\n") as handle:
                handle.write(content)
            if _is_executable(relative_path):
                os.chmod(target, 0o755)
        except OSError as exc:
            raise WriteError(target, exc.strerror or str(exc)) from exc
        print_debug(f"Wrote {relative_path}")

    def _run_post_generate(
        self,
        generator: Generator,
        config: GeneratorConfig,
        result: GenerationResult,
    ) -> None:
        try:
            generator.post_generate(config, result)
        except ScaffoldError:
            raise
        except Exception as exc:
            raise HookError(generator.meta.id, exc) from exc


def generate_package(
    framework: str,
    config: GeneratorConfig,
    registry: GeneratorRegistry | None = None,
) -> GenerationResult:
    """Convenience wrapper: generate with a default registry unless one is given."""
    if registry is None:
        registry = create_default_registry()
    return PackageGenerator(registry).generate_package(framework, config)
