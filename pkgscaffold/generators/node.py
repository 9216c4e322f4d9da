"""Node.js package and CLI tool generator."""

from __future__ import annotations

from typing import Any

from pkgscaffold.generators.base import (
    BaseGenerator,
    dep,
    dev_dep,
    literal_file,
    template_file,
    wants_example,
    warning,
)
from pkgscaffold.models import (
    BuildSystem,
    DependencySpec,
    ExportEntry,
    Framework,
    GeneratedFile,
    GeneratorConfig,
    GeneratorMeta,
    ModuleFormat,
    PackageType,
    RuntimeTarget,
    ValidationIssue,
)
from pkgscaffold.utils import package_short_name

NODE_VERSION = "22"


def _is_cli(config: GeneratorConfig) -> bool:
    return config.package_type == PackageType.CLI


def _is_library(config: GeneratorConfig) -> bool:
    return config.package_type != PackageType.CLI


class NodePlugin:
    """Libraries get a small client module; CLIs get a commander entry point."""

    meta = GeneratorMeta(
        id="node-package",
        name="Node.js Package",
        framework=Framework.NODE,
        description="Generate a Node.js package or CLI tool with TypeScript",
        version="1.0.0",
        supported_package_types=(PackageType.UTILITY, PackageType.LIBRARY, PackageType.CLI, PackageType.SDK),
        supported_runtime_targets=(RuntimeTarget.NODE, RuntimeTarget.EDGE),
        recommended_build_system=BuildSystem.TSUP,
    )

    def dependencies(self, config: GeneratorConfig) -> list[DependencySpec]:
        deps = [
            dev_dep("@types/node", "^22.10.0"),
            dev_dep("eslint", "^9.17.0"),
            dev_dep("@eslint/js", "^9.17.0"),
            dev_dep("typescript-eslint", "^8.18.0"),
            dev_dep("globals", "^15.0.0"),
        ]
        if _is_cli(config):
            deps += [
                dep("commander", "^12.1.0"),
                dep("chalk", "^5.3.0"),
                dep("@inquirer/prompts", "^7.2.0"),
                dep("ora", "^8.1.0"),
            ]
        return deps

    def files(self, config: GeneratorConfig) -> list[GeneratedFile]:
        if _is_cli(config):
            sources = [
                template_file("src/index.ts", "node/src/index-cli.ts.j2"),
                template_file("src/bin/cli.ts", "node/src/bin/cli.ts.j2"),
                template_file("src/commands/init.ts", "node/src/commands/init.ts.j2"),
                template_file("src/commands/index.ts", "node/src/commands/index.ts.j2"),
                template_file("src/utils/logger.ts", "node/src/utils/logger.ts.j2"),
                template_file("src/utils/index.ts", "node/src/utils/index.ts.j2"),
            ]
        else:
            sources = [
                template_file("src/index.ts", "node/src/index.ts.j2"),
                template_file("src/core/client.ts", "node/src/core/client.ts.j2"),
                template_file("src/core/client.test.ts", "node/src/core/client.test.ts.j2"),
                template_file("src/core/index.ts", "node/src/core/index.ts.j2"),
                template_file("src/types.ts", "node/src/types.ts.j2"),
            ]
        return [
            *sources,
            template_file("eslint.config.js", "node/eslint.config.js.j2"),
            literal_file(".nvmrc", f"{NODE_VERSION}\n"),
            template_file("example/package.json", "node/example/package.json.j2", condition=wants_example),
            template_file(
                "example/demo.sh",
                "node/example/demo.sh.j2",
                condition=lambda c: c.include_example and _is_cli(c),
            ),
            template_file(
                "example/usage.ts",
                "node/example/usage.ts.j2",
                condition=lambda c: c.include_example and _is_library(c),
            ),
        ]

    def extra_exports(self, config: GeneratorConfig) -> list[ExportEntry]:
        if not _is_cli(config):
            return []
        bin_path = f"./dist/bin/cli{config.js_extension}"
        return [ExportEntry(
            path="./bin",
            types_path="./dist/bin/cli.d.ts",
            import_path=None if config.module_format == ModuleFormat.CJS else bin_path,
            default_path=bin_path,
        )]

    def package_json_extras(self, config: GeneratorConfig) -> dict[str, Any]:
        scripts = {
            "lint": "eslint src",
            "lint:fix": "eslint src --fix",
        }
        if config.include_example and not _is_cli(config):
            scripts["example:run"] = "cd example && npx tsx usage.ts"

        extras: dict[str, Any] = {
            "engines": {"node": ">=18.0.0"},
            "scripts": scripts,
        }
        if _is_cli(config):
            extras["bin"] = {package_short_name(config.name): f"./dist/bin/cli{config.js_extension}"}
        return extras

    def check_config(self, config: GeneratorConfig) -> list[ValidationIssue]:
        if config.runtime_target == RuntimeTarget.BROWSER:
            return [warning(
                "Node.js packages typically target Node.js, not browser",
                suggestion='Consider using "node" or "universal" as the runtime target',
            )]
        return []


node_generator = BaseGenerator(NodePlugin())
