"""Framework-agnostic TypeScript utility package generator."""

from __future__ import annotations

from typing import Any

from pkgscaffold.generators.base import (
    BaseGenerator,
    dev_dep,
    example_files,
    template_file,
)
from pkgscaffold.models import (
    BuildSystem,
    DependencySpec,
    Framework,
    GeneratedFile,
    GeneratorConfig,
    GeneratorMeta,
    PackageType,
    RuntimeTarget,
    ValidationIssue,
)


class VanillaPlugin:
    meta = GeneratorMeta(
        id="typescript-utility",
        name="TypeScript Utility Package",
        framework=Framework.VANILLA,
        description="Generate a framework-agnostic TypeScript utility library",
        version="1.0.0",
        supported_package_types=(PackageType.UTILITY, PackageType.LIBRARY, PackageType.SDK),
        supported_runtime_targets=(
            RuntimeTarget.BROWSER,
            RuntimeTarget.NODE,
            RuntimeTarget.EDGE,
            RuntimeTarget.UNIVERSAL,
        ),
        recommended_build_system=BuildSystem.TSUP,
    )

    def dependencies(self, config: GeneratorConfig) -> list[DependencySpec]:
        return [
            dev_dep("eslint", "^9.17.0"),
            dev_dep("@eslint/js", "^9.17.0"),
            dev_dep("typescript-eslint", "^8.18.0"),
            dev_dep("globals", "^15.0.0"),
            dev_dep("prettier", "^3.4.0"),
        ]

    def files(self, config: GeneratorConfig) -> list[GeneratedFile]:
        return [
            template_file("src/index.ts", "vanilla/src/index.ts.j2"),
            template_file("src/utils/string.ts", "vanilla/src/utils/string.ts.j2"),
            template_file("src/utils/string.test.ts", "vanilla/src/utils/string.test.ts.j2"),
            template_file("src/utils/array.ts", "vanilla/src/utils/array.ts.j2"),
            template_file("src/utils/array.test.ts", "vanilla/src/utils/array.test.ts.j2"),
            template_file("src/utils/index.ts", "vanilla/src/utils/index.ts.j2"),
            template_file("src/types.ts", "vanilla/src/types.ts.j2"),
            template_file("eslint.config.js", "vanilla/eslint.config.js.j2"),
            template_file(".prettierrc", "vanilla/prettierrc.j2"),
            *example_files("vanilla", ["index.html", "main.ts", "vite.config.ts", "package.json", "tsconfig.json"]),
        ]

    def package_json_extras(self, config: GeneratorConfig) -> dict[str, Any]:
        scripts = {
            "lint": "eslint src",
            "lint:fix": "eslint src --fix",
            "format": "prettier --write src",
            "format:check": "prettier --check src",
        }
        if config.include_example:
            scripts["example:install"] = "cd example && npm install"
            scripts["example:dev"] = "cd example && npm run dev"

        extras: dict[str, Any] = {"scripts": scripts}
        if config.runtime_target in (RuntimeTarget.NODE, RuntimeTarget.UNIVERSAL):
            extras["engines"] = {"node": ">=18.0.0"}
        return extras

    def check_config(self, config: GeneratorConfig) -> list[ValidationIssue]:
        return []


vanilla_generator = BaseGenerator(VanillaPlugin())
