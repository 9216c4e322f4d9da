"""Svelte component library generator, packaged with svelte-package."""

from __future__ import annotations

from typing import Any

from pkgscaffold.generators.base import (
    BaseGenerator,
    dev_dep,
    example_files,
    peer_dep,
    template_file,
    warning,
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


class SveltePlugin:
    meta = GeneratorMeta(
        id="svelte-library",
        name="Svelte Library",
        framework=Framework.SVELTE,
        description="Generate a Svelte component library with TypeScript, Vite, and svelte-package",
        version="1.0.0",
        supported_package_types=(PackageType.LIBRARY, PackageType.PLUGIN, PackageType.UTILITY),
        supported_runtime_targets=(RuntimeTarget.BROWSER, RuntimeTarget.UNIVERSAL),
        recommended_build_system=BuildSystem.VITE,
    )

    def dependencies(self, config: GeneratorConfig) -> list[DependencySpec]:
        return [
            peer_dep("svelte", "^4.0.0 || ^5.0.0"),
            dev_dep("@sveltejs/package", "^2.3.0"),
            dev_dep("@sveltejs/vite-plugin-svelte", "^4.0.0"),
            # needed locally for svelte-check and the tests
            dev_dep("svelte", "^5.0.0"),
            dev_dep("svelte-check", "^4.1.0"),
            dev_dep("@testing-library/svelte", "^5.2.0"),
            dev_dep("jsdom", "^25.0.0"),
            dev_dep("eslint", "^9.17.0"),
            dev_dep("@eslint/js", "^9.17.0"),
            dev_dep("eslint-plugin-svelte", "^2.46.0"),
            dev_dep("typescript-eslint", "^8.18.0"),
            dev_dep("svelte-preprocess", "^6.0.0"),
        ]

    def files(self, config: GeneratorConfig) -> list[GeneratedFile]:
        return [
            template_file("src/lib/index.ts", "svelte/src/lib/index.ts.j2"),
            template_file("src/lib/components/Button/Button.svelte", "svelte/src/lib/components/Button/Button.svelte.j2"),
            template_file("src/lib/components/Button/Button.test.ts", "svelte/src/lib/components/Button/Button.test.ts.j2"),
            template_file("src/lib/components/Button/index.ts", "svelte/src/lib/components/Button/index.ts.j2"),
            template_file("src/lib/stores/toggle.ts", "svelte/src/lib/stores/toggle.ts.j2"),
            template_file("src/lib/stores/toggle.test.ts", "svelte/src/lib/stores/toggle.test.ts.j2"),
            template_file("src/lib/stores/index.ts", "svelte/src/lib/stores/index.ts.j2"),
            template_file("svelte.config.js", "svelte/svelte.config.js.j2"),
            template_file("eslint.config.js", "svelte/eslint.config.js.j2"),
            *example_files("svelte", [
                "index.html", "main.ts", "App.svelte", "vite.config.ts",
                "package.json", "tsconfig.json", "svelte.config.js",
            ]),
        ]

    def package_json_extras(self, config: GeneratorConfig) -> dict[str, Any]:
        scripts = {
            "build": "svelte-package -i src/lib",
            "lint": "eslint src",
            "lint:fix": "eslint src --fix",
            "check": "svelte-check --tsconfig ./tsconfig.json",
        }
        if config.include_example:
            scripts["example:install"] = "cd example && npm install"
            scripts["example:dev"] = "cd example && npm run dev"
        return {
            "svelte": "./dist/index.js",
            "scripts": scripts,
            "files": ["dist", "!dist/**/*.test.*"],
        }

    def check_config(self, config: GeneratorConfig) -> list[ValidationIssue]:
        if config.build_system != BuildSystem.VITE:
            return [warning(
                "Svelte libraries typically use @sveltejs/package with Vite",
                suggestion="Consider using Vite for the build system",
            )]
        return []


svelte_generator = BaseGenerator(SveltePlugin())
