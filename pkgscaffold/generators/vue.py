"""Vue 3 component library generator (Composition API)."""

from __future__ import annotations

from typing import Any

from pkgscaffold.generators.base import (
    BaseGenerator,
    dev_dep,
    example_files,
    info,
    peer_dep,
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


class VuePlugin:
    meta = GeneratorMeta(
        id="vue-library",
        name="Vue 3 Library",
        framework=Framework.VUE,
        description="Generate a Vue 3 component library with Composition API, TypeScript, and Vite",
        version="1.0.0",
        supported_package_types=(PackageType.LIBRARY, PackageType.PLUGIN, PackageType.UTILITY),
        supported_runtime_targets=(RuntimeTarget.BROWSER, RuntimeTarget.UNIVERSAL),
        recommended_build_system=BuildSystem.VITE,
    )

    def dependencies(self, config: GeneratorConfig) -> list[DependencySpec]:
        return [
            peer_dep("vue", "^3.4.0"),
            dev_dep("@vitejs/plugin-vue", "^5.2.0"),
            dev_dep("vue-tsc", "^2.2.0"),
            dev_dep("@vue/test-utils", "^2.4.0"),
            dev_dep("@testing-library/vue", "^8.1.0"),
            dev_dep("jsdom", "^25.0.0"),
            dev_dep("happy-dom", "^15.11.0"),
            dev_dep("eslint", "^9.17.0"),
            dev_dep("@eslint/js", "^9.17.0"),
            dev_dep("eslint-plugin-vue", "^9.32.0"),
            dev_dep("typescript-eslint", "^8.18.0"),
        ]

    def files(self, config: GeneratorConfig) -> list[GeneratedFile]:
        return [
            template_file("src/index.ts", "vue/src/index.ts.j2"),
            template_file("src/components/Button/Button.vue", "vue/src/components/Button/Button.vue.j2"),
            template_file("src/components/Button/Button.test.ts", "vue/src/components/Button/Button.test.ts.j2"),
            template_file("src/components/Button/index.ts", "vue/src/components/Button/index.ts.j2"),
            template_file("src/composables/useToggle.ts", "vue/src/composables/useToggle.ts.j2"),
            template_file("src/composables/useToggle.test.ts", "vue/src/composables/useToggle.test.ts.j2"),
            template_file("src/composables/index.ts", "vue/src/composables/index.ts.j2"),
            template_file("src/plugin.ts", "vue/src/plugin.ts.j2"),
            template_file("src/shims-vue.d.ts", "vue/src/shims-vue.d.ts.j2"),
            template_file("eslint.config.js", "vue/eslint.config.js.j2"),
            *example_files("vue", ["index.html", "main.ts", "App.vue", "vite.config.ts", "package.json", "tsconfig.json"]),
        ]

    def package_json_extras(self, config: GeneratorConfig) -> dict[str, Any]:
        scripts = {
            "lint": "eslint src",
            "lint:fix": "eslint src --fix",
            "typecheck": "vue-tsc --noEmit",
        }
        if config.include_example:
            scripts["example:install"] = "cd example && npm install"
            scripts["example:dev"] = "cd example && npm run dev"
        return {"scripts": scripts}

    def check_config(self, config: GeneratorConfig) -> list[ValidationIssue]:
        if config.build_system != BuildSystem.VITE:
            return [info(
                "Vite is the recommended build system for Vue libraries",
                suggestion="Consider using Vite for optimal Vue support",
            )]
        return []


vue_generator = BaseGenerator(VuePlugin())
