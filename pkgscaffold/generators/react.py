"""React component library generator."""

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


class ReactPlugin:
    """React libraries ship components and hooks, with React as a peer."""

    meta = GeneratorMeta(
        id="react-library",
        name="React Library",
        framework=Framework.REACT,
        description="Generate a React component library with TypeScript, modern build tools, and JSX support",
        version="1.0.0",
        supported_package_types=(PackageType.LIBRARY, PackageType.UTILITY, PackageType.PLUGIN),
        supported_runtime_targets=(RuntimeTarget.BROWSER, RuntimeTarget.UNIVERSAL, RuntimeTarget.NODE),
        recommended_build_system=BuildSystem.TSUP,
    )

    def dependencies(self, config: GeneratorConfig) -> list[DependencySpec]:
        return [
            peer_dep("react", "^18.0.0 || ^19.0.0"),
            peer_dep("react-dom", "^18.0.0 || ^19.0.0"),
            dev_dep("@types/react", "^18.0.0"),
            dev_dep("@types/react-dom", "^18.0.0"),
            dev_dep("@testing-library/react", "^16.1.0"),
            dev_dep("@testing-library/jest-dom", "^6.6.0"),
            dev_dep("jsdom", "^25.0.0"),
            dev_dep("eslint", "^9.17.0"),
            dev_dep("@eslint/js", "^9.17.0"),
            dev_dep("eslint-plugin-react", "^7.37.0"),
            dev_dep("eslint-plugin-react-hooks", "^5.1.0"),
            dev_dep("globals", "^15.0.0"),
            dev_dep("typescript-eslint", "^8.18.0"),
            dev_dep("@vitejs/plugin-react", "^4.3.0"),
        ]

    def files(self, config: GeneratorConfig) -> list[GeneratedFile]:
        return [
            template_file("src/index.ts", "react/src/index.ts.j2"),
            template_file("src/components/Button/Button.tsx", "react/src/components/Button/Button.tsx.j2"),
            template_file("src/components/Button/Button.test.tsx", "react/src/components/Button/Button.test.tsx.j2"),
            template_file("src/components/Button/index.ts", "react/src/components/Button/index.ts.j2"),
            template_file("src/hooks/useToggle.ts", "react/src/hooks/useToggle.ts.j2"),
            template_file("src/hooks/useToggle.test.ts", "react/src/hooks/useToggle.test.ts.j2"),
            template_file("src/hooks/index.ts", "react/src/hooks/index.ts.j2"),
            template_file("eslint.config.js", "react/eslint.config.js.j2"),
            template_file("vitest.setup.ts", "common/vitest.setup.ts.j2"),
            *example_files("react", ["index.html", "main.tsx", "App.tsx", "vite.config.ts", "package.json", "tsconfig.json"]),
        ]

    def package_json_extras(self, config: GeneratorConfig) -> dict[str, Any]:
        scripts = {
            "lint": "eslint src",
            "lint:fix": "eslint src --fix",
        }
        if config.include_example:
            scripts["example:install"] = "cd example && npm install"
            scripts["example:dev"] = "cd example && npm run dev"
        return {
            "peerDependenciesMeta": {"react-dom": {"optional": True}},
            "scripts": scripts,
        }

    def check_config(self, config: GeneratorConfig) -> list[ValidationIssue]:
        if config.runtime_target == RuntimeTarget.NODE:
            return [warning(
                "React libraries typically target browser, not Node.js",
                suggestion='Consider using "browser" or "universal" as the runtime target',
            )]
        return []


react_generator = BaseGenerator(ReactPlugin())
