"""Shared pytest fixtures for the pkgscaffold test suite.

Provides reusable fixtures for:
- Generator configurations pointed at a temporary output directory
- A registry pre-loaded with the built-in generators
- A throwaway template root and renderer for orchestrator tests
- Sample package directories for the package checker
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

import pytest

from pkgscaffold.models import GeneratorConfig
from pkgscaffold.registry import GeneratorRegistry, create_default_registry
from pkgscaffold.scaffolder.templates import TemplateRenderer
from pkgscaffold.utils import set_verbose


@pytest.fixture(autouse=True)
def _quiet_console():
    """Keep debug output off between tests."""
    set_verbose(False)
    yield
    set_verbose(False)


# ---------------------------------------------------------------------------
# Configurations
# ---------------------------------------------------------------------------


@pytest.fixture
def out_dir(tmp_path: Path) -> Path:
    """Output directory for a generated package (not created yet)."""
    return tmp_path / "my-lib"


@pytest.fixture
def make_config(out_dir: Path) -> Callable[..., GeneratorConfig]:
    """Factory for ``GeneratorConfig`` with sensible test defaults."""

    def _make(**overrides: Any) -> GeneratorConfig:
        values: dict[str, Any] = {
            "name": "my-lib",
            "description": "A test package",
            "author": "Test Author",
            "out_dir": str(out_dir),
        }
        values.update(overrides)
        return GeneratorConfig(**values)

    return _make


@pytest.fixture
def config(make_config) -> GeneratorConfig:
    return make_config()


# ---------------------------------------------------------------------------
# Registry & rendering
# ---------------------------------------------------------------------------


@pytest.fixture
def registry() -> GeneratorRegistry:
    return create_default_registry()


@pytest.fixture
def empty_registry() -> GeneratorRegistry:
    return GeneratorRegistry()


@pytest.fixture
def template_root(tmp_path: Path) -> Path:
    """A small template tree used by renderer and orchestrator tests."""
    root = tmp_path / "templates"
    files = {
        "common/README.md.j2": "# {{ name }}\n\n{{ description }}\n",
        "common/config.json.j2": '{"name": {{ json(name) }}, "format": "{{ module_format }}"}\n',
        "solid/src/index.ts.j2": "export const name = '{{ name }}';\n",
        "solid/src/extra.ts.j2": "export const generator = '{{ generator_id }}';\n",
        "solid/example/demo.ts.j2": "console.log('{{ name }}');\n",
        "helpers.j2": "{{ pascal_case(package_short_name(name)) }}|{{ is_scoped(name) }}\n",
    }
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def renderer(template_root: Path) -> TemplateRenderer:
    return TemplateRenderer(template_root)


# ---------------------------------------------------------------------------
# Package directories for the checker
# ---------------------------------------------------------------------------


@pytest.fixture
def write_package(tmp_path: Path) -> Callable[..., Path]:
    """Write a package.json (plus optional extra files) into a fresh directory."""

    def _write(manifest: dict[str, Any] | None, files: dict[str, str] | None = None) -> Path:
        root = tmp_path / "pkg"
        root.mkdir(exist_ok=True)
        if manifest is not None:
            (root / "package.json").write_text(json.dumps(manifest, indent=2), encoding="utf-8")
        for relative, content in (files or {}).items():
            path = root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return root

    return _write


@pytest.fixture
def good_manifest() -> dict[str, Any]:
    return {
        "name": "good-lib",
        "version": "1.0.0",
        "type": "module",
        "main": "./dist/index.js",
        "module": "./dist/index.js",
        "types": "./dist/index.d.ts",
        "exports": {
            ".": {
                "types": "./dist/index.d.ts",
                "import": "./dist/index.js",
                "default": "./dist/index.js",
            }
        },
        "sideEffects": False,
        "peerDependencies": {"react": "^18.0.0"},
        "engines": {"node": ">=18.0.0"},
    }


@pytest.fixture
def built_files() -> dict[str, str]:
    return {
        "dist/index.js": "export const x = 1;\n",
        "dist/index.js.map": "{}",
        "dist/index.d.ts": "export declare const x: number;\n",
        "tsconfig.json": json.dumps({"compilerOptions": {"declaration": True}}),
        "src/index.ts": "export * from './a';\n",
    }
