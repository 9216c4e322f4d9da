"""Tests for the React library generator."""

from __future__ import annotations

import pytest

from pkgscaffold.generators.react import ReactPlugin, react_generator
from pkgscaffold.models import DependencyKind, Framework, Severity


def _paths(config):
    return [f.path for f in react_generator.get_files(config) if f.applies_to(config)]


class TestReactGenerator:
    @pytest.mark.unit
    def test_meta(self):
        meta = ReactPlugin.meta
        assert meta.id == "react-library"
        assert meta.framework == Framework.REACT
        assert react_generator.meta is meta

    @pytest.mark.unit
    def test_react_is_a_peer(self, config):
        deps = {(d.name, d.kind): d.version for d in react_generator.get_dependencies(config)}
        assert deps[("react", DependencyKind.PEER)] == "^18.0.0 || ^19.0.0"
        assert deps[("react-dom", DependencyKind.PEER)] == "^18.0.0 || ^19.0.0"
        assert ("react", DependencyKind.RUNTIME) not in deps
        assert ("@testing-library/react", DependencyKind.DEV) in deps

    @pytest.mark.unit
    def test_source_files(self, config):
        paths = _paths(config)
        for expected in (
            "src/index.ts",
            "src/components/Button/Button.tsx",
            "src/components/Button/Button.test.tsx",
            "src/hooks/useToggle.ts",
            "eslint.config.js",
            "vitest.setup.ts",
        ):
            assert expected in paths
        assert not any(p.startswith("example/") for p in paths)

    @pytest.mark.unit
    def test_example_files(self, make_config):
        paths = _paths(make_config(include_example=True))
        assert "example/App.tsx" in paths
        assert "example/vite.config.ts" in paths

    @pytest.mark.unit
    def test_extras(self, make_config):
        extras = react_generator.get_package_json_extras(make_config(include_example=True))
        assert extras["peerDependenciesMeta"] == {"react-dom": {"optional": True}}
        assert extras["scripts"]["lint"] == "eslint src"
        assert extras["scripts"]["example:dev"] == "cd example && npm run dev"
        assert extras["sideEffects"] is False

    @pytest.mark.unit
    def test_node_target_warns(self, make_config):
        result = react_generator.validate(make_config(runtime_target="node"))
        assert result.valid
        assert [i.severity for i in result.issues] == [Severity.WARNING]
        assert "browser" in result.issues[0].message

    @pytest.mark.unit
    def test_cli_type_rejected(self, make_config):
        result = react_generator.validate(make_config(package_type="cli"))
        assert not result.valid
