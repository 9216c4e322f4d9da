"""Tests for the package generation orchestrator.

Covers:
- Resolution failures (unknown framework) and validation failures
- File ordering, conditional files, literal files
- Template fallback references and missing templates
- Formatting failures reported as warnings
- Post-generation hook success and failure
- Executable bits and write failures
- package.json synthesis (exports, scripts, dependency sections)
- Template context contents and next steps
- Re-running into the same directory
"""

from __future__ import annotations

import json
import os
import stat
from typing import Any, Callable, Optional

import pytest

from pkgscaffold import __version__
from pkgscaffold.errors import ScaffoldError
from pkgscaffold.generators.base import (
    dep,
    dev_dep,
    literal_file,
    template_file,
    wants_example,
)
from pkgscaffold.models import (
    DependencyKind,
    DependencySpec,
    ExportEntry,
    Framework,
    GeneratedFile,
    GenerationResult,
    GeneratorConfig,
    GeneratorMeta,
    PackageType,
    RuntimeTarget,
    Severity,
    ValidationIssue,
    ValidationResult,
)
from pkgscaffold.scaffolder.generator import (
    PackageGenerator,
    alternate_references,
    build_package_json,
    build_template_context,
    export_conditions,
    generate_package,
    group_dependencies,
    next_steps,
)


# ---------------------------------------------------------------------------
# Markers
# ---------------------------------------------------------------------------

pytestmark = pytest.mark.unit


# ---------------------------------------------------------------------------
# Fake generator
# ---------------------------------------------------------------------------


def _default_files() -> list[GeneratedFile]:
    return [
        template_file("README.md", "common/README.md.j2"),
        template_file("config.json", "common/config.json.j2"),
        template_file("src/index.ts", "solid/src/index.ts.j2"),
        template_file("example/demo.ts", "solid/example/demo.ts.j2", condition=wants_example),
        literal_file(".nvmrc", "22\n"),
    ]


class FakeGenerator:
    """Minimal ``Generator`` whose templates live in the ``template_root`` fixture."""

    def __init__(
        self,
        files: Optional[list[GeneratedFile]] = None,
        issues: tuple[ValidationIssue, ...] = (),
        hook: Optional[Callable[[GeneratorConfig, GenerationResult], None]] = None,
    ) -> None:
        self.meta = GeneratorMeta(
            id="fake-solid",
            name="Fake Solid",
            framework=Framework.SOLID,
            supported_package_types=(PackageType.LIBRARY,),
            supported_runtime_targets=(RuntimeTarget.BROWSER,),
        )
        self.files = _default_files() if files is None else files
        self.issues = issues
        self.hook = hook

    def get_dependencies(self, config: GeneratorConfig) -> list[DependencySpec]:
        return [
            dep("solid-js", "^1.8.0", DependencyKind.PEER),
            dev_dep("vitest", "^2.1.0"),
            dev_dep("typescript", "^5.0.0"),
            dev_dep("typescript", "^5.7.0"),
        ]

    def get_exports(self, config: GeneratorConfig) -> list[ExportEntry]:
        return [ExportEntry(
            path=".",
            types_path="./dist/index.d.ts",
            import_path="./dist/index.js",
            require_path="./dist/index.cjs",
        )]

    def get_files(self, config: GeneratorConfig) -> list[GeneratedFile]:
        return list(self.files)

    def get_package_json_extras(self, config: GeneratorConfig) -> dict[str, Any]:
        return {
            "scripts": {"lint": "eslint src", "test": "vitest run"},
            "engines": {"node": ">=18.0.0"},
        }

    def validate(self, config: GeneratorConfig) -> ValidationResult:
        return ValidationResult(issues=self.issues)

    def post_generate(self, config: GeneratorConfig, result: GenerationResult) -> None:
        if self.hook is not None:
            self.hook(config, result)


@pytest.fixture
def make_orchestrator(empty_registry, renderer):
    def _make(generator: Optional[FakeGenerator] = None) -> PackageGenerator:
        empty_registry.register(generator or FakeGenerator())
        return PackageGenerator(empty_registry, renderer)

    return _make


# ---------------------------------------------------------------------------
# Successful runs
# ---------------------------------------------------------------------------


class TestGenerate:
    def test_writes_files_in_order(self, make_orchestrator, config, out_dir):
        result = make_orchestrator().generate_package("solid", config)

        assert result.success is True
        assert result.error is None
        assert result.files == ["README.md", "config.json", "src/index.ts", ".nvmrc", "package.json"]
        for path in result.files:
            assert (out_dir / path).is_file()

    def test_rendered_and_formatted_content(self, make_orchestrator, config, out_dir):
        make_orchestrator().generate_package("solid", config)

        assert (out_dir / "README.md").read_text(encoding="utf-8") == "# my-lib\n\nA test package\n"
        assert (out_dir / "config.json").read_text(encoding="utf-8") == (
            '{\n  "name": "my-lib",\n  "format": "esm"\n}\n'
        )
        assert (out_dir / "src" / "index.ts").read_text(encoding="utf-8") == "export const name = 'my-lib';\n"
        assert (out_dir / ".nvmrc").read_text(encoding="utf-8") == "22\n"

    def test_conditional_file_skipped(self, make_orchestrator, config, out_dir):
        result = make_orchestrator().generate_package("solid", config)
        assert "example/demo.ts" not in result.files
        assert not (out_dir / "example").exists()

    def test_conditional_file_written(self, make_orchestrator, make_config, out_dir):
        result = make_orchestrator().generate_package("solid", make_config(include_example=True))
        assert "example/demo.ts" in result.files
        assert (out_dir / "example" / "demo.ts").read_text(encoding="utf-8") == "console.log('my-lib');\n"

    def test_framework_enum_accepted(self, make_orchestrator, config):
        assert make_orchestrator().generate_package(Framework.SOLID, config).success

    def test_next_steps(self, make_orchestrator, config):
        result = make_orchestrator().generate_package("solid", config)
        assert result.next_steps == ["cd my-lib", "npm install", "npm run build", "npm run test"]

    def test_validation_warnings_reported(self, make_orchestrator, config):
        issues = (
            ValidationIssue(severity=Severity.WARNING, message="Heads up"),
            ValidationIssue(severity=Severity.INFO, message="Just so you know"),
        )
        result = make_orchestrator(FakeGenerator(issues=issues)).generate_package("solid", config)
        assert result.success
        assert result.warnings == ["Heads up"]

    def test_rerun_is_byte_identical(self, make_orchestrator, config, out_dir):
        orchestrator = make_orchestrator()
        first = orchestrator.generate_package("solid", config)
        snapshot = {path: (out_dir / path).read_bytes() for path in first.files}

        second = orchestrator.generate_package("solid", config)
        assert second.files == first.files
        assert {path: (out_dir / path).read_bytes() for path in second.files} == snapshot

    def test_existing_files_overwritten(self, make_orchestrator, config, out_dir):
        out_dir.mkdir(parents=True)
        (out_dir / "README.md").write_text("old", encoding="utf-8")
        (out_dir / "keep.txt").write_text("mine", encoding="utf-8")

        make_orchestrator().generate_package("solid", config)
        assert (out_dir / "README.md").read_text(encoding="utf-8").startswith("# my-lib")
        assert (out_dir / "keep.txt").read_text(encoding="utf-8") == "mine"


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------


class TestFailures:
    def test_unknown_framework(self, make_orchestrator, config, out_dir):
        result = make_orchestrator().generate_package("cobol", config)
        assert result.success is False
        assert result.error == "No generator found for framework: cobol"
        assert result.files == []
        assert not out_dir.exists()

    def test_validation_error_writes_nothing(self, make_orchestrator, config, out_dir):
        issues = (
            ValidationIssue(severity=Severity.ERROR, message="First problem"),
            ValidationIssue(severity=Severity.WARNING, message="Minor"),
            ValidationIssue(severity=Severity.ERROR, message="Second problem"),
        )
        result = make_orchestrator(FakeGenerator(issues=issues)).generate_package("solid", config)
        assert result.success is False
        assert result.error == "First problem\nSecond problem"
        assert not out_dir.exists()

    def test_unknown_extension_checked_first(self, make_orchestrator, make_config, out_dir):
        issues = (ValidationIssue(severity=Severity.ERROR, message="Generator problem"),)
        config = make_config(extensions={"turbo": True})
        result = make_orchestrator(FakeGenerator(issues=issues)).generate_package("solid", config)
        assert result.success is False
        assert 'Unknown extension flag "turbo"' in result.error
        assert "Generator problem" not in result.error
        assert not out_dir.exists()

    def test_missing_template_keeps_earlier_files(self, make_orchestrator, config, out_dir):
        files = [
            template_file("README.md", "common/README.md.j2"),
            template_file("src/missing.ts", "solid/src/missing.ts.j2"),
            template_file("src/index.ts", "solid/src/index.ts.j2"),
        ]
        result = make_orchestrator(FakeGenerator(files=files)).generate_package("solid", config)

        assert result.success is False
        assert "Template not found: solid/src/missing.ts.j2" in result.error
        assert "also tried: src/missing.ts.j2" in result.error
        assert result.files == ["README.md"]
        assert (out_dir / "README.md").is_file()
        assert not (out_dir / "src" / "index.ts").exists()
        assert not (out_dir / "package.json").exists()

    def test_output_dir_is_a_file(self, make_orchestrator, make_config, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        result = make_orchestrator().generate_package("solid", make_config(out_dir=str(blocker)))
        assert result.success is False
        assert result.error.startswith("Failed to write")
        assert result.files == []

    def test_format_failure_is_warning(self, make_orchestrator, config, out_dir):
        files = [literal_file("broken.json", "{oops")]
        result = make_orchestrator(FakeGenerator(files=files)).generate_package("solid", config)

        assert result.success is True
        assert len(result.warnings) == 1
        assert result.warnings[0].startswith("Could not format broken.json: invalid JSON")
        assert (out_dir / "broken.json").read_text(encoding="utf-8") == "{oops"

    def test_module_function_with_empty_registry(self, empty_registry, config, out_dir):
        result = generate_package("react", config, registry=empty_registry)
        assert result.success is False
        assert result.error == "No generator found for framework: react"
        assert not out_dir.exists()


# ---------------------------------------------------------------------------
# Template fallbacks
# ---------------------------------------------------------------------------


class TestAlternateReferences:
    @pytest.mark.parametrize(
        "reference, expected",
        [
            ("common/src/index.ts.j2", ["solid/src/index.ts.j2"]),
            ("src/index.ts.j2", ["solid/src/index.ts.j2"]),
            ("solid/common/x.j2", ["solid/x.j2", "common/x.j2"]),
            ("solid/src/missing.ts.j2", ["src/missing.ts.j2"]),
        ],
    )
    def test_candidates(self, reference, expected):
        assert alternate_references(reference, "solid") == expected

    def test_misplaced_common_segment_resolves(self, make_orchestrator, config, out_dir):
        files = [template_file("src/extra.ts", "common/src/extra.ts.j2")]
        result = make_orchestrator(FakeGenerator(files=files)).generate_package("solid", config)
        assert result.success
        assert (out_dir / "src" / "extra.ts").read_text(encoding="utf-8") == (
            "export const generator = 'fake-solid';\n"
        )

    def test_missing_framework_dir_resolves(self, make_orchestrator, config):
        files = [template_file("src/index.ts", "src/index.ts.j2")]
        result = make_orchestrator(FakeGenerator(files=files)).generate_package("solid", config)
        assert result.success
        assert result.files == ["src/index.ts", "package.json"]


# ---------------------------------------------------------------------------
# Hooks and permissions
# ---------------------------------------------------------------------------


class TestPostGenerate:
    def test_hook_sees_result(self, make_orchestrator, config):
        seen: list[GenerationResult] = []
        generator = FakeGenerator(hook=lambda cfg, result: seen.append(result))
        result = make_orchestrator(generator).generate_package("solid", config)
        assert seen == [result]
        assert seen[0].files[-1] == "package.json"

    def test_hook_failure_fails_run(self, make_orchestrator, config, out_dir):
        def hook(cfg, result):
            raise RuntimeError("boom")

        result = make_orchestrator(FakeGenerator(hook=hook)).generate_package("solid", config)
        assert result.success is False
        assert result.error == "Post-generation hook of fake-solid failed: boom"
        assert "package.json" in result.files
        assert (out_dir / "package.json").is_file()

    def test_hook_scaffold_error_passes_through(self, make_orchestrator, config):
        def hook(cfg, result):
            raise ScaffoldError("custom failure")

        result = make_orchestrator(FakeGenerator(hook=hook)).generate_package("solid", config)
        assert result.error == "custom failure"


@pytest.mark.skipif(os.name == "nt", reason="POSIX permission bits")
class TestExecutableBits:
    def test_scripts_and_hooks_executable(self, make_orchestrator, config, out_dir):
        files = [
            literal_file("example/demo.sh", "#!/bin/sh\necho hi\n"),
            literal_file(".husky/pre-commit", "npx lint-staged\n"),
            literal_file("notes.txt", "plain\n"),
        ]
        make_orchestrator(FakeGenerator(files=files)).generate_package("solid", config)

        assert (out_dir / "example" / "demo.sh").stat().st_mode & stat.S_IXUSR
        assert (out_dir / ".husky" / "pre-commit").stat().st_mode & stat.S_IXUSR
        assert not (out_dir / "notes.txt").stat().st_mode & stat.S_IXUSR


# ---------------------------------------------------------------------------
# package.json synthesis
# ---------------------------------------------------------------------------


class TestBuildPackageJson:
    def test_field_order(self, config):
        manifest = build_package_json(FakeGenerator(), config)
        assert list(manifest) == [
            "name", "version", "description", "type", "main", "module", "types",
            "exports", "files", "scripts", "keywords", "author", "license",
            "sideEffects", "engines", "devDependencies", "peerDependencies",
        ]
        assert manifest["version"] == "0.0.1"
        assert manifest["type"] == "module"
        assert manifest["sideEffects"] is False

    @pytest.mark.parametrize("module_format", ["esm", "cjs"])
    def test_non_dual_exports_omit_require(self, make_config, module_format):
        manifest = build_package_json(FakeGenerator(), make_config(module_format=module_format))
        assert manifest["exports"] == {
            ".": {
                "types": "./dist/index.d.ts",
                "import": "./dist/index.js",
                "default": "./dist/index.js",
            }
        }

    def test_cjs_manifest_points_at_cjs_output(self, make_config):
        manifest = build_package_json(FakeGenerator(), make_config(module_format="cjs"))
        assert manifest["main"] == "./dist/index.cjs"
        assert "module" not in manifest
        assert manifest["types"] == "./dist/index.d.ts"

    @pytest.mark.parametrize("module_format", ["esm", "dual"])
    def test_esm_manifest_main_and_module(self, make_config, module_format):
        manifest = build_package_json(FakeGenerator(), make_config(module_format=module_format))
        assert manifest["main"] == "./dist/index.js"
        assert manifest["module"] == "./dist/index.js"

    def test_dual_exports_include_require(self, make_config):
        manifest = build_package_json(FakeGenerator(), make_config(module_format="dual"))
        assert list(manifest["exports"]["."]) == ["types", "import", "require", "default"]
        assert manifest["exports"]["."]["require"] == "./dist/index.cjs"

    def test_scripts_merge(self, make_config):
        config = make_config(additional_scripts={"test": "vitest --run", "release": "semantic-release"})
        scripts = build_package_json(FakeGenerator(), config)["scripts"]
        assert list(scripts) == [
            "build", "dev", "test", "test:coverage", "typecheck", "prepublishOnly", "lint", "release",
        ]
        assert scripts["build"] == "tsup"
        assert scripts["dev"] == "tsup --watch"
        assert scripts["test"] == "vitest --run"

    @pytest.mark.parametrize(
        "build_system, build, dev",
        [
            ("vite", "vite build", "vite build --watch"),
            ("rollup", "rollup -c", "rollup -c -w"),
            ("unbuild", "unbuild", "unbuild --watch"),
        ],
    )
    def test_build_scripts(self, make_config, build_system, build, dev):
        scripts = build_package_json(FakeGenerator(), make_config(build_system=build_system))["scripts"]
        assert (scripts["build"], scripts["dev"]) == (build, dev)

    @pytest.mark.parametrize(
        "module_format, build",
        [
            ("esm", "esbuild src/index.ts --bundle --outfile=dist/index.js --format=esm"),
            ("cjs", "esbuild src/index.ts --bundle --outfile=dist/index.cjs --format=cjs"),
            (
                "dual",
                "esbuild src/index.ts --bundle --outfile=dist/index.js --format=esm"
                " && esbuild src/index.ts --bundle --outfile=dist/index.cjs --format=cjs",
            ),
        ],
    )
    def test_esbuild_scripts_follow_module_format(self, make_config, module_format, build):
        config = make_config(build_system="esbuild", module_format=module_format)
        scripts = build_package_json(FakeGenerator(), config)["scripts"]
        assert scripts["build"] == build
        assert scripts["dev"] == build.split(" && ")[0] + " --watch"

    def test_dependency_sections(self, config):
        manifest = build_package_json(FakeGenerator(), config)
        assert "dependencies" not in manifest
        assert "optionalDependencies" not in manifest
        assert manifest["devDependencies"] == {"typescript": "^5.7.0", "vitest": "^2.1.0"}
        assert list(manifest["devDependencies"]) == ["typescript", "vitest"]
        assert manifest["peerDependencies"] == {"solid-js": "^1.8.0"}

    def test_repository(self, make_config):
        manifest = build_package_json(FakeGenerator(), make_config(repository="https://github.com/a/b"))
        assert manifest["repository"] == {"type": "git", "url": "https://github.com/a/b"}

    def test_written_manifest_matches(self, make_orchestrator, config, out_dir):
        make_orchestrator().generate_package("solid", config)
        written = json.loads((out_dir / "package.json").read_text(encoding="utf-8"))
        assert written == build_package_json(FakeGenerator(), config)


class TestHelpers:
    def test_group_dependencies_last_wins(self):
        grouped = group_dependencies([
            dev_dep("a", "1"),
            dev_dep("a", "2"),
            dep("a", "3"),
        ])
        assert grouped[DependencyKind.DEV] == {"a": "2"}
        assert grouped[DependencyKind.RUNTIME] == {"a": "3"}
        assert grouped[DependencyKind.OPTIONAL] == {}

    def test_export_conditions_default_falls_back_to_import(self):
        entry = ExportEntry(path="./bin", import_path="./dist/bin.js")
        assert export_conditions(entry, dual=True) == {
            "import": "./dist/bin.js",
            "default": "./dist/bin.js",
        }

    def test_export_conditions_default_only(self):
        entry = ExportEntry(path="./styles.css", default_path="./dist/styles.css")
        assert export_conditions(entry, dual=False) == {"default": "./dist/styles.css"}

    def test_template_context(self, make_config):
        config = make_config(name="@acme/solid-kit", extensions={"husky": True})
        context = build_template_context(FakeGenerator(), config)

        assert context["name"] == "@acme/solid-kit"
        assert context["module_format"] == "esm"
        assert context["extensions"] == {"husky": True}
        assert isinstance(context["current_year"], int)
        assert "year" not in context
        assert context["js_extension"] == ".js"
        assert len(context["date"]) == 10
        assert context["cli_version"] == __version__
        assert context["dependencies"] == {}
        assert context["dev_dependencies"] == {"vitest": "^2.1.0", "typescript": "^5.7.0"}
        assert context["peer_dependencies"] == {"solid-js": "^1.8.0"}
        assert context["exports"][0]["path"] == "."
        assert context["scripts"] == {"lint": "eslint src", "test": "vitest run"}
        assert context["engines"] == {"node": ">=18.0.0"}
        assert context["framework"] == "solid"
        assert context["generator_id"] == "fake-solid"

    def test_year_helper_callable_with_run_context(self, renderer, config):
        context = build_template_context(FakeGenerator(), config)
        rendered = renderer.render_inline("{{ year() }}/{{ current_year }}", context)
        assert rendered == f"{context['current_year']}/{context['current_year']}"

    @pytest.mark.parametrize(
        "manager, install",
        [("npm", "npm install"), ("pnpm", "pnpm install"), ("yarn", "yarn"), ("bun", "bun install")],
    )
    def test_next_steps_install_command(self, make_config, manager, install):
        steps = next_steps(make_config(package_manager=manager, out_dir="/tmp/somewhere/ui-kit"))
        assert steps[0] == "cd ui-kit"
        assert steps[1] == install

    def test_next_steps_skip_cd_for_working_directory(self, make_config, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        steps = next_steps(make_config(out_dir="."))
        assert steps == ["npm install", "npm run build", "npm run test"]

    def test_next_steps_relative_out_dir(self, make_config, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert next_steps(make_config(out_dir="packages/ui-kit/"))[0] == "cd ui-kit"
