"""Add a component, hook, store or utility to an existing package.

The target package is inspected first: its dependencies decide the
framework and, for Svelte, a ``src/lib`` directory decides the source root.
Each item type then maps to a small set of templates under ``add/`` that
are rendered, formatted and written below the source root.

Quick usage::

    from pkgscaffold.scaffolder.adder import ItemGenerator, ItemType

    result = ItemGenerator().add_item("./my-lib", ItemType.COMPONENT, "Button", props=["label"])
"""

from __future__ import annotations

import json
import re
from enum import Enum
from pathlib import Path
from typing import Any, Sequence

from pydantic import BaseModel, ConfigDict, Field

from pkgscaffold.errors import InvalidItemError, ProjectDetectionError, ScaffoldError, WriteError
from pkgscaffold.models import Framework, GeneratedFile, GenerationResult
from pkgscaffold.scaffolder.formatting import FormatError, format_content
from pkgscaffold.scaffolder.templates import TemplateRenderer
from pkgscaffold.utils import load_json, print_debug


# ---------------------------------------------------------------------------
# Data Models
# ---------------------------------------------------------------------------


class ItemType(str, Enum):
    """Kind of source item ``add`` can create."""
    COMPONENT = "component"
    HOOK = "hook"
    STORE = "store"
    UTIL = "util"


class ProjectInfo(BaseModel):
    """What ``detect_project`` learned about a package directory."""
    model_config = ConfigDict(frozen=True)

    framework: Framework
    src_path: str = Field(default="src", description="Source root relative to the package")
    has_tests: bool = Field(default=False, description="Source root already holds test files")
    uses_typescript: bool = Field(default=False, description="A tsconfig.json is present")


# Item types each framework supports, in the order they are offered.
ITEM_TYPES: dict[Framework, tuple[ItemType, ...]] = {
    Framework.REACT: (ItemType.COMPONENT, ItemType.HOOK, ItemType.UTIL),
    Framework.VUE: (ItemType.COMPONENT, ItemType.HOOK, ItemType.UTIL),
    Framework.SVELTE: (ItemType.COMPONENT, ItemType.STORE, ItemType.UTIL),
    Framework.VANILLA: (ItemType.UTIL,),
    Framework.NODE: (ItemType.UTIL,),
}

_RE_PASCAL = re.compile(r"^[A-Z][a-zA-Z0-9]*$")
_RE_HOOK = re.compile(r"^use[A-Z][a-zA-Z0-9]*$")
_RE_IDENTIFIER = re.compile(r"^[A-Za-z][a-zA-Z0-9]*$")


# ---------------------------------------------------------------------------
# Project detection
# ---------------------------------------------------------------------------


def detect_project(path: str | Path) -> ProjectInfo:
    """Inspect the package at *path*.

    Raises:
        ProjectDetectionError: If there is no readable ``package.json``.
    """
    root = Path(path)
    manifest_path = root / "package.json"
    if not manifest_path.is_file():
        raise ProjectDetectionError(root, "no package.json found")
    try:
        manifest = load_json(manifest_path)
    except json.JSONDecodeError as exc:
        raise ProjectDetectionError(root, f"package.json is not valid JSON ({exc})") from exc

    deps: dict[str, Any] = {}
    for section in ("dependencies", "devDependencies", "peerDependencies"):
        deps.update(manifest.get(section) or {})

    if "react" in deps:
        framework = Framework.REACT
    elif "vue" in deps:
        framework = Framework.VUE
    elif "svelte" in deps:
        framework = Framework.SVELTE
    elif "cli" in str(manifest.get("name") or "") or "commander" in deps:
        framework = Framework.NODE
    else:
        framework = Framework.VANILLA

    src_path = "src"
    if framework == Framework.SVELTE and (root / "src" / "lib").is_dir():
        src_path = "src/lib"

    src_dir = root / src_path
    has_tests = src_dir.is_dir() and any(
        ".test." in child.name or ".spec." in child.name for child in src_dir.iterdir()
    )

    return ProjectInfo(
        framework=framework,
        src_path=src_path,
        has_tests=has_tests,
        uses_typescript=(root / "tsconfig.json").is_file(),
    )


# ---------------------------------------------------------------------------
# Naming
# ---------------------------------------------------------------------------


def lower_first(name: str) -> str:
    """``Formatter`` -> ``formatter``; the rest of the name is kept."""
    return name[:1].lower() + name[1:]


def validate_item_name(item_type: ItemType, name: str) -> None:
    """Raise ``InvalidItemError`` when *name* does not fit *item_type*."""
    if not name.strip():
        raise InvalidItemError("Name is required")
    if item_type == ItemType.COMPONENT and not _RE_PASCAL.match(name):
        raise InvalidItemError(f'Component name should be PascalCase (e.g. Button), got "{name}"')
    if item_type == ItemType.HOOK and not _RE_HOOK.match(name):
        raise InvalidItemError(f'Hook name should start with "use" (e.g. useToggle), got "{name}"')
    if not _RE_IDENTIFIER.match(name):
        raise InvalidItemError(f'"{name}" is not a valid identifier')


def import_path(framework: Framework, item_type: ItemType, name: str) -> str:
    """Relative import path of the new item from the source root."""
    if item_type == ItemType.COMPONENT:
        return f"./components/{name}"
    if item_type == ItemType.HOOK:
        return f"./composables/{name}" if framework == Framework.VUE else f"./hooks/{name}"
    if item_type == ItemType.STORE:
        return f"./stores/{name}"
    return f"./utils/{lower_first(name)}"


# ---------------------------------------------------------------------------
# File plans
# ---------------------------------------------------------------------------


def item_files(framework: Framework, item_type: ItemType, name: str) -> list[tuple[str, str, bool]]:
    """Return ``(path, template reference, is_test)`` for each file of an item.

    Paths are relative to the project's source root.
    """
    fn = lower_first(name)
    if item_type == ItemType.UTIL:
        return [
            (f"utils/{fn}.ts", "add/common/util.ts.j2", False),
            (f"utils/{fn}.test.ts", "add/common/util.test.ts.j2", True),
        ]

    if framework == Framework.REACT:
        if item_type == ItemType.COMPONENT:
            return [
                (f"components/{name}/{name}.tsx", "add/react/component.tsx.j2", False),
                (f"components/{name}/index.ts", "add/react/component-index.ts.j2", False),
                (f"components/{name}/{name}.test.tsx", "add/react/component.test.tsx.j2", True),
            ]
        return [
            (f"hooks/{name}.ts", "add/react/hook.ts.j2", False),
            (f"hooks/{name}.test.ts", "add/react/hook.test.ts.j2", True),
        ]

    if framework == Framework.VUE:
        if item_type == ItemType.COMPONENT:
            return [
                (f"components/{name}/{name}.vue", "add/vue/component.vue.j2", False),
                (f"components/{name}/index.ts", "add/vue/component-index.ts.j2", False),
                (f"components/{name}/{name}.test.ts", "add/vue/component.test.ts.j2", True),
            ]
        return [
            (f"composables/{name}.ts", "add/vue/composable.ts.j2", False),
            (f"composables/{name}.test.ts", "add/vue/composable.test.ts.j2", True),
        ]

    if item_type == ItemType.COMPONENT:
        return [
            (f"components/{name}/{name}.svelte", "add/svelte/component.svelte.j2", False),
            (f"components/{name}/index.ts", "add/svelte/component-index.ts.j2", False),
            (f"components/{name}/{name}.test.ts", "add/svelte/component.test.ts.j2", True),
        ]
    return [
        (f"stores/{name}.ts", "add/svelte/store.ts.j2", False),
        (f"stores/{name}.test.ts", "add/svelte/store.test.ts.j2", True),
    ]


# ---------------------------------------------------------------------------
# ItemGenerator
# ---------------------------------------------------------------------------


class ItemGenerator:
    """Renders new source items into an existing package."""

    def __init__(self, renderer: TemplateRenderer | None = None) -> None:
        self.renderer = renderer or TemplateRenderer()

    def plan(
        self,
        project: ProjectInfo,
        item_type: ItemType,
        name: str,
        with_test: bool = True,
    ) -> list[GeneratedFile]:
        """Validate the request and return the files it would write.

        Raises:
            InvalidItemError: If the framework has no such item type or the
                name does not fit it.
        """
        supported = ITEM_TYPES.get(project.framework, (ItemType.UTIL,))
        if item_type not in supported:
            raise InvalidItemError(
                f"{project.framework.value} packages do not support {item_type.value} items "
                f"(available: {', '.join(t.value for t in supported)})"
            )
        validate_item_name(item_type, name)

        return [
            GeneratedFile(path=f"{project.src_path}/{relative}", template=reference)
            for relative, reference, is_test in item_files(project.framework, item_type, name)
            if with_test or not is_test
        ]

    def add_item(
        self,
        path: str | Path,
        item_type: ItemType | str,
        name: str,
        props: Sequence[str] = (),
        with_test: bool = True,
        force: bool = False,
    ) -> GenerationResult:
        """Add one item to the package at *path*.

        Existing files are never overwritten unless *force* is set; the
        check runs before anything is written.  Expected failures come back
        as an unsuccessful ``GenerationResult`` with the files written so far.
        """
        try:
            item_type = ItemType(item_type)
        except ValueError:
            available = ", ".join(t.value for t in ItemType)
            return GenerationResult(success=False, error=f"Unknown item type: {item_type} (available: {available})")

        root = Path(path)
        written: list[str] = []
        warnings: list[str] = []
        try:
            project = detect_project(root)
            print_debug(f"Detected {project.framework.value} project, sources in {project.src_path}")
            if not project.uses_typescript:
                warnings.append("No tsconfig.json found; generated files are TypeScript")

            prop_names = [p.strip() for p in props if p.strip()]
            bad_props = [p for p in prop_names if not _RE_IDENTIFIER.match(p)]
            if bad_props:
                raise InvalidItemError(f"Invalid prop names: {', '.join(bad_props)}")

            files = self.plan(project, item_type, name, with_test)
            if not force:
                existing = [entry.path for entry in files if (root / entry.path).exists()]
                if existing:
                    raise InvalidItemError(
                        f"Refusing to overwrite existing files: {', '.join(existing)} (use --force)"
                    )

            context = {
                "name": name,
                "instance_name": lower_first(name),
                "css_class": name.lower(),
                "props": prop_names,
                "framework": project.framework.value,
                "with_test": with_test,
            }
            for entry in files:
                content = self.renderer.render(entry.template, context)
                try:
                    content = format_content(content, entry.path)
                except FormatError as exc:
                    warnings.append(f"Could not format {entry.path}: {exc}")
                self._write(root, entry.path, content)
                written.append(entry.path)
        except (ScaffoldError, OSError) as exc:
            return GenerationResult(success=False, files=written, warnings=warnings, error=str(exc))

        steps = [f'Import from "{import_path(project.framework, item_type, name)}"']
        if with_test:
            steps.append("Run tests: npm test")
        return GenerationResult(success=True, files=written, warnings=warnings, next_steps=steps)

    def _write(self, root: Path, relative_path: str, content: str) -> None:
        target = root / relative_path
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(target, "w", encoding="utf-8", newline="\n") as handle:
                handle.write(content)
        except OSError as exc:
            raise WriteError(target, exc.strerror or str(exc)) from exc
        print_debug(f"Wrote {relative_path}")
