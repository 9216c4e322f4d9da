"""Command-line interface for ``pkgscaffold``.

Commands::

    pkgscaffold create NAME --framework react [options]
    pkgscaffold add TYPE NAME [PATH] [--props a,b] [--no-with-test]
    pkgscaffold check [PATH] [--categories exports,types]
    pkgscaffold info
    pkgscaffold presets
"""

from __future__ import annotations

import argparse
import asyncio
import json
from pathlib import Path
from typing import Any, Optional, Sequence

from rich.table import Table

from pkgscaffold import __version__
from pkgscaffold.checker import CATEGORIES, PackageChecker
from pkgscaffold.config import Settings
from pkgscaffold.errors import ScaffoldError
from pkgscaffold.models import (
    CI_PROVIDERS,
    BuildSystem,
    GeneratorConfig,
    ModuleFormat,
    PackageManager,
    PackageType,
    RuntimeTarget,
    Severity,
)
from pkgscaffold.npm_registry import NpmRegistryClient
from pkgscaffold.presets import PRESETS, apply_preset, get_preset_names
from pkgscaffold.registry import GeneratorRegistry, create_default_registry
from pkgscaffold.scaffolder import ItemGenerator, ItemType, PackageGenerator, TemplateRenderer, detect_project
from pkgscaffold.utils import (
    console,
    package_short_name,
    print_error,
    print_file_list,
    print_info,
    print_success,
    print_summary_table,
    print_warning,
    set_verbose,
    unique,
)

_SEVERITY_STYLES = {
    Severity.ERROR: "bold red",
    Severity.WARNING: "yellow",
    Severity.INFO: "cyan",
}


def _values(enum_cls: Any) -> list[str]:
    return [member.value for member in enum_cls]


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser(registry: GeneratorRegistry) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pkgscaffold",
        description="Scaffold production-ready npm packages",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  pkgscaffold create my-lib --framework react\n"
            "  pkgscaffold create @acme/cli --framework node --type cli --target node\n"
            "  pkgscaffold create ui-kit --framework vue --preset component-library\n"
            "  pkgscaffold add component Button ./my-lib --props label,variant\n"
            "  pkgscaffold check ./my-lib --categories exports,types\n"
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Print debug output",
    )
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    create = subparsers.add_parser("create", help="Generate a new package")
    create.add_argument("name", help="Package name, e.g. my-lib or @scope/my-lib")
    create.add_argument(
        "--framework", "-f",
        required=True,
        help=f"Framework tag ({', '.join(registry.get_supported_frameworks())})",
    )
    create.add_argument("--description", "-d", default=None, help="Package description")
    create.add_argument("--type", dest="package_type", choices=_values(PackageType), default=None)
    create.add_argument("--target", dest="runtime_target", choices=_values(RuntimeTarget), default=None)
    create.add_argument("--format", dest="module_format", choices=_values(ModuleFormat), default=None)
    create.add_argument("--build", dest="build_system", choices=_values(BuildSystem), default=None)
    create.add_argument("--pm", dest="package_manager", choices=_values(PackageManager), default=None)
    create.add_argument("--license", default=None, help="SPDX license id (default: MIT)")
    create.add_argument("--author", default=None)
    create.add_argument("--repository", default=None, help="Git repository URL")
    create.add_argument(
        "--out", "-o",
        dest="out_dir",
        default=None,
        help="Output directory (default: ./<short package name>)",
    )
    create.add_argument(
        "--example",
        dest="include_example",
        action="store_true",
        default=None,
        help="Include an example app",
    )
    create.add_argument("--preset", choices=get_preset_names(), default=None)
    create.add_argument("--ci", dest="ci_provider", choices=list(CI_PROVIDERS), default=None)
    create.add_argument(
        "--check-name",
        action="store_true",
        help="Warn when the name is already published on npm",
    )

    add = subparsers.add_parser("add", help="Add a component, hook, store or utility to a package")
    add.add_argument(
        "item_type",
        metavar="TYPE",
        choices=_values(ItemType),
        help=f"Item type ({', '.join(_values(ItemType))})",
    )
    add.add_argument("item_name", metavar="NAME", help="Item name, e.g. Button or useToggle")
    add.add_argument("path", nargs="?", default=".", help="Package directory (default: .)")
    add.add_argument("--props", default="", help="Comma-separated props or parameters")
    add.add_argument(
        "--with-test",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Also write a test file",
    )
    add.add_argument("--force", action="store_true", help="Overwrite existing files")

    check = subparsers.add_parser("check", help="Check an existing package against npm best practices")
    check.add_argument("path", nargs="?", default=".", help="Package directory (default: .)")
    check.add_argument(
        "--categories",
        default=None,
        help=f"Comma-separated categories ({', '.join(CATEGORIES)})",
    )

    subparsers.add_parser("info", help="List the available generators")
    subparsers.add_parser("presets", help="List the available presets")
    return parser


# ---------------------------------------------------------------------------
# create
# ---------------------------------------------------------------------------


def config_from_args(args: argparse.Namespace, settings: Settings) -> GeneratorConfig:
    """Build a ``GeneratorConfig`` from parsed ``create`` arguments.

    Only options given on the command line (and user settings) are passed
    to the model, so a preset can still fill in everything else.
    """
    values: dict[str, Any] = {
        "name": args.name,
        "out_dir": args.out_dir or str(Path.cwd() / package_short_name(args.name)),
        "package_manager": args.package_manager or settings.package_manager,
        "license": args.license or settings.license,
        "author": args.author if args.author is not None else settings.author,
    }
    optional = (
        "description",
        "package_type",
        "runtime_target",
        "module_format",
        "build_system",
        "repository",
        "include_example",
    )
    for field in optional:
        value = getattr(args, field)
        if value is not None:
            values[field] = value
    if args.ci_provider is not None:
        values["extensions"] = {"ci_provider": args.ci_provider}

    config = GeneratorConfig(**values)
    if args.preset:
        config = apply_preset(config, args.preset)
    return config


def _check_name(name: str, settings: Settings) -> Optional[str]:
    """Return a warning when *name* is already published, ``None`` otherwise."""
    client = NpmRegistryClient(base_url=settings.registry)
    lookup = asyncio.run(client.lookup(name))
    if not lookup.success:
        return f"Could not check the npm registry: {lookup.error}"
    if lookup.exists:
        return f'"{name}" is already published on npm (latest {lookup.latest_version or "unknown"})'
    return None


def cmd_create(args: argparse.Namespace, registry: GeneratorRegistry, settings: Settings) -> int:
    try:
        config = config_from_args(args, settings)
    except ScaffoldError as exc:
        print_error(str(exc))
        return 1

    print_summary_table(
        {
            "Name": config.name,
            "Framework": args.framework,
            "Type": config.package_type.value,
            "Target": config.runtime_target.value,
            "Format": config.module_format.value,
            "Build": config.build_system.value,
            "Output": config.out_dir,
        },
        title="Creating package",
    )

    if args.check_name:
        message = _check_name(config.name, settings)
        if message:
            print_warning(message)

    renderer = TemplateRenderer(settings.templates_dir) if settings.templates_dir else None
    result = PackageGenerator(registry, renderer).generate_package(args.framework, config)

    for warning in result.warnings:
        print_warning(f"Warning: {warning}")

    if not result.success:
        print_error(f"Generation failed: {result.error}")
        if result.files:
            print_info(f"{len(result.files)} files were written before the failure:")
            print_file_list(result.files, limit=len(result.files))
        return 1

    print_success(f"Created {config.name} ({len(result.files)} files)")
    print_file_list(result.files)
    console.print()
    console.print("[bold]Next steps:[/bold]")
    for step in result.next_steps:
        console.print(f"  [cyan]{step}[/cyan]")
    return 0


# ---------------------------------------------------------------------------
# add
# ---------------------------------------------------------------------------


def cmd_add(args: argparse.Namespace, settings: Settings) -> int:
    try:
        project = detect_project(args.path)
    except ScaffoldError as exc:
        print_error(str(exc))
        return 1

    print_summary_table(
        {
            "Framework": project.framework.value,
            "Source": project.src_path,
            "Existing tests": "yes" if project.has_tests else "no",
        },
        title=f"Adding {args.item_type} {args.item_name}",
    )

    renderer = TemplateRenderer(settings.templates_dir) if settings.templates_dir else None
    props = [p.strip() for p in args.props.split(",") if p.strip()]
    result = ItemGenerator(renderer).add_item(
        args.path,
        args.item_type,
        args.item_name,
        props=props,
        with_test=args.with_test,
        force=args.force,
    )

    for warning in result.warnings:
        print_warning(f"Warning: {warning}")

    if not result.success:
        print_error(f"Could not add {args.item_type}: {result.error}")
        return 1

    print_success(f'{args.item_type.capitalize()} "{args.item_name}" created')
    print_file_list(result.files)
    console.print()
    console.print("[bold]Next steps:[/bold]")
    for step in result.next_steps:
        console.print(f"  [cyan]{step}[/cyan]")
    return 0


# ---------------------------------------------------------------------------
# check / info / presets
# ---------------------------------------------------------------------------


def cmd_check(args: argparse.Namespace) -> int:
    categories = None
    if args.categories:
        categories = unique(c.strip() for c in args.categories.split(",") if c.strip())

    try:
        results = PackageChecker(args.path).run(categories)
    except json.JSONDecodeError as exc:
        print_error(f"Could not parse package.json: {exc}")
        return 1
    except ValueError as exc:
        print_error(str(exc))
        return 1

    table = Table(title=f"Package check: {args.path}", show_header=True, header_style="bold cyan")
    table.add_column("Category", no_wrap=True)
    table.add_column("Result")
    table.add_column("Issues", justify="right")
    table.add_column("Time (ms)", justify="right")
    for result in results:
        status = "[green]pass[/green]" if result.passed else "[red]fail[/red]"
        table.add_row(result.category, status, str(len(result.issues)), f"{result.duration:.1f}")
    console.print(table)

    for result in results:
        for issue in result.issues:
            style = _SEVERITY_STYLES[issue.severity]
            console.print(f"[{style}]{issue.severity.value:<7}[/{style}] {issue.category}: {issue.message}")
            if issue.suggestion:
                console.print(f"         [dim]{issue.suggestion}[/dim]")

    if all(result.passed for result in results):
        print_success("All checks passed")
        return 0
    print_error("Some checks failed")
    return 1


def cmd_info(registry: GeneratorRegistry) -> int:
    table = Table(title="Available generators", show_header=True, header_style="bold cyan")
    table.add_column("Id", no_wrap=True)
    table.add_column("Name")
    table.add_column("Framework")
    table.add_column("Package types")
    table.add_column("Targets")
    for meta in registry.get_all_metadata():
        table.add_row(
            meta.id,
            meta.name,
            meta.framework.value,
            ", ".join(t.value for t in meta.supported_package_types),
            ", ".join(t.value for t in meta.supported_runtime_targets),
        )
    console.print(table)
    return 0


def cmd_presets() -> int:
    table = Table(title="Presets", show_header=True, header_style="bold cyan")
    table.add_column("Name", no_wrap=True)
    table.add_column("Description")
    table.add_column("Build")
    table.add_column("Format")
    for preset in PRESETS.values():
        table.add_row(preset.name, preset.description, preset.build_system.value, preset.module_format.value)
    console.print(table)
    return 0


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main(argv: Sequence[str] | None = None, registry: GeneratorRegistry | None = None) -> int:
    """CLI entry point for ``pkgscaffold`` and ``python -m pkgscaffold``."""
    if registry is None:
        registry = create_default_registry()
    parser = build_parser(registry)
    args = parser.parse_args(argv)

    settings = Settings.from_env()
    set_verbose(args.verbose or settings.verbose)

    if args.command == "create":
        return cmd_create(args, registry, settings)
    if args.command == "add":
        return cmd_add(args, settings)
    if args.command == "check":
        return cmd_check(args)
    if args.command == "info":
        return cmd_info(registry)
    if args.command == "presets":
        return cmd_presets()

    parser.print_help()
    return 1
