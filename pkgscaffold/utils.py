"""Shared utility functions for the package scaffolder.

Provides Rich-based console reporting (with an opt-in debug level), npm
package-name helpers, and small JSON / file-system helpers used by the
orchestrator, the package checker, and the CLI.
"""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Iterable
from urllib.parse import quote

from rich.console import Console
from rich.table import Table

console = Console()

_verbose = False


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def set_verbose(enabled: bool) -> None:
    """Enable or disable ``print_debug`` output."""
    global _verbose
    _verbose = enabled


def is_verbose() -> bool:
    return _verbose


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{message}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{message}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{message}[/bold yellow]")


def print_info(message: str) -> None:
    console.print(f"[cyan]{message}[/cyan]")


def print_debug(message: str) -> None:
    """Print a dim debug line, only when verbose output is enabled."""
    if _verbose:
        console.print(f"[dim]{message}[/dim]")


def print_summary_table(data: dict[str, str], title: str = "Summary") -> None:
    """Print a two-column key/value summary table.

    Args:
        data: Mapping of label -> value.
        title: Table title.
    """
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(key, str(value))

    console.print(table)
    console.print()


def print_file_list(files: list[str], limit: int = 10) -> None:
    """Print up to *limit* generated paths, then a count of the rest."""
    for path in files[:limit]:
        console.print(f"  [green]+[/green] {path}")
    if len(files) > limit:
        console.print(f"  [dim]... and {len(files) - limit} more[/dim]")


# ---------------------------------------------------------------------------
# npm package-name helpers
# ---------------------------------------------------------------------------

_SCOPED_NAME = re.compile(r"^@([^/]+)/(.+)$")
_SPECIAL_CHARS = re.compile(r"[~'!()*]")
_RESERVED_NAMES = {"node_modules", "favicon.ico"}
_MAX_NAME_LENGTH = 214


def package_short_name(name: str) -> str:
    """Strip the scope from a package name: ``@acme/ui`` -> ``ui``."""
    match = _SCOPED_NAME.match(name or "")
    return match.group(2) if match else name


def is_scoped(name: str) -> bool:
    return bool(name) and name.startswith("@")


def package_name_problems(name: str) -> list[str]:
    """Return the reasons *name* is not a valid name for a new npm package.

    An empty list means the name is valid.

    Examples::

        package_name_problems("my-lib")      -> []
        package_name_problems("@acme/ui")    -> []
        package_name_problems("My Lib")      -> ["name can no longer contain capital letters", ...]
    """
    if not name:
        return ["name length must be greater than zero"]

    problems: list[str] = []
    if name != name.strip():
        problems.append("name cannot contain leading or trailing spaces")
    if name.startswith("."):
        problems.append("name cannot start with a period")
    if name.startswith("_"):
        problems.append("name cannot start with an underscore")
    if name.lower() in _RESERVED_NAMES:
        problems.append(f"{name} is not a valid package name")
    if len(name) > _MAX_NAME_LENGTH:
        problems.append(f"name can no longer contain more than {_MAX_NAME_LENGTH} characters")
    if name.lower() != name:
        problems.append("name can no longer contain capital letters")
    if _SPECIAL_CHARS.search(package_short_name(name)):
        problems.append('name can no longer contain special characters ("~\'!()*")')

    match = _SCOPED_NAME.match(name)
    parts = [match.group(1), match.group(2)] if match else [name]
    if any(quote(part, safe="") != part for part in parts):
        problems.append("name can only contain URL-friendly characters")

    return problems


# ---------------------------------------------------------------------------
# JSON / file-system helpers
# ---------------------------------------------------------------------------


def load_json(path: str | Path) -> dict[str, Any]:
    """Load and parse a JSON file.

    Raises:
        FileNotFoundError: If the file does not exist.
        json.JSONDecodeError: If the file is not valid JSON.
    """
    raw = Path(path).read_text(encoding="utf-8")
    data = json.loads(raw)
    if not isinstance(data, dict):
        return {"_root": data}
    return data


def dump_json(data: Any) -> str:
    """Serialise *data* the way npm writes package.json (2-space indent)."""
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


def ensure_dir(path: str | Path) -> Path:
    """Create a directory (and parents) if it does not exist."""
    dir_path = Path(path)
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path


def unique(items: Iterable[str]) -> list[str]:
    """De-duplicate while keeping first-seen order."""
    seen: dict[str, None] = {}
    for item in items:
        seen.setdefault(item, None)
    return list(seen)
