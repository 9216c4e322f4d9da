"""Jinja2 template rendering for package scaffolding.

Provides the TemplateRenderer class which loads ``.j2`` templates from a
discovered template root and renders them with the generation context.
Compiled templates are cached by reference string for the lifetime of the
renderer; templates are static assets shipped with the tool, so the cache
is never invalidated.

Helpers available inside templates
----------------------------------

Every helper is a global function.  The single-argument ones are also
registered as filters (``{{ name | pascal_case }}``).

Boolean helpers (``eq``, ``neq``, ``or_``, ``and_``, ``includes``) work two
ways.  Called inline they return a bool, so they compose with ``{% if %}``::

    {% if or_(include_example, eq(package_type, "cli")) %}...{% endif %}

Used with ``{% call %}`` they act as block conditionals: the block body is
rendered when the result is true and an empty string is emitted otherwise::

    {% call eq(build_system, "vite") %}import dts from 'vite-plugin-dts';{% endcall %}

A ``{% call %}`` block has no else branch; use ``{% if %}`` when one is
needed.  ``if_dual(module_format)`` is block-only in spirit: as a
``{% call %}`` it renders its body only for the ``dual`` module format, and
called inline it returns the same bool as ``eq(module_format, "dual")``.

Value helpers: ``json(value, indent=2)``, ``lower``, ``upper``,
``capitalize`` (first character only, the rest is left untouched),
``camel_case`` / ``pascal_case`` (kebab-case input), ``package_short_name``
(``@scope/name`` -> ``name``), ``is_scoped``, ``year()`` and
``join(seq, separator=", ")``.
"""

from __future__ import annotations

import json
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Optional

from jinja2 import (
    Environment,
    FileSystemLoader,
    Template,
    TemplateNotFound,
    select_autoescape,
)

from pkgscaffold.errors import TemplateNotFoundError
from pkgscaffold.utils import is_scoped, package_short_name


# ---------------------------------------------------------------------------
# Template directory discovery
# ---------------------------------------------------------------------------

_PACKAGE_DIR = Path(__file__).resolve().parent.parent
_ROOT_MARKER = "pyproject.toml"


def find_templates_root(start: Path | None = None) -> Path:
    """Locate the directory holding the bundled ``.j2`` templates.

    Checks a few locations relative to the installed package, then walks up
    from it looking for a project root (``pyproject.toml``) that has a
    ``templates`` directory, and finally falls back to the in-package path.
    """
    base = start or _PACKAGE_DIR
    candidates = [
        base / "templates",
        base.parent / "templates",
        Path.cwd() / "templates",
    ]
    for candidate in candidates:
        if candidate.is_dir():
            return candidate

    for parent in [base, *base.parents]:
        if (parent / _ROOT_MARKER).is_file() and (parent / "templates").is_dir():
            return parent / "templates"

    return base / "templates"


_DEFAULT_TEMPLATE_DIR = find_templates_root()


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders Jinja2 templates for package scaffolding.

    Template references are slash-separated paths relative to the template
    root, e.g. ``"react/src/index.ts.j2"``.
    """

    def __init__(self, template_dir: str | Path | None = None) -> None:
        if template_dir is None:
            template_dir = _DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape([], default_for_string=False),
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
            auto_reload=False,
        )
        self._cache: dict[str, Template] = {}

        for name, func in _GLOBAL_HELPERS.items():
            self.env.globals[name] = func
        for name, func in _FILTER_HELPERS.items():
            self.env.filters[name] = func

    # -- Rendering -----------------------------------------------------------

    def render(self, reference: str, context: dict[str, Any]) -> str:
        """Render the template at *reference* with *context*.

        Raises:
            TemplateNotFoundError: If the reference does not resolve to a
                template under the template root.
        """
        return self.load(reference).render(**context)

    def render_inline(self, template_text: str, context: dict[str, Any]) -> str:
        """Render a template string that does not live on disk."""
        return self.env.from_string(template_text).render(**context)

    # -- Cache -------------------------------------------------------------

    def load(self, reference: str) -> Template:
        """Return the compiled template for *reference*, compiling it once."""
        cached = self._cache.get(reference)
        if cached is not None:
            return cached
        try:
            template = self.env.get_template(reference)
        except TemplateNotFound as exc:
            raise TemplateNotFoundError(reference) from exc
        self._cache[reference] = template
        return template

    def is_cached(self, reference: str) -> bool:
        return reference in self._cache

    def clear_cache(self) -> None:
        self._cache.clear()

    # -- Utility -----------------------------------------------------------

    def list_templates(self, prefix: str = "") -> list[str]:
        """Return a sorted list of all ``.j2`` template paths under *prefix*.

        Paths are relative to the template root directory.
        """
        search_dir = self.template_dir / prefix if prefix else self.template_dir
        if not search_dir.is_dir():
            return []
        return sorted(
            p.relative_to(self.template_dir).as_posix()
            for p in search_dir.rglob("*.j2")
        )


# ---------------------------------------------------------------------------
# Template helpers
# ---------------------------------------------------------------------------

def _block_or_value(result: bool, caller: Optional[Callable[[], str]]) -> Any:
    """Return *result* inline, or the block body when used via ``{% call %}``."""
    if caller is None:
        return result
    return caller() if result else ""


def eq(a: Any, b: Any, caller: Optional[Callable[[], str]] = None) -> Any:
    return _block_or_value(a == b, caller)


def neq(a: Any, b: Any, caller: Optional[Callable[[], str]] = None) -> Any:
    return _block_or_value(a != b, caller)


def or_(*values: Any, caller: Optional[Callable[[], str]] = None) -> Any:
    """True if any argument is truthy."""
    return _block_or_value(any(values), caller)


def and_(*values: Any, caller: Optional[Callable[[], str]] = None) -> Any:
    """True if every argument is truthy (and there is at least one)."""
    return _block_or_value(bool(values) and all(values), caller)


def includes(seq: Any, value: Any, caller: Optional[Callable[[], str]] = None) -> Any:
    result = isinstance(seq, (list, tuple)) and value in seq
    return _block_or_value(result, caller)


def if_dual(module_format: Any, caller: Optional[Callable[[], str]] = None) -> Any:
    return _block_or_value(_plain(module_format) == "dual", caller)


def to_json(value: Any, indent: int = 2) -> str:
    return json.dumps(value, indent=indent if isinstance(indent, int) else 2, default=_plain)


def lower(value: Any) -> str:
    return str(_plain(value) or "").lower()


def upper(value: Any) -> str:
    return str(_plain(value) or "").upper()


def capitalize(value: Any) -> str:
    """Upper-case the first character only: ``myLib`` -> ``MyLib``."""
    text = str(_plain(value) or "")
    return text[:1].upper() + text[1:]


def camel_case(value: Any) -> str:
    """``my-cool-lib`` -> ``myCoolLib``."""
    return re.sub(r"-([a-z])", lambda m: m.group(1).upper(), str(_plain(value) or ""))


def pascal_case(value: Any) -> str:
    """``my-cool-lib`` -> ``MyCoolLib``."""
    return capitalize(camel_case(value))


def year() -> int:
    return datetime.now(timezone.utc).year


def join(seq: Any, separator: str = ", ") -> str:
    if not isinstance(seq, (list, tuple)):
        return ""
    return separator.join(str(_plain(item)) for item in seq)


def _plain(value: Any) -> Any:
    """Unwrap str-enums so helpers see plain strings."""
    return getattr(value, "value", value)


_GLOBAL_HELPERS: dict[str, Callable[..., Any]] = {
    "eq": eq,
    "neq": neq,
    "or_": or_,
    "and_": and_,
    "includes": includes,
    "if_dual": if_dual,
    "json": to_json,
    "lower": lower,
    "upper": upper,
    "capitalize": capitalize,
    "camel_case": camel_case,
    "pascal_case": pascal_case,
    "package_short_name": package_short_name,
    "is_scoped": is_scoped,
    "year": year,
    "join": join,
}

_FILTER_HELPERS: dict[str, Callable[..., Any]] = {
    "json": to_json,
    "lower": lower,
    "upper": upper,
    "capitalize": capitalize,
    "camel_case": camel_case,
    "pascal_case": pascal_case,
    "package_short_name": package_short_name,
}
