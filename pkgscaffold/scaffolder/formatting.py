"""Source formatting pass applied to every generated file.

Each file extension maps to a formatting profile.  Unrecognised extensions
are written exactly as rendered.  A profile that needs to parse its input
(JSON, YAML) raises ``FormatError`` when the content does not parse; the
orchestrator then writes the unformatted content and records a warning.
"""

from __future__ import annotations

import json
import re
from pathlib import PurePosixPath
from typing import Callable

import yaml


class FormatError(ValueError):
    """Raised when content cannot be parsed by its formatting profile."""


_TRAILING_WS = re.compile(r"[ \t]+$", re.MULTILINE)
_EXTRA_BLANK_LINES = re.compile(r"\n{3,}")


def _normalize_whitespace(content: str) -> str:
    """Trim trailing spaces, collapse blank-line runs, end with one newline."""
    text = content.replace("\r\n", "\n").expandtabs(2)
    text = _TRAILING_WS.sub("", text)
    text = _EXTRA_BLANK_LINES.sub("\n\n", text)
    return text.strip("\n") + "\n"


def _format_json(content: str) -> str:
    try:
        data = json.loads(content)
    except json.JSONDecodeError as exc:
        raise FormatError(f"invalid JSON: {exc}") from exc
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


def _format_yaml(content: str) -> str:
    try:
        yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise FormatError(f"invalid YAML: {exc}") from exc
    return _normalize_whitespace(content)


def _strip_markdown_line(line: str) -> str:
    stripped = line.rstrip(" \t")
    # Two trailing spaces are a hard line break in markdown.
    if stripped and line.endswith("  "):
        return stripped + "  "
    return stripped


def _format_markdown(content: str) -> str:
    lines = content.replace("\r\n", "\n").split("\n")
    text = "\n".join(_strip_markdown_line(line) for line in lines)
    text = _EXTRA_BLANK_LINES.sub("\n\n", text)
    return text.strip("\n") + "\n"


PROFILES: dict[str, str] = {
    ".ts": "typescript",
    ".tsx": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".json": "json",
    ".md": "markdown",
    ".html": "html",
    ".css": "css",
    ".scss": "css",
    ".yaml": "yaml",
    ".yml": "yaml",
}

_FORMATTERS: dict[str, Callable[[str], str]] = {
    "typescript": _normalize_whitespace,
    "javascript": _normalize_whitespace,
    "json": _format_json,
    "markdown": _format_markdown,
    "html": _normalize_whitespace,
    "css": _normalize_whitespace,
    "yaml": _format_yaml,
}


def profile_for(path: str) -> str | None:
    """Return the formatting profile name for *path*, or ``None``."""
    return PROFILES.get(PurePosixPath(path).suffix.lower())


def format_content(content: str, path: str) -> str:
    """Format *content* according to the profile for *path*'s extension.

    Raises:
        FormatError: If the profile has to parse the content and cannot.
    """
    profile = profile_for(path)
    if profile is None:
        return content
    return _FORMATTERS[profile](content)
