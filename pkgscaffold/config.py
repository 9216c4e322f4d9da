"""pkgscaffold user settings.

Defaults the CLI falls back to when a flag is not given.  Settings are a
pydantic v2 model so they validate on construction and round-trip through
JSON; ``Settings.from_env`` builds them from ``PKGSCAFFOLD_*`` variables.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field

from pkgscaffold.models import PackageManager

DEFAULT_REGISTRY = "https://registry.npmjs.org"
DEFAULT_SETTINGS_PATH = Path.home() / ".config" / "pkgscaffold" / "settings.json"

_TRUE_VALUES = {"1", "true", "yes", "on"}


class Settings(BaseModel):
    """User-level defaults for package generation."""

    package_manager: PackageManager = Field(
        default=PackageManager.NPM, description="Package manager used in next steps"
    )
    license: str = Field(default="MIT", description="SPDX license id for new packages")
    author: str = Field(default="", description="Default package author")
    registry: str = Field(default=DEFAULT_REGISTRY, description="npm registry base URL")
    templates_dir: Optional[Path] = Field(
        default=None, description="Override for the bundled template directory"
    )
    verbose: bool = Field(default=False)

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path | None = None) -> Path:
        """Persist the settings to a JSON file.

        Args:
            path: Destination file. Defaults to
                ``~/.config/pkgscaffold/settings.json``.

        Returns:
            The path the file was written to.
        """
        target = Path(path) if path is not None else DEFAULT_SETTINGS_PATH
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "Settings":
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "Settings":
        """Build ``Settings`` from environment variables.

        Recognised variables (all optional):
            PKGSCAFFOLD_PACKAGE_MANAGER, PKGSCAFFOLD_LICENSE,
            PKGSCAFFOLD_AUTHOR (falls back to npm_config_init_author_name),
            PKGSCAFFOLD_REGISTRY, PKGSCAFFOLD_TEMPLATES_DIR,
            PKGSCAFFOLD_VERBOSE.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("PKGSCAFFOLD_PACKAGE_MANAGER"):
            kwargs["package_manager"] = os.environ["PKGSCAFFOLD_PACKAGE_MANAGER"]
        if os.environ.get("PKGSCAFFOLD_LICENSE"):
            kwargs["license"] = os.environ["PKGSCAFFOLD_LICENSE"]

        author = os.environ.get("PKGSCAFFOLD_AUTHOR") or os.environ.get("npm_config_init_author_name")
        if author:
            kwargs["author"] = author

        if os.environ.get("PKGSCAFFOLD_REGISTRY"):
            kwargs["registry"] = os.environ["PKGSCAFFOLD_REGISTRY"].rstrip("/")
        if os.environ.get("PKGSCAFFOLD_TEMPLATES_DIR"):
            kwargs["templates_dir"] = Path(os.environ["PKGSCAFFOLD_TEMPLATES_DIR"])
        if os.environ.get("PKGSCAFFOLD_VERBOSE"):
            kwargs["verbose"] = os.environ["PKGSCAFFOLD_VERBOSE"].strip().lower() in _TRUE_VALUES

        return cls(**kwargs)
