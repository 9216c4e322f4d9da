"""Configuration presets.

A preset bundles the choices that usually go together for one kind of
package (build system, module format, example app, CI and release
tooling) so callers only need to pick a name.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from pkgscaffold.errors import PresetNotFoundError
from pkgscaffold.models import (
    BuildSystem,
    GeneratorConfig,
    ModuleFormat,
    RuntimeTarget,
)


class Preset(BaseModel):
    """Overrides a preset applies to a ``GeneratorConfig``."""
    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    build_system: BuildSystem = BuildSystem.TSUP
    module_format: ModuleFormat = ModuleFormat.ESM
    runtime_target: Optional[RuntimeTarget] = Field(
        default=None, description="Left to the caller when unset"
    )
    include_example: bool = False
    extensions: dict[str, bool | str] = Field(default_factory=dict)
    additional_dev_deps: dict[str, str] = Field(default_factory=dict)
    additional_scripts: dict[str, str] = Field(default_factory=dict)


MINIMAL = Preset(
    name="minimal",
    description="Minimal setup for quick prototypes - no tests, no CI, no examples",
    extensions={"ci_provider": "none"},
)

STANDARD = Preset(
    name="standard",
    description="Balanced setup with tests, CI, and example app",
    include_example=True,
    extensions={"ci_provider": "github-actions"},
)

ENTERPRISE = Preset(
    name="enterprise",
    description="Full-featured setup with CI/CD, git hooks, conventional commits, and automated releases",
    module_format=ModuleFormat.DUAL,
    include_example=True,
    extensions={
        "ci_provider": "github-actions",
        "husky": True,
        "commitlint": True,
        "semantic_release": True,
        "changesets": True,
    },
    additional_dev_deps={
        "husky": "^9.1.0",
        "@commitlint/cli": "^19.6.0",
        "@commitlint/config-conventional": "^19.6.0",
        "semantic-release": "^24.2.0",
        "@changesets/cli": "^2.27.0",
        "lint-staged": "^15.3.0",
    },
    additional_scripts={
        "prepare": "husky",
        "commit": "git-cz",
        "release": "semantic-release",
        "changeset": "changeset",
        "version": "changeset version",
    },
)

COMPONENT_LIBRARY = Preset(
    name="component-library",
    description="Optimized for UI component libraries with Storybook and visual testing",
    build_system=BuildSystem.VITE,
    runtime_target=RuntimeTarget.BROWSER,
    include_example=True,
    extensions={
        "ci_provider": "github-actions",
        "husky": True,
        "commitlint": True,
        "storybook": True,
        "changesets": True,
    },
    additional_dev_deps={
        "storybook": "^8.5.0",
        "@storybook/addon-essentials": "^8.5.0",
        "@storybook/addon-interactions": "^8.5.0",
        "@storybook/addon-a11y": "^8.5.0",
        "@storybook/test": "^8.5.0",
        "husky": "^9.1.0",
        "@commitlint/cli": "^19.6.0",
        "@commitlint/config-conventional": "^19.6.0",
        "@changesets/cli": "^2.27.0",
    },
    additional_scripts={
        "prepare": "husky",
        "storybook": "storybook dev -p 6006",
        "build-storybook": "storybook build",
        "changeset": "changeset",
        "version": "changeset version",
    },
)

PRESETS: dict[str, Preset] = {
    preset.name: preset for preset in (MINIMAL, STANDARD, ENTERPRISE, COMPONENT_LIBRARY)
}


def get_preset_names() -> list[str]:
    return list(PRESETS)


def get_preset(name: str) -> Preset:
    """Return the preset called *name*.

    Raises:
        PresetNotFoundError: If no preset has that name.
    """
    try:
        return PRESETS[name]
    except KeyError:
        raise PresetNotFoundError(name, available=get_preset_names()) from None


def apply_preset(config: GeneratorConfig, name: str) -> GeneratorConfig:
    """Return a copy of *config* with the preset called *name* applied.

    The preset replaces default values only.  Fields the caller set
    explicitly when building *config* are kept, and the caller's extension
    flags, dev dependencies and scripts win over the preset's on key
    collisions.
    """
    preset = get_preset(name)
    explicit = config.model_fields_set

    update: dict[str, object] = {
        "extensions": {**preset.extensions, **config.extensions},
        "additional_dev_deps": {**preset.additional_dev_deps, **config.additional_dev_deps},
        "additional_scripts": {**preset.additional_scripts, **config.additional_scripts},
    }
    for field in ("build_system", "module_format", "include_example"):
        if field not in explicit:
            update[field] = getattr(preset, field)
    if preset.runtime_target is not None and "runtime_target" not in explicit:
        update["runtime_target"] = preset.runtime_target

    return config.model_copy(update=update)
