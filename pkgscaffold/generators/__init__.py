"""Built-in framework generators.

Each module defines a framework plugin and a ready-made ``BaseGenerator``
wrapping it.  ``register_builtin_generators`` installs all of them into a
registry in a fixed order, which makes each one the primary generator for
its framework.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pkgscaffold.generators.base import BaseGenerator, FrameworkPlugin, Generator
from pkgscaffold.generators.node import NodePlugin, node_generator
from pkgscaffold.generators.react import ReactPlugin, react_generator
from pkgscaffold.generators.svelte import SveltePlugin, svelte_generator
from pkgscaffold.generators.vanilla import VanillaPlugin, vanilla_generator
from pkgscaffold.generators.vue import VuePlugin, vue_generator

if TYPE_CHECKING:
    from pkgscaffold.registry import GeneratorRegistry


def builtin_generators() -> list[BaseGenerator]:
    return [
        react_generator,
        vue_generator,
        svelte_generator,
        vanilla_generator,
        node_generator,
    ]


def register_builtin_generators(registry: "GeneratorRegistry") -> None:
    for generator in builtin_generators():
        registry.register(generator)


__all__ = [
    "BaseGenerator",
    "FrameworkPlugin",
    "Generator",
    "NodePlugin",
    "ReactPlugin",
    "SveltePlugin",
    "VanillaPlugin",
    "VuePlugin",
    "builtin_generators",
    "register_builtin_generators",
]
