"""Package scaffolder -- renders generator output into a package directory.

Quick usage::

    from pkgscaffold.registry import create_default_registry
    from pkgscaffold.scaffolder import ItemGenerator, ItemType, PackageGenerator

    generator = PackageGenerator(create_default_registry())
    result = generator.generate_package("vue", config)

    ItemGenerator().add_item("vue-lib", ItemType.COMPONENT, "Button")
"""

from pkgscaffold.scaffolder.adder import ItemGenerator, ItemType, detect_project
from pkgscaffold.scaffolder.generator import (
    PackageGenerator,
    build_package_json,
    build_template_context,
    generate_package,
)
from pkgscaffold.scaffolder.templates import TemplateRenderer

__all__ = [
    "ItemGenerator",
    "ItemType",
    "PackageGenerator",
    "TemplateRenderer",
    "build_package_json",
    "build_template_context",
    "detect_project",
    "generate_package",
]
