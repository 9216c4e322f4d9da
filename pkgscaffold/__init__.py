"""pkgscaffold -- scaffolds npm packages for React, Vue, Svelte, Node and plain TypeScript.

Quick usage::

    from pkgscaffold import GeneratorConfig, PackageGenerator, create_default_registry

    config = GeneratorConfig(name="@acme/ui", out_dir="./acme-ui")
    result = PackageGenerator(create_default_registry()).generate_package("react", config)
"""

__version__ = "1.0.0"

from pkgscaffold.models import GenerationResult, GeneratorConfig  # noqa: E402
from pkgscaffold.registry import GeneratorRegistry, create_default_registry  # noqa: E402
from pkgscaffold.scaffolder import PackageGenerator, TemplateRenderer, generate_package  # noqa: E402

__all__ = [
    "GenerationResult",
    "GeneratorConfig",
    "GeneratorRegistry",
    "PackageGenerator",
    "TemplateRenderer",
    "__version__",
    "create_default_registry",
    "generate_package",
]
