"""Generator registry.

Maps generator ids and framework tags to generator instances.  A registry
is constructed explicitly and handed to the orchestrator; there is no
process-wide instance.

The registry is populated once at startup and then only read, so it does
no locking.  It is not safe to register and look up from several threads
at the same time.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pkgscaffold.generators import register_builtin_generators
from pkgscaffold.generators.base import Generator
from pkgscaffold.models import GeneratorMeta
from pkgscaffold.utils import print_debug, print_warning


def _tag(framework: str | Enum) -> str:
    return framework.value if isinstance(framework, Enum) else str(framework)


class GeneratorRegistry:
    """Generators keyed by id, plus per-framework lists in registration order."""

    def __init__(self) -> None:
        self._generators: dict[str, Generator] = {}
        self._by_framework: dict[str, list[Generator]] = {}

    def __len__(self) -> int:
        return len(self._generators)

    def __contains__(self, generator_id: object) -> bool:
        return generator_id in self._generators

    # -- Mutation ------------------------------------------------------------

    def register(self, generator: Generator) -> None:
        """Add *generator*; a generator with the same id is replaced.

        Replacing keeps the old generator's position in its framework list
        so the primary generator for that framework does not change.
        """
        meta = generator.meta
        tag = _tag(meta.framework)
        bucket = self._by_framework.setdefault(tag, [])

        previous = self._generators.get(meta.id)
        if previous is not None:
            print_warning(f"Generator {meta.id} is already registered. Overwriting.")
            old_bucket = self._by_framework.get(_tag(previous.meta.framework), [])
            if old_bucket is bucket:
                bucket[bucket.index(previous)] = generator
            else:
                old_bucket.remove(previous)
                if not old_bucket:
                    del self._by_framework[_tag(previous.meta.framework)]
                bucket.append(generator)
        else:
            bucket.append(generator)

        self._generators[meta.id] = generator
        print_debug(f"Registered generator {meta.id} for {tag}")

    def unregister(self, generator_id: str) -> bool:
        """Remove a generator by id. Returns ``False`` if it was not registered."""
        generator = self._generators.pop(generator_id, None)
        if generator is None:
            return False

        tag = _tag(generator.meta.framework)
        bucket = self._by_framework.get(tag, [])
        if generator in bucket:
            bucket.remove(generator)
        if not bucket:
            self._by_framework.pop(tag, None)
        return True

    def clear(self) -> None:
        self._generators.clear()
        self._by_framework.clear()

    # -- Lookup --------------------------------------------------------------

    def get(self, generator_id: str) -> Optional[Generator]:
        return self._generators.get(generator_id)

    def has(self, generator_id: str) -> bool:
        return generator_id in self._generators

    def get_by_framework(self, framework: str | Enum) -> list[Generator]:
        return list(self._by_framework.get(_tag(framework), []))

    def get_primary(self, framework: str | Enum) -> Optional[Generator]:
        """Return the first generator registered for *framework*."""
        generators = self._by_framework.get(_tag(framework))
        return generators[0] if generators else None

    def has_framework(self, framework: str | Enum) -> bool:
        return bool(self._by_framework.get(_tag(framework)))

    def get_all(self) -> list[Generator]:
        return list(self._generators.values())

    def get_all_metadata(self) -> list[GeneratorMeta]:
        return [generator.meta for generator in self._generators.values()]

    def get_supported_frameworks(self) -> list[str]:
        return [tag for tag, generators in self._by_framework.items() if generators]


def create_default_registry() -> GeneratorRegistry:
    """Return a new registry holding the built-in generators."""
    registry = GeneratorRegistry()
    register_builtin_generators(registry)
    return registry
