"""Async client for the npm registry.

Looks up published package metadata (``GET {registry}/{name}``) so the CLI
can tell whether a package name is already taken and which version of a
dependency is current.  Lookups never raise; network and HTTP failures are
reported through ``RegistryLookup.error``.

Typical usage::

    client = NpmRegistryClient()
    lookup = await client.lookup("react")
    if lookup.success:
        print(lookup.latest_version)
"""

from __future__ import annotations

import time
from typing import Optional

import httpx
from pydantic import BaseModel, Field

from pkgscaffold.config import DEFAULT_REGISTRY


class RegistryLookup(BaseModel):
    """Structured result of one registry lookup."""

    name: str = Field(..., description="Package name that was looked up")
    exists: bool = Field(default=False, description="Whether the package is published")
    latest_version: Optional[str] = Field(default=None, description="dist-tags.latest")
    duration_ms: float = Field(default=0.0, description="Round-trip time in ms")
    success: bool = Field(default=True, description="Whether the request succeeded")
    error: Optional[str] = Field(default=None, description="Error message on failure")


def encode_package_name(name: str) -> str:
    """Escape the slash of a scoped name the way the registry expects."""
    return name.replace("/", "%2f") if name.startswith("@") else name


class NpmRegistryClient:
    """Async client for the npm registry REST API.

    ``transport`` is passed through to ``httpx.AsyncClient``; tests use it to
    plug in an ``httpx.MockTransport``.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_REGISTRY,
        timeout: int = 15,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _client(self) -> httpx.AsyncClient:
        """Return a fresh ``AsyncClient`` configured with our base URL and timeout."""
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(self.timeout, connect=5.0),
            headers={"Accept": "application/vnd.npm.install-v1+json"},
            transport=self.transport,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def lookup(self, name: str) -> RegistryLookup:
        """Fetch the registry document for *name*.

        A 404 is a successful lookup of an unpublished name.
        """
        start = time.monotonic()
        try:
            async with self._client() as client:
                response = await client.get(f"/{encode_package_name(name)}")
                elapsed = (time.monotonic() - start) * 1000.0
                if response.status_code == 404:
                    return RegistryLookup(name=name, exists=False, duration_ms=elapsed)
                response.raise_for_status()
                data = response.json()
                return RegistryLookup(
                    name=name,
                    exists=True,
                    latest_version=data.get("dist-tags", {}).get("latest"),
                    duration_ms=elapsed,
                )
        except httpx.ConnectError:
            return RegistryLookup(
                name=name,
                success=False,
                error=f"Cannot connect to the npm registry at {self.base_url}.",
            )
        except httpx.TimeoutException:
            return RegistryLookup(
                name=name,
                success=False,
                error=f"Request to the npm registry timed out after {self.timeout}s.",
            )
        except httpx.HTTPStatusError as exc:
            return RegistryLookup(
                name=name,
                success=False,
                error=f"npm registry returned HTTP {exc.response.status_code} for {name}",
            )
        except (httpx.HTTPError, ValueError) as exc:
            return RegistryLookup(
                name=name,
                success=False,
                error=f"Unexpected error looking up {name}: {exc}",
            )

    async def get_latest_version(self, name: str) -> Optional[str]:
        """Return the ``latest`` dist-tag of *name*, or ``None`` when unknown."""
        lookup = await self.lookup(name)
        return lookup.latest_version if lookup.success else None

    async def is_name_available(self, name: str) -> Optional[bool]:
        """Return whether *name* is unpublished, or ``None`` if the lookup failed."""
        lookup = await self.lookup(name)
        if not lookup.success:
            return None
        return not lookup.exists
