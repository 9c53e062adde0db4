"""Async client for the npm registry.

Looks up the latest published version of a package via
``GET {registry}/{package}/latest``.  Lookups never raise: every failure
(connection, timeout, HTTP status, malformed body) is reported as a
``VersionLookup`` with ``success=False`` so callers can fall back to a
pinned version per package.

Typical usage::

    client = NpmRegistryClient()
    result = await client.lookup("elysia")
    version = result.version if result.success else "1.4.25"
"""

from __future__ import annotations

import httpx
from pydantic import BaseModel, Field


class VersionLookup(BaseModel):
    """Outcome of a single registry lookup."""

    package: str
    version: str | None = Field(default=None, description="Latest published version")
    success: bool = Field(default=True, description="Whether the lookup succeeded")
    error: str | None = Field(default=None, description="Error message on failure")


class NpmRegistryClient:
    """Async client for the npm registry REST API.

    Uses ``httpx.AsyncClient`` for non-blocking HTTP.
    """

    def __init__(self, base_url: str = "https://registry.npmjs.org", timeout: int = 10) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _client(self) -> httpx.AsyncClient:
        """Return a fresh ``AsyncClient`` configured with our base URL and timeout."""
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(self.timeout, connect=5.0),
            headers={"Accept": "application/json"},
        )

    @staticmethod
    def _package_path(package: str) -> str:
        """Registry path for *package*; the scope separator must be escaped."""
        return "/" + package.replace("/", "%2F") + "/latest"

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def lookup(self, package: str) -> VersionLookup:
        """Fetch the latest published version of *package*.

        Returns:
            A ``VersionLookup`` with the version or an error.
        """
        try:
            async with self._client() as client:
                response = await client.get(self._package_path(package))
                response.raise_for_status()
                data = response.json()
        except httpx.ConnectError:
            return VersionLookup(
                package=package,
                success=False,
                error=f"Cannot connect to npm registry at {self.base_url}.",
            )
        except httpx.TimeoutException:
            return VersionLookup(
                package=package,
                success=False,
                error=f"Registry request timed out after {self.timeout}s.",
            )
        except httpx.HTTPStatusError as exc:
            return VersionLookup(
                package=package,
                success=False,
                error=f"Registry returned HTTP {exc.response.status_code} for {package}",
            )
        except Exception as exc:  # noqa: BLE001
            return VersionLookup(
                package=package,
                success=False,
                error=f"Unexpected error looking up {package}: {exc}",
            )

        version = data.get("version") if isinstance(data, dict) else None
        if not isinstance(version, str) or not version:
            return VersionLookup(
                package=package,
                success=False,
                error=f"Registry response for {package} has no version field",
            )
        return VersionLookup(package=package, version=version)
