"""Async client for the Maven Central search API.

Resolves the latest published version of an artifact coordinate for a target
AEM platform.  Failures are raised as ``ResolutionError``; no fallback version
is ever substituted.

Typical usage::

    client = MavenClient()
    metadata = await client.latest(api_coordinates("cloud"), "cloud")
    print(metadata.version)
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

import httpx
from pydantic import BaseModel, Field

from aemgen.errors import ResolutionError


class ArtifactCoordinate(BaseModel, frozen=True):
    """A ``(group_id, artifact_id)`` pair identifying a publishable artifact."""

    group_id: str
    artifact_id: str

    def __str__(self) -> str:
        return f"{self.group_id}:{self.artifact_id}"


class ArtifactMetadata(BaseModel):
    """Version metadata for a resolved coordinate."""

    group_id: str = Field(..., description="Maven group id")
    artifact_id: str = Field(..., description="Maven artifact id")
    version: str = Field(..., description="Latest published version")


# ---------------------------------------------------------------------------
# Coordinate tables (platform -> coordinate)
# ---------------------------------------------------------------------------

LEGACY_PLATFORM = "6.5"

TESTING_CLIENT_COORDINATES: dict[str, ArtifactCoordinate] = {
    "cloud": ArtifactCoordinate(group_id="com.adobe.cq", artifact_id="aem-cloud-testing-clients"),
    LEGACY_PLATFORM: ArtifactCoordinate(group_id="com.adobe.cq", artifact_id="cq-testing-clients-65"),
}

API_COORDINATES: dict[str, ArtifactCoordinate] = {
    "cloud": ArtifactCoordinate(group_id="com.adobe.aem", artifact_id="aem-sdk-api"),
    LEGACY_PLATFORM: ArtifactCoordinate(group_id="com.adobe.aem", artifact_id="uber-jar"),
}


def testing_client_coordinates(platform: str) -> ArtifactCoordinate:
    """Testing-client coordinate; anything other than ``cloud`` is the legacy platform."""
    if platform == "cloud":
        return TESTING_CLIENT_COORDINATES["cloud"]
    return TESTING_CLIENT_COORDINATES[LEGACY_PLATFORM]


def api_coordinates(platform: str) -> ArtifactCoordinate:
    """Platform API coordinate; anything other than ``cloud`` is the legacy platform."""
    if platform == "cloud":
        return API_COORDINATES["cloud"]
    return API_COORDINATES[LEGACY_PLATFORM]


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


class MavenClient:
    """Async client for the Maven Central ``/solrsearch/select`` endpoint."""

    def __init__(self, base_url: str = "https://search.maven.org", timeout: int = 30) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def _client(self) -> httpx.AsyncClient:
        """Return a fresh ``AsyncClient`` configured with our base URL and timeout."""
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(self.timeout, connect=10.0),
        )

    @staticmethod
    def _query(coordinate: ArtifactCoordinate, platform: str) -> dict[str, str]:
        """Build the search parameters for *coordinate*.

        The legacy platform pins the ``6.5`` release line of the artifact.
        """
        query = f'g:"{coordinate.group_id}" AND a:"{coordinate.artifact_id}"'
        if platform == LEGACY_PLATFORM and coordinate.artifact_id == "uber-jar":
            query += ' AND v:"6.5*"'
            return {"q": query, "core": "gav", "rows": "1", "wt": "json"}
        return {"q": query, "rows": "1", "wt": "json"}

    @staticmethod
    def _extract_version(data: dict) -> str:
        """Pull the version out of a search response, or ``""`` when absent.

        The default core reports ``latestVersion``; the ``gav`` core reports
        ``v`` on each document.
        """
        if not isinstance(data, dict):
            return ""
        docs = data.get("response", {}).get("docs", [])
        if not docs:
            return ""
        return docs[0].get("latestVersion") or docs[0].get("v", "")

    async def latest(self, coordinate: ArtifactCoordinate, platform: str) -> ArtifactMetadata:
        """Resolve the latest release of *coordinate* for *platform*.

        Raises:
            ResolutionError: On any transport or HTTP error, an unreadable
                response body, or when the service knows no release of the
                coordinate.
        """
        try:
            async with self._client() as client:
                response = await client.get(
                    "/solrsearch/select", params=self._query(coordinate, platform)
                )
                response.raise_for_status()
                data = response.json()
        except httpx.ConnectError as exc:
            raise ResolutionError(
                str(coordinate), f"cannot connect to {self.base_url}."
            ) from exc
        except httpx.TimeoutException as exc:
            raise ResolutionError(
                str(coordinate), f"request timed out after {self.timeout}s."
            ) from exc
        except httpx.HTTPStatusError as exc:
            raise ResolutionError(
                str(coordinate),
                f"service returned HTTP {exc.response.status_code}: {exc.response.text[:500]}",
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise ResolutionError(str(coordinate), f"unexpected error: {exc}") from exc

        version = self._extract_version(data)
        if not version:
            raise ResolutionError(str(coordinate), "no published release found.")

        return ArtifactMetadata(
            group_id=coordinate.group_id,
            artifact_id=coordinate.artifact_id,
            version=version,
        )

    async def resolve_all(
        self,
        coordinates: Sequence[ArtifactCoordinate],
        platform: str,
    ) -> list[ArtifactMetadata]:
        """Resolve independent coordinates concurrently.

        Returns metadata in the order of *coordinates*.  The first failure
        propagates as ``ResolutionError``.
        """
        return list(
            await asyncio.gather(*(self.latest(c, platform) for c in coordinates))
        )
