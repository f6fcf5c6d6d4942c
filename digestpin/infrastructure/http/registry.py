"""HTTP adapter for the ManifestFetcher port (Docker Registry HTTP API V2)."""

import asyncio
import logging

import httpx
import logfire

from digestpin.domain.image.model.reference import ImageReference
from digestpin.domain.image.port.manifest_fetcher import ManifestFetcher
from digestpin.domain.shared.error import ResolutionFailed

logger = logging.getLogger(__name__)

MANIFEST_MEDIA_TYPES = (
    "application/vnd.docker.distribution.manifest.v2+json",
    "application/vnd.oci.image.manifest.v1+json",
)


def _is_transient(status_code: int) -> bool:
    return status_code == 429 or status_code >= 500


class HttpManifestFetcher(ManifestFetcher):
    """Fetches image manifests anonymously and reads ``config.digest``.

    Transport errors, 429 and 5xx responses are retried with exponential
    backoff; any other non-2xx response fails immediately.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        retries: int = 2,
        backoff_seconds: float = 0.2,
        insecure_hosts: list[str] | None = None,
    ) -> None:
        self._client = client
        self._retries = retries
        self._backoff_seconds = backoff_seconds
        self._insecure_hosts = frozenset(insecure_hosts or ())

    def manifest_url(self, reference: ImageReference) -> str:
        scheme = "http" if reference.registry_host in self._insecure_hosts else "https"
        return reference.manifest_url(scheme)

    async def fetch_digest(self, reference: ImageReference) -> str:
        url = self.manifest_url(reference)
        response = await self._get(url)

        try:
            body = response.json()
        except ValueError as e:
            raise ResolutionFailed(f"Registry returned an undecodable manifest for {reference}", url=url) from e

        config = body.get("config") if isinstance(body, dict) else None
        digest = config.get("digest") if isinstance(config, dict) else None
        if not isinstance(digest, str) or not digest:
            raise ResolutionFailed(f"Manifest for {reference} has no config.digest", url=url)
        return digest

    async def _get(self, url: str) -> httpx.Response:
        headers = {"Accept": ", ".join(MANIFEST_MEDIA_TYPES)}
        last_error: ResolutionFailed | None = None
        for attempt in range(self._retries + 1):
            if attempt:
                delay = self._backoff_seconds * 2 ** (attempt - 1)
                logfire.info("Retrying registry lookup", url=url, attempt=attempt, delay=delay)
                await asyncio.sleep(delay)

            try:
                response = await self._client.get(url, headers=headers)
            except httpx.TransportError as e:
                logger.debug("Attempt %d for %s failed: %r", attempt + 1, url, e)
                last_error = ResolutionFailed(f"Registry request to {url} failed: {e!r}", url=url)
                last_error.__cause__ = e
                continue

            if response.is_success:
                return response
            last_error = ResolutionFailed(f"Registry returned HTTP {response.status_code} for {url}", url=url)
            if not _is_transient(response.status_code):
                break

        raise last_error  # type: ignore[misc]
