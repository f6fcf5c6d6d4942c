"""DI provider for HTTP infrastructure."""

from typing import AsyncIterable, NewType

import httpx
from dishka import provide

from digestpin.config import Config
from digestpin.domain.image.port.manifest_fetcher import ManifestFetcher
from digestpin.infrastructure.http.registry import HttpManifestFetcher
from digestpin.util.di.base import Provider
from digestpin.util.di.scope import Scope

RegistryHttpClient = NewType("RegistryHttpClient", httpx.AsyncClient)


class HttpProvider(Provider):
    """DI provider for the registry HTTP client and manifest fetcher."""

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None) -> None:
        super().__init__()
        self._transport = transport

    @provide(scope=Scope.APP)
    async def get_registry_http_client(self, config: Config) -> AsyncIterable[RegistryHttpClient]:
        """Shared client for every registry lookup of the process."""
        async with httpx.AsyncClient(
            timeout=httpx.Timeout(config.registry.timeout_seconds),
            headers={"User-Agent": config.registry.user_agent},
            follow_redirects=True,
            transport=self._transport,
        ) as client:
            yield RegistryHttpClient(client)

    @provide(scope=Scope.APP, provides=ManifestFetcher)
    def get_manifest_fetcher(self, client: RegistryHttpClient, config: Config) -> HttpManifestFetcher:
        return HttpManifestFetcher(
            client=client,
            retries=config.registry.retries,
            backoff_seconds=config.registry.backoff_seconds,
            insecure_hosts=config.registry.insecure_hosts,
        )
