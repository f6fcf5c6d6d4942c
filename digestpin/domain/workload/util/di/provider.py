from dishka import provide

from digestpin.config import Config
from digestpin.domain.image.port.manifest_fetcher import ManifestFetcher
from digestpin.domain.image.service.resolver import ImageResolver
from digestpin.domain.workload.service.dispatcher import WorkloadDispatcher
from digestpin.util.di.base import Provider
from digestpin.util.di.scope import Scope


class WorkloadProvider(Provider):
    @provide(scope=Scope.RUN)
    def get_image_resolver(self, fetcher: ManifestFetcher, config: Config) -> ImageResolver:
        return ImageResolver(
            fetcher,
            max_concurrency=config.resolver.max_concurrency,
            lookup_timeout=config.resolver.lookup_timeout_seconds,
        )

    @provide(scope=Scope.RUN)
    def get_dispatcher(self, resolver: ImageResolver, config: Config) -> WorkloadDispatcher:
        return WorkloadDispatcher(
            resolver=resolver,
            include_init_containers=config.resolver.include_init_containers,
        )
