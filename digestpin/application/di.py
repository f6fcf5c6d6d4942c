import httpx
from dishka import AsyncContainer, from_context, make_async_container

from digestpin.config import Config
from digestpin.domain.workload.util.di import WorkloadProvider
from digestpin.infrastructure.http import HttpProvider
from digestpin.util.di.base import Provider
from digestpin.util.di.scope import Scope


class ConfigProvider(Provider):
    config = from_context(provides=Config, scope=Scope.APP)


def create_container(
    config: Config,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AsyncContainer:
    """Build the DI container for one process.

    ``transport`` replaces the network transport of the registry client
    (tests, offline runs).
    """
    return make_async_container(
        ConfigProvider(),
        HttpProvider(transport=transport),
        WorkloadProvider(),
        context={Config: config},
        scopes=Scope,  # type: ignore[arg-type]  # Custom scope class
    )
