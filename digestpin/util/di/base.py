from dishka import Provider as DishkaProvider

from digestpin.util.di.scope import Scope


class Provider(DishkaProvider):
    """Base for digestpin DI providers. Dependencies default to the RUN scope."""

    scope = Scope.RUN
