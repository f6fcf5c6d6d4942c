"""Custom Dishka scopes for digestpin."""

from dishka import BaseScope, new_scope


class Scope(BaseScope):  # type: ignore[misc]  # BaseScope is designed to be subclassed
    """digestpin dependency injection scopes.

    Hierarchy: APP -> RUN

    - APP: Process lifetime (config, HTTP client, registry adapter)
    - RUN: One function invocation (resolver state, dispatcher)
    """

    APP = new_scope("APP")
    RUN = new_scope("RUN")
