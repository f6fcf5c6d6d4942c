from digestpin.util.di.base import Provider
from digestpin.util.di.scope import Scope

__all__ = ["Provider", "Scope"]
