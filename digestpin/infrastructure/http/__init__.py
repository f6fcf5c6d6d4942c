from digestpin.infrastructure.http.di import HttpProvider
from digestpin.infrastructure.http.registry import HttpManifestFetcher

__all__ = ["HttpManifestFetcher", "HttpProvider"]
