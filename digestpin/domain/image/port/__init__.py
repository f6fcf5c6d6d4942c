from digestpin.domain.image.port.manifest_fetcher import ManifestFetcher

__all__ = ["ManifestFetcher"]
