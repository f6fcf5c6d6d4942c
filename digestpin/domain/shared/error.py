"""Error hierarchy for digestpin.

Error layers:
- DigestPinError: Base class for all digestpin errors
- DomainError: Bad input (image references, resource lists)
- InfrastructureError: Registry, network and configuration failures

Per-image errors are caught by the resolver and turned into results;
only input and configuration errors reach the entrypoint.
"""


class DigestPinError(Exception):
    """Base class for all digestpin errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(message)


# =============================================================================
# Domain Errors
# =============================================================================


class DomainError(DigestPinError):
    """Base class for domain errors."""


class UnresolvedImage(DomainError):
    """Image reference cannot be turned into a registry lookup."""

    def __init__(self, message: str, image: str | None = None) -> None:
        super().__init__(message, code="UNRESOLVED_IMAGE")
        self.image = image


class InvalidResourceList(DomainError):
    """Function input is not a ResourceList or a stream of resources."""


# =============================================================================
# Infrastructure Errors
# =============================================================================


class InfrastructureError(DigestPinError):
    """Base class for infrastructure/system errors."""


class ResolutionFailed(InfrastructureError):
    """Registry lookup failed for a single image."""

    def __init__(self, message: str, url: str | None = None) -> None:
        super().__init__(message, code="RESOLUTION_FAILED")
        self.url = url


class ConfigurationError(InfrastructureError):
    """System misconfiguration detected."""
