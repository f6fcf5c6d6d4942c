"""Port for looking up image digests in a container registry."""

from abc import abstractmethod
from typing import Protocol, runtime_checkable

from digestpin.domain.image.model.reference import ImageReference


@runtime_checkable
class ManifestFetcher(Protocol):
    """Resolve a tag-addressed image reference to a content digest."""

    @abstractmethod
    async def fetch_digest(self, reference: ImageReference) -> str:
        """Return the digest for ``reference``.

        Raises:
            ResolutionFailed: If the registry cannot be reached or its
                response carries no digest.
        """
        ...
