"""Image resolver: pins the images of a container list in place."""

import asyncio
import logging
from collections.abc import Sequence

import logfire

from digestpin.domain.image.model.reference import ImageReference, is_digest_pinned
from digestpin.domain.image.model.resolution import ImageResolution, ResolutionStatus
from digestpin.domain.image.port.manifest_fetcher import ManifestFetcher
from digestpin.domain.shared.error import ConfigurationError, ResolutionFailed, UnresolvedImage
from digestpin.domain.workload.model.resource import Container

logger = logging.getLogger(__name__)


class ImageResolver:
    """Resolves tag references to digests, one task per container.

    One resolver serves one run. Registry lookups are bounded by a
    semaphore shared by every container list the resolver handles, and a
    reference seen more than once in the run is looked up only once.
    Per-image problems never raise; they come back as
    ``ImageResolution`` results.
    """

    def __init__(
        self,
        fetcher: ManifestFetcher,
        *,
        max_concurrency: int = 16,
        lookup_timeout: float | None = 30.0,
    ) -> None:
        if max_concurrency < 1:
            raise ConfigurationError(f"max_concurrency must be at least 1, got {max_concurrency}")
        self._fetcher = fetcher
        self._semaphore = asyncio.Semaphore(max_concurrency)
        self._lookup_timeout = lookup_timeout
        self._lookups: dict[ImageReference, asyncio.Task[str]] = {}

    async def resolve_containers(
        self,
        containers: Sequence[Container],
        path: str = "containers",
    ) -> list[ImageResolution]:
        """Resolve every container concurrently, then write pinned images back.

        Results are index-aligned with ``containers``. Only ``rewritten``
        results touch the container; every other outcome leaves the
        original image in place.
        """
        async with asyncio.TaskGroup() as tg:
            tasks = [
                tg.create_task(
                    self.resolve(
                        container.image,
                        container=container.name,
                        field_path=f"{path}[{index}].image",
                    )
                )
                for index, container in enumerate(containers)
            ]

        results = [task.result() for task in tasks]
        for container, result in zip(containers, results, strict=True):
            if result.changed:
                container.image = result.resolved
        return results

    async def resolve(
        self,
        image: str | None,
        *,
        container: str | None = None,
        field_path: str | None = None,
    ) -> ImageResolution:
        """Resolve a single image reference without mutating anything."""
        context = {"original": image, "container": container, "field_path": field_path}

        if image and is_digest_pinned(image):
            return ImageResolution(status=ResolutionStatus.SKIPPED, **context)

        try:
            reference = ImageReference.parse(image)
            digest = await self._lookup(reference)
        except UnresolvedImage as e:
            logger.debug("Not resolving %r: %s", image, e.message)
            return ImageResolution(status=ResolutionStatus.UNRESOLVED, reason=e.message, **context)
        except ResolutionFailed as e:
            logfire.warning("Image resolution failed", image=image, reason=e.message)
            return ImageResolution(status=ResolutionStatus.FAILED, reason=e.message, **context)
        except asyncio.TimeoutError:
            reason = f"Registry lookup timed out after {self._lookup_timeout}s"
            logfire.warning("Image resolution timed out", image=image, timeout=self._lookup_timeout)
            return ImageResolution(status=ResolutionStatus.FAILED, reason=reason, **context)
        except Exception as e:
            logfire.error("Unexpected error resolving image", image=image, error=str(e))
            return ImageResolution(status=ResolutionStatus.FAILED, reason=str(e), **context)

        resolved = reference.pinned(digest)
        logger.debug("Pinned %s -> %s", image, resolved)
        return ImageResolution(status=ResolutionStatus.REWRITTEN, resolved=resolved, **context)

    async def _lookup(self, reference: ImageReference) -> str:
        task = self._lookups.get(reference)
        if task is None:
            task = asyncio.create_task(self._fetch(reference), name=f"lookup-{reference}")
            self._lookups[reference] = task
        # Shielded so one cancelled waiter does not cancel the shared lookup
        return await asyncio.shield(task)

    async def _fetch(self, reference: ImageReference) -> str:
        async with self._semaphore:
            with logfire.span("Resolve image {reference}", reference=str(reference)):
                return await asyncio.wait_for(
                    self._fetcher.fetch_digest(reference),
                    timeout=self._lookup_timeout,
                )
