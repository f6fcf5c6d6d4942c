"""Workload dispatcher: finds pod templates and fans resolution out over them."""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass

import logfire

from digestpin.domain.image.model.resolution import RunSummary, WorkloadResolution
from digestpin.domain.image.service.resolver import ImageResolver
from digestpin.domain.workload.model.resource import KubernetesObject
from digestpin.domain.workload.model.view import WorkloadView

logger = logging.getLogger(__name__)


@dataclass
class WorkloadDispatcher:
    """Pins container images across a resource collection, in place.

    Every workload is resolved concurrently and the call returns once all of
    them have finished. Resources that carry no pod template are left alone.
    """

    resolver: ImageResolver
    include_init_containers: bool = True

    async def pin(self, resources: Sequence[KubernetesObject]) -> RunSummary:
        views = [view for resource in resources if (view := WorkloadView.of(resource)) is not None]

        with logfire.span("Pin workload images", resources=len(resources), workloads=len(views)):
            async with asyncio.TaskGroup() as tg:
                tasks = [tg.create_task(self._pin_workload(view)) for view in views]

        summary = RunSummary(workloads=[task.result() for task in tasks])
        logger.info(
            "Pinned images in %d workloads: %d rewritten, %d skipped, %d unresolved, %d failed",
            len(summary.workloads),
            summary.rewritten,
            summary.skipped,
            summary.unresolved,
            summary.failed,
        )
        return summary

    async def _pin_workload(self, view: WorkloadView) -> WorkloadResolution:
        container_lists = view.container_lists(self.include_init_containers)
        async with asyncio.TaskGroup() as tg:
            tasks = [
                tg.create_task(self.resolver.resolve_containers(cl.containers, path=cl.path))
                for cl in container_lists
            ]

        resource = view.resource
        return WorkloadResolution(
            api_version=resource.apiVersion or "",
            kind=resource.kind or "",
            name=resource.name,
            namespace=resource.namespace,
            images=[result for task in tasks for result in task.result()],
        )
