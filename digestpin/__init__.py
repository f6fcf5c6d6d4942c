"""digestpin: pin Kubernetes container images to registry digests."""

from digestpin.domain.image.model import ImageReference, ImageResolution, ResolutionStatus, RunSummary
from digestpin.domain.image.service import ImageResolver
from digestpin.domain.workload.model import ResourceList, WorkloadView
from digestpin.domain.workload.service import WorkloadDispatcher

__version__ = "0.1.0"

__all__ = [
    "ImageReference",
    "ImageResolution",
    "ImageResolver",
    "ResolutionStatus",
    "ResourceList",
    "RunSummary",
    "WorkloadDispatcher",
    "WorkloadView",
]
