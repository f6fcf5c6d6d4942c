from digestpin.domain.image.model.reference import (
    DEFAULT_TAG,
    DIGEST_MARKER,
    ImageReference,
    is_digest_pinned,
    registry_manifest_url,
)
from digestpin.domain.image.model.resolution import (
    ImageResolution,
    ResolutionStatus,
    RunSummary,
    WorkloadResolution,
)

__all__ = [
    "DEFAULT_TAG",
    "DIGEST_MARKER",
    "ImageReference",
    "ImageResolution",
    "ResolutionStatus",
    "RunSummary",
    "WorkloadResolution",
    "is_digest_pinned",
    "registry_manifest_url",
]
