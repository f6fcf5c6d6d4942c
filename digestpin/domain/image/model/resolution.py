"""Per-image resolution outcomes and the per-run summary."""

from enum import StrEnum

from pydantic import Field

from digestpin.domain.shared.model.value import ValueObject


class ResolutionStatus(StrEnum):
    REWRITTEN = "rewritten"
    SKIPPED = "skipped"  # already digest-pinned
    UNRESOLVED = "unresolved"  # malformed reference, no lookup made
    FAILED = "failed"  # registry or network failure


class ImageResolution(ValueObject):
    """Outcome of resolving a single container image."""

    status: ResolutionStatus
    original: str | None = None
    resolved: str | None = None
    container: str | None = None
    field_path: str | None = None
    reason: str | None = None

    @property
    def changed(self) -> bool:
        return self.status == ResolutionStatus.REWRITTEN


class WorkloadResolution(ValueObject):
    """Resolutions for every container of one workload resource."""

    api_version: str
    kind: str
    name: str | None = None
    namespace: str | None = None
    images: list[ImageResolution] = Field(default_factory=list)


class RunSummary(ValueObject):
    """Aggregated result of one function invocation."""

    workloads: list[WorkloadResolution] = Field(default_factory=list)

    def _count(self, status: ResolutionStatus) -> int:
        return sum(1 for w in self.workloads for i in w.images if i.status == status)

    @property
    def rewritten(self) -> int:
        return self._count(ResolutionStatus.REWRITTEN)

    @property
    def skipped(self) -> int:
        return self._count(ResolutionStatus.SKIPPED)

    @property
    def unresolved(self) -> int:
        return self._count(ResolutionStatus.UNRESOLVED)

    @property
    def failed(self) -> int:
        return self._count(ResolutionStatus.FAILED)

    @property
    def total(self) -> int:
        return sum(len(w.images) for w in self.workloads)

    def problems(self) -> list[tuple[WorkloadResolution, ImageResolution]]:
        """Images that could not be pinned, in collection order."""
        return [
            (workload, image)
            for workload in self.workloads
            for image in workload.images
            if image.status in (ResolutionStatus.UNRESOLVED, ResolutionStatus.FAILED)
        ]
