"""Workload views: where each supported kind keeps its pod template.

Each variant binds one typed resource record to the path of its pod spec.
Supporting a new workload kind means adding a resource record and a view;
the dispatcher does not change.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, ClassVar, NamedTuple

from digestpin.domain.workload.model.resource import (
    Container,
    CronJob,
    DaemonSet,
    Deployment,
    Job,
    KubernetesObject,
    Pod,
    PodSpec,
    ReplicaSet,
    StatefulSet,
    TemplatedSpec,
)

logger = logging.getLogger(__name__)

_VIEWS: dict[type[KubernetesObject], type["WorkloadView"]] = {}


class ContainerList(NamedTuple):
    """A container list together with its field path inside the resource."""

    path: str
    containers: list[Container]


class WorkloadView(ABC):
    """A resource seen as a carrier of pod-template containers."""

    resource_type: ClassVar[type[KubernetesObject]]
    pod_spec_path: ClassVar[str]

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        resource_type = cls.__dict__.get("resource_type")
        if resource_type is not None:
            _VIEWS[resource_type] = cls

    def __init__(self, resource: KubernetesObject) -> None:
        self.resource = resource

    @classmethod
    def of(cls, resource: KubernetesObject) -> "WorkloadView | None":
        """Build the view for a resource, or None when it carries no pod template.

        Unsupported kinds and supported kinds with a missing pod template are
        both skipped rather than treated as errors.
        """
        variant = _VIEWS.get(type(resource))
        if variant is None:
            return None
        view = variant(resource)
        if view.pod_spec is None:
            logger.debug(
                "Skipping %s %r: no pod template at %s",
                resource.kind,
                resource.name,
                variant.pod_spec_path,
            )
            return None
        return view

    @classmethod
    def supported_kinds(cls) -> list[str]:
        return sorted(f"{t.__api_version__}/{t.__kind__}" for t in _VIEWS)

    @property
    @abstractmethod
    def pod_spec(self) -> PodSpec | None: ...

    def container_lists(self, include_init_containers: bool = True) -> list[ContainerList]:
        """Container lists to rewrite, regular containers first."""
        spec = self.pod_spec
        if spec is None:
            return []
        lists = [ContainerList(f"{self.pod_spec_path}.containers", spec.containers or [])]
        if include_init_containers and spec.initContainers:
            lists.append(ContainerList(f"{self.pod_spec_path}.initContainers", spec.initContainers))
        return lists


class PodView(WorkloadView):
    resource_type = Pod
    pod_spec_path = "spec"

    @property
    def pod_spec(self) -> PodSpec | None:
        return self.resource.spec  # type: ignore[attr-defined]


def _template_pod_spec(spec: TemplatedSpec | None) -> PodSpec | None:
    if spec is None or spec.template is None:
        return None
    return spec.template.spec


class _TemplatedView(WorkloadView):
    pod_spec_path = "spec.template.spec"

    @property
    def pod_spec(self) -> PodSpec | None:
        return _template_pod_spec(self.resource.spec)  # type: ignore[attr-defined]


class DeploymentView(_TemplatedView):
    resource_type = Deployment


class StatefulSetView(_TemplatedView):
    resource_type = StatefulSet


class DaemonSetView(_TemplatedView):
    resource_type = DaemonSet


class ReplicaSetView(_TemplatedView):
    resource_type = ReplicaSet


class JobView(_TemplatedView):
    resource_type = Job


class CronJobView(WorkloadView):
    resource_type = CronJob
    pod_spec_path = "spec.jobTemplate.spec.template.spec"

    @property
    def pod_spec(self) -> PodSpec | None:
        spec = self.resource.spec  # type: ignore[attr-defined]
        if spec is None or spec.jobTemplate is None:
            return None
        return _template_pod_spec(spec.jobTemplate.spec)
