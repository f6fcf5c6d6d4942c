from digestpin.domain.workload.model.resource import (
    Container,
    CronJob,
    DaemonSet,
    Deployment,
    Job,
    KubernetesObject,
    ObjectMeta,
    Pod,
    PodSpec,
    ReplicaSet,
    StatefulSet,
    parse_resource,
)
from digestpin.domain.workload.model.resource_list import (
    FieldRef,
    FunctionResult,
    ResourceList,
    ResourceRef,
)
from digestpin.domain.workload.model.view import WorkloadView

__all__ = [
    "Container",
    "CronJob",
    "DaemonSet",
    "Deployment",
    "FieldRef",
    "FunctionResult",
    "Job",
    "KubernetesObject",
    "ObjectMeta",
    "Pod",
    "PodSpec",
    "ReplicaSet",
    "ResourceList",
    "ResourceRef",
    "StatefulSet",
    "WorkloadView",
    "parse_resource",
]
