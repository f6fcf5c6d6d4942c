"""Typed Kubernetes resource records.

Only the fields needed to reach container images are declared. Every model
allows extra fields, so content the function does not understand is carried
through unchanged and dumped back with ``to_dict()``.
"""

import logging
from collections.abc import Mapping
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, PrivateAttr, ValidationError

logger = logging.getLogger(__name__)


class KubeModel(BaseModel):
    model_config = ConfigDict(extra="allow")


class ObjectMeta(KubeModel):
    name: str | None = None
    namespace: str | None = None


class Container(KubeModel):
    name: str | None = None
    image: str | None = None


class PodSpec(KubeModel):
    containers: list[Container] | None = None
    initContainers: list[Container] | None = None


class PodTemplateSpec(KubeModel):
    metadata: ObjectMeta | None = None
    spec: PodSpec | None = None


class TemplatedSpec(KubeModel):
    """Spec of a controller that embeds a pod template."""

    template: PodTemplateSpec | None = None


class JobTemplateSpec(KubeModel):
    metadata: ObjectMeta | None = None
    spec: TemplatedSpec | None = None


class CronJobSpec(KubeModel):
    jobTemplate: JobTemplateSpec | None = None


_RESOURCE_TYPES: dict[tuple[str, str], type["KubernetesObject"]] = {}


def _in_source_order(value: Any, source: Any) -> Any:
    """Reorder dumped mappings to follow the key order of ``source``.

    Keys missing from ``source`` keep their dumped position after the known
    ones. Lists are matched up item by item when their lengths agree.
    """
    if isinstance(value, dict) and isinstance(source, Mapping):
        ordered = {key: _in_source_order(value[key], source[key]) for key in source if key in value}
        ordered.update((key, item) for key, item in value.items() if key not in ordered)
        return ordered
    if isinstance(value, list) and isinstance(source, list) and len(value) == len(source):
        return [_in_source_order(item, original) for item, original in zip(value, source)]
    return value


class KubernetesObject(KubeModel):
    """Any resource in a ResourceList.

    Subclasses declare ``__api_version__`` and ``__kind__`` and are picked
    by ``parse_resource``.
    """

    __api_version__: ClassVar[str | None] = None
    __kind__: ClassVar[str | None] = None

    apiVersion: str | None = None
    kind: str | None = None
    metadata: ObjectMeta | None = None

    # Parsed input, consulted for key order when dumping
    _source: Mapping[str, Any] | None = PrivateAttr(default=None)

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if cls.__api_version__ and cls.__kind__:
            _RESOURCE_TYPES[(cls.__api_version__, cls.__kind__)] = cls

    @property
    def name(self) -> str | None:
        return self.metadata.name if self.metadata else None

    @property
    def namespace(self) -> str | None:
        return self.metadata.namespace if self.metadata else None

    def to_dict(self) -> dict[str, Any]:
        """Dump back to a plain mapping, omitting fields absent from the input.

        Keys come out in the order they were read, so a resource the
        function does not touch dumps to the same YAML it was parsed from.
        """
        data = self.model_dump(exclude_unset=True)
        if self._source is None:
            return data
        return _in_source_order(data, self._source)


class Pod(KubernetesObject):
    __api_version__ = "v1"
    __kind__ = "Pod"

    spec: PodSpec | None = None


class Deployment(KubernetesObject):
    __api_version__ = "apps/v1"
    __kind__ = "Deployment"

    spec: TemplatedSpec | None = None


class StatefulSet(KubernetesObject):
    __api_version__ = "apps/v1"
    __kind__ = "StatefulSet"

    spec: TemplatedSpec | None = None


class DaemonSet(KubernetesObject):
    __api_version__ = "apps/v1"
    __kind__ = "DaemonSet"

    spec: TemplatedSpec | None = None


class ReplicaSet(KubernetesObject):
    __api_version__ = "apps/v1"
    __kind__ = "ReplicaSet"

    spec: TemplatedSpec | None = None


class Job(KubernetesObject):
    __api_version__ = "batch/v1"
    __kind__ = "Job"

    spec: TemplatedSpec | None = None


class CronJob(KubernetesObject):
    __api_version__ = "batch/v1"
    __kind__ = "CronJob"

    spec: CronJobSpec | None = None


def resource_type_for(api_version: str | None, kind: str | None) -> type[KubernetesObject]:
    """Look up the typed record for an apiVersion/kind pair."""
    if api_version is None or kind is None:
        return KubernetesObject
    return _RESOURCE_TYPES.get((api_version, kind), KubernetesObject)


def parse_resource(data: Mapping[str, Any]) -> KubernetesObject:
    """Parse a resource mapping into its typed record.

    A known kind whose fields do not match the typed record falls back to a
    plain ``KubernetesObject``, which the dispatcher ignores.
    """
    model = resource_type_for(data.get("apiVersion"), data.get("kind"))
    try:
        resource = model.model_validate(data)
    except ValidationError as e:
        if model is KubernetesObject:
            raise
        logger.warning(
            "Leaving %s %r untouched: unexpected field types (%s)",
            data.get("kind"),
            (data.get("metadata") or {}).get("name"),
            e.error_count(),
        )
        resource = KubernetesObject.model_validate(data)
    resource._source = data
    return resource
