"""KRM function wire format: ResourceList and function results."""

from collections.abc import Mapping
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from digestpin.domain.workload.model.resource import KubernetesObject, parse_resource

RESOURCE_LIST_API_VERSION = "config.kubernetes.io/v1"
RESOURCE_LIST_KIND = "ResourceList"

Severity = Literal["error", "warning", "info"]


class ResourceRef(BaseModel):
    apiVersion: str | None = None
    kind: str | None = None
    name: str | None = None
    namespace: str | None = None


class FieldRef(BaseModel):
    path: str
    currentValue: Any = None
    proposedValue: Any = None


class FunctionResult(BaseModel):
    """A single entry of ``ResourceList.results``."""

    message: str
    severity: Severity = "info"
    resourceRef: ResourceRef | None = None
    field: FieldRef | None = None
    tags: dict[str, str] | None = None


class ResourceList(BaseModel):
    model_config = ConfigDict(extra="allow")

    apiVersion: str = RESOURCE_LIST_API_VERSION
    kind: str = RESOURCE_LIST_KIND
    items: list[KubernetesObject] = Field(default_factory=list)
    functionConfig: dict[str, Any] | None = None
    results: list[FunctionResult] | None = None

    @field_validator("items", mode="before")
    @classmethod
    def _parse_items(cls, value: Any) -> Any:
        if value is None:
            return []
        if not isinstance(value, list):
            raise ValueError("items must be a list of resources")
        parsed = []
        for index, item in enumerate(value):
            if isinstance(item, KubernetesObject):
                parsed.append(item)
            elif isinstance(item, Mapping):
                parsed.append(parse_resource(item))
            else:
                raise ValueError(f"items[{index}] is not a resource object")
        return parsed

    def function_config_data(self) -> dict[str, Any]:
        """``data`` of a ConfigMap functionConfig, or the mapping itself."""
        if not self.functionConfig:
            return {}
        data = self.functionConfig.get("data")
        if isinstance(data, Mapping):
            return dict(data)
        return {k: v for k, v in self.functionConfig.items() if k not in ("apiVersion", "kind", "metadata")}

    def to_dict(self) -> dict[str, Any]:
        # Items are dumped one by one so each keeps its own typed fields.
        out: dict[str, Any] = {
            "apiVersion": self.apiVersion,
            "kind": self.kind,
            "items": [item.to_dict() for item in self.items],
        }
        if self.functionConfig is not None:
            out["functionConfig"] = self.functionConfig
        if self.results is not None:
            out["results"] = [r.model_dump(exclude_none=True) for r in self.results]
        if self.model_extra:
            out.update(self.model_extra)
        return out
