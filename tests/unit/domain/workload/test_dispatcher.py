"""Unit tests for WorkloadDispatcher across mixed resource collections."""

import copy

import pytest

from digestpin.domain.image.model.resolution import ResolutionStatus
from digestpin.domain.image.service.resolver import ImageResolver
from digestpin.domain.shared.error import ResolutionFailed
from digestpin.domain.workload.model.resource import parse_resource
from digestpin.domain.workload.service.dispatcher import WorkloadDispatcher


def _pod(name: str, *images: str) -> dict:
    return {
        "apiVersion": "v1",
        "kind": "Pod",
        "metadata": {"name": name},
        "spec": {"containers": [{"name": f"c{i}", "image": image} for i, image in enumerate(images)]},
    }


def _workload(kind: str, name: str, *images: str) -> dict:
    return {
        "apiVersion": "apps/v1",
        "kind": kind,
        "metadata": {"name": name, "namespace": "default"},
        "spec": {
            "template": {
                "spec": {"containers": [{"name": f"c{i}", "image": image} for i, image in enumerate(images)]}
            }
        },
    }


CONFIG_MAP = {
    "apiVersion": "v1",
    "kind": "ConfigMap",
    "metadata": {"name": "cm"},
    "data": {"image": "example.com/app:v1"},
}


def _make_dispatcher(fetcher, **kwargs) -> WorkloadDispatcher:
    return WorkloadDispatcher(resolver=ImageResolver(fetcher), **kwargs)


class TestWorkloadDispatcherPin:
    @pytest.mark.asyncio
    async def test_pins_pod_image(self, fake_fetcher):
        fake_fetcher.digests["example.com/app:v1"] = "sha256:abc123"
        resources = [parse_resource(_pod("app", "example.com/app:v1"))]

        summary = await _make_dispatcher(fake_fetcher).pin(resources)

        assert resources[0].to_dict()["spec"]["containers"][0]["image"] == "example.com/app@sha256:abc123"
        assert summary.rewritten == 1
        assert summary.total == 1

    @pytest.mark.asyncio
    async def test_mixed_collection_only_touches_workloads(self, fake_fetcher):
        fake_fetcher.digests.update(
            {
                "reg.io/pod:v1": "sha256:p",
                "reg.io/deploy:v1": "sha256:d",
                "reg.io/sts:v1": "sha256:s",
                "example.com/app:v1": "sha256:never",
            }
        )
        raw = [
            _pod("pod", "reg.io/pod:v1"),
            CONFIG_MAP,
            _workload("Deployment", "deploy", "reg.io/deploy:v1"),
            _workload("StatefulSet", "sts", "reg.io/sts:v1"),
        ]
        original_config_map = copy.deepcopy(CONFIG_MAP)
        resources = [parse_resource(r) for r in raw]

        summary = await _make_dispatcher(fake_fetcher).pin(resources)

        out = [r.to_dict() for r in resources]
        assert out[0]["spec"]["containers"][0]["image"] == "reg.io/pod@sha256:p"
        assert out[1] == original_config_map
        assert out[2]["spec"]["template"]["spec"]["containers"][0]["image"] == "reg.io/deploy@sha256:d"
        assert out[3]["spec"]["template"]["spec"]["containers"][0]["image"] == "reg.io/sts@sha256:s"
        assert [w.kind for w in summary.workloads] == ["Pod", "Deployment", "StatefulSet"]
        assert "example.com/app:v1" not in fake_fetcher.calls

    @pytest.mark.asyncio
    async def test_pinned_deployment_is_unchanged(self, fake_fetcher):
        raw = _workload("Deployment", "svc", "reg.io/ns/svc@sha256:deadbeef")
        resources = [parse_resource(raw)]

        summary = await _make_dispatcher(fake_fetcher).pin(resources)

        assert resources[0].to_dict() == raw
        assert summary.skipped == 1
        assert fake_fetcher.calls == []

    @pytest.mark.asyncio
    async def test_one_failure_does_not_block_siblings(self, fake_fetcher):
        fake_fetcher.digests.update(
            {
                "reg.io/a:v1": "sha256:a",
                "reg.io/b:v1": ResolutionFailed("Registry returned HTTP 500 for reg.io/b:v1"),
                "reg.io/c:v1": "sha256:c",
            }
        )
        resources = [parse_resource(_workload("StatefulSet", "db", "reg.io/a:v1", "reg.io/b:v1", "reg.io/c:v1"))]

        summary = await _make_dispatcher(fake_fetcher).pin(resources)

        images = [c["image"] for c in resources[0].to_dict()["spec"]["template"]["spec"]["containers"]]
        assert images == ["reg.io/a@sha256:a", "reg.io/b:v1", "reg.io/c@sha256:c"]
        assert summary.rewritten == 2
        assert summary.failed == 1
        [(workload, failed)] = summary.problems()
        assert workload.name == "db"
        assert workload.namespace == "default"
        assert failed.container == "c1"
        assert failed.field_path == "spec.template.spec.containers[1].image"

    @pytest.mark.asyncio
    async def test_workload_without_template_is_skipped(self, fake_fetcher):
        raw = {"apiVersion": "apps/v1", "kind": "Deployment", "metadata": {"name": "empty"}, "spec": {}}
        resources = [parse_resource(raw)]

        summary = await _make_dispatcher(fake_fetcher).pin(resources)

        assert summary.workloads == []
        assert resources[0].to_dict() == raw

    @pytest.mark.asyncio
    async def test_init_containers(self, fake_fetcher):
        fake_fetcher.digests.update({"reg.io/app:v1": "sha256:app", "reg.io/init:v1": "sha256:init"})
        raw = _pod("p", "reg.io/app:v1")
        raw["spec"]["initContainers"] = [{"name": "init", "image": "reg.io/init:v1"}]
        resources = [parse_resource(raw)]

        summary = await _make_dispatcher(fake_fetcher).pin(resources)

        spec = resources[0].to_dict()["spec"]
        assert spec["initContainers"][0]["image"] == "reg.io/init@sha256:init"
        assert [i.field_path for i in summary.workloads[0].images] == [
            "spec.containers[0].image",
            "spec.initContainers[0].image",
        ]

    @pytest.mark.asyncio
    async def test_init_containers_can_be_excluded(self, fake_fetcher):
        fake_fetcher.digests.update({"reg.io/app:v1": "sha256:app", "reg.io/init:v1": "sha256:init"})
        raw = _pod("p", "reg.io/app:v1")
        raw["spec"]["initContainers"] = [{"name": "init", "image": "reg.io/init:v1"}]
        resources = [parse_resource(raw)]

        await _make_dispatcher(fake_fetcher, include_init_containers=False).pin(resources)

        assert resources[0].to_dict()["spec"]["initContainers"][0]["image"] == "reg.io/init:v1"

    @pytest.mark.asyncio
    async def test_summary_counts(self, fake_fetcher):
        fake_fetcher.digests["reg.io/ok:v1"] = "sha256:ok"
        resources = [
            parse_resource(_pod("a", "reg.io/ok:v1", "reg.io/pinned@sha256:1")),
            parse_resource(_workload("Deployment", "b", ":v1", "reg.io/missing:v1")),
        ]

        summary = await _make_dispatcher(fake_fetcher).pin(resources)

        assert (summary.rewritten, summary.skipped, summary.unresolved, summary.failed) == (1, 1, 1, 1)
        assert [i.status for _, i in summary.problems()] == [
            ResolutionStatus.UNRESOLVED,
            ResolutionStatus.FAILED,
        ]

    @pytest.mark.asyncio
    async def test_empty_collection(self, fake_fetcher):
        summary = await _make_dispatcher(fake_fetcher).pin([])
        assert summary.total == 0
