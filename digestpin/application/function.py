"""KRM function entrypoint.

Reads a ResourceList (or a plain multi-document stream of resources) as
YAML, pins every container image it can, and writes the result back out.
A ResourceList comes back with a ``results`` entry for every image that
could not be pinned plus one summary entry; a plain stream comes back as
a plain stream.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from dataclasses import dataclass
from typing import Any, TextIO

import httpx
import logfire
import yaml
from pydantic import ValidationError

from digestpin.application.di import create_container
from digestpin.config import Config
from digestpin.domain.image.model.resolution import ResolutionStatus, RunSummary
from digestpin.domain.shared.error import DigestPinError, InvalidResourceList
from digestpin.domain.workload.model.resource_list import (
    RESOURCE_LIST_KIND,
    FieldRef,
    FunctionResult,
    ResourceList,
    ResourceRef,
)
from digestpin.domain.workload.service.dispatcher import WorkloadDispatcher

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FunctionOutput:
    """Rendered output of one function run."""

    output: str
    summary: RunSummary
    exit_code: int


def _load_documents(text: str) -> list[Any]:
    try:
        return [doc for doc in yaml.safe_load_all(text) if doc is not None]
    except yaml.YAMLError as e:
        raise InvalidResourceList(f"Input is not valid YAML: {e}") from e


def _is_resource_list(documents: list[Any]) -> bool:
    return (
        len(documents) == 1
        and isinstance(documents[0], dict)
        and documents[0].get("kind") == RESOURCE_LIST_KIND
    )


def _to_resource_list(documents: list[Any]) -> ResourceList:
    data = documents[0] if _is_resource_list(documents) else {"items": documents}
    try:
        return ResourceList.model_validate(data)
    except ValidationError as e:
        raise InvalidResourceList(f"Invalid ResourceList: {e}") from e


def read_resource_list(text: str) -> ResourceList:
    """Parse function input into a ResourceList.

    Raises:
        InvalidResourceList: If the input is not YAML, or holds something
            other than resource objects.
    """
    return _to_resource_list(_load_documents(text))


def write_resource_list(resource_list: ResourceList) -> str:
    return yaml.safe_dump(resource_list.to_dict(), sort_keys=False)


def write_resources(resource_list: ResourceList) -> str:
    """Render only the items, as a multi-document YAML stream."""
    return yaml.safe_dump_all([item.to_dict() for item in resource_list.items], sort_keys=False)


def build_results(summary: RunSummary, *, fail_on_error: bool = False) -> list[FunctionResult]:
    """Turn a run summary into ResourceList results."""
    severity = "error" if fail_on_error else "warning"
    results: list[FunctionResult] = []

    for workload, image in summary.problems():
        if image.status == ResolutionStatus.UNRESOLVED:
            message = f"Image {image.original!r} cannot be resolved: {image.reason}"
        else:
            message = f"Failed to pin image {image.original!r}: {image.reason}"
        results.append(
            FunctionResult(
                message=message,
                severity=severity,
                resourceRef=ResourceRef(
                    apiVersion=workload.api_version,
                    kind=workload.kind,
                    name=workload.name,
                    namespace=workload.namespace,
                ),
                field=FieldRef(path=image.field_path or "", currentValue=image.original),
                tags={"status": image.status.value, "container": image.container or ""},
            )
        )

    results.append(
        FunctionResult(
            message=(
                f"Pinned {summary.rewritten} of {summary.total} images "
                f"({summary.skipped} already pinned, {summary.unresolved} unresolved, "
                f"{summary.failed} failed)"
            ),
            severity="info",
        )
    )
    return results


async def process_resource_list(
    resource_list: ResourceList,
    dispatcher: WorkloadDispatcher,
    *,
    fail_on_error: bool = False,
) -> RunSummary:
    """Pin images in ``resource_list.items`` in place and append results."""
    summary = await dispatcher.pin(resource_list.items)
    resource_list.results = [
        *(resource_list.results or []),
        *build_results(summary, fail_on_error=fail_on_error),
    ]
    return summary


async def pin_resource_list(
    resource_list: ResourceList,
    config: Config,
    transport: httpx.AsyncBaseTransport | None = None,
) -> RunSummary:
    container = create_container(config, transport=transport)
    try:
        async with container() as scope:
            dispatcher = await scope.get(WorkloadDispatcher)
            return await process_resource_list(
                resource_list,
                dispatcher,
                fail_on_error=config.resolver.fail_on_error,
            )
    finally:
        await container.close()


def run_function(
    text: str,
    config: Config,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FunctionOutput:
    """Run the function on YAML input and render its output."""
    documents = _load_documents(text)
    as_resource_list = _is_resource_list(documents)
    resource_list = _to_resource_list(documents)
    config = config.with_function_config(resource_list.function_config_data())

    with logfire.span("digestpin run", items=len(resource_list.items)):
        summary = asyncio.run(pin_resource_list(resource_list, config, transport=transport))

    if as_resource_list:
        output = write_resource_list(resource_list)
    else:
        for result in resource_list.results or []:
            if result.severity != "info":
                logger.warning("%s", result.message)
        output = write_resources(resource_list)

    exit_code = 1 if config.resolver.fail_on_error and summary.problems() else 0
    return FunctionOutput(output=output, summary=summary, exit_code=exit_code)


def run_function_entrypoint(
    *,
    config: Config | None = None,
    stdin: TextIO | None = None,
    stdout: TextIO | None = None,
    stderr: TextIO | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> int:
    """Run the function against stdin/stdout.

    Returns 0 on success, 1 on invalid input or configuration, and 1 when
    ``fail_on_error`` is set and any image could not be pinned.
    """
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout
    stderr = stderr or sys.stderr

    try:
        result = run_function(stdin.read(), config or Config(), transport=transport)
    except DigestPinError as e:
        print(f"Error: {e.message}", file=stderr)
        return 1

    stdout.write(result.output)
    return result.exit_code
