"""Main CLI application using Cyclopts.

The default command is the KRM function itself: ResourceList on stdin,
ResourceList on stdout.
"""

import asyncio
import sys
from pathlib import Path

import cyclopts

from digestpin.application.di import create_container
from digestpin.application.function import run_function
from digestpin.cli.console import get_console
from digestpin.config import Config, configure_logging
from digestpin.domain.image.model.resolution import ImageResolution, ResolutionStatus
from digestpin.domain.image.service.resolver import ImageResolver
from digestpin.domain.shared.error import DigestPinError

app = cyclopts.App(
    name="digestpin",
    help="Pin container images in Kubernetes manifests to registry digests.",
)


def load_config(
    config_file: Path | None = None,
    *,
    max_concurrency: int | None = None,
    fail_on_error: bool | None = None,
) -> Config:
    """Build Config from env/YAML, then apply command-line overrides."""
    config = Config.load(config_file)

    overrides = {}
    if max_concurrency is not None:
        overrides["max_concurrency"] = max_concurrency
    if fail_on_error is not None:
        overrides["fail_on_error"] = fail_on_error
    if overrides:
        resolver = config.resolver.model_copy(update=overrides)
        config = config.model_copy(update={"resolver": resolver})
    return config


@app.default
def run(
    *,
    config: Path | None = None,
    max_concurrency: int | None = None,
    fail_on_error: bool | None = None,
    summary: bool = False,
) -> None:
    """Pin every container image of the ResourceList read from stdin.

    Args:
        config: YAML config file (same as DIGESTPIN_CONFIG_FILE).
        max_concurrency: Maximum simultaneous registry lookups.
        fail_on_error: Exit non-zero when any image cannot be pinned.
        summary: Print a per-image table to stderr.
    """
    console = get_console()
    try:
        settings = load_config(config, max_concurrency=max_concurrency, fail_on_error=fail_on_error)
        configure_logging(settings.logging)
        result = run_function(sys.stdin.read(), settings)
    except DigestPinError as e:
        console.error(e.message)
        sys.exit(1)

    sys.stdout.write(result.output)
    if summary:
        console.run_summary(result.summary)
    if result.exit_code:
        sys.exit(result.exit_code)


async def _resolve_images(images: list[str], config: Config) -> list[ImageResolution]:
    container = create_container(config)
    try:
        async with container() as scope:
            resolver = await scope.get(ImageResolver)
            async with asyncio.TaskGroup() as tg:
                tasks = [tg.create_task(resolver.resolve(image)) for image in images]
            return [task.result() for task in tasks]
    finally:
        await container.close()


@app.command
def resolve(*images: str, config: Path | None = None) -> None:
    """Resolve image references and print their digest-pinned form.

    Args:
        images: Image references, e.g. registry.example.com/team/app:v1
        config: YAML config file (same as DIGESTPIN_CONFIG_FILE).
    """
    console = get_console()
    if not images:
        console.error("No images given", hint="digestpin resolve registry.example.com/app:v1")
        sys.exit(1)

    try:
        settings = load_config(config)
        configure_logging(settings.logging)
        results = asyncio.run(_resolve_images(list(images), settings))
    except DigestPinError as e:
        console.error(e.message)
        sys.exit(1)

    failed = False
    for result in results:
        if result.status in (ResolutionStatus.REWRITTEN, ResolutionStatus.SKIPPED):
            print(result.resolved or result.original)
        else:
            console.resolution(result)
            failed = True
    if failed:
        sys.exit(1)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
