"""Console output for the CLI.

Everything goes to stderr: stdout carries the function's ResourceList.
"""

from rich.console import Console as RichConsole
from rich.table import Table

from digestpin.domain.image.model.resolution import ImageResolution, ResolutionStatus, RunSummary

_STATUS_STYLES = {
    ResolutionStatus.REWRITTEN: "green",
    ResolutionStatus.SKIPPED: "dim",
    ResolutionStatus.UNRESOLVED: "yellow",
    ResolutionStatus.FAILED: "red",
}


class Console:
    """CLI output manager wrapping rich."""

    def __init__(self, *, force_terminal: bool | None = None) -> None:
        self._console = RichConsole(force_terminal=force_terminal, stderr=True)

    def error(self, message: str, *, hint: str | None = None) -> None:
        self._console.print(f"[red]✗[/red] {message}")
        if hint:
            self._console.print(f"  [dim]{hint}[/dim]")

    def resolution(self, image: ImageResolution) -> None:
        style = _STATUS_STYLES[image.status]
        detail = image.resolved or image.reason or ""
        self._console.print(f"[{style}]{image.status.value:>10}[/{style}]  {image.original}  {detail}")

    def run_summary(self, summary: RunSummary) -> None:
        """Print one row per image, then the totals."""
        table = Table(title="Image digests")
        table.add_column("Resource")
        table.add_column("Container")
        table.add_column("Status")
        table.add_column("Image", overflow="fold")

        for workload in summary.workloads:
            resource = f"{workload.kind}/{workload.name or '?'}"
            for image in workload.images:
                style = _STATUS_STYLES[image.status]
                table.add_row(
                    resource,
                    image.container or "",
                    f"[{style}]{image.status.value}[/{style}]",
                    image.resolved or image.original or "",
                )

        self._console.print(table)
        self._console.print(
            f"{summary.rewritten} rewritten, {summary.skipped} skipped, "
            f"{summary.unresolved} unresolved, {summary.failed} failed"
        )


def get_console() -> Console:
    return Console()
