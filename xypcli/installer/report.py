"""Batch outcome aggregation and the tree-style summary."""

from __future__ import annotations

from dataclasses import dataclass, field

from rich.markup import escape
from rich.tree import Tree

from xypcli.installer.task import PackageSpec, TaskResult
from xypcli.utils import console


@dataclass
class InstallationReport:
    """Per-batch tally of install outcomes.

    ``failed`` keeps the order in which failures were observed, which is
    completion order rather than input order.
    """

    total: int
    failed: list[PackageSpec] = field(default_factory=list)
    results: list[TaskResult] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return self.total - len(self.failed)

    @property
    def all_succeeded(self) -> bool:
        return not self.failed

    @property
    def complete(self) -> bool:
        return len(self.results) == self.total

    def record(self, result: TaskResult) -> None:
        """Add one task result. Each result must be recorded exactly once."""
        self.results.append(result)
        if not result.success:
            self.failed.append(result.package)

    def failures(self) -> list[TaskResult]:
        """Failed results in observation order."""
        return [r for r in self.results if not r.success]


def _add_failure(tree: Tree, result: TaskResult) -> None:
    branch = tree.add(f"[red]✗[/red] {escape(result.package.label)}")
    for line in result.diagnostic:
        branch.add(f"[yellow]→ {escape(line)}[/yellow]")


def print_report(report: InstallationReport, noun: str = "packages") -> None:
    """Print the final summary of a batch."""
    console.print()
    if report.all_succeeded:
        tree = Tree(f"[bold green]✨ All {noun} installed successfully![/bold green]")
        tree.add(f"[dim]{report.succeeded}/{report.total} {noun}[/dim]")
    else:
        tree = Tree("[bold yellow]⚠ Installation completed with warnings[/bold yellow]")
        tree.add(f"[dim]Succeeded: {report.succeeded}/{report.total} {noun}[/dim]")
        failed = tree.add(f"[dim]Failed: {len(report.failed)}/{report.total} {noun}[/dim]")
        for result in report.failures():
            _add_failure(failed, result)
    console.print(tree)


def print_strict_abort(result: TaskResult) -> None:
    """Print the first failure of a strict batch."""
    console.print()
    tree = Tree("[bold red]✗ Installation failed in strict mode[/bold red]")
    _add_failure(tree.add("[dim]Failed package:[/dim]"), result)
    console.print(tree)
