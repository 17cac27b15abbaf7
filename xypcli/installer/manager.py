"""Batch-level orchestration of dependency installs.

``DependencyInstaller`` owns the mutual-exclusion lock for the traditional
package manager, resolves a backend once per batch and hands every package to
a :class:`BatchScheduler`.
"""

from __future__ import annotations

import asyncio
import shutil
from collections.abc import Sequence
from pathlib import Path

from rich.markup import escape

from xypcli.config import InstallerConfig
from xypcli.installer.backend import (
    InstallMode,
    NoBackendError,
    Provisioner,
    ResolvedBackend,
    Which,
    resolve_backend,
)
from xypcli.installer.report import InstallationReport, print_report, print_strict_abort
from xypcli.installer.scheduler import BatchScheduler, StrictModeAbort
from xypcli.installer.task import PackageInstallTask, PackageSpec, Runner
from xypcli.utils import console, print_error, run_command


class DependencyInstaller:
    """Installs packages into a project directory.

    Attributes:
        config: Installer tuning knobs.
        task: Single-package installer shared by all batches.
        lock: Held around every traditional-tool invocation.
    """

    def __init__(
        self,
        config: InstallerConfig | None = None,
        runner: Runner = run_command,
        which: Which = shutil.which,
        provision: Provisioner | None = None,
    ) -> None:
        self.config = config or InstallerConfig()
        self.task = PackageInstallTask(
            runner=runner,
            secondary_only=self.config.secondary_only_packages,
            max_diagnostic_lines=self.config.max_diagnostic_lines,
        )
        self.lock = asyncio.Lock()
        self._which = which
        self._provision = provision

    async def resolve(self, mode: InstallMode) -> ResolvedBackend:
        """Pick the package manager for the next batch.

        Raises:
            NoBackendError: If no usable package manager exists.
        """
        return await resolve_backend(
            mode,
            primary_tool=self.config.primary_tool,
            secondary_tool=self.config.secondary_tool,
            which=self._which,
            provision=self._provision,
        )

    async def run_batch(
        self,
        packages: Sequence[PackageSpec],
        backend: ResolvedBackend,
        strict: bool = False,
        working_dir: str | Path = ".",
    ) -> InstallationReport:
        """Install *packages* concurrently and print the summary.

        In strict mode the first failure is printed and the process exits
        with status 1 through ``SystemExit``; tasks still in flight are left
        running.
        """
        scheduler = BatchScheduler(
            task=self.task, lock=self.lock, max_concurrency=self.config.max_concurrency
        )
        if packages:
            console.print(
                f"  [cyan]⚡ Parallel installation enabled[/cyan] [dim]({backend.label})[/dim]"
            )
        try:
            report = await scheduler.run(packages, backend, cwd=working_dir, strict=strict)
        except StrictModeAbort as exc:
            print_strict_abort(exc.result)
            raise SystemExit(1) from exc

        print_report(report)
        return report

    async def install(
        self,
        packages: Sequence[PackageSpec],
        mode: InstallMode = InstallMode.AUTO,
        strict: bool = False,
        working_dir: str | Path = ".",
    ) -> InstallationReport:
        """Resolve a backend, then install *packages* as one batch.

        A missing package manager is reported once and ends the process with
        status 1 before any package is attempted.
        """
        try:
            backend = await self.resolve(mode)
        except NoBackendError as exc:
            print_error(f"✗ {exc}")
            raise SystemExit(1) from exc
        return await self.run_batch(packages, backend, strict=strict, working_dir=working_dir)

    async def install_one(
        self,
        name: str,
        mode: InstallMode = InstallMode.AUTO,
        working_dir: str | Path = ".",
        dev: bool = False,
    ) -> InstallationReport:
        """Install a single package with the package manager's live output."""
        try:
            backend = await self.resolve(mode)
        except NoBackendError as exc:
            print_error(f"✗ {exc}")
            raise SystemExit(1) from exc

        spec = PackageSpec(name, is_dev=dev)
        result = await self.task.run(
            spec, backend, working_dir, self.lock, capture=False, progress="[1/1]"
        )
        report = InstallationReport(total=1)
        report.record(result)
        if result.success:
            console.print(f"[bold green]✨ {escape(name)} installed successfully![/bold green]")
        else:
            print_report(report)
        return report
