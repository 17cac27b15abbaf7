"""Bounded-concurrency fan-out of package installs.

Every package gets its own asyncio task the moment the batch starts; a
semaphore of ``min(max_concurrency, N)`` permits decides how many of them
actually run. Results are consumed in completion order.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from pathlib import Path

from xypcli.installer.backend import InstallerError, ResolvedBackend
from xypcli.installer.report import InstallationReport
from xypcli.installer.task import PackageInstallTask, PackageSpec, TaskResult

DEFAULT_MAX_CONCURRENCY = 4


class StrictModeAbort(InstallerError):
    """Raised on the first failed package of a strict batch.

    Attributes:
        result: The failed task result that triggered the abort.
        pending: Tasks still in flight. They are neither awaited nor
            cancelled; the caller decides what happens to them.
    """

    def __init__(self, result: TaskResult, pending: list[asyncio.Task] | None = None) -> None:
        self.result = result
        self.pending = pending or []
        super().__init__(f"Installation of '{result.package.label}' failed in strict mode")


class BatchScheduler:
    """Runs one install task per package under a permit pool.

    Args:
        task: Single-package installer shared by every package of a batch.
        lock: Serializes traditional-tool invocations. A fresh lock is
            created when none is given, so each scheduler is isolated.
        max_concurrency: Upper bound on simultaneously running installs.
    """

    def __init__(
        self,
        task: PackageInstallTask | None = None,
        lock: asyncio.Lock | None = None,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    ) -> None:
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self.task = task or PackageInstallTask()
        self.lock = lock or asyncio.Lock()
        self.max_concurrency = max_concurrency

    async def run(
        self,
        packages: Sequence[PackageSpec],
        backend: ResolvedBackend,
        cwd: str | Path = ".",
        strict: bool = False,
    ) -> InstallationReport:
        """Install every package and return the aggregated report.

        Raises:
            StrictModeAbort: In strict mode, as soon as any package fails.
        """
        total = len(packages)
        report = InstallationReport(total=total)
        if total == 0:
            return report

        permits = asyncio.Semaphore(min(self.max_concurrency, total))

        async def _install(index: int, spec: PackageSpec) -> TaskResult:
            async with permits:
                return await self.task.run(
                    spec, backend, cwd, self.lock, progress=f"[{index}/{total}]"
                )

        tasks = [
            asyncio.create_task(_install(i, spec), name=f"install:{spec.name}")
            for i, spec in enumerate(packages, start=1)
        ]

        for next_done in asyncio.as_completed(tasks):
            result = await next_done
            report.record(result)
            if strict and not result.success:
                pending = [t for t in tasks if not t.done()]
                raise StrictModeAbort(result, pending)

        return report
