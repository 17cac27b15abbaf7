"""Single-package installation.

Runs one ``bun add`` / ``npm install`` for one package, classifies the exit
status and turns the captured stderr into a short diagnostic. Failures are
returned as data; nothing raised by the child process escapes
:meth:`PackageInstallTask.run`.
"""

from __future__ import annotations

import asyncio
import re
import time
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from rich.markup import escape

from xypcli.installer.backend import BackendKind, ResolvedBackend
from xypcli.utils import console, format_duration, run_command

# npm runs these packages' post-install scripts; bun skips them.
SECONDARY_ONLY_PACKAGES: frozenset[str] = frozenset({"nquickdev"})

# Case-sensitive substrings marking a stderr line as the failure cause.
ERROR_MARKERS: tuple[str, ...] = ("ERR!", "error", "404", "ENOENT", "ENOTEMPTY", "code")

MAX_DIAGNOSTIC_LINES = 5
FALLBACK_DIAGNOSTIC_LINES = 3

_BUN_BANNER = re.compile(r"^bun add v\S+\s+\(([^)]+)\)")

Runner = Callable[..., Awaitable[tuple[int, str, str]]]


@dataclass(frozen=True)
class PackageSpec:
    """A package to install and the dependency group it belongs to."""

    name: str
    is_dev: bool = False

    @property
    def label(self) -> str:
        return f"{self.name} (dev)" if self.is_dev else self.name


class Outcome(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass
class TaskResult:
    """Outcome of installing one package."""

    package: PackageSpec
    outcome: Outcome
    diagnostic: list[str] = field(default_factory=list)
    details: list[str] = field(default_factory=list)
    command: list[str] = field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def success(self) -> bool:
        return self.outcome is Outcome.SUCCESS


def extract_diagnostic(stderr: str, max_lines: int = MAX_DIAGNOSTIC_LINES) -> list[str]:
    """Pick the stderr lines that explain why an install failed.

    Lines carrying one of :data:`ERROR_MARKERS` are kept unless they are
    warnings (any casing of ``warn``). When nothing matches, the first three
    non-empty lines are used instead. The result never exceeds *max_lines*.

    Example::

        >>> extract_diagnostic("npm WARN deprecated foo\\nnpm ERR! code ENOENT")
        ['npm ERR! code ENOENT']
    """
    lines = [line.strip() for line in stderr.splitlines()]
    lines = [line for line in lines if line]

    matched = [
        line
        for line in lines
        if any(marker in line for marker in ERROR_MARKERS) and "warn" not in line.lower()
    ]
    if not matched:
        matched = lines[:FALLBACK_DIAGNOSTIC_LINES]
    return matched[:max_lines]


def summarize_fast_output(stdout: str, stderr: str = "") -> list[str]:
    """Extract the build hash and timing lines from ``bun add`` output."""
    summary: list[str] = []
    for line in f"{stdout}\n{stderr}".splitlines():
        line = line.strip()
        if not line:
            continue
        banner = _BUN_BANNER.match(line)
        if banner:
            summary.append(f"[{banner.group(1)}]")
        elif "packages installed" in line or "done" in line:
            summary.append(line)
    return summary


class PackageInstallTask:
    """Installs single packages through a resolved backend.

    Args:
        runner: Coroutine running a command, ``run_command`` by default.
            Called as ``runner(argv, cwd=..., capture=...)``.
        secondary_only: Package names always installed with the traditional
            tool, whatever backend the batch uses.
        max_diagnostic_lines: Upper bound on diagnostic lines per failure.
    """

    def __init__(
        self,
        runner: Runner = run_command,
        secondary_only: Iterable[str] = SECONDARY_ONLY_PACKAGES,
        max_diagnostic_lines: int = MAX_DIAGNOSTIC_LINES,
    ) -> None:
        self.runner = runner
        self.secondary_only = frozenset(secondary_only) | SECONDARY_ONLY_PACKAGES
        self.max_diagnostic_lines = max_diagnostic_lines

    def effective_kind(self, spec: PackageSpec, backend: ResolvedBackend) -> BackendKind:
        """Backend actually used for *spec*."""
        if spec.name in self.secondary_only:
            return BackendKind.SECONDARY
        return backend.kind

    async def run(
        self,
        spec: PackageSpec,
        backend: ResolvedBackend,
        cwd: str | Path,
        lock: asyncio.Lock,
        capture: bool = True,
        progress: str = "",
    ) -> TaskResult:
        """Install *spec* and report the outcome.

        Args:
            spec: The package to install.
            backend: Backend resolved for the batch.
            cwd: Project directory the package manager runs in.
            lock: Serializes traditional-tool invocations within the batch.
            capture: Capture output (batch mode) or inherit the terminal.
            progress: ``[i/N]`` marker shown next to the package name.
        """
        kind = self.effective_kind(spec, backend)
        cmd = backend.command(spec.name, spec.is_dev, kind=kind)
        prefix = f"{progress} " if progress else ""
        console.print(
            f"   [dim]├─ {escape(prefix)}[/dim][cyan]⚙[/cyan] Installing {escape(spec.label)}..."
        )

        start = time.monotonic()
        try:
            if kind is BackendKind.SECONDARY:
                async with lock:
                    returncode, stdout, stderr = await self.runner(cmd, cwd=cwd, capture=capture)
            else:
                returncode, stdout, stderr = await self.runner(cmd, cwd=cwd, capture=capture)
        except OSError as exc:
            returncode, stdout, stderr = -1, "", f"error: cannot run {cmd[0]}: {exc}"
        except Exception as exc:  # runner faults are reported like exit codes
            returncode, stdout, stderr = -1, "", f"error: {type(exc).__name__}: {exc}"
        duration = time.monotonic() - start

        if returncode != 0:
            result = TaskResult(
                package=spec,
                outcome=Outcome.FAILURE,
                diagnostic=extract_diagnostic(stderr, self.max_diagnostic_lines),
                command=cmd,
                duration_seconds=duration,
            )
            console.print(
                f"   [dim]├─ {escape(prefix)}[/dim][red]✗[/red] {escape(spec.label)} (failed)"
            )
            return result

        details = summarize_fast_output(stdout, stderr) if kind is BackendKind.PRIMARY else []
        console.print(
            f"   [dim]├─ {escape(prefix)}[/dim][green]✓[/green] {escape(spec.label)} "
            f"[dim]({format_duration(duration)})[/dim]"
        )
        for line in details:
            console.print(f"       [dim]{escape(line)}[/dim]")
        return TaskResult(
            package=spec,
            outcome=Outcome.SUCCESS,
            details=details,
            command=cmd,
            duration_seconds=duration,
        )
