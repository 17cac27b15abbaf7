"""xypcli dependency installer.

Installs a project's packages through bun or npm with bounded concurrency.

Key classes:
    DependencyInstaller - Resolves a backend and runs install batches
    BatchScheduler      - Permit-bounded fan-out, strict-mode abort
    PackageInstallTask  - One package, one subprocess, one TaskResult
    InstallationReport  - Succeeded/failed tally of a batch
"""

from .backend import (
    BackendKind,
    InstallerError,
    InstallMode,
    NoBackendError,
    ResolvedBackend,
    provision_primary_tool,
    resolve_backend,
)
from .manager import DependencyInstaller
from .report import InstallationReport, print_report, print_strict_abort
from .scheduler import BatchScheduler, StrictModeAbort
from .task import (
    SECONDARY_ONLY_PACKAGES,
    Outcome,
    PackageInstallTask,
    PackageSpec,
    TaskResult,
    extract_diagnostic,
    summarize_fast_output,
)

__all__ = [
    # Backend selection
    "BackendKind",
    "InstallMode",
    "ResolvedBackend",
    "resolve_backend",
    "provision_primary_tool",
    # Errors
    "InstallerError",
    "NoBackendError",
    "StrictModeAbort",
    # Tasks
    "PackageSpec",
    "PackageInstallTask",
    "TaskResult",
    "Outcome",
    "SECONDARY_ONLY_PACKAGES",
    "extract_diagnostic",
    "summarize_fast_output",
    # Scheduling and reporting
    "BatchScheduler",
    "InstallationReport",
    "print_report",
    "print_strict_abort",
    # Orchestration
    "DependencyInstaller",
]
