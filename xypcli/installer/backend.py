"""Package-manager backend selection.

Decides once per batch which executable installs packages: the fast tool
(bun) or the traditional one (npm). The fallback chain is

    preferred tool -> alternate tool              (forced modes)
    bun -> provision bun via npm -> npm           (auto mode)

and ends in :class:`NoBackendError` when nothing usable is on ``PATH``.
"""

from __future__ import annotations

import shutil
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum

from xypcli.utils import console, run_command


class InstallerError(Exception):
    """Base class for installer failures that abort a whole batch."""


class NoBackendError(InstallerError):
    """Raised when no package manager can be used for the batch."""

    def __init__(self, message: str, mode: "InstallMode | None" = None) -> None:
        self.mode = mode
        super().__init__(message)


class InstallMode(str, Enum):
    """Caller preference for the package manager."""

    AUTO = "auto"
    FORCE_PRIMARY = "b"
    FORCE_SECONDARY = "n"

    @classmethod
    def from_flag(cls, value: str | None) -> "InstallMode":
        """Map a ``--mode`` value to a mode; unknown values mean auto."""
        normalized = (value or "").strip().lower()
        if normalized == cls.FORCE_PRIMARY.value:
            return cls.FORCE_PRIMARY
        if normalized == cls.FORCE_SECONDARY.value:
            return cls.FORCE_SECONDARY
        return cls.AUTO


class BackendKind(str, Enum):
    """Which package manager a command runs through."""

    PRIMARY = "primary"
    SECONDARY = "secondary"


@dataclass(frozen=True)
class ResolvedBackend:
    """The package manager selected for one installation batch."""

    kind: BackendKind
    primary_tool: str = "bun"
    secondary_tool: str = "npm"

    @property
    def label(self) -> str:
        return self.primary_tool if self.kind is BackendKind.PRIMARY else self.secondary_tool

    def command(
        self, package: str, dev: bool = False, kind: BackendKind | None = None
    ) -> list[str]:
        """Build the argv installing *package*.

        Args:
            package: Package name as given by the user or the manifest.
            dev: Install into the development dependency group.
            kind: Override the batch backend for this one command.
        """
        kind = kind or self.kind
        if kind is BackendKind.PRIMARY:
            return [self.primary_tool, "add", *(["-d"] if dev else []), package]
        return [self.secondary_tool, "install", *(["--save-dev"] if dev else []), package]


Which = Callable[[str], "str | None"]
Provisioner = Callable[[], Awaitable[bool]]


async def provision_primary_tool(
    primary_tool: str = "bun", secondary_tool: str = "npm"
) -> bool:
    """Try to install the fast tool globally through the traditional one.

    Output is discarded. Any failure, including the traditional tool itself
    being missing, is reported as ``False``.
    """
    try:
        returncode, _, _ = await run_command(
            [secondary_tool, "install", "-g", primary_tool]
        )
    except OSError:
        return False
    return returncode == 0


async def resolve_backend(
    mode: InstallMode,
    *,
    primary_tool: str = "bun",
    secondary_tool: str = "npm",
    which: Which = shutil.which,
    provision: Provisioner | None = None,
) -> ResolvedBackend:
    """Resolve the backend for a batch.

    Args:
        mode: Caller preference.
        primary_tool: Fast package manager executable name.
        secondary_tool: Traditional package manager executable name.
        which: ``PATH`` lookup, ``shutil.which`` by default.
        provision: Coroutine factory attempting to install the fast tool.
            Defaults to :func:`provision_primary_tool`.

    Returns:
        The selected :class:`ResolvedBackend`.

    Raises:
        NoBackendError: If neither the requested nor the fallback tool exists.
    """
    primary = ResolvedBackend(BackendKind.PRIMARY, primary_tool, secondary_tool)
    secondary = ResolvedBackend(BackendKind.SECONDARY, primary_tool, secondary_tool)

    def _secondary_or_fail() -> ResolvedBackend:
        if which(secondary_tool) is None:
            console.print(f"  [red]✗ {secondary_tool} is not installed[/red]")
            raise NoBackendError(
                f"No package manager available: '{secondary_tool}' not found in PATH",
                mode=mode,
            )
        return secondary

    if mode is InstallMode.FORCE_SECONDARY:
        console.print(f"  [cyan]→ Using {secondary_tool} (forced)[/cyan]")
        return _secondary_or_fail()

    if which(primary_tool) is not None:
        suffix = "(forced)" if mode is InstallMode.FORCE_PRIMARY else "for faster installation"
        console.print(f"  [cyan]⚡ Using {primary_tool} {suffix}[/cyan]")
        return primary

    if mode is InstallMode.FORCE_PRIMARY:
        console.print(
            f"  [red]✗ {primary_tool} not found, falling back to {secondary_tool}[/red]"
        )
        return _secondary_or_fail()

    console.print(f"  [yellow]→ {primary_tool} not found, attempting to install...[/yellow]")
    attempt = provision() if provision else provision_primary_tool(primary_tool, secondary_tool)
    if await attempt:
        console.print(f"  [green]✓ {primary_tool} installed successfully[/green]")
        return primary

    console.print(f"  [yellow]→ Falling back to {secondary_tool}[/yellow]")
    return _secondary_or_fail()
