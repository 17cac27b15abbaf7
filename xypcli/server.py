"""``xypcli start`` -- run the project's development server."""

from __future__ import annotations

from pathlib import Path

from xypcli.installer.task import Runner
from xypcli.utils import console, print_error, run_command

REQUIRED_FILES = ("package.json", "src/server.ts")


async def start_server(cwd: str | Path = ".", runner: Runner = run_command) -> int:
    """Install dependencies if needed, then run ``npm run dev``.

    Both commands inherit the terminal.

    Returns:
        Exit status of the last command run; ``1`` when *cwd* is not a
        XyPriss project.
    """
    project_dir = Path(cwd)
    for required in REQUIRED_FILES:
        if not (project_dir / required).exists():
            print_error(f"❌ No {required} found. Are you in a XyPriss project directory?")
            console.print("   Run [cyan]'xypcli init'[/cyan] to create a new project.")
            return 1

    if not (project_dir / "node_modules").exists():
        console.print("[blue]📦 Installing dependencies...[/blue]")
        try:
            returncode, _, _ = await runner(["npm", "install"], cwd=project_dir, capture=False)
        except OSError as exc:
            print_error(f"❌ Failed to install dependencies: {exc}")
            return 1
        if returncode != 0:
            print_error(f"❌ Failed to install dependencies (exit code {returncode})")
            return returncode

    console.print("[yellow]🔥 Starting development server...[/yellow]")
    console.print("[dim]Press Ctrl+C to stop the server[/dim]\n")
    try:
        returncode, _, _ = await runner(["npm", "run", "dev"], cwd=project_dir, capture=False)
    except OSError as exc:
        print_error(f"❌ Failed to start server: {exc}")
        return 1
    if returncode != 0:
        print_error(f"❌ Server exited with code {returncode}")
    return returncode
