"""xypcli command-line entry point.

Usage::

    xypcli init --name my-app --port 8080
    xypcli install xypriss cors --mode b
    xypcli start
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from xypcli import __version__
from xypcli.config import Config
from xypcli.installer import DependencyInstaller, InstallMode, PackageSpec
from xypcli.scaffolder import InitOptions, ProjectError, ProjectInitializer, TemplateError
from xypcli.server import start_server
from xypcli.utils import console, print_error

LOGO = r"""[cyan]
 __  __      ____       _
 \ \/ /_   _|  _ \ _ __(_)___ ___
  \  /| | | | |_) | '__| / __/ __|
  /  \| |_| |  __/| |  | \__ \__ \
 /_/\_\\__, |_|   |_|  |_|___/___/
       |___/[/cyan]
[blue]      ⚡ High-Performance Node.js Framework ⚡[/blue]
"""

EPILOG = (
    "Examples:\n"
    "  xypcli init                              # Interactive mode\n"
    "  xypcli init --name my-app --port 8080    # Quick init with options\n"
    "  xypcli init --name my-app --mode n       # Force npm installation\n"
    "  xypcli start                             # Start development server\n"
    "  xypcli install xypriss cors              # Install multiple packages\n"
    "  xypcli install xypriss --mode b          # Install with bun\n"
    "\nFor more information, visit: https://github.com/Nehonix-Team/XyPriss"
)

MODE_HELP = "Installation mode: 'b' for bun, 'n' for npm (default: auto)"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="xypcli",
        description="XyPriss CLI -- create and manage XyPriss projects",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=EPILOG,
    )
    parser.add_argument(
        "-v", "--version", action="version", version=f"XyPCLI v{__version__}"
    )
    commands = parser.add_subparsers(dest="command", metavar="<command>")

    init = commands.add_parser(
        "init", help="Initialize a new XyPriss project with all necessary configuration"
    )
    init.add_argument("--name", default="", help="Project name (default: interactive prompt)")
    init.add_argument("--desc", "--description", dest="description", default="",
                      help="Project description")
    init.add_argument("--lang", "--language", dest="language", default="",
                      help="Programming language: js or ts (default: ts)")
    init.add_argument("--port", default="", help="Server port (default: 3000)")
    init.add_argument("--version", dest="app_version", default="",
                      help="Application version (default: 1.0.0)")
    init.add_argument("--alias", default="", help="Application alias (default: XyP)")
    init.add_argument("--author", default="", help="Author name (default: Nehonix-Team)")
    init.add_argument("--mode", default="", help=MODE_HELP)
    init.add_argument("--strict", action="store_true",
                      help="Exit immediately if any package installation fails")

    commands.add_parser(
        "start", help="Start the XyPriss development server in the current directory"
    )

    install = commands.add_parser(
        "install", help="Install one or more packages using the XyPriss installation system"
    )
    install.add_argument("packages", nargs="+", metavar="package", help="Package names")
    install.add_argument("--mode", default="", help=MODE_HELP)
    install.add_argument("--dev", "-D", action="store_true",
                         help="Install as development dependencies")
    install.add_argument("--strict", action="store_true",
                         help="Exit immediately if any package installation fails")

    commands.add_parser("version", help="Show CLI version information")
    commands.add_parser("help", help="Show this help message")
    return parser


def _init_options(args: argparse.Namespace) -> InitOptions:
    return InitOptions(
        name=args.name,
        description=args.description,
        language=args.language,
        port=args.port,
        version=args.app_version,
        alias=args.alias,
        author=args.author,
        mode=args.mode,
        strict=args.strict,
    )


async def _install(args: argparse.Namespace, config: Config) -> int:
    if not Path("package.json").exists():
        print_error("✗ No package.json found in current directory")
        console.print("[yellow]Make sure you're in a XyPriss project directory[/yellow]")
        return 1

    installer = DependencyInstaller(config.installer)
    mode = InstallMode.from_flag(args.mode)
    console.print(f"[magenta]📦 Installing {len(args.packages)} package(s)...[/magenta]")
    if len(args.packages) == 1:
        report = await installer.install_one(args.packages[0], mode=mode, dev=args.dev)
    else:
        packages = [PackageSpec(name, is_dev=args.dev) for name in args.packages]
        report = await installer.install(packages, mode=mode, strict=args.strict)
    return 0 if report.all_succeeded else 1


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``xypcli`` and ``python -m xypcli``."""
    parser = build_parser()
    args = parser.parse_args(argv)
    config = Config.from_env()

    if args.command in (None, "help"):
        console.print(LOGO)
        parser.print_help()
        return
    if args.command == "version":
        console.print(f"XyPCLI v{__version__}")
        return

    try:
        if args.command == "init":
            console.print(LOGO)
            asyncio.run(ProjectInitializer(config).run(_init_options(args)))
            status = 0
        elif args.command == "start":
            console.print(LOGO)
            status = asyncio.run(start_server())
        else:
            status = asyncio.run(_install(args, config))
    except (TemplateError, ProjectError) as exc:
        print_error(f"✗ {exc}")
        sys.exit(1)
    except KeyboardInterrupt:
        print_error("\nAborted.")
        sys.exit(130)

    if status:
        sys.exit(status)


if __name__ == "__main__":
    main()
