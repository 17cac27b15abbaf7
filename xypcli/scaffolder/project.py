"""Project configuration for ``xypcli init``.

Values come from command-line flags first, then from interactive prompts,
then from defaults.
"""

from __future__ import annotations

import shutil
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field
from rich.markup import escape
from rich.prompt import Prompt
from rich.tree import Tree

from xypcli.utils import console, package_name, print_error, print_success, print_warning

DEFAULT_PORT = 3000

Ask = Callable[[str], str]


def prompt_user(label: str) -> str:
    return Prompt.ask(f"[cyan]{label}[/cyan]", default="", show_default=False)


class ProjectError(Exception):
    """Raised when the project directory cannot be prepared."""


class ProjectConfig(BaseModel):
    """Everything needed to customise a freshly extracted template."""

    name: str = Field(..., min_length=1, description="Directory and package name")
    description: str = Field(default="A XyPriss application")
    version: str = Field(default="1.0.0")
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535)
    language: Literal["ts", "js"] = Field(default="ts")
    app_alias: str = Field(default="XyP")
    author: str = Field(default="Nehonix-Team")
    with_auth: bool = Field(default=True, description="JWT authentication")
    with_upload: bool = Field(default=True, description="File uploads")
    with_multi: bool = Field(default=False, description="Multi-server setup")

    @property
    def language_name(self) -> str:
        return "JavaScript" if self.language == "js" else "TypeScript"

    @property
    def package_name(self) -> str:
        return package_name(self.name)

    @property
    def features(self) -> list[str]:
        """Display names of the enabled optional features."""
        enabled = []
        if self.with_auth:
            enabled.append("Authentication")
        if self.with_upload:
            enabled.append("File Upload")
        if self.with_multi:
            enabled.append("Multi-Server")
        return enabled


@dataclass
class InitOptions:
    """Flags accepted by ``xypcli init``. Empty strings mean "ask"."""

    name: str = ""
    description: str = ""
    language: str = ""
    port: str = ""
    version: str = ""
    alias: str = ""
    author: str = ""
    mode: str = ""
    strict: bool = False


def _normalize_language(value: str) -> Literal["ts", "js"]:
    return "js" if value.strip().lower() == "js" else "ts"


def _parse_port(value: str) -> int:
    try:
        port = int(value)
    except ValueError:
        port = 0
    if 0 < port < 65536:
        return port
    print_warning(f"Invalid port format, using default {DEFAULT_PORT}")
    return DEFAULT_PORT


def handle_existing_directory(directory: Path, ask: Ask = prompt_user) -> bool:
    """Decide whether *directory* can receive a new project.

    A missing or empty directory is fine. For a non-empty one the user
    chooses between deleting it (``1``) and picking another name (``2``).

    Returns:
        ``True`` to proceed with this directory, ``False`` to pick another name.
    """
    if not directory.exists():
        return True
    if directory.is_dir() and not any(directory.iterdir()):
        return True

    print_warning(f"⚠ Directory '{directory}' already exists and is not empty.")
    console.print("  [cyan]1.[/cyan] Delete the directory and create a new project")
    console.print("  [cyan]2.[/cyan] Choose a different project name")
    while True:
        choice = ask("Enter your choice (1 or 2)").strip()
        if choice == "1":
            console.print(f"[red]🗑️  Deleting existing directory '{directory}'...[/red]")
            try:
                if directory.is_dir():
                    shutil.rmtree(directory)
                else:
                    directory.unlink()
            except OSError as exc:
                print_error(f"❌ Failed to delete directory: {exc}")
                return False
            print_success("✅ Directory deleted successfully")
            return True
        if choice == "2":
            return False
        print_error("❌ Invalid choice. Please choose 1 or 2.")


def collect_project_config(
    options: InitOptions,
    ask: Ask = prompt_user,
    base_dir: Path = Path("."),
) -> ProjectConfig:
    """Build a :class:`ProjectConfig` from flags, prompts and defaults."""
    while True:
        name = options.name or ask("Project name").strip() or "my-xypriss-app"
        if handle_existing_directory(base_dir / name, ask):
            break
        # A different name is always asked for interactively.
        options = InitOptions(mode=options.mode, strict=options.strict)

    description = (
        options.description or ask("Description").strip() or "A XyPriss application"
    )
    language = _normalize_language(
        options.language or ask("Programming language (js/ts)")
    )
    port_value = options.port or ask("Server port").strip()
    port = _parse_port(port_value) if port_value else DEFAULT_PORT
    version = options.version or ask("Application version").strip() or "1.0.0"
    alias = options.alias or ask("Application alias").strip() or "XyP"
    author = options.author or ask("Author name").strip() or "Nehonix"

    return ProjectConfig(
        name=name,
        description=description,
        version=version,
        port=port,
        language=language,
        app_alias=alias,
        author=author,
    )


def display_project_config(config: ProjectConfig) -> None:
    """Print the project configuration as a tree."""
    tree = Tree("[bold]Project Configuration[/bold]")
    tree.add(f"[cyan]Name:[/cyan] {escape(config.name)}")
    if config.description:
        tree.add(f"[cyan]Description:[/cyan] {escape(config.description)}")
    tree.add(f"[cyan]Language:[/cyan] {config.language_name}")
    tree.add(f"[cyan]Port:[/cyan] {config.port}")
    tree.add(f"[cyan]Version:[/cyan] {escape(config.version)}")
    tree.add(f"[cyan]App Alias:[/cyan] {escape(config.app_alias)}")
    tree.add(f"[cyan]Author:[/cyan] {escape(config.author)}")
    if config.features:
        features = tree.add("[cyan]Features:[/cyan]")
        for feature in config.features:
            features.add(feature)
    else:
        tree.add("[cyan]Features:[/cyan] None")
    console.print(tree)
