"""``xypcli init`` orchestration.

Steps:
    1. Collect the project configuration (flags, prompts, defaults).
    2. Download the template archive.
    3. Extract the language subtree into the project directory.
    4. Customise package.json, .env, xypriss.config.json and README.md.
    5. Install regular and dev dependencies as one concurrent batch.
"""

from __future__ import annotations

from pathlib import Path

import httpx
from rich.panel import Panel

from xypcli.config import Config
from xypcli.installer import DependencyInstaller, InstallationReport, InstallMode, PackageSpec
from xypcli.scaffolder.customize import (
    customize_env_file,
    customize_package_json,
    customize_readme,
    read_dependency_manifest,
    write_app_config,
)
from xypcli.scaffolder.project import (
    Ask,
    InitOptions,
    ProjectConfig,
    ProjectError,
    collect_project_config,
    display_project_config,
    prompt_user,
)
from xypcli.scaffolder.template import download_template, extract_template
from xypcli.utils import console, print_error, print_section, print_success


class ProjectInitializer:
    """Creates a new XyPriss project on disk.

    Attributes:
        config: Global configuration (template source, installer knobs).
        installer: Installs the template's dependencies.
        base_dir: Directory the project folder is created in.
    """

    def __init__(
        self,
        config: Config | None = None,
        installer: DependencyInstaller | None = None,
        base_dir: str | Path = ".",
        ask: Ask = prompt_user,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = config or Config()
        self.installer = installer or DependencyInstaller(self.config.installer)
        self.base_dir = Path(base_dir)
        self._ask = ask
        self._client = client

    async def run(self, options: InitOptions) -> ProjectConfig:
        """Scaffold the project described by *options*.

        Raises:
            TemplateError: If the template cannot be fetched or extracted.
        """
        console.print("🚀 [green]Initializing new XyPriss project...[/green]\n")
        project = collect_project_config(options, ask=self._ask, base_dir=self.base_dir)
        display_project_config(project)
        project_dir = self.base_dir / project.name

        print_section("📥 Downloading project template...")
        archive = await download_template(self.config.template, client=self._client)
        try:
            print_section("📦 Extracting template...")
            extract_template(archive, project_dir, project.language)
        finally:
            archive.unlink(missing_ok=True)
        print_success("  ✓ Template extracted successfully")

        print_section("🔧 Customizing configuration...", color="yellow")
        self.customize(project_dir, project)

        print_section("📦 Installing dependencies...", color="magenta")
        await self.install_dependencies(project_dir, options)

        self._print_next_steps(project)
        return project

    def customize(self, project_dir: Path, project: ProjectConfig) -> None:
        if customize_package_json(project_dir, project):
            print_success("  ✓ package.json configured")
        if customize_env_file(project_dir, project):
            print_success("  ✓ .env file configured")
        write_app_config(project_dir, project)
        print_success("  ✓ xypriss.config.json created")
        if customize_readme(project_dir, project):
            print_success("  ✓ README.md configured")

    async def install_dependencies(
        self, project_dir: Path, options: InitOptions
    ) -> InstallationReport | None:
        """Install the manifest's packages; ``None`` when there is no manifest."""
        try:
            deps, dev_deps = read_dependency_manifest(project_dir)
        except ProjectError as exc:
            print_error(f"  ✗ {exc}")
            return None

        packages = [PackageSpec(name) for name in deps]
        packages += [PackageSpec(name, is_dev=True) for name in dev_deps]
        console.print(
            f"  [dim]Dependencies ({len(deps)}), Dev Dependencies ({len(dev_deps)})[/dim]"
        )
        return await self.installer.install(
            packages,
            mode=InstallMode.from_flag(options.mode),
            strict=options.strict,
            working_dir=project_dir,
        )

    @staticmethod
    def _print_next_steps(project: ProjectConfig) -> None:
        console.print()
        console.print(
            Panel(
                f"[bold]📋 Next steps:[/bold]\n"
                f"  [cyan]1.[/cyan] [dim]cd {project.name}[/dim]\n"
                f"  [cyan]2.[/cyan] [dim]npm run dev[/dim]",
                title=f"✨ Project '{project.name}' initialized!",
                border_style="green",
            )
        )
        console.print("[magenta]🎉 Happy coding with XyPriss![/magenta]\n")
