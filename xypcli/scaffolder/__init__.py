"""xypcli scaffolder -- creates XyPriss projects from the template archive.

Quick usage::

    from xypcli.scaffolder import InitOptions, ProjectInitializer

    initializer = ProjectInitializer()
    await initializer.run(InitOptions(name="my-app", port="8080"))
"""

from xypcli.scaffolder.customize import (
    customize_env_file,
    customize_package_json,
    customize_readme,
    parse_dependency_manifest,
    read_dependency_manifest,
    write_app_config,
)
from xypcli.scaffolder.initializer import ProjectInitializer
from xypcli.scaffolder.project import (
    InitOptions,
    ProjectConfig,
    ProjectError,
    collect_project_config,
    display_project_config,
    handle_existing_directory,
)
from xypcli.scaffolder.template import TemplateError, download_template, extract_template

__all__ = [
    "InitOptions",
    "ProjectConfig",
    "ProjectError",
    "ProjectInitializer",
    "TemplateError",
    "collect_project_config",
    "customize_env_file",
    "customize_package_json",
    "customize_readme",
    "display_project_config",
    "download_template",
    "extract_template",
    "handle_existing_directory",
    "parse_dependency_manifest",
    "read_dependency_manifest",
    "write_app_config",
]
