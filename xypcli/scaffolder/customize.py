"""Placeholder substitution in an extracted template.

Each step edits one file of the new project. A file missing from the
template is reported as a warning and skipped.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from xypcli.scaffolder.project import ProjectConfig, ProjectError
from xypcli.utils import print_warning

APP_CONFIG_FILE = "xypriss.config.json"
MANIFEST_FILE = ".config"

_FEATURE_BULLETS: dict[str, str] = {
    "Authentication": "- 🔐 **Authentication** - JWT-based authentication\n",
    "File Upload": "- 📁 **File Upload** - Support for file uploads\n",
    "Multi-Server": "- 🌐 **Multi-Server** - Multiple server instances\n",
}


def _read_text(path: Path) -> str | None:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        print_warning(f"Warning: Could not read {path.name}: {exc}")
        return None


def customize_package_json(project_dir: Path, config: ProjectConfig) -> bool:
    """Rename the package and clear its dependency maps.

    Dependencies are installed afterwards, which fills the maps again.
    """
    path = project_dir / "package.json"
    raw = _read_text(path)
    if raw is None:
        return False
    try:
        data: dict[str, Any] = json.loads(raw)
    except json.JSONDecodeError as exc:
        print_warning(f"Warning: Could not parse package.json: {exc}")
        return False

    data["name"] = config.package_name
    data["description"] = config.description
    data["dependencies"] = {}
    data["devDependencies"] = {}
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
    return True


def customize_env_file(project_dir: Path, config: ProjectConfig) -> bool:
    """Write the chosen port into ``.env``."""
    path = project_dir / ".env"
    content = _read_text(path)
    if content is None:
        return False
    content = content.replace("{{PORT}}", str(config.port))
    content = content.replace("PORT=8080", f"PORT={config.port}")
    path.write_text(content, encoding="utf-8")
    return True


def write_app_config(project_dir: Path, config: ProjectConfig) -> Path:
    """Merge the ``__sys__`` section into ``xypriss.config.json``.

    Keys outside ``__sys__`` are preserved. An unparsable file is replaced.
    """
    path = project_dir / APP_CONFIG_FILE
    existing: dict[str, Any] = {}
    if path.exists():
        try:
            loaded = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            print_warning(f"Warning: Could not parse existing config, will create new: {exc}")
        else:
            if isinstance(loaded, dict):
                existing = loaded

    existing["__sys__"] = {
        "__version__": config.version,
        "__author__": config.author,
        "__name__": config.name,
        "__description__": config.description,
        "__alias__": config.app_alias,
        "__port__": config.port,
        "__PORT__": config.port,
    }
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(existing, indent=2, ensure_ascii=False), encoding="utf-8")
    return path


def customize_readme(project_dir: Path, config: ProjectConfig) -> bool:
    path = project_dir / "README.md"
    content = _read_text(path)
    if content is None:
        return False
    features = "".join(_FEATURE_BULLETS[name] for name in config.features)
    replacements = {
        "{{PROJECT_NAME}}": config.name,
        "{{PROJECT_DESCRIPTION}}": config.description,
        "{{PORT}}": str(config.port),
        "{{FEATURES}}": features,
    }
    for placeholder, value in replacements.items():
        content = content.replace(placeholder, value)
    path.write_text(content, encoding="utf-8")
    return True


def parse_dependency_manifest(text: str) -> tuple[list[str], list[str]]:
    """Parse the template's ``.config`` dependency manifest.

    Format::

        Deps:
        - xypriss
        DevDeps:
        - typescript

    Returns:
        ``(dependencies, dev_dependencies)`` in file order.
    """
    deps: list[str] = []
    dev_deps: list[str] = []
    section: list[str] | None = None
    for line in text.splitlines():
        line = line.strip()
        if line.startswith("Deps:"):
            section = deps
        elif line.startswith("DevDeps:"):
            section = dev_deps
        elif line.startswith("- ") and section is not None:
            name = line[2:].strip()
            if name:
                section.append(name)
    return deps, dev_deps


def read_dependency_manifest(project_dir: Path) -> tuple[list[str], list[str]]:
    """Read and delete the project's ``.config`` manifest.

    Raises:
        ProjectError: If the manifest is missing or unreadable.
    """
    path = project_dir / MANIFEST_FILE
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ProjectError(f"Failed to read {MANIFEST_FILE} file: {exc}") from exc
    path.unlink()
    return parse_dependency_manifest(text)
