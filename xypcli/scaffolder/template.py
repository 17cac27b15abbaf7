"""Template archive download and extraction.

The archive holds one subtree per language (``TS/`` and ``JS/``). Only the
selected subtree is extracted, minus its internal ``_sys/`` directory.
"""

from __future__ import annotations

import shutil
import tempfile
import zipfile
from pathlib import Path, PurePosixPath

import httpx

from xypcli.config import TemplateConfig
from xypcli.utils import console, platform_info

SYSTEM_DIR = "_sys"


class TemplateError(Exception):
    """Raised when the template cannot be obtained or unpacked."""

    def __init__(self, message: str, source: str = "") -> None:
        self.source = source
        super().__init__(message)


def _language_root(language: str) -> str:
    return "JS" if language == "js" else "TS"


def _copy_local_fallback(local: Path, target: Path) -> None:
    if not local.is_file():
        raise TemplateError(
            f"Failed to open local template: {local} does not exist", source=str(local)
        )
    shutil.copyfile(local, target)


async def download_template(
    config: TemplateConfig,
    client: httpx.AsyncClient | None = None,
) -> Path:
    """Download the template archive to a temporary file.

    When the template server cannot be reached the local fallback archive is
    copied instead. An HTTP error status is not retried locally.

    Args:
        config: Template source settings.
        client: Optional pre-built client (mainly for tests).

    Returns:
        Path of the temporary ``.zip`` file. The caller removes it.

    Raises:
        TemplateError: On a non-200 response or a missing local fallback.
    """
    system, arch = platform_info()
    console.print(f"  [dim]→ Platform: {system}/{arch}[/dim]")
    console.print(f"  [dim]→ Source: {httpx.URL(config.url).host}[/dim]")

    handle = tempfile.NamedTemporaryFile(prefix="xypriss-template-", suffix=".zip", delete=False)
    handle.close()
    target = Path(handle.name)

    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient(timeout=httpx.Timeout(config.timeout, connect=10.0))

    try:
        with console.status("Downloading..."):
            response = await client.get(config.url, follow_redirects=True)
    except httpx.TransportError:
        console.print("  [yellow]⚠ Template server unavailable, using local template[/yellow]")
        try:
            _copy_local_fallback(config.local_fallback, target)
        except TemplateError:
            target.unlink(missing_ok=True)
            raise
        console.print("  [green]✓ Local template loaded[/green]")
        return target
    finally:
        if owns_client:
            await client.aclose()

    if response.status_code != 200:
        target.unlink(missing_ok=True)
        raise TemplateError(
            f"Failed to download template: HTTP {response.status_code}", source=config.url
        )

    target.write_bytes(response.content)
    console.print("  [green]✓ Template downloaded[/green]")
    return target


def extract_template(zip_path: Path, project_dir: Path, language: str) -> list[Path]:
    """Extract the *language* subtree of the archive into *project_dir*.

    Returns:
        The files written, in archive order.

    Raises:
        TemplateError: If the archive is unreadable or an entry would land
            outside *project_dir*.
    """
    root = _language_root(language)
    project_dir = Path(project_dir)
    destination = project_dir.resolve()
    written: list[Path] = []

    try:
        archive = zipfile.ZipFile(zip_path)
    except (OSError, zipfile.BadZipFile) as exc:
        raise TemplateError(f"Failed to open zip file: {exc}", source=str(zip_path)) from exc

    with archive:
        for entry in archive.infolist():
            parts = PurePosixPath(entry.filename).parts
            if len(parts) < 2 or parts[0] != root or parts[1] == SYSTEM_DIR:
                continue

            target = project_dir.joinpath(*parts[1:])
            if not target.resolve().is_relative_to(destination):
                raise TemplateError(
                    f"Refusing to extract '{entry.filename}' outside {project_dir}",
                    source=str(zip_path),
                )

            if entry.is_dir():
                target.mkdir(parents=True, exist_ok=True)
                continue

            target.parent.mkdir(parents=True, exist_ok=True)
            with archive.open(entry) as src, target.open("wb") as dst:
                shutil.copyfileobj(src, dst)
            written.append(target)

    return written
