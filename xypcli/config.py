"""xypcli configuration.

Typed settings for the dependency installer and the template source. All
settings use Pydantic v2 models so they are validated at construction time
and can be overridden from environment variables without boiler-plate.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field


class InstallerConfig(BaseModel):
    """Tuning knobs for the concurrent dependency installer."""

    max_concurrency: int = Field(
        default=4, ge=1, description="Maximum package installs in flight at once"
    )
    primary_tool: str = Field(default="bun", description="Fast package manager executable")
    secondary_tool: str = Field(
        default="npm", description="Traditional package manager executable"
    )
    # Packages whose post-install scripts only npm runs.
    secondary_only_packages: list[str] = Field(default_factory=lambda: ["nquickdev"])
    max_diagnostic_lines: int = Field(default=5, ge=1)


class TemplateConfig(BaseModel):
    """Where project templates are fetched from."""

    base_url: str = Field(default="https://dll.nehonix.com/dl/mds/xypriss/templates/")
    archive_name: str = Field(default="initdr.zip")
    local_fallback: Path = Field(
        default=Path("initdr.zip"),
        description="Archive used when the template server is unreachable",
    )
    timeout: int = Field(default=60, ge=5, description="Download timeout in seconds")

    @property
    def url(self) -> str:
        """Fully-qualified URL of the template archive."""
        return self.base_url.rstrip("/") + "/" + self.archive_name


class Config(BaseModel):
    """Global xypcli configuration.

    Created once by the CLI entry point and passed to the initializer and
    the installer.
    """

    installer: InstallerConfig = Field(default_factory=InstallerConfig)
    template: TemplateConfig = Field(default_factory=TemplateConfig)

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            XYP_MAX_CONCURRENCY, XYP_PRIMARY_TOOL, XYP_SECONDARY_TOOL,
            XYP_TEMPLATE_URL, XYP_TEMPLATE_LOCAL, XYP_TEMPLATE_TIMEOUT.
        """
        installer_kwargs: dict[str, Any] = {}
        if os.environ.get("XYP_MAX_CONCURRENCY"):
            installer_kwargs["max_concurrency"] = int(os.environ["XYP_MAX_CONCURRENCY"])
        if os.environ.get("XYP_PRIMARY_TOOL"):
            installer_kwargs["primary_tool"] = os.environ["XYP_PRIMARY_TOOL"]
        if os.environ.get("XYP_SECONDARY_TOOL"):
            installer_kwargs["secondary_tool"] = os.environ["XYP_SECONDARY_TOOL"]

        template_kwargs: dict[str, Any] = {}
        if os.environ.get("XYP_TEMPLATE_URL"):
            template_kwargs["base_url"] = os.environ["XYP_TEMPLATE_URL"]
        if os.environ.get("XYP_TEMPLATE_LOCAL"):
            template_kwargs["local_fallback"] = Path(os.environ["XYP_TEMPLATE_LOCAL"])
        if os.environ.get("XYP_TEMPLATE_TIMEOUT"):
            template_kwargs["timeout"] = int(os.environ["XYP_TEMPLATE_TIMEOUT"])

        return cls(
            installer=InstallerConfig(**installer_kwargs),
            template=TemplateConfig(**template_kwargs),
        )
