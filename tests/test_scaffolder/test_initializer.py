"""Unit tests for ProjectInitializer (xypcli.scaffolder.initializer).

The template server is an ``httpx.MockTransport`` and package managers are
replaced by the shared ``fake_runner`` fixture.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from unittest.mock import AsyncMock

import httpx
import pytest

from xypcli.config import Config, InstallerConfig
from xypcli.installer import DependencyInstaller, PackageSpec
from xypcli.scaffolder import InitOptions, ProjectInitializer, TemplateError


def _options(**overrides) -> InitOptions:
    values = dict(
        name="shop",
        description="Shop API",
        language="ts",
        port="5050",
        version="1.2.3",
        alias="Shop",
        author="Jane",
    )
    values.update(overrides)
    return InitOptions(**values)


def _no_prompts(label: str) -> str:
    raise AssertionError(f"unexpected prompt: {label}")


@pytest.fixture
def installer(fake_runner, which_factory) -> DependencyInstaller:
    return DependencyInstaller(
        InstallerConfig(),
        runner=fake_runner,
        which=which_factory("bun", "npm"),
        provision=AsyncMock(return_value=False),
    )


def _initializer(tmp_path: Path, installer, handler) -> ProjectInitializer:
    return ProjectInitializer(
        config=Config(),
        installer=installer,
        base_dir=tmp_path,
        ask=_no_prompts,
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


class TestRun:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_scaffolds_and_installs(self, tmp_path, installer, fake_runner, template_bytes):
        payload = template_bytes()
        initializer = _initializer(
            tmp_path, installer, lambda request: httpx.Response(200, content=payload)
        )

        project = await initializer.run(_options())

        root = tmp_path / "shop"
        assert project.name == "shop"
        assert (root / "src" / "server.ts").exists()
        assert not (root / ".config").exists()
        assert json.loads((root / "package.json").read_text())["name"] == "shop"
        assert (root / ".env").read_text().startswith("PORT=5050")
        sys_section = json.loads((root / "xypriss.config.json").read_text())["__sys__"]
        assert sys_section["__version__"] == "1.2.3"
        assert sorted(fake_runner.calls) == [
            ["bun", "add", "-d", "typescript"],
            ["bun", "add", "cors"],
            ["bun", "add", "xypriss"],
        ]
        assert all(kwargs["cwd"] == root for kwargs in fake_runner.kwargs)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_download_failure_stops_before_install(self, tmp_path, installer, fake_runner):
        initializer = _initializer(tmp_path, installer, lambda request: httpx.Response(500))

        with pytest.raises(TemplateError, match="HTTP 500"):
            await initializer.run(_options())

        assert fake_runner.calls == []
        assert not (tmp_path / "shop").exists()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_strict_failure_exits(self, tmp_path, installer, fake_runner, template_bytes):
        payload = template_bytes()
        fake_runner.outcomes["xypriss"] = (1, "", "error: 404 Not Found")
        fake_runner.gates.update({"cors": asyncio.Event(), "typescript": asyncio.Event()})
        initializer = _initializer(
            tmp_path, installer, lambda request: httpx.Response(200, content=payload)
        )

        with pytest.raises(SystemExit) as exc_info:
            await initializer.run(_options(strict=True))

        assert exc_info.value.code == 1
        for event in fake_runner.gates.values():
            event.set()
        await asyncio.gather(*exc_info.value.__cause__.pending)


class TestInstallDependencies:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_forced_npm_mode(self, tmp_path, project_dir, installer, fake_runner):
        initializer = ProjectInitializer(installer=installer, base_dir=tmp_path)

        report = await initializer.install_dependencies(project_dir, _options(mode="n"))

        assert report.total == 4
        assert report.all_succeeded
        assert fake_runner.max_in_flight == 1
        assert ["npm", "install", "--save-dev", "@types/node"] in fake_runner.calls

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_partial_failure_is_reported(self, tmp_path, project_dir, installer, fake_runner):
        fake_runner.outcomes["cors"] = (1, "", "error: nope")
        initializer = ProjectInitializer(installer=installer, base_dir=tmp_path)

        report = await initializer.install_dependencies(project_dir, _options())

        assert report.failed == [PackageSpec("cors")]
        assert report.succeeded == 3

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_missing_manifest_skips_install(self, tmp_path, installer, fake_runner):
        initializer = ProjectInitializer(installer=installer, base_dir=tmp_path)

        assert await initializer.install_dependencies(tmp_path, _options()) is None
        assert fake_runner.calls == []
