"""Shared pytest fixtures for the xypcli test suite.

Provides reusable fixtures for:
- A fake command runner standing in for bun/npm subprocesses
- Resolved backends for both package managers
- PATH lookups with a chosen set of installed tools
- Template archives and extracted project directories
"""

from __future__ import annotations

import asyncio
import io
import json
import zipfile
from pathlib import Path
from typing import Any

import pytest

from xypcli.installer import BackendKind, ResolvedBackend


# ---------------------------------------------------------------------------
# Fake package manager
# ---------------------------------------------------------------------------

class FakeRunner:
    """Async stand-in for ``run_command`` that records every invocation.

    Outcomes are keyed by package name (the last argv element). Packages
    without an entry succeed after ``delay`` seconds. A package listed in
    ``gates`` blocks until its event is set.
    """

    def __init__(
        self,
        outcomes: dict[str, tuple[int, str, str]] | None = None,
        delay: float = 0.01,
    ) -> None:
        self.outcomes = outcomes or {}
        self.delay = delay
        self.gates: dict[str, asyncio.Event] = {}
        self.calls: list[list[str]] = []
        self.kwargs: list[dict[str, Any]] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.intervals: list[tuple[str, float, float]] = []
        self.completed: list[str] = []

    async def __call__(self, cmd: list[str], **kwargs: Any) -> tuple[int, str, str]:
        self.calls.append(list(cmd))
        self.kwargs.append(kwargs)
        name = cmd[-1]
        loop = asyncio.get_running_loop()

        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        start = loop.time()
        try:
            gate = self.gates.get(name)
            if gate is not None:
                await gate.wait()
            else:
                await asyncio.sleep(self.delay)
        finally:
            self.in_flight -= 1
        self.intervals.append((cmd[0], start, loop.time()))
        self.completed.append(name)

        outcome = self.outcomes.get(name, (0, "", ""))
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


@pytest.fixture
def fake_runner() -> FakeRunner:
    """Runner where every package succeeds after a short delay."""
    return FakeRunner()


@pytest.fixture
def bun_backend() -> ResolvedBackend:
    return ResolvedBackend(BackendKind.PRIMARY)


@pytest.fixture
def npm_backend() -> ResolvedBackend:
    return ResolvedBackend(BackendKind.SECONDARY)


def make_which(*installed: str):
    """Build a ``shutil.which`` replacement that knows only *installed*."""

    def _which(tool: str) -> str | None:
        return f"/usr/bin/{tool}" if tool in installed else None

    return _which


@pytest.fixture
def which_factory():
    return make_which


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------

def build_template_zip(extra: dict[str, str] | None = None) -> bytes:
    """Build an in-memory template archive with TS/ and JS/ subtrees."""
    files = {
        "TS/package.json": json.dumps(
            {"name": "template", "description": "", "dependencies": {"x": "1"}}
        ),
        "TS/.env": "PORT=8080\nHOST=localhost\n",
        "TS/README.md": "# {{PROJECT_NAME}}\n\n{{PROJECT_DESCRIPTION}}\n\nPort {{PORT}}\n\n{{FEATURES}}",
        "TS/src/server.ts": "console.log('ts');\n",
        "TS/_sys/internal.txt": "never extracted\n",
        "TS/.config": "Deps:\n- xypriss\n- cors\nDevDeps:\n- typescript\n",
        "JS/src/server.js": "console.log('js');\n",
        "JS/package.json": "{}",
    }
    files.update(extra or {})
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        archive.writestr("TS/", "")
        for name, content in files.items():
            archive.writestr(name, content)
    return buffer.getvalue()


@pytest.fixture
def template_bytes():
    """Factory building template archives, optionally with extra entries."""
    return build_template_zip


@pytest.fixture
def template_zip(tmp_path: Path) -> Path:
    """Template archive written to disk."""
    path = tmp_path / "initdr.zip"
    path.write_bytes(build_template_zip())
    return path


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """Extracted-looking project directory with every placeholder file."""
    root = tmp_path / "my-app"
    root.mkdir()
    (root / "package.json").write_text(
        json.dumps({"name": "template", "version": "0.0.1", "dependencies": {"a": "1"}}),
        encoding="utf-8",
    )
    (root / ".env").write_text("PORT=8080\nAPI={{PORT}}\n", encoding="utf-8")
    (root / "README.md").write_text(
        "# {{PROJECT_NAME}}\n{{PROJECT_DESCRIPTION}}\n{{PORT}}\n{{FEATURES}}", encoding="utf-8"
    )
    (root / ".config").write_text(
        "Deps:\n- xypriss\n- cors\n\nDevDeps:\n- typescript\n- @types/node\n",
        encoding="utf-8",
    )
    return root
