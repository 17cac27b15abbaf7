"""Unit tests for utility functions (xypcli.utils).

Tests cover:
- run_command (success, failure, timeout, env vars, capture=False, missing binary)
- package_name
- format_duration
- platform_info
- Rich output helpers
"""

from __future__ import annotations

import sys
from unittest.mock import patch

import pytest

from xypcli.utils import (
    format_duration,
    package_name,
    platform_info,
    print_error,
    print_section,
    print_success,
    print_warning,
    run_command,
)


# ---------------------------------------------------------------------------
# run_command
# ---------------------------------------------------------------------------


class TestRunCommand:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_success(self):
        rc, out, err = await run_command([sys.executable, "-c", "print('hello')"])
        assert rc == 0
        assert out == "hello"
        assert err == ""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_failure_captures_stderr(self):
        rc, _, err = await run_command(
            [sys.executable, "-c", "import sys; sys.stderr.write('npm ERR! code E404'); sys.exit(3)"]
        )
        assert rc == 3
        assert err == "npm ERR! code E404"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_timeout(self):
        rc, _, err = await run_command(
            [sys.executable, "-c", "import time; time.sleep(10)"], timeout=0.5
        )
        assert rc == -1
        assert "timed out" in err

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_env_is_merged(self):
        rc, out, _ = await run_command(
            [sys.executable, "-c", "import os; print(os.environ['XYP_TEST_VAR'], 'PATH' in os.environ)"],
            env={"XYP_TEST_VAR": "42"},
        )
        assert rc == 0
        assert out == "42 True"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_cwd(self, tmp_path):
        rc, out, _ = await run_command(
            [sys.executable, "-c", "import os; print(os.getcwd())"], cwd=tmp_path
        )
        assert rc == 0
        assert out == str(tmp_path.resolve())

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_no_capture_returns_empty_strings(self):
        rc, out, err = await run_command([sys.executable, "-c", "pass"], capture=False)
        assert (rc, out, err) == (0, "", "")

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_missing_executable_raises(self):
        with pytest.raises(OSError):
            await run_command(["xypcli-definitely-not-installed"])


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


class TestPackageName:
    @pytest.mark.unit
    @pytest.mark.parametrize(
        "name, expected",
        [
            ("api", "api"),
            ("My App", "my-app"),
            ("  Shop Backend API ", "shop-backend-api"),
        ],
    )
    def test_package_name(self, name, expected):
        assert package_name(name) == expected


class TestFormatDuration:
    @pytest.mark.unit
    @pytest.mark.parametrize(
        "seconds, expected",
        [
            (-1, "0ms"),
            (0.42, "420ms"),
            (3.7, "3.7s"),
            (65.2, "1m 5s"),
        ],
    )
    def test_format_duration(self, seconds, expected):
        assert format_duration(seconds) == expected


class TestPlatformInfo:
    @pytest.mark.unit
    def test_normalises_names(self):
        with patch("platform.system", return_value="Darwin"), patch(
            "platform.machine", return_value="aarch64"
        ):
            assert platform_info() == ("darwin", "arm64")

    @pytest.mark.unit
    def test_unknown_values_use_defaults(self):
        with patch("platform.system", return_value="Plan9"), patch(
            "platform.machine", return_value="mips"
        ):
            assert platform_info() == ("linux", "amd64")


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


class TestOutputHelpers:
    @pytest.mark.unit
    def test_messages_are_printed(self, capsys):
        print_success("done")
        print_error("failed")
        print_warning("careful")
        print_section("Installing")
        out = capsys.readouterr().out
        for text in ("done", "failed", "careful", "Installing"):
            assert text in out
