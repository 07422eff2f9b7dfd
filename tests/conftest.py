"""Shared pytest fixtures for the rn-bootstrap test suite.

Provides reusable fixtures for:
- A synthetic compatibility registry
- A fake process runner that records every command
- A helper that imitates ``react-native init`` on disk
- Mock asyncio subprocesses for the real ``ProcessRunner``
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable
from unittest.mock import AsyncMock, MagicMock

import pytest

from rn_bootstrap.config import CompatibilityRegistry, Config
from rn_bootstrap.errors import ProcessFailure
from rn_bootstrap.runner import CommandResult


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

REGISTRY_DATA: dict[str, Any] = {
    "node": {"minimum": "8.3.0"},
    "react_native": {"minimum": "0.57.0", "maximum": "0.59.10"},
    "xcode": {"minimum": "9.4"},
    "java": {"minimum": "1.8.0", "label": "8"},
    "android_sdk_platforms": ["platforms;android-28"],
    "android_sdk_tools": ["platform-tools", "build-tools;28.0.3"],
    "android_avd_package": "system-images;android-28;google_apis;x86",
    "ios_rncache": [],
}


@pytest.fixture
def registry() -> CompatibilityRegistry:
    """Synthetic registry mirroring the bundled one."""
    return CompatibilityRegistry.model_validate(REGISTRY_DATA)


@pytest.fixture
def config() -> Config:
    """Default configuration (bundled templates, offline npm registry URL)."""
    return Config(npm_registry_url="http://registry.invalid")


# ---------------------------------------------------------------------------
# Fake runner
# ---------------------------------------------------------------------------

HEALTHY_PROBES: dict[str, tuple[int, str, str]] = {
    "node --version": (0, "v10.15.0", ""),
    "xcodebuild": (0, "10.1", ""),
    "java": (0, "1.8.0_202", ""),
    "yarn --version": (0, "1.13.0", ""),
    "npm view": (0, "0.59.10", ""),
}


class FakeRunner:
    """Stands in for ``ProcessRunner`` and records every call.

    Args:
        probes: ``{command prefix: (returncode, stdout, stderr)}`` for
            captured/probe calls.  Unknown commands behave like a missing
            binary (exit 127).
        on_streamed: ``{command prefix: hook(cmd, cwd)}`` run for matching
            streamed commands, e.g. to imitate the generator's output.
        fail: ``{command prefix: exit code}`` for streamed commands that
            should fail.
    """

    def __init__(
        self,
        probes: dict[str, tuple[int, str, str]] | None = None,
        on_streamed: dict[str, Callable[[str, Path | None], None]] | None = None,
        fail: dict[str, int] | None = None,
    ) -> None:
        self.probes = dict(HEALTHY_PROBES if probes is None else probes)
        self.on_streamed = on_streamed or {}
        self.fail = fail or {}
        self.calls: list[tuple[str, str, Path | None]] = []

    def _result(self, cmd: str) -> CommandResult:
        for prefix, (code, stdout, stderr) in self.probes.items():
            if cmd.startswith(prefix):
                return CommandResult(cmd, code, stdout, stderr)
        return CommandResult(cmd, 127, "", f"sh: {cmd.split()[0]}: command not found")

    async def probe(self, cmd: str, cwd: Path | None = None) -> CommandResult:
        self.calls.append(("probe", cmd, cwd))
        return self._result(cmd)

    async def run_captured(self, cmd: str, cwd: Path | None = None) -> str:
        self.calls.append(("captured", cmd, cwd))
        result = self._result(cmd)
        if not result.ok:
            raise ProcessFailure(cmd, result.returncode, result.stderr)
        return result.stdout

    async def run_streamed(self, cmd: str, cwd: Path | None = None) -> None:
        self.calls.append(("streamed", cmd, cwd))
        for prefix, code in self.fail.items():
            if cmd.startswith(prefix):
                raise ProcessFailure(cmd, code)
        for prefix, hook in self.on_streamed.items():
            if cmd.startswith(prefix):
                hook(cmd, Path(cwd) if cwd else None)

    @property
    def streamed(self) -> list[str]:
        return [cmd for mode, cmd, _ in self.calls if mode == "streamed"]


def write_generated_project(project_dir: Path) -> Path:
    """Lay down the files ``react-native init`` would leave behind."""
    (project_dir / "android").mkdir(parents=True)
    (project_dir / "package.json").write_text(
        json.dumps(
            {
                "name": project_dir.name,
                "version": "0.0.1",
                "scripts": {"start": "node node_modules/react-native/local-cli/cli.js start", "test": "jest"},
                "dependencies": {"react": "16.8.3", "react-native": "0.59.10"},
            },
            indent=2,
        ),
        encoding="utf-8",
    )
    (project_dir / "android" / "gradle.properties").write_text(
        "# Specifies the JVM arguments used for the daemon process.\n"
        "# org.gradle.jvmargs=-Xmx2048m -XX:MaxPermSize=512m\n"
        "android.useAndroidX=false\n",
        encoding="utf-8",
    )
    (project_dir / ".gitignore").write_text("node_modules/\n", encoding="utf-8")
    return project_dir


def _imitate_generator(cmd: str, cwd: Path | None) -> None:
    name = cmd.split()[2].strip("'")
    write_generated_project((cwd or Path.cwd()) / name)


@pytest.fixture
def fake_runner() -> Callable[..., FakeRunner]:
    """Factory for ``FakeRunner`` instances.

    By default every probe reports a supported version and the generator
    command creates a realistic project skeleton.

    Usage:
        def test_pipeline(fake_runner):
            runner = fake_runner(fail={"sh shell/init.sh": 1})
    """

    def factory(**kwargs: Any) -> FakeRunner:
        kwargs.setdefault("on_streamed", {"react-native init": _imitate_generator})
        return FakeRunner(**kwargs)

    return factory


@pytest.fixture
def generated_project(tmp_path: Path) -> Path:
    """A project directory as left behind by the generator."""
    return write_generated_project(tmp_path / "Demo")


# ---------------------------------------------------------------------------
# Mock Subprocess (generic)
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_subprocess():
    """Mock asyncio subprocess for testing ``ProcessRunner``.

    Returns a factory that creates mock subprocess instances with configurable
    stdout, stderr, and return codes.

    Usage:
        def test_command(mock_subprocess):
            proc = mock_subprocess(stdout="output", returncode=0)
            with patch("asyncio.create_subprocess_shell", AsyncMock(return_value=proc)):
                ...
    """
    def factory(
        stdout: str = "",
        stderr: str = "",
        returncode: int = 0,
    ) -> AsyncMock:
        mock_proc = AsyncMock()
        mock_proc.communicate = AsyncMock(
            return_value=(stdout.encode("utf-8"), stderr.encode("utf-8"))
        )
        mock_proc.returncode = returncode
        mock_proc.pid = 99999
        mock_proc.kill = MagicMock()
        mock_proc.wait = AsyncMock(return_value=returncode)
        return mock_proc

    return factory
