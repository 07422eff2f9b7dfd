"""Invocation of the external React Native project generator."""

from __future__ import annotations

import shlex
from pathlib import Path
from typing import TYPE_CHECKING

from rn_bootstrap.errors import FileNotFound, PreconditionFailure

if TYPE_CHECKING:
    from rn_bootstrap.config import ProjectContext
    from rn_bootstrap.runner import ProcessRunner


def ensure_target_absent(context: ProjectContext) -> None:
    """Refuse to run over an existing directory.

    Raises:
        PreconditionFailure: If ``<working_directory>/<name>`` exists.
    """
    if context.project_dir.exists():
        raise PreconditionFailure(f"Directory {context.name} already exists.")


class ProjectGeneratorInvoker:
    """Builds and runs ``<generator> init <name> --version=<version> [--npm]``."""

    def __init__(self, runner: ProcessRunner, command: str = "react-native") -> None:
        self.runner = runner
        self.command = command

    def build_command(self, context: ProjectContext) -> str:
        parts = [
            self.command,
            "init",
            shlex.quote(context.name),
            f"--version={shlex.quote(context.target_version)}",
        ]
        if context.use_npm:
            parts.append("--npm")
        return " ".join(parts)

    async def run(self, context: ProjectContext) -> Path:
        """Run the generator in streamed mode and return the new project root.

        Raises:
            ProcessFailure: If the generator exits non-zero.
            FileNotFound: If it succeeded but left no project directory.
        """
        await self.runner.run_streamed(self.build_command(context), cwd=context.working_directory)
        if not context.project_dir.is_dir():
            raise FileNotFound(context.project_dir)
        return context.project_dir
