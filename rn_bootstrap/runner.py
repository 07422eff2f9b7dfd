"""External command execution.

``ProcessRunner`` is the only place the pipeline spawns child processes.  It
offers two modes:

* **streamed** -- the child inherits our stdout/stderr so the user watches it
  live; only success or failure comes back.
* **captured** -- output is collected and the trimmed stdout is returned.

Version probes use :meth:`ProcessRunner.probe`, a captured run that never
raises on a non-zero exit so the caller can still salvage a version string.
Commands are shell strings because several probes rely on pipes.  There is
no timeout: a hung command hangs the run.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path

from rich.markup import escape

from rn_bootstrap.errors import ProcessFailure
from rn_bootstrap.utils import console


@dataclass(frozen=True)
class CommandResult:
    """Exit status and trimmed output of a captured command."""

    command: str
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class ProcessRunner:
    """Runs shell commands for the pipeline."""

    async def run_streamed(self, cmd: str, cwd: str | Path | None = None) -> None:
        """Run *cmd* with output forwarded live.

        Raises:
            ProcessFailure: If the command exits non-zero.
        """
        console.print(f"[dim]$ {escape(cmd)}[/dim]")
        process = await asyncio.create_subprocess_shell(
            cmd,
            cwd=str(cwd) if cwd else None,
        )
        returncode = await process.wait()
        if returncode != 0:
            raise ProcessFailure(cmd, returncode)

    async def run_captured(self, cmd: str, cwd: str | Path | None = None) -> str:
        """Run *cmd* silently and return its trimmed stdout.

        Raises:
            ProcessFailure: If the command exits non-zero.
        """
        result = await self.probe(cmd, cwd=cwd)
        if not result.ok:
            raise ProcessFailure(cmd, result.returncode, result.stderr)
        return result.stdout

    async def probe(self, cmd: str, cwd: str | Path | None = None) -> CommandResult:
        """Run *cmd* silently and return its result whatever the exit status."""
        process = await asyncio.create_subprocess_shell(
            cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=str(cwd) if cwd else None,
        )
        stdout_bytes, stderr_bytes = await process.communicate()
        return CommandResult(
            command=cmd,
            returncode=process.returncode or 0,
            stdout=(stdout_bytes or b"").decode("utf-8", errors="replace").strip(),
            stderr=(stderr_bytes or b"").decode("utf-8", errors="replace").strip(),
        )
