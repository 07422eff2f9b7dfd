"""Host toolchain probes.

Each probe runs an opaque shell one-liner and pulls the first parseable
version token out of the first line of its output.  Version-reporting tools
are inconsistent: ``java -version`` writes to stderr, and some tools exit
non-zero while still printing a usable version.  A probe therefore never
fails on exit status alone; it only reports "not found" when no version can
be parsed at all.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from rn_bootstrap.errors import MalformedVersion
from rn_bootstrap.gate.version import parse_version
from rn_bootstrap.utils import print_warning

if TYPE_CHECKING:
    from rn_bootstrap.runner import ProcessRunner


PROBE_COMMANDS: dict[str, str] = {
    "node": "node --version",
    "xcode": "xcodebuild -version 2>&1 | awk 'NR==1{print $2}'",
    "java": "java -version 2>&1 | awk 'NR==1{ gsub(/\"/,\"\"); print $3 }'",
}


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of probing one tool.

    ``detected`` is ``None`` when the tool is missing or printed nothing
    parseable, which is reported differently from an out-of-range version.
    """

    tool_key: str
    detected: str | None
    raw_output: str = ""
    returncode: int = 0

    @property
    def found(self) -> bool:
        return self.detected is not None


def extract_version(output: str, *, prefix_only: bool = False) -> str | None:
    """Return the first token on the first line of *output* that parses as a version."""
    lines = output.strip().splitlines()
    if not lines:
        return None
    for token in lines[0].split():
        candidate = token.strip("\"',;()")
        try:
            parse_version(candidate, prefix_only=prefix_only)
        except MalformedVersion:
            continue
        return candidate
    return None


class ToolProbe:
    """Queries installed tool versions through a ``ProcessRunner``."""

    def __init__(self, runner: ProcessRunner, commands: dict[str, str] | None = None) -> None:
        self.runner = runner
        self.commands = dict(PROBE_COMMANDS if commands is None else commands)

    async def probe(self, tool_key: str, *, prefix_only: bool = False) -> ProbeResult:
        try:
            cmd = self.commands[tool_key]
        except KeyError:
            raise ValueError(f"No probe command registered for {tool_key!r}") from None

        result = await self.runner.probe(cmd)
        output = result.stdout or result.stderr
        detected = extract_version(output, prefix_only=prefix_only)

        if detected is not None and not result.ok:
            print_warning(
                f"  {tool_key} probe exited with status {result.returncode}; "
                f"using version {detected} from its output"
            )

        return ProbeResult(
            tool_key=tool_key,
            detected=detected,
            raw_output=output,
            returncode=result.returncode,
        )
