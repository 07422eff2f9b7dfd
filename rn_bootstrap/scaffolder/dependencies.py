"""Package-manager detection and auxiliary dev-dependency installation."""

from __future__ import annotations

import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from rn_bootstrap.gate.probe import extract_version
from rn_bootstrap.utils import console

if TYPE_CHECKING:
    from rn_bootstrap.runner import ProcessRunner


@dataclass(frozen=True)
class PackageManager:
    name: str
    add_command: str
    dev_flag: str

    def install_command(self, package: str, dev: bool = True) -> str:
        cmd = f"{self.add_command} {shlex.quote(package)}"
        return f"{cmd} {self.dev_flag}" if dev else cmd


YARN = PackageManager(name="yarn", add_command="yarn add", dev_flag="--dev")
NPM = PackageManager(name="npm", add_command="npm install", dev_flag="--save-dev")

# package -> packages that must already be resolvable when it is installed
PEER_DEPENDENCIES: dict[str, list[str]] = {
    # ajv-keywords (pulled in by eslint) declares ajv as a peer.
    "eslint": ["ajv"],
}


async def detect_package_manager(runner: ProcessRunner, use_npm: bool) -> PackageManager:
    """Pick npm when forced, otherwise yarn if it is installed."""
    if use_npm:
        return NPM
    result = await runner.probe("yarn --version")
    if result.ok and extract_version(result.stdout) is not None:
        return YARN
    return NPM


def order_packages(packages: list[str]) -> list[str]:
    """Return *packages* with every listed peer moved ahead of its dependent.

    Otherwise the given order is kept.
    """
    ordered: list[str] = []

    def visit(package: str) -> None:
        if package in ordered:
            return
        for peer in PEER_DEPENDENCIES.get(package, []):
            if peer in packages:
                visit(peer)
        ordered.append(package)

    for package in packages:
        visit(package)
    return ordered


class DependencyAugmenter:
    """Installs extra packages into the generated project, one at a time."""

    def __init__(self, runner: ProcessRunner, manager: PackageManager, project_dir: Path) -> None:
        self.runner = runner
        self.manager = manager
        self.project_dir = Path(project_dir)

    async def install(self, packages: list[str], dev_only: bool = True) -> list[str]:
        """Install *packages* in streamed mode and return the order used.

        Raises:
            ProcessFailure: On the first install that fails.
        """
        ordered = order_packages(packages)
        for package in ordered:
            console.print(f"  Installing [bold]{package}[/bold] with {self.manager.name}")
            await self.runner.run_streamed(
                self.manager.install_command(package, dev=dev_only), cwd=self.project_dir
            )
        return ordered
