"""Bootstrap pipeline orchestrator.

Drives a strictly forward sequence of stages:

ParseInput → ValidateEnvironment → ValidateTargetDirectoryAbsent →
RunGenerator → ChangeWorkingDirectory → PatchManifestAndBuildFiles →
CopyStaticTemplates → SubstitutePlaceholdersInCopiedTemplates →
AugmentDependencies → RunFinalInitScript → ReportSuccess

The first failure stops the run.  Nothing is rolled back: a failed run may
leave a half-scaffolded project that has to be removed before retrying.

Usage::

    react-native-init MyApp
    react-native-init MyApp --version 0.59.10 --npm
    python -m rn_bootstrap MyApp
"""

from __future__ import annotations

import asyncio
import sys
import time
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any

import httpx
from pydantic import ValidationError
from rich.panel import Panel

from rn_bootstrap.config import CompatibilityRegistry, Config, ProjectContext
from rn_bootstrap.errors import BootstrapError, UsageError
from rn_bootstrap.gate import CompatibilityGate, ToolProbe
from rn_bootstrap.runner import ProcessRunner
from rn_bootstrap.scaffolder.copier import TemplateCopier
from rn_bootstrap.scaffolder.dependencies import (
    DependencyAugmenter,
    PackageManager,
    detect_package_manager,
)
from rn_bootstrap.scaffolder.generator import ProjectGeneratorInvoker, ensure_target_absent
from rn_bootstrap.scaffolder.patcher import (
    build_template_rules,
    enable_gradle_jvmargs,
    extend_gitignore,
    patch_manifest,
)
from rn_bootstrap.scaffolder.resolver import resolve_target_version
from rn_bootstrap.scaffolder.substitution import apply_rules
from rn_bootstrap.scaffolder.templates import TemplateRenderer
from rn_bootstrap.utils import (
    console,
    ensure_dir,
    err_console,
    format_duration,
    print_error,
    print_stage_header,
    print_success,
    print_summary_table,
)

USAGE = "\n".join([
    "",
    "  Usage: react-native-init [ProjectName] [options]",
    "",
    "  Options:",
    "",
    "    --version {string} output the react native version number, default is latest RN version",
    "    --npm {boolean} use npm to install package, default is false",
    "",
])


class Stage(str, Enum):
    PARSE_INPUT = "ParseInput"
    VALIDATE_ENVIRONMENT = "ValidateEnvironment"
    VALIDATE_TARGET_DIRECTORY_ABSENT = "ValidateTargetDirectoryAbsent"
    RUN_GENERATOR = "RunGenerator"
    CHANGE_WORKING_DIRECTORY = "ChangeWorkingDirectory"
    PATCH_MANIFEST_AND_BUILD_FILES = "PatchManifestAndBuildFiles"
    COPY_STATIC_TEMPLATES = "CopyStaticTemplates"
    SUBSTITUTE_PLACEHOLDERS = "SubstitutePlaceholdersInCopiedTemplates"
    AUGMENT_DEPENDENCIES = "AugmentDependencies"
    RUN_FINAL_INIT_SCRIPT = "RunFinalInitScript"
    REPORT_SUCCESS = "ReportSuccess"


STAGES: list[Stage] = list(Stage)


class Pipeline:
    """Bootstrap orchestrator.

    Collaborators are injected so tests can run the whole pipeline against a
    fake runner, a synthetic registry and a temporary directory.

    Attributes:
        config: Runtime configuration.
        registry: Compatibility registry, loaded once.
        stage: The stage currently executing (or the one that failed).
        state: Accumulated run information, including a top-level ``success``.
    """

    def __init__(
        self,
        config: Config | None = None,
        runner: ProcessRunner | None = None,
        registry: CompatibilityRegistry | None = None,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config or Config()
        self.runner = runner or ProcessRunner()
        self.registry = registry or self.config.load_registry()
        self.http_transport = http_transport
        self.stage: Stage | None = None
        self.context: ProjectContext | None = None
        self.request: dict[str, Any] = {}
        self.target_version: str | None = None
        self.project_dir: Path | None = None
        self.package_manager: PackageManager | None = None
        self.state: dict[str, Any] = {
            "started_at": datetime.now(timezone.utc).isoformat(),
            "stages_completed": [],
            "success": False,
        }

    # ------------------------------------------------------------------
    # Stage dispatch
    # ------------------------------------------------------------------

    _STAGE_METHODS: dict[Stage, str] = {
        Stage.PARSE_INPUT: "_parse_input",
        Stage.VALIDATE_ENVIRONMENT: "_validate_environment",
        Stage.VALIDATE_TARGET_DIRECTORY_ABSENT: "_validate_target_absent",
        Stage.RUN_GENERATOR: "_run_generator",
        Stage.CHANGE_WORKING_DIRECTORY: "_change_working_directory",
        Stage.PATCH_MANIFEST_AND_BUILD_FILES: "_patch_generated_files",
        Stage.COPY_STATIC_TEMPLATES: "_copy_static_templates",
        Stage.SUBSTITUTE_PLACEHOLDERS: "_substitute_placeholders",
        Stage.AUGMENT_DEPENDENCIES: "_augment_dependencies",
        Stage.RUN_FINAL_INIT_SCRIPT: "_run_init_script",
        Stage.REPORT_SUCCESS: "_report_success",
    }

    async def run(
        self,
        name: str | None,
        version: str | None = None,
        use_npm: bool = False,
        cwd: str | Path | None = None,
    ) -> dict[str, Any]:
        """Execute every stage in order, stopping at the first failure.

        Args:
            name: Project name (directory to create).
            version: Target React Native version; latest when ``None``.
            use_npm: Force npm instead of yarn.
            cwd: Directory the project is created in (defaults to the
                current directory).

        Returns:
            The run state dictionary with a top-level ``success`` boolean.
        """
        start = time.monotonic()
        self.state["input"] = {"name": name, "version": version, "npm": use_npm}

        for index, stage in enumerate(STAGES, start=1):
            self.stage = stage
            print_stage_header(index, len(STAGES), stage.value)
            method = getattr(self, self._STAGE_METHODS[stage])
            try:
                if stage is Stage.PARSE_INPUT:
                    await method(name, version, use_npm, Path(cwd) if cwd else Path.cwd())
                else:
                    await method()
            except BootstrapError as exc:
                self.state["failed_stage"] = stage.value
                self.state["error"] = str(exc)
                print_error(f"{stage.value} failed: {exc}")
                break
            self.state["stages_completed"].append(stage.value)
        else:
            self.state["success"] = True

        self.state["total_duration"] = format_duration(time.monotonic() - start)
        self.state["finished_at"] = datetime.now(timezone.utc).isoformat()
        return self.state

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    async def _parse_input(
        self, name: str | None, version: str | None, use_npm: bool, cwd: Path
    ) -> None:
        name = (name or "").strip()
        if not name:
            raise UsageError("A project name is required.")
        if Path(name).name != name or name in (".", ".."):
            raise UsageError(f"Project name must be a plain directory name: {name!r}")

        working_directory = cwd.resolve()
        self.request = {
            "name": name,
            "version": version.strip() if version and version.strip() else None,
            "use_npm": use_npm,
            "working_directory": working_directory,
        }
        console.print(
            Panel(
                f"[bold bright_cyan]React Native bootstrap[/bold bright_cyan]\n"
                f"Project : {name}\n"
                f"Version : {self.request['version'] or 'latest'}\n"
                f"Location: {working_directory / name}",
                title="[bold]Bootstrap[/bold]",
                border_style="bright_cyan",
            )
        )

    async def _validate_environment(self) -> None:
        """Gate the host toolchain; "latest" is resolved only once node has passed."""
        gate = CompatibilityGate(self.registry, ToolProbe(self.runner))
        results = await gate.check_all(self._resolve_target_version)
        self.context = ProjectContext(
            name=self.request["name"],
            target_version=await self._resolve_target_version(),
            use_npm=self.request["use_npm"],
            working_directory=self.request["working_directory"],
        )
        self.state["tools"] = {r.tool_key: r.detected for r in results}
        print_summary_table(
            {r.tool_key: r.detected or "-" for r in results}, title="Detected toolchain"
        )

    async def _validate_target_absent(self) -> None:
        ensure_target_absent(self.context)

    async def _run_generator(self) -> None:
        invoker = ProjectGeneratorInvoker(self.runner, self.config.generator_command)
        await invoker.run(self.context)

    async def _change_working_directory(self) -> None:
        self.project_dir = self.context.project_dir
        self.state["project_dir"] = str(self.project_dir)
        console.print(f"  Working in [bold]{self.project_dir}[/bold]")

    async def _patch_generated_files(self) -> None:
        await patch_manifest(self.project_dir, self.config.start_script)
        console.print("  [green]+[/green] package.json start script")
        await enable_gradle_jvmargs(self.project_dir)
        console.print("  [green]+[/green] android/gradle.properties jvmargs")
        await extend_gitignore(self.project_dir)
        console.print("  [green]+[/green] .gitignore")

    async def _copy_static_templates(self) -> None:
        copier = TemplateCopier(self.config.template_dir)
        manager = await self._package_manager()

        await copier.copy_file(".editorconfig", self.project_dir / ".editorconfig")
        await TemplateRenderer(self.config.template_dir).render_to_file(
            "README.md.j2",
            self.project_dir / "README.md",
            {
                "name": self.context.name,
                "version": self.context.target_version,
                "start_script": self.config.start_script,
                "package_manager": manager.name,
            },
        )
        await asyncio.to_thread(ensure_dir, self.project_dir / "src")
        await copier.copy_tree("shell", self.project_dir / "shell")
        for package in self.registry.ios_rncache:
            relative = f"rncache/{package}.tar.gz"
            await copier.copy_file(relative, self.project_dir / relative)
        console.print("  [green]+[/green] Templates copied")

    async def _substitute_placeholders(self) -> None:
        manager = await self._package_manager()
        rules_by_file = build_template_rules(self.context, self.registry, manager)
        for relative, rules in rules_by_file.items():
            await apply_rules(self.project_dir / relative, rules)
            console.print(f"  [green]+[/green] {relative}")

    async def _augment_dependencies(self) -> None:
        manager = await self._package_manager()
        augmenter = DependencyAugmenter(self.runner, manager, self.project_dir)
        self.state["dev_dependencies"] = await augmenter.install(
            self.config.dev_dependencies, dev_only=True
        )

    async def _run_init_script(self) -> None:
        await self.runner.run_streamed("sh shell/init.sh", cwd=self.project_dir)

    async def _report_success(self) -> None:
        print_success(f'Welcome to run "cd {self.context.name} && npm start"')
        console.print()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _resolve_target_version(self) -> str:
        if self.target_version is None:
            self.target_version = await resolve_target_version(
                self.request["version"], self.config, self.runner, transport=self.http_transport
            )
            self.state["target_version"] = self.target_version
        return self.target_version

    async def _package_manager(self) -> PackageManager:
        if self.package_manager is None:
            self.package_manager = await detect_package_manager(
                self.runner, self.context.use_npm
            )
            self.state["package_manager"] = self.package_manager.name
        return self.package_manager


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``react-native-init``."""
    import argparse

    parser = argparse.ArgumentParser(
        prog="react-native-init",
        description="Create a React Native project that builds and runs out of the box",
    )
    parser.add_argument("name", nargs="?", help="Project name")
    parser.add_argument(
        "--version",
        default=None,
        help="React Native version (default: latest published version)",
    )
    parser.add_argument(
        "--npm",
        action="store_true",
        help="Use npm instead of yarn to install packages",
    )

    args = parser.parse_args(argv)

    if not args.name:
        err_console.print(USAGE, markup=False, highlight=False)
        sys.exit(1)

    try:
        config = Config.from_env()
        pipeline = Pipeline(config)
    except (OSError, ValueError, ValidationError) as exc:
        print_error(f"Invalid configuration: {exc}")
        sys.exit(1)

    result = asyncio.run(pipeline.run(args.name, version=args.version, use_npm=args.npm))
    if not result.get("success"):
        sys.exit(1)


if __name__ == "__main__":
    main()
