"""Post-generation patches to the files the generator leaves behind.

* ``package.json`` gets a ``start`` script that launches the bundled
  ``shell/start.sh``.
* ``android/gradle.properties`` has its commented-out ``org.gradle.jvmargs``
  line enabled so dex runs in-process with a larger daemon heap.
* ``.gitignore`` learns to ignore ``start.command``.

``build_template_rules`` describes the placeholder substitutions applied to
the copied ``shell/`` scripts.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import TYPE_CHECKING

from rn_bootstrap.errors import FileIOFailure, FileNotFound
from rn_bootstrap.scaffolder.substitution import (
    LiteralRule,
    PatternRule,
    SubstitutionRule,
    apply_rules,
)

if TYPE_CHECKING:
    from rn_bootstrap.config import CompatibilityRegistry, ProjectContext
    from rn_bootstrap.scaffolder.dependencies import PackageManager


GRADLE_PROPERTIES = Path("android") / "gradle.properties"

GRADLE_JVMARGS_RULE = PatternRule(
    pattern=r"#\s*(org\.gradle\.jvmargs\s*=.+)",
    replacement=r"\1",
    global_=False,
)

GITIGNORE_ENTRIES: list[str] = ["start.command"]


async def patch_manifest(project_dir: Path, start_script: str) -> Path:
    """Set ``scripts.start`` in the project's ``package.json``.

    The ``scripts`` object is created when missing; other keys are kept in
    their original order.
    """
    manifest = Path(project_dir) / "package.json"
    if not manifest.is_file():
        raise FileNotFound(manifest)
    try:
        data = json.loads(await asyncio.to_thread(manifest.read_text, encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise FileIOFailure(manifest, f"Cannot read {manifest}: {exc}") from exc

    if not isinstance(data.get("scripts"), dict):
        data["scripts"] = {}
    data["scripts"]["start"] = start_script

    try:
        await asyncio.to_thread(manifest.write_text, json.dumps(data, indent=2), encoding="utf-8")
    except OSError as exc:
        raise FileIOFailure(manifest, f"Cannot write {manifest}: {exc}") from exc
    return manifest


async def enable_gradle_jvmargs(project_dir: Path) -> Path:
    return await apply_rules(Path(project_dir) / GRADLE_PROPERTIES, [GRADLE_JVMARGS_RULE])


def _append_missing_lines(path: Path, entries: list[str]) -> None:
    existing = path.read_text(encoding="utf-8") if path.exists() else ""
    present = {line.strip() for line in existing.splitlines()}
    missing = [entry for entry in entries if entry not in present]
    if missing:
        prefix = "" if not existing or existing.endswith("\n") else "\n"
        with path.open("a", encoding="utf-8") as fh:
            fh.write(prefix + "\n".join(missing) + "\n")


async def extend_gitignore(project_dir: Path, entries: list[str] | None = None) -> Path:
    """Append *entries* to ``.gitignore``, skipping lines already present."""
    gitignore = Path(project_dir) / ".gitignore"
    entries = GITIGNORE_ENTRIES if entries is None else entries
    try:
        await asyncio.to_thread(_append_missing_lines, gitignore, entries)
    except OSError as exc:
        raise FileIOFailure(gitignore, f"Cannot update {gitignore}: {exc}") from exc
    return gitignore


def _quoted(items: list[str]) -> str:
    return " ".join(f'"{item}"' for item in items)


def build_template_rules(
    context: ProjectContext,
    registry: CompatibilityRegistry,
    manager: PackageManager,
) -> dict[str, list[SubstitutionRule]]:
    """Map each copied script (relative to the project root) to its rules."""
    project_name = [LiteralRule(":project_name:", context.name)]
    return {
        "shell/init.sh": [
            LiteralRule(":install:", manager.add_command),
            LiteralRule(":sdk_platforms:", _quoted(registry.android_sdk_platforms)),
            LiteralRule(":sdk_tools:", _quoted(registry.android_sdk_tools)),
        ],
        "shell/android/create-emulator.sh": [
            LiteralRule(":rn_version:", context.target_version.replace(".", "")),
            LiteralRule(":avd_package:", f'"{registry.android_avd_package}"'),
        ],
        "shell/archive.sh": list(project_name),
        "shell/android/signature.sh": list(project_name),
    }
