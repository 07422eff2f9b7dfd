"""Copying static template assets into the generated project.

Template assets are never parsed here; they are mirrored byte-for-byte
(permission bits included) so the shell scripts stay executable.  Both
operations overwrite whatever already sits at the destination, which makes
re-running them safe.
"""

from __future__ import annotations

import asyncio
import shutil
from pathlib import Path

from rn_bootstrap.config import DEFAULT_TEMPLATE_DIR
from rn_bootstrap.errors import FileIOFailure, FileNotFound


class TemplateCopier:
    """Copies files and directory trees out of the template root."""

    def __init__(self, template_dir: str | Path | None = None) -> None:
        self.template_dir = Path(template_dir or DEFAULT_TEMPLATE_DIR)

    def _source(self, path: str | Path) -> Path:
        source = Path(path)
        return source if source.is_absolute() else self.template_dir / source

    async def copy_tree(self, src_dir: str | Path, dest_dir: str | Path) -> Path:
        """Mirror *src_dir* (relative to the template root) into *dest_dir*.

        Missing intermediate directories are created and empty directories
        are reproduced.

        Raises:
            FileNotFound: If the source directory does not exist.
            FileIOFailure: If the copy fails part-way.
        """
        source = self._source(src_dir)
        if not source.is_dir():
            raise FileNotFound(source)
        dest = Path(dest_dir)
        try:
            await asyncio.to_thread(shutil.copytree, source, dest, dirs_exist_ok=True)
        except (OSError, shutil.Error) as exc:
            raise FileIOFailure(dest, f"Failed to copy {source} to {dest}: {exc}") from exc
        return dest

    async def copy_file(self, template_path: str | Path, dest_path: str | Path) -> Path:
        """Copy one template file to *dest_path*, creating parent directories.

        Raises:
            FileNotFound: If the template file does not exist.
            FileIOFailure: If the destination cannot be written.
        """
        source = self._source(template_path)
        if not source.is_file():
            raise FileNotFound(source)
        dest = Path(dest_path)
        try:
            await asyncio.to_thread(_copy_file, source, dest)
        except OSError as exc:
            raise FileIOFailure(dest, f"Failed to copy {source} to {dest}: {exc}") from exc
        return dest


def _copy_file(source: Path, dest: Path) -> None:
    """Synchronous helper: create parent dirs and copy with metadata."""
    dest.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(source, dest)
