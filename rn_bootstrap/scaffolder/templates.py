"""Jinja2 rendering for the ``*.j2`` project templates.

Most template assets are copied verbatim by ``TemplateCopier``; the few that
need project data (the generated ``README.md``) are Jinja2 templates rendered
here with the project context.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, TemplateNotFound, select_autoescape

from rn_bootstrap.config import DEFAULT_TEMPLATE_DIR
from rn_bootstrap.errors import FileIOFailure, FileNotFound


class TemplateRenderer:
    """Renders Jinja2 templates found under the template root."""

    def __init__(self, template_dir: str | Path | None = None) -> None:
        if template_dir is None:
            template_dir = DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape([]),
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def render(self, template_path: str, context: dict[str, Any]) -> str:
        """Render a single template with the provided context.

        Args:
            template_path: Path relative to the template directory (e.g.
                ``"README.md.j2"``).
            context: Dictionary of variables available inside the template.

        Raises:
            FileNotFound: If the template does not exist.
        """
        try:
            template = self.env.get_template(template_path)
        except TemplateNotFound:
            raise FileNotFound(self.template_dir / template_path) from None
        return template.render(**context)

    async def render_to_file(
        self,
        template_path: str,
        output_path: str | Path,
        context: dict[str, Any],
    ) -> Path:
        """Render a template and write the result to *output_path*.

        Parent directories are created automatically.
        """
        content = self.render(template_path, context)
        out = Path(output_path)
        try:
            await asyncio.to_thread(_write_file, out, content)
        except OSError as exc:
            raise FileIOFailure(out, f"Cannot write {out}: {exc}") from exc
        return out


def _write_file(path: Path, content: str) -> None:
    """Synchronous helper: create parent dirs and write content."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
