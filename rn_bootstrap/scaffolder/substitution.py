"""Placeholder substitution in template and generated files.

A rule is either a ``LiteralRule`` (exact text) or a ``PatternRule`` (a
regular expression whose replacement may reinsert captured groups with
``\\1`` / ``\\g<name>``).  Each rule is either global (every occurrence) or
first-match only.  Rules apply in list order and each one sees the output
of the previous one.

Applying literal rules is idempotent as long as a replacement does not
reintroduce its own marker.  Capture-based pattern rules are not guaranteed
to be idempotent.

Substitution across several files is not transactional: files rewritten
before a failure stay rewritten.
"""

from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass
from pathlib import Path

from rn_bootstrap.errors import FileIOFailure, FileNotFound, MalformedPattern


@dataclass(frozen=True)
class LiteralRule:
    """Replace an exact marker such as ``:project_name:``."""

    text: str
    replacement: str
    global_: bool = True


@dataclass(frozen=True)
class PatternRule:
    """Replace regex matches, optionally reinserting captured groups."""

    pattern: str
    replacement: str
    global_: bool = False
    flags: int = 0


SubstitutionRule = LiteralRule | PatternRule


def substitute(content: str, rules: list[SubstitutionRule]) -> str:
    """Apply *rules* to *content* in order and return the result.

    Raises:
        MalformedPattern: If a pattern rule does not compile or its
            replacement references a group the pattern lacks.
    """
    for rule in rules:
        if isinstance(rule, LiteralRule):
            content = content.replace(rule.text, rule.replacement, -1 if rule.global_ else 1)
        elif isinstance(rule, PatternRule):
            try:
                compiled = re.compile(rule.pattern, rule.flags)
                content = compiled.sub(rule.replacement, content, count=0 if rule.global_ else 1)
            except re.error as exc:
                raise MalformedPattern(rule.pattern, str(exc)) from exc
        else:
            raise TypeError(f"Unsupported substitution rule: {rule!r}")
    return content


async def apply_rules(file_path: str | Path, rules: list[SubstitutionRule]) -> Path:
    """Rewrite *file_path* in place with *rules* applied.

    Raises:
        FileNotFound: If the file does not exist.
        FileIOFailure: If it cannot be read or written.
        MalformedPattern: See :func:`substitute`.
    """
    path = Path(file_path)
    if not path.is_file():
        raise FileNotFound(path)
    try:
        content = await asyncio.to_thread(path.read_text, encoding="utf-8")
    except OSError as exc:
        raise FileIOFailure(path, f"Cannot read {path}: {exc}") from exc

    updated = substitute(content, rules)

    if updated != content:
        try:
            await asyncio.to_thread(path.write_text, updated, encoding="utf-8")
        except OSError as exc:
            raise FileIOFailure(path, f"Cannot write {path}: {exc}") from exc
    return path
