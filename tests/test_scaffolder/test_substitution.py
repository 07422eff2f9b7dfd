"""Unit tests for placeholder substitution (rn_bootstrap.scaffolder.substitution)."""

from __future__ import annotations

from pathlib import Path

import pytest

from rn_bootstrap.errors import FileNotFound, MalformedPattern
from rn_bootstrap.scaffolder.substitution import (
    LiteralRule,
    PatternRule,
    apply_rules,
    substitute,
)


class TestSubstitute:
    @pytest.mark.unit
    def test_rules_apply_in_order(self):
        rules = [LiteralRule(":x:", "A"), LiteralRule(":y:", "B")]
        assert substitute(":x: and :y:", rules) == "A and B"

    @pytest.mark.unit
    def test_each_rule_sees_previous_output(self):
        rules = [LiteralRule(":a:", ":b:"), LiteralRule(":b:", "done")]
        assert substitute(":a:", rules) == "done"

    @pytest.mark.unit
    def test_literal_global_replaces_all(self):
        assert substitute(":n: :n: :n:", [LiteralRule(":n:", "x")]) == "x x x"

    @pytest.mark.unit
    def test_literal_first_match_only(self):
        assert substitute(":n: :n:", [LiteralRule(":n:", "x", global_=False)]) == "x :n:"

    @pytest.mark.unit
    def test_literal_is_not_a_regex(self):
        assert substitute("a.b axb", [LiteralRule("a.b", "X")]) == "X axb"

    @pytest.mark.unit
    def test_pattern_capture_reinsertion(self):
        rule = PatternRule(r"#\s*(org\.gradle\.jvmargs\s*=.+)", r"\1")
        content = "# org.gradle.jvmargs=-Xmx2048m\n"
        assert substitute(content, [rule]) == "org.gradle.jvmargs=-Xmx2048m\n"

    @pytest.mark.unit
    def test_pattern_defaults_to_first_match(self):
        rule = PatternRule(r"#\s*(\w+)", r"\1")
        assert substitute("# a\n# b\n", [rule]) == "a\n# b\n"

    @pytest.mark.unit
    def test_pattern_global(self):
        rule = PatternRule(r"#\s*(\w+)", r"\1", global_=True)
        assert substitute("# a\n# b\n", [rule]) == "a\nb\n"

    @pytest.mark.unit
    def test_invalid_pattern(self):
        with pytest.raises(MalformedPattern):
            substitute("text", [PatternRule("(unclosed", "x")])

    @pytest.mark.unit
    def test_replacement_with_missing_group(self):
        with pytest.raises(MalformedPattern):
            substitute("abc", [PatternRule("a", r"\2")])

    @pytest.mark.unit
    def test_literal_rules_idempotent(self):
        rules = [LiteralRule(":project_name:", "Demo"), LiteralRule(":install:", "yarn add")]
        content = "PROJECT=:project_name:\n:install: x\n"
        once = substitute(content, rules)
        assert substitute(once, rules) == once

    @pytest.mark.unit
    def test_unknown_rule_type(self):
        with pytest.raises(TypeError):
            substitute("x", [("x", "y")])


class TestApplyRules:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_rewrites_file(self, tmp_path: Path):
        target = tmp_path / "archive.sh"
        target.write_text("PROJECT=:project_name:\n", encoding="utf-8")
        await apply_rules(target, [LiteralRule(":project_name:", "Demo")])
        assert target.read_text(encoding="utf-8") == "PROJECT=Demo\n"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_missing_file(self, tmp_path: Path):
        with pytest.raises(FileNotFound):
            await apply_rules(tmp_path / "missing.sh", [LiteralRule("a", "b")])

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_bad_pattern_leaves_file_untouched(self, tmp_path: Path):
        target = tmp_path / "file.txt"
        target.write_text(":x:", encoding="utf-8")
        with pytest.raises(MalformedPattern):
            await apply_rules(target, [LiteralRule(":x:", "A"), PatternRule("[", "B")])
        assert target.read_text(encoding="utf-8") == ":x:"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_no_rollback_across_files(self, tmp_path: Path):
        first = tmp_path / "first.sh"
        first.write_text(":x:", encoding="utf-8")
        rules = [LiteralRule(":x:", "A")]
        await apply_rules(first, rules)
        with pytest.raises(FileNotFound):
            await apply_rules(tmp_path / "second.sh", rules)
        assert first.read_text(encoding="utf-8") == "A"
