"""Tests for prompt templates and prompt construction."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from ollama_commit.context import ContextData
from ollama_commit.prompts import (
	PROMPT_TEMPLATES,
	build_commit_prompt,
	create_prompt_file,
	get_system_prompt,
	get_template,
	truncate_diff,
)
from ollama_commit.prompts.builder import MAX_DIFF_CHARS, MAX_DIFF_LINES, MAX_KEPT_CHARS
from ollama_commit.prompts.templates import DEFAULT_PROMPT, DETAILED_PROMPT, SIMPLE_PROMPT

if TYPE_CHECKING:
	from pathlib import Path


def make_diff(files: int, lines_per_file: int) -> str:
	"""Build a synthetic multi-file diff."""
	chunks = []
	for index in range(files):
		header = f"diff --git a/file{index}.py b/file{index}.py\n--- a/file{index}.py\n+++ b/file{index}.py"
		body = "\n".join(f"+line {n} of a reasonably long added line in file {index}" for n in range(lines_per_file))
		chunks.append(f"{header}\n{body}")
	return "\n".join(chunks)


@pytest.mark.unit
class TestTemplates:
	"""The built-in template store."""

	def test_all_templates_available(self) -> None:
		"""The four named templates exist."""
		assert set(PROMPT_TEMPLATES) == {"default", "conventional", "simple", "detailed"}

	def test_unknown_template(self) -> None:
		"""Unknown names raise KeyError listing the choices."""
		with pytest.raises(KeyError, match="conventional"):
			get_template("haiku")


@pytest.mark.unit
class TestSystemPrompt:
	"""System prompt selection."""

	def test_template_beats_custom_file(self, tmp_path: Path) -> None:
		"""A non-default template is used even when a custom file exists."""
		prompt_file = tmp_path / "prompt.txt"
		prompt_file.write_text("custom", encoding="utf-8")
		assert get_system_prompt(prompt_file, "simple") == SIMPLE_PROMPT

	def test_custom_file_with_default_template(self, tmp_path: Path) -> None:
		"""With the default template a non-empty custom file wins."""
		prompt_file = tmp_path / "prompt.txt"
		prompt_file.write_text("Write haiku commits.", encoding="utf-8")
		assert get_system_prompt(prompt_file, "default") == "Write haiku commits."

	def test_empty_or_missing_file_uses_default(self, tmp_path: Path) -> None:
		"""Missing and blank files fall back to the default template."""
		blank = tmp_path / "blank.txt"
		blank.write_text("  \n", encoding="utf-8")
		assert get_system_prompt(blank) == DEFAULT_PROMPT
		assert get_system_prompt(tmp_path / "missing.txt") == DEFAULT_PROMPT
		assert get_system_prompt(None) == DEFAULT_PROMPT

	def test_create_prompt_file(self, tmp_path: Path) -> None:
		"""A template is written once; overwriting needs the flag."""
		prompt_file = tmp_path / "nested" / "prompt.txt"

		assert create_prompt_file(prompt_file, "detailed") is True
		assert prompt_file.read_text(encoding="utf-8") == DETAILED_PROMPT
		assert create_prompt_file(prompt_file, "simple") is False
		assert create_prompt_file(prompt_file, "simple", overwrite=True) is True
		assert prompt_file.read_text(encoding="utf-8") == SIMPLE_PROMPT


@pytest.mark.unit
class TestTruncation:
	"""Diff truncation."""

	def test_short_diff_untouched(self) -> None:
		"""Diffs within budget pass through, minus carriage returns."""
		assert truncate_diff("+a\r\n-b") == "+a\n-b"

	def test_long_diff_truncated_with_marker(self) -> None:
		"""Long diffs keep the first lines and say what was omitted."""
		diff = make_diff(files=3, lines_per_file=80)
		total_lines = len(diff.split("\n"))

		result = truncate_diff(diff)

		kept = result.split("\n\n[... diff truncated")[0]
		assert kept.split("\n") == diff.split("\n")[:MAX_DIFF_LINES]
		assert (
			f"[... diff truncated - showing first {MAX_DIFF_LINES} lines of {total_lines} total lines, "
			f"{total_lines - MAX_DIFF_LINES} lines omitted ...]"
		) in result
		assert result.endswith("[Total files changed: 3]")

	def test_few_very_long_lines_are_capped_by_characters(self) -> None:
		"""A diff of a couple of huge lines is cut by characters, not reported as zero lines omitted."""
		diff = "diff --git a/min.js b/min.js\n+" + "x" * 20_000

		result = truncate_diff(diff)

		kept, marker = result.split("\n\n[... diff truncated", 1)
		assert kept == diff[:MAX_KEPT_CHARS]
		assert f"showing first {MAX_KEPT_CHARS} of {len(diff)} characters (2 total lines)" in marker
		assert "lines omitted" not in result
		assert len(result) < len(diff)
		assert result.endswith("[Total files changed: 1]")

	def test_long_diff_with_nothing_to_omit_has_no_marker(self) -> None:
		"""Over the character budget but within both caps, the diff passes through unmarked."""
		diff = "\n".join(f"+{'y' * 99}" for _ in range(50))
		assert len(diff) > MAX_DIFF_CHARS

		assert truncate_diff(diff) == diff


@pytest.mark.unit
class TestBuildPrompt:
	"""Prompt assembly."""

	def test_sections_in_order(self) -> None:
		"""System prompt, context, file summary, diff, then the instruction."""
		context = [ContextData("terminal", "Shell Context:\nUser: dev"), ContextData("docs", "   ")]
		prompt = build_commit_prompt("📁 1 files changed:", "+x", "SYSTEM", context)

		positions = [prompt.index(marker) for marker in ("SYSTEM", "ADDITIONAL CONTEXT:", "CONTEXT:\n📁", "GIT DIFF:")]
		assert positions == sorted(positions)
		assert "[terminal]\nShell Context:" in prompt
		assert "[docs]" not in prompt
		assert prompt.endswith("following the format specified above.")

	def test_no_context_section_without_context(self) -> None:
		"""Empty context adds nothing."""
		assert "ADDITIONAL CONTEXT" not in build_commit_prompt("files", "+x", "SYSTEM", [])
