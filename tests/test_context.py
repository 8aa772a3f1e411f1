"""Tests for context providers."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from ollama_commit.config import ContextProviderSpec
from ollama_commit.context import ContextService
from ollama_commit.errors import CommandExecutionError
from tests.base import FileSystemTestBase

if TYPE_CHECKING:
	from pytest_mock import MockerFixture

DIFF = "diff --git a/a.py b/a.py\n--- a/a.py\n+++ b/a.py\n+new\n-old\n+more\n"


def specs(*names: str) -> list[ContextProviderSpec]:
	"""Build enabled provider specs."""
	return [ContextProviderSpec(provider=name) for name in names]


@pytest.mark.unit
class TestContextService(FileSystemTestBase):
	"""Gathering context for the prompt."""

	def test_diff_context(self) -> None:
		"""Diff statistics are counted from the diff text."""
		[data] = ContextService(self.temp_dir).gather(specs("diff"), DIFF)

		assert data.provider == "diff"
		assert "Files changed: 1" in data.content
		assert "Lines added: 2" in data.content
		assert "Lines removed: 1" in data.content

	def test_diff_context_skipped_without_diff(self) -> None:
		"""An empty diff yields nothing."""
		assert ContextService(self.temp_dir).gather(specs("diff"), "") == []

	def test_disabled_providers_skipped(self) -> None:
		"""Disabled providers are not run."""
		disabled = [ContextProviderSpec(provider="diff", enabled=False)]
		assert ContextService(self.temp_dir).gather(disabled, DIFF) == []

	def test_docs_context(self) -> None:
		"""Only documentation files that exist are listed."""
		(self.temp_dir / "README.md").write_text("# demo", encoding="utf-8")
		(self.temp_dir / "LICENSE").write_text("MIT", encoding="utf-8")

		[data] = ContextService(self.temp_dir).gather(specs("docs"))

		assert data.content == "Documentation Files:\nDoc: README.md\nDoc: LICENSE"
		assert data.metadata == {"doc_count": 2}

	def test_folder_context(self) -> None:
		"""Hidden and build directories are left out of the structure."""
		for folder in ("src/pkg", "tests", ".git/objects", "node_modules/x"):
			(self.temp_dir / folder).mkdir(parents=True)

		[data] = ContextService(self.temp_dir).gather(specs("folder"))

		lines = data.content.splitlines()[1:]
		assert sorted(lines) == sorted(["src", "src/pkg", "tests"])

	def test_codebase_context(self) -> None:
		"""Source files and their lines are counted."""
		(self.temp_dir / "a.py").write_text("x = 1\ny = 2\n", encoding="utf-8")
		(self.temp_dir / "b.ts").write_text("let z = 3;\n", encoding="utf-8")
		(self.temp_dir / "notes.md").write_text("ignored\n", encoding="utf-8")

		[data] = ContextService(self.temp_dir).gather(specs("codebase"))

		assert data.metadata == {"files": 2, "lines": 3}

	def test_terminal_context(self, monkeypatch: pytest.MonkeyPatch) -> None:
		"""The shell and working directory are reported."""
		monkeypatch.setenv("SHELL", "/bin/zsh")

		[data] = ContextService(self.temp_dir).gather(specs("terminal"))

		assert "Shell: /bin/zsh" in data.content
		assert str(self.temp_dir.resolve()) in data.content

	def test_failing_provider_is_skipped(self, mocker: MockerFixture, caplog: pytest.LogCaptureFixture) -> None:
		"""A provider that fails is logged and the others still run."""
		mocker.patch(
			"ollama_commit.context.run_git_command",
			side_effect=CommandExecutionError("Git command failed: git diff --name-only HEAD"),
		)

		results = ContextService(self.temp_dir).gather(specs("code", "diff"), DIFF)

		assert [data.provider for data in results] == ["diff"]
		assert "Failed to gather context from code" in caplog.text

	def test_code_context(self, mocker: MockerFixture) -> None:
		"""Changed files come from git."""
		mocker.patch("ollama_commit.context.run_git_command", return_value="a.py\nb.py")

		[data] = ContextService(self.temp_dir).gather(specs("code"))

		assert data.content == "Changed Files:\nFile: a.py\nFile: b.py"
		assert data.metadata == {"file_count": 2}
