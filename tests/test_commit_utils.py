"""Tests for commit message post-processing and the commit UI."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from rich.console import Console

from ollama_commit.commit.interactive import CommitAction, CommitUI
from ollama_commit.commit.utils import build_commit_command, clean_commit_message, escape_double_quotes, remove_emojis
from ollama_commit.git.utils import ChangeStats

if TYPE_CHECKING:
	from pytest_mock import MockerFixture


@pytest.mark.unit
@pytest.mark.commit
class TestCleanCommitMessage:
	"""Cleaning raw model output."""

	def test_removes_think_blocks(self) -> None:
		"""Reasoning blocks are dropped, whatever their case."""
		raw = "<think>\nplan the message\n</think>\nfeat: add login\n<THINK>more</THINK>"
		assert clean_commit_message(raw) == "feat: add login"

	def test_removes_code_fences(self) -> None:
		"""Markdown fences around the message are dropped."""
		raw = "```text\nfix: handle empty config\n\n- guard against None\n```"
		assert clean_commit_message(raw) == "fix: handle empty config\n\n- guard against None"

	def test_collapses_blank_lines_and_trailing_space(self) -> None:
		"""Runs of blank lines shrink to one and lines lose trailing spaces."""
		raw = "docs: update readme   \n\n\n\n- mention install  \n"
		assert clean_commit_message(raw) == "docs: update readme\n\n- mention install"

	def test_emojis_kept_when_enabled(self) -> None:
		"""With emojis enabled the text is untouched apart from whitespace."""
		assert clean_commit_message("🐛 fix: crash on start", use_emojis=True) == "🐛 fix: crash on start"

	def test_emojis_removed_by_default(self) -> None:
		"""Emojis, joiners and variation selectors disappear."""
		assert clean_commit_message("\U0001f468\u200d\U0001f4bb refactor: split module \u2714\ufe0f") == "refactor: split module"

	def test_remove_emojis_strips_lines(self) -> None:
		"""Leading whitespace left by a removed emoji is trimmed."""
		assert remove_emojis("\U0001f680 feat: launch\n\U0001f4e6 bump deps") == "feat: launch\nbump deps"

	def test_remove_emojis_keeps_indentation(self) -> None:
		"""Indented continuation lines keep their leading spaces."""
		assert remove_emojis("- item\n  continued detail") == "- item\n  continued detail"
		assert clean_commit_message("✨ feat: add\n\n  - \U0001f41b nested fix") == "feat: add\n\n  - nested fix"


@pytest.mark.unit
@pytest.mark.commit
class TestCommitCommandString:
	"""Building the command shown to the user."""

	@pytest.mark.parametrize(
		("message", "expected"),
		[
			('say "hi"', 'say \\"hi\\"'),
			("cost $5", "cost \\$5"),
			("use `make`", "use \\`make\\`"),
			("path\\to", "path\\\\to"),
		],
	)
	def test_escape_double_quotes(self, message: str, expected: str) -> None:
		"""Characters special inside double quotes are escaped."""
		assert escape_double_quotes(message) == expected

	def test_build_commit_command(self) -> None:
		"""Multi-line messages stay inside one quoted argument."""
		assert build_commit_command("feat: a\n\n- b") == 'git commit -m "feat: a\n\n- b"'


@pytest.mark.unit
@pytest.mark.interactive
class TestCommitUI:
	"""The terminal UI."""

	@pytest.fixture
	def ui(self) -> CommitUI:
		"""A UI recording output instead of writing to the terminal."""
		return CommitUI(console=Console(record=True, width=120, force_terminal=False))

	@pytest.mark.parametrize("action", list(CommitAction))
	def test_get_user_action(self, ui: CommitUI, mocker: MockerFixture, action: CommitAction) -> None:
		"""The chosen value is returned as is."""
		select = mocker.patch("questionary.select")
		select.return_value.ask.return_value = action

		assert ui.get_user_action() is action
		choices = select.call_args.kwargs["choices"]
		assert [choice.value for choice in choices] == list(CommitAction)

	def test_dismissed_prompt_cancels(self, ui: CommitUI, mocker: MockerFixture) -> None:
		"""Ctrl-C in questionary returns None, which means cancel."""
		mocker.patch("questionary.select").return_value.ask.return_value = None
		assert ui.get_user_action() is CommitAction.CANCEL

	@pytest.mark.parametrize(
		("auto_commit", "label"),
		[
			(True, "Use this message, commit and push"),
			(False, "Use this message (show the git commit command)"),
		],
	)
	def test_accept_label_follows_auto_commit(
		self, ui: CommitUI, mocker: MockerFixture, auto_commit: bool, label: str
	) -> None:
		"""Accepting only promises a commit when auto-commit is on."""
		select = mocker.patch("questionary.select")
		select.return_value.ask.return_value = CommitAction.ACCEPT

		ui.get_user_action(auto_commit=auto_commit)

		assert select.call_args.kwargs["choices"][0].title == label

	def test_display_message_is_not_markup(self, ui: CommitUI) -> None:
		"""Square brackets in a message are shown literally."""
		ui.display_message("fix: handle [bold] tags", "llama3")
		output = ui.console.export_text()
		assert "fix: handle [bold] tags" in output
		assert "llama3" in output

	def test_commit_command_printed_verbatim(self, ui: CommitUI) -> None:
		"""The command is printed without markup interpretation."""
		ui.show_commit_command('git commit -m "feat: [wip] thing"')
		assert 'git commit -m "feat: [wip] thing"' in ui.console.export_text()

	def test_quiet_hides_progress(self) -> None:
		"""Quiet mode suppresses stats, retries and notices but not errors."""
		ui = CommitUI(console=Console(record=True, width=120), quiet=True)
		ui.show_stats(ChangeStats(files=2, insertions=3, deletions=1), staged=True)
		ui.show_retry(1, TimeoutError("slow"), 1000)
		ui.show_message("No changes found")
		ui.show_error("boom")

		output = ui.console.export_text()
		assert "Changes" not in output
		assert "Retrying" not in output
		assert "No changes" not in output
		assert "boom" in output

	def test_stats_and_retry(self, ui: CommitUI) -> None:
		"""Stats and retries are reported in plain words."""
		ui.show_stats(ChangeStats(files=2, insertions=3, deletions=1), staged=False)
		ui.show_retry(2, TimeoutError("slow"), 2000)

		output = ui.console.export_text()
		assert "Changes (unstaged): 2 files, +3 -1" in output
		assert "Attempt 2 failed: slow. Retrying in 2s..." in output
