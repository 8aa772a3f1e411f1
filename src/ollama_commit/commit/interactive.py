"""Interactive commit interface for ollama-git-commit."""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING

import questionary
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.text import Text

if TYPE_CHECKING:
	from ollama_commit.git.utils import ChangeStats

logger = logging.getLogger(__name__)


class CommitAction(Enum):
	"""What the user chose to do with a generated message."""

	ACCEPT = "accept"
	COPY = "copy"
	REGENERATE = "regenerate"
	CANCEL = "cancel"


class CommitUI:
	"""Terminal presentation for the commit command."""

	def __init__(self, console: Console | None = None, *, quiet: bool = False) -> None:
		"""
		Initialize the commit UI.

		Args:
		    console: Console to print to (a new one by default)
		    quiet: Suppress informational output

		"""
		self.console = console or Console()
		self.quiet = quiet

	def show_stats(self, stats: ChangeStats, *, staged: bool) -> None:
		"""Print change statistics."""
		if self.quiet:
			return
		source = "staged" if staged else "unstaged"
		self.console.print(
			f"[bold blue]Changes ({source}):[/] {stats.files} files, "
			f"[green]+{stats.insertions}[/] [red]-{stats.deletions}[/]"
		)

	def display_message(self, message: str, model: str) -> None:
		"""Show the generated commit message in a panel."""
		self.console.print()
		title = f"[bold]Generated commit message[/] [dim]({escape(model)})[/]"
		self.console.print(Panel(Text(message), title=title, border_style="green"))

	def get_user_action(self, *, auto_commit: bool = False) -> CommitAction:
		"""
		Ask what to do with the message.

		Args:
		    auto_commit: Accepting commits and pushes rather than printing the git command

		Returns:
		    CommitAction chosen by the user; dismissing the prompt counts as cancel

		"""
		accept_label = (
			"Use this message, commit and push" if auto_commit else "Use this message (show the git commit command)"
		)
		choices = [
			questionary.Choice(accept_label, value=CommitAction.ACCEPT),
			questionary.Choice("Copy to clipboard", value=CommitAction.COPY),
			questionary.Choice("Regenerate", value=CommitAction.REGENERATE),
			questionary.Choice("Cancel", value=CommitAction.CANCEL),
		]
		action = questionary.select("What would you like to do?", choices=choices).ask()
		if action is None:
			return CommitAction.CANCEL
		return action

	def show_commit_command(self, command: str) -> None:
		"""Print the ready-to-run commit command."""
		self.console.print("\n[bold blue]Run this command to commit:[/]")
		self.console.print(command, markup=False, highlight=False)

	def show_retry(self, attempt: int, error: BaseException, delay_ms: int) -> None:
		"""Report a failed attempt before waiting."""
		if self.quiet:
			return
		self.console.print(
			f"[yellow]Attempt {attempt} failed:[/] {escape(str(error))}. Retrying in {delay_ms / 1000:g}s..."
		)

	def show_regenerating(self) -> None:
		"""Show that the message is being regenerated."""
		self.console.print("\n[yellow]Regenerating commit message...[/]")

	def show_message(self, message: str) -> None:
		"""Print an informational message."""
		if not self.quiet:
			self.console.print(escape(message))

	def show_success(self, message: str) -> None:
		"""Show a success message."""
		self.console.print(f"[bold green]✓[/] {escape(message)}")

	def show_warning(self, message: str) -> None:
		"""Show a warning message."""
		self.console.print(f"[bold yellow]![/] {escape(message)}")

	def show_error(self, message: str) -> None:
		"""Show an error message."""
		self.console.print(f"[bold red]✗[/] {escape(message)}")

	def show_cancelled(self) -> None:
		"""Show that the run was cancelled."""
		self.console.print("[yellow]Commit cancelled.[/]")
